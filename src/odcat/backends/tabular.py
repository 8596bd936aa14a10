"""
Tab-delimited tabular export for catalog datasets.

One header line, then one row per dataset whose access level is not
non-public. Multi-valued cells are joined (formats and URLs with ", ",
code and keyword lists with ";"). Tabs and line breaks inside values
are collapsed to single spaces so every dataset stays on one line.
"""

from __future__ import annotations

import csv
import re
from io import StringIO
from typing import Iterable, List, Optional

from odcat.coercion import format_date
from odcat.model import AccessLevel, Dataset

CSV_COLUMNS = [
    "Agency Name",
    "Title",
    "Description",
    "Format",
    "Access URL",
    "Frequency",
    "Bureau Code",
    "Contact Email",
    "Contact Name",
    "Landing Page",
    "Program Code",
    "Publisher",
    "Public Access Level",
    "Access Level Comment",
    "Tags",
    "Last Update",
    "Release Date",
    "Unique Identifier",
    "Data Dictionary",
    "License",
    "Spatial",
    "Temporal",
    "System Of Records",
    "Data Quality",
    "Language",
    "Program Code",
    "Theme",
    "Reference",
]

_WHITESPACE_RE = re.compile(r"[\t\r\n]+")


def _cell(value: Optional[object]) -> str:
    """Render one cell; None becomes empty."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    return _WHITESPACE_RE.sub(" ", str(value)).strip()


def _joined(items: Iterable[Optional[str]], sep: str = ";") -> str:
    return sep.join(_cell(item) for item in items if item)


def dataset_to_row(dataset: Dataset) -> List[str]:
    """Flatten one dataset into the CSV_COLUMNS order."""
    distributions = dataset.distributions
    agency = dataset.bureau_name or dataset.publisher.name
    return [
        _cell(agency),
        _cell(dataset.title),
        _cell(dataset.description),
        _joined((d.media_type or d.format for d in distributions), ", "),
        _joined((d.usable_url for d in distributions), ", "),
        _cell(dataset.accrual_periodicity),
        _joined(dataset.bureau_codes),
        _cell(dataset.contact_point.email_address),
        _cell(dataset.contact_point.full_name),
        _cell(dataset.landing_page),
        _joined(dataset.program_codes),
        _cell(dataset.publisher.name),
        _cell(dataset.access_level),
        _cell(dataset.rights),
        _joined(dataset.keywords),
        _cell(format_date(dataset.modified)),
        _cell(format_date(dataset.issued)),
        _cell(dataset.unique_identifier),
        _cell(dataset.described_by),
        _cell(dataset.license),
        _cell(dataset.spatial),
        _cell(dataset.temporal),
        _cell(dataset.system_of_records),
        _cell(dataset.data_quality),
        _joined(dataset.languages),
        _joined(dataset.program_codes),
        _joined(dataset.themes),
        _joined(dataset.references),
    ]


def generate_csv(datasets: Iterable[Dataset]) -> str:
    """
    Render datasets as tab-delimited text with a header line.

    Args:
        datasets: Datasets in output order

    Returns:
        The export as a string (newline-terminated rows)
    """
    buffer = StringIO()
    # _cell strips tabs and newlines
    writer = csv.writer(buffer, delimiter="\t", quoting=csv.QUOTE_NONE, quotechar=None, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for dataset in datasets:
        if dataset.access_level == AccessLevel.NON_PUBLIC.value:
            continue
        writer.writerow(dataset_to_row(dataset))
    return buffer.getvalue()
