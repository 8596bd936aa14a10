"""
Catalog Aggregator: builds catalogs from CKAN search results or POD
catalogs, and exports them with a visibility filter.

Loading has partial-failure semantics: each package or dataset entry is
mapped and validated on its own. Entries that come through clean are
kept in input order; entries with any diagnostic are left out and their
diagnostics are recorded on the catalog result, tagged with the entry's
identifier (or title). One bad package never discards the rest.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, Optional

from odcat.backends.tabular import generate_csv
from odcat.ckan import dataset_from_ckan
from odcat.coercion import JsonKind, classify
from odcat.config import Settings
from odcat.diagnostics import (
    LoadError,
    MappingResult,
    StructuralError,
)
from odcat.model import Catalog, Dataset, ListingMode
from odcat.pod import catalog_to_pod, dataset_from_pod
from odcat.validator import validate_dataset, validate_unique_identifiers

logger = logging.getLogger(__name__)

CATALOG_STRING_FIELDS = {
    "@context": "context",
    "@id": "id",
    "@type": "type",
    "conformsTo": "conforms_to",
    "describedBy": "described_by",
    "title": "title",
    "description": "description",
    "language": "language",
    "license": "license",
    "rights": "rights",
    "spatial": "spatial",
    "homepage": "homepage",
}


def _collect_datasets(
    result: MappingResult[Catalog],
    entries: Any,
    mapper: Callable[[Any], MappingResult[Dataset]],
    what: str,
) -> None:
    catalog = result.value
    for position, entry in enumerate(entries):
        try:
            mapped = mapper(entry)
        except StructuralError as e:
            result.extend([e.diagnostic], source=f"{what} #{position}")
            logger.warning("Skipping %s #%d: %s", what, position, e)
            continue
        dataset = mapped.value
        mapped.extend(validate_dataset(dataset).diagnostics)
        if mapped.ok:
            catalog.datasets.append(dataset)
        else:
            result.extend(mapped.diagnostics, source=dataset.label)
            logger.warning("Skipping %s %r: %d problem(s)", what, dataset.label, len(mapped.diagnostics))
    result.extend(validate_unique_identifiers(catalog).diagnostics)


def catalog_from_search_result(envelope: Dict[str, Any]) -> MappingResult[Catalog]:
    """
    Build a catalog from a CKAN search envelope ({"result": {"packages": [...]}}).

    Raises:
        StructuralError: the envelope has no result.packages array
    """
    if classify(envelope) != JsonKind.OBJECT or classify(envelope.get("result")) != JsonKind.OBJECT:
        raise StructuralError("CKAN search result must contain a result object", "result")
    packages = envelope["result"].get("packages")
    if classify(packages) != JsonKind.LIST:
        raise StructuralError("CKAN search result must contain a packages array", "packages")

    result: MappingResult[Catalog] = MappingResult(Catalog())
    _collect_datasets(result, packages, dataset_from_ckan, "package")
    return result


def catalog_from_pod(obj: Dict[str, Any]) -> MappingResult[Catalog]:
    """
    Build a catalog from a POD 1.1 catalog object.

    Raises:
        StructuralError: the object has no dataset array
    """
    if classify(obj) != JsonKind.OBJECT:
        raise StructuralError("POD catalog must be a JSON object", "catalog")
    entries = obj.get("dataset")
    if classify(entries) != JsonKind.LIST:
        raise StructuralError("POD catalog must contain a dataset array", "dataset")

    catalog = Catalog()
    for pod_name, attr in CATALOG_STRING_FIELDS.items():
        value = obj.get(pod_name)
        if classify(value) == JsonKind.STRING:
            setattr(catalog, attr, value)

    result: MappingResult[Catalog] = MappingResult(catalog)
    _collect_datasets(result, entries, dataset_from_pod, "dataset")
    return result


def _raise_if_failed(result: MappingResult[Catalog]) -> Catalog:
    if not result.ok:
        raise LoadError(result.diagnostics, result.value)
    return result.value


def load_catalog_from_search_result(envelope: Dict[str, Any]) -> Catalog:
    """
    Like catalog_from_search_result, but raises on any diagnostic.

    Raises:
        StructuralError: envelope shape is wrong
        LoadError: with .partial set to the catalog of clean datasets
    """
    return _raise_if_failed(catalog_from_search_result(envelope))


def load_catalog_from_pod(obj: Dict[str, Any]) -> Catalog:
    """Like catalog_from_pod, but raises LoadError on any diagnostic."""
    return _raise_if_failed(catalog_from_pod(obj))


def catalog_to_pod_json(
    catalog: Catalog,
    mode: Optional[ListingMode] = None,
    settings: Optional[Settings] = None,
    indent: Optional[int] = 2,
) -> str:
    return json.dumps(catalog_to_pod(catalog, mode, settings), indent=indent)


def catalog_to_csv(
    catalog: Catalog,
    mode: Optional[ListingMode] = None,
    settings: Optional[Settings] = None,
) -> str:
    """
    Tab-delimited export of the listed datasets.

    Non-public datasets never produce rows, whatever the mode.
    """
    settings = settings or Settings()
    mode = mode or settings.listing_mode
    return generate_csv(catalog.listed(mode))


__all__ = [
    "catalog_from_search_result",
    "catalog_from_pod",
    "load_catalog_from_search_result",
    "load_catalog_from_pod",
    "catalog_to_pod_json",
    "catalog_to_csv",
]
