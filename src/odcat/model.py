"""
Core Catalog Entity Objects

Defines the canonical entity tree shared by every mapper:
    - Contact (dataset point of contact)
    - Publisher (organization, optionally with one sub-organization)
    - Distribution (one way to get at the data)
    - Dataset (one POD 1.1 dataset entry)
    - Catalog (root container)

ARCHITECTURAL RULE:
    These objects:
        - Know nothing about CKAN keys or POD field names
        - Always construct successfully, even when invalid
        - Never validate themselves (see odcat.validator)

Coercing setters (set_*, add_*) accept any JSON shape a feed may send
and return the diagnostics they produced instead of raising. Plain
attribute assignment is always available for already-typed values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from odcat.coercion import (
    BUREAU_CODE_RE,
    PROGRAM_CODE_RE,
    DateValue,
    add_codes,
    as_bool,
    as_int,
    as_string_list,
    normalize_email,
    normalize_periodicity,
    parse_date,
    parse_url,
)
from odcat.diagnostics import Diagnostic

CONTACT_TYPE = "vcard:Contact"
ORGANIZATION_TYPE = "org:Organization"
DISTRIBUTION_TYPE = "dcat:Distribution"
DATASET_TYPE = "dcat:Dataset"
CATALOG_TYPE = "dcat:Catalog"


class AccessLevel(Enum):
    """POD 1.1 accessLevel vocabulary."""
    PUBLIC = "public"
    RESTRICTED = "restricted public"
    NON_PUBLIC = "non-public"

    @classmethod
    def values(cls) -> List[str]:
        return [member.value for member in cls]


class ListingMode(Enum):
    """Which datasets a catalog export includes."""
    FULL_INVENTORY = "full"      # every dataset (enterprise data inventory)
    PUBLIC_LISTING = "public"    # public and restricted public only


def _collect(*diagnostics: Optional[Diagnostic]) -> List[Diagnostic]:
    return [d for d in diagnostics if d is not None]


@dataclass
class Contact:
    """
    Dataset point of contact (POD contactPoint).

    Properties:
        type: JSON-LD type, normally "vcard:Contact"
        full_name: Contact name (required)
        email_address: Email without a mailto: prefix (required)
    """

    type: Optional[str] = None
    full_name: Optional[str] = None
    email_address: Optional[str] = None

    def set_email(self, value: Optional[str]) -> None:
        """Store an email address, dropping any mailto: prefix."""
        self.email_address = normalize_email(value)

    def is_empty(self) -> bool:
        return self.full_name is None and self.email_address is None


@dataclass
class Publisher:
    """
    Publishing organization (POD publisher).

    Properties:
        name: Organization name (required)
        type: JSON-LD type, normally "org:Organization"
        sub_organization: Optional nested Publisher, one level deep
    """

    name: Optional[str] = None
    type: Optional[str] = None
    sub_organization: Optional[Publisher] = None

    def is_empty(self) -> bool:
        return self.name is None and self.sub_organization is None


@dataclass
class Distribution:
    """
    One access point for a dataset's data (POD distribution).

    A distribution normally carries either an access_url (API or landing
    endpoint) or a download_url (direct file), not both.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    access_url: Optional[str] = None
    download_url: Optional[str] = None
    media_type: Optional[str] = None
    format: Optional[str] = None
    byte_size: Optional[int] = None
    issued: Optional[DateValue] = None
    modified: Optional[DateValue] = None
    license: Optional[str] = None
    rights: Optional[str] = None
    described_by: Optional[str] = None
    described_by_type: Optional[str] = None
    conforms_to: Optional[str] = None
    type: Optional[str] = None

    @property
    def usable_url(self) -> Optional[str]:
        return self.download_url or self.access_url

    def set_access_url(self, value: Any) -> List[Diagnostic]:
        url, error = parse_url(value, "accessURL")
        if url is not None:
            self.access_url = url
        return _collect(error)

    def set_download_url(self, value: Any) -> List[Diagnostic]:
        url, error = parse_url(value, "downloadURL")
        if url is not None:
            self.download_url = url
        return _collect(error)

    def set_byte_size(self, value: Any) -> List[Diagnostic]:
        size, error = as_int(value, "byteSize")
        if size is not None:
            self.byte_size = size
        return _collect(error)

    def set_issued(self, value: Any) -> List[Diagnostic]:
        parsed, error = parse_date(value, "issued")
        if parsed is not None:
            self.issued = parsed
        return _collect(error)

    def set_modified(self, value: Any) -> List[Diagnostic]:
        parsed, error = parse_date(value, "modified")
        if parsed is not None:
            self.modified = parsed
        return _collect(error)


@dataclass
class Dataset:
    """
    A single catalog entry described by POD 1.1.

    Properties (DCAT core):
        title, description, keywords, modified, issued, publisher,
        contact_point, distributions, landing_page, languages, themes,
        spatial, temporal, accrual_periodicity

    Properties (POD federal extension):
        unique_identifier, access_level, bureau_codes, program_codes,
        conforms_to, data_quality, described_by, described_by_type,
        is_part_of, license, primary_it_investment_uii, references,
        rights, system_of_records

    Properties (agency bookkeeping):
        bureau_name: Agency label used by the tabular export

    INVARIANTS (checked by odcat.validator, never enforced here):
        - access_level is one of AccessLevel
        - bureau_codes match NNN:NN, program_codes match NNN:NNN
        - public or restricted datasets have at least one distribution,
          each with a usable URL
    """

    title: Optional[str] = None
    description: Optional[str] = None
    access_level: Optional[str] = None
    accrual_periodicity: Optional[str] = None
    bureau_codes: List[str] = field(default_factory=list)
    program_codes: List[str] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)
    languages: List[str] = field(default_factory=list)
    themes: List[str] = field(default_factory=list)
    references: List[str] = field(default_factory=list)
    unique_identifier: Optional[str] = None
    contact_point: Contact = field(default_factory=Contact)
    publisher: Publisher = field(default_factory=Publisher)
    distributions: List[Distribution] = field(default_factory=list)
    issued: Optional[DateValue] = None
    modified: Optional[DateValue] = None
    landing_page: Optional[str] = None
    data_quality: Optional[bool] = None
    license: Optional[str] = None
    conforms_to: Optional[str] = None
    is_part_of: Optional[str] = None
    described_by: Optional[str] = None
    described_by_type: Optional[str] = None
    system_of_records: Optional[str] = None
    rights: Optional[str] = None
    primary_it_investment_uii: Optional[str] = None
    spatial: Optional[str] = None
    temporal: Optional[str] = None
    bureau_name: Optional[str] = None

    @property
    def label(self) -> str:
        """Identifier if known, otherwise title, for tagging diagnostics."""
        return self.unique_identifier or self.title or "<untitled dataset>"

    def package_name(self) -> Optional[str]:
        """CKAN URL-safe name derived from the title."""
        if self.title is None:
            return None
        return self.title.replace("-", "_").replace(" ", "-").lower()

    def is_listed(self, mode: ListingMode) -> bool:
        if mode == ListingMode.FULL_INVENTORY:
            return True
        return self.access_level in (AccessLevel.PUBLIC.value, AccessLevel.RESTRICTED.value)

    # -- list-or-CSV fields: new values accumulate ---------------------------

    def add_keywords(self, value: Any) -> List[Diagnostic]:
        items, diagnostics = as_string_list(value, "keyword")
        self.keywords.extend(items)
        return diagnostics

    def add_themes(self, value: Any) -> List[Diagnostic]:
        items, diagnostics = as_string_list(value, "theme")
        self.themes.extend(items)
        return diagnostics

    def add_references(self, value: Any) -> List[Diagnostic]:
        items, diagnostics = as_string_list(value, "references")
        self.references.extend(items)
        return diagnostics

    def add_languages(self, value: Any) -> List[Diagnostic]:
        items, diagnostics = as_string_list(value, "language")
        self.languages.extend(items)
        return diagnostics

    def add_bureau_codes(self, value: Any) -> List[Diagnostic]:
        return add_codes(self.bureau_codes, value, BUREAU_CODE_RE, "Bureau Code", "bureauCode")

    def add_program_codes(self, value: Any) -> List[Diagnostic]:
        return add_codes(self.program_codes, value, PROGRAM_CODE_RE, "Program Code", "programCode")

    # -- typed scalar fields: malformed input leaves the field unset ---------

    def set_data_quality(self, value: Any) -> List[Diagnostic]:
        flag, error = as_bool(value, "dataQuality")
        if flag is not None:
            self.data_quality = flag
        return _collect(error)

    def set_landing_page(self, value: Any) -> List[Diagnostic]:
        url, error = parse_url(value, "landingPage")
        if url is not None:
            self.landing_page = url
        return _collect(error)

    def set_issued(self, value: Any) -> List[Diagnostic]:
        parsed, error = parse_date(value, "issued")
        if parsed is not None:
            self.issued = parsed
        return _collect(error)

    def set_modified(self, value: Any) -> List[Diagnostic]:
        parsed, error = parse_date(value, "modified")
        if parsed is not None:
            self.modified = parsed
        return _collect(error)

    def set_accrual_periodicity(self, value: Optional[str]) -> None:
        self.accrual_periodicity = normalize_periodicity(value)


@dataclass
class Catalog:
    """
    Root container: an ordered list of datasets plus DCAT catalog fields.

    The envelope fields (context, id, type, conforms_to, described_by)
    are read from POD input when present; POD output always writes the
    fixed POD 1.1 envelope.

    INVARIANTS (checked by odcat.validator):
        - unique_identifier values are distinct across datasets
    """

    title: Optional[str] = None
    description: Optional[str] = None
    issued: Optional[DateValue] = None
    language: Optional[str] = None
    license: Optional[str] = None
    rights: Optional[str] = None
    spatial: Optional[str] = None
    homepage: Optional[str] = None
    context: Optional[str] = None
    id: Optional[str] = None
    type: Optional[str] = None
    conforms_to: Optional[str] = None
    described_by: Optional[str] = None
    datasets: List[Dataset] = field(default_factory=list)

    def size(self) -> int:
        return len(self.datasets)

    def get_dataset(self, identifier: str) -> Optional[Dataset]:
        """
        Retrieve the first dataset with the given unique identifier.

        Returns:
            Dataset or None if not found
        """
        for dataset in self.datasets:
            if dataset.unique_identifier == identifier:
                return dataset
        return None

    def merge(self, other: Catalog) -> None:
        """
        Append another catalog's datasets verbatim.

        No de-duplication and no validation: duplicate identifiers only
        surface when the catalog is validated.
        """
        if other is None:
            raise ValueError("other catalog cannot be None")
        self.datasets.extend(other.datasets)

    def listed(self, mode: ListingMode) -> List[Dataset]:
        return [ds for ds in self.datasets if ds.is_listed(mode)]
