"""
POD Mapper: Project Open Data v1.1 JSON <-> canonical entities.

Import reads official POD field names one for one. Nested publisher,
contact point and distributions are loaded recursively; a problem in
any of them is recorded on the dataset's result rather than aborting
the dataset.

Export never pads with nulls: unset values and empty collections are
left out of the output entirely.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from odcat.coercion import MAILTO, JsonKind, as_string, classify, format_date
from odcat.config import Settings
from odcat.diagnostics import LoadError, MappingResult, parse_error
from odcat.model import (
    CATALOG_TYPE,
    DATASET_TYPE,
    DISTRIBUTION_TYPE,
    Catalog,
    Contact,
    Dataset,
    Distribution,
    ListingMode,
    Publisher,
)
from odcat.validator import validate_dataset

# POD name -> Dataset attribute, for plain string fields
DATASET_STRING_FIELDS = {
    "title": "title",
    "description": "description",
    "identifier": "unique_identifier",
    "accessLevel": "access_level",
    "conformsTo": "conforms_to",
    "rights": "rights",
    "describedBy": "described_by",
    "describedByType": "described_by_type",
    "isPartOf": "is_part_of",
    "license": "license",
    "spatial": "spatial",
    "temporal": "temporal",
    "systemOfRecords": "system_of_records",
    "primaryITInvestmentUII": "primary_it_investment_uii",
}

CONTACT_STRING_FIELDS = {"@type": "type", "fn": "full_name"}

PUBLISHER_STRING_FIELDS = {"@type": "type", "name": "name"}

DISTRIBUTION_STRING_FIELDS = {
    "title": "title",
    "description": "description",
    "mediaType": "media_type",
    "format": "format",
    "license": "license",
    "rights": "rights",
    "conformsTo": "conforms_to",
    "describedBy": "described_by",
    "describedByType": "described_by_type",
    "@type": "type",
}


def _compact(d: Dict[str, Any]) -> Dict[str, Any]:
    """Drop None values and empty lists/dicts."""
    return {k: v for k, v in d.items() if v is not None and v != [] and v != {}}


def _read_strings(result: MappingResult[Any], obj: Dict[str, Any], mapping: Dict[str, str]) -> None:
    for pod_name, attr in mapping.items():
        text, error = as_string(obj.get(pod_name), pod_name)
        result.add(error)
        if text is not None:
            setattr(result.value, attr, text)


def contact_from_pod(obj: Any) -> MappingResult[Contact]:
    contact = Contact()
    result: MappingResult[Contact] = MappingResult(contact)
    if classify(obj) != JsonKind.OBJECT:
        result.add(parse_error("contactPoint must be an object", "contactPoint"))
        return result
    _read_strings(result, obj, CONTACT_STRING_FIELDS)
    email, error = as_string(obj.get("hasEmail"), "hasEmail")
    result.add(error)
    contact.set_email(email)
    return result


def contact_to_pod(contact: Contact) -> Dict[str, Any]:
    email = contact.email_address
    return _compact({
        "@type": contact.type,
        "fn": contact.full_name,
        "hasEmail": f"{MAILTO}{email}" if email else None,
    })


def publisher_from_pod(obj: Any, _depth: int = 0) -> MappingResult[Publisher]:
    """Load a publisher and at most one level of subOrganizationOf."""
    publisher = Publisher()
    result: MappingResult[Publisher] = MappingResult(publisher)
    if classify(obj) != JsonKind.OBJECT:
        result.add(parse_error("publisher must be an object", "publisher"))
        return result
    _read_strings(result, obj, PUBLISHER_STRING_FIELDS)
    parent = obj.get("subOrganizationOf")
    if parent is not None:
        if _depth >= 1:
            result.add(parse_error("publisher nesting deeper than one subOrganizationOf is ignored", "publisher"))
        else:
            publisher.sub_organization = result.merge(publisher_from_pod(parent, _depth + 1))
    return result


def publisher_to_pod(publisher: Publisher) -> Dict[str, Any]:
    sub = publisher.sub_organization
    return _compact({
        "@type": publisher.type,
        "name": publisher.name,
        "subOrganizationOf": publisher_to_pod(sub) if sub is not None else None,
    })


def distribution_from_pod(obj: Any) -> MappingResult[Distribution]:
    distribution = Distribution()
    result: MappingResult[Distribution] = MappingResult(distribution)
    if classify(obj) != JsonKind.OBJECT:
        result.add(parse_error("distribution entry must be an object", "distribution"))
        return result
    _read_strings(result, obj, DISTRIBUTION_STRING_FIELDS)
    result.extend(distribution.set_access_url(obj.get("accessURL")))
    result.extend(distribution.set_download_url(obj.get("downloadURL")))
    result.extend(distribution.set_byte_size(obj.get("byteSize")))
    result.extend(distribution.set_issued(obj.get("issued")))
    result.extend(distribution.set_modified(obj.get("modified")))
    return result


def distribution_to_pod(distribution: Distribution) -> Dict[str, Any]:
    return _compact({
        "@type": distribution.type or DISTRIBUTION_TYPE,
        "title": distribution.title,
        "description": distribution.description,
        "accessURL": distribution.access_url,
        "downloadURL": distribution.download_url,
        "mediaType": distribution.media_type,
        "format": distribution.format,
        "byteSize": distribution.byte_size,
        "issued": format_date(distribution.issued),
        "modified": format_date(distribution.modified),
        "license": distribution.license,
        "rights": distribution.rights,
        "conformsTo": distribution.conforms_to,
        "describedBy": distribution.described_by,
        "describedByType": distribution.described_by_type,
    })


def dataset_from_pod(obj: Dict[str, Any]) -> MappingResult[Dataset]:
    """
    Map a POD dataset object to a Dataset without validating it.

    List fields accept a native list or a comma-separated string.
    A missing publisher or contactPoint leaves the defaults in place for
    the validator to report.
    """
    dataset = Dataset()
    result: MappingResult[Dataset] = MappingResult(dataset)
    if classify(obj) != JsonKind.OBJECT:
        result.add(parse_error("dataset must be an object", "dataset"))
        return result

    _read_strings(result, obj, DATASET_STRING_FIELDS)
    periodicity, error = as_string(obj.get("accrualPeriodicity"), "accrualPeriodicity")
    result.add(error)
    dataset.set_accrual_periodicity(periodicity)

    result.extend(dataset.set_data_quality(obj.get("dataQuality")))
    result.extend(dataset.set_issued(obj.get("issued")))
    result.extend(dataset.set_modified(obj.get("modified")))
    result.extend(dataset.set_landing_page(obj.get("landingPage")))

    result.extend(dataset.add_bureau_codes(obj.get("bureauCode")))
    result.extend(dataset.add_program_codes(obj.get("programCode")))
    result.extend(dataset.add_keywords(obj.get("keyword")))
    result.extend(dataset.add_languages(obj.get("language")))
    result.extend(dataset.add_themes(obj.get("theme")))
    result.extend(dataset.add_references(obj.get("references")))

    distributions = obj.get("distribution")
    if distributions is not None:
        if classify(distributions) == JsonKind.LIST:
            for entry in distributions:
                dataset.distributions.append(result.merge(distribution_from_pod(entry)))
        else:
            result.add(parse_error("distribution must be a list", "distribution"))

    if obj.get("publisher") is not None:
        dataset.publisher = result.merge(publisher_from_pod(obj.get("publisher")))
    if obj.get("contactPoint") is not None:
        dataset.contact_point = result.merge(contact_from_pod(obj.get("contactPoint")))
    return result


def load_dataset_from_pod(obj: Dict[str, Any]) -> Dataset:
    """
    Map and validate a POD dataset.

    Raises:
        LoadError: any mapping diagnostic or failed validation rule
    """
    result = dataset_from_pod(obj)
    result.extend(validate_dataset(result.value).diagnostics)
    if not result.ok:
        dataset = result.value
        raise LoadError(result.diagnostics, dataset, dataset.title, dataset.unique_identifier)
    return result.value


def dataset_to_pod(dataset: Dataset) -> Dict[str, Any]:
    """Serialize a Dataset to a POD 1.1 dataset object."""
    return _compact({
        "@type": DATASET_TYPE,
        "title": dataset.title,
        "description": dataset.description,
        "keyword": list(dataset.keywords),
        "modified": format_date(dataset.modified),
        "publisher": None if dataset.publisher.is_empty() else publisher_to_pod(dataset.publisher),
        "contactPoint": None if dataset.contact_point.is_empty() else contact_to_pod(dataset.contact_point),
        "identifier": dataset.unique_identifier,
        "accessLevel": dataset.access_level,
        "conformsTo": dataset.conforms_to,
        "rights": dataset.rights,
        "describedBy": dataset.described_by,
        "describedByType": dataset.described_by_type,
        "isPartOf": dataset.is_part_of,
        "license": dataset.license,
        "spatial": dataset.spatial,
        "temporal": dataset.temporal or None,
        "issued": format_date(dataset.issued),
        "accrualPeriodicity": dataset.accrual_periodicity,
        "systemOfRecords": dataset.system_of_records,
        "primaryITInvestmentUII": dataset.primary_it_investment_uii,
        "dataQuality": dataset.data_quality,
        "landingPage": dataset.landing_page,
        "distribution": [distribution_to_pod(d) for d in dataset.distributions],
        "programCode": list(dataset.program_codes),
        "bureauCode": list(dataset.bureau_codes),
        "theme": list(dataset.themes),
        "references": list(dataset.references),
        "language": list(dataset.languages),
    })


def catalog_to_pod(
    catalog: Catalog,
    mode: Optional[ListingMode] = None,
    settings: Optional[Settings] = None,
) -> Dict[str, Any]:
    """
    Wrap the catalog's datasets in the POD 1.1 catalog envelope.

    Args:
        catalog: Catalog to export
        mode: FULL_INVENTORY for every dataset, PUBLIC_LISTING for public
            and restricted public only (defaults to settings.listing_mode)
        settings: Envelope URLs and defaults
    """
    settings = settings or Settings()
    mode = mode or settings.listing_mode
    datasets: List[Dict[str, Any]] = [dataset_to_pod(ds) for ds in catalog.listed(mode)]
    envelope: Dict[str, Any] = {
        "@context": settings.pod_context,
        "@id": catalog.id or settings.catalog_id,
        "@type": CATALOG_TYPE,
        "conformsTo": settings.pod_conforms_to,
        "describedBy": settings.pod_described_by,
    }
    if envelope["@id"] is None:
        del envelope["@id"]
    envelope["dataset"] = datasets
    return envelope


__all__ = [
    "contact_from_pod",
    "contact_to_pod",
    "publisher_from_pod",
    "publisher_to_pod",
    "distribution_from_pod",
    "distribution_to_pod",
    "dataset_from_pod",
    "dataset_to_pod",
    "load_dataset_from_pod",
    "catalog_to_pod",
]
