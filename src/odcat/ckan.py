"""
CKAN Mapper: CKAN package JSON <-> canonical Dataset.

CKAN keeps only title, notes, tags and resources as native package
fields; everything POD needs beyond that travels in the `extras` array
of {key, value} pairs, every value a string. Different portals (and
different eras of the same portal) spell the keys differently, so the
import side resolves keys through EXTRA_ALIASES before dispatching to
a coercing setter in EXTRA_SETTERS. Adding an alias is a table entry.

Canonical field names are the POD 1.1 names; nested contact and
publisher fields use dotted paths.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from odcat.coercion import JsonKind, as_string, classify, format_date
from odcat.config import Settings
from odcat.diagnostics import (
    Diagnostic,
    LoadError,
    MappingResult,
    StructuralError,
    parse_error,
)
from odcat.model import (
    CONTACT_TYPE,
    ORGANIZATION_TYPE,
    Dataset,
    Distribution,
    Publisher,
)
from odcat.validator import validate_dataset

logger = logging.getLogger(__name__)

Setter = Callable[[Dataset, Any], List[Diagnostic]]

# CKAN extra key -> canonical field. Legacy spellings kept on purpose:
# `program_cdoe` and `data_dict` exist in deployed portals.
EXTRA_ALIASES: Dict[str, str] = {
    "public_access_level": "accessLevel",
    "accrual_periodicity": "accrualPeriodicity",
    "bureau_code": "bureauCode",
    "conforms_to": "conformsTo",
    "data_quality": "dataQuality",
    "dataQuality": "dataQuality",
    "data_dictionary": "describedBy",
    "data_dict": "describedBy",
    "data_dictionary_type": "describedByType",
    "description": "description",
    "is_parent": "isPartOf",
    "release_date": "issued",
    "issued": "issued",
    "homepage_url": "landingPage",
    "language": "language",
    "license_new": "license",
    "modified": "modified",
    "primary_it_investment_uii": "primaryITInvestmentUII",
    "program_code": "programCode",
    "program_cdoe": "programCode",
    "related_documents": "references",
    "access_level_comment": "rights",
    "spatial": "spatial",
    "system_of_records": "systemOfRecords",
    "temporal": "temporal",
    "category": "theme",
    "title": "title",
    "unique_id": "identifier",
    "contact_email": "contactPoint.hasEmail",
    "contact_name": "contactPoint.fn",
    "publisher": "publisher.name",
    "publisher_1": "publisher.subOrganizationOf.name",
}

# canonical field -> key written on export. `issued` is written under its
# own name because some portals reserve `release_date`; `spatial` is not
# written because CKAN reserves it for GeoJSON.
EXPORT_KEYS: Dict[str, str] = {
    "accessLevel": "public_access_level",
    "accrualPeriodicity": "accrual_periodicity",
    "contactPoint.hasEmail": "contact_email",
    "contactPoint.fn": "contact_name",
    "conformsTo": "conforms_to",
    "dataQuality": "data_quality",
    "describedBy": "data_dictionary",
    "describedByType": "data_dictionary_type",
    "isPartOf": "is_parent",
    "landingPage": "homepage_url",
    "license": "license_new",
    "modified": "modified",
    "primaryITInvestmentUII": "primary_it_investment_uii",
    "publisher.name": "publisher",
    "publisher.subOrganizationOf.name": "publisher_1",
    "issued": "issued",
    "rights": "access_level_comment",
    "systemOfRecords": "system_of_records",
    "temporal": "temporal",
    "identifier": "unique_id",
    "bureauCode": "bureau_code",
    "language": "language",
    "programCode": "program_code",
    "references": "related_documents",
    "theme": "category",
}

API_RESOURCE_TYPES = {"api", "service"}

# CKAN resource key -> Distribution attribute, for plain string fields
RESOURCE_STRING_FIELDS = {
    "name": "title",
    "description": "description",
    "conformsTo": "conforms_to",
    "describedBy": "described_by",
    "describedByType": "described_by_type",
}


def _scalar(attr: str, field_name: str) -> Setter:
    def setter(dataset: Dataset, value: Any) -> List[Diagnostic]:
        text, error = as_string(value, field_name)
        if text is not None:
            setattr(dataset, attr, text)
        return [error] if error else []
    return setter


def _set_access_level(dataset: Dataset, value: Any) -> List[Diagnostic]:
    text, error = as_string(value, "accessLevel")
    if text is not None:
        dataset.access_level = text
    return [error] if error else []


def _set_periodicity(dataset: Dataset, value: Any) -> List[Diagnostic]:
    text, error = as_string(value, "accrualPeriodicity")
    if text is not None:
        dataset.set_accrual_periodicity(text)
    return [error] if error else []


def _set_contact_email(dataset: Dataset, value: Any) -> List[Diagnostic]:
    text, error = as_string(value, "contactPoint")
    if text is not None:
        dataset.contact_point.set_email(text)
        dataset.contact_point.type = dataset.contact_point.type or CONTACT_TYPE
    return [error] if error else []


def _set_contact_name(dataset: Dataset, value: Any) -> List[Diagnostic]:
    text, error = as_string(value, "contactPoint")
    if text is not None:
        dataset.contact_point.full_name = text
        dataset.contact_point.type = dataset.contact_point.type or CONTACT_TYPE
    return [error] if error else []


def _set_publisher_name(dataset: Dataset, value: Any) -> List[Diagnostic]:
    text, error = as_string(value, "publisher")
    if text is not None:
        dataset.publisher.name = text
        dataset.publisher.type = dataset.publisher.type or ORGANIZATION_TYPE
    return [error] if error else []


def _set_sub_organization(dataset: Dataset, value: Any) -> List[Diagnostic]:
    text, error = as_string(value, "publisher")
    if text is not None:
        dataset.publisher.sub_organization = Publisher(name=text, type=ORGANIZATION_TYPE)
        dataset.publisher.type = dataset.publisher.type or ORGANIZATION_TYPE
    return [error] if error else []


EXTRA_SETTERS: Dict[str, Setter] = {
    "accessLevel": _set_access_level,
    "accrualPeriodicity": _set_periodicity,
    "bureauCode": Dataset.add_bureau_codes,
    "conformsTo": _scalar("conforms_to", "conformsTo"),
    "dataQuality": Dataset.set_data_quality,
    "describedBy": _scalar("described_by", "describedBy"),
    "describedByType": _scalar("described_by_type", "describedByType"),
    "description": _scalar("description", "description"),
    "isPartOf": _scalar("is_part_of", "isPartOf"),
    "issued": Dataset.set_issued,
    "landingPage": Dataset.set_landing_page,
    "language": Dataset.add_languages,
    "license": _scalar("license", "license"),
    "modified": Dataset.set_modified,
    "primaryITInvestmentUII": _scalar("primary_it_investment_uii", "primaryITInvestmentUII"),
    "programCode": Dataset.add_program_codes,
    "references": Dataset.add_references,
    "rights": _scalar("rights", "rights"),
    "spatial": _scalar("spatial", "spatial"),
    "systemOfRecords": _scalar("system_of_records", "systemOfRecords"),
    "temporal": _scalar("temporal", "temporal"),
    "theme": Dataset.add_themes,
    "title": _scalar("title", "title"),
    "identifier": _scalar("unique_identifier", "identifier"),
    "contactPoint.hasEmail": _set_contact_email,
    "contactPoint.fn": _set_contact_name,
    "publisher.name": _set_publisher_name,
    "publisher.subOrganizationOf.name": _set_sub_organization,
}


def apply_extra(dataset: Dataset, key: str, value: Any) -> List[Diagnostic]:
    """
    Route one CKAN extra into the dataset.

    Unknown keys are ignored (logged at DEBUG). Null values are skipped.
    """
    canonical = EXTRA_ALIASES.get(key)
    if canonical is None:
        logger.debug("Ignoring unrecognized CKAN extra %r", key)
        return []
    if value is None:
        return []
    return EXTRA_SETTERS[canonical](dataset, value)


def _resource_string(result: MappingResult[Distribution], resource: Dict[str, Any], key: str) -> Optional[str]:
    text, error = as_string(resource.get(key), key)
    result.add(error)
    return text


def distribution_from_ckan(resource: Dict[str, Any]) -> MappingResult[Distribution]:
    """
    Map one CKAN resource to a Distribution.

    The resource's `url` becomes the access URL for API-style resources
    (resource_type "api" or format "API") and the download URL otherwise.
    """
    distribution = Distribution()
    result: MappingResult[Distribution] = MappingResult(distribution)
    if classify(resource) != JsonKind.OBJECT:
        result.add(parse_error(f"CKAN resource must be an object, got {classify(resource).value}", "distribution"))
        return result

    for key, attr in RESOURCE_STRING_FIELDS.items():
        setattr(distribution, attr, _resource_string(result, resource, key))

    fmt = _resource_string(result, resource, "format") or None
    if fmt and "/" in fmt:
        distribution.media_type = fmt
    else:
        distribution.format = fmt
    mimetype = _resource_string(result, resource, "mimetype")
    if mimetype and distribution.media_type is None:
        distribution.media_type = mimetype
    readable = _resource_string(result, resource, "formatReadable")
    if readable:
        distribution.format = readable

    resource_type = (_resource_string(result, resource, "resource_type") or "").lower()
    is_api = resource_type in API_RESOURCE_TYPES or (fmt or "").upper() == "API"
    if is_api:
        result.extend(distribution.set_access_url(resource.get("url")))
    else:
        result.extend(distribution.set_download_url(resource.get("url")))

    if resource.get("size") is not None:
        result.extend(distribution.set_byte_size(resource.get("size")))
    return result


def _load_resources(result: MappingResult[Dataset], resources: Any) -> None:
    dataset = result.value
    if resources is None:
        logger.warning(
            "Package %r has no resources; expected for private datasets, left to validation",
            dataset.title,
        )
        return
    if classify(resources) != JsonKind.LIST:
        result.add(parse_error("CKAN resources must be a list", "distribution"))
        return
    for resource in resources:
        dataset.distributions.append(result.merge(distribution_from_ckan(resource)))


def _load_extras(result: MappingResult[Dataset], extras: List[Any]) -> None:
    for extra in extras:
        if classify(extra) != JsonKind.OBJECT or "key" not in extra:
            result.add(parse_error(f"CKAN extra must be an object with a key: {extra!r}", "extras"))
            continue
        key = extra["key"]
        if classify(key) != JsonKind.STRING:
            result.add(parse_error(f"CKAN extra key must be a string: {key!r}", "extras"))
            continue
        result.extend(apply_extra(result.value, key, extra.get("value")))


def _load_tags(result: MappingResult[Dataset], tags: Any) -> None:
    if tags is None:
        return
    if classify(tags) != JsonKind.LIST:
        result.add(parse_error("CKAN tags must be a list", "keyword"))
        return
    for tag in tags:
        if classify(tag) == JsonKind.OBJECT:
            name, error = as_string(tag.get("display_name") or tag.get("name"), "keyword")
            result.add(error)
            if name:
                result.value.keywords.append(name)
        elif classify(tag) == JsonKind.STRING:
            if tag.strip():
                result.value.keywords.append(tag.strip())
        else:
            result.add(parse_error(f"CKAN tag must be an object or string: {tag!r}", "keyword"))


def dataset_from_ckan(package: Dict[str, Any]) -> MappingResult[Dataset]:
    """
    Map a CKAN package to a Dataset without validating it.

    Top-level title/notes/metadata_modified are read first so that
    extras carrying the same fields take precedence.

    Raises:
        StructuralError: package is not an object or has no extras array
    """
    if classify(package) != JsonKind.OBJECT:
        raise StructuralError("CKAN package must be a JSON object", "package")
    extras = package.get("extras")
    if extras is None:
        raise StructuralError("JSON is invalid. extras array is required.", "extras")
    if classify(extras) != JsonKind.LIST:
        raise StructuralError("JSON is invalid. extras must be an array.", "extras")

    dataset = Dataset()
    result: MappingResult[Dataset] = MappingResult(dataset)

    result.extend(EXTRA_SETTERS["title"](dataset, package.get("title")))
    result.extend(EXTRA_SETTERS["description"](dataset, package.get("notes")))
    result.extend(dataset.set_modified(package.get("metadata_modified")))

    _load_resources(result, package.get("resources"))
    _load_extras(result, extras)
    _load_tags(result, package.get("tags"))
    return result


def load_dataset_from_ckan(package: Dict[str, Any]) -> Dataset:
    """
    Map and validate a CKAN package.

    Raises:
        StructuralError: required structure absent
        LoadError: any mapping diagnostic or failed validation rule
    """
    result = dataset_from_ckan(package)
    result.extend(validate_dataset(result.value).diagnostics)
    if not result.ok:
        dataset = result.value
        raise LoadError(result.diagnostics, dataset, dataset.title, dataset.unique_identifier)
    return result.value


def _field_value(dataset: Dataset, canonical: str) -> Optional[str]:
    if canonical == "contactPoint.hasEmail":
        return dataset.contact_point.email_address
    if canonical == "contactPoint.fn":
        return dataset.contact_point.full_name
    if canonical == "publisher.name":
        return dataset.publisher.name
    if canonical == "publisher.subOrganizationOf.name":
        sub = dataset.publisher.sub_organization
        return sub.name if sub is not None else None
    if canonical == "dataQuality":
        return None if dataset.data_quality is None else str(dataset.data_quality).lower()
    if canonical in ("modified", "issued"):
        return format_date(getattr(dataset, canonical))

    list_fields = {
        "bureauCode": dataset.bureau_codes,
        "language": dataset.languages,
        "programCode": dataset.program_codes,
        "references": dataset.references,
        "theme": dataset.themes,
    }
    if canonical in list_fields:
        items = list_fields[canonical]
        return ",".join(items) if items else None

    scalar_fields = {
        "accessLevel": dataset.access_level,
        "accrualPeriodicity": dataset.accrual_periodicity,
        "conformsTo": dataset.conforms_to,
        "describedBy": dataset.described_by,
        "describedByType": dataset.described_by_type,
        "isPartOf": dataset.is_part_of,
        "landingPage": dataset.landing_page,
        "license": dataset.license,
        "primaryITInvestmentUII": dataset.primary_it_investment_uii,
        "rights": dataset.rights,
        "systemOfRecords": dataset.system_of_records,
        "temporal": dataset.temporal,
        "identifier": dataset.unique_identifier,
    }
    return scalar_fields[canonical]


def extras_to_ckan(dataset: Dataset) -> List[Dict[str, str]]:
    """Build the extras array; extras whose value would be null are dropped."""
    extras = []
    for canonical, key in EXPORT_KEYS.items():
        value = _field_value(dataset, canonical)
        if value is not None:
            extras.append({"key": key, "value": value})
    return extras


def distribution_to_ckan(distribution: Distribution) -> Dict[str, Any]:
    resource = {
        "name": distribution.title,
        "description": distribution.description,
        "format": distribution.media_type or distribution.format,
        "formatReadable": distribution.format,
        "url": distribution.usable_url,
        "resource_type": "file" if distribution.download_url else "api",
        "conformsTo": distribution.conforms_to,
        "describedBy": distribution.described_by,
        "describedByType": distribution.described_by_type,
        "size": distribution.byte_size,
    }
    return {k: v for k, v in resource.items() if v is not None}


def dataset_to_ckan(dataset: Dataset, settings: Optional[Settings] = None) -> Dict[str, Any]:
    """Inverse of dataset_from_ckan."""
    settings = settings or Settings()
    package: Dict[str, Any] = {
        "name": dataset.package_name(),
        "title": dataset.title,
        "notes": dataset.description,
        "private": settings.ckan_private,
    }
    if settings.ckan_owner_org is not None:
        package["owner_org"] = settings.ckan_owner_org
    package["extras"] = extras_to_ckan(dataset)
    package["tags"] = [{"name": k, "display_name": k} for k in dataset.keywords]
    package["resources"] = [distribution_to_ckan(d) for d in dataset.distributions]
    return package


__all__ = [
    "EXTRA_ALIASES",
    "EXTRA_SETTERS",
    "EXPORT_KEYS",
    "apply_extra",
    "distribution_from_ckan",
    "distribution_to_ckan",
    "dataset_from_ckan",
    "dataset_to_ckan",
    "extras_to_ckan",
    "load_dataset_from_ckan",
]
