"""
Export settings.

Holds the values the exporters would otherwise hard-code: the CKAN
organization new packages are created under, whether they are created
private, the default listing mode and the POD catalog envelope.
Reading a settings file is left to the caller; this module only turns
an already-read mapping or YAML text into Settings.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from odcat.diagnostics import OdcatError
from odcat.model import ListingMode

POD_SCHEMA = "https://project-open-data.cio.gov/v1.1/schema"
POD_CATALOG_SCHEMA = "https://project-open-data.cio.gov/v1.1/schema/catalog.json"
POD_CONTEXT = "https://project-open-data.cio.gov/v1.1/schema/catalog.jsonld"


class ConfigError(OdcatError):
    """Raised when settings input is malformed."""
    pass


class Settings(BaseModel):
    """Exporter defaults."""

    ckan_owner_org: Optional[str] = Field(default=None, description="CKAN organization id for exported packages")
    ckan_private: bool = Field(default=True, strict=True, description="Create exported packages as private")
    listing_mode: ListingMode = Field(
        default=ListingMode.PUBLIC_LISTING,
        description="Default visibility filter for catalog exports",
    )
    pod_conforms_to: str = Field(default=POD_SCHEMA, description="conformsTo of exported catalogs")
    pod_described_by: str = Field(default=POD_CATALOG_SCHEMA, description="describedBy of exported catalogs")
    pod_context: str = Field(default=POD_CONTEXT, description="@context of exported catalogs")
    catalog_id: Optional[str] = Field(default=None, description="Optional @id for exported catalogs")

    model_config = {"extra": "forbid", "validate_assignment": True}


def settings_from_dict(d: Optional[Dict[str, Any]]) -> Settings:
    """
    Build Settings from a plain mapping.

    Raises:
        ConfigError: not a mapping, unknown keys, or a value of the wrong type
    """
    if d is None:
        return Settings()
    try:
        return Settings.model_validate(d)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e


def settings_from_yaml(text: str) -> Settings:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid settings YAML: {e}") from e
    return settings_from_dict(data)


__all__ = ["Settings", "ConfigError", "settings_from_dict", "settings_from_yaml"]
