"""
Tests for exporter settings.
"""

import pytest
from pydantic import ValidationError

from odcat.config import POD_CONTEXT, ConfigError, Settings, settings_from_dict, settings_from_yaml
from odcat.model import ListingMode


def test_defaults():
    settings = Settings()
    assert settings.ckan_private is True
    assert settings.ckan_owner_org is None
    assert settings.listing_mode == ListingMode.PUBLIC_LISTING
    assert settings.pod_context == POD_CONTEXT


def test_none_gives_defaults():
    assert settings_from_dict(None) == Settings()


def test_from_yaml():
    settings = settings_from_yaml(
        "ckan_owner_org: usda\n"
        "ckan_private: false\n"
        "listing_mode: full\n"
        "catalog_id: https://www.usda.gov/data.json\n"
    )
    assert settings.ckan_owner_org == "usda"
    assert settings.ckan_private is False
    assert settings.listing_mode == ListingMode.FULL_INVENTORY
    assert settings.catalog_id == "https://www.usda.gov/data.json"


def test_empty_yaml_gives_defaults():
    assert settings_from_yaml("") == Settings()


def test_unknown_key_rejected():
    with pytest.raises(ConfigError, match="owner"):
        settings_from_dict({"owner": "usda"})


def test_bad_listing_mode_rejected():
    with pytest.raises(ConfigError, match="listing_mode"):
        settings_from_dict({"listing_mode": "everything"})


def test_non_bool_private_rejected():
    with pytest.raises(ConfigError, match="ckan_private"):
        settings_from_dict({"ckan_private": "yes"})


def test_non_mapping_rejected():
    with pytest.raises(ConfigError):
        settings_from_yaml("- a\n- b\n")


def test_malformed_yaml_rejected():
    with pytest.raises(ConfigError, match="Invalid settings YAML"):
        settings_from_yaml("ckan_owner_org: [usda")


@pytest.mark.parametrize("values", [
    {"ckan_owner_org": 123},
    {"pod_context": ["https://example.org/context.jsonld"]},
    {"catalog_id": {"a": 1}},
    {"pod_described_by": None},
])
def test_wrongly_typed_values_rejected(values):
    field = next(iter(values))
    with pytest.raises(ConfigError, match=field):
        settings_from_dict(values)


def test_assignment_is_validated():
    settings = Settings()
    with pytest.raises(ValidationError):
        settings.ckan_owner_org = 123
