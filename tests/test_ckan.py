"""
Tests for the CKAN mapper.

CKAN packages carry POD fields as string extras under canonical and
historical key spellings. Import must route every alias to the right
field, tolerate unknown keys and missing resources, and fail fast only
when the extras array itself is absent.
"""

import copy
import logging

import pytest

from odcat.ckan import (
    EXTRA_ALIASES,
    EXTRA_SETTERS,
    apply_extra,
    dataset_from_ckan,
    dataset_to_ckan,
    distribution_from_ckan,
    load_dataset_from_ckan,
)
from odcat.config import Settings
from odcat.diagnostics import DiagnosticKind, LoadError, StructuralError
from odcat.examples import build_example_dataset, example_ckan_package
from odcat.model import CONTACT_TYPE, ORGANIZATION_TYPE, Dataset


def with_extras(package, *pairs):
    package = copy.deepcopy(package)
    package["extras"].extend({"key": k, "value": v} for k, v in pairs)
    return package


class TestAliasTable:
    def test_every_alias_has_a_setter(self):
        assert set(EXTRA_ALIASES.values()) <= set(EXTRA_SETTERS)

    def test_legacy_spellings_present(self):
        assert EXTRA_ALIASES["program_cdoe"] == EXTRA_ALIASES["program_code"]
        assert EXTRA_ALIASES["dataQuality"] == EXTRA_ALIASES["data_quality"]
        assert EXTRA_ALIASES["data_dict"] == EXTRA_ALIASES["data_dictionary"]


class TestImport:
    """CKAN package -> Dataset."""

    def test_example_package_loads_clean(self):
        ds = load_dataset_from_ckan(example_ckan_package())
        assert ds.title == "Fruit and Vegetable Prices"
        assert ds.unique_identifier == "USDA-ERS-00071"
        assert ds.access_level == "public"
        assert ds.accrual_periodicity == "R/P1Y"
        assert ds.keywords == ["prices", "fruit"]
        assert ds.themes == ["Agriculture", "Economy"]
        assert ds.data_quality is True

    def test_extras_override_top_level_fields(self):
        package = with_extras(example_ckan_package(), ("title", "Extra Title"))
        result = dataset_from_ckan(package)
        assert result.value.title == "Extra Title"

    def test_contact_and_publisher_routed_into_nested_objects(self):
        ds = dataset_from_ckan(example_ckan_package()).value
        assert ds.contact_point.full_name == "Jane Doe"
        assert ds.contact_point.email_address == "jane.doe@usda.gov"
        assert ds.contact_point.type == CONTACT_TYPE
        assert ds.publisher.name == "Economic Research Service"
        assert ds.publisher.type == ORGANIZATION_TYPE
        assert ds.publisher.sub_organization.name == "U.S. Department of Agriculture"
        assert ds.publisher.sub_organization.type == ORGANIZATION_TYPE

    def test_nested_type_not_defaulted_without_sub_fields(self):
        package = {"title": "T", "extras": []}
        ds = dataset_from_ckan(package).value
        assert ds.contact_point.type is None
        assert ds.publisher.type is None

    def test_program_code_and_misspelling_share_one_list(self):
        package = example_ckan_package()
        package["extras"] = [e for e in package["extras"] if e["key"] != "program_code"]
        package = with_extras(
            package,
            ("program_code", "005:041"),
            ("program_cdoe", "005:041, 005:059"),
        )
        result = dataset_from_ckan(package)
        assert result.value.program_codes == ["005:041", "005:059"]
        assert result.ok

    def test_bad_bureau_code_recorded_and_excluded(self):
        package = with_extras(example_ckan_package(), ("bureau_code", "99:1"))
        result = dataset_from_ckan(package)
        assert "99:1" not in result.value.bureau_codes
        assert result.value.bureau_codes == ["005:13"]
        parse_errors = [d for d in result.diagnostics if d.kind == DiagnosticKind.PARSE]
        assert len(parse_errors) == 1
        assert "99:1" in parse_errors[0].message

    def test_unknown_keys_ignored(self, caplog):
        package = with_extras(example_ckan_package(), ("harvest_source_id", "abc"))
        with caplog.at_level(logging.DEBUG, logger="odcat.ckan"):
            result = dataset_from_ckan(package)
        assert result.ok
        assert "harvest_source_id" in caplog.text

    def test_null_extra_value_skipped(self):
        ds = Dataset()
        assert apply_extra(ds, "temporal", None) == []
        assert ds.temporal is None

    def test_malformed_fields_do_not_stop_later_fields(self):
        package = with_extras(
            example_ckan_package(),
            ("homepage_url", "not a url"),
            ("release_date", "sometime"),
            ("temporal", "2000-01-01/2010-12-31"),
        )
        result = dataset_from_ckan(package)
        assert len(result.diagnostics) == 2
        # the earlier valid landing page is kept, the bad one skipped
        assert result.value.landing_page.startswith("http://www.ers.usda.gov")
        assert result.value.issued is None
        assert result.value.temporal == "2000-01-01/2010-12-31"

    def test_missing_extras_is_structural(self):
        package = example_ckan_package()
        del package["extras"]
        with pytest.raises(StructuralError):
            dataset_from_ckan(package)

    def test_missing_resources_tolerated_and_logged(self, caplog):
        package = example_ckan_package()
        del package["resources"]
        with caplog.at_level(logging.WARNING, logger="odcat.ckan"):
            result = dataset_from_ckan(package)
        assert result.ok
        assert result.value.distributions == []
        assert "no resources" in caplog.text

    def test_missing_resources_fail_validation_when_public(self):
        package = example_ckan_package()
        del package["resources"]
        with pytest.raises(LoadError) as excinfo:
            load_dataset_from_ckan(package)
        assert any("distribution is required" in m for m in excinfo.value.messages())
        assert excinfo.value.identifier == "USDA-ERS-00071"

    def test_non_public_without_resources_loads(self):
        package = example_ckan_package()
        del package["resources"]
        for extra in package["extras"]:
            if extra["key"] == "public_access_level":
                extra["value"] = "non-public"
        ds = load_dataset_from_ckan(package)
        assert ds.access_level == "non-public"

    def test_invalid_email_is_stored_and_flagged(self):
        package = example_ckan_package()
        for extra in package["extras"]:
            if extra["key"] == "contact_email":
                extra["value"] = "not-an-email"
        with pytest.raises(LoadError) as excinfo:
            load_dataset_from_ckan(package)
        assert excinfo.value.partial.contact_point.email_address == "not-an-email"
        assert any("Email" in m for m in excinfo.value.messages())

    def test_tags_fall_back_to_name(self):
        package = example_ckan_package()
        package["tags"] = [{"name": "only-name"}]
        assert dataset_from_ckan(package).value.keywords == ["only-name"]

    def test_numeric_tag_name_coerced_to_string(self):
        package = example_ckan_package()
        package["tags"] = [{"name": "2015", "display_name": 2015}, " fruit "]
        result = dataset_from_ckan(package)
        assert result.value.keywords == ["2015", "fruit"]
        assert result.ok

    def test_malformed_tags_recorded(self):
        package = example_ckan_package()
        package["tags"] = [{"display_name": ["prices"]}, 7, {"name": "fruit"}]
        result = dataset_from_ckan(package)
        assert result.value.keywords == ["fruit"]
        assert [d.field for d in result.diagnostics] == ["keyword", "keyword"]

    @pytest.mark.parametrize("key", [["unique_id"], {"k": "v"}, 3])
    def test_non_string_extra_key_recorded(self, key):
        package = example_ckan_package()
        package["extras"].append({"key": key, "value": "x"})
        result = dataset_from_ckan(package)
        assert len(result.diagnostics) == 1
        assert result.diagnostics[0].field == "extras"
        assert result.value.unique_identifier == "USDA-ERS-00071"


class TestResources:
    def test_file_resource_uses_download_url(self):
        result = distribution_from_ckan(example_ckan_package()["resources"][0])
        d = result.value
        assert d.download_url == "http://www.ers.usda.gov/datafiles/fruit.xlsx"
        assert d.access_url is None
        assert d.media_type == "application/vnd.ms-excel"
        assert d.format == "Excel"

    def test_api_resource_uses_access_url(self):
        d = distribution_from_ckan(example_ckan_package()["resources"][1]).value
        assert d.access_url == "http://api.ers.usda.gov/prices"
        assert d.download_url is None

    def test_bad_url_recorded(self):
        result = distribution_from_ckan({"name": "x", "url": "nowhere"})
        assert result.value.download_url is None
        assert len(result.diagnostics) == 1

    def test_non_string_resource_fields_recorded(self):
        resource = {"name": ["x"], "format": 42, "url": "http://example.gov/data.csv"}
        result = distribution_from_ckan(resource)
        assert result.value.title is None
        assert result.value.format == "42"
        assert result.value.download_url == "http://example.gov/data.csv"
        assert [d.field for d in result.diagnostics] == ["name"]


class TestExport:
    """Dataset -> CKAN package."""

    def test_extras_have_no_null_values(self):
        ds = build_example_dataset()
        package = dataset_to_ckan(ds)
        assert all(extra["value"] is not None for extra in package["extras"])
        keys = {extra["key"] for extra in package["extras"]}
        assert "temporal" not in keys
        assert "unique_id" in keys

    def test_tags_and_resources(self):
        package = dataset_to_ckan(build_example_dataset())
        assert package["tags"] == [
            {"name": "prices", "display_name": "prices"},
            {"name": "fruit", "display_name": "fruit"},
        ]
        assert package["resources"][0]["url"] == "http://www.ers.usda.gov/datafiles/fruit.xlsx"
        assert package["resources"][0]["resource_type"] == "file"

    def test_settings_applied(self):
        package = dataset_to_ckan(build_example_dataset(), Settings(ckan_owner_org="usda", ckan_private=False))
        assert package["owner_org"] == "usda"
        assert package["private"] is False

    def test_export_then_import_keeps_fields(self):
        original = load_dataset_from_ckan(example_ckan_package())
        restored = load_dataset_from_ckan(dataset_to_ckan(original))
        assert restored.unique_identifier == original.unique_identifier
        assert restored.bureau_codes == original.bureau_codes
        assert restored.program_codes == original.program_codes
        assert restored.themes == original.themes
        assert restored.contact_point == original.contact_point
        assert restored.publisher == original.publisher
        assert restored.data_quality is True
        assert [d.usable_url for d in restored.distributions] == [d.usable_url for d in original.distributions]
