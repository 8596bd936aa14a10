"""
Tests for the catalog aggregator.

Loading a CKAN search envelope or a POD catalog keeps every dataset
that loads cleanly, records problems of the others tagged with their
identifier, and checks identifier uniqueness across the result.
"""

import copy

import pytest

from odcat.catalog import (
    catalog_from_pod,
    catalog_from_search_result,
    catalog_to_csv,
    catalog_to_pod_json,
    load_catalog_from_pod,
    load_catalog_from_search_result,
)
from odcat.diagnostics import DiagnosticKind, LoadError, StructuralError
from odcat.examples import (
    build_example_catalog,
    example_ckan_package,
    example_pod_dataset,
    example_search_result,
)
from odcat.model import ListingMode
from odcat.pod import catalog_to_pod


def three_packages():
    return [
        example_ckan_package("USDA-ERS-00001", "Prices One"),
        example_ckan_package("USDA-ERS-00002", "Prices Two"),
        example_ckan_package("USDA-ERS-00003", "Prices Three"),
    ]


class TestSearchResult:
    def test_all_good_packages_kept_in_order(self):
        catalog = load_catalog_from_search_result(example_search_result(three_packages()))
        assert [ds.unique_identifier for ds in catalog.datasets] == [
            "USDA-ERS-00001", "USDA-ERS-00002", "USDA-ERS-00003",
        ]

    def test_bad_package_does_not_discard_the_rest(self):
        packages = three_packages()
        packages[1]["tags"] = []
        result = catalog_from_search_result(example_search_result(packages))
        assert [ds.unique_identifier for ds in result.value.datasets] == ["USDA-ERS-00001", "USDA-ERS-00003"]
        assert len(result.diagnostics) == 1
        assert result.diagnostics[0].source == "USDA-ERS-00002"
        assert "tag" in result.diagnostics[0].message

    def test_package_without_extras_is_skipped(self):
        packages = three_packages()
        del packages[0]["extras"]
        result = catalog_from_search_result(example_search_result(packages))
        assert result.value.size() == 2
        assert result.diagnostics[0].kind == DiagnosticKind.STRUCTURAL
        assert result.diagnostics[0].source == "package #0"

    def test_load_raises_with_partial_catalog(self):
        packages = three_packages()
        packages[2]["extras"].append({"key": "bureau_code", "value": "99:1"})
        with pytest.raises(LoadError) as excinfo:
            load_catalog_from_search_result(example_search_result(packages))
        assert excinfo.value.partial.size() == 2
        assert any("99:1" in m for m in excinfo.value.messages())

    def test_duplicate_identifiers_reported(self):
        packages = [example_ckan_package("SAME", "A"), example_ckan_package("SAME", "B")]
        result = catalog_from_search_result(example_search_result(packages))
        assert result.value.size() == 2
        assert [d.kind for d in result.diagnostics] == [DiagnosticKind.DUPLICATE_IDENTIFIER]

    def test_missing_packages_is_structural(self):
        with pytest.raises(StructuralError):
            catalog_from_search_result({"result": {}})
        with pytest.raises(StructuralError):
            catalog_from_search_result({"success": False})


class TestPodCatalog:
    def test_round_trip_through_pod(self):
        catalog = build_example_catalog(2)
        pod = catalog_to_pod(catalog, ListingMode.FULL_INVENTORY)
        restored = load_catalog_from_pod(pod)
        assert restored.size() == catalog.size()
        assert restored.type == "dcat:Catalog"
        assert [ds.unique_identifier for ds in restored.datasets] == [
            ds.unique_identifier for ds in catalog.datasets
        ]

    def test_bad_dataset_segregated(self):
        good = example_pod_dataset("A")
        bad = copy.deepcopy(good)
        bad["identifier"] = "B"
        bad["contactPoint"] = {"fn": "Jane Doe", "hasEmail": "not-an-email"}
        result = catalog_from_pod({"dataset": [good, bad]})
        assert [ds.unique_identifier for ds in result.value.datasets] == ["A"]
        assert all(d.source == "B" for d in result.diagnostics)

    def test_missing_dataset_array_is_structural(self):
        with pytest.raises(StructuralError):
            catalog_from_pod({"@type": "dcat:Catalog"})


class TestExports:
    def test_pod_json_is_filtered(self):
        text = catalog_to_pod_json(build_example_catalog(2), ListingMode.PUBLIC_LISTING)
        assert "USDA-ERS-99999" not in text
        assert "USDA-ERS-00002" in text

    def test_csv_never_contains_non_public(self):
        text = catalog_to_csv(build_example_catalog(2), ListingMode.FULL_INVENTORY)
        lines = text.splitlines()
        assert len(lines) == 3
        assert "USDA-ERS-99999" not in text
