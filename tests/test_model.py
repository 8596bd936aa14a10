"""
Tests for the catalog entity model.

These tests verify:
    - Entities construct with empty collections and never fail
    - Coercing setters accumulate values and return diagnostics
    - Catalog retrieval, merge and listing helpers
"""

from datetime import date

import pytest

from odcat.diagnostics import DiagnosticKind
from odcat.model import (
    AccessLevel,
    Catalog,
    Contact,
    Dataset,
    Distribution,
    ListingMode,
    Publisher,
)
from odcat.examples import build_example_catalog, build_example_dataset


class TestConstruction:
    """Fresh entities own independent, empty collections."""

    def test_dataset_defaults(self):
        ds = Dataset()
        assert ds.keywords == []
        assert ds.distributions == []
        assert isinstance(ds.contact_point, Contact)
        assert isinstance(ds.publisher, Publisher)
        assert ds.access_level is None

    def test_collections_not_shared(self):
        a, b = Dataset(), Dataset()
        a.keywords.append("x")
        a.contact_point.full_name = "A"
        assert b.keywords == []
        assert b.contact_point.full_name is None

    def test_access_level_values(self):
        assert AccessLevel.values() == ["public", "restricted public", "non-public"]


class TestContact:
    def test_set_email_strips_mailto(self):
        contact = Contact()
        contact.set_email("mailto:jane.doe@usda.gov")
        assert contact.email_address == "jane.doe@usda.gov"

    def test_invalid_email_stored_as_is(self):
        contact = Contact()
        contact.set_email("not-an-email")
        assert contact.email_address == "not-an-email"

    def test_is_empty(self):
        assert Contact().is_empty()
        assert not Contact(full_name="Jane").is_empty()


class TestDatasetSetters:
    """One setter per field, safe for every source shape."""

    def test_themes_accumulate(self):
        ds = Dataset()
        ds.add_themes("Agriculture, Economy")
        ds.add_themes(["Health"])
        assert ds.themes == ["Agriculture", "Economy", "Health"]

    def test_single_theme_token(self):
        ds = Dataset()
        ds.add_themes("Agriculture")
        assert ds.themes == ["Agriculture"]

    def test_bureau_code_rejected(self):
        ds = Dataset()
        diagnostics = ds.add_bureau_codes("99:1")
        assert ds.bureau_codes == []
        assert [d.kind for d in diagnostics] == [DiagnosticKind.PARSE]

    def test_program_codes_deduplicated(self):
        ds = Dataset()
        ds.add_program_codes("005:041")
        ds.add_program_codes(["005:041", "005:059"])
        assert ds.program_codes == ["005:041", "005:059"]

    def test_data_quality_string(self):
        ds = Dataset()
        assert ds.set_data_quality("true") == []
        assert ds.data_quality is True
        ds.set_data_quality("no")
        assert ds.data_quality is False

    def test_bad_landing_page_left_unset(self):
        ds = Dataset()
        diagnostics = ds.set_landing_page("not a url")
        assert ds.landing_page is None
        assert len(diagnostics) == 1

    def test_bad_date_left_unset_and_later_fields_still_set(self):
        ds = Dataset()
        problems = ds.set_modified("31/01/2015") + ds.set_issued("2014-12-01")
        assert ds.modified is None
        assert ds.issued == date(2014, 12, 1)
        assert len(problems) == 1

    def test_periodicity_normalized(self):
        ds = Dataset()
        ds.set_accrual_periodicity("Weekly")
        assert ds.accrual_periodicity == "R/P1W"

    def test_package_name(self):
        ds = Dataset(title="Fruit and Vegetable Prices - 2015")
        assert ds.package_name() == "fruit-and-vegetable-prices-_-2015"

    def test_label_prefers_identifier(self):
        assert Dataset(title="T", unique_identifier="ID-1").label == "ID-1"
        assert Dataset(title="T").label == "T"


class TestDistribution:
    def test_usable_url_prefers_download(self):
        d = Distribution(access_url="http://a.gov/api", download_url="http://a.gov/f.csv")
        assert d.usable_url == "http://a.gov/f.csv"

    def test_bad_access_url(self):
        d = Distribution()
        assert len(d.set_access_url("ftp//broken")) == 1
        assert d.access_url is None


class TestCatalog:
    def test_get_dataset(self):
        catalog = build_example_catalog(2)
        assert catalog.get_dataset("USDA-ERS-00002").title.endswith("2")
        assert catalog.get_dataset("missing") is None

    def test_merge_appends_verbatim(self):
        first = build_example_catalog(2)
        second = build_example_catalog(2)
        size = first.size()
        first.merge(second)
        assert first.size() == size + second.size()
        assert first.datasets[size] is second.datasets[0]

    def test_merge_none_rejected(self):
        with pytest.raises(ValueError):
            Catalog().merge(None)

    def test_listing_modes(self):
        catalog = build_example_catalog(3)
        assert len(catalog.listed(ListingMode.FULL_INVENTORY)) == 4
        assert len(catalog.listed(ListingMode.PUBLIC_LISTING)) == 3

    def test_restricted_is_publicly_listed(self):
        ds = build_example_dataset(access_level="restricted public")
        assert ds.is_listed(ListingMode.PUBLIC_LISTING)
