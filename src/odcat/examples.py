"""
Example metadata builders based on a USDA Economic Research Service entry.

Provides a valid CKAN package, the equivalent POD 1.1 dataset, and a
ready-built Dataset / Catalog, for demos and tests.
"""
from datetime import date
from typing import Any, Dict, List, Optional

from odcat.model import (
    CONTACT_TYPE,
    ORGANIZATION_TYPE,
    Catalog,
    Contact,
    Dataset,
    Distribution,
    Publisher,
)


def example_ckan_package(identifier: str = "USDA-ERS-00071", title: str = "Fruit and Vegetable Prices") -> Dict[str, Any]:
    return {
        "title": title,
        "notes": "Average retail prices for 153 fresh and processed fruits and vegetables.",
        "metadata_modified": "2015-03-23T19:42:17.469170",
        "resources": [
            {
                "name": "Fruit prices",
                "description": "Fruit price spreadsheet",
                "url": "http://www.ers.usda.gov/datafiles/fruit.xlsx",
                "format": "application/vnd.ms-excel",
                "formatReadable": "Excel",
                "resource_type": "file",
            },
            {
                "name": "Price API",
                "description": "Query prices",
                "url": "http://api.ers.usda.gov/prices",
                "format": "API",
                "resource_type": "api",
            },
        ],
        "extras": [
            {"key": "public_access_level", "value": "public"},
            {"key": "accrual_periodicity", "value": "Annual"},
            {"key": "bureau_code", "value": "005:13"},
            {"key": "program_code", "value": "005:041"},
            {"key": "contact_email", "value": "mailto:jane.doe@usda.gov"},
            {"key": "contact_name", "value": "Jane Doe"},
            {"key": "publisher", "value": "Economic Research Service"},
            {"key": "publisher_1", "value": "U.S. Department of Agriculture"},
            {"key": "unique_id", "value": identifier},
            {"key": "modified", "value": "2015-01-30"},
            {"key": "homepage_url", "value": "http://www.ers.usda.gov/data-products/fruit-and-vegetable-prices.aspx"},
            {"key": "category", "value": "Agriculture, Economy"},
            {"key": "language", "value": "en-us"},
            {"key": "data_quality", "value": "true"},
            {"key": "license_new", "value": "http://creativecommons.org/publicdomain/zero/1.0/"},
        ],
        "tags": [
            {"name": "prices", "display_name": "prices"},
            {"name": "fruit", "display_name": "fruit"},
        ],
    }


def example_pod_dataset(identifier: str = "USDA-ERS-00071", title: str = "Fruit and Vegetable Prices") -> Dict[str, Any]:
    return {
        "@type": "dcat:Dataset",
        "title": title,
        "description": "Average retail prices for 153 fresh and processed fruits and vegetables.",
        "keyword": ["prices", "fruit"],
        "modified": "2015-01-30",
        "publisher": {
            "@type": ORGANIZATION_TYPE,
            "name": "Economic Research Service",
            "subOrganizationOf": {"@type": ORGANIZATION_TYPE, "name": "U.S. Department of Agriculture"},
        },
        "contactPoint": {"@type": CONTACT_TYPE, "fn": "Jane Doe", "hasEmail": "mailto:jane.doe@usda.gov"},
        "identifier": identifier,
        "accessLevel": "public",
        "bureauCode": ["005:13"],
        "programCode": ["005:041"],
        "accrualPeriodicity": "R/P1Y",
        "landingPage": "http://www.ers.usda.gov/data-products/fruit-and-vegetable-prices.aspx",
        "distribution": [
            {
                "@type": "dcat:Distribution",
                "title": "Fruit prices",
                "downloadURL": "http://www.ers.usda.gov/datafiles/fruit.xlsx",
                "mediaType": "application/vnd.ms-excel",
            }
        ],
        "theme": ["Agriculture", "Economy"],
        "language": ["en-us"],
    }


def example_search_result(packages: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    if packages is None:
        packages = [example_ckan_package()]
    return {"help": "package_search", "success": True, "result": {"count": len(packages), "packages": packages}}


def build_example_dataset(
    identifier: str = "USDA-ERS-00071",
    access_level: str = "public",
    with_distribution: bool = True,
) -> Dataset:
    dataset = Dataset(
        title="Fruit and Vegetable Prices",
        description="Average retail prices for 153 fresh and processed fruits and vegetables.",
        access_level=access_level,
        accrual_periodicity="R/P1Y",
        bureau_codes=["005:13"],
        program_codes=["005:041"],
        keywords=["prices", "fruit"],
        unique_identifier=identifier,
        contact_point=Contact(type=CONTACT_TYPE, full_name="Jane Doe", email_address="jane.doe@usda.gov"),
        publisher=Publisher(name="Economic Research Service", type=ORGANIZATION_TYPE),
        modified=date(2015, 1, 30),
        bureau_name="Economic Research Service",
    )
    if with_distribution:
        dataset.distributions.append(Distribution(
            title="Fruit prices",
            download_url="http://www.ers.usda.gov/datafiles/fruit.xlsx",
            media_type="application/vnd.ms-excel",
        ))
    return dataset


def build_example_catalog(count: int = 3) -> Catalog:
    """Catalog of `count` public datasets plus one non-public dataset."""
    catalog = Catalog(title="USDA Enterprise Data Inventory")
    for i in range(1, count + 1):
        ds = build_example_dataset(identifier=f"USDA-ERS-{i:05d}")
        ds.title = f"{ds.title} {i}"
        catalog.datasets.append(ds)
    private = build_example_dataset(identifier="USDA-ERS-99999", access_level="non-public", with_distribution=False)
    private.title = "Internal Price Survey Microdata"
    catalog.datasets.append(private)
    return catalog
