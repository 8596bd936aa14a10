#!/usr/bin/env python3
"""
Pipeline Demo: CKAN search result → Catalog → Validation → POD / CSV

Shows the full workflow:
1. Load a CKAN search envelope with one broken package
2. Report the packages that were left out
3. Export the clean catalog as POD 1.1 JSON
4. Export the public rows as tab-delimited text
"""

import logging

from odcat.catalog import catalog_from_search_result, catalog_to_csv, catalog_to_pod_json
from odcat.examples import example_ckan_package, example_search_result
from odcat.model import ListingMode


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    packages = [
        example_ckan_package("USDA-ERS-00071", "Fruit and Vegetable Prices"),
        example_ckan_package("USDA-ERS-00072", "Food Price Outlook"),
        example_ckan_package("USDA-ERS-00073", "Dairy Data"),
    ]
    # Break the second package: no tags and a malformed bureau code
    packages[1]["tags"] = []
    packages[1]["extras"].append({"key": "bureau_code", "value": "5:13"})

    print("=" * 80)
    print("PIPELINE DEMO: CKAN → Catalog → Validation → POD / CSV")
    print("=" * 80)

    # =========================================================================
    # STEP 1: Load
    # =========================================================================
    print("\n1. LOADING CKAN SEARCH RESULT...")
    result = catalog_from_search_result(example_search_result(packages))
    catalog = result.value
    print(f"   ✓ Packages in envelope: {len(packages)}")
    print(f"   ✓ Datasets loaded: {catalog.size()}")

    # =========================================================================
    # STEP 2: Problems
    # =========================================================================
    print(f"\n2. PROBLEMS ({len(result.diagnostics)}):")
    for message in result.messages():
        print(f"      - {message}")

    # =========================================================================
    # STEP 3: POD export
    # =========================================================================
    print("\n3. POD 1.1 CATALOG (first 20 lines):")
    print("-" * 80)
    lines = catalog_to_pod_json(catalog, ListingMode.PUBLIC_LISTING).split("\n")
    for line in lines[:20]:
        print(f"   {line}")
    if len(lines) > 20:
        print(f"   ... ({len(lines) - 20} more lines)")

    # =========================================================================
    # STEP 4: CSV export
    # =========================================================================
    print("\n4. TAB-DELIMITED EXPORT:")
    print("-" * 80)
    for line in catalog_to_csv(catalog).splitlines():
        print(f"   {line[:100]}")


if __name__ == "__main__":
    main()
