"""
Text serialization for catalog entity trees.

JSON and YAML text go through the POD 1.1 dict representation, so a
catalog written here can be read back by any POD consumer. CKAN text
goes through the CKAN package / search-envelope representation.
Loading from text validates, like the load_* helpers it wraps.
"""
from __future__ import annotations

import json
from typing import Any, Dict, Optional

import yaml

from odcat.catalog import load_catalog_from_pod, load_catalog_from_search_result
from odcat.ckan import dataset_to_ckan, load_dataset_from_ckan
from odcat.config import Settings
from odcat.diagnostics import StructuralError
from odcat.model import Catalog, Dataset, ListingMode
from odcat.pod import catalog_to_pod, dataset_to_pod, load_dataset_from_pod


def _loads_json(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise StructuralError(f"Invalid JSON: {e}")


def _loads_yaml(text: str) -> Any:
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise StructuralError(f"Invalid YAML: {e}")


def dataset_to_json(ds: Dataset) -> str:
    return json.dumps(dataset_to_pod(ds), sort_keys=True)


def dataset_from_json(s: str) -> Dataset:
    return load_dataset_from_pod(_loads_json(s))


def catalog_to_json(c: Catalog, mode: Optional[ListingMode] = None, settings: Optional[Settings] = None) -> str:
    return json.dumps(catalog_to_pod(c, mode, settings), sort_keys=True)


def catalog_from_json(s: str) -> Catalog:
    return load_catalog_from_pod(_loads_json(s))


def catalog_to_yaml(c: Catalog, mode: Optional[ListingMode] = None, settings: Optional[Settings] = None) -> str:
    return yaml.safe_dump(catalog_to_pod(c, mode, settings), sort_keys=False)


def catalog_from_yaml(s: str) -> Catalog:
    return load_catalog_from_pod(_loads_yaml(s))


def package_to_json(ds: Dataset, settings: Optional[Settings] = None) -> str:
    return json.dumps(dataset_to_ckan(ds, settings), sort_keys=True)


def package_from_json(s: str) -> Dataset:
    return load_dataset_from_ckan(_loads_json(s))


def search_result_from_json(s: str) -> Catalog:
    d: Dict[str, Any] = _loads_json(s)
    return load_catalog_from_search_result(d)
