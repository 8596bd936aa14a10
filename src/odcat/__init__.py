"""
Open Data Catalog bridge (odcat)

Maps government open-data metadata between CKAN package JSON and the
Project Open Data (POD) v1.1 schema through one canonical entity tree.

ARCHITECTURAL GUARANTEE:
------------------------
The entity model (odcat.model) contains ZERO knowledge of:
    - CKAN extras keys and aliases
    - POD field names
    - Tabular column layout
    - Validation rules

Mappers, the validator and the backends consume the model unchanged.
Nothing in this package performs network or file I/O.
"""

import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
