"""Backends for catalog output generation (tabular export)."""

from .tabular import CSV_COLUMNS, dataset_to_row, generate_csv

__all__ = ["CSV_COLUMNS", "dataset_to_row", "generate_csv"]
