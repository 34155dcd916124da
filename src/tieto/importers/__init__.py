"""
Importers that turn tabular data into ingestible documents.
"""

from .csv_import import CsvImportConfig, CsvImportResult, process_csv, slugify

__all__ = ["CsvImportConfig", "CsvImportResult", "process_csv", "slugify"]
