from .importer import ImportResult, SpreadsheetImporter
from .storage import ImportStorage, SqlImportStorage

__all__ = ["ImportResult", "SpreadsheetImporter", "ImportStorage", "SqlImportStorage"]
