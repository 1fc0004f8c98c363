"""Services package."""

from pocketfin.services.ocr import (
    AnalysisError,
    GeminiReceiptAnalyzer,
)
from pocketfin.services.storage import (
    Collection,
    GoogleSheetsClient,
    GoogleSheetsLedgerStore,
    InMemoryLedgerStore,
    JsonFileLedgerStore,
    LedgerStoreInterface,
    StoreConnectionError,
    StoreError,
)

__all__ = [
    # OCR services
    "AnalysisError",
    "GeminiReceiptAnalyzer",
    # Storage services
    "Collection",
    "GoogleSheetsClient",
    "GoogleSheetsLedgerStore",
    "InMemoryLedgerStore",
    "JsonFileLedgerStore",
    "LedgerStoreInterface",
    "StoreConnectionError",
    "StoreError",
]
