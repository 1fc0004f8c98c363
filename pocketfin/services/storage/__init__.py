"""
Storage Services Package

Provides the abstract ledger store and its implementations:
in-memory, a local JSON file, and Google Sheets.
"""

from pocketfin.services.storage.interface import (
    Collection,
    LedgerStoreInterface,
    StoreConnectionError,
    StoreError,
)
from pocketfin.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsLedgerStore,
)
from pocketfin.services.storage.json_file import JsonFileLedgerStore
from pocketfin.services.storage.memory import InMemoryLedgerStore
from pocketfin.services.storage.seed import (
    SEED_BANK_ACCOUNTS,
    SEED_TRANSACTIONS,
)

__all__ = [
    # Interface
    "Collection",
    "LedgerStoreInterface",
    # Exceptions
    "StoreConnectionError",
    "StoreError",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsLedgerStore",
    "InMemoryLedgerStore",
    "JsonFileLedgerStore",
    # Seed data
    "SEED_BANK_ACCOUNTS",
    "SEED_TRANSACTIONS",
]
