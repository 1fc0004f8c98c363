"""
Abstract Ledger Store Interface

DESIGN DECISION: The store is a key-value document store with two keys
(collections): transactions and bank accounts. Each key holds the full
list of records. This allows us to:
1. Back it with a JSON file, a spreadsheet or plain memory
2. Use in-memory storage for testing
3. Keep the ledger math free of any storage concern

Only `load` and `save` are backend specific. `append` and `remove` are
written once here in terms of those two.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Sequence, Union

from pocketfin.models.ledger import BankAccount, Transaction


class Collection(str, Enum):
    """Top-level keys of the ledger store."""
    TRANSACTIONS = "transactions"
    BANK_ACCOUNTS = "bankAccounts"


Record = Union[Transaction, BankAccount]

COLLECTION_MODELS: dict[Collection, type] = {
    Collection.TRANSACTIONS: Transaction,
    Collection.BANK_ACCOUNTS: BankAccount,
}

# Transactions are kept newest first; accounts keep creation order
PREPEND_COLLECTIONS = frozenset({Collection.TRANSACTIONS})


def parse_records(collection: Collection, raw: Sequence[dict]) -> list[Record]:
    """Turn stored JSON objects back into models."""
    model = COLLECTION_MODELS[collection]
    return [model.model_validate(item) for item in raw]


def dump_records(records: Sequence[Record]) -> list[dict]:
    """Turn models into the JSON objects the store persists."""
    return [record.model_dump(mode="json", by_alias=True, exclude_none=True) for record in records]


class LedgerStoreInterface(ABC):
    """
    Abstract interface for ledger storage.

    Any storage implementation (JSON file, Google Sheets, etc.)
    must implement `load` and `save`.
    """

    @abstractmethod
    async def load(self, collection: Collection) -> list[Record]:
        """
        Load the full list stored under a collection.

        The first load of a collection that was never saved returns
        (and persists) the seed dataset.

        Raises:
            StoreError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def save(self, collection: Collection, records: Sequence[Record]) -> None:
        """
        Replace the full list stored under a collection.

        Raises:
            StoreError: If the write fails
        """
        pass

    async def append(
        self,
        collection: Collection,
        records: Union[Record, Sequence[Record]],
    ) -> list[Record]:
        """
        Add one or more records and return the updated full list.

        New transactions go to the front (newest first), keeping the
        order they were given in; new accounts go to the back.
        """
        if isinstance(records, (Transaction, BankAccount)):
            records = [records]
        current = await self.load(collection)
        if collection in PREPEND_COLLECTIONS:
            updated = [*records, *current]
        else:
            updated = [*current, *records]
        await self.save(collection, updated)
        return updated

    async def remove(self, collection: Collection, record_id: str) -> list[Record]:
        """
        Remove the record with `record_id` and return the updated list.

        Unknown ids leave the list unchanged.
        """
        current = await self.load(collection)
        updated = [record for record in current if record.id != record_id]
        if len(updated) != len(current):
            await self.save(collection, updated)
        return updated


class StoreError(Exception):
    """Base exception for storage operations."""
    pass


class StoreConnectionError(StoreError):
    """Could not connect to storage backend."""
    pass
