"""In-memory ledger store, used by tests and the `memory` backend."""

from typing import Optional, Sequence

from pocketfin.services.storage.interface import (
    Collection,
    LedgerStoreInterface,
    Record,
)
from pocketfin.services.storage.seed import seed_records


class InMemoryLedgerStore(LedgerStoreInterface):
    """
    Dict-backed store.

    Args:
        initial: Pre-populated collections. Collections not given are
            seeded on first load, like every other backend.
    """

    def __init__(self, initial: Optional[dict[Collection, Sequence[Record]]] = None):
        self._data: dict[Collection, list[Record]] = {
            collection: list(records) for collection, records in (initial or {}).items()
        }

    async def load(self, collection: Collection) -> list[Record]:
        if collection not in self._data:
            self._data[collection] = seed_records(collection)
        # Records are frozen, a shallow copy keeps callers off our list
        return list(self._data[collection])

    async def save(self, collection: Collection, records: Sequence[Record]) -> None:
        self._data[collection] = list(records)
