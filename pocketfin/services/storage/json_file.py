"""
JSON File Storage Implementation

The whole ledger is one JSON document on local disk:

    {
        "pocketfin_transactions": [...],
        "pocketfin_bankAccounts": [...]
    }

TRADEOFFS:
- Every write rewrites the document (fine for personal volumes)
- No locking between processes; one app instance per file

Writes go to a sibling temporary file first and are then moved over the
document, so a crash mid-write never leaves half a ledger behind.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Sequence, Union

from pocketfin.log import get_logger
from pocketfin.services.storage.interface import (
    Collection,
    LedgerStoreInterface,
    Record,
    StoreError,
    dump_records,
    parse_records,
)
from pocketfin.services.storage.seed import seed_records


KEY_PREFIX = "pocketfin_"


def storage_key(collection: Collection) -> str:
    return f"{KEY_PREFIX}{collection.value}"


class JsonFileLedgerStore(LedgerStoreInterface):
    """File-backed store holding both collections in one document."""

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)
        self._logger = get_logger(__name__).bind(path=str(self._path))

    def _read_document(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                document = json.load(handle)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Failed to read ledger file {self._path}: {e}")
        if not isinstance(document, dict):
            raise StoreError(f"Ledger file {self._path} is not a JSON object")
        return document

    def _write_document(self, document: dict) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(document, handle, ensure_ascii=False, indent=2)
                os.replace(tmp_path, self._path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise StoreError(f"Failed to write ledger file {self._path}: {e}")

    async def load(self, collection: Collection) -> list[Record]:
        document = self._read_document()
        key = storage_key(collection)

        if key not in document:
            records = seed_records(collection)
            document[key] = dump_records(records)
            self._write_document(document)
            self._logger.info("store_seeded", collection=collection.value, count=len(records))
            return records

        raw = document[key]
        if not isinstance(raw, list):
            raise StoreError(f"Collection {key} is not a list")
        try:
            return parse_records(collection, raw)
        except ValueError as e:
            raise StoreError(f"Malformed record in {key}: {e}")

    async def save(self, collection: Collection, records: Sequence[Record]) -> None:
        document = self._read_document()
        document[storage_key(collection)] = dump_records(records)
        self._write_document(document)
        self._logger.debug("store_saved", collection=collection.value, count=len(records))
