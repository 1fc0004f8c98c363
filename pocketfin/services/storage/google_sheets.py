"""
Spreadsheet Ledger Store

The `sheets` backend keeps the ledger in a Google spreadsheet, so it can
be read and shared from Sheets itself.

TRADEOFFS:
- A save rewrites every row of one worksheet (fine for a personal ledger)
- No cross-worksheet atomicity; each collection is saved on its own

One worksheet per collection. The optional installment object of a
transaction is flattened into three columns.
"""

from decimal import Decimal
from typing import Optional, Sequence

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from pocketfin.config import get_settings
from pocketfin.log import get_logger
from pocketfin.models.ledger import (
    BankAccount,
    Installment,
    Transaction,
)
from pocketfin.services.storage.interface import (
    Collection,
    LedgerStoreInterface,
    Record,
    StoreConnectionError,
    StoreError,
)
from pocketfin.services.storage.seed import seed_records


# Column mappings for Transactions sheet
TRANSACTION_COLUMNS = [
    "id",
    "date",
    "merchant",
    "amount",
    "type",
    "category",
    "bankId",
    "notes",
    "installmentId",
    "installmentCurrent",
    "installmentTotal",
]

# Column mappings for BankAccounts sheet
BANK_ACCOUNT_COLUMNS = [
    "id",
    "name",
    "color",
    "initialBalance",
]

SHEET_COLUMNS = {
    Collection.TRANSACTIONS: TRANSACTION_COLUMNS,
    Collection.BANK_ACCOUNTS: BANK_ACCOUNT_COLUMNS,
}


def transaction_to_row(transaction: Transaction) -> list:
    """Convert a Transaction to a spreadsheet row."""
    installment = transaction.installment
    return [
        transaction.id,
        transaction.date.isoformat(),
        transaction.merchant,
        str(transaction.amount),
        transaction.type.value,
        transaction.category.value,
        transaction.bank_id,
        transaction.notes or "",
        installment.id if installment else "",
        str(installment.current) if installment else "",
        str(installment.total) if installment else "",
    ]


def row_to_transaction(row: list) -> Transaction:
    """Convert a spreadsheet row to a Transaction."""
    # Trailing empty cells are not returned by the API
    def safe_get(index: int, default: str = "") -> str:
        try:
            return row[index] if row[index] else default
        except IndexError:
            return default

    installment = None
    if safe_get(8):
        installment = Installment(
            id=safe_get(8),
            current=int(safe_get(9)),
            total=int(safe_get(10)),
        )

    return Transaction(
        id=safe_get(0),
        date=safe_get(1),
        merchant=safe_get(2),
        amount=Decimal(safe_get(3)),
        type=safe_get(4),
        category=safe_get(5),
        bank_id=safe_get(6),
        notes=safe_get(7) or None,
        installment=installment,
    )


def bank_account_to_row(account: BankAccount) -> list:
    return [
        account.id,
        account.name,
        account.color,
        str(account.initial_balance),
    ]


def row_to_bank_account(row: list) -> BankAccount:
    return BankAccount(
        id=row[0],
        name=row[1],
        color=row[2] if len(row) > 2 and row[2] else "#64748b",
        initial_balance=Decimal(row[3]) if len(row) > 3 and row[3] else Decimal("0"),
    )


class GoogleSheetsClient:
    """
    Thin gspread wrapper.

    Authorizes once with the service account and hands out the
    worksheet of each collection, creating it on first use.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Authorize gspread with the service account key (cached).
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise StoreConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise StoreConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Open the ledger spreadsheet by key (cached)."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise StoreConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def sheet_name(self, collection: Collection) -> str:
        if collection is Collection.TRANSACTIONS:
            return self._settings.transactions_sheet_name
        return self._settings.bank_accounts_sheet_name

    def get_sheet(self, collection: Collection) -> gspread.Worksheet:
        """
        Get or create the worksheet for a collection.

        A new worksheet is left blank; the header row is written together
        with the first batch of records.
        """
        spreadsheet = self.get_spreadsheet()
        columns = SHEET_COLUMNS[collection]
        try:
            return spreadsheet.worksheet(self.sheet_name(collection))
        except gspread.WorksheetNotFound:
            return spreadsheet.add_worksheet(
                title=self.sheet_name(collection),
                rows=1000,
                cols=len(columns),
            )


class GoogleSheetsLedgerStore(LedgerStoreInterface):
    """
    Google Sheets implementation of the ledger store.

    Records are stored as rows, one record per row, in store order.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()
        self._logger = get_logger(__name__)

    @staticmethod
    def _to_rows(collection: Collection, records: Sequence[Record]) -> list[list]:
        if collection is Collection.TRANSACTIONS:
            return [transaction_to_row(record) for record in records]
        return [bank_account_to_row(record) for record in records]

    @staticmethod
    def _from_row(collection: Collection, row: list) -> Record:
        if collection is Collection.TRANSACTIONS:
            return row_to_transaction(row)
        return row_to_bank_account(row)

    def _write_rows(self, sheet: gspread.Worksheet, collection: Collection, records: Sequence[Record]) -> None:
        sheet.clear()
        sheet.append_rows(
            [SHEET_COLUMNS[collection], *self._to_rows(collection, records)],
            value_input_option="RAW",
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def load(self, collection: Collection) -> list[Record]:
        """
        Load every data row of the collection's worksheet.

        A worksheet without even a header row was never saved (or its
        first write failed half way) and is seeded.
        """
        try:
            sheet = self._client.get_sheet(collection)
            all_rows = sheet.get_all_values()
            if not all_rows:
                records = seed_records(collection)
                self._write_rows(sheet, collection, records)
                self._logger.info("store_seeded", collection=collection.value, count=len(records))
                return records

            return [
                self._from_row(collection, row)
                for row in all_rows[1:]  # Skip header
                if row and row[0]  # Skip empty rows
            ]
        except StoreError:
            raise
        except Exception as e:
            raise StoreError(f"Failed to load {collection.value}: {e}")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def save(self, collection: Collection, records: Sequence[Record]) -> None:
        """Rewrite the collection's worksheet."""
        try:
            sheet = self._client.get_sheet(collection)
            self._write_rows(sheet, collection, records)
            self._logger.debug("store_saved", collection=collection.value, count=len(records))
        except StoreError:
            raise
        except Exception as e:
            raise StoreError(f"Failed to save {collection.value}: {e}")
