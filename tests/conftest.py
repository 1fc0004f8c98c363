"""
Shared fixtures for PocketFin tests.

Test strategy:
1. Unit tests for the pure ledger functions (no I/O, fixed dates)
2. Async tests for stores and flows against in-memory / tmp-path stores
3. No real API calls in tests (Gemini is replaced by fakes)
"""

import datetime as dt
from decimal import Decimal
from itertools import count

import pytest

from pocketfin.config import get_settings
from pocketfin.models import (
    BankAccount,
    Category,
    Installment,
    Transaction,
    TransactionType,
)
from pocketfin.services.ocr import GeminiReceiptAnalyzer
from pocketfin.services.storage import (
    Collection,
    GoogleSheetsLedgerStore,
    InMemoryLedgerStore,
)


_ids = count(1)


def make_transaction(
    date="2024-05-10",
    amount="100.00",
    type=TransactionType.EXPENSE,
    category=Category.FOOD,
    bank_id="bank_1",
    merchant="Mercado",
    installment=None,
    id=None,
) -> Transaction:
    return Transaction(
        id=id or f"t{next(_ids)}",
        date=dt.date.fromisoformat(date) if isinstance(date, str) else date,
        merchant=merchant,
        amount=Decimal(amount),
        type=type,
        category=category,
        bank_id=bank_id,
        installment=installment,
    )


def make_member(group_id, current, total, date, amount="100.00", merchant="Loja", bank_id="bank_1"):
    return make_transaction(
        id=f"{group_id}-{current - 1}",
        date=date,
        amount=amount,
        merchant=f"{merchant} ({current}/{total})",
        bank_id=bank_id,
        category=Category.SHOPPING,
        installment=Installment(current=current, total=total, id=group_id),
    )


class FakeResponse:
    def __init__(self, text):
        self.text = text


class FakeModel:
    """Stands in for genai.GenerativeModel."""

    def __init__(self, text="", error=None, failures=None):
        self.text = text
        self.error = error
        # Calls that raise `error` before answering; None means every call
        self.failures = failures
        self.calls = []

    async def generate_content_async(self, contents):
        self.calls.append(contents)
        if self.error is not None and (self.failures is None or len(self.calls) <= self.failures):
            raise self.error
        return FakeResponse(self.text)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def instant_retries(monkeypatch):
    """Tenacity retries without the exponential back-off sleeps."""
    async def no_sleep(seconds):
        return None

    for retried in (
        GeminiReceiptAnalyzer._generate,
        GoogleSheetsLedgerStore.load,
        GoogleSheetsLedgerStore.save,
    ):
        monkeypatch.setattr(retried.retry, "sleep", no_sleep)


@pytest.fixture
def accounts():
    return [
        BankAccount(id="bank_1", name="Nubank", color="#820ad1", initial_balance=Decimal("1000.00")),
        BankAccount(id="bank_2", name="Neon", color="#00b4d8", initial_balance=Decimal("0")),
    ]


@pytest.fixture
def empty_store(accounts):
    """In-memory store with two accounts and no transactions."""
    return InMemoryLedgerStore({
        Collection.TRANSACTIONS: [],
        Collection.BANK_ACCOUNTS: accounts,
    })
