"""Dataset a store returns the first time a collection is loaded."""

import datetime as dt
from decimal import Decimal

from pocketfin.models.ledger import (
    BankAccount,
    Category,
    Transaction,
    TransactionType,
)
from pocketfin.services.storage.interface import Collection, Record


SEED_BANK_ACCOUNTS = (
    BankAccount(id="bank_1", name="Nubank", color="#820ad1", initial_balance=Decimal("1500.00")),
    BankAccount(id="bank_2", name="Bradesco", color="#cc092f", initial_balance=Decimal("5000.00")),
    BankAccount(id="bank_3", name="Neon", color="#00b4d8", initial_balance=Decimal("800.00")),
)


def _seed(id, day, merchant, amount, kind, category, bank_id):
    return Transaction(
        id=id,
        date=dt.date(2023, 10, day),
        merchant=merchant,
        amount=Decimal(amount),
        type=kind,
        category=category,
        bank_id=bank_id,
    )


_EXPENSE = TransactionType.EXPENSE
_INCOME = TransactionType.INCOME

SEED_TRANSACTIONS = (
    _seed("1", 1, "Supermercado Silva", "124.50", _EXPENSE, Category.FOOD, "bank_1"),
    _seed("2", 2, "Posto Shell", "45.00", _EXPENSE, Category.TRANSPORT, "bank_2"),
    _seed("3", 3, "Salario Tech Corp", "3500.00", _INCOME, Category.SALARY, "bank_1"),
    _seed("4", 5, "Netflix", "15.99", _EXPENSE, Category.ENTERTAINMENT, "bank_3"),
    _seed("5", 6, "Conta de Luz", "120.00", _EXPENSE, Category.UTILITIES, "bank_2"),
    _seed("6", 8, "Farmacia Pague Menos", "32.40", _EXPENSE, Category.HEALTH, "bank_1"),
    _seed("7", 10, "Amazon Brasil", "89.99", _EXPENSE, Category.SHOPPING, "bank_3"),
)


def seed_records(collection: Collection) -> list[Record]:
    if collection is Collection.TRANSACTIONS:
        return list(SEED_TRANSACTIONS)
    return list(SEED_BANK_ACCOUNTS)
