"""Ledger-wide statistics and the list views derived from them."""

import datetime as dt
from collections.abc import Iterable, Sequence
from decimal import Decimal

from pocketfin.models.ledger import (
    Category,
    CategoryTotal,
    FinancialStats,
    Transaction,
    TransactionType,
    category_color,
)


DEFAULT_RECENT_LIMIT = 10
ZERO = Decimal("0")


def _total(transactions: Iterable[Transaction], kind: TransactionType) -> Decimal:
    return sum((t.amount for t in transactions if t.type is kind), ZERO)


def expenses_by_category(transactions: Sequence[Transaction]) -> list[CategoryTotal]:
    """
    Expense totals per category, largest first.

    Categories are visited in canonical order and the sort is stable,
    so equal totals keep canonical order. Categories with nothing spent
    are left out.
    """
    totals = []
    for category in Category:
        value = sum(
            (
                t.amount
                for t in transactions
                if t.type is TransactionType.EXPENSE and t.category is category
            ),
            ZERO,
        )
        if value == 0:
            continue
        totals.append(
            CategoryTotal(
                category=category,
                total_value=value,
                color=category_color(category),
            )
        )

    return sorted(totals, key=lambda entry: entry.total_value, reverse=True)


def compute_financial_stats(
    transactions: Sequence[Transaction],
    recent_limit: int = DEFAULT_RECENT_LIMIT,
) -> FinancialStats:
    """
    Summarize the whole ledger.

    `transactions` is expected newest-first (the store's order); the
    recent list is simply its head, no date sort is applied.
    """
    total_income = _total(transactions, TransactionType.INCOME)
    total_expenses = _total(transactions, TransactionType.EXPENSE)

    return FinancialStats(
        total_income=total_income,
        total_expenses=total_expenses,
        net_worth=total_income - total_expenses,
        expenses_by_category=expenses_by_category(transactions),
        recent_transactions=list(transactions[:recent_limit]),
    )


def search_transactions(
    transactions: Sequence[Transaction],
    text: str,
) -> list[Transaction]:
    """Case-insensitive match on merchant or category label."""
    needle = text.strip().lower()
    if not needle:
        return list(transactions)
    return [
        t for t in transactions
        if needle in t.merchant.lower() or needle in t.category.value.lower()
    ]


def cashflow_series(
    recent_transactions: Sequence[Transaction],
) -> list[tuple[dt.date, Decimal]]:
    """Chart points, oldest first, income positive and expense negative."""
    return [(t.date, t.signed_amount) for t in reversed(recent_transactions)]
