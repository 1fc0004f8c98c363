"""Display helpers for amounts, dates and ledger rows."""

import datetime as dt
from decimal import Decimal

from pocketfin.models.ledger import ActiveInstallment, Transaction, TransactionType


def format_currency(value: Decimal, symbol: str = "R$") -> str:
    """
    Brazilian-style money: thousands with dots, decimals with a comma.

    >>> format_currency(Decimal("-1234.5"))
    '-R$ 1.234,50'
    """
    sign = "-" if value < 0 else ""
    grouped = f"{abs(value):,.2f}"
    # 1,234.50 -> 1.234,50
    localized = grouped.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}{symbol} {localized}"


def format_date(value: dt.date) -> str:
    return value.strftime("%d/%m/%Y")


def format_signed(transaction: Transaction, symbol: str = "R$") -> str:
    """Amount with a +/- marker for list views."""
    marker = "+" if transaction.type is TransactionType.INCOME else "-"
    return f"{marker} {format_currency(transaction.amount, symbol)}"


def format_installment_progress(installment: ActiveInstallment, symbol: str = "R$") -> str:
    paid = installment.total_installments - installment.remaining_count
    return (
        f"{paid}/{installment.total_installments} paid, "
        f"{installment.remaining_count} left of {format_currency(installment.per_installment_amount, symbol)}"
    )
