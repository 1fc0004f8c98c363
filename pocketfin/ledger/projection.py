"""
Account Balance Projection

Turns one bank account's transactions into what the Accounts screen
shows: the balance today, what was spent this month, and which
installment purchases still have payments ahead.

DESIGN DECISION: The reference date is always passed in (`as_of`).
Nothing here reads the clock, so every projection is reproducible.

Date semantics (calendar dates, no time of day):
- a transaction dated on or before `as_of` has happened
- a transaction dated after `as_of` is still to come
"""

import datetime as dt
from collections.abc import Iterable, Sequence
from decimal import Decimal
from typing import Union

from pocketfin.ledger.installments import strip_installment_suffix
from pocketfin.models.ledger import (
    AccountProjection,
    ActiveInstallment,
    BankAccount,
    Transaction,
    TransactionType,
)


ZERO = Decimal("0")

AsOf = Union[dt.date, dt.datetime]


def _as_date(as_of: AsOf) -> dt.date:
    # datetime is a date subclass but does not compare with plain dates
    if isinstance(as_of, dt.datetime):
        return as_of.date()
    return as_of


def _current_balance(
    initial_balance: Decimal,
    transactions: Iterable[Transaction],
    as_of: dt.date,
) -> Decimal:
    balance = initial_balance
    for t in transactions:
        if t.date <= as_of:
            balance += t.signed_amount
    return balance


def _month_expenses(transactions: Iterable[Transaction], as_of: dt.date) -> Decimal:
    return sum(
        (
            t.amount
            for t in transactions
            if t.type is TransactionType.EXPENSE
            and t.date.year == as_of.year
            and t.date.month == as_of.month
        ),
        ZERO,
    )


def _active_installments(
    transactions: Iterable[Transaction],
    as_of: dt.date,
) -> list[ActiveInstallment]:
    # Groups are reported in order of first appearance in the input
    groups: dict[str, list[Transaction]] = {}
    for t in transactions:
        if t.installment is not None:
            groups.setdefault(t.installment.id, []).append(t)

    active = []
    for group_id, members in groups.items():
        members = sorted(members, key=lambda t: t.date)
        canonical = members[0]
        remaining = sum(1 for t in members if t.date > as_of)
        if remaining == 0:
            continue
        active.append(
            ActiveInstallment(
                group_id=group_id,
                description=strip_installment_suffix(canonical.merchant),
                total_installments=canonical.installment.total,
                remaining_count=remaining,
                per_installment_amount=canonical.amount,
            )
        )
    return active


def project_account(
    bank_id: str,
    initial_balance: Decimal,
    transactions: Sequence[Transaction],
    as_of: AsOf,
) -> AccountProjection:
    """
    Project one account's position at `as_of`.

    Args:
        bank_id: Account to project; other accounts' records are ignored.
        initial_balance: Balance before any recorded transaction.
        transactions: The full ledger, any order.
        as_of: Reference date (a datetime is reduced to its date).

    Returns:
        AccountProjection with balance, month expenses and the
        installment groups that still have future payments.
    """
    as_of = _as_date(as_of)
    own = [t for t in transactions if t.bank_id == bank_id]

    return AccountProjection(
        bank_id=bank_id,
        as_of=as_of,
        current_balance=_current_balance(initial_balance, own, as_of),
        current_month_expenses=_month_expenses(own, as_of),
        active_installments=_active_installments(own, as_of),
    )


def project_accounts(
    accounts: Iterable[BankAccount],
    transactions: Sequence[Transaction],
    as_of: AsOf,
) -> list[tuple[BankAccount, AccountProjection]]:
    """Project every account, keeping the accounts' order."""
    return [
        (
            account,
            project_account(account.id, account.initial_balance, transactions, as_of),
        )
        for account in accounts
    ]
