"""
Installment Expansion

A parceled purchase is stored as N ordinary transactions, one per month,
linked by a shared installment id. There is no parent record: the group
is whatever shares `installment.id`.

DESIGN DECISION: Month arithmetic is calendar based. The day of month is
kept where the target month has it and clamped to the month's last day
where it does not (Jan 31 -> Feb 29 -> Mar 31). Each member is computed
from the start date, never from the previous member, so one short month
does not drag every later date down.
"""

import datetime as dt
import re
from decimal import Decimal
from typing import Optional

from dateutil.relativedelta import relativedelta

from pocketfin.models.ledger import (
    Installment,
    InstallmentPlan,
    Transaction,
    new_id,
    to_cents,
)


INSTALLMENT_SUFFIX = re.compile(r" \(\d+/\d+\)$")


def add_months(start: dt.date, months: int) -> dt.date:
    """Advance `start` by a number of calendar months (day clamped to month end)."""
    return start + relativedelta(months=months)


def per_installment_from_total(total: Decimal, installment_count: int) -> Decimal:
    """Installment value for a purchase entered by its total, rounded to cents."""
    return to_cents(Decimal(total) / installment_count)


def installment_label(merchant_base: str, current: int, total: int) -> str:
    return f"{merchant_base} ({current}/{total})"


def strip_installment_suffix(merchant: str) -> str:
    """'Amazon (2/5)' -> 'Amazon'. Merchants without the suffix are returned as-is."""
    return INSTALLMENT_SUFFIX.sub("", merchant)


def expand_installments(
    plan: InstallmentPlan,
    group_id: Optional[str] = None,
) -> list[Transaction]:
    """
    Materialize a parceled purchase into linked monthly transactions.

    Record i (0-based) is dated `start_date + i months`, named
    "<merchant> (i+1/N)" and carries the plan's per-installment amount.
    Record ids are derived from the group id so they cannot collide
    within one expansion.

    Args:
        plan: The purchase parameters (installment_count >= 2 is
            enforced by the model).
        group_id: Correlation id for the group. A fresh one is generated
            when omitted.

    Returns:
        The group members in installment order.
    """
    group_id = group_id or new_id()
    count = plan.installment_count

    return [
        Transaction(
            id=f"{group_id}-{index}",
            date=add_months(plan.start_date, index),
            merchant=installment_label(plan.merchant_base, index + 1, count),
            amount=plan.per_installment_amount,
            type=plan.type,
            category=plan.category,
            bank_id=plan.bank_id,
            notes=plan.notes,
            installment=Installment(current=index + 1, total=count, id=group_id),
        )
        for index in range(count)
    ]
