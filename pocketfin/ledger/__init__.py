"""
Ledger Package

Pure computations over the transaction list: installment expansion,
statistics and per-account projection. No I/O, no clock.
"""

from pocketfin.ledger.installments import (
    add_months,
    expand_installments,
    installment_label,
    per_installment_from_total,
    strip_installment_suffix,
)
from pocketfin.ledger.projection import project_account, project_accounts
from pocketfin.ledger.statistics import (
    cashflow_series,
    compute_financial_stats,
    expenses_by_category,
    search_transactions,
)

__all__ = [
    "add_months",
    "cashflow_series",
    "compute_financial_stats",
    "expand_installments",
    "expenses_by_category",
    "installment_label",
    "per_installment_from_total",
    "project_account",
    "project_accounts",
    "search_transactions",
    "strip_installment_suffix",
]
