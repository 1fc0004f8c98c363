"""
Data Models Package

This package contains all Pydantic models used in PocketFin.
All data flowing through the system must conform to these schemas.
"""

from pocketfin.models.ledger import (
    CATEGORY_PALETTE,
    AccountProjection,
    ActiveInstallment,
    BankAccount,
    Category,
    CategoryTotal,
    ChatMessage,
    FinancialStats,
    Installment,
    InstallmentPlan,
    ReceiptAnalysis,
    Transaction,
    TransactionType,
    category_color,
    new_id,
    to_cents,
)
from pocketfin.models.validation import (
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    # Ledger records
    "CATEGORY_PALETTE",
    "BankAccount",
    "Category",
    "Installment",
    "InstallmentPlan",
    "Transaction",
    "TransactionType",
    "category_color",
    "new_id",
    "to_cents",
    # Derived views
    "AccountProjection",
    "ActiveInstallment",
    "CategoryTotal",
    "FinancialStats",
    # Remote payloads
    "ChatMessage",
    "ReceiptAnalysis",
    # Validation
    "ValidationIssue",
    "ValidationResult",
]
