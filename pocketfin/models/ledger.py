"""
Core Data Models for PocketFin

These models define the strict schemas for every record in the ledger.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Serialize to the camelCase JSON the store persists
4. Stay immutable once created (deletion is the only mutation)

DESIGN DECISION: Python attributes are snake_case, JSON keys are camelCase
(bankId, initialBalance, ...). Models accept both on input and always
dump with aliases, so stored documents keep one stable shape.
"""

import datetime as dt
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Literal, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


RECORD_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    frozen=True,
    str_strip_whitespace=True,
)


def new_id() -> str:
    """Fresh globally-unique identifier for a record or installment group."""
    return uuid4().hex


CENT = Decimal("0.01")


def to_cents(value: Decimal) -> Decimal:
    """Round money to whole cents, half up."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of money movement."""
    INCOME = "income"
    EXPENSE = "expense"


class Category(str, Enum):
    """
    Transaction categories.

    DESIGN DECISION: Declaration order is the canonical order. It drives
    iteration in the statistics, palette assignment and tie-breaking.
    Never iterate a set or dict of categories instead.
    """
    FOOD = "Food"
    TRANSPORT = "Transport"
    HOUSING = "Housing"
    UTILITIES = "Utilities"
    ENTERTAINMENT = "Entertainment"
    HEALTH = "Health"
    SHOPPING = "Shopping"
    SALARY = "Salary"
    INVESTMENT = "Investment"
    OTHER = "Other"

    @classmethod
    def match(cls, label: Optional[str]) -> "Category":
        """
        Case-insensitive lookup by label or member name.

        Unknown or empty labels fall back to OTHER.
        """
        wanted = (label or "").strip().lower()
        for category in cls:
            if wanted in (category.value.lower(), category.name.lower()):
                return category
        return cls.OTHER


CATEGORY_PALETTE = (
    "#3b82f6",
    "#10b981",
    "#f59e0b",
    "#ef4444",
    "#8b5cf6",
    "#ec4899",
    "#6366f1",
    "#14b8a6",
    "#f97316",
    "#64748b",
)


def category_color(category: Category) -> str:
    """Display colour bound to a category by its canonical position."""
    index = list(Category).index(category)
    return CATEGORY_PALETTE[index % len(CATEGORY_PALETTE)]


# =============================================================================
# LEDGER RECORDS
# =============================================================================

class Installment(BaseModel):
    """
    Position of a transaction inside an installment group.

    `id` is shared by every member of one expanded purchase.
    """
    model_config = RECORD_CONFIG

    current: int = Field(..., ge=1, description="1-based position in the group")
    total: int = Field(..., ge=2, description="Number of members in the group")
    id: str = Field(..., min_length=1, description="Group correlation id")

    @model_validator(mode='after')
    def validate_position(self) -> 'Installment':
        if self.current > self.total:
            raise ValueError("Installment position cannot exceed the installment count")
        return self


class Transaction(BaseModel):
    """
    A single movement of money on one bank account.

    For installment members, `amount` is the per-installment value and
    `merchant` carries the " (k/N)" suffix.
    """
    model_config = RECORD_CONFIG

    id: str = Field(..., min_length=1)
    date: dt.date = Field(..., description="Date the money moves")
    merchant: str = Field(..., min_length=1, max_length=200)
    amount: Decimal = Field(..., gt=0)
    type: TransactionType
    category: Category
    bank_id: str = Field(..., min_length=1, description="Owning bank account")
    notes: Optional[str] = Field(default=None, max_length=1000)
    installment: Optional[Installment] = None

    @field_validator('amount')
    @classmethod
    def round_amount(cls, v: Decimal) -> Decimal:
        rounded = to_cents(v)
        if rounded <= 0:
            raise ValueError("Amount must be at least one cent")
        return rounded

    @property
    def signed_amount(self) -> Decimal:
        """Amount with income positive and expense negative."""
        if self.type is TransactionType.INCOME:
            return self.amount
        return -self.amount


class BankAccount(BaseModel):
    """A bank account. `initial_balance` is the balance before any transaction."""
    model_config = RECORD_CONFIG

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    color: str = Field(default="#64748b", description="Display hint only")
    initial_balance: Decimal = Field(default=Decimal("0"))

    @field_validator('initial_balance')
    @classmethod
    def round_balance(cls, v: Decimal) -> Decimal:
        return to_cents(v)


class InstallmentPlan(BaseModel):
    """
    Parameters of a parceled purchase, before expansion.

    The expander trusts `per_installment_amount`; `total_amount` is kept
    for display and consistency warnings only.
    """
    model_config = RECORD_CONFIG

    start_date: dt.date
    merchant_base: str = Field(..., min_length=1, max_length=180)
    installment_count: int = Field(..., ge=2, le=360)
    per_installment_amount: Decimal = Field(..., gt=0)
    total_amount: Optional[Decimal] = Field(default=None, gt=0)
    category: Category
    type: TransactionType = TransactionType.EXPENSE
    bank_id: str = Field(..., min_length=1)
    notes: Optional[str] = Field(default=None, max_length=1000)

    @field_validator('per_installment_amount', 'total_amount')
    @classmethod
    def round_amounts(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is None:
            return v
        rounded = to_cents(v)
        if rounded <= 0:
            raise ValueError("Amount must be at least one cent")
        return rounded

    @property
    def effective_total(self) -> Decimal:
        if self.total_amount is not None:
            return self.total_amount
        return self.per_installment_amount * self.installment_count


# =============================================================================
# DERIVED VIEWS (never persisted)
# =============================================================================

class CategoryTotal(BaseModel):
    """Expense total for one category."""
    model_config = RECORD_CONFIG

    category: Category
    total_value: Decimal
    color: str


class FinancialStats(BaseModel):
    """Ledger-wide summary."""
    model_config = RECORD_CONFIG

    total_income: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")
    net_worth: Decimal = Decimal("0")
    expenses_by_category: list[CategoryTotal] = Field(default_factory=list)
    recent_transactions: list[Transaction] = Field(default_factory=list)


class ActiveInstallment(BaseModel):
    """An installment group that still has payments dated in the future."""
    model_config = RECORD_CONFIG

    group_id: str
    description: str
    total_installments: int
    remaining_count: int
    per_installment_amount: Decimal

    @property
    def remaining_amount(self) -> Decimal:
        return self.per_installment_amount * self.remaining_count


class AccountProjection(BaseModel):
    """Balance and obligations of one bank account at a reference date."""
    model_config = RECORD_CONFIG

    bank_id: str
    as_of: dt.date
    current_balance: Decimal
    current_month_expenses: Decimal
    active_installments: list[ActiveInstallment] = Field(default_factory=list)


# =============================================================================
# REMOTE SERVICE PAYLOADS
# =============================================================================

class ReceiptAnalysis(BaseModel):
    """
    Fields read from a receipt photo.

    CRITICAL: This is PROPOSED data. It only prefills the entry form;
    the user confirms before anything is saved.
    """
    model_config = RECORD_CONFIG

    merchant: Optional[str] = None
    amount: Optional[Decimal] = Field(default=None, ge=0)
    date: Optional[dt.date] = None
    category: Category = Category.OTHER
    type: TransactionType = TransactionType.EXPENSE


class ChatMessage(BaseModel):
    """One turn of the advisor conversation."""
    model_config = RECORD_CONFIG

    id: str = Field(default_factory=new_id)
    role: Literal["user", "model"]
    text: str
    timestamp: dt.datetime = Field(default_factory=dt.datetime.now)
