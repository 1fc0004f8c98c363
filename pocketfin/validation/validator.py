"""
Ledger Entry Validation

DESIGN DECISION: Structural rules (positive amounts, known categories,
at least two installments) live on the pydantic models, so a malformed
record cannot even be built. This module adds the checks that need
context the model does not have:

- Does the bank account exist?
- Is the amount plausible?
- Is a one-off transaction dated suspiciously far ahead?
- Does an installment plan's total match count x per-installment value?

Errors block the write. Warnings are shown to the user and never block.

IMPORTANT: Validation NEVER silently fixes anything.
It reports issues for the caller to act on.
"""

import datetime as dt
from collections.abc import Iterable
from decimal import Decimal
from typing import Optional

from pocketfin.config import AppSettings, get_settings
from pocketfin.models.ledger import InstallmentPlan, Transaction
from pocketfin.models.validation import ValidationIssue, ValidationResult


class LedgerValidationError(ValueError):
    """A ledger entry failed validation. The result holds every issue."""

    def __init__(self, result: ValidationResult):
        self.result = result
        messages = "; ".join(
            issue.message for issue in result.issues if issue.severity == "error"
        )
        super().__init__(messages or "Validation failed")


class TransactionValidator:
    """Validates new transactions and installment plans against the ledger."""

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    def _check_bank(self, bank_id: str, bank_ids: Iterable[str]) -> list[ValidationIssue]:
        if bank_id in set(bank_ids):
            return []
        return [ValidationIssue(
            field="bank_id",
            issue_type="unknown_bank",
            message=f"Bank account '{bank_id}' does not exist",
            severity="error",
            suggested_fix="Pick one of your bank accounts or create it first",
        )]

    def _check_amount(self, field: str, amount: Decimal) -> list[ValidationIssue]:
        max_amount = Decimal(str(self._settings.max_transaction_amount))
        if amount <= max_amount:
            return []
        return [ValidationIssue(
            field=field,
            issue_type="suspicious_value",
            message=f"Amount ({amount:,.2f}) seems unusually high",
            severity="warning",
            suggested_fix="Please verify this amount is correct",
        )]

    def validate_transaction(
        self,
        transaction: Transaction,
        bank_ids: Iterable[str],
        today: Optional[dt.date] = None,
    ) -> ValidationResult:
        """Check a single (non-installment) transaction before it is saved."""
        today = today or dt.date.today()
        issues = self._check_bank(transaction.bank_id, bank_ids)
        issues += self._check_amount("amount", transaction.amount)

        # Future date check (with tolerance)
        max_future_date = today + dt.timedelta(days=self._settings.future_date_tolerance_days)
        if transaction.installment is None and transaction.date > max_future_date:
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Date ({transaction.date}) is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            ))

        return ValidationResult(issues=issues)

    def validate_plan(
        self,
        plan: InstallmentPlan,
        bank_ids: Iterable[str],
    ) -> ValidationResult:
        """Check an installment plan before it is expanded."""
        issues = self._check_bank(plan.bank_id, bank_ids)
        issues += self._check_amount("per_installment_amount", plan.per_installment_amount)

        if plan.total_amount is not None:
            expected = plan.per_installment_amount * plan.installment_count
            # One cent of rounding per installment is tolerated
            tolerance = Decimal("0.01") * plan.installment_count
            if abs(plan.total_amount - expected) > tolerance:
                issues.append(ValidationIssue(
                    field="total_amount",
                    issue_type="inconsistent",
                    message=(
                        f"Total ({plan.total_amount:,.2f}) does not match "
                        f"{plan.installment_count} x {plan.per_installment_amount:,.2f}"
                    ),
                    severity="warning",
                    suggested_fix="Installments are saved with the per-installment value",
                ))

        return ValidationResult(issues=issues)

    @staticmethod
    def ensure_valid(result: ValidationResult) -> ValidationResult:
        """Raise LedgerValidationError if the result has errors."""
        if result.has_errors:
            raise LedgerValidationError(result)
        return result

    @staticmethod
    def get_user_friendly_summary(result: ValidationResult) -> str:
        """One line per issue, errors first, for display."""
        if not result.issues:
            return "All details look good."
        ordered = sorted(result.issues, key=lambda issue: issue.severity != "error")
        lines = []
        for issue in ordered:
            prefix = "Error" if issue.severity == "error" else "Check"
            line = f"{prefix}: {issue.message}"
            if issue.suggested_fix:
                line += f" ({issue.suggested_fix})"
            lines.append(line)
        return "\n".join(lines)
