"""Validation package."""

from pocketfin.validation.validator import LedgerValidationError, TransactionValidator

__all__ = ["LedgerValidationError", "TransactionValidator"]
