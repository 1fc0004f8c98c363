"""
Main Orchestrator for PocketFin

This module ties together all the components and defines the
end-to-end flows for:
1. Ledger maintenance (add / expand / delete transactions, add accounts)
2. Derived views (statistics, per-account projections)
3. Receipt scanning (photo -> proposed fields, never saved here)
4. Advice (question + recent transactions -> answer)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing is written before validation passes
- Remote services never write to the store
- Derived views are recomputed from the full ledger on every call
"""

import datetime as dt
from decimal import Decimal
from typing import Optional, Union

from pocketfin.agents import AdvisorError, FinancialAdvisor
from pocketfin.config import StorageBackend, get_settings
from pocketfin.ledger import (
    compute_financial_stats,
    expand_installments,
    project_accounts,
)
from pocketfin.log import configure_logging, get_logger
from pocketfin.models.ledger import (
    AccountProjection,
    BankAccount,
    Category,
    FinancialStats,
    InstallmentPlan,
    ReceiptAnalysis,
    Transaction,
    TransactionType,
    new_id,
)
from pocketfin.models.validation import ValidationResult
from pocketfin.services.ocr import AnalysisError, GeminiReceiptAnalyzer
from pocketfin.services.storage import (
    Collection,
    GoogleSheetsLedgerStore,
    InMemoryLedgerStore,
    JsonFileLedgerStore,
    LedgerStoreInterface,
)
from pocketfin.validation import TransactionValidator


class LedgerService:
    """
    User operations over the ledger store.

    Every write is validated first; a LedgerValidationError leaves the
    store untouched. Store failures surface as StoreError.
    """

    def __init__(
        self,
        store: LedgerStoreInterface,
        validator: Optional[TransactionValidator] = None,
    ):
        self._store = store
        self._validator = validator or TransactionValidator()
        self._settings = get_settings().app
        self._logger = get_logger(__name__)

    async def list_transactions(self) -> list[Transaction]:
        """Full ledger, newest first."""
        return await self._store.load(Collection.TRANSACTIONS)

    async def list_bank_accounts(self) -> list[BankAccount]:
        return await self._store.load(Collection.BANK_ACCOUNTS)

    async def _bank_ids(self) -> list[str]:
        return [account.id for account in await self.list_bank_accounts()]

    async def add_transaction(
        self,
        merchant: str,
        amount: Decimal,
        date: dt.date,
        type: TransactionType,
        category: Category,
        bank_id: str,
        notes: Optional[str] = None,
        today: Optional[dt.date] = None,
    ) -> tuple[list[Transaction], ValidationResult]:
        """
        Record one transaction.

        Returns:
            (updated ledger newest first, validation result). The result
            holds only warnings here; show them to the user.

        Raises:
            LedgerValidationError: Unknown bank account
            pydantic.ValidationError: Malformed fields
        """
        transaction = Transaction(
            id=new_id(),
            date=date,
            merchant=merchant,
            amount=amount,
            type=type,
            category=category,
            bank_id=bank_id,
            notes=notes,
        )
        result = self._validator.validate_transaction(
            transaction, await self._bank_ids(), today=today
        )
        self._validator.ensure_valid(result)

        updated = await self._store.append(Collection.TRANSACTIONS, transaction)
        self._logger.info(
            "transaction_added",
            transaction_id=transaction.id,
            bank_id=bank_id,
            type=transaction.type.value,
            warnings=len(result.warnings),
        )
        return updated, result

    async def add_installment_purchase(
        self,
        plan: InstallmentPlan,
    ) -> tuple[list[Transaction], ValidationResult]:
        """
        Expand a parceled purchase and record every member.

        Members are stored in installment order at the head of the ledger.
        Returns the updated ledger and the (warnings-only) validation result.
        """
        result = self._validator.validate_plan(plan, await self._bank_ids())
        self._validator.ensure_valid(result)

        members = expand_installments(plan)
        updated = await self._store.append(Collection.TRANSACTIONS, members)
        self._logger.info(
            "installments_expanded",
            group_id=members[0].installment.id,
            count=len(members),
            bank_id=plan.bank_id,
            warnings=len(result.warnings),
        )
        return updated, result

    async def delete_transaction(self, transaction_id: str) -> list[Transaction]:
        """Remove one record. Siblings of an installment member are kept."""
        updated = await self._store.remove(Collection.TRANSACTIONS, transaction_id)
        self._logger.info("transaction_deleted", transaction_id=transaction_id)
        return updated

    async def add_bank_account(
        self,
        name: str,
        color: str = "#64748b",
        initial_balance: Decimal = Decimal("0"),
    ) -> list[BankAccount]:
        account = BankAccount(
            id=new_id(),
            name=name,
            color=color,
            initial_balance=initial_balance,
        )
        updated = await self._store.append(Collection.BANK_ACCOUNTS, account)
        self._logger.info("bank_account_added", bank_id=account.id, name=account.name)
        return updated

    async def financial_stats(self) -> FinancialStats:
        return compute_financial_stats(
            await self.list_transactions(),
            recent_limit=self._settings.recent_transactions_limit,
        )

    async def account_projections(
        self,
        as_of: Union[dt.date, dt.datetime],
    ) -> list[tuple[BankAccount, AccountProjection]]:
        return project_accounts(
            await self.list_bank_accounts(),
            await self.list_transactions(),
            as_of,
        )


class ReceiptScanFlow:
    """
    Orchestrates the receipt scan.

    Flow:
    1. Check the upload (size, format)
    2. Analyze with Gemini
    3. Hand the proposal back to the form (PAUSE - user confirms)

    Saving is a separate, explicit LedgerService call.
    """

    def __init__(self, analyzer: Optional[GeminiReceiptAnalyzer] = None):
        self._analyzer = analyzer or GeminiReceiptAnalyzer()
        self._settings = get_settings().app

    def check_upload(self, filename: str, size: int) -> None:
        """
        Raises:
            AnalysisError: If the file is too large or not a supported image
        """
        extension = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
        if extension not in self._settings.supported_formats_list:
            raise AnalysisError(
                f"Unsupported image format '{extension}'. "
                f"Allowed: {', '.join(self._settings.supported_formats_list)}"
            )
        if size > self._settings.max_upload_size_bytes:
            raise AnalysisError(
                f"Image is larger than {self._settings.max_upload_size_mb} MB"
            )

    async def scan(
        self,
        image_bytes: bytes,
        filename: str,
        mime_type: str = "image/jpeg",
    ) -> ReceiptAnalysis:
        self.check_upload(filename, len(image_bytes))
        return await self._analyzer.analyze(image_bytes, mime_type)


class AdvisorFlow:
    """Answers questions with the current ledger as context."""

    def __init__(
        self,
        ledger: LedgerService,
        advisor: Optional[FinancialAdvisor] = None,
    ):
        self._ledger = ledger
        self._advisor = advisor or FinancialAdvisor()

    async def ask(self, question: str) -> str:
        """
        Raises:
            AdvisorError: If the advisor cannot answer
        """
        transactions = await self._ledger.list_transactions()
        return await self._advisor.ask(question, transactions)


def create_store(backend: Optional[StorageBackend] = None) -> LedgerStoreInterface:
    """Build the ledger store selected by configuration."""
    storage_settings = get_settings().storage
    backend = backend or storage_settings.backend

    if backend is StorageBackend.MEMORY:
        return InMemoryLedgerStore()
    if backend is StorageBackend.SHEETS:
        return GoogleSheetsLedgerStore()
    return JsonFileLedgerStore(storage_settings.data_path)


def create_app_components(
    backend: Optional[StorageBackend] = None,
    use_ai: bool = True,
) -> tuple[LedgerService, Optional[ReceiptScanFlow], Optional[AdvisorFlow]]:
    """
    Factory function to create all application components.

    Args:
        backend: Storage backend override (defaults to configuration).
        use_ai: Whether to build the Gemini-backed flows. Set to False
            when no API key is configured; the ledger still works.

    Returns:
        (ledger_service, receipt_flow, advisor_flow)
    """
    configure_logging()
    logger = get_logger(__name__)

    ledger = LedgerService(create_store(backend))

    receipt_flow = None
    advisor_flow = None
    if use_ai:
        try:
            receipt_flow = ReceiptScanFlow()
            advisor_flow = AdvisorFlow(ledger)
        except Exception as e:
            # Gemini not configured - continue without AI features
            logger.warning("ai_features_disabled", error=str(e))
            receipt_flow = None
            advisor_flow = None

    return ledger, receipt_flow, advisor_flow


__all__ = [
    "AdvisorError",
    "AdvisorFlow",
    "AnalysisError",
    "LedgerService",
    "ReceiptScanFlow",
    "create_app_components",
    "create_store",
]
