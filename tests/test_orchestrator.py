"""End-to-end tests for the application flows."""

import datetime as dt
from decimal import Decimal

import pytest
from pydantic import ValidationError

from conftest import FakeModel
from pocketfin.agents import FinancialAdvisor
from pocketfin.config import StorageBackend
from pocketfin.models import Category, InstallmentPlan, TransactionType
from pocketfin.orchestrator import (
    AdvisorError,
    AdvisorFlow,
    AnalysisError,
    LedgerService,
    ReceiptScanFlow,
    create_app_components,
)
from pocketfin.services.ocr import GeminiReceiptAnalyzer
from pocketfin.services.storage import Collection, InMemoryLedgerStore, JsonFileLedgerStore
from pocketfin.validation import LedgerValidationError


@pytest.fixture
def ledger(empty_store):
    return LedgerService(empty_store)


def purchase(**overrides):
    fields = dict(
        start_date=dt.date(2024, 1, 31),
        merchant_base="Geladeira",
        installment_count=3,
        per_installment_amount=Decimal("100.00"),
        category=Category.HOUSING,
        bank_id="bank_1",
    )
    fields.update(overrides)
    return InstallmentPlan(**fields)


class TestLedgerService:
    """Tests for LedgerService."""

    @pytest.mark.asyncio
    async def test_add_transaction(self, ledger):
        updated, result = await ledger.add_transaction(
            merchant="Padaria",
            amount=Decimal("12.50"),
            date=dt.date(2024, 5, 10),
            type=TransactionType.EXPENSE,
            category=Category.FOOD,
            bank_id="bank_1",
            today=dt.date(2024, 5, 10),
        )
        assert len(updated) == 1
        assert updated[0].merchant == "Padaria"
        assert updated[0].installment is None
        assert await ledger.list_transactions() == updated

    @pytest.mark.asyncio
    async def test_warnings_returned_to_caller(self, ledger):
        updated, result = await ledger.add_transaction(
            merchant="Concessionária",
            amount=Decimal("99999999.00"),
            date=dt.date(2030, 1, 1),
            type=TransactionType.EXPENSE,
            category=Category.SHOPPING,
            bank_id="bank_1",
            today=dt.date(2024, 1, 1),
        )
        assert result.is_valid
        assert len(result.warnings) == 2
        assert [issue.field for issue in result.issues] == ["amount", "date"]
        # Warnings never block the save
        assert updated[0].amount == Decimal("99999999.00")
        assert await ledger.list_transactions() == updated

    @pytest.mark.asyncio
    async def test_plan_total_mismatch_returned(self, ledger):
        updated, result = await ledger.add_installment_purchase(
            purchase(total_amount=Decimal("450.00"))
        )
        assert len(updated) == 3
        assert [issue.issue_type for issue in result.issues] == ["inconsistent"]

    @pytest.mark.asyncio
    async def test_clean_plan_has_no_warnings(self, ledger):
        _, result = await ledger.add_installment_purchase(purchase(total_amount=Decimal("300.00")))
        assert result.issues == []

    @pytest.mark.asyncio
    async def test_unknown_bank_leaves_store_untouched(self, ledger):
        with pytest.raises(LedgerValidationError):
            await ledger.add_transaction(
                merchant="Padaria",
                amount=Decimal("12.50"),
                date=dt.date(2024, 5, 10),
                type=TransactionType.EXPENSE,
                category=Category.FOOD,
                bank_id="bank_404",
            )
        assert await ledger.list_transactions() == []

    @pytest.mark.asyncio
    async def test_malformed_amount_rejected(self, ledger):
        with pytest.raises(ValidationError):
            await ledger.add_transaction(
                merchant="Padaria",
                amount=Decimal("0"),
                date=dt.date(2024, 5, 10),
                type=TransactionType.EXPENSE,
                category=Category.FOOD,
                bank_id="bank_1",
            )
        assert await ledger.list_transactions() == []

    @pytest.mark.asyncio
    async def test_installment_purchase_stored_in_order(self, ledger):
        updated, result = await ledger.add_installment_purchase(purchase())

        assert [t.merchant for t in updated] == [
            "Geladeira (1/3)",
            "Geladeira (2/3)",
            "Geladeira (3/3)",
        ]
        assert [t.date for t in updated] == [
            dt.date(2024, 1, 31),
            dt.date(2024, 2, 29),
            dt.date(2024, 3, 31),
        ]

    @pytest.mark.asyncio
    async def test_installment_plan_unknown_bank(self, ledger):
        with pytest.raises(LedgerValidationError):
            await ledger.add_installment_purchase(purchase(bank_id="bank_404"))
        assert await ledger.list_transactions() == []

    @pytest.mark.asyncio
    async def test_delete_restores_stats(self, ledger):
        await ledger.add_installment_purchase(purchase())
        before = await ledger.financial_stats()

        updated, _ = await ledger.add_transaction(
            merchant="Cinema",
            amount=Decimal("40.00"),
            date=dt.date(2024, 3, 1),
            type=TransactionType.EXPENSE,
            category=Category.ENTERTAINMENT,
            bank_id="bank_2",
            today=dt.date(2024, 3, 1),
        )
        await ledger.delete_transaction(updated[0].id)

        assert await ledger.financial_stats() == before

    @pytest.mark.asyncio
    async def test_deleting_member_keeps_siblings(self, ledger):
        members, _ = await ledger.add_installment_purchase(purchase())
        updated = await ledger.delete_transaction(members[1].id)
        assert [t.installment.current for t in updated] == [1, 3]

    @pytest.mark.asyncio
    async def test_delete_unknown_id(self, ledger):
        await ledger.add_installment_purchase(purchase())
        assert len(await ledger.delete_transaction("missing")) == 3

    @pytest.mark.asyncio
    async def test_add_bank_account(self, ledger):
        updated = await ledger.add_bank_account("Inter", color="#ff7a00", initial_balance=Decimal("10.00"))
        assert [a.name for a in updated] == ["Nubank", "Neon", "Inter"]
        assert updated[-1].id not in {"bank_1", "bank_2"}

    @pytest.mark.asyncio
    async def test_account_projections(self, ledger):
        await ledger.add_installment_purchase(purchase())
        projections = await ledger.account_projections(dt.date(2024, 2, 15))

        nubank, projection = projections[0]
        assert nubank.id == "bank_1"
        assert projection.current_balance == Decimal("900.00")
        assert projection.current_month_expenses == Decimal("100.00")
        assert projection.active_installments[0].description == "Geladeira"
        assert projection.active_installments[0].remaining_count == 2

    @pytest.mark.asyncio
    async def test_stats_on_seeded_store(self):
        stats = await LedgerService(InMemoryLedgerStore()).financial_stats()
        assert stats.total_income == Decimal("3500.00")
        assert stats.total_expenses == Decimal("427.88")
        assert stats.net_worth == Decimal("3072.12")
        assert stats.expenses_by_category[0].category == Category.FOOD


class TestReceiptScanFlow:
    """Tests for ReceiptScanFlow."""

    @pytest.mark.asyncio
    async def test_scan_returns_proposal_only(self, ledger):
        model = FakeModel(text='{"merchant": "Posto Shell", "amount": 45, "category": "Transport"}')
        flow = ReceiptScanFlow(analyzer=GeminiReceiptAnalyzer(model=model))

        analysis = await flow.scan(b"image", filename="receipt.jpg")

        assert analysis.merchant == "Posto Shell"
        assert analysis.amount == Decimal("45.00")
        assert await ledger.list_transactions() == []

    @pytest.mark.asyncio
    async def test_failed_scan_leaves_ledger(self, ledger):
        flow = ReceiptScanFlow(
            analyzer=GeminiReceiptAnalyzer(model=FakeModel(error=TimeoutError("slow")))
        )
        with pytest.raises(AnalysisError):
            await flow.scan(b"image", filename="receipt.png", mime_type="image/png")
        assert await ledger.list_transactions() == []

    def test_unsupported_extension(self):
        flow = ReceiptScanFlow(analyzer=GeminiReceiptAnalyzer(model=FakeModel()))
        with pytest.raises(AnalysisError, match="Unsupported"):
            flow.check_upload("receipt.pdf", 100)
        with pytest.raises(AnalysisError):
            flow.check_upload("receipt", 100)

    def test_oversized_upload(self):
        flow = ReceiptScanFlow(analyzer=GeminiReceiptAnalyzer(model=FakeModel()))
        with pytest.raises(AnalysisError, match="larger"):
            flow.check_upload("receipt.JPG", 11 * 1024 * 1024)
        flow.check_upload("receipt.JPG", 1024)


class TestAdvisorFlow:
    """Tests for AdvisorFlow."""

    @pytest.mark.asyncio
    async def test_ask_uses_ledger(self, ledger):
        await ledger.add_installment_purchase(purchase())
        model = FakeModel(text="Your fridge is almost paid off.")
        flow = AdvisorFlow(ledger, advisor=FinancialAdvisor(model=model))

        assert await flow.ask("Any tips?") == "Your fridge is almost paid off."
        assert "Geladeira (3/3)" in model.calls[0]

    @pytest.mark.asyncio
    async def test_failed_ask_leaves_ledger(self, ledger):
        flow = AdvisorFlow(ledger, advisor=FinancialAdvisor(model=FakeModel(error=RuntimeError("500"))))
        with pytest.raises(AdvisorError):
            await flow.ask("Any tips?")
        assert await ledger.list_transactions() == []


class TestCreateAppComponents:
    """Tests for the component factory."""

    def test_without_ai(self):
        ledger, receipt_flow, advisor_flow = create_app_components(
            backend=StorageBackend.MEMORY, use_ai=False
        )
        assert isinstance(ledger, LedgerService)
        assert receipt_flow is None
        assert advisor_flow is None

    def test_missing_api_key_disables_ai(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        _, receipt_flow, advisor_flow = create_app_components(backend=StorageBackend.MEMORY)
        assert receipt_flow is None
        assert advisor_flow is None

    @pytest.mark.asyncio
    async def test_json_backend_from_environment(self, monkeypatch, tmp_path):
        path = tmp_path / "ledger.json"
        monkeypatch.setenv("LEDGER_BACKEND", "json")
        monkeypatch.setenv("LEDGER_DATA_PATH", str(path))

        ledger, _, _ = create_app_components(use_ai=False)
        await ledger.list_bank_accounts()

        assert isinstance(ledger._store, JsonFileLedgerStore)
        assert path.exists()
        assert "pocketfin_bankAccounts" in path.read_text(encoding="utf-8")
