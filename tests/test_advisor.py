"""Tests for the financial advisor."""

import json

import pytest

from conftest import FakeModel, make_transaction
from pocketfin.agents import AdvisorError, FinancialAdvisor
from pocketfin.agents.advisor import FALLBACK_ANSWER, build_context
from pocketfin.models import Category, TransactionType


class TestBuildContext:
    """Tests for the transaction context sent to the model."""

    def test_context_fields(self):
        transaction = make_transaction(
            date="2024-05-10",
            amount="124.50",
            merchant="Supermercado Silva",
            category=Category.FOOD,
        )
        [entry] = json.loads(build_context([transaction], window=50))
        assert entry == {
            "date": "2024-05-10",
            "merchant": "Supermercado Silva",
            "amount": 124.5,
            "category": "Food",
            "type": "expense",
        }

    def test_context_capped_at_window(self):
        transactions = [make_transaction(id=f"t{i}", merchant=f"M{i}") for i in range(60)]
        entries = json.loads(build_context(transactions, window=50))
        assert len(entries) == 50
        # Newest first: the head of the ledger is what gets sent
        assert entries[0]["merchant"] == "M0"
        assert entries[-1]["merchant"] == "M49"

    def test_empty_ledger(self):
        assert json.loads(build_context([], window=50)) == []


class TestFinancialAdvisor:
    """Tests for FinancialAdvisor with a fake model."""

    @pytest.mark.asyncio
    async def test_answer_returned(self):
        model = FakeModel(text="  Cut back on food delivery.  ")
        advisor = FinancialAdvisor(model=model)
        transactions = [make_transaction(type=TransactionType.INCOME, category=Category.SALARY)]

        answer = await advisor.ask("How am I doing?", transactions)

        assert answer == "Cut back on food delivery."
        [prompt] = model.calls
        assert "How am I doing?" in prompt
        assert '"Salary"' in prompt

    @pytest.mark.asyncio
    async def test_default_window_from_settings(self):
        advisor = FinancialAdvisor(model=FakeModel(text="ok"))
        assert advisor.context_window == 50

    @pytest.mark.asyncio
    async def test_window_limits_prompt(self):
        model = FakeModel(text="ok")
        transactions = [make_transaction(merchant=f"Shop{i:03d}") for i in range(10)]
        await FinancialAdvisor(model=model, context_window=3).ask("Where?", transactions)
        [prompt] = model.calls
        assert "Shop002" in prompt
        assert "Shop003" not in prompt

    @pytest.mark.asyncio
    async def test_empty_answer_falls_back(self):
        answer = await FinancialAdvisor(model=FakeModel(text="")).ask("Hi", [])
        assert answer == FALLBACK_ANSWER

    @pytest.mark.asyncio
    async def test_blank_question_rejected(self):
        model = FakeModel(text="ok")
        with pytest.raises(AdvisorError):
            await FinancialAdvisor(model=model).ask("   ", [])
        assert model.calls == []

    @pytest.mark.asyncio
    async def test_remote_failure_raises(self):
        model = FakeModel(error=ConnectionError("network down"))
        with pytest.raises(AdvisorError, match="network down"):
            await FinancialAdvisor(model=model).ask("Hi", [make_transaction()])
