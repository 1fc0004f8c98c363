"""
Financial Advisor Agent

DESIGN DECISION: The advisor answers free-text questions about the
user's money using Gemini, grounded on a window of recent transactions.

CRITICAL BOUNDARIES:
- CAN: Read the most recent transactions it is given (capped)
- CAN: Suggest, explain, encourage
- CANNOT: Change the ledger in any way
- MUST: Surface remote failures as AdvisorError so the UI can say so

The context window is capped (default 50 records) to keep the request
payload bounded no matter how large the ledger grows.
"""

import json
from collections.abc import Sequence
from typing import Any, Optional

import google.generativeai as genai

from pocketfin.config import get_settings
from pocketfin.log import get_logger
from pocketfin.models.ledger import Transaction


class AdvisorError(Exception):
    """The advisor could not produce an answer."""
    pass


SYSTEM_INSTRUCTION = (
    "You are a helpful personal finance assistant. "
    "Be encouraging but realistic."
)

FALLBACK_ANSWER = "I couldn't come up with an answer right now."


def build_context(transactions: Sequence[Transaction], window: int) -> str:
    """JSON summary of the first `window` transactions (newest first)."""
    return json.dumps(
        [
            {
                "date": t.date.isoformat(),
                "merchant": t.merchant,
                "amount": float(t.amount),
                "category": t.category.value,
                "type": t.type.value,
            }
            for t in transactions[:window]
        ],
        ensure_ascii=False,
    )


def build_prompt(question: str, context: str) -> str:
    return f"""You are a personal financial advisor.
Here is a list of the user's recent transactions: {context}.

User question: "{question}"

Give a helpful, concise and actionable answer based on the data where relevant.
Use markdown for formatting."""


class FinancialAdvisor:
    """
    Chat advisor backed by Gemini.

    RESPONSIBILITIES:
    - Turn a question plus recent transactions into a prompt
    - Return the model's answer text

    BOUNDARIES:
    - NEVER mutates anything
    - NEVER sends more than `context_window` transactions
    """

    def __init__(
        self,
        model: Optional[Any] = None,
        context_window: Optional[int] = None,
    ):
        self._model = model or self._build_model()
        self._context_window = context_window or get_settings().app.advisor_context_window
        self._logger = get_logger(__name__)

    @staticmethod
    def _build_model():
        """Configure Google Generative AI."""
        settings = get_settings().gemini
        genai.configure(api_key=settings.api_key)
        return genai.GenerativeModel(
            model_name=settings.model_name,
            system_instruction=SYSTEM_INSTRUCTION,
            generation_config={
                "temperature": settings.temperature,
                "max_output_tokens": settings.max_tokens,
            },
        )

    @property
    def context_window(self) -> int:
        return self._context_window

    async def ask(self, question: str, transactions: Sequence[Transaction]) -> str:
        """
        Answer a question about the user's finances.

        Args:
            question: Free-text question
            transactions: Ledger in store order (newest first); only the
                first `context_window` are sent

        Raises:
            AdvisorError: If the question is blank or the remote call fails
        """
        question = question.strip()
        if not question:
            raise AdvisorError("Question is empty")

        context = build_context(transactions, self._context_window)
        prompt = build_prompt(question, context)

        try:
            response = await self._model.generate_content_async(prompt)
            answer = (response.text or "").strip()
        except Exception as e:
            self._logger.error("advisor_failed", error=str(e))
            raise AdvisorError(f"Advisor request failed: {e}") from e

        self._logger.info(
            "advisor_answered",
            context_size=min(len(transactions), self._context_window),
            answered=bool(answer),
        )
        return answer or FALLBACK_ANSWER
