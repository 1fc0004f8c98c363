"""
Receipt OCR using Gemini

DESIGN DECISION: A multimodal model reads the receipt photo directly and
answers in JSON. We ask for four fields only (merchant, amount, date,
category). Everything it returns is a PROPOSAL that prefills the entry
form; nothing is saved from here.

This service handles:
1. Sending the image bytes and the extraction prompt to Gemini
2. Parsing the JSON answer defensively
3. Mapping the free-text category onto our closed category set
4. Raising AnalysisError on any remote or parsing failure

CRITICAL: A failed analysis never touches the ledger. The caller only
gets an exception and keeps its state as it was.
"""

import datetime as dt
import json
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import google.generativeai as genai
from tenacity import retry, stop_after_attempt, wait_exponential

from pocketfin.config import get_settings
from pocketfin.log import get_logger
from pocketfin.models.ledger import Category, ReceiptAnalysis


class AnalysisError(Exception):
    """The receipt could not be analyzed (remote failure or unusable answer)."""
    pass


RECEIPT_PROMPT = """You are an OCR and bookkeeping specialist. Analyze this receipt image.
Extract the following information precisely:

1. merchant: the trading name of the store. Drop tax ids, addresses and codes.
2. amount: the total paid, as a number. Ignore currency symbols.
3. date: the transaction date, converted to ISO format YYYY-MM-DD.
4. category: classify the purchase as EXACTLY one of:
{categories}

Respond with ONLY a JSON object in this exact format:
{{"merchant": "Store name", "amount": 12.5, "date": "2024-01-31", "category": "Food"}}

Use null for any field you cannot read."""


DATE_FORMATS = ["%Y-%m-%d", "%d/%m/%Y", "%d-%m-%Y", "%Y/%m/%d"]


def _safe_decimal(value: Any) -> Optional[Decimal]:
    """Safely convert a model value to a 2-place Decimal."""
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, str):
            text = value.replace("R$", "").replace(" ", "").strip()
            # "1.234,56" and "12,50" are decimal-comma amounts
            if "," in text:
                text = text.replace(".", "").replace(",", ".")
            value = text
        amount = Decimal(str(value)).quantize(Decimal("0.01"))
    except (InvalidOperation, TypeError, ValueError):
        return None
    if amount < 0:
        return None
    return amount


def _safe_date(value: Any) -> Optional[dt.date]:
    """Safely convert a model value to a date."""
    if not isinstance(value, str):
        return None
    for fmt in DATE_FORMATS:
        try:
            return dt.datetime.strptime(value.strip(), fmt).date()
        except ValueError:
            continue
    return None


def parse_receipt_response(text: str) -> ReceiptAnalysis:
    """
    Parse the model's JSON answer into a ReceiptAnalysis.

    Raises:
        AnalysisError: If no JSON object can be read from the answer
    """
    start = text.find("{")
    end = text.rfind("}") + 1
    if start < 0 or end <= start:
        raise AnalysisError("Receipt analysis returned no JSON object")
    try:
        data = json.loads(text[start:end])
    except json.JSONDecodeError as e:
        raise AnalysisError(f"Receipt analysis returned invalid JSON: {e}")
    if not isinstance(data, dict):
        raise AnalysisError("Receipt analysis returned an unexpected payload")

    merchant = data.get("merchant")
    raw_category = data.get("category")
    if not isinstance(merchant, str) or not merchant.strip():
        merchant = None

    return ReceiptAnalysis(
        merchant=merchant,
        amount=_safe_decimal(data.get("amount")),
        date=_safe_date(data.get("date")),
        category=Category.match(raw_category if isinstance(raw_category, str) else None),
    )


class GeminiReceiptAnalyzer:
    """
    Receipt reader backed by a Gemini multimodal model.

    IMPORTANT BOUNDARIES:
    1. This service ONLY proposes field values
    2. It never validates against the ledger or saves anything
    3. Every failure surfaces as AnalysisError
    """

    def __init__(self, model: Optional[Any] = None):
        """
        Args:
            model: Object with an async `generate_content_async`, as
                returned by `genai.GenerativeModel`. Built from settings
                when omitted.
        """
        self._model = model or self._build_model()
        self._logger = get_logger(__name__)

    @staticmethod
    def _build_model():
        """Configure Google Generative AI."""
        settings = get_settings().gemini
        genai.configure(api_key=settings.api_key)
        return genai.GenerativeModel(
            model_name=settings.model_name,
            generation_config={
                "temperature": 0.1,  # Low temperature for consistency
                "max_output_tokens": 512,
                "response_mime_type": "application/json",
            },
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def _generate(self, contents: list) -> str:
        """One Gemini request, retried on transient failures."""
        response = await self._model.generate_content_async(contents)
        return (response.text or "").strip()

    async def analyze(self, image_bytes: bytes, mime_type: str = "image/jpeg") -> ReceiptAnalysis:
        """
        Read merchant, amount, date and category off a receipt photo.

        Raises:
            AnalysisError: If the remote call fails or its answer is unusable
        """
        if not image_bytes:
            raise AnalysisError("No image data to analyze")

        categories = "\n".join(f"   - {category.value}" for category in Category)
        prompt = RECEIPT_PROMPT.format(categories=categories)

        try:
            text = await self._generate(
                [{"mime_type": mime_type, "data": image_bytes}, prompt]
            )
        except Exception as e:
            self._logger.error("receipt_analysis_failed", error=str(e))
            raise AnalysisError(f"Receipt analysis failed: {e}") from e

        if not text:
            raise AnalysisError("Receipt analysis returned an empty answer")

        analysis = parse_receipt_response(text)
        self._logger.info(
            "receipt_analyzed",
            merchant=analysis.merchant,
            category=analysis.category.value,
            has_amount=analysis.amount is not None,
            has_date=analysis.date is not None,
        )
        return analysis
