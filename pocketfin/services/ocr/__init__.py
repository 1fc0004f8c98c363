"""OCR services package."""

from pocketfin.services.ocr.gemini_receipts import (
    AnalysisError,
    GeminiReceiptAnalyzer,
    parse_receipt_response,
)

__all__ = [
    "AnalysisError",
    "GeminiReceiptAnalyzer",
    "parse_receipt_response",
]
