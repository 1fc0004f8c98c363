"""Tests for configuration loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from pocketfin.config import (
    AppSettings,
    GeminiSettings,
    StorageBackend,
    get_settings,
    validate_all_settings,
)


class TestSettings:
    """Tests for the pydantic-settings sections."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("LEDGER_BACKEND", raising=False)
        monkeypatch.delenv("LEDGER_DATA_PATH", raising=False)
        storage = get_settings().storage
        assert storage.backend is StorageBackend.JSON
        assert storage.data_path == Path("data/ledger.json")

        app = AppSettings()
        assert app.recent_transactions_limit == 10
        assert app.advisor_context_window == 50
        assert app.currency_symbol == "R$"

    def test_backend_from_environment(self, monkeypatch):
        monkeypatch.setenv("LEDGER_BACKEND", "memory")
        assert get_settings().storage.backend is StorageBackend.MEMORY

    def test_invalid_backend(self, monkeypatch):
        monkeypatch.setenv("LEDGER_BACKEND", "postgres")
        with pytest.raises(ValidationError):
            get_settings().storage

    def test_gemini_requires_api_key(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        with pytest.raises(ValidationError):
            GeminiSettings()

    def test_gemini_from_environment(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "test-key")
        monkeypatch.setenv("GEMINI_TEMPERATURE", "0.5")
        gemini = get_settings().gemini
        assert gemini.api_key == "test-key"
        assert gemini.temperature == 0.5
        assert gemini.model_name == "gemini-2.5-flash"

    def test_upload_helpers(self):
        app = AppSettings(supported_image_formats="JPG, png", max_upload_size_mb=2)
        assert app.supported_formats_list == ["jpg", "png"]
        assert app.max_upload_size_bytes == 2 * 1024 * 1024

    def test_settings_cached(self):
        assert get_settings() is get_settings()

    def test_validate_all_settings_reports_failures(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.delenv("GOOGLE_SHEETS_CREDENTIALS_PATH", raising=False)
        monkeypatch.delenv("GOOGLE_SHEETS_SPREADSHEET_ID", raising=False)
        results = validate_all_settings()
        assert results["storage"] is True
        assert results["app"] is True
        assert results["gemini"] is False
        assert "gemini_error" in results
        assert results["google_sheets"] is False
