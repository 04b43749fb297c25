"""
Unit tests for configuration loading.
"""

from formsentry.config import DEFAULT_BASE_URL, SentryConfig


class TestSentryConfig:
    """Test defaults and environment overrides."""

    def test_defaults(self):
        config = SentryConfig()

        assert config.base_url == DEFAULT_BASE_URL
        assert config.submit_budget_s == 8.0
        assert config.validation_keywords == ("required", "invalid", "please")
        assert config.dutch_labels == ("Dutch", "Nederlands")

    def test_from_env_types(self, monkeypatch):
        """Test values are parsed according to the field's default type."""
        monkeypatch.setenv("FORMSENTRY_HEADLESS", "true")
        monkeypatch.setenv("FORMSENTRY_VIEWPORT_WIDTH", "1280")
        monkeypatch.setenv("FORMSENTRY_SUBMIT_BUDGET_S", "12.5")
        monkeypatch.setenv("FORMSENTRY_DUTCH_LABELS", "Dutch, Nederlands ,Vlaams")
        monkeypatch.setenv("FORMSENTRY_CATALOG_PATH", "catalog.json")

        config = SentryConfig.from_env()

        assert config.headless is True
        assert config.viewport_width == 1280
        assert config.submit_budget_s == 12.5
        assert config.dutch_labels == ("Dutch", "Nederlands", "Vlaams")
        assert config.catalog_path == "catalog.json"

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("FORMSENTRY_BASE_URL", "http://env.test")
        monkeypatch.setenv("FORMSENTRY_REPORT_DIR", "env-reports")

        config = SentryConfig.from_env(base_url="http://cli.test", report_dir=None)

        assert config.base_url == "http://cli.test"
        assert config.report_dir == "env-reports"

    def test_false_values(self, monkeypatch):
        monkeypatch.setenv("FORMSENTRY_SCREENSHOT_ON_FAILURE", "no")

        assert SentryConfig.from_env().screenshot_on_failure is False
