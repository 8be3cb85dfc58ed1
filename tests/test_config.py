"""Tests for Settings loading and logging setup."""

import logging

import pytest
from pydantic import ValidationError

from confluence_bridge.config import Settings, configure_logging, load_settings
from tests.conftest import BASE_URL, TEST_TOKEN, make_settings


class TestSettings:
    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("CONFLUENCE_URL", BASE_URL)
        monkeypatch.setenv("CONFLUENCE_PERSONAL_TOKEN", TEST_TOKEN)
        s = load_settings()
        assert s.confluence_url == BASE_URL
        assert s.confluence_personal_token == TEST_TOKEN
        assert s.confluence_api_mail is None

    def test_defaults(self):
        s = Settings(_env_file=None)
        assert s.confluence_url is None
        assert s.request_timeout == 30.0
        assert s.log_level == "INFO"

    def test_trailing_slash_stripped(self):
        s = Settings(_env_file=None, confluence_url=f"{BASE_URL}/")
        assert s.confluence_url == BASE_URL
        assert s.api_base_url == f"{BASE_URL}/rest/api"

    def test_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text(
            f"CONFLUENCE_URL={BASE_URL}\nCONFLUENCE_API_MAIL=bot@example.com\n"
        )
        s = load_settings()
        assert s.confluence_url == BASE_URL
        assert s.confluence_api_mail == "bot@example.com"

    def test_empty_env_var_falls_through_to_dotenv(self, monkeypatch, tmp_path):
        (tmp_path / ".env").write_text(f"CONFLUENCE_PERSONAL_TOKEN={TEST_TOKEN}\n")
        monkeypatch.setenv("CONFLUENCE_PERSONAL_TOKEN", "")
        s = load_settings()
        assert s.confluence_personal_token == TEST_TOKEN

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("REQUEST_TIMEOUT", "5")
        assert load_settings().request_timeout == 5.0
        assert load_settings(request_timeout=2.5).request_timeout == 2.5

    def test_settings_are_frozen(self):
        s = Settings(_env_file=None, confluence_url=BASE_URL)
        with pytest.raises(ValidationError):
            s.confluence_url = "https://other.example.com"


class TestConfigureLogging:
    def test_installs_single_handler(self):
        logger = logging.getLogger("confluence_bridge")
        before = list(logger.handlers)
        try:
            configure_logging(make_settings(log_level="debug"))
            configure_logging(make_settings(log_level="debug"))
            added = [h for h in logger.handlers if h not in before]
            assert len(added) == 1
            assert logger.level == logging.DEBUG
        finally:
            for h in logger.handlers[:]:
                if h not in before:
                    logger.removeHandler(h)
            logger.setLevel(logging.NOTSET)

    def test_level_comes_from_environment(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "warning")
        logger = logging.getLogger("confluence_bridge")
        before = list(logger.handlers)
        try:
            configure_logging(load_settings())
            assert logger.level == logging.WARNING
        finally:
            for h in logger.handlers[:]:
                if h not in before:
                    logger.removeHandler(h)
            logger.setLevel(logging.NOTSET)
