"""Tests for credential resolution precedence."""

import base64

import pytest

from confluence_bridge.exceptions import ConfigurationError
from confluence_bridge.services.confluence.auth import (
    Credential,
    basic,
    bearer,
    resolve_credential,
)
from tests.conftest import TEST_API_KEY, TEST_MAIL, TEST_TOKEN, make_settings


class TestResolveCredential:
    def test_token_only_gives_bearer(self):
        cred = resolve_credential(make_settings())
        assert cred == Credential(scheme="Bearer", value=TEST_TOKEN)
        assert cred.header == f"Bearer {TEST_TOKEN}"

    def test_mail_and_key_give_basic(self):
        cred = resolve_credential(
            make_settings(
                confluence_personal_token=None,
                confluence_api_mail=TEST_MAIL,
                confluence_api_key=TEST_API_KEY,
            )
        )
        assert cred.scheme == "Basic"
        assert base64.b64decode(cred.value).decode() == f"{TEST_MAIL}:{TEST_API_KEY}"

    def test_token_wins_over_basic(self):
        cred = resolve_credential(
            make_settings(confluence_api_mail=TEST_MAIL, confluence_api_key=TEST_API_KEY)
        )
        assert cred.scheme == "Bearer"

    def test_nothing_configured_raises(self):
        with pytest.raises(ConfigurationError) as exc_info:
            resolve_credential(make_settings(confluence_personal_token=None))
        message = str(exc_info.value)
        assert "CONFLUENCE_PERSONAL_TOKEN" in message
        assert "CONFLUENCE_API_MAIL" in message and "CONFLUENCE_API_KEY" in message

    @pytest.mark.parametrize(
        "partial",
        [{"confluence_api_mail": TEST_MAIL}, {"confluence_api_key": TEST_API_KEY}],
    )
    def test_partial_basic_raises(self, partial):
        with pytest.raises(ConfigurationError):
            resolve_credential(make_settings(confluence_personal_token=None, **partial))

    def test_empty_token_counts_as_missing(self):
        cred = resolve_credential(
            make_settings(
                confluence_personal_token="",
                confluence_api_mail=TEST_MAIL,
                confluence_api_key=TEST_API_KEY,
            )
        )
        assert cred.scheme == "Basic"

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            resolve_credential(make_settings(confluence_personal_token=None))


class TestCredential:
    def test_basic_encoding(self):
        assert basic("a", "b").header == "Basic YTpi"

    def test_bearer_header(self):
        assert bearer("t").header == "Bearer t"

    def test_repr_hides_secret(self):
        assert TEST_TOKEN not in repr(bearer(TEST_TOKEN))
