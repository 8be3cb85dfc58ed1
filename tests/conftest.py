"""Test configuration and fixtures."""
import pytest

from confluence_bridge.config import Settings
from confluence_bridge.services.confluence.client import ConfluenceClient
from confluence_bridge.services.tools import ToolContext

# ---------------------------------------------------------------------------
# Constants (shared with tests)
# ---------------------------------------------------------------------------
BASE_URL = "https://wiki.example.com"
API_BASE = f"{BASE_URL}/rest/api"
TEST_TOKEN = "pat-test-token"
TEST_MAIL = "bot@example.com"
TEST_API_KEY = "api-key-123"

CONFLUENCE_ENV_VARS = (
    "CONFLUENCE_URL",
    "CONFLUENCE_API_MAIL",
    "CONFLUENCE_API_KEY",
    "CONFLUENCE_PERSONAL_TOKEN",
    "REQUEST_TIMEOUT",
    "LOG_LEVEL",
)


def make_settings(**overrides) -> Settings:
    values = {"confluence_url": BASE_URL, "confluence_personal_token": TEST_TOKEN}
    values.update(overrides)
    return Settings(_env_file=None, **values)


def page_payload(page_id="123", version=3, body="<p>Hello</p>", **extra):
    """A ``GET /content/{id}`` response as Confluence returns it."""
    payload = {
        "id": page_id,
        "type": "page",
        "status": "current",
        "title": "Team Roster",
        "space": {"key": "ENG", "name": "Engineering", "id": 42},
        "version": {
            "number": version,
            "when": "2024-05-01T10:00:00.000Z",
            "by": {"displayName": "Ann Lee", "username": "alee"},
        },
        "body": {"storage": {"value": body, "representation": "storage"}},
        "_links": {"webui": f"/spaces/ENG/pages/{page_id}"},
    }
    payload.update(extra)
    return payload


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """No real credentials or .env file may leak into a test."""
    for var in CONFLUENCE_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# Settings / client fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def basic_settings():
    return make_settings(
        confluence_personal_token=None,
        confluence_api_mail=TEST_MAIL,
        confluence_api_key=TEST_API_KEY,
    )


@pytest.fixture
async def confluence_client(settings):
    """Async ConfluenceClient wired with a test personal token."""
    async with ConfluenceClient(settings) as client:
        yield client


@pytest.fixture
def tool_ctx(settings):
    return ToolContext(settings=settings)
