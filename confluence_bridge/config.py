import logging
import os
import sys
from typing import Optional

from dotenv import dotenv_values
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings


logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _env_or_dotenv(key: str, dotenv_path: str = ".env") -> Optional[str]:
    """Get a value from env var (if non-empty) or from .env file.

    Pydantic-settings prefers env vars over .env files. If the env var
    is set to an empty string, pydantic treats it as the actual value and
    ignores the .env file. This helper ensures that empty env vars fall
    through to the .env file value.
    """
    val = os.environ.get(key)
    if val:  # non-empty env var wins
        return val
    # Fall through to .env file
    return dotenv_values(dotenv_path).get(key) or None


class Settings(BaseSettings):
    """Bridge configuration, read once and passed explicitly to clients.

    Either ``confluence_personal_token`` (Bearer) or the pair
    ``confluence_api_mail`` + ``confluence_api_key`` (Basic) must be set
    before a client can be built.
    """

    # Confluence instance
    confluence_url: Optional[str] = None
    confluence_api_mail: Optional[str] = None
    confluence_api_key: Optional[str] = None
    confluence_personal_token: Optional[str] = None

    # HTTP
    request_timeout: float = 30.0

    # Logging
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "frozen": True,
    }

    @field_validator("confluence_url")
    @classmethod
    def _strip_trailing_slash(cls, v: Optional[str]) -> Optional[str]:
        return v.rstrip("/") if v else v

    @model_validator(mode="after")
    def _resolve_empty_env_vars(self) -> "Settings":
        """Fix empty env vars overriding .env file values."""
        optional_keys = [
            "confluence_url",
            "confluence_api_mail",
            "confluence_api_key",
            "confluence_personal_token",
        ]
        for key in optional_keys:
            if not getattr(self, key):
                val = _env_or_dotenv(key.upper())
                if val:
                    if key == "confluence_url":
                        val = val.rstrip("/")
                    object.__setattr__(self, key, val)
        return self

    @property
    def api_base_url(self) -> str:
        """REST API root, e.g. ``https://wiki.example.com/rest/api``."""
        return f"{self.confluence_url}/rest/api"


def load_settings(**overrides) -> Settings:
    """Build a fresh ``Settings`` from the environment, applying ``overrides``."""
    return Settings(**overrides)


def configure_logging(settings: Settings) -> None:
    """Send bridge logs to stderr at ``settings.log_level``.

    stdout is reserved for the tool transport.
    """
    level = settings.log_level.upper()
    root = logging.getLogger("confluence_bridge")
    root.setLevel(level)
    if not any(getattr(h, "_confluence_bridge", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._confluence_bridge = True
        root.addHandler(handler)
    logger.debug(f"Logging configured at {level}")
