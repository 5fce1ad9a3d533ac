# cricket_collector/config/config.py

import os
import socket
import threading
from collections.abc import Callable, Mapping

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_API_URL = "http://localhost:3002"
DEFAULT_COLLECT_INTERVAL = 60
# Longest wait the platform timer accepts
MAX_COLLECT_INTERVAL = int(threading.TIMEOUT_MAX)

_TRUE_VALUES = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_VALUES = {"0", "f", "F", "FALSE", "false", "False"}


class ConfigError(Exception):
    """Raised when the collector cannot be configured and must not start."""


class Settings(BaseModel):
    """Immutable collector settings, resolved once at startup."""
    model_config = ConfigDict(frozen=True)

    api_base_url: str = Field(min_length=1)
    api_key: str = Field(min_length=1, repr=False)
    server_name: str = Field(min_length=1)
    collect_interval: int = Field(default=DEFAULT_COLLECT_INTERVAL, gt=0)
    debug: bool = False

    @property
    def ingest_url(self) -> str:
        return f"{self.api_base_url}/api/metrics/ingest"


def _get_env(environ: Mapping[str, str], key: str, default: str = "") -> str:
    # Empty values count as unset
    value = environ.get(key, "")
    return value if value else default


def _get_env_int(
    environ: Mapping[str, str], key: str, default: int, maximum: int | None = None
) -> int:
    value = environ.get(key, "")
    if not value:
        return default
    try:
        parsed = int(value.strip(), 10)
    except ValueError:
        return default
    if parsed <= 0 or (maximum is not None and parsed > maximum):
        return default
    return parsed


def _get_env_bool(environ: Mapping[str, str], key: str, default: bool) -> bool:
    value = environ.get(key, "")
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    return default


def resolve(
    environ: Mapping[str, str] | None = None,
    hostname: Callable[[], str] | None = None,
) -> Settings:
    """
    Resolves collector settings from the environment.

    When no mapping is given, an optional .env file in the working
    directory is loaded first; variables already set in the process
    environment take precedence over it.

    Raises:
        ConfigError: if CRICKET_API_KEY is missing or the server name
            cannot be determined.
    """
    if environ is None:
        load_dotenv(find_dotenv(usecwd=True))
        environ = os.environ
    if hostname is None:
        hostname = socket.gethostname

    api_key = _get_env(environ, "CRICKET_API_KEY")
    if not api_key:
        raise ConfigError("CRICKET_API_KEY environment variable is required")

    server_name = _get_env(environ, "CRICKET_SERVER_NAME")
    if not server_name:
        try:
            server_name = hostname()
        except OSError as e:
            raise ConfigError(
                f"Failed to get hostname and CRICKET_SERVER_NAME not set: {e}"
            ) from e
        if not server_name:
            raise ConfigError(
                "Failed to get hostname and CRICKET_SERVER_NAME not set"
            )

    api_base_url = _get_env(environ, "CRICKET_API_URL", DEFAULT_API_URL).rstrip("/")
    if not api_base_url:
        raise ConfigError("CRICKET_API_URL must not be empty")

    return Settings(
        api_base_url=api_base_url,
        api_key=api_key,
        server_name=server_name,
        collect_interval=_get_env_int(
            environ, "CRICKET_COLLECT_INTERVAL", DEFAULT_COLLECT_INTERVAL,
            maximum=MAX_COLLECT_INTERVAL,
        ),
        debug=_get_env_bool(environ, "CRICKET_DEBUG", False),
    )
