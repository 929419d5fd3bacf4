"""RocketFlag client library."""

from .client import AsyncRocketFlagClient, RocketFlagClient
from .config import RocketFlagSettings, load_settings
from .exceptions import RocketFlagError, RocketFlagErrorCodes
from .memory import InMemoryRocketFlagClient
from .models import ClientConfig, FlagStatus, UserContext
from .options import (
    ClientOption,
    with_api_url,
    with_http_client,
    with_timeout,
    with_version,
)
from .protocol import RocketFlagClientProtocol

__all__ = [
    "AsyncRocketFlagClient",
    "ClientConfig",
    "ClientOption",
    "FlagStatus",
    "InMemoryRocketFlagClient",
    "RocketFlagClient",
    "RocketFlagClientProtocol",
    "RocketFlagError",
    "RocketFlagErrorCodes",
    "RocketFlagSettings",
    "UserContext",
    "load_settings",
    "with_api_url",
    "with_http_client",
    "with_timeout",
    "with_version",
]
