"""Configuration classes for PearFlag SDK."""

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Dict

import httpx

from pearflag.errors import ConfigurationError
from pearflag.retry import DEFAULT_RETRY_POLICY, RetryPolicy

logger = logging.getLogger("pearflag")

# TODO: switch to the hosted evaluation service URL once it is published
DEFAULT_BASE_URL = "http://localhost:5173"

DEFAULT_TIMEOUT_MS = 5000

INVALID_API_KEY_MESSAGE = "Invalid API key. The key must be a 32-character hexadecimal string."

_API_KEY_RE = re.compile(r"^[0-9a-f]{32}$", re.IGNORECASE)


def validate_api_key(key: str) -> bool:
    """Check that ``key`` is a 32-character hexadecimal string."""
    return isinstance(key, str) and _API_KEY_RE.match(key) is not None


def validate_base_url(base_url: str) -> bool:
    """Check that ``base_url`` is an absolute URL with a scheme and a host."""
    if not isinstance(base_url, str):
        return False
    try:
        url = httpx.URL(base_url)
    except (httpx.InvalidURL, TypeError):
        return False
    return bool(url.scheme) and bool(url.host)


def default_log_sink(message: str) -> None:
    logger.info(message)


@dataclass(frozen=True)
class ClientConfig:
    """
    Configuration for PearFlag client.

    Instances are immutable; the client swaps in a new one on every setter
    call, so a call in flight keeps the configuration it started with.
    """

    api_key: str
    """32-character hexadecimal API key."""

    base_url: str = DEFAULT_BASE_URL
    """Base URL of the evaluation service."""

    timeout_ms: int = DEFAULT_TIMEOUT_MS
    """Default per-attempt timeout in milliseconds."""

    custom_headers: Dict[str, str] = field(default_factory=dict)
    """Extra headers sent with every request, overriding the defaults."""

    debug: bool = False
    """Emit debug messages through ``logger``."""

    logger: Callable[[str], None] = default_log_sink
    """Sink receiving debug messages."""

    retry: RetryPolicy = DEFAULT_RETRY_POLICY
    """Retry policy."""

    cache_ttl_ms: int = 0
    """Cache time-to-live in milliseconds. Set to 0 to keep entries until cleared."""

    def __post_init__(self):
        if not validate_api_key(self.api_key):
            raise ConfigurationError(INVALID_API_KEY_MESSAGE)
        if not validate_base_url(self.base_url):
            raise ConfigurationError(f"Invalid base URL: {self.base_url}")
        if not isinstance(self.timeout_ms, (int, float)) or self.timeout_ms <= 0:
            raise ConfigurationError(f"Timeout must be > 0, got {self.timeout_ms!r}")
        if not isinstance(self.cache_ttl_ms, (int, float)) or self.cache_ttl_ms < 0:
            raise ConfigurationError(f"Cache TTL must be >= 0, got {self.cache_ttl_ms!r}")
