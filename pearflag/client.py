"""
PearFlag client for remote feature flag evaluation.
"""

import asyncio
import logging
from dataclasses import replace
from typing import Awaitable, Callable, Dict, List, Optional

import httpx

from pearflag.cache import CachePartition, CacheStats, EvaluationCache
from pearflag.config import DEFAULT_BASE_URL, ClientConfig
from pearflag.executor import (
    EVALUATE_FLAG,
    EVALUATE_FLAGS,
    EvaluationExecutor,
    Transport,
    log,
)
from pearflag.models import EvaluationRequest, FlagEvaluation
from pearflag.retry import RetryPolicy

logger = logging.getLogger("pearflag")


class PearFlagClient:
    """
    PearFlag feature flag client.

    Example:
        ```python
        async with PearFlagClient(ClientConfig(api_key="0da8f357ce7a2b01effe5992f295a592")) as client:
            result = await client.evaluate_flag(
                EvaluationRequest(
                    environment="production",
                    user=User(id="user-1", email="user@example.com"),
                    flag="new-checkout",
                )
            )
            if result.enabled:
                pass
        ```
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: Optional[Transport] = None,
        cache: Optional[EvaluationCache] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize the PearFlag client.

        Args:
            config: Client configuration
            transport: Async HTTP call used instead of an owned ``httpx.AsyncClient``
            cache: Cache instance, a fresh one by default
            sleep: Coroutine used for the delay between attempts
        """
        self._config = config
        self._http_client: Optional[httpx.AsyncClient] = None
        if transport is None:
            # Timeouts are enforced per attempt by the executor.
            self._http_client = httpx.AsyncClient(timeout=None)
            transport = self._http_client.request
        self._cache = cache or EvaluationCache()
        self._executor = EvaluationExecutor(transport, self._cache, sleep=sleep)

    def _log(self, message: str) -> None:
        log(self._config, message)

    async def evaluate_flags(
        self,
        request: EvaluationRequest,
        timeout_ms: Optional[int] = None,
    ) -> List[FlagEvaluation]:
        """
        Evaluate every flag of an environment for a user.

        Args:
            request: Environment and user details
            timeout_ms: Per-attempt timeout, defaults to the configured one

        Returns:
            The evaluated flags in the order returned by the service

        Raises:
            ValidationError: If the request is incomplete
            TransportError: If every attempt failed
            ResponseFormatError: If the service answered with a malformed body
        """
        return await self._executor.execute(EVALUATE_FLAGS, request, self._config, timeout_ms)

    async def evaluate_flag(
        self,
        request: EvaluationRequest,
        timeout_ms: Optional[int] = None,
    ) -> FlagEvaluation:
        """
        Evaluate one flag for a user.

        Args:
            request: Flag key, environment and user details
            timeout_ms: Per-attempt timeout, defaults to the configured one

        Returns:
            The evaluated flag

        Raises:
            ValidationError: If the request is incomplete
            TransportError: If every attempt failed
            ResponseFormatError: If the service answered with a malformed body
        """
        return await self._executor.execute(EVALUATE_FLAG, request, self._config, timeout_ms)

    def set_debug(self, enabled: bool) -> None:
        """Enable or disable debug logging."""
        self._config = replace(self._config, debug=enabled)
        self._log(f"Debug logging {'enabled' if enabled else 'disabled'}.")

    def set_base_url(self, base_url: str) -> None:
        """
        Update the base URL for API requests.

        Raises:
            ConfigurationError: If ``base_url`` is not an absolute URL
        """
        self._config = replace(self._config, base_url=base_url)
        self._log(f"Base URL updated to: {base_url}")

    def reset_base_url(self) -> None:
        """Reset the base URL to the default one."""
        self._config = replace(self._config, base_url=DEFAULT_BASE_URL)
        self._log(f"Base URL reset to: {DEFAULT_BASE_URL}")

    def set_api_key(self, key: str) -> None:
        """
        Update the API key used for authentication.

        Raises:
            ConfigurationError: If ``key`` is not 32 hexadecimal characters
        """
        self._config = replace(self._config, api_key=key)
        self._log("API key updated.")

    def set_retry_policy(self, retries: int, delay_ms: int) -> None:
        """
        Set the retry policy for API requests.

        Args:
            retries: Total number of attempts, at least 1
            delay_ms: Delay between attempts in milliseconds
        """
        self._config = replace(self._config, retry=RetryPolicy(retries=retries, delay_ms=delay_ms))
        self._log(f"Retry policy updated: {retries} retries with {delay_ms}ms delay.")

    def set_custom_headers(self, headers: Dict[str, str]) -> None:
        """Replace the custom headers sent with every request."""
        self._config = replace(self._config, custom_headers=dict(headers))
        self._log("Custom headers updated.")

    def set_cache_ttl(self, ttl_ms: int) -> None:
        """Set the time-to-live of entries cached from now on, 0 to disable expiry."""
        self._config = replace(self._config, cache_ttl_ms=ttl_ms)
        self._log(f"Cache TTL set to: {ttl_ms}ms.")

    def set_logger(self, sink: Callable[[str], None]) -> None:
        """Set the sink receiving debug messages."""
        self._config = replace(self._config, logger=sink)
        self._log("Custom logger set.")

    def set_timeout(self, timeout_ms: int) -> None:
        """Update the default per-attempt timeout."""
        self._config = replace(self._config, timeout_ms=timeout_ms)
        self._log(f"Default timeout updated to: {timeout_ms}ms")

    def get_config(self) -> ClientConfig:
        """Get the current configuration."""
        return self._config

    def get_cache_size(self) -> Dict[str, int]:
        """
        Get the number of cached entries per partition.

        Returns:
            Dictionary with flag_cache and flags_cache sizes
        """
        return {
            "flag_cache": self._cache.size(CachePartition.SINGLE),
            "flags_cache": self._cache.size(CachePartition.MULTI),
        }

    def get_cache_stats(self) -> CacheStats:
        """Get cache statistics."""
        return self._cache.get_stats()

    def clear_cache(self) -> None:
        """Clear cached results of both single and multiple flag evaluations."""
        self._cache.clear()
        self._log("Cache cleared.")

    async def close(self) -> None:
        """Close the HTTP client if this client created it."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
            logger.debug("HTTP client closed")

    async def __aenter__(self) -> "PearFlagClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
