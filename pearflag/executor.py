"""
Request execution pipeline shared by the evaluation entry points.

Every call goes through the same steps: validate the request, answer from
the cache when possible, otherwise POST it with retries and a per-attempt
timeout, interpret the response and store the result.
"""

import asyncio
import json
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional, Union

import httpx

from pearflag.cache import CachePartition, EvaluationCache, cache_key
from pearflag.config import ClientConfig
from pearflag.errors import (
    PearFlagError,
    ResponseFormatError,
    TransportError,
    ValidationError,
    classify_error,
)
from pearflag.models import EvaluationRequest, FlagEvaluation, parse_evaluations
from pearflag.retry import retry_async, run_with_timeout

Transport = Callable[..., Awaitable[httpx.Response]]
"""Async callable ``(method, url, *, headers, content) -> httpx.Response``."""

EvaluationResult = Union[FlagEvaluation, List[FlagEvaluation]]

LOG_PREFIX = "[PearFlagClient]"

DEFAULT_ERROR_DETAIL = "Internal Server Error"


@dataclass(frozen=True)
class Operation:
    """What distinguishes single-flag from multi-flag evaluation."""

    multiple: bool
    path: str
    partition: CachePartition
    error_prefix: str
    label: str


EVALUATE_FLAG = Operation(
    multiple=False,
    path="/api/v1/evaluate/flag",
    partition=CachePartition.SINGLE,
    error_prefix="Failed to evaluate flag",
    label="Flag",
)

EVALUATE_FLAGS = Operation(
    multiple=True,
    path="/api/v1/evaluate/flags",
    partition=CachePartition.MULTI,
    error_prefix="Failed to evaluate flags",
    label="Flags",
)


def log(config: ClientConfig, message: str) -> None:
    """Send ``message`` to the configured sink when debug is on."""
    if config.debug:
        config.logger(f"{LOG_PREFIX} {message}")


def validate_request(request: EvaluationRequest, multiple: bool = False) -> None:
    """
    Check that a request carries everything the service needs.

    Raises:
        ValidationError: On the first missing field
    """
    if not multiple and getattr(request, "flag", None) is None:
        raise ValidationError("Flag is required")
    if not getattr(request, "environment", None):
        raise ValidationError("Environment is required")
    user = getattr(request, "user", None)
    if user is None or not getattr(user, "id", None):
        raise ValidationError("User ID is required")


def build_headers(config: ClientConfig) -> Dict[str, str]:
    return {
        "Content-Type": "application/json",
        "x-api-key": config.api_key,
        **config.custom_headers,
    }


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or DEFAULT_ERROR_DETAIL

    if isinstance(body, dict) and body.get("error") is not None:
        return str(body["error"])
    return DEFAULT_ERROR_DETAIL


def interpret_response(response: httpx.Response, operation: Operation) -> EvaluationResult:
    """
    Turn a transport response into an evaluation result.

    Raises:
        TransportError: For a non-2xx status, with the server's error detail
        ResponseFormatError: For a 2xx status whose body is not a valid result
    """
    if not response.is_success:
        raise TransportError(
            f"{operation.error_prefix}: {_error_detail(response)}",
            status_code=response.status_code,
        )

    try:
        data = response.json()
    except ValueError:
        raise ResponseFormatError(
            f"{operation.error_prefix}: Invalid JSON response",
            status_code=response.status_code,
        ) from None

    try:
        if operation.multiple:
            return parse_evaluations(data)
        return FlagEvaluation.from_dict(data)
    except ResponseFormatError as e:
        raise ResponseFormatError(
            f"{operation.error_prefix}: {e.message}",
            status_code=response.status_code,
        ) from e


class EvaluationExecutor:
    """
    Runs evaluation calls against the service.

    The executor owns no configuration: each call receives the
    ``ClientConfig`` that was current when it started.
    """

    def __init__(
        self,
        transport: Transport,
        cache: EvaluationCache,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize the executor.

        Args:
            transport: Async HTTP call, ``httpx.AsyncClient.request`` compatible
            cache: Cache shared by all calls of the client
            sleep: Coroutine used for the delay between attempts
        """
        self._transport = transport
        self._cache = cache
        self._sleep = sleep

    async def execute(
        self,
        operation: Operation,
        request: EvaluationRequest,
        config: ClientConfig,
        timeout_ms: Optional[int] = None,
    ) -> EvaluationResult:
        """
        Evaluate ``request`` for ``operation``.

        Args:
            operation: EVALUATE_FLAG or EVALUATE_FLAGS
            request: Request to evaluate
            config: Configuration snapshot for this call
            timeout_ms: Per-attempt timeout, defaults to ``config.timeout_ms``

        Returns:
            The evaluation result, from the cache or the service
        """
        log(config, f"Evaluating {operation.label.lower()}...")
        validate_request(request, multiple=operation.multiple)

        key = cache_key(request)
        cached = self._cache.get(operation.partition, key)
        if cached is not None:
            return cached

        url = f"{config.base_url.rstrip('/')}{operation.path}"
        headers = build_headers(config)
        body = json.dumps(request.to_dict())
        timeout = config.timeout_ms if timeout_ms is None else timeout_ms

        async def attempt() -> EvaluationResult:
            try:
                response = await run_with_timeout(
                    self._transport("POST", url, headers=headers, content=body),
                    timeout,
                )
            except PearFlagError:
                raise
            except Exception as e:
                raise classify_error(e) from e
            return interpret_response(response, operation)

        def on_failure(attempt_number: int, error: Exception) -> None:
            log(config, f"Attempt {attempt_number} failed: {error}")

        result = await retry_async(attempt, config.retry, on_failure=on_failure, sleep=self._sleep)

        log(config, f"{operation.label} evaluated: {_describe(result)}")
        self._cache.set(operation.partition, key, result, config.cache_ttl_ms)
        return result


def _describe(result: EvaluationResult) -> str:
    if isinstance(result, list):
        return json.dumps([vars(item) for item in result])
    return json.dumps(vars(result))
