"""
PearFlag Python SDK - remote feature flag evaluation.

Usage:
    from pearflag import ClientConfig, EvaluationRequest, PearFlagClient, User

    async with PearFlagClient(ClientConfig(api_key="your-32-char-hex-key")) as client:
        result = await client.evaluate_flag(
            EvaluationRequest(environment="production", user=User(id="user-1"), flag="my-feature")
        )

        if result.enabled:
            # Feature is enabled
            pass
"""

from pearflag.client import PearFlagClient
from pearflag.config import ClientConfig, DEFAULT_BASE_URL, validate_api_key, validate_base_url
from pearflag.models import EvaluationRequest, FlagEvaluation, User
from pearflag.retry import RetryPolicy, RetryResult, fetch_with_retry, retry_async
from pearflag.cache import CachePartition, CacheStats, EvaluationCache, cache_key
from pearflag.executor import (
    EVALUATE_FLAG,
    EVALUATE_FLAGS,
    EvaluationExecutor,
    interpret_response,
    validate_request,
)
from pearflag.errors import (
    PearFlagError,
    ValidationError,
    ConfigurationError,
    TransportError,
    RequestTimeoutError,
    ResponseFormatError,
    ErrorCategory,
)

__version__ = "1.0.0"
__all__ = [
    # Client
    "PearFlagClient",
    "ClientConfig",
    "DEFAULT_BASE_URL",
    "validate_api_key",
    "validate_base_url",
    # Models
    "EvaluationRequest",
    "FlagEvaluation",
    "User",
    # Retry
    "RetryPolicy",
    "RetryResult",
    "fetch_with_retry",
    "retry_async",
    # Cache
    "CachePartition",
    "CacheStats",
    "EvaluationCache",
    "cache_key",
    # Executor
    "EVALUATE_FLAG",
    "EVALUATE_FLAGS",
    "EvaluationExecutor",
    "interpret_response",
    "validate_request",
    # Errors
    "PearFlagError",
    "ValidationError",
    "ConfigurationError",
    "TransportError",
    "RequestTimeoutError",
    "ResponseFormatError",
    "ErrorCategory",
]
