"""
Error types for PearFlag SDK.

Provides structured error handling with categories for better error management.
"""

import asyncio
from enum import Enum
from typing import Optional

import httpx


class ErrorCategory(str, Enum):
    """Categories of errors for classification."""

    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    TRANSPORT = "transport"
    TIMEOUT = "timeout"
    RESPONSE_FORMAT = "response_format"
    UNKNOWN = "unknown"


class PearFlagError(Exception):
    """Base exception for all PearFlag SDK errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        status_code: Optional[int] = None,
        retryable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.status_code = status_code
        self.retryable = retryable

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, category={self.category})"


class ValidationError(PearFlagError):
    """Raised when an evaluation request is incomplete."""

    def __init__(self, message: str = "Validation error"):
        super().__init__(
            message,
            category=ErrorCategory.VALIDATION,
            retryable=False,
        )


class ConfigurationError(PearFlagError):
    """Raised when the client is given an invalid setting."""

    def __init__(self, message: str = "Invalid configuration"):
        super().__init__(
            message,
            category=ErrorCategory.CONFIGURATION,
            retryable=False,
        )


class TransportError(PearFlagError):
    """Raised when a request fails at the network level or with a non-2xx status."""

    def __init__(self, message: str = "Transport error", status_code: Optional[int] = None):
        super().__init__(
            message,
            category=ErrorCategory.TRANSPORT,
            status_code=status_code,
            retryable=True,
        )


class RequestTimeoutError(TransportError):
    """Raised when a single attempt exceeds its timeout."""

    def __init__(self, message: str = "Request timed out"):
        super().__init__(message)
        self.category = ErrorCategory.TIMEOUT


class ResponseFormatError(PearFlagError):
    """Raised when a successful response carries a malformed body."""

    def __init__(self, message: str = "Malformed response", status_code: Optional[int] = None):
        super().__init__(
            message,
            category=ErrorCategory.RESPONSE_FORMAT,
            status_code=status_code,
            retryable=False,
        )


def classify_error(error: Exception) -> PearFlagError:
    """
    Classify an exception raised during an attempt into a PearFlagError.

    Args:
        error: The original exception

    Returns:
        A classified PearFlagError
    """
    if isinstance(error, PearFlagError):
        return error

    if isinstance(error, (asyncio.TimeoutError, httpx.TimeoutException)):
        return RequestTimeoutError(str(error) or "Request timed out")

    # Any other failure of the transport call counts as a network failure.
    return TransportError(str(error) or error.__class__.__name__)
