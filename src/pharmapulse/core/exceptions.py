"""
Unified Exception Hierarchy for PharmaPulse.

Exception Hierarchy:
    PharmaPulseError (base)
    ├── APIError
    │   ├── RateLimitError
    │   ├── NetworkError
    │   ├── UpstreamTimeoutError
    │   └── ServiceUnavailableError
    ├── ValidationError
    │   ├── InvalidQueryError
    │   └── InvalidParameterError
    ├── DataError
    │   ├── NotFoundError
    │   └── ParseError
    └── ConfigurationError

Upstream (APIError) faults are absorbed by the search pipeline and never
reach a caller. ValidationError is the only family surfaced to clients as a
"bad input" response.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    WARNING = auto()      # Recoverable, can continue
    ERROR = auto()        # Failed for this request
    CRITICAL = auto()     # Cannot continue
    TRANSIENT = auto()    # Temporary upstream condition


class ErrorCategory(Enum):
    """Categories for error classification."""
    API = "api"
    VALIDATION = "validation"
    DATA = "data"
    CONFIGURATION = "config"


@dataclass(frozen=True, slots=True)
class ErrorContext:
    """Rich context for error messages."""
    operation: str | None = None
    source: str | None = None
    input_value: Any = None
    suggestion: str | None = None
    retry_after: float | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


def _with(ctx: ErrorContext | None, **overrides: Any) -> ErrorContext:
    """Copy a context, filling only the fields the caller left empty."""
    base = ctx or ErrorContext()
    values = {
        "operation": base.operation,
        "source": base.source,
        "input_value": base.input_value,
        "suggestion": base.suggestion,
        "retry_after": base.retry_after,
        "metadata": base.metadata,
    }
    for key, value in overrides.items():
        if values.get(key) is None:
            values[key] = value
    return ErrorContext(**values)


class PharmaPulseError(Exception):
    """
    Base exception for all PharmaPulse errors.

    Provides:
    - Structured error context
    - Severity classification
    - JSON-friendly formatting for the HTTP layer
    """

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        category: ErrorCategory = ErrorCategory.API,
    ) -> None:
        super().__init__(message)
        self.context = context or ErrorContext()
        self.severity = severity
        self.category = category

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "success": False,
            "error": str(self),
            "category": self.category.value,
        }
        if self.context.source:
            result["source"] = self.context.source
        if self.context.suggestion:
            result["suggestion"] = self.context.suggestion
        if self.context.retry_after:
            result["retry_after_seconds"] = self.context.retry_after
        return result


# =============================================================================
# API Errors
# =============================================================================

class APIError(PharmaPulseError):
    """Base class for upstream API errors."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.ERROR,
            category=ErrorCategory.API,
        )


class RateLimitError(APIError):
    """Raised when an upstream API answers HTTP 429."""

    def __init__(
        self,
        message: str = "API rate limit exceeded",
        *,
        retry_after: float = 1.0,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(message, context=_with(context, retry_after=retry_after))
        self.severity = ErrorSeverity.TRANSIENT


class NetworkError(APIError):
    """Raised for network connectivity issues."""

    def __init__(
        self,
        message: str = "Network connection failed",
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(message, context=context)


class UpstreamTimeoutError(APIError):
    """Raised when an upstream call exceeds its timeout."""

    def __init__(
        self,
        service: str,
        timeout: float,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            f"{service}: request timed out after {timeout:g}s",
            context=_with(context, source=service),
        )
        self.timeout = timeout
        self.severity = ErrorSeverity.TRANSIENT


class ServiceUnavailableError(APIError):
    """Raised when the upstream service answers with a 5xx status."""

    def __init__(
        self,
        message: str = "Service temporarily unavailable",
        *,
        service: str = "upstream",
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(f"{service}: {message}", context=_with(context, source=service))
        self.severity = ErrorSeverity.TRANSIENT


# =============================================================================
# Validation Errors
# =============================================================================

class ValidationError(PharmaPulseError):
    """Base class for client-input errors."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.WARNING,
            category=ErrorCategory.VALIDATION,
        )


class InvalidQueryError(ValidationError):
    """Raised when a search term is missing or blank."""

    def __init__(
        self,
        query: str | None,
        reason: str = "Query cannot be empty",
        *,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = _with(
            context,
            input_value=query,
            suggestion="Provide a drug name to search for, e.g. q=ibuprofen",
        )
        super().__init__(f"Invalid query: {reason}", context=ctx)


class InvalidParameterError(ValidationError):
    """Raised when a parameter value is invalid."""

    def __init__(
        self,
        param_name: str,
        value: Any,
        expected: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = _with(context, input_value=value, suggestion=f"Expected {expected}")
        super().__init__(
            f"Invalid parameter '{param_name}': {value!r} (expected {expected})",
            context=ctx,
        )


# =============================================================================
# Data Errors
# =============================================================================

class DataError(PharmaPulseError):
    """Base class for data-related errors."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.ERROR,
            category=ErrorCategory.DATA,
        )


class NotFoundError(DataError):
    """Raised when requested data is not found."""

    def __init__(
        self,
        resource: str,
        identifier: str | None = None,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        msg = f"{resource} not found"
        if identifier:
            msg = f"{resource} not found: {identifier}"
        super().__init__(msg, context=_with(context, input_value=identifier))


class ParseError(DataError):
    """Raised when an upstream payload cannot be decoded."""

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        context: ErrorContext | None = None,
    ) -> None:
        full_msg = f"Parse error: {message}"
        if source:
            full_msg = f"Parse error ({source}): {message}"
        super().__init__(full_msg, context=_with(context, source=source))


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(PharmaPulseError):
    """Raised for configuration-related errors."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.CRITICAL,
            category=ErrorCategory.CONFIGURATION,
        )


def is_upstream_error(error: BaseException) -> bool:
    """Check whether an error is an upstream fault that callers should absorb."""
    return isinstance(error, (APIError, DataError, TimeoutError))
