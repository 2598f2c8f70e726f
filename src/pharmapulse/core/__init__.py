"""
Core module for PharmaPulse.

Provides:
- Unified exception hierarchy
- Async utilities for concurrent upstream calls
"""

from .async_utils import gather_settled, with_timeout
from .exceptions import (
    # Base
    PharmaPulseError,
    ErrorContext,
    ErrorSeverity,
    ErrorCategory,
    # API errors
    APIError,
    RateLimitError,
    NetworkError,
    UpstreamTimeoutError,
    ServiceUnavailableError,
    # Validation errors
    ValidationError,
    InvalidQueryError,
    InvalidParameterError,
    # Data errors
    DataError,
    NotFoundError,
    ParseError,
    # Configuration errors
    ConfigurationError,
    # Utilities
    is_upstream_error,
)

__all__ = [
    "PharmaPulseError",
    "ErrorContext",
    "ErrorSeverity",
    "ErrorCategory",
    "APIError",
    "RateLimitError",
    "NetworkError",
    "UpstreamTimeoutError",
    "ServiceUnavailableError",
    "ValidationError",
    "InvalidQueryError",
    "InvalidParameterError",
    "DataError",
    "NotFoundError",
    "ParseError",
    "ConfigurationError",
    "is_upstream_error",
    "gather_settled",
    "with_timeout",
]
