"""Tests for exceptions.py: hierarchy, context and JSON bodies."""

from pharmapulse.core.exceptions import (
    APIError,
    ConfigurationError,
    DataError,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    InvalidParameterError,
    InvalidQueryError,
    NetworkError,
    NotFoundError,
    ParseError,
    PharmaPulseError,
    RateLimitError,
    ServiceUnavailableError,
    UpstreamTimeoutError,
    ValidationError,
    is_upstream_error,
)


class TestPharmaPulseError:
    def test_basic_creation(self):
        e = PharmaPulseError("test error")
        assert str(e) == "test error"
        assert e.severity == ErrorSeverity.ERROR
        assert e.category == ErrorCategory.API

    def test_to_dict(self):
        ctx = ErrorContext(source="openFDA", suggestion="try again", retry_after=5.0)
        d = PharmaPulseError("fail", context=ctx).to_dict()
        assert d == {
            "success": False,
            "error": "fail",
            "category": "api",
            "source": "openFDA",
            "suggestion": "try again",
            "retry_after_seconds": 5.0,
        }

    def test_to_dict_minimal(self):
        d = PharmaPulseError("fail").to_dict()
        assert set(d) == {"success", "error", "category"}


class TestAPIErrors:
    def test_rate_limit(self):
        e = RateLimitError(retry_after=3.0)
        assert isinstance(e, APIError)
        assert e.context.retry_after == 3.0
        assert e.severity == ErrorSeverity.TRANSIENT

    def test_timeout(self):
        e = UpstreamTimeoutError("RxNorm", 10)
        assert e.timeout == 10
        assert "RxNorm" in str(e)
        assert "10s" in str(e)
        assert e.context.source == "RxNorm"

    def test_service_unavailable(self):
        e = ServiceUnavailableError("HTTP 502", service="openFDA")
        assert str(e) == "openFDA: HTTP 502"
        assert e.context.source == "openFDA"

    def test_network_default_message(self):
        assert str(NetworkError()) == "Network connection failed"

    def test_caller_context_kept(self):
        e = UpstreamTimeoutError("RxNorm", 10, context=ErrorContext(source="custom"))
        assert e.context.source == "custom"


class TestValidationErrors:
    def test_invalid_query(self):
        e = InvalidQueryError("  ")
        assert isinstance(e, ValidationError)
        assert e.category == ErrorCategory.VALIDATION
        assert "cannot be empty" in str(e)
        assert e.context.suggestion

    def test_invalid_parameter(self):
        e = InvalidParameterError("limit", 0, "an integer between 1 and 100")
        assert "limit" in str(e)
        assert e.context.input_value == 0
        assert e.to_dict()["suggestion"] == "Expected an integer between 1 and 100"


class TestDataErrors:
    def test_not_found(self):
        e = NotFoundError("Drug", "xyz")
        assert str(e) == "Drug not found: xyz"
        assert isinstance(e, DataError)

    def test_not_found_without_identifier(self):
        assert str(NotFoundError("Drug")) == "Drug not found"

    def test_parse_error(self):
        e = ParseError("bad json", source="NewsAPI")
        assert str(e) == "Parse error (NewsAPI): bad json"
        assert e.category == ErrorCategory.DATA


class TestOtherErrors:
    def test_configuration_error(self):
        e = ConfigurationError("bad PORT")
        assert e.severity == ErrorSeverity.CRITICAL
        assert e.to_dict()["category"] == "config"


class TestIsUpstreamError:
    def test_upstream(self):
        assert is_upstream_error(NetworkError())
        assert is_upstream_error(ParseError("x"))
        assert is_upstream_error(TimeoutError())

    def test_not_upstream(self):
        assert not is_upstream_error(InvalidQueryError(""))
        assert not is_upstream_error(KeyError("x"))
