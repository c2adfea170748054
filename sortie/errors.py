"""Exception hierarchy for request adaptation and scenario execution.

All sortie exceptions inherit from SortieError, which carries a
machine-readable error_code. Where a builtin exception type describes the
failure, the sortie exception also derives from it so callers can catch
either.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Standardized error codes."""

    MISSING_DESCRIPTOR = "MISSING_DESCRIPTOR"
    """No request descriptor was supplied."""

    INVALID_DESCRIPTOR = "INVALID_DESCRIPTOR"
    """The descriptor lacks a required field such as its URI."""

    UNSUPPORTED_METHOD = "UNSUPPORTED_METHOD"
    """The HTTP method has no scenario entry point."""

    CONTENT_READ_FAILED = "CONTENT_READ_FAILED"
    """The request body could not be drained into memory."""

    INVALID_SCENARIO = "INVALID_SCENARIO"
    """The scenario was configured inconsistently."""

    ASSERTION_FAILED = "ASSERTION_FAILED"
    """One or more scenario expectations did not hold."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred."""


class SortieError(Exception):
    """Base exception for all sortie errors."""

    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class MissingDescriptorError(SortieError, TypeError):
    """Raised when the request descriptor itself is None."""

    error_code = ErrorCode.MISSING_DESCRIPTOR

    def __init__(self, message: str = "A request descriptor is required") -> None:
        super().__init__(message)


class InvalidDescriptorError(SortieError, ValueError):
    """Raised when a descriptor is present but has no URI."""

    error_code = ErrorCode.INVALID_DESCRIPTOR


class UnsupportedMethodError(SortieError, NotImplementedError):
    """Raised when the HTTP method is not one of the supported verbs."""

    error_code = ErrorCode.UNSUPPORTED_METHOD

    def __init__(self, method: str) -> None:
        super().__init__(f"HTTP method '{method}' is not supported")
        self.method = method


class ContentReadError(SortieError):
    """Raised when request content cannot be read into memory."""

    error_code = ErrorCode.CONTENT_READ_FAILED


class ScenarioConfigurationError(SortieError, ValueError):
    """Raised when a scenario is missing or repeats required configuration."""

    error_code = ErrorCode.INVALID_SCENARIO


class ScenarioAssertionError(SortieError, AssertionError):
    """Raised after execution when any scenario expectation failed.

    All failures are collected and reported together.
    """

    error_code = ErrorCode.ASSERTION_FAILED

    def __init__(self, failures: list[str], body: str | None = None) -> None:
        lines = ["Scenario failed:"]
        lines.extend(f"  - {failure}" for failure in failures)
        if body:
            lines.append("")
            lines.append("Response body:")
            lines.append(body)
        super().__init__("\n".join(lines))
        self.failures = failures
        self.body = body
