"""
Error model for aggregate pagination.

Provides structured error codes and sanitized error messages. The pagination
computation itself never fails; every error here originates in the query
executor or in the tool layer around it.
"""

from enum import Enum
from typing import Optional
import re


class ErrorCode(str, Enum):
    """Structured error codes for the paginate tool."""
    UPSTREAM_QUERY_FAILURE = "UPSTREAM_QUERY_FAILURE"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class PaginateError(Exception):
    """Base exception for pagination errors with structured error information."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        retryable: bool = False,
        original_error: Optional[Exception] = None
    ):
        """
        Initialize a pagination error.

        Args:
            code: The error code
            message: Human-readable error message
            retryable: Whether the operation can be retried
            original_error: The original exception if this wraps another error
        """
        self.code = code
        self.message = message
        self.retryable = retryable
        self.original_error = original_error
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert error to dictionary format for tool responses."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "retryable": self.retryable
            }
        }


class UpstreamQueryFailure(PaginateError):
    """The executor's data or count branch was rejected by the store."""

    def __init__(
        self,
        branch: str,
        message: str,
        retryable: bool = False,
        original_error: Optional[Exception] = None
    ):
        self.branch = branch
        super().__init__(
            code=ErrorCode.UPSTREAM_QUERY_FAILURE,
            message=message,
            retryable=retryable,
            original_error=original_error
        )


def sanitize_query_error(error_msg: str) -> str:
    """
    Sanitize store error messages to remove sensitive details.

    Drops connection strings with credentials and full error documents,
    keeping only actionable information.

    Args:
        error_msg: The original error message

    Returns:
        Sanitized error message
    """
    # Credentials in connection strings
    sanitized = re.sub(r'(mongodb(?:\+srv)?://)[^@\s/]+@', r'\1[credentials]@', error_msg)

    # Trailing server response documents
    sanitized = re.sub(r',?\s*full error:.*', '', sanitized, flags=re.IGNORECASE)

    return sanitized.strip()


def sanitize_stack_trace(error_msg: str) -> str:
    """
    Remove stack traces from error messages.

    Args:
        error_msg: The original error message

    Returns:
        Error message without stack trace
    """
    # Take only the first line (usually the most relevant)
    lines = error_msg.split('\n')
    if lines:
        return lines[0].strip()
    return error_msg


def create_upstream_query_error(
    branch: str,
    message: str,
    retryable: bool = False,
    original_error: Optional[Exception] = None
) -> UpstreamQueryFailure:
    """
    Create an upstream query failure.

    Args:
        branch: Which query branch failed ("data" or "count")
        message: Description of the store error
        retryable: Whether the operation can be retried
        original_error: The original exception

    Returns:
        UpstreamQueryFailure with UPSTREAM_QUERY_FAILURE code
    """
    sanitized_message = sanitize_query_error(message)
    sanitized_message = sanitize_stack_trace(sanitized_message)

    return UpstreamQueryFailure(
        branch=branch,
        message=f"Upstream {branch} query failed: {sanitized_message}",
        retryable=retryable,
        original_error=original_error
    )


def create_validation_error(message: str) -> PaginateError:
    """
    Create a validation error for malformed tool input.

    Args:
        message: Description of the validation failure

    Returns:
        PaginateError with VALIDATION_ERROR code
    """
    return PaginateError(
        code=ErrorCode.VALIDATION_ERROR,
        message=message,
        retryable=False
    )


def create_internal_error(message: str, original_error: Optional[Exception] = None) -> PaginateError:
    """
    Create an internal error for unexpected exceptions.

    Args:
        message: Description of the internal error
        original_error: The original exception

    Returns:
        PaginateError with INTERNAL_ERROR code
    """
    sanitized_message = sanitize_stack_trace(message)

    return PaginateError(
        code=ErrorCode.INTERNAL_ERROR,
        message=f"Internal error: {sanitized_message}",
        retryable=True,
        original_error=original_error
    )
