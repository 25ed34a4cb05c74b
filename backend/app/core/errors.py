"""
Application error types and classification helpers.

The exception set is deliberately flat: callers decide behaviour with the
helper functions below rather than by walking an inheritance chain.
"""
from typing import Any, Optional

import httpx


class AppError(Exception):
    """Error surfaced over HTTP as `{success: false, message}`."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class StoreError(AppError):
    """Store row missing or platform credentials not configured."""

    status_code = 404


class RecordValidationError(AppError):
    """A required identifier or option is missing or out of range."""

    status_code = 422


class SyncError(AppError):
    """A sync run aborted on a page-level failure; carries the partial result."""

    status_code = 502

    def __init__(self, message: str, result: Any) -> None:
        super().__init__(message)
        self.result = result


# External API taxonomy


class ApiError(Exception):
    """Non-success response from an external platform."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.body = body


class ApiTimeoutError(ApiError):
    pass


class ApiTransportError(ApiError):
    pass


class ApiRateLimitError(ApiError):
    def __init__(self, message: str, retry_after: Optional[float] = None) -> None:
        super().__init__(message, status_code=429)
        self.retry_after = retry_after


class ApiAuthError(ApiError):
    pass


class ApiNotFoundError(ApiError):
    pass


class GraphQLError(ApiError):
    """GraphQL `errors` payload returned inside an HTTP 200."""

    def __init__(self, errors: list[dict[str, Any]]) -> None:
        messages = "; ".join(str(e.get("message", e)) for e in errors)
        super().__init__(f"GraphQL errors: {messages}", status_code=200, body=errors)
        self.errors = errors


class MaxRetriesError(ApiError):
    def __init__(self, attempts: int, last_error: Exception) -> None:
        super().__init__(
            f"Max retries exceeded after {attempts} attempts: {last_error}",
            status_code=getattr(last_error, "status_code", None),
        )
        self.attempts = attempts
        self.last_error = last_error


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Parse a Retry-After header given in seconds."""
    if not value:
        return None
    try:
        return max(float(value), 0.0)
    except ValueError:
        return None


def classify_response(response: httpx.Response) -> Optional[ApiError]:
    """
    Map an HTTP response to an API error, or None when it succeeded.

    429 carries the server-supplied delay; 401/403 and 404 are terminal;
    5xx is retryable; any other 4xx is a terminal ApiError.
    """
    status = response.status_code
    if status < 400:
        return None

    body = response.text[:500]
    if status == 429:
        return ApiRateLimitError(
            "Rate limit exceeded",
            retry_after=parse_retry_after(response.headers.get("Retry-After")),
        )
    if status in (401, 403):
        return ApiAuthError(
            f"Authentication failed ({status})", status_code=status, body=body
        )
    if status == 404:
        return ApiNotFoundError("Resource not found", status_code=404, body=body)
    return ApiError(f"HTTP {status}: {body}", status_code=status, body=body)


def is_retryable(error: Exception) -> bool:
    """Whether another attempt may succeed."""
    if isinstance(error, (ApiRateLimitError, ApiTimeoutError, ApiTransportError)):
        return True
    if isinstance(error, (ApiAuthError, ApiNotFoundError, GraphQLError, MaxRetriesError)):
        return False
    if isinstance(error, ApiError):
        return error.status_code is not None and error.status_code >= 500
    return False


def describe_record_error(kind: str, identifier: Any, error: Exception) -> str:
    """Per-record error line for a result's `errors` list."""
    message = getattr(error, "message", None) or str(error) or type(error).__name__
    return f"{kind} {identifier}: {message}"
