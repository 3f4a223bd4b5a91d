"""Exceptions raised by the Venice adapter.

Venice answers a failed request with a JSON body whose ``error`` member is
either a plain string (``{"error": "Invalid API key"}``) or an OpenAI-style
object with ``message`` and ``code``. Validation failures add a ``details``
object. :func:`error_from_status` reads both shapes.

Nothing here retries: ``is_retryable`` only tells the caller whether sending
the same request again could succeed. Malformed data inside a stream is never
raised; the decoder drops the offending frame and keeps going.
"""

from __future__ import annotations

from typing import Any


class VeniceError(Exception):
    """Base class for every error the adapter raises."""

    retryable = False

    @property
    def is_retryable(self) -> bool:
        return self.retryable


class VeniceAPIError(VeniceError):
    """The Venice API answered with an error status.

    Attributes:
        status_code: HTTP status of the response, None for client-side timeouts.
        error_code: The ``code`` member of the error body, when present.
        details: Validation details from the error body, when present.
        retry_after: Seconds to wait, from the ``Retry-After`` header.
        raw: The decoded error body.
    """

    provider = "venice"

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
        retry_after: float | None = None,
        raw: dict[str, Any] | None = None,
        retryable: bool | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        self.retry_after = retry_after
        self.raw = raw
        if retryable is not None:
            self.retryable = retryable


class InvalidRequestError(VeniceAPIError):
    """400/415/422: the payload was rejected."""


class AuthenticationError(VeniceAPIError):
    """401/403: the API key is missing, invalid or lacks access."""


class InsufficientBalanceError(VeniceAPIError):
    """402: the account has no credit left for this request."""


class NotFoundError(VeniceAPIError):
    """404: unknown model or endpoint."""


class RequestTimeoutError(VeniceAPIError):
    """408/504, or the request timed out before a response arrived."""

    retryable = True


class RateLimitError(VeniceAPIError):
    retryable = True


class ServerError(VeniceAPIError):
    """5xx: inference failed on Venice's side."""

    retryable = True


class ModelCapacityError(ServerError):
    """503: the model is at capacity."""


class NetworkError(VeniceError):
    """Connection refused, DNS failure or a dropped connection."""

    retryable = True


class StreamError(VeniceError):
    """A response decoder was used after it finished."""


class InvalidResponseError(VeniceError):
    """A non-streamed response body could not be decoded."""


class ConfigurationError(VeniceError):
    """Missing API key, empty base URL and similar setup mistakes."""


_STATUS_TO_ERROR: dict[int, type[VeniceAPIError]] = {
    400: InvalidRequestError,
    401: AuthenticationError,
    402: InsufficientBalanceError,
    403: AuthenticationError,
    404: NotFoundError,
    408: RequestTimeoutError,
    415: InvalidRequestError,
    422: InvalidRequestError,
    429: RateLimitError,
    503: ModelCapacityError,
    504: RequestTimeoutError,
}


def error_from_status(
    status_code: int,
    body: Any = None,
    *,
    retry_after: float | None = None,
) -> VeniceAPIError:
    """Build the exception for an error response.

    Any other 5xx becomes a ServerError; any other status a retryable
    VeniceAPIError.

    Args:
        status_code: HTTP status of the response.
        body: The decoded JSON body, or the raw text when it was not JSON.
        retry_after: Seconds from the ``Retry-After`` header.
    """
    message, error_code, details = _read_error_body(body)
    cls = _STATUS_TO_ERROR.get(status_code)
    retryable = None
    if cls is None:
        if 500 <= status_code <= 599:
            cls = ServerError
        else:
            cls, retryable = VeniceAPIError, True
    return cls(
        message or f"HTTP {status_code}",
        status_code=status_code,
        error_code=error_code,
        details=details,
        retry_after=retry_after,
        raw=body if isinstance(body, dict) else None,
        retryable=retryable,
    )


def _read_error_body(body: Any) -> tuple[str, str | None, dict[str, Any] | None]:
    if isinstance(body, str):
        return body.strip(), None, None
    if not isinstance(body, dict):
        return "", None, None

    details = body.get("details") if isinstance(body.get("details"), dict) else None
    error = body.get("error")
    if isinstance(error, dict):
        code = error.get("code")
        message = error.get("message")
        return (
            message if isinstance(message, str) else "",
            str(code) if code is not None else None,
            details,
        )
    if isinstance(error, str):
        return error, None, details
    message = body.get("message")
    return (message if isinstance(message, str) else ""), None, details
