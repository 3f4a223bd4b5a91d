"""Tests for the error hierarchy and Venice error body mapping."""

from __future__ import annotations

import pytest

from venice_llm.errors import (
    AuthenticationError,
    InsufficientBalanceError,
    InvalidRequestError,
    ModelCapacityError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    RequestTimeoutError,
    ServerError,
    StreamError,
    VeniceAPIError,
    VeniceError,
    error_from_status,
)


class TestErrorFromStatus:
    @pytest.mark.parametrize(
        ("status", "cls", "retryable"),
        [
            (400, InvalidRequestError, False),
            (401, AuthenticationError, False),
            (402, InsufficientBalanceError, False),
            (403, AuthenticationError, False),
            (404, NotFoundError, False),
            (408, RequestTimeoutError, True),
            (415, InvalidRequestError, False),
            (429, RateLimitError, True),
            (500, ServerError, True),
            (503, ModelCapacityError, True),
            (504, RequestTimeoutError, True),
            (529, ServerError, True),
        ],
    )
    def test_mapping(self, status: int, cls: type, retryable: bool) -> None:
        err = error_from_status(status, {"error": "boom"})
        assert type(err) is cls
        assert err.status_code == status
        assert err.provider == "venice"
        assert err.is_retryable is retryable

    def test_unknown_status_is_retryable(self) -> None:
        err = error_from_status(418, "teapot")
        assert type(err) is VeniceAPIError
        assert err.is_retryable
        assert str(err) == "teapot"

    def test_capacity_is_a_server_error(self) -> None:
        assert isinstance(error_from_status(503), ServerError)


class TestErrorBody:
    def test_string_error(self) -> None:
        err = error_from_status(401, {"error": "Authentication failed"})
        assert str(err) == "Authentication failed"
        assert err.error_code is None
        assert err.raw == {"error": "Authentication failed"}

    def test_object_error_with_code(self) -> None:
        err = error_from_status(
            429,
            {"error": {"message": "Too many requests", "code": "rate_limit_exceeded"}},
            retry_after=3.0,
        )
        assert str(err) == "Too many requests"
        assert err.error_code == "rate_limit_exceeded"
        assert err.retry_after == 3.0

    def test_validation_details_kept(self) -> None:
        details = {"max_completion_tokens": {"_errors": ["Expected number"]}}
        err = error_from_status(400, {"error": "Invalid request parameters", "details": details})
        assert str(err) == "Invalid request parameters"
        assert err.details == details

    def test_plain_text_body(self) -> None:
        err = error_from_status(502, "  bad gateway\n")
        assert str(err) == "bad gateway"
        assert err.raw is None

    def test_empty_body_falls_back_to_status(self) -> None:
        assert str(error_from_status(404)) == "HTTP 404"
        assert str(error_from_status(500, {"unexpected": True})) == "HTTP 500"


class TestNonAPIErrors:
    def test_network_error_retryable(self) -> None:
        assert NetworkError("down").is_retryable

    def test_stream_error_not_retryable(self) -> None:
        assert not StreamError("used").is_retryable

    def test_client_timeout_has_no_status(self) -> None:
        err = RequestTimeoutError("timed out")
        assert err.status_code is None
        assert err.is_retryable

    def test_all_derive_from_venice_error(self) -> None:
        assert issubclass(VeniceAPIError, VeniceError)
        assert issubclass(NetworkError, VeniceError)
