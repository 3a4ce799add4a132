"""Unit tests for classifying GitHub API failures and reading rate limit headers."""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from githubkit.exception import PrimaryRateLimitExceeded, RequestFailed, SecondaryRateLimitExceeded

from upstream_sync.github.exceptions import (
    FatalRemoteError,
    RetryExhaustedError,
    TransientRemoteError,
    classify_github_exception,
)
from upstream_sync.github.models import RateLimitSignal


def make_response(status_code: int, message: str = "", headers: dict[str, str] | None = None) -> MagicMock:
    """Build a stand-in for a githubkit Response."""
    response = MagicMock()
    response.status_code = status_code
    response.headers = headers or {}
    response.json.return_value = {"message": message}
    return response


class TestRateLimitSignal:
    """Tests for RateLimitSignal.from_headers."""

    def test_reads_rate_limit_headers(self) -> None:
        """All x-ratelimit headers are parsed, with the reset converted to milliseconds."""
        signal = RateLimitSignal.from_headers(
            {
                "X-RateLimit-Remaining": "0",
                "X-RateLimit-Reset": "1700000030",
                "X-RateLimit-Resource": "core",
                "X-RateLimit-Limit": "5000",
                "X-RateLimit-Used": "5000",
            }
        )

        assert signal.remaining_requests == 0
        assert signal.reset_epoch_ms == 1_700_000_030_000
        assert signal.resource == "core"
        assert signal.limit == 5000
        assert signal.used == 5000
        assert signal.retry_after_seconds is None
        assert signal.is_exhausted is True

    def test_reads_retry_after(self) -> None:
        """The retry-after header is read in seconds."""
        signal = RateLimitSignal.from_headers({"Retry-After": "12"})

        assert signal.retry_after_seconds == 12.0
        assert signal.is_exhausted is False

    def test_missing_headers(self) -> None:
        """No headers yields an empty signal."""
        assert RateLimitSignal.from_headers(None) == RateLimitSignal()
        assert RateLimitSignal.from_headers({}) == RateLimitSignal()

    def test_invalid_values_are_ignored(self) -> None:
        """Unparseable header values are dropped instead of failing the request."""
        signal = RateLimitSignal.from_headers({"x-ratelimit-remaining": "lots", "retry-after": "soon"})

        assert signal.remaining_requests is None
        assert signal.retry_after_seconds is None

    def test_remaining_without_reset_is_not_exhausted(self) -> None:
        """An exhausted limit needs a known reset time to be waited out."""
        assert RateLimitSignal(remaining_requests=0).is_exhausted is False


class TestClassifyGitHubException:
    """Tests for classify_github_exception."""

    @pytest.mark.parametrize("status_code", [403, 429])
    def test_rate_limit_statuses_are_transient(self, status_code: int) -> None:
        """403 and 429 responses are classified as transient."""
        exc = RequestFailed(make_response(status_code, "Forbidden"))

        classified = classify_github_exception(exc)

        assert isinstance(classified, TransientRemoteError)
        assert classified.status_code == status_code
        assert classified.secondary is False

    def test_transient_error_carries_headers(self) -> None:
        """The rate limit signal of the failing response travels with the error."""
        exc = RequestFailed(
            make_response(403, "API rate limit exceeded", {"x-ratelimit-remaining": "0", "x-ratelimit-reset": "1700000030"})
        )

        classified = classify_github_exception(exc)

        assert isinstance(classified, TransientRemoteError)
        assert classified.signal.is_exhausted is True
        assert classified.signal.reset_epoch_ms == 1_700_000_030_000

    def test_secondary_rate_limit_message(self) -> None:
        """A secondary rate limit message marks the error as secondary."""
        exc = RequestFailed(make_response(403, "You have exceeded a secondary rate limit. Please wait a few minutes."))

        classified = classify_github_exception(exc)

        assert isinstance(classified, TransientRemoteError)
        assert classified.secondary is True

    def test_rate_limit_message_on_other_status(self) -> None:
        """A rate limit message makes any status transient."""
        exc = RequestFailed(make_response(400, "API rate limit exceeded for installation"))

        assert isinstance(classify_github_exception(exc), TransientRemoteError)

    @pytest.mark.parametrize("status_code", [401, 404, 422, 500])
    def test_other_statuses_are_fatal(self, status_code: int) -> None:
        """Errors that are not rate limits are fatal and keep the response message."""
        exc = RequestFailed(make_response(status_code, "Not Found"))

        classified = classify_github_exception(exc)

        assert isinstance(classified, FatalRemoteError)
        assert classified.status_code == status_code
        assert f"GitHub {status_code} error: Not Found" in str(classified)

    def test_validation_errors_are_included_in_message(self) -> None:
        """Field errors from a 422 response are appended to the message."""
        response = make_response(422)
        response.json.return_value = {"message": "Validation Failed", "errors": [{"code": "already_exists"}]}

        classified = classify_github_exception(RequestFailed(response))

        assert isinstance(classified, FatalRemoteError)
        assert "Validation Failed" in classified.message
        assert "already_exists" in classified.message

    def test_githubkit_secondary_rate_limit_exception(self) -> None:
        """githubkit's own secondary rate limit exception is transient and secondary."""
        exc = SecondaryRateLimitExceeded(make_response(403, "Forbidden"), timedelta(seconds=0))

        classified = classify_github_exception(exc)

        assert isinstance(classified, TransientRemoteError)
        assert classified.secondary is True

    def test_githubkit_retry_after_fills_missing_header(self) -> None:
        """The retry_after carried by githubkit's exception is used when the header is absent."""
        exc = PrimaryRateLimitExceeded(make_response(429, "Too Many Requests"), timedelta(seconds=42))

        classified = classify_github_exception(exc)

        assert isinstance(classified, TransientRemoteError)
        assert classified.signal.retry_after_seconds == 42.0

    def test_rate_limit_marker_on_plain_exception(self) -> None:
        """An exception raised outside a response is transient when it mentions a rate limit."""
        classified = classify_github_exception(Exception("secondary rate limit triggered"))

        assert isinstance(classified, TransientRemoteError)
        assert classified.secondary is True
        assert classified.status_code is None

    def test_unrelated_exception_is_not_classified(self) -> None:
        """Unrelated exceptions are left for the caller to re-raise."""
        assert classify_github_exception(ConnectionError("connection reset")) is None

    def test_already_classified_error_is_returned(self) -> None:
        """A remote error passes through unchanged."""
        error = FatalRemoteError("nope", status_code=404)

        assert classify_github_exception(error) is error


def test_retry_exhausted_error_message() -> None:
    """The exhausted error reports the last status and rate limit diagnostics."""
    last_error = TransientRemoteError(
        "API rate limit exceeded",
        status_code=403,
        signal=RateLimitSignal(remaining_requests=0, resource="core", limit=60, used=60),
    )

    error = RetryExhaustedError("get_repository", 5, last_error)

    assert "get_repository" in str(error)
    assert "after 5 attempts (0 attempts remaining)" in str(error)
    assert "status=403" in str(error)
    assert "resource=core" in str(error)
