"""Contains exceptions raised when calling the GitHub API, and their classification."""

from dataclasses import replace
from datetime import timedelta

from githubkit.exception import PrimaryRateLimitExceeded, RequestFailed, SecondaryRateLimitExceeded

from upstream_sync.github.models import RateLimitSignal
from upstream_sync.utils.constants import RATE_LIMIT_MESSAGE_MARKERS, SECONDARY_RATE_LIMIT_MESSAGE_MARKERS


class RemoteError(Exception):
    """Base class for classified GitHub API failures."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """Initializes the exception with a message and the HTTP status code, if any."""
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class TransientRemoteError(RemoteError):
    """Raised for rate limited or otherwise retryable GitHub API failures."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        signal: RateLimitSignal | None = None,
        secondary: bool = False,
    ) -> None:
        """Initializes the exception with the rate limit signal observed on the response."""
        super().__init__(message, status_code)
        self.signal = signal or RateLimitSignal()
        self.secondary = secondary


class FatalRemoteError(RemoteError):
    """Raised for GitHub API failures that must not be retried (auth, not found, validation)."""

    pass


class RetryExhaustedError(Exception):
    """Raised when a transient failure persists through every allowed attempt."""

    def __init__(self, operation: str, attempts: int, last_error: TransientRemoteError) -> None:
        """Initializes the exception with the attempts made and the last rate limit diagnostics."""
        signal = last_error.signal
        super().__init__(
            f"Gave up on {operation} after {attempts} attempts (0 attempts remaining): {last_error.message} "
            f"[status={last_error.status_code}, rate limit resource={signal.resource}, limit={signal.limit}, "
            f"used={signal.used}, remaining={signal.remaining_requests}]"
        )
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error
        self.signal = signal


def _response_message(exc: RequestFailed) -> str:
    """Extract the most descriptive message available from a failed GitHub response."""
    try:
        error_data = exc.response.json()
    except Exception:
        error_data = {}
    if isinstance(error_data, dict) and error_data.get("message"):
        message = str(error_data["message"])
        errors = error_data.get("errors")
        return f"{message} | errors: {errors}" if errors else message
    return str(exc)


def classify_github_exception(exc: Exception) -> RemoteError | None:
    """Classify a raw exception from the GitHub client into a transient or fatal remote error.

    Returns None for exceptions that did not come from a GitHub API response and
    carry no rate limit marker (for example, connection errors), which callers
    re-raise untouched.
    """
    if isinstance(exc, RemoteError):
        return exc

    if isinstance(exc, RequestFailed):
        status_code = exc.response.status_code
        message = _response_message(exc)
        lowered = message.lower()
        signal = RateLimitSignal.from_headers(exc.response.headers)
        retry_after = getattr(exc, "retry_after", None)
        if signal.retry_after_seconds is None and isinstance(retry_after, timedelta):
            signal = replace(signal, retry_after_seconds=retry_after.total_seconds())

        secondary = isinstance(exc, SecondaryRateLimitExceeded) or any(marker in lowered for marker in SECONDARY_RATE_LIMIT_MESSAGE_MARKERS)
        is_rate_limit = (
            isinstance(exc, (PrimaryRateLimitExceeded, SecondaryRateLimitExceeded))
            or status_code in (403, 429)
            or any(marker in lowered for marker in RATE_LIMIT_MESSAGE_MARKERS)
        )
        if is_rate_limit:
            return TransientRemoteError(message, status_code=status_code, signal=signal, secondary=secondary)
        return FatalRemoteError(f"GitHub {status_code} error: {message}", status_code=status_code)

    lowered = str(exc).lower()
    if any(marker in lowered for marker in RATE_LIMIT_MESSAGE_MARKERS):
        secondary = any(marker in lowered for marker in SECONDARY_RATE_LIMIT_MESSAGE_MARKERS)
        return TransientRemoteError(str(exc), secondary=secondary)
    return None
