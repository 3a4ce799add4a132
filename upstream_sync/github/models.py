"""Models describing transient metadata returned by the GitHub API."""

from collections.abc import Mapping
from dataclasses import dataclass

import structlog

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def _parse_int_header(headers: Mapping[str, str], name: str) -> int | None:
    value = headers.get(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        logger.warning("Invalid rate limit header value", header=name, value=value)
        return None


@dataclass(frozen=True)
class RateLimitSignal:
    """Rate limit metadata observed on a single GitHub API response.

    Only ever used for the retry decision that follows the response it was
    read from.
    """

    remaining_requests: int | None = None
    reset_epoch_ms: int | None = None
    retry_after_seconds: float | None = None
    resource: str | None = None
    limit: int | None = None
    used: int | None = None

    @classmethod
    def from_headers(cls, headers: Mapping[str, str] | None) -> "RateLimitSignal":
        """Build a signal from the x-ratelimit-* and retry-after response headers."""
        if not headers:
            return cls()
        lowered = {str(key).lower(): str(value) for key, value in headers.items()}

        reset_epoch_seconds = _parse_int_header(lowered, "x-ratelimit-reset")
        retry_after_seconds: float | None = None
        retry_after = lowered.get("retry-after")
        if retry_after is not None:
            try:
                retry_after_seconds = float(retry_after)
            except ValueError:
                logger.warning("Invalid retry-after header value", retry_after=retry_after)

        return cls(
            remaining_requests=_parse_int_header(lowered, "x-ratelimit-remaining"),
            reset_epoch_ms=reset_epoch_seconds * 1000 if reset_epoch_seconds is not None else None,
            retry_after_seconds=retry_after_seconds,
            resource=lowered.get("x-ratelimit-resource"),
            limit=_parse_int_header(lowered, "x-ratelimit-limit"),
            used=_parse_int_header(lowered, "x-ratelimit-used"),
        )

    @property
    def is_exhausted(self) -> bool:
        """Whether the primary rate limit is used up and a reset time is known."""
        return self.remaining_requests == 0 and self.reset_epoch_ms is not None
