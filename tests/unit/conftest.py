"""Fixtures for unit tests."""

import asyncio
from typing import Generator
from unittest.mock import AsyncMock

import pytest
import structlog
from pytest import MonkeyPatch


@pytest.fixture(autouse=True)
def configure_structlog_for_caplog() -> Generator[None, None, None]:
    """Configure structlog for use with caplog."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture
def no_sleep(monkeypatch: MonkeyPatch) -> AsyncMock:
    """Replace asyncio.sleep so retry and pagination delays return immediately.

    The mock records every requested delay in seconds.
    """
    sleep = AsyncMock(return_value=None)
    monkeypatch.setattr(asyncio, "sleep", sleep)
    return sleep
