"""Unit tests for GitHub Actions workflow command helpers."""

import pytest

from upstream_sync.utils.actions import escape_workflow_command_data, format_error_annotation, report_failure


def test_escape_workflow_command_data() -> None:
    """Test that percent signs and line breaks are escaped."""
    assert escape_workflow_command_data("100%\r\ndone\n") == "100%25%0D%0Adone%0A"


def test_format_error_annotation_is_single_line() -> None:
    """Test that a multi-line message becomes one error command."""
    annotation = format_error_annotation("first\nsecond")

    assert annotation == "::error::first%0Asecond"
    assert "\n" not in annotation


def test_report_failure_includes_message_and_traceback(capsys: pytest.CaptureFixture[str]) -> None:
    """Test that the failure is reported with its message and stack trace."""
    try:
        raise ValueError("Missing required configuration element")
    except ValueError as exc:
        report_failure(exc)

    output = capsys.readouterr().out.strip()
    assert output.startswith("::error::Missing required configuration element")
    assert "Traceback" in output
    assert "%0A" in output
    assert "\n" not in output
