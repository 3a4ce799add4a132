"""Helpers for reporting to the GitHub Actions runner through workflow commands."""

import traceback

import typer


def escape_workflow_command_data(data: str) -> str:
    """Escape a message so it survives as the data of a workflow command."""
    return data.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def format_error_annotation(message: str) -> str:
    """Return an ::error:: workflow command carrying the message."""
    return f"::error::{escape_workflow_command_data(message)}"


def report_failure(exc: BaseException) -> None:
    """Mark the run as failed with the error message and its stack trace."""
    details = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    typer.echo(format_error_annotation(f"{exc}\n{details}".rstrip()))
