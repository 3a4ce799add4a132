"""Defines the Command Line Interface (CLI) using Typer."""

import asyncio
from pathlib import Path

import typer
from dotenv import load_dotenv
from typer import Option
from typing_extensions import Annotated

from upstream_sync.configuration.reconcile import (
    reconcile_install_actionlint_configuration,
    reconcile_tag_on_merge_configuration,
    reconcile_upstream_sync_configuration,
)
from upstream_sync.install.actionlint import install_actionlint
from upstream_sync.synchronize.driver import run_tag_on_merge_workflow, run_upstream_tag_sync_workflow
from upstream_sync.synchronize.models import SyncState, TagOnMergeStatus
from upstream_sync.utils.actions import report_failure

load_dotenv()

typer_app = typer.Typer(pretty_exceptions_show_locals=False)


@typer_app.command(name="sync-tags")
def sync_tags_cli(
    target_repo: Annotated[str | None, Option(envvar="TARGET_REPO", help="Repository to open the sync pull request in, as 'owner/repo'.")] = None,
    upstream_repo: Annotated[str | None, Option(envvar="UPSTREAM_REPO", help="Repository to read tags from, as 'owner/repo'.")] = None,
    github_token: Annotated[str | None, Option(envvar="GITHUB_TOKEN", help="GitHub token.")] = None,
    github_api_url: Annotated[str | None, Option(envvar="GITHUB_API_URL", help="GitHub API URL.")] = None,
) -> None:
    """Open a pull request proposing the latest upstream release tag to the target repository."""
    try:
        config = asyncio.run(
            reconcile_upstream_sync_configuration(
                cli_target_repo=target_repo,
                cli_upstream_repo=upstream_repo,
                cli_github_token=github_token,
                cli_github_api_url=github_api_url,
            )
        )
        result = asyncio.run(run_upstream_tag_sync_workflow(config))
    except Exception as exc:
        report_failure(exc)
        raise typer.Exit(1) from exc

    if result.state == SyncState.SKIPPED:
        typer.echo(f"Nothing to sync: {result.reason}")
        return
    typer.echo(f"Opened pull request #{result.pull_request_number} for {result.tag_name} with labels {', '.join(result.labels)}")


@typer_app.command(name="tag-on-merge")
def tag_on_merge_cli(
    github_token: Annotated[str | None, Option(envvar="GITHUB_TOKEN", help="GitHub token.")] = None,
    repo: Annotated[str | None, Option(envvar="GITHUB_REPOSITORY", help="Repository to create the tag in, as 'owner/repo'.")] = None,
    event_path: Annotated[Path | None, Option(envvar="GITHUB_EVENT_PATH", help="Path to the webhook event payload.")] = None,
    github_api_url: Annotated[str | None, Option(envvar="GITHUB_API_URL", help="GitHub API URL.")] = None,
) -> None:
    """Tag the merge commit of a merged sync pull request with the upstream tag name."""
    try:
        config = asyncio.run(
            reconcile_tag_on_merge_configuration(
                cli_github_token=github_token,
                cli_repo=repo,
                cli_event_path=event_path,
                cli_github_api_url=github_api_url,
            )
        )
        result = asyncio.run(run_tag_on_merge_workflow(config))
    except Exception as exc:
        report_failure(exc)
        raise typer.Exit(1) from exc

    if result.status == TagOnMergeStatus.TAGGED:
        typer.echo(f"Created tag {result.tag_name} at {result.sha}")
    elif result.status == TagOnMergeStatus.NOT_SYNC_BRANCH:
        typer.echo("This PR is not from a sync branch. Skipping.")
    else:
        typer.echo("This is not a merged PR. Skipping.")


@typer_app.command(name="install-actionlint")
def install_actionlint_cli(
    expected_hash: Annotated[
        str | None, Option(envvar="ACTIONLINT_EXPECTED_HASH", help="Expected SHA-256 hash of the actionlint download script.")
    ] = None,
    actionlint_version: Annotated[str | None, Option(envvar="ACTIONLINT_VERSION", help="Version of actionlint to install.")] = None,
) -> None:
    """Install actionlint after verifying the checksum of its download script."""
    try:
        config = asyncio.run(
            reconcile_install_actionlint_configuration(
                cli_expected_hash=expected_hash,
                cli_actionlint_version=actionlint_version,
            )
        )
        install_actionlint(expected_hash=config.expected_hash, actionlint_version=config.actionlint_version)
    except Exception as exc:
        report_failure(exc)
        raise typer.Exit(1) from exc

    typer.echo(f"Installed actionlint {config.actionlint_version}")


if __name__ == "__main__":
    typer_app()
