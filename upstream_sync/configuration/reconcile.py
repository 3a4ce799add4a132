"""Reconcile configuration between CLI arguments and environment variables.

CLI arguments take precedence over environment settings. Every required
element is checked here, before any remote call is made.
"""

from pathlib import Path

import structlog

from upstream_sync.configuration.env import settings
from upstream_sync.configuration.exceptions import RequiredConfigurationElementError
from upstream_sync.configuration.models import InstallActionlintConfig, TagOnMergeConfig, UpstreamSyncConfig
from upstream_sync.utils.github import split_repository_in_configuration
from upstream_sync.utils.retry import RetryPolicy

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def _require(value: str | None, name: str, cli_name: str, env_name: str) -> str:
    """Return a stripped required value, raising if it is missing or blank."""
    if value is None or not value.strip():
        raise RequiredConfigurationElementError(name=name, cli_name=cli_name, env_name=env_name)
    return value.strip()


def _retry_policy() -> RetryPolicy:
    if settings.RETRY_MAX_ATTEMPTS < 1:
        raise ValueError(f"RETRY_MAX_ATTEMPTS must be at least 1, got {settings.RETRY_MAX_ATTEMPTS}")
    return RetryPolicy(max_attempts=settings.RETRY_MAX_ATTEMPTS, base_delay_ms=settings.RETRY_BASE_DELAY_MS)


async def reconcile_upstream_sync_configuration(
    cli_target_repo: str | None = None,
    cli_upstream_repo: str | None = None,
    cli_github_token: str | None = None,
    cli_github_api_url: str | None = None,
) -> UpstreamSyncConfig:
    """Reconcile the sync-tags configuration.

    Raises:
        RequiredConfigurationElementError: If a required input is missing or blank.
        ValueError: If a repository is not in 'owner/repo' format.
    """
    target_repo = _require(cli_target_repo or settings.TARGET_REPO, "Target repository", "--target-repo", "TARGET_REPO")
    upstream_repo = _require(cli_upstream_repo or settings.UPSTREAM_REPO, "Upstream repository", "--upstream-repo", "UPSTREAM_REPO")
    github_token = _require(cli_github_token or settings.GITHUB_TOKEN, "GitHub token", "--github-token", "GITHUB_TOKEN")

    target_owner, target_name = await split_repository_in_configuration(target_repo)
    upstream_owner, upstream_name = await split_repository_in_configuration(upstream_repo)

    config = UpstreamSyncConfig(
        github_api_url=cli_github_api_url or settings.GITHUB_API_URL,
        github_token=github_token,
        retry_policy=_retry_policy(),
        target_repo=f"{target_owner}/{target_name}",
        upstream_repo=f"{upstream_owner}/{upstream_name}",
        upstream_repo_url=f"{settings.GITHUB_SERVER_URL.rstrip('/')}/{upstream_owner}/{upstream_name}.git",
        include_prereleases=settings.INCLUDE_PRERELEASES,
        tag_page_delay_seconds=settings.TAG_PAGE_DELAY_SECONDS,
        git_user_name=settings.GIT_USER_NAME,
        git_user_email=settings.GIT_USER_EMAIL,
        upstream_remote_name=settings.UPSTREAM_REMOTE_NAME,
        target_remote_name=settings.TARGET_REMOTE_NAME,
    )
    logger.debug("Reconciled sync-tags configuration", target_repo=config.target_repo, upstream_repo=config.upstream_repo)
    return config


async def reconcile_tag_on_merge_configuration(
    cli_github_token: str | None = None,
    cli_repo: str | None = None,
    cli_event_path: Path | None = None,
    cli_github_api_url: str | None = None,
) -> TagOnMergeConfig:
    """Reconcile the tag-on-merge configuration.

    The repository defaults to GITHUB_REPOSITORY and the event payload to
    GITHUB_EVENT_PATH, both set by the GitHub Actions runner.

    Raises:
        RequiredConfigurationElementError: If a required input is missing or blank.
        ValueError: If the repository is not in 'owner/repo' format.
    """
    github_token = _require(cli_github_token or settings.GITHUB_TOKEN, "GitHub token", "--github-token", "GITHUB_TOKEN")
    repo = _require(cli_repo or settings.GITHUB_REPOSITORY, "Repository", "--repo", "GITHUB_REPOSITORY")
    owner, repo_name = await split_repository_in_configuration(repo)

    return TagOnMergeConfig(
        github_api_url=cli_github_api_url or settings.GITHUB_API_URL,
        github_token=github_token,
        retry_policy=_retry_policy(),
        repo=f"{owner}/{repo_name}",
        event_path=cli_event_path or settings.GITHUB_EVENT_PATH,
    )


async def reconcile_install_actionlint_configuration(
    cli_expected_hash: str | None = None,
    cli_actionlint_version: str | None = None,
) -> InstallActionlintConfig:
    """Reconcile the install-actionlint configuration.

    Raises:
        RequiredConfigurationElementError: If a required input is missing or blank.
    """
    expected_hash = _require(
        cli_expected_hash or settings.ACTIONLINT_EXPECTED_HASH, "Expected script hash", "--expected-hash", "ACTIONLINT_EXPECTED_HASH"
    )
    actionlint_version = _require(
        cli_actionlint_version or settings.ACTIONLINT_VERSION, "Actionlint version", "--actionlint-version", "ACTIONLINT_VERSION"
    )
    return InstallActionlintConfig(expected_hash=expected_hash.lower(), actionlint_version=actionlint_version)
