"""Resolved configuration for each command, reconciled from CLI arguments and environment variables."""

from dataclasses import dataclass
from pathlib import Path

from upstream_sync.utils.retry import RetryPolicy


@dataclass
class BaseConfig:
    """Configuration shared by the commands that call the GitHub API."""

    github_api_url: str
    github_token: str
    retry_policy: RetryPolicy


@dataclass
class UpstreamSyncConfig(BaseConfig):
    """Configuration class for the sync-tags command."""

    target_repo: str
    upstream_repo: str
    upstream_repo_url: str
    include_prereleases: bool
    tag_page_delay_seconds: float
    git_user_name: str
    git_user_email: str
    upstream_remote_name: str
    target_remote_name: str


@dataclass
class TagOnMergeConfig(BaseConfig):
    """Configuration class for the tag-on-merge command."""

    repo: str
    event_path: Path | None


@dataclass
class InstallActionlintConfig:
    """Configuration class for the install-actionlint command."""

    expected_hash: str
    actionlint_version: str
