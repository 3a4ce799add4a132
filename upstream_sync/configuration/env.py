"""Pydantic Settings model for application configuration."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from upstream_sync.utils.constants import (
    DEFAULT_BASE_DELAY_MS,
    DEFAULT_GIT_USER_EMAIL,
    DEFAULT_GIT_USER_NAME,
    DEFAULT_GITHUB_SERVER_URL,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_TAG_PAGE_DELAY_SECONDS,
    DEFAULT_TARGET_REMOTE_NAME,
    DEFAULT_UPSTREAM_REMOTE_NAME,
)


class Settings(BaseSettings):
    """Environment variable settings for the application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # GitHub API settings
    GITHUB_API_URL: str = "https://api.github.com"
    GITHUB_SERVER_URL: str = DEFAULT_GITHUB_SERVER_URL
    GITHUB_TOKEN: str | None = None

    # Upstream tag sync settings
    TARGET_REPO: str | None = None
    UPSTREAM_REPO: str | None = None
    INCLUDE_PRERELEASES: bool = False
    TAG_PAGE_DELAY_SECONDS: float = DEFAULT_TAG_PAGE_DELAY_SECONDS

    # Tag-on-merge settings, provided by the GitHub Actions runner
    GITHUB_REPOSITORY: str | None = None
    GITHUB_EVENT_PATH: Path | None = None

    # Retry settings
    RETRY_MAX_ATTEMPTS: int = DEFAULT_MAX_ATTEMPTS
    RETRY_BASE_DELAY_MS: int = DEFAULT_BASE_DELAY_MS

    # Git settings
    GIT_USER_NAME: str = DEFAULT_GIT_USER_NAME
    GIT_USER_EMAIL: str = DEFAULT_GIT_USER_EMAIL
    UPSTREAM_REMOTE_NAME: str = DEFAULT_UPSTREAM_REMOTE_NAME
    TARGET_REMOTE_NAME: str = DEFAULT_TARGET_REMOTE_NAME

    # Actionlint installer settings
    ACTIONLINT_EXPECTED_HASH: str | None = None
    ACTIONLINT_VERSION: str | None = None


settings = Settings()
