"""Data models for upstream tag synchronization."""

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict


@dataclass(frozen=True)
class SemanticVersion:
    """A parsed MAJOR.MINOR.PATCH[-PRERELEASE][+BUILD] version.

    Build metadata is kept for display but never takes part in precedence.
    """

    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()
    build: tuple[str, ...] = ()

    @property
    def is_prerelease(self) -> bool:
        """Whether the version carries pre-release identifiers."""
        return bool(self.prerelease)

    @property
    def precedence_key(self) -> tuple:
        """Sort key implementing semantic version precedence.

        Numeric identifiers compare numerically and rank below alphanumeric
        ones, a shorter identifier list ranks lower when all shared
        identifiers are equal, and a release ranks above its pre-releases.
        """
        identifiers = tuple((0, int(part), "") if part.isdigit() else (1, 0, part) for part in self.prerelease)
        return (self.major, self.minor, self.patch, not self.prerelease, identifiers)

    def __str__(self) -> str:
        version = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            version += "-" + ".".join(self.prerelease)
        if self.build:
            version += "+" + ".".join(self.build)
        return version


@dataclass(frozen=True)
class VersionTag:
    """A repository tag and the semantic version parsed from its name, if any."""

    name: str
    version: SemanticVersion | None = None

    @property
    def is_valid(self) -> bool:
        """Whether the tag name is a valid semantic version."""
        return self.version is not None


class SyncState(str, Enum):
    """States of one end-to-end upstream sync attempt."""

    START = "start"
    TAG_RESOLVED = "tag_resolved"
    SKIPPED = "skipped"
    BRANCH_PUSHED = "branch_pushed"
    PR_CREATED = "pr_created"
    LABELED = "labeled"
    FAILED = "failed"


@dataclass
class UpstreamSyncResult:
    """Contains the outcome of the upstream tag sync workflow."""

    upstream_repo: str
    target_repo: str
    state: SyncState = SyncState.START
    tag_name: str | None = None
    branch_name: str | None = None
    pull_request_number: int | None = None
    labels: list[str] = field(default_factory=list)
    reason: str | None = None


class TagOnMergeStatus(str, Enum):
    """Outcome of the tag-on-merge workflow."""

    TAGGED = "tagged"
    NOT_MERGED = "not_merged"
    NOT_SYNC_BRANCH = "not_sync_branch"


@dataclass
class TagOnMergeResult:
    """Contains the outcome of the tag-on-merge workflow."""

    status: TagOnMergeStatus
    tag_name: str | None = None
    sha: str | None = None


class PullRequestHead(BaseModel):
    """Head branch of a pull request in a webhook event payload."""

    model_config = ConfigDict(extra="ignore")

    ref: str


class PullRequestEvent(BaseModel):
    """The subset of a pull_request webhook event payload used to tag merges."""

    model_config = ConfigDict(extra="ignore")

    merged: bool
    head: PullRequestHead
    number: int
    merge_commit_sha: str | None = None


class SyncPullRequestBody(BaseModel):
    """Values rendered into the sync pull request body template."""

    tag_name: str
    upstream_repo: str
    default_branch: str
    branch_name: str
