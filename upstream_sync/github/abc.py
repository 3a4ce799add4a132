"""Base ABC for GitHub clients."""

from abc import ABC, abstractmethod
from typing import Any, Literal


class GitHubClientBase(ABC):
    """Base ABC for GitHub clients."""

    # Repository
    @abstractmethod
    async def get_repository(self) -> Any:
        """Get a repository."""
        pass

    @abstractmethod
    async def get_default_branch(self) -> str:
        """Get the name of the repository's default branch."""
        pass

    # Tags
    @abstractmethod
    async def list_tags(self, per_page: int = 100, page_delay_seconds: float = 1.0) -> list[Any]:
        """List all tags for a repository."""
        pass

    @abstractmethod
    async def create_tag_object(self, tag_name: str, message: str, target_sha: str) -> Any:
        """Create an annotated git tag object pointing at a commit."""
        pass

    @abstractmethod
    async def create_reference(self, ref: str, sha: str) -> Any:
        """Create a git reference (refs/heads/... or refs/tags/...)."""
        pass

    # Issues and Pull Requests
    @abstractmethod
    async def list_issues_with_label(self, label: str, state: Literal["open", "closed", "all"] = "all", per_page: int = 1) -> list[Any]:
        """List issues and pull requests carrying a label."""
        pass

    @abstractmethod
    async def create_pull_request(self, title: str, head: str, base: str, body: str | None = None, **kwargs: Any) -> Any:
        """Create a pull request for a repository."""
        pass

    @abstractmethod
    async def add_labels_to_issue(self, issue_number: int, labels: list[str]) -> Any:
        """Add labels to an issue (or pull request)."""
        pass
