"""GitHub client adapter for the githubkit library."""

import asyncio
from functools import wraps
from typing import Any, Awaitable, Callable, Literal, Self, TypeVar

import structlog
from githubkit import Response
from githubkit.versions.latest.models import FullRepository, GitRef, GitTag, Issue, PullRequest, Tag

from upstream_sync.github.exceptions import FatalRemoteError, RemoteError, classify_github_exception
from upstream_sync.utils.constants import DEFAULT_TAG_PAGE_DELAY_SECONDS, TAG_PAGE_SIZE
from upstream_sync.utils.github import split_repository_in_configuration
from upstream_sync.utils.retry import RetryPolicy, retry_on_rate_limit

from .abc import GitHubClientBase
from .client import GitHubClient, get_github_client

logger = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


def handle_github_errors(func: F) -> F:
    """Decorator classifying GitHub API failures into transient or fatal remote errors.

    This is the single place where raw githubkit exceptions are inspected.
    Exceptions unrelated to an API response (connection errors and the like)
    propagate untouched.
    """

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)
        except RemoteError:
            raise
        except Exception as exc:
            classified = classify_github_exception(exc)
            if classified is None:
                raise
            if isinstance(classified, FatalRemoteError):
                logger.error(
                    "GitHub request failed",
                    function=func.__name__,
                    status_code=classified.status_code,
                    message=classified.message,
                )
            raise classified from exc

    return wrapper  # type: ignore


class GitHubKitAdapter(GitHubClientBase):
    """GitHub client adapter for the githubkit library."""

    def __init__(self, client: GitHubClient, owner: str, repo_name: str, retry_policy: RetryPolicy | None = None) -> None:
        """Initialize the GitHub client adapter with an already-initialized client."""
        self.client = client
        self.owner = owner
        self.repo_name = repo_name
        self.retry_policy = retry_policy or RetryPolicy()

    def _omit_null_parameters(self, **kwargs: Any) -> dict[str, Any]:
        """Omit parameters that are None."""
        return {k: v for k, v in kwargs.items() if v is not None}

    @property
    def full_name(self) -> str:
        """Repository name in 'owner/repo' format."""
        return f"{self.owner}/{self.repo_name}"

    @classmethod
    async def create(
        cls,
        repo: str,
        github_token: str,
        github_api_url: str = "https://api.github.com",
        retry_policy: RetryPolicy | None = None,
    ) -> Self:
        """Create a new GitHub client adapter.

        Args:
            repo: Repository in 'owner/repo' format
            github_token: Bearer token provided by the calling workflow
            github_api_url: GitHub API URL (defaults to https://api.github.com)
            retry_policy: Attempt cap and base delay for every API call

        Returns:
            Configured GitHubKitAdapter instance

        Raises:
            ValueError: If the repository is not in 'owner/repo' format
        """
        owner, repo_name = await split_repository_in_configuration(repo=repo)
        logger.info(
            "Creating client for GitHub instance and repository",
            github_api_url=github_api_url,
            owner=owner,
            repo_name=repo_name,
        )
        client = await get_github_client(github_token=github_token, github_api_url=github_api_url)
        return cls(client, owner, repo_name, retry_policy=retry_policy)

    # Repository
    @retry_on_rate_limit()
    @handle_github_errors
    async def get_repository(self) -> FullRepository:
        """Get the repository for the current client."""
        response: Response[FullRepository] = await self.client.rest.repos.async_get(owner=self.owner, repo=self.repo_name)
        return response.parsed_data

    async def get_default_branch(self) -> str:
        """Get the name of the repository's default branch."""
        repository = await self.get_repository()
        return repository.default_branch

    # Tags
    async def list_tags(self, per_page: int = TAG_PAGE_SIZE, page_delay_seconds: float = DEFAULT_TAG_PAGE_DELAY_SECONDS) -> list[Tag]:
        """List all tags for a repository, handling pagination.

        Each page fetch is retried on its own, and a fixed pause separates
        successive page fetches.

        Args:
            per_page: Number of tags per page (default: 100, max: 100)
            page_delay_seconds: Pause before fetching each page after the first

        Returns:
            List of tag objects, in the order GitHub returns them
        """

        @retry_on_rate_limit(self.retry_policy.max_attempts, self.retry_policy.base_delay_ms)
        @handle_github_errors
        async def _fetch_page(page: int) -> list[Tag]:
            response: Response[list[Tag]] = await self.client.rest.repos.async_list_tags(
                owner=self.owner,
                repo=self.repo_name,
                per_page=per_page,
                page=page,
            )
            return response.parsed_data

        all_tags: list[Tag] = []
        page: int = 1

        logger.info("Fetching tags", owner=self.owner, repo=self.repo_name, per_page=per_page)

        while True:
            if page > 1:
                await asyncio.sleep(page_delay_seconds)
            logger.debug(f"Fetching tags page {page}")
            tags: list[Tag] = await _fetch_page(page)

            if not tags:
                break

            all_tags.extend(tags)
            logger.info(f"Fetched {len(all_tags)} tags so far", owner=self.owner, repo=self.repo_name)

            if len(tags) < per_page:
                break

            page += 1

        logger.info("Fetched all tags", owner=self.owner, repo=self.repo_name, total_tags=len(all_tags))
        return all_tags

    @retry_on_rate_limit()
    @handle_github_errors
    async def create_tag_object(self, tag_name: str, message: str, target_sha: str) -> GitTag:
        """Create an annotated git tag object pointing at a commit."""
        response: Response[GitTag] = await self.client.rest.git.async_create_tag(
            owner=self.owner,
            repo=self.repo_name,
            data={
                "tag": tag_name,
                "message": message,
                "object": target_sha,
                "type": "commit",
            },
        )
        return response.parsed_data

    @retry_on_rate_limit()
    @handle_github_errors
    async def create_reference(self, ref: str, sha: str) -> GitRef:
        """Create a git reference such as refs/tags/v1.2.3."""
        response: Response[GitRef] = await self.client.rest.git.async_create_ref(
            owner=self.owner,
            repo=self.repo_name,
            ref=ref,
            sha=sha,
        )
        return response.parsed_data

    # Issues and Pull Requests
    @retry_on_rate_limit()
    @handle_github_errors
    async def list_issues_with_label(self, label: str, state: Literal["open", "closed", "all"] = "all", per_page: int = 1) -> list[Issue]:
        """List the first page of issues and pull requests carrying a label.

        GitHub's issues endpoint returns pull requests as well, so a single
        query covers both.
        """
        response: Response[list[Issue]] = await self.client.rest.issues.async_list_for_repo(
            owner=self.owner,
            repo=self.repo_name,
            labels=label,
            state=state,
            per_page=per_page,
        )
        return response.parsed_data

    @retry_on_rate_limit()
    @handle_github_errors
    async def create_pull_request(self, title: str, head: str, base: str, body: str | None = None, **kwargs: Any) -> PullRequest:
        """Create a pull request for a repository."""
        params = self._omit_null_parameters(title=title, head=head, base=base, body=body, **kwargs)
        response: Response[PullRequest] = await self.client.rest.pulls.async_create(
            owner=self.owner,
            repo=self.repo_name,
            **params,
        )
        return response.parsed_data

    @retry_on_rate_limit()
    @handle_github_errors
    async def add_labels_to_issue(self, issue_number: int, labels: list[str]) -> None:
        """Add labels to an issue (or pull request - GitHub considers them the same for label purposes)."""
        await self.client.rest.issues.async_add_labels(
            owner=self.owner,
            repo=self.repo_name,
            issue_number=issue_number,
            labels=labels,
        )
