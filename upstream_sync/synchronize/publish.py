"""Contains logic for publishing sync branches, sync pull requests and sync tags."""

import structlog
from githubkit.versions.latest.models import PullRequest

from upstream_sync.github.abc import GitHubClientBase
from upstream_sync.synchronize.exceptions import PreconditionViolationError
from upstream_sync.synchronize.git import GitClient
from upstream_sync.synchronize.models import SyncPullRequestBody
from upstream_sync.utils.constants import (
    DEFAULT_TARGET_REMOTE_NAME,
    DEFAULT_UPSTREAM_REMOTE_NAME,
    SYNC_PULL_REQUEST_TITLE_TEMPLATE,
    SYNC_TAG_MESSAGE_TEMPLATE,
)
from upstream_sync.utils.helpers import extract_tag_from_branch
from upstream_sync.utils.templates import get_packaged_template, render_template_with_model

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


async def create_sync_tag(
    github_adapter: GitHubClientBase,
    branch_name: str,
    merge_commit_sha: str | None,
    pull_request_number: int,
) -> str:
    """Tag the merge commit of a merged sync pull request with the upstream tag name.

    Creates an annotated tag object and then the refs/tags/<tag> reference
    pointing at it.

    Returns:
        The name of the created tag

    Raises:
        PreconditionViolationError: If the branch is not a sync branch or the
            merge commit SHA is missing
    """
    tag_name = extract_tag_from_branch(branch_name)
    if tag_name is None:
        logger.error("Branch is not a sync branch", branch_name=branch_name, pull_request_number=pull_request_number)
        raise PreconditionViolationError(f"Branch '{branch_name}' does not match the sync branch pattern 'sync/upstream-<tag>'")
    if not merge_commit_sha:
        logger.error("Merge commit SHA is undefined", branch_name=branch_name, pull_request_number=pull_request_number)
        raise PreconditionViolationError(f"Merge commit SHA is undefined for pull request #{pull_request_number}")

    message = SYNC_TAG_MESSAGE_TEMPLATE.format(pull_request_number=pull_request_number)
    logger.info("Creating tag", tag_name=tag_name, sha=merge_commit_sha, pull_request_number=pull_request_number)
    tag_object = await github_adapter.create_tag_object(tag_name=tag_name, message=message, target_sha=merge_commit_sha)
    await github_adapter.create_reference(ref=f"refs/tags/{tag_name}", sha=tag_object.sha)
    logger.info("Created tag", tag_name=tag_name, tag_object_sha=tag_object.sha)
    return tag_name


def push_sync_branch(
    git_client: GitClient,
    upstream_repo_url: str,
    tag_name: str,
    branch_name: str,
    upstream_remote: str = DEFAULT_UPSTREAM_REMOTE_NAME,
    target_remote: str = DEFAULT_TARGET_REMOTE_NAME,
) -> None:
    """Fetch only the upstream tag, branch from it and force-push the branch to the target remote.

    The branch name embeds the tag, so a force-push only ever overwrites an
    earlier attempt for the same tag.
    """
    git_client.add_remote(upstream_remote, upstream_repo_url)
    git_client.fetch_tag(upstream_remote, tag_name)
    git_client.checkout_new_branch(branch_name, tag_name)
    git_client.force_push(target_remote, branch_name)
    logger.info("Pushed sync branch", branch_name=branch_name, tag_name=tag_name, remote=target_remote)


def render_sync_pull_request_body(tag_name: str, upstream_repo: str, default_branch: str, branch_name: str) -> str:
    """Render the sync pull request body from its packaged template."""
    template = get_packaged_template("sync_pull_request_body.j2")
    model = SyncPullRequestBody(tag_name=tag_name, upstream_repo=upstream_repo, default_branch=default_branch, branch_name=branch_name)
    return render_template_with_model(model=model, template=template)


async def open_sync_pull_request(
    github_adapter: GitHubClientBase,
    tag_name: str,
    upstream_repo: str,
    branch_name: str,
    default_branch: str,
) -> PullRequest:
    """Open a pull request from the sync branch into the target's default branch."""
    title = SYNC_PULL_REQUEST_TITLE_TEMPLATE.format(tag_name=tag_name)
    body = render_sync_pull_request_body(tag_name, upstream_repo, default_branch, branch_name)
    pull_request = await github_adapter.create_pull_request(title=title, head=branch_name, base=default_branch, body=body)
    logger.info("Created sync pull request", number=pull_request.number, title=title, head=branch_name, base=default_branch)
    return pull_request


async def label_sync_pull_request(github_adapter: GitHubClientBase, pull_request_number: int, labels: list[str]) -> None:
    """Attach labels to an existing sync pull request.

    A failure here leaves the pull request unlabeled; the error propagates so
    the run is reported as failed.
    """
    try:
        await github_adapter.add_labels_to_issue(issue_number=pull_request_number, labels=labels)
    except Exception as exc:
        logger.error(
            "Failed to label sync pull request, the pull request exists without its sync labels",
            number=pull_request_number,
            labels=labels,
            error=str(exc),
        )
        raise
    logger.info("Labeled sync pull request", number=pull_request_number, labels=labels)
