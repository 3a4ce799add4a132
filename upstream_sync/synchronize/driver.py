"""Orchestrates the upstream tag sync and tag-on-merge workflows."""

import json
from pathlib import Path

import structlog
from pydantic import ValidationError

from upstream_sync.configuration.models import TagOnMergeConfig, UpstreamSyncConfig
from upstream_sync.github.abc import GitHubClientBase
from upstream_sync.github.adapter import GitHubKitAdapter
from upstream_sync.synchronize.git import GitClient
from upstream_sync.synchronize.models import (
    PullRequestEvent,
    SyncState,
    TagOnMergeResult,
    TagOnMergeStatus,
    UpstreamSyncResult,
)
from upstream_sync.synchronize.publish import create_sync_tag, label_sync_pull_request, open_sync_pull_request, push_sync_branch
from upstream_sync.synchronize.state import is_already_processed
from upstream_sync.synchronize.tags import find_latest_version_tag
from upstream_sync.utils.constants import (
    DEFAULT_TAG_PAGE_DELAY_SECONDS,
    DEFAULT_TARGET_REMOTE_NAME,
    DEFAULT_UPSTREAM_REMOTE_NAME,
    GENERIC_SYNC_LABEL,
)
from upstream_sync.utils.helpers import extract_tag_from_branch, generate_sync_branch_name, generate_sync_label

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


async def sync_upstream_tag(
    upstream_adapter: GitHubClientBase,
    target_adapter: GitHubClientBase,
    git_client: GitClient,
    upstream_repo: str,
    target_repo: str,
    upstream_repo_url: str,
    include_prereleases: bool = False,
    tag_page_delay_seconds: float = DEFAULT_TAG_PAGE_DELAY_SECONDS,
    upstream_remote_name: str = DEFAULT_UPSTREAM_REMOTE_NAME,
    target_remote_name: str = DEFAULT_TARGET_REMOTE_NAME,
) -> UpstreamSyncResult:
    """Propose the latest upstream tag to the target repository as a labeled pull request.

    Remote calls run strictly in order: resolve the upstream tag, check the
    target for the sync label, push the sync branch, open the pull request,
    then label it. Any error is logged with the state reached and re-raised.
    """
    result = UpstreamSyncResult(upstream_repo=upstream_repo, target_repo=target_repo)
    logger.info("Checking for updates", target_repo=target_repo, upstream_repo=upstream_repo)

    try:
        latest_tag = await find_latest_version_tag(
            upstream_adapter,
            page_delay_seconds=tag_page_delay_seconds,
            include_prereleases=include_prereleases,
        )
        if latest_tag is None:
            logger.info("No valid tags found in upstream repository", upstream_repo=upstream_repo)
            result.state = SyncState.SKIPPED
            result.reason = "no valid tags found in upstream repository"
            return result
        result.tag_name = latest_tag.name
        result.state = SyncState.TAG_RESOLVED
        logger.info("Latest upstream tag", tag_name=latest_tag.name)

        sync_label = generate_sync_label(latest_tag.name)
        if await is_already_processed(target_adapter, sync_label):
            logger.info("Pull request for sync label already exists or was previously processed", sync_label=sync_label)
            result.state = SyncState.SKIPPED
            result.reason = f"label {sync_label} already present"
            return result

        branch_name = generate_sync_branch_name(latest_tag.name)
        default_branch = await target_adapter.get_default_branch()

        push_sync_branch(
            git_client,
            upstream_repo_url=upstream_repo_url,
            tag_name=latest_tag.name,
            branch_name=branch_name,
            upstream_remote=upstream_remote_name,
            target_remote=target_remote_name,
        )
        result.branch_name = branch_name
        result.state = SyncState.BRANCH_PUSHED

        pull_request = await open_sync_pull_request(
            target_adapter,
            tag_name=latest_tag.name,
            upstream_repo=upstream_repo,
            branch_name=branch_name,
            default_branch=default_branch,
        )
        result.pull_request_number = pull_request.number
        result.state = SyncState.PR_CREATED

        labels = [GENERIC_SYNC_LABEL, sync_label]
        await label_sync_pull_request(target_adapter, pull_request.number, labels)
        result.labels = labels
        result.state = SyncState.LABELED
    except Exception as e:
        logger.error(
            "Upstream sync failed",
            state=result.state.value,
            tag_name=result.tag_name,
            pull_request_number=result.pull_request_number,
            error=str(e),
            error_type=type(e).__name__,
        )
        result.state = SyncState.FAILED
        raise

    logger.info("Created sync pull request", number=result.pull_request_number, tag_name=result.tag_name)
    return result


async def run_upstream_tag_sync_workflow(config: UpstreamSyncConfig, git_client: GitClient | None = None) -> UpstreamSyncResult:
    """Run the sync-tags workflow: set up clients for both repositories and sync the latest upstream tag."""
    upstream_adapter = await GitHubKitAdapter.create(
        repo=config.upstream_repo,
        github_token=config.github_token,
        github_api_url=config.github_api_url,
        retry_policy=config.retry_policy,
    )
    target_adapter = await GitHubKitAdapter.create(
        repo=config.target_repo,
        github_token=config.github_token,
        github_api_url=config.github_api_url,
        retry_policy=config.retry_policy,
    )
    if git_client is None:
        git_client = GitClient(user_name=config.git_user_name, user_email=config.git_user_email)

    return await sync_upstream_tag(
        upstream_adapter,
        target_adapter,
        git_client,
        upstream_repo=config.upstream_repo,
        target_repo=config.target_repo,
        upstream_repo_url=config.upstream_repo_url,
        include_prereleases=config.include_prereleases,
        tag_page_delay_seconds=config.tag_page_delay_seconds,
        upstream_remote_name=config.upstream_remote_name,
        target_remote_name=config.target_remote_name,
    )


def load_pull_request_event(event_path: Path | None) -> PullRequestEvent | None:
    """Load the pull_request record from a webhook event payload file.

    A missing file, unreadable JSON or a missing or malformed pull_request
    record all mean the run was not triggered by a pull request, and return None.
    """
    if event_path is None or not event_path.is_file():
        logger.info("No event payload found", event_path=str(event_path) if event_path else None)
        return None
    try:
        payload = json.loads(event_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Failed to read event payload", event_path=str(event_path), error=str(exc))
        return None

    pull_request = payload.get("pull_request") if isinstance(payload, dict) else None
    if pull_request is None:
        logger.info("Event payload has no pull request", event_path=str(event_path))
        return None
    try:
        return PullRequestEvent.model_validate(pull_request)
    except ValidationError as exc:
        logger.warning("Malformed pull request in event payload", event_path=str(event_path), errors=exc.errors())
        return None


def classify_pull_request_event(event: PullRequestEvent | None) -> TagOnMergeStatus | None:
    """Return the skip status for an event that must not be tagged, or None if it should be."""
    if event is None or not event.merged:
        logger.info("This is not a merged PR. Skipping.")
        return TagOnMergeStatus.NOT_MERGED
    if extract_tag_from_branch(event.head.ref) is None:
        logger.info("This PR is not from a sync branch. Skipping.", branch_name=event.head.ref, number=event.number)
        return TagOnMergeStatus.NOT_SYNC_BRANCH
    return None


async def tag_merged_sync_pull_request(github_adapter: GitHubClientBase, event: PullRequestEvent | None) -> TagOnMergeResult:
    """Tag the merge commit of a merged sync pull request; skip every other event."""
    if event is None:
        logger.info("This is not a merged PR. Skipping.")
        return TagOnMergeResult(status=TagOnMergeStatus.NOT_MERGED)
    skip_status = classify_pull_request_event(event)
    if skip_status is not None:
        return TagOnMergeResult(status=skip_status)

    tag_name = await create_sync_tag(
        github_adapter,
        branch_name=event.head.ref,
        merge_commit_sha=event.merge_commit_sha,
        pull_request_number=event.number,
    )
    logger.info("Successfully created tag", tag_name=tag_name, sha=event.merge_commit_sha)
    return TagOnMergeResult(status=TagOnMergeStatus.TAGGED, tag_name=tag_name, sha=event.merge_commit_sha)


async def run_tag_on_merge_workflow(config: TagOnMergeConfig) -> TagOnMergeResult:
    """Run the tag-on-merge workflow against the event payload of the current run."""
    event = load_pull_request_event(config.event_path)
    skip_status = classify_pull_request_event(event)
    if skip_status is not None:
        return TagOnMergeResult(status=skip_status)

    github_adapter = await GitHubKitAdapter.create(
        repo=config.repo,
        github_token=config.github_token,
        github_api_url=config.github_api_url,
        retry_policy=config.retry_policy,
    )
    return await tag_merged_sync_pull_request(github_adapter, event)
