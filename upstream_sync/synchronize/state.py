"""Contains logic for deciding whether an upstream tag was already synchronized."""

import structlog

from upstream_sync.github.abc import GitHubClientBase

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


async def is_already_processed(github_adapter: GitHubClientBase, sync_label: str) -> bool:
    """Check whether any issue or pull request in the target repository carries the sync label.

    Items in any state count, so a sync pull request that was closed without
    merging keeps its tag from being proposed again. The label outlives the
    sync branch, which may have been deleted.

    Two concurrent runs can both pass this check before either one labels a
    pull request. Workflows that need strict exclusivity must serialize runs
    with a concurrency group.
    """
    labeled_items = await github_adapter.list_issues_with_label(sync_label, state="all", per_page=1)
    if labeled_items:
        logger.info(
            "Found existing issue or pull request with sync label",
            sync_label=sync_label,
            number=labeled_items[0].number,
        )
        return True
    logger.info("No existing issue or pull request with sync label", sync_label=sync_label)
    return False
