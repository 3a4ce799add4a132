"""General utility functions for sync branch and label names."""

from upstream_sync.utils.constants import SYNC_BRANCH_PATTERN, SYNC_BRANCH_PREFIX


def generate_sync_label(tag_name: str) -> str:
    """Generate the deterministic sync label for an upstream tag, like 'sync/upstream-v1.2.3'."""
    return f"{SYNC_BRANCH_PREFIX}{tag_name}"


def generate_sync_branch_name(tag_name: str) -> str:
    """Generate the sync branch name for an upstream tag.

    The branch name and the sync label are the same string, so a branch can
    always be traced back to the label that marks its tag as processed.
    """
    return generate_sync_label(tag_name)


def extract_tag_from_branch(branch_name: str | None) -> str | None:
    """Extract the upstream tag name from a sync branch name, or None if it is not a sync branch."""
    if not branch_name:
        return None
    match = SYNC_BRANCH_PATTERN.match(branch_name)
    return match.group(1) if match else None
