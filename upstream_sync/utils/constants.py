"""Shared constants used across the application."""

import re

# Sync Branch and Label Constants
# -------------------------------

SYNC_BRANCH_PREFIX = "sync/upstream-"
"""Prefix shared by sync branch names and sync labels (e.g. sync/upstream-v1.2.3)."""

SYNC_BRANCH_PATTERN = re.compile(r"^sync/upstream-(.+)$")
"""Pattern to extract the upstream tag name from a sync branch name."""

GENERIC_SYNC_LABEL = "sync"
"""Label attached to every sync pull request regardless of tag."""

SYNC_TAG_MESSAGE_TEMPLATE = "Tag created from sync PR {pull_request_number}"
"""Annotated tag message used when tagging a merged sync pull request."""

SYNC_PULL_REQUEST_TITLE_TEMPLATE = "Sync: Update to upstream {tag_name}"
"""Title of the pull request opened for a new upstream tag."""

# Semantic Version Constants
# --------------------------

SEMVER_PATTERN = re.compile(
    r"^(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<prerelease>(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+(?P<build>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)
"""Strict semantic version pattern (MAJOR.MINOR.PATCH[-PRERELEASE][+BUILD])."""

# Retry Constants
# ---------------

DEFAULT_MAX_ATTEMPTS = 5
"""Default number of attempts (including the first) for a remote call."""

DEFAULT_BASE_DELAY_MS = 1000
"""Default base delay for exponential backoff, in milliseconds."""

SECONDARY_RATE_LIMIT_MIN_DELAY_MS = 60_000
"""Minimum wait for a secondary rate limit that carries no retry guidance."""

MAX_JITTER_MS = 1000
"""Upper bound (exclusive) of the random jitter added to every backoff delay."""

RATE_LIMIT_MESSAGE_MARKERS = ("rate limit", "ratelimit")
"""Lowercase substrings that mark an error message as rate-limit related."""

SECONDARY_RATE_LIMIT_MESSAGE_MARKERS = ("secondary rate limit", "abuse detection")
"""Lowercase substrings that mark an error message as a secondary rate limit."""

# Tag Listing Constants
# ---------------------

TAG_PAGE_SIZE = 100
"""Number of tags requested per page."""

DEFAULT_TAG_PAGE_DELAY_SECONDS = 1.0
"""Fixed pause between successive tag page fetches."""

# Git Constants
# -------------

DEFAULT_GIT_USER_NAME = "github-actions[bot]"
DEFAULT_GIT_USER_EMAIL = "github-actions[bot]@users.noreply.github.com"
DEFAULT_UPSTREAM_REMOTE_NAME = "upstream"
DEFAULT_TARGET_REMOTE_NAME = "origin"
DEFAULT_GITHUB_SERVER_URL = "https://github.com"

# Actionlint Constants
# --------------------

ACTIONLINT_SCRIPT_URL = "https://raw.githubusercontent.com/rhysd/actionlint/main/scripts/download-actionlint.bash"
"""Location of the upstream actionlint download script."""

ACTIONLINT_SCRIPT_FILENAME = "download-actionlint.bash"
