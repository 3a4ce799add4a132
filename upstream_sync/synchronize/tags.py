"""Contains logic for resolving the latest semantic version tag of a repository."""

import re
from collections.abc import Iterable

import structlog

from upstream_sync.github.abc import GitHubClientBase
from upstream_sync.synchronize.models import SemanticVersion, VersionTag
from upstream_sync.utils.constants import DEFAULT_TAG_PAGE_DELAY_SECONDS, SEMVER_PATTERN, TAG_PAGE_SIZE

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

_TAG_DECORATION_PATTERN = re.compile(r"^[=vV]+")


def clean_tag_name(tag_name: str) -> str:
    """Strip whitespace and a conventional leading 'v' (or '=') from a tag name."""
    return _TAG_DECORATION_PATTERN.sub("", tag_name.strip())


def parse_version_tag(tag_name: str) -> VersionTag:
    """Parse a tag name into a VersionTag.

    The cleaned name must be a full semantic version. Any pre-release
    identifiers are accepted, including purely numeric ones such as '1.0.0-1'.
    Build metadata is kept but ignored for ordering.
    """
    match = SEMVER_PATTERN.match(clean_tag_name(tag_name))
    if match is None:
        return VersionTag(name=tag_name)

    prerelease = match.group("prerelease")
    build = match.group("build")
    version = SemanticVersion(
        major=int(match.group("major")),
        minor=int(match.group("minor")),
        patch=int(match.group("patch")),
        prerelease=tuple(prerelease.split(".")) if prerelease else (),
        build=tuple(build.split(".")) if build else (),
    )
    return VersionTag(name=tag_name, version=version)


def select_latest_version_tag(tag_names: Iterable[str], include_prereleases: bool = False) -> VersionTag | None:
    """Return the tag with the highest semantic version precedence, ignoring tags that are not semantic versions.

    Unless include_prereleases is set, pre-releases are only candidates when
    no stable release exists, so 1.2.10 wins over 2.0.0-rc.1.
    """
    valid_tags = [tag for tag in (parse_version_tag(name) for name in tag_names) if tag.version is not None]
    if not valid_tags:
        return None
    if not include_prereleases:
        stable_tags = [tag for tag in valid_tags if not tag.version.is_prerelease]  # type: ignore[union-attr]
        valid_tags = stable_tags or valid_tags
    return max(valid_tags, key=lambda tag: tag.version.precedence_key)  # type: ignore[union-attr]


async def find_latest_version_tag(
    github_adapter: GitHubClientBase,
    page_delay_seconds: float = DEFAULT_TAG_PAGE_DELAY_SECONDS,
    include_prereleases: bool = False,
) -> VersionTag | None:
    """Find the latest semantic version tag of the adapter's repository.

    Returns None, without raising, when the repository has no tags or no tag
    that is a valid semantic version.
    """
    tags = await github_adapter.list_tags(per_page=TAG_PAGE_SIZE, page_delay_seconds=page_delay_seconds)
    if not tags:
        logger.info("No tags found in repository")
        return None

    latest_tag = select_latest_version_tag((tag.name for tag in tags), include_prereleases=include_prereleases)
    if latest_tag is None:
        logger.warning("No semver-compliant tags found in repository", total_tags=len(tags))
        return None

    logger.info("Found latest tag", tag_name=latest_tag.name, version=str(latest_tag.version), total_tags=len(tags))
    return latest_tag
