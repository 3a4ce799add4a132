"""Sets up the authenticated githubkit client."""

from typing import TypeAlias

from githubkit import GitHub
from githubkit.auth import TokenAuthStrategy

GitHubClient: TypeAlias = GitHub[TokenAuthStrategy]


async def get_github_client(github_token: str, github_api_url: str) -> GitHubClient:
    """Returns a GitHub client authenticated with the bearer token handed in by the calling workflow.

    HTTP caching is disabled to always get fresh data, and githubkit's own
    automatic retry is disabled so rate limits surface to our retry logic.
    """
    if not github_token:
        raise RuntimeError("GitHub authentication requires a github token.")
    return GitHub(auth=TokenAuthStrategy(github_token), base_url=github_api_url, http_cache=False, auto_retry=False)
