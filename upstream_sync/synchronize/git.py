"""Runs the git commands needed to publish a sync branch.

Each method maps to a single git command. The committer identity is passed
with `-c user.name=... -c user.email=...` on every invocation rather than
written to the global git configuration, so concurrent runs sharing a machine
never see each other's identity.

Failures raise `GitCommandError`; they are not retried.
"""

import subprocess
from pathlib import Path

import structlog

from upstream_sync.synchronize.exceptions import GitCommandError
from upstream_sync.utils.constants import DEFAULT_GIT_USER_EMAIL, DEFAULT_GIT_USER_NAME

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


class GitClient:
    """Thin wrapper around the git command line in a working directory."""

    def __init__(
        self,
        user_name: str = DEFAULT_GIT_USER_NAME,
        user_email: str = DEFAULT_GIT_USER_EMAIL,
        cwd: Path | None = None,
    ) -> None:
        """Initialize the client with the identity used for every command."""
        self.user_name = user_name
        self.user_email = user_email
        self.cwd = cwd

    def _run(self, *args: str) -> subprocess.CompletedProcess[str]:
        cmd = ["git", "-c", f"user.name={self.user_name}", "-c", f"user.email={self.user_email}", *args]
        logger.info("Running git command", command=" ".join(["git", *args]))
        return subprocess.run(cmd, cwd=self.cwd, capture_output=True, text=True, check=False)

    def _git(self, *args: str) -> str:
        result = self._run(*args)
        if result.returncode != 0:
            logger.error("Git command failed", command=" ".join(["git", *args]), returncode=result.returncode, stderr=result.stderr.strip())
            raise GitCommandError(args, result.returncode, result.stderr)
        return result.stdout

    def remote_exists(self, name: str) -> bool:
        """Check whether a remote with the given name is configured."""
        return self._run("remote", "get-url", name).returncode == 0

    def add_remote(self, name: str, url: str) -> None:
        """Add a remote, or point an existing remote of the same name at the URL."""
        if self.remote_exists(name):
            self._git("remote", "set-url", name, url)
        else:
            self._git("remote", "add", name, url)

    def fetch_tag(self, remote: str, tag_name: str) -> None:
        """Fetch a single tag from a remote into the local tag of the same name."""
        self._git("fetch", remote, f"refs/tags/{tag_name}:refs/tags/{tag_name}", "--no-tags")

    def checkout_new_branch(self, branch_name: str, start_point: str) -> None:
        """Create and check out a new local branch at the start point."""
        self._git("checkout", "-b", branch_name, start_point)

    def force_push(self, remote: str, branch_name: str) -> None:
        """Force-push a local branch to the remote branch of the same name."""
        self._git("push", remote, branch_name, "--force")
