"""Contains exceptions raised while synchronizing upstream tags."""

from collections.abc import Sequence


class PreconditionViolationError(Exception):
    """Raised when an action is invoked in a context it does not support."""

    pass


class GitCommandError(Exception):
    """Raised when a git command exits with a non-zero status."""

    def __init__(self, git_args: Sequence[str], returncode: int, stderr: str) -> None:
        """Initializes the exception with the failed command and its output."""
        command = " ".join(["git", *git_args])
        super().__init__(f"Command '{command}' failed with exit code {returncode}: {stderr.strip()}")
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
