"""Contains exceptions raised when installing third-party tools."""


class ChecksumMismatchError(Exception):
    """Raised when a downloaded file does not match its expected SHA-256 hash."""

    def __init__(self, expected_hash: str, actual_hash: str) -> None:
        """Initializes the exception with both hashes."""
        super().__init__(f"Could not verify hash of remote script. Expected: {expected_hash}, actual: {actual_hash}")
        self.expected_hash = expected_hash
        self.actual_hash = actual_hash
