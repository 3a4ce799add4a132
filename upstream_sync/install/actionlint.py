"""Installs actionlint through its upstream download script, after verifying the script's checksum."""

import hashlib
import subprocess
import tempfile
from pathlib import Path

import requests
import structlog

from upstream_sync.install.exceptions import ChecksumMismatchError
from upstream_sync.utils.constants import ACTIONLINT_SCRIPT_FILENAME, ACTIONLINT_SCRIPT_URL

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def download_script(script_url: str = ACTIONLINT_SCRIPT_URL, timeout: float = 30.0) -> bytes:
    """Download the install script, raising on HTTP errors."""
    logger.debug("Fetching install script", script_url=script_url)
    response = requests.get(script_url, timeout=timeout)
    logger.debug("Fetch response status code", status_code=response.status_code)
    response.raise_for_status()
    return response.content


def compute_sha256(content: bytes) -> str:
    """Return the hex SHA-256 digest of the content."""
    return hashlib.sha256(content).hexdigest()


def install_actionlint(expected_hash: str, actionlint_version: str, script_url: str = ACTIONLINT_SCRIPT_URL) -> None:
    """Download, verify and run the actionlint install script for a version.

    Nothing is executed unless the script's hash matches expected_hash. The
    script is written to a temporary directory that is removed afterwards,
    whether or not the install succeeds.

    Raises:
        ChecksumMismatchError: If the script does not match the expected hash
        requests.HTTPError: If the script cannot be downloaded
        subprocess.CalledProcessError: If the install script fails
    """
    script = download_script(script_url)
    actual_hash = compute_sha256(script)
    if actual_hash != expected_hash.strip().lower():
        logger.error("Install script hash mismatch", expected_hash=expected_hash, actual_hash=actual_hash)
        raise ChecksumMismatchError(expected_hash=expected_hash, actual_hash=actual_hash)

    with tempfile.TemporaryDirectory() as temp_dir:
        script_path = Path(temp_dir) / ACTIONLINT_SCRIPT_FILENAME
        logger.debug("Writing install script", script_path=str(script_path))
        script_path.write_bytes(script)
        logger.info("Installing actionlint", actionlint_version=actionlint_version)
        subprocess.run(["bash", str(script_path), actionlint_version], check=True)
    logger.debug("Cleaned up temporary directory")
