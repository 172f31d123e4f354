"""
Hash verification for downloaded artifacts.

This module provides cryptographic hash verification capabilities including:
- Streaming SHA256 / SHA512 hash computation
- Case-insensitive, timing-attack resistant digest comparison
- Hash format validation
- IntegrityVerifier, which deletes a file that fails verification
"""

import hashlib
import logging
import secrets
from pathlib import Path
from typing import Callable, Optional

from sdkfetch.core.exceptions import IntegrityError

logger = logging.getLogger(__name__)

SUPPORTED_ALGORITHMS = ("sha256", "sha512")
HASH_LENGTHS = {"sha256": 64, "sha512": 128}


def compute_file_hash(
    file_path: Path,
    algorithm: str = "sha256",
    progress_callback: Optional[Callable[[int, int], None]] = None,
    chunk_size: int = 8192,
) -> str:
    """
    Compute cryptographic hash of file.

    Args:
        file_path: Path to file
        algorithm: Hash algorithm ('sha256', 'sha512')
        progress_callback: Optional progress callback (bytes_read, total_bytes)
        chunk_size: Number of bytes to read at once

    Returns:
        Lowercase hex string of hash

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If algorithm is not supported

    Example:
        >>> hash_value = compute_file_hash(Path('sdk.tar.gz'))
        >>> print(f"SHA256: {hash_value}")
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    algorithm = algorithm.lower()
    if algorithm not in SUPPORTED_ALGORITHMS:
        raise ValueError(f"Unsupported hash algorithm: {algorithm}")

    hasher = hashlib.new(algorithm)
    file_size = file_path.stat().st_size
    bytes_read = 0

    with open(file_path, "rb") as f:
        while chunk := f.read(chunk_size):
            hasher.update(chunk)
            bytes_read += len(chunk)

            if progress_callback:
                progress_callback(bytes_read, file_size)

    return hasher.hexdigest()


def is_valid_hash_format(hash_str: str, algorithm: str = "sha256") -> bool:
    """
    Validate hash string format.

    Args:
        hash_str: Hash string to validate
        algorithm: Algorithm name

    Returns:
        True if the string is hex of the right length for the algorithm
    """
    if not hash_str:
        return False

    if not all(c in "0123456789abcdef" for c in hash_str.lower()):
        return False

    expected_len = HASH_LENGTHS.get(algorithm.lower())
    return expected_len is None or len(hash_str) == expected_len


def digests_match(actual: str, expected: str) -> bool:
    """Compare two hex digests case-insensitively in constant time."""
    return secrets.compare_digest(
        actual.strip().lower().encode("utf-8"),
        expected.strip().lower().encode("utf-8"),
    )


def verify_file_hash(
    file_path: Path, expected_hash: str, algorithm: str = "sha256"
) -> bool:
    """
    Verify file matches expected hash.

    Returns:
        True if hash matches, False otherwise

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If algorithm is not supported
    """
    actual_hash = compute_file_hash(file_path, algorithm)
    return digests_match(actual_hash, expected_hash)


class IntegrityVerifier:
    """
    Verify downloaded files against pinned digests.

    A file that fails verification is deleted: unverified bytes never stay
    on disk.

    Example:
        >>> verifier = IntegrityVerifier()
        >>> verifier.verify(Path('tmp/sdk.tar.gz'), descriptor.digest)
    """

    def __init__(self, algorithm: str = "sha256"):
        """
        Initialize verifier.

        Args:
            algorithm: Hash algorithm to use

        Raises:
            ValueError: If algorithm is not supported
        """
        algorithm = algorithm.lower()
        if algorithm not in SUPPORTED_ALGORITHMS:
            raise ValueError(f"Unsupported hash algorithm: {algorithm}")
        self.algorithm = algorithm

    def verify(self, file_path: Path, expected_hash: str) -> str:
        """
        Check file_path against expected_hash.

        Args:
            file_path: File to verify
            expected_hash: Expected hex digest (any case)

        Returns:
            The computed digest

        Raises:
            IntegrityError: If the digest does not match; the file is removed
            FileNotFoundError: If file doesn't exist
        """
        file_path = Path(file_path)
        actual_hash = compute_file_hash(file_path, self.algorithm)

        if digests_match(actual_hash, expected_hash):
            logger.info(f"{self.algorithm.upper()} verified: {file_path.name}")
            return actual_hash

        logger.error(f"Checksum mismatch for {file_path.name}, removing file")
        try:
            file_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Failed to remove unverified file {file_path}: {e}")

        raise IntegrityError(
            expected=expected_hash.strip().lower(),
            actual=actual_hash,
            path=file_path.name,
        )


__all__ = [
    "IntegrityVerifier",
    "compute_file_hash",
    "verify_file_hash",
    "digests_match",
    "is_valid_hash_format",
    "SUPPORTED_ALGORITHMS",
]
