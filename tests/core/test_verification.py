"""
Unit tests for hash verification.
"""

import hashlib

import pytest

from sdkfetch.core.exceptions import IntegrityError
from sdkfetch.core.verification import (
    IntegrityVerifier,
    compute_file_hash,
    digests_match,
    is_valid_hash_format,
    verify_file_hash,
)


@pytest.fixture
def archive(tmp_path):
    path = tmp_path / "sdk.tar.gz"
    path.write_bytes(b"aic-sdk release archive" * 512)
    return path


class TestComputeFileHash:
    """Test compute_file_hash."""

    def test_sha256(self, archive):
        """Test SHA256 matches hashlib."""
        expected = hashlib.sha256(archive.read_bytes()).hexdigest()
        assert compute_file_hash(archive) == expected

    def test_sha512(self, archive):
        """Test SHA512 matches hashlib."""
        expected = hashlib.sha512(archive.read_bytes()).hexdigest()
        assert compute_file_hash(archive, "sha512") == expected

    def test_unsupported_algorithm(self, archive):
        """Test unsupported algorithms are rejected."""
        with pytest.raises(ValueError, match="Unsupported hash algorithm"):
            compute_file_hash(archive, "md5")

    def test_missing_file(self, tmp_path):
        """Test missing files raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            compute_file_hash(tmp_path / "missing.tar.gz")

    def test_progress_callback(self, archive):
        """Test progress reaches the file size."""
        calls = []
        compute_file_hash(archive, progress_callback=lambda read, total: calls.append((read, total)))

        size = archive.stat().st_size
        assert calls[-1] == (size, size)


class TestHashHelpers:
    """Test digest format and comparison helpers."""

    def test_valid_format(self):
        """Test well-formed digests are accepted."""
        assert is_valid_hash_format("a" * 64)
        assert is_valid_hash_format("A" * 64)
        assert is_valid_hash_format("b" * 128, "sha512")

    def test_invalid_format(self):
        """Test malformed digests are rejected."""
        assert not is_valid_hash_format("")
        assert not is_valid_hash_format("a" * 63)
        assert not is_valid_hash_format("g" * 64)
        assert not is_valid_hash_format("a" * 64, "sha512")

    def test_digests_match_case_insensitive(self):
        """Test comparison ignores case and surrounding whitespace."""
        assert digests_match("abcdef", " ABCDEF\n")
        assert not digests_match("abcdef", "abcdee")

    def test_verify_file_hash(self, archive):
        """Test verify_file_hash returns a boolean without side effects."""
        digest = hashlib.sha256(archive.read_bytes()).hexdigest()

        assert verify_file_hash(archive, digest) is True
        assert verify_file_hash(archive, "0" * 64) is False
        assert archive.exists()


class TestIntegrityVerifier:
    """Test IntegrityVerifier."""

    def test_matching_digest(self, archive):
        """Test a matching digest returns the computed digest and keeps the file."""
        digest = hashlib.sha256(archive.read_bytes()).hexdigest()

        actual = IntegrityVerifier().verify(archive, digest.upper())

        assert actual == digest
        assert archive.exists()

    def test_single_bit_flip_rejected(self, archive):
        """Test flipping one bit fails verification and removes the file."""
        digest = hashlib.sha256(archive.read_bytes()).hexdigest()
        data = bytearray(archive.read_bytes())
        data[100] ^= 0x01
        archive.write_bytes(bytes(data))

        with pytest.raises(IntegrityError) as exc_info:
            IntegrityVerifier().verify(archive, digest)

        error = exc_info.value
        assert error.expected == digest
        assert error.actual == hashlib.sha256(bytes(data)).hexdigest()
        assert "Checksum mismatch" in str(error)
        assert not archive.exists()

    def test_unsupported_algorithm(self):
        """Test verifier rejects unsupported algorithms."""
        with pytest.raises(ValueError, match="Unsupported hash algorithm"):
            IntegrityVerifier("sha1")

    def test_sha512_verifier(self, archive):
        """Test verifying with SHA512."""
        digest = hashlib.sha512(archive.read_bytes()).hexdigest()
        assert IntegrityVerifier("SHA512").verify(archive, digest) == digest
