"""MD5 digest helpers for chunk integrity on the ingestion wire."""

import hashlib


def compute_digest(data: bytes) -> str:
    """
    Compute the MD5 digest the ingestion service expects for a chunk.

    Args:
        data: Chunk bytes

    Returns:
        Lowercase hexadecimal MD5 digest (32 characters)
    """
    return hashlib.md5(data).hexdigest()


def verify_digest(data: bytes, expected: str) -> bool:
    """
    Verify that data matches an expected digest.

    Args:
        data: Bytes to verify
        expected: Expected MD5 digest (hex string, any case)

    Returns:
        True if the digest matches, False otherwise
    """
    return compute_digest(data) == expected.lower()


class IncrementalDigest:
    """
    Calculate an MD5 digest incrementally for streaming data.

    Usage:
        digest = IncrementalDigest()
        digest.update(chunk1)
        digest.update(chunk2)
        fingerprint = digest.finalize()
    """

    def __init__(self):
        self._hasher = hashlib.md5()
        self._finalized = False

    def update(self, data: bytes) -> None:
        if self._finalized:
            raise ValueError("Cannot update after finalization")
        self._hasher.update(data)

    def finalize(self) -> str:
        self._finalized = True
        return self._hasher.hexdigest()

    def reset(self) -> None:
        self._hasher = hashlib.md5()
        self._finalized = False
