"""SHA-256 content hashing for version deduplication"""

import hashlib


def sha256(content: str) -> str:
    """Return hex-encoded SHA-256 of the exact UTF-8 bytes (64 chars, matches String(64) column)."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()
