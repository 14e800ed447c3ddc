"""
Content hashing for duplicate-intake detection.

The same extracted text submitted twice (re-upload, retry from a client)
must not enter the unassigned pool twice. Records carry a hash of their
text so stores can reject duplicates without comparing full bodies.

Design Decisions:
- SHA-256 over the UTF-8 encoding of the text, prefixed with 'sha256:'
- Line endings are normalised first so a Windows re-export hashes the same
- The filename is not part of the hash; renaming a file does not make it new
"""

import hashlib


HASH_PREFIX = "sha256:"


def compute_text_hash(text: str) -> str:
    """
    Compute the content hash of extracted document text.

    Args:
        text: Text as produced by the upstream extraction step

    Returns:
        Hex-encoded SHA-256 hash prefixed with 'sha256:'

    Raises:
        ValueError: If the text is empty or whitespace only

    Example:
        >>> compute_text_hash("COMMERCIAL INVOICE No. 1")
        'sha256:...'
    """
    if not text or not text.strip():
        raise ValueError("Cannot hash empty text")

    normalised = text.replace("\r\n", "\n").replace("\r", "\n")
    digest = hashlib.sha256(normalised.encode("utf-8")).hexdigest()
    return f"{HASH_PREFIX}{digest}"
