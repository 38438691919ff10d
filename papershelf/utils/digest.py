"""Content digests of imported files."""

import hashlib
from pathlib import Path
from typing import Union

_CHUNK_SIZE = 1 << 16


def file_digest(path: Union[str, Path]) -> bytes:
    """Return the SHA-256 digest of the file's bytes.

    Raises:
        OSError: If the file cannot be read
    """
    hasher = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
            hasher.update(chunk)
    return hasher.digest()
