"""Content hashing for record identities and file versions."""

import hashlib
import logging
from pathlib import Path
from typing import BinaryIO, Iterable, Iterator

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 8192


def hash_bytes(data: bytes) -> str:
    """Return the hex SHA-256 digest of data."""
    return hashlib.sha256(data).hexdigest()


def hash_fields(parts: Iterable[bytes]) -> str:
    """Hash the concatenation of parts, in order."""
    sha256 = hashlib.sha256()
    for part in parts:
        sha256.update(part)
    return sha256.hexdigest()


class HashingReader:
    """Iterate over a binary stream in chunks while hashing everything read.

    The digest covers exactly the bytes yielded so far, so a consumer that
    exhausts the iterator gets the whole-stream version without a second read.
    """

    def __init__(self, stream: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.stream = stream
        self.chunk_size = chunk_size
        self._sha256 = hashlib.sha256()
        self.bytes_read = 0

    def __iter__(self) -> Iterator[bytes]:
        while chunk := self.stream.read(self.chunk_size):
            self._sha256.update(chunk)
            self.bytes_read += len(chunk)
            yield chunk

    def hexdigest(self) -> str:
        return self._sha256.hexdigest()


def read_and_hash(path: Path, chunk_size: int = DEFAULT_CHUNK_SIZE) -> tuple[bytes, str]:
    """Read a whole file once, returning its content and hex digest."""
    with open(path, "rb") as f:
        reader = HashingReader(f, chunk_size)
        data = b"".join(reader)
    logger.debug(f"Hashed {reader.bytes_read} bytes from {path}")
    return data, reader.hexdigest()
