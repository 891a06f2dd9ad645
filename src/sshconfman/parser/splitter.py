"""Split raw config bytes into one chunk per Host block."""

from typing import Iterable, Iterator

HOST_MARKER = b"host "


def iter_host_sections(
    chunks: Iterable[bytes],
    marker: bytes = HOST_MARKER,
) -> Iterator[bytes]:
    """
    Yield the bytes of each Host block found in a stream of chunks.

    A block starts at a case-insensitive occurrence of marker and runs up to
    the next occurrence or to the end of input. Anything before the first
    marker is dropped. A block is yielded as soon as the following marker has
    been read, so callers see early blocks before the stream is exhausted.

    Args:
        chunks: Raw file content, in order, split arbitrarily
        marker: Lower-case block marker

    Returns:
        Iterator over block bytes, with original case preserved
    """
    marker = marker.lower()
    buffer = b""
    lowered = b""
    start = -1  # offset of the current block in buffer, -1 before the first marker

    for chunk in chunks:
        if not chunk:
            continue
        buffer += chunk
        lowered += chunk.lower()

        if start == -1:
            start = lowered.find(marker)
            if start == -1:
                # Keep only a tail that could be the beginning of a split marker
                keep = len(marker) - 1
                buffer = buffer[-keep:] if keep else b""
                lowered = lowered[-keep:] if keep else b""
                continue

        while (end := lowered.find(marker, start + len(marker))) != -1:
            yield buffer[start:end]
            start = end

        buffer = buffer[start:]
        lowered = lowered[start:]
        start = 0

    if start != -1 and buffer:
        yield buffer[start:]


def split_host_sections(data: bytes, marker: bytes = HOST_MARKER) -> list[bytes]:
    """Split fully buffered content into Host blocks."""
    return list(iter_host_sections([data], marker))
