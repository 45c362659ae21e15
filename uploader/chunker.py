"""Splits an upload source into ordered, fixed-size chunks."""

import io
import os
from pathlib import Path
from typing import BinaryIO, Iterator

from common.constants import CHUNK_SIZE_BYTES
from common.types import ByteSource, Chunk


def _validate_chunk_size(chunk_size: int) -> None:
    if not isinstance(chunk_size, int) or chunk_size <= 0:
        raise ValueError(f"chunk_size must be a positive integer, got {chunk_size!r}")


def _is_path(source: ByteSource) -> bool:
    return isinstance(source, (str, Path))


def _is_buffer(source: ByteSource) -> bool:
    return isinstance(source, (bytes, bytearray, memoryview))


def _byte_view(source) -> memoryview:
    """Flat unsigned-byte view of a buffer; strided views are copied first."""
    view = memoryview(source)
    if not view.c_contiguous:
        view = memoryview(view.tobytes())
    return view.cast('B')


def measure_source(source: ByteSource) -> int:
    """
    Return the byte length of a source without consuming it.

    Args:
        source: Bytes-like object, filesystem path, or seekable binary file handle

    Returns:
        Total size in bytes

    Raises:
        ValueError: If a file handle is not seekable
        TypeError: If the source type is not supported
    """
    if _is_buffer(source):
        return memoryview(source).nbytes
    if _is_path(source):
        return os.path.getsize(source)
    if hasattr(source, 'read'):
        _require_seekable(source)
        position = source.tell()
        size = source.seek(0, io.SEEK_END)
        source.seek(position)
        return size
    raise TypeError(f"Unsupported upload source type: {type(source).__name__}")


def count_chunks(total_size: int, chunk_size: int = CHUNK_SIZE_BYTES) -> int:
    """Number of chunks needed for total_size bytes: ceil(total_size / chunk_size)."""
    _validate_chunk_size(chunk_size)
    if total_size < 0:
        raise ValueError(f"total_size must not be negative, got {total_size}")
    return -(-total_size // chunk_size)


def iter_chunks(source: ByteSource, chunk_size: int = CHUNK_SIZE_BYTES) -> Iterator[Chunk]:
    """
    Lazily yield the chunks of a source in ascending order.

    Every chunk holds chunk_size bytes except possibly the last. Each call
    starts again from the beginning of the source, so the sequence can be
    re-read; file handles are rewound to offset 0. An empty source yields
    nothing.

    Args:
        source: Bytes-like object, filesystem path, or seekable binary file handle
        chunk_size: Chunk size in bytes (must be positive)

    Yields:
        Chunk objects numbered from 1
    """
    _validate_chunk_size(chunk_size)

    if _is_buffer(source):
        return _iter_buffer(_byte_view(source), chunk_size)
    if _is_path(source):
        return _iter_path(Path(source), chunk_size)
    if hasattr(source, 'read'):
        _require_seekable(source)
        return _iter_stream(source, chunk_size)
    raise TypeError(f"Unsupported upload source type: {type(source).__name__}")


def _iter_buffer(view: memoryview, chunk_size: int) -> Iterator[Chunk]:
    sequence_number = 1
    for offset in range(0, len(view), chunk_size):
        yield Chunk(
            sequence_number=sequence_number,
            offset=offset,
            data=bytes(view[offset:offset + chunk_size]),
        )
        sequence_number += 1


def _iter_path(path: Path, chunk_size: int) -> Iterator[Chunk]:
    with open(path, 'rb') as f:
        yield from _read_chunks(f, chunk_size)


def _iter_stream(stream: BinaryIO, chunk_size: int) -> Iterator[Chunk]:
    stream.seek(0)
    yield from _read_chunks(stream, chunk_size)


def _read_chunks(stream: BinaryIO, chunk_size: int) -> Iterator[Chunk]:
    sequence_number = 1
    offset = 0

    while True:
        data = _read_exactly(stream, chunk_size)
        if not data:
            break

        yield Chunk(sequence_number=sequence_number, offset=offset, data=data)
        offset += len(data)
        sequence_number += 1


def _read_exactly(stream: BinaryIO, size: int) -> bytes:
    """Read up to size bytes, looping over short reads until EOF."""
    parts = []
    remaining = size
    while remaining > 0:
        piece = stream.read(remaining)
        if not piece:
            break
        parts.append(piece)
        remaining -= len(piece)
    return b''.join(parts)


def _require_seekable(stream) -> None:
    seekable = getattr(stream, 'seekable', None)
    if seekable is not None and not seekable():
        raise ValueError("Upload source stream must be seekable")
