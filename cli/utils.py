"""Utility functions for CLI operations."""

import sys
from pathlib import Path
from typing import Optional, TextIO

from cli.constants import GREEN, RESET
from common.types import UploadProgress
from uploader.checksum import IncrementalDigest


class ChunkProgressPrinter:
    """Progress callback that redraws a single status line per uploaded chunk."""

    def __init__(self, filename: str, file_size: int, stream: Optional[TextIO] = None):
        """
        Args:
            filename: Display name for the file
            file_size: Total size of the file in bytes
            stream: Where to draw the status line (defaults to sys.stdout)
        """
        self.filename = filename
        self.file_size = file_size
        self.stream = stream or sys.stdout
        self._finished = False

    def __call__(self, progress: UploadProgress) -> None:
        uploaded_str = format_file_size(progress.total_bytes_uploaded)
        total_str = format_file_size(self.file_size)
        self.stream.write(
            f"\rUploading {self.filename}: chunk {progress.chunk_number}/{progress.total_chunks} "
            f"{uploaded_str} / {total_str} ({GREEN}{progress.percentage}%{RESET})"
        )
        self.stream.flush()
        if progress.chunk_number == progress.total_chunks:
            self.finish()

    def finish(self) -> None:
        """End the status line with a newline, once."""
        if self._finished:
            return
        self._finished = True
        self.stream.write('\n')
        self.stream.flush()


def file_fingerprint(path: Path, block_size: int = 1024 * 1024) -> str:
    """MD5 of a whole file, read in blocks."""
    digest = IncrementalDigest()
    with open(path, 'rb') as f:
        while True:
            block = f.read(block_size)
            if not block:
                break
            digest.update(block)
    return digest.finalize()


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable format with appropriate unit.

    Uses binary units (1024-based) and automatically selects the most
    appropriate unit (B, KiB, MiB, GiB, TiB).

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string with size and unit (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    units = ['KiB', 'MiB', 'GiB', 'TiB']
    size = size_bytes / 1024.0

    for unit in units:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} PiB"
