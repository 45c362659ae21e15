"""Shared data type definitions (Chunk, UploadRequest, UploadJob, UploadResult, etc.)."""

import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Callable, Dict, Optional, Tuple, Union

from common.constants import CHUNK_SIZE_BYTES

ByteSource = Union[bytes, bytearray, memoryview, str, Path, BinaryIO]


@dataclass(frozen=True)
class Chunk:
    """
    One contiguous byte range of an upload source.

    sequence_number is 1-based, matching the ingestion protocol.
    """
    sequence_number: int
    offset: int
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class UploadProgress:
    """Progress snapshot handed to the caller after each chunk."""
    chunk_number: int
    total_chunks: int
    percentage: int
    upload_job_id: str
    total_bytes_uploaded: int


ProgressCallback = Callable[[UploadProgress], None]


@dataclass(frozen=True)
class UploadRequest:
    """
    Caller-supplied description of one upload.

    source may be raw bytes, a path, or a binary file handle opened for reading.
    """
    source: ByteSource
    title: str
    description: str = ""
    tags: Tuple[str, ...] = ()
    chunk_size: int = CHUNK_SIZE_BYTES
    on_progress: Optional[ProgressCallback] = None
    cancel_event: Optional[threading.Event] = None


@dataclass(frozen=True)
class UploadResult:
    """Outcome returned by a completed upload."""
    upload_job_id: str
    success: bool
    message: str
    video_id: Optional[str] = None  # from Clear, when the service reports one


class JobStatus(str, Enum):
    INITIALIZING = "initializing"
    IN_PROGRESS = "in-progress"
    FINALIZING = "finalizing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class UploadJob:
    """
    Client-side view of a server-side upload job.

    Lives only for the duration of one orchestration run.
    """
    job_id: str
    total_chunks: int
    file_size: int
    status: JobStatus = JobStatus.INITIALIZING
    acknowledgements: Dict[int, str] = field(default_factory=dict)
    chunks_sent: int = 0
    bytes_sent: int = 0

    def record_state(self, chunk_states: Dict[str, str]) -> None:
        """Merge the server's per-chunk acknowledgement map into this job."""
        for key, token in chunk_states.items():
            try:
                self.acknowledgements[int(key)] = token
            except ValueError:
                continue

    def is_acknowledged(self, sequence_number: int) -> bool:
        return sequence_number in self.acknowledgements
