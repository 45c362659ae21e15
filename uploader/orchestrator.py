"""Drives one upload job: Init, then Upload + State per chunk, then Clear."""

from enum import Enum
from typing import Optional

from common.logging_config import get_logger
from common.types import JobStatus, UploadJob, UploadProgress, UploadRequest, UploadResult
from uploader.checksum import compute_digest
from uploader.chunker import count_chunks, iter_chunks, measure_source
from uploader.config import Config
from uploader.exceptions import (
    ChunkTransferError,
    FinalizationError,
    MediaUploadError,
    StateQueryError,
    UploadCancelledError,
)
from uploader.ingestion_client import IngestionClient

logger = get_logger(__name__)


class OrchestratorState(str, Enum):
    IDLE = "idle"
    INITIALIZING = "initializing"
    TRANSFERRING = "transferring"
    FINALIZING = "finalizing"
    COMPLETED = "completed"
    FAILED = "failed"


_JOB_STATUS = {
    OrchestratorState.INITIALIZING: JobStatus.INITIALIZING,
    OrchestratorState.TRANSFERRING: JobStatus.IN_PROGRESS,
    OrchestratorState.FINALIZING: JobStatus.FINALIZING,
    OrchestratorState.COMPLETED: JobStatus.COMPLETED,
    OrchestratorState.FAILED: JobStatus.FAILED,
}


def progress_percentage(chunk_number: int, total_chunks: int) -> int:
    """Whole percent after chunk_number of total_chunks, rounded up so the last chunk is 100."""
    return -(-chunk_number * 100 // total_chunks)


class UploadOrchestrator:
    """
    Sequential state machine for a single upload.

    Idle -> Initializing -> Transferring -> Finalizing -> Completed, with
    Failed reachable from every non-terminal state. An instance runs once;
    start a new one to retry an upload from the first chunk.
    """

    def __init__(self, client: IngestionClient, strict_state_check: bool = False):
        """
        Args:
            client: Ingestion client carrying the API key for this upload
            strict_state_check: Fail the run when State does not acknowledge a chunk
                instead of logging a warning
        """
        self.client = client
        self.strict_state_check = strict_state_check
        self.state = OrchestratorState.IDLE
        self.job: Optional[UploadJob] = None

    @classmethod
    def from_config(cls, config: Config, api_key: Optional[str] = None) -> 'UploadOrchestrator':
        return cls(IngestionClient(config, api_key=api_key), strict_state_check=config.is_strict_state_check())

    def _transition(self, new_state: OrchestratorState) -> None:
        job_id = self.job.job_id if self.job else None
        logger.debug(f"Upload state {self.state.value} -> {new_state.value} [upload_job_id={job_id}]")
        self.state = new_state
        if self.job:
            self.job.status = _JOB_STATUS[new_state]

    def run(self, request: UploadRequest) -> UploadResult:
        """
        Upload a source end to end.

        Args:
            request: Source, metadata, chunk size, progress callback, cancel event

        Returns:
            UploadResult with the upload job id

        Raises:
            ValueError: If the source is empty or the chunk size is not positive
            InitializationError: If Init fails
            ChunkTransferError: If a chunk cannot be sent; later chunks are skipped
            StateQueryError: If strict state checking is on and a chunk is not acknowledged
            FinalizationError: If Clear fails after every chunk was sent
            UploadCancelledError: If request.cancel_event is set before a chunk
        """
        if self.state != OrchestratorState.IDLE:
            raise RuntimeError(f"Orchestrator already used (state={self.state.value})")

        file_size = measure_source(request.source)
        if file_size == 0:
            raise ValueError("Cannot upload an empty source")
        total_chunks = count_chunks(file_size, request.chunk_size)

        self._transition(OrchestratorState.INITIALIZING)
        try:
            job_id = self.client.init_upload(
                total_chunks=total_chunks,
                file_size=file_size,
                title=request.title,
                description=request.description,
                tags=request.tags,
            )
            self.job = UploadJob(job_id=job_id, total_chunks=total_chunks, file_size=file_size)

            self._transition(OrchestratorState.TRANSFERRING)
            self._transfer(request)

            self._transition(OrchestratorState.FINALIZING)
            video_id = self.client.clear_upload(job_id)
        except UploadCancelledError:
            self._transition(OrchestratorState.FAILED)
            raise
        except Exception as e:
            failed_from = self.state
            self._transition(OrchestratorState.FAILED)
            if isinstance(e, MediaUploadError) and e.job_id is None:
                e.job_id = self._job_id()
            logger.error(f"Upload failed while {failed_from.value}: {e} [upload_job_id={self._job_id()}]")
            raise

        self._transition(OrchestratorState.COMPLETED)
        logger.info(f"Upload completed: {total_chunks} chunks, {file_size} bytes [upload_job_id={job_id}]")
        return UploadResult(
            upload_job_id=job_id,
            success=True,
            message="File uploaded successfully - video is processing",
            video_id=video_id,
        )

    def _transfer(self, request: UploadRequest) -> None:
        job = self.job

        for chunk in iter_chunks(request.source, request.chunk_size):
            if request.cancel_event is not None and request.cancel_event.is_set():
                self._cancel(chunk.sequence_number)

            if chunk.sequence_number > job.total_chunks:
                raise ChunkTransferError(
                    f"Source grew during upload: chunk {chunk.sequence_number} exceeds declared {job.total_chunks}",
                    sequence_number=chunk.sequence_number,
                    job_id=job.job_id,
                )

            digest = compute_digest(chunk.data)
            self.client.upload_chunk(job.job_id, chunk.sequence_number, chunk.data, digest)
            job.chunks_sent = chunk.sequence_number
            job.bytes_sent += chunk.size

            percentage = progress_percentage(chunk.sequence_number, job.total_chunks)
            logger.info(
                f"Uploaded chunk {chunk.sequence_number}/{job.total_chunks} ({percentage}%) [upload_job_id={job.job_id}]"
            )
            if request.on_progress is not None:
                request.on_progress(UploadProgress(
                    chunk_number=chunk.sequence_number,
                    total_chunks=job.total_chunks,
                    percentage=percentage,
                    upload_job_id=job.job_id,
                    total_bytes_uploaded=job.bytes_sent,
                ))

            self._confirm_chunk(chunk.sequence_number)

        if job.chunks_sent != job.total_chunks:
            raise ChunkTransferError(
                f"Source shrank during upload: sent {job.chunks_sent} of {job.total_chunks} chunks",
                sequence_number=job.chunks_sent + 1,
                job_id=job.job_id,
            )

    def _confirm_chunk(self, sequence_number: int) -> None:
        """Ask the service which chunks it holds and check this one is among them."""
        job = self.job
        try:
            state = self.client.get_state(job.job_id)
        except StateQueryError as e:
            if self.strict_state_check:
                e.sequence_number = sequence_number
                raise
            logger.warning(f"State check after chunk {sequence_number} failed, continuing: {e}")
            return

        job.record_state(state.acknowledged())
        if job.is_acknowledged(sequence_number):
            return

        message = f"Chunk {sequence_number} not acknowledged by State [upload_job_id={job.job_id}]"
        if self.strict_state_check:
            raise StateQueryError(message, job_id=job.job_id, sequence_number=sequence_number)
        logger.warning(message)

    def _cancel(self, sequence_number: int) -> None:
        job_id = self.job.job_id
        logger.warning(f"Upload cancelled before chunk {sequence_number}, clearing job [upload_job_id={job_id}]")
        try:
            self.client.clear_upload(job_id)
        except FinalizationError as e:
            logger.warning(f"Best-effort clear after cancellation failed: {e}")
        raise UploadCancelledError(
            f"Upload cancelled before chunk {sequence_number}",
            job_id=job_id,
            sequence_number=sequence_number,
        )

    def _job_id(self) -> Optional[str]:
        return self.job.job_id if self.job else None
