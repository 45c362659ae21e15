"""Custom exception classes for the media upload pipeline."""

from typing import Optional


class MediaUploadError(Exception):
    """
    Base exception class for all upload and playback errors.

    Carries the upload job id when one is known, so a failed run can be
    diagnosed and restarted by hand.
    """

    def __init__(self, message: str, job_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.job_id = job_id


class ProtocolError(MediaUploadError):
    """
    Raised when the ingestion service rejects a protocol call.
    """

    def __init__(
        self,
        message: str,
        job_id: Optional[str] = None,
        status_code: Optional[int] = None,
        detail: Optional[str] = None,
    ):
        super().__init__(message, job_id=job_id)
        self.status_code = status_code
        self.detail = detail


class InitializationError(ProtocolError):
    """
    Raised when Init fails: bad metadata or unreachable service.
    """
    pass


class ChunkTransferError(MediaUploadError):
    """
    Raised when a chunk cannot be transferred or the server rejects it.
    """

    def __init__(
        self,
        message: str,
        sequence_number: int,
        job_id: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, job_id=job_id)
        self.sequence_number = sequence_number
        self.status_code = status_code


class StateQueryError(MediaUploadError):
    """
    Raised when the State call fails or does not acknowledge a chunk.

    Only fatal when strict state checking is enabled.
    """

    def __init__(
        self,
        message: str,
        job_id: Optional[str] = None,
        sequence_number: Optional[int] = None,
    ):
        super().__init__(message, job_id=job_id)
        self.sequence_number = sequence_number


class FinalizationError(ProtocolError):
    """
    Raised when Clear fails after every chunk was sent.

    The media is most likely fully uploaded but the session is still open.
    """
    pass


class VideoLookupError(ProtocolError):
    """
    Raised when fetching or deleting a stored video fails.
    """
    pass


class SessionResolutionError(MediaUploadError):
    """
    Raised when a playback session cannot be resolved for a viewer.
    """

    def __init__(
        self,
        message: str,
        content_id: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.content_id = content_id
        self.status_code = status_code


class UploadCancelledError(MediaUploadError):
    """
    Raised when the caller cancels an upload before it completes.
    """

    def __init__(self, message: str, job_id: Optional[str] = None, sequence_number: Optional[int] = None):
        super().__init__(message, job_id=job_id)
        self.sequence_number = sequence_number
