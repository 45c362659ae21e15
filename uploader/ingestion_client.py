"""HTTP client for the remote ingestion service (Init, Upload, State, Clear)."""

from typing import Optional, Sequence

import httpx
from pydantic import ValidationError

from common.constants import (
    CHUNK_FORM_FIELD,
    DEFAULT_TIMEOUT_SECONDS,
    UPLOAD_TIMEOUT_PER_MIB_SECONDS,
)
from common.logging_config import get_logger
from uploader.config import Config
from uploader.exceptions import (
    ChunkTransferError,
    FinalizationError,
    InitializationError,
    StateQueryError,
    VideoLookupError,
)
from uploader.http import ServiceClient
from uploader.schemas import (
    ClearUploadResponse,
    InitUploadRequest,
    InitUploadResponse,
    UploadStateResponse,
)

logger = get_logger(__name__)


class IngestionClient(ServiceClient):
    """
    Speaks the four-verb chunked upload protocol.

    Each protocol method is one blocking request. Failures are raised as the
    matching MediaUploadError subclass with the httpx error chained.
    """

    def __init__(self, config: Config, api_key: Optional[str] = None):
        super().__init__(config, config.get_upload_base_url(), api_key=api_key)

    def _calculate_upload_timeout(self, chunk_size: int) -> float:
        """
        Calculate timeout for a chunk upload based on its size.

        Returns:
            Timeout in seconds (configured base + 0.1s per MiB)
        """
        base_timeout = max(self.config.get_timeout(), DEFAULT_TIMEOUT_SECONDS)
        size_mib = chunk_size / (1024 * 1024)
        return base_timeout + size_mib * UPLOAD_TIMEOUT_PER_MIB_SECONDS

    def init_upload(
        self,
        total_chunks: int,
        file_size: int,
        title: str,
        description: str = "",
        tags: Optional[Sequence[str]] = None,
    ) -> str:
        """
        Open an upload job.

        Args:
            total_chunks: Number of chunks that will be sent
            file_size: Total size of the media in bytes
            title: Video title (must not be empty)
            description: Optional description
            tags: Optional tag list

        Returns:
            The server-assigned upload job id

        Raises:
            InitializationError: If the metadata is invalid or the service rejects it
        """
        try:
            payload = InitUploadRequest(
                total_chunks=total_chunks,
                file_size=file_size,
                title=title,
                description=description or "",
                tags=list(tags) if tags else None,
            )
        except ValidationError as e:
            raise InitializationError(f"Invalid upload metadata: {e}", detail=str(e)) from e

        logger.info(f"Initializing upload: title={title!r} total_chunks={total_chunks} file_size={file_size}")

        try:
            response = self._request('POST', '/Init', json=payload.to_wire(), headers=self._auth_headers())
        except httpx.TransportError as e:
            raise InitializationError(f"Cannot reach ingestion service: {e}") from e

        if response.is_error:
            raise InitializationError(
                f"Init rejected: {self._describe_error(response)}",
                status_code=response.status_code,
                detail=response.text,
            )

        if not response.content:
            raise InitializationError("Init returned an empty response", status_code=response.status_code)

        try:
            result = InitUploadResponse.model_validate(response.json())
        except ValueError as e:
            raise InitializationError(f"Malformed Init response: {e}", status_code=response.status_code) from e

        if not result.upload_job_id:
            raise InitializationError(
                f"Init response carried no upload job id: {result.message or response.text}",
                status_code=response.status_code,
            )

        logger.info(f"Upload job opened [upload_job_id={result.upload_job_id}]")
        return result.upload_job_id

    def upload_chunk(self, job_id: str, sequence_number: int, data: bytes, digest: str) -> None:
        """
        Send one chunk as multipart field chunkFile.

        The chunk number, digest and job id travel as query parameters.

        Raises:
            ChunkTransferError: On transport failure or a rejected chunk
        """
        params = {
            'chunkNumber': sequence_number,
            'uploadJobId': job_id,
            'hash': digest,
        }
        files = {CHUNK_FORM_FIELD: (f"chunk_{sequence_number}.part", data, 'application/octet-stream')}

        logger.debug(f"Uploading chunk {sequence_number} ({len(data)} bytes) [upload_job_id={job_id}]")

        try:
            response = self._request(
                'POST',
                '/Upload',
                params=params,
                files=files,
                headers=self._auth_headers(),
                timeout=self._calculate_upload_timeout(len(data)),
            )
        except httpx.TransportError as e:
            raise ChunkTransferError(
                f"Chunk {sequence_number} transfer failed: {e}",
                sequence_number=sequence_number,
                job_id=job_id,
            ) from e

        if response.is_error:
            raise ChunkTransferError(
                f"Chunk {sequence_number} rejected: {self._describe_error(response)}",
                sequence_number=sequence_number,
                job_id=job_id,
                status_code=response.status_code,
            )

    def get_state(self, job_id: str) -> UploadStateResponse:
        """
        Read the server's view of an upload job.

        Returns immediately with the current acknowledgement map.

        Raises:
            StateQueryError: If the request fails or the body is malformed
        """
        try:
            response = self._request(
                'GET',
                '/State',
                params={'uploadJobId': job_id},
                headers=self._auth_headers(),
            )
        except httpx.TransportError as e:
            raise StateQueryError(f"State query failed: {e}", job_id=job_id) from e

        if response.is_error:
            raise StateQueryError(f"State query rejected: {self._describe_error(response)}", job_id=job_id)

        try:
            return UploadStateResponse.model_validate(response.json())
        except ValueError as e:
            raise StateQueryError(f"Malformed State response: {e}", job_id=job_id) from e

    def clear_upload(self, job_id: str) -> Optional[str]:
        """
        Finalize and close an upload job.

        Returns:
            The videoId reported by the service, or None if the body carries none

        Raises:
            FinalizationError: If the job is unknown, already cleared, or unreachable
        """
        logger.info(f"Finalizing upload [upload_job_id={job_id}]")

        try:
            response = self._request(
                'POST',
                '/Clear',
                params={'uploadJobId': job_id},
                headers=self._auth_headers(),
            )
        except httpx.TransportError as e:
            raise FinalizationError(f"Clear failed: {e}", job_id=job_id) from e

        if response.is_error:
            raise FinalizationError(
                f"Clear rejected: {self._describe_error(response)}",
                job_id=job_id,
                status_code=response.status_code,
                detail=response.text,
            )

        if not response.content:
            return None
        try:
            body = ClearUploadResponse.model_validate(response.json())
        except ValueError as e:
            # The job is already closed; an unreadable body only loses the video id.
            logger.warning(f"Ignoring malformed Clear response: {e} [upload_job_id={job_id}]")
            return None

        if body.video_id:
            logger.info(f"Upload finalized as video {body.video_id} [upload_job_id={job_id}]")
        return body.video_id

    def get_video_info(self, video_id: str) -> dict:
        """
        Fetch metadata for a stored video.

        Raises:
            VideoLookupError: If the video is unknown or the request fails
        """
        url = f"{self.config.get_videos_base_url()}/PublicVideos/{video_id}"
        try:
            response = self._request('GET', url, headers=self._auth_headers())
        except httpx.TransportError as e:
            raise VideoLookupError(f"Video lookup failed: {e}") from e

        if response.is_error:
            raise VideoLookupError(
                f"Video lookup rejected: {self._describe_error(response)}",
                status_code=response.status_code,
            )
        return self._json_body(response)

    def delete_video(self, video_id: str) -> dict:
        """
        Delete a stored video.

        Raises:
            VideoLookupError: If the video is unknown or the request fails
        """
        url = f"{self.config.get_upload_root_url()}/PublicVideos"
        logger.info(f"Deleting video {video_id}")
        try:
            response = self._request('DELETE', url, params={'id': video_id}, headers=self._auth_headers())
        except httpx.TransportError as e:
            raise VideoLookupError(f"Video deletion failed: {e}") from e

        if response.is_error:
            raise VideoLookupError(
                f"Video deletion rejected: {self._describe_error(response)}",
                status_code=response.status_code,
            )
        return self._json_body(response)

    def _json_body(self, response: httpx.Response) -> dict:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise VideoLookupError(f"Malformed response: {e}", status_code=response.status_code) from e
