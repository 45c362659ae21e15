"""Caller-facing entry points: upload a media source, resolve a playback URL."""

import threading
from typing import Optional, Sequence

from common.constants import CHUNK_SIZE_BYTES
from common.types import ByteSource, ProgressCallback, UploadRequest, UploadResult
from uploader.config import Config
from uploader.ingestion_client import IngestionClient
from uploader.orchestrator import UploadOrchestrator
from uploader.playback import PlaybackResolver


def upload_media(
    api_key: str,
    source: ByteSource,
    title: str,
    description: str = "",
    tags: Optional[Sequence[str]] = None,
    chunk_size: int = CHUNK_SIZE_BYTES,
    on_progress: Optional[ProgressCallback] = None,
    cancel_event: Optional[threading.Event] = None,
    config: Optional[Config] = None,
) -> UploadResult:
    """
    Upload a media source to the ingestion service.

    Args:
        api_key: Ingestion API key
        source: Bytes, a file path, or a seekable binary file handle
        title: Video title
        description: Optional description
        tags: Optional tags
        chunk_size: Chunk size in bytes (default 10 MiB)
        on_progress: Called once per chunk, on this thread, after the chunk is sent
        cancel_event: Set it to stop before the next chunk; the job is cleared best-effort
        config: Configuration (defaults to built-in settings; no config file is read or written)

    Returns:
        UploadResult whose upload_job_id identifies the media from now on
    """
    config = config or Config.in_memory()
    request = UploadRequest(
        source=source,
        title=title,
        description=description,
        tags=tuple(tags or ()),
        chunk_size=chunk_size,
        on_progress=on_progress,
        cancel_event=cancel_event,
    )

    with IngestionClient(config, api_key=api_key) as client:
        orchestrator = UploadOrchestrator(client, strict_state_check=config.is_strict_state_check())
        return orchestrator.run(request)


def resolve_playback_url(
    api_key: str,
    content_id: str,
    viewer_id: str,
    config: Optional[Config] = None,
) -> str:
    """
    Get a signed, time-limited streaming URL for one viewer.

    Raises:
        SessionResolutionError: If the content is unknown or the viewer is not authorized
    """
    config = config or Config.in_memory()
    with PlaybackResolver(config, api_key=api_key) as resolver:
        return resolver.resolve(content_id, viewer_id)
