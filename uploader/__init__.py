"""Chunked media upload and playback-session client."""

from uploader.api import resolve_playback_url, upload_media
from uploader.config import Config
from uploader.exceptions import (
    ChunkTransferError,
    FinalizationError,
    InitializationError,
    MediaUploadError,
    ProtocolError,
    SessionResolutionError,
    StateQueryError,
    UploadCancelledError,
    VideoLookupError,
)
from uploader.ingestion_client import IngestionClient
from uploader.orchestrator import OrchestratorState, UploadOrchestrator
from uploader.playback import PlaybackResolver

__all__ = [
    "upload_media",
    "resolve_playback_url",
    "Config",
    "IngestionClient",
    "UploadOrchestrator",
    "OrchestratorState",
    "PlaybackResolver",
    "MediaUploadError",
    "ProtocolError",
    "InitializationError",
    "ChunkTransferError",
    "StateQueryError",
    "FinalizationError",
    "SessionResolutionError",
    "VideoLookupError",
    "UploadCancelledError",
]
