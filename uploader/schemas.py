"""Pydantic schemas for ingestion and playback wire messages."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class WireModel(BaseModel):
    """Base for camelCase wire messages addressed by snake_case attributes."""
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class InitUploadRequest(WireModel):
    """Request body for Init."""
    total_chunks: int = Field(alias='totalChunks', gt=0)
    file_size: int = Field(alias='fileSize', gt=0)
    title: str = Field(min_length=1)
    description: str = ""
    tags: Optional[List[str]] = None


class InitUploadResponse(WireModel):
    """Response body for Init."""
    upload_job_id: Optional[str] = Field(default=None, alias='uploadJobId')
    success: Optional[bool] = None
    message: Optional[str] = None


class UploadStateResponse(WireModel):
    """Response body for State: per-chunk acknowledgement tokens keyed by chunk number."""
    upload_job_id: str = Field(alias='uploadJobId')
    total_chunks: Optional[Dict[str, Any]] = Field(default=None, alias='totalChunks')

    def acknowledged(self) -> Dict[str, str]:
        return {str(key): str(value) for key, value in (self.total_chunks or {}).items()}


class ClearUploadResponse(WireModel):
    """Response body for Clear; videoId is the id later passed to Sessions."""
    success: Optional[bool] = None
    video_id: Optional[str] = Field(default=None, alias='videoId')
    message: Optional[str] = None


class PlaybackSessionResponse(WireModel):
    """Response body for Sessions."""
    url_to_edge: Optional[str] = Field(default=None, alias='urlToEdge')
    success: Optional[bool] = None
    message: Optional[str] = None


class ErrorResponse(WireModel):
    """Best-effort shape of an error body returned by the remote services."""
    detail: Optional[str] = None
    message: Optional[str] = None
    title: Optional[str] = None
