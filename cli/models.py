"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class SetKeyCommand:
    """Store the ingestion API key in the config file."""

    api_key: str
    command: Literal["set-key"] = "set-key"


@dataclass(frozen=True)
class UploadCommand:
    """Upload a video file."""

    file_path: str
    title: str
    description: str = ""
    tags: tuple[str, ...] = ()
    command: Literal["upload"] = "upload"


@dataclass(frozen=True)
class PlayCommand:
    """Resolve a playback URL for a viewer."""

    video_id: str
    user_id: str
    command: Literal["play"] = "play"


@dataclass(frozen=True)
class InfoCommand:
    """Show metadata of a stored video."""

    video_id: str
    command: Literal["info"] = "info"


@dataclass(frozen=True)
class DeleteCommand:
    """Delete a stored video."""

    video_id: str
    command: Literal["delete"] = "delete"


@dataclass(frozen=True)
class ConfigCommand:
    """Show the active configuration."""

    command: Literal["config"] = "config"


CommandRequest = (
    SetKeyCommand
    | UploadCommand
    | PlayCommand
    | InfoCommand
    | DeleteCommand
    | ConfigCommand
)
