"""Command handler functions for CLI operations."""

import json
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Optional

from common.logging_config import get_logger
from common.types import UploadRequest, UploadResult
from cli.constants import SUPPORTED_VIDEO_EXTENSIONS
from cli.models import (
    ConfigCommand,
    DeleteCommand,
    InfoCommand,
    PlayCommand,
    SetKeyCommand,
    UploadCommand,
)
from cli.utils import ChunkProgressPrinter, file_fingerprint, format_file_size
from uploader.config import Config
from uploader.exceptions import (
    ChunkTransferError,
    FinalizationError,
    MediaUploadError,
    SessionResolutionError,
    UploadCancelledError,
)
from uploader.ingestion_client import IngestionClient
from uploader.orchestrator import UploadOrchestrator
from uploader.playback import PlaybackResolver

logger = get_logger(__name__)


class CommandFailed(Exception):
    """A command could not complete; the message is what the user sees."""


_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get or create the global Config instance.

    Returns:
        Config backed by ~/.media-uploader/config.json
    """
    global _config
    if _config is None:
        logger.debug("Loading CLI configuration")
        _config = Config()
    return _config


def use_config(config: Config) -> None:
    """Replace the global Config, e.g. with one loaded from --config."""
    global _config
    _config = config


def _run_cancellable(orchestrator: UploadOrchestrator, request: UploadRequest) -> UploadResult:
    """
    Run an upload on a worker thread so Ctrl-C can stop it cleanly.

    The first Ctrl-C sets the request's cancel event; the orchestrator then
    clears the job before the next chunk and raises UploadCancelledError.
    """
    with ThreadPoolExecutor(max_workers=1, thread_name_prefix='upload') as executor:
        future: Future = executor.submit(orchestrator.run, request)
        while True:
            try:
                return future.result()
            except KeyboardInterrupt:
                if not request.cancel_event.is_set():
                    logger.info("Cancellation requested by user")
                    print("\nCancelling after the current chunk...")
                    request.cancel_event.set()


def handle_set_key(cmd: SetKeyCommand, config: Optional[Config] = None) -> str:
    """
    Handle 'set-key' command.

    Args:
        cmd: SetKeyCommand with api_key
        config: Optional Config for dependency injection (testing)

    Returns:
        Confirmation message
    """
    if config is None:
        config = get_config()
    config.set_api_key(cmd.api_key)
    return f"API key saved to {config.config_path}"


def handle_upload(
    cmd: UploadCommand,
    client: Optional[IngestionClient] = None,
    config: Optional[Config] = None,
) -> str:
    """
    Handle 'upload' command.

    Args:
        cmd: UploadCommand with file path, title, description and tags
        client: Optional IngestionClient for dependency injection (testing)
        config: Optional Config for dependency injection (testing)

    Returns:
        Success message with the upload job id

    Raises:
        CommandFailed: If the file is unusable or the upload does not complete
    """
    if config is None:
        config = get_config()

    path = Path(cmd.file_path).expanduser()
    if not path.exists():
        raise CommandFailed(f"Error: File not found: {cmd.file_path}")
    if not path.is_file():
        raise CommandFailed(f"Error: Not a file: {cmd.file_path}")
    if path.suffix.lower() not in SUPPORTED_VIDEO_EXTENSIONS:
        raise CommandFailed(
            f"Error: Not a video file: {cmd.file_path} (expected one of {', '.join(SUPPORTED_VIDEO_EXTENSIONS)})"
        )

    file_size = path.stat().st_size
    if file_size == 0:
        raise CommandFailed(f"Error: File is empty: {cmd.file_path}")

    logger.info(f"Executing upload command: file={path.name} size={file_size} tags={list(cmd.tags)}")

    owns_client = client is None
    if owns_client:
        client = IngestionClient(config)

    printer = ChunkProgressPrinter(path.name, file_size)
    request = UploadRequest(
        source=path,
        title=cmd.title,
        description=cmd.description,
        tags=cmd.tags,
        chunk_size=config.get_chunk_size(),
        on_progress=printer,
        cancel_event=threading.Event(),
    )
    orchestrator = UploadOrchestrator(client, strict_state_check=config.is_strict_state_check())

    try:
        result = _run_cancellable(orchestrator, request)
    except ValueError as e:
        raise CommandFailed(f"Error: {e}") from e
    except ChunkTransferError as e:
        printer.finish()
        raise CommandFailed(
            f"Upload failed at chunk {e.sequence_number}: {e}\n"
            f"Upload job {e.job_id} was left open; run the upload again from the start."
        ) from e
    except FinalizationError as e:
        raise CommandFailed(
            f"All chunks sent but the upload could not be finalized: {e}\nUpload job: {e.job_id}"
        ) from e
    except UploadCancelledError as e:
        printer.finish()
        raise CommandFailed(f"Upload cancelled: {e}") from e
    except MediaUploadError as e:
        printer.finish()
        raise CommandFailed(f"Upload failed: {e}") from e
    finally:
        if owns_client:
            client.close()

    logger.debug("Upload command completed")
    lines = [
        f"Uploaded: {path.name} ({format_file_size(file_size)}, MD5: {file_fingerprint(path)})",
        f"Upload job ID: {result.upload_job_id}",
    ]
    if result.video_id:
        lines.append(f"Video ID: {result.video_id}")
    lines.append(result.message)
    return "\n".join(lines)


def handle_play(cmd: PlayCommand, resolver: Optional[PlaybackResolver] = None) -> str:
    """
    Handle 'play' command.

    Args:
        cmd: PlayCommand with video_id and user_id
        resolver: Optional PlaybackResolver for dependency injection (testing)

    Returns:
        Playback URL

    Raises:
        CommandFailed: If no session could be resolved
    """
    owns_resolver = resolver is None
    if owns_resolver:
        resolver = PlaybackResolver(get_config())

    try:
        url = resolver.resolve(cmd.video_id, cmd.user_id)
    except (SessionResolutionError, ValueError) as e:
        raise CommandFailed(f"Error: {e}") from e
    finally:
        if owns_resolver:
            resolver.close()

    return f"Playback URL: {url}"


def handle_info(cmd: InfoCommand, client: Optional[IngestionClient] = None) -> str:
    """
    Handle 'info' command.

    Args:
        cmd: InfoCommand with video_id
        client: Optional IngestionClient for dependency injection (testing)

    Returns:
        Pretty-printed video metadata

    Raises:
        CommandFailed: If the lookup fails
    """
    owns_client = client is None
    if owns_client:
        client = IngestionClient(get_config())

    try:
        info = client.get_video_info(cmd.video_id)
    except (MediaUploadError, ValueError) as e:
        raise CommandFailed(f"Error: {e}") from e
    finally:
        if owns_client:
            client.close()

    if not info:
        return f"No information returned for video {cmd.video_id}"
    return json.dumps(info, indent=2, sort_keys=True)


def handle_delete(cmd: DeleteCommand, client: Optional[IngestionClient] = None) -> str:
    """
    Handle 'delete' command.

    Args:
        cmd: DeleteCommand with video_id
        client: Optional IngestionClient for dependency injection (testing)

    Returns:
        Confirmation message

    Raises:
        CommandFailed: If the video could not be deleted
    """
    owns_client = client is None
    if owns_client:
        client = IngestionClient(get_config())

    try:
        client.delete_video(cmd.video_id)
    except (MediaUploadError, ValueError) as e:
        raise CommandFailed(f"Error: {e}") from e
    finally:
        if owns_client:
            client.close()

    return f"Deleted video {cmd.video_id}"


def handle_config(cmd: ConfigCommand, config: Optional[Config] = None) -> str:
    """
    Handle 'config' command.

    Returns:
        The active configuration with the API key masked
    """
    if config is None:
        config = get_config()

    shown = dict(config.data)
    shown['api_key'] = '***MASKED***' if config.get_api_key() else '(not set)'
    return f"Config file: {config.config_path}\n{json.dumps(shown, indent=2)}"
