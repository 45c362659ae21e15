"""Resolves a stored video and a viewer into a signed edge-delivery URL."""

from typing import Optional

import httpx

from common.constants import SESSION_API_KEY_HEADER
from common.logging_config import get_logger
from uploader.config import Config
from uploader.exceptions import SessionResolutionError
from uploader.http import ServiceClient
from uploader.schemas import PlaybackSessionResponse

logger = get_logger(__name__)


class PlaybackResolver(ServiceClient):
    """
    Stateless playback-session lookup.

    Nothing is cached: the URL's lifetime is owned by the remote service, so
    callers resolve again when a previously returned URL stops working.
    """

    api_key_header = SESSION_API_KEY_HEADER

    def __init__(self, config: Config, api_key: Optional[str] = None):
        super().__init__(config, config.get_session_base_url(), api_key=api_key)

    def resolve(self, content_id: str, viewer_id: str) -> str:
        """
        Exchange a content id and viewer id for a delivery URL.

        Args:
            content_id: Upload job / video id returned by the ingestion service
            viewer_id: Id of the user who will watch the video

        Returns:
            Signed edge-delivery URL

        Raises:
            SessionResolutionError: If the content is unknown, the viewer is not
                authorized, or the service is unreachable
        """
        if not content_id:
            raise SessionResolutionError("A content id is required", content_id=content_id)

        logger.info(f"Resolving playback session [video_id={content_id} user_id={viewer_id}]")

        try:
            response = self._request(
                'GET',
                '/Sessions',
                params={'videoId': content_id, 'userId': viewer_id},
                headers=self._auth_headers(),
            )
        except httpx.TransportError as e:
            raise SessionResolutionError(
                f"Cannot reach playback service: {e}",
                content_id=content_id,
            ) from e

        if response.is_error:
            raise SessionResolutionError(
                f"Playback session rejected: {self._describe_error(response)}",
                content_id=content_id,
                status_code=response.status_code,
            )

        try:
            session = PlaybackSessionResponse.model_validate(response.json())
        except ValueError as e:
            raise SessionResolutionError(
                f"Malformed playback session response: {e}",
                content_id=content_id,
                status_code=response.status_code,
            ) from e

        if not session.url_to_edge:
            raise SessionResolutionError(
                f"Playback session response carried no URL: {session.message or response.text}",
                content_id=content_id,
                status_code=response.status_code,
            )

        return session.url_to_edge
