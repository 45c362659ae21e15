"""Shared httpx plumbing for the ingestion and playback clients."""

import time
import uuid
from typing import Optional

import httpx

from common.constants import REQUEST_ID_HEADER, UPLOAD_API_KEY_HEADER
from common.logging_config import get_logger
from uploader.config import Config
from uploader.schemas import ErrorResponse

logger = get_logger(__name__)

RETRYABLE_STATUS_CODES = frozenset({408})


class ServiceClient:
    """
    Base HTTP client for one remote service.

    Owns a single httpx.Client with a bounded timeout. Subclasses pick the
    base URL and the header the API key travels in.
    """

    api_key_header = UPLOAD_API_KEY_HEADER

    def __init__(self, config: Config, base_url: str, api_key: Optional[str] = None):
        """
        Initialize the client.

        Args:
            config: Configuration instance
            base_url: Root URL every endpoint path is resolved against
            api_key: Explicit API key; falls back to config.get_api_key()
        """
        self.config = config
        self.api_key = api_key or config.get_api_key()
        self.session = httpx.Client(base_url=base_url, timeout=config.get_timeout())
        self.request_id = None
        logger.debug(f"Initialized {type(self).__name__} [base_url={base_url}]")

    def _auth_headers(self) -> dict:
        """
        Get the API key header.

        Raises:
            ValueError: If no API key is configured
        """
        if not self.api_key:
            raise ValueError("No API key configured. Pass api_key or set BMDRM_API_KEY.")
        return {self.api_key_header: self.api_key}

    def _request(
        self,
        method: str,
        endpoint: str,
        max_retries: Optional[int] = None,
        **kwargs
    ) -> httpx.Response:
        """
        Make an HTTP request, retrying only when configured to.

        Retries cover 408, 5xx and connect/timeout failures, with exponential
        backoff. The default configuration performs a single attempt.

        Args:
            method: HTTP method (GET, POST, DELETE)
            endpoint: Endpoint path relative to the base URL
            max_retries: Max retry attempts (uses config default if None)
            **kwargs: Additional arguments passed to httpx

        Returns:
            HTTP response object (any status)

        Raises:
            httpx.TransportError: If the last attempt failed at the transport level
        """
        retry_config = self.config.get_retry_config()
        max_retries = max_retries if max_retries is not None else retry_config['max_retries']
        backoff = retry_config['retry_backoff_multiplier']

        self.request_id = str(uuid.uuid4())
        headers = dict(kwargs.pop('headers', None) or {})
        headers[REQUEST_ID_HEADER] = self.request_id

        logger.debug(f"Making request: {method} {endpoint} [request_id={self.request_id}]")

        attempt = 0
        while True:
            try:
                response = self.session.request(method, endpoint, headers=headers, **kwargs)
            except (httpx.ConnectError, httpx.TimeoutException) as e:
                if attempt < max_retries:
                    delay = backoff ** attempt
                    logger.warning(
                        f"Network error (attempt {attempt + 1}/{max_retries + 1}): "
                        f"{method} {endpoint} error={type(e).__name__}, retrying in {delay}s [request_id={self.request_id}]"
                    )
                    time.sleep(delay)
                    attempt += 1
                    continue
                logger.error(f"Network error: {method} {endpoint} error={e!r} [request_id={self.request_id}]")
                raise

            logger.debug(
                f"Response received: {method} {endpoint} status={response.status_code} [request_id={self.request_id}]"
            )

            retryable = response.status_code in RETRYABLE_STATUS_CODES or response.status_code >= 500
            if retryable and attempt < max_retries:
                delay = backoff ** attempt
                logger.warning(
                    f"Server error (attempt {attempt + 1}/{max_retries + 1}): "
                    f"{method} {endpoint} status={response.status_code}, retrying in {delay}s [request_id={self.request_id}]"
                )
                time.sleep(delay)
                attempt += 1
                continue

            if response.status_code >= 400:
                logger.warning(
                    f"Request failed: {method} {endpoint} status={response.status_code} [request_id={self.request_id}]"
                )
            return response

    def _describe_error(self, response: httpx.Response) -> str:
        """
        Build a readable message from an error response.

        Args:
            response: HTTP response object

        Returns:
            "HTTP <status>: <detail>" using whichever detail field the body carries
        """
        detail = None
        try:
            body = response.json()
            if isinstance(body, dict):
                error = ErrorResponse.model_validate(body)
                detail = error.detail or error.message or error.title
            elif isinstance(body, str):
                detail = body
        except ValueError:
            detail = None

        if not detail:
            detail = response.text.strip() or response.reason_phrase or 'Unknown error'
        return f"HTTP {response.status_code}: {detail}"

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
