"""Project-wide constants (chunk size, ingestion endpoints, header names)."""

CHUNK_SIZE_BYTES: int = 10 * 1024 * 1024  # 10 MiB default chunk size

UPLOAD_BASE_URL: str = "https://uploads.bmdrm.com/api/public/fileupload"
SESSION_BASE_URL: str = "https://cdn-lb.video-crypt.com/api"
VIDEOS_BASE_URL: str = "https://app.bmdrm.com/api"

# Ingestion endpoints want "API-KEY"; the session endpoint wants "apiKey".
UPLOAD_API_KEY_HEADER: str = "API-KEY"
SESSION_API_KEY_HEADER: str = "apiKey"
REQUEST_ID_HEADER: str = "X-Request-ID"

CHUNK_FORM_FIELD: str = "chunkFile"

DEFAULT_TIMEOUT_SECONDS: float = 30.0
UPLOAD_TIMEOUT_PER_MIB_SECONDS: float = 0.1

API_KEY_ENV_VAR: str = "BMDRM_API_KEY"
