"""FastAPI stand-in for the ingestion and playback services, served through TestClient."""

import hashlib
import uuid

import pytest
from fastapi import APIRouter, FastAPI, File, Header, HTTPException, Query, UploadFile, status
from fastapi.testclient import TestClient

from uploader.ingestion_client import IngestionClient
from uploader.playback import PlaybackResolver
from uploader.schemas import InitUploadRequest

VALID_API_KEY = 'integration-key'


class UploadJobRecord:
    """Server-side record of one upload job."""

    def __init__(self, job_id: str, request: InitUploadRequest):
        self.job_id = job_id
        self.request = request
        self.chunks = {}
        self.hashes = {}
        self.cleared = False

    def assembled(self) -> bytes:
        return b''.join(self.chunks[n] for n in sorted(self.chunks))


def create_app() -> FastAPI:
    """
    Build a fresh in-memory ingestion + playback service.

    Chunks must arrive in order with a matching MD5; Clear finalizes a
    complete job, after which the job id can be resolved for playback.
    """
    app = FastAPI(title="Fake ingestion service")
    app.state.jobs = {}

    ingestion = APIRouter(tags=["Ingestion"])
    sessions = APIRouter(tags=["Sessions"])

    def require_key(api_key: str) -> None:
        if api_key != VALID_API_KEY:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")

    def get_job(job_id: str) -> UploadJobRecord:
        job = app.state.jobs.get(job_id)
        if job is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown upload job {job_id}")
        return job

    @ingestion.post("/Init")
    async def init_upload(payload: InitUploadRequest, api_key: str = Header(..., alias="API-KEY")):
        require_key(api_key)
        job_id = str(uuid.uuid4())
        app.state.jobs[job_id] = UploadJobRecord(job_id, payload)
        return {"uploadJobId": job_id, "success": True, "message": "Upload initialized"}

    @ingestion.post("/Upload")
    async def upload_chunk(
        chunk_number: int = Query(..., alias="chunkNumber"),
        upload_job_id: str = Query(..., alias="uploadJobId"),
        chunk_hash: str = Query(..., alias="hash"),
        chunk_file: UploadFile = File(..., alias="chunkFile"),
        api_key: str = Header(..., alias="API-KEY"),
    ):
        require_key(api_key)
        job = get_job(upload_job_id)

        expected = len(job.chunks) + 1
        if chunk_number != expected or chunk_number > job.request.total_chunks:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Expected chunk {expected}, got {chunk_number}",
            )

        data = await chunk_file.read()
        if hashlib.md5(data).hexdigest() != chunk_hash.lower():
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Chunk hash mismatch")

        job.chunks[chunk_number] = data
        job.hashes[chunk_number] = chunk_hash
        return {"success": True}

    @ingestion.get("/State")
    async def upload_state(
        upload_job_id: str = Query(..., alias="uploadJobId"),
        api_key: str = Header(..., alias="API-KEY"),
    ):
        require_key(api_key)
        job = get_job(upload_job_id)
        return {
            "uploadJobId": job.job_id,
            "totalChunks": {str(number): digest for number, digest in job.hashes.items()},
        }

    @ingestion.post("/Clear")
    async def clear_upload(
        upload_job_id: str = Query(..., alias="uploadJobId"),
        api_key: str = Header(..., alias="API-KEY"),
    ):
        require_key(api_key)
        job = get_job(upload_job_id)
        if job.cleared:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Upload job already cleared")
        if len(job.chunks) != job.request.total_chunks:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Upload incomplete: {len(job.chunks)} of {job.request.total_chunks} chunks",
            )
        job.cleared = True
        return {"success": True, "videoId": upload_job_id}

    @sessions.get("/Sessions")
    async def playback_session(
        video_id: str = Query(..., alias="videoId"),
        user_id: str = Query(..., alias="userId"),
        api_key: str = Header(..., alias="apiKey"),
    ):
        require_key(api_key)
        job = app.state.jobs.get(video_id)
        if job is None or not job.cleared:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Video not found")
        token = hashlib.md5(f"{video_id}:{user_id}".encode()).hexdigest()
        return {
            "urlToEdge": f"https://edge.test/{video_id}/master.m3u8?viewer={user_id}&token={token}",
            "success": True,
        }

    app.include_router(ingestion)
    app.include_router(sessions)
    return app


@pytest.fixture
def service_app():
    return create_app()


@pytest.fixture
def live_client(temp_config, service_app):
    """IngestionClient talking to the FastAPI fake over TestClient."""
    client = IngestionClient(temp_config, api_key=VALID_API_KEY)
    client.session.close()
    client.session = TestClient(service_app)
    yield client
    client.close()


@pytest.fixture
def live_resolver(temp_config, service_app):
    """PlaybackResolver talking to the FastAPI fake over TestClient."""
    resolver = PlaybackResolver(temp_config, api_key=VALID_API_KEY)
    resolver.session.close()
    resolver.session = TestClient(service_app)
    yield resolver
    resolver.close()
