"""Shared pytest fixtures for all tests."""

import json

import httpx
import pytest

from uploader.config import Config
from uploader.ingestion_client import IngestionClient
from uploader.playback import PlaybackResolver


def multipart_file(request: httpx.Request, field: str) -> bytes:
    """Pull one file field's raw bytes out of a multipart request body."""
    boundary = request.headers['content-type'].split('boundary=', 1)[1].encode()
    for part in request.content.split(b'--' + boundary):
        head, sep, body = part.partition(b'\r\n\r\n')
        if sep and f'name="{field}"'.encode() in head:
            return body[:-2]
    raise AssertionError(f"No multipart field {field!r} in request")


class FakeIngestionService:
    """
    In-memory stand-in for the ingestion service, served through httpx.MockTransport.

    Every call is appended to `calls` as (verb, query params) so tests can
    assert on ordering; progress callbacks may append to the same list.
    """

    def __init__(self, job_id: str = 'job-123'):
        self.job_id = job_id
        self.calls = []
        self.headers = []
        self.init_payloads = []
        self.chunk_digests = {}
        self.chunk_data = {}
        self.fail_init = False
        self.fail_chunk = None
        self.fail_state = False
        self.fail_clear = False
        self.clear_body = None
        self.unacknowledged = set()
        self.cleared = False

    def handler(self, request: httpx.Request) -> httpx.Response:
        verb = request.url.path.rsplit('/', 1)[-1]
        params = dict(request.url.params)
        self.calls.append((verb, params))
        self.headers.append(request.headers)

        if verb == 'Init':
            if self.fail_init:
                return httpx.Response(400, json={'detail': 'Invalid metadata'})
            self.init_payloads.append(json.loads(request.content))
            return httpx.Response(200, json={'uploadJobId': self.job_id})

        if verb == 'Upload':
            number = int(params['chunkNumber'])
            if number == self.fail_chunk:
                return httpx.Response(500, json={'detail': 'Chunk hash mismatch'})
            self.chunk_digests[number] = params['hash']
            self.chunk_data[number] = multipart_file(request, 'chunkFile')
            return httpx.Response(200)

        if verb == 'State':
            if self.fail_state:
                return httpx.Response(503, text='State unavailable')
            acknowledged = {
                str(number): digest
                for number, digest in self.chunk_digests.items()
                if number not in self.unacknowledged
            }
            return httpx.Response(200, json={'uploadJobId': self.job_id, 'totalChunks': acknowledged})

        if verb == 'Clear':
            if self.fail_clear:
                return httpx.Response(404, json={'detail': 'Unknown upload job'})
            self.cleared = True
            if self.clear_body is not None:
                return httpx.Response(200, json=self.clear_body)
            return httpx.Response(200)

        return httpx.Response(404)

    def verbs(self) -> list:
        return [verb for verb, _ in self.calls]

    def uploaded_chunk_numbers(self) -> list:
        return [int(params['chunkNumber']) for verb, params in self.calls if verb == 'Upload']


@pytest.fixture(autouse=True)
def no_ambient_api_key(monkeypatch):
    """Keep a developer's BMDRM_API_KEY out of the tests."""
    monkeypatch.delenv('BMDRM_API_KEY', raising=False)


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Returns:
        Path to temporary .media-uploader directory
    """
    config_dir = tmp_path / '.media-uploader'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir):
    """Config instance backed by a temp config file."""
    return Config(temp_config_dir / 'config.json')


@pytest.fixture
def fake_service():
    return FakeIngestionService()


@pytest.fixture
def ingestion_client(temp_config, fake_service):
    """IngestionClient whose HTTP session talks to the fake service."""
    client = IngestionClient(temp_config, api_key='test-key')
    client.session.close()
    client.session = httpx.Client(transport=httpx.MockTransport(fake_service.handler), base_url='http://test')
    yield client
    client.close()


@pytest.fixture
def make_resolver(temp_config):
    """Build a PlaybackResolver around a request handler function."""
    resolvers = []

    def factory(handler, api_key='test-key'):
        resolver = PlaybackResolver(temp_config, api_key=api_key)
        resolver.session.close()
        resolver.session = httpx.Client(transport=httpx.MockTransport(handler), base_url='http://test')
        resolvers.append(resolver)
        return resolver

    yield factory
    for resolver in resolvers:
        resolver.close()


@pytest.fixture
def sample_video(tmp_path):
    """
    Create a small fake video file.

    Returns:
        Path to a 2.5 KiB .mp4 file
    """
    file_path = tmp_path / 'lecture.mp4'
    file_path.write_bytes(bytes(range(256)) * 10)
    return file_path


def patterned_bytes(size: int) -> bytes:
    """Deterministic non-uniform payload of the given size."""
    pattern = b'0123456789abcdefghijklmnopqrstuv'
    repeats, remainder = divmod(size, len(pattern))
    return pattern * repeats + pattern[:remainder]


@pytest.fixture
def patterned():
    return patterned_bytes
