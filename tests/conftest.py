"""Pytest fixtures for megagate tests."""
import pytest
import pytest_asyncio
from aiohttp.test_utils import TestClient, TestServer

from megagate.app import create_app
from megagate.core.config import GatewayConfig
from megagate.core.storage import MemoryBackend

EMAIL = "user@example.com"
PASSWORD = "correct horse battery staple"
OTHER_EMAIL = "other@example.com"
OTHER_PASSWORD = "hunter2"


@pytest.fixture
def accounts():
    """Accounts known to the memory backend."""
    return {EMAIL: PASSWORD, OTHER_EMAIL: OTHER_PASSWORD}


@pytest.fixture
def backend(accounts):
    """Memory backend with small chunks so downloads stream in pieces."""
    return MemoryBackend(accounts, chunk_size=4)


@pytest.fixture
def tree(backend):
    """
    Seeds the main account with:

        /Documents/Reports/q1.txt
        /notes.txt
    """
    documents = backend.seed_folder(EMAIL, "Documents")
    reports = backend.seed_folder(EMAIL, "Reports", documents.node_id)
    q1 = backend.seed_file(EMAIL, "q1.txt", b"quarterly numbers", reports.node_id)
    notes = backend.seed_file(EMAIL, "notes.txt", b"hello world")
    return {
        'documents': documents,
        'reports': reports,
        'q1': q1,
        'notes': notes,
    }


@pytest.fixture
def config(tmp_path):
    """Gateway configuration staging uploads under a test directory."""
    config = GatewayConfig.default()
    config.upload.temp_dir = str(tmp_path)
    return config


@pytest.fixture
def app(config, backend):
    """Gateway application over the memory backend."""
    return create_app(config, backend)


@pytest_asyncio.fixture
async def client(app):
    """HTTP client bound to a running test server."""
    async with TestClient(TestServer(app)) as client:
        yield client


@pytest.fixture
def login(client):
    """Returns a coroutine function logging in and returning the token."""
    async def do_login(email=EMAIL, password=PASSWORD) -> str:
        resp = await client.post('/api/login', json={'email': email, 'password': password})
        assert resp.status == 200
        return (await resp.json())['token']
    return do_login
