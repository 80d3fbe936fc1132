import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure the project root is importable when running pytest from anywhere
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from app.core.config import Settings  # noqa: E402
from app.main import create_app  # noqa: E402


def make_settings(tmp_path: Path, **overrides) -> Settings:
    values = dict(
        base_dir=tmp_path,
        secret_key="test-secret",
        public_base_url="http://testserver",
        mock_compression_delay=0,
        expiration_sweep_seconds=3600,
    )
    values.update(overrides)
    settings = Settings(**values)
    settings.configure_paths()
    return settings


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(client):
    resp = client.post("/auth/signup", json={"email": "user@example.com", "password": "secret-pass"})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


def upload(client, name: str, content: bytes, content_type: str = "text/plain") -> dict:
    resp = client.post("/compress/upload", files=[("files", (name, content, content_type))])
    assert resp.status_code == 200, resp.text
    return resp.json()["files"][0]
