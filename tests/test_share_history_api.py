from datetime import datetime, timedelta
from urllib.parse import unquote, urlparse

from fastapi.testclient import TestClient

from app.main import create_app
from conftest import make_settings, upload


def _compressed_result(client, name: str = "notes.txt", content: bytes = b"n" * 1_000) -> str:
    card = upload(client, name, content)
    resp = client.post(
        "/compress/commit",
        json={"items": [{"file_id": card["file_id"], "target_size": 0, "compression_level": 50}]},
    )
    assert resp.status_code == 200, resp.text
    return resp.json()["results"][0]["result"]["file_id"]


def test_login_and_session(client, auth_headers):
    resp = client.post("/auth/login", json={"email": "USER@example.com", "password": "secret-pass"})
    assert resp.status_code == 200, resp.text
    assert resp.json()["token_type"] == "bearer"

    session = client.get("/auth/session", headers=auth_headers)
    assert session.status_code == 200
    assert session.json()["user"]["email"] == "user@example.com"


def test_login_failures(client, auth_headers):
    resp = client.post("/auth/login", json={"email": "user@example.com", "password": "wrong-pass"})
    assert resp.status_code == 401

    resp = client.post("/auth/signup", json={"email": "user@example.com", "password": "another-pass"})
    assert resp.status_code == 409


def test_share_requires_session(client):
    result_id = _compressed_result(client)
    assert client.post("/share", json={"file_id": result_id}).status_code == 401
    resp = client.post("/share", json={"file_id": result_id}, headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401


def test_share_creates_expiring_link_and_history(client, auth_headers, settings):
    result_id = _compressed_result(client)

    resp = client.post("/share", json={"file_id": result_id}, headers=auth_headers)
    assert resp.status_code == 200, resp.text
    shared = resp.json()

    assert shared["path"].startswith("user_files/")
    assert shared["path"].endswith("_notes.txt")

    download_url = urlparse(shared["download_url"])
    assert download_url.path == "/download-helper.html"
    public_url, file_name, expires_ms = download_url.fragment.split(",")
    assert unquote(public_url) == shared["public_url"]
    assert unquote(file_name) == "notes.txt"
    expires_at = datetime.utcfromtimestamp(int(expires_ms) / 1000)
    assert timedelta(minutes=4) < expires_at - datetime.utcnow() <= timedelta(minutes=5)

    public = client.get(urlparse(shared["public_url"]).path)
    assert public.status_code == 200
    assert public.content == b"n" * 1_000

    history = client.get("/history", headers=auth_headers).json()
    assert history["count"] == 1
    item = history["history"][0]
    assert item["id"] == shared["history_id"]
    assert item["file_name"] == "notes.txt"
    assert item["original_size"] == 1_000
    assert item["compressed_size"] == 800
    assert item["cloud_file_path"] == shared["path"]

    link = client.get(f"/history/{item['id']}/download", headers=auth_headers)
    assert link.status_code == 200
    assert link.json()["public_url"] == shared["public_url"]


def test_shared_file_disappears_after_expiration(client, app, auth_headers):
    result_id = _compressed_result(client)
    shared = client.post("/share", json={"file_id": result_id}, headers=auth_headers).json()

    app.state.object_storage.purge_expired(now=datetime.utcnow() + timedelta(minutes=6))

    assert client.get(urlparse(shared["public_url"]).path).status_code == 404
    link = client.get(f"/history/{shared['history_id']}/download", headers=auth_headers)
    assert link.status_code == 410


def test_only_results_can_be_shared(client, auth_headers):
    card = upload(client, "raw.txt", b"r" * 10)
    resp = client.post("/share", json={"file_id": card["file_id"]}, headers=auth_headers)
    assert resp.status_code == 400


def test_history_is_per_user_and_deletable(client, auth_headers):
    result_id = _compressed_result(client)
    shared = client.post("/share", json={"file_id": result_id}, headers=auth_headers).json()

    other = client.post("/auth/signup", json={"email": "other@example.com", "password": "other-pass"}).json()
    other_headers = {"Authorization": f"Bearer {other['access_token']}"}

    assert client.get("/history", headers=other_headers).json()["count"] == 0
    assert client.delete(f"/history/{shared['history_id']}", headers=other_headers).status_code == 404

    assert client.delete(f"/history/{shared['history_id']}", headers=auth_headers).status_code == 200
    assert client.get("/history", headers=auth_headers).json()["count"] == 0


def test_share_without_bucket_permission(tmp_path):
    app = create_app(make_settings(tmp_path, storage_allow_bucket_creation=False))
    with TestClient(app) as client:
        token = client.post("/auth/signup", json={"email": "a@example.com", "password": "secret-pass"}).json()
        result_id = _compressed_result(client)
        resp = client.post(
            "/share",
            json={"file_id": result_id},
            headers={"Authorization": f"Bearer {token['access_token']}"},
        )
    assert resp.status_code == 403
