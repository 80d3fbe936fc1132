from datetime import datetime, timedelta

import pytest

from app.storage.object_store import (
    BucketNotFoundError,
    ObjectExistsError,
    ObjectNotFoundError,
    ObjectStorage,
    ObjectTooLargeError,
    StorageError,
    StoragePermissionError,
)
from conftest import make_settings


@pytest.fixture
def storage(settings):
    return ObjectStorage(settings)


def test_ensure_bucket_creates_public_bucket_with_limit(storage, settings):
    assert storage.ensure_bucket_exists() is True

    buckets = storage.list_buckets()
    assert [bucket.name for bucket in buckets] == ["compressed-files"]
    assert buckets[0].public is True
    assert buckets[0].file_size_limit == settings.storage_bucket_file_size_limit

    # a second call finds it in the listing
    assert storage.ensure_bucket_exists() is True


def test_ensure_bucket_without_creation_rights(tmp_path):
    storage = ObjectStorage(make_settings(tmp_path, storage_allow_bucket_creation=False))
    with pytest.raises(StoragePermissionError):
        storage.ensure_bucket_exists()


def test_upload_rejects_existing_path_and_oversize(tmp_path):
    storage = ObjectStorage(make_settings(tmp_path, storage_bucket_file_size_limit=10))
    storage.ensure_bucket_exists()

    stored = storage.upload("compressed-files", "user_files/u1/a.txt", b"hello")
    assert stored.size_bytes == 5
    assert stored.content_type == "text/plain"
    assert stored.cache_control == "300"

    with pytest.raises(ObjectExistsError):
        storage.upload("compressed-files", "user_files/u1/a.txt", b"again")
    with pytest.raises(ObjectTooLargeError):
        storage.upload("compressed-files", "user_files/u1/b.txt", b"x" * 11)


def test_upload_to_missing_bucket(storage):
    with pytest.raises(BucketNotFoundError):
        storage.upload("nope", "a.txt", b"data")


def test_rejects_path_traversal(storage):
    storage.ensure_bucket_exists()
    with pytest.raises(StorageError):
        storage.upload("compressed-files", "../escape.txt", b"data")


def test_public_url(storage):
    url = storage.get_public_url("compressed-files", "user_files/u1/my file.txt")
    assert url == "http://testserver/storage/compressed-files/user_files/u1/my%20file.txt"


def test_expired_objects_are_purged(storage):
    storage.ensure_bucket_exists()
    storage.upload("compressed-files", "user_files/u1/a.txt", b"hello")
    expires_at = storage.schedule_expiration("compressed-files", "user_files/u1/a.txt", 5)

    assert storage.purge_expired(now=expires_at - timedelta(seconds=1)) == []
    assert storage.open_object("compressed-files", "user_files/u1/a.txt").read_bytes() == b"hello"

    assert storage.purge_expired(now=expires_at + timedelta(seconds=1)) == ["user_files/u1/a.txt"]
    assert storage.expires_at("compressed-files", "user_files/u1/a.txt") is None
    with pytest.raises(ObjectNotFoundError):
        storage.open_object("compressed-files", "user_files/u1/a.txt")


def test_schedule_expiration_is_relative_to_now(storage):
    before = datetime.utcnow()
    expires_at = storage.schedule_expiration("compressed-files", "x.txt", 5)
    assert timedelta(minutes=5) <= expires_at - before < timedelta(minutes=6)
