"""
تخزين كائنات محلي على شكل حاويات (buckets) يحاكي خدمة التخزين السحابي:
رفع، رابط عام، وحذف مؤقت بعد مدة محددة.
"""
from __future__ import annotations

import json
import mimetypes
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from pathlib import Path, PurePosixPath
from typing import Dict, List, Optional
from urllib.parse import quote

from app.core.config import Settings, get_settings
from app.core.logging import get_logger

logger = get_logger("storage")

_BUCKET_META = ".bucket.json"


class StorageError(Exception):
    """خطأ عام في التخزين."""


class StorageAccessError(StorageError):
    pass


class StoragePermissionError(StorageError):
    pass


class BucketNotFoundError(StorageError):
    pass


class BucketExistsError(StorageError):
    pass


class ObjectExistsError(StorageError):
    pass


class ObjectTooLargeError(StorageError):
    pass


class ObjectNotFoundError(StorageError):
    pass


@dataclass
class Bucket:
    name: str
    public: bool = True
    file_size_limit: Optional[int] = None


@dataclass
class StoredObject:
    bucket: str
    path: str
    size_bytes: int
    content_type: str
    cache_control: str
    expires_at: Optional[datetime] = None


class ObjectStorage:
    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        self.root = Path(self.settings.objects_dir)
        self.root.mkdir(parents=True, exist_ok=True)
        self._expirations: Dict[tuple[str, str], datetime] = {}

    # ------------------------------------------------------------------
    # الحاويات
    # ------------------------------------------------------------------
    def list_buckets(self) -> List[Bucket]:
        try:
            entries = sorted(self.root.iterdir())
        except OSError as exc:
            raise StorageAccessError(f"Cannot access storage: {exc}") from exc

        buckets: List[Bucket] = []
        for entry in entries:
            meta = entry / _BUCKET_META
            if entry.is_dir() and meta.exists():
                buckets.append(Bucket(**json.loads(meta.read_text(encoding="utf-8"))))
        return buckets

    def create_bucket(self, name: str, *, public: bool = True, file_size_limit: Optional[int] = None) -> Bucket:
        if not self.settings.storage_allow_bucket_creation:
            raise StoragePermissionError("permission denied: bucket creation is not allowed")

        directory = self._bucket_dir(name)
        if (directory / _BUCKET_META).exists():
            raise BucketExistsError(f"bucket {name} already exists")

        bucket = Bucket(name=name, public=public, file_size_limit=file_size_limit)
        directory.mkdir(parents=True, exist_ok=True)
        (directory / _BUCKET_META).write_text(json.dumps(asdict(bucket)), encoding="utf-8")
        logger.info("Bucket created: %s", name)
        return bucket

    def get_bucket(self, name: str) -> Bucket:
        meta = self._bucket_dir(name) / _BUCKET_META
        if not meta.exists():
            raise BucketNotFoundError("Bucket not found")
        return Bucket(**json.loads(meta.read_text(encoding="utf-8")))

    def list_objects(self, bucket: str, prefix: str = "") -> List[str]:
        self.purge_expired()
        directory = self._bucket_dir(self.get_bucket(bucket).name)
        base = directory / prefix if prefix else directory
        if not base.exists():
            return []
        return sorted(
            path.relative_to(directory).as_posix()
            for path in base.rglob("*")
            if path.is_file() and path.name != _BUCKET_META
        )

    def ensure_bucket_exists(self, name: Optional[str] = None) -> bool:
        """
        التأكد من توفر الحاوية أو إنشاؤها.

        الترتيب: قائمة الحاويات، ثم محاولة قراءة الحاوية مباشرة، ثم الإنشاء.
        أخطاء الصلاحيات ترفع StoragePermissionError، وبقية الأخطاء StorageError.
        """
        name = name or self.settings.storage_bucket

        buckets = self.list_buckets()
        if any(bucket.name == name for bucket in buckets):
            logger.debug("Bucket %s already exists", name)
            return True

        try:
            self.list_objects(name)
            logger.info("Bucket %s is accessible", name)
            return True
        except BucketNotFoundError:
            logger.info("Bucket %s not listed, attempting to create it", name)

        try:
            self.create_bucket(
                name,
                public=True,
                file_size_limit=self.settings.storage_bucket_file_size_limit,
            )
        except BucketExistsError:
            logger.info("Bucket %s already exists but was not detected in the list", name)
        except StoragePermissionError as exc:
            logger.error("Failed to create bucket %s: %s", name, exc)
            raise StoragePermissionError(
                "Permission denied: your account cannot create storage buckets."
            ) from exc
        except OSError as exc:
            raise StorageError(f"Failed to create storage bucket: {exc}") from exc
        return True

    # ------------------------------------------------------------------
    # الكائنات
    # ------------------------------------------------------------------
    def upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        *,
        content_type: Optional[str] = None,
        cache_control: Optional[str] = None,
        upsert: bool = False,
    ) -> StoredObject:
        self.purge_expired()
        meta = self.get_bucket(bucket)
        if meta.file_size_limit is not None and len(data) > meta.file_size_limit:
            raise ObjectTooLargeError(
                f"object exceeds the bucket limit of {meta.file_size_limit} bytes"
            )

        target = self._object_path(bucket, path)
        if target.exists() and not upsert:
            raise ObjectExistsError(f"object {path} already exists")

        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        logger.info("Uploaded %s bytes to %s/%s", len(data), bucket, path)

        return StoredObject(
            bucket=bucket,
            path=path,
            size_bytes=len(data),
            content_type=content_type or mimetypes.guess_type(path)[0] or "application/octet-stream",
            cache_control=cache_control or self.settings.storage_cache_control,
        )

    def get_public_url(self, bucket: str, path: str) -> str:
        base = self.settings.public_base_url.rstrip("/")
        return f"{base}/storage/{quote(bucket)}/{quote(path)}"

    def open_object(self, bucket: str, path: str) -> Path:
        self.purge_expired()
        if not self.get_bucket(bucket).public:
            raise StoragePermissionError(f"bucket {bucket} is not public")
        target = self._object_path(bucket, path)
        if not target.is_file():
            raise ObjectNotFoundError(f"object {path} not found")
        return target

    def remove(self, bucket: str, paths: List[str]) -> None:
        for path in paths:
            target = self._object_path(bucket, path)
            if not target.exists():
                raise ObjectNotFoundError(f"object {path} not found")
            target.unlink()
            self._expirations.pop((bucket, path), None)
            logger.info("Deleted %s/%s", bucket, path)

    # ------------------------------------------------------------------
    # انتهاء الصلاحية
    # ------------------------------------------------------------------
    def schedule_expiration(self, bucket: str, path: str, minutes: int) -> datetime:
        expires_at = datetime.utcnow() + timedelta(minutes=minutes)
        self._expirations[(bucket, path)] = expires_at
        logger.info("Scheduled expiration of %s/%s in %s minutes", bucket, path, minutes)
        return expires_at

    def expires_at(self, bucket: str, path: str) -> Optional[datetime]:
        return self._expirations.get((bucket, path))

    def purge_expired(self, now: Optional[datetime] = None) -> List[str]:
        now = now or datetime.utcnow()
        removed: List[str] = []
        for (bucket, path), expires_at in list(self._expirations.items()):
            if expires_at > now:
                continue
            try:
                self.remove(bucket, [path])
                removed.append(path)
            except (ObjectNotFoundError, OSError) as exc:
                self._expirations.pop((bucket, path), None)
                logger.error("Failed to delete expired file %s: %s", path, exc)
        return removed

    # ------------------------------------------------------------------
    def _bucket_dir(self, name: str) -> Path:
        if not name or "/" in name or name.startswith("."):
            raise StorageError(f"invalid bucket name: {name!r}")
        return self.root / name

    def _object_path(self, bucket: str, path: str) -> Path:
        parts = PurePosixPath(path).parts
        if not parts or any(part in ("..", "") for part in parts) or PurePosixPath(path).is_absolute():
            raise StorageError(f"invalid object path: {path!r}")
        if parts[-1] == _BUCKET_META:
            raise StorageError(f"invalid object path: {path!r}")
        return self._bucket_dir(bucket).joinpath(*parts)
