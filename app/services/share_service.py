from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from urllib.parse import quote

from app.core.config import Settings
from app.core.logging import get_logger
from app.storage.history import CompressionHistoryItem, HistoryStore
from app.storage.object_store import ObjectStorage, StorageError
from app.storage.registry import RegisteredFile
from app.storage.users import User

logger = get_logger("share")


@dataclass
class SharedFile:
    path: str
    public_url: str
    download_url: str
    expires_at: datetime
    history_item: Optional[CompressionHistoryItem] = None


def _epoch_ms(moment: datetime) -> int:
    return calendar.timegm(moment.utctimetuple()) * 1000 + moment.microsecond // 1000


def build_download_url(settings: Settings, public_url: str, file_name: str, expires_at: datetime) -> str:
    """رابط صفحة التنزيل المساعدة: الرابط العام واسم الملف ووقت الانتهاء في الـ hash."""
    base = settings.public_base_url.rstrip("/")
    helper = "/" + settings.download_helper_path.lstrip("/")
    fragment = ",".join(
        [
            quote(public_url, safe=""),
            quote(file_name, safe=""),
            quote(str(_epoch_ms(expires_at)), safe=""),
        ]
    )
    return f"{base}{helper}#{fragment}"


class ShareService:
    """رفع نتيجة الضغط إلى التخزين، حفظها في السجل، وإنشاء رابط تنزيل مؤقت."""

    def __init__(self, storage: ObjectStorage, history: HistoryStore, settings: Settings) -> None:
        self.storage = storage
        self.history = history
        self.settings = settings

    def object_path(self, user_id: str, file_name: str, now: Optional[datetime] = None) -> str:
        now = now or datetime.utcnow()
        return f"user_files/{user_id}/compressed_{_epoch_ms(now)}_{file_name}"

    def generate_download_url(
        self,
        entry: RegisteredFile,
        *,
        original_size: int,
        compressed_size: int,
        user: User,
    ) -> SharedFile:
        bucket = self.settings.storage_bucket

        logger.info("Checking if storage bucket exists")
        try:
            self.storage.ensure_bucket_exists(bucket)
        except StorageError as exc:
            logger.error("Error ensuring bucket exists: %s", exc)
            raise

        path = self.object_path(user.id, entry.filename)
        stored = self.storage.upload(
            bucket,
            path,
            entry.path.read_bytes(),
            content_type=entry.mime_type,
            cache_control=self.settings.storage_cache_control,
        )
        public_url = self.storage.get_public_url(bucket, stored.path)

        history_item = self.history.save(
            user_id=user.id,
            file_name=entry.filename,
            original_size=original_size,
            compressed_size=compressed_size,
            date=datetime.utcnow().isoformat(timespec="microseconds") + "Z",
            file_type=entry.mime_type,
            cloud_file_path=stored.path,
        )
        if history_item is None:
            logger.warning("History was not saved for %s", entry.filename)

        expires_at = self.storage.schedule_expiration(bucket, stored.path, self.settings.link_expiration_minutes)

        return SharedFile(
            path=stored.path,
            public_url=public_url,
            download_url=build_download_url(self.settings, public_url, entry.filename, expires_at),
            expires_at=expires_at,
            history_item=history_item,
        )
