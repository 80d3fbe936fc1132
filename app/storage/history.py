from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional
from uuid import uuid4

from app.core.logging import get_logger

logger = get_logger("history")


def _parse_date(value: str) -> datetime:
    return datetime.fromisoformat(value[:-1] if value.endswith("Z") else value)


@dataclass
class CompressionHistoryItem:
    id: str
    user_id: str
    file_name: str
    original_size: int
    compressed_size: int
    date: str
    file_type: str
    cloud_file_path: Optional[str] = None

    def to_row(self) -> dict:
        return {
            "id": self.id,
            "userid": self.user_id,
            "filename": self.file_name,
            "originalsize": self.original_size,
            "compressedsize": self.compressed_size,
            "date": self.date,
            "filetype": self.file_type,
            "cloudfilepath": self.cloud_file_path,
        }

    @classmethod
    def from_row(cls, row: dict) -> "CompressionHistoryItem":
        return cls(
            id=row["id"],
            user_id=row["userid"],
            file_name=row["filename"],
            original_size=row["originalsize"],
            compressed_size=row["compressedsize"],
            date=row["date"],
            file_type=row["filetype"],
            cloud_file_path=row.get("cloudfilepath"),
        )


class HistoryStore:
    """سجل عمليات الضغط لكل مستخدم، محفوظ كصفوف بأسماء أعمدة مسطحة."""

    def __init__(self) -> None:
        self._rows: Dict[str, dict] = {}

    def save(
        self,
        *,
        user_id: str,
        file_name: str,
        original_size: int,
        compressed_size: int,
        date: str,
        file_type: str,
        cloud_file_path: Optional[str] = None,
    ) -> Optional[CompressionHistoryItem]:
        item = CompressionHistoryItem(
            id=uuid4().hex,
            user_id=user_id,
            file_name=file_name,
            original_size=original_size,
            compressed_size=compressed_size,
            date=date,
            file_type=file_type,
            cloud_file_path=cloud_file_path,
        )
        try:
            row = item.to_row()
            self._rows[item.id] = row
            saved = CompressionHistoryItem.from_row(row)
        except (KeyError, TypeError) as exc:
            logger.error("Failed to save compression history: %s", exc)
            return None

        logger.info("Compression history saved: %s", saved.id)
        return saved

    def list_for_user(self, user_id: str) -> List[CompressionHistoryItem]:
        rows = [row for row in self._rows.values() if row["userid"] == user_id]
        rows.sort(key=lambda row: _parse_date(row["date"]), reverse=True)
        return [CompressionHistoryItem.from_row(row) for row in rows]

    def get(self, item_id: str, user_id: str) -> Optional[CompressionHistoryItem]:
        row = self._rows.get(item_id)
        if not row or row["userid"] != user_id:
            return None
        return CompressionHistoryItem.from_row(row)

    def delete(self, item_id: str, user_id: str) -> bool:
        row = self._rows.get(item_id)
        if not row or row["userid"] != user_id:
            logger.error("Failed to delete compression history: %s not found", item_id)
            return False
        del self._rows[item_id]
        logger.info("Compression history item deleted: %s", item_id)
        return True
