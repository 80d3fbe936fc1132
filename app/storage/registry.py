from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, Optional
from uuid import uuid4

from fastapi import HTTPException, status
from pypdf import PdfReader
from pypdf.errors import PdfReadError


@dataclass
class RegisteredFile:
    file_id: str
    path: Path
    filename: str
    size_bytes: int
    created_at: datetime
    mime_type: str
    extension: str
    page_count: Optional[int] = None
    is_pdf: bool = False
    # للنتائج فقط: حجم الملف الأصلي والحجم المحقق بعد الضغط
    original_size: Optional[int] = None
    achieved_size: Optional[int] = None

    def to_card(self, preview: Optional[str] = None) -> dict:
        card: dict = {
            "file_id": self.file_id,
            "filename": self.filename,
            "size_bytes": self.size_bytes,
            "extension": self.extension,
            "mime_type": self.mime_type,
        }
        if self.page_count is not None:
            card["page_count"] = self.page_count
        if preview:
            card["preview"] = preview
        return card


_registry: Dict[str, RegisteredFile] = {}
_ttl = timedelta(hours=2)


def _count_pages(path: Path) -> Optional[int]:
    try:
        return len(PdfReader(str(path)).pages)
    except (PdfReadError, OSError, ValueError):
        return None


def register_document(
    path: Path,
    filename: str | None = None,
    *,
    original_size: Optional[int] = None,
    achieved_size: Optional[int] = None,
) -> RegisteredFile:
    """تسجيل ملف مؤقتًا وإرجاع بياناته، مع عدد الصفحات إن كان PDF."""
    cleanup()
    filename = filename or path.name
    extension = Path(filename).suffix.lower().lstrip(".")
    mime_type, _ = mimetypes.guess_type(filename)
    mime_type = mime_type or "application/octet-stream"
    is_pdf = extension == "pdf"

    page_count = _count_pages(path) if is_pdf else None
    size_bytes = path.stat().st_size if path.exists() else 0

    entry = RegisteredFile(
        file_id=uuid4().hex,
        path=path,
        filename=filename,
        size_bytes=size_bytes,
        created_at=datetime.utcnow(),
        mime_type=mime_type,
        extension=extension,
        page_count=page_count,
        is_pdf=is_pdf,
        original_size=original_size,
        achieved_size=achieved_size,
    )
    _registry[entry.file_id] = entry
    return entry


def get_document(file_id: str) -> RegisteredFile:
    cleanup()
    entry = _registry.get(file_id)
    if not entry:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="المعرف المطلوب غير موجود أو انتهت صلاحيته.",
        )
    if not entry.path.exists():
        _registry.pop(file_id, None)
        raise HTTPException(
            status_code=status.HTTP_410_GONE,
            detail="الملف لم يعد متاحًا على الخادم.",
        )
    return entry


def unregister_document(file_id: str) -> None:
    _registry.pop(file_id, None)


def cleanup() -> None:
    """حذف السجلات المنتهية الصلاحية وفق مدة الاحتفاظ المحددة."""
    now = datetime.utcnow()
    expired = [file_id for file_id, entry in _registry.items() if now - entry.created_at > _ttl]
    for file_id in expired:
        _registry.pop(file_id, None)
