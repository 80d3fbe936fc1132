from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

from app.core.config import Settings, get_settings
from app.core.logging import get_logger
from app.services.reconciliation import CompressionOutcome, compression_outcome
from app.storage.local import LocalStorage
from app.storage.registry import RegisteredFile

logger = get_logger("compression")

IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp"}
DOCUMENT_EXTENSIONS = {"pdf", "doc", "docx", "ppt", "pptx"}


def simulate_size(size: int, extension: str, target_size: int, level: int) -> int:
    """
    حساب حجم ناتج واقعي حسب نوع الملف ومستوى الضغط.

    الصور تنضغط أكثر من المستندات، وبقية الأنواع أقل، ولا يقل الناتج عن
    1% من الحجم الأصلي.
    """
    extension = extension.lower().lstrip(".")
    if extension in IMAGE_EXTENSIONS:
        factor = 8
    elif extension in DOCUMENT_EXTENSIONS:
        factor = 6
    else:
        factor = 4

    calculated = max(target_size, size * (1000 - level * factor) // 1000)
    return max(calculated, size // 100)


@dataclass
class CompressionJob:
    entry: RegisteredFile
    target_size: int
    compression_level: int


@dataclass
class CompressionResult:
    job: CompressionJob
    path: Path
    outcome: CompressionOutcome


class CompressionService:
    """ضغط تجريبي: يعيد الملف الأصلي كما هو مع حجم محسوب."""

    def __init__(self, storage: LocalStorage, settings: Optional[Settings] = None) -> None:
        self.storage = storage
        self.settings = settings or get_settings()

    async def compress(self, job: CompressionJob) -> CompressionResult:
        entry = job.entry
        achieved = simulate_size(entry.size_bytes, entry.extension, job.target_size, job.compression_level)

        await asyncio.sleep(self.settings.mock_compression_delay)

        path = self.storage.copy_to_processed(entry.path)
        logger.info(
            "Compressed %s: %s -> %s bytes (level %s)",
            entry.filename,
            entry.size_bytes,
            achieved,
            job.compression_level,
        )
        return CompressionResult(job=job, path=path, outcome=compression_outcome(entry.size_bytes, achieved))

    async def compress_batch(self, jobs: Sequence[CompressionJob]) -> List[Union[CompressionResult, BaseException]]:
        """تشغيل كل المهام بالتوازي؛ فشل مهمة لا يؤثر على البقية."""
        results = await asyncio.gather(*(self.compress(job) for job in jobs), return_exceptions=True)
        for job, result in zip(jobs, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, BaseException):
                logger.error("Compression failed for %s: %s", job.entry.filename, result)
        return list(results)
