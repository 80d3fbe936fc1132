import shutil
from pathlib import Path
from typing import IO, Iterable, Optional
from uuid import uuid4

from fastapi import UploadFile

from app.core.config import Settings, get_settings


class LocalStorage:
    """التخزين المحلي للملفات المرفوعة ونتائج الضغط القابلة للتنزيل."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        settings = settings or get_settings()
        self.base_dir = Path(settings.storage_dir)
        self.processed_dir = Path(settings.outputs_dir)
        self.temp_dir = Path(settings.temp_dir)
        self.download_root = Path(settings.public_dir) / "downloads"

        for directory in (self.base_dir, self.processed_dir, self.temp_dir, self.download_root):
            directory.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _generate_filename(suffix: str) -> str:
        suffix = suffix if suffix.startswith(".") else f".{suffix.lstrip('.')}"
        return f"{uuid4().hex}{suffix}"

    def save_upload(self, upload: UploadFile, *, temp: bool = True) -> Path:
        suffix = Path(upload.filename or "").suffix or ".bin"
        upload.file.seek(0)
        path = self._save_stream(upload.file, suffix=suffix, directory=self.temp_dir if temp else self.base_dir)
        upload.file.seek(0)
        return path

    def _save_stream(self, stream: IO[bytes], *, suffix: str, directory: Path) -> Path:
        target_path = directory / self._generate_filename(suffix)
        with target_path.open("wb") as buffer:
            shutil.copyfileobj(stream, buffer)
        return target_path

    def copy_to_processed(self, source: Path) -> Path:
        """نسخ الملف إلى مجلد النتائج باسم فريد مع الحفاظ على امتداده."""
        target_path = self.processed_dir / self._generate_filename(source.suffix or ".bin")
        shutil.copyfile(source, target_path)
        return target_path

    def register_public_download(self, source: Path, original_name: str) -> Path:
        target = self.download_root / Path(original_name).name
        if target.exists():
            target = self.download_root / f"{target.stem}-{uuid4().hex[:6]}{target.suffix}"
        shutil.copy2(source, target)
        return target

    def cleanup(self, paths: Iterable[Path]) -> None:
        for path in paths:
            if path and path.exists():
                path.unlink(missing_ok=True)
