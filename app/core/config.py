from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """إعدادات التطبيق العامة مع تحميل القيم من ملف .env عند توفره."""

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[2] / ".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "File Compressor API"
    app_version: str = "0.1.0"

    base_dir: Path = Field(default_factory=lambda: Path(__file__).resolve().parents[2])
    storage_dir: Optional[Path] = None
    public_dir: Optional[Path] = None
    outputs_dir: Optional[Path] = None
    temp_dir: Optional[Path] = None
    objects_dir: Optional[Path] = None

    allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    # المصادقة
    secret_key: str = "change-me"
    access_token_expire_minutes: int = 60 * 24

    # التخزين السحابي
    storage_bucket: str = "compressed-files"
    storage_bucket_file_size_limit: int = 50 * 1024 * 1024
    storage_allow_bucket_creation: bool = True
    storage_cache_control: str = "300"
    link_expiration_minutes: int = 5
    expiration_sweep_seconds: float = 30.0

    public_base_url: str = "http://localhost:8000"
    download_helper_path: str = "/download-helper.html"

    # الضغط التجريبي
    mock_compression_delay: float = 1.5
    max_upload_size: int = 100 * 1024 * 1024

    def configure_paths(self) -> None:
        """تهيئة المسارات الافتراضية وإنشاء المجلدات في حال غيابها."""
        self.storage_dir = (self.storage_dir or (self.base_dir / "outputs")).resolve()
        self.public_dir = (self.public_dir or (self.base_dir / "public")).resolve()
        self.outputs_dir = (self.outputs_dir or (self.storage_dir / "processed")).resolve()
        self.temp_dir = (self.temp_dir or (self.storage_dir / "tmp")).resolve()
        self.objects_dir = (self.objects_dir or (self.storage_dir / "objects")).resolve()

        for directory in (self.storage_dir, self.outputs_dir, self.temp_dir, self.public_dir, self.objects_dir):
            directory.mkdir(parents=True, exist_ok=True)

        (self.public_dir / "downloads").mkdir(parents=True, exist_ok=True)


@lru_cache()
def get_settings() -> Settings:
    settings = Settings()
    settings.configure_paths()
    return settings
