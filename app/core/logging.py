import logging
from logging import Logger
from typing import Optional

from .config import Settings, get_settings


def configure_logging(settings: Optional[Settings] = None, level: int = logging.INFO) -> Logger:
    """تهيئة مسجل موحد لخدمة الضغط وإرجاعه، مع تجنب تكرار المعالجات."""
    settings = settings or get_settings()

    logger = logging.getLogger(settings.app_name)
    if logger.handlers:
        return logger

    logger.setLevel(level)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(asctime)s | %(name)s | %(message)s"))

    logger.addHandler(handler)
    logger.propagate = False

    return logger


def get_logger(name: str) -> Logger:
    """مسجل فرعي تابع لمسجل التطبيق (مثل: File Compressor API.storage)."""
    return configure_logging().getChild(name)
