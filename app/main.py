# app/main.py
from __future__ import annotations

import asyncio
import contextlib
import json
from pathlib import Path
from typing import Iterable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.api import routers
from app.core.config import Settings, get_settings
from app.core.logging import configure_logging
from app.services.compression_service import CompressionService
from app.services.share_service import ShareService
from app.storage.history import HistoryStore
from app.storage.local import LocalStorage
from app.storage.object_store import ObjectStorage
from app.storage.users import UserStore


# يدعم "a,b,c" أو JSON list مثل '["a","b"]'
def _as_list(val: Iterable | str | None, fallback: list[str]) -> list[str]:
    if val is None:
        return fallback
    if isinstance(val, (list, tuple, set)):
        return [str(x).strip() for x in val if str(x).strip()] or fallback
    s = str(val).strip()
    if not s:
        return fallback
    if s.startswith("["):
        try:
            parsed = json.loads(s)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            return [str(x).strip() for x in parsed if str(x).strip()]
    return [x.strip() for x in s.split(",") if x.strip()]


async def _expiration_sweeper(storage: ObjectStorage, interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        storage.purge_expired()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """بناء التطبيق؛ الخدمات تُنشأ هنا وتُمرر للموجّهات عبر app.state."""
    settings = settings or get_settings()
    settings.configure_paths()
    logger = configure_logging(settings)

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI):
        sweeper = asyncio.create_task(
            _expiration_sweeper(app.state.object_storage, settings.expiration_sweep_seconds)
        )
        try:
            yield
        finally:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper

    app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)

    # === الخدمات ===
    local_storage = LocalStorage(settings)
    object_storage = ObjectStorage(settings)
    history = HistoryStore()

    app.state.settings = settings
    app.state.local_storage = local_storage
    app.state.object_storage = object_storage
    app.state.history = history
    app.state.users = UserStore()
    app.state.compression_service = CompressionService(local_storage, settings)
    app.state.share_service = ShareService(object_storage, history, settings)

    # === CORS ===
    allow_origins = _as_list(settings.allow_origins, fallback=["*"])
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials="*" not in allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )

    # === Routers ===
    for router in routers:
        app.include_router(router)

    # === Static downloads ===
    downloads_dir: Path = Path(settings.public_dir) / "downloads"
    downloads_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/downloads", StaticFiles(directory=str(downloads_dir)), name="downloads")

    @app.get("/")
    async def root() -> dict:
        logger.debug("Root endpoint accessed")
        return {"message": f"Welcome to {settings.app_name}"}

    @app.get("/health")
    async def health_check() -> dict:
        logger.debug("Health check invoked")
        return {"status": "ok", "message": "File Compressor API is running"}

    return app


app = create_app()
