"""اعتماديات مشتركة للموجّهات: الإعدادات والخدمات من app.state والمستخدم الحالي."""
from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status
from jose import JWTError

from app.core.config import Settings
from app.core.security import decode_access_token
from app.services.compression_service import CompressionService
from app.services.share_service import ShareService
from app.storage.history import HistoryStore
from app.storage.local import LocalStorage
from app.storage.object_store import ObjectStorage
from app.storage.users import User, UserStore

SESSION_EXPIRED = "انتهت صلاحية جلستك. يرجى تسجيل الدخول مجددًا."


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_local_storage(request: Request) -> LocalStorage:
    return request.app.state.local_storage


def get_object_storage(request: Request) -> ObjectStorage:
    return request.app.state.object_storage


def get_history_store(request: Request) -> HistoryStore:
    return request.app.state.history


def get_user_store(request: Request) -> UserStore:
    return request.app.state.users


def get_compression_service(request: Request) -> CompressionService:
    return request.app.state.compression_service


def get_share_service(request: Request) -> ShareService:
    return request.app.state.share_service


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if authorization and authorization.strip().lower().startswith("bearer "):
        return authorization.strip()[7:].strip() or None
    return None


async def get_current_user(
    authorization: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_app_settings),
    users: UserStore = Depends(get_user_store),
) -> User:
    token = _bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=SESSION_EXPIRED)

    try:
        payload = decode_access_token(token, settings)
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=SESSION_EXPIRED)

    user = users.get(payload.get("sub") or "")
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=SESSION_EXPIRED)
    return user
