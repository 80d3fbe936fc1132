from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_app_settings, get_current_user, get_user_store
from app.core.config import Settings
from app.core.logging import configure_logging
from app.core.security import create_access_token
from app.models import Credentials
from app.storage.users import User, UserStore

router = APIRouter(prefix="/auth", tags=["Auth"])

logger = configure_logging()


def _session(user: User, settings: Settings) -> dict:
    return {
        "access_token": create_access_token(user.id, settings),
        "token_type": "bearer",
        "user": user.to_public(),
    }


@router.post("/signup", summary="إنشاء حساب جديد وإرجاع رمز الدخول")
async def signup(
    payload: Credentials,
    users: UserStore = Depends(get_user_store),
    settings: Settings = Depends(get_app_settings),
) -> dict:
    try:
        user = users.create(payload.email, payload.password)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="البريد الإلكتروني مسجل مسبقًا.",
        )
    logger.info("New account created: %s", user.email)
    return _session(user, settings)


@router.post("/login", summary="تسجيل الدخول بالبريد وكلمة المرور")
async def login(
    payload: Credentials,
    users: UserStore = Depends(get_user_store),
    settings: Settings = Depends(get_app_settings),
) -> dict:
    user = users.authenticate(payload.email, payload.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="البريد الإلكتروني أو كلمة المرور غير صحيحة.",
        )
    logger.info("User authenticated: %s", user.email)
    return _session(user, settings)


@router.get("/session", summary="بيانات المستخدم الحالي")
async def current_session(user: User = Depends(get_current_user)) -> dict:
    return {"user": user.to_public()}
