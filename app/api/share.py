from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_current_user, get_share_service
from app.core.logging import configure_logging
from app.models import ShareRequest
from app.services.share_service import ShareService
from app.storage.object_store import (
    BucketNotFoundError,
    ObjectExistsError,
    ObjectTooLargeError,
    StorageError,
    StoragePermissionError,
)
from app.storage.registry import get_document
from app.storage.users import User

router = APIRouter(prefix="/share", tags=["Share"])

logger = configure_logging()

_ERROR_STATUS = (
    (StoragePermissionError, status.HTTP_403_FORBIDDEN),
    (BucketNotFoundError, status.HTTP_404_NOT_FOUND),
    (ObjectExistsError, status.HTTP_409_CONFLICT),
    (ObjectTooLargeError, status.HTTP_413_REQUEST_ENTITY_TOO_LARGE),
)


def _storage_http_error(exc: StorageError) -> HTTPException:
    for error_type, code in _ERROR_STATUS:
        if isinstance(exc, error_type):
            return HTTPException(status_code=code, detail=f"خطأ في الوصول إلى التخزين: {exc}")
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"خطأ في الوصول إلى التخزين: {exc}")


@router.post("", summary="رفع نتيجة الضغط وإنشاء رابط تنزيل مؤقت")
async def share_result(
    payload: ShareRequest,
    user: User = Depends(get_current_user),
    service: ShareService = Depends(get_share_service),
) -> dict:
    entry = get_document(payload.file_id)
    if entry.achieved_size is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="يمكن مشاركة نتائج الضغط فقط.",
        )

    try:
        shared = service.generate_download_url(
            entry,
            original_size=entry.original_size or entry.size_bytes,
            compressed_size=entry.achieved_size,
            user=user,
        )
    except StorageError as exc:
        raise _storage_http_error(exc)

    logger.info("تمت مشاركة الملف %s للمستخدم %s", entry.filename, user.email)

    return {
        "status": "ok",
        "path": shared.path,
        "public_url": shared.public_url,
        "download_url": shared.download_url,
        "expires_at": shared.expires_at.isoformat() + "Z",
        "history_id": shared.history_item.id if shared.history_item else None,
    }
