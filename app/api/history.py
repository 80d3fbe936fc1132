from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_app_settings, get_current_user, get_history_store, get_object_storage
from app.core.config import Settings
from app.core.logging import configure_logging
from app.models import HistoryItemModel
from app.storage.history import CompressionHistoryItem, HistoryStore
from app.storage.object_store import ObjectNotFoundError, ObjectStorage, StorageError
from app.storage.users import User

router = APIRouter(prefix="/history", tags=["History"])

logger = configure_logging()


def _item(item: CompressionHistoryItem) -> dict:
    return HistoryItemModel(
        id=item.id,
        file_name=item.file_name,
        original_size=item.original_size,
        compressed_size=item.compressed_size,
        date=item.date,
        file_type=item.file_type,
        cloud_file_path=item.cloud_file_path,
    ).model_dump()


def _get_or_404(history: HistoryStore, item_id: str, user: User) -> CompressionHistoryItem:
    item = history.get(item_id, user.id)
    if not item:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="عنصر السجل غير موجود.",
        )
    return item


@router.get("", summary="سجل عمليات الضغط للمستخدم الحالي")
async def list_history(
    user: User = Depends(get_current_user),
    history: HistoryStore = Depends(get_history_store),
) -> dict:
    items: List[dict] = [_item(item) for item in history.list_for_user(user.id)]
    return {"history": items, "count": len(items)}


@router.get("/{item_id}/download", summary="الرابط العام لملف محفوظ في السجل")
async def history_download(
    item_id: str,
    user: User = Depends(get_current_user),
    history: HistoryStore = Depends(get_history_store),
    storage: ObjectStorage = Depends(get_object_storage),
    settings: Settings = Depends(get_app_settings),
) -> dict:
    item = _get_or_404(history, item_id, user)
    if not item.cloud_file_path:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="لا يوجد ملف محفوظ لهذا العنصر.")

    try:
        storage.open_object(settings.storage_bucket, item.cloud_file_path)
    except ObjectNotFoundError:
        raise HTTPException(status_code=status.HTTP_410_GONE, detail="انتهت صلاحية الملف وتم حذفه.")
    except StorageError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))

    return {"public_url": storage.get_public_url(settings.storage_bucket, item.cloud_file_path)}


@router.delete("/{item_id}", summary="حذف عنصر من السجل")
async def delete_history_item(
    item_id: str,
    user: User = Depends(get_current_user),
    history: HistoryStore = Depends(get_history_store),
) -> dict:
    if not history.delete(item_id, user.id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="عنصر السجل غير موجود.",
        )
    logger.info("تم حذف عنصر السجل %s", item_id)
    return {"status": "ok"}
