from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import FileResponse

from app.api.deps import get_object_storage
from app.storage.object_store import (
    BucketNotFoundError,
    ObjectNotFoundError,
    ObjectStorage,
    StorageError,
    StoragePermissionError,
)

router = APIRouter(prefix="/storage", tags=["Storage"])


@router.get("/{bucket}/{path:path}", summary="تنزيل كائن عام من التخزين قبل انتهاء صلاحيته")
async def download_object(bucket: str, path: str, storage: ObjectStorage = Depends(get_object_storage)):
    try:
        target = storage.open_object(bucket, path)
    except (BucketNotFoundError, ObjectNotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="الملف غير موجود أو انتهت صلاحيته.")
    except StoragePermissionError:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="الحاوية غير عامة.")
    except StorageError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    return FileResponse(
        target,
        filename=target.name,
        headers={"Cache-Control": f"max-age={storage.settings.storage_cache_control}"},
    )
