from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from app.api.deps import get_app_settings, get_compression_service, get_local_storage
from app.core.config import Settings
from app.core.logging import configure_logging
from app.models import (
    CompressionCommitRequest,
    CompressionState,
    LevelEditModel,
    PresetEditModel,
    ReconcileRequest,
    TargetEditModel,
)
from app.services.compression_service import CompressionJob, CompressionResult, CompressionService
from app.services.reconciliation import (
    CompressionRequest,
    Edit,
    LevelEdit,
    PresetEdit,
    ResetEdit,
    TargetEdit,
    clamp_level,
    reconcile,
    to_bytes,
    validate_original_size,
)
from app.storage.local import LocalStorage
from app.storage.registry import RegisteredFile, get_document, register_document, unregister_document
from app.utils.file_utils import ensure_upload, format_bytes
from app.utils.pdf_preview import render_first_page

router = APIRouter(prefix="/compress", tags=["Compression"])

logger = configure_logging()


def _state(request: CompressionRequest) -> dict:
    return CompressionState(
        original_size=request.original_size,
        target_size=request.target_size,
        compression_level=request.compression_level,
        quality_label=request.quality.value,
    ).model_dump()


def _card(entry: RegisteredFile, is_temp: bool = True) -> dict:
    preview = render_first_page(entry.path) if entry.is_pdf else None
    card = entry.to_card(preview=preview)
    card["size_label"] = format_bytes(entry.size_bytes)
    card["is_temp"] = is_temp
    return card


def _to_edit(model) -> Edit:
    if isinstance(model, LevelEditModel):
        return LevelEdit(level=clamp_level(model.level))
    if isinstance(model, TargetEditModel):
        return TargetEdit(target_size=to_bytes(model.value, model.unit))
    if isinstance(model, PresetEditModel):
        return PresetEdit(name=model.preset)
    return ResetEdit()


@router.post("/upload", summary="رفع ملف أو أكثر للتحضير لعملية الضغط")
async def upload_files(
    files: List[UploadFile] = File(...),
    storage: LocalStorage = Depends(get_local_storage),
    settings: Settings = Depends(get_app_settings),
) -> dict:
    # التحقق من كل الملفات قبل حفظ أي منها
    for upload in files:
        ensure_upload(upload, settings.max_upload_size)

    cards: List[dict] = []
    for upload in files:
        temp_path = storage.save_upload(upload, temp=True)
        entry = register_document(temp_path, upload.filename)

        card = _card(entry)
        card["request"] = _state(reconcile(entry.size_bytes, ResetEdit()))
        cards.append(card)
        logger.info("تم رفع ملف للضغط: %s", upload.filename)

    return {"status": "ok", "files": cards}


@router.post("/reconcile", summary="مواءمة الحجم المستهدف ومستوى الضغط بعد أي تعديل")
async def reconcile_request(payload: ReconcileRequest) -> dict:
    if payload.file_id:
        original_size = get_document(payload.file_id).size_bytes
    elif payload.original_size is not None:
        original_size = payload.original_size
    else:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="يجب تحديد معرف الملف أو الحجم الأصلي.",
        )

    try:
        original_size = validate_original_size(original_size)
        edit = _to_edit(payload.edit)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    return {"status": "ok", "request": _state(reconcile(original_size, edit))}


@router.delete("/{file_id}", summary="إلغاء اختيار ملف مرفوع")
async def discard_upload(file_id: str, storage: LocalStorage = Depends(get_local_storage)) -> dict:
    entry = get_document(file_id)
    unregister_document(file_id)
    storage.cleanup([entry.path])
    return {"status": "ok"}


def _result_card(result: CompressionResult, output_name: str, storage: LocalStorage) -> dict:
    public_path = storage.register_public_download(result.path, output_name)
    storage.cleanup([result.path])
    original_size = result.job.entry.size_bytes
    entry = register_document(
        public_path,
        output_name,
        original_size=original_size,
        achieved_size=result.outcome.achieved_size,
    )

    card = _card(entry, is_temp=False)
    card["download_url"] = f"/downloads/{public_path.name}"
    return {
        "file_id": result.job.entry.file_id,
        "status": "ok",
        "result": card,
        "stats": {
            "original_size": original_size,
            "compressed_size": result.outcome.achieved_size,
            "reduction_bytes": max(0, original_size - result.outcome.achieved_size),
            "ratio": result.outcome.ratio,
        },
        "target_size": result.job.target_size,
        "compression_level": result.job.compression_level,
    }


@router.post("/commit", summary="ضغط الملفات المحددة وإرجاع بطاقات النتائج")
async def commit_compress(
    payload: CompressionCommitRequest,
    storage: LocalStorage = Depends(get_local_storage),
    service: CompressionService = Depends(get_compression_service),
) -> dict:
    results: List[dict] = [{} for _ in payload.items]
    jobs: List[CompressionJob] = []
    positions: List[int] = []

    for index, item in enumerate(payload.items):
        try:
            entry = get_document(item.file_id)
        except HTTPException as exc:
            results[index] = {"file_id": item.file_id, "status": "failed", "error": exc.detail}
            continue
        jobs.append(CompressionJob(entry, item.target_size, item.compression_level))
        positions.append(index)

    outcomes = await service.compress_batch(jobs)

    for index, job, outcome in zip(positions, jobs, outcomes):
        if isinstance(outcome, BaseException):
            results[index] = {"file_id": job.entry.file_id, "status": "failed", "error": str(outcome)}
            continue
        item = payload.items[index]
        output_name = item.output_filename or job.entry.filename
        try:
            results[index] = _result_card(outcome, output_name, storage)
        except (OSError, ValueError) as exc:
            storage.cleanup([outcome.path])
            logger.error("تعذر نشر نتيجة الضغط للملف %s: %s", job.entry.filename, exc)
            results[index] = {"file_id": job.entry.file_id, "status": "failed", "error": str(exc)}

    succeeded = sum(1 for result in results if result["status"] == "ok")
    logger.info("اكتملت عملية الضغط: %s من %s", succeeded, len(results))

    if succeeded == len(results):
        overall = "ok"
    elif succeeded:
        overall = "partial"
    else:
        overall = "failed"

    return {"status": overall, "results": results}
