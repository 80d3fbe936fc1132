from fastapi import HTTPException, UploadFile, status

SIZE_UNITS = ["Bytes", "KB", "MB", "GB", "TB", "PB", "EB", "ZB", "YB"]


def ensure_upload(upload: UploadFile, max_size: int) -> None:
    """التحقق من أن الملف المرفوع له اسم وغير فارغ وحجمه ضمن الحد المسموح."""
    if not upload.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="يجب اختيار ملف واحد على الأقل.",
        )
    size = upload.size
    if size is None:
        upload.file.seek(0, 2)
        size = upload.file.tell()
        upload.file.seek(0)
    if size > max_size:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"حجم الملف يتجاوز الحد المسموح ({format_bytes(max_size)}).",
        )
    if size == 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"الملف فارغ ولا يمكن ضغطه: {upload.filename}",
        )


def format_bytes(num_bytes: int, decimals: int = 2) -> str:
    """عرض الحجم بوحدة مقروءة، مثل 1.5 MB."""
    if num_bytes <= 0:
        return "0 Bytes"

    decimals = max(decimals, 0)
    index = 0
    while index < len(SIZE_UNITS) - 1 and num_bytes >= 1024 ** (index + 1):
        index += 1
    value = round(num_bytes / (1024 ** index), decimals)
    text = f"{value:.{decimals}f}".rstrip("0").rstrip(".") if decimals else str(int(value))
    return f"{text} {SIZE_UNITS[index]}"
