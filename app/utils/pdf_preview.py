import base64
from pathlib import Path
from typing import Optional

import fitz  # PyMuPDF


def render_first_page(pdf_path: Path, zoom: float = 0.5) -> Optional[str]:
    """
    صورة مصغرة للصفحة الأولى من ملف PDF كسلسلة base64 لعرضها في بطاقة الملف.

    تعيد None إذا تعذر فتح الملف أو كان بلا صفحات، فالمعاينة اختيارية.
    """
    try:
        with fitz.open(pdf_path) as document:
            if document.page_count < 1:
                return None
            page = document.load_page(0)
            pixmap = page.get_pixmap(matrix=fitz.Matrix(zoom, zoom), alpha=False)
            image_bytes = pixmap.tobytes("png")
    except (RuntimeError, ValueError):
        return None

    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:image/png;base64,{encoded}"
