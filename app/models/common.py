from typing import Optional

from pydantic import BaseModel, Field


class Credentials(BaseModel):
    email: str = Field(..., min_length=3, description="البريد الإلكتروني.")
    password: str = Field(..., min_length=6, max_length=72, description="كلمة المرور.")


class ShareRequest(BaseModel):
    file_id: str = Field(..., description="معرف نتيجة الضغط المراد مشاركتها.")


class HistoryItemModel(BaseModel):
    id: str
    file_name: str
    original_size: int
    compressed_size: int
    date: str
    file_type: str
    cloud_file_path: Optional[str] = None
