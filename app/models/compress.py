from pathlib import Path
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator


class LevelEditModel(BaseModel):
    kind: Literal["level"] = "level"
    level: float = Field(..., description="مستوى الضغط من شريط التمرير (0-100).")


class TargetEditModel(BaseModel):
    kind: Literal["target"] = "target"
    value: float = Field(..., description="الحجم المستهدف كما أُدخل في الحقل الرقمي.")
    unit: Literal["B", "KB", "MB"] = Field("B", description="وحدة الحجم المستهدف.")


class PresetEditModel(BaseModel):
    kind: Literal["preset"] = "preset"
    preset: str = Field(..., description="اسم الإعداد المسبق (email | web | max).")


class ResetEditModel(BaseModel):
    kind: Literal["reset"] = "reset"


EditModel = Annotated[
    Union[LevelEditModel, TargetEditModel, PresetEditModel, ResetEditModel],
    Field(discriminator="kind"),
]


class ReconcileRequest(BaseModel):
    file_id: Optional[str] = Field(default=None, description="معرف الملف المرفوع (يحدد الحجم الأصلي).")
    original_size: Optional[float] = Field(default=None, description="الحجم الأصلي بالبايت عند عدم توفر معرف.")
    edit: EditModel


class CompressionState(BaseModel):
    original_size: int
    target_size: int
    compression_level: int
    quality_label: str


class CompressionItem(BaseModel):
    file_id: str = Field(..., description="معرف الملف المراد ضغطه.")
    target_size: int = Field(..., description="الحجم المستهدف بالبايت.")
    compression_level: int = Field(..., ge=0, le=100, description="مستوى الضغط (0-100).")
    output_filename: str | None = Field(default=None, description="اسم الملف الناتج (اختياري).")

    @field_validator("output_filename")
    @classmethod
    def validate_output_filename(cls, value: str | None) -> str | None:
        if value is None:
            return value
        name = Path(value).name.strip()
        if "\x00" in value or not name or name in (".", ".."):
            raise ValueError("اسم الملف الناتج غير صالح.")
        return name


class CompressionCommitRequest(BaseModel):
    items: List[CompressionItem] = Field(..., min_length=1, description="الملفات المراد ضغطها.")
