"""
نموذج التوفيق بين مستوى الضغط (0-100) والحجم المستهدف بالبايت.

كل الدوال هنا نقية وحتمية وتعتمد على الحساب الصحيح فقط، لذلك تُطبق
القسمة الصحيحة (//) بدل الكسور العشرية لتفادي انحراف التقريب.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Literal, Union

MIB = 1024 * 1024

UNIT_MULTIPLIERS = {"B": 1, "KB": 1024, "MB": MIB}


class QualityLabel(str, Enum):
    high = "High Quality"
    medium = "Medium Quality"
    low = "Low Quality"


def level_to_target(original_size: int, level: int) -> int:
    return original_size * (100 - level) // 100


def target_to_level(original_size: int, target_size: int) -> int:
    level = 100 - (target_size * 100) // original_size
    return min(max(level, 0), 100)


def apply_preset(name: str, original_size: int) -> int:
    if name == "email":
        return min(5 * MIB, original_size * 7 // 10)
    if name == "web":
        return min(1 * MIB, original_size // 2)
    if name == "max":
        return original_size * 3 // 10
    return original_size * 7 // 10


def quality_label(level: int) -> QualityLabel:
    if level < 30:
        return QualityLabel.high
    if level < 70:
        return QualityLabel.medium
    return QualityLabel.low


def reset_on_new_original(original_size: int) -> int:
    return original_size * 7 // 10


# ----------------------------------------------------------------------
# المُحلّل الموحد: التعديل الأخير يحدد الحقل المرجعي
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class LevelEdit:
    level: int
    kind: Literal["level"] = "level"


@dataclass(frozen=True)
class TargetEdit:
    target_size: int
    kind: Literal["target"] = "target"


@dataclass(frozen=True)
class PresetEdit:
    name: str
    kind: Literal["preset"] = "preset"


@dataclass(frozen=True)
class ResetEdit:
    kind: Literal["reset"] = "reset"


Edit = Union[LevelEdit, TargetEdit, PresetEdit, ResetEdit]


@dataclass(frozen=True)
class CompressionRequest:
    original_size: int
    target_size: int
    compression_level: int

    @property
    def quality(self) -> QualityLabel:
        return quality_label(self.compression_level)


def reconcile(original_size: int, edit: Edit) -> CompressionRequest:
    """
    حل التعديل إلى طلب ضغط متسق.

    يُعاد حساب الحقل الآخر دائمًا من الحقل المُعدَّل والحجم الأصلي فقط،
    ولا يُبنى أبدًا على زوج (الهدف، المستوى) السابق.
    """
    if isinstance(edit, LevelEdit):
        return CompressionRequest(original_size, level_to_target(original_size, edit.level), edit.level)

    if isinstance(edit, TargetEdit):
        target = edit.target_size
    elif isinstance(edit, PresetEdit):
        target = apply_preset(edit.name, original_size)
    elif isinstance(edit, ResetEdit):
        target = reset_on_new_original(original_size)
    else:
        raise TypeError(f"unsupported edit: {edit!r}")

    return CompressionRequest(original_size, target, target_to_level(original_size, target))


# ----------------------------------------------------------------------
# التحقق عند الحدود (تستدعيها طبقة الـ API قبل النموذج)
# ----------------------------------------------------------------------
def validate_original_size(original_size: Union[int, float]) -> int:
    if isinstance(original_size, float) and not math.isfinite(original_size):
        raise ValueError("original size must be a finite number")
    if original_size <= 0:
        raise ValueError("original size must be greater than zero")
    return int(original_size)


def clamp_level(level: Union[int, float]) -> int:
    if isinstance(level, float):
        if not math.isfinite(level):
            raise ValueError("compression level must be a finite number")
        level = math.floor(level)
    return min(max(int(level), 0), 100)


def to_bytes(value: Union[int, float], unit: str = "B") -> int:
    """تحويل قيمة الحقل الرقمي مع وحدة (B | KB | MB) إلى بايت."""
    try:
        multiplier = UNIT_MULTIPLIERS[unit.upper()]
    except KeyError:
        raise ValueError(f"unsupported unit: {unit}") from None
    size = value * multiplier
    # الضرب قد يتجاوز نطاق float حتى لقيمة منتهية
    if isinstance(size, float) and not math.isfinite(size):
        raise ValueError("target size must be a finite number")
    return int(size)


@dataclass(frozen=True)
class CompressionOutcome:
    achieved_size: int
    ratio: int


def compression_outcome(original_size: int, achieved_size: int) -> CompressionOutcome:
    # round() نصف للأعلى، الحجم الأصلي لا يقل عن بايت واحد
    original = max(original_size, 1)
    achieved = max(achieved_size, 0)
    ratio = ((original - achieved) * 200 + original) // (2 * original)
    return CompressionOutcome(achieved_size=achieved, ratio=ratio)
