from .common import Credentials, HistoryItemModel, ShareRequest
from .compress import (
    CompressionCommitRequest,
    CompressionItem,
    CompressionState,
    EditModel,
    LevelEditModel,
    PresetEditModel,
    ReconcileRequest,
    ResetEditModel,
    TargetEditModel,
)

__all__ = [
    "CompressionCommitRequest",
    "CompressionItem",
    "CompressionState",
    "Credentials",
    "EditModel",
    "HistoryItemModel",
    "LevelEditModel",
    "PresetEditModel",
    "ReconcileRequest",
    "ResetEditModel",
    "ShareRequest",
    "TargetEditModel",
]
