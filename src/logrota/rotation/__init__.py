from .executor import (
    RotationExecutor,
    RotationKind,
    RotationResult,
    RotationStatus,
    rotation_target,
)
from .policy import RotationPolicy, period_suffix, rotated_name
from .retention import RetentionSweeper

__all__ = [
    "RotationExecutor",
    "RotationKind",
    "RotationResult",
    "RotationStatus",
    "RotationPolicy",
    "RetentionSweeper",
    "period_suffix",
    "rotated_name",
    "rotation_target",
]
