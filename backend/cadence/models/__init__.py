from cadence.models.schemas import (
    FinishedSession,
    SessionCreate,
    SessionPatch,
    SessionRecord,
    SessionStats,
    apply_patch,
)

__all__ = [
    "FinishedSession",
    "SessionCreate",
    "SessionPatch",
    "SessionRecord",
    "SessionStats",
    "apply_patch",
]
