# ==============================================
# Transfer Results (Data Classes)
# ==============================================
#
# PURPOSE:
#   Immutable outputs of the transfer engine. Created once, handed
#   to the caller, never mutated.
#
# CLASSES:
# --------
# - FieldMismatch   → one differing field in one sampled record
# - SampleReport    → outcome of the post-transfer sample comparison
# - TransferResult  → outcome of one migrate() run
# - StoreStatus     → existence + count of one store
# - TransferStatus  → StoreStatus for source and target
#
# ==============================================

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class FieldMismatch:
    record_id: str
    field: str
    source_value: Any
    target_value: Any


@dataclass(frozen=True)
class SampleReport:
    """
    Advisory comparison of a few records fetched from both stores.

    A dirty report never changes TransferResult.success; it exists to
    surface encoding problems that matching counts cannot reveal.
    """

    requested: int
    checked: int = 0
    matched: int = 0
    missing_ids: Tuple[str, ...] = ()
    mismatches: Tuple[FieldMismatch, ...] = ()
    skipped: bool = False

    @property
    def is_clean(self) -> bool:
        return not self.missing_ids and not self.mismatches

    def to_dict(self) -> Dict[str, Any]:
        return {
            "requested": self.requested,
            "checked": self.checked,
            "matched": self.matched,
            "missing_ids": list(self.missing_ids),
            "mismatches": [
                {
                    "record_id": m.record_id,
                    "field": m.field,
                    "source_value": str(m.source_value),
                    "target_value": str(m.target_value),
                }
                for m in self.mismatches
            ],
            "skipped": self.skipped,
        }


@dataclass(frozen=True)
class TransferResult:
    """
    Summary of one migration run.

    success is exactly source_count == target_count, where both counts
    are read from the stores (not from the running processed count).
    """

    source_count: int
    target_count: int
    success: bool
    duration_seconds: float
    records_processed: int = 0
    batches: int = 0
    verification: Optional[SampleReport] = field(default=None, compare=False)

    @property
    def duration_ms(self) -> int:
        return int(round(self.duration_seconds * 1000))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_count": self.source_count,
            "target_count": self.target_count,
            "success": self.success,
            "duration_ms": self.duration_ms,
            "records_processed": self.records_processed,
            "batches": self.batches,
            "verification": self.verification.to_dict() if self.verification else None,
        }


@dataclass(frozen=True)
class StoreStatus:
    name: str
    exists: bool
    count: int = 0


@dataclass(frozen=True)
class TransferStatus:
    source: StoreStatus
    target: StoreStatus

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_exists": self.source.exists,
            "source_count": self.source.count,
            "target_exists": self.target.exists,
            "target_count": self.target.count,
        }
