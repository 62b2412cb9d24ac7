# ==============================================
# TRANSFER (copy + verify)
# ==============================================
#
# Modules:
# --------
# - engine.py        → TransferEngine: migrate() and get_status()
# - verification.py  → SampleVerifier: advisory field-by-field check
# - progress.py      → Progress callback type + logging reporter
# - result.py        → Immutable result/status data classes
#
# ==============================================

from .engine import TransferEngine
from .progress import LoggingProgressReporter, ProgressCallback, progress_percentage
from .result import FieldMismatch, SampleReport, StoreStatus, TransferResult, TransferStatus
from .verification import SampleVerifier

__all__ = [
    "TransferEngine",
    "SampleVerifier",
    "LoggingProgressReporter",
    "ProgressCallback",
    "progress_percentage",
    "FieldMismatch",
    "SampleReport",
    "StoreStatus",
    "TransferResult",
    "TransferStatus",
]
