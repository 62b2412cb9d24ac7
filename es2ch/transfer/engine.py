# ==============================================
# TransferEngine - Copy-and-Verify Orchestrator
# ==============================================
#
# PURPOSE:
#   Moves every record from a source RecordStore to a target
#   RecordStore in fixed-size batches, then proves the result.
#
# HOW A RUN FLOWS:
#
#   ┌────────────────────────────────────────────────────────┐
#   │ 1. target.create() + target.clear()   (known-empty)    │
#   │ 2. expected = source.count()          (advisory)       │
#   │ 3. for batch in source.stream_all(batch_size):         │
#   │        target.insert(batch)           (fatal on error) │
#   │        processed += len(batch)                         │
#   │        on_progress(processed, expected)                │
#   │ 4. actual = target.count()                             │
#   │ 5. success = expected == actual                        │
#   │ 6. success → SampleVerifier (advisory, never raises)   │
#   │ 7. return TransferResult                               │
#   └────────────────────────────────────────────────────────┘
#
#   One batch is in flight at a time: the next batch is only pulled
#   after the previous insert returned, so memory stays O(batch_size).
#
# CLASS: TransferEngine
# ---------------------
#   Constructor:
#   ------------
#   - __init__(source, target, verifier=None)
#
#   Public Methods:
#   ---------------
#   - migrate(batch_size=1000, on_progress=None) -> TransferResult
#   - get_status() -> TransferStatus
#       Existence of both stores checked concurrently; counts only
#       for stores that exist. Never raises for a missing store.
#
# ==============================================

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from ..formatting import format_duration
from ..storage.record_store import RecordStore, check_batch_size
from .progress import ProgressCallback
from .result import StoreStatus, TransferResult, TransferStatus
from .verification import SampleVerifier

logger = logging.getLogger(__name__)


class TransferEngine:
    """Drives one source store into one target store through the RecordStore contract."""

    def __init__(
        self,
        source: RecordStore,
        target: RecordStore,
        verifier: Optional[SampleVerifier] = None,
    ):
        self.source = source
        self.target = target
        self.verifier = verifier or SampleVerifier()

    def migrate(self, batch_size: int = 1000, on_progress: Optional[ProgressCallback] = None) -> TransferResult:
        """
        Copy the whole source into a freshly reset target and verify it.

        Args:
            batch_size: Records per batch (>= 1)
            on_progress: Called as on_progress(processed, expected_total)
                         after every inserted batch

        Returns:
            TransferResult. A count mismatch is reported as success=False,
            not raised.

        Raises:
            ValueError: If batch_size < 1 (before any store is touched)
            StoreError: Any store failure while copying aborts the run
                        unchanged. Failures during sample verification
                        are logged and leave verification=None.
        """
        check_batch_size(batch_size)
        started = time.perf_counter()

        logger.info("🚀 Starting migration from %s to %s...", self.source.name, self.target.name)

        try:
            # Prepare target store
            self.target.create()
            self.target.clear()

            source_count = self.source.count()
            logger.info("Found %d documents to migrate", source_count, extra={"batch_size": batch_size})

            processed = 0
            batches = 0
            for batch in self.source.stream_all(batch_size):
                self.target.insert(batch)
                processed += len(batch)
                batches += 1
                logger.debug("Migrated %d/%d documents", processed, source_count, extra={"batch": batches})
                if on_progress is not None:
                    on_progress(processed, source_count)

            target_count = self.target.count()
        except Exception as e:
            logger.error("✗ Migration failed: %s", e)
            raise

        success = source_count == target_count
        if processed != source_count:
            logger.warning(
                "⚠ Streamed %d records but the source reported %d; was it modified during the run?",
                processed, source_count,
            )

        logger.info("-" * 40)
        logger.info("✓ Migration completed!")
        logger.info("Source count: %d", source_count)
        logger.info("Target count: %d", target_count)

        verification = None
        if success:
            logger.info("✓ Verification successful: Counts match")
            try:
                verification = self.verifier.verify(self.source, self.target)
            except Exception as e:
                # Counts already matched; the run stands without a sample report
                logger.error("✗ Sample verification failed: %s", e, exc_info=True)
        else:
            logger.error(
                "✗ Verification failed: Counts do not match",
                extra={"source_count": source_count, "target_count": target_count},
            )

        duration = time.perf_counter() - started
        logger.info("Duration: %s", format_duration(duration))
        logger.info("-" * 40)

        return TransferResult(
            source_count=source_count,
            target_count=target_count,
            success=success,
            duration_seconds=duration,
            records_processed=processed,
            batches=batches,
            verification=verification,
        )

    def get_status(self) -> TransferStatus:
        """
        Report existence and size of both stores without moving data.

        Returns:
            TransferStatus with count=0 for any store that does not exist.
        """
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="status") as executor:
            source_exists_future = executor.submit(self.source.exists)
            target_exists_future = executor.submit(self.target.exists)
            source_exists = source_exists_future.result()
            target_exists = target_exists_future.result()

            source_count_future = executor.submit(self.source.count) if source_exists else None
            target_count_future = executor.submit(self.target.count) if target_exists else None
            source_count = source_count_future.result() if source_count_future else 0
            target_count = target_count_future.result() if target_count_future else 0

        return TransferStatus(
            source=StoreStatus(self.source.name, source_exists, source_count),
            target=StoreStatus(self.target.name, target_exists, target_count),
        )
