# ==============================================
# SeedingService
# ==============================================
#
# PURPOSE:
#   Fills one RecordStore with generated records, batch by batch.
#   Same loop shape as TransferEngine.migrate, with a generator in
#   place of the source store.
#
# CLASS: SeedingService
# ---------------------
#   - seed(count, batch_size=1000, cleanup=True, on_progress=None) -> int
#       cleanup=True recreates the store first; a missing store is
#       always created; returns store.count()
#   - get_status() -> StoreStatus
#
# ==============================================

import logging
from typing import Optional

from ..storage.record_store import RecordStore, check_batch_size
from ..transfer.progress import ProgressCallback
from ..transfer.result import StoreStatus
from .generator import RecordGenerator

logger = logging.getLogger(__name__)


class SeedingService:
    def __init__(self, store: RecordStore, generator: Optional[RecordGenerator] = None):
        self.store = store
        self.generator = generator or RecordGenerator()

    def seed(
        self,
        count: int,
        batch_size: int = 1000,
        cleanup: bool = True,
        on_progress: Optional[ProgressCallback] = None,
    ) -> int:
        """
        Insert `count` generated records into the store.

        Args:
            count: Number of records to generate
            batch_size: Records per insert call
            cleanup: Drop and recreate the store before seeding. Without
                     it an existing store is appended to and a missing
                     one is created.
            on_progress: Called as on_progress(processed, count) per batch

        Returns:
            The store's record count after seeding
        """
        check_batch_size(batch_size)
        logger.info("Starting to seed %d users into %s...", count, self.store.name)

        try:
            if cleanup or not self.store.exists():
                self.store.create()

            processed = 0
            for batch in self.generator.generate_batches(count, batch_size):
                self.store.insert(batch)
                processed += len(batch)
                logger.debug("Seeded %d/%d users", processed, count)
                if on_progress is not None:
                    on_progress(processed, count)

            final_count = self.store.count()
        except Exception as e:
            logger.error("✗ Seeding failed: %s", e)
            raise

        logger.info("✓ Seeding completed. Total documents: %d", final_count)
        return final_count

    def get_status(self) -> StoreStatus:
        exists = self.store.exists()
        count = self.store.count() if exists else 0
        return StoreStatus(self.store.name, exists, count)
