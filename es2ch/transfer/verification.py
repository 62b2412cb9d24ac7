# ==============================================
# SampleVerifier
# ==============================================
#
# PURPOSE:
#   Best-effort structural check after a migration whose counts
#   already match. Fetches a few records from the source, looks the
#   same ids up at the destination and compares them field by field.
#
# WHY THIS CLASS EXISTS:
#   Equal counts do not prove the fields survived the trip (a
#   timestamp re-encoded with the wrong zone still counts as one row).
#   The result is advisory: it is logged and returned, but it never
#   decides success.
#
# ALGORITHM:
# ----------
#   1. source.sample(n); empty → log, return a skipped report
#   2. target.lookup_by_ids(sample ids)
#   3. sort both by id
#   4. missing counterpart → missing_ids (warning)
#   5. compare normalized fields → FieldMismatch per differing field
#
# ==============================================

import logging
from typing import List

from ..formatting import format_sample_row, sample_table_header, sample_table_separator
from ..storage.record import Record
from ..storage.record_store import RecordStore
from .result import FieldMismatch, SampleReport

logger = logging.getLogger(__name__)


class SampleVerifier:
    def __init__(self, sample_size: int = 5):
        if sample_size < 1:
            raise ValueError(f"sample_size must be at least 1, got {sample_size}")
        self.sample_size = sample_size

    def verify(self, source: RecordStore, target: RecordStore) -> SampleReport:
        """
        Compare a sample of source records with their destination copies.

        Args:
            source: Store the sample is drawn from
            target: Store the sampled ids are looked up in

        Returns:
            SampleReport (skipped=True when the source sample is empty)
        """
        logger.info("Fetching %d sample documents for verification...", self.sample_size)

        source_sample = sorted(source.sample(self.sample_size), key=lambda r: r.id)
        if not source_sample:
            logger.warning("⚠ Could not retrieve a sample from %s. Skipping sample verification.", source.name)
            return SampleReport(requested=self.sample_size, skipped=True)

        target_sample = sorted(target.lookup_by_ids([r.id for r in source_sample]), key=lambda r: r.id)
        target_by_id = {record.id: record for record in target_sample}

        logger.info("--- Data Sample Comparison ---")
        logger.info("Source (%s) vs. Target (%s)", source.name, target.name)
        logger.info(sample_table_separator())
        logger.info(sample_table_header())
        logger.info(sample_table_separator())

        missing_ids: List[str] = []
        mismatches: List[FieldMismatch] = []
        matched = 0

        for position, source_record in enumerate(source_sample, start=1):
            target_record = target_by_id.get(source_record.id)
            if target_record is None:
                logger.warning("⚠ Mismatch: record with id %s not found in %s", source_record.id, target.name)
                missing_ids.append(source_record.id)
                continue

            logger.info(format_sample_row(source_record))
            logger.info(format_sample_row(target_record))
            logger.info(sample_table_separator())

            differences = self._compare(source_record, target_record)
            if differences:
                logger.warning("⚠ Mismatch found for row %d (id %s)", position, source_record.id)
                for mismatch in differences:
                    logger.warning(
                        "  %s: source=%r target=%r",
                        mismatch.field, mismatch.source_value, mismatch.target_value,
                    )
                logger.debug("Source: %s", source_record.to_document())
                logger.debug("Target: %s", target_record.to_document())
                mismatches.extend(differences)
            else:
                matched += 1

        logger.info("--- End of Comparison ---")

        report = SampleReport(
            requested=self.sample_size,
            checked=len(source_sample),
            matched=matched,
            missing_ids=tuple(missing_ids),
            mismatches=tuple(mismatches),
        )
        if report.is_clean:
            logger.info("✓ Sample verification passed (%d/%d records identical)", matched, len(source_sample))
        else:
            logger.warning(
                "⚠ Sample verification found differences",
                extra={"missing": len(missing_ids), "field_mismatches": len(mismatches)},
            )
        return report

    @staticmethod
    def _compare(source_record: Record, target_record: Record) -> List[FieldMismatch]:
        return [
            FieldMismatch(source_record.id, name, source_value, target_value)
            for name, (source_value, target_value) in source_record.diff(target_record).items()
        ]
