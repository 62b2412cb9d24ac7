# ==============================================
# Pytest Configuration and Fixtures
# ==============================================
#
# Shared fixtures for all tests.
#
# FIXTURES:
# ---------
# - InMemoryRecordStore  → dict-backed RecordStore that records every
#                          call, so tests can assert on batch sizes and
#                          on whether the store was contacted at all
# - make_record()        → builds a valid Record with overridable fields
# - abc_records          → the three-user scenario (A/30, B/25, C/42)
# - source_store / target_store
#
# ==============================================

from datetime import datetime, timezone
from typing import Dict, Iterator, List, Optional, Sequence

import pytest

from es2ch.errors import StoreOperationError
from es2ch.storage.record import Record
from es2ch.storage.record_store import batched, check_batch_size, unique_ids


class InMemoryRecordStore:
    """RecordStore kept in a dict, ordered by id like the real adapters."""

    def __init__(self, name: str = "memory", records: Optional[Sequence[Record]] = None, created: bool = True):
        self.name = name
        self.created = created or bool(records)
        self.records: Dict[str, Record] = {r.id: r for r in records or []}
        self.calls: List[str] = []
        self.insert_sizes: List[int] = []
        self.fail_on_insert: Optional[int] = None
        self.closed = False

    def _touch(self, operation: str) -> None:
        self.calls.append(operation)

    def exists(self) -> bool:
        self._touch("exists")
        return self.created

    def create(self) -> None:
        self._touch("create")
        self.records.clear()
        self.created = True

    def clear(self) -> None:
        self._touch("clear")
        self.records.clear()

    def insert(self, records: Sequence[Record]) -> None:
        self._touch("insert")
        if not records:
            return
        if self.fail_on_insert is not None and len(self.insert_sizes) + 1 >= self.fail_on_insert:
            raise StoreOperationError(self.name, "insert", "simulated failure")
        self.insert_sizes.append(len(records))
        for record in records:
            self.records[record.id] = record

    def count(self) -> int:
        self._touch("count")
        return len(self.records)

    def stream_all(self, batch_size: int = 1000) -> Iterator[List[Record]]:
        check_batch_size(batch_size)
        self._touch("stream_all")
        ordered = [self.records[key] for key in sorted(self.records)]
        return batched(iter(ordered), batch_size)

    def sample(self, n: int) -> List[Record]:
        if n <= 0:
            return []
        self._touch("sample")
        return [self.records[key] for key in sorted(self.records)][:n]

    def lookup_by_ids(self, ids: Sequence[str]) -> List[Record]:
        wanted = unique_ids(ids)
        if not wanted:
            return []
        self._touch("lookup_by_ids")
        return sorted((self.records[i] for i in wanted if i in self.records), key=lambda r: r.id)

    def close(self) -> None:
        self._touch("close")
        self.closed = True


def make_record(record_id: str = "user-1", **overrides) -> Record:
    values = {
        "id": record_id,
        "first_name": "Ada",
        "last_name": "Lovelace",
        "age": 36,
        "followers_count": 1815,
        "timestamp": datetime(2024, 1, 15, 10, 30, 0, 123000, tzinfo=timezone.utc),
    }
    values.update(overrides)
    return Record(**values)


# ==============================================
# Fixtures
# ==============================================

@pytest.fixture
def abc_records() -> List[Record]:
    """Three users with ids A, B, C and ages 30, 25, 42."""
    timestamp = datetime(2024, 1, 1, 0, 0, 0, tzinfo=timezone.utc)
    return [
        Record("A", "Alice", "Anders", 30, 100, timestamp),
        Record("B", "Bob", "Brown", 25, 2000, timestamp),
        Record("C", "Carol", "Clark", 42, 0, timestamp),
    ]


@pytest.fixture
def many_records() -> List[Record]:
    return [make_record(f"user-{i:04d}", age=18 + i % 60, followers_count=i * 7) for i in range(257)]


@pytest.fixture
def source_store(abc_records) -> InMemoryRecordStore:
    return InMemoryRecordStore("source", abc_records)


@pytest.fixture
def target_store() -> InMemoryRecordStore:
    return InMemoryRecordStore("target", created=False)
