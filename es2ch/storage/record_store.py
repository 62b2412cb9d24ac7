# ==============================================
# RecordStore - the shared store contract
# ==============================================
#
# PURPOSE:
#   One uniform contract over a collection-like store (an index or a
#   table). The transfer engine and the seeding service only ever talk
#   to this contract, so the source and the destination can have very
#   different pagination and write models underneath.
#
# WHY A PROTOCOL:
#   The two adapters share no implementation. Each one satisfies the
#   contract on its own (structural typing), and so does the in-memory
#   store used by the tests.
#
# OPERATIONS:
# -----------
#   - exists() -> bool            "not found" is False, never an error
#   - create() -> None            destructive: drop if present, then create
#   - clear() -> None             remove all records, keep the collection
#   - insert(records) -> None     bulk write, no-op when empty, raise on failure
#   - count() -> int              computed at call time
#   - stream_all(batch_size)      finite, single-pass, id-ordered batches
#   - sample(n) -> list[Record]   up to n records ordered by id
#   - lookup_by_ids(ids)          found subset ordered by id
#   - close() -> None             release the underlying connection
#
# ==============================================

from typing import Iterable, Iterator, List, Protocol, Sequence, runtime_checkable

from .record import Record


@runtime_checkable
class RecordStore(Protocol):
    name: str

    def exists(self) -> bool: ...

    def create(self) -> None: ...

    def clear(self) -> None: ...

    def insert(self, records: Sequence[Record]) -> None: ...

    def count(self) -> int: ...

    def stream_all(self, batch_size: int = 1000) -> Iterator[List[Record]]: ...

    def sample(self, n: int) -> List[Record]: ...

    def lookup_by_ids(self, ids: Sequence[str]) -> List[Record]: ...

    def close(self) -> None: ...


def check_batch_size(batch_size: int) -> int:
    """Reject batch sizes below one before any store is contacted."""
    if isinstance(batch_size, bool) or not isinstance(batch_size, int) or batch_size < 1:
        raise ValueError(f"batch_size must be a positive integer, got {batch_size!r}")
    return batch_size


def batched(records: Iterable[Record], batch_size: int) -> Iterator[List[Record]]:
    """
    Regroup a flat record iterator into lists of exactly batch_size
    records (the last one may be shorter). Holds at most one batch.

    Example:
        3 records, batch_size=2 → [r1, r2], [r3]
    """
    check_batch_size(batch_size)
    batch: List[Record] = []
    for record in records:
        batch.append(record)
        if len(batch) == batch_size:
            yield batch
            batch = []
    if batch:
        yield batch


def unique_ids(ids: Iterable[str]) -> List[str]:
    """Drop duplicate identifiers while keeping first-seen order."""
    seen = set()
    result = []
    for record_id in ids:
        if record_id not in seen:
            seen.add(record_id)
            result.append(record_id)
    return result
