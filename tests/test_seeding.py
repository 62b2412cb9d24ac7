# ==============================================
# Tests for RecordGenerator and SeedingService
# ==============================================

import pytest

from conftest import InMemoryRecordStore
from es2ch.errors import StoreOperationError
from es2ch.seeding import RecordGenerator, SeedingService
from es2ch.storage.record import Record


class TestRecordGenerator:
    def test_generated_records_are_valid(self):
        generator = RecordGenerator(seed=1)
        for record in generator.generate_records(50):
            assert isinstance(record, Record)
            assert 18 <= record.age <= 80
            assert 0 <= record.followers_count <= 100000
            assert record.first_name and record.last_name

    def test_ids_are_unique(self):
        records = RecordGenerator().generate_records(200)
        assert len({r.id for r in records}) == 200

    def test_custom_ranges(self):
        generator = RecordGenerator(min_age=40, max_age=40, min_followers=7, max_followers=7)
        record = generator.generate_record()
        assert (record.age, record.followers_count) == (40, 7)

    def test_seed_makes_names_reproducible(self):
        first = RecordGenerator(seed=42).generate_records(5)
        second = RecordGenerator(seed=42).generate_records(5)
        assert [(r.first_name, r.age) for r in first] == [(r.first_name, r.age) for r in second]

    @pytest.mark.parametrize("kwargs", [
        {"min_age": 50, "max_age": 20},
        {"max_age": 300},
        {"min_followers": -1},
    ])
    def test_rejects_invalid_ranges(self, kwargs):
        with pytest.raises(ValueError):
            RecordGenerator(**kwargs)

    def test_batches_cover_total_with_remainder(self):
        batches = list(RecordGenerator().generate_batches(7, 3))
        assert [len(b) for b in batches] == [3, 3, 1]

    def test_zero_total_yields_nothing(self):
        assert list(RecordGenerator().generate_batches(0, 3)) == []


class TestSeedingService:
    def test_seed_then_count(self):
        store = InMemoryRecordStore("source", created=False)

        final_count = SeedingService(store, RecordGenerator(seed=3)).seed(25, batch_size=10)

        assert final_count == 25
        assert store.count() == 25
        assert store.insert_sizes == [10, 10, 5]

    def test_cleanup_recreates_store(self, abc_records):
        store = InMemoryRecordStore("source", abc_records)

        assert SeedingService(store).seed(4, batch_size=10) == 4
        assert "A" not in store.records

    def test_without_cleanup_records_are_added(self, abc_records):
        store = InMemoryRecordStore("source", abc_records)

        assert SeedingService(store).seed(4, batch_size=10, cleanup=False) == 7
        assert "create" not in store.calls

    def test_without_cleanup_missing_store_is_created(self):
        store = InMemoryRecordStore("source", created=False)

        assert SeedingService(store).seed(6, batch_size=4, cleanup=False) == 6
        assert store.calls[:2] == ["exists", "create"]
        assert store.created is True

    def test_seeding_zero_users_creates_an_empty_store(self):
        store = InMemoryRecordStore("source", created=False)

        assert SeedingService(store).seed(0) == 0
        assert store.created is True
        assert store.insert_sizes == []

    def test_progress_is_reported_per_batch(self):
        progress = []
        SeedingService(InMemoryRecordStore()).seed(5, batch_size=2, on_progress=lambda p, t: progress.append((p, t)))
        assert progress == [(2, 5), (4, 5), (5, 5)]

    def test_insert_failure_propagates(self):
        store = InMemoryRecordStore()
        store.fail_on_insert = 1
        with pytest.raises(StoreOperationError):
            SeedingService(store).seed(5, batch_size=2)

    def test_invalid_batch_size(self):
        store = InMemoryRecordStore()
        with pytest.raises(ValueError):
            SeedingService(store).seed(5, batch_size=0)
        assert store.calls == []

    def test_status(self):
        store = InMemoryRecordStore("source", created=False)
        service = SeedingService(store)

        assert service.get_status().exists is False
        service.seed(3, batch_size=2)
        status = service.get_status()
        assert (status.exists, status.count) == (True, 3)
