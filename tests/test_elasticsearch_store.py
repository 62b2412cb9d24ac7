# ==============================================
# Tests for ElasticsearchRecordStore
# ==============================================
#
# The Elasticsearch client is replaced by a Mock; these tests pin the
# requests the adapter sends and how it reads the responses.
# ==============================================

from unittest.mock import Mock, patch

import pytest
from elasticsearch import ConnectionError as ESConnectionError
from elasticsearch import helpers

from conftest import make_record
from es2ch.errors import StoreConnectionError, StoreOperationError
from es2ch.storage.elasticsearch_store import ID_SORT, USER_MAPPING, ElasticsearchRecordStore


def hit(record):
    return {"_id": record.id, "_source": record.to_document(), "sort": [record.id]}


def search_response(records, pit_id="pit-1"):
    return {"pit_id": pit_id, "hits": {"hits": [hit(r) for r in records]}}


@pytest.fixture
def client():
    client = Mock()
    client.indices.exists.return_value = True
    client.count.return_value = {"count": 3}
    client.open_point_in_time.return_value = {"id": "pit-0"}
    return client


@pytest.fixture
def store(client):
    return ElasticsearchRecordStore(client, "users")


# ==============================================
# Collection management
# ==============================================

class TestIndexManagement:
    def test_name_includes_index(self, store):
        assert store.name == "elasticsearch:users"

    def test_exists(self, store, client):
        client.indices.exists.return_value = False
        assert store.exists() is False
        client.indices.exists.assert_called_with(index="users")

    def test_create_drops_existing_index_first(self, store, client):
        store.create()
        client.indices.delete.assert_called_once_with(index="users", ignore_unavailable=True)
        client.indices.create.assert_called_once_with(index="users", mappings=USER_MAPPING)

    def test_create_on_missing_index(self, store, client):
        client.indices.exists.return_value = False
        store.create()
        client.indices.delete.assert_not_called()
        client.indices.create.assert_called_once()

    def test_clear_deletes_all_documents(self, store, client):
        client.delete_by_query.return_value = {"deleted": 3}
        store.clear()
        kwargs = client.delete_by_query.call_args.kwargs
        assert kwargs["query"] == {"match_all": {}}
        assert kwargs["refresh"] is True

    def test_clear_on_missing_index_is_a_no_op(self, store, client):
        client.indices.exists.return_value = False
        store.clear()
        client.delete_by_query.assert_not_called()

    def test_count(self, store):
        assert store.count() == 3

    def test_transport_failure_becomes_connection_error(self, store, client):
        client.count.side_effect = ESConnectionError("connection refused")
        with pytest.raises(StoreConnectionError) as exc_info:
            store.count()
        assert exc_info.value.store == "elasticsearch:users"
        assert exc_info.value.operation == "count"


# ==============================================
# Writes
# ==============================================

class TestInsert:
    def test_bulk_uses_record_id_as_document_id(self, store, abc_records):
        with patch.object(helpers, "bulk", return_value=(3, [])) as bulk:
            store.insert(abc_records)

        actions = list(bulk.call_args.args[1])
        assert [a["_id"] for a in actions] == ["A", "B", "C"]
        assert actions[0]["_source"] == abc_records[0].to_document()
        assert bulk.call_args.kwargs["refresh"] == "wait_for"

    def test_empty_insert_sends_nothing(self, store):
        with patch.object(helpers, "bulk") as bulk:
            store.insert([])
        bulk.assert_not_called()

    def test_rejected_documents_raise(self, store, abc_records):
        error = helpers.BulkIndexError("1 document(s) failed to index.", [{"index": {"_id": "B"}}])
        with patch.object(helpers, "bulk", side_effect=error):
            with pytest.raises(StoreOperationError):
                store.insert(abc_records)

    def test_partial_success_raises(self, store, abc_records):
        with patch.object(helpers, "bulk", return_value=(2, [])):
            with pytest.raises(StoreOperationError, match="only 2 of 3"):
                store.insert(abc_records)


# ==============================================
# Reads
# ==============================================

class TestStreamAll:
    def test_pages_with_search_after_and_closes_pit(self, store, client, abc_records):
        client.search.side_effect = [
            search_response(abc_records[:2], pit_id="pit-1"),
            search_response(abc_records[2:], pit_id="pit-2"),
        ]

        batches = list(store.stream_all(batch_size=2))

        assert [[r.id for r in b] for b in batches] == [["A", "B"], ["C"]]
        first, second = client.search.call_args_list
        assert first.kwargs["search_after"] is None
        assert first.kwargs["sort"] == ID_SORT
        assert first.kwargs["pit"]["id"] == "pit-0"
        assert second.kwargs["search_after"] == ["B"]
        assert second.kwargs["pit"]["id"] == "pit-1"
        client.close_point_in_time.assert_called_once_with(id="pit-2")

    def test_full_last_page_needs_one_more_request(self, store, client, abc_records):
        client.search.side_effect = [search_response(abc_records), search_response([])]

        batches = list(store.stream_all(batch_size=3))

        assert [len(b) for b in batches] == [3]
        assert client.search.call_count == 2

    def test_empty_index(self, store, client):
        client.search.return_value = search_response([])
        assert list(store.stream_all(batch_size=10)) == []
        client.close_point_in_time.assert_called_once()

    def test_nothing_is_requested_until_iteration(self, store, client):
        batches = store.stream_all(batch_size=10)
        client.open_point_in_time.assert_not_called()
        client.search.return_value = search_response([])
        list(batches)
        client.open_point_in_time.assert_called_once()

    def test_abandoned_stream_still_closes_pit(self, store, client, abc_records):
        client.search.return_value = search_response(abc_records[:1])
        batches = store.stream_all(batch_size=1)
        next(batches)
        batches.close()
        client.close_point_in_time.assert_called_once()

    def test_invalid_batch_size_is_rejected_immediately(self, store, client):
        with pytest.raises(ValueError):
            store.stream_all(batch_size=0)
        client.open_point_in_time.assert_not_called()


class TestSampleAndLookup:
    def test_sample_is_sorted_by_id(self, store, client, abc_records):
        client.search.return_value = search_response(abc_records[:2])
        records = store.sample(2)
        assert [r.id for r in records] == ["A", "B"]
        assert client.search.call_args.kwargs["sort"] == ID_SORT
        assert client.search.call_args.kwargs["size"] == 2

    def test_sample_of_zero(self, store, client):
        assert store.sample(0) == []
        client.search.assert_not_called()

    def test_lookup_uses_terms_query(self, store, client):
        client.search.return_value = search_response([make_record("C"), make_record("A")])

        records = store.lookup_by_ids(["C", "A", "A", "missing"])

        assert [r.id for r in records] == ["A", "C"]
        assert client.search.call_args.kwargs["query"] == {"terms": {"id": ["C", "A", "missing"]}}

    def test_lookup_of_no_ids_does_not_contact_elasticsearch(self, store, client):
        assert store.lookup_by_ids([]) == []
        client.search.assert_not_called()

    def test_close_closes_client(self, store, client):
        store.close()
        client.close.assert_called_once()
