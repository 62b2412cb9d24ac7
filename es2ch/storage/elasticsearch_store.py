# ==============================================
# ElasticsearchRecordStore
# ==============================================
#
# PURPOSE:
#   Source-side record store. Implements the RecordStore contract on
#   top of an Elasticsearch index of user documents.
#
# WHY THIS CLASS EXISTS:
#   Elasticsearch is a document index with its own paging limits
#   (max_result_window = 10,000 hits per request) and near-real-time
#   visibility. This class hides both: stream_all() chains as many
#   point-in-time pages as the index needs, and writes wait for a
#   refresh so a following count() sees them.
#
# CLASS: ElasticsearchRecordStore
# -------------------------------
#   Stateful - holds an elasticsearch.Elasticsearch client.
#
#   Constructor:
#   ------------
#   - __init__(client, index, point_in_time_keep_alive="1m")
#
#   Methods:
#   --------
#   - exists() / create() / clear() / insert(records) / count()
#   - stream_all(batch_size) -> Iterator[list[Record]]
#       Opens a point in time, pages with search_after sorted by id,
#       regroups pages into batch_size batches, closes the PIT on exit.
#   - sample(n) / lookup_by_ids(ids)
#   - close()
#
#   Context Manager:
#   ----------------
#   - __enter__ / __exit__ for `with ElasticsearchRecordStore(...) as store:`
#
# ==============================================

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence

from elasticsearch import ApiError, Elasticsearch, TransportError, helpers

from ..errors import StoreConnectionError, StoreOperationError
from .record import Record
from .record_store import batched, check_batch_size, unique_ids

logger = logging.getLogger(__name__)

# Hits per search request; Elasticsearch's default index.max_result_window
MAX_PAGE_SIZE = 10000

ID_SORT = [{"id": "asc"}]

USER_MAPPING: Dict[str, Any] = {
    "properties": {
        "id": {"type": "keyword"},
        "first_name": {"type": "text", "fields": {"keyword": {"type": "keyword"}}},
        "last_name": {"type": "text", "fields": {"keyword": {"type": "keyword"}}},
        "age": {"type": "integer"},
        "followers_count": {"type": "integer"},
        "timestamp": {"type": "date"},
    }
}


class ElasticsearchRecordStore:
    def __init__(self, client: Elasticsearch, index: str, point_in_time_keep_alive: str = "1m"):
        self.client = client
        self.index = index
        self.keep_alive = point_in_time_keep_alive
        self.name = f"elasticsearch:{index}"

    @contextmanager
    def _translate_errors(self, operation: str):
        # Map client exceptions onto the store error taxonomy
        try:
            yield
        except helpers.BulkIndexError as e:
            first = e.errors[:5]
            logger.debug("%s: %d document(s) rejected", operation, len(e.errors),
                         extra={"store": self.name, "errors": first})
            raise StoreOperationError(
                self.name, operation, f"{len(e.errors)} document(s) rejected, first: {first}", e
            ) from e
        except ApiError as e:
            logger.debug("%s failed on %s: %s", operation, self.name, e)
            raise StoreOperationError(self.name, operation, str(e), e) from e
        except TransportError as e:
            logger.debug("Could not reach Elasticsearch during %s: %s", operation, e)
            raise StoreConnectionError(self.name, operation, str(e), e) from e

    def exists(self) -> bool:
        with self._translate_errors("exists"):
            return bool(self.client.indices.exists(index=self.index))

    def create(self) -> None:
        # Destructive: drop the index if it is there, then recreate it
        with self._translate_errors("create"):
            if self.client.indices.exists(index=self.index):
                logger.info("Index '%s' already exists, deleting...", self.index)
                self.client.indices.delete(index=self.index, ignore_unavailable=True)
            self.client.indices.create(index=self.index, mappings=USER_MAPPING)
        logger.info("✓ Created index '%s'", self.index)

    def clear(self) -> None:
        with self._translate_errors("clear"):
            if not self.client.indices.exists(index=self.index):
                return
            response = self.client.delete_by_query(
                index=self.index,
                query={"match_all": {}},
                refresh=True,
                conflicts="proceed",
            )
        logger.info("✓ Cleared index '%s' (%s documents deleted)", self.index, response.get("deleted", 0))

    def insert(self, records: Sequence[Record]) -> None:
        if not records:
            return
        actions = (
            {"_index": self.index, "_id": record.id, "_source": record.to_document()}
            for record in records
        )
        with self._translate_errors("insert"):
            succeeded, _ = helpers.bulk(self.client, actions, refresh="wait_for")
        if succeeded != len(records):
            raise StoreOperationError(
                self.name, "insert", f"only {succeeded} of {len(records)} documents were indexed"
            )
        logger.debug("Indexed %d documents into '%s'", succeeded, self.index)

    def count(self) -> int:
        with self._translate_errors("count"):
            return int(self.client.count(index=self.index)["count"])

    def stream_all(self, batch_size: int = 1000) -> Iterator[List[Record]]:
        check_batch_size(batch_size)
        page_size = min(batch_size, MAX_PAGE_SIZE)
        return batched(self._iter_records(page_size), batch_size)

    def _iter_records(self, page_size: int) -> Iterator[Record]:
        with self._translate_errors("stream_all"):
            pit_id = self.client.open_point_in_time(index=self.index, keep_alive=self.keep_alive)["id"]
        try:
            search_after: Optional[list] = None
            while True:
                with self._translate_errors("stream_all"):
                    response = self.client.search(
                        pit={"id": pit_id, "keep_alive": self.keep_alive},
                        query={"match_all": {}},
                        sort=ID_SORT,
                        size=page_size,
                        search_after=search_after,
                        track_total_hits=False,
                    )
                # Elasticsearch may hand back a refreshed PIT id with each page
                pit_id = response.get("pit_id", pit_id)
                hits = response["hits"]["hits"]
                for hit in hits:
                    yield Record.from_document(hit["_source"])
                if len(hits) < page_size:
                    return
                search_after = hits[-1]["sort"]
        finally:
            self._close_point_in_time(pit_id)

    def _close_point_in_time(self, pit_id: str) -> None:
        try:
            self.client.close_point_in_time(id=pit_id)
        except (ApiError, TransportError) as e:
            # The PIT expires on its own after keep_alive
            logger.warning("⚠ Could not close point in time on %s: %s", self.name, e)

    def sample(self, n: int) -> List[Record]:
        if n <= 0:
            return []
        with self._translate_errors("sample"):
            response = self.client.search(
                index=self.index,
                query={"match_all": {}},
                sort=ID_SORT,
                size=min(n, MAX_PAGE_SIZE),
            )
        return [Record.from_document(hit["_source"]) for hit in response["hits"]["hits"]]

    def lookup_by_ids(self, ids: Sequence[str]) -> List[Record]:
        wanted = unique_ids(ids)
        if not wanted:
            return []
        found: List[Record] = []
        for start in range(0, len(wanted), MAX_PAGE_SIZE):
            chunk = wanted[start:start + MAX_PAGE_SIZE]
            with self._translate_errors("lookup_by_ids"):
                response = self.client.search(
                    index=self.index,
                    query={"terms": {"id": chunk}},
                    sort=ID_SORT,
                    size=len(chunk),
                )
            found.extend(Record.from_document(hit["_source"]) for hit in response["hits"]["hits"])
        found.sort(key=lambda record: record.id)
        return found

    def close(self) -> None:
        self.client.close()
        logger.debug("Closed Elasticsearch client for %s", self.name)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
