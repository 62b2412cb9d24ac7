# ==============================================
# ClickHouseRecordStore
# ==============================================
#
# PURPOSE:
#   Destination-side record store. Implements the RecordStore contract
#   on top of a ClickHouse MergeTree table.
#
# WHY THIS CLASS EXISTS:
#   ClickHouse is built for large columnar inserts, not point writes.
#   Each batch becomes ONE native insert through clickhouse-connect,
#   and the table is ordered by id.
#   Enumeration uses keyset paging (WHERE id > last ORDER BY id LIMIT n),
#   never OFFSET. Values are bound as server-side query parameters
#   ({name:Type}), never spliced into SQL text.
#
# CLASS: ClickHouseRecordStore
# ----------------------------
#   Constructor:
#   ------------
#   - __init__(client: clickhouse_connect Client, database: str, table: str)
#
#   Methods:
#   --------
#   - exists() / create() / clear() / insert(records) / count()
#   - stream_all(batch_size) -> Iterator[list[Record]]
#   - sample(n) / lookup_by_ids(ids)
#       lookups are split into LOOKUP_CHUNK_SIZE ids per query
#   - close()
#
# FUNCTIONS:
# ----------
#   - connect_clickhouse(...) -> Client
#   - clickhouse_errors(store, operation)   (context manager)
#       OperationalError → StoreConnectionError
#       any other ClickHouseError → StoreOperationError
#
# ==============================================

import logging
import re
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence
from urllib.parse import urlparse

import clickhouse_connect
from clickhouse_connect.driver.client import Client
from clickhouse_connect.driver.exceptions import ClickHouseError, OperationalError

from ..errors import StoreConnectionError, StoreOperationError
from .record import FIELD_NAMES, Record
from .record_store import check_batch_size, unique_ids

logger = logging.getLogger(__name__)

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

COLUMNS = ", ".join(FIELD_NAMES)

# Ids per lookup query; bound parameters travel in the request URL
LOOKUP_CHUNK_SIZE = 1000


def validate_identifier(name: str) -> str:
    """Only plain identifiers may be spliced into SQL text."""
    if not isinstance(name, str) or not IDENTIFIER_PATTERN.match(name):
        raise ValueError(f"Invalid ClickHouse identifier: {name!r}")
    return name


@contextmanager
def clickhouse_errors(store: str, operation: str):
    # Map driver exceptions onto the store error taxonomy
    try:
        yield
    except OperationalError as e:
        raise StoreConnectionError(store, operation, str(e), e) from e
    except ClickHouseError as e:
        raise StoreOperationError(store, operation, str(e), e) from e


def connect_clickhouse(
    url: str,
    database: str,
    user: Optional[str] = None,
    password: Optional[str] = None,
    timeout: float = 30.0,
) -> Client:
    """
    Open a clickhouse-connect HTTP client for the given server URL.

    Raises:
        StoreConnectionError: If the server cannot be reached.
    """
    parsed = urlparse(url)
    secure = parsed.scheme == "https"
    with clickhouse_errors(f"clickhouse:{database}", "connect"):
        client = clickhouse_connect.get_client(
            host=parsed.hostname,
            port=parsed.port or (8443 if secure else 8123),
            username=user or "default",
            password=password or "",
            database=database,
            secure=secure,
            connect_timeout=timeout,
            send_receive_timeout=timeout,
        )
    logger.debug("Connected to ClickHouse at %s", url)
    return client


class ClickHouseRecordStore:
    def __init__(self, client: Client, database: str, table: str):
        self.client = client
        self.database = validate_identifier(database)
        self.table = validate_identifier(table)
        self.name = f"clickhouse:{self.full_table_name}"

    @property
    def full_table_name(self) -> str:
        return f"{self.database}.{self.table}"

    def _query(self, operation: str, query: str, parameters: Dict[str, Any]) -> List[Record]:
        with clickhouse_errors(self.name, operation):
            result = self.client.query(query, parameters=parameters)
            rows = list(result.named_results())
        return [Record.from_document(row) for row in rows]

    def exists(self) -> bool:
        with clickhouse_errors(self.name, "exists"):
            return int(self.client.command(f"EXISTS TABLE {self.full_table_name}")) == 1

    def create(self) -> None:
        # Destructive: drop the table if it is there, then recreate it
        if self.exists():
            logger.info("Table '%s' already exists, dropping...", self.full_table_name)
            with clickhouse_errors(self.name, "create"):
                self.client.command(f"DROP TABLE {self.full_table_name}")
        with clickhouse_errors(self.name, "create"):
            self.client.command(
                f"""
                CREATE TABLE {self.full_table_name}
                (
                    id String,
                    first_name String,
                    last_name String,
                    age UInt8,
                    followers_count UInt32,
                    timestamp DateTime64(3, 'UTC')
                )
                ENGINE = MergeTree()
                ORDER BY (id)
                """
            )
        logger.info("✓ Created table '%s'", self.full_table_name)

    def clear(self) -> None:
        if self.exists():
            with clickhouse_errors(self.name, "clear"):
                self.client.command(f"TRUNCATE TABLE {self.full_table_name}")
            logger.info("✓ Cleared table '%s'", self.full_table_name)

    def insert(self, records: Sequence[Record]) -> None:
        if not records:
            return
        with clickhouse_errors(self.name, "insert"):
            self.client.insert(
                self.table,
                [record.to_row() for record in records],
                column_names=list(FIELD_NAMES),
                database=self.database,
            )
        logger.debug("Inserted %d rows into '%s'", len(records), self.full_table_name)

    def count(self) -> int:
        with clickhouse_errors(self.name, "count"):
            return int(self.client.command(f"SELECT count() FROM {self.full_table_name}"))

    def stream_all(self, batch_size: int = 1000) -> Iterator[List[Record]]:
        check_batch_size(batch_size)
        return self._iter_pages(batch_size)

    def _iter_pages(self, batch_size: int) -> Iterator[List[Record]]:
        last_id: Optional[str] = None
        while True:
            if last_id is None:
                page = self._query(
                    "stream_all",
                    f"SELECT {COLUMNS} FROM {self.full_table_name} "
                    "ORDER BY id LIMIT {limit:UInt64}",
                    {"limit": batch_size},
                )
            else:
                page = self._query(
                    "stream_all",
                    f"SELECT {COLUMNS} FROM {self.full_table_name} "
                    "WHERE id > {after:String} ORDER BY id LIMIT {limit:UInt64}",
                    {"after": last_id, "limit": batch_size},
                )
            if not page:
                return
            yield page
            if len(page) < batch_size:
                return
            last_id = page[-1].id

    def sample(self, n: int) -> List[Record]:
        if n <= 0:
            return []
        return self._query(
            "sample",
            f"SELECT {COLUMNS} FROM {self.full_table_name} ORDER BY id LIMIT {{limit:UInt64}}",
            {"limit": n},
        )

    def lookup_by_ids(self, ids: Sequence[str]) -> List[Record]:
        wanted = unique_ids(ids)
        if not wanted:
            return []
        found: List[Record] = []
        for start in range(0, len(wanted), LOOKUP_CHUNK_SIZE):
            found.extend(self._query(
                "lookup_by_ids",
                f"SELECT {COLUMNS} FROM {self.full_table_name} "
                "WHERE id IN {ids:Array(String)} ORDER BY id",
                {"ids": wanted[start:start + LOOKUP_CHUNK_SIZE]},
            ))
        found.sort(key=lambda record: record.id)
        return found

    def close(self) -> None:
        self.client.close()
        logger.debug("Closed ClickHouse client for %s", self.name)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
