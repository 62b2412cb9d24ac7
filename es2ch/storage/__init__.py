# ==============================================
# STORAGE (Elasticsearch + ClickHouse)
# ==============================================
#
# This package holds the record model and the two record stores
# the transfer engine moves data between.
#
# Modules:
# --------
# - record.py               → Record dataclass + timestamp normalization
# - record_store.py         → RecordStore contract + batching helpers
# - elasticsearch_store.py  → Source store (Elasticsearch index)
# - clickhouse_store.py     → Destination store (ClickHouse table)
# - factory.py              → Builds stores from configuration
#
# ==============================================

from .record import Record, normalize_timestamp, validate_record_id
from .record_store import RecordStore, batched
from .elasticsearch_store import ElasticsearchRecordStore
from .clickhouse_store import ClickHouseRecordStore, connect_clickhouse

__all__ = [
    "Record",
    "normalize_timestamp",
    "validate_record_id",
    "RecordStore",
    "batched",
    "ElasticsearchRecordStore",
    "ClickHouseRecordStore",
    "connect_clickhouse",
]
