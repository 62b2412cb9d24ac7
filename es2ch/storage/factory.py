"""Builds the two record stores from configuration."""

from elasticsearch import Elasticsearch

from ..config import ClickHouseConfig, ElasticsearchConfig
from .clickhouse_store import ClickHouseRecordStore, connect_clickhouse
from .elasticsearch_store import ElasticsearchRecordStore


def create_elasticsearch_store(config: ElasticsearchConfig) -> ElasticsearchRecordStore:
    basic_auth = (config.username, config.password) if config.username else None
    client = Elasticsearch(
        config.node,
        basic_auth=basic_auth,
        request_timeout=config.request_timeout,
    )
    return ElasticsearchRecordStore(client, config.index, config.point_in_time_keep_alive)


def create_clickhouse_store(config: ClickHouseConfig) -> ClickHouseRecordStore:
    # Connects eagerly so a wrong URL fails before any data is touched
    client = connect_clickhouse(
        url=config.url,
        database=config.database,
        user=config.user,
        password=config.password,
        timeout=config.timeout,
    )
    return ClickHouseRecordStore(client, config.database, config.table)
