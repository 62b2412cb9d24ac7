# ==============================================
# CLI - Command Line Entry Point
# ==============================================
#
# PURPOSE:
#   Runs the three workflows against the configured stores.
#   Everything else (URLs, index, table, batch size) comes from the
#   environment / .env file, see config.py.
#
# COMMANDS:
# ---------
# 1. Fill the Elasticsearch index with MOCK_USERS_COUNT fake users:
#    python -m es2ch seed
#
# 2. Copy the index into the ClickHouse table and verify it:
#    python -m es2ch migrate
#
# 3. Show existence and size of both stores:
#    python -m es2ch status
#
# EXIT CODES:
# -----------
#   0 → success
#   1 → configuration error, store failure, or count mismatch
#
# ==============================================

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .config import Config, load_config
from .errors import ConfigurationError
from .logging_config import setup_logging
from .seeding import RecordGenerator, SeedingService
from .storage.factory import create_clickhouse_store, create_elasticsearch_store
from .storage.record_store import RecordStore
from .transfer import LoggingProgressReporter, SampleVerifier, TransferEngine

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


def run_seed(config: Config, stores: List[RecordStore]) -> int:
    source = create_elasticsearch_store(config.elasticsearch)
    stores.append(source)

    service = SeedingService(source, RecordGenerator())
    service.seed(
        config.app.mock_users_count,
        batch_size=config.app.batch_size,
        on_progress=LoggingProgressReporter("Seeding progress"),
    )
    logger.info("🎉 Seeding completed successfully!")
    return EXIT_OK


def run_migrate(config: Config, stores: List[RecordStore]) -> int:
    source = create_elasticsearch_store(config.elasticsearch)
    stores.append(source)
    target = create_clickhouse_store(config.clickhouse)
    stores.append(target)

    engine = TransferEngine(source, target, SampleVerifier(config.app.sample_size))
    result = engine.migrate(
        batch_size=config.app.batch_size,
        on_progress=LoggingProgressReporter("Migration progress"),
    )

    if not result.success:
        logger.error("✗ Migration completed with errors - count mismatch detected")
        return EXIT_FAILURE

    logger.info("🎉 Migration completed successfully!")
    return EXIT_OK


def run_status(config: Config, stores: List[RecordStore]) -> int:
    source = create_elasticsearch_store(config.elasticsearch)
    stores.append(source)
    target = create_clickhouse_store(config.clickhouse)
    stores.append(target)

    status = TransferEngine(source, target).get_status()
    for store_status in (status.source, status.target):
        if store_status.exists:
            logger.info("✓ %s: %d records", store_status.name, store_status.count)
        else:
            logger.info("✗ %s: does not exist", store_status.name)
    return EXIT_OK


COMMANDS = {
    "seed": run_seed,
    "migrate": run_migrate,
    "status": run_status,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="es2ch",
        description="Copy a user index from Elasticsearch into ClickHouse and verify the copy.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("seed", help="Fill the Elasticsearch index with generated users")
    subparsers.add_parser("migrate", help="Copy the Elasticsearch index into ClickHouse")
    subparsers.add_parser("status", help="Show existence and record counts of both stores")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config()
    except ConfigurationError as e:
        setup_logging()
        logger.error("✗ Invalid configuration: %s", e)
        return EXIT_FAILURE

    setup_logging(config.app.log_level, config.app.log_json)

    stores: List[RecordStore] = []
    try:
        return COMMANDS[args.command](config, stores)
    except Exception as e:
        logger.error("✗ %s failed: %s", args.command.capitalize(), e)
        logger.debug("Traceback", exc_info=True)
        return EXIT_FAILURE
    finally:
        for store in reversed(stores):
            try:
                store.close()
            except Exception as e:
                logger.warning("⚠ Could not close %s: %s", store.name, e)


if __name__ == "__main__":
    sys.exit(main())
