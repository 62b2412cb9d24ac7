# ==============================================
# Configuration Management
# ==============================================
#
# PURPOSE:
#   Load and validate all configuration from environment
#   variables / .env file. Provides typed config objects
#   to all other modules.
#
# CLASSES:
# --------
# - ElasticsearchConfig (frozen dataclass)
#     node: str                      (default "http://localhost:9200")
#     index: str                     (default "users")
#     username / password: str|None  (default None)
#     request_timeout: float         (default 30.0)
#     point_in_time_keep_alive: str  (default "1m")
#
# - ClickHouseConfig (frozen dataclass)
#     url: str                       (default "http://localhost:8123")
#     database: str                  (default "default")
#     table: str                     (default "users")
#     user / password: str|None      (default None)
#     timeout: float                 (default 30.0)
#
# - AppConfig (frozen dataclass)
#     mock_users_count: int          (default 10000, may be 0)
#     batch_size: int                (default 1000)
#     sample_size: int               (default 5)
#     log_level: str                 (default "INFO")
#     log_json: bool                 (default False)
#
# - Config (frozen dataclass)
#     elasticsearch / clickhouse / app
#
# FUNCTION:
# ---------
# - load_config(environ=None, env_file=None) -> Config
#     Read and validate every variable, collecting ALL problems
#     before raising a single ConfigurationError. Called once at
#     process start; the result is passed explicitly to whoever
#     needs it (no module-level singleton).
#
# USAGE:
# ------
#   from es2ch.config import load_config
#   config = load_config()
#   print(config.elasticsearch.node)
#   print(config.app.batch_size)
#
# ==============================================

import logging
import os
import re
from dataclasses import dataclass, field
from typing import Callable, List, Mapping, Optional
from urllib.parse import urlparse

from dotenv import find_dotenv, load_dotenv

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
INDEX_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_.\-]*$")
LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
TRUE_VALUES = {"true", "1", "yes", "on"}
FALSE_VALUES = {"false", "0", "no", "off"}


def is_valid_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def is_valid_name(value: str) -> bool:
    return bool(NAME_PATTERN.match(value))


def is_valid_index_name(value: str) -> bool:
    return bool(INDEX_PATTERN.match(value)) and len(value.encode("utf-8")) <= 255


@dataclass(frozen=True)
class ElasticsearchConfig:
    """Elasticsearch (source) connection configuration."""
    node: str = "http://localhost:9200"
    index: str = "users"
    username: Optional[str] = None
    password: Optional[str] = None
    request_timeout: float = 30.0
    point_in_time_keep_alive: str = "1m"


@dataclass(frozen=True)
class ClickHouseConfig:
    """ClickHouse (destination) connection configuration."""
    url: str = "http://localhost:8123"
    database: str = "default"
    table: str = "users"
    user: Optional[str] = None
    password: Optional[str] = None
    timeout: float = 30.0


@dataclass(frozen=True)
class AppConfig:
    """Batch sizing, seeding volume and logging."""
    mock_users_count: int = 10000
    batch_size: int = 1000
    sample_size: int = 5
    log_level: str = "INFO"
    log_json: bool = False


@dataclass(frozen=True)
class Config:
    """Main application configuration."""
    elasticsearch: ElasticsearchConfig = field(default_factory=ElasticsearchConfig)
    clickhouse: ClickHouseConfig = field(default_factory=ClickHouseConfig)
    app: AppConfig = field(default_factory=AppConfig)


class _EnvReader:
    """Reads variables from one mapping and accumulates validation errors."""

    def __init__(self, environ: Mapping[str, str]):
        self.environ = environ
        self.errors: List[str] = []

    def _raw(self, name: str) -> Optional[str]:
        value = self.environ.get(name)
        if value is None or value.strip() == "":
            return None
        return value.strip()

    def string(
        self,
        name: str,
        default: Optional[str],
        validator: Optional[Callable[[str], bool]] = None,
        description: str = "",
    ) -> Optional[str]:
        value = self._raw(name)
        if value is None:
            logger.debug("%s not set, using default value %r", name, default)
            return default
        if validator is not None and not validator(value):
            self.errors.append(f"Environment variable {name} is invalid ({description}): {value!r}")
        return value

    def positive_int(self, name: str, default: int, description: str = "") -> int:
        value = self._raw(name)
        if value is None:
            logger.debug("%s not set, using default value %r", name, default)
            return default
        try:
            number = int(value)
        except ValueError:
            number = 0
        if number <= 0:
            self.errors.append(
                f"Environment variable {name} must be a positive integer ({description}): {value!r}"
            )
            return default
        return number

    def non_negative_int(self, name: str, default: int, description: str = "") -> int:
        value = self._raw(name)
        if value is None:
            logger.debug("%s not set, using default value %r", name, default)
            return default
        try:
            number = int(value)
        except ValueError:
            number = -1
        if number < 0:
            self.errors.append(
                f"Environment variable {name} must be a non-negative integer ({description}): {value!r}"
            )
            return default
        return number

    def positive_float(self, name: str, default: float, description: str = "") -> float:
        value = self._raw(name)
        if value is None:
            return default
        try:
            number = float(value)
        except ValueError:
            number = 0.0
        if number <= 0:
            self.errors.append(
                f"Environment variable {name} must be a positive number ({description}): {value!r}"
            )
            return default
        return number

    def boolean(self, name: str, default: bool) -> bool:
        value = self._raw(name)
        if value is None:
            return default
        if value.lower() in TRUE_VALUES:
            return True
        if value.lower() in FALSE_VALUES:
            return False
        self.errors.append(f"Environment variable {name} must be a boolean: {value!r}")
        return default


def load_config(environ: Optional[Mapping[str, str]] = None, env_file: Optional[str] = None) -> Config:
    """
    Build the application configuration.

    Args:
        environ: Mapping to read from. If None, the process environment
                 is used after loading a .env file (python-dotenv).
        env_file: Explicit .env path; defaults to the nearest .env found
                  from the current working directory.

    Returns:
        Config: Validated configuration

    Raises:
        ConfigurationError: Listing every invalid variable.
    """
    if environ is None:
        load_dotenv(dotenv_path=env_file or find_dotenv(usecwd=True))
        environ = os.environ

    env = _EnvReader(environ)

    elasticsearch = ElasticsearchConfig(
        node=env.string("ELASTIC_NODE", "http://localhost:9200", is_valid_url, "Elasticsearch node URL"),
        index=env.string("ELASTIC_INDEX", "users", is_valid_index_name, "Elasticsearch index name"),
        username=env.string("ELASTIC_USERNAME", None),
        password=env.string("ELASTIC_PASSWORD", None),
        request_timeout=env.positive_float("ELASTIC_REQUEST_TIMEOUT", 30.0, "seconds"),
    )

    clickhouse = ClickHouseConfig(
        url=env.string("CLICKHOUSE_HOST", "http://localhost:8123", is_valid_url, "ClickHouse HTTP interface URL"),
        database=env.string("CLICKHOUSE_DATABASE", "default", is_valid_name, "ClickHouse database name"),
        table=env.string("CLICKHOUSE_TABLE", "users", is_valid_name, "ClickHouse table name"),
        user=env.string("CLICKHOUSE_USER", None),
        password=env.string("CLICKHOUSE_PASSWORD", None),
        timeout=env.positive_float("CLICKHOUSE_TIMEOUT", 30.0, "seconds"),
    )

    log_level = env.string("LOG_LEVEL", "INFO", lambda v: v.upper() in LOG_LEVELS, "log level")
    app = AppConfig(
        mock_users_count=env.non_negative_int("MOCK_USERS_COUNT", 10000, "number of mock users to seed"),
        batch_size=env.positive_int("BATCH_SIZE", 1000, "records per batch"),
        sample_size=env.positive_int("SAMPLE_SIZE", 5, "records compared after a migration"),
        log_level=log_level.upper(),
        log_json=env.boolean("LOG_JSON", False),
    )

    if env.errors:
        for error in env.errors:
            logger.error("✗ %s", error)
        raise ConfigurationError(env.errors)

    return Config(elasticsearch=elasticsearch, clickhouse=clickhouse, app=app)
