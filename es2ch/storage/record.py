# ==============================================
# Record (Data Class)
# ==============================================
#
# PURPOSE:
#   The unit of transfer. Both stores read and write Records, and
#   the sample verification compares Records, so every representation
#   difference between the two stores is resolved here.
#
# WHY THIS FILE EXISTS:
#   Elasticsearch hands back timestamps as ISO-8601 text
#   ("2026-10-18T12:00:00.123Z") while the ClickHouse driver returns
#   DateTime64(3, 'UTC') values as datetime objects, and text exports
#   use "2026-10-18 12:00:00.123". All of them parse
#   into one normalized Record, and the sample comparison is a plain
#   field-by-field equality check on it.
#
# CLASSES:
# --------
# - Record (frozen dataclass)
#     id: str                 → Opaque unique identifier (non-empty,
#                               no control characters, <= 512 bytes)
#     first_name: str
#     last_name: str
#     age: int                → 0..255 (UInt8 at the destination)
#     followers_count: int    → 0..4294967295 (UInt32 at the destination)
#     timestamp: datetime     → Generation time, aware UTC, ms precision
#
#     Methods:
#     --------
#     - from_document(data: Mapping) -> Record  (classmethod)
#     - to_document() -> dict   → Elasticsearch source document
#     - to_row() -> tuple       → ClickHouse insert row (FIELD_NAMES order)
#
# FUNCTIONS:
# ----------
# - normalize_timestamp(value) -> datetime
# - validate_record_id(value) -> str
#
# ==============================================

import re
from dataclasses import dataclass, fields
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Tuple

from ..errors import RecordValidationError

FIELD_NAMES = ("id", "first_name", "last_name", "age", "followers_count", "timestamp")

# Elasticsearch rejects _id values longer than 512 bytes
MAX_ID_BYTES = 512

CONTROL_CHARACTERS = re.compile(r"[\x00-\x1f\x7f]")

MAX_AGE = 255
MAX_FOLLOWERS = 4294967295


def validate_record_id(value: Any) -> str:
    """
    Check that an identifier is usable as a key in both stores.

    Ids are opaque: any non-empty string without control characters
    that fits in MAX_ID_BYTES of UTF-8.

    Returns:
        The identifier unchanged.

    Raises:
        RecordValidationError: If the identifier is not a well-formed string.
    """
    if (
        not isinstance(value, str)
        or not value
        or CONTROL_CHARACTERS.search(value)
        or len(value.encode("utf-8")) > MAX_ID_BYTES
    ):
        raise RecordValidationError(f"Malformed record id: {value!r}")
    return value


def normalize_timestamp(value: Any) -> datetime:
    """
    Parse a timestamp from either store into an aware UTC datetime
    truncated to millisecond precision.

    Accepts datetime objects, ISO-8601 text with a "T" or space
    separator and an optional "Z"/offset suffix. Naive values are
    treated as UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        # fromisoformat only understands 3 or 6 fractional digits
        match = re.match(r"^(.*?[T ]\d{2}:\d{2}:\d{2})(?:\.(\d+))?(.*)$", text)
        if match:
            head, fraction, tail = match.groups()
            if fraction:
                head = f"{head}.{(fraction + '000000')[:6]}"
            text = head + tail
        try:
            parsed = datetime.fromisoformat(text.replace(" ", "T", 1))
        except ValueError as e:
            raise RecordValidationError(f"Unparseable timestamp: {value!r}") from e
    else:
        raise RecordValidationError(f"Unsupported timestamp value: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    parsed = parsed.astimezone(timezone.utc)
    return parsed.replace(microsecond=(parsed.microsecond // 1000) * 1000)


def _coerce_int(name: str, value: Any, maximum: int) -> int:
    if isinstance(value, bool):
        raise RecordValidationError(f"Field '{name}' must be an integer, got {value!r}")
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError as e:
            raise RecordValidationError(f"Field '{name}' must be an integer, got {value!r}") from e
    if not isinstance(value, int):
        raise RecordValidationError(f"Field '{name}' must be an integer, got {value!r}")
    if value < 0 or value > maximum:
        raise RecordValidationError(f"Field '{name}' out of range 0..{maximum}: {value}")
    return value


@dataclass(frozen=True)
class Record:
    """A single user record as moved between the two stores."""

    id: str
    first_name: str
    last_name: str
    age: int
    followers_count: int
    timestamp: datetime

    def __post_init__(self) -> None:
        validate_record_id(self.id)
        for name in ("first_name", "last_name"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise RecordValidationError(f"Field '{name}' must be a non-empty string")
        # frozen dataclass: normalized values are written through object.__setattr__
        object.__setattr__(self, "age", _coerce_int("age", self.age, MAX_AGE))
        object.__setattr__(
            self, "followers_count",
            _coerce_int("followers_count", self.followers_count, MAX_FOLLOWERS)
        )
        object.__setattr__(self, "timestamp", normalize_timestamp(self.timestamp))

    @classmethod
    def from_document(cls, data: Mapping[str, Any]) -> "Record":
        """
        Build a Record from an Elasticsearch _source document or a
        ClickHouse row. Extra keys are ignored.

        Raises:
            RecordValidationError: If a field is missing or malformed.
        """
        missing = [name for name in FIELD_NAMES if name not in data]
        if missing:
            raise RecordValidationError(f"Record is missing field(s): {', '.join(missing)}")
        return cls(**{name: data[name] for name in FIELD_NAMES})

    def to_document(self) -> Dict[str, Any]:
        """Render the Elasticsearch form (timestamp as ISO-8601 with Z)."""
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "age": self.age,
            "followers_count": self.followers_count,
            "timestamp": self.timestamp.strftime("%Y-%m-%dT%H:%M:%S.")
            + f"{self.timestamp.microsecond // 1000:03d}Z",
        }

    def to_row(self) -> Tuple[Any, ...]:
        """Values in FIELD_NAMES order for a columnar ClickHouse insert."""
        return tuple(getattr(self, name) for name in FIELD_NAMES)

    def diff(self, other: "Record") -> Dict[str, tuple]:
        """
        Compare two records field by field.

        Returns:
            {field_name: (self_value, other_value)} for every differing field.
        """
        return {
            f.name: (getattr(self, f.name), getattr(other, f.name))
            for f in fields(self)
            if getattr(self, f.name) != getattr(other, f.name)
        }
