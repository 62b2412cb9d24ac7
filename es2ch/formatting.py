"""
Human-readable formatting helpers.

- format_duration(seconds) -> "HH:MM:SS:mmm"
- sample_table_separator() / sample_table_header() / format_sample_row(record)
    Fixed-width rows used to print a source/target sample side by side.
"""

from typing import Optional

from .storage.record import Record

_COLUMNS = (("ID", 36), ("First Name", 16), ("Last Name", 15), ("Age", 3), ("Followers", 9))


def format_duration(seconds: float) -> str:
    """
    Format a duration as HH:MM:SS:mmm.

    Negative or non-numeric input renders as zero.

    Example:
        format_duration(123.456) -> "00:02:03:456"
    """
    if isinstance(seconds, bool) or not isinstance(seconds, (int, float)) or seconds < 0:
        return "00:00:00:000"
    total_ms = int(round(seconds * 1000))
    hours, rest = divmod(total_ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    secs, millis = divmod(rest, 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}:{millis:03d}"


def sample_table_separator() -> str:
    return "+" + "+".join("-" * (width + 2) for _, width in _COLUMNS) + "+"


def sample_table_header() -> str:
    return "| " + " | ".join(title.ljust(width) for title, width in _COLUMNS) + " |"


def format_sample_row(record: Optional[Record]) -> str:
    """One table row for a record; a missing record renders as N/A cells."""
    if record is None:
        values = ["N/A"] * len(_COLUMNS)
    else:
        values = [record.id, record.first_name, record.last_name, str(record.age), str(record.followers_count)]
    return "| " + " | ".join(value.ljust(width) for value, (_, width) in zip(values, _COLUMNS)) + " |"
