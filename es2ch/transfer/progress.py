"""
Progress reporting.

The engine and the seeding service call ``on_progress(processed, total)``
synchronously after every batch. Anything callable with that signature
works; ``LoggingProgressReporter`` is the one the CLI uses.
"""

import logging
import time
from typing import Callable

ProgressCallback = Callable[[int, int], None]

logger = logging.getLogger(__name__)


def progress_percentage(processed: int, total: int) -> int:
    """Rounded completion percentage; 0 when the total is unknown or zero."""
    if not total:
        return 0
    return round(processed / total * 100)


class LoggingProgressReporter:
    """Logs "<label>: 42% (420/1000, 1234.5 rec/s)" after every batch."""

    def __init__(self, label: str = "Progress", clock: Callable[[], float] = time.monotonic):
        self.label = label
        self._clock = clock
        self._started = clock()
        self.calls = 0

    def __call__(self, processed: int, total: int) -> None:
        now = self._clock()
        self.calls += 1
        elapsed = now - self._started
        rate = processed / elapsed if elapsed > 0 else 0.0
        logger.info(
            "%s: %d%% (%d/%d, %.1f rec/s)",
            self.label, progress_percentage(processed, total), processed, total, rate,
            extra={"processed": processed, "total": total},
        )
