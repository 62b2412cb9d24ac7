"""
Exception hierarchy shared by the stores, the transfer engine and the CLI.

Connectivity and server failures are always fatal to the running
operation and are never retried. Count mismatches and sample mismatches
are not exceptions: they are reported through the transfer result.
"""

from typing import Iterable, Optional


class Es2chError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(Es2chError):
    """Raised when one or more configuration values are missing or invalid."""

    def __init__(self, errors: Iterable[str]):
        self.errors = list(errors)
        super().__init__(
            f"Configuration validation failed with {len(self.errors)} error(s): "
            + "; ".join(self.errors)
        )


class RecordValidationError(ValueError, Es2chError):
    """Raised when a record (or one of its identifiers) is malformed."""


class StoreError(Es2chError):
    """A record store failed to complete an operation."""

    def __init__(self, store: str, operation: str, message: str, cause: Optional[BaseException] = None):
        self.store = store
        self.operation = operation
        self.cause = cause
        super().__init__(f"[{store}] {operation} failed: {message}")


class StoreConnectionError(StoreError):
    """The store could not be reached (network, timeout, refused connection)."""


class StoreOperationError(StoreError):
    """The store was reached but rejected or partially failed the request."""
