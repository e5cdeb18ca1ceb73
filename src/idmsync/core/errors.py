"""
Error taxonomy shared by the catalog, the orchestrators and the HTTP client.

Every error raised by this package derives from SyncError so callers can catch
one type and still inspect ``cause`` / ``errors`` to tell benign failures from
real ones.
"""

from typing import List, Optional


class SyncError(Exception):
    """Base error. Carries a human message and the error that caused it."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message


class TransportError(SyncError):
    """The request never produced an HTTP response (network, timeout, TLS)."""


class StoreOperationError(SyncError):
    """
    The store answered with an HTTP error.

    ``status`` and ``reason`` come from the response line, ``message`` and
    ``code`` from the JSON error body when the store sends one.
    """

    def __init__(
        self,
        status: int,
        reason: str = "",
        message: str = "",
        *,
        code: Optional[str] = None,
        entity_id: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        text = f"{status} {reason}".strip()
        if message:
            text = f"{text}: {message}"
        if entity_id:
            text = f"{text} ({entity_id})"
        super().__init__(text, cause)
        self.status = status
        self.reason = reason
        self.http_message = message
        self.code = code
        self.entity_id = entity_id

    @property
    def category(self) -> str:
        if 400 <= self.status < 500:
            return "client_error"
        if self.status >= 500:
            return "server_error"
        return "other"

    def __str__(self) -> str:
        return self.message


class ValidationError(SyncError):
    """A local precondition failed; the store was never called for this id."""

    def __init__(self, entity_id: str, message: Optional[str] = None) -> None:
        super().__init__(message or f"Invalid script hook in the config object '{entity_id}'")
        self.entity_id = entity_id


class AggregateError(SyncError):
    """One or more items of a batch failed. Raised after the whole batch ran."""

    def __init__(self, message: str, errors: List[BaseException]) -> None:
        super().__init__(message)
        self.errors = list(errors)

    def __str__(self) -> str:
        lines = [f"{self.message} ({len(self.errors)} failed)"]
        lines.extend(f"  - {err}" for err in self.errors)
        return "\n".join(lines)


__all__ = [
    "SyncError",
    "TransportError",
    "StoreOperationError",
    "ValidationError",
    "AggregateError",
]
