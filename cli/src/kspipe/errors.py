from __future__ import annotations


class KspipeError(RuntimeError):
    """Base class for every failure surfaced to the command layer."""


class StoreError(KspipeError):
    """Raised by resource clients when the store rejects or fails a call."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class ResolutionError(KspipeError):
    pass


class NotFoundError(KspipeError):
    pass


class InputAborted(KspipeError):
    pass


class FetchError(KspipeError):
    pass


class DecodeError(KspipeError):
    pass


class CommitError(KspipeError):
    pass


class ConflictError(CommitError):
    pass


class DeleteError(KspipeError):
    pass
