"""
Error taxonomy for the Pet reconciler.

Every failure raised by the client, translator and state machine is a
PetstoreError tagged with an ErrorKind. Callers branch on the kind, never on
the exception type.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Kinds of reconciliation failure."""

    NOT_FOUND = "NotFound"
    TRANSPORT = "Transport"
    MALFORMED_RESOURCE = "MalformedResource"
    WRONG_RESOURCE_TYPE = "WrongResourceType"
    CREATE_FAILED = "CreateFailed"
    UPDATE_FAILED = "UpdateFailed"
    DELETE_FAILED = "DeleteFailed"

    @property
    def retryable(self) -> bool:
        """Whether retrying the same operation later may succeed."""
        return self in (
            ErrorKind.TRANSPORT,
            ErrorKind.CREATE_FAILED,
            ErrorKind.UPDATE_FAILED,
            ErrorKind.DELETE_FAILED,
        )


class PetstoreError(Exception):
    """Raised for any failure talking to, or interpreting, the Pet store."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        cause: Optional["PetstoreError"] = None,
        status: Optional[int] = None,
    ):
        self.kind = kind
        self.message = message
        self.cause = cause
        self.status = status
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message

    @classmethod
    def wrap(
        cls, kind: ErrorKind, message: str, cause: "PetstoreError"
    ) -> "PetstoreError":
        """Wrap an underlying error with the operation that was attempted."""
        return cls(kind, message, cause=cause, status=cause.status)


def is_not_found(err: Exception) -> bool:
    """Check whether an error reports that the remote pet is absent."""
    return isinstance(err, PetstoreError) and err.kind is ErrorKind.NOT_FOUND
