"""Error taxonomy for TELL.

Every error carries a ``kind`` so callers can branch on the failure category
without matching on message text, and keeps the underlying exception (if any)
as ``cause``.
"""

from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from tell.providers.base import UsageInfo


class ErrorKind(str, Enum):
    """Categories of failure."""

    PARSE = "parse"
    STORAGE = "storage"
    NOT_FOUND = "not_found"
    INVALID_ARGUMENT = "invalid_argument"
    UPSTREAM = "upstream"


class TellError(Exception):
    """Base class for all TELL errors.

    Attributes:
        kind: Failure category
        message: User-facing message
        cause: Underlying exception, if any
    """

    kind: ErrorKind

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause


class ParseError(TellError):
    """Raised when model output does not contain a valid command payload."""

    kind = ErrorKind.PARSE


class StorageError(TellError):
    """Raised when the history database cannot be read or written."""

    kind = ErrorKind.STORAGE


class NotFoundError(TellError):
    """Raised when a history entry lookup misses."""

    kind = ErrorKind.NOT_FOUND


class InvalidArgumentError(TellError):
    """Raised for invalid caller input such as an empty search term."""

    kind = ErrorKind.INVALID_ARGUMENT


class UpstreamError(TellError):
    """Raised when the LLM call itself fails.

    Attributes:
        usage: Token usage reported by a call that completed but returned
            nothing usable, None when the call never completed
    """

    kind = ErrorKind.UPSTREAM

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        usage: Optional["UsageInfo"] = None,
    ):
        super().__init__(message, cause=cause)
        self.usage = usage
