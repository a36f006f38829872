"""Exceptions and the session error taxonomy.

Every failure a session can observe is turned into a :class:`SessionError`
by :func:`classify_error`. Sessions store the classified value; they never
re-raise catalog failures to the UI layer.
"""

import asyncio
from enum import Enum

from niquests.exceptions import RequestException
from pydantic import BaseModel, ConfigDict

NETWORK_ERROR_MESSAGE = "Something went wrong with fetching movies."


class PopcornError(Exception):
    """Base class for Popcorn errors."""


class CatalogError(PopcornError):
    """Domain exception for catalog failures."""

    def __init__(self, message: str, original_exception: Exception = None):
        super().__init__(message)
        self.original_exception = original_exception


class CatalogResponseError(CatalogError):
    """The catalog answered with a non-2xx status or an unusable body."""


class MovieNotFoundError(CatalogError):
    """The catalog answered with its ``Response: "False"`` sentinel."""


class RequestCancelled(PopcornError):
    """A request was superseded before it completed."""


class IncompleteRecordError(PopcornError):
    """A watched item was requested while no detail record is loaded."""


class ErrorKind(str, Enum):
    """Kinds of error a session can hold."""

    NONE = "none"
    CANCELLED = "cancelled"
    TRANSIENT_NETWORK = "transient-network"
    NOT_FOUND = "not-found"
    OTHER = "other"


class SessionError(BaseModel):
    """A classified failure attached to a session."""

    model_config = ConfigDict(frozen=True)

    kind: ErrorKind = ErrorKind.NONE
    message: str = ""

    @property
    def is_error(self) -> bool:
        """True for kinds the UI should show."""
        return self.kind not in (ErrorKind.NONE, ErrorKind.CANCELLED)

    @property
    def display_message(self) -> str:
        """Text to show the user, empty when nothing should be shown."""
        if self.kind == ErrorKind.TRANSIENT_NETWORK:
            return NETWORK_ERROR_MESSAGE
        if self.kind in (ErrorKind.NOT_FOUND, ErrorKind.OTHER):
            return self.message
        return ""


NO_ERROR = SessionError()


def classify_error(exc: BaseException) -> SessionError:
    """Map a raised failure to a :class:`SessionError`."""
    if isinstance(exc, (RequestCancelled, asyncio.CancelledError)):
        return SessionError(kind=ErrorKind.CANCELLED)
    if isinstance(exc, MovieNotFoundError):
        return SessionError(kind=ErrorKind.NOT_FOUND, message=str(exc))
    if isinstance(exc, (RequestException, CatalogResponseError)):
        return SessionError(kind=ErrorKind.TRANSIENT_NETWORK, message=str(exc))
    return SessionError(kind=ErrorKind.OTHER, message=str(exc))
