import asyncio

import pytest
from niquests.exceptions import ConnectionError, HTTPError, ReadTimeout

from popcorn.core.errors import (
    NETWORK_ERROR_MESSAGE,
    CatalogResponseError,
    ErrorKind,
    MovieNotFoundError,
    RequestCancelled,
    SessionError,
    classify_error,
)


@pytest.mark.parametrize(
    "exc, kind",
    [
        (RequestCancelled("superseded"), ErrorKind.CANCELLED),
        (asyncio.CancelledError(), ErrorKind.CANCELLED),
        (ConnectionError("connection refused"), ErrorKind.TRANSIENT_NETWORK),
        (ReadTimeout("read timed out"), ErrorKind.TRANSIENT_NETWORK),
        (HTTPError("503 Server Error"), ErrorKind.TRANSIENT_NETWORK),
        (CatalogResponseError("Catalog returned HTTP 500"), ErrorKind.TRANSIENT_NETWORK),
        (MovieNotFoundError("Movie not found!"), ErrorKind.NOT_FOUND),
        (RuntimeError("boom"), ErrorKind.OTHER),
        (KeyError("imdbID"), ErrorKind.OTHER),
    ],
)
def test_classify_error(exc, kind):
    assert classify_error(exc).kind == kind


def test_other_keeps_original_message():
    error = classify_error(RuntimeError("Request limit reached!"))

    assert error.message == "Request limit reached!"
    assert error.display_message == "Request limit reached!"


def test_display_messages():
    assert SessionError().display_message == ""
    assert SessionError(kind=ErrorKind.CANCELLED).display_message == ""
    assert (
        SessionError(kind=ErrorKind.TRANSIENT_NETWORK, message="dns").display_message
        == NETWORK_ERROR_MESSAGE
    )
    assert (
        SessionError(kind=ErrorKind.NOT_FOUND, message="Movie not found!").display_message
        == "Movie not found!"
    )


def test_is_error():
    assert not SessionError().is_error
    assert not SessionError(kind=ErrorKind.CANCELLED).is_error
    assert SessionError(kind=ErrorKind.NOT_FOUND).is_error
    assert SessionError(kind=ErrorKind.OTHER, message="x").is_error


def test_catalog_error_keeps_original_exception():
    original = ValueError("bad json")
    error = CatalogResponseError("Catalog returned a malformed body", original)

    assert error.original_exception is original
    assert str(error) == "Catalog returned a malformed body"
