"""
Error taxonomy for stream handling, plus raise helpers to keep call sites short.

Usage:
    from pathstream.utils.exceptions import raise_decode_error, DecodeError

    raise_decode_error("content must be a string", path="content")

Only TransportError ever escapes a stream; every other kind is contained
within the handling of a single event.
"""

from typing import NoReturn, Optional


class StreamError(Exception):
    """Base class for every error raised by the stream core."""

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class TransportError(StreamError):
    """Connection failed or closed unexpectedly. Terminal for the stream."""

    def __init__(self, detail: str, status_code: Optional[int] = None):
        super().__init__(detail)
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"{self.detail} (status {self.status_code})"
        return self.detail


class FramingAnomaly(StreamError):
    """A wire line that does not follow the `field: value` framing."""

    def __init__(self, line: str):
        super().__init__(f"Malformed SSE line: {line!r}")
        self.line = line


class DecodeError(StreamError):
    """Payload JSON is invalid, has the wrong shape, or lacks a required field."""

    def __init__(self, detail: str, path: Optional[str] = None):
        super().__init__(detail)
        self.path = path

    def __str__(self) -> str:
        if self.path:
            return f"{self.path}: {self.detail}"
        return self.detail


class EmptyResult(StreamError):
    """A payload decoded structurally but produced no usable records."""


def raise_transport_error(detail: str, status_code: Optional[int] = None) -> NoReturn:
    """Raise TransportError."""
    raise TransportError(detail, status_code=status_code)


def raise_decode_error(detail: str, path: Optional[str] = None) -> NoReturn:
    """Raise DecodeError for the given key path."""
    raise DecodeError(detail, path=path)


def raise_empty_result(detail: str) -> NoReturn:
    """Raise EmptyResult."""
    raise EmptyResult(detail)
