"""Error taxonomy for conferencing server calls.

Every failure of a proxy call is one of three kinds:

- ConstructionError: the request could not be built (malformed URL). No
  network activity took place.
- TransportError: the connection failed, was interrupted, timed out or was
  cancelled. No complete body was received.
- DecodeError: a body was received but could not be parsed as XML.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Fine-grained failure classification carried by every ProxyError."""

    MALFORMED_URL = "malformed_url"
    CONNECT = "connect"
    NETWORK = "network"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    PROTOCOL = "protocol"
    INVALID_XML = "invalid_xml"


class ProxyError(Exception):
    """Base class for all conferencing server call failures."""

    def __init__(self, message: str, kind: ErrorKind, url: str | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.url = url


class ConstructionError(ProxyError):
    """The outbound request could not be built."""

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message, ErrorKind.MALFORMED_URL, url)


class TransportError(ProxyError):
    """The HTTP exchange failed before a complete body was received."""


class DecodeError(ProxyError):
    """The response body was not well-formed XML."""

    def __init__(self, message: str, url: str | None = None, body: str = "") -> None:
        super().__init__(message, ErrorKind.INVALID_XML, url)
        self.body = body
