"""Request builder for conferencing server calls.

Turns a target URL plus optional method, body, content type and response
type into a fully specified OutboundRequest. Performs no network I/O; the
only failure is a malformed URL, raised synchronously as ConstructionError.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from urllib.parse import urlsplit

from src.meetups.conference.errors import ConstructionError

DEFAULT_XML_CONTENT_TYPE = "text/xml"

_DEFAULT_PORTS = {"http": 80, "https": 443}


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"


class ResponseType(str, Enum):
    """How the response body is handed back to the caller."""

    RAW = "raw"
    PARSED = "parsed"

    @classmethod
    def coerce(cls, value: ResponseType | str | None) -> ResponseType:
        """Only ``raw`` selects RAW; any other value means parse as XML."""
        if isinstance(value, ResponseType):
            return value
        if isinstance(value, str) and value.lower() == cls.RAW.value:
            return cls.RAW
        return cls.PARSED


@dataclass(frozen=True)
class OutboundRequest:
    """A fully specified request, ready for the transport."""

    url: str
    scheme: str
    host: str
    port: int
    path: str
    method: HttpMethod = HttpMethod.GET
    body: bytes | None = None
    headers: dict[str, str] = field(default_factory=dict)
    response_type: ResponseType = ResponseType.PARSED

    @property
    def target(self) -> str:
        """Absolute URL with the resolved port made explicit."""
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{self.scheme}://{host}:{self.port}{self.path}"


def _coerce_method(method: HttpMethod | str | None) -> HttpMethod:
    if isinstance(method, HttpMethod):
        return method
    if isinstance(method, str) and method.lower() == "post":
        return HttpMethod.POST
    return HttpMethod.GET


def build_request(
    url: str,
    response_type: ResponseType | str | None = ResponseType.PARSED,
    method: HttpMethod | str | None = None,
    body: bytes | str | None = None,
    content_type: str | None = None,
) -> OutboundRequest:
    """Build an OutboundRequest for the conferencing server.

    Args:
        url: Absolute http(s) URL of the API call.
        response_type: ``raw`` to receive the body as text; anything else
            parses it as XML.
        method: ``post`` issues a POST; anything else (or None) a GET.
        body: Payload for POST requests. ``str`` is UTF-8 encoded. Ignored
            for GET.
        content_type: POST content type, ``text/xml`` when omitted.

    Returns:
        The request descriptor.

    Raises:
        ConstructionError: If the URL is malformed.
    """
    if not isinstance(url, str) or not url.strip():
        raise ConstructionError("URL must be a non-empty string", url=url if isinstance(url, str) else None)

    parts = urlsplit(url.strip())
    scheme = parts.scheme.lower()
    if scheme not in _DEFAULT_PORTS:
        raise ConstructionError(f"Unsupported URL scheme: {parts.scheme or '<none>'}", url=url)
    if not parts.hostname:
        raise ConstructionError("URL has no host", url=url)
    try:
        port = parts.port or _DEFAULT_PORTS[scheme]
    except ValueError as exc:
        raise ConstructionError(f"Invalid port in URL: {exc}", url=url) from exc

    path = parts.path or "/"
    if parts.query:
        path = f"{path}?{parts.query}"

    resolved_method = _coerce_method(method)
    headers: dict[str, str] = {}
    payload: bytes | None = None

    if resolved_method is HttpMethod.POST:
        headers["Content-Type"] = content_type or DEFAULT_XML_CONTENT_TYPE
        if body is not None:
            payload = body.encode("utf-8") if isinstance(body, str) else bytes(body)
            headers["Content-Length"] = str(len(payload))

    return OutboundRequest(
        url=url,
        scheme=scheme,
        host=parts.hostname,
        port=port,
        path=path,
        method=resolved_method,
        body=payload,
        headers=headers,
        response_type=ResponseType.coerce(response_type),
    )
