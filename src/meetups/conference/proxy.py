"""Async call proxy for the conferencing server's XML API.

Provides ConferenceProxy, which builds a request, sends it over a fresh
httpx.AsyncClient (one connection per call, no reuse), accumulates the
streamed body and decodes it. Every outcome, success or failure, comes back
as a single CallResult; nothing is retried and nothing is raised for
transport or decode problems.

Each call honours a deadline (``timeout`` seconds, covering connect through
the last body byte) and an optional cancellation token (an asyncio.Event).
Either one firing closes the connection and yields a TransportError.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
import structlog

from src.meetups.conference.decoder import DEFAULT_ENVELOPE_KEY, decode_body
from src.meetups.conference.errors import (
    ConstructionError,
    DecodeError,
    ErrorKind,
    TransportError,
)
from src.meetups.conference.request import (
    HttpMethod,
    OutboundRequest,
    ResponseType,
    build_request,
)
from src.meetups.conference.result import CallResult

logger = structlog.get_logger(__name__)

ResultCallback = Callable[[CallResult[Any]], None]

_UNSET: Any = object()


def _transport_error(exc: httpx.RequestError, url: str) -> TransportError:
    """Classify an httpx failure into a TransportError."""
    if isinstance(exc, httpx.TimeoutException):
        kind = ErrorKind.TIMEOUT
    elif isinstance(exc, httpx.ConnectError):
        kind = ErrorKind.CONNECT
    elif isinstance(exc, (httpx.ProtocolError, httpx.DecodingError)):
        kind = ErrorKind.PROTOCOL
    else:
        kind = ErrorKind.NETWORK
    return TransportError(f"Problem with request: {exc!r}", kind, url)


class ConferenceProxy:
    """Client for conferencing server API calls.

    Args:
        timeout: Default per-call deadline in seconds; None disables it.
        envelope_key: Top-level key unwrapped from parsed responses
            (``response`` for the conferencing server); None disables
            unwrapping.
        transport: Optional httpx transport, used by every per-call client.
    """

    def __init__(
        self,
        timeout: float | None = 10.0,
        envelope_key: str | None = DEFAULT_ENVELOPE_KEY,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._envelope_key = envelope_key
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: object, transport: httpx.AsyncBaseTransport | None = None) -> ConferenceProxy:
        """Create a proxy from application settings."""
        return cls(
            timeout=getattr(settings, "CONFERENCE_TIMEOUT", 10.0),
            envelope_key=getattr(settings, "envelope_key", DEFAULT_ENVELOPE_KEY),
            transport=transport,
        )

    def _client(self, timeout: float | None) -> httpx.AsyncClient:
        """Create a new httpx client for a single call."""
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)

    # ── Public entry points ─────────────────────────────────────────────

    async def simple_call(
        self,
        url: str,
        *,
        timeout: float | None = _UNSET,
        cancel_event: asyncio.Event | None = None,
        on_result: ResultCallback | None = None,
    ) -> CallResult[Any]:
        """GET ``url`` and parse the body as XML."""
        return await self.extended_call(
            url,
            ResponseType.PARSED,
            HttpMethod.GET,
            timeout=timeout,
            cancel_event=cancel_event,
            on_result=on_result,
        )

    async def extended_call(
        self,
        url: str,
        response_type: ResponseType | str | None = ResponseType.PARSED,
        method: HttpMethod | str | None = None,
        body: bytes | str | None = None,
        content_type: str | None = None,
        *,
        timeout: float | None = _UNSET,
        cancel_event: asyncio.Event | None = None,
        on_result: ResultCallback | None = None,
    ) -> CallResult[Any]:
        """Issue a call with full control over method, body and decoding.

        Args:
            url: Absolute URL of the API call.
            response_type: ``raw`` for the body text, anything else to parse
                it as XML.
            method: ``post`` for POST, anything else for GET.
            body: POST payload.
            content_type: POST content type, ``text/xml`` by default.
            timeout: Deadline in seconds, overriding the proxy default.
            cancel_event: Setting this event abandons the call.
            on_result: Invoked exactly once with the result before it is
                returned.

        Returns:
            CallResult holding the decoded response or a ProxyError.
        """
        try:
            request = build_request(url, response_type, method, body, content_type)
        except ConstructionError as exc:
            logger.warning("conference.request_invalid", url=url, error=str(exc))
            result: CallResult[Any] = CallResult.failure(exc)
        else:
            result = await self.execute(request, timeout=timeout, cancel_event=cancel_event)

        if on_result is not None:
            on_result(result)
        return result

    async def execute(
        self,
        request: OutboundRequest,
        *,
        timeout: float | None = _UNSET,
        cancel_event: asyncio.Event | None = None,
    ) -> CallResult[Any]:
        """Send a prepared request and decode its response."""
        deadline = self._timeout if timeout is _UNSET else timeout

        if cancel_event is not None and cancel_event.is_set():
            return CallResult.failure(
                TransportError("Call cancelled before it was sent", ErrorKind.CANCELLED, request.url)
            )

        try:
            async with asyncio.timeout(deadline):
                body, status_code = await self._with_cancellation(
                    self._send(request, deadline), cancel_event, request.url
                )
        except TimeoutError:
            error = TransportError(
                f"No complete response within {deadline}s", ErrorKind.TIMEOUT, request.url
            )
            self._log_transport_failure(request, error)
            return CallResult.failure(error)
        except ConstructionError as exc:
            logger.warning("conference.request_invalid", url=request.url, error=str(exc))
            return CallResult.failure(exc)
        except TransportError as exc:
            self._log_transport_failure(request, exc)
            return CallResult.failure(exc)

        try:
            value = decode_body(body, request.response_type, self._envelope_key)
        except DecodeError as exc:
            exc.url = request.url
            logger.warning(
                "conference.decode_failed",
                url=request.url,
                status_code=status_code,
                error=str(exc),
            )
            return CallResult.failure(exc, status_code=status_code)

        logger.debug(
            "conference.call_completed",
            url=request.url,
            method=request.method.value,
            status_code=status_code,
            response_type=request.response_type.value,
            size=len(body),
        )
        return CallResult.success(value, status_code=status_code)

    # ── Transport ───────────────────────────────────────────────────────

    async def _send(self, request: OutboundRequest, timeout: float | None) -> tuple[bytes, int]:
        """Perform the HTTP exchange and return (body, status)."""
        buffer = bytearray()
        try:
            async with self._client(timeout) as client:
                async with client.stream(
                    request.method.value,
                    request.target,
                    content=request.body,
                    headers=request.headers,
                ) as response:
                    async for chunk in response.aiter_bytes():
                        buffer.extend(chunk)
                    return bytes(buffer), response.status_code
        except httpx.InvalidURL as exc:
            raise ConstructionError(f"Invalid URL: {exc}", url=request.url) from exc
        except httpx.RequestError as exc:
            raise _transport_error(exc, request.url) from exc

    @staticmethod
    async def _with_cancellation(
        operation: Awaitable[tuple[bytes, int]],
        cancel_event: asyncio.Event | None,
        url: str,
    ) -> tuple[bytes, int]:
        """Await ``operation`` unless ``cancel_event`` is set first."""
        if cancel_event is None:
            return await operation

        send = asyncio.ensure_future(operation)
        cancelled = asyncio.ensure_future(cancel_event.wait())
        try:
            await asyncio.wait({send, cancelled}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (send, cancelled):
                if not task.done():
                    task.cancel()
                    with contextlib.suppress(asyncio.CancelledError):
                        await task

        if send.cancelled():
            raise TransportError("Call cancelled", ErrorKind.CANCELLED, url)
        return send.result()

    @staticmethod
    def _log_transport_failure(request: OutboundRequest, error: TransportError) -> None:
        logger.info(
            "conference.transport_failed",
            url=request.url,
            method=request.method.value,
            kind=error.kind.value,
            error=str(error),
        )
