"""Shared fixtures for conference proxy and join flow tests.

Provides:
- A recording httpx.MockTransport factory for proxy tests
- Settings with two configured tenants (guest, acme)
- A tenant context for join events
"""

from __future__ import annotations

import inspect
from collections.abc import Callable

import httpx
import pytest

from src.meetups.config import ConferenceConfig, Settings
from src.meetups.core.tenant import TenantContext


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it handled."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []

        async def _record(request: httpx.Request) -> httpx.Response:
            await request.aread()
            self.requests.append(request)
            response = handler(request)
            if inspect.isawaitable(response):
                response = await response
            return response

        super().__init__(_record)


@pytest.fixture
def make_transport() -> Callable[..., RecordingTransport]:
    """Build a RecordingTransport answering every request with ``handler``."""
    return RecordingTransport


@pytest.fixture
def xml_transport(make_transport) -> Callable[[str], RecordingTransport]:
    """Transport that answers every request with a fixed XML body."""

    def _factory(body: str, status_code: int = 200) -> RecordingTransport:
        return make_transport(
            lambda request: httpx.Response(
                status_code, text=body, headers={"Content-Type": "text/xml; charset=utf-8"}
            )
        )

    return _factory


@pytest.fixture
def settings() -> Settings:
    return Settings(
        CONFERENCE_TENANTS={
            "guest": ConferenceConfig(base_url="http://bbb.guest.test/bigbluebutton/", secret="guest-secret"),
            "acme": ConferenceConfig(base_url="http://bbb.acme.test/bigbluebutton/", secret="acme-secret"),
        },
    )


@pytest.fixture
def tenant_ctx() -> TenantContext:
    return TenantContext(tenant_alias="guest", user_id="u:guest:alice", user_data={"displayName": "Alice"})
