"""Tests for settings, tenant conference config and tenant context."""

from __future__ import annotations

import json

import pytest
import structlog
from pydantic import ValidationError

from src.meetups.config import ConferenceConfig, Settings, TenantNotConfiguredError
from src.meetups.core.logging import configure_structlog
from src.meetups.core.tenant import (
    TenantContext,
    get_current_tenant,
    reset_tenant_context,
    set_tenant_context,
)


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("CONFERENCE_TENANTS", raising=False)
        settings = Settings(_env_file=None)
        assert settings.CONFERENCE_TIMEOUT == 10.0
        assert settings.envelope_key == "response"
        assert settings.CONFERENCE_TENANTS == {}

    def test_tenants_from_json_env(self, monkeypatch):
        monkeypatch.setenv(
            "CONFERENCE_TENANTS",
            json.dumps({"guest": {"base_url": "http://bbb.test/bigbluebutton/", "secret": "s"}}),
        )
        settings = Settings(_env_file=None)
        assert settings.get_conference_config("guest") == ConferenceConfig(
            base_url="http://bbb.test/bigbluebutton/", secret="s"
        )

    def test_unknown_tenant_raises(self, settings):
        with pytest.raises(TenantNotConfiguredError, match="nowhere"):
            settings.get_conference_config("nowhere")

    def test_conference_config_is_immutable(self, settings):
        config = settings.get_conference_config("guest")
        with pytest.raises(ValidationError):
            config.secret = "changed"


class TestTenantContext:
    def test_unset_context_raises(self):
        with pytest.raises(RuntimeError, match="not tenant-scoped"):
            get_current_tenant()

    def test_set_and_reset(self):
        ctx = TenantContext(tenant_alias="guest", user_id="u1")
        token = set_tenant_context(ctx)
        try:
            assert get_current_tenant() == ctx
            assert structlog.contextvars.get_contextvars()["tenant"] == "guest"
        finally:
            reset_tenant_context(token)
        assert "tenant" not in structlog.contextvars.get_contextvars()


class TestConfigureStructlog:
    @pytest.mark.parametrize(("environment", "renderer"), [("production", "JSONRenderer"), ("development", "ConsoleRenderer")])
    def test_renderer_follows_environment(self, environment, renderer):
        try:
            configure_structlog(Settings(_env_file=None, ENVIRONMENT=environment))
            processors = structlog.get_config()["processors"]
            assert type(processors[-1]).__name__ == renderer
            assert structlog.contextvars.merge_contextvars in processors
        finally:
            structlog.reset_defaults()

    def test_unknown_level_falls_back_to_info(self):
        try:
            configure_structlog(Settings(_env_file=None, LOG_LEVEL="chatty"))
            assert structlog.stdlib.filter_by_level in structlog.get_config()["processors"]
        finally:
            structlog.reset_defaults()


class TestNestedTenantContext:
    def test_reset_restores_outer_binding(self):
        outer = set_tenant_context(TenantContext(tenant_alias="guest", user_id="u1"))
        try:
            inner = set_tenant_context(TenantContext(tenant_alias="acme", user_id="u2"))
            assert structlog.contextvars.get_contextvars()["tenant"] == "acme"
            reset_tenant_context(inner)
            assert structlog.contextvars.get_contextvars()["tenant"] == "guest"
            assert get_current_tenant().tenant_alias == "guest"
        finally:
            reset_tenant_context(outer)
        assert "tenant" not in structlog.contextvars.get_contextvars()
