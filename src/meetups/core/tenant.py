"""Tenant context for join events.

The TenantContext is passed explicitly to the join flow. It can also be set
as the current context (contextvars) so that log events emitted anywhere in
the call stack carry the tenant alias and acting user.
"""

from __future__ import annotations

import contextvars
from dataclasses import dataclass, field

import structlog


@dataclass(frozen=True)
class TenantContext:
    """Immutable tenant and acting-user context for one operation."""

    tenant_alias: str
    user_id: str
    user_data: dict = field(default_factory=dict, compare=False)


_tenant_context: contextvars.ContextVar[TenantContext] = contextvars.ContextVar("tenant_context")


def get_current_tenant() -> TenantContext:
    """Get the tenant context for the current task.

    Raises RuntimeError if no tenant context has been set.
    """
    try:
        return _tenant_context.get()
    except LookupError:
        raise RuntimeError("No tenant context set -- operation is not tenant-scoped")


def set_tenant_context(ctx: TenantContext) -> contextvars.Token[TenantContext]:
    """Set the tenant context and bind it into structlog. Returns a token for reset."""
    structlog.contextvars.bind_contextvars(tenant=ctx.tenant_alias, user_id=ctx.user_id)
    return _tenant_context.set(ctx)


def reset_tenant_context(token: contextvars.Token[TenantContext]) -> None:
    """Restore the previous tenant context and its structlog binding."""
    _tenant_context.reset(token)
    previous = _tenant_context.get(None)
    if previous is None:
        structlog.contextvars.unbind_contextvars("tenant", "user_id")
    else:
        structlog.contextvars.bind_contextvars(tenant=previous.tenant_alias, user_id=previous.user_id)
