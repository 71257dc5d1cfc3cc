"""Join flow: post a "joined meetup" activity when a user joins a group.

For each join event the handler looks up the tenant's conferencing server
config, derives the group's meeting identifier, gets or creates the meetup
record for it, and posts a ``meetup-join`` activity. Collaborators (config
provider, meetup store, activity sink) are injected.

A failed meetup lookup or activity post raises MeetupJoinError and no
activity is posted; callers decide whether the user-facing join proceeds.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Protocol

import structlog

from src.meetups.activity import (
    ACTIVITY_MEETUP_JOIN,
    RESOURCE_MEETUP,
    RESOURCE_USER,
    VERB_POST,
    ActivitySeed,
    ActivitySeedResource,
)
from src.meetups.conference.identity import derive_meeting_id
from src.meetups.config import ConferenceConfig
from src.meetups.core.tenant import TenantContext, reset_tenant_context, set_tenant_context
from src.meetups.schemas import Group, Meetup

logger = structlog.get_logger(__name__)


# -- Collaborators ------------------------------------------------------------


class ConferenceConfigProvider(Protocol):
    def get_conference_config(self, tenant_alias: str) -> ConferenceConfig: ...


class MeetupStore(Protocol):
    async def get_or_create_meetup(self, meeting_id: str, display_name: str) -> Meetup: ...


class ActivitySink(Protocol):
    async def post_activity(self, seed: ActivitySeed) -> None: ...


# -- Exceptions ---------------------------------------------------------------


class MeetupJoinError(Exception):
    """Raised when a join event could not be recorded.

    Attributes:
        group_id: The group being joined.
        meeting_id: The derived meeting identifier.
        stage: ``lookup`` (meetup store) or ``post`` (activity sink).
        original_error: The underlying exception.
    """

    def __init__(self, group_id: str, meeting_id: str, stage: str, original_error: Exception) -> None:
        self.group_id = group_id
        self.meeting_id = meeting_id
        self.stage = stage
        self.original_error = original_error
        super().__init__(
            f"Join of group '{group_id}' failed during {stage}: {original_error}"
        )


# -- Handler ------------------------------------------------------------------


def _epoch_millis() -> int:
    return int(time.time() * 1000)


class MeetupJoinHandler:
    """Records meetup-join activities for group join events.

    Args:
        config_provider: Resolves a tenant alias to its ConferenceConfig.
        store: Meetup store with get-or-create semantics.
        sink: Receives the activity seed.
        clock: Returns the publish timestamp in epoch milliseconds.
    """

    def __init__(
        self,
        config_provider: ConferenceConfigProvider,
        store: MeetupStore,
        sink: ActivitySink,
        clock: Callable[[], int] = _epoch_millis,
    ) -> None:
        self._config_provider = config_provider
        self._store = store
        self._sink = sink
        self._clock = clock

    def meeting_id_for(self, tenant_alias: str, group_id: str) -> str:
        """Derive the meeting identifier of a group within a tenant.

        Raises:
            TenantNotConfiguredError: If the tenant has no conference config.
        """
        config = self._config_provider.get_conference_config(tenant_alias)
        return derive_meeting_id(group_id, config.secret)

    async def handle_join(self, ctx: TenantContext, group: Group) -> ActivitySeed:
        """Record that ``ctx.user_id`` joined the meetup of ``group``.

        Returns:
            The posted activity seed.

        Raises:
            TenantNotConfiguredError: If the tenant has no conference config.
            MeetupJoinError: If the meetup lookup or the activity post fails.
        """
        meeting_id = self.meeting_id_for(ctx.tenant_alias, group.id)

        # Store, sink and proxy log events emitted during the join carry the tenant
        token = set_tenant_context(ctx)
        try:
            return await self._record_join(ctx, group, meeting_id)
        finally:
            reset_tenant_context(token)

    async def _record_join(self, ctx: TenantContext, group: Group, meeting_id: str) -> ActivitySeed:
        log = logger.bind(group_id=group.id, meeting_id=meeting_id)

        try:
            meetup = await self._store.get_or_create_meetup(meeting_id, group.display_name)
        except Exception as exc:
            log.error("meetup.lookup_failed", error=str(exc))
            raise MeetupJoinError(group.id, meeting_id, "lookup", exc) from exc

        meetup = meetup.model_copy(update={"display_name": group.display_name})

        seed = ActivitySeed(
            activity_type=ACTIVITY_MEETUP_JOIN,
            published=self._clock(),
            verb=VERB_POST,
            actor=ActivitySeedResource(
                resource_type=RESOURCE_USER,
                resource_id=ctx.user_id,
                resource_data={"user": ctx.user_data},
            ),
            object=ActivitySeedResource(
                resource_type=RESOURCE_MEETUP,
                resource_id=meetup.id,
                resource_data={"meetup": meetup.model_dump(mode="json")},
            ),
        )

        try:
            await self._sink.post_activity(seed)
        except Exception as exc:
            log.error("meetup.activity_post_failed", error=str(exc))
            raise MeetupJoinError(group.id, meeting_id, "post", exc) from exc

        log.info("meetup.joined")
        return seed
