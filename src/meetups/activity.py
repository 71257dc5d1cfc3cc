"""Activity model for meetup joins.

An ActivitySeed describes one "user joined meetup" event as handed to the
platform's activity stream: an actor resource (the user), an object resource
(the meetup), a verb and a publish timestamp in epoch milliseconds. The
activity stream later asks for the persistent ``meetup`` entity through
``produce_meetup_entity``.
"""

from __future__ import annotations

from typing import Any, Protocol

import structlog
from pydantic import BaseModel, Field

from src.meetups.schemas import Meetup, Visibility

logger = structlog.get_logger(__name__)

ACTIVITY_MEETUP_JOIN = "meetup-join"
VERB_POST = "post"

RESOURCE_USER = "user"
RESOURCE_MEETUP = "meetup"


class ActivitySeedResource(BaseModel):
    """A resource (actor or object) taking part in an activity."""

    resource_type: str
    resource_id: str
    resource_data: dict[str, Any] = Field(default_factory=dict)


class ActivitySeed(BaseModel):
    """Everything the activity stream needs to record one activity."""

    activity_type: str
    published: int = Field(description="Epoch milliseconds")
    verb: str
    actor: ActivitySeedResource
    object: ActivitySeedResource


class ActivityEntity(BaseModel):
    """Persistent activity entity stored with the activity."""

    object_type: str
    id: str
    visibility: Visibility
    data: dict[str, Any] = Field(default_factory=dict)


class MeetupLookup(Protocol):
    async def get_meetup(self, meeting_id: str) -> Meetup: ...


def create_meetup_entity(meetup: Meetup) -> ActivityEntity:
    """Build the persistent ``meetup`` entity for a meetup record."""
    return ActivityEntity(
        object_type=RESOURCE_MEETUP,
        id=meetup.id,
        visibility=meetup.visibility,
        data={"meetup": meetup.model_dump(mode="json")},
    )


async def produce_meetup_entity(resource: ActivitySeedResource, store: MeetupLookup) -> ActivityEntity:
    """Produce the persistent entity for a meetup activity resource.

    Uses the meetup carried in the resource data when present; otherwise it
    is fetched from the store and published as public. Store errors
    propagate to the caller.
    """
    carried = resource.resource_data.get("meetup")
    if carried is not None:
        meetup = carried if isinstance(carried, Meetup) else Meetup.model_validate(carried)
        return create_meetup_entity(meetup)

    meetup = await store.get_meetup(resource.resource_id)
    meetup = meetup.model_copy(update={"visibility": Visibility.PUBLIC})
    logger.debug("activity.meetup_entity_fetched", meetup_id=meetup.id)
    return create_meetup_entity(meetup)
