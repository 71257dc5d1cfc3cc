"""Pydantic v2 schemas for groups, meetups and join activities."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class Visibility(str, Enum):
    PUBLIC = "public"
    LOGGEDIN = "loggedin"
    PRIVATE = "private"


class Group(BaseModel):
    """The platform group a user joins."""

    id: str
    display_name: str
    visibility: Visibility = Visibility.PUBLIC


class Meetup(BaseModel):
    """Platform-side record of a conferencing server meeting.

    Keyed by the meeting identifier derived from the group id and the
    tenant's shared secret.
    """

    id: str = Field(description="Meeting identifier")
    display_name: str | None = None
    visibility: Visibility = Visibility.PUBLIC
    metadata: dict[str, Any] = Field(default_factory=dict)
