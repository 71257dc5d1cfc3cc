"""Conferencing server access -- request building, async call proxy,
XML response decoding and meeting identifier derivation.
"""

from src.meetups.conference.errors import (
    ConstructionError,
    DecodeError,
    ErrorKind,
    ProxyError,
    TransportError,
)
from src.meetups.conference.identity import derive_meeting_id
from src.meetups.conference.proxy import ConferenceProxy
from src.meetups.conference.request import HttpMethod, OutboundRequest, ResponseType, build_request
from src.meetups.conference.result import CallResult

__all__ = [
    "CallResult",
    "ConferenceProxy",
    "ConstructionError",
    "DecodeError",
    "ErrorKind",
    "HttpMethod",
    "OutboundRequest",
    "ProxyError",
    "ResponseType",
    "TransportError",
    "build_request",
    "derive_meeting_id",
]
