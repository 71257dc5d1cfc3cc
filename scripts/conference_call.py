#!/usr/bin/env python3
"""CLI script to issue one call against a conferencing server.

Usage:
    python scripts/conference_call.py http://bbb.example.com/bigbluebutton/api/getMeetings?checksum=...
    python scripts/conference_call.py --raw --method post --data @create.xml http://bbb.example.com/api/create
    python scripts/conference_call.py --meeting-id --tenant guest --group g:guest:abc

Reads CONFERENCE_* settings from environment or .env file. Prints the decoded
response as JSON (or raw text with --raw); exits 1 on any call failure.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys

# Ensure project root is on sys.path so we can import src.meetups
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from dotenv import load_dotenv  # noqa: E402

# Load .env from project root
load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))


def _read_data(value: str | None) -> str | None:
    if value and value.startswith("@"):
        with open(value[1:], encoding="utf-8") as f:
            return f.read()
    return value


async def call(url: str, raw: bool, method: str, data: str | None, content_type: str | None, timeout: float | None) -> int:
    """Issue the call and print its result."""
    from src.meetups.conference.proxy import ConferenceProxy
    from src.meetups.config import get_settings

    proxy = ConferenceProxy.from_settings(get_settings())
    result = await proxy.extended_call(
        url,
        "raw" if raw else "parsed",
        method,
        data,
        content_type,
        timeout=timeout if timeout is not None else get_settings().CONFERENCE_TIMEOUT,
    )
    if not result.ok:
        print(f"Call failed ({result.error.kind.value}): {result.error}", file=sys.stderr)
        return 1

    if raw:
        print(result.value)
    else:
        print(json.dumps(result.value, indent=2, ensure_ascii=False))
    return 0


def show_meeting_id(tenant: str, group: str) -> int:
    from src.meetups.conference.identity import derive_meeting_id
    from src.meetups.config import TenantNotConfiguredError, get_settings

    try:
        config = get_settings().get_conference_config(tenant)
    except TenantNotConfiguredError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    print(derive_meeting_id(group, config.secret))
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Call a conferencing server API endpoint")
    parser.add_argument("url", nargs="?", help="Absolute API URL")
    parser.add_argument("--raw", action="store_true", help="Print the body as-is instead of parsing XML")
    parser.add_argument("--method", default="get", help="'post' for POST, anything else for GET")
    parser.add_argument("--data", default=None, help="POST body, or @file to read it from a file")
    parser.add_argument("--content-type", default=None, help="POST content type (default: text/xml)")
    parser.add_argument("--timeout", type=float, default=None, help="Deadline in seconds")
    parser.add_argument("--meeting-id", action="store_true", help="Print a group's meeting identifier and exit")
    parser.add_argument("--tenant", default=None, help="Tenant alias (with --meeting-id)")
    parser.add_argument("--group", default=None, help="Group id (with --meeting-id)")
    args = parser.parse_args()

    from src.meetups.core.logging import configure_structlog

    configure_structlog()

    if args.meeting_id:
        if not (args.tenant and args.group):
            parser.error("--meeting-id requires --tenant and --group")
        sys.exit(show_meeting_id(args.tenant, args.group))

    if not args.url:
        parser.error("url is required")

    sys.exit(asyncio.run(call(args.url, args.raw, args.method, _read_data(args.data), args.content_type, args.timeout)))


if __name__ == "__main__":
    main()
