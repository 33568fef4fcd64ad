"""
Timestamp codec shared by every engine: parsing zone-aware ISO-8601 strings,
formatting changepoint/outlier timestamps, and converting to and from the
absolute millisecond instants used to build union timelines.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from engine.exceptions import InvalidParameterError

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MILLISECOND = timedelta(milliseconds=1)

# optional trailing region id, e.g. 2024-01-01T10:00+01:00[Europe/Berlin]
_REGION_RE = re.compile(r"^(?P<stamp>[^\[]+)(?:\[(?P<region>[^\]]+)\])?$")


def parse_timestamp(value: Any) -> datetime:
    """Parse ``value`` into a timezone-aware :class:`datetime`.

    Accepts ``datetime`` instances, ISO-8601 strings (with ``Z``, a numeric
    offset and/or a bracketed region id) and epoch milliseconds.  Naive
    values are interpreted as UTC.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        dt = from_epoch_millis(int(value))
    elif isinstance(value, str):
        dt = _parse_iso(value)
    else:
        raise InvalidParameterError(f"unsupported timestamp: {value!r}")

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _parse_iso(text: str) -> datetime:
    match = _REGION_RE.match(text.strip())
    if not match:
        raise InvalidParameterError(f"unparsable timestamp: {text!r}")

    stamp = match.group("stamp")
    if stamp[-1:] in ("Z", "z"):
        stamp = stamp[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(stamp)
    except ValueError as exc:
        raise InvalidParameterError(f"unparsable timestamp: {text!r}") from exc

    region = match.group("region")
    if region:
        try:
            zone = ZoneInfo(region)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise InvalidParameterError(f"unknown time zone {region!r} in {text!r}") from exc
        dt = dt.replace(tzinfo=zone) if dt.tzinfo is None else dt.astimezone(zone)
    return dt


def format_timestamp(dt: datetime) -> str:
    return parse_timestamp(dt).isoformat()


def to_epoch_millis(value: Any) -> int:
    return (parse_timestamp(value) - EPOCH) // _MILLISECOND


def from_epoch_millis(millis: int) -> datetime:
    return EPOCH + timedelta(milliseconds=int(millis))


def format_instant(millis: int) -> str:
    """UTC instant, seconds always present, milliseconds only when non-zero."""
    dt = from_epoch_millis(millis)
    text = dt.strftime("%Y-%m-%dT%H:%M:%S")
    ms = int(millis) % 1000
    if ms:
        text += f".{ms:03d}"
    return text + "Z"
