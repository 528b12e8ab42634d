# -*- coding: utf-8 -*-
"""Helpers for the fixed-width date ("YYYY-MM-DD") and time ("HH:MM") strings."""
from __future__ import annotations

import re
import typing as t
from datetime import date, datetime, time

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def is_valid_time(value: t.Any) -> bool:
    """True for zero-padded 24h "HH:MM" strings."""
    return isinstance(value, str) and bool(_TIME_RE.match(value))


def parse_date(value: str) -> t.Optional[date]:
    """Parses "YYYY-MM-DD", returning None when the string is not a real calendar day."""
    if not isinstance(value, str) or not _DATE_RE.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def combine(day: str, hhmm: str) -> t.Optional[datetime]:
    """Joins a date and a time of day into a naive datetime, or None if either is malformed."""
    parsed_day = parse_date(day)
    if parsed_day is None or not is_valid_time(hhmm):
        return None
    hours, minutes = hhmm.split(":")
    return datetime.combine(parsed_day, time(int(hours), int(minutes)))


def to_minutes(hhmm: str) -> int:
    hours, minutes = hhmm.split(":")
    return int(hours) * 60 + int(minutes)


def duration_minutes(start_time: str, end_time: str) -> int:
    """Length of the slot in minutes; zero when the slot is empty, inverted or malformed."""
    if not (is_valid_time(start_time) and is_valid_time(end_time)):
        return 0
    if start_time >= end_time:
        return 0
    return to_minutes(end_time) - to_minutes(start_time)
