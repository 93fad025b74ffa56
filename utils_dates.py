#!/usr/bin/env python3
"""
Shared date utilities for approval event analysis
Used by normalizer.py, aggregator.py, metrics.py and the event sources
"""

import re
from datetime import date, datetime
from typing import Iterable, Optional

import pandas as pd

from config import EVENT_DATE_FORMATS


_ISO_TIMESTAMP_RE = re.compile(r'^(\d{4}-\d{2}-\d{2})[T ]')


def parse_event_date(date_str: Optional[str], formats: Iterable[str] = EVENT_DATE_FORMATS) -> date:
    """
    Parse an event or creation date.

    Args:
        date_str: "10/Jan/22" style export dates, plain "2022-01-10" dates or
                  Jira timestamps like "2022-01-10T15:25:13.000+0000"
        formats: strptime formats to try in order

    Returns:
        Calendar date (time of day and timezone are dropped)

    Raises:
        ValueError: if no format matches
    """
    if date_str is None or not str(date_str).strip():
        raise ValueError("empty date")

    value = str(date_str).strip()

    # Timestamps carry the calendar date in their first 10 characters
    iso_match = _ISO_TIMESTAMP_RE.match(value)
    if iso_match:
        value = iso_match.group(1)

    for fmt in formats:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue

    raise ValueError(f"date {date_str!r} not parsed")


def try_parse_event_date(date_str: Optional[str]) -> Optional[date]:
    """Parse a date, returning None instead of raising"""
    try:
        return parse_event_date(date_str)
    except ValueError:
        return None


def shift_months(value: date, months: int) -> date:
    """
    Move a date by whole calendar months.

    Day-of-month is clamped to the end of the target month, so
    30 Nov + 3 months is 28/29 Feb and 31 Mar - 1 month is 28/29 Feb.
    """
    return (pd.Timestamp(value) + pd.DateOffset(months=months)).date()


def is_more_than_months_after(later: date, earlier: date, months: int) -> bool:
    """Check if `later` falls strictly after `earlier` plus `months` calendar months"""
    return later > shift_months(earlier, months)


def days_between(start: date, end: date) -> int:
    """Whole days from start to end; negative when end precedes start"""
    return (end - start).days
