#!/usr/bin/env python3
"""
Metrics Calculator
Derives latency and fiscal buckets from reconstructed approval histories
"""

import dataclasses
import math
from datetime import date

from config import WEEKS_PER_QUARTER, LATE_CYCLE_LABEL_CUTOFF
from models import ApprovalMetrics, SummaryRecord
from utils_dates import days_between, shift_months


def latency_days(created_at: date, approved_at: date) -> int:
    """Whole days from creation to approval; negative values are kept as-is"""
    return days_between(created_at, approved_at)


def quarter_for_cycle(cycle_label: int) -> int:
    """Map a week label onto one of four 13.04-week quarters"""
    return math.floor(cycle_label / WEEKS_PER_QUARTER) + 1


def first_approval_year(approved_at: date, cycle_label: int) -> int:
    """
    Year the first approval is reported under.

    Labels above the cutoff take the year of the approval date minus one
    calendar month (week 52 specs approved in January count for the previous
    year); all others take the approval date's own year.
    """
    if cycle_label > LATE_CYCLE_LABEL_CUTOFF:
        return shift_months(approved_at, -1).year
    return approved_at.year


def compute_metrics(summary: SummaryRecord) -> ApprovalMetrics:
    first = summary.first_approval
    rework = summary.rework_event

    return ApprovalMetrics(
        latency_days=latency_days(summary.metadata.created_at, first.occurred_at),
        quarter=quarter_for_cycle(first.cycle_label),
        first_approval_year=first_approval_year(first.occurred_at, first.cycle_label),
        rework_quarter=quarter_for_cycle(rework.cycle_label) if rework else None,
        rework_year=rework.occurred_at.year if rework else None,
    )


def enrich(summary: SummaryRecord) -> SummaryRecord:
    """Return a copy of the summary with its metrics attached"""
    return dataclasses.replace(summary, metrics=compute_metrics(summary))
