#!/usr/bin/env python3
"""
Event Aggregator

Groups events by item and reconstructs each item's approval history in a
single chronological pass:

    AwaitingFirstApproval --Approved--> HasFirstApproval --Approved (> 3 months)--> Reworked

Rejections never change state; they only feed the pending rejection counter,
which is captured by the first approval and reset by every approval.
"""

from typing import Dict, Iterable, List, Optional

from config import REWORK_THRESHOLD_MONTHS
from models import Event, ItemMetadata, SummaryRecord
from utils_dates import is_more_than_months_after


def reconstruct_item(events: Iterable[Event], metadata: ItemMetadata,
                     rework_threshold_months: int = REWORK_THRESHOLD_MONTHS) -> Optional[SummaryRecord]:
    """
    Fold one item's events into a SummaryRecord.

    Args:
        events: All events for the item, in encounter order
        metadata: The item's metadata snapshot
        rework_threshold_months: Calendar months after the first approval
                                 beyond which a later approval is rework

    Returns:
        SummaryRecord, or None if the item was never approved
    """
    # sorted() is stable, so same-day events keep their encounter order
    ordered = sorted(events, key=lambda event: event.occurred_at)

    pending_rejections = 0
    first_approval: Optional[Event] = None
    rejections_before_first = 0
    subsequent: List[Event] = []

    for event in ordered:
        if not event.is_approval:
            pending_rejections += 1
            continue

        if first_approval is None:
            first_approval = event
            rejections_before_first = pending_rejections
        else:
            subsequent.append(event)
        # Rejections between later approvals are not reported
        pending_rejections = 0

    if first_approval is None:
        return None

    rework_event: Optional[Event] = None
    rework_subsequent = 0
    for event in subsequent:
        if rework_event is not None:
            rework_subsequent += 1
        elif is_more_than_months_after(event.occurred_at, first_approval.occurred_at, rework_threshold_months):
            rework_event = event

    return SummaryRecord(
        metadata=metadata,
        first_approval=first_approval,
        rejections_before_first_approval=rejections_before_first,
        subsequent_approval_events=tuple(subsequent),
        reworked=rework_event is not None,
        rework_event=rework_event,
        rework_subsequent_approvals=rework_subsequent,
    )


class EventAggregator:
    """Collect events per item key and reduce them to summaries"""

    def __init__(self, rework_threshold_months: int = REWORK_THRESHOLD_MONTHS):
        self.rework_threshold_months = rework_threshold_months
        self._events: Dict[str, List[Event]] = {}
        self._metadata: Dict[str, ItemMetadata] = {}

    def add(self, event: Event, metadata: ItemMetadata):
        """Record an event; the first metadata seen for its item is kept"""
        self._events.setdefault(event.item_key, []).append(event)
        self._metadata.setdefault(event.item_key, metadata)

    @property
    def item_count(self) -> int:
        return len(self._events)

    @property
    def event_count(self) -> int:
        return sum(len(events) for events in self._events.values())

    def summaries(self) -> List[SummaryRecord]:
        """
        Reconstruct every item that has at least one approval.

        Items are independent of each other; the result follows first
        encounter order of item keys.
        """
        results = []
        for item_key, events in self._events.items():
            summary = reconstruct_item(events, self._metadata[item_key], self.rework_threshold_months)
            if summary is not None:
                results.append(summary)
        return results
