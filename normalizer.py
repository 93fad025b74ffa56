#!/usr/bin/env python3
"""
Event Normalizer

Turns a RawRecord from any event source into a canonical Event plus the
ItemMetadata snapshot it was observed with.
"""

from dataclasses import dataclass
from typing import Optional

from models import Event, EventKind, ItemMetadata, RawRecord
from utils_dates import parse_event_date
from utils_markers import find_marker, extract_cycle_label, parse_cycle_label


class RecordParseError(ValueError):
    """Raised when a single raw record cannot be turned into an event"""

    def __init__(self, item_key: str, reason: str):
        super().__init__(f"{item_key or '<no key>'}: {reason}")
        self.item_key = item_key
        self.reason = reason


@dataclass(frozen=True)
class NormalizedRecord:
    """An event and the item snapshot that accompanied it"""
    event: Event
    metadata: ItemMetadata


class EventNormalizer:
    """Validate raw records and convert them into events"""

    def normalize(self, raw: RawRecord) -> Optional[NormalizedRecord]:
        """
        Normalize one raw record.

        Returns:
            NormalizedRecord, or None when the text carries no event marker

        Raises:
            RecordParseError: for a missing item key, an unparseable event or
                              creation date, or an approval without a valid
                              cycle label
        """
        kind = find_marker(raw.free_text)
        if kind is None:
            return None

        item_key = (raw.item_key or '').strip()
        if not item_key:
            raise RecordParseError(item_key, "record has no item key")

        try:
            occurred_at = parse_event_date(raw.event_date_text)
        except ValueError as e:
            raise RecordParseError(item_key, f"event {e}") from e

        fields = raw.metadata_fields or {}
        try:
            created_at = parse_event_date(fields.get('created'))
        except ValueError as e:
            raise RecordParseError(item_key, f"creation {e}") from e

        label_token = raw.cycle_label_text
        if label_token is None:
            label_token = extract_cycle_label(raw.free_text)

        cycle_label = None
        if kind is EventKind.APPROVED:
            try:
                cycle_label = parse_cycle_label(label_token)
            except ValueError as e:
                raise RecordParseError(item_key, f"approval {e}") from e
        elif label_token is not None:
            # Labels on rejections are informational only
            try:
                cycle_label = parse_cycle_label(label_token)
            except ValueError:
                cycle_label = None

        event = Event(item_key=item_key, kind=kind, occurred_at=occurred_at, cycle_label=cycle_label)
        metadata = ItemMetadata(
            item_key=item_key,
            spec_type=fields.get('spec_type', ''),
            status=fields.get('status', ''),
            business_unit=fields.get('business_unit', ''),
            product=fields.get('product', ''),
            created_at=created_at,
        )
        return NormalizedRecord(event=event, metadata=metadata)
