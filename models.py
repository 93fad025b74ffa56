"""
Data containers for approval event reconstruction
Shared by the normalizer, aggregator, metrics calculator and report generator
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Optional, Tuple


class EventKind(Enum):
    """Workflow outcome recorded against a tracked item"""
    APPROVED = 'Approved'
    REJECTED = 'Rejected'


@dataclass(frozen=True)
class RawRecord:
    """Unvalidated event candidate as handed over by an event source"""
    item_key: str
    free_text: str
    event_date_text: str
    cycle_label_text: Optional[str] = None
    metadata_fields: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Event:
    """A single approval or rejection of an item"""
    item_key: str
    kind: EventKind
    occurred_at: date
    cycle_label: Optional[int] = None  # Always set on approvals

    @property
    def is_approval(self) -> bool:
        return self.kind is EventKind.APPROVED


@dataclass(frozen=True)
class ItemMetadata:
    """Snapshot of the tracked item; the first one seen for a key wins"""
    item_key: str
    spec_type: str
    status: str
    business_unit: str
    product: str
    created_at: date


@dataclass(frozen=True)
class ApprovalMetrics:
    """Derived latency and calendar buckets for a summarized item"""
    latency_days: int
    quarter: int
    first_approval_year: int
    rework_quarter: Optional[int] = None
    rework_year: Optional[int] = None


@dataclass(frozen=True)
class SummaryRecord:
    """Per-item reconstruction of the approval history"""
    metadata: ItemMetadata
    first_approval: Event
    rejections_before_first_approval: int
    subsequent_approval_events: Tuple[Event, ...] = ()
    reworked: bool = False
    rework_event: Optional[Event] = None
    rework_subsequent_approvals: int = 0
    # Attached by metrics.enrich()
    metrics: Optional[ApprovalMetrics] = None

    @property
    def item_key(self) -> str:
        return self.metadata.item_key

    @property
    def subsequent_approvals(self) -> Tuple[int, ...]:
        """Cycle labels of every approval after the first, in order"""
        return tuple(event.cycle_label for event in self.subsequent_approval_events)

    @property
    def approved_first_time(self) -> bool:
        return self.rejections_before_first_approval == 0
