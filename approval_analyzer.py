#!/usr/bin/env python3
"""
Approval history analyzer

Drives one run of the pipeline: raw records from an event source are
normalized, grouped per item, reconstructed into summaries and enriched with
latency/quarter metrics. Per-record problems are reported and skipped; only a
failing event source stops the run.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from aggregator import EventAggregator
from config import REWORK_THRESHOLD_MONTHS
from event_source import EventSource
from metrics import enrich
from models import RawRecord, SummaryRecord
from normalizer import EventNormalizer, RecordParseError
from status_display import StatusDisplay


@dataclass
class AnalysisResult:
    """Outcome of one analyzer run"""
    summaries: List[SummaryRecord] = field(default_factory=list)
    records_seen: int = 0
    events_accepted: int = 0
    records_ignored: int = 0
    parse_failures: List[RecordParseError] = field(default_factory=list)
    items_seen: int = 0

    @property
    def items_without_approval(self) -> int:
        return self.items_seen - len(self.summaries)


class ApprovalAnalyzer:
    """Reconstruct approval histories from an event source"""

    def __init__(self, source: EventSource, status: Optional[StatusDisplay] = None,
                 rework_threshold_months: int = REWORK_THRESHOLD_MONTHS):
        self.source = source
        self.status = status or StatusDisplay()
        self.normalizer = EventNormalizer()
        self.rework_threshold_months = rework_threshold_months

    def analyze_records(self, records: Iterable[RawRecord]) -> AnalysisResult:
        """Normalize, aggregate and enrich an iterable of raw records"""
        result = AnalysisResult()
        aggregator = EventAggregator(self.rework_threshold_months)

        for raw in records:
            result.records_seen += 1
            try:
                normalized = self.normalizer.normalize(raw)
            except RecordParseError as e:
                result.parse_failures.append(e)
                self.status.warning(f"Skipping record {e}")
                continue

            if normalized is None:
                result.records_ignored += 1
                continue

            aggregator.add(normalized.event, normalized.metadata)
            result.events_accepted += 1

        result.items_seen = aggregator.item_count
        result.summaries = [enrich(summary) for summary in aggregator.summaries()]
        return result

    def run(self) -> AnalysisResult:
        """
        Fetch everything from the source and analyze it.

        Raises:
            EventSourceError: if the source cannot deliver its records
        """
        self.status.print(f"🔄 Reading events from {self.source.description}...")
        result = self.analyze_records(self.source.fetch_all_raw_records())

        self.status.print(
            f"✅ {result.events_accepted} events across {result.items_seen} items "
            f"({len(result.parse_failures)} records skipped, "
            f"{result.items_without_approval} items never approved)",
            style="green"
        )
        return result
