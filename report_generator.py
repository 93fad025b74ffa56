#!/usr/bin/env python3
"""
Report Generation Module for Approval Latency Analysis
Handles turning summary records into CSV rows and console statistics
Separated from approval_analyzer.py for better modularity
"""

import sys
from typing import Dict, List, Optional, Any, TextIO, Union

import pandas as pd

from config import REPORT_COLUMNS, REWORK_REPORT_COLUMNS, CYCLE_LABEL_PREFIX, LATER_APPROVALS_SEPARATOR
from metrics import compute_metrics
from models import SummaryRecord


def format_cycle_label(label: Optional[int]) -> str:
    """Render a cycle label the way reviewers write it, e.g. 'W7'"""
    return f"{CYCLE_LABEL_PREFIX}{label}" if label is not None else ""


class ReportGenerator:
    """Generates CSV approval reports in the basic or rework flavor"""

    def __init__(self, include_rework: bool = False):
        self.include_rework = include_rework

    @property
    def columns(self) -> List[str]:
        return REWORK_REPORT_COLUMNS if self.include_rework else REPORT_COLUMNS

    def build_row(self, summary: SummaryRecord) -> Dict[str, Any]:
        """Map one summary record onto the report columns"""
        metrics = summary.metrics or compute_metrics(summary)
        metadata = summary.metadata
        first = summary.first_approval

        row = {
            'Type': metadata.spec_type,
            'Issue': metadata.item_key,
            'Status': metadata.status,
            'BU': metadata.business_unit,
            'Product': metadata.product,
            'Year': metrics.first_approval_year,
            'Week': first.cycle_label,
            'Later Approved Count': len(summary.subsequent_approvals),
            'Later Approved Weeks': LATER_APPROVALS_SEPARATOR.join(
                format_cycle_label(label) for label in summary.subsequent_approvals
            ),
            'Latency(Days)': metrics.latency_days,
            'Rejected prior to 1st approval': summary.rejections_before_first_approval,
        }

        if self.include_rework:
            rework = summary.rework_event
            row.update({
                'Approved First Time': 'Yes' if summary.approved_first_time else 'No',
                'Quarter': metrics.quarter,
                'Rework Week': rework.cycle_label if rework else '',
                'Rework Quarter': metrics.rework_quarter if rework else '',
                'Rework Year': metrics.rework_year if rework else '',
                'Rework Later Approvals': summary.rework_subsequent_approvals if rework else '',
            })

        return row

    def to_dataframe(self, summaries: List[SummaryRecord]) -> pd.DataFrame:
        """Tabulate summaries, one row per item"""
        rows = [self.build_row(summary) for summary in summaries]
        return pd.DataFrame(rows, columns=self.columns, dtype=object)

    def write_csv(self, summaries: List[SummaryRecord], output: Union[str, TextIO, None] = None) -> pd.DataFrame:
        """
        Write the report as CSV.

        Args:
            summaries: Enriched summary records
            output: File path, open text stream, or None for stdout

        Returns:
            The DataFrame that was written
        """
        df = self.to_dataframe(summaries)
        df.to_csv(output if output is not None else sys.stdout, index=False)
        return df

    def generate_statistics(self, summaries: List[SummaryRecord]) -> Dict[str, Any]:
        """Headline numbers for the operator summary"""
        if not summaries:
            return {
                'items': 0,
                'approved_first_time': 0,
                'reworked': 0,
                'median_latency_days': None,
            }

        latencies = pd.Series([(s.metrics or compute_metrics(s)).latency_days for s in summaries])
        return {
            'items': len(summaries),
            'approved_first_time': sum(1 for s in summaries if s.approved_first_time),
            'reworked': sum(1 for s in summaries if s.reworked),
            'median_latency_days': float(latencies.median()),
        }

    def generate_summary_lines(self, summaries: List[SummaryRecord]) -> List[str]:
        """Human readable statistics block"""
        stats = self.generate_statistics(summaries)
        if not stats['items']:
            return ["📭 No approved items to report"]

        first_time_pct = stats['approved_first_time'] / stats['items'] * 100
        lines = [
            f"📊 Items approved: {stats['items']}",
            f"✅ Approved first time: {stats['approved_first_time']} ({first_time_pct:.1f}%)",
            f"⏱️  Median latency: {stats['median_latency_days']:.1f} days",
        ]
        if self.include_rework:
            lines.append(f"🔁 Reworked: {stats['reworked']}")
        return lines
