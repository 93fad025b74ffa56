#!/usr/bin/env python3
"""
Bulk tabular event source

Reads a pre-exported issue spreadsheet (CSV, one issue per row, comment cells
spread across many columns) and yields a RawRecord for every cell carrying an
approval or rejection note.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Union

import pandas as pd

from config import DEFAULT_COLUMN_SCHEMA, DEFAULT_TARGET_YEAR
from event_source import EventSource, EventSourceError
from models import RawRecord
from utils_dates import try_parse_event_date
from utils_markers import find_marker, extract_cycle_label, split_first_line


REQUIRED_COLUMNS = ('item_key', 'created')


@dataclass
class ColumnSchema:
    """Maps semantic item fields onto zero-based column positions"""
    columns: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_COLUMN_SCHEMA))

    def __post_init__(self):
        missing = [name for name in REQUIRED_COLUMNS if name not in self.columns]
        if missing:
            raise ValueError(f"column schema is missing {', '.join(missing)}")
        negative = [name for name, index in self.columns.items() if index < 0]
        if negative:
            raise ValueError(f"negative column index for {', '.join(negative)}")

    @classmethod
    def with_overrides(cls, overrides: Sequence[str]) -> 'ColumnSchema':
        """
        Build a schema from the defaults plus FIELD=INDEX overrides.

        Raises:
            ValueError: on malformed overrides or unknown field names
        """
        columns = dict(DEFAULT_COLUMN_SCHEMA)
        for override in overrides or []:
            name, sep, index = override.partition('=')
            name = name.strip()
            if not sep or not index.strip().isdigit():
                raise ValueError(f"expected FIELD=INDEX, got {override!r}")
            if name not in DEFAULT_COLUMN_SCHEMA:
                raise ValueError(f"unknown field {name!r} (known: {', '.join(DEFAULT_COLUMN_SCHEMA)})")
            columns[name] = int(index)
        return cls(columns)

    def value(self, row: Sequence[str], name: str) -> str:
        index = self.columns.get(name)
        if index is None or index >= len(row):
            return ''
        cell = row[index]
        return '' if cell is None else str(cell).strip()


class TabularEventSource(EventSource):
    """Scan a spreadsheet export for approval/rejection cells"""

    def __init__(self, path: Union[str, Path], schema: Optional[ColumnSchema] = None,
                 target_year: Optional[int] = DEFAULT_TARGET_YEAR):
        self.path = Path(path)
        self.schema = schema or ColumnSchema()
        self.target_year = target_year
        self.skipped_other_years = 0

    @property
    def description(self) -> str:
        year = f", year {self.target_year}" if self.target_year else ""
        return f"{self.path.name}{year}"

    def _read_rows(self) -> List[List[str]]:
        try:
            df = pd.read_csv(self.path, header=None, dtype=str, keep_default_na=False)
        except pd.errors.EmptyDataError:
            return []
        except (OSError, UnicodeDecodeError, pd.errors.ParserError) as e:
            raise EventSourceError(f"Unable to read {self.path}: {e}") from e
        return df.values.tolist()

    def records_from_row(self, row: Sequence[str]) -> Iterator[RawRecord]:
        """Yield a raw record for each marked cell in one spreadsheet row"""
        metadata = None
        for cell in row:
            if not isinstance(cell, str) or find_marker(cell) is None:
                continue

            tokens = split_first_line(cell)
            event_date_text = tokens[0] if tokens else ''

            # Unparseable dates pass through so the normalizer reports them
            event_date = try_parse_event_date(event_date_text)
            if self.target_year and event_date and event_date.year != self.target_year:
                self.skipped_other_years += 1
                continue

            if metadata is None:
                created_tokens = self.schema.value(row, 'created').split()
                metadata = {
                    'spec_type': self.schema.value(row, 'spec_type'),
                    'status': self.schema.value(row, 'status'),
                    'business_unit': self.schema.value(row, 'business_unit'),
                    'product': self.schema.value(row, 'product'),
                    'created': created_tokens[0] if created_tokens else '',
                }

            yield RawRecord(
                item_key=self.schema.value(row, 'item_key'),
                free_text=cell,
                event_date_text=event_date_text,
                cycle_label_text=extract_cycle_label(cell),
                metadata_fields=metadata,
            )

    def fetch_all_raw_records(self) -> Iterable[RawRecord]:
        self.skipped_other_years = 0
        for row in self._read_rows():
            yield from self.records_from_row(row)
