#!/usr/bin/env python3
"""
Event source interface
Adapters hand raw event candidates to the analyzer; how they get them is their business
"""

from abc import ABC, abstractmethod
from typing import Iterable

from models import RawRecord


class EventSourceError(Exception):
    """Raised when an event source cannot acquire its data (file or network failure)"""
    pass


class EventSource(ABC):
    """Abstract provider of raw approval/rejection records"""

    @property
    def description(self) -> str:
        return self.__class__.__name__

    @abstractmethod
    def fetch_all_raw_records(self) -> Iterable[RawRecord]:
        """
        Yield every raw event candidate the source knows about.

        Raises:
            EventSourceError: if the underlying data cannot be read
        """
