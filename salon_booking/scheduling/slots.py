"""
Slot Generation

Enumerates candidate start instants inside an effective window. Pure
enumeration: conflicts are handled by the overlap detector.
"""
from datetime import datetime, timedelta
from typing import Iterator, List, Optional

from .ranges import EffectiveWindow

DEFAULT_GRANULARITY_MINUTES = 30


class SlotSequence:
    """
    Lazy, finite, restartable sequence of candidate starts.

    For each range, starts step by granularity from the range open while
    start + duration <= range close. Steps are taken in absolute time, so a
    range that spans a DST change yields the slots that really fit.
    """

    def __init__(
            self,
            window: EffectiveWindow,
            duration_minutes: int,
            granularity_minutes: int = DEFAULT_GRANULARITY_MINUTES
    ):
        if duration_minutes <= 0:
            raise ValueError("duration_minutes must be positive")
        if granularity_minutes <= 0:
            raise ValueError("granularity_minutes must be positive")
        self.window = window
        self.duration = timedelta(minutes=duration_minutes)
        self.step = timedelta(minutes=granularity_minutes)

    def __iter__(self) -> Iterator[datetime]:
        last: Optional[datetime] = None
        for range_start, range_end in self.window.instants():
            current = range_start
            while current + self.duration <= range_end:
                if last is None or current > last:
                    yield current
                    last = current
                current += self.step

    def to_list(self) -> List[datetime]:
        return list(self)


def generate_slots(
        window: EffectiveWindow,
        duration_minutes: int,
        granularity_minutes: int = DEFAULT_GRANULARITY_MINUTES
) -> List[datetime]:
    return SlotSequence(window, duration_minutes, granularity_minutes).to_list()
