"""Character-offset index over a sequence of positioned text runs.

Runs are joined with a single separator before diffing.  The index mirrors
that joining rule exactly, so an offset produced by the diff engine can be
looked up here without translation::

    runs:    "Hello"   "brave"   "world"
    offsets: [0, 5)    [6, 11)   [12, 17)
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .types import PositionedTextRun, SpanRange

SEPARATOR = " "


def build_ranges(runs: Sequence[PositionedTextRun]) -> List[SpanRange]:
    ranges: List[SpanRange] = []
    char_pos = 0
    for run in runs:
        end = char_pos + len(run.text)
        ranges.append(SpanRange(run=run, start_char=char_pos, end_char=end))
        char_pos = end + len(SEPARATOR)
    return ranges


def join_runs(runs: Sequence[PositionedTextRun]) -> str:
    return SEPARATOR.join(run.text for run in runs)


@dataclass(frozen=True)
class SpanRangeIndex:
    """Ranges and the joined text they were computed from."""

    ranges: Tuple[SpanRange, ...]
    text: str

    @classmethod
    def from_runs(cls, runs: Sequence[PositionedTextRun]) -> "SpanRangeIndex":
        return cls(ranges=tuple(build_ranges(runs)), text=join_runs(runs))

    @property
    def total_length(self) -> int:
        return len(self.text)

    def __bool__(self) -> bool:
        return bool(self.ranges)

    def __len__(self) -> int:
        return len(self.ranges)

    def overlapping(self, start: int, end: int) -> List[SpanRange]:
        """Ranges whose ``[start_char, end_char)`` intersects ``[start, end)``."""

        if end <= start:
            return []
        return [r for r in self.ranges if r.overlaps(start, end)]

    def nearest(self, cursor: int) -> Optional[SpanRange]:
        """Range containing ``cursor``, else the first one starting after it."""

        for span_range in self.ranges:
            if span_range.contains(cursor):
                return span_range
        for span_range in self.ranges:
            if span_range.start_char >= cursor:
                return span_range
        return None
