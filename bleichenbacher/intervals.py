"""
Disjoint integer intervals.

IntervalSet keeps the smallest cover of all inserted closed intervals:
overlapping or adjacent intervals ([1,4] and [5,9]) are fused on insert.
Starts and ends are kept in two parallel sorted lists, so both are searched
with bisect.
"""

from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from typing import Iterator, List, Tuple, Union


@dataclass(frozen=True, order=True)
class Interval:
    """Closed interval [start, end] of integers."""
    start: int
    end: int

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"interval start {self.start} > end {self.end}")

    def __iter__(self):
        # allows: a, b = interval
        return iter((self.start, self.end))

    def __contains__(self, item: int) -> bool:
        return self.start <= item <= self.end

    @property
    def width(self) -> int:
        return self.end - self.start


class IntervalSet:
    """Sorted set of pairwise disjoint, non-adjacent intervals."""

    def __init__(self, intervals=()):
        self._starts: List[int] = []
        self._ends: List[int] = []
        for interval in intervals:
            self.insert_interval(interval)

    def insert_interval(self, interval: Union[Interval, Tuple[int, int]]) -> None:
        """
        Insert interval, fusing it with every stored interval it overlaps
        or touches. Plain (start, end) pairs are accepted and validated.
        """
        start, end = interval
        if start > end:
            raise ValueError(f"interval start {start} > end {end}")

        # stored intervals i..j-1 satisfy end_i >= start-1 and start_i <= end+1
        i = bisect_left(self._ends, start - 1)
        j = bisect_right(self._starts, end + 1)
        if i < j:
            start = min(start, self._starts[i])
            end = max(end, self._ends[j - 1])
        self._starts[i:j] = [start]
        self._ends[i:j] = [end]

    def get_intervals(self) -> List[Interval]:
        """Current intervals in ascending order."""
        return [Interval(a, b) for a, b in zip(self._starts, self._ends)]

    def __iter__(self) -> Iterator[Interval]:
        return iter(self.get_intervals())

    def __len__(self) -> int:
        return len(self._starts)

    def __contains__(self, item: int) -> bool:
        i = bisect_right(self._starts, item) - 1
        return i >= 0 and item <= self._ends[i]

    def __eq__(self, other):
        if not isinstance(other, IntervalSet):
            return NotImplemented
        return self._starts == other._starts and self._ends == other._ends

    def __repr__(self):
        inner = ", ".join(f"[{a}, {b}]" for a, b in zip(self._starts, self._ends))
        return f"IntervalSet({inner})"
