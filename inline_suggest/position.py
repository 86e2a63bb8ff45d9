"""
Position Mapper
===============
Maps between a block's flattened linear text and structured coordinates.

The index is built once per analysis pass. Any edit to the block makes it
stale; build a new one instead of adjusting the old one.
"""

from bisect import bisect_right
from dataclasses import dataclass
from typing import Dict, List

from .config_logging import OutOfRange, UnknownSegment
from .document import Block, Coordinate, Path, Segment, StructuredRange

__version__ = "1.0.0"


@dataclass(frozen=True)
class IndexEntry:
    """A segment and its [start, end) span in linear space."""
    segment: Segment
    start: int
    end: int


@dataclass(frozen=True)
class Fragment:
    """The part of a linear range that falls inside one segment."""
    segment: Segment
    range: StructuredRange
    linear_start: int
    linear_end: int


class LinearIndex:
    """Ordered (segment, linear start, linear end) entries for one block."""

    def __init__(self, entries: List[IndexEntry]):
        self.entries = entries
        self.total = entries[-1].end if entries else 0
        self.text = "".join(e.segment.text for e in entries)
        self._starts = [e.start for e in entries]
        self._by_path: Dict[Path, IndexEntry] = {e.segment.path: e for e in entries}

    def __len__(self) -> int:
        return self.total

    def to_structured(self, offset: int) -> Coordinate:
        """
        Resolve a linear offset to a coordinate.

        An offset on a boundary resolves to offset 0 of the following
        non-empty segment; the block end resolves to the end of the last
        segment.
        """
        if offset < 0 or offset > self.total or not self.entries:
            raise OutOfRange(offset, self.total)

        if offset == self.total:
            last = self.entries[-1]
            return Coordinate(last.segment.path, offset - last.start)

        # bisect_right lands on the last entry sharing a start, which passes
        # over empty segments sitting on the boundary.
        entry = self.entries[bisect_right(self._starts, offset) - 1]
        return Coordinate(entry.segment.path, offset - entry.start)

    def to_linear(self, coordinate: Coordinate) -> int:
        """Resolve a coordinate to a linear offset."""
        entry = self._by_path.get(tuple(coordinate.path))
        if entry is None:
            raise UnknownSegment(coordinate.path)
        if coordinate.offset < 0 or coordinate.offset > entry.end - entry.start:
            raise OutOfRange(coordinate.offset, entry.end - entry.start,
                             path=tuple(coordinate.path))
        return entry.start + coordinate.offset

    def map_range(self, start: int, end: int) -> List[Fragment]:
        """
        Split a linear range into per-segment fragments.

        Each non-empty intersection with a segment yields one fragment, in
        segment order. A zero-length range yields a single collapsed
        fragment placed by the boundary rule.
        """
        if start < 0 or end > self.total or start > end:
            raise OutOfRange(end if end > self.total else start, self.total,
                             start=start, end=end)

        if start == end:
            point = self.to_structured(start)
            entry = self._by_path[point.path]
            return [Fragment(entry.segment, StructuredRange(point, point), start, start)]

        fragments = []
        for entry in self.entries:
            lo = max(start, entry.start)
            hi = min(end, entry.end)
            if lo >= hi:
                continue
            path = entry.segment.path
            fragments.append(Fragment(
                segment=entry.segment,
                range=StructuredRange(
                    Coordinate(path, lo - entry.start),
                    Coordinate(path, hi - entry.start),
                ),
                linear_start=lo,
                linear_end=hi,
            ))
        return fragments

    def range_to_linear(self, rng: StructuredRange) -> tuple:
        return self.to_linear(rng.start), self.to_linear(rng.end)


def build_index(block: Block) -> LinearIndex:
    """Flatten a block's segments into a LinearIndex."""
    entries = []
    offset = 0
    for segment in block.segments:
        end = offset + len(segment.text)
        entries.append(IndexEntry(segment, offset, end))
        offset = end
    return LinearIndex(entries)
