"""
Document Model
==============
Blocks, segments and structured coordinates, plus the document collaborator
contract the engine talks to.

A segment is an immutable run of text addressed by a ``path`` tuple. Paths
give both identity and document order, so coordinates compare by
``(path, offset)``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, List, Optional, Tuple

__version__ = "1.0.0"

Path = Tuple[int, ...]


@dataclass(frozen=True, order=True)
class Coordinate:
    """A position inside a block: segment path + offset within that segment."""
    path: Path
    offset: int

    def to_dict(self) -> Dict[str, Any]:
        return {'path': list(self.path), 'offset': self.offset}


@dataclass(frozen=True)
class StructuredRange:
    """A range between two coordinates (start <= end)."""
    start: Coordinate
    end: Coordinate

    @property
    def is_collapsed(self) -> bool:
        return self.start == self.end

    def contains(self, point: Coordinate) -> bool:
        """True if point lies inside the range or on either boundary."""
        return self.start <= point <= self.end

    def to_dict(self) -> Dict[str, Any]:
        return {'start': self.start.to_dict(), 'end': self.end.to_dict()}


@dataclass(frozen=True)
class Segment:
    """Immutable leaf text run."""
    path: Path
    text: str

    def __len__(self) -> int:
        return len(self.text)


@dataclass(frozen=True)
class Block:
    """One paragraph-equivalent analysis unit."""
    block_id: Hashable
    segments: Tuple[Segment, ...] = field(default_factory=tuple)

    @property
    def text(self) -> str:
        return "".join(s.text for s in self.segments)


class DocumentCollaborator(ABC):
    """
    What the engine needs from a host document.

    Implementations enumerate a block's segments in order, locate the block
    enclosing a cursor point, and perform atomic range replacements.
    """

    @abstractmethod
    def segments(self, block_id: Hashable) -> List[Segment]:
        """Segments of the block, in document order."""

    @abstractmethod
    def block_at(self, point: Coordinate) -> Optional[Hashable]:
        """Block id enclosing the point, or None."""

    @abstractmethod
    def replace_range(self, rng: StructuredRange, text: str) -> None:
        """Replace the content of rng with text as one edit."""

    def block(self, block_id: Hashable) -> Block:
        return Block(block_id, tuple(self.segments(block_id)))


class TextDocument(DocumentCollaborator):
    """
    In-memory document: a list of blocks, each a list of segment strings.

    Segment paths are ``(block_index, segment_index)``; block ids are block
    indexes. Empty segments are kept so paths stay stable across edits.
    """

    def __init__(self, blocks: List[List[str]]):
        self._blocks: List[List[str]] = [list(b) for b in blocks]

    @classmethod
    def from_paragraphs(cls, paragraphs: List[str]) -> 'TextDocument':
        return cls([[p] for p in paragraphs])

    @property
    def block_ids(self) -> List[int]:
        return list(range(len(self._blocks)))

    def segments(self, block_id: int) -> List[Segment]:
        return [Segment((block_id, i), text) for i, text in enumerate(self._blocks[block_id])]

    def block_at(self, point: Coordinate) -> Optional[int]:
        if not point.path:
            return None
        block_id = point.path[0]
        if 0 <= block_id < len(self._blocks):
            return block_id
        return None

    def block_text(self, block_id: int) -> str:
        return "".join(self._blocks[block_id])

    def replace_range(self, rng: StructuredRange, text: str) -> None:
        start, end = rng.start, rng.end
        if start.path[0] != end.path[0]:
            raise ValueError("Range spans more than one block")
        runs = self._blocks[start.path[0]]
        first, last = start.path[1], end.path[1]
        if first == last:
            run = runs[first]
            runs[first] = run[:start.offset] + text + run[end.offset:]
            return
        runs[first] = runs[first][:start.offset] + text
        for i in range(first + 1, last):
            runs[i] = ""
        runs[last] = runs[last][end.offset:]
