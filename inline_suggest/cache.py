"""
Result Cache
============
Bounded LRU cache for AI-derived match batches.

Entries are keyed on text length, a short text prefix and the anchor literal.
That key can collide for different texts, so each entry also keeps the text it
was computed from; a hit whose text differs is stale, dropped, and counted as
a miss. Matches are stored in linear offsets and re-mapped against the current
segment layout. The host owns the cache and calls invalidate() when a
document closes.
"""

import threading
from collections import OrderedDict
from typing import Dict, List, Optional, Tuple

from .base import Match

__version__ = "1.0.0"

PREFIX_LENGTH = 50


def make_key(text: str, anchor: str) -> str:
    return f"{len(text)}:{text[:PREFIX_LENGTH]}:{anchor}"


class ResultCache:
    """Capacity-limited, thread-safe LRU of match batches."""

    def __init__(self, capacity: int = 256):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._entries: "OrderedDict[str, Tuple[Optional[str], Tuple[Match, ...]]]" = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0
        self.evictions = 0
        self.stale = 0

    def get(self, key: str, text: Optional[str] = None) -> Optional[List[Match]]:
        """Cached batch for key; None on a miss or when text no longer matches."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None
            source_text, batch = entry
            if text is not None and source_text is not None and text != source_text:
                del self._entries[key]
                self.stale += 1
                self.misses += 1
                return None
            self._entries.move_to_end(key)
            self.hits += 1
            return list(batch)

    def put(self, key: str, matches: List[Match], text: Optional[str] = None):
        with self._lock:
            self._entries[key] = (text, tuple(matches))
            self._entries.move_to_end(key)
            while len(self._entries) > self.capacity:
                self._entries.popitem(last=False)
                self.evictions += 1

    def invalidate(self, key: Optional[str] = None):
        """Drop one entry, or everything when key is None."""
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def stats(self) -> Dict[str, int]:
        return {
            'size': len(self._entries),
            'capacity': self.capacity,
            'hits': self.hits,
            'misses': self.misses,
            'evictions': self.evictions,
            'stale': self.stale,
        }
