"""
Suggestion Aggregator
=====================
Turns every source's matches into one ordered, de-duplicated suggestion list.

Steps per pass:
1. map each Match onto structured coordinates (unmappable matches are dropped
   and counted);
2. de-duplicate whole matches on (start, end, replacement), first occurrence
   in source order wins; the fragments of a kept match stay together;
3. sort by start coordinate, then by range length;
4. split into always-visible corrections and gated POV alignments.

The result of a pass replaces the previous one outright.
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Tuple

from .base import IdGenerator, Match, Suggestion, SuggestionKind
from .config_logging import MappingError, get_logger
from .position import LinearIndex

__version__ = "1.0.0"

logger = get_logger('inline_suggest.aggregator')


@dataclass
class MappingOutcome:
    suggestions: List[Suggestion] = field(default_factory=list)
    dropped: int = 0


def to_suggestions(matches: Iterable[Match], index: LinearIndex,
                   id_generator: IdGenerator) -> MappingOutcome:
    """
    Map matches to suggestions.

    A match crossing segments becomes one suggestion per fragment, all with
    the same id. The first fragment carries the replacement and the rest
    delete their text, so applying all of them equals applying the match.
    """
    outcome = MappingOutcome()
    for match in matches:
        try:
            fragments = index.map_range(match.start, match.end)
        except MappingError as e:
            logger.debug("Dropping unmappable match", source=match.source.value,
                         start=match.start, end=match.end, error=e.message)
            outcome.dropped += 1
            continue
        if not fragments:
            outcome.dropped += 1
            continue

        suggestion_id = id_generator.next_id()
        count = len(fragments)
        for i, fragment in enumerate(fragments):
            outcome.suggestions.append(Suggestion(
                id=suggestion_id,
                kind=match.source.kind,
                range=fragment.range,
                replacement=match.replacement if i == 0 else "",
                reason=match.message,
                source=match.source,
                rule_id=match.rule_id,
                fragment_index=i,
                fragment_count=count,
            ))
    return outcome


def sort_key(suggestion: Suggestion) -> Tuple:
    return (suggestion.range.start, suggestion.length)


def dedupe_key(fragments: List[Suggestion]) -> Tuple:
    """Key of one whole match: its overall start, end and replacement."""
    first, last = fragments[0], fragments[-1]
    return (first.range.start, last.range.end, first.replacement)


def group_by_match(suggestions: Iterable[Suggestion]) -> "OrderedDict[str, List[Suggestion]]":
    """Fragments keyed by suggestion id, in first-seen order."""
    groups: "OrderedDict[str, List[Suggestion]]" = OrderedDict()
    for suggestion in suggestions:
        groups.setdefault(suggestion.id, []).append(suggestion)
    for fragments in groups.values():
        fragments.sort(key=lambda s: s.fragment_index)
    return groups


@dataclass
class AggregateResult:
    """Ordered suggestions plus the visible/gated partition."""
    suggestions: List[Suggestion] = field(default_factory=list)
    visible: List[Suggestion] = field(default_factory=list)
    gated: List[Suggestion] = field(default_factory=list)
    duplicates: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'suggestions': [s.to_dict() for s in self.suggestions],
            'visible': [s.id for s in self.visible],
            'gated': [s.id for s in self.gated],
            'duplicates': self.duplicates,
        }


def aggregate(suggestions: Iterable[Suggestion]) -> AggregateResult:
    """
    De-duplicate, sort and partition one pass worth of suggestions.

    Duplicates are judged per match, never per fragment: trailing fragments
    all carry an empty replacement, so two different matches can share one.
    """
    result = AggregateResult()
    seen = set()
    kept: List[Suggestion] = []
    for fragments in group_by_match(suggestions).values():
        key = dedupe_key(fragments)
        if key in seen:
            result.duplicates += 1
            continue
        seen.add(key)
        kept.extend(fragments)

    for suggestion in sorted(kept, key=sort_key):
        result.suggestions.append(suggestion)
        if suggestion.kind is SuggestionKind.POV_ALIGNMENT:
            result.gated.append(suggestion)
        else:
            result.visible.append(suggestion)
    return result
