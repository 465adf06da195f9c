"""
Span records and the store that owns them.

A span is a tracked ``[start, end)`` range over buffer offsets with a
hidden/revealed state and an optional cached obscured rendering. The store is
an arena: spans are addressed by integer handles it hands out, and callers
never hold on to anything but the handle.

The store does not keep spans apart. Overlaps are prevented by callers that
clear a range before repopulating it (see ``partition``). Spans of other
kinds (highlights, annotations) may share the same offsets; redaction code
only ever removes spans tagged ``REDACTION``.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional

import structlog

from ..errors import InvalidRangeError, UnknownSpanError

log = structlog.get_logger(__name__)

REDACTION = "redaction"

SpanHandle = int


@dataclass
class Span:
    """Unified span record used throughout the engine."""
    start: int
    end: int
    hidden: bool = False
    cache: Optional[str] = None
    kind: str = REDACTION

    @property
    def is_redaction(self) -> bool:
        return self.kind == REDACTION

    @property
    def transient(self) -> bool:
        # Hidden but nothing to show yet; repaired by the toggle controller.
        return self.hidden and self.cache is None

    def intersects(self, start: int, end: int) -> bool:
        if self.start == self.end:
            return start <= self.start < end
        if start == end:
            return self.start < start < self.end
        return self.start < end and start < self.end


def is_redaction(span: Span) -> bool:
    return span.is_redaction


class SpanStore:
    """Arena of spans keyed by opaque integer handles."""

    def __init__(self) -> None:
        self._spans: Dict[SpanHandle, Span] = {}
        self._ids = itertools.count(1)

    # ---------------- Public API ----------------

    def create(self, start: int, end: int, kind: str = REDACTION) -> SpanHandle:
        if start > end:
            raise InvalidRangeError(start, end)
        handle = next(self._ids)
        self._spans[handle] = Span(start, end, kind=kind)
        log.debug("span_created", handle=handle, start=start, end=end, kind=kind)
        return handle

    def get(self, handle: SpanHandle) -> Span:
        try:
            return self._spans[handle]
        except KeyError:
            raise UnknownSpanError(handle) from None

    def query(self, start: int, end: int) -> List[SpanHandle]:
        """Handles of every span intersecting ``[start, end)``; order unspecified."""
        if start > end:
            raise InvalidRangeError(start, end)
        return [h for h, sp in self._spans.items() if sp.intersects(start, end)]

    def at(self, pos: int) -> List[SpanHandle]:
        """Handles of spans covering offset ``pos``."""
        return [h for h, sp in self._spans.items() if sp.start <= pos < sp.end]

    def remove(self, handle: SpanHandle) -> None:
        if self._spans.pop(handle, None) is None:
            raise UnknownSpanError(handle)
        log.debug("span_removed", handle=handle)

    def remove_where(self, start: int, end: int, predicate: Callable[[Span], bool]) -> int:
        """Destroy intersecting spans for which ``predicate`` holds; return how many."""
        doomed = [h for h in self.query(start, end) if predicate(self._spans[h])]
        for h in doomed:
            del self._spans[h]
        if doomed:
            log.debug("spans_removed", start=start, end=end, count=len(doomed))
        return len(doomed)

    def clear(self, predicate: Callable[[Span], bool]) -> int:
        """Destroy every span for which ``predicate`` holds, wherever it sits."""
        doomed = [h for h, sp in self._spans.items() if predicate(sp)]
        for h in doomed:
            del self._spans[h]
        return len(doomed)

    def adjust(self, pos: int, removed: int, inserted: int) -> None:
        """
        Move spans after an edit replaced ``removed`` characters at ``pos``
        with ``inserted`` new ones.

        Spans after the edit shift; spans the edit touches are resized and lose
        their cache; spans left with no characters are destroyed.
        """
        old_end = pos + removed
        delta = inserted - removed

        def new_start(x: int) -> int:
            if x < pos:
                return x
            return x + delta if x >= old_end else pos + inserted

        def new_end(x: int) -> int:
            if x <= pos:
                return x
            return x + delta if x > old_end else pos

        collapsed: List[SpanHandle] = []
        for h, sp in self._spans.items():
            touched = sp.start < old_end and pos < sp.end
            sp.start, sp.end = new_start(sp.start), new_end(sp.end)
            if not touched:
                # only an empty span sitting on the insertion point gets here inverted
                sp.end = max(sp.end, sp.start)
                continue
            sp.cache = None
            if sp.end <= sp.start:
                collapsed.append(h)
        for h in collapsed:
            del self._spans[h]
        if collapsed:
            log.debug("spans_collapsed", count=len(collapsed))

    def all(self) -> List[SpanHandle]:
        return list(self._spans)

    def __len__(self) -> int:
        return len(self._spans)

    def __contains__(self, handle: object) -> bool:
        return handle in self._spans

    def __iter__(self) -> Iterator[SpanHandle]:
        return iter(list(self._spans))
