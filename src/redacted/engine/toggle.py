"""
Hide and reveal spans.

This is the only place a span's cache is computed. The first hide reads the
span's text from the host and runs the obscuring strategy once; every later
hide reuses the cache, and revealing never clears it.
"""

from __future__ import annotations

from typing import Optional

import structlog

from ..host.buffer import Host
from ..obscure.strategies import ObscuringStrategy
from .spans import Span, SpanHandle, SpanStore

log = structlog.get_logger(__name__)


class ToggleController:
    def __init__(self, host: Host, store: SpanStore, strategy: Optional[ObscuringStrategy]) -> None:
        self.host = host
        self.store = store
        self.strategy = strategy

    def _span(self, span: Span | SpanHandle) -> Span:
        return span if isinstance(span, Span) else self.store.get(span)

    def set_hidden(self, span: Span | SpanHandle, hidden: bool) -> None:
        """
        Show the cached replacement (``hidden=True``) or the original text.

        Without a strategy there is nothing to hide with, so hiding is a no-op.
        """
        sp = self._span(span)
        if not hidden:
            sp.hidden = False
            return
        if self.strategy is None:
            return
        if sp.cache is None:
            sp.cache = self.strategy(self.host.text(sp.start, sp.end))
            log.debug("cache_populated", start=sp.start, end=sp.end)
        sp.hidden = True

    def toggle(self, span: Span | SpanHandle) -> bool:
        """Flip the span and return its new ``hidden`` state."""
        sp = self._span(span)
        self.set_hidden(sp, not sp.hidden)
        return sp.hidden

    def repair(self, span: Span | SpanHandle) -> None:
        """Give a hidden span with no cache (e.g. after an edit) its cache."""
        sp = self._span(span)
        if sp.transient:
            self.set_hidden(sp, True)

    def display(self, span: Span | SpanHandle) -> str:
        """What the user sees for the span right now."""
        sp = self._span(span)
        self.repair(sp)
        if sp.hidden and sp.cache is not None:
            return sp.cache
        return self.host.text(sp.start, sp.end)
