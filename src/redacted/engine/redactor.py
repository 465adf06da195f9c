"""
Wires the store, toggle controller, partitioner and scheduler to one host.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Union

import structlog

from ..config import RedactedConfig
from ..errors import InvalidRangeError
from ..host.buffer import Host
from ..obscure.strategies import ObscuringStrategy, strategy_from_config
from .partition import Partitioner, ViewportPartitioner, resolve_partitioner
from .scheduler import AutoRedactScheduler, IgnorePredicate
from .spans import Span, SpanHandle, SpanStore, is_redaction
from .toggle import ToggleController

log = structlog.get_logger(__name__)


class Redactor:
    """
    Public entry point for a single buffer.

    Typical usage:
        buf = TextBuffer(text)
        r = Redactor.from_config(buf, load_config(path))
        r.redact_range(0, 10)
        print(r.render())
    """

    def __init__(
        self,
        host: Host,
        strategy: Optional[ObscuringStrategy],
        partition: Union[str, Partitioner, None] = "line",
        excluded_triggers: Iterable[str] = (),
        ignore_predicates: Iterable[IgnorePredicate] = (),
    ) -> None:
        self.host = host
        self.store = SpanStore()
        self.toggle = ToggleController(host, self.store, strategy)
        self.partitioner = ViewportPartitioner(host, self.store, self.toggle)
        self.scheduler = AutoRedactScheduler(
            host,
            self.store,
            resolve_partitioner(self.partitioner, partition),
            excluded_triggers=excluded_triggers,
            ignore_predicates=ignore_predicates,
        )
        # Hosts that report edits get overlay-like span movement.
        on_change = getattr(host, "on_change", None)
        if on_change is not None:
            on_change(self.store.adjust)

    @classmethod
    def from_config(
        cls,
        host: Host,
        cfg: RedactedConfig,
        strategy: Optional[ObscuringStrategy] = None,
        ignore_predicates: Iterable[IgnorePredicate] = (),
    ) -> "Redactor":
        """Build from a loaded config; ``strategy`` overrides the configured one."""
        return cls(
            host,
            strategy if strategy is not None else strategy_from_config(cfg.obscuring),
            partition=cfg.auto.partition,
            excluded_triggers=cfg.auto.excluded_triggers,
            ignore_predicates=ignore_predicates,
        )

    # ---------------- Configuration ----------------

    @property
    def strategy(self) -> Optional[ObscuringStrategy]:
        return self.toggle.strategy

    @strategy.setter
    def strategy(self, strategy: Optional[ObscuringStrategy]) -> None:
        # Existing caches were made by the old strategy; hidden spans recompute on render.
        self.toggle.strategy = strategy
        for h in self.store:
            self.store.get(h).cache = None

    def set_partition(self, partition: Union[str, Partitioner]) -> None:
        self.scheduler.partitioner = resolve_partitioner(self.partitioner, partition)

    # ---------------- Boundary operations ----------------

    def redact_range(self, start: int, end: int) -> Optional[SpanHandle]:
        """Hide ``[start, end)`` as one span. No-op (None) without a strategy."""
        self._check(start, end)
        if self.strategy is None:
            return None
        handle = self.store.create(start, end)
        self.toggle.set_hidden(handle, True)
        log.debug("redacted", start=start, end=end)
        return handle

    def unredact_range(self, start: int, end: int) -> int:
        """Remove redaction spans intersecting ``[start, end)``; return how many."""
        self._check(start, end)
        return self.store.remove_where(start, end, is_redaction)

    def redact_buffer(self) -> int:
        """Re-partition the whole buffer with the configured policy."""
        return self.scheduler.partitioner(0, self.host.size)

    def activate(self) -> None:
        self.scheduler.activate()

    def deactivate(self) -> None:
        self.scheduler.deactivate()

    @property
    def active(self) -> bool:
        return self.scheduler.active

    # ---------------- Point operations ----------------

    def reveal_at(self, pos: int) -> int:
        return self._set_at(pos, False)

    def hide_at(self, pos: int) -> int:
        return self._set_at(pos, True)

    def toggle_at(self, pos: int) -> int:
        handles = self._redactions_at(pos)
        for h in handles:
            self.toggle.toggle(h)
        return len(handles)

    # ---------------- Inspection ----------------

    def spans(self, start: int = 0, end: Optional[int] = None) -> List[Span]:
        """Redaction spans intersecting the range, sorted by position."""
        end = self.host.size if end is None else end
        found = [self.store.get(h) for h in self.store.query(start, end)]
        return sorted((sp for sp in found if sp.is_redaction), key=lambda sp: (sp.start, sp.end))

    def render(self) -> str:
        """
        The buffer as the user sees it: hidden spans show their cache.

        Transient spans are repaired first. Where hidden spans overlap, the
        one starting first wins and the overlapped part shows once.
        """
        size = self.host.size
        out: List[str] = []
        last = 0
        for sp in self.spans(0, size):
            self.toggle.repair(sp)
            if not sp.hidden or sp.cache is None or sp.start < last:
                continue
            out.append(self.host.text(last, sp.start))
            out.append(sp.cache)
            last = sp.end
        out.append(self.host.text(last, size))
        return "".join(out)

    # --------------- Internals ------------------

    def _check(self, start: int, end: int) -> None:
        if start > end:
            raise InvalidRangeError(start, end)
        if start < 0 or end > self.host.size:
            raise InvalidRangeError(start, end, f"outside buffer of size {self.host.size}")

    def _redactions_at(self, pos: int) -> List[SpanHandle]:
        return [h for h in self.store.at(pos) if self.store.get(h).is_redaction]

    def _set_at(self, pos: int, hidden: bool) -> int:
        handles = self._redactions_at(pos)
        for h in handles:
            self.toggle.set_hidden(h, hidden)
        return len(handles)
