"""
Automatic viewport redaction.

While active, the scheduler listens on the host's post-action channel and,
after each action, re-partitions the current viewport. Two filters can skip a
rescan:

  - excluded triggers  -> a static set of action identifiers (typing, say,
                          so the viewport is not rescanned on every keystroke)
  - ignore predicates  -> an ordered chain of ``predicate(event) -> bool``;
                          the first one returning True skips the rescan and
                          the rest are not evaluated

The scheduler subscribes with the largest depth so it sees the viewport after
every other listener has run. Deactivating unsubscribes and then removes every
redaction span in the buffer.
"""

from __future__ import annotations

from typing import Callable, Iterable, List, Optional, Set

import structlog

from ..host.buffer import LAST, ActionEvent, Host
from .partition import Partitioner
from .spans import SpanStore, is_redaction

log = structlog.get_logger(__name__)

IgnorePredicate = Callable[[ActionEvent], bool]


class AutoRedactScheduler:
    def __init__(
        self,
        host: Host,
        store: SpanStore,
        partitioner: Partitioner,
        excluded_triggers: Iterable[str] = (),
        ignore_predicates: Iterable[IgnorePredicate] = (),
    ) -> None:
        self.host = host
        self.store = store
        self.partitioner = partitioner
        self.excluded_triggers: Set[str] = set(excluded_triggers)
        self.ignore_predicates: List[IgnorePredicate] = list(ignore_predicates)
        self.active = False

    # ---------------- Lifecycle ----------------

    def activate(self) -> None:
        """Start listening; the first rescan happens after the next action."""
        if self.active:
            return
        self.host.events.subscribe(self.on_action, depth=LAST)
        self.active = True
        log.debug("auto_redact_activated")

    def deactivate(self) -> None:
        """Stop listening and unredact the whole buffer."""
        self.host.events.unsubscribe(self.on_action)
        self.active = False
        removed = self.store.clear(is_redaction)
        log.debug("auto_redact_deactivated", removed=removed)

    # ---------------- Filters ----------------

    def exclude(self, trigger: str) -> None:
        self.excluded_triggers.add(trigger)

    def include(self, trigger: str) -> None:
        self.excluded_triggers.discard(trigger)

    def add_ignore_predicate(self, predicate: IgnorePredicate) -> None:
        self.ignore_predicates.append(predicate)

    def remove_ignore_predicate(self, predicate: IgnorePredicate) -> None:
        self.ignore_predicates.remove(predicate)

    def suppressed_by(self, event: ActionEvent) -> Optional[str]:
        """Why this event would not rescan, or None if it would."""
        if event.trigger in self.excluded_triggers:
            return "excluded_trigger"
        for predicate in self.ignore_predicates:
            if predicate(event):
                return f"predicate:{getattr(predicate, '__name__', repr(predicate))}"
        return None

    # ---------------- Event handler ----------------

    def on_action(self, event: ActionEvent) -> None:
        if not self.active:
            return
        reason = self.suppressed_by(event)
        if reason is not None:
            log.debug("rescan_suppressed", trigger=event.trigger, reason=reason)
            return
        start, end = self.host.viewport()
        self.partitioner(start, end)
        log.debug("rescan", trigger=event.trigger, start=start, end=end)
