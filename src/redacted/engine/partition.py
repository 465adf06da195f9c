"""
Re-derive redaction spans over a range of the buffer.

Both policies first reset the range (remove every redaction span that
intersects it, leaving other span kinds alone) and then walk forward:

  - line      -> one span per line whose content ends inside the range,
                 covering the line from the walk cursor up to (not including)
                 the newline; empty lines get nothing
  - paragraph -> one span per paragraph as reported by the host, until the
                 walk reaches or passes the end of the range

Every new span is hidden immediately, so its cache is computed eagerly.
Walks stop at the buffer end whatever the requested range says.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional

import structlog

from ..errors import ConfigError, InvalidRangeError
from ..host.buffer import Host
from .spans import SpanStore, is_redaction
from .toggle import ToggleController

log = structlog.get_logger(__name__)

# A partitioning policy is any callable over [start, end); a "mode function".
Partitioner = Callable[[int, int], int]


class ViewportPartitioner:
    def __init__(self, host: Host, store: SpanStore, toggle: ToggleController) -> None:
        self.host = host
        self.store = store
        self.toggle = toggle

    # ---------------- Public API ----------------

    def reset(self, start: int, end: int) -> int:
        """Remove redaction spans intersecting ``[start, end)``."""
        if start > end:
            raise InvalidRangeError(start, end)
        return self.store.remove_where(start, end, is_redaction)

    def by_line(self, start: int, end: int) -> int:
        """Reset the range and redact it line by line; return spans created."""
        self.reset(start, end)
        if not self._enabled:
            return 0
        size = self.host.size
        created = 0
        cursor = start
        while cursor < end and cursor < size:
            eol = self.host.line_end(cursor)
            if eol > end:
                break
            if eol > cursor:
                self._redact(cursor, eol)
                created += 1
            cursor = eol + 1
        log.debug("partitioned", policy="line", start=start, end=end, created=created)
        return created

    def by_paragraph(self, start: int, end: int) -> int:
        """Reset the range and redact it paragraph by paragraph; return spans created."""
        self.reset(start, end)
        if not self._enabled:
            return 0
        size = self.host.size
        created = 0
        cursor = start
        while cursor < end and cursor < size:
            p_start, p_end = self.host.next_paragraph(cursor)
            if p_start >= size or p_start >= end:
                break
            p_end = min(p_end, size)
            if p_end > p_start:
                self._redact(p_start, p_end)
                created += 1
            cursor = max(p_end, cursor + 1)
        log.debug("partitioned", policy="paragraph", start=start, end=end, created=created)
        return created

    def policy(self, name: str) -> Partitioner:
        """Look up a built-in policy by name (``line`` or ``paragraph``)."""
        policies: Dict[str, Partitioner] = {
            "line": self.by_line,
            "paragraph": self.by_paragraph,
        }
        try:
            return policies[name]
        except KeyError:
            raise ConfigError(f"unknown partition policy {name!r}") from None

    # --------------- Internals ------------------

    @property
    def _enabled(self) -> bool:
        return self.toggle.strategy is not None

    def _redact(self, start: int, end: int) -> None:
        handle = self.store.create(start, end)
        self.toggle.set_hidden(handle, True)


def resolve_partitioner(
    partitioner: ViewportPartitioner, policy: Optional[str | Partitioner]
) -> Partitioner:
    """A named built-in policy, a custom callable, or the line policy by default."""
    if policy is None:
        return partitioner.by_line
    if callable(policy):
        return policy
    return partitioner.policy(policy)
