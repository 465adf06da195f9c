"""
Host side of the engine: the buffer, its viewport and its event channel.

The engine never owns text. It asks a host for the buffer size, text slices,
line and paragraph boundaries, the visible range and the action currently
being processed, and it listens on the host's post-action channel.

``TextBuffer`` is a plain in-memory host used by the CLI and the tests. An
editor integration implements the same ``Host`` protocol over its own buffer.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, Optional, Protocol, Tuple

import structlog

from ..errors import InvalidRangeError

log = structlog.get_logger(__name__)

# Listeners with a larger depth run later; the auto-redact scheduler uses LAST.
FIRST = -100
DEFAULT_DEPTH = 0
LAST = 100


@dataclass(frozen=True)
class ActionEvent:
    """One completed host action, delivered after the action ran."""
    trigger: str
    context: Mapping[str, Any] = field(default_factory=dict)


EventListener = Callable[[ActionEvent], None]
ChangeListener = Callable[[int, int, int], None]


class EventChannel:
    """
    Ordered post-action notification channel.

    Listeners run by ascending depth; equal depths keep registration order.
    Exceptions raised by a listener propagate to whoever dispatched the event.
    """

    def __init__(self) -> None:
        self._listeners: List[Tuple[int, int, EventListener]] = []
        self._seq = itertools.count()

    def subscribe(self, listener: EventListener, depth: int = DEFAULT_DEPTH) -> None:
        if listener in self:
            return
        self._listeners.append((depth, next(self._seq), listener))
        self._listeners.sort(key=lambda item: (item[0], item[1]))

    def unsubscribe(self, listener: EventListener) -> None:
        self._listeners = [item for item in self._listeners if item[2] != listener]

    def dispatch(self, event: ActionEvent) -> None:
        for _, _, listener in list(self._listeners):
            listener(event)

    def __contains__(self, listener: object) -> bool:
        return any(item[2] == listener for item in self._listeners)

    def __len__(self) -> int:
        return len(self._listeners)


class Host(Protocol):
    """What the engine consumes from an editor."""

    events: EventChannel

    @property
    def size(self) -> int: ...

    @property
    def current_trigger(self) -> Optional[str]: ...

    def text(self, start: int, end: int) -> str: ...

    def line_end(self, pos: int) -> int: ...

    def next_paragraph(self, pos: int) -> Tuple[int, int]: ...

    def viewport(self) -> Tuple[int, int]: ...


def _is_blank(line: str) -> bool:
    return not line.strip()


class TextBuffer:
    """
    In-memory buffer with a line-based viewport.

    The viewport is ``height`` lines starting at line ``top``; ``viewport()``
    converts it to buffer offsets ``[start, end)`` where ``end`` is the end of
    the last visible line's content.
    """

    def __init__(self, text: str = "", height: int = 24) -> None:
        if height < 1:
            raise ValueError("viewport height must be at least one line")
        self._text = text
        self.height = height
        self.top = 0
        self._viewport_override: Optional[Tuple[int, int]] = None
        self._trigger: Optional[str] = None
        self.events = EventChannel()
        self._change_listeners: List[ChangeListener] = []

    # ---------------- Reading ----------------

    def __str__(self) -> str:
        return self._text

    @property
    def size(self) -> int:
        return len(self._text)

    @property
    def current_trigger(self) -> Optional[str]:
        return self._trigger

    def text(self, start: int, end: int) -> str:
        self._check_range(start, end)
        return self._text[start:end]

    def line_start(self, pos: int) -> int:
        return self._text.rfind("\n", 0, pos) + 1

    def line_end(self, pos: int) -> int:
        """Offset of the newline ending the line at ``pos`` (or the buffer size)."""
        nl = self._text.find("\n", pos)
        return self.size if nl < 0 else nl

    def line_count(self) -> int:
        return self._text.count("\n") + 1

    def line_offset(self, line: int) -> int:
        """Offset of the first character of zero-based ``line`` (clamped to the buffer)."""
        pos = 0
        for _ in range(max(0, line)):
            nl = self._text.find("\n", pos)
            if nl < 0:
                return self.size
            pos = nl + 1
        return pos

    def next_paragraph(self, pos: int) -> Tuple[int, int]:
        """
        Bounds of the paragraph at or after ``pos``.

        Paragraphs are runs of non-blank lines separated by blank lines. If
        ``pos`` is inside a paragraph the bounds start at ``pos``; otherwise
        the blank lines are skipped. The end excludes the final newline. When
        no paragraph follows, ``(size, size)`` is returned.
        """
        n = self.size
        i = pos
        while i < n:
            eol = self.line_end(i)
            if not _is_blank(self._text[i:eol]):
                break
            i = eol + 1
        if i >= n:
            return n, n
        start = i
        end = i
        while i < n:
            eol = self.line_end(i)
            if _is_blank(self._text[i:eol]):
                break
            end = eol
            i = eol + 1
        return start, end

    # ---------------- Viewport ----------------

    def viewport(self) -> Tuple[int, int]:
        if self._viewport_override is not None:
            return self._viewport_override
        start = self.line_offset(self.top)
        last = self.line_offset(self.top + self.height - 1)
        return start, self.line_end(last)

    def scroll_to(self, line: int) -> None:
        self._viewport_override = None
        self.top = max(0, min(line, self.line_count() - 1))

    def set_viewport(self, start: int, end: int) -> None:
        """Pin the visible range to explicit offsets (until the next scroll)."""
        self._check_range(start, end)
        self._viewport_override = (start, end)

    # ---------------- Editing ----------------

    def on_change(self, listener: ChangeListener) -> None:
        """Register ``listener(pos, removed, inserted)``, called after every edit."""
        self._change_listeners.append(listener)

    def insert(self, pos: int, text: str) -> None:
        self.replace(pos, pos, text)

    def delete(self, start: int, end: int) -> None:
        self.replace(start, end, "")

    def replace(self, start: int, end: int, text: str) -> None:
        self._check_range(start, end)
        self._text = self._text[:start] + text + self._text[end:]
        self._viewport_override = None
        log.debug("buffer_changed", pos=start, removed=end - start, inserted=len(text))
        for listener in list(self._change_listeners):
            listener(start, end - start, len(text))

    # ---------------- Actions ----------------

    def run_action(
        self,
        trigger: str,
        command: Optional[Callable[["TextBuffer"], None]] = None,
        **context: Any,
    ) -> None:
        """
        Run ``command`` as the host action ``trigger``, then notify listeners.

        ``current_trigger`` reports ``trigger`` for the whole action,
        including while post-action listeners run.
        """
        self._trigger = trigger
        try:
            if command is not None:
                command(self)
            self.events.dispatch(ActionEvent(trigger=trigger, context=dict(context)))
        finally:
            self._trigger = None

    # ---------------- Internals ----------------

    def _check_range(self, start: int, end: int) -> None:
        if start > end:
            raise InvalidRangeError(start, end)
        if start < 0 or end > self.size:
            raise InvalidRangeError(start, end, f"outside buffer of size {self.size}")

