"""Host adapter: buffer, viewport and post-action event channel."""

from .buffer import FIRST, LAST, ActionEvent, EventChannel, Host, TextBuffer

__all__ = ["FIRST", "LAST", "ActionEvent", "EventChannel", "Host", "TextBuffer"]
