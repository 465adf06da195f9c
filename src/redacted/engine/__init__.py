"""Span, toggle, partitioning and scheduling engine."""

from .partition import ViewportPartitioner
from .redactor import Redactor
from .scheduler import AutoRedactScheduler
from .spans import REDACTION, Span, SpanStore
from .toggle import ToggleController

__all__ = [
    "REDACTION",
    "AutoRedactScheduler",
    "Redactor",
    "Span",
    "SpanStore",
    "ToggleController",
    "ViewportPartitioner",
]
