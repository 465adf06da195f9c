"""
Exception hierarchy shared by the engine, the host adapter and the CLI.

Library code raises these; only the CLI turns them into exit codes.
"""

from __future__ import annotations


class RedactedError(Exception):
    """Base class for every error raised by this package."""


class InvalidRangeError(RedactedError, ValueError):
    """A range with ``start > end`` or outside the buffer."""

    def __init__(self, start: int, end: int, reason: str = "start must not exceed end") -> None:
        self.start = start
        self.end = end
        super().__init__(f"invalid range [{start}, {end}): {reason}")


class UnknownSpanError(RedactedError, KeyError):
    """A span handle that is not (or no longer) in the store."""

    def __init__(self, handle: int) -> None:
        self.handle = handle
        super().__init__(handle)

    def __str__(self) -> str:
        return f"unknown span handle {self.handle}"


class ConfigError(RedactedError):
    """Invalid configuration file or configuration value."""
