"""redacted: keep regions of a text buffer visually obscured."""

from .config import RedactedConfig, load_config
from .engine import Redactor
from .errors import ConfigError, InvalidRangeError, RedactedError, UnknownSpanError
from .host import ActionEvent, TextBuffer
from .obscure import CharSubstitution, PatternSubstitution

__version__ = "0.1.0"

__all__ = [
    "ActionEvent",
    "CharSubstitution",
    "ConfigError",
    "InvalidRangeError",
    "PatternSubstitution",
    "RedactedConfig",
    "RedactedError",
    "Redactor",
    "TextBuffer",
    "UnknownSpanError",
    "load_config",
]
