"""Obscuring strategies mapping original text to its hidden rendering."""

from .strategies import (
    CharSubstitution,
    ObscuringStrategy,
    PatternSubstitution,
    load_presets,
    resolve_pattern,
    strategy_from_config,
)

__all__ = [
    "CharSubstitution",
    "ObscuringStrategy",
    "PatternSubstitution",
    "load_presets",
    "resolve_pattern",
    "strategy_from_config",
]
