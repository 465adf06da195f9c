"""
Obscuring strategies: what hidden text looks like.

A strategy is anything callable as ``obscure(text) -> str``. It must be pure:
the engine calls it at most once per span each time a cache is populated and
reuses the result on every later hide.

Two policies are built in:

  - CharSubstitution    -> every character becomes one configured character
                           ('alpha beta' -> '**********'), length preserved
  - PatternSubstitution -> each regex match becomes a replacement string or
                           the result of a callable on the match; may change
                           length ('ab cd' with '#' -> '## ##')

Pattern presets (``non-space``, ``word``, ...) live in ``presets/patterns.yaml``
so new shapes can be added without code changes. A pattern that is not a
preset name is compiled as a raw regular expression.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import lru_cache
from importlib import resources
from typing import Callable, Dict, Optional, Protocol, Union

import yaml

from ..config import ObscuringConfig
from ..errors import ConfigError

DEFAULT_CHAR = "*"
DEFAULT_PATTERN = "non-space"

Replacement = Union[str, Callable[[re.Match], str]]


class ObscuringStrategy(Protocol):
    def __call__(self, text: str) -> str: ...


# ---- Presets -----------------------------------------------------------------------------

_FLAGS = {"I": re.I, "M": re.M, "S": re.S}


@lru_cache(maxsize=1)
def load_presets() -> Dict[str, re.Pattern]:
    """Load and compile the named patterns shipped with the package."""
    text = resources.files("redacted.obscure.presets").joinpath("patterns.yaml").read_text()
    data = yaml.safe_load(text) or {}
    presets: Dict[str, re.Pattern] = {}
    for name, spec in (data.get("patterns", {}) or {}).items():
        if isinstance(spec, str):
            presets[name] = re.compile(spec)
            continue
        flags = 0
        for f in spec.get("flags", []):
            flags |= _FLAGS.get(f, 0)
        presets[name] = re.compile(spec["regex"], flags)
    return presets


def resolve_pattern(pattern: Union[str, re.Pattern]) -> re.Pattern:
    """Turn a preset name, a raw regex string or a compiled pattern into a pattern."""
    if isinstance(pattern, re.Pattern):
        return pattern
    preset = load_presets().get(pattern)
    if preset is not None:
        return preset
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ConfigError(f"invalid obscuring pattern {pattern!r}: {e}") from e


# ---- Built-in policies -------------------------------------------------------------------

@dataclass(frozen=True)
class CharSubstitution:
    """Replace every character with ``char``."""
    char: str = DEFAULT_CHAR

    def __post_init__(self) -> None:
        if len(self.char) != 1:
            raise ConfigError(f"replacement character must be a single character, got {self.char!r}")

    def __call__(self, text: str) -> str:
        return self.char * len(text)


@dataclass(frozen=True)
class PatternSubstitution:
    """
    Replace each match of ``pattern`` with ``replacement``.

    ``replacement`` is either a literal string (backslashes are not treated as
    group references) or a callable receiving the match object.
    """
    pattern: re.Pattern = field(default_factory=lambda: resolve_pattern(DEFAULT_PATTERN))
    replacement: Replacement = DEFAULT_CHAR

    def __call__(self, text: str) -> str:
        repl = self.replacement
        if isinstance(repl, str):
            return self.pattern.sub(lambda _m: repl, text)
        return self.pattern.sub(repl, text)

    @classmethod
    def from_pattern(
        cls, pattern: Union[str, re.Pattern], replacement: Replacement = DEFAULT_CHAR
    ) -> "PatternSubstitution":
        return cls(pattern=resolve_pattern(pattern), replacement=replacement)


def strategy_from_config(cfg: ObscuringConfig) -> Optional[ObscuringStrategy]:
    """
    Build the configured strategy.

    Returns None when obscuring is disabled (``kind: null``); the engine
    treats that as "redaction does nothing".
    """
    if cfg.kind is None:
        return None
    if cfg.kind == "char":
        return CharSubstitution(cfg.char)
    return PatternSubstitution.from_pattern(cfg.pattern, cfg.replacement)
