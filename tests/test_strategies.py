import re

import pytest

from redacted.config import ObscuringConfig
from redacted.errors import ConfigError
from redacted.obscure.strategies import (
    CharSubstitution,
    PatternSubstitution,
    load_presets,
    resolve_pattern,
    strategy_from_config,
)


def test_char_substitution_preserves_length():
    assert CharSubstitution("*")("alpha beta") == "**********"


def test_char_substitution_rejects_multi_char():
    with pytest.raises(ConfigError):
        CharSubstitution("ab")


def test_default_pattern_keeps_whitespace_and_pipes():
    s = PatternSubstitution()
    assert s("a b|c\nd") == "* *|*\n*"


def test_pattern_non_space_with_hash():
    s = PatternSubstitution.from_pattern("non-space", "#")
    assert s("ab cd") == "## ##"


def test_pattern_replacement_may_change_length():
    s = PatternSubstitution.from_pattern("digit", "<n>")
    assert s("pin 42") == "pin <n><n>"


def test_pattern_replacement_is_literal():
    s = PatternSubstitution.from_pattern("word", r"\1")
    assert s("ab") == r"\1\1"


def test_pattern_replacement_callable():
    s = PatternSubstitution.from_pattern(r"\w+", lambda m: str(len(m.group(0))))
    assert s("hello big world") == "5 3 5"


def test_raw_regex_pattern():
    s = PatternSubstitution.from_pattern("[aeiou]", "_")
    assert s("secret") == "s_cr_t"


def test_invalid_regex_is_config_error():
    with pytest.raises(ConfigError):
        resolve_pattern("[unclosed")


def test_presets_loaded_from_yaml():
    presets = load_presets()
    assert {"non-space", "word", "alnum", "digit", "any"} <= set(presets)
    assert presets["any"].flags & re.S


def test_strategy_from_config():
    assert strategy_from_config(ObscuringConfig())("abc") == "***"
    assert strategy_from_config(ObscuringConfig(kind="char", char="x"))("ab") == "xx"
    pat = strategy_from_config(ObscuringConfig(kind="pattern", pattern="non-space", replacement="#"))
    assert pat("ab cd") == "## ##"
    assert strategy_from_config(ObscuringConfig(kind=None)) is None
