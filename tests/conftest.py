import pytest
import structlog

from redacted.host.buffer import TextBuffer
from redacted.engine.redactor import Redactor
from redacted.obscure.strategies import CharSubstitution


@pytest.fixture(autouse=True)
def _reset_structlog():
    # The CLI reconfigures structlog globally; keep tests independent.
    yield
    structlog.reset_defaults()


class CountingStrategy:
    """Char substitution that records how often it ran."""

    def __init__(self, char="*"):
        self.inner = CharSubstitution(char)
        self.calls = []

    def __call__(self, text):
        self.calls.append(text)
        return self.inner(text)


@pytest.fixture
def counting():
    return CountingStrategy()


@pytest.fixture
def buf():
    return TextBuffer("alpha beta\ngamma")


@pytest.fixture
def redactor(buf, counting):
    return Redactor(buf, counting, excluded_triggers=["self-insert"])
