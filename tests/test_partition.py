import pytest

from redacted.engine.partition import ViewportPartitioner, resolve_partitioner
from redacted.engine.spans import SpanStore
from redacted.engine.toggle import ToggleController
from redacted.errors import ConfigError
from redacted.host.buffer import TextBuffer
from redacted.obscure.strategies import CharSubstitution

TEXT = "one\ntwo\n\nthree four\nfive\n\n\nsix"


def make(text=TEXT, strategy=CharSubstitution("*")):
    buf = TextBuffer(text)
    store = SpanStore()
    toggle = ToggleController(buf, store, strategy)
    return buf, store, ViewportPartitioner(buf, store, toggle)


def ranges(store):
    return sorted((store.get(h).start, store.get(h).end) for h in store)


def texts(buf, store):
    return [buf.text(s, e) for s, e in ranges(store)]


def test_line_policy_whole_buffer():
    buf, store, part = make()
    assert part.by_line(0, buf.size) == 5
    assert texts(buf, store) == ["one", "two", "three four", "five", "six"]
    assert all(store.get(h).hidden and store.get(h).cache for h in store)


def test_line_policy_skips_lines_ending_past_range():
    buf, store, part = make()
    part.by_line(0, 6)  # "one\ntw"
    assert texts(buf, store) == ["one"]


def test_line_policy_starts_mid_line():
    buf, store, part = make()
    part.by_line(1, 7)
    assert texts(buf, store) == ["ne", "two"]


def test_paragraph_policy():
    buf, store, part = make()
    assert part.by_paragraph(0, buf.size) == 3
    assert texts(buf, store) == ["one\ntwo", "three four\nfive", "six"]


def test_paragraph_policy_may_pass_range_end():
    buf, store, part = make()
    part.by_paragraph(0, 2)
    assert texts(buf, store) == ["one\ntwo"]


def test_paragraph_policy_from_blank_line():
    buf, store, part = make()
    part.by_paragraph(8, 20)
    assert texts(buf, store) == ["three four\nfive"]


@pytest.mark.parametrize("policy", ["by_line", "by_paragraph"])
def test_second_pass_replaces_first(policy):
    buf, store, part = make()
    getattr(part, policy)(0, buf.size)
    first = set(store.all())
    getattr(part, policy)(0, buf.size)
    second = set(store.all())
    assert first.isdisjoint(second)
    assert len(second) == len(first)
    assert len(set(ranges(store))) == len(second)


@pytest.mark.parametrize("policy", ["by_line", "by_paragraph"])
def test_walk_stops_at_buffer_end(policy):
    buf, store, part = make("abc\ndef")
    getattr(part, policy)(0, 10_000)
    assert all(store.get(h).end <= buf.size for h in store)
    assert store.all()


@pytest.mark.parametrize("policy", ["by_line", "by_paragraph"])
def test_empty_range_only_resets(policy):
    buf, store, part = make()
    part.by_line(0, buf.size)
    # only "two" [4, 7) strictly contains offset 5
    assert getattr(part, policy)(5, 5) == 0
    assert ranges(store) == [(0, 3), (9, 19), (20, 24), (27, 30)]


def test_reset_keeps_other_annotations():
    buf, store, part = make()
    note = store.create(0, 3, kind="highlight")
    part.by_line(0, buf.size)
    part.by_line(0, buf.size)
    assert note in store
    assert sum(1 for h in store if store.get(h).kind == "highlight") == 1


def test_no_strategy_resets_but_creates_nothing():
    buf, store, part = make(strategy=None)
    store.create(0, 3)
    assert part.by_line(0, buf.size) == 0
    assert len(store) == 0


def test_empty_buffer():
    buf, store, part = make("")
    assert part.by_line(0, 0) == 0
    assert part.by_paragraph(0, 0) == 0


def test_resolve_partitioner():
    _, _, part = make()
    assert resolve_partitioner(part, "paragraph") == part.by_paragraph
    assert resolve_partitioner(part, None) == part.by_line
    custom = lambda start, end: 0
    assert resolve_partitioner(part, custom) is custom
    with pytest.raises(ConfigError):
        resolve_partitioner(part, "sentence")


def test_paragraph_pass_over_range_ending_in_blank_lines():
    buf, store, part = make("aaa\n\n\n\nbbb")
    part.by_paragraph(0, 4)
    assert ranges(store) == [(0, 3)]
    part.by_paragraph(0, 4)
    assert ranges(store) == [(0, 3)]
