import pytest

from redacted.engine.spans import REDACTION, SpanStore, is_redaction
from redacted.errors import InvalidRangeError, UnknownSpanError


@pytest.fixture
def store():
    return SpanStore()


def test_create_and_get(store):
    h = store.create(2, 5)
    sp = store.get(h)
    assert (sp.start, sp.end, sp.hidden, sp.cache, sp.kind) == (2, 5, False, None, REDACTION)


def test_create_rejects_inverted_range(store):
    with pytest.raises(InvalidRangeError):
        store.create(5, 2)
    assert len(store) == 0


def test_invalid_range_is_value_error(store):
    with pytest.raises(ValueError):
        store.create(1, 0)


def test_handles_are_unique(store):
    assert len({store.create(0, 1) for _ in range(5)}) == 5


def test_query_intersection(store):
    a = store.create(0, 5)
    b = store.create(5, 10)
    c = store.create(12, 15)
    assert set(store.query(4, 6)) == {a, b}
    assert set(store.query(5, 12)) == {b}
    assert set(store.query(10, 12)) == set()
    assert set(store.query(0, 100)) == {a, b, c}


def test_query_empty_span_and_empty_range(store):
    empty = store.create(3, 3)
    wide = store.create(0, 10)
    assert set(store.query(3, 4)) == {empty, wide}
    assert set(store.query(5, 5)) == {wide}


def test_remove_where_only_matching_kind(store):
    red = store.create(0, 5)
    note = store.create(0, 5, kind="highlight")
    assert store.remove_where(0, 5, is_redaction) == 1
    assert red not in store
    assert note in store


def test_remove_where_leaves_outside_spans(store):
    inside = store.create(2, 4)
    outside = store.create(10, 12)
    store.remove_where(0, 5, lambda sp: True)
    assert inside not in store
    assert outside in store


def test_remove_unknown_handle(store):
    with pytest.raises(UnknownSpanError):
        store.remove(42)
    with pytest.raises(KeyError):
        store.get(42)


def test_at(store):
    a = store.create(0, 3)
    store.create(3, 6)
    assert store.at(2) == [a]
    assert store.at(6) == []


class TestAdjust:
    """Spans follow edits the way editor overlays do."""

    def test_insert_before_shifts(self, store):
        h = store.create(5, 8)
        store.get(h).cache = "***"
        store.adjust(0, 0, 2)
        sp = store.get(h)
        assert (sp.start, sp.end, sp.cache) == (7, 10, "***")

    def test_insert_at_start_shifts(self, store):
        h = store.create(5, 8)
        store.adjust(5, 0, 1)
        assert (store.get(h).start, store.get(h).end) == (6, 9)

    def test_insert_at_end_is_outside(self, store):
        h = store.create(5, 8)
        store.get(h).cache = "***"
        store.adjust(8, 0, 4)
        sp = store.get(h)
        assert (sp.start, sp.end, sp.cache) == (5, 8, "***")

    def test_insert_inside_grows_and_drops_cache(self, store):
        h = store.create(5, 8)
        store.get(h).cache = "***"
        store.adjust(6, 0, 2)
        sp = store.get(h)
        assert (sp.start, sp.end, sp.cache) == (5, 10, None)

    def test_delete_overlapping_start(self, store):
        h = store.create(5, 10)
        store.adjust(3, 4, 0)  # removes [3, 7)
        sp = store.get(h)
        assert (sp.start, sp.end) == (3, 6)

    def test_delete_overlapping_end(self, store):
        h = store.create(5, 10)
        store.adjust(8, 4, 0)  # removes [8, 12)
        sp = store.get(h)
        assert (sp.start, sp.end) == (5, 8)

    def test_delete_whole_span_destroys_it(self, store):
        h = store.create(5, 10)
        store.adjust(4, 8, 0)
        assert h not in store

    def test_replace_inside(self, store):
        h = store.create(0, 10)
        store.adjust(2, 3, 1)
        sp = store.get(h)
        assert (sp.start, sp.end, sp.cache) == (0, 8, None)

    def test_delete_after_untouched(self, store):
        h = store.create(0, 3)
        store.get(h).cache = "***"
        store.adjust(3, 2, 0)
        sp = store.get(h)
        assert (sp.start, sp.end, sp.cache) == (0, 3, "***")


def test_clear_reaches_spans_outside_any_range(store):
    at_end = store.create(10, 10)
    note = store.create(10, 10, kind="highlight")
    assert store.query(0, 10) == []
    assert store.clear(is_redaction) == 1
    assert at_end not in store
    assert note in store
