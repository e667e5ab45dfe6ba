import random
import threading
from collections import Counter

import pytest

from owlshop.chooser import Choice, Chooser
from owlshop.errors import ChooserError


def action(name):
    def fn():
        return None
    fn.__name__ = name
    return fn


def test_selection_frequency_matches_weights():
    a, b, c = action("a"), action("b"), action("c")
    chooser = Chooser([Choice(a, 1), Choice(b, 2), Choice(c, 7)], rng=random.Random(42))

    n = 50_000
    counts = Counter(chooser.pick() for _ in range(n))

    assert abs(counts[a] / n - 0.1) < 0.01
    assert abs(counts[b] / n - 0.2) < 0.01
    assert abs(counts[c] / n - 0.7) < 0.01


def test_shop_weights_frequency():
    weights = [1000, 50, 30, 8, 6, 5]
    actions = [action(f"a{i}") for i in range(len(weights))]
    chooser = Chooser([Choice(a, w) for a, w in zip(actions, weights)], rng=random.Random(7))
    assert chooser.total == 1099

    n = 100_000
    counts = Counter(chooser.pick() for _ in range(n))
    for a, w in zip(actions, weights):
        assert abs(counts[a] / n - w / 1099) < 0.005


def test_single_entry_always_picked():
    only = action("only")
    chooser = Chooser([Choice(only, 3)])
    assert all(chooser.pick() is only for _ in range(1000))


def test_empty_table_fails_at_construction():
    with pytest.raises(ChooserError):
        Chooser([])


@pytest.mark.parametrize("weight", [0, -1, -100])
def test_non_positive_weight_fails_at_construction(weight):
    with pytest.raises(ChooserError, match="positive"):
        Chooser([Choice(action("ok"), 5), Choice(action("bad"), weight)])


@pytest.mark.parametrize("weight", [1.5, "3", True])
def test_non_integer_weight_fails_at_construction(weight):
    with pytest.raises(ChooserError):
        Chooser([Choice(action("bad"), weight)])


def test_non_callable_action_rejected_at_registration():
    with pytest.raises(ChooserError, match="not callable"):
        Chooser([Choice(action("ok"), 1), Choice("not a function", 1)])


def test_pick_from_many_threads():
    a, b = action("a"), action("b")
    chooser = Chooser([Choice(a, 1), Choice(b, 1)])
    results = []
    lock = threading.Lock()

    def worker():
        local = [chooser.pick() for _ in range(1000)]
        with lock:
            results.extend(local)

    threads = [threading.Thread(target=worker) for _ in range(16)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(results) == 16_000
    assert set(results) == {a, b}
