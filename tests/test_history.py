import pytest

from engine.history import TickHistory, TickSample


def fill(history, n):
    for t in range(1, n + 1):
        history.append(TickSample(t, t * 0.05, {"value": float(t)}))


def test_window_keeps_most_recent_samples():
    h = TickHistory(capacity=30)
    fill(h, 100)
    assert len(h) == 30
    assert h.oldest.tick == 100 - 30 + 1
    assert h.latest.tick == 100
    assert h.ticks() == list(range(71, 101))


def test_below_capacity_keeps_everything():
    h = TickHistory(capacity=30)
    fill(h, 5)
    assert len(h) == 5
    assert h.series("value") == [1.0, 2.0, 3.0, 4.0, 5.0]


def test_series_skips_missing_keys():
    h = TickHistory(capacity=3)
    h.append(TickSample(1, 0.0, {"a": 1.0}))
    h.append(TickSample(2, 0.1, {"b": 2.0}))
    assert h.series("a") == [1.0]


def test_clear_and_empty_accessors():
    h = TickHistory(capacity=3)
    fill(h, 3)
    h.clear()
    assert len(h) == 0
    assert h.latest is None
    assert h.oldest is None


def test_invalid_capacity():
    with pytest.raises(ValueError):
        TickHistory(capacity=0)


def test_sample_to_dict():
    d = TickSample(4, 0.2, {"ph": 7.0}).to_dict()
    assert d == {"tick": 4, "time": 0.2, "outputs": {"ph": 7.0}}
