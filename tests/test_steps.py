import pytest

from engine.steps import HYBRIDIZATION_PHASES, IONIC_BOND_PHASES, StepMachine


def test_next_cycles_back_to_start():
    m = StepMachine(IONIC_BOND_PHASES)
    for _ in range(m.count):
        m.next()
    assert m.index == 0


def test_prev_from_start_wraps_to_last():
    m = StepMachine(IONIC_BOND_PHASES)
    assert m.prev() == m.count - 1


def test_go_to_validates_bounds():
    m = StepMachine(IONIC_BOND_PHASES)
    assert m.go_to(2) == 2
    with pytest.raises(IndexError):
        m.go_to(4)
    with pytest.raises(IndexError):
        m.go_to(-1)
    assert m.index == 2


def test_autoplay_advances_only_when_on():
    m = StepMachine(IONIC_BOND_PHASES)
    assert not m.on_tick()
    assert m.index == 0
    m.toggle_autoplay()
    for _ in range(5):
        m.on_tick()
    assert m.index == 1


def test_stop_at_end_halts_autoplay():
    m = StepMachine(HYBRIDIZATION_PHASES, stop_at_end=True)
    m.toggle_autoplay()
    for _ in range(10):
        m.on_tick()
    assert m.index == 3
    assert not m.is_auto_playing
    # manual navigation still wraps
    assert m.next() == 0


def test_autoplay_after_end_replays_from_start():
    m = StepMachine(HYBRIDIZATION_PHASES, stop_at_end=True)
    m.go_to(3)
    assert m.toggle_autoplay()
    assert m.index == 0
    assert m.on_tick()
    assert m.index == 1


def test_go_to_pauses_autoplay():
    m = StepMachine(IONIC_BOND_PHASES)
    m.toggle_autoplay()
    m.go_to(2)
    assert not m.is_auto_playing
    assert not m.on_tick()
    assert m.index == 2


def test_phase_visuals():
    m = StepMachine(IONIC_BOND_PHASES)
    assert m.visual["electron_at"] == "Na"
    m.go_to(3)
    assert m.visual["bond_line"]
    assert m.visual["offset"] == 50.0
    assert m.state() == {"step_index": 3, "step_count": 4, "is_auto_playing": False}


def test_empty_machine_rejected():
    with pytest.raises(ValueError):
        StepMachine([])
