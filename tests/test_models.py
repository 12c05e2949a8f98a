import math

import pytest

from engine import models


# -----------------------
# Titration
# -----------------------
def test_ph_exactly_neutral_at_equivalence():
    assert models.titration_ph(25.0) == 7.0
    assert models.equivalence_volume() == pytest.approx(25.0)


def test_ph_sides_of_equivalence():
    for v in (0.0, 5.0, 24.5):
        assert models.titration_ph(v) > 7
    for v in (25.5, 30.0, 50.0):
        assert models.titration_ph(v) < 7


def test_ph_non_increasing_over_titration():
    volumes = [i * 0.5 for i in range(101)]
    curve = models.titration_curve(volumes)
    phs = [ph for _, ph in curve]
    assert all(a >= b for a, b in zip(phs, phs[1:]))
    assert all(0.0 <= ph <= 14.0 for ph in phs)


def test_titration_endpoints():
    assert models.titration_ph(0.0) == pytest.approx(13.0)
    # 2.5 mmol excess HCl in 75 mL
    assert models.titration_ph(50.0) == pytest.approx(-math.log10(2.5 / 75.0))
    assert models.titration_ph(50.0) < 2


def test_near_equivalence_predicate():
    assert models.is_near_equivalence(25.0)
    assert models.is_near_equivalence(24.6)
    assert not models.is_near_equivalence(24.5)
    assert not models.is_near_equivalence(30.0)


# -----------------------
# Rates
# -----------------------
def test_rate_gap_strictly_decreases_to_horizon():
    gaps = []
    for tick in range(0, 21):
        s = models.rate_convergence(25, 1, 1, tick)
        gaps.append(abs(s.forward - s.reverse))
    assert all(a > b for a, b in zip(gaps, gaps[1:]))


def test_progress_saturates_at_horizon():
    assert not models.rate_convergence(25, 1, 1, 19).at_equilibrium
    s = models.rate_convergence(25, 1, 1, 20)
    assert s.progress == 1.0
    assert s.at_equilibrium
    assert models.rate_convergence(25, 1, 1, 50) == s


def test_base_rates_at_reference_conditions():
    f0, r0 = models.base_rates(25, 1, 1)
    assert f0 == pytest.approx(50.0)
    assert r0 == pytest.approx(30.0)


def test_higher_temperature_favors_reverse():
    f_cold, r_cold = models.base_rates(0, 1, 1)
    f_hot, r_hot = models.base_rates(100, 1, 1)
    assert f_hot < f_cold
    assert r_hot > r_cold


def test_zero_pressure_reverse_rate_is_infinite():
    _, r0 = models.base_rates(25, 0, 1)
    assert math.isinf(r0)


# -----------------------
# Indicators
# -----------------------
def test_phenolphthalein_colorless_in_acid_pink_in_base():
    acid = models.indicator_color(3.0, "phenolphthalein")
    base = models.indicator_color(12.0, "phenolphthalein")
    mid = models.indicator_color(9.1, "phenolphthalein")
    assert acid.alpha == 0.0
    assert base.alpha == pytest.approx(0.6)
    assert mid.intensity == pytest.approx(0.5)


def test_methyl_orange_red_to_yellow():
    red = models.indicator_color(2.0, "methyl-orange")
    yellow = models.indicator_color(6.0, "methyl-orange")
    assert (red.r, red.g, red.b) == (255, 69, 0)
    assert (yellow.r, yellow.g, yellow.b) == (255, 215, 0)


def test_unknown_indicator_raises():
    with pytest.raises(KeyError):
        models.indicator_color(7.0, "litmus")


# -----------------------
# Redox / galvanic / atoms
# -----------------------
def test_redox_phase_boundaries():
    assert models.redox_phase(0) == models.PHASE_INITIAL
    assert models.redox_phase(19.9) == models.PHASE_INITIAL
    assert models.redox_phase(20) == models.PHASE_ELECTRON_TRANSFER
    assert models.redox_phase(79) == models.PHASE_ELECTRON_TRANSFER
    assert models.redox_phase(80) == models.PHASE_PRODUCT_FORMING
    assert models.redox_phase(100) == models.PHASE_COMPLETE


def test_redox_visual_is_level_triggered():
    forward = models.redox_visual_state(60)
    models.redox_visual_state(95)
    assert models.redox_visual_state(60) == forward
    assert models.redox_visual_state(90).oxidizer_is_product
    assert not models.redox_visual_state(60).oxidizer_is_product


def test_electron_spawn_window():
    spawned = [p for p in range(0, 101, 2) if models.should_spawn_electron(p)]
    assert spawned == [30, 40, 50, 60, 70]


def test_electrode_masses_bounded():
    assert models.electrode_masses(0) == (100.0, 100.0)
    assert models.electrode_masses(10) == (95.0, 103.0)
    big = models.electrode_masses(1000)
    assert big.zinc == 0.0
    assert big.copper == 200.0


def test_electron_path_progress_expires():
    assert models.electron_path_progress(0) == 0.0
    assert models.electron_path_progress(5) == pytest.approx(0.5)
    assert models.electron_path_progress(10) is None


def test_electron_positions_follow_shells():
    positions = models.electron_positions("Na", 0.0)
    assert len(positions) == 11
    shells = [s for s, _, _ in positions]
    assert shells.count(0) == 2 and shells.count(1) == 8 and shells.count(2) == 1
    # first electron of the first shell starts at 12 o'clock
    _, x, y = positions[0]
    assert x == pytest.approx(100.0)
    assert y == pytest.approx(70.0)


def test_electron_orbit_period():
    start = models.electron_positions("H", 0.0)
    assert models.electron_positions("H", 3.0)[0][1:] == pytest.approx(start[0][1:])
