import math

import pytest

from engine.parameters import Parameter, ParameterStore, choice


def make_store():
    return ParameterStore([
        Parameter("temperature", 0, 100, 25, step=1, unit="°C"),
        Parameter("pressure", 0.5, 5, 1, step=0.5, unit="atm"),
        choice("indicator", ["phenolphthalein", "methyl-orange"]),
    ])


def test_out_of_range_writes_are_clamped():
    store = make_store()
    assert store.set("temperature", 150) == 100
    assert store.set("temperature", -20) == 0
    assert store.set("pressure", 0.1) == 0.5
    store["pressure"] = 99
    assert store["pressure"] == 5


def test_values_snap_to_step_grid():
    store = make_store()
    assert store.set("pressure", 1.3) == pytest.approx(1.5)
    assert store.set("pressure", 1.2) == pytest.approx(1.0)


def test_nan_falls_back_to_minimum():
    p = Parameter("x", 2, 4, 3)
    p.value = math.nan
    assert p.value == 2


def test_unknown_parameter_raises_keyerror():
    store = make_store()
    with pytest.raises(KeyError):
        store.set("volume", 3)
    with pytest.raises(KeyError):
        store["volume"]


def test_duplicate_parameter_rejected():
    store = make_store()
    with pytest.raises(ValueError):
        store.add(Parameter("temperature", 0, 1, 0))


def test_choice_option_and_reset():
    store = make_store()
    assert store.option("indicator") == "phenolphthalein"
    store.set("indicator", 7)
    assert store.option("indicator") == "methyl-orange"
    store.set("temperature", 80)
    store.reset()
    assert store["temperature"] == 25
    assert store.option("indicator") == "phenolphthalein"


def test_describe_exposes_control_surface():
    desc = {d["name"]: d for d in make_store().describe()}
    assert desc["pressure"]["min"] == 0.5
    assert desc["pressure"]["step"] == 0.5
    assert desc["temperature"]["unit"] == "°C"
    assert desc["indicator"]["options"] == ["phenolphthalein", "methyl-orange"]


def test_invalid_parameter_definition():
    with pytest.raises(ValueError):
        Parameter("bad", 5, 1, 3)
    with pytest.raises(ValueError):
        Parameter("bad", 0, 1, 0, step=0)
