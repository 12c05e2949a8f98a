import pytest

from engine.dispatch import (
    SIMULATION_TYPES,
    TOPIC_SIMULATIONS,
    create_simulation,
    list_topics,
    simulation_type_for,
)
from engine.simulation import PlaceholderSimulation
from engine.simulation_manager import SimulationSession


def test_shared_demonstrations():
    assert simulation_type_for("periodic-law") == "atom-structure"
    assert simulation_type_for("salt-hydrolysis") == "titration"
    assert simulation_type_for("metal-corrosion") == "galvanic-cell"
    assert simulation_type_for("alkyne") == "benzene"
    assert simulation_type_for("intermolecular-force") == "covalent-bond"


def test_unknown_topic_gets_placeholder():
    assert simulation_type_for("organic-polymers") == "placeholder"
    session = SimulationSession.for_topic("organic-polymers")
    assert isinstance(session.simulation, PlaceholderSimulation)
    session.advance(3)
    assert session.latest.outputs == {}
    assert "in development" in session.snapshot()["message"]


def test_every_mapped_tag_is_constructible():
    for tag in set(TOPIC_SIMULATIONS.values()):
        sim = create_simulation(tag, seed=0)
        assert sim.tag == tag
        sim.step()


def test_create_simulation_unknown_tag():
    with pytest.raises(ValueError):
        create_simulation("no-such-demo")


def test_registry_and_topic_list():
    assert "placeholder" in SIMULATION_TYPES
    topics = list_topics()
    assert topics == sorted(topics)
    assert "titration" in topics
