import numpy as np
import pytest

from engine.constants import SETTLING_FLOOR
from engine.particles import DISPERSION_CLASSES, MATTER_CLASSES, Particle, ParticleSystem


def seeded(name, seed=7):
    system = ParticleSystem(seed=seed)
    system.seed_particles([DISPERSION_CLASSES[name]])
    return system


@pytest.mark.parametrize("name", ["solution", "colloid"])
def test_brownian_particles_stay_in_bounds_under_cap(name):
    system = seeded(name)
    cap = DISPERSION_CLASSES[name].max_speed
    for _ in range(500):
        system.step()
        assert system.in_bounds()
        assert system.max_speed() <= cap + 1e-9


def test_class_counts():
    assert len(seeded("solution")) == 50
    assert len(seeded("colloid")) == 25
    assert len(seeded("suspension")) == 15


def test_suspension_settles_onto_floor():
    system = seeded("suspension")
    start = system.mean_height()
    for _ in range(600):
        system.step()
        assert system.in_bounds()
    assert system.mean_height() > start
    assert all(p.pos[1] == pytest.approx(SETTLING_FLOOR) for p in system.particles)


def test_same_seed_is_deterministic():
    a, b = seeded("colloid", seed=3), seeded("colloid", seed=3)
    for _ in range(20):
        a.step()
        b.step()
    assert np.allclose([p.pos for p in a.particles], [p.pos for p in b.particles])


def test_reseed_replaces_particles():
    system = seeded("solution")
    system.seed_particles([DISPERSION_CLASSES["suspension"]])
    assert len(system) == 15
    assert {p.kind for p in system.particles} == {"suspension"}
    assert system.frame == 0


def test_wall_crossing_reflects_velocity():
    system = ParticleSystem(seed=1)
    system.classes = (DISPERSION_CLASSES["solution"],)
    p = Particle(0, np.array([279.0, 100.0]), np.array([2.5, 0.0]), kind="solution")
    system.particles = [p]
    system.step()
    assert p.pos[0] == 280.0
    assert p.vel[0] < 0


def test_tethered_molecules_move_rigidly():
    system = ParticleSystem(seed=5)
    system.seed_particles(MATTER_CLASSES["pure-compound"])
    assert len(system) == 30
    for _ in range(10):
        system.step()
        assert system.in_bounds()
    by_group = {}
    for p in system.particles:
        by_group.setdefault(p.group, []).append(p)
    for atoms in by_group.values():
        a, b = atoms
        # both halves of a molecule share the same jitter unless a wall clamped one
        if system.bounds[0] < a.pos[0] < system.bounds[1] and system.bounds[0] < b.pos[0] < system.bounds[1]:
            assert (b.pos - a.pos) == pytest.approx(b.home - a.home)


def test_mixture_has_two_species_groups():
    system = ParticleSystem(seed=2)
    system.seed_particles(MATTER_CLASSES["mixture"])
    assert len(system) == 10 + 20
    assert {p.kind for p in system.particles} == {"element", "compound"}
