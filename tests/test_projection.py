import numpy as np
import pytest

from engine.projection import (
    MOLECULE_SHAPES,
    ROLE_CENTRAL,
    ROLE_LONE_PAIR,
    RotationState,
    benzene_ring,
    bonds,
    get_shape,
    project,
    ring_bonds,
    transform,
)


@pytest.mark.parametrize("key", list(MOLECULE_SHAPES))
def test_full_turn_restores_positions(key):
    atoms = MOLECULE_SHAPES[key].atoms
    base = transform(atoms, RotationState())
    assert np.allclose(transform(atoms, RotationState(pitch=360.0)), base)
    assert np.allclose(transform(atoms, RotationState(yaw=360.0)), base)
    rot = RotationState()
    for _ in range(720):
        rot.autorotate()
    assert np.allclose(transform(atoms, rot), base, atol=1e-9)


def test_identity_transform_returns_local_positions():
    atoms = MOLECULE_SHAPES["tetrahedral"].atoms
    cam = transform(atoms, RotationState())
    assert np.allclose(cam, np.array([a.position for a in atoms]))


def test_projection_sorted_back_to_front():
    rot = RotationState(pitch=30, yaw=45)
    for shape in MOLECULE_SHAPES.values():
        depths = [p.depth for p in project(shape.atoms, rot)]
        assert depths == sorted(depths)


def test_nearer_atoms_drawn_larger():
    shape = get_shape("linear")
    projected = project(shape.atoms, RotationState(yaw=90))
    ligands = [p for p in projected if p.role != ROLE_CENTRAL]
    far, near = ligands[0], ligands[-1]
    assert near.depth > far.depth
    assert near.radius > far.radius


def test_rotation_angles_wrap():
    rot = RotationState()
    rot.drag(dx=800, dy=-100)
    assert 0 <= rot.pitch < 360
    assert 0 <= rot.yaw < 360
    assert rot.yaw == pytest.approx(40.0)
    assert rot.pitch == pytest.approx(310.0)


def test_lone_pairs_dashed_and_shortened():
    shape = get_shape("bent-ax2e2")
    projected = project(shape.atoms, RotationState())
    segs = bonds(projected)
    assert len(segs) == 4
    lone = [s for s in segs if s.dashed]
    assert len(lone) == 2
    assert all(s.opacity == pytest.approx(0.6) for s in lone)
    lp = next(p for p in projected if p.role == ROLE_LONE_PAIR)
    assert any(s.x2 == pytest.approx(lp.x * 0.7) and s.y2 == pytest.approx(lp.y * 0.7) for s in lone)


def test_shape_counts():
    assert get_shape("tetrahedral").bond_pairs == 4
    assert get_shape("trigonal-pyramidal").lone_pairs == 1
    assert get_shape("bent-ax2e2").lone_pairs == 2


def test_unknown_shape_raises():
    with pytest.raises(ValueError):
        get_shape("octahedral")


def test_benzene_ring_bonds():
    with_h = project(benzene_ring(True), RotationState(yaw=30))
    without_h = project(benzene_ring(False), RotationState())
    assert len(with_h) == 12
    assert len(ring_bonds(with_h)) == 12
    assert len(ring_bonds(without_h)) == 6
