"""
3D molecular geometry and its depth-sorted 2D projection.

Rotation is applied as yaw (about the vertical y axis) followed by pitch
(about the horizontal x axis). Camera depth is the resulting z coordinate;
larger z is nearer to the viewer.
"""

from __future__ import annotations
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple
from dataclasses import dataclass
import math
import logging

import numpy as np

from .constants import AUTOROTATE_STEP_DEG, DRAG_DEGREES_PER_PIXEL, MOLECULE_SCALE

logger = logging.getLogger(__name__)

ROLE_CENTRAL = "central"
ROLE_BONDED = "bonded"
ROLE_LONE_PAIR = "lonePair"

# draw sizes per role, before depth scaling
ROLE_RADIUS = {ROLE_CENTRAL: 20.0, ROLE_BONDED: 15.0, ROLE_LONE_PAIR: 12.0}
ROLE_OPACITY = {ROLE_CENTRAL: 0.9, ROLE_BONDED: 0.9, ROLE_LONE_PAIR: 0.5}


@dataclass(frozen=True)
class Atom3D:
    x: float
    y: float
    z: float
    role: str = ROLE_BONDED
    label: str = ""

    @property
    def position(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)


@dataclass(frozen=True)
class MoleculeShape:
    key: str
    name: str
    formula: str
    central_atom: str
    bond_pairs: int
    lone_pairs: int
    angle: str
    example: str
    atoms: Tuple[Atom3D, ...]


def _shape(key, name, formula, central, angle, example, *ligands) -> MoleculeShape:
    s = MOLECULE_SCALE
    atoms = [Atom3D(0.0, 0.0, 0.0, ROLE_CENTRAL, central)]
    for x, y, z, role in ligands:
        atoms.append(Atom3D(x * s, y * s, z * s, role))
    bonded = sum(1 for a in atoms if a.role == ROLE_BONDED)
    lone = sum(1 for a in atoms if a.role == ROLE_LONE_PAIR)
    return MoleculeShape(key, name, formula, central, bonded, lone, angle, example, tuple(atoms))


B, L = ROLE_BONDED, ROLE_LONE_PAIR

MOLECULE_SHAPES: Dict[str, MoleculeShape] = {
    "linear": _shape("linear", "Linear", "AX2", "Be", "180°", "BeCl2, CO2, HCN",
                     (-1, 0, 0, B), (1, 0, 0, B)),
    "trigonal-planar": _shape("trigonal-planar", "Trigonal planar", "AX3", "B", "120°", "BF3, SO3, NO3-",
                              (0, -1, 0, B), (0.866, 0.5, 0, B), (-0.866, 0.5, 0, B)),
    "bent-ax2e": _shape("bent-ax2e", "Bent", "AX2E", "S", "~117°", "SO2, O3, NO2-",
                        (-0.866, 0.5, 0, B), (0.866, 0.5, 0, B), (0, -0.8, 0, L)),
    "tetrahedral": _shape("tetrahedral", "Tetrahedral", "AX4", "C", "109.5°", "CH4, CCl4, SO4 2-",
                          (0, -1, 0, B), (0.943, 0.333, 0, B), (-0.471, 0.333, 0.816, B),
                          (-0.471, 0.333, -0.816, B)),
    "trigonal-pyramidal": _shape("trigonal-pyramidal", "Trigonal pyramidal", "AX3E", "N", "~107°",
                                 "NH3, PCl3, H3O+",
                                 (0, 0.6, 0.8, B), (0.693, 0.6, -0.4, B), (-0.693, 0.6, -0.4, B),
                                 (0, -0.8, 0, L)),
    "bent-ax2e2": _shape("bent-ax2e2", "Bent", "AX2E2", "O", "~104.5°", "H2O, H2S, OF2",
                         (-0.6, 0.5, 0, B), (0.6, 0.5, 0, B), (0, -0.5, 0.5, L), (0, -0.5, -0.5, L)),
}

del B, L


def benzene_ring(show_hydrogen: bool = True, carbon_radius: float = 40.0, hydrogen_radius: float = 65.0) -> Tuple[Atom3D, ...]:
    """Planar C6H6 ring in the x-y plane, first carbon at 12 o'clock."""
    atoms: List[Atom3D] = []
    for i in range(6):
        angle = math.radians(i * 60 - 90)
        atoms.append(Atom3D(carbon_radius * math.cos(angle), carbon_radius * math.sin(angle), 0.0, ROLE_BONDED, "C"))
    if show_hydrogen:
        for i in range(6):
            angle = math.radians(i * 60 - 90)
            atoms.append(Atom3D(hydrogen_radius * math.cos(angle), hydrogen_radius * math.sin(angle), 0.0,
                                ROLE_BONDED, "H"))
    return tuple(atoms)


class RotationState:
    """Pitch/yaw in degrees, both kept modulo 360."""

    def __init__(self, pitch: float = 0.0, yaw: float = 0.0):
        self.pitch = pitch % 360.0
        self.yaw = yaw % 360.0

    def rotate(self, d_pitch: float = 0.0, d_yaw: float = 0.0) -> None:
        self.pitch = (self.pitch + d_pitch) % 360.0
        self.yaw = (self.yaw + d_yaw) % 360.0

    def drag(self, dx: float, dy: float) -> None:
        """Pointer delta in pixels: vertical drag pitches, horizontal drag yaws."""
        self.rotate(d_pitch=dy * DRAG_DEGREES_PER_PIXEL, d_yaw=dx * DRAG_DEGREES_PER_PIXEL)

    def autorotate(self, step: float = AUTOROTATE_STEP_DEG) -> None:
        self.rotate(d_yaw=step)

    def reset(self) -> None:
        self.pitch = 0.0
        self.yaw = 0.0

    def __repr__(self) -> str:
        return f"<RotationState pitch={self.pitch:.1f} yaw={self.yaw:.1f}>"


def rotation_matrix(pitch_deg: float, yaw_deg: float) -> np.ndarray:
    """Combined matrix: yaw about y first, then pitch about x."""
    ry = math.radians(yaw_deg)
    rx = math.radians(pitch_deg)
    yaw = np.array([
        [math.cos(ry), 0.0, -math.sin(ry)],
        [0.0, 1.0, 0.0],
        [math.sin(ry), 0.0, math.cos(ry)],
    ])
    pitch = np.array([
        [1.0, 0.0, 0.0],
        [0.0, math.cos(rx), -math.sin(rx)],
        [0.0, math.sin(rx), math.cos(rx)],
    ])
    return pitch @ yaw


class ProjectedAtom(NamedTuple):
    index: int       # index into the source geometry
    x: float
    y: float
    depth: float
    role: str
    label: str
    radius: float
    opacity: float


class BondSegment(NamedTuple):
    x1: float
    y1: float
    x2: float
    y2: float
    dashed: bool
    opacity: float


def transform(atoms: Sequence[Atom3D], rotation: RotationState) -> np.ndarray:
    """Camera-space positions, shape (n, 3), in source order."""
    if not atoms:
        return np.zeros((0, 3))
    local = np.array([a.position for a in atoms], dtype=float)
    return local @ rotation_matrix(rotation.pitch, rotation.yaw).T


def project(atoms: Sequence[Atom3D], rotation: RotationState) -> List[ProjectedAtom]:
    """
    Rotate and project the geometry, returning atoms sorted back-to-front
    (ascending depth). Apparent radius and opacity both scale by 1 + z/300;
    opacity is capped at 1.
    """
    cam = transform(atoms, rotation)
    projected = []
    for i, (a, (x, y, z)) in enumerate(zip(atoms, cam)):
        scale = 1.0 + z / 300.0
        projected.append(ProjectedAtom(
            index=i,
            x=float(x),
            y=float(y),
            depth=float(z),
            role=a.role,
            label=a.label,
            radius=ROLE_RADIUS.get(a.role, 15.0) * scale,
            opacity=min(1.0, max(0.0, ROLE_OPACITY.get(a.role, 0.9) * scale)),
        ))
    projected.sort(key=lambda p: p.depth)
    return projected


def bonds(projected: Sequence[ProjectedAtom], lone_pair_length: float = 0.7) -> List[BondSegment]:
    """
    Bonds from the central atom to every other atom, in draw order.
    Lone pairs are dashed, fainter and drawn to 70% of their length.
    """
    central = next((p for p in projected if p.role == ROLE_CENTRAL), None)
    if central is None:
        return []
    out: List[BondSegment] = []
    for p in projected:
        if p.role == ROLE_CENTRAL:
            continue
        if p.role == ROLE_LONE_PAIR:
            out.append(BondSegment(central.x, central.y, p.x * lone_pair_length, p.y * lone_pair_length, True, 0.6))
        else:
            opacity = min(1.0, max(0.0, 0.8 + p.depth / 200.0))
            out.append(BondSegment(central.x, central.y, p.x, p.y, False, opacity))
    return out


def ring_bonds(projected: Sequence[ProjectedAtom]) -> List[BondSegment]:
    """C-C ring and C-H bonds for the benzene geometry (carbons are indices 0-5)."""
    by_index = {p.index: p for p in projected}
    out: List[BondSegment] = []
    for i in range(6):
        a, b = by_index.get(i), by_index.get((i + 1) % 6)
        if a is not None and b is not None:
            out.append(BondSegment(a.x, a.y, b.x, b.y, False, 1.0))
        h = by_index.get(i + 6)
        if a is not None and h is not None:
            out.append(BondSegment(a.x, a.y, h.x, h.y, False, 0.8))
    return out


def get_shape(key: str) -> MoleculeShape:
    try:
        return MOLECULE_SHAPES[key]
    except KeyError:
        raise ValueError(f"Unknown molecular shape: {key}") from None
