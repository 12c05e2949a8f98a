from __future__ import annotations
from typing import Dict, List, Optional, Sequence, Tuple
from dataclasses import dataclass
import logging

import numpy as np

from .constants import (
    BROWNIAN_KICK,
    CONTAINER_BOUNDS,
    MATTER_BOUNDS,
    SETTLING_DRIFT,
    SETTLING_FLOOR,
    SETTLING_JITTER,
    TETHER_AMPLITUDE,
    EPSILON,
)

logger = logging.getLogger(__name__)

MODE_BROWNIAN = "brownian"
MODE_SETTLING = "settling"
MODE_TETHERED = "tethered"


class Particle:
    """
    A point entity owned by exactly one ParticleSystem.
    """

    def __init__(
        self,
        uid: int,
        pos: np.ndarray,
        vel: Optional[np.ndarray] = None,
        radius: float = 3.0,
        kind: str = "solution",
        color: str = "solution",
        group: Optional[int] = None
    ):
        self.uid = uid
        self.pos: np.ndarray = np.array(pos, dtype=float)
        self.vel: np.ndarray = np.array(vel if vel is not None else np.zeros(2), dtype=float)
        self.radius = float(radius)
        self.kind = kind
        self.color = color
        # molecule id for tethered motion; particles in a group move rigidly
        self.group = uid if group is None else group
        self.home: np.ndarray = self.pos.copy()

    def speed(self) -> float:
        return float(np.hypot(self.vel[0], self.vel[1]))

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.uid,
            "x": float(self.pos[0]),
            "y": float(self.pos[1]),
            "vx": float(self.vel[0]),
            "vy": float(self.vel[1]),
            "radius": self.radius,
            "kind": self.kind,
            "color": self.color,
        }

    def __repr__(self) -> str:
        return f"<Particle {self.uid} kind={self.kind} pos={self.pos} vel={self.vel}>"


@dataclass(frozen=True)
class ParticleClass:
    """Fixed per-class configuration: count, size, speed cap and motion mode."""
    name: str
    count: int
    radius: float
    max_speed: float
    color: str
    mode: str = MODE_BROWNIAN
    interval_ms: int = 50
    size_label: str = ""
    tyndall: bool = False
    bounds: Tuple[float, float, float, float] = CONTAINER_BOUNDS
    # composition of each molecule for tethered classes, e.g. ("A", "B")
    molecule: Tuple[str, ...] = ("A",)
    molecule_spacing: float = 15.0


DISPERSION_CLASSES: Dict[str, ParticleClass] = {
    "solution": ParticleClass("solution", 50, 3.0, 3.0, "solution", size_label="< 1nm"),
    "colloid": ParticleClass("colloid", 25, 8.0, 1.5, "colloid", size_label="1-100nm", tyndall=True),
    "suspension": ParticleClass("suspension", 15, 15.0, 1.5, "suspension", mode=MODE_SETTLING,
                                interval_ms=100, size_label="> 100nm"),
}

MATTER_CLASSES: Dict[str, Tuple[ParticleClass, ...]] = {
    "pure-element": (
        ParticleClass("element", 30, 8.0, 0.0, "element-a", mode=MODE_TETHERED, bounds=MATTER_BOUNDS),
    ),
    "pure-compound": (
        ParticleClass("compound", 15, 8.0, 0.0, "compound", mode=MODE_TETHERED, bounds=MATTER_BOUNDS,
                      molecule=("compound-a", "compound-b"), molecule_spacing=15.0),
    ),
    "mixture": (
        ParticleClass("element", 10, 8.0, 0.0, "element-a", mode=MODE_TETHERED, bounds=MATTER_BOUNDS),
        ParticleClass("compound", 10, 8.0, 0.0, "mixture", mode=MODE_TETHERED, bounds=MATTER_BOUNDS,
                      molecule=("compound-a", "mixture-b"), molecule_spacing=12.0),
    ),
}


class ParticleSystem:
    """
    Time-stepped collection of particles inside a rectangular container.

    Typical usage:
        system = ParticleSystem(seed=1)
        system.seed_particles([DISPERSION_CLASSES["colloid"]])
        system.step()
    """

    def __init__(self, bounds: Tuple[float, float, float, float] = CONTAINER_BOUNDS, seed: Optional[int] = None):
        self.bounds = tuple(float(b) for b in bounds)
        self.rng = np.random.default_rng(seed=seed)
        self.particles: List[Particle] = []
        self.classes: Tuple[ParticleClass, ...] = ()
        self.frame = 0

    # -----------------------
    # Seeding
    # -----------------------
    def seed_particles(self, classes: Sequence[ParticleClass]) -> None:
        """
        Replace all particles with freshly randomized ones for the given classes.
        Called on construction and whenever the simulation class changes.
        """
        self.particles = []
        self.classes = tuple(classes)
        self.frame = 0
        if self.classes:
            self.bounds = self.classes[0].bounds
        xmin, xmax, ymin, ymax = self.bounds
        uid = 0
        group = 0
        for cls in self.classes:
            for _ in range(cls.count):
                if cls.mode == MODE_TETHERED:
                    span = cls.molecule_spacing * (len(cls.molecule) - 1)
                    base = np.array([
                        self.rng.uniform(xmin + 10.0, xmax - 10.0 - span),
                        self.rng.uniform(ymin + 10.0, ymax - 10.0),
                    ])
                    for offset, color in enumerate(cls.molecule):
                        pos = base + np.array([offset * cls.molecule_spacing, 0.0])
                        self.particles.append(Particle(uid, pos, radius=cls.radius, kind=cls.name,
                                                       color=color, group=group))
                        uid += 1
                else:
                    pos = np.array([self.rng.uniform(xmin, xmax), self.rng.uniform(ymin, ymax)])
                    vel = self.rng.uniform(-1.0, 1.0, size=2)
                    radius = cls.radius + self.rng.uniform(0.0, 2.0)
                    p = Particle(uid, pos, vel, radius=radius, kind=cls.name, color=cls.color, group=group)
                    self._clamp_speed(p, cls.max_speed)
                    self.particles.append(p)
                    uid += 1
                group += 1
        logger.debug("Seeded %d particles for classes %s", len(self.particles), [c.name for c in self.classes])

    def clear(self) -> None:
        self.particles = []
        self.classes = ()
        self.frame = 0

    # -----------------------
    # Integration step
    # -----------------------
    def step(self) -> None:
        """Advance every particle by one tick according to its class mode."""
        if not self.particles:
            return
        by_name = {c.name: c for c in self.classes}
        group_jitter: Dict[int, np.ndarray] = {}
        for p in self.particles:
            cls = by_name[p.kind]
            if cls.mode == MODE_SETTLING:
                self._settle(p)
            elif cls.mode == MODE_TETHERED:
                if p.group not in group_jitter:
                    group_jitter[p.group] = self.rng.uniform(-TETHER_AMPLITUDE, TETHER_AMPLITUDE, size=2)
                self._tether(p, group_jitter[p.group])
            else:
                self._brownian(p, cls.max_speed)
        self.frame += 1

    def _brownian(self, p: Particle, max_speed: float) -> None:
        """
        Random walk with elastic walls: move, perturb velocity, reflect and
        clamp on crossing a wall, then rescale to the speed cap.
        """
        xmin, xmax, ymin, ymax = self.bounds
        new_pos = p.pos + p.vel
        new_vel = p.vel + self.rng.uniform(-BROWNIAN_KICK, BROWNIAN_KICK, size=2)

        if new_pos[0] < xmin or new_pos[0] > xmax:
            new_vel[0] = -new_vel[0]
        if new_pos[1] < ymin or new_pos[1] > ymax:
            new_vel[1] = -new_vel[1]

        p.pos = np.array([min(max(new_pos[0], xmin), xmax), min(max(new_pos[1], ymin), ymax)])
        p.vel = new_vel
        self._clamp_speed(p, max_speed)

    def _settle(self, p: Particle) -> None:
        """Constant downward drift plus lateral jitter, resting on the floor."""
        xmin, xmax, _, _ = self.bounds
        floor = min(SETTLING_FLOOR, self.bounds[3])
        old = p.pos.copy()
        x = p.pos[0] + self.rng.uniform(-SETTLING_JITTER, SETTLING_JITTER)
        y = min(p.pos[1] + SETTLING_DRIFT, floor)
        p.pos = np.array([min(max(x, xmin), xmax), y])
        p.vel = p.pos - old

    def _tether(self, p: Particle, jitter: np.ndarray) -> None:
        xmin, xmax, ymin, ymax = self.bounds
        target = p.home + jitter
        old = p.pos.copy()
        p.pos = np.array([min(max(target[0], xmin), xmax), min(max(target[1], ymin), ymax)])
        p.vel = p.pos - old

    @staticmethod
    def _clamp_speed(p: Particle, max_speed: float) -> None:
        speed = p.speed()
        if max_speed > 0.0 and speed > max_speed:
            p.vel = p.vel / (speed + EPSILON) * max_speed

    # -----------------------
    # Queries
    # -----------------------
    def in_bounds(self) -> bool:
        xmin, xmax, ymin, ymax = self.bounds
        return all(xmin <= p.pos[0] <= xmax and ymin <= p.pos[1] <= ymax for p in self.particles)

    def max_speed(self) -> float:
        return max((p.speed() for p in self.particles), default=0.0)

    def mean_height(self) -> float:
        if not self.particles:
            return 0.0
        return float(np.mean([p.pos[1] for p in self.particles]))

    def snapshot(self) -> List[Dict[str, object]]:
        return [p.to_dict() for p in self.particles]

    def __len__(self) -> int:
        return len(self.particles)
