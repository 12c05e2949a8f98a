from __future__ import annotations
from typing import Any, Dict, List, Optional, Tuple
import logging

from .constants import (
    DEFAULT_HISTORY_CAPACITY,
    DEFAULT_TICK_INTERVAL_MS,
    EQUILIBRIUM_HORIZON,
    EQUILIBRIUM_INTERVAL_MS,
    PROJECTION_INTERVAL_MS,
    TITRANT_MAX_ML,
    TITRANT_STEP_ML,
    TITRATION_HISTORY_CAPACITY,
    TITRATION_INTERVAL_MS,
)
from .parameters import Parameter, ParameterStore, choice
from . import models
from .particles import DISPERSION_CLASSES, MATTER_CLASSES, ParticleSystem
from .projection import (
    MOLECULE_SHAPES,
    RotationState,
    benzene_ring,
    bonds,
    project,
    ring_bonds,
)
from .steps import HYBRIDIZATION_PHASES, HYBRIDIZATION_TYPES, IONIC_BOND_PHASES, StepMachine

logger = logging.getLogger(__name__)


class Simulation:
    """
    Base class for one demonstration type.

    A simulation owns its ParameterStore and its model state. step() advances
    one tick and returns the outputs for that tick; snapshot() exposes the
    renderable state. Subclasses implement update() and, when they have model
    state, _reset_state().
    """

    tag = "base"
    title = ""
    interval_ms: float = DEFAULT_TICK_INTERVAL_MS
    history_capacity = DEFAULT_HISTORY_CAPACITY
    # name of the choice parameter whose change resets the session
    variant_param: Optional[str] = None

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self.params = ParameterStore(self.build_parameters())
        self.tick_index = 0
        self.events: List[Tuple[int, str]] = []
        self._reset_state()

    def build_parameters(self) -> List[Parameter]:
        return []

    def _reset_state(self) -> None:
        pass

    def reset(self) -> None:
        """Return model state to defaults. Parameter values are kept."""
        self.tick_index = 0
        self.events = []
        self._reset_state()

    @property
    def finished(self) -> bool:
        """True when the demonstration has nothing further to animate."""
        return False

    @property
    def variant(self) -> Optional[str]:
        if self.variant_param is None:
            return None
        return self.params.option(self.variant_param)

    def set_variant(self, option: str) -> None:
        """Select a variant by option name and reset model state."""
        if self.variant_param is None:
            raise ValueError(f"{self.tag} has no variants")
        param = self.params.get(self.variant_param)
        if option not in param.options:
            raise ValueError(f"Unknown {self.variant_param} '{option}' for {self.tag}; choose from {param.options}")
        param.value = param.options.index(option)
        self.reset()

    def step(self) -> Dict[str, float]:
        self.tick_index += 1
        return self.update(self.tick_index)

    def update(self, tick: int) -> Dict[str, float]:
        raise NotImplementedError

    def emit(self, name: str) -> None:
        self.events.append((self.tick_index, name))
        logger.info("%s: %s at tick %d", self.tag, name, self.tick_index)

    def snapshot(self) -> Dict[str, Any]:
        return {"tag": self.tag, "title": self.title, "tick": self.tick_index, "variant": self.variant}

    def __repr__(self) -> str:
        return f"<{type(self).__name__} tick={self.tick_index} variant={self.variant}>"


class PlaceholderSimulation(Simulation):
    """Shown for topics that have no interactive demonstration yet."""

    tag = "placeholder"
    title = "Demonstration in development"
    interval_ms = 1000

    def update(self, tick: int) -> Dict[str, float]:
        return {}

    def snapshot(self) -> Dict[str, Any]:
        snap = super().snapshot()
        snap["message"] = ("An interactive demonstration for this topic is in development. "
                           "Use the AI tutor to study it in the meantime.")
        return snap


# -----------------------
# Closed-form model demonstrations
# -----------------------
class EquilibriumSimulation(Simulation):
    """N2 + 3H2 <=> 2NH3: forward and reverse rates converging over the horizon."""

    tag = "equilibrium"
    title = "Chemical equilibrium"
    interval_ms = EQUILIBRIUM_INTERVAL_MS

    def __init__(self, seed: Optional[int] = None, horizon: int = EQUILIBRIUM_HORIZON):
        self.horizon = horizon
        super().__init__(seed=seed)

    def build_parameters(self) -> List[Parameter]:
        return [
            Parameter("temperature", 0, 100, 25, step=1, unit="°C"),
            Parameter("pressure", 0.5, 5, 1, step=0.5, unit="atm"),
            Parameter("concentration", 0.5, 3, 1, step=0.5, unit="mol/L", label="N2 concentration"),
        ]

    def _reset_state(self) -> None:
        self.equilibrium_reached = False

    def update(self, tick: int) -> Dict[str, float]:
        p = self.params
        sample = models.rate_convergence(p["temperature"], p["pressure"], p["concentration"], tick, self.horizon)
        if sample.at_equilibrium and not self.equilibrium_reached:
            self.equilibrium_reached = True
            self.emit("equilibrium-reached")
        f0, r0 = models.base_rates(p["temperature"], p["pressure"], p["concentration"])
        return {
            "forward": sample.forward,
            "reverse": sample.reverse,
            "progress": sample.progress,
            "equilibrium": 1.0 if self.equilibrium_reached else 0.0,
            "base_forward": f0,
            "base_reverse": r0,
        }

    def snapshot(self) -> Dict[str, Any]:
        snap = super().snapshot()
        p = self.params
        snap["base_rates"] = models.base_rates(p["temperature"], p["pressure"], p["concentration"])
        snap["equilibrium_reached"] = self.equilibrium_reached
        return snap


class TitrationSimulation(Simulation):
    """25 mL 0.1 M NaOH titrated with 0.1 M HCl, 0.5 mL per tick up to 50 mL."""

    tag = "titration"
    title = "Acid-base titration"
    interval_ms = TITRATION_INTERVAL_MS
    history_capacity = TITRATION_HISTORY_CAPACITY
    variant_param = "indicator"

    def build_parameters(self) -> List[Parameter]:
        return [choice("indicator", list(models.INDICATORS), 0)]

    def _reset_state(self) -> None:
        self.volume = 0.0

    @property
    def finished(self) -> bool:
        return self.volume >= TITRANT_MAX_ML

    def update(self, tick: int) -> Dict[str, float]:
        if not self.finished:
            self.volume = min(TITRANT_MAX_ML, self.volume + TITRANT_STEP_ML)
        return self._outputs()

    def _outputs(self) -> Dict[str, float]:
        ph = models.titration_ph(self.volume)
        color = models.indicator_color(ph, self.variant)
        return {
            "volume": self.volume,
            "ph": ph,
            "indicator_alpha": color.alpha,
            "indicator_intensity": color.intensity,
            "at_equivalence": 1.0 if models.is_near_equivalence(self.volume) else 0.0,
        }

    def snapshot(self) -> Dict[str, Any]:
        snap = super().snapshot()
        snap.update(self._outputs())
        snap["color"] = models.indicator_color(snap["ph"], self.variant)
        snap["equivalence_volume"] = models.equivalence_volume()
        snap["burette_fill"] = 1.0 - self.volume / TITRANT_MAX_ML
        return snap


class RedoxSimulation(Simulation):
    """Redox demonstration driven by a 0-100 progress scalar (+2 per tick)."""

    tag = "redox"
    title = "Redox reactions"
    variant_param = "reaction"

    REACTIONS = {
        "zn-cu": {"equation": "Zn + CuSO4 -> ZnSO4 + Cu", "reducer": "Zn", "oxidizer": "Cu2+"},
        "na-cl": {"equation": "2Na + Cl2 -> 2NaCl", "reducer": "Na", "oxidizer": "Cl2"},
        "fe-o2": {"equation": "3Fe + 2O2 -> Fe3O4", "reducer": "Fe", "oxidizer": "O2"},
    }

    def build_parameters(self) -> List[Parameter]:
        return [choice("reaction", list(self.REACTIONS), 0)]

    def _reset_state(self) -> None:
        self.progress = 0.0
        self.electrons: List[List[float]] = []   # [id, hop progress 0-100]
        self._next_electron = 0

    @property
    def finished(self) -> bool:
        return self.progress >= 100.0

    def scrub(self, progress: float) -> models.RedoxVisual:
        """Jump to a progress value; the visual state for its range is re-applied."""
        self.progress = max(0.0, min(100.0, float(progress)))
        return models.redox_visual_state(self.progress)

    def update(self, tick: int) -> Dict[str, float]:
        if not self.finished:
            self.progress = min(100.0, self.progress + 2.0)
            if self.progress >= 100.0:
                self.emit("reaction-complete")
        # electrons hop across and disappear once they arrive
        self.electrons = [[eid, p + 5.0] for eid, p in self.electrons if p + 5.0 <= 100.0]
        if models.should_spawn_electron(self.progress):
            self.electrons.append([self._next_electron, 0.0])
            self._next_electron += 1
        return {
            "progress": self.progress,
            "phase": float(models.REDOX_PHASES.index(models.redox_phase(self.progress))),
            "electrons": float(len(self.electrons)),
        }

    def snapshot(self) -> Dict[str, Any]:
        snap = super().snapshot()
        snap["reaction"] = self.REACTIONS[self.variant]
        snap["progress"] = self.progress
        snap["visual"] = models.redox_visual_state(self.progress)
        snap["electrons"] = [models.electron_arc_position(p) for _, p in self.electrons]
        return snap


class GalvanicCellSimulation(Simulation):
    """Zn/Cu cell: one electron batch every 10 ticks, electrons cross in 10 ticks."""

    tag = "galvanic-cell"
    title = "Galvanic cell"
    EMIT_EVERY = 10
    MAX_ELECTRONS = 10

    def _reset_state(self) -> None:
        self.emitted = 0
        self.emit_ticks: List[int] = []

    @property
    def finished(self) -> bool:
        return models.electrode_masses(self.emitted).zinc <= 0.0

    def update(self, tick: int) -> Dict[str, float]:
        if tick % self.EMIT_EVERY == 0 and not self.finished:
            self.emitted += 1
            self.emit_ticks = (self.emit_ticks + [tick])[-self.MAX_ELECTRONS:]
        masses = models.electrode_masses(self.emitted)
        return {
            "zinc_mass": masses.zinc,
            "copper_mass": masses.copper,
            "electrons_in_flight": float(len(self._in_flight())),
        }

    def _in_flight(self) -> List[float]:
        out = []
        for t in self.emit_ticks:
            progress = models.electron_path_progress(self.tick_index - t)
            if progress is not None:
                out.append(progress)
        return out

    def snapshot(self) -> Dict[str, Any]:
        snap = super().snapshot()
        snap["masses"] = models.electrode_masses(self.emitted)
        snap["electrons"] = self._in_flight()
        return snap


class AtomStructureSimulation(Simulation):
    """Bohr model of H..Ar with electrons orbiting their shells."""

    tag = "atom-structure"
    title = "Atomic structure"
    variant_param = "element"

    def build_parameters(self) -> List[Parameter]:
        return [
            choice("element", list(models.SHELL_CONFIGURATIONS), 0),
            Parameter("electron_cloud", 0, 1, 0, step=1, label="Show electron cloud"),
        ]

    def update(self, tick: int) -> Dict[str, float]:
        protons, neutrons, shells = models.SHELL_CONFIGURATIONS[self.variant]
        return {
            "protons": float(protons),
            "neutrons": float(neutrons),
            "electrons": float(sum(shells)),
            "shells": float(len(shells)),
            "valence": float(shells[-1]),
        }

    def snapshot(self) -> Dict[str, Any]:
        snap = super().snapshot()
        protons, neutrons, shells = models.SHELL_CONFIGURATIONS[self.variant]
        snap["configuration"] = "-".join(str(n) for n in shells)
        snap["electron_positions"] = models.electron_positions(self.variant, self.tick_index * self.interval_ms / 1000.0)
        snap["electron_cloud"] = bool(self.params["electron_cloud"])
        # denser shells get a slightly stronger cloud
        snap["cloud_opacity"] = [0.1 + (n / 8.0) * 0.2 for n in shells]
        return snap


class CovalentBondSimulation(Simulation):
    """Shared electron pairs in simple covalent molecules."""

    tag = "covalent-bond"
    title = "Covalent bonds"
    interval_ms = 1000
    variant_param = "molecule"

    MOLECULES = {
        "H2": {"atoms": ("H", "H"), "bond_order": 1, "shared_pairs": 1, "polar": False},
        "O2": {"atoms": ("O", "O"), "bond_order": 2, "shared_pairs": 2, "polar": False},
        "N2": {"atoms": ("N", "N"), "bond_order": 3, "shared_pairs": 3, "polar": False},
        "HCl": {"atoms": ("H", "Cl"), "bond_order": 1, "shared_pairs": 1, "polar": True},
        "H2O": {"atoms": ("H", "O", "H"), "bond_order": 1, "shared_pairs": 2, "polar": True},
    }

    def build_parameters(self) -> List[Parameter]:
        return [
            choice("molecule", list(self.MOLECULES), 0),
            Parameter("show_electrons", 0, 1, 1, step=1),
        ]

    def update(self, tick: int) -> Dict[str, float]:
        mol = self.MOLECULES[self.variant]
        return {
            "bond_order": float(mol["bond_order"]),
            "shared_pairs": float(mol["shared_pairs"]),
            "polar": 1.0 if mol["polar"] else 0.0,
        }

    def snapshot(self) -> Dict[str, Any]:
        snap = super().snapshot()
        snap["molecule"] = dict(self.MOLECULES[self.variant])
        snap["show_electrons"] = bool(self.params["show_electrons"])
        return snap


# -----------------------
# Particle demonstrations
# -----------------------
class DispersionSimulation(Simulation):
    """Solution, colloid and suspension particles; Tyndall beam for colloids."""

    tag = "dispersion"
    title = "Dispersion systems"
    variant_param = "system"

    def build_parameters(self) -> List[Parameter]:
        return [
            choice("system", list(DISPERSION_CLASSES), 0),
            Parameter("tyndall", 0, 1, 0, step=1, label="Light beam"),
        ]

    @property
    def particle_class(self):
        return DISPERSION_CLASSES[self.variant]

    @property
    def interval_ms(self) -> float:
        return self.particle_class.interval_ms

    def _reset_state(self) -> None:
        self.system = ParticleSystem(seed=self.seed)
        self._seeded_class: Optional[str] = None
        self._ensure_seeded()

    def _ensure_seeded(self) -> None:
        if self._seeded_class != self.variant:
            self.system.seed_particles([self.particle_class])
            self._seeded_class = self.variant
            logger.debug("Dispersion re-seeded for %s", self.variant)

    def tyndall_visible(self) -> bool:
        return bool(self.params["tyndall"]) and self.particle_class.tyndall

    def update(self, tick: int) -> Dict[str, float]:
        self._ensure_seeded()
        self.system.step()
        speeds = [p.speed() for p in self.system.particles]
        return {
            "count": float(len(self.system)),
            "mean_speed": sum(speeds) / len(speeds) if speeds else 0.0,
            "max_speed": max(speeds, default=0.0),
            "mean_height": self.system.mean_height(),
            "tyndall": 1.0 if self.tyndall_visible() else 0.0,
        }

    def snapshot(self) -> Dict[str, Any]:
        snap = super().snapshot()
        snap["bounds"] = self.system.bounds
        snap["particles"] = self.system.snapshot()
        snap["size_label"] = self.particle_class.size_label
        snap["tyndall"] = self.tyndall_visible()
        return snap


class MatterTypesSimulation(Simulation):
    """Pure elements, pure compounds and mixtures as jittering particles."""

    tag = "matter-types"
    title = "Types of matter"
    variant_param = "matter"

    def build_parameters(self) -> List[Parameter]:
        return [
            choice("matter", list(MATTER_CLASSES), 0),
            Parameter("animate", 0, 1, 1, step=1),
        ]

    def _reset_state(self) -> None:
        self.system = ParticleSystem(seed=self.seed)
        self._seeded_class: Optional[str] = None
        self._ensure_seeded()

    def _ensure_seeded(self) -> None:
        if self._seeded_class != self.variant:
            self.system.seed_particles(MATTER_CLASSES[self.variant])
            self._seeded_class = self.variant

    def update(self, tick: int) -> Dict[str, float]:
        self._ensure_seeded()
        if self.params["animate"]:
            self.system.step()
        particles = self.system.particles
        return {
            "count": float(len(particles)),
            "species": float(len({p.color for p in particles})),
            "molecules": float(len({p.group for p in particles})),
        }

    def snapshot(self) -> Dict[str, Any]:
        snap = super().snapshot()
        snap["bounds"] = self.system.bounds
        snap["particles"] = self.system.snapshot()
        return snap


# -----------------------
# Projection demonstrations
# -----------------------
class MolecularGeometrySimulation(Simulation):
    """VSEPR shapes, auto-rotating unless the user is dragging."""

    tag = "vsepr"
    title = "VSEPR molecular geometry"
    interval_ms = PROJECTION_INTERVAL_MS
    variant_param = "molecule"

    def build_parameters(self) -> List[Parameter]:
        return [choice("molecule", list(MOLECULE_SHAPES), 0)]

    def _reset_state(self) -> None:
        self.rotation = RotationState()
        self.is_dragging = False

    @property
    def shape(self):
        return MOLECULE_SHAPES[self.variant]

    def begin_drag(self) -> None:
        self.is_dragging = True

    def drag(self, dx: float, dy: float) -> None:
        self.rotation.drag(dx, dy)

    def end_drag(self) -> None:
        self.is_dragging = False

    def update(self, tick: int) -> Dict[str, float]:
        if not self.is_dragging:
            self.rotation.autorotate()
        projected = project(self.shape.atoms, self.rotation)
        return {
            "pitch": self.rotation.pitch,
            "yaw": self.rotation.yaw,
            "nearest_depth": projected[-1].depth,
            "farthest_depth": projected[0].depth,
        }

    def snapshot(self) -> Dict[str, Any]:
        snap = super().snapshot()
        projected = project(self.shape.atoms, self.rotation)
        shape = self.shape
        snap.update({
            "name": shape.name,
            "formula": shape.formula,
            "central_atom": shape.central_atom,
            "angle": shape.angle,
            "atoms": projected,
            "bonds": bonds(projected),
            "rotation": (self.rotation.pitch, self.rotation.yaw),
        })
        return snap


class BenzeneSimulation(Simulation):
    """Benzene ring: Kekulé, delocalized and rotatable 3D views."""

    tag = "benzene"
    title = "Benzene"
    interval_ms = PROJECTION_INTERVAL_MS
    variant_param = "view"

    def build_parameters(self) -> List[Parameter]:
        return [
            choice("view", ["kekule", "delocalized", "3d"], 0),
            Parameter("show_hydrogen", 0, 1, 1, step=1),
            Parameter("rotation", 0, 360, 0, step=1, unit="°"),
        ]

    def _rotation(self) -> RotationState:
        yaw = self.params["rotation"] if self.variant == "3d" else 0.0
        return RotationState(yaw=yaw)

    def update(self, tick: int) -> Dict[str, float]:
        atoms = benzene_ring(bool(self.params["show_hydrogen"]))
        return {"atoms": float(len(atoms)), "yaw": self._rotation().yaw}

    def snapshot(self) -> Dict[str, Any]:
        snap = super().snapshot()
        projected = project(benzene_ring(bool(self.params["show_hydrogen"])), self._rotation())
        snap["atoms"] = projected
        snap["bonds"] = ring_bonds(projected)
        # alternating double bonds in the Kekulé structure, a ring circle otherwise
        snap["double_bonds"] = [(1, 2), (3, 4), (5, 0)] if self.variant == "kekule" else []
        snap["delocalized_ring"] = self.variant != "kekule"
        return snap


# -----------------------
# Step demonstrations
# -----------------------
class IonicBondSimulation(Simulation):
    """Four-phase Na + Cl electron transfer, cycling every 2 s on autoplay."""

    tag = "ionic-bond"
    title = "Ionic bond formation"
    interval_ms = 2000

    def _reset_state(self) -> None:
        self.machine = StepMachine(IONIC_BOND_PHASES)

    def update(self, tick: int) -> Dict[str, float]:
        self.machine.on_tick()
        return {"step": float(self.machine.index), "offset": float(self.machine.visual["offset"])}

    def snapshot(self) -> Dict[str, Any]:
        snap = super().snapshot()
        snap.update(self.machine.state())
        snap["phase"] = self.machine.current
        return snap


class HybridizationSimulation(Simulation):
    """Orbital hybridization walk-through; autoplay stops on the final phase."""

    tag = "hybridization"
    title = "Orbital hybridization"
    interval_ms = 1000
    variant_param = "hybridization"

    def build_parameters(self) -> List[Parameter]:
        return [choice("hybridization", list(HYBRIDIZATION_TYPES), 2)]

    def _reset_state(self) -> None:
        self.machine = StepMachine(HYBRIDIZATION_PHASES, stop_at_end=True)

    @property
    def finished(self) -> bool:
        return self.machine.index == self.machine.count - 1 and not self.machine.is_auto_playing

    def update(self, tick: int) -> Dict[str, float]:
        self.machine.on_tick()
        counts = HYBRIDIZATION_TYPES[self.variant]
        return {
            "step": float(self.machine.index),
            "hybrid_orbitals": float(counts["hybrid"]),
            "p_orbitals": float(counts["p"]),
            "d_orbitals": float(counts["d"]),
        }

    def snapshot(self) -> Dict[str, Any]:
        snap = super().snapshot()
        snap.update(self.machine.state())
        snap["phase"] = self.machine.current
        snap["orbitals"] = dict(HYBRIDIZATION_TYPES[self.variant])
        return snap
