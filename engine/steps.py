from __future__ import annotations
from typing import Any, Dict, List, Optional, Sequence
from dataclasses import dataclass, field
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Phase:
    """One named demonstration phase and its static visual configuration."""
    title: str
    description: str = ""
    visual: Dict[str, Any] = field(default_factory=dict)


class StepMachine:
    """
    Ordered ring of phases.

    next() and prev() wrap around; go_to() validates bounds. Autoplay is a
    flag: whoever drives the ticks calls on_tick(), which behaves like next()
    while autoplay is on.
    """

    def __init__(self, phases: Sequence[Phase], stop_at_end: bool = False):
        if not phases:
            raise ValueError("StepMachine needs at least one phase")
        self.phases: List[Phase] = list(phases)
        self.stop_at_end = stop_at_end
        self.index = 0
        self.is_auto_playing = False

    @property
    def count(self) -> int:
        return len(self.phases)

    @property
    def current(self) -> Phase:
        return self.phases[self.index]

    @property
    def visual(self) -> Dict[str, Any]:
        return self.current.visual

    def next(self) -> int:
        self.index = (self.index + 1) % self.count
        return self.index

    def prev(self) -> int:
        self.index = (self.index - 1) % self.count
        return self.index

    def go_to(self, index: int) -> int:
        """Jump to a phase. Jumping pauses autoplay."""
        if not 0 <= index < self.count:
            raise IndexError(f"Step {index} out of range 0..{self.count - 1}")
        self.index = index
        self.is_auto_playing = False
        return self.index

    def toggle_autoplay(self) -> bool:
        self.is_auto_playing = not self.is_auto_playing
        if self.is_auto_playing and self.stop_at_end and self.index == self.count - 1:
            # replay from the first phase
            self.index = 0
        logger.debug("Autoplay %s at step %d", "on" if self.is_auto_playing else "off", self.index)
        return self.is_auto_playing

    def on_tick(self) -> bool:
        """
        Advance one phase if autoplaying.

        Returns:
            bool: True if the index changed.
        """
        if not self.is_auto_playing:
            return False
        if self.stop_at_end and self.index == self.count - 1:
            self.is_auto_playing = False
            return False
        self.next()
        return True

    def reset(self) -> None:
        self.index = 0
        self.is_auto_playing = False

    def state(self) -> Dict[str, Any]:
        return {"step_index": self.index, "step_count": self.count, "is_auto_playing": self.is_auto_playing}


# -----------------------
# Static phase tables
# -----------------------
IONIC_BOND_PHASES = (
    Phase("Initial state",
          "Na has 11 electrons with 1 in the outer shell; Cl has 17 with 7 in the outer shell.",
          {"electron_at": "Na", "electron_visible": True, "outer_shell_visible": True,
           "ion_charges_visible": False, "transfer_arrow": False, "bond_line": False, "offset": 0.0}),
    Phase("Electron transfer",
          "Na gives up its outer electron to Cl.",
          {"electron_at": "Cl", "electron_visible": True, "outer_shell_visible": False,
           "ion_charges_visible": False, "transfer_arrow": True, "bond_line": False, "offset": 0.0}),
    Phase("Ions formed",
          "Na becomes Na+ and Cl becomes Cl-.",
          {"electron_at": "Cl", "electron_visible": False, "outer_shell_visible": False,
           "ion_charges_visible": True, "transfer_arrow": False, "bond_line": False, "offset": 0.0}),
    Phase("Ionic bond",
          "The oppositely charged ions attract electrostatically and form an ionic bond.",
          {"electron_at": "Cl", "electron_visible": False, "outer_shell_visible": False,
           "ion_charges_visible": True, "transfer_arrow": False, "bond_line": True, "offset": 50.0}),
)

HYBRIDIZATION_PHASES = (
    Phase("Atomic orbitals", "Unhybridized s, p and d orbitals.",
          {"show_atomic_orbitals": True, "show_arrow": False, "show_hybrid_label": False, "nucleus_y": 230.0}),
    Phase("Mixing", "Orbitals begin to mix.",
          {"show_atomic_orbitals": True, "show_arrow": True, "show_hybrid_label": False, "nucleus_y": 230.0}),
    Phase("Hybrid orbitals", "Equivalent hybrid orbitals form.",
          {"show_atomic_orbitals": False, "show_arrow": True, "show_hybrid_label": True, "nucleus_y": 170.0}),
    Phase("Geometry", "Hybrid orbitals spread out to minimize repulsion.",
          {"show_atomic_orbitals": False, "show_arrow": False, "show_hybrid_label": True, "nucleus_y": 170.0}),
)

# s, p, d orbitals consumed and hybrid orbitals produced
HYBRIDIZATION_TYPES: Dict[str, Dict[str, Any]] = {
    "sp": {"s": 1, "p": 1, "d": 0, "hybrid": 2, "geometry": "linear", "angle": "180°"},
    "sp2": {"s": 1, "p": 2, "d": 0, "hybrid": 3, "geometry": "trigonal planar", "angle": "120°"},
    "sp3": {"s": 1, "p": 3, "d": 0, "hybrid": 4, "geometry": "tetrahedral", "angle": "109.5°"},
    "sp3d": {"s": 1, "p": 3, "d": 1, "hybrid": 5, "geometry": "trigonal bipyramidal", "angle": "90°/120°"},
    "sp3d2": {"s": 1, "p": 3, "d": 2, "hybrid": 6, "geometry": "octahedral", "angle": "90°"},
}
