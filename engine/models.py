"""
Closed-form chemistry models used by the demonstrations.

Every function here is pure: the result depends only on the arguments
(current parameter values and the elapsed tick count). The models are
pedagogical approximations, not physically rigorous solvers.
"""

from __future__ import annotations
from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple
from dataclasses import dataclass
import math

from .constants import (
    ANALYTE_CONCENTRATION,
    ANALYTE_VOLUME_ML,
    EQUILIBRIUM_HORIZON,
    TITRANT_CONCENTRATION,
)


# -----------------------
# Reaction-rate convergence (N2 + 3H2 <=> 2NH3, exothermic)
# -----------------------
class RateSample(NamedTuple):
    forward: float
    reverse: float
    progress: float

    @property
    def at_equilibrium(self) -> bool:
        return self.progress >= 1.0


def base_rates(temperature: float, pressure: float, concentration: float) -> Tuple[float, float]:
    """
    Forward and reverse base rates before any convergence.

    Args:
        temperature: °C. Higher temperature favors the (endothermic) reverse reaction.
        pressure: atm.
        concentration: N2 concentration in mol/L.

    Returns:
        (F0, R0)
    """
    temp_factor = math.exp(-0.02 * (temperature - 25.0))
    pressure_factor = math.sqrt(max(pressure, 0.0))
    forward = 50.0 * temp_factor * pressure_factor * concentration
    if pressure_factor <= 0.0:
        # zero pressure: reverse rate is unbounded, report it as infinite
        return forward, math.inf
    reverse = 30.0 / (temp_factor * pressure_factor)
    return forward, reverse


def rate_convergence(
    temperature: float,
    pressure: float,
    concentration: float,
    tick: int,
    horizon: int = EQUILIBRIUM_HORIZON
) -> RateSample:
    """
    Blend the forward and reverse rates toward each other over `horizon` ticks.

    This is an illustrative convergence curve, not the solution of a kinetic
    rate law: F moves halfway to R0 and R moves 30% toward F0.
    """
    f0, r0 = base_rates(temperature, pressure, concentration)
    progress = min(max(tick, 0) / float(horizon), 1.0)
    forward = f0 * (1.0 - 0.5 * progress) + r0 * 0.5 * progress
    reverse = r0 * (1.0 - 0.3 * progress) + f0 * 0.3 * progress
    return RateSample(forward, reverse, progress)


# -----------------------
# Titration: 25 mL 0.1 M NaOH titrated with 0.1 M HCl
# -----------------------
def titration_ph(
    titrant_ml: float,
    analyte_ml: float = ANALYTE_VOLUME_ML,
    analyte_conc: float = ANALYTE_CONCENTRATION,
    titrant_conc: float = TITRANT_CONCENTRATION
) -> float:
    """
    pH of a strong base (analyte) after adding `titrant_ml` of strong acid.

    The logarithm is only taken of the reactant that is in excess, so its
    argument is always positive. The result is clamped into [0, 14].
    """
    titrant_ml = max(0.0, float(titrant_ml))
    moles_analyte = analyte_ml * 0.001 * analyte_conc
    moles_titrant = titrant_ml * 0.001 * titrant_conc
    total_litres = (analyte_ml + titrant_ml) / 1000.0

    if moles_titrant < moles_analyte:
        excess_oh = (moles_analyte - moles_titrant) / total_litres
        poh = -math.log10(excess_oh)
        return min(14.0, 14.0 - poh)
    if moles_titrant > moles_analyte:
        excess_h = (moles_titrant - moles_analyte) / total_litres
        return max(0.0, -math.log10(excess_h))
    return 7.0


def equivalence_volume(
    analyte_ml: float = ANALYTE_VOLUME_ML,
    analyte_conc: float = ANALYTE_CONCENTRATION,
    titrant_conc: float = TITRANT_CONCENTRATION
) -> float:
    """Titrant volume (mL) at which titrant and analyte moles are equal."""
    return analyte_ml * analyte_conc / titrant_conc


def is_near_equivalence(titrant_ml: float, tolerance_ml: float = 0.5) -> bool:
    return abs(titrant_ml - equivalence_volume()) < tolerance_ml


def titration_curve(volumes: Iterable[float]) -> List[Tuple[float, float]]:
    """Return [(volume, pH), ...] for the given titrant volumes."""
    return [(float(v), titration_ph(v)) for v in volumes]


# -----------------------
# Indicator color
# -----------------------
@dataclass(frozen=True)
class Indicator:
    """Acid-base indicator with a linear color transition between two pH values."""
    name: str
    low_ph: float
    high_ph: float
    low_rgba: Tuple[float, float, float, float]
    high_rgba: Tuple[float, float, float, float]


INDICATORS: Dict[str, Indicator] = {
    # colorless below 8.2, pink above 10
    "phenolphthalein": Indicator("phenolphthalein", 8.2, 10.0, (255, 105, 180, 0.0), (255, 105, 180, 0.6)),
    # red below 3.1, yellow above 4.4
    "methyl-orange": Indicator("methyl-orange", 3.1, 4.4, (255, 69, 0, 0.6), (255, 215, 0, 0.6)),
}


class IndicatorColor(NamedTuple):
    r: float
    g: float
    b: float
    alpha: float
    intensity: float  # 0 at/below low_ph, 1 at/above high_ph


def indicator_color(ph: float, indicator: str = "phenolphthalein") -> IndicatorColor:
    """
    Interpolate the solution color for a pH value.

    Raises:
        KeyError: unknown indicator name.
    """
    ind = INDICATORS[indicator]
    if ph <= ind.low_ph:
        t = 0.0
    elif ph >= ind.high_ph:
        t = 1.0
    else:
        t = (ph - ind.low_ph) / (ind.high_ph - ind.low_ph)
    channels = [lo + (hi - lo) * t for lo, hi in zip(ind.low_rgba, ind.high_rgba)]
    return IndicatorColor(channels[0], channels[1], channels[2], channels[3], t)


# -----------------------
# Discrete progress (redox demonstrations)
# -----------------------
PHASE_INITIAL = "initial"
PHASE_ELECTRON_TRANSFER = "electron-transfer"
PHASE_PRODUCT_FORMING = "product-forming"
PHASE_COMPLETE = "complete"

REDOX_PHASES = (PHASE_INITIAL, PHASE_ELECTRON_TRANSFER, PHASE_PRODUCT_FORMING, PHASE_COMPLETE)


def redox_phase(progress: float) -> str:
    """Map a 0-100 progress scalar onto its phase. Level-triggered."""
    p = max(0.0, min(100.0, progress))
    if p >= 100.0:
        return PHASE_COMPLETE
    if p >= 80.0:
        return PHASE_PRODUCT_FORMING
    if p >= 20.0:
        return PHASE_ELECTRON_TRANSFER
    return PHASE_INITIAL


class RedoxVisual(NamedTuple):
    phase: str
    reducer_radius: float
    reducer_opacity: float
    reducer_scale: float
    oxidizer_scale: float
    oxidizer_is_product: bool
    show_half_equations: bool
    show_labels: bool
    show_transfer_arrow: bool
    progress_bar_width: float


def redox_visual_state(progress: float) -> RedoxVisual:
    """
    Visual configuration for a given progress value.

    Re-entering a range re-applies exactly the same state, so scrubbing the
    progress backwards restores earlier visuals.
    """
    p = max(0.0, min(100.0, progress))
    return RedoxVisual(
        phase=redox_phase(p),
        reducer_radius=30.0 if p < 50 else 30.0 - p * 0.2,
        reducer_opacity=0.3 if p > 80 else 1.0,
        reducer_scale=0.7 if p > 50 else 1.0,
        oxidizer_scale=1.2 if p > 50 else 1.0,
        oxidizer_is_product=p > 80,
        show_half_equations=p > 10,
        show_labels=p > 30,
        show_transfer_arrow=20 < p < 80,
        progress_bar_width=p * 2.0,
    )


def should_spawn_electron(progress: float) -> bool:
    """Electrons are emitted every 10 progress units inside the transfer window."""
    return 20 < progress < 80 and int(progress) % 10 == 0


def electron_arc_position(
    progress: float,
    start: Tuple[float, float] = (100.0, 100.0),
    end: Tuple[float, float] = (200.0, 100.0),
    apex_y: float = 70.0,
    height: float = 30.0
) -> Tuple[float, float]:
    """Position along the electron hop arc for progress 0-100."""
    x = start[0] + (end[0] - start[0]) * (progress / 100.0)
    y = apex_y - math.sin(progress * math.pi / 100.0) * height
    return x, y


# -----------------------
# Galvanic cell (Zn | Zn2+ || Cu2+ | Cu)
# -----------------------
class ElectrodeMasses(NamedTuple):
    zinc: float
    copper: float


def electrode_masses(emitted: int, initial: float = 100.0) -> ElectrodeMasses:
    """Electrode masses after `emitted` electron batches: Zn dissolves, Cu plates out."""
    n = max(0, int(emitted))
    return ElectrodeMasses(max(0.0, initial - 0.5 * n), min(200.0, initial + 0.3 * n))


def electron_path_progress(age_ticks: int, speed: float = 0.1) -> Optional[float]:
    """Fraction of the external circuit covered by an electron, or None once it has arrived."""
    progress = age_ticks * speed
    if progress >= 1.0 - 1e-9:
        return None
    return progress


# -----------------------
# Atom structure (Bohr model, H..Ar)
# -----------------------
SHELL_CONFIGURATIONS: Dict[str, Tuple[int, int, Tuple[int, ...]]] = {
    # symbol: (protons, neutrons, electrons per shell)
    "H": (1, 0, (1,)),
    "He": (2, 2, (2,)),
    "Li": (3, 4, (2, 1)),
    "Be": (4, 5, (2, 2)),
    "B": (5, 6, (2, 3)),
    "C": (6, 6, (2, 4)),
    "N": (7, 7, (2, 5)),
    "O": (8, 8, (2, 6)),
    "F": (9, 10, (2, 7)),
    "Ne": (10, 10, (2, 8)),
    "Na": (11, 12, (2, 8, 1)),
    "Mg": (12, 12, (2, 8, 2)),
    "Al": (13, 14, (2, 8, 3)),
    "Si": (14, 14, (2, 8, 4)),
    "P": (15, 16, (2, 8, 5)),
    "S": (16, 16, (2, 8, 6)),
    "Cl": (17, 18, (2, 8, 7)),
    "Ar": (18, 22, (2, 8, 8)),
}

SHELL_RADII = (30.0, 55.0, 80.0)


def electron_positions(
    symbol: str,
    elapsed_s: float,
    center: Tuple[float, float] = (100.0, 100.0)
) -> List[Tuple[int, float, float]]:
    """
    Orbiting electron positions at time `elapsed_s`.

    Electrons are spread evenly on each shell, starting at 12 o'clock; shell k
    completes one revolution every 3 + k seconds.

    Returns:
        [(shell_index, x, y), ...]
    """
    _, _, shells = SHELL_CONFIGURATIONS[symbol]
    out: List[Tuple[int, float, float]] = []
    for shell_index, count in enumerate(shells):
        radius = SHELL_RADII[shell_index]
        spin = 2.0 * math.pi * elapsed_s / (3.0 + shell_index)
        for i in range(count):
            angle = (i / count) * 2.0 * math.pi - math.pi / 2.0 + spin
            out.append((shell_index, center[0] + radius * math.cos(angle), center[1] + radius * math.sin(angle)))
    return out
