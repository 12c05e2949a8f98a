from __future__ import annotations
from typing import Dict, List, Optional, Type
import logging

from .simulation import (
    AtomStructureSimulation,
    BenzeneSimulation,
    CovalentBondSimulation,
    DispersionSimulation,
    EquilibriumSimulation,
    GalvanicCellSimulation,
    HybridizationSimulation,
    IonicBondSimulation,
    MatterTypesSimulation,
    MolecularGeometrySimulation,
    PlaceholderSimulation,
    RedoxSimulation,
    Simulation,
    TitrationSimulation,
)

logger = logging.getLogger(__name__)

SIMULATION_TYPES: Dict[str, Type[Simulation]] = {
    cls.tag: cls for cls in (
        AtomStructureSimulation,
        BenzeneSimulation,
        CovalentBondSimulation,
        DispersionSimulation,
        EquilibriumSimulation,
        GalvanicCellSimulation,
        HybridizationSimulation,
        IonicBondSimulation,
        MatterTypesSimulation,
        MolecularGeometrySimulation,
        PlaceholderSimulation,
        RedoxSimulation,
        TitrationSimulation,
    )
}

# knowledge-point id -> simulation type tag. Several topics share one demonstration.
TOPIC_SIMULATIONS: Dict[str, str] = {
    "atom-structure": "atom-structure",
    "periodic-table": "atom-structure",
    "periodic-law": "atom-structure",
    "matter-types": "matter-types",
    "dispersion-system": "dispersion",
    "ionic-bond": "ionic-bond",
    "ionic-reaction": "ionic-bond",
    "covalent-bond": "covalent-bond",
    "metallic-bond": "covalent-bond",
    "intermolecular-force": "covalent-bond",
    "vsepr": "vsepr",
    "hybridization": "hybridization",
    "redox-reaction": "redox",
    "galvanic-cell": "galvanic-cell",
    "electrolysis": "galvanic-cell",
    "metal-corrosion": "galvanic-cell",
    "chemical-equilibrium": "equilibrium",
    "reaction-rate-factors": "equilibrium",
    "equilibrium-calculation": "equilibrium",
    "titration": "titration",
    "water-ionization": "titration",
    "salt-hydrolysis": "titration",
    "benzene": "benzene",
    "alkane": "benzene",
    "alkene": "benzene",
    "alkyne": "benzene",
}

PLACEHOLDER = PlaceholderSimulation.tag


def simulation_type_for(topic_id: str) -> str:
    """Type tag for a knowledge point. Unknown topics get the placeholder, never an error."""
    tag = TOPIC_SIMULATIONS.get(topic_id)
    if tag is None:
        logger.info("No demonstration for topic '%s'; using placeholder", topic_id)
        return PLACEHOLDER
    return tag


def create_simulation(tag: str, seed: Optional[int] = None) -> Simulation:
    """
    Build a fresh simulation for a type tag.

    Raises:
        ValueError: unknown tag.
    """
    try:
        cls = SIMULATION_TYPES[tag]
    except KeyError:
        raise ValueError(f"Unknown simulation type: {tag}") from None
    return cls(seed=seed)


def list_topics() -> List[str]:
    return sorted(TOPIC_SIMULATIONS)
