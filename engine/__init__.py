# engine/__init__.py
__all__ = [
    "Parameter", "ParameterStore", "TickScheduler", "TickHistory", "TickSample",
    "Simulation", "SimulationSession", "SimulationManager",
    "simulation_type_for", "create_simulation"
]

from .parameters import Parameter, ParameterStore
from .scheduler import TickScheduler
from .history import TickHistory, TickSample
from .simulation import Simulation
from .simulation_manager import SimulationSession, SimulationManager
from .dispatch import simulation_type_for, create_simulation
