from __future__ import annotations
from typing import Any, Dict, List, Optional
import logging

from .dispatch import create_simulation, simulation_type_for
from .history import TickHistory, TickSample
from .scheduler import TickScheduler
from .simulation import Simulation

logger = logging.getLogger(__name__)


class SimulationSession:
    """
    One open demonstration: its simulation, scheduler and tick history.

    Usage:
        session = SimulationSession.for_topic("titration", seed=1)
        session.start()                 # ticks on a background thread
        session.set_parameter("indicator", 1)
        session.stop()

        session.advance(100)            # or step synchronously
    """

    def __init__(
        self,
        simulation: Simulation,
        topic_id: Optional[str] = None,
        history_capacity: Optional[int] = None,
        interval_ms: Optional[float] = None
    ):
        """
        Args:
            simulation (Simulation): The demonstration this session drives.
            topic_id (str, optional): Knowledge point that opened the session.
            history_capacity (int, optional): Overrides the simulation's default window.
            interval_ms (float, optional): Overrides the simulation's tick interval.
        """
        self.simulation = simulation
        self.topic_id = topic_id or simulation.tag
        self.history = TickHistory(history_capacity or simulation.history_capacity)
        self._interval_override = interval_ms
        self.scheduler = TickScheduler(self.tick, on_reset=self._clear_state, name=self.topic_id)
        self.last_error: Optional[BaseException] = None
        logger.info("Session opened: topic=%s type=%s", self.topic_id, simulation.tag)

    @classmethod
    def for_topic(cls, topic_id: str, seed: Optional[int] = None, **kwargs) -> "SimulationSession":
        """Dispatch a knowledge point to its demonstration; unknown topics get the placeholder."""
        return cls(create_simulation(simulation_type_for(topic_id), seed=seed), topic_id=topic_id, **kwargs)

    # -----------------------
    # Properties delegating to the simulation
    # -----------------------
    @property
    def tag(self) -> str:
        return self.simulation.tag

    @property
    def params(self):
        return self.simulation.params

    @property
    def interval_ms(self) -> float:
        if self._interval_override is not None:
            return self._interval_override
        return self.simulation.interval_ms

    @property
    def is_running(self) -> bool:
        return self.scheduler.is_running

    @property
    def tick_index(self) -> int:
        return self.simulation.tick_index

    @property
    def latest(self) -> Optional[TickSample]:
        return self.history.latest

    # -----------------------
    # Core stepping
    # -----------------------
    def tick(self) -> Optional[TickSample]:
        """
        Advance the simulation one tick and record its outputs.

        A fault is logged, stored on `last_error` and stops this session only.

        Returns:
            TickSample or None if the tick failed.
        """
        try:
            outputs = self.simulation.step()
        except Exception as e:
            logger.exception("Session %s failed at tick %d; stopping.", self.topic_id, self.simulation.tick_index)
            self.last_error = e
            self.scheduler.stop()
            return None
        sample = TickSample(
            tick=self.simulation.tick_index,
            simulated_time=self.simulation.tick_index * self.interval_ms / 1000.0,
            outputs=outputs,
        )
        self.history.append(sample)
        logger.debug("Session %s tick %d: %s", self.topic_id, sample.tick, outputs)
        if self.simulation.finished and self.scheduler.is_running:
            logger.info("Session %s finished at tick %d", self.topic_id, sample.tick)
            self.scheduler.stop()
        return sample

    def advance(self, n_ticks: int = 1) -> List[TickSample]:
        """
        Run n ticks synchronously. Useful for headless runs and tests.
        Stops early on a fault; a finished simulation keeps returning its
        final outputs.
        """
        if self.is_running:
            raise RuntimeError("advance() called while the session scheduler is running")
        samples = []
        for _ in range(n_ticks):
            sample = self.tick()
            if sample is None:
                break
            samples.append(sample)
        return samples

    # -----------------------
    # Lifecycle
    # -----------------------
    def start(self) -> None:
        self.last_error = None
        self.scheduler.start(self.interval_ms)

    def stop(self) -> None:
        self.scheduler.stop()

    def toggle(self) -> bool:
        """Play/pause. Returns the new running state."""
        if self.is_running:
            self.stop()
        else:
            self.start()
        return self.is_running

    def reset(self) -> None:
        """Stop ticking and return to the initial state; parameter values are kept."""
        self.scheduler.reset()

    def _clear_state(self) -> None:
        self.simulation.reset()
        self.history.clear()
        self.last_error = None
        logger.info("Session %s reset", self.topic_id)

    # -----------------------
    # User controls
    # -----------------------
    def set_parameter(self, name: str, value: float) -> float:
        """
        Write a parameter; takes effect on the next tick.

        Raises:
            KeyError: unknown parameter name.
        """
        stored = self.simulation.params.set(name, value)
        if name == self.simulation.variant_param:
            # a variant written through the slider path still resets
            self._restart_for_variant()
        return stored

    def select_variant(self, option: str) -> None:
        """Switch variant (indicator, particle class, molecule...). Resets the session."""
        self.simulation.set_variant(option)
        self._restart_for_variant()

    def _restart_for_variant(self) -> None:
        was_running = self.is_running
        self.reset()
        logger.info("Session %s variant -> %s", self.topic_id, self.simulation.variant)
        if was_running:
            self.start()

    def next_step(self) -> int:
        return self._machine().next()

    def prev_step(self) -> int:
        return self._machine().prev()

    def go_to_step(self, index: int) -> int:
        """Jump to a phase; pauses autoplay and its ticking."""
        machine = self._machine()
        if self.is_running and 0 <= index < machine.count:
            self.stop()
        return machine.go_to(index)

    def toggle_autoplay(self) -> bool:
        """
        Toggle step autoplay. The scheduler runs while autoplay is on.
        """
        playing = self._machine().toggle_autoplay()
        if playing and not self.is_running:
            self.start()
        elif not playing and self.is_running:
            self.stop()
        return playing

    def _machine(self):
        machine = getattr(self.simulation, "machine", None)
        if machine is None:
            raise TypeError(f"{self.tag} demonstration has no steps")
        return machine

    def drag(self, dx: float, dy: float) -> None:
        """Pointer drag on a 3D view; suspends auto-rotation until end_drag()."""
        sim = self.simulation
        if not hasattr(sim, "drag"):
            raise TypeError(f"{self.tag} demonstration cannot be rotated")
        if not sim.is_dragging:
            sim.begin_drag()
        sim.drag(dx, dy)

    def end_drag(self) -> None:
        if hasattr(self.simulation, "end_drag"):
            self.simulation.end_drag()

    # -----------------------
    # Read side
    # -----------------------
    def snapshot(self) -> Dict[str, Any]:
        """Latest renderable state plus the history window."""
        snap = self.simulation.snapshot()
        snap["topic_id"] = self.topic_id
        snap["is_running"] = self.is_running
        snap["parameters"] = self.simulation.params.describe()
        latest = self.history.latest
        snap["outputs"] = dict(latest.outputs) if latest is not None else {}
        snap["history"] = [s.to_dict() for s in self.history]
        snap["last_error"] = repr(self.last_error) if self.last_error is not None else None
        return snap

    def __repr__(self) -> str:
        return f"<SimulationSession {self.topic_id} tick={self.tick_index} running={self.is_running}>"


class SimulationManager:
    """
    Keeps one session per opened topic. Sessions are independent: each has
    its own scheduler and state, so several can tick at once.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self.sessions: Dict[str, SimulationSession] = {}

    def open(self, topic_id: str, **kwargs) -> SimulationSession:
        """Return the session for a topic, creating it on first use."""
        session = self.sessions.get(topic_id)
        if session is None:
            session = SimulationSession.for_topic(topic_id, seed=kwargs.pop("seed", self.seed), **kwargs)
            self.sessions[topic_id] = session
        return session

    def close(self, topic_id: str) -> None:
        session = self.sessions.pop(topic_id, None)
        if session is not None:
            session.stop()
            logger.info("Session closed: %s", topic_id)

    def stop_all(self) -> None:
        for session in list(self.sessions.values()):
            session.stop()

    def running(self) -> List[str]:
        return [t for t, s in self.sessions.items() if s.is_running]

    def __contains__(self, topic_id: str) -> bool:
        return topic_id in self.sessions

    def __len__(self) -> int:
        return len(self.sessions)
