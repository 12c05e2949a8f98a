from __future__ import annotations
from typing import Callable, Optional
import threading
import time
import logging

from .constants import DEFAULT_TICK_INTERVAL_MS

logger = logging.getLogger(__name__)


class TickScheduler:
    """
    Calls an update function on a fixed wall-clock interval from a background
    thread. Each scheduler owns at most one worker, so ticks never overlap.

    Usage:
        sched = TickScheduler(session.tick, on_reset=session._clear_state)
        sched.start(50)
        ...
        sched.stop()   # no callback runs after this returns
    """

    def __init__(self, update: Callable[[], None], on_reset: Optional[Callable[[], None]] = None, name: str = "tick"):
        self._update = update
        self._on_reset = on_reset
        self.name = name
        self.interval_ms: float = DEFAULT_TICK_INTERVAL_MS
        self.tick_count = 0
        # held for the duration of one update; stop() waits on it
        self._tick_lock = threading.Lock()
        self._stop_event: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._stop_event is not None and not self._stop_event.is_set()

    def start(self, interval_ms: Optional[float] = None) -> None:
        """
        Begin periodic invocation. Calling start() while running is ignored.
        """
        if self.is_running:
            logger.debug("Scheduler %s already running; start() ignored.", self.name)
            return
        if interval_ms is not None:
            if interval_ms <= 0:
                raise ValueError("interval_ms must be positive")
            self.interval_ms = float(interval_ms)
        stop_event = threading.Event()
        self._stop_event = stop_event
        self._thread = threading.Thread(
            target=self._loop, args=(self.interval_ms / 1000.0, stop_event),
            name=f"scheduler-{self.name}", daemon=True
        )
        self._thread.start()
        logger.info("Scheduler %s started (interval=%sms)", self.name, self.interval_ms)

    def _loop(self, interval: float, stop_event: threading.Event) -> None:
        next_at = time.monotonic() + interval
        while not stop_event.wait(max(0.0, next_at - time.monotonic())):
            with self._tick_lock:
                if stop_event.is_set():
                    break
                try:
                    self._update()
                    self.tick_count += 1
                except Exception:
                    logger.exception("Exception in scheduler %s loop.", self.name)
            next_at += interval
            now = time.monotonic()
            if next_at < now:
                # fell behind; do not burst to catch up
                next_at = now

    def stop(self) -> None:
        """
        Cancel further ticks. A tick already executing finishes first; once
        this returns, no further callback is made. Safe to call from inside
        the update function.
        """
        stop_event, thread = self._stop_event, self._thread
        if stop_event is None:
            return
        stop_event.set()
        if thread is not None and thread is not threading.current_thread():
            # wait for an in-flight update to complete
            with self._tick_lock:
                pass
            thread.join(timeout=1.0)
        self._thread = None
        logger.info("Scheduler %s stopped after %d ticks", self.name, self.tick_count)

    def reset(self) -> None:
        """stop() plus the owner's reset hook."""
        self.stop()
        self.tick_count = 0
        if self._on_reset is not None:
            self._on_reset()
