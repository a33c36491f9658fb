"""Parameter messages and the base class of the generators that produce them."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from typing import Optional

_EPSILON = 1.1920929e-07
_MAX_QUEUED_BEFORE_DROP = 10
DEFAULT_SAMPLING_MS = 33


@dataclass
class Param:
    """A value addressed to one parameter of one named node."""

    image_input_name: str = ""
    name: str = ""
    int_val: int = 0


def map_range(value: float, in_min: float, in_max: float, out_min: float, out_max: float) -> float:
    """Linearly map ``value`` from one range to another without clamping."""
    if abs(in_min - in_max) < _EPSILON:
        return out_min
    return (value - in_min) / (in_max - in_min) * (out_max - out_min) + out_min


class ParamInputGenerator(ABC):
    """Queue of parameter messages fed by a source, optionally on its own thread."""

    def __init__(self, name: str, threaded: bool = False) -> None:
        self.generator_name = name
        self.threaded = threaded
        self.configured = False
        self.sampling_ms = DEFAULT_SAMPLING_MS
        self.lock = threading.RLock()
        self._buffer: deque[Param] = deque()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        """True while the worker thread is alive."""
        return self._thread is not None and self._thread.is_alive()

    def setup(self) -> None:
        """Configure the generator from its settings."""
        self.sampling_ms = DEFAULT_SAMPLING_MS
        self.setup_from_xml()
        self.configured = True

    def start(self) -> None:
        """Start the worker thread; does nothing for unconfigured or unthreaded generators."""
        if not (self.configured and self.threaded) or self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name=self.generator_name, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stop the worker thread and wait for it to finish."""
        if not self.threaded or self._thread is None:
            return
        self._stop_event.set()
        self._thread.join()
        self._thread = None

    def _run(self) -> None:
        while not self._stop_event.is_set():
            self.process_input()
            self._stop_event.wait(self.sampling_ms / 1000.0)
        self.clear_messages()

    @abstractmethod
    def process_input(self) -> None:
        """Produce new messages from the source; run repeatedly on the worker thread."""

    @abstractmethod
    def setup_from_xml(self) -> bool:
        """Load this generator's configuration."""

    def next_message(self) -> Optional[Param]:
        """Take the oldest queued message, or None when the queue is empty."""
        with self.lock:
            return self._buffer.popleft() if self._buffer else None

    def store_message(self, param: Param) -> None:
        """Queue a message, dropping the oldest one when the queue is full."""
        with self.lock:
            if len(self._buffer) > _MAX_QUEUED_BEFORE_DROP:
                self._buffer.popleft()
            self._buffer.append(param)

    def clear_messages(self) -> None:
        """Discard every queued message."""
        with self.lock:
            self._buffer.clear()

    def key_pressed(self, key: int) -> None:
        """React to a key press; the base generator ignores keys."""