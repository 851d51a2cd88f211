from __future__ import annotations

import threading
from typing import Callable, List, Optional


READ = 20
ENCODE = 40
SEND = 60
RECEIVE = 80
PARSE = 100
CHECKPOINTS = (READ, ENCODE, SEND, RECEIVE, PARSE)


class ProgressTracker:
    """
    Cosmetic progress indicator advanced at fixed checkpoints.

    Values only move forward during an attempt; `finish()` returns the
    indicator to 0 after `reset_delay` seconds whether the attempt worked
    or not. Nothing here measures real work.
    """

    def __init__(
        self,
        *,
        reset_delay: float = 0.0,
        listener: Optional[Callable[[int], None]] = None,
    ) -> None:
        self._reset_delay = max(0.0, float(reset_delay))
        self._listener = listener
        self._value = 0
        self._history: List[int] = []
        self._timer: Optional[threading.Timer] = None

    @property
    def value(self) -> int:
        return self._value

    @property
    def history(self) -> List[int]:
        return list(self._history)

    @property
    def checkpoints(self) -> List[int]:
        """Checkpoints reached in the current attempt, resets excluded."""
        return [value for value in self._history if value > 0]

    def _set(self, value: int) -> None:
        self._value = value
        self._history.append(value)
        if self._listener is not None:
            self._listener(value)

    def start(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._history = []
        self._value = 0

    def advance(self, value: int) -> None:
        if value not in CHECKPOINTS:
            raise ValueError(f"unknown progress checkpoint: {value}")
        if value <= self._value:
            raise ValueError(
                f"progress must increase: {self._value} -> {value}"
            )
        self._set(value)

    def finish(self) -> None:
        if self._reset_delay <= 0:
            self._set(0)
            return
        self._timer = threading.Timer(self._reset_delay, self._set, args=(0,))
        self._timer.daemon = True
        self._timer.start()

    def wait_reset(self, timeout: Optional[float] = None) -> None:
        if self._timer is not None:
            self._timer.join(timeout)
