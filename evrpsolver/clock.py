"""A processor-time stopwatch."""

from __future__ import annotations

import time


class Clock:
    """Measures processor time since creation or the last reset."""

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self._start = time.process_time()

    def seconds(self) -> float:
        return time.process_time() - self._start