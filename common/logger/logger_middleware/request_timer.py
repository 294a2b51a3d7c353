import time
from contextlib import contextmanager
from typing import Dict, Iterator


class RequestTimer:
    """Per-request accumulator of named durations (ms) and call counters."""

    def __init__(self) -> None:
        self.timings: Dict[str, float] = {}
        self.counters: Dict[str, int] = {}

    @contextmanager
    def capture(self, name: str) -> Iterator[None]:
        start = time.perf_counter()
        try:
            yield
        finally:
            self.record(name, (time.perf_counter() - start) * 1000)

    def record(self, name: str, duration_ms: float, *, count: bool = False) -> None:
        self.timings[name] = self.timings.get(name, 0.0) + duration_ms
        if count:
            self.counters[name] = self.counters.get(name, 0) + 1


__all__ = ["RequestTimer"]
