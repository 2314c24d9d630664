"""
Wall-clock timing recorded on every Result.

Solvers time named sections (decomposition, solve, per-grid-point work)
so Result.timing reports where the time went. A section entered more
than once accumulates its seconds and also reports its call count under
'<name>_calls'.
"""

import time
from contextlib import contextmanager
from typing import Iterator


class Timer:
    """
    Accumulating section timer.

    Usage:
        with Timer() as timer:
            with timer.section('qr_decomposition'):
                ...
        timer.result()   # {'total_seconds': ..., 'qr_decomposition': ...}
    """

    def __init__(self) -> None:
        self._elapsed: dict[str, float] = {}
        self._calls: dict[str, int] = {}
        self._t0: float | None = None
        self._total: float | None = None

    def __enter__(self) -> 'Timer':
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def start(self) -> None:
        self._t0 = time.perf_counter()
        self._total = None

    def stop(self) -> None:
        if self._t0 is None:
            raise RuntimeError("Timer.stop() called before start()")
        self._total = time.perf_counter() - self._t0

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        t0 = time.perf_counter()
        try:
            yield
        finally:
            self._elapsed[name] = self._elapsed.get(name, 0.0) + time.perf_counter() - t0
            self._calls[name] = self._calls.get(name, 0) + 1

    def result(self) -> dict[str, float]:
        """
        Raises:
            RuntimeError: If the timer has not been stopped
        """
        if self._total is None:
            raise RuntimeError("Timer.result() called before stop()")
        out = {'total_seconds': self._total}
        for name, seconds in self._elapsed.items():
            out[name] = seconds
            if self._calls[name] > 1:
                out[f'{name}_calls'] = float(self._calls[name])
        return out
