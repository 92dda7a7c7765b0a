"""Wall clock feeding the wave shader's time uniform."""

import time


class ElapsedClock:
    """Seconds since construction, the time base fed to the wave shader."""

    def __init__(self):
        self._start = time.perf_counter()

    def elapsed(self) -> float:
        return time.perf_counter() - self._start

    def reset(self) -> None:
        self._start = time.perf_counter()
