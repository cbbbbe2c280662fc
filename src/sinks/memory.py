from __future__ import annotations

from threading import Lock
from typing import List

from forwardzones.models import PairResult


class MemorySink:
    def __init__(self) -> None:
        self._lock = Lock()
        self._results: List[PairResult] = []

    def emit(self, result: PairResult) -> None:
        with self._lock:
            self._results.append(result)

    @property
    def results(self) -> List[PairResult]:
        with self._lock:
            return list(self._results)
