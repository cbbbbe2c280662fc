# conftest.py
from __future__ import annotations

import threading
from typing import Callable, Dict, List, Optional, Tuple

import pytest

from forwardzones.models import Nameserver


class ScriptedProbe:
    """
    Fake SOA probe.

    answers maps (zone, host, transport) -> bool or an exception instance to raise.
    Anything not listed succeeds. Every call is recorded as (zone, host, port, transport).
    """

    def __init__(
        self,
        answers: Optional[Dict[Tuple[str, str, str], object]] = None,
        hook: Optional[Callable[[str, Nameserver, str], None]] = None,
    ):
        self.answers = answers or {}
        self.hook = hook
        self.calls: List[Tuple[str, str, int, str]] = []
        self.timeouts: List[float] = []
        self._lock = threading.Lock()

    def query(self, zone: str, nameserver: Nameserver, transport: str, timeout: float) -> bool:
        with self._lock:
            self.calls.append((zone, nameserver.host, nameserver.port, transport))
            self.timeouts.append(timeout)
        if self.hook is not None:
            self.hook(zone, nameserver, transport)
        a = self.answers.get((zone, nameserver.host, transport), True)
        if isinstance(a, BaseException):
            raise a
        return bool(a)

    def transports_for(self, zone: str) -> List[str]:
        return [t for (z, _, _, t) in self.calls if z == zone]


@pytest.fixture
def scripted_probe():
    return ScriptedProbe
