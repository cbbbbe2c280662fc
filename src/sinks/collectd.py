from __future__ import annotations

import logging
import sys
from threading import Lock
from typing import Optional, TextIO

from forwardzones.models import PairResult

log = logging.getLogger(__name__)

DEFAULT_INTERVAL = 30.0


def format_interval(interval: float) -> str:
    # collectd passes COLLECTD_INTERVAL as e.g. "30.000"; print it back as "30"
    return f"{float(interval):g}"


def format_putval(hostname: str, zone: str, interval: float, code: int) -> str:
    return f'PUTVAL "{hostname}/exec/gauge-{zone}" interval={format_interval(interval)} N:{int(code)}'


class CollectdExecSink:
    """Prints one PUTVAL line per outcome; lines from concurrent checks never interleave."""

    def __init__(self, hostname: str, interval: float = DEFAULT_INTERVAL, stream: Optional[TextIO] = None) -> None:
        self.hostname = hostname
        self.interval = float(interval)
        self.stream = stream
        self._lock = Lock()

    def emit(self, result: PairResult) -> None:
        line = format_putval(self.hostname, result.zone, self.interval, result.outcome)
        stream = self.stream or sys.stdout
        with self._lock:
            try:
                stream.write(line + "\n")
                stream.flush()
            except OSError as e:
                log.warning("cannot write %s result: %s", result.zone, e)
