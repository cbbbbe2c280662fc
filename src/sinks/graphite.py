from __future__ import annotations

import logging
import socket
import time
from typing import Callable, Optional

from forwardzones.models import PairResult

log = logging.getLogger(__name__)

DEFAULT_GRAPHITE_HOST = "graphite"
DEFAULT_GRAPHITE_PORT = 2003
DEFAULT_METRIC_PATH = "resources.dns_forward_zones_checker"


def format_graphite_line(metric_path: str, hostname: str, zone: str, ns: str, code: int, ts: int) -> str:
    """Graphite tagged plaintext: path;tag=value;... value timestamp"""
    return f"{metric_path};hostname={hostname};fz={zone};ns={ns} {int(code)} {int(ts)}"


class GraphiteSink:
    """
    Pushes every outcome over its own short-lived TCP connection to carbon.

    A refused or timed-out connection loses that one data point and is logged;
    it never fails the check run or holds up other outcomes.
    """

    def __init__(
        self,
        hostname: str,
        host: str = DEFAULT_GRAPHITE_HOST,
        port: int = DEFAULT_GRAPHITE_PORT,
        metric_path: str = DEFAULT_METRIC_PATH,
        timeout: float = 10.0,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.hostname = hostname
        self.host = host
        self.port = int(port)
        self.metric_path = metric_path
        self.timeout = float(timeout)
        self.clock = clock or time.time

    def emit(self, result: PairResult) -> None:
        line = format_graphite_line(
            self.metric_path,
            self.hostname,
            result.zone,
            result.nameserver.host,
            result.outcome,
            int(self.clock()),
        )
        try:
            with socket.create_connection((self.host, self.port), timeout=self.timeout) as sock:
                sock.sendall((line + "\n").encode("utf-8"))
        except OSError as e:
            log.warning("cannot push %s to %s:%d: %s", result.zone, self.host, self.port, e)
            return
        log.debug("sent %s", line)
