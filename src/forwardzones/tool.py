from __future__ import annotations

import concurrent.futures
import logging
import time
from typing import Iterable, List, Optional, Protocol, Tuple

from .config import CheckerConfig
from .errors import ProbeToolUnavailable
from .models import CheckOutcome, CheckRun, Nameserver, PairResult, Zone
from .probe import DNSPythonProbe, SOAProbe

log = logging.getLogger(__name__)


class ResultSink(Protocol):
    def emit(self, result: PairResult) -> None:
        ...


class ForwardZoneChecker:
    """
    SOA health checks for DNSaaS forwarding zones.

    For every (zone, nameserver) pair not excluded entirely:
      1) UDP SOA query (unless the zone is in exclude_udp). Failure -> UDP_FAILED and
         TCP is not attempted at all.
      2) TCP SOA query (unless the zone is in exclude_tcp). Failure -> TCP_FAILED.
      3) Otherwise OK.

    Pairs are probed concurrently, one task each, and every outcome goes to the sink
    from inside its task as soon as it is known. Nothing is retried.
    """

    def __init__(
        self,
        config: CheckerConfig,
        sink: ResultSink,
        probe: Optional[SOAProbe] = None,
        max_workers: Optional[int] = None,
    ) -> None:
        self.config = config
        self.sink = sink
        self.probe = probe or DNSPythonProbe()
        self.max_workers = None if max_workers is None else int(max_workers)

    # ----------------------------
    # Public entrypoints
    # ----------------------------

    def pairs(self, zones: Iterable[Zone]) -> List[Tuple[str, Nameserver]]:
        """Materialize the probe list, skipping zones excluded from all checks."""
        jobs: List[Tuple[str, Nameserver]] = []
        for zone in zones:
            if zone.name in self.config.exclude:
                log.debug("%s: excluded from checks", zone.name)
                continue
            for ns in zone.nameservers:
                jobs.append((zone.name, ns))
        return jobs

    def check_pair(self, zone: str, nameserver: Nameserver) -> PairResult:
        timeout = self.config.timeout

        if zone not in self.config.exclude_udp:
            if not self.probe.query(zone, nameserver, "udp", timeout):
                return PairResult(zone, nameserver, CheckOutcome.UDP_FAILED)

        if zone not in self.config.exclude_tcp:
            if not self.probe.query(zone, nameserver, "tcp", timeout):
                return PairResult(zone, nameserver, CheckOutcome.TCP_FAILED)

        return PairResult(zone, nameserver, CheckOutcome.OK)

    def run(self, zones: Iterable[Zone]) -> CheckRun:
        jobs = self.pairs(zones)
        out = CheckRun(scheduled=len(jobs))
        if not jobs:
            log.info("no forwarding zone nameservers to check")
            return out

        started = time.perf_counter()
        workers = len(jobs) if self.max_workers is None else max(1, min(self.max_workers, len(jobs)))

        with concurrent.futures.ThreadPoolExecutor(max_workers=workers, thread_name_prefix="fz-check") as ex:
            futs = {ex.submit(self._check_and_emit, zone, ns): (zone, ns) for (zone, ns) in jobs}
            for f in concurrent.futures.as_completed(futs):
                zone, ns = futs[f]
                try:
                    out.results.append(f.result())
                except ProbeToolUnavailable as e:
                    log.warning("%s @%s: probe tool unavailable: %s", zone, ns, e)
                    out.tool_missing.append((zone, ns))
                except Exception as e:
                    if out.errors:
                        log.debug("%s @%s: further failure ignored: %s: %s", zone, ns, type(e).__name__, e)
                    else:
                        log.error("%s @%s: check failed: %s: %s", zone, ns, type(e).__name__, e)
                    out.errors.append(e)

        log.info(
            "checked %d pairs in %d ms (%d outcomes, %d without tool, %d errors)",
            len(jobs),
            int((time.perf_counter() - started) * 1000),
            len(out.results),
            len(out.tool_missing),
            len(out.errors),
        )
        return out

    # ----------------------------
    # Task body
    # ----------------------------

    def _check_and_emit(self, zone: str, nameserver: Nameserver) -> PairResult:
        result = self.check_pair(zone, nameserver)
        log.debug("%s @%s: %s", zone, nameserver, result.outcome.name)
        self.sink.emit(result)
        return result
