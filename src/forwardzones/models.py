from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Optional, Tuple

DEFAULT_DNS_PORT = 53


class CheckOutcome(IntEnum):
    """Numeric codes reported to collectd / Graphite."""

    OK = 0
    UDP_FAILED = 1
    TCP_FAILED = 2


@dataclass(frozen=True)
class Nameserver:
    """One forwarder target of a zone: host-or-address and port."""

    host: str
    port: int = DEFAULT_DNS_PORT

    def __str__(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class Zone:
    name: str
    nameservers: Tuple[Nameserver, ...] = ()


@dataclass(frozen=True)
class PairResult:
    zone: str
    nameserver: Nameserver
    outcome: CheckOutcome

    def to_dict(self) -> Dict[str, Any]:
        return {
            "zone": self.zone,
            "nameserver": self.nameserver.host,
            "port": self.nameserver.port,
            "outcome": self.outcome.name,
            "code": int(self.outcome),
        }


@dataclass
class CheckRun:
    """
    Everything one run of the checker produced.

    results: outcomes in the order they were determined (not input order).
    errors: unexpected task failures, in the order they were drained.
    tool_missing: pairs whose probe could not run because the resolver tool is absent.
    """

    results: List[PairResult] = field(default_factory=list)
    errors: List[BaseException] = field(default_factory=list)
    tool_missing: List[Tuple[str, Nameserver]] = field(default_factory=list)
    scheduled: int = 0

    @property
    def exit_code(self) -> int:
        # First non-benign failure wins; everything after it is only logged.
        first: Optional[BaseException] = self.errors[0] if self.errors else None
        if first is None:
            return 0
        return int(getattr(first, "exit_code", 1) or 1)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "exit_code": self.exit_code,
            "scheduled": self.scheduled,
            "outcomes": [r.to_dict() for r in self.results],
            "errors": [f"{type(e).__name__}: {e}" for e in self.errors],
            "tool_missing": [{"zone": z, "nameserver": str(ns)} for z, ns in self.tool_missing],
        }
