"""
Forwarding-zone health checks.

Every (zone, nameserver) pair of a DNSaaS forwarding zone is probed with an SOA
query over UDP and then TCP, concurrently, and each pair yields exactly one
outcome: OK, UDP_FAILED or TCP_FAILED.

Public entrypoint: ForwardZoneChecker
"""

from .config import CheckerConfig, parse_zone_list
from .errors import ConfigError, ForwardZonesError, ProbeToolUnavailable, ZoneSourceError
from .models import CheckOutcome, CheckRun, Nameserver, PairResult, Zone
from .tool import ForwardZoneChecker

__all__ = [
    "CheckOutcome",
    "CheckRun",
    "CheckerConfig",
    "ConfigError",
    "ForwardZoneChecker",
    "ForwardZonesError",
    "Nameserver",
    "PairResult",
    "ProbeToolUnavailable",
    "Zone",
    "ZoneSourceError",
    "parse_zone_list",
]
