from __future__ import annotations

import ipaddress
import logging
import math
from threading import Lock
from typing import List, Optional, Protocol

import dns.exception
import dns.message
import dns.query
import dns.rdatatype
import dns.resolver

from dnsaas_tools.runner import CommandRunner, ToolNotFound

from .errors import ProbeToolUnavailable
from .models import Nameserver

log = logging.getLogger(__name__)

TRANSPORTS = ("udp", "tcp")


class SOAProbe(Protocol):
    """Issue one SOA query for zone to nameserver. True when a DNS reply came back."""

    def query(self, zone: str, nameserver: Nameserver, transport: str, timeout: float) -> bool:
        ...


def _fqdn(zone: str) -> str:
    return zone.rstrip(".") + "."


class DNSPythonProbe:
    """
    SOA probe built on dnspython.

    Mirrors `dig +short SOA` exit semantics: any well-formed reply counts as success,
    whatever its rcode. Timeouts, socket errors, garbage on the wire and nameserver
    hostnames that do not resolve are failures.
    """

    def __init__(self, resolver: Optional[dns.resolver.Resolver] = None) -> None:
        self._resolver = resolver
        self._resolver_lock = Lock()

    def query(self, zone: str, nameserver: Nameserver, transport: str, timeout: float) -> bool:
        if transport not in TRANSPORTS:
            raise ValueError(f"unknown transport {transport!r}")

        try:
            address = self._address(nameserver.host, timeout)
            if address is None:
                log.info("%s: cannot resolve nameserver %s", zone, nameserver.host)
                return False

            q = dns.message.make_query(_fqdn(zone), dns.rdatatype.SOA)
            if transport == "udp":
                dns.query.udp(q, address, port=nameserver.port, timeout=timeout)
            else:
                dns.query.tcp(q, address, port=nameserver.port, timeout=timeout)
            return True
        except dns.exception.Timeout:
            log.debug("%s @%s %s: timeout after %.1fs", zone, nameserver, transport, timeout)
            return False
        except (dns.exception.DNSException, OSError, ValueError) as e:
            log.debug("%s @%s %s: %s: %s", zone, nameserver, transport, type(e).__name__, e)
            return False

    # ----------------------------
    # Address helpers
    # ----------------------------

    def _address(self, host: str, timeout: float) -> Optional[str]:
        try:
            return str(ipaddress.ip_address(host))
        except ValueError:
            pass

        ips = self._resolve(host, timeout)
        return ips[0] if ips else None

    def _resolve(self, host: str, timeout: float) -> List[str]:
        """Resolve a nameserver hostname to A/AAAA addresses. Empty when it does not resolve."""
        resolver = self._get_resolver()
        if resolver is None:
            return []
        fqdn = _fqdn(host)
        ips: List[str] = []
        for rtype in ("A", "AAAA"):
            try:
                ans = resolver.resolve(fqdn, rtype, raise_on_no_answer=False, lifetime=timeout)
                if ans.rrset:
                    ips.extend(str(r.address) for r in ans)
            except dns.exception.DNSException as e:
                log.debug("%s %s: %s: %s", fqdn, rtype, type(e).__name__, e)
                continue
        return ips

    def _get_resolver(self) -> Optional[dns.resolver.Resolver]:
        # lifetime is passed per resolve() call
        with self._resolver_lock:
            if self._resolver is None:
                try:
                    self._resolver = dns.resolver.Resolver(configure=True)
                except dns.exception.DNSException as e:
                    log.warning("no system resolver for nameserver hostnames: %s", e)
                    return None
            return self._resolver


class DigProbe:
    """SOA probe that shells out to `dig`, like the cron scripts this tool replaced."""

    def __init__(self, runner: Optional[CommandRunner] = None) -> None:
        self.runner = runner or CommandRunner()

    def query(self, zone: str, nameserver: Nameserver, transport: str, timeout: float) -> bool:
        if transport not in TRANSPORTS:
            raise ValueError(f"unknown transport {transport!r}")

        # dig only takes whole seconds and retries UDP up to 3 times.
        per_try = max(1, int(math.ceil(timeout)))
        args = ["+short", f"+time={per_try}", f"@{nameserver.host}", "-p", str(nameserver.port), "SOA", zone]
        if transport == "tcp":
            args.insert(0, "+tcp")

        try:
            res = self.runner.dig(args, timeout_seconds=per_try * 3 + 2)
        except ToolNotFound as e:
            raise ProbeToolUnavailable(str(e)) from e

        if not res.ok:
            log.debug("%s @%s %s: dig failed (rc=%s): %s", zone, nameserver, transport, res.returncode, res.output)
        return res.ok
