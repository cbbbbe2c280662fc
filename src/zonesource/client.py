from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

import requests

from forwardzones.config import CheckerConfig
from forwardzones.errors import ZoneSourceError
from forwardzones.models import DEFAULT_DNS_PORT, Nameserver, Zone

log = logging.getLogger(__name__)

FORWARD_ZONES_PATH = "/api/v1/servers/localhost/forward-zones"


@dataclass(frozen=True)
class TLSCredentials:
    """Client certificate authentication against the API."""

    cacert: str
    cert: str
    key: str


def parse_nameserver(raw: str) -> Nameserver:
    """
    Parse a "host[:port]" nameserver entry from the API.

    Port defaults to 53. IPv6 literals are accepted bare ("2001:db8::1") or
    bracketed with a port ("[2001:db8::1]:5353").
    """
    s = (raw or "").strip()
    if not s:
        raise ZoneSourceError("empty nameserver entry")

    host, port_txt = s, ""
    if s.startswith("["):
        host, sep, rest = s[1:].partition("]")
        if not sep:
            raise ZoneSourceError(f"unterminated IPv6 literal in nameserver {raw!r}")
        if rest:
            if not rest.startswith(":"):
                raise ZoneSourceError(f"bad nameserver {raw!r}")
            port_txt = rest[1:]
    elif s.count(":") == 1:
        host, _, port_txt = s.partition(":")
    # more than one colon without brackets: bare IPv6 address

    if not host:
        raise ZoneSourceError(f"missing host in nameserver {raw!r}")
    if not port_txt:
        return Nameserver(host=host, port=DEFAULT_DNS_PORT)

    try:
        port = int(port_txt)
    except ValueError:
        raise ZoneSourceError(f"bad port in nameserver {raw!r}")
    if not 0 < port < 65536:
        raise ZoneSourceError(f"port out of range in nameserver {raw!r}")
    return Nameserver(host=host, port=port)


def parse_forward_zones(payload: Any) -> List[Zone]:
    """Validate the forward-zones JSON document and turn it into Zone objects."""
    if not isinstance(payload, list):
        raise ZoneSourceError(f"expected a JSON array of zones, got {type(payload).__name__}")

    zones: List[Zone] = []
    for i, item in enumerate(payload):
        if not isinstance(item, dict):
            raise ZoneSourceError(f"zone #{i} is not an object")
        name = item.get("name")
        if not isinstance(name, str) or not name:
            raise ZoneSourceError(f"zone #{i} has no name")

        raw_ns = item.get("nameservers") or []
        if not isinstance(raw_ns, list) or not all(isinstance(x, str) for x in raw_ns):
            raise ZoneSourceError(f"zone {name}: nameservers must be a list of strings")

        zones.append(Zone(name=name, nameservers=tuple(parse_nameserver(x) for x in raw_ns)))
    return zones


class ForwardZonesClient:
    """Fetches forwarding zones from the DNSaaS API (PowerDNS-style forward-zones endpoint)."""

    def __init__(
        self,
        api_url: str,
        tls: Optional[TLSCredentials] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.tls = tls
        self.timeout = float(timeout)
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config: CheckerConfig, **kwargs: Any) -> "ForwardZonesClient":
        tls = None
        if config.use_tls:
            tls = TLSCredentials(cacert=config.cacert or "", cert=config.cert or "", key=config.key or "")
        return cls(config.api_url, tls=tls, **kwargs)

    @property
    def url(self) -> str:
        return self.api_url + FORWARD_ZONES_PATH

    def fetch(self) -> List[Zone]:
        kwargs: dict = {"timeout": self.timeout}
        if self.tls is not None:
            kwargs["verify"] = self.tls.cacert
            kwargs["cert"] = (self.tls.cert, self.tls.key)

        log.debug("GET %s", self.url)
        try:
            resp = self.session.get(self.url, **kwargs)
            resp.raise_for_status()
            payload = resp.json()
        except requests.RequestException as e:
            raise ZoneSourceError(f"cannot fetch {self.url}: {e}") from e
        except ValueError as e:
            raise ZoneSourceError(f"{self.url} did not return JSON: {e}") from e
        except OSError as e:
            # requests raises a bare OSError for missing CA bundle / client cert files
            raise ZoneSourceError(f"cannot fetch {self.url}: {e}") from e

        zones = parse_forward_zones(payload)
        log.info("fetched %d forwarding zones from %s", len(zones), self.url)
        return zones
