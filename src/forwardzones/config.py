from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Mapping, Optional

from .errors import ConfigError

DEFAULT_API_URL = "https://10.0.0.1"
DEFAULT_TIMEOUT = 2.0

_SPLIT = re.compile(r"[\s,]+")
_TRUE = {"1", "true", "yes", "on"}


def parse_zone_list(values: Optional[Iterable[str] | str]) -> FrozenSet[str]:
    """
    Turn "-e a.com -e 'b.com c.com'" style input into a set of zone names.

    Accepts a single string or an iterable of strings; entries may be separated by
    commas and/or whitespace. Matching against zones is exact, so names are kept as-is.
    """
    if not values:
        return frozenset()
    if isinstance(values, str):
        values = [values]
    out = set()
    for v in values:
        out.update(p for p in _SPLIT.split(v or "") if p)
    return frozenset(out)


@dataclass(frozen=True)
class CheckerConfig:
    """Options for one checker run. Built once at startup and passed around explicitly."""

    api_url: str = DEFAULT_API_URL
    use_tls: bool = False
    cacert: Optional[str] = None
    cert: Optional[str] = None
    key: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    exclude: FrozenSet[str] = field(default_factory=frozenset)
    exclude_udp: FrozenSet[str] = field(default_factory=frozenset)
    exclude_tcp: FrozenSet[str] = field(default_factory=frozenset)

    def validate(self) -> "CheckerConfig":
        if self.use_tls:
            if not self.cacert:
                raise ConfigError("cacert argument not set.")
            if not self.cert:
                raise ConfigError("cert argument not set.")
            if not self.key:
                raise ConfigError("key argument not set.")
        if self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout}")
        if not self.api_url:
            raise ConfigError("api-url argument not set.")
        return self

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "CheckerConfig":
        env = os.environ if env is None else env
        raw_timeout = env.get("FZ_TIMEOUT", str(DEFAULT_TIMEOUT))
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise ConfigError(f"FZ_TIMEOUT is not a number: {raw_timeout!r}")

        return cls(
            api_url=env.get("FZ_API_URL", DEFAULT_API_URL),
            use_tls=env.get("FZ_USE_TLS", "").strip().lower() in _TRUE,
            cacert=env.get("FZ_CACERT") or None,
            cert=env.get("FZ_CERT") or None,
            key=env.get("FZ_KEY") or None,
            timeout=timeout,
            exclude=parse_zone_list(env.get("FZ_EXCLUDE")),
            exclude_udp=parse_zone_list(env.get("FZ_EXCLUDE_UDP")),
            exclude_tcp=parse_zone_list(env.get("FZ_EXCLUDE_TCP")),
        )
