# test_zone_source.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest
import requests

from forwardzones import CheckerConfig, Nameserver, Zone, ZoneSourceError
from zonesource import ForwardZonesClient, TLSCredentials, parse_forward_zones, parse_nameserver


# ----------------------------
# Fake HTTP session
# ----------------------------
class FakeResponse:
    def __init__(self, payload: Any = None, status: int = 200, bad_json: bool = False):
        self.payload = payload
        self.status_code = status
        self.bad_json = bad_json

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")

    def json(self) -> Any:
        if self.bad_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self.payload


class FakeSession:
    def __init__(self, response: Optional[FakeResponse] = None, exc: Optional[Exception] = None):
        self.response = response
        self.exc = exc
        self.calls: List[Dict[str, Any]] = []

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"url": url, **kwargs})
        if self.exc is not None:
            raise self.exc
        return self.response


# ----------------------------
# Nameserver parsing
# ----------------------------
@pytest.mark.parametrize(
    "raw,expected",
    [
        ("192.0.2.1", Nameserver("192.0.2.1", 53)),
        ("192.0.2.1:5353", Nameserver("192.0.2.1", 5353)),
        ("ns1.example.net:53", Nameserver("ns1.example.net", 53)),
        ("2001:db8::1", Nameserver("2001:db8::1", 53)),
        ("[2001:db8::1]:5300", Nameserver("2001:db8::1", 5300)),
        ("[2001:db8::1]", Nameserver("2001:db8::1", 53)),
    ],
)
def test_parse_nameserver(raw, expected):
    assert parse_nameserver(raw) == expected


@pytest.mark.parametrize("raw", ["", "192.0.2.1:dns", "192.0.2.1:0", "192.0.2.1:70000", ":53", "[2001:db8::1", "[::1]x"])
def test_parse_nameserver_rejects_garbage(raw):
    with pytest.raises(ZoneSourceError):
        parse_nameserver(raw)


# ----------------------------
# Document parsing
# ----------------------------
def test_parse_forward_zones():
    zones = parse_forward_zones([
        {"name": "example.com", "nameservers": ["192.0.2.1:53", "192.0.2.2"]},
        {"name": "corp.internal", "nameservers": []},
        {"name": "no-ns.example"},
    ])
    assert zones == [
        Zone("example.com", (Nameserver("192.0.2.1"), Nameserver("192.0.2.2"))),
        Zone("corp.internal", ()),
        Zone("no-ns.example", ()),
    ]


@pytest.mark.parametrize(
    "payload",
    [
        {"name": "example.com"},
        ["example.com"],
        [{"nameservers": ["192.0.2.1"]}],
        [{"name": "example.com", "nameservers": "192.0.2.1"}],
        [{"name": "example.com", "nameservers": [53]}],
    ],
)
def test_parse_forward_zones_rejects_bad_documents(payload):
    with pytest.raises(ZoneSourceError):
        parse_forward_zones(payload)


# ----------------------------
# Client
# ----------------------------
def test_fetch_hits_forward_zones_endpoint():
    session = FakeSession(FakeResponse([{"name": "example.com", "nameservers": ["192.0.2.1:53"]}]))
    client = ForwardZonesClient("https://10.0.0.1/", session=session)

    zones = client.fetch()

    assert zones == [Zone("example.com", (Nameserver("192.0.2.1", 53),))]
    call = session.calls[0]
    assert call["url"] == "https://10.0.0.1/api/v1/servers/localhost/forward-zones"
    assert "cert" not in call
    assert "verify" not in call
    assert call["timeout"] == 10.0


def test_fetch_with_mutual_tls():
    session = FakeSession(FakeResponse([]))
    client = ForwardZonesClient(
        "https://api.example",
        tls=TLSCredentials(cacert="/ca.pem", cert="/c.pem", key="/k.pem"),
        session=session,
    )

    client.fetch()

    assert session.calls[0]["verify"] == "/ca.pem"
    assert session.calls[0]["cert"] == ("/c.pem", "/k.pem")


def test_from_config_carries_tls():
    cfg = CheckerConfig(api_url="https://api.example", use_tls=True, cacert="ca", cert="c", key="k")
    client = ForwardZonesClient.from_config(cfg, session=FakeSession(FakeResponse([])))
    assert client.tls == TLSCredentials("ca", "c", "k")
    assert ForwardZonesClient.from_config(CheckerConfig()).tls is None


def test_connection_error_is_zone_source_error():
    client = ForwardZonesClient("https://10.0.0.1", session=FakeSession(exc=requests.ConnectionError("refused")))
    with pytest.raises(ZoneSourceError):
        client.fetch()


def test_http_error_is_zone_source_error():
    client = ForwardZonesClient("https://10.0.0.1", session=FakeSession(FakeResponse(status=500)))
    with pytest.raises(ZoneSourceError):
        client.fetch()


def test_non_json_is_zone_source_error():
    client = ForwardZonesClient("https://10.0.0.1", session=FakeSession(FakeResponse(bad_json=True)))
    with pytest.raises(ZoneSourceError):
        client.fetch()


def test_missing_tls_file_is_zone_source_error():
    err = OSError("Could not find a suitable TLS CA certificate bundle, invalid path: /nope.pem")
    client = ForwardZonesClient("https://10.0.0.1", session=FakeSession(exc=err))
    with pytest.raises(ZoneSourceError):
        client.fetch()


def test_nonexistent_cacert_with_real_session(tmp_path):
    cfg = CheckerConfig(
        api_url="https://127.0.0.1:9",
        use_tls=True,
        cacert=str(tmp_path / "nope.pem"),
        cert=str(tmp_path / "c.pem"),
        key=str(tmp_path / "k.pem"),
    )
    client = ForwardZonesClient.from_config(cfg, timeout=1.0)
    with pytest.raises(ZoneSourceError):
        client.fetch()
