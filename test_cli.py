# test_cli.py
from __future__ import annotations

import pytest

import dnsaas_tools.cli as cli
from forwardzones import Nameserver, ProbeToolUnavailable, Zone, ZoneSourceError
from zonesource import ForwardZonesClient


@pytest.fixture
def zones(monkeypatch):
    """Replace the API call with a fixed zone list."""
    holder = {"zones": [Zone("example.com", (Nameserver("192.0.2.1"),))]}

    def fetch(self):
        if isinstance(holder["zones"], Exception):
            raise holder["zones"]
        return holder["zones"]

    monkeypatch.setattr(ForwardZonesClient, "fetch", fetch)
    return holder


@pytest.fixture
def probe(monkeypatch, scripted_probe):
    p = scripted_probe()
    monkeypatch.setattr(cli, "build_probe", lambda args: p)
    return p


def test_exec_output_and_exit_zero(zones, probe, capsys):
    rc = cli.main(["--hostname", "dns01", "--interval", "30"])

    out = capsys.readouterr().out
    assert rc == 0
    assert out.splitlines() == ['PUTVAL "dns01/exec/gauge-example.com" interval=30 N:0']


def test_exclusions_from_flags(zones, probe, capsys):
    zones["zones"] = [
        Zone("a.example", (Nameserver("192.0.2.1"),)),
        Zone("b.example", (Nameserver("192.0.2.2"),)),
    ]
    probe.answers[("b.example", "192.0.2.2", "tcp")] = False

    rc = cli.main(["--hostname", "h", "-e", "a.example", "-E", "b.example"])

    out = capsys.readouterr().out.splitlines()
    assert rc == 0
    assert out == ['PUTVAL "h/exec/gauge-b.example" interval=30 N:0']
    assert probe.transports_for("b.example") == ["udp"]


def test_tls_without_cacert_fails_before_network(zones, probe, capsys, monkeypatch):
    called = []
    monkeypatch.setattr(ForwardZonesClient, "fetch", lambda self: called.append(1) or [])

    rc = cli.main(["--tls", "--cert", "c.pem", "--key", "k.pem"])

    assert rc == 1
    assert "ERROR: cacert argument not set." in capsys.readouterr().err
    assert called == []
    assert probe.calls == []


def test_zone_source_error_exits_one(zones, probe, capsys):
    zones["zones"] = ZoneSourceError("cannot fetch https://10.0.0.1/api/v1/servers/localhost/forward-zones")

    rc = cli.main([])

    assert rc == 1
    assert "ERROR: cannot fetch" in capsys.readouterr().err
    assert probe.calls == []


def test_missing_probe_tool_exits_zero(zones, probe, capsys):
    probe.answers[("example.com", "192.0.2.1", "udp")] = ProbeToolUnavailable("dig: command not found")

    assert cli.main([]) == 0
    assert capsys.readouterr().out == ""


def test_graphite_sink_selected(zones, probe, monkeypatch):
    sent = []
    monkeypatch.setattr("sinks.graphite.GraphiteSink.emit", lambda self, r: sent.append((self.host, self.port, r.zone)))

    rc = cli.main(["--sink", "graphite", "--graphite-host", "carbon.local", "--graphite-port", "2004"])

    assert rc == 0
    assert sent == [("carbon.local", 2004, "example.com")]


def test_collectd_environment_defaults(monkeypatch):
    monkeypatch.setenv("COLLECTD_INTERVAL", "10.000")
    monkeypatch.setenv("COLLECTD_HOSTNAME", "collectd-host")
    args = cli.parse_args([])
    assert args.interval == 10.0
    assert args.hostname == "collectd-host"


def test_build_probe_choices():
    from forwardzones.probe import DigProbe, DNSPythonProbe

    assert isinstance(cli.build_probe(cli.parse_args(["--resolver", "dig"])), DigProbe)
    assert isinstance(cli.build_probe(cli.parse_args([])), DNSPythonProbe)


# ----------------------------
# dns-stress-test
# ----------------------------
def test_stress_requires_queries_file(capsys, tmp_path):
    rc = cli.stress_main(["-q", str(tmp_path / "missing.txt")])
    assert rc == 1
    assert "ERROR: you must set queries-file." in capsys.readouterr().err


def test_stress_no_clean_flag_parsing():
    assert cli.parse_stress_args(["-n", "true"]).no_clean is True
    assert cli.parse_stress_args(["-n", "false"]).no_clean is False
    assert cli.parse_stress_args([]).no_clean is False


def test_nonexistent_cacert_reports_error(probe, capsys, tmp_path):
    rc = cli.main([
        "--api-url", "https://127.0.0.1:9",
        "--tls",
        "--cacert", str(tmp_path / "nope.pem"),
        "--cert", str(tmp_path / "c.pem"),
        "--key", str(tmp_path / "k.pem"),
    ])

    assert rc == 1
    assert "ERROR: cannot fetch" in capsys.readouterr().err
    assert probe.calls == []
