"""
Command-line entry points.

check-forward-zones mirrors the flow of the cron/collectd scripts it replaces:
  1) Build + validate the configuration (TLS credentials before any network activity)
  2) Fetch the forwarding zones from the DNSaaS API
  3) Probe every (zone, nameserver) pair concurrently, printing/pushing each outcome
  4) Exit with the run's exit code
"""

import argparse
import logging
import os
import socket
import sys
from typing import List, Optional

from forwardzones import CheckerConfig, ForwardZoneChecker, ForwardZonesError, parse_zone_list
from forwardzones.probe import DigProbe, DNSPythonProbe, SOAProbe
from forwardzones.tool import ResultSink
from loadtest import StressTest, StressTestConfig, count_hosts, format_report
from sinks import CollectdExecSink, GraphiteSink
from sinks.collectd import DEFAULT_INTERVAL
from sinks.graphite import DEFAULT_GRAPHITE_HOST, DEFAULT_GRAPHITE_PORT, DEFAULT_METRIC_PATH
from zonesource import ForwardZonesClient

from .common import setup_logging
from .runner import ToolNotFound


log = logging.getLogger(__name__)


def _env_interval() -> float:
    raw = os.getenv("COLLECTD_INTERVAL", "")
    try:
        return float(raw) if raw else DEFAULT_INTERVAL
    except ValueError:
        return DEFAULT_INTERVAL


# Parse the command-line arguments
def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="check-forward-zones",
        description="Check DNSaaS forwarding zones and print metrics in collectd's exec format (or push them to Graphite).",
    )
    p.add_argument("-a", "--cacert", help="Path to TLS Certificate Authority certificate.")
    p.add_argument("-c", "--cert", help="Path to TLS certificate.")
    p.add_argument("-k", "--key", help="Path to TLS key.")
    p.add_argument("-T", "--tls", dest="use_tls", action="store_true", help="Use TLS for connection to API.")
    p.add_argument("-u", "--api-url", default="https://10.0.0.1", help="The API server URL. (Default: %(default)s)")
    p.add_argument("-t", "--timeout", type=float, default=2.0, help="Timeout in seconds to DNS check. (Default: %(default)s)")
    p.add_argument("-e", "--exclude", action="append", default=[], help="Domains that exclude from checks.")
    p.add_argument("-E", "--exclude-tcp", action="append", default=[], help="Domains that exclude from TCP checks.")
    p.add_argument("-U", "--exclude-udp", action="append", default=[], help="Domains that exclude from UDP checks.")

    p.add_argument("--sink", choices=["exec", "graphite"], default="exec", help="Where outcomes go. (Default: %(default)s)")
    p.add_argument("--graphite-host", default=DEFAULT_GRAPHITE_HOST, help="Graphite/carbon host. (Default: %(default)s)")
    p.add_argument("--graphite-port", type=int, default=DEFAULT_GRAPHITE_PORT, help="Graphite/carbon port. (Default: %(default)s)")
    p.add_argument("--metric-path", default=DEFAULT_METRIC_PATH, help="Graphite metric path. (Default: %(default)s)")
    p.add_argument("--interval", type=float, default=_env_interval(), help="collectd interval. (Default: $COLLECTD_INTERVAL or 30)")
    p.add_argument("--hostname", default=os.getenv("COLLECTD_HOSTNAME") or socket.gethostname(),
                   help="Hostname reported with each metric. (Default: $COLLECTD_HOSTNAME or this host)")
    p.add_argument("--resolver", choices=["dnspython", "dig"], default="dnspython", help="SOA query backend.")
    p.add_argument("--max-workers", type=int, default=None, help="Cap on concurrent checks (default: one per pair).")
    p.add_argument("--log-level", default=os.getenv("FZ_LOG_LEVEL", "WARNING"), help="Log level on stderr.")
    return p.parse_args(argv)


def build_config(args: argparse.Namespace) -> CheckerConfig:
    return CheckerConfig(
        api_url=args.api_url,
        use_tls=args.use_tls,
        cacert=args.cacert,
        cert=args.cert,
        key=args.key,
        timeout=args.timeout,
        exclude=parse_zone_list(args.exclude),
        exclude_udp=parse_zone_list(args.exclude_udp),
        exclude_tcp=parse_zone_list(args.exclude_tcp),
    ).validate()


def build_sink(args: argparse.Namespace) -> ResultSink:
    if args.sink == "graphite":
        return GraphiteSink(
            hostname=args.hostname,
            host=args.graphite_host,
            port=args.graphite_port,
            metric_path=args.metric_path,
        )
    return CollectdExecSink(hostname=args.hostname, interval=args.interval)


def build_probe(args: argparse.Namespace) -> SOAProbe:
    if args.resolver == "dig":
        return DigProbe()
    return DNSPythonProbe()


def main(argv: Optional[List[str]] = None) -> int:
    """
    check-forward-zones entrypoint.

    Returns:
        Process exit code: 0 on success (or when the probe tool is missing),
        1 on configuration / API errors, otherwise the first failed check's code.
    """
    args = parse_args(argv)
    setup_logging(args.log_level)

    try:
        config = build_config(args)
        log.debug("config: %s", config)
        zones = ForwardZonesClient.from_config(config).fetch()
    except ForwardZonesError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return e.exit_code

    checker = ForwardZoneChecker(config, sink=build_sink(args), probe=build_probe(args), max_workers=args.max_workers)
    run = checker.run(zones)
    return run.exit_code


def _str2bool(v: str) -> bool:
    return str(v).strip().lower() in ("1", "true", "yes", "on")


def parse_stress_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="dns-stress-test",
        description="Run a DNS stress test with flame on many hosts through parallel-ssh.",
        epilog="Example: dns-stress-test --duration 30m --hosts-file hosts.txt --no-clean true "
               "--queries-file dns-queries-with-types.txt --rate-limit 5000",
    )
    p.add_argument("-d", "--duration", default="30m",
                   help="Test duration. Number with an optional suffix: s, m, h or d; 0 disables the timeout. [Default: %(default)s]")
    p.add_argument("-f", "--hosts-file", default="hosts.txt",
                   help="File with target hosts, one per line; blank lines and #-comments allowed. [Default: %(default)s]")
    p.add_argument("-g", "--global-options", default=None,
                   help="Global options for pssh commands. [Default: -t 0 -h <hosts-file>]")
    p.add_argument("-l", "--rate-limit", type=int, default=3000, help="Rate limit to a maximum of RPS per host. [Default: %(default)s]")
    p.add_argument("-n", "--no-clean", type=_str2bool, default=False, help="Don't clean up temporary files. [Default: false]")
    p.add_argument("-o", "--out-dir", default=os.path.join(os.getcwd(), "out"),
                   help="Local directory for storing results by host. [Default: %(default)s]")
    p.add_argument("-q", "--queries-file", default="", help="File with DNS queries, one per row. Format: QNAME QTYPE.")
    p.add_argument("-r", "--results-file", default="/tmp/flame_metrics.json",
                   help="Path to file for storing 'flame' output. [Default: %(default)s]")
    p.add_argument("-s", "--rsync-options", default="-a", help="Options for parallel-rsync command. [Default: %(default)s]")
    p.add_argument("--log-level", default=os.getenv("FZ_LOG_LEVEL", "WARNING"), help="Log level on stderr.")
    return p.parse_args(argv)


def stress_main(argv: Optional[List[str]] = None) -> int:
    args = parse_stress_args(argv)
    setup_logging(args.log_level)

    if not args.queries_file or not os.access(args.queries_file, os.R_OK):
        print("ERROR: you must set queries-file.", file=sys.stderr)
        return 1

    config = StressTestConfig(
        queries_file=args.queries_file,
        hosts_file=args.hosts_file,
        global_options=args.global_options,
        rsync_options=args.rsync_options,
        out_dir=args.out_dir,
        results_file=args.results_file,
        duration=args.duration,
        requests_per_host=args.rate_limit,
        no_clean=args.no_clean,
    )

    try:
        hosts = count_hosts(config.hosts_file)
    except OSError as e:
        print(f"ERROR: cannot read hosts file: {e}", file=sys.stderr)
        return 1

    try:
        report = StressTest(config).run()
    except ToolNotFound as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 127

    print("------")
    print(format_report(report, hosts=hosts))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
