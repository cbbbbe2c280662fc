"""
Distributed DNS load test.

Drives the `flame` (flamethrower) load generator on many hosts at once through
parallel-ssh, then sums up the per-host response codes.

Public entrypoints: StressTest, summarize, format_report
"""

from .report import RCODES, StressReport, format_report, summarize
from .tool import StressTest, StressTestConfig, count_hosts

__all__ = ["RCODES", "StressReport", "StressTest", "StressTestConfig", "count_hosts", "format_report", "summarize"]
