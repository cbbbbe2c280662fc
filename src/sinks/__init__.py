"""
Result sinks for forward-zone check outcomes.

  - CollectdExecSink: PUTVAL lines on stdout for collectd's exec plugin
  - GraphiteSink:     plaintext line protocol pushed to carbon (port 2003)
  - MemorySink:       keeps results in memory (web app, tests)
"""

from .collectd import CollectdExecSink, format_putval
from .graphite import GraphiteSink, format_graphite_line
from .memory import MemorySink

__all__ = ["CollectdExecSink", "GraphiteSink", "MemorySink", "format_graphite_line", "format_putval"]
