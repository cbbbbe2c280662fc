"""
dnsaas-tools: operational tooling for a DNS-as-a-Service platform.

  - check-forward-zones: SOA health checks of forwarding zones (collectd exec / Graphite)
  - dns-stress-test:     distributed load test driven over parallel-ssh
"""

__version__ = "0.2.0"
