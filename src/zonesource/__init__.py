"""
DNSaaS control-plane client: the list of forwarding zones and their nameservers.

Public entrypoint: ForwardZonesClient
"""

from .client import FORWARD_ZONES_PATH, ForwardZonesClient, TLSCredentials, parse_forward_zones, parse_nameserver

__all__ = ["FORWARD_ZONES_PATH", "ForwardZonesClient", "TLSCredentials", "parse_forward_zones", "parse_nameserver"]
