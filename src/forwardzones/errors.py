# Base error for everything the forward-zone checker raises on purpose
class ForwardZonesError(Exception):
    """Base error for the forward-zone checker."""

    exit_code: int = 1


# Bad command-line / environment configuration. Fatal, raised before any network activity.
class ConfigError(ForwardZonesError):
    """Raised when the checker configuration is incomplete or invalid."""


# The control-plane API could not be fetched or returned something we cannot use. Fatal.
class ZoneSourceError(ForwardZonesError):
    """Raised when the forward-zones list cannot be fetched or parsed."""


# The resolver client (e.g. the dig binary) is not installed. Absorbed by the checker.
class ProbeToolUnavailable(ForwardZonesError):
    """Raised by a probe when the tool it drives is missing."""

    exit_code = 127
