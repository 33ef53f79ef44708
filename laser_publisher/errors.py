"""
Errors - Exception hierarchy shared by the publisher, the devices and the bus adapter
"""


class LaserPublisherError(Exception):
    """Base class for every error raised by this package."""


class IllegalStateError(LaserPublisherError, RuntimeError):
    """A lifecycle operation was called in the wrong state (e.g. start() twice)."""


class ConfigurationError(LaserPublisherError, ValueError):
    """Scanner configuration or run parameters are inconsistent."""


class SinkError(LaserPublisherError):
    """The bus rejected a scan record."""


class DeviceError(LaserPublisherError):
    """The laser scanner returned a malformed response or failed to answer."""
