"""
Laser Publisher - Forwards laser scanner sweeps to an MQTT bus with wall-clock corrected timestamps
"""
from .core import ClockOffsetTracker, LaserScanPublisher, PublisherState, Subscription
from .errors import ConfigurationError, DeviceError, IllegalStateError, LaserPublisherError, SinkError
from .processing import LaserScan, LaserScannerConfiguration, ScanRecord, to_scan_record

__version__ = "1.0.0"

__all__ = [
    'ClockOffsetTracker', 'LaserScanPublisher', 'PublisherState', 'Subscription',
    'ConfigurationError', 'DeviceError', 'IllegalStateError', 'LaserPublisherError', 'SinkError',
    'LaserScan', 'LaserScannerConfiguration', 'ScanRecord', 'to_scan_record',
]
