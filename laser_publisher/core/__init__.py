"""
Core Module - Publisher lifecycle, wall clock offset and subscription handles
"""
from .clock_offset import ClockOffsetTracker
from .subscription import Subscription
from .laser_scan_publisher import (
    LaserScanPublisher, LaserScannerDevice, PublisherState, PublisherSubscriptions,
    ScanSink, WallClockFeed,
)

__all__ = ['ClockOffsetTracker', 'Subscription', 'LaserScanPublisher', 'LaserScannerDevice',
           'PublisherState', 'PublisherSubscriptions', 'ScanSink', 'WallClockFeed']
