"""
MQTT Module - Broker connection, scan record sink and wall clock feed
"""
from .mqtt_publisher import MQTTPublisher
from .scan_topics import MQTTScanSink, MQTTWallClock, parse_wall_clock

__all__ = ['MQTTPublisher', 'MQTTScanSink', 'MQTTWallClock', 'parse_wall_clock']
