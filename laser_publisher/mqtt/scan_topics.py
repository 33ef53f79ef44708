"""
Scan Topics - Scan record sink and wall clock feed on top of MQTTPublisher
"""
import json
import logging
import math
from typing import Any, Callable

from ..config import DEFAULT_LASER_TOPIC, DEFAULT_WALL_CLOCK_TOPIC
from ..core.subscription import Subscription
from ..errors import SinkError
from ..processing import ScanRecord
from ..processing.scan_data import NSEC_PER_SEC
from .mqtt_publisher import MQTTPublisher

logger = logging.getLogger(__name__)


class MQTTScanSink:
    """Publishes scan records as sensor_msgs/LaserScan shaped JSON."""

    def __init__(self, publisher: MQTTPublisher, topic: str = DEFAULT_LASER_TOPIC,
                 qos: int = 0, retain: bool = False):
        self.publisher = publisher
        self.topic = topic
        self.qos = qos
        self.retain = retain

    def publish(self, record: ScanRecord) -> None:
        if not self.publisher.publish(self.topic, record.to_dict(), qos=self.qos, retain=self.retain):
            raise SinkError(f"Broker rejected scan on topic {self.topic}")


def parse_wall_clock(payload: bytes) -> int:
    """
    Decode a wall clock message into nanoseconds.
    Accepts {"secs": s, "nsecs": n}, {"data": {"secs": s, "nsecs": n}}
    or a bare number of seconds.
    """
    message: Any = json.loads(payload)
    if isinstance(message, dict) and 'data' in message:
        message = message['data']
    if isinstance(message, dict):
        secs, nsecs = message['secs'], message.get('nsecs', 0)
        if any(isinstance(v, bool) or not isinstance(v, int) for v in (secs, nsecs)):
            raise ValueError(f"secs/nsecs must be integers: {message!r}")
        return secs * NSEC_PER_SEC + nsecs
    if isinstance(message, (int, float)) and not isinstance(message, bool):
        if isinstance(message, float) and not math.isfinite(message):
            raise ValueError(f"Non-finite wall clock time {message!r}")
        if isinstance(message, int):
            return message * NSEC_PER_SEC
        return round(message * NSEC_PER_SEC)
    raise ValueError(f"Unsupported wall clock message {message!r}")


class MQTTWallClock:
    """Feeds wall clock times received on an MQTT topic to a listener."""

    def __init__(self, publisher: MQTTPublisher, topic: str = DEFAULT_WALL_CLOCK_TOPIC, qos: int = 0):
        self.publisher = publisher
        self.topic = topic
        self.qos = qos

    def subscribe(self, listener: Callable[[int], None]) -> Subscription:
        def on_payload(payload: bytes):
            try:
                wall_time_ns = parse_wall_clock(payload)
            except (ValueError, KeyError) as e:
                logger.warning("Ignoring malformed wall clock message on %s: %s", self.topic, e)
                return
            listener(wall_time_ns)

        return self.publisher.subscribe(self.topic, on_payload, self.qos)
