"""
Config - Run parameters for the laser scan publisher
"""
import argparse
from dataclasses import dataclass
from typing import Optional

from .errors import ConfigurationError

DEFAULT_LASER_TOPIC = "laser"
DEFAULT_LASER_FRAME = "laser"
DEFAULT_WALL_CLOCK_TOPIC = "wall_clock"
DEFAULT_SERIAL_PORT = "/dev/ttyACM0"
DEFAULT_BAUD_RATE = 115200
DEFAULT_MQTT_HOST = "localhost"
DEFAULT_MQTT_PORT = 1883


@dataclass
class PublisherParams:
    """Parameters for the publisher, its MQTT connection and its serial device."""
    laser_topic: str = DEFAULT_LASER_TOPIC
    laser_frame: str = DEFAULT_LASER_FRAME
    wall_clock_topic: str = DEFAULT_WALL_CLOCK_TOPIC

    mqtt_host: str = DEFAULT_MQTT_HOST
    mqtt_port: int = DEFAULT_MQTT_PORT
    mqtt_username: Optional[str] = None
    mqtt_password: Optional[str] = None
    mqtt_tls: bool = False
    mqtt_ca_certs: Optional[str] = None
    qos: int = 0
    retain: bool = False

    serial_port: str = DEFAULT_SERIAL_PORT
    baud_rate: int = DEFAULT_BAUD_RATE

    def __post_init__(self):
        for name in ('laser_topic', 'wall_clock_topic'):
            _check_topic(name, getattr(self, name))
        if not self.laser_frame:
            raise ConfigurationError("laser_frame must not be empty")
        if self.qos not in (0, 1, 2):
            raise ConfigurationError(f"qos must be 0, 1 or 2, got {self.qos}")

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> 'PublisherParams':
        """Build parameters from parsed command line arguments."""
        return cls(
            laser_topic=args.laser_topic,
            laser_frame=args.laser_frame,
            wall_clock_topic=args.wall_clock_topic,
            mqtt_host=args.mqtt_host,
            mqtt_port=args.mqtt_port,
            mqtt_username=args.mqtt_username,
            mqtt_password=args.mqtt_password,
            mqtt_tls=args.mqtt_tls,
            mqtt_ca_certs=args.mqtt_ca_certs,
            qos=args.qos,
            retain=args.retain,
            serial_port=args.port,
            baud_rate=args.baudrate,
        )


def _check_topic(name: str, topic: str) -> None:
    if not topic:
        raise ConfigurationError(f"{name} must not be empty")
    if '+' in topic or '#' in topic:
        raise ConfigurationError(f"{name} must not contain MQTT wildcards: {topic!r}")


def add_arguments(parser: argparse.ArgumentParser) -> None:
    """Register the publisher options on an argument parser."""
    topics = parser.add_argument_group('topics')
    topics.add_argument('--laser-topic', default=DEFAULT_LASER_TOPIC,
                        help='Topic the scan records are published to (default: %(default)s)')
    topics.add_argument('--laser-frame', default=DEFAULT_LASER_FRAME,
                        help='Frame id written into each scan record (default: %(default)s)')
    topics.add_argument('--wall-clock-topic', default=DEFAULT_WALL_CLOCK_TOPIC,
                        help='Topic carrying wall clock corrections (default: %(default)s)')

    mqtt_group = parser.add_argument_group('mqtt')
    mqtt_group.add_argument('--mqtt-host', default=DEFAULT_MQTT_HOST)
    mqtt_group.add_argument('--mqtt-port', type=int, default=DEFAULT_MQTT_PORT)
    mqtt_group.add_argument('--mqtt-username', default=None)
    mqtt_group.add_argument('--mqtt-password', default=None)
    mqtt_group.add_argument('--mqtt-tls', action='store_true')
    mqtt_group.add_argument('--mqtt-ca-certs', default=None, help='CA certificate path')
    mqtt_group.add_argument('--qos', type=int, choices=[0, 1, 2], default=0)
    mqtt_group.add_argument('--retain', action='store_true')

    serial_group = parser.add_argument_group('serial')
    serial_group.add_argument('--port', default=DEFAULT_SERIAL_PORT,
                              help='Serial port of the scanner (default: %(default)s)')
    serial_group.add_argument('--baudrate', type=int, default=DEFAULT_BAUD_RATE)
