"""
Main Entry Point - Laser scan publisher
Reads a Hokuyo laser scanner (or the simulator) and publishes its sweeps over MQTT
"""
import argparse
import logging
import sys
import threading
from typing import List, Optional

from laser_publisher import LaserPublisherError, LaserScanPublisher, __version__
from laser_publisher.config import PublisherParams, add_arguments
from laser_publisher.mqtt import MQTTPublisher, MQTTScanSink, MQTTWallClock
from laser_publisher.sensor import HokuyoSensor, SimulatedLaserScanner

STATUS_INTERVAL = 0.5

logger = logging.getLogger('laser-publisher')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Laser Scan Publisher - forwards laser scanner sweeps to an MQTT broker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Modes:
  serial   : Hokuyo scanner on a serial port (default)
  simulate : Synthetic sweeps, no hardware needed

Examples:
  python main.py --port /dev/ttyACM0 --mqtt-host 192.168.1.10
  python main.py --mode simulate --laser-topic robot/laser
        """
    )
    parser.add_argument(
        '--mode', '-m',
        choices=['serial', 'simulate'],
        default='serial',
        help='Scan source: serial (Hokuyo SCIP 2.0) or simulate'
    )
    parser.add_argument('--verbose', action='store_true', help='Enable debug logging')
    parser.add_argument(
        '--version', '-v',
        action='version',
        version=f'Laser Scan Publisher v{__version__}'
    )
    add_arguments(parser)
    return parser


def open_device(mode: str, params: PublisherParams):
    if mode == 'simulate':
        return SimulatedLaserScanner()
    return HokuyoSensor(port=params.serial_port, baudrate=params.baud_rate)


def run(params: PublisherParams, mode: str, shutdown_event: threading.Event) -> int:
    """Run the publisher until shutdown_event is set. Returns an exit code."""
    mqtt_client = MQTTPublisher(
        params.mqtt_host, params.mqtt_port,
        username=params.mqtt_username, password=params.mqtt_password,
        tls_enabled=params.mqtt_tls, ca_certs=params.mqtt_ca_certs,
    )
    if not mqtt_client.connect():
        print("MQTT connection failed. Aborting.")
        return 1

    publisher = None
    try:
        device = open_device(mode, params)
        publisher = LaserScanPublisher(
            device,
            MQTTScanSink(mqtt_client, params.laser_topic, qos=params.qos, retain=params.retain),
            MQTTWallClock(mqtt_client, params.wall_clock_topic),
            laser_frame=params.laser_frame,
        )
        publisher.start()

        print(f"Publishing to: '{params.laser_topic}', wall clock from '{params.wall_clock_topic}'")
        print("Press Ctrl+C to stop.\n")
        while not shutdown_event.wait(STATUS_INTERVAL):
            offset_ms = publisher.wall_clock_offset_ns / 1e6
            print(f"Scans: {publisher.scans_published:7d} | Failed: {publisher.publish_failures:5d} "
                  f"| Offset: {offset_ms:+10.3f} ms", end='\r')
        return 0
    except LaserPublisherError as e:
        logger.error("%s", e)
        return 1
    finally:
        print("\nInitiating shutdown...")
        if publisher is not None:
            publisher.shutdown()
        mqtt_client.disconnect()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    )
    try:
        params = PublisherParams.from_args(args)
    except LaserPublisherError as e:
        print(f"Invalid configuration: {e}")
        return 2

    print("=" * 50)
    print("LASER SCAN PUBLISHER")
    print("=" * 50)

    shutdown_event = threading.Event()
    try:
        return run(params, args.mode, shutdown_event)
    except KeyboardInterrupt:
        print("\nShutdown signal received (Ctrl+C).")
        return 0


if __name__ == "__main__":
    sys.exit(main())
