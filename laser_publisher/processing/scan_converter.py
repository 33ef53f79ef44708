"""
Scan Converter - Turns a raw sweep into a ScanRecord

Some laser scanners have blind areas before and after the actual detection
range. These are given by the first_step and last_step properties of the
scanner configuration. Since the blind values never change, they are simply
skipped when copying the range readings.
"""
import numpy as np

from ..errors import ConfigurationError
from .scan_data import NSEC_PER_MSEC, LaserScan, LaserScannerConfiguration, ScanRecord

MM_PER_M = 1000.0


def validate_configuration(configuration: LaserScannerConfiguration) -> None:
    """Reject a configuration whose step window cannot index a raw scan."""
    first, last = configuration.first_step, configuration.last_step
    if first < 0 or first >= last:
        raise ConfigurationError(
            f"Invalid step window: first_step={first}, last_step={last}")
    if configuration.reading_count is not None and last > configuration.reading_count:
        raise ConfigurationError(
            f"last_step={last} exceeds the {configuration.reading_count} readings per scan")


def to_scan_record(frame_id: str, scan: LaserScan,
                   configuration: LaserScannerConfiguration,
                   offset_ns: int = 0) -> ScanRecord:
    """
    Build a ScanRecord from one raw sweep and the scanner configuration.
    :param frame_id: The scanner's sensor frame.
    :param scan: Raw readings in millimeters, blind zones included.
    :param configuration: The scanner configuration read at startup.
    :param offset_ns: Wall clock offset added to the scan timestamp.
    """
    first, last = configuration.first_step, configuration.last_step
    if last > len(scan.ranges):
        raise ConfigurationError(
            f"last_step={last} exceeds the {len(scan.ranges)} readings in this scan")

    ranges = np.asarray(scan.ranges[first:last], dtype=np.float64) / MM_PER_M
    ranges.flags.writeable = False

    return ScanRecord(
        frame_id=frame_id,
        stamp_ns=int(scan.timestamp_ms) * NSEC_PER_MSEC + offset_ns,
        angle_min=configuration.min_angle,
        angle_max=configuration.max_angle,
        angle_increment=configuration.angle_increment,
        time_increment=configuration.time_increment,
        scan_time=configuration.scan_time,
        range_min=configuration.min_range_mm / MM_PER_M,
        range_max=configuration.max_range_mm / MM_PER_M,
        ranges=ranges,
    )
