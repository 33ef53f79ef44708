"""
Scan Data - Data types exchanged between the scanner, the converter and the bus
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence

import numpy as np

NSEC_PER_SEC = 1_000_000_000
NSEC_PER_MSEC = 1_000_000


@dataclass(frozen=True)
class LaserScannerConfiguration:
    """Static scanner parameters, read once when publishing starts.

    first_step and last_step delimit the non-blind sector of a raw scan:
    readings before first_step and from last_step onwards never carry data.
    """
    angle_increment: float
    min_angle: float
    max_angle: float
    time_increment: float
    scan_time: float
    min_range_mm: int
    max_range_mm: int
    first_step: int
    last_step: int
    reading_count: Optional[int] = None
    model: str = ""

    @property
    def step_count(self) -> int:
        """Number of readings left after trimming the blind zones"""
        return self.last_step - self.first_step


@dataclass(frozen=True, eq=False)
class LaserScan:
    """One raw sweep as delivered by the device, ranges in millimeters."""
    timestamp_ms: int
    ranges: Sequence[int]
    device_ticks: Optional[int] = None


@dataclass(frozen=True, eq=False)
class ScanRecord:
    """A converted sweep ready for the bus, in meters and corrected time."""
    frame_id: str
    stamp_ns: int
    angle_min: float
    angle_max: float
    angle_increment: float
    time_increment: float
    scan_time: float
    range_min: float
    range_max: float
    ranges: np.ndarray = field(repr=False)

    @property
    def stamp(self) -> float:
        """Corrected timestamp in seconds"""
        return self.stamp_ns / NSEC_PER_SEC

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the sensor_msgs/LaserScan field layout."""
        secs, nsecs = divmod(self.stamp_ns, NSEC_PER_SEC)
        return {
            'header': {
                'frame_id': self.frame_id,
                'stamp': {'secs': secs, 'nsecs': nsecs},
            },
            'angle_min': self.angle_min,
            'angle_max': self.angle_max,
            'angle_increment': self.angle_increment,
            'time_increment': self.time_increment,
            'scan_time': self.scan_time,
            'range_min': self.range_min,
            'range_max': self.range_max,
            'ranges': self.ranges.tolist(),
        }
