"""
Simulated Sensor - Stand-in scanner producing synthetic sweeps without hardware
"""
import logging
import math
import threading
import time
from typing import Callable, Optional

import numpy as np

from ..processing import LaserScan, LaserScannerConfiguration

logger = logging.getLogger(__name__)

# Parameters reported by a URG-04LX
URG_04LX_CONFIGURATION = LaserScannerConfiguration(
    angle_increment=2.0 * math.pi / 1024,
    min_angle=(44 - 384) * 2.0 * math.pi / 1024,
    max_angle=(725 - 384) * 2.0 * math.pi / 1024,
    time_increment=0.1 / 1024,
    scan_time=0.1,
    min_range_mm=20,
    max_range_mm=5600,
    first_step=44,
    last_step=725,
    reading_count=726,
    model="URG-04LX (simulated)",
)


class SimulatedLaserScanner:
    """Generates a room-like sweep at a fixed rate from a background thread."""

    def __init__(self, configuration: LaserScannerConfiguration = URG_04LX_CONFIGURATION,
                 rate_hz: Optional[float] = None, *, noise_mm: float = 5.0, seed: Optional[int] = None,
                 clock: Callable[[], int] = time.time_ns):
        self.configuration = configuration
        self.rate_hz = rate_hz if rate_hz else 1.0 / configuration.scan_time
        self.noise_mm = noise_mm
        self._rng = np.random.default_rng(seed)
        self._clock = clock
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def get_configuration(self) -> LaserScannerConfiguration:
        return self.configuration

    def generate_scan(self) -> LaserScan:
        """One synthetic sweep, blind zones filled with the device's 'no echo' value 0."""
        cfg = self.configuration
        count = cfg.reading_count if cfg.reading_count is not None else cfg.last_step
        steps = np.arange(count)
        angles = cfg.min_angle + (steps - cfg.first_step) * cfg.angle_increment
        # Distance to the walls of a 4 m x 3 m box centred on the scanner
        with np.errstate(divide='ignore'):
            to_x = np.abs(2000.0 / np.cos(angles))
            to_y = np.abs(1500.0 / np.sin(angles))
        distances = np.minimum(to_x, to_y) + self._rng.normal(0.0, self.noise_mm, count)
        distances = np.clip(distances, cfg.min_range_mm, cfg.max_range_mm).astype(np.int64)
        distances[:cfg.first_step] = 0
        distances[cfg.last_step:] = 0
        return LaserScan(timestamp_ms=self._clock() // 1_000_000, ranges=distances)

    def start_scanning(self, listener: Callable[[LaserScan], None]):
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, args=(listener,),
                                        name="simulated-scanner", daemon=True)
        self._thread.start()

    def _run(self, listener: Callable[[LaserScan], None]):
        period = 1.0 / self.rate_hz
        while not self._stop_event.is_set():
            try:
                listener(self.generate_scan())
            except Exception:
                logger.exception("Scan listener failed, stopping simulation")
                break
            self._stop_event.wait(period)

    def shutdown(self):
        self._stop_event.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=1.0)
        self._thread = None
