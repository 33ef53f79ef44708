"""
Laser Scan Publisher - Forwards scanner sweeps to the bus with corrected timestamps
"""
import logging
import threading
import time
from enum import Enum
from typing import Callable, NamedTuple, Optional, Protocol

from ..config import DEFAULT_LASER_FRAME
from ..errors import IllegalStateError
from ..processing import LaserScan, LaserScannerConfiguration, ScanRecord
from ..processing import to_scan_record, validate_configuration
from .clock_offset import ClockOffsetTracker
from .subscription import Subscription

logger = logging.getLogger(__name__)

ScanListener = Callable[[LaserScan], None]
WallClockListener = Callable[[int], None]


class LaserScannerDevice(Protocol):
    """Source of raw sweeps (serial scanner, simulator...)."""

    def get_configuration(self) -> LaserScannerConfiguration: ...

    def start_scanning(self, listener: ScanListener) -> None: ...

    def shutdown(self) -> None: ...


class WallClockFeed(Protocol):
    """Delivers wall clock times, in nanoseconds, from the bus."""

    def subscribe(self, listener: WallClockListener) -> Subscription: ...


class ScanSink(Protocol):
    """Destination of scan records. publish() may raise."""

    def publish(self, record: ScanRecord) -> None: ...


class PublisherState(Enum):
    CREATED = "created"
    RUNNING = "running"
    SHUT_DOWN = "shut_down"


class PublisherSubscriptions(NamedTuple):
    clock: Optional[Subscription]
    scan: Subscription


class LaserScanPublisher:
    """Publishes the sweeps of one laser scanner.

    Lifecycle is CREATED -> RUNNING -> SHUT_DOWN. Scans arrive on the device's
    reader thread and wall clock corrections on the bus thread; the offset
    tracker is the only state the two paths share.
    """

    def __init__(self, device: LaserScannerDevice, sink: ScanSink,
                 clock_feed: Optional[WallClockFeed] = None, *,
                 laser_frame: str = DEFAULT_LASER_FRAME,
                 clock: Callable[[], int] = time.time_ns):
        self.device = device
        self.sink = sink
        self.clock_feed = clock_feed
        self.laser_frame = laser_frame
        self.offset_tracker = ClockOffsetTracker()
        self._clock = clock

        self._lock = threading.Lock()
        self._state = PublisherState.CREATED
        self._configuration: Optional[LaserScannerConfiguration] = None
        self._clock_subscription: Optional[Subscription] = None
        self._scan_subscription: Optional[Subscription] = None

        # Only touched on the scan delivery path
        self.scans_published = 0
        self.publish_failures = 0
        self._consecutive_failures = 0

    @property
    def state(self) -> PublisherState:
        return self._state

    @property
    def configuration(self) -> Optional[LaserScannerConfiguration]:
        return self._configuration

    @property
    def wall_clock_offset_ns(self) -> int:
        return self.offset_tracker.get()

    def start(self) -> PublisherSubscriptions:
        """Read the scanner configuration and begin forwarding scans.

        Raises IllegalStateError unless the publisher is freshly created. Any
        failure while starting shuts the publisher down before re-raising.
        """
        with self._lock:
            if self._state is not PublisherState.CREATED:
                raise IllegalStateError(f"start() called in state {self._state.value}")
            try:
                configuration = self.device.get_configuration()
                validate_configuration(configuration)
                self._configuration = configuration

                if self.clock_feed is not None:
                    self._clock_subscription = self.clock_feed.subscribe(self._on_wall_clock)
                self._scan_subscription = Subscription("scan")
                self._state = PublisherState.RUNNING
                self.device.start_scanning(self._on_new_laser_scan)
            except Exception:
                logger.exception("Failed to start laser scan publisher")
                self._shutdown_locked()
                raise

            logger.info("Publishing %s scans in frame '%s' (%d steps)",
                        configuration.model or "laser", self.laser_frame,
                        configuration.step_count)
            return PublisherSubscriptions(self._clock_subscription, self._scan_subscription)

    def shutdown(self) -> None:
        """Stop forwarding and release the device. Safe to call repeatedly."""
        with self._lock:
            self._shutdown_locked()

    def _shutdown_locked(self) -> None:
        if self._state is PublisherState.SHUT_DOWN:
            return
        self._state = PublisherState.SHUT_DOWN
        for subscription in (self._scan_subscription, self._clock_subscription):
            if subscription is not None:
                try:
                    subscription.cancel()
                except Exception:
                    logger.warning("Failed to cancel %r", subscription, exc_info=True)
        try:
            self.device.shutdown()
        except Exception:
            logger.warning("Error while releasing the laser scanner", exc_info=True)
        logger.info("Laser scan publisher shut down")

    def _on_new_laser_scan(self, scan: LaserScan) -> None:
        subscription = self._scan_subscription
        configuration = self._configuration
        if subscription is None or not subscription.active or configuration is None:
            return

        record = to_scan_record(self.laser_frame, scan, configuration,
                                self.offset_tracker.get())
        try:
            self.sink.publish(record)
        except Exception as e:
            self.publish_failures += 1
            if self._consecutive_failures == 0:
                logger.exception("Failed to publish scan stamped %d ns", record.stamp_ns)
            else:
                logger.warning("Failed to publish scan stamped %d ns (%d in a row): %s",
                               record.stamp_ns, self._consecutive_failures + 1, e)
            self._consecutive_failures += 1
            return
        if self._consecutive_failures:
            logger.info("Publishing recovered after %d failed scans", self._consecutive_failures)
            self._consecutive_failures = 0
        self.scans_published += 1

    def _on_wall_clock(self, wall_time_ns: int) -> None:
        # A retained correction may arrive before subscribe() has returned
        if self._state is PublisherState.SHUT_DOWN:
            return
        offset_ns = wall_time_ns - self._clock()
        self.offset_tracker.set(offset_ns)
        logger.debug("Wall clock offset updated to %d ns", offset_ns)
