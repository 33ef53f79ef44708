import logging
import threading
import time
from typing import Callable, List, Optional

import serial

from ..errors import DeviceError
from ..processing import LaserScan, LaserScannerConfiguration
from .constants import *
from .response_parser import ScipResponseParser

logger = logging.getLogger(__name__)


class HokuyoSensor:
    """
    Driver for Hokuyo URG laser scanners speaking SCIP 2.0 over a serial port.
    """
    def __init__(self, port: Optional[str] = None, baudrate: int = 115200, timeout: float = 2.0, *,
                 connection=None, clock: Callable[[], int] = time.time_ns):
        """
        :param port: Serial device of the scanner, e.g. /dev/ttyACM0.
        :param connection: An already open serial-like object, used instead of port.
        :param clock: Local clock in nanoseconds used to stamp received scans.
        """
        self.port = port
        self.baudrate = baudrate
        self.timeout = timeout
        self._clock = clock
        self._configuration: Optional[LaserScannerConfiguration] = None
        self._reader_thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._closed = False

        if connection is not None:
            self.ser = connection
        else:
            try:
                self.ser = serial.Serial(self.port, self.baudrate, timeout=self.timeout)
                logger.info("Connected to port %s at %d bps", self.port, self.baudrate)
            except serial.SerialException as e:
                logger.error("Could not open serial port %s: %s", self.port, e)
                raise DeviceError(f"Could not open serial port {self.port}") from e

        try:
            self._enter_scip2()
        except DeviceError:
            # An injected connection belongs to the caller
            if connection is None:
                self.close()
            raise

    def _write_command(self, command: bytes):
        if self.ser and self.ser.is_open:
            self.ser.write(command + LF)
            self.ser.flush()
        else:
            raise DeviceError("Serial port is not open.")

    def _read_block(self) -> List[bytes]:
        """Read lines up to the empty line ending a response; [] on timeout."""
        lines = []
        while True:
            line = self.ser.readline()
            if not line.endswith(LF):
                if line or lines:
                    raise DeviceError(f"Timed out inside a response after {len(lines)} lines")
                return []
            line = line.rstrip(b'\r\n')
            if not line:
                return lines
            lines.append(line)

    def _send_command(self, command: bytes) -> List[bytes]:
        self._write_command(command)
        block = self._read_block()
        if not block:
            raise DeviceError(f"No response to {command.decode('ascii')}")
        if block[0] != command:
            raise DeviceError(f"Unexpected echo {block[0]!r} for {command!r}")
        return block

    def _enter_scip2(self):
        self.ser.reset_input_buffer()
        # Scanners already in SCIP 2.0 reply with an error status; either way is fine
        self._send_command(CMD_SCIP2)

    def get_configuration(self) -> LaserScannerConfiguration:
        """Query the scanner parameters (PP) once and cache the result."""
        if self._configuration is None:
            block = self._send_command(CMD_PARAMETERS)
            status = ScipResponseParser.parse_status(block)
            if status != STATUS_OK:
                raise DeviceError(f"PP failed with status {status!r}")
            parameters = ScipResponseParser.parse_parameters(block)
            self._configuration = ScipResponseParser.configuration_from_parameters(parameters)
            logger.info("Scanner %s: steps %d..%d, %d-%d mm",
                        self._configuration.model or "unknown",
                        self._configuration.first_step, self._configuration.last_step,
                        self._configuration.min_range_mm, self._configuration.max_range_mm)
        return self._configuration

    def turn_laser_on(self):
        block = self._send_command(CMD_LASER_ON)
        status = ScipResponseParser.parse_status(block)
        if status not in (STATUS_OK, STATUS_LASER_ALREADY_ON):
            raise DeviceError(f"Laser did not turn on, status {status!r}")

    def start_scanning(self, listener: Callable[[LaserScan], None]):
        """Start continuous acquisition and deliver each sweep to listener
        from a background thread."""
        if self._reader_thread is not None:
            raise DeviceError("Scanning already started")
        configuration = self.get_configuration()
        self.turn_laser_on()

        command = ScipResponseParser.multi_scan_command(0, configuration.last_step)
        block = self._send_command(command)
        status = ScipResponseParser.parse_status(block)
        if status != STATUS_OK:
            raise DeviceError(f"MD failed with status {status!r}")

        self._stop_event.clear()
        self._reader_thread = threading.Thread(
            target=self._reading_loop, args=(listener,), name="hokuyo-reader", daemon=True)
        self._reader_thread.start()

    def _reading_loop(self, listener: Callable[[LaserScan], None]):
        logger.debug("Scan reading thread started.")
        while not self._stop_event.is_set():
            try:
                block = self._read_block()
                if not block or self._stop_event.is_set():
                    continue
                timestamp_ms = self._clock() // 1_000_000
                ticks, ranges = ScipResponseParser.parse_scan(block)
            except DeviceError as e:
                logger.warning("Dropping malformed scan: %s", e)
                continue
            except serial.SerialException:
                logger.exception("Serial connection lost")
                break

            try:
                listener(LaserScan(timestamp_ms=timestamp_ms, ranges=ranges, device_ticks=ticks))
            except Exception:
                logger.exception("Scan listener failed, stopping acquisition")
                break
        logger.debug("Scan reading thread finished.")

    def shutdown(self):
        """Stop acquisition and close the port. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._stop_event.set()
        try:
            if self.ser and self.ser.is_open:
                self._write_command(CMD_QUIT)
        finally:
            reader = self._reader_thread
            if reader is not None and reader is not threading.current_thread():
                reader.join(timeout=self.timeout + 1.0)
            self._reader_thread = None
            self.close()

    def close(self):
        if self.ser and self.ser.is_open:
            self.ser.reset_input_buffer()
            self.ser.close()
            logger.info("Serial port connection closed.")
