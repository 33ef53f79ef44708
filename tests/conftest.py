"""
Pytest configuration and fixtures for laser publisher tests.
"""

import math
import sys
import threading
from collections import deque
from pathlib import Path

import pytest

# Add the project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from laser_publisher.processing import LaserScan, LaserScannerConfiguration
from laser_publisher.core import Subscription


def scip_encode(value, width):
    """Encode an integer into SCIP 6-bit characters."""
    chars = []
    for shift in range(width - 1, -1, -1):
        chars.append(((value >> (6 * shift)) & 0x3F) + 0x30)
    return bytes(chars)


def with_checksum(payload):
    return payload + bytes([(sum(payload) & 0x3F) + 0x30])


def parameter_line(key, value):
    body = f"{key}:{value}".encode('ascii')
    return body + b';' + bytes([(sum(body) & 0x3F) + 0x30])


def scan_lines(echo, ticks, ranges):
    data = b''.join(scip_encode(r, 3) for r in ranges)
    lines = [echo, with_checksum(b'99'), with_checksum(scip_encode(ticks, 4))]
    lines += [with_checksum(data[i:i + 64]) for i in range(0, len(data), 64)]
    return lines


URG_PARAMETERS = {
    'MODL': 'URG-04LX(Hokuyo Automatic Co.,Ltd.)',
    'DMIN': '20',
    'DMAX': '5600',
    'ARES': '1024',
    'AMIN': '44',
    'AMAX': '725',
    'AFRT': '384',
    'SCAN': '600',
}


class FakeScipSerial:
    """Serial stand-in that answers SCIP 2.0 commands from a script."""

    def __init__(self, parameters=None, scans=(), leading_blocks=()):
        self.parameters = dict(URG_PARAMETERS if parameters is None else parameters)
        self.leading_blocks = list(leading_blocks)  # raw line lists streamed before the scans
        self.scans = list(scans)  # (ticks, ranges) pairs streamed after MD
        self.is_open = True
        self.written = []
        self._lines = deque()
        self._cond = threading.Condition()

    def _reply(self, lines):
        for line in lines:
            self._lines.append(line + b'\n')
        self._lines.append(b'\n')

    def write(self, data):
        command = data.rstrip(b'\n')
        with self._cond:
            self.written.append(command)
            if command == b'PP':
                params = [parameter_line(k, v) for k, v in self.parameters.items()]
                self._reply([command, with_checksum(b'00')] + params)
            elif command.startswith(b'MD'):
                self._reply([command, with_checksum(b'00')])
                for lines in self.leading_blocks:
                    self._reply(lines)
                for ticks, ranges in self.scans:
                    self._reply(scan_lines(command, ticks, ranges))
            else:
                self._reply([command, with_checksum(b'00')])
            self._cond.notify_all()
        return len(data)

    def readline(self):
        with self._cond:
            if not self._lines:
                self._cond.wait(0.02)
            if not self._lines:
                return b''
            return self._lines.popleft()

    def flush(self):
        pass

    def reset_input_buffer(self):
        with self._cond:
            self._lines.clear()

    def close(self):
        self.is_open = False


class FakeDevice:
    """Scan source recording how the publisher drives it."""

    def __init__(self, configuration):
        self.configuration = configuration
        self.listener = None
        self.configuration_reads = 0
        self.shutdown_calls = 0
        self.shutdown_error = None

    def get_configuration(self):
        self.configuration_reads += 1
        return self.configuration

    def start_scanning(self, listener):
        self.listener = listener

    def deliver(self, scan):
        self.listener(scan)

    def shutdown(self):
        self.shutdown_calls += 1
        if self.shutdown_error is not None:
            raise self.shutdown_error


class FakeClockFeed:
    def __init__(self):
        self.listener = None
        self.subscription = None

    def subscribe(self, listener):
        self.listener = listener
        self.subscription = Subscription("wall_clock")
        return self.subscription

    def deliver(self, wall_time_ns):
        if self.subscription is not None and self.subscription.active:
            self.listener(wall_time_ns)


class ListSink:
    def __init__(self):
        self.records = []

    def publish(self, record):
        self.records.append(record)


@pytest.fixture
def urg_configuration():
    """Scanner configuration with the blind zones of a URG-04LX."""
    return LaserScannerConfiguration(
        angle_increment=0.01,
        min_angle=-2.0,
        max_angle=2.0,
        time_increment=0.0001,
        scan_time=0.1,
        min_range_mm=20,
        max_range_mm=4000,
        first_step=44,
        last_step=725,
        reading_count=1024,
        model='URG-04LX',
    )


@pytest.fixture
def small_configuration():
    return LaserScannerConfiguration(
        angle_increment=math.pi / 180,
        min_angle=-0.5,
        max_angle=0.5,
        time_increment=0.001,
        scan_time=0.025,
        min_range_mm=100,
        max_range_mm=30000,
        first_step=10,
        last_step=15,
        reading_count=20,
    )


@pytest.fixture
def make_scan():
    def _make(timestamp_ms, count, start=1000):
        return LaserScan(timestamp_ms=timestamp_ms, ranges=list(range(start, start + count)))
    return _make


@pytest.fixture
def fake_device(small_configuration):
    return FakeDevice(small_configuration)


@pytest.fixture
def clock_feed():
    return FakeClockFeed()


@pytest.fixture
def sink():
    return ListSink()


@pytest.fixture
def fake_serial():
    return FakeScipSerial(scans=[(1234, [0] * 44 + [1500] * 681 + [0])])
