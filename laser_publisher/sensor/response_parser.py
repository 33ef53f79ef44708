"""
Response Parser - Decodes SCIP 2.0 responses from Hokuyo scanners

A response is a block of lines terminated by an empty line: the echoed
command, a status line, then data lines. Status and data lines end with a
one-character checksum.
"""
import math
from typing import Dict, Sequence, Tuple

import numpy as np

from ..errors import DeviceError
from ..processing import LaserScannerConfiguration
from .constants import *


def _ascii(data: bytes) -> str:
    try:
        return data.decode('ascii')
    except UnicodeDecodeError as e:
        raise DeviceError(f"Non-ASCII bytes in response: {data!r}") from e


class ScipResponseParser:
    """Parser for SCIP 2.0 response blocks"""

    @staticmethod
    def checksum(data: bytes) -> int:
        """SCIP checksum character for a line payload"""
        return (sum(data) & CHECKSUM_MASK) + ENCODING_OFFSET

    @staticmethod
    def strip_checksum(line: bytes) -> bytes:
        """Verify the trailing checksum character and return the payload."""
        if len(line) < 2:
            raise DeviceError(f"Line too short to carry a checksum: {line!r}")
        payload, expected = line[:-1], line[-1]
        if ScipResponseParser.checksum(payload) != expected:
            raise DeviceError(f"Checksum mismatch on line {line!r}")
        return payload

    @staticmethod
    def decode(data: bytes) -> int:
        """Decode a run of 6-bit characters into an integer."""
        value = 0
        for char in data:
            value = (value << ENCODING_BITS) | (char - ENCODING_OFFSET)
        return value

    @staticmethod
    def decode_ranges(data: bytes, width: int = DISTANCE_ENCODING_WIDTH) -> np.ndarray:
        """Decode concatenated fixed-width distance values, in millimeters."""
        if len(data) % width:
            raise DeviceError(f"Distance data length {len(data)} is not a multiple of {width}")
        chars = np.frombuffer(data, dtype=np.uint8).astype(np.int64) - ENCODING_OFFSET
        chars = chars.reshape(-1, width)
        weights = 1 << (ENCODING_BITS * np.arange(width - 1, -1, -1))
        return chars @ weights

    @staticmethod
    def parse_status(block: Sequence[bytes]) -> str:
        """Return the two-character status of a response block."""
        if len(block) < 2:
            raise DeviceError(f"Response has no status line: {list(block)!r}")
        status_line = block[1]
        # Single character status lines (SCIP 1.1 replies) carry no checksum
        if len(status_line) <= 2:
            return _ascii(status_line)
        return _ascii(ScipResponseParser.strip_checksum(status_line))

    @staticmethod
    def parse_parameters(block: Sequence[bytes]) -> Dict[str, str]:
        """Parse the KEY:VALUE;sum lines of a PP or VV response."""
        parameters = {}
        for line in block[2:]:
            body, sep, checksum_char = line.rpartition(b';')
            if not sep or len(checksum_char) != 1:
                raise DeviceError(f"Malformed parameter line: {line!r}")
            if ScipResponseParser.checksum(body) != checksum_char[0]:
                raise DeviceError(f"Checksum mismatch on line {line!r}")
            key, _, value = _ascii(body).partition(':')
            parameters[key] = value
        return parameters

    @staticmethod
    def parse_scan(block: Sequence[bytes]) -> Tuple[int, np.ndarray]:
        """Parse one MD scan block into (device ticks, ranges in mm)."""
        status = ScipResponseParser.parse_status(block)
        if status != STATUS_SCAN_DATA:
            raise DeviceError(f"Unexpected scan status {status!r}")
        if len(block) < 3:
            raise DeviceError("Scan block has no timestamp")
        timestamp = ScipResponseParser.strip_checksum(block[2])
        if len(timestamp) != TIMESTAMP_ENCODING_WIDTH:
            raise DeviceError(f"Malformed timestamp {timestamp!r}")
        data = b''.join(ScipResponseParser.strip_checksum(line) for line in block[3:])
        return ScipResponseParser.decode(timestamp), ScipResponseParser.decode_ranges(data)

    @staticmethod
    def configuration_from_parameters(parameters: Dict[str, str]) -> LaserScannerConfiguration:
        """Derive the scanner configuration from PP parameters."""
        missing = [key for key in REQUIRED_PARAMETERS if key not in parameters]
        if missing:
            raise DeviceError(f"Scanner parameters missing: {', '.join(missing)}")
        try:
            resolution = int(parameters[PARAM_ANGULAR_RESOLUTION])
            first_step = int(parameters[PARAM_FIRST_STEP])
            last_step = int(parameters[PARAM_LAST_STEP])
            front_step = int(parameters[PARAM_FRONT_STEP])
            rpm = int(parameters[PARAM_MOTOR_SPEED])
            min_range = int(parameters[PARAM_MIN_DISTANCE])
            max_range = int(parameters[PARAM_MAX_DISTANCE])
        except ValueError as e:
            raise DeviceError(f"Non-numeric scanner parameter: {e}") from e
        if resolution <= 0 or rpm <= 0:
            raise DeviceError(f"Invalid ARES={resolution} or SCAN={rpm}")

        angle_increment = 2.0 * math.pi / resolution
        scan_time = 60.0 / rpm
        return LaserScannerConfiguration(
            angle_increment=angle_increment,
            min_angle=(first_step - front_step) * angle_increment,
            max_angle=(last_step - front_step) * angle_increment,
            time_increment=scan_time / resolution,
            scan_time=scan_time,
            min_range_mm=min_range,
            max_range_mm=max_range,
            first_step=first_step,
            last_step=last_step,
            reading_count=last_step + 1,
            model=parameters.get(PARAM_MODEL, ''),
        )

    @staticmethod
    def multi_scan_command(start_step: int, end_step: int, cluster: int = 1,
                           interval: int = 0, count: int = SCAN_COUNT_INFINITE) -> bytes:
        """Build an MD command requesting steps start_step..end_step."""
        return CMD_MULTI_SCAN + f"{start_step:04d}{end_step:04d}{cluster:02d}{interval:1d}{count:02d}".encode('ascii')

