"""
Tests for raw scan to scan record conversion.
"""

import numpy as np
import pytest

from laser_publisher.errors import ConfigurationError
from laser_publisher.processing import LaserScan, to_scan_record, validate_configuration
from laser_publisher.processing.scan_data import LaserScannerConfiguration


class TestToScanRecord:

    def test_blind_zones_are_trimmed(self, small_configuration):
        raw = [3000 + 7 * i for i in range(20)]
        record = to_scan_record("laser", LaserScan(0, raw), small_configuration)

        assert len(record.ranges) == 5
        assert record.ranges.tolist() == [raw[i] / 1000.0 for i in range(10, 15)]

    def test_longer_raw_scan_only_uses_window(self, small_configuration):
        raw = list(range(100))
        record = to_scan_record("laser", LaserScan(0, raw), small_configuration)
        assert record.ranges.tolist() == [0.010, 0.011, 0.012, 0.013, 0.014]

    @pytest.mark.parametrize("timestamp_ms,offset_ns", [
        (0, 0),
        (2000, 50_000_000),
        (1_700_000_000_123, -1),
        (5, -5_000_000),
    ])
    def test_stamp_is_timestamp_plus_offset(self, small_configuration, timestamp_ms, offset_ns):
        record = to_scan_record("laser", LaserScan(timestamp_ms, [1] * 20),
                                small_configuration, offset_ns)
        assert record.stamp_ns == timestamp_ms * 1_000_000 + offset_ns

    def test_urg_scenario_without_correction(self, urg_configuration):
        scan = LaserScan(timestamp_ms=1_234_567, ranges=[1500] * 1024)
        record = to_scan_record("base_laser", scan, urg_configuration)

        assert record.frame_id == "base_laser"
        assert record.range_min == 0.02
        assert record.range_max == 4.0
        assert len(record.ranges) == 681
        assert record.stamp_ns == 1_234_567 * 1_000_000
        assert record.angle_min == -2.0
        assert record.angle_max == 2.0
        assert record.angle_increment == 0.01
        assert record.time_increment == urg_configuration.time_increment
        assert record.scan_time == urg_configuration.scan_time

    def test_scan_shorter_than_last_step_is_fatal(self, small_configuration):
        with pytest.raises(ConfigurationError):
            to_scan_record("laser", LaserScan(0, [1] * 14), small_configuration)

    def test_record_does_not_share_input_buffer(self, small_configuration):
        raw = np.arange(20, dtype=np.int64) * 100
        record = to_scan_record("laser", LaserScan(0, raw), small_configuration)
        raw[:] = 0
        assert record.ranges.tolist() == [1.0, 1.1, 1.2, 1.3, 1.4]
        assert not record.ranges.flags.writeable

    def test_to_dict_uses_laser_scan_layout(self, small_configuration):
        record = to_scan_record("laser", LaserScan(1_500, [2000] * 20),
                                small_configuration, 250_000_001)
        message = record.to_dict()

        assert message['header'] == {
            'frame_id': 'laser',
            'stamp': {'secs': 1, 'nsecs': 750_000_001},
        }
        assert message['ranges'] == [2.0] * 5
        assert message['range_min'] == 0.1
        assert message['range_max'] == 30.0
        assert record.stamp == pytest.approx(1.750000001)


class TestValidateConfiguration:

    def _configuration(self, first, last, count=None):
        return LaserScannerConfiguration(
            angle_increment=0.01, min_angle=-1.0, max_angle=1.0, time_increment=0.0,
            scan_time=0.1, min_range_mm=20, max_range_mm=4000,
            first_step=first, last_step=last, reading_count=count,
        )

    def test_accepts_valid_window(self):
        validate_configuration(self._configuration(44, 725, 726))
        validate_configuration(self._configuration(0, 10))

    @pytest.mark.parametrize("first,last,count", [
        (-1, 10, None),
        (10, 10, None),
        (20, 10, None),
        (0, 769, 768),
    ])
    def test_rejects_invalid_window(self, first, last, count):
        with pytest.raises(ConfigurationError):
            validate_configuration(self._configuration(first, last, count))
