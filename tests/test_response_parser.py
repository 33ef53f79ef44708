"""
Tests for SCIP 2.0 response decoding.
"""

import math

import pytest

from laser_publisher.errors import DeviceError
from laser_publisher.sensor import ScipResponseParser
from conftest import URG_PARAMETERS, parameter_line, scan_lines, scip_encode, with_checksum


class TestEncoding:

    def test_status_checksums(self):
        assert ScipResponseParser.checksum(b'00') == ord('P')
        assert ScipResponseParser.checksum(b'99') == ord('b')

    def test_parameter_line_checksum(self):
        assert ScipResponseParser.parse_parameters([b'PP', b'00P', b'DMIN:20;4']) == {'DMIN': '20'}

    def test_decode_values(self):
        assert ScipResponseParser.decode(b'0') == 0
        assert ScipResponseParser.decode(b'1Dh') == 5432
        assert ScipResponseParser.decode(scip_encode(16_000_000, 4)) == 16_000_000

    def test_decode_ranges(self):
        data = b''.join(scip_encode(v, 3) for v in (0, 20, 4095, 5600))
        assert ScipResponseParser.decode_ranges(data).tolist() == [0, 20, 4095, 5600]

    def test_decode_ranges_rejects_partial_value(self):
        with pytest.raises(DeviceError):
            ScipResponseParser.decode_ranges(b'0000')

    def test_checksum_mismatch(self):
        with pytest.raises(DeviceError):
            ScipResponseParser.strip_checksum(b'00Q')

    def test_multi_scan_command(self):
        assert ScipResponseParser.multi_scan_command(0, 725) == b'MD0000072501000'


class TestResponses:

    def test_parse_status(self):
        assert ScipResponseParser.parse_status([b'BM', b'02R']) == '02'
        assert ScipResponseParser.parse_status([b'SCIP2.0', b'0']) == '0'

    def test_missing_status(self):
        with pytest.raises(DeviceError):
            ScipResponseParser.parse_status([b'PP'])

    def test_parse_scan(self):
        ranges = list(range(100, 300))
        ticks, decoded = ScipResponseParser.parse_scan(scan_lines(b'MD0000019901000', 777, ranges))
        assert ticks == 777
        assert decoded.tolist() == ranges

    def test_parse_scan_rejects_corrupted_data_line(self):
        lines = scan_lines(b'MD0000019901000', 1, [1000] * 50)
        lines[3] = lines[3][:-1] + b'!'
        with pytest.raises(DeviceError):
            ScipResponseParser.parse_scan(lines)

    def test_parse_scan_rejects_other_status(self):
        with pytest.raises(DeviceError):
            ScipResponseParser.parse_scan([b'MD0000019901000', with_checksum(b'00')])

    def test_non_ascii_status_raises_device_error(self):
        with pytest.raises(DeviceError):
            ScipResponseParser.parse_scan([b'MD0000072501000', with_checksum(b'\xff\xfe'), b'0000'])

    def test_non_ascii_parameter_raises_device_error(self):
        body = b'MODL:\xe9'
        line = body + b';' + bytes([ScipResponseParser.checksum(body)])
        with pytest.raises(DeviceError):
            ScipResponseParser.parse_parameters([b'PP', with_checksum(b'00'), line])

    def test_configuration_from_urg_parameters(self):
        block = [b'PP', with_checksum(b'00')] + [parameter_line(k, v) for k, v in URG_PARAMETERS.items()]
        parameters = ScipResponseParser.parse_parameters(block)
        configuration = ScipResponseParser.configuration_from_parameters(parameters)

        increment = 2 * math.pi / 1024
        assert configuration.model == 'URG-04LX(Hokuyo Automatic Co.,Ltd.)'
        assert configuration.angle_increment == pytest.approx(increment)
        assert configuration.min_angle == pytest.approx((44 - 384) * increment)
        assert configuration.max_angle == pytest.approx((725 - 384) * increment)
        assert configuration.scan_time == pytest.approx(0.1)
        assert configuration.time_increment == pytest.approx(0.1 / 1024)
        assert configuration.min_range_mm == 20
        assert configuration.max_range_mm == 5600
        assert (configuration.first_step, configuration.last_step) == (44, 725)
        assert configuration.reading_count == 726

    def test_configuration_requires_all_parameters(self):
        parameters = dict(URG_PARAMETERS)
        del parameters['ARES']
        with pytest.raises(DeviceError, match='ARES'):
            ScipResponseParser.configuration_from_parameters(parameters)
