"""
Processing Module - Scan data types and the raw-to-record conversion
"""
from .scan_data import LaserScan, LaserScannerConfiguration, ScanRecord
from .scan_converter import to_scan_record, validate_configuration

__all__ = ['LaserScan', 'LaserScannerConfiguration', 'ScanRecord', 'to_scan_record', 'validate_configuration']
