"""
Sensor Module - Laser scanner drivers (Hokuyo SCIP 2.0 over serial, simulator)
"""
from .sensor_driver import HokuyoSensor
from .simulated_sensor import SimulatedLaserScanner, URG_04LX_CONFIGURATION
from .response_parser import ScipResponseParser

__all__ = ['HokuyoSensor', 'SimulatedLaserScanner', 'URG_04LX_CONFIGURATION', 'ScipResponseParser']
