"""
Command strings and protocol constants for Hokuyo scanners speaking SCIP 2.0.
All commands are ASCII and terminated by a line feed.
"""

LF = b'\n'

# --- Mode & control commands ---
CMD_SCIP2 = b'SCIP2.0'
CMD_PARAMETERS = b'PP'
CMD_LASER_ON = b'BM'
CMD_QUIT = b'QT'

# --- Acquisition ---
# MD<start:4><end:4><cluster:2><interval:1><count:2>, 3-character distances
CMD_MULTI_SCAN = b'MD'
SCAN_COUNT_INFINITE = 0
DISTANCE_ENCODING_WIDTH = 3
TIMESTAMP_ENCODING_WIDTH = 4

# --- Status codes ---
STATUS_OK = '00'
STATUS_LASER_ALREADY_ON = '02'
STATUS_SCAN_DATA = '99'

# --- Character encoding ---
ENCODING_OFFSET = 0x30
ENCODING_BITS = 6
CHECKSUM_MASK = 0x3F

# --- PP parameter keys ---
PARAM_MODEL = 'MODL'
PARAM_MIN_DISTANCE = 'DMIN'
PARAM_MAX_DISTANCE = 'DMAX'
PARAM_ANGULAR_RESOLUTION = 'ARES'
PARAM_FIRST_STEP = 'AMIN'
PARAM_LAST_STEP = 'AMAX'
PARAM_FRONT_STEP = 'AFRT'
PARAM_MOTOR_SPEED = 'SCAN'

REQUIRED_PARAMETERS = (
    PARAM_MIN_DISTANCE, PARAM_MAX_DISTANCE, PARAM_ANGULAR_RESOLUTION,
    PARAM_FIRST_STEP, PARAM_LAST_STEP, PARAM_FRONT_STEP, PARAM_MOTOR_SPEED,
)
