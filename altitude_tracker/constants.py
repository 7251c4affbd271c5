"""
Constants for Altitude Tracking

This module defines the fixed policy values and file format literals used
throughout the altitude tracking core.
"""

from pathlib import Path
import tempfile

# Fixes at or above this horizontal accuracy (meters) are discarded
MAX_HORIZONTAL_ACCURACY_M = 50.0

# Minimum movement (meters) before the position source reports a new fix
DISTANCE_FILTER_OPTIONS_M = (1.0, 3.0, 5.0, 10.0, 20.0, 50.0)
DEFAULT_DISTANCE_FILTER_M = 5.0

MPS_TO_KMH = 3.6

ISO_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
SESSION_NAME_FORMAT = "altitude_%Y-%m-%d_%H-%M-%S"

CSV_TITLE = "AltitudeTracker Session"
CSV_HEADER = (
    "timestamp,latitude,longitude,altitude_gps_m,altitude_barometric_m,"
    "best_altitude_m,horizontal_accuracy_m,vertical_accuracy_m,speed_kmh"
)
CSV_COLUMNS = tuple(CSV_HEADER.split(","))

DEFAULT_EXPORT_DIR = Path(tempfile.gettempdir())
