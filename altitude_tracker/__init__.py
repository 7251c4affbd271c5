"""
Altitude Tracking Core

Fuses position fixes and barometric readings into a best-estimate altitude,
records them through a start/pause/resume/stop session, derives elevation
statistics and exports the recorded session as CSV or JSON.

This package module re-exports the public API of the individual modules.
"""

# Import constants
from .constants import (
    MAX_HORIZONTAL_ACCURACY_M,
    DISTANCE_FILTER_OPTIONS_M,
    DEFAULT_DISTANCE_FILTER_M,
    CSV_HEADER,
)

# Import data models and errors
from .models import (
    RawFix,
    BarometricReading,
    FusedPoint,
    SessionState,
    SessionStats,
)
from .errors import (
    TrackerError,
    InvalidTransition,
    ExportFailure,
)

# Import filtering and fusion
from .filtering import accept
from .fusion import AltitudeFuser, fuse

# Import point log and statistics
from .point_log import PointLog
from .metrics import compute_stats

# Import export functions
from .export import (
    ExportFormat,
    ExportResult,
    render,
    write_export,
)
from .data_loading import (
    LoadedSession,
    load_export,
)

# Import session
from .sensors import SensorControl, RecordingSensorControl
from .session import TrackingSession
