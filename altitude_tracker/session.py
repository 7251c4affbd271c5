"""
Session State Machine for Altitude Tracking

This module owns one recording session: its lifecycle state, the fusion
state, the point log and the last sensor error. Position and barometric
samples arrive from independent threads; every read and write of session
state goes through a single lock, so statistics and exports always see a
complete prefix of the log.

Lifecycle:
    idle --start--> tracking --pause--> paused --resume--> tracking
    tracking/paused --stop--> idle
    idle --clear--> idle (log emptied)
"""

import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Union
from . import constants
from . import export
from . import filtering
from . import metrics
from . import utils
from .errors import InvalidTransition
from .fusion import AltitudeFuser
from .models import BarometricReading, FusedPoint, RawFix, SessionState, SessionStats
from .point_log import PointLog
from .sensors import RecordingSensorControl, SensorControl

logger = logging.getLogger(__name__)

Listener = Callable[["TrackingSession"], None]


class TrackingSession:
    """
    A recording session fed by two asynchronous sensor sources.

    Samples are filtered, fused and, only while the state is exactly
    TRACKING, appended to the point log. Samples arriving while idle or
    paused still update the current point shown to the user.

    Args:
        sensors: Sensor collaborator armed and disarmed on transitions.
            Defaults to a RecordingSensorControl.
        export_dir: Directory export() writes to by default.
        clock: Callable returning the current aware datetime.
    """

    def __init__(
        self,
        sensors: Optional[SensorControl] = None,
        export_dir: Union[str, Path] = constants.DEFAULT_EXPORT_DIR,
        clock: Callable[[], datetime] = utils.utc_now,
    ) -> None:
        self.sensors = sensors if sensors is not None else RecordingSensorControl()
        self.export_dir = Path(export_dir)
        self._clock = clock
        self._lock = threading.RLock()
        self._state = SessionState.IDLE
        self._log = PointLog()
        self._fuser = AltitudeFuser(barometer_available=self.sensors.barometer_available)
        self._current_point: Optional[FusedPoint] = None
        self._last_error: Optional[str] = None
        self._started_at: Optional[datetime] = None
        self._listeners: List[Listener] = []

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        with self._lock:
            return self._state

    @property
    def current_point(self) -> Optional[FusedPoint]:
        with self._lock:
            return self._current_point

    @property
    def last_error(self) -> Optional[str]:
        with self._lock:
            return self._last_error

    @property
    def session_started_at(self) -> Optional[datetime]:
        with self._lock:
            return self._started_at

    @property
    def latest_barometric_altitude(self) -> Optional[float]:
        with self._lock:
            return self._fuser.latest_barometric_altitude

    def points(self) -> Tuple[FusedPoint, ...]:
        """Immutable snapshot of the point log."""
        with self._lock:
            return self._log.snapshot()

    def stats(self) -> SessionStats:
        """Statistics over a consistent snapshot of the point log."""
        return metrics.compute_stats(self.points())

    def to_dict(self) -> Dict:
        """
        Consistent view of the session for the display collaborator.

        Returns:
            Dictionary with state, start time, current point, last error and
            statistics, all taken under one lock acquisition.
        """
        with self._lock:
            snapshot = self._log.snapshot()
            current = self._current_point
            started = self._started_at
            state = self._state
            error = self._last_error
        return {
            "state": state.value,
            "sessionStartedAt": utils.format_iso_utc(started) if started else None,
            "currentPoint": current.to_dict() if current else None,
            "lastError": error,
            "stats": metrics.compute_stats(snapshot).to_dict(),
        }

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _require(self, action: str, *allowed: SessionState) -> None:
        if self._state not in allowed:
            logger.warning("Rejected %s while %s", action, self._state.value)
            raise InvalidTransition(action, self._state)

    def _arm(self, reference_altitude: Optional[float]) -> None:
        self.sensors.arm_position()
        if self.sensors.barometer_available:
            self.sensors.arm_barometer()
        self._fuser.barometer_available = self.sensors.barometer_available
        self._fuser.arm(reference_altitude)

    def _disarm(self) -> None:
        self.sensors.disarm_position()
        self.sensors.disarm_barometer()
        self._fuser.disarm()

    def _transition(self, new_state: SessionState) -> None:
        logger.info("Session %s -> %s", self._state.value, new_state.value)
        self._state = new_state

    def start(self) -> None:
        """
        Begin a new recording.

        Clears the previous log and fusion state, records the start time and
        arms both sensor sources.

        Raises:
            InvalidTransition: If the session is not idle.
        """
        with self._lock:
            self._require("start", SessionState.IDLE)
            self._log.clear()
            self._fuser.reset()
            self._started_at = self._clock()
            self._arm(None)
            self._transition(SessionState.TRACKING)
        self._notify()

    def pause(self) -> None:
        """
        Stop soliciting samples without discarding the log.

        Raises:
            InvalidTransition: If the session is not tracking.
        """
        with self._lock:
            self._require("pause", SessionState.TRACKING)
            self._disarm()
            self._transition(SessionState.PAUSED)
        self._notify()

    def resume(self) -> None:
        """
        Re-arm the sensors after a pause.

        The barometer restarts from a relative altitude of 0, so its
        reference is re-based to the best altitude of the last logged point.

        Raises:
            InvalidTransition: If the session is not paused.
        """
        with self._lock:
            self._require("resume", SessionState.PAUSED)
            last = self._log.last()
            reference = last.best_altitude if last is not None else self._fuser.baseline_gps_altitude
            self._arm(reference)
            self._transition(SessionState.TRACKING)
        self._notify()

    def stop(self) -> None:
        """
        End the recording, keeping the log for export.

        Raises:
            InvalidTransition: If the session is idle.
        """
        with self._lock:
            self._require("stop", SessionState.TRACKING, SessionState.PAUSED)
            self._disarm()
            self._transition(SessionState.IDLE)
        self._notify()

    def clear(self) -> None:
        """
        Discard the recorded log and all session-scoped fusion state.

        Raises:
            InvalidTransition: If a recording is in progress.
        """
        with self._lock:
            self._require("clear", SessionState.IDLE)
            self._log.clear()
            self._fuser.reset()
            self._current_point = None
            self._started_at = None
            self._last_error = None
            logger.info("Session cleared")
        self._notify()

    # ------------------------------------------------------------------
    # Sensor entry points
    # ------------------------------------------------------------------

    def on_position_update(self, fix: RawFix) -> Optional[FusedPoint]:
        """
        Handle a raw fix from the position source.

        Args:
            fix: Raw position fix.

        Returns:
            The fused point, or None if the fix was filtered out. The point
            is appended to the log only if the session is tracking.
        """
        with self._lock:
            if not filtering.accept(fix):
                return None
            point = self._fuser.fuse(fix)
            self._current_point = point
            if self._state is SessionState.TRACKING:
                self._log.append(point)
            else:
                logger.debug("Point %s not logged while %s", point.id, self._state.value)
        self._notify()
        return point

    def on_barometric_update(self, reading: BarometricReading) -> bool:
        """
        Handle a relative altitude reading from the altimeter.

        Returns:
            True if the reading was stored as the latest barometric value.
        """
        with self._lock:
            return self._fuser.update_barometer(reading)

    def on_position_failure(self, message: str) -> None:
        """
        Record a failure reported by the position source.

        The state and the log are left untouched; later fixes keep being
        logged. The message is shown to the user until dismissed.
        """
        with self._lock:
            self._last_error = message
        logger.warning("Position source failure: %s", message)
        self._notify()

    def dismiss_error(self) -> None:
        with self._lock:
            self._last_error = None
        self._notify()

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def render_export(
        self,
        fmt: Union[str, export.ExportFormat],
        session_name: Optional[str] = None,
        exported_at: Optional[datetime] = None,
    ) -> bytes:
        return export.render(self.points(), fmt, session_name, exported_at)

    def export(
        self,
        fmt: Union[str, export.ExportFormat],
        session_name: Optional[str] = None,
        directory: Union[str, Path, None] = None,
        exported_at: Optional[datetime] = None,
    ) -> export.ExportResult:
        """
        Write the current log to an export file.

        The log is snapshotted under the lock; the file is written outside
        it, so sensors keep being served during the write.

        Args:
            fmt: "csv" or "json".
            session_name: Session name; defaults to altitude_<timestamp>.
            directory: Destination directory; defaults to export_dir.
            exported_at: Export timestamp; defaults to now.

        Returns:
            ExportResult for the finalized file.

        Raises:
            ValueError: If fmt is not supported.
            ExportFailure: If writing failed. The log is unchanged and the
                export may be retried.
        """
        snapshot = self.points()
        return export.write_export(
            snapshot,
            fmt,
            directory if directory is not None else self.export_dir,
            session_name=session_name,
            exported_at=exported_at,
        )

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> None:
        """Call listener(session) after every transition, point or error change."""
        with self._lock:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _notify(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(self)
            except Exception:
                logger.exception("Session listener %r failed", listener)
