"""
FastAPI Web Application for Altitude Tracking

This module exposes the altitude tracking session over HTTP: sensor shims
push position fixes and barometric readings, and the display calls the
session controls, reads the live state and statistics, and downloads
exports.
"""

import logging
from datetime import datetime
from typing import Optional
from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import FileResponse
from pydantic import BaseModel, ConfigDict, Field
from altitude_tracker import telemetry, time_series, utils
from altitude_tracker.config import settings
from altitude_tracker.errors import ExportFailure, InvalidTransition
from altitude_tracker.models import BarometricReading, RawFix
from altitude_tracker.sensors import RecordingSensorControl
from altitude_tracker.session import TrackingSession

logger = logging.getLogger(__name__)


# ============================================================================
# APPLICATION SETUP
# ============================================================================

def configure_logging(level: str = settings.log_level) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


configure_logging()

app = FastAPI(title="Altitude Tracker")

# One session for the lifetime of the process
sensors = RecordingSensorControl(
    barometer_available=settings.barometer_available,
    distance_filter_m=settings.distance_filter_m,
)
tracking_session = TrackingSession(sensors=sensors, export_dir=settings.export_dir)


def get_session() -> TrackingSession:
    return tracking_session


# ============================================================================
# REQUEST MODELS
# ============================================================================

class PositionUpdate(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    timestamp: datetime
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    altitude: float
    horizontal_accuracy: float
    vertical_accuracy: float = -1.0
    speed: float = -1.0


class BarometerUpdate(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    relative_altitude: float
    valid: bool = True


class SensorFailure(BaseModel):
    message: str


class SettingsUpdate(BaseModel):
    distance_filter_m: float


# ============================================================================
# API ROUTES - SESSION CONTROL
# ============================================================================

def _run_transition(session: TrackingSession, action: str) -> dict:
    try:
        getattr(session, action)()
    except InvalidTransition as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return session.to_dict()


@app.post("/api/session/start")
def start_session(session: TrackingSession = Depends(get_session)):
    """
    Start a new recording. The previous log is discarded.

    Raises:
        HTTPException: If the session is not idle (status 409).
    """
    return _run_transition(session, "start")


@app.post("/api/session/pause")
def pause_session(session: TrackingSession = Depends(get_session)):
    return _run_transition(session, "pause")


@app.post("/api/session/resume")
def resume_session(session: TrackingSession = Depends(get_session)):
    return _run_transition(session, "resume")


@app.post("/api/session/stop")
def stop_session(session: TrackingSession = Depends(get_session)):
    return _run_transition(session, "stop")


@app.post("/api/session/clear")
def clear_session(session: TrackingSession = Depends(get_session)):
    """
    Discard the recorded log. Only allowed while idle.

    Raises:
        HTTPException: If a recording is in progress (status 409).
    """
    return _run_transition(session, "clear")


# ============================================================================
# API ROUTES - DATA RETRIEVAL
# ============================================================================

@app.get("/api/session")
def get_session_state(session: TrackingSession = Depends(get_session)):
    """
    Get the session state, current point, last error and statistics.

    Returns:
        Dictionary from TrackingSession.to_dict().
    """
    return session.to_dict()


@app.get("/api/points")
def get_points(session: TrackingSession = Depends(get_session)):
    return [p.to_dict() for p in session.points()]


@app.get("/api/current")
def get_current_point(session: TrackingSession = Depends(get_session)):
    point = session.current_point
    return point.to_dict() if point else None


@app.get("/api/stats")
def get_stats(session: TrackingSession = Depends(get_session)):
    return session.stats().to_dict()


@app.get("/api/summary")
def get_summary(session: TrackingSession = Depends(get_session)):
    """
    Get the preformatted live statistics for the HUD.

    Returns:
        Dictionary of display strings (altitude, source, gain, loss, range,
        points, duration, speed, accuracy).
    """
    return telemetry.build_display_summary(session.current_point, session.stats())


@app.get("/api/track")
def get_track(session: TrackingSession = Depends(get_session)):
    return telemetry.points_to_geojson(session.points())


@app.get("/api/profile")
def get_profile(session: TrackingSession = Depends(get_session)):
    return time_series.build_profile_records(session.points())


@app.delete("/api/error")
def dismiss_error(session: TrackingSession = Depends(get_session)):
    session.dismiss_error()
    return session.to_dict()


# ============================================================================
# API ROUTES - SENSOR INPUT
# ============================================================================

@app.get("/api/sensors")
def get_sensors(session: TrackingSession = Depends(get_session)):
    """
    Get which sensor sources are armed, for shims that poll.

    Returns:
        Dictionary with positionArmed, barometerArmed, barometerAvailable
        and distanceFilterM.
    """
    return session.sensors.to_dict()


@app.post("/api/sensors/position")
def post_position(update: PositionUpdate, session: TrackingSession = Depends(get_session)):
    """
    Push a raw position fix.

    Returns:
        Dictionary with "accepted" (False if filtered out for accuracy), the
        fused "point" and the session "state".
    """
    fix = RawFix(
        timestamp=utils.ensure_utc(update.timestamp),
        latitude=update.latitude,
        longitude=update.longitude,
        altitude=update.altitude,
        horizontal_accuracy=update.horizontal_accuracy,
        vertical_accuracy=update.vertical_accuracy,
        speed=update.speed,
    )
    point = session.on_position_update(fix)
    return {
        "accepted": point is not None,
        "point": point.to_dict() if point else None,
        "state": session.state.value,
    }


@app.post("/api/sensors/barometer")
def post_barometer(update: BarometerUpdate, session: TrackingSession = Depends(get_session)):
    stored = session.on_barometric_update(
        BarometricReading(relative_altitude=update.relative_altitude, valid=update.valid)
    )
    return {"stored": stored, "latestBarometricAltitude": session.latest_barometric_altitude}


@app.post("/api/sensors/failure")
def post_failure(failure: SensorFailure, session: TrackingSession = Depends(get_session)):
    session.on_position_failure(failure.message)
    return session.to_dict()


# ============================================================================
# API ROUTES - SETTINGS
# ============================================================================

@app.get("/api/settings")
def get_settings(session: TrackingSession = Depends(get_session)):
    return {"distanceFilterM": session.sensors.distance_filter_m}


@app.put("/api/settings")
def put_settings(update: SettingsUpdate, session: TrackingSession = Depends(get_session)):
    """
    Change the distance filter used by the position source.

    Raises:
        HTTPException: If the value is not an allowed choice (status 422).
    """
    try:
        session.sensors.set_distance_filter(update.distance_filter_m)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return {"distanceFilterM": session.sensors.distance_filter_m}


# ============================================================================
# API ROUTES - EXPORT
# ============================================================================

@app.get("/api/export")
def export_session(
    fmt: str = Query("csv", alias="format", description="Export format: csv or json"),
    name: Optional[str] = Query(None, description="Session name"),
    session: TrackingSession = Depends(get_session),
):
    """
    Export the recorded log and download the file.

    The file is written atomically to the configured export directory and
    returned as an attachment.

    Raises:
        HTTPException: If the format is unknown (status 400) or the file
        could not be written (status 500).
    """
    try:
        result = session.export(fmt, session_name=name)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ExportFailure as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return FileResponse(
        result.path,
        media_type=result.format.mime_type,
        filename=result.path.name,
    )


# ============================================================================
# RUN INSTRUCTIONS
# ============================================================================
# Run with: uvicorn app:app --reload
