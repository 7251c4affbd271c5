"""Common test fixtures for altitude tracker tests."""

from datetime import datetime, timedelta, timezone

import pytest

from altitude_tracker.models import FusedPoint, RawFix
from altitude_tracker.sensors import RecordingSensorControl
from altitude_tracker.session import TrackingSession

T0 = datetime(2024, 5, 1, 8, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_fix():
    """Factory for raw fixes; `seconds` is the offset from T0."""

    def _make(altitude=100.0, seconds=0, horizontal_accuracy=5.0, latitude=46.5, longitude=7.25,
              vertical_accuracy=3.0, speed=1.0):
        return RawFix(
            timestamp=T0 + timedelta(seconds=seconds),
            latitude=latitude,
            longitude=longitude,
            altitude=altitude,
            horizontal_accuracy=horizontal_accuracy,
            vertical_accuracy=vertical_accuracy,
            speed=speed,
        )

    return _make


@pytest.fixture
def make_point():
    """Factory for fused points built directly, bypassing the session."""

    def _make(altitude_gps=100.0, seconds=0, altitude_barometric=None, **kwargs):
        values = dict(
            timestamp=T0 + timedelta(seconds=seconds),
            latitude=46.5,
            longitude=7.25,
            altitude_gps=altitude_gps,
            altitude_barometric=altitude_barometric,
            horizontal_accuracy=5.0,
            vertical_accuracy=3.0,
            speed=1.0,
        )
        values.update(kwargs)
        return FusedPoint(**values)

    return _make


@pytest.fixture
def sensors():
    return RecordingSensorControl()


@pytest.fixture
def session(sensors, tmp_path):
    return TrackingSession(sensors=sensors, export_dir=tmp_path, clock=lambda: T0)


@pytest.fixture
def gps_only_session(tmp_path):
    return TrackingSession(
        sensors=RecordingSensorControl(barometer_available=False),
        export_dir=tmp_path,
        clock=lambda: T0,
    )
