import dataclasses

import pytest

from altitude_tracker.fusion import AltitudeFuser, fuse
from altitude_tracker.models import BarometricReading


def test_fuse_without_barometer_uses_gps(make_fix):
    point = fuse(make_fix(altitude=123.4))
    assert point.altitude_barometric is None
    assert point.best_altitude == 123.4


def test_fuse_prefers_barometric(make_fix):
    point = fuse(make_fix(altitude=123.4), latest_barometric=120.0, baseline_gps_altitude=118.0)
    assert point.altitude_gps == 123.4
    assert point.best_altitude == 120.0


def test_fused_points_get_unique_ids(make_fix):
    fix = make_fix()
    assert fuse(fix).id != fuse(fix).id


def test_first_fix_sets_baseline_and_reference(make_fix):
    fuser = AltitudeFuser()
    fuser.arm()
    fuser.update_barometer(BarometricReading(1.5))
    point = fuser.fuse(make_fix(altitude=200.0))
    assert fuser.baseline_gps_altitude == 200.0
    assert point.altitude_barometric == pytest.approx(201.5)


def test_no_reading_since_arm_falls_back_to_gps(make_fix):
    fuser = AltitudeFuser()
    fuser.arm()
    fuser.update_barometer(BarometricReading(2.0))
    fuser.arm(reference_altitude=150.0)
    point = fuser.fuse(make_fix(altitude=140.0))
    assert point.altitude_barometric is None
    assert point.best_altitude == 140.0


def test_readings_are_ignored_when_disarmed_invalid_or_unavailable(make_fix):
    fuser = AltitudeFuser()
    assert fuser.update_barometer(BarometricReading(1.0)) is False
    fuser.arm()
    assert fuser.update_barometer(BarometricReading(1.0, valid=False)) is False

    missing = AltitudeFuser(barometer_available=False)
    missing.arm()
    assert missing.update_barometer(BarometricReading(1.0)) is False
    assert missing.fuse(make_fix(altitude=90.0)).altitude_barometric is None


def test_latest_barometric_is_rebased_by_first_fix(make_fix):
    fuser = AltitudeFuser()
    fuser.arm()
    fuser.update_barometer(BarometricReading(3.0))
    assert fuser.latest_barometric_altitude == 3.0

    point = fuser.fuse(make_fix(altitude=500.0))
    assert point.altitude_barometric == 503.0
    assert fuser.latest_barometric_altitude == 503.0


def test_reset_forgets_session_state(make_fix):
    fuser = AltitudeFuser()
    fuser.arm()
    fuser.update_barometer(BarometricReading(3.0))
    fuser.fuse(make_fix())
    fuser.reset()
    assert fuser.baseline_gps_altitude is None
    assert fuser.latest_barometric_altitude is None
    assert not fuser.armed


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_reading_is_ignored(make_fix, value):
    fuser = AltitudeFuser()
    fuser.arm()
    fuser.update_barometer(BarometricReading(1.0))
    assert fuser.update_barometer(BarometricReading(value)) is False
    assert fuser.fuse(make_fix(altitude=100.0)).altitude_barometric == 101.0


def test_naive_fix_timestamp_becomes_utc(make_fix):
    fix = make_fix()
    naive = dataclasses.replace(fix, timestamp=fix.timestamp.replace(tzinfo=None))
    point = fuse(naive)
    assert point.timestamp == fix.timestamp
    assert point.timestamp.tzinfo is not None
