"""
Altitude Fusion for Altitude Tracking

The barometer reports altitude relative to the moment it was armed, not an
absolute altitude. This module turns those relative readings into absolute
barometric altitudes by anchoring them to a GPS-derived reference, and
combines them with each accepted fix into a FusedPoint.

Re-basing: the reference is re-established every time the barometer is
armed. At session start it is the GPS altitude of the first accepted point;
at resume it is the best altitude of the last logged point, so the
barometric channel continues without a jump after a pause.
"""

import logging
import math
from typing import Optional
from . import utils
from .models import BarometricReading, FusedPoint, RawFix

logger = logging.getLogger(__name__)


def fuse(
    fix: RawFix,
    latest_barometric: Optional[float] = None,
    baseline_gps_altitude: Optional[float] = None,
) -> FusedPoint:
    """
    Build a FusedPoint from a raw fix and the latest barometric altitude.
    
    Args:
        fix: Accepted raw position fix.
        latest_barometric: Latest absolute barometric altitude in meters, or
            None if the altimeter is unavailable or has not reported since
            it was armed.
        baseline_gps_altitude: Session baseline. Only used to log the fused
            offset; the barometric value is already anchored to it.
        
    Returns:
        New FusedPoint. best_altitude is the barometric altitude when given,
        otherwise the GPS altitude.
    """
    point = FusedPoint(
        timestamp=utils.ensure_utc(fix.timestamp),
        latitude=fix.latitude,
        longitude=fix.longitude,
        altitude_gps=fix.altitude,
        altitude_barometric=latest_barometric,
        horizontal_accuracy=fix.horizontal_accuracy,
        vertical_accuracy=fix.vertical_accuracy,
        speed=fix.speed,
    )
    if latest_barometric is not None and baseline_gps_altitude is not None:
        logger.debug(
            "Fused point %s: gps=%.2f baro=%.2f (baseline %.2f)",
            point.id, fix.altitude, latest_barometric, baseline_gps_altitude,
        )
    return point


class AltitudeFuser:
    """
    Session-scoped fusion state.
    
    Holds the baseline GPS altitude, the current re-base reference and the
    latest relative barometric reading. Not thread-safe on its own; the
    owning TrackingSession serializes access.
    
    Attributes:
        barometer_available: False if the hardware has no altimeter. All
            points are then GPS-only and no error is raised.
        baseline_gps_altitude: GPS altitude of the first accepted point of
            the session, or None before that.
    """

    def __init__(self, barometer_available: bool = True) -> None:
        self.barometer_available = barometer_available
        self.baseline_gps_altitude: Optional[float] = None
        self._reference: Optional[float] = None
        self._relative: Optional[float] = None
        self._armed = False

    @property
    def armed(self) -> bool:
        return self._armed

    @property
    def latest_barometric_altitude(self) -> Optional[float]:
        """
        Absolute barometric altitude, or None if disarmed or there is no
        reading since arming.
        
        Until the first fix of a session is fused the reference is unknown and
        0 is used, so a reading stored before that fix is reported as the bare
        relative delta. Fusing the first fix sets the reference to its GPS
        altitude, and the same stored reading is then reported as
        baseline + delta. Points only ever see the second form.
        """
        if not self.barometer_available or not self._armed or self._relative is None:
            return None
        reference = self._reference if self._reference is not None else 0.0
        return reference + self._relative

    def reset(self) -> None:
        """Forget the baseline, reference and latest reading."""
        self.baseline_gps_altitude = None
        self._reference = None
        self._relative = None
        self._armed = False

    def arm(self, reference_altitude: Optional[float] = None) -> None:
        """
        Arm the barometric channel and re-base it.
        
        Args:
            reference_altitude: Altitude the next relative readings are
                measured from. None at session start, in which case the
                first accepted fix supplies it.
        """
        self._relative = None
        self._reference = reference_altitude
        self._armed = True
        if not self.barometer_available:
            logger.info("Barometer unavailable; using GPS altitude only")

    def disarm(self) -> None:
        self._armed = False

    def update_barometer(self, reading: BarometricReading) -> bool:
        """
        Record a barometric reading.
        
        Args:
            reading: Relative altitude since the last arm.
            
        Returns:
            True if the reading was stored, False if it was ignored
            (invalid or non-finite, altimeter unavailable, or not armed).
        """
        if (
            not reading.valid
            or not math.isfinite(reading.relative_altitude)
            or not self.barometer_available
            or not self._armed
        ):
            logger.debug("Ignored barometric reading %.2f", reading.relative_altitude)
            return False
        self._relative = reading.relative_altitude
        return True

    def fuse(self, fix: RawFix) -> FusedPoint:
        """
        Fuse an accepted fix with the latest barometric altitude.
        
        The first fix of a session establishes the baseline GPS altitude and,
        if no reference was given at arm time, the barometric reference.
        """
        if self.baseline_gps_altitude is None:
            self.baseline_gps_altitude = fix.altitude
            logger.info("Baseline GPS altitude set to %.2f m", fix.altitude)
        if self._reference is None:
            self._reference = self.baseline_gps_altitude
        return fuse(fix, self.latest_barometric_altitude, self.baseline_gps_altitude)
