"""
Sensor Control for Altitude Tracking

The platform shims that talk to the position receiver and the altimeter are
outside the core. The session tells them when to solicit samples through the
SensorControl interface; the shims push samples back through the session's
on_position_update / on_barometric_update entry points.
"""

import logging
from typing import Dict, Protocol
from . import constants

logger = logging.getLogger(__name__)


class SensorControl(Protocol):
    """What the session needs from the sensor collaborators."""

    barometer_available: bool
    distance_filter_m: float

    def arm_position(self) -> None: ...

    def disarm_position(self) -> None: ...

    def arm_barometer(self) -> None: ...

    def disarm_barometer(self) -> None: ...


def validate_distance_filter(value: float) -> float:
    """
    Check a distance filter value against the allowed choices.

    Args:
        value: Minimum movement in meters.

    Returns:
        The value as a float.

    Raises:
        ValueError: If value is not one of DISTANCE_FILTER_OPTIONS_M.
    """
    value = float(value)
    if value not in constants.DISTANCE_FILTER_OPTIONS_M:
        options = ", ".join(f"{v:g}" for v in constants.DISTANCE_FILTER_OPTIONS_M)
        raise ValueError(f"Distance filter must be one of {options} meters, got {value:g}")
    return value


class RecordingSensorControl:
    """
    SensorControl that only records which sources are armed.

    Used when samples are pushed in from outside (HTTP, replay, tests): the
    shim polls the armed flags and the distance filter to decide what to
    request from the hardware.
    """

    def __init__(
        self,
        barometer_available: bool = True,
        distance_filter_m: float = constants.DEFAULT_DISTANCE_FILTER_M,
    ) -> None:
        self.barometer_available = barometer_available
        self.distance_filter_m = validate_distance_filter(distance_filter_m)
        self.position_armed = False
        self.barometer_armed = False

    def set_distance_filter(self, value: float) -> None:
        self.distance_filter_m = validate_distance_filter(value)
        logger.info("Distance filter set to %g m", self.distance_filter_m)

    def arm_position(self) -> None:
        self.position_armed = True

    def disarm_position(self) -> None:
        self.position_armed = False

    def arm_barometer(self) -> None:
        # Absent hardware is never armed
        self.barometer_armed = self.barometer_available

    def disarm_barometer(self) -> None:
        self.barometer_armed = False

    def to_dict(self) -> Dict:
        return {
            "positionArmed": self.position_armed,
            "barometerArmed": self.barometer_armed,
            "barometerAvailable": self.barometer_available,
            "distanceFilterM": self.distance_filter_m,
        }
