"""
Data Models for Altitude Tracking

This module defines the raw sensor samples consumed by the core, the fused
point recorded per accepted fix, the session lifecycle states, and the
derived session statistics.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Optional
from . import utils


class SessionState(str, Enum):
    """Lifecycle state of a recording session."""

    IDLE = "idle"
    TRACKING = "tracking"
    PAUSED = "paused"


@dataclass(frozen=True)
class RawFix:
    """
    A single position fix from the satellite positioning receiver.
    
    Attributes:
        timestamp: Time of the fix (aware datetime, UTC preferred).
        latitude: Latitude in decimal degrees.
        longitude: Longitude in decimal degrees.
        altitude: GPS altitude in meters.
        horizontal_accuracy: Horizontal accuracy radius in meters. Negative
            means the receiver has no valid fix.
        vertical_accuracy: Vertical accuracy in meters.
        speed: Ground speed in m/s. Negative means unknown.
    """

    timestamp: datetime
    latitude: float
    longitude: float
    altitude: float
    horizontal_accuracy: float
    vertical_accuracy: float
    speed: float = -1.0

    @property
    def horizontal_accuracy_valid(self) -> bool:
        return self.horizontal_accuracy >= 0


@dataclass(frozen=True)
class BarometricReading:
    """
    A relative altitude reading from the barometric altimeter.
    
    Attributes:
        relative_altitude: Altitude change in meters since the altimeter
            was last armed.
        valid: False when the altimeter reported an error for this sample.
    """

    relative_altitude: float
    valid: bool = True


@dataclass(frozen=True)
class FusedPoint:
    """
    One fused sample: a position fix with its best available altitude.
    
    Points are immutable. The barometric altitude is fixed at creation and
    never corrected afterwards.
    """

    timestamp: datetime
    latitude: float
    longitude: float
    altitude_gps: float
    horizontal_accuracy: float
    vertical_accuracy: float
    speed: float
    altitude_barometric: Optional[float] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def best_altitude(self) -> float:
        """Barometric altitude if available, otherwise GPS altitude."""
        if self.altitude_barometric is not None:
            return self.altitude_barometric
        return self.altitude_gps

    @property
    def speed_kmh(self) -> float:
        return utils.speed_kmh(self.speed)

    def to_dict(self) -> Dict:
        """
        Convert the point to a JSON-ready dictionary.
        
        Numeric values keep full precision. The timestamp is an ISO-8601
        UTC string.
        
        Returns:
            Dictionary with camelCase keys as used by the JSON export.
        """
        return {
            "id": self.id,
            "timestamp": utils.format_iso_utc(self.timestamp),
            "latitude": self.latitude,
            "longitude": self.longitude,
            "altitudeGPS": self.altitude_gps,
            "altitudeBarometric": self.altitude_barometric,
            "bestAltitude": self.best_altitude,
            "horizontalAccuracy": self.horizontal_accuracy,
            "verticalAccuracy": self.vertical_accuracy,
            "speed": self.speed,
            "speedKmh": self.speed_kmh,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "FusedPoint":
        """
        Rebuild a point from a dictionary produced by to_dict().
        
        Derived keys (bestAltitude, speedKmh) are ignored.
        
        Raises:
            KeyError: If a required key is missing.
            ValueError: If the timestamp cannot be parsed.
        """
        baro = data.get("altitudeBarometric")
        return cls(
            id=str(data["id"]),
            timestamp=utils.parse_iso_utc(data["timestamp"]),
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            altitude_gps=float(data["altitudeGPS"]),
            altitude_barometric=None if baro is None else float(baro),
            horizontal_accuracy=float(data["horizontalAccuracy"]),
            vertical_accuracy=float(data["verticalAccuracy"]),
            speed=float(data["speed"]),
        )


@dataclass(frozen=True)
class SessionStats:
    """Statistics derived from a point log snapshot. Never stored."""

    total_points: int
    elevation_gain: float
    elevation_loss: float
    min_altitude: Optional[float]
    max_altitude: Optional[float]
    duration_seconds: float

    def to_dict(self) -> Dict:
        return {
            "totalPoints": self.total_points,
            "elevationGain": self.elevation_gain,
            "elevationLoss": self.elevation_loss,
            "minAltitude": self.min_altitude,
            "maxAltitude": self.max_altitude,
            "durationSeconds": self.duration_seconds,
        }
