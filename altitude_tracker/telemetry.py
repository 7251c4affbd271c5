"""
Display Telemetry for Altitude Tracking

This module converts the current point and session statistics into the
preformatted strings the live HUD shows, and the recorded track into GeoJSON
for the map collaborator.
"""

from typing import Dict, Optional, Sequence
from .models import FusedPoint, SessionStats


def altitude_source_label(point: FusedPoint) -> str:
    if point.altitude_barometric is not None:
        return "Barometric Altitude"
    return "GPS Altitude"


def format_duration(seconds: float) -> str:
    """
    Format a duration as "h:mm:ss", or "m:ss" under one hour.
    
    Args:
        seconds: Duration in seconds. Fractions are truncated.
        
    Returns:
        Duration string, e.g. "1:02:03" or "4:05".
    """
    total = int(seconds)
    h = total // 3600
    m = (total % 3600) // 60
    s = total % 60
    if h > 0:
        return "%d:%02d:%02d" % (h, m, s)
    return "%d:%02d" % (m, s)


def format_range(min_altitude: Optional[float], max_altitude: Optional[float]) -> str:
    if min_altitude is None or max_altitude is None:
        return "—"
    return "%d–%dm" % (int(min_altitude), int(max_altitude))


def build_display_summary(current_point: Optional[FusedPoint], stats: SessionStats) -> Dict:
    """
    Build the live statistics HUD.
    
    Args:
        current_point: Most recent fused point, logged or not.
        stats: Statistics of the recorded log.
        
    Returns:
        Dictionary of display strings. Point-dependent entries are None
        until the first fix arrives, in which case "status" tells the user
        the receiver is still waiting.
    """
    summary = {
        "status": "Waiting for GPS..." if current_point is None else None,
        "altitude": None,
        "altitudeSource": None,
        "latitude": None,
        "longitude": None,
        "speed": None,
        "accuracy": None,
        "gain": "+%.0fm" % stats.elevation_gain,
        "loss": "-%.0fm" % stats.elevation_loss,
        "range": format_range(stats.min_altitude, stats.max_altitude),
        "points": str(stats.total_points),
        "duration": format_duration(stats.duration_seconds),
    }
    if current_point is not None:
        summary.update({
            "altitude": "%.1f" % current_point.best_altitude,
            "altitudeSource": altitude_source_label(current_point),
            "latitude": "%.6f°" % current_point.latitude,
            "longitude": "%.6f°" % current_point.longitude,
            "speed": "%.1f km/h" % current_point.speed_kmh,
            "accuracy": "±%dm GPS" % int(current_point.horizontal_accuracy),
        })
    return summary


def points_to_geojson(points: Sequence[FusedPoint]) -> Dict:
    """
    Convert the recorded track to a GeoJSON FeatureCollection.
    
    Creates a LineString feature for the path and Point features marking the
    start and end. Coordinates are [lon, lat, best altitude].
    
    Args:
        points: Point log snapshot.
        
    Returns:
        GeoJSON FeatureCollection. Empty if there are no points.
    """
    coordinates = [[p.longitude, p.latitude, p.best_altitude] for p in points]
    if not coordinates:
        return {"type": "FeatureCollection", "features": []}
    
    line_feature = {
        "type": "Feature",
        "geometry": {
            "type": "LineString",
            "coordinates": coordinates,
        },
        "properties": {
            "sampleCount": len(coordinates),
        },
    }
    
    start_feature = {
        "type": "Feature",
        "geometry": {
            "type": "Point",
            "coordinates": coordinates[0],
        },
        "properties": {"marker": "start", "altitude": points[0].best_altitude},
    }
    
    end_feature = {
        "type": "Feature",
        "geometry": {
            "type": "Point",
            "coordinates": coordinates[-1],
        },
        "properties": {"marker": "end", "altitude": points[-1].best_altitude},
    }
    
    return {
        "type": "FeatureCollection",
        "features": [line_feature, start_feature, end_feature],
    }
