"""
Statistics Computation for Altitude Tracking

This module derives session statistics from a point log snapshot:
elevation gain and loss, altitude range, duration and point count. Every
value is recomputed from scratch on each call, so there is no incremental
state to keep consistent with the log.
"""

import numpy as np
from typing import Optional, Sequence
from .models import FusedPoint, SessionStats


def best_altitudes(points: Sequence[FusedPoint]) -> np.ndarray:
    """
    Collect the best altitude of every point as a float64 array.
    
    Args:
        points: Point log snapshot in log order.
        
    Returns:
        1-D array of best altitudes in meters.
    """
    return np.fromiter((p.best_altitude for p in points), dtype=np.float64, count=len(points))


def elevation_gain(points: Sequence[FusedPoint]) -> float:
    """
    Sum of all positive altitude steps between consecutive points.
    
    Args:
        points: Point log snapshot in log order.
        
    Returns:
        Total climb in meters, 0.0 for fewer than two points.
    """
    if len(points) < 2:
        return 0.0
    deltas = np.diff(best_altitudes(points))
    return float(deltas[deltas > 0].sum())


def elevation_loss(points: Sequence[FusedPoint]) -> float:
    """
    Sum of all negative altitude steps between consecutive points, as a
    positive number.
    
    Args:
        points: Point log snapshot in log order.
        
    Returns:
        Total descent in meters, 0.0 for fewer than two points.
    """
    if len(points) < 2:
        return 0.0
    deltas = np.diff(best_altitudes(points))
    return float(-deltas[deltas < 0].sum())


def min_altitude(points: Sequence[FusedPoint]) -> Optional[float]:
    if not points:
        return None
    return float(np.min(best_altitudes(points)))


def max_altitude(points: Sequence[FusedPoint]) -> Optional[float]:
    if not points:
        return None
    return float(np.max(best_altitudes(points)))


def duration_seconds(points: Sequence[FusedPoint]) -> float:
    """Seconds between the first and last point in log order (not min/max time)."""
    if len(points) < 2:
        return 0.0
    return (points[-1].timestamp - points[0].timestamp).total_seconds()


def compute_stats(points: Sequence[FusedPoint]) -> SessionStats:
    """
    Compute all session statistics over one snapshot.
    
    Args:
        points: Point log snapshot in log order. Must not change while this
            runs; pass PointLog.snapshot(), not the live log.
        
    Returns:
        SessionStats with IEEE-754 double values, unrounded.
    """
    return SessionStats(
        total_points=len(points),
        elevation_gain=elevation_gain(points),
        elevation_loss=elevation_loss(points),
        min_altitude=min_altitude(points),
        max_altitude=max_altitude(points),
        duration_seconds=duration_seconds(points),
    )
