"""
Utility Functions for Altitude Tracking

This module provides helper functions for unit conversion, fixed-precision
number formatting, and timestamp conversion used by the exporter and the
display telemetry.
"""

import numpy as np
from datetime import datetime, timezone
from typing import Optional
from . import constants


def speed_kmh(speed_mps: float) -> float:
    """
    Convert a speed in m/s to km/h.
    
    Args:
        speed_mps: Speed in meters per second. Negative values mean the
            speed is unknown.
        
    Returns:
        Speed in km/h, or 0.0 if the speed is unknown.
    """
    if speed_mps is None or np.isnan(speed_mps) or speed_mps < 0:
        return 0.0
    return speed_mps * constants.MPS_TO_KMH


def format_fixed(value: Optional[float], digits: int) -> str:
    """
    Format a number with a fixed number of decimals.
    
    Uses printf-style formatting, which always writes "." as the decimal
    separator regardless of the process locale.
    
    Args:
        value: Value to format.
        digits: Number of decimal places.
        
    Returns:
        Formatted string, or an empty string if value is None or NaN.
    """
    if value is None or (isinstance(value, float) and np.isnan(value)):
        return ""
    return "%.*f" % (digits, value)


def round_float(value, digits: int = 3) -> Optional[float]:
    """
    Round a float value, handling None, NaN, and Inf.
    
    Args:
        value: Value to round.
        digits: Number of decimal places. Default 3.
        
    Returns:
        Rounded float, or None if value is None, NaN, or Inf.
    """
    if value is None or (isinstance(value, float) and (np.isnan(value) or np.isinf(value))):
        return None
    return round(float(value), digits)


def ensure_utc(dt: datetime) -> datetime:
    """Return dt as an aware UTC datetime. Naive values are taken as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_iso_utc(dt: datetime) -> str:
    """
    Format a datetime as an ISO-8601 UTC timestamp with a "Z" suffix.
    
    Args:
        dt: Datetime to format. Naive datetimes are treated as UTC.
        
    Returns:
        Timestamp string such as "2024-05-01T08:30:00Z" (second precision).
    """
    return ensure_utc(dt).strftime(constants.ISO_TIMESTAMP_FORMAT)


def parse_iso_utc(text: str) -> datetime:
    """
    Parse an ISO-8601 timestamp written by format_iso_utc().
    
    Args:
        text: Timestamp string. A trailing "Z" is accepted.
        
    Returns:
        Aware UTC datetime.
        
    Raises:
        ValueError: If the text is not a valid ISO-8601 timestamp.
    """
    text = text.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(text))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
