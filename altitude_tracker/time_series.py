"""
Time Series Extraction for Altitude Tracking

This module flattens a point log snapshot into a pandas DataFrame and
derives the altitude profile shown next to the live statistics.
"""

import pandas as pd
from typing import Dict, List, Sequence
from . import utils
from .models import FusedPoint

FRAME_COLUMNS = [
    "id",
    "timestamp",
    "latitude",
    "longitude",
    "altitude_gps_m",
    "altitude_barometric_m",
    "best_altitude_m",
    "horizontal_accuracy_m",
    "vertical_accuracy_m",
    "speed_mps",
    "speed_kmh",
]


def points_to_frame(points: Sequence[FusedPoint]) -> pd.DataFrame:
    """
    Convert fused points to a DataFrame, one row per point in log order.
    
    Args:
        points: Point log snapshot.
        
    Returns:
        DataFrame with FRAME_COLUMNS. Missing barometric altitudes are NaN
        and timestamps are UTC pandas timestamps.
    """
    rows = [
        {
            "id": p.id,
            "timestamp": p.timestamp,
            "latitude": p.latitude,
            "longitude": p.longitude,
            "altitude_gps_m": p.altitude_gps,
            "altitude_barometric_m": p.altitude_barometric,
            "best_altitude_m": p.best_altitude,
            "horizontal_accuracy_m": p.horizontal_accuracy,
            "vertical_accuracy_m": p.vertical_accuracy,
            "speed_mps": p.speed,
            "speed_kmh": p.speed_kmh,
        }
        for p in points
    ]
    df = pd.DataFrame(rows, columns=FRAME_COLUMNS)
    if df.empty:
        return df
    
    df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True)
    df["altitude_barometric_m"] = df["altitude_barometric_m"].astype(float)
    return df


def altitude_profile(df: pd.DataFrame) -> pd.DataFrame:
    """
    Add elapsed time and cumulative gain/loss columns.
    
    Order is the log order, not timestamp order, matching the statistics.
    
    Args:
        df: DataFrame from points_to_frame().
        
    Returns:
        Copy of df with elapsed_s, cumulative_gain_m and cumulative_loss_m.
    """
    df = df.copy()
    if df.empty:
        for column in ("elapsed_s", "cumulative_gain_m", "cumulative_loss_m"):
            df[column] = pd.Series(dtype=float)
        return df
    
    df["elapsed_s"] = (df["timestamp"] - df["timestamp"].iloc[0]).dt.total_seconds()
    delta = df["best_altitude_m"].diff().fillna(0.0)
    df["cumulative_gain_m"] = delta.clip(lower=0).cumsum()
    df["cumulative_loss_m"] = (-delta).clip(lower=0).cumsum()
    return df


def build_profile_records(points: Sequence[FusedPoint]) -> List[Dict]:
    """
    Build JSON-ready altitude profile records for charting.
    
    Args:
        points: Point log snapshot.
        
    Returns:
        One dictionary per point with elapsed_s, best altitude and cumulative
        gain/loss, rounded for display.
    """
    df = altitude_profile(points_to_frame(points))
    records = []
    for row in df.itertuples():
        records.append({
            "elapsed_s": utils.round_float(row.elapsed_s),
            "best_altitude_m": utils.round_float(row.best_altitude_m, digits=2),
            "cumulative_gain_m": utils.round_float(row.cumulative_gain_m, digits=2),
            "cumulative_loss_m": utils.round_float(row.cumulative_loss_m, digits=2),
        })
    return records
