"""
Export Loading for Altitude Tracking

This module reads CSV and JSON exports back into fused points, for
reviewing a finished session or checking an export before it is shared.
JSON exports restore every value exactly; CSV exports restore values to the
precision they were written with and get fresh point ids.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union
import numpy as np
import pandas as pd
from . import constants
from . import utils
from .models import FusedPoint

logger = logging.getLogger(__name__)

METADATA_LINES = 4


@dataclass(frozen=True)
class LoadedSession:
    """A session read back from an export file."""

    session_name: str
    exported_at: Optional[datetime]
    points: List[FusedPoint]


def _parse_metadata(lines: List[str]) -> dict:
    meta = {}
    for line in lines:
        body = line.lstrip("#").strip()
        key, sep, value = body.partition(":")
        if sep:
            meta[key.strip()] = value.strip()
    return meta


def load_csv_export(path: Union[str, Path]) -> LoadedSession:
    """
    Load a CSV export.
    
    Args:
        path: Path to a file written by the CSV exporter.
        
    Returns:
        LoadedSession. Speeds are rebuilt from speed_kmh, so an unknown
        speed comes back as 0.0 m/s.
        
    Raises:
        ValueError: If the header does not match the export format.
    """
    path = Path(path)
    with path.open("r", encoding="utf-8") as handle:
        metadata_lines = [handle.readline() for _ in range(METADATA_LINES)]
    meta = _parse_metadata(metadata_lines)
    
    df = pd.read_csv(
        path,
        skiprows=METADATA_LINES,
        dtype={"timestamp": str, "altitude_barometric_m": float},
    )
    if tuple(df.columns) != constants.CSV_COLUMNS:
        raise ValueError(f"Unexpected CSV header in {path.name}: {list(df.columns)}")
    
    points = []
    for row in df.itertuples(index=False):
        baro = row.altitude_barometric_m
        points.append(
            FusedPoint(
                timestamp=utils.parse_iso_utc(row.timestamp),
                latitude=float(row.latitude),
                longitude=float(row.longitude),
                altitude_gps=float(row.altitude_gps_m),
                altitude_barometric=None if np.isnan(baro) else float(baro),
                horizontal_accuracy=float(row.horizontal_accuracy_m),
                vertical_accuracy=float(row.vertical_accuracy_m),
                speed=float(row.speed_kmh) / constants.MPS_TO_KMH,
            )
        )
    
    declared = meta.get("Points")
    if declared is not None and declared.isdigit() and int(declared) != len(points):
        logger.warning("%s declares %s points but contains %d", path.name, declared, len(points))
    
    exported = meta.get("Exported")
    return LoadedSession(
        session_name=meta.get(constants.CSV_TITLE, path.stem),
        exported_at=utils.parse_iso_utc(exported) if exported else None,
        points=points,
    )


def load_json_export(path: Union[str, Path]) -> LoadedSession:
    """
    Load a JSON export. Values round-trip exactly, ids included.
    
    Raises:
        KeyError: If a required key is missing.
        json.JSONDecodeError: If the file is not valid JSON.
    """
    path = Path(path)
    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    points = [FusedPoint.from_dict(item) for item in payload["points"]]
    if payload.get("pointCount") != len(points):
        logger.warning("%s declares %s points but contains %d", path.name, payload.get("pointCount"), len(points))
    return LoadedSession(
        session_name=payload["session"],
        exported_at=utils.parse_iso_utc(payload["exportedAt"]),
        points=points,
    )


def load_export(path: Union[str, Path]) -> LoadedSession:
    """
    Load an export, choosing the reader from the file extension.
    
    Raises:
        ValueError: If the extension is neither .csv nor .json.
    """
    suffix = Path(path).suffix.lower()
    if suffix == ".csv":
        return load_csv_export(path)
    if suffix == ".json":
        return load_json_export(path)
    raise ValueError(f"Unsupported export file: {path}")
