"""
Export Functions for Altitude Tracking

This module serializes a recorded point log to CSV or JSON and writes the
result to disk atomically. Both formats are byte-stable for identical input:
keys are sorted, numbers are formatted without locale, and the export
timestamp can be supplied by the caller.
"""

import csv
import io
import json
import logging
import os
import re
import tempfile
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence, Union
from . import constants
from . import utils
from .errors import ExportFailure
from .models import FusedPoint

logger = logging.getLogger(__name__)


class ExportFormat(str, Enum):
    CSV = "csv"
    JSON = "json"

    @property
    def file_extension(self) -> str:
        return self.value

    @property
    def mime_type(self) -> str:
        if self is ExportFormat.CSV:
            return "text/csv"
        return "application/json"


@dataclass(frozen=True)
class ExportResult:
    """Location and summary of a finalized export file."""

    path: Path
    format: ExportFormat
    point_count: int


def coerce_format(fmt: Union[str, ExportFormat]) -> ExportFormat:
    """
    Convert a format name to an ExportFormat.
    
    Raises:
        ValueError: If the name is not "csv" or "json" (case-insensitive).
    """
    if isinstance(fmt, ExportFormat):
        return fmt
    try:
        return ExportFormat(str(fmt).lower())
    except ValueError as exc:
        raise ValueError(f"Unsupported export format: {fmt!r}") from exc


def default_session_name(exported_at: datetime) -> str:
    return utils.ensure_utc(exported_at).strftime(constants.SESSION_NAME_FORMAT)


def safe_file_stem(session_name: str) -> str:
    """Reduce a session name to characters safe for a file name."""
    stem = re.sub(r"[^A-Za-z0-9._-]+", "_", session_name).strip("._")
    return stem or "session"


def csv_row(point: FusedPoint) -> List[str]:
    """
    Format one point as a CSV row.
    
    Args:
        point: Point to format.
        
    Returns:
        List of column strings matching constants.CSV_COLUMNS.
    """
    return [
        utils.format_iso_utc(point.timestamp),
        utils.format_fixed(point.latitude, 8),
        utils.format_fixed(point.longitude, 8),
        utils.format_fixed(point.altitude_gps, 2),
        utils.format_fixed(point.altitude_barometric, 2),
        utils.format_fixed(point.best_altitude, 2),
        utils.format_fixed(point.horizontal_accuracy, 1),
        utils.format_fixed(point.vertical_accuracy, 1),
        utils.format_fixed(point.speed_kmh, 2),
    ]


def build_csv(points: Sequence[FusedPoint], session_name: str, exported_at: datetime) -> str:
    """
    Build the CSV export text.
    
    The file starts with four "#" metadata lines (session name, export time,
    point count, separator), then the fixed header, then one row per point
    in log order.
    
    Args:
        points: Point log snapshot.
        session_name: Name written to the metadata block.
        exported_at: Export time written to the metadata block.
        
    Returns:
        CSV text with "\\n" between lines and no newline after the last one.
    """
    name = " ".join(session_name.splitlines())
    buffer = io.StringIO()
    buffer.write(f"# {constants.CSV_TITLE}: {name}\n")
    buffer.write(f"# Exported: {utils.format_iso_utc(exported_at)}\n")
    buffer.write(f"# Points: {len(points)}\n")
    buffer.write("#\n")
    buffer.write(constants.CSV_HEADER + "\n")

    writer = csv.writer(buffer, lineterminator="\n")
    for point in points:
        writer.writerow(csv_row(point))

    # No terminator after the last line
    return buffer.getvalue()[:-1]


def build_json(points: Sequence[FusedPoint], session_name: str, exported_at: datetime) -> str:
    """
    Build the JSON export text.
    
    Args:
        points: Point log snapshot.
        session_name: Value of the "session" key.
        exported_at: Value of the "exportedAt" key.
        
    Returns:
        Pretty-printed JSON with sorted keys and full-precision numbers.
        
    Raises:
        ValueError: If a point holds a NaN or infinite value.
    """
    payload = {
        "session": session_name,
        "exportedAt": utils.format_iso_utc(exported_at),
        "pointCount": len(points),
        "points": [p.to_dict() for p in points],
    }
    return json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False, allow_nan=False)


def render(
    points: Sequence[FusedPoint],
    fmt: Union[str, ExportFormat],
    session_name: Optional[str] = None,
    exported_at: Optional[datetime] = None,
) -> bytes:
    """
    Serialize a point log snapshot.
    
    Args:
        points: Point log snapshot in log order.
        fmt: "csv" or "json".
        session_name: Session name. Defaults to altitude_<export time>.
        exported_at: Export timestamp. Defaults to now (UTC).
        
    Returns:
        UTF-8 encoded export. Identical input gives identical bytes.
        
    Raises:
        ValueError: If fmt is not a supported format, or a JSON export
            meets a non-finite value.
    """
    fmt = coerce_format(fmt)
    exported_at = exported_at or utils.utc_now()
    name = session_name or default_session_name(exported_at)

    if fmt is ExportFormat.CSV:
        text = build_csv(points, name, exported_at)
    else:
        text = build_json(points, name, exported_at)
    return text.encode("utf-8")


def write_export(
    points: Sequence[FusedPoint],
    fmt: Union[str, ExportFormat],
    directory: Union[str, Path] = constants.DEFAULT_EXPORT_DIR,
    session_name: Optional[str] = None,
    exported_at: Optional[datetime] = None,
) -> ExportResult:
    """
    Serialize a point log snapshot and write it to <directory>/<name>.<ext>.
    
    The content goes to a temporary file in the target directory first and
    is moved into place with os.replace(), so the destination either holds
    the complete export or is left untouched.
    
    Args:
        points: Point log snapshot in log order.
        fmt: "csv" or "json".
        directory: Destination directory. Created if missing.
        session_name: Session name; also used (sanitized) as the file name.
        exported_at: Export timestamp. Defaults to now (UTC).
        
    Returns:
        ExportResult describing the finalized file.
        
    Raises:
        ValueError: If fmt is not a supported format.
        ExportFailure: If the file could not be written.
    """
    fmt = coerce_format(fmt)
    exported_at = exported_at or utils.utc_now()
    name = session_name or default_session_name(exported_at)
    content = render(points, fmt, name, exported_at)

    directory = Path(directory)
    target = directory / f"{safe_file_stem(name)}.{fmt.file_extension}"
    tmp_path = None
    try:
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".export-", suffix=".tmp", dir=directory)
        with os.fdopen(fd, "wb") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, target)
    except OSError as exc:
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError as cleanup_exc:
                logger.warning("Could not remove temporary export %s: %s", tmp_path, cleanup_exc)
        logger.error("Failed to write export %s: %s", target, exc)
        raise ExportFailure(f"Failed to write export {target.name}: {exc}") from exc

    logger.info("Wrote %s export with %d points: %s", fmt.value, len(points), target)
    return ExportResult(path=target, format=fmt, point_count=len(points))
