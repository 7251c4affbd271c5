import json
import os

import pytest

from altitude_tracker import export
from altitude_tracker.constants import CSV_HEADER
from altitude_tracker.data_loading import load_csv_export, load_export, load_json_export
from altitude_tracker.errors import ExportFailure

from conftest import T0


def test_empty_csv_has_only_metadata_and_header():
    text = export.render((), "csv", "empty", exported_at=T0).decode("utf-8")
    assert not text.endswith("\n")
    assert text.splitlines() == [
        "# AltitudeTracker Session: empty",
        "# Exported: 2024-05-01T08:00:00Z",
        "# Points: 0",
        "#",
        CSV_HEADER,
    ]


def test_empty_json():
    payload = json.loads(export.render((), "json", "empty", exported_at=T0))
    assert payload == {
        "exportedAt": "2024-05-01T08:00:00Z",
        "pointCount": 0,
        "points": [],
        "session": "empty",
    }


def test_csv_row_formatting(make_point):
    points = (
        make_point(altitude_gps=1000.0, speed=2.0),
        make_point(
            altitude_gps=1001.239,
            altitude_barometric=998.5,
            seconds=61,
            latitude=46.123456789,
            longitude=-7.000000004,
            horizontal_accuracy=4.25,
            vertical_accuracy=10.0,
            speed=-1.0,
        ),
    )
    lines = export.render(points, "csv", "hike", exported_at=T0).decode("utf-8").splitlines()
    assert lines[2] == "# Points: 2"
    assert lines[5] == "2024-05-01T08:00:00Z,46.50000000,7.25000000,1000.00,,1000.00,5.0,3.0,7.20"
    assert lines[6] == "2024-05-01T08:01:01Z,46.12345679,-7.00000000,1001.24,998.50,998.50,4.2,10.0,0.00"


def test_json_keys_sorted_and_values_full_precision(make_point):
    point = make_point(altitude_gps=1234.567890123, altitude_barometric=1230.000000001)
    text = export.render((point,), "json", "hike", exported_at=T0).decode("utf-8")
    payload = json.loads(text)

    assert list(payload) == ["exportedAt", "pointCount", "points", "session"]
    item = payload["points"][0]
    assert list(item) == sorted(item)
    assert item["altitudeGPS"] == 1234.567890123
    assert item["altitudeBarometric"] == 1230.000000001
    assert item["bestAltitude"] == 1230.000000001
    assert item["id"] == point.id


def test_render_is_byte_stable(make_point):
    points = tuple(make_point(altitude_gps=100.0 + i, seconds=i) for i in range(5))
    for fmt in ("csv", "json"):
        assert export.render(points, fmt, "same", T0) == export.render(points, fmt, "same", T0)


def test_default_session_name(make_point):
    payload = json.loads(export.render((), "json", exported_at=T0))
    assert payload["session"] == "altitude_2024-05-01_08-00-00"


def test_unknown_format_is_rejected():
    with pytest.raises(ValueError):
        export.render((), "xml")


def test_write_export_creates_named_file(tmp_path, make_point):
    result = export.write_export((make_point(),), "json", tmp_path, session_name="Morning hike", exported_at=T0)
    assert result.path == tmp_path / "Morning_hike.json"
    assert result.format is export.ExportFormat.JSON
    assert result.point_count == 1
    assert sorted(os.listdir(tmp_path)) == ["Morning_hike.json"]


def test_write_failure_leaves_no_file(tmp_path, make_point, monkeypatch):
    def boom(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(export.os, "replace", boom)
    with pytest.raises(ExportFailure):
        export.write_export((make_point(),), "csv", tmp_path, session_name="hike")
    assert os.listdir(tmp_path) == []


def test_unwritable_directory_raises_export_failure(tmp_path, make_point):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x")
    with pytest.raises(ExportFailure):
        export.write_export((make_point(),), "csv", blocker)


def test_json_round_trip_is_exact(tmp_path, make_point):
    points = (
        make_point(altitude_gps=0.1 + 0.2, latitude=46.123456789012345, longitude=7.987654321098765),
        make_point(altitude_gps=1e-7, altitude_barometric=2345.678901234567, seconds=3, speed=-1.0),
    )
    result = export.write_export(points, "json", tmp_path, session_name="exact", exported_at=T0)
    loaded = load_json_export(result.path)

    assert loaded.session_name == "exact"
    assert loaded.exported_at == T0
    assert loaded.points == list(points)


def test_csv_round_trip_keeps_documented_precision(tmp_path, make_point):
    points = (
        make_point(altitude_gps=1001.239, latitude=46.123456789, speed=2.0),
        make_point(altitude_gps=990.0, altitude_barometric=998.5, seconds=30, speed=-1.0),
    )
    result = export.write_export(points, "csv", tmp_path, session_name="hike", exported_at=T0)
    loaded = load_export(result.path)

    assert loaded.session_name == "hike"
    assert loaded.exported_at == T0
    assert len(loaded.points) == 2
    first, second = loaded.points
    assert first.timestamp == points[0].timestamp
    assert first.latitude == pytest.approx(46.12345679, abs=1e-9)
    assert first.altitude_gps == pytest.approx(1001.24, abs=1e-9)
    assert first.altitude_barometric is None
    assert first.speed_kmh == pytest.approx(7.2)
    assert second.altitude_barometric == pytest.approx(998.5)
    assert second.speed == 0.0


def test_csv_round_trip_of_empty_export(tmp_path):
    result = export.write_export((), "csv", tmp_path, session_name="empty", exported_at=T0)
    assert load_csv_export(result.path).points == []


def test_session_export_uses_snapshot(session, make_fix, tmp_path):
    session.start()
    session.on_position_update(make_fix(altitude=100.0))
    result = session.export("csv", session_name="live")
    session.on_position_update(make_fix(altitude=101.0, seconds=5))

    assert result.path.parent == tmp_path
    assert result.point_count == 1
    assert len(session.points()) == 2


def test_csv_has_no_trailing_newline(make_point):
    text = export.render((make_point(),), "csv", "one", exported_at=T0).decode("utf-8")
    assert text.endswith(",3.60")
    assert len(text.split("\n")) == 6


def test_json_refuses_non_finite_values(make_point):
    with pytest.raises(ValueError):
        export.render((make_point(altitude_gps=float("nan")),), "json", "bad", exported_at=T0)
