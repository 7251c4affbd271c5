from altitude_tracker import metrics, telemetry, time_series


def test_summary_before_first_fix():
    summary = telemetry.build_display_summary(None, metrics.compute_stats(()))
    assert summary["status"] == "Waiting for GPS..."
    assert summary["altitude"] is None
    assert summary["range"] == "—"
    assert summary["duration"] == "0:00"
    assert summary["gain"] == "+0m"


def test_summary_with_barometric_point(make_point):
    points = (
        make_point(altitude_gps=100.0, seconds=0),
        make_point(altitude_gps=101.0, altitude_barometric=112.34, seconds=3725, speed=2.5),
    )
    summary = telemetry.build_display_summary(points[-1], metrics.compute_stats(points))
    assert summary["status"] is None
    assert summary["altitude"] == "112.3"
    assert summary["altitudeSource"] == "Barometric Altitude"
    assert summary["speed"] == "9.0 km/h"
    assert summary["accuracy"] == "±5m GPS"
    assert summary["range"] == "100–112m"
    assert summary["duration"] == "1:02:05"
    assert summary["gain"] == "+12m"
    assert summary["loss"] == "-0m"


def test_format_duration():
    assert telemetry.format_duration(0) == "0:00"
    assert telemetry.format_duration(59.9) == "0:59"
    assert telemetry.format_duration(605) == "10:05"
    assert telemetry.format_duration(3600) == "1:00:00"


def test_geojson_track(make_point):
    assert telemetry.points_to_geojson(()) == {"type": "FeatureCollection", "features": []}

    points = (make_point(altitude_gps=100.0), make_point(altitude_gps=110.0, seconds=5, longitude=7.3))
    geojson = telemetry.points_to_geojson(points)
    line, start, end = geojson["features"]
    assert line["geometry"]["coordinates"] == [[7.25, 46.5, 100.0], [7.3, 46.5, 110.0]]
    assert start["properties"]["marker"] == "start"
    assert end["geometry"]["coordinates"] == [7.3, 46.5, 110.0]


def test_altitude_profile(make_point):
    points = (
        make_point(altitude_gps=100.0, seconds=0),
        make_point(altitude_gps=105.0, seconds=10),
        make_point(altitude_gps=98.0, seconds=25),
    )
    records = time_series.build_profile_records(points)
    assert [r["elapsed_s"] for r in records] == [0.0, 10.0, 25.0]
    assert [r["cumulative_gain_m"] for r in records] == [0.0, 5.0, 5.0]
    assert [r["cumulative_loss_m"] for r in records] == [0.0, 0.0, 7.0]
    assert time_series.build_profile_records(()) == []


def test_points_to_frame_marks_missing_barometer_as_nan(make_point):
    df = time_series.points_to_frame((make_point(), make_point(altitude_barometric=90.0)))
    assert list(df.columns) == time_series.FRAME_COLUMNS
    assert df["altitude_barometric_m"].isna().tolist() == [True, False]
    assert df["best_altitude_m"].tolist() == [100.0, 90.0]
