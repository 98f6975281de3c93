import pytest

from tests.factories import make_tcx, tcx_point
from trackmerge.core.errors import MalformedXmlError, NoTrackPointsError
from trackmerge.ingestion.tcx_parser import (
    SINGLE_LEG_CADENCE_MAX,
    normalize_cadence,
    parse_tcx,
    skip_incomplete_point_policy,
)


def test_cadence_normalization_policy():
    assert normalize_cadence(85) == 170
    assert normalize_cadence(180) == 180
    assert normalize_cadence(SINGLE_LEG_CADENCE_MAX) == 2 * SINGLE_LEG_CADENCE_MAX
    assert normalize_cadence(SINGLE_LEG_CADENCE_MAX + 1) == SINGLE_LEG_CADENCE_MAX + 1
    assert normalize_cadence(None) is None


def test_parsed_cadence_is_steps_per_minute():
    text = make_tcx(
        tcx_point("2024-05-01T10:00:00Z", lat=0, lon=0, cad=85),
        tcx_point("2024-05-01T10:00:01Z", lat=0, lon=0.001, cad=180),
    )

    activity = parse_tcx(text, "run.tcx")

    assert [p.cadence for p in activity.track_points] == [170, 180]
    assert activity.stats.avg_cadence == 175


def test_reads_name_device_heart_rate_and_altitude(tcx_text):
    activity = parse_tcx(tcx_text, "run.tcx")

    assert activity.name == "Running"
    assert activity.device_name == "Polar H10"
    assert [p.heart_rate for p in activity.track_points] == [145, 155, 165]
    assert activity.stats.avg_heart_rate == 155


def test_name_falls_back_to_file_name():
    text = make_tcx(tcx_point("2024-05-01T10:00:00Z", lat=0, lon=0)).replace(' Sport="Running"', "")

    assert parse_tcx(text, "ride.tcx").name == "ride.tcx"


def test_reported_distance_is_preferred_over_geometry(tcx_text):
    activity = parse_tcx(tcx_text, "run.tcx")

    distances = [p.cumulative_distance for p in activity.track_points]
    assert distances == pytest.approx([0.0, 0.111, 0.222])
    assert activity.track_points[1].pace == pytest.approx(1 / 0.111)
    assert activity.stats.total_distance == pytest.approx(0.222)
    assert activity.stats.avg_pace == pytest.approx(2 / 0.222)


def test_geometric_distance_when_no_distance_reported():
    text = make_tcx(
        tcx_point("2024-05-01T10:00:00Z", lat=0, lon=0),
        tcx_point("2024-05-01T10:00:01Z", lat=0, lon=0.001),
    )

    activity = parse_tcx(text, "run.tcx")

    assert activity.track_points[0].cumulative_distance == 0
    assert activity.track_points[1].cumulative_distance == pytest.approx(0.1112, abs=1e-3)
    assert activity.track_points[1].pace > 0


def test_mixed_reported_and_geometric_distance_accumulates():
    text = make_tcx(
        tcx_point("2024-05-01T10:00:00Z", lat=0, lon=0, distance_m=0),
        tcx_point("2024-05-01T10:00:01Z", lat=0, lon=0.001, distance_m=100),
        tcx_point("2024-05-01T10:00:02Z", lat=0, lon=0.002),
    )

    distances = [p.cumulative_distance for p in parse_tcx(text, "run.tcx").track_points]

    assert distances[1] == pytest.approx(0.1)
    assert distances[2] == pytest.approx(0.1 + 0.1112, abs=1e-3)


def test_points_without_coordinates_are_skipped():
    text = make_tcx(
        tcx_point("2024-05-01T10:00:00Z", lat=0, lon=0, hr=120),
        tcx_point("2024-05-01T10:00:01Z", hr=121),
        tcx_point("2024-05-01T10:00:02Z", lat=0, hr=122),
        tcx_point("2024-05-01T10:00:03Z", lat=0, lon=0.001, hr=123),
    )

    activity = parse_tcx(text, "run.tcx")

    assert [p.heart_rate for p in activity.track_points] == [120, 123]
    assert activity.stats.duration == 3.0
    assert activity.track_points[1].pace == pytest.approx(3 / activity.track_points[1].cumulative_distance)


def test_skip_incomplete_point_policy():
    assert skip_incomplete_point_policy(None, 1.0)
    assert skip_incomplete_point_policy(1.0, None)
    assert not skip_incomplete_point_policy(0.0, 0.0)


def test_decreasing_reported_distance_keeps_track_monotonic():
    text = make_tcx(
        tcx_point("2024-05-01T10:00:00Z", lat=0, lon=0, distance_m=0),
        tcx_point("2024-05-01T10:00:01Z", lat=0, lon=0.001, distance_m=120),
        tcx_point("2024-05-01T10:00:02Z", lat=0, lon=0.002, distance_m=110),
    )

    points = parse_tcx(text, "run.tcx").track_points

    assert points[2].cumulative_distance == pytest.approx(0.12)
    assert points[2].pace is None


def test_run_cadence_extension_is_read():
    text = make_tcx(
        '\n          <Trackpoint><Time>2024-05-01T10:00:00Z</Time>'
        "<Position><LatitudeDegrees>0</LatitudeDegrees><LongitudeDegrees>0</LongitudeDegrees></Position>"
        '<Extensions><TPX xmlns="http://www.garmin.com/xmlschemas/ActivityExtension/v2">'
        "<RunCadence>82</RunCadence></TPX></Extensions></Trackpoint>"
    )

    assert parse_tcx(text, "run.tcx").track_points[0].cadence == 164


def test_only_incomplete_points_raises_no_track_points():
    text = make_tcx(tcx_point("2024-05-01T10:00:00Z", hr=120))

    with pytest.raises(NoTrackPointsError):
        parse_tcx(text, "run.tcx")


def test_malformed_xml_raises():
    with pytest.raises(MalformedXmlError):
        parse_tcx("<TrainingCenterDatabase>", "broken.tcx")
