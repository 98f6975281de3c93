from tests.factories import make_activity, make_point
from trackmerge.merge.merge_engine import MERGED_NAME_SUFFIX, merge_activities
from trackmerge.models.activity import ActivityStats


def test_heart_rate_is_replaced_on_exact_timestamp_match():
    base = make_activity([make_point(seconds=0, heart_rate=150), make_point(seconds=1, heart_rate=150)])
    hr_source = make_activity([make_point(seconds=0, heart_rate=170)])

    merged = merge_activities(base, hr_source)

    assert merged.track_points[0].heart_rate == 170
    # No point at T+1s in the HR source: the base value is kept
    assert merged.track_points[1].heart_rate == 150


def test_matching_is_on_timestamp_string_only():
    base = make_activity([make_point(seconds=0, heart_rate=150)])
    same_instant_other_format = make_activity([make_point(seconds=0, heart_rate=170, time="2024-05-01T10:00:00.000Z")])
    one_second_offset = make_activity([make_point(seconds=1, heart_rate=170)])

    assert merge_activities(base, same_instant_other_format).track_points[0].heart_rate == 150
    assert merge_activities(base, one_second_offset).track_points[0].heart_rate == 150


def test_matched_point_without_heart_rate_clears_base_value():
    base = make_activity([make_point(seconds=0, heart_rate=150)])
    hr_source = make_activity([make_point(seconds=0, heart_rate=None)])

    assert merge_activities(base, hr_source).track_points[0].heart_rate is None


def test_base_geometry_and_time_are_preserved():
    base = make_activity([make_point(seconds=i, lat=0.1 * i, lon=0.2 * i, heart_rate=140, pace=300.0) for i in range(5)])
    hr_source = make_activity([make_point(seconds=i, lat=9.0, lon=9.0, heart_rate=180) for i in range(0, 5, 2)])

    merged = merge_activities(base, hr_source)

    assert len(merged.track_points) == len(base.track_points)
    for merged_point, base_point in zip(merged.track_points, base.track_points, strict=True):
        assert merged_point.latitude == base_point.latitude
        assert merged_point.longitude == base_point.longitude
        assert merged_point.elevation == base_point.elevation
        assert merged_point.time == base_point.time
        assert merged_point.timestamp == base_point.timestamp
        assert merged_point.cumulative_distance == base_point.cumulative_distance
        assert merged_point.pace == base_point.pace
        assert merged_point.cadence == base_point.cadence
    assert [p.heart_rate for p in merged.track_points] == [180, 140, 180, 140, 180]


def test_only_average_heart_rate_is_recomputed():
    base_stats = ActivityStats(total_distance=5.0, duration=1500.0, avg_heart_rate=150.0, avg_pace=300.0, avg_cadence=168.0)
    base = make_activity([make_point(seconds=0, heart_rate=150), make_point(seconds=1, heart_rate=150)], stats=base_stats)
    hr_source = make_activity([make_point(seconds=0, heart_rate=170), make_point(seconds=1, heart_rate=180)])

    merged = merge_activities(base, hr_source)

    assert merged.stats.avg_heart_rate == 175
    assert merged.stats.total_distance == base_stats.total_distance
    assert merged.stats.duration == base_stats.duration
    assert merged.stats.avg_pace == base_stats.avg_pace
    assert merged.stats.avg_cadence == base_stats.avg_cadence


def test_merged_name_and_inputs_untouched():
    base = make_activity([make_point(seconds=0, heart_rate=150)], name="Morning Run")
    hr_source = make_activity([make_point(seconds=0, heart_rate=170)])

    merged = merge_activities(base, hr_source)

    assert merged.name == "Morning Run" + MERGED_NAME_SUFFIX
    assert merged.name == "Morning Run (Merged)"
    assert merged.device_name == base.device_name
    assert base.track_points[0].heart_rate == 150
    assert hr_source.track_points[0].heart_rate == 170
    assert merged.track_points[0] is not base.track_points[0]


def test_empty_base_produces_empty_merge():
    merged = merge_activities(make_activity([]), make_activity([make_point(seconds=0, heart_rate=170)]))

    assert merged.track_points == ()
