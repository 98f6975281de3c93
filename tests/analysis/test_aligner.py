import datetime as dt

import pytest

from tests.factories import START, make_activity, make_point
from trackmerge.analysis.aligner import align_activities, limit_pace, smooth_pace, timeline_seconds


def test_origin_is_earlier_start_and_later_activity_is_null_until_it_begins():
    activity_a = make_activity([make_point(seconds=i, heart_rate=140 + i, pace=300.0) for i in range(10)])
    activity_b = make_activity([make_point(seconds=5 + i, heart_rate=160, pace=290.0) for i in range(10)])

    samples = align_activities(activity_a, activity_b)

    assert samples[0].timestamp == START
    assert samples[0].hr_a == 140
    for sample in samples[:5]:
        assert sample.hr_b is None
        assert sample.pace_b is None
    assert samples[5].hr_b == 160
    assert samples[5].pace_b == 290.0


def test_length_covers_later_end_inclusive():
    activity_a = make_activity([make_point(seconds=0), make_point(seconds=3)])
    activity_b = make_activity([make_point(seconds=2), make_point(seconds=7)])

    samples = align_activities(activity_a, activity_b)

    assert [s.offset_seconds for s in samples] == list(range(8))
    assert samples[-1].timestamp == START + dt.timedelta(seconds=7)


def test_gaps_are_left_null_without_interpolation():
    activity = make_activity([make_point(seconds=0, heart_rate=100), make_point(seconds=4, heart_rate=140)])

    samples = align_activities(activity, None)

    assert [s.hr_a for s in samples] == [100, None, None, None, 140]
    assert all(s.hr_b is None and s.pace_b is None for s in samples)


def test_sub_second_timestamps_round_to_nearest_second():
    points = [
        make_point(seconds=0, heart_rate=100),
        make_point(seconds=0, heart_rate=110, start=START + dt.timedelta(milliseconds=1600)),
        make_point(seconds=0, heart_rate=120, start=START + dt.timedelta(milliseconds=2500)),
    ]

    samples = align_activities(make_activity(points), None)

    assert [s.hr_a for s in samples] == [100, None, 110, 120]


def test_b_may_start_first():
    activity_a = make_activity([make_point(seconds=3, heart_rate=150)])
    activity_b = make_activity([make_point(seconds=0, heart_rate=130)])

    samples = align_activities(activity_a, activity_b)

    assert samples[0].timestamp == START
    assert samples[0].hr_b == 130
    assert samples[3].hr_a == 150


@pytest.mark.parametrize(
    ("activity_a", "activity_b"),
    [
        (None, None),
        (make_activity([]), None),
        (make_activity([]), make_activity([])),
    ],
)
def test_no_points_gives_empty_series(activity_a, activity_b):
    assert align_activities(activity_a, activity_b) == []


def test_empty_activity_never_becomes_origin():
    samples = align_activities(make_activity([]), make_activity([make_point(seconds=0, heart_rate=150)]))

    assert len(samples) == 1
    assert samples[0].hr_b == 150
    assert samples[0].hr_a is None


def test_smooth_pace_smooths_both_series_and_keeps_heart_rate():
    activity_a = make_activity([make_point(seconds=i, heart_rate=150, pace=p) for i, p in enumerate([300.0, 330.0, 270.0])])
    activity_b = make_activity([make_point(seconds=i, pace=400.0) for i in range(3)])
    samples = align_activities(activity_a, activity_b)

    smoothed = smooth_pace(samples, 3)

    assert [s.pace_a for s in smoothed] == pytest.approx([315.0, 300.0, 300.0])
    assert [s.pace_b for s in smoothed] == pytest.approx([400.0, 400.0, 400.0])
    assert [s.hr_a for s in smoothed] == [150, 150, 150]
    assert [s.pace_a for s in samples] == [300.0, 330.0, 270.0]


def test_smooth_pace_window_one_returns_same_samples():
    samples = align_activities(make_activity([make_point(seconds=0, pace=300.0)]), None)

    assert smooth_pace(samples, 1) == samples


def test_timeline_seconds_matches_aligned_length():
    activity_a = make_activity([make_point(seconds=0), make_point(seconds=3)])
    activity_b = make_activity([make_point(seconds=2), make_point(seconds=7)])

    assert timeline_seconds(activity_a, activity_b) == len(align_activities(activity_a, activity_b)) == 8
    assert timeline_seconds(None, make_activity([])) == 0


def test_timeline_seconds_reports_long_span_without_building_samples():
    week = 7 * 24 * 60 * 60
    activity = make_activity([make_point(seconds=0), make_point(seconds=week)])

    assert timeline_seconds(activity, None) == week + 1


def test_limit_pace_blanks_out_of_range_values_in_either_bound_order():
    activity_a = make_activity([make_point(seconds=i, heart_rate=150, pace=p) for i, p in enumerate([200.0, 300.0, 600.0])])
    samples = align_activities(activity_a, None)

    for slowest, fastest in ((540, 180), (180, 540)):
        limited = limit_pace(samples, slowest, fastest)
        assert [s.pace_a for s in limited] == [200.0, 300.0, None]
        assert [s.hr_a for s in limited] == [150, 150, 150]
