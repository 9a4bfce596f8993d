"""
POSTURECOACH - Session aggregation tests
"""

import pytest

from posture_service.models import (
    EmptySessionError,
    FrameRecord,
    OverallRating,
    PostureAnalysis,
    PostureType,
    summarize,
)
from posture_service.models.session import round_half_up


def record(score, issues=(), number=0):
    analysis = PostureAnalysis(
        posture_type=PostureType.DESK,
        issues=tuple(issues),
        feedback=(),
        score=score,
    )
    return FrameRecord(frame_number=number, timestamp=number * 100.0, analysis=analysis)


def test_summary_of_mixed_session():
    frames = [
        record(100, number=0),
        record(60, ["neck_forward", "slouching"], number=1),
        record(20, ["neck_forward", "uneven_shoulders", "slouching", "head_forward"], number=2),
    ]

    summary = summarize(frames)

    assert summary.frame_count == 3
    assert summary.average_score == 60
    assert summary.total_issues == 6
    assert summary.issue_types == ("neck_forward", "slouching", "uneven_shoulders", "head_forward")
    assert summary.overall_rating is OverallRating.GOOD


def test_summary_does_not_depend_on_order():
    frames = [record(80, ["a"]), record(55, ["b", "a"]), record(35, ["c"])]

    forward, backward = summarize(frames), summarize(frames[::-1])

    assert forward.average_score == backward.average_score
    assert forward.total_issues == backward.total_issues
    assert set(forward.issue_types) == set(backward.issue_types)
    assert forward.overall_rating is backward.overall_rating


def test_issue_types_never_exceed_total_issues():
    summary = summarize([record(75, ["knee_over_toe"]), record(75, ["knee_over_toe"])])

    assert summary.issue_types == ("knee_over_toe",)
    assert len(summary.issue_types) <= summary.total_issues


def test_empty_session_raises():
    with pytest.raises(EmptySessionError):
        summarize([])
    assert issubclass(EmptySessionError, ValueError)


@pytest.mark.parametrize("value, expected", [(77.5, 78), (77.4, 77), (0.5, 1), (60.0, 60)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_average_score_rounds_half_up():
    assert summarize([record(75), record(80)]).average_score == 78


@pytest.mark.parametrize("score, rating", [
    (100, OverallRating.EXCELLENT),
    (80, OverallRating.EXCELLENT),
    (79, OverallRating.GOOD),
    (60, OverallRating.GOOD),
    (59, OverallRating.FAIR),
    (40, OverallRating.FAIR),
    (39, OverallRating.POOR),
    (0, OverallRating.POOR),
])
def test_rating_boundaries(score, rating):
    assert summarize([record(score)]).overall_rating is rating


def test_rating_uses_unrounded_mean():
    summary = summarize([record(80), record(79)])

    assert summary.average_score == 80
    assert summary.overall_rating is OverallRating.GOOD


def test_summary_to_dict():
    body = summarize([record(100), record(75, ["knee_over_toe"])]).to_dict()

    assert body == {
        "frame_count": 2,
        "average_score": 88,
        "total_issues": 1,
        "issue_types": ["knee_over_toe"],
        "overall_rating": "Excellent",
    }
