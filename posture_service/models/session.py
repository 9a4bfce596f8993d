"""
POSTURECOACH Posture Service - Session Aggregator

Rolls per-frame analyses of a session (video or live stream) into a summary.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Sequence, Tuple

from .analysis import OverallRating, PostureAnalysis


class EmptySessionError(ValueError):
    """Raised when summarizing a session with no evaluated frames."""


@dataclass(frozen=True)
class FrameRecord:
    """A successfully evaluated frame within a session."""
    frame_number: int
    timestamp: float  # ms from the start of the session
    analysis: PostureAnalysis

    def to_dict(self) -> Dict[str, Any]:
        return {
            "frame_number": self.frame_number,
            "timestamp": self.timestamp,
            "analysis": self.analysis.to_dict(),
        }


@dataclass(frozen=True)
class SessionSummary:
    """
    Summary statistics of a session.

    average_score is the mean frame score rounded half-up. overall_rating is
    banded on the unrounded mean, so scores [80, 79] give average_score 80
    and rating Good.
    """
    frame_count: int
    average_score: int
    total_issues: int
    issue_types: Tuple[str, ...]
    overall_rating: OverallRating

    def to_dict(self) -> Dict[str, Any]:
        return {
            "frame_count": self.frame_count,
            "average_score": self.average_score,
            "total_issues": self.total_issues,
            "issue_types": list(self.issue_types),
            "overall_rating": self.overall_rating.value,
        }


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def summarize(frames: Sequence[FrameRecord]) -> SessionSummary:
    """
    Summarize a session.

    The statistics do not depend on frame order. The rating is taken from the
    unrounded mean score.

    Raises:
        EmptySessionError: no frames to summarize
    """
    if not frames:
        raise EmptySessionError("Cannot summarize a session with no analyzed frames")

    scores = [f.analysis.score for f in frames]
    mean_score = sum(scores) / len(scores)

    # dict preserves first-seen order
    issue_types = dict.fromkeys(issue for f in frames for issue in f.analysis.issues)

    return SessionSummary(
        frame_count=len(frames),
        average_score=round_half_up(mean_score),
        total_issues=sum(len(f.analysis.issues) for f in frames),
        issue_types=tuple(issue_types),
        overall_rating=OverallRating.from_score(mean_score),
    )
