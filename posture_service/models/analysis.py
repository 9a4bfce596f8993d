"""
POSTURECOACH Posture Service - Analysis Results

Result types shared by the evaluators, the orchestrator and the session
aggregator.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .constants import (
    EXCELLENT_MIN_SCORE,
    FAIR_MIN_SCORE,
    GOOD_MIN_SCORE,
    MAX_SCORE,
)


class PostureType(Enum):
    """Supported posture classes."""
    SQUAT = "squat"
    DESK = "desk"

    @classmethod
    def values(cls) -> list:
        return [p.value for p in cls]


class OverallRating(Enum):
    """Qualitative rating of a whole session."""
    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"

    @classmethod
    def from_score(cls, score: float) -> "OverallRating":
        """Step function over the average score; lower bounds are inclusive."""
        if score >= EXCELLENT_MIN_SCORE:
            return cls.EXCELLENT
        elif score >= GOOD_MIN_SCORE:
            return cls.GOOD
        elif score >= FAIR_MIN_SCORE:
            return cls.FAIR
        return cls.POOR


def now_ms() -> int:
    return int(time.time() * 1000)


def score_from_issues(issue_count: int, penalty: int) -> int:
    """Score depends on the issue count only."""
    return max(0, MAX_SCORE - penalty * issue_count)


@dataclass(frozen=True)
class PostureAnalysis:
    """Evaluation of one frame for one posture type."""
    posture_type: PostureType
    issues: Tuple[str, ...]
    feedback: Tuple[str, ...]
    score: int
    timestamp: int = field(default_factory=now_ms)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "posture_type": self.posture_type.value,
            "issues": list(self.issues),
            "feedback": list(self.feedback),
            "score": self.score,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class FrameEvaluation:
    """Outcome of evaluating one detection result; failures are data, not exceptions."""
    success: bool
    analysis_type: str
    landmarks: Optional[list] = None
    analysis: Optional[PostureAnalysis] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "success": self.success,
            "analysis_type": self.analysis_type,
        }
        if self.landmarks is not None:
            out["landmarks"] = self.landmarks
        if self.analysis is not None:
            out["analysis"] = self.analysis.to_dict()
        if self.error is not None:
            out["error"] = self.error
        return out
