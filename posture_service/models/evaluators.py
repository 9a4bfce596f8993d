"""
POSTURECOACH Posture Service - Rule Evaluators

Rule-based posture evaluation for squat and desk postures.
Each evaluator first extracts a complete measurement set from the landmarks;
if that fails the frame degrades to a single analysis_error issue. The rule
pass itself runs only on known-good measurements.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from .analysis import PostureAnalysis, PostureType, score_from_issues
from .constants import (
    DESK_FEEDBACK,
    DESK_ISSUE_PENALTY,
    HEAD_FORWARD_TOLERANCE,
    ISSUE_ANALYSIS_ERROR,
    ISSUE_BACK_ANGLE_POOR,
    ISSUE_HEAD_FORWARD,
    ISSUE_KNEE_OVER_TOE,
    ISSUE_NECK_FORWARD,
    ISSUE_SLOUCHING,
    ISSUE_UNEVEN_SHOULDERS,
    KNEE_OVER_TOE_TOLERANCE,
    MAX_NECK_ANGLE,
    MAX_SHOULDER_SLOPE,
    MAX_SQUAT_DEPTH_KNEE_ANGLE,
    MIN_BACK_STRAIGHTNESS,
    MIN_SQUAT_BACK_ANGLE,
    REFERENCE_OFFSET,
    SQUAT_DEPTH_FEEDBACK,
    SQUAT_FEEDBACK,
    SQUAT_ISSUE_PENALTY,
)
from .geometry import calculate_angle
from .landmarks import BodyLandmark as BL
from .landmarks import LandmarkSet, MalformedLandmarksError

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# MEASUREMENTS
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SquatMeasurements:
    left_knee_over_toe: bool
    right_knee_over_toe: bool
    back_angle: float        # shoulder-hip-knee at the hip midpoint
    avg_knee_angle: float    # mean of hip-knee-ankle on both legs


@dataclass(frozen=True)
class DeskMeasurements:
    neck_angle: float        # deviation of ear->shoulder from vertical
    shoulder_slope: float    # |left.y - right.y|
    back_straightness: float
    nose_x: float
    shoulder_mid_x: float


def measure_squat(pose: LandmarkSet) -> SquatMeasurements:
    mid_shoulder = pose.midpoint(BL.LEFT_SHOULDER, BL.RIGHT_SHOULDER)
    mid_hip = pose.midpoint(BL.LEFT_HIP, BL.RIGHT_HIP)
    mid_knee = pose.midpoint(BL.LEFT_KNEE, BL.RIGHT_KNEE)

    left_knee_angle = calculate_angle(pose[BL.LEFT_HIP], pose[BL.LEFT_KNEE], pose[BL.LEFT_ANKLE])
    right_knee_angle = calculate_angle(pose[BL.RIGHT_HIP], pose[BL.RIGHT_KNEE], pose[BL.RIGHT_ANKLE])

    return SquatMeasurements(
        left_knee_over_toe=pose[BL.LEFT_KNEE].x > pose[BL.LEFT_ANKLE].x + KNEE_OVER_TOE_TOLERANCE,
        right_knee_over_toe=pose[BL.RIGHT_KNEE].x > pose[BL.RIGHT_ANKLE].x + KNEE_OVER_TOE_TOLERANCE,
        back_angle=calculate_angle(mid_shoulder, mid_hip, mid_knee),
        avg_knee_angle=(left_knee_angle + right_knee_angle) / 2,
    )


def measure_desk(pose: LandmarkSet) -> DeskMeasurements:
    mid_shoulder = pose.midpoint(BL.LEFT_SHOULDER, BL.RIGHT_SHOULDER)
    mid_hip = pose.midpoint(BL.LEFT_HIP, BL.RIGHT_HIP)
    mid_ear = pose.midpoint(BL.LEFT_EAR, BL.RIGHT_EAR)

    return DeskMeasurements(
        neck_angle=calculate_angle(mid_shoulder, mid_ear, mid_ear.shifted(dy=-REFERENCE_OFFSET)),
        shoulder_slope=abs(pose[BL.LEFT_SHOULDER].y - pose[BL.RIGHT_SHOULDER].y),
        back_straightness=calculate_angle(mid_shoulder, mid_hip, mid_hip.shifted(dy=REFERENCE_OFFSET)),
        nose_x=pose[BL.NOSE].x,
        shoulder_mid_x=mid_shoulder.x,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# EVALUATORS
# ═══════════════════════════════════════════════════════════════════════════════

def _degraded(posture_type: PostureType, feedback: str, penalty: int) -> PostureAnalysis:
    return PostureAnalysis(
        posture_type=posture_type,
        issues=(ISSUE_ANALYSIS_ERROR,),
        feedback=(feedback,),
        score=score_from_issues(1, penalty),
    )


def evaluate_squat(landmarks: Any) -> PostureAnalysis:
    """
    Evaluate squat form for one frame.

    Checks, in order: knee over toe (either leg), back angle, squat depth.
    Depth only adds feedback; it is not an issue and does not affect the score.
    """
    try:
        m = measure_squat(LandmarkSet.parse(landmarks))
    except MalformedLandmarksError as e:
        logger.error(f"Error analyzing squat posture: {e}")
        return _degraded(PostureType.SQUAT, SQUAT_FEEDBACK[ISSUE_ANALYSIS_ERROR], SQUAT_ISSUE_PENALTY)

    issues: List[str] = []
    feedback: List[str] = []

    if m.left_knee_over_toe or m.right_knee_over_toe:
        issues.append(ISSUE_KNEE_OVER_TOE)
        feedback.append(SQUAT_FEEDBACK[ISSUE_KNEE_OVER_TOE])

    if m.back_angle < MIN_SQUAT_BACK_ANGLE:
        issues.append(ISSUE_BACK_ANGLE_POOR)
        feedback.append(SQUAT_FEEDBACK[ISSUE_BACK_ANGLE_POOR])

    if m.avg_knee_angle > MAX_SQUAT_DEPTH_KNEE_ANGLE:
        feedback.append(SQUAT_DEPTH_FEEDBACK)

    return PostureAnalysis(
        posture_type=PostureType.SQUAT,
        issues=tuple(issues),
        feedback=tuple(feedback),
        score=score_from_issues(len(issues), SQUAT_ISSUE_PENALTY),
    )


def evaluate_desk(landmarks: Any) -> PostureAnalysis:
    """
    Evaluate seated desk posture for one frame.

    Checks, in order: neck bend, shoulder levelness, back straightness,
    head position relative to the shoulders.
    """
    try:
        m = measure_desk(LandmarkSet.parse(landmarks))
    except MalformedLandmarksError as e:
        logger.error(f"Error analyzing desk posture: {e}")
        return _degraded(PostureType.DESK, DESK_FEEDBACK[ISSUE_ANALYSIS_ERROR], DESK_ISSUE_PENALTY)

    checks = (
        (ISSUE_NECK_FORWARD, m.neck_angle > MAX_NECK_ANGLE),
        (ISSUE_UNEVEN_SHOULDERS, m.shoulder_slope > MAX_SHOULDER_SLOPE),
        (ISSUE_SLOUCHING, m.back_straightness < MIN_BACK_STRAIGHTNESS),
        (ISSUE_HEAD_FORWARD, m.nose_x > m.shoulder_mid_x + HEAD_FORWARD_TOLERANCE),
    )
    issues = [issue for issue, failed in checks if failed]

    return PostureAnalysis(
        posture_type=PostureType.DESK,
        issues=tuple(issues),
        feedback=tuple(DESK_FEEDBACK[issue] for issue in issues),
        score=score_from_issues(len(issues), DESK_ISSUE_PENALTY),
    )


EVALUATORS: Dict[PostureType, Callable[[Any], PostureAnalysis]] = {
    PostureType.SQUAT: evaluate_squat,
    PostureType.DESK: evaluate_desk,
}


def evaluate_posture(landmarks: Any, posture_type: PostureType) -> PostureAnalysis:
    """Run the evaluator registered for a posture type."""
    return EVALUATORS[posture_type](landmarks)
