"""
POSTURECOACH Posture Service - Frame Orchestrator

Turns one detection result plus a requested posture type into a
FrameEvaluation. Nothing raised below this layer reaches the caller.
"""

import logging
from typing import Any, Optional

from .analysis import FrameEvaluation, PostureType
from .constants import NO_POSE_IN_FRAME
from .detector import DetectionResult, PoseDetector
from .evaluators import evaluate_posture
from .landmarks import landmarks_to_list

logger = logging.getLogger(__name__)


def parse_posture_type(value: Any) -> Optional[PostureType]:
    """Return the matching PostureType, or None if the value is not recognized."""
    try:
        return PostureType(value)
    except ValueError:
        return None


def invalid_posture_type_error(value: Any) -> str:
    return f"Invalid analysis type: {value!r}. Valid types: {PostureType.values()}"


def evaluate_frame(detection: DetectionResult, posture_type: str) -> FrameEvaluation:
    """
    Evaluate one frame.

    Returns success=False (never raises) when no pose was detected, when the
    posture type is not recognized, or when dispatch fails unexpectedly.
    """
    try:
        if not detection.detected:
            return FrameEvaluation(success=False, analysis_type=posture_type, error=NO_POSE_IN_FRAME)

        kind = parse_posture_type(posture_type)
        if kind is None:
            return FrameEvaluation(
                success=False,
                analysis_type=posture_type,
                error=invalid_posture_type_error(posture_type),
            )

        analysis = evaluate_posture(detection.landmarks, kind)
        return FrameEvaluation(
            success=True,
            analysis_type=posture_type,
            landmarks=landmarks_to_list(detection.landmarks),
            analysis=analysis,
        )

    except Exception as e:
        logger.error(f"Error in evaluate_frame: {e}")
        return FrameEvaluation(success=False, analysis_type=posture_type, error=str(e))


def analyze_image(image: Any, posture_type: str, detector: PoseDetector) -> FrameEvaluation:
    """Run the detector on an RGB image, then evaluate the frame."""
    try:
        detection = detector.detect(image)
    except Exception as e:
        logger.error(f"Pose detection failed ({detector.name()}): {e}")
        return FrameEvaluation(success=False, analysis_type=posture_type, error=str(e))

    return evaluate_frame(detection, posture_type)
