"""
POSTURECOACH Posture Service Models

Landmark geometry, rule-based squat/desk evaluation, frame orchestration
and session aggregation.
"""

from .landmarks import (
    BodyLandmark,
    Landmark,
    LandmarkSet,
    MalformedLandmarksError,
)

from .geometry import calculate_angle, calculate_distance

from .analysis import (
    FrameEvaluation,
    OverallRating,
    PostureAnalysis,
    PostureType,
)

from .evaluators import (
    EVALUATORS,
    evaluate_desk,
    evaluate_posture,
    evaluate_squat,
)

from .detector import (
    DetectionResult,
    MediaPipePoseDetector,
    PoseDetector,
    SyntheticPoseDetector,
    create_pose_detector,
    get_pose_detector,
    release_pose_detector,
    set_pose_detector,
)

from .orchestrator import analyze_image, evaluate_frame

from .session import (
    EmptySessionError,
    FrameRecord,
    SessionSummary,
    summarize,
)

from .video import (
    VideoAnalysis,
    analyze_frames,
    analyze_video,
    read_video_frames,
)

__all__ = [
    # Landmarks & geometry
    "BodyLandmark",
    "Landmark",
    "LandmarkSet",
    "MalformedLandmarksError",
    "calculate_angle",
    "calculate_distance",
    # Evaluation
    "FrameEvaluation",
    "OverallRating",
    "PostureAnalysis",
    "PostureType",
    "EVALUATORS",
    "evaluate_desk",
    "evaluate_posture",
    "evaluate_squat",
    "analyze_image",
    "evaluate_frame",
    # Detection
    "DetectionResult",
    "MediaPipePoseDetector",
    "PoseDetector",
    "SyntheticPoseDetector",
    "create_pose_detector",
    "get_pose_detector",
    "release_pose_detector",
    "set_pose_detector",
    # Sessions
    "EmptySessionError",
    "FrameRecord",
    "SessionSummary",
    "summarize",
    "VideoAnalysis",
    "analyze_frames",
    "analyze_video",
    "read_video_frames",
]
