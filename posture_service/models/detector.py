"""
POSTURECOACH Posture Service - Pose Detection

Model-agnostic detector interface plus two implementations:
MediaPipe Pose for real frames and a seeded synthetic detector that
produces plausible random landmarks (demo mode and tests).
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List, Optional

import numpy as np

from core.config import settings

from .constants import LANDMARK_COUNT
from .landmarks import Landmark

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetectionResult:
    """Detector output for one frame. When detected is True, landmarks has 33 entries."""
    landmarks: List[Any] = field(default_factory=list)
    detected: bool = False


class PoseDetector(ABC):
    """
    Detector adapter interface.

    Implementations take an RGB image (H, W, 3 uint8) and return a DetectionResult.
    """

    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    def detect(self, rgb: np.ndarray) -> DetectionResult: ...

    @abstractmethod
    def close(self) -> None: ...


class MediaPipePoseDetector(PoseDetector):
    """
    MediaPipe Pose detector returning the full 33-point landmark set.

    Coordinates stay normalized; visibility is passed through.
    Not thread-safe; calls are serialized with a lock.
    """

    def __init__(
        self,
        model_complexity: int = 1,
        min_detection_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5,
    ) -> None:
        try:
            import mediapipe as mp
        except ImportError as e:
            raise RuntimeError(
                "MediaPipe is not installed. Install pose deps with: pip install .[mediapipe]"
            ) from e

        self._pose = mp.solutions.pose.Pose(
            static_image_mode=True,
            model_complexity=int(model_complexity),
            enable_segmentation=False,
            min_detection_confidence=float(min_detection_confidence),
            min_tracking_confidence=float(min_tracking_confidence),
        )
        self._lock = threading.Lock()
        logger.info("✅ MediaPipe pose detector initialized")

    def name(self) -> str:
        return "mediapipe_pose"

    def detect(self, rgb: np.ndarray) -> DetectionResult:
        with self._lock:
            results = self._pose.process(rgb)

        if not results or not results.pose_landmarks:
            return DetectionResult(landmarks=[], detected=False)

        landmarks = [
            Landmark(x=lm.x, y=lm.y, z=lm.z, visibility=lm.visibility)
            for lm in results.pose_landmarks.landmark
        ]
        return DetectionResult(landmarks=landmarks, detected=True)

    def close(self) -> None:
        if self._pose:
            self._pose.close()
            self._pose = None


class SyntheticPoseDetector(PoseDetector):
    """Generates random high-visibility landmarks regardless of the image."""

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = np.random.default_rng(seed)
        self._lock = threading.Lock()

    def name(self) -> str:
        return "synthetic"

    def detect(self, rgb: Any = None) -> DetectionResult:
        with self._lock:
            xs = self._rng.uniform(0.3, 0.7, LANDMARK_COUNT)
            ys = self._rng.uniform(0.2, 0.8, LANDMARK_COUNT)
            zs = self._rng.uniform(0.0, 0.1, LANDMARK_COUNT)
            vis = self._rng.uniform(0.8, 1.0, LANDMARK_COUNT)

        landmarks = [
            Landmark(x=float(x), y=float(y), z=float(z), visibility=float(v))
            for x, y, z, v in zip(xs, ys, zs, vis)
        ]
        return DetectionResult(landmarks=landmarks, detected=True)

    def close(self) -> None:
        pass


DETECTOR_BACKENDS = {
    "mediapipe": lambda: MediaPipePoseDetector(),
    "synthetic": lambda: SyntheticPoseDetector(seed=settings.SYNTHETIC_SEED),
}


def create_pose_detector(backend: str) -> PoseDetector:
    """Build a detector by backend name."""
    factory = DETECTOR_BACKENDS.get(str(backend).strip().lower())
    if factory is None:
        raise ValueError(
            f"Unknown pose detector '{backend}'. Valid detectors: {sorted(DETECTOR_BACKENDS)}"
        )
    return factory()


# ═══════════════════════════════════════════════════════════════════════════════
# MODULE-LEVEL SINGLETON
# ═══════════════════════════════════════════════════════════════════════════════

_detector_instance: Optional[PoseDetector] = None


def get_pose_detector() -> PoseDetector:
    """Get or create the global pose detector selected in settings."""
    global _detector_instance
    if _detector_instance is None:
        _detector_instance = create_pose_detector(settings.POSE_DETECTOR)
        logger.info(f"🧍 Pose detector ready: {_detector_instance.name()}")
    return _detector_instance


def set_pose_detector(detector: Optional[PoseDetector]) -> None:
    """Replace the global detector (None resets to the configured backend)."""
    global _detector_instance
    _detector_instance = detector


def release_pose_detector() -> None:
    """Close and drop the global detector."""
    global _detector_instance
    if _detector_instance is not None:
        _detector_instance.close()
        _detector_instance = None
