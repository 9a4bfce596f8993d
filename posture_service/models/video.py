"""
POSTURECOACH Posture Service - Video Analysis

Samples frames from a video, evaluates each one and summarizes the session.
Frame evaluations are independent, so they may fan out over a worker pool;
results are re-assembled in frame order.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

import cv2
import numpy as np

from core.config import settings

from .constants import NO_POSE_IN_VIDEO
from .detector import PoseDetector, get_pose_detector
from .orchestrator import analyze_image, invalid_posture_type_error, parse_posture_type
from .session import FrameRecord, SessionSummary, summarize

logger = logging.getLogger(__name__)

# (source frame index, timestamp in ms, RGB image)
VideoFrame = Tuple[int, float, np.ndarray]


@dataclass(frozen=True)
class VideoAnalysis:
    """Result of analyzing a whole video or frame sequence."""
    success: bool
    analysis_type: str
    frame_count: int = 0
    summary: Optional[SessionSummary] = None
    frames: List[FrameRecord] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        if not self.success:
            return {"success": False, "error": self.error, "analysis_type": self.analysis_type}
        return {
            "success": True,
            "frame_count": self.frame_count,
            "summary": self.summary.to_dict(),
            "frames": [f.to_dict() for f in self.frames],
            "analysis_type": self.analysis_type,
        }


def sample_indices(total_frames: int, max_frames: int) -> List[int]:
    """Uniformly spaced frame indices, at most max_frames of them."""
    if total_frames <= 0 or max_frames <= 0:
        return []
    if total_frames <= max_frames:
        return list(range(total_frames))
    return np.linspace(0, total_frames - 1, max_frames, dtype=int).tolist()


def _count_frames(video_path: str) -> int:
    """Count frames by walking the stream (grab() skips decoding)."""
    cap = cv2.VideoCapture(str(video_path))
    count = 0
    try:
        while cap.grab():
            count += 1
    finally:
        cap.release()
    return count


def read_video_frames(video_path: str, max_frames: int = None) -> List[VideoFrame]:
    """
    Load up to max_frames RGB frames from a video file.

    Containers that do not report a frame count (often webm) are counted by
    walking the stream, then read sequentially instead of by seeking.

    Args:
        video_path: Path to the video file
        max_frames: Number of frames to sample (default: settings.VIDEO_SAMPLE_FRAMES)

    Raises:
        ValueError: the file cannot be opened as a video
    """
    max_frames = max_frames or settings.VIDEO_SAMPLE_FRAMES

    cap = cv2.VideoCapture(str(video_path))
    if not cap.isOpened():
        raise ValueError(f"Cannot open video: {video_path}")

    try:
        total_frames = int(cap.get(cv2.CAP_PROP_FRAME_COUNT))
        fps = cap.get(cv2.CAP_PROP_FPS) or settings.VIDEO_DEFAULT_FPS
        seekable = total_frames > 0
        if not seekable:
            total_frames = _count_frames(video_path)
            logger.debug(f"No frame count in container, counted {total_frames} frames")

        indices = sample_indices(total_frames, max_frames)
        frames: List[VideoFrame] = []

        if seekable:
            for idx in indices:
                cap.set(cv2.CAP_PROP_POS_FRAMES, idx)
                ret, frame = cap.read()
                if ret:
                    frames.append((idx, idx / fps * 1000, cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)))
        else:
            wanted = set(indices)
            for idx in range(indices[-1] + 1 if indices else 0):
                if not cap.grab():
                    break
                if idx not in wanted:
                    continue
                ret, frame = cap.retrieve()
                if ret:
                    frames.append((idx, idx / fps * 1000, cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)))
    finally:
        cap.release()

    logger.debug(f"Sampled {len(frames)}/{total_frames} frames from {video_path} ({fps:.1f} fps)")
    return frames


def analyze_frames(
    frames: Iterable[VideoFrame],
    posture_type: str,
    detector: PoseDetector,
    executor=None,
) -> VideoAnalysis:
    """
    Evaluate an ordered frame sequence and summarize it.

    Frames where no pose is found are skipped. executor may be anything with
    an order-preserving map() (WorkerPool, ThreadPoolExecutor).
    """
    if parse_posture_type(posture_type) is None:
        return VideoAnalysis(
            success=False,
            analysis_type=posture_type,
            error=invalid_posture_type_error(posture_type),
        )

    frames = list(frames)

    def run(frame: VideoFrame):
        _, _, image = frame
        return analyze_image(image, posture_type, detector)

    evaluations = list(executor.map(run, frames)) if executor is not None else [run(f) for f in frames]

    records = [
        FrameRecord(frame_number=number, timestamp=timestamp, analysis=evaluation.analysis)
        for number, ((_, timestamp, _), evaluation) in enumerate(zip(frames, evaluations))
        if evaluation.success
    ]

    if not records:
        logger.warning(f"No pose detected in any of {len(frames)} frames")
        return VideoAnalysis(success=False, analysis_type=posture_type, error=NO_POSE_IN_VIDEO)

    return VideoAnalysis(
        success=True,
        analysis_type=posture_type,
        frame_count=len(records),
        summary=summarize(records),
        frames=records,
    )


def analyze_video(
    video_path: str,
    posture_type: str,
    detector: Optional[PoseDetector] = None,
    executor=None,
    max_frames: int = None,
) -> VideoAnalysis:
    """Sample a video file and analyze its frames for one posture type."""
    if parse_posture_type(posture_type) is None:
        return VideoAnalysis(
            success=False,
            analysis_type=posture_type,
            error=invalid_posture_type_error(posture_type),
        )

    frames = read_video_frames(video_path, max_frames)
    logger.info(f"🎬 Analyzing {len(frames)} frames of {video_path} for {posture_type} posture")
    return analyze_frames(frames, posture_type, detector or get_pose_detector(), executor)
