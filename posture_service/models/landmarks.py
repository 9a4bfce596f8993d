"""
POSTURECOACH Posture Service - Landmark Model

Role-indexed view over the 33-point MediaPipe Pose body model.
LandmarkSet.parse() is the only place raw detector output is validated;
everything downstream reads landmarks by BodyLandmark role.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Tuple

from .constants import LANDMARK_COUNT


class MalformedLandmarksError(ValueError):
    """Raised when detector output cannot be read as a 33-point landmark set."""


# ═══════════════════════════════════════════════════════════════════════════════
# ENUMS AND DATA CLASSES
# ═══════════════════════════════════════════════════════════════════════════════

class BodyLandmark(Enum):
    """Body landmark roles, valued by their index in the detector output."""
    NOSE = 0
    LEFT_EYE_INNER = 1
    LEFT_EYE = 2
    LEFT_EYE_OUTER = 3
    RIGHT_EYE_INNER = 4
    RIGHT_EYE = 5
    RIGHT_EYE_OUTER = 6
    LEFT_EAR = 7
    RIGHT_EAR = 8
    MOUTH_LEFT = 9
    MOUTH_RIGHT = 10
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16
    LEFT_PINKY = 17
    RIGHT_PINKY = 18
    LEFT_INDEX = 19
    RIGHT_INDEX = 20
    LEFT_THUMB = 21
    RIGHT_THUMB = 22
    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26
    LEFT_ANKLE = 27
    RIGHT_ANKLE = 28
    LEFT_HEEL = 29
    RIGHT_HEEL = 30
    LEFT_FOOT_INDEX = 31
    RIGHT_FOOT_INDEX = 32


@dataclass(frozen=True)
class Landmark:
    """A single pose landmark in normalized image coordinates."""
    x: float
    y: float
    z: float = 0.0
    visibility: float = 0.0

    def shifted(self, dx: float = 0.0, dy: float = 0.0) -> "Landmark":
        """Synthetic point offset from this one (used for reference directions)."""
        return Landmark(x=self.x + dx, y=self.y + dy, z=self.z, visibility=self.visibility)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "z": self.z, "visibility": self.visibility}


def _read_field(raw: Any, name: str, required: bool) -> float:
    if isinstance(raw, dict):
        value = raw.get(name)
    else:
        value = getattr(raw, name, None)

    if value is None:
        if required:
            raise MalformedLandmarksError(f"landmark is missing '{name}'")
        return 0.0

    if isinstance(value, bool):
        raise MalformedLandmarksError(f"landmark '{name}' is not numeric")

    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError) as e:
        raise MalformedLandmarksError(f"landmark '{name}' is not numeric") from e

    if required and not math.isfinite(number):
        raise MalformedLandmarksError(f"landmark '{name}' is not finite")
    return number


def to_landmark(raw: Any) -> Landmark:
    """Convert a dict, Landmark or attribute object (e.g. MediaPipe) to a Landmark."""
    if isinstance(raw, Landmark):
        return raw
    if raw is None:
        raise MalformedLandmarksError("landmark entry is empty")
    return Landmark(
        x=_read_field(raw, "x", required=True),
        y=_read_field(raw, "y", required=True),
        z=_read_field(raw, "z", required=False),
        visibility=_read_field(raw, "visibility", required=False),
    )


class LandmarkSet:
    """
    Immutable, role-indexed set of exactly 33 landmarks.

    Usage:
        pose = LandmarkSet.parse(detection.landmarks)
        nose = pose[BodyLandmark.NOSE]
    """

    __slots__ = ("_points",)

    def __init__(self, points: Tuple[Landmark, ...]):
        self._points = points

    @classmethod
    def parse(cls, raw: Any) -> "LandmarkSet":
        """
        Validate raw detector output.

        Raises:
            MalformedLandmarksError: wrong length, empty entry or non-numeric coordinate
        """
        if isinstance(raw, LandmarkSet):
            return raw
        if raw is None or isinstance(raw, (str, bytes, dict)):
            raise MalformedLandmarksError("landmarks must be a sequence")
        try:
            entries = list(raw)
        except TypeError as e:
            raise MalformedLandmarksError("landmarks must be a sequence") from e

        if len(entries) != LANDMARK_COUNT:
            raise MalformedLandmarksError(
                f"expected {LANDMARK_COUNT} landmarks, got {len(entries)}"
            )

        points = []
        for idx, entry in enumerate(entries):
            try:
                points.append(to_landmark(entry))
            except MalformedLandmarksError as e:
                raise MalformedLandmarksError(
                    f"{BodyLandmark(idx).name.lower()}: {e}"
                ) from e
        return cls(tuple(points))

    def __getitem__(self, role: BodyLandmark) -> Landmark:
        return self._points[role.value]

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[Landmark]:
        return iter(self._points)

    def midpoint(self, left: BodyLandmark, right: BodyLandmark) -> Landmark:
        """Synthetic point halfway between two landmarks."""
        a, b = self[left], self[right]
        return Landmark(x=(a.x + b.x) / 2, y=(a.y + b.y) / 2)

    def to_list(self) -> list:
        return [p.to_dict() for p in self._points]


def landmarks_to_list(landmarks: Any) -> list:
    """
    JSON-serializable copy of raw or parsed landmarks (best-effort).

    Anything that is not a sequence of landmarks comes back as [].
    """
    if isinstance(landmarks, LandmarkSet):
        return landmarks.to_list()
    if landmarks is None or isinstance(landmarks, (str, bytes, dict)):
        return []
    try:
        entries = list(landmarks)
    except TypeError:
        return []

    out = []
    for lm in entries:
        if isinstance(lm, Landmark):
            out.append(lm.to_dict())
        elif isinstance(lm, dict):
            out.append(dict(lm))
        else:
            out.append({
                "x": getattr(lm, "x", None),
                "y": getattr(lm, "y", None),
                "z": getattr(lm, "z", None),
                "visibility": getattr(lm, "visibility", None),
            })
    return out
