"""
Shared fixtures for the POSTURECOACH test suite.

Pose builders place only the landmarks a rule reads; every other landmark
sits at the frame center. Coordinates are normalized, y grows downward.
"""

import os
import tempfile

# Settings are read at import time
os.environ.setdefault("POSE_DETECTOR", "synthetic")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="posturecoach-uploads-"))

import pytest

from posture_service.models import BodyLandmark as BL
from posture_service.models import Landmark, set_pose_detector


def build_pose(points: dict) -> list:
    """33 landmarks at the center, with the given roles moved to (x, y)."""
    pose = [Landmark(x=0.5, y=0.5, z=0.0, visibility=0.9) for _ in range(33)]
    for role, (x, y) in points.items():
        pose[role.value] = Landmark(x=x, y=y, z=0.0, visibility=0.9)
    return pose


# Deep squat, knees behind toes, torso in line with the thighs
SQUAT_GOOD = {
    BL.LEFT_SHOULDER: (0.45, 0.30),
    BL.RIGHT_SHOULDER: (0.55, 0.30),
    BL.LEFT_HIP: (0.45, 0.55),
    BL.RIGHT_HIP: (0.55, 0.55),
    BL.LEFT_KNEE: (0.45, 0.75),
    BL.RIGHT_KNEE: (0.55, 0.75),
    BL.LEFT_ANKLE: (0.65, 0.65),
    BL.RIGHT_ANKLE: (0.75, 0.65),
}

# Standing straight: legs fully extended (knee angle 180)
SQUAT_SHALLOW = {
    **SQUAT_GOOD,
    BL.LEFT_ANKLE: (0.45, 0.95),
    BL.RIGHT_ANKLE: (0.55, 0.95),
}

# Left knee 0.10 past the ankle, back angle ~140 degrees, average knee angle ~115
SQUAT_KNEE_AND_BACK = {
    BL.LEFT_SHOULDER: (0.61, 0.31),
    BL.RIGHT_SHOULDER: (0.71, 0.31),
    BL.LEFT_HIP: (0.45, 0.50),
    BL.RIGHT_HIP: (0.55, 0.50),
    BL.LEFT_KNEE: (0.70, 0.70),
    BL.RIGHT_KNEE: (0.30, 0.70),
    BL.LEFT_ANKLE: (0.60, 0.90),
    BL.RIGHT_ANKLE: (0.30, 0.90),
}

# Shoulders level within 0.01, neck angle ~10, back straightness ~170,
# nose over the shoulder midpoint
DESK_GOOD = {
    BL.NOSE: (0.50, 0.55),
    BL.LEFT_SHOULDER: (0.40, 0.40),
    BL.RIGHT_SHOULDER: (0.60, 0.41),
    BL.LEFT_EAR: (0.4153, 0.602),
    BL.RIGHT_EAR: (0.5153, 0.602),
    BL.LEFT_HIP: (0.3979, 0.7004),
    BL.RIGHT_HIP: (0.4979, 0.7004),
}

# Every desk rule fails
DESK_POOR = {
    BL.NOSE: (0.60, 0.30),
    BL.LEFT_SHOULDER: (0.40, 0.35),
    BL.RIGHT_SHOULDER: (0.60, 0.45),
    BL.LEFT_EAR: (0.45, 0.25),
    BL.RIGHT_EAR: (0.55, 0.25),
    BL.LEFT_HIP: (0.25, 0.60),
    BL.RIGHT_HIP: (0.35, 0.60),
}


@pytest.fixture
def squat_good():
    return build_pose(SQUAT_GOOD)


@pytest.fixture
def squat_shallow():
    return build_pose(SQUAT_SHALLOW)


@pytest.fixture
def squat_knee_and_back():
    return build_pose(SQUAT_KNEE_AND_BACK)


@pytest.fixture
def desk_good():
    return build_pose(DESK_GOOD)


@pytest.fixture
def desk_poor():
    return build_pose(DESK_POOR)


@pytest.fixture
def use_detector():
    """Install a detector as the global one for the duration of a test."""
    def _install(detector):
        set_pose_detector(detector)
        return detector

    yield _install
    set_pose_detector(None)


@pytest.fixture
def make_pose():
    """Factory: make_pose({BodyLandmark.NOSE: (x, y), ...}) -> 33 landmarks."""
    return build_pose
