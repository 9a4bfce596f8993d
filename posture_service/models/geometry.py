"""
POSTURECOACH Posture Service - Geometry

Angle and distance primitives over 2D landmark coordinates (z is ignored).
"""

import numpy as np


def calculate_angle(a, b, c) -> float:
    """
    Calculate angle at point b formed by points a-b-c.

    Uses the difference of the two atan2 bearings b->c and b->a, reflected
    into [0, 180]. Symmetric in a and c. Coincident points do not raise.

    Args:
        a, b, c: objects with x/y attributes (Landmark)

    Returns:
        Angle in degrees (0-180)
    """
    radians = np.arctan2(c.y - b.y, c.x - b.x) - np.arctan2(a.y - b.y, a.x - b.x)
    angle = abs(float(np.degrees(radians)))

    if angle > 180.0:
        angle = 360.0 - angle

    return angle


def calculate_distance(p, q) -> float:
    """Euclidean distance between two points in the image plane."""
    return float(np.hypot(q.x - p.x, q.y - p.y))
