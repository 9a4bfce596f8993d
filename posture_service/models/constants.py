"""
POSTURECOACH Posture Service - Domain Constants

Fixed thresholds shared by the rule evaluators, the session aggregator
and their tests. Coordinates are normalized image space (y grows downward).
"""

# ═══════════════════════════════════════════════════════════════════════════════
# LANDMARK MODEL
# ═══════════════════════════════════════════════════════════════════════════════

LANDMARK_COUNT = 33

# Length of the synthetic vertical reference ray used by the desk rules
REFERENCE_OFFSET = 0.1


# ═══════════════════════════════════════════════════════════════════════════════
# ISSUE TAGS
# ═══════════════════════════════════════════════════════════════════════════════

ISSUE_KNEE_OVER_TOE = "knee_over_toe"
ISSUE_BACK_ANGLE_POOR = "back_angle_poor"
ISSUE_NECK_FORWARD = "neck_forward"
ISSUE_UNEVEN_SHOULDERS = "uneven_shoulders"
ISSUE_SLOUCHING = "slouching"
ISSUE_HEAD_FORWARD = "head_forward"
ISSUE_ANALYSIS_ERROR = "analysis_error"


# ═══════════════════════════════════════════════════════════════════════════════
# SQUAT RULES
# ═══════════════════════════════════════════════════════════════════════════════

KNEE_OVER_TOE_TOLERANCE = 0.05   # 5% of frame width
MIN_SQUAT_BACK_ANGLE = 150.0     # degrees, shoulder-hip-knee
MAX_SQUAT_DEPTH_KNEE_ANGLE = 120.0
SQUAT_ISSUE_PENALTY = 25

SQUAT_FEEDBACK = {
    ISSUE_KNEE_OVER_TOE: "Keep your knees behind your toes during the squat",
    ISSUE_BACK_ANGLE_POOR: "Keep your back straighter - maintain a more upright torso",
    ISSUE_ANALYSIS_ERROR: "Unable to analyze posture - ensure full body is visible",
}
SQUAT_DEPTH_FEEDBACK = "Try to squat deeper for better form"


# ═══════════════════════════════════════════════════════════════════════════════
# DESK RULES
# ═══════════════════════════════════════════════════════════════════════════════

MAX_NECK_ANGLE = 30.0            # degrees from vertical
MAX_SHOULDER_SLOPE = 0.05
MIN_BACK_STRAIGHTNESS = 160.0
HEAD_FORWARD_TOLERANCE = 0.05
DESK_ISSUE_PENALTY = 20

DESK_FEEDBACK = {
    ISSUE_NECK_FORWARD: "Pull your head back and align your neck with your spine",
    ISSUE_UNEVEN_SHOULDERS: "Keep your shoulders level and relaxed",
    ISSUE_SLOUCHING: "Sit up straight and engage your core muscles",
    ISSUE_HEAD_FORWARD: "Keep your head directly over your shoulders",
    ISSUE_ANALYSIS_ERROR: "Unable to analyze posture - ensure upper body is clearly visible",
}


# ═══════════════════════════════════════════════════════════════════════════════
# SCORING & RATING
# ═══════════════════════════════════════════════════════════════════════════════

MAX_SCORE = 100

# Lower bounds (inclusive) of the session rating bands
EXCELLENT_MIN_SCORE = 80
GOOD_MIN_SCORE = 60
FAIR_MIN_SCORE = 40


# ═══════════════════════════════════════════════════════════════════════════════
# ERROR MESSAGES
# ═══════════════════════════════════════════════════════════════════════════════

NO_POSE_IN_FRAME = "No pose detected in frame"
NO_POSE_IN_VIDEO = "No pose detected in video"
