"""
Central configuration for seed-planning tunables and shared constants.

Values may be overridden through ``JSP_*`` environment variables, read once at
import time.
"""

from __future__ import annotations

import logging
import math
import os

logger = logging.getLogger(__name__)

# Profile lookup
DEFAULT_PROFILE_KEY: str = "DEFAULT"
PLANNER_NAME: str = os.getenv("JSP_PLANNER_NAME", "SIMPLE_PLANNER")

# Longest valid segment bounds for the default LVS profile
STATE_LONGEST_VALID_SEGMENT_LENGTH: float = float(
    os.getenv("JSP_STATE_LVS", str(5.0 * math.pi / 180.0))
)  # rad
TRANSLATION_LONGEST_VALID_SEGMENT_LENGTH: float = float(
    os.getenv("JSP_TRANSLATION_LVS", "0.1")
)  # m
ROTATION_LONGEST_VALID_SEGMENT_LENGTH: float = float(
    os.getenv("JSP_ROTATION_LVS", str(5.0 * math.pi / 180.0))
)  # rad
MIN_STEPS: int = int(os.getenv("JSP_MIN_STEPS", "1"))

# Fixed-size profile defaults
FIXED_FREESPACE_STEPS: int = int(os.getenv("JSP_FIXED_FREESPACE_STEPS", "10"))
FIXED_LINEAR_STEPS: int = int(os.getenv("JSP_FIXED_LINEAR_STEPS", "10"))

# Damped least squares IK used by the chain kinematics gateway
IK_MAX_ITERATIONS: int = int(os.getenv("JSP_IK_MAX_ITERATIONS", "100"))
IK_TOLERANCE: float = float(os.getenv("JSP_IK_TOLERANCE", "1e-6"))
IK_DAMPING: float = float(os.getenv("JSP_IK_DAMPING", "1e-4"))

if MIN_STEPS < 1:
    logger.warning("JSP_MIN_STEPS=%d is below 1, using 1", MIN_STEPS)
    MIN_STEPS = 1
