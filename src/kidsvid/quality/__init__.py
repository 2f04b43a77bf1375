"""Quality gate for generated episode scripts."""

from ..config import PASSING_THRESHOLD
from .scorer import check_anti_brain_rot_rules, is_duration_appropriate, score_content

__all__ = [
    "PASSING_THRESHOLD",
    "score_content",
    "check_anti_brain_rot_rules",
    "is_duration_appropriate",
]
