"""Content quality gate for generated episode scripts.

A script passes only when both educational value and engagement potential
reach ``PASSING_THRESHOLD`` and no anti-brain-rot rule is violated. The
feedback list explains every deduction so a generator can retry with it.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Tuple, Union

from ..config import (
    EXCLAMATION_DENSITY_LIMIT,
    INTERACTIVE_CHECK_MIN_SCRIPT_LENGTH,
    MIN_OBJECTIVE_LENGTH,
    PASSING_THRESHOLD,
    TEACHING_CHECK_MIN_DURATION,
)
from ..models.content import (
    AgeBracket,
    EngagementHook,
    EpisodeStructure,
    QualityScore,
    ScoreableContent,
)

logger = logging.getLogger(__name__)

MAX_SCORE = 10
RULE_PREFIX = "[ANTI-BRAIN-ROT]"

CRITICAL_HOOKS = (EngagementHook.CALL_RESPONSE, EngagementHook.REWARD_LOOP)

# Inclusive (min, max) seconds per age bracket
AGE_DURATION_WINDOWS: Dict[AgeBracket, Tuple[int, int]] = {
    AgeBracket.TODDLER: (60, 180),
    AgeBracket.PRESCHOOL: (120, 300),
    AgeBracket.EARLY_SCHOOL: (120, 420),
}
DEFAULT_DURATION_WINDOW = (60, 420)

_EDU_MARKERS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"let'?s\s+(learn|count|find|discover|explore|practice|try)",
        r"can you\s+(count|name|find|spot|guess|tell|show|help)",
        r"do you (know|remember|see)",
        r"that'?s (right|correct|amazing|wonderful|great)",
        r"(one|two|three|four|five|six|seven|eight|nine|ten|1|2|3|4|5|6|7|8|9|10)",
        r"(red|blue|green|yellow|purple|orange|pink|white|black|brown)",
        r"(circle|square|triangle|rectangle|star|diamond|oval|hexagon)",
        r"\b[A-Z]\b.*\b(is for|for|says)\b",
        r"(bigger|smaller|taller|shorter|more|less|equal|same|different)",
        r"(first|second|third|next|then|after|before|finally)",
    )
]

_INTERACTIVE_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"can you",
        r"let'?s\s+(count|try|find|look|sing|say|clap)",
        r"your turn",
        r"try it",
        r"say it with me",
        r"repeat after",
        r"show me",
    )
]

_RESOLUTION_LEARNING = re.compile(
    r"learn|discover|remember|found out|now (we|you) know", re.IGNORECASE,
)
_DIGIT_RE = re.compile(r"[0-9]")


def score_content(content: ScoreableContent) -> QualityScore:
    """Score a script on both axes and run the anti-brain-rot checklist."""
    feedback: List[str] = []

    educational_value = _score_educational(content, feedback)
    engagement_potential = _score_engagement(content, feedback)

    violations = check_anti_brain_rot_rules(content)
    feedback.extend(violations)

    passed = (
        educational_value >= PASSING_THRESHOLD
        and engagement_potential >= PASSING_THRESHOLD
        and not violations
    )

    if not passed:
        if educational_value < PASSING_THRESHOLD:
            feedback.append(
                f"Educational value ({educational_value}/{MAX_SCORE}) below threshold of "
                f"{PASSING_THRESHOLD}. Add clearer learning objectives."
            )
        if engagement_potential < PASSING_THRESHOLD:
            feedback.append(
                f"Engagement potential ({engagement_potential}/{MAX_SCORE}) below threshold of "
                f"{PASSING_THRESHOLD}. Add more hooks and interactive moments."
            )

    logger.debug(
        "Scored %r: educational=%d engagement=%d passed=%s (%d feedback items)",
        content.title, educational_value, engagement_potential, passed, len(feedback),
    )
    return QualityScore(
        educational_value=educational_value,
        engagement_potential=engagement_potential,
        passed=passed,
        feedback=feedback,
    )


def check_anti_brain_rot_rules(content: ScoreableContent) -> List[str]:
    """Return one labelled message per violated rule; empty means all clear.

    Rules:
    1. At least one learning takeaway.
    2. A specific educational objective.
    3. Interactive moments in the script, not passive watching.
    4. No sensory overload (exclamation mark density).
    5. The teaching section outlasts the wrapper segments combined.
    6. Age-appropriate duration.
    """
    violations: List[str] = []

    if not content.learning_takeaways:
        violations.append(
            f"{RULE_PREFIX} No learning takeaway: every video must teach something"
        )

    if len(content.educational_objective or "") < MIN_OBJECTIVE_LENGTH:
        violations.append(f"{RULE_PREFIX} Educational objective is too vague or missing")

    script = content.script or ""
    interactive = sum(1 for p in _INTERACTIVE_PATTERNS if p.search(script))
    if interactive == 0 and len(script) > INTERACTIVE_CHECK_MIN_SCRIPT_LENGTH:
        violations.append(
            f"{RULE_PREFIX} Script has no interactive moments; kids must participate, not just watch"
        )

    density = script.count("!") / max(len(script), 1)
    if density > EXCLAMATION_DENSITY_LIMIT:
        violations.append(
            f"{RULE_PREFIX} Excessive exclamation marks suggest sensory overload over substance"
        )

    structure = content.episode_structure
    wrapper = (
        structure.hook.duration
        + structure.problem.duration
        + structure.resolution.duration
        + structure.next_preview.duration
    )
    if structure.exploration.duration < wrapper and content.estimated_duration > TEACHING_CHECK_MIN_DURATION:
        violations.append(
            f"{RULE_PREFIX} Teaching section must be longer than combined intro/outro sections"
        )

    if not is_duration_appropriate(content.age_bracket, content.estimated_duration):
        violations.append(
            f"{RULE_PREFIX} Duration {_format_seconds(content.estimated_duration)}s not "
            f"appropriate for age {_bracket_label(content.age_bracket)}"
        )

    return violations


def is_duration_appropriate(age_bracket: Union[AgeBracket, str], duration: float) -> bool:
    """Whether ``duration`` seconds falls inside the bracket's window."""
    try:
        low, high = AGE_DURATION_WINDOWS[AgeBracket(age_bracket)]
    except ValueError:
        low, high = DEFAULT_DURATION_WINDOW
    return low <= duration <= high


def _score_educational(content: ScoreableContent, feedback: List[str]) -> int:
    score = 0

    # Clear objective (0-2)
    if content.educational_objective and len(content.educational_objective) > MIN_OBJECTIVE_LENGTH:
        score += 2
    else:
        feedback.append("Educational objective is missing or too vague")

    # Takeaways (0-2)
    takeaways = len(content.learning_takeaways)
    if takeaways >= 2:
        score += 2
    elif takeaways >= 1:
        score += 1
    else:
        feedback.append("No learning takeaways defined")

    # Educational markers in the script (0-3)
    matches = sum(1 for marker in _EDU_MARKERS if marker.search(content.script or ""))
    score += min(matches // 2, 3)
    if matches < 2:
        feedback.append("Script lacks educational content markers (counting, colors, shapes, etc.)")

    # Age-appropriate duration (0-1)
    if is_duration_appropriate(content.age_bracket, content.estimated_duration):
        score += 1
    else:
        feedback.append(
            f"Duration {_format_seconds(content.estimated_duration)}s may not be appropriate "
            f"for age {_bracket_label(content.age_bracket)}"
        )

    # Structure serves learning (0-2)
    score += _score_structure_educational(content.episode_structure, feedback)

    return min(score, MAX_SCORE)


def _score_structure_educational(structure: EpisodeStructure, feedback: List[str]) -> int:
    score = 0

    if len(structure.exploration.description or "") > 20:
        score += 1
    else:
        feedback.append("Exploration/teaching section is too brief")

    if _RESOLUTION_LEARNING.search(structure.resolution.description or ""):
        score += 1
    else:
        feedback.append("Resolution should reference what was learned")

    return score


def _score_engagement(content: ScoreableContent, feedback: List[str]) -> int:
    score = 0

    # Hook count (0-3)
    hook_count = len(content.engagement_hooks)
    if hook_count >= 4:
        score += 3
    elif hook_count >= 3:
        score += 2
    elif hook_count >= 1:
        score += 1
    else:
        feedback.append("No engagement hooks defined")

    # Hook variety (0-2)
    # unrecognised hook names still count toward variety
    unique_hooks = {_hook_name(h) for h in content.engagement_hooks}
    if len(unique_hooks) >= 4:
        score += 2
    elif len(unique_hooks) >= 2:
        score += 1

    # Critical hooks, one point each (0-2)
    critical = sum(1 for h in CRITICAL_HOOKS if h.value in unique_hooks)
    score += critical
    if critical == 0:
        feedback.append("Missing critical engagement hooks: call_response and reward_loop")

    # Structure completeness (0-2)
    filled = sum(
        1 for segment in content.episode_structure.segments()
        if segment.description and len(segment.description) > 5
    )
    if filled >= 5:
        score += 2
    elif filled >= 3:
        score += 1
    else:
        feedback.append("Episode structure is incomplete; fill all sections")

    # Title hook (0-1)
    title = content.title or ""
    if "?" in title or "!" in title or _DIGIT_RE.search(title):
        score += 1

    return min(score, MAX_SCORE)


def _hook_name(hook: Union[EngagementHook, str]) -> str:
    return hook.value if isinstance(hook, EngagementHook) else str(hook)


def _bracket_label(age_bracket: Union[AgeBracket, str]) -> str:
    return age_bracket.value if isinstance(age_bracket, AgeBracket) else str(age_bracket)


def _format_seconds(seconds: float) -> str:
    return str(int(seconds)) if float(seconds).is_integer() else str(seconds)
