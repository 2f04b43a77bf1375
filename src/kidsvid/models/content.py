"""Data models for generated episode scripts and their quality scores."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple


class EngagementHook(str, Enum):
    """Named interaction techniques a script can use."""

    MYSTERY_REVEAL = "mystery_reveal"
    CALL_RESPONSE = "call_response"
    REWARD_LOOP = "reward_loop"
    CLIFFHANGER = "cliffhanger"
    CHARACTER_GROWTH = "character_growth"
    EASTER_EGG = "easter_egg"
    PATTERN_INTERRUPT = "pattern_interrupt"
    DIRECT_ADDRESS = "direct_address"

    def __str__(self) -> str:
        return self.value


class AgeBracket(str, Enum):
    """Target audience age range."""

    TODDLER = "2-4"
    PRESCHOOL = "4-6"
    EARLY_SCHOOL = "6-8"

    def __str__(self) -> str:
        return self.value


@dataclass
class Segment:
    """One named part of an episode."""

    duration: float  # seconds
    description: str = ""


@dataclass
class EpisodeStructure:
    """The five-part episode template."""

    hook: Segment
    problem: Segment
    exploration: Segment
    resolution: Segment
    next_preview: Segment

    def segments(self) -> Tuple[Segment, ...]:
        return (self.hook, self.problem, self.exploration, self.resolution, self.next_preview)


@dataclass
class ScoreableContent:
    """A generated script plus the metadata the quality gate inspects."""

    title: str
    script: str
    educational_objective: str
    learning_takeaways: List[str]
    engagement_hooks: List[EngagementHook]
    episode_structure: EpisodeStructure
    age_bracket: AgeBracket
    estimated_duration: float  # seconds


@dataclass
class QualityScore:
    """Quality gate verdict."""

    educational_value: int  # 0-10
    engagement_potential: int  # 0-10
    passed: bool
    feedback: List[str] = field(default_factory=list)
