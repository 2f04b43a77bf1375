"""kidsvid - analysis and quality gating for kids educational video.

Categorize videos and channels, mine a corpus for performance patterns,
and score generated episode scripts before they are produced.
"""

__version__ = "1.0.0"

from .analysis import (
    AnalysisPipeline,
    categorize_channel,
    categorize_video,
    categorize_videos,
    detect_patterns,
)
from .config import PASSING_THRESHOLD, Config
from .models import (
    AgeBracket,
    CategoryResult,
    ContentCategory,
    EngagementHook,
    EpisodeStructure,
    Finding,
    QualityScore,
    ScoreableContent,
    Segment,
    VideoRecord,
)
from .quality import check_anti_brain_rot_rules, score_content

__all__ = [
    "Config",
    "PASSING_THRESHOLD",
    "AnalysisPipeline",
    "categorize_video",
    "categorize_videos",
    "categorize_channel",
    "detect_patterns",
    "score_content",
    "check_anti_brain_rot_rules",
    "VideoRecord",
    "ContentCategory",
    "CategoryResult",
    "Finding",
    "EngagementHook",
    "AgeBracket",
    "Segment",
    "EpisodeStructure",
    "ScoreableContent",
    "QualityScore",
]
