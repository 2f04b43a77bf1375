"""Data models for video analysis and script scoring."""

from .analysis import (
    AnalysisResult,
    ChannelAnalysis,
    EngagementStats,
    RankedChannel,
    ViralOutlier,
)
from .content import (
    AgeBracket,
    EngagementHook,
    EpisodeStructure,
    QualityScore,
    ScoreableContent,
    Segment,
)
from .video import CategoryResult, ContentCategory, Finding, VideoRecord

__all__ = [
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
    "EngagementStats",
    "ChannelAnalysis",
    "RankedChannel",
    "ViralOutlier",
    "AnalysisResult",
]
