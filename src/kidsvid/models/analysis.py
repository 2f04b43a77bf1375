"""Data models for engagement and channel-level analysis."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from .video import CategoryResult, ContentCategory, Finding, VideoRecord


@dataclass
class EngagementStats:
    """Corpus-wide view/like/comment statistics."""

    total_videos: int = 0
    total_views: int = 0
    total_likes: int = 0
    total_comments: int = 0
    avg_views: float = 0.0
    avg_likes: float = 0.0
    avg_comments: float = 0.0
    avg_engagement_rate: float = 0.0
    median_views: float = 0.0
    top_10pct_avg_views: float = 0.0
    bottom_10pct_avg_views: float = 0.0
    views_per_day: float = 0.0


@dataclass
class ChannelAnalysis:
    """Summary of one channel's output and performance."""

    channel_id: str
    name: str
    primary_category: ContentCategory
    upload_frequency: float  # videos per week
    avg_views: int
    avg_likes: int
    engagement_rate: float
    top_video_ids: List[str] = field(default_factory=list)


@dataclass
class RankedChannel(ChannelAnalysis):
    """Channel analysis with its composite score and rank (1 = best)."""

    score: float = 0.0
    rank: int = 0


@dataclass
class ViralOutlier:
    """A video far above the corpus mean in views."""

    video: VideoRecord
    category: ContentCategory
    viral_multiplier: float


@dataclass
class AnalysisResult:
    """Everything one pipeline run produced."""

    videos_analyzed: int = 0
    channels_analyzed: int = 0
    categories: Dict[str, CategoryResult] = field(default_factory=dict)
    patterns: List[Finding] = field(default_factory=list)
    engagement: EngagementStats = field(default_factory=EngagementStats)
    channels: List[RankedChannel] = field(default_factory=list)
    outliers: List[ViralOutlier] = field(default_factory=list)
