"""Video corpus analysis: categorization, pattern mining, engagement."""

from .categorizer import categorize_channel, categorize_video, categorize_videos
from .engagement import (
    build_channel_analysis,
    compute_engagement_stats,
    find_viral_outliers,
    rank_channels,
)
from .patterns import detect_patterns
from .pipeline import AnalysisPipeline

__all__ = [
    "categorize_video",
    "categorize_videos",
    "categorize_channel",
    "detect_patterns",
    "compute_engagement_stats",
    "build_channel_analysis",
    "rank_channels",
    "find_viral_outliers",
    "AnalysisPipeline",
]
