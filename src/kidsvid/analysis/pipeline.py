"""In-memory analysis pipeline: categorize, detect patterns, rank channels."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from ..config import Config
from ..models.analysis import AnalysisResult, ChannelAnalysis
from ..models.video import VideoRecord
from .categorizer import categorize_channel, categorize_videos
from .engagement import (
    build_channel_analysis,
    compute_engagement_stats,
    find_viral_outliers,
    rank_channels,
)
from .patterns import detect_patterns

logger = logging.getLogger(__name__)

EventCallback = Callable[..., None]


class AnalysisPipeline:
    """Runs every analysis stage over one corpus with event-driven updates.

    Fetching and persistence belong to the caller; this class only
    transforms the records it is handed.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        event_callback: Optional[EventCallback] = None,
    ):
        self.config = config or Config()
        self.emit = event_callback or (lambda *_a, **_kw: None)

    def run(
        self,
        videos: Sequence[VideoRecord],
        channels: Optional[Mapping[str, str]] = None,
        now: Optional[datetime] = None,
    ) -> AnalysisResult:
        """Analyze a corpus; ``channels`` maps channel id to display name."""
        channels = channels or {}
        self.emit("start", len(videos))

        logger.info("Step 1: Categorizing %d videos", len(videos))
        categories = categorize_videos(videos)
        self.emit("categorized", categories)

        logger.info("Step 2: Detecting patterns")
        patterns = detect_patterns(videos, categories)
        logger.info("Patterns detected: %d", len(patterns))
        self.emit("patterns_detected", patterns)

        logger.info("Step 3: Analyzing engagement")
        engagement = compute_engagement_stats(videos, now=now)

        by_channel = self._group_by_channel(videos)
        for channel_id in channels:
            by_channel.setdefault(channel_id, [])

        analyses: List[ChannelAnalysis] = []
        for channel_id, channel_videos in by_channel.items():
            analyses.append(build_channel_analysis(
                channel_id,
                channels.get(channel_id, channel_id),
                channel_videos,
                categorize_channel(channel_videos),
                now=now,
            ))
        ranked = rank_channels(analyses)
        outliers = find_viral_outliers(videos, categories)
        self.emit("engagement_done", engagement, ranked)

        logger.info(
            "Engagement analysis complete: avg views %.0f, engagement %.2f%%, "
            "top channel %s, %d viral outliers",
            engagement.avg_views,
            engagement.avg_engagement_rate * 100,
            ranked[0].name if ranked else "-",
            len(outliers),
        )

        result = AnalysisResult(
            videos_analyzed=len(videos),
            channels_analyzed=len(ranked),
            categories=categories,
            patterns=patterns,
            engagement=engagement,
            channels=ranked,
            outliers=outliers,
        )
        self.emit("complete", result)
        return result

    @staticmethod
    def _group_by_channel(videos: Sequence[VideoRecord]) -> Dict[str, List[VideoRecord]]:
        groups: Dict[str, List[VideoRecord]] = {}
        for video in videos:
            groups.setdefault(video.channel_id, []).append(video)
        return groups
