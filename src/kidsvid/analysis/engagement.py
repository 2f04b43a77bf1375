"""Engagement statistics, channel summaries, ranking and viral outliers."""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import List, Mapping, Optional, Sequence

from ..config import VIRAL_MULTIPLIER
from ..models.analysis import ChannelAnalysis, EngagementStats, RankedChannel, ViralOutlier
from ..models.video import CategoryResult, ContentCategory, VideoRecord
from .patterns import median, round_half_up

logger = logging.getLogger(__name__)

TOP_SHARE = 0.1
TOP_VIDEOS_PER_CHANNEL = 5
WEEK_SECONDS = 7 * 24 * 3600
DAY_SECONDS = 24 * 3600

# Composite channel score weights
VIEWS_WEIGHT = 0.5
ENGAGEMENT_WEIGHT = 0.3
FREQUENCY_WEIGHT = 0.2


def compute_engagement_stats(
    videos: Sequence[VideoRecord],
    now: Optional[datetime] = None,
) -> EngagementStats:
    """Aggregate view/like/comment statistics over a set of videos."""
    if not videos:
        return EngagementStats()

    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    total_views = sum(v.view_count for v in videos)
    total_likes = sum(v.like_count for v in videos)
    total_comments = sum(v.comment_count for v in videos)

    by_views = sorted(videos, key=lambda v: v.view_count, reverse=True)
    slice_size = max(1, math.ceil(len(by_views) * TOP_SHARE))
    top = by_views[:slice_size]
    bottom = by_views[-slice_size:]

    daily_rates = []
    for v in videos:
        published = v.published
        if published is None:
            continue
        age_days = (now - published).total_seconds() / DAY_SECONDS
        daily_rates.append(v.view_count / age_days if age_days > 0 else 0)

    rates = [
        (v.like_count + v.comment_count) / v.view_count
        for v in videos
        if v.view_count > 0
    ]

    return EngagementStats(
        total_videos=len(videos),
        total_views=total_views,
        total_likes=total_likes,
        total_comments=total_comments,
        avg_views=total_views / len(videos),
        avg_likes=total_likes / len(videos),
        avg_comments=total_comments / len(videos),
        avg_engagement_rate=sum(rates) / len(rates) if rates else 0.0,
        median_views=median([v.view_count for v in videos]),
        top_10pct_avg_views=sum(v.view_count for v in top) / len(top),
        bottom_10pct_avg_views=sum(v.view_count for v in bottom) / len(bottom),
        views_per_day=sum(daily_rates) / len(daily_rates) if daily_rates else 0.0,
    )


def build_channel_analysis(
    channel_id: str,
    name: str,
    videos: Sequence[VideoRecord],
    channel_category: CategoryResult,
    now: Optional[datetime] = None,
) -> ChannelAnalysis:
    """Summarize one channel from its videos and its aggregated category."""
    stats = compute_engagement_stats(videos, now=now)

    dated = sorted(
        (p for p in (v.published for v in videos) if p is not None),
        reverse=True,
    )
    upload_frequency = 0.0
    if len(dated) >= 2:
        weeks = (dated[0] - dated[-1]).total_seconds() / WEEK_SECONDS
        if weeks > 0:
            upload_frequency = len(dated) / weeks

    top_video_ids = [
        v.video_id
        for v in sorted(videos, key=lambda v: v.view_count, reverse=True)[:TOP_VIDEOS_PER_CHANNEL]
    ]

    return ChannelAnalysis(
        channel_id=channel_id,
        name=name,
        primary_category=channel_category.category,
        upload_frequency=round_half_up(upload_frequency, 1),
        avg_views=round_half_up(stats.avg_views),
        avg_likes=round_half_up(stats.avg_likes),
        engagement_rate=round_half_up(stats.avg_engagement_rate, 4),
        top_video_ids=top_video_ids,
    )


def rank_channels(analyses: Sequence[ChannelAnalysis]) -> List[RankedChannel]:
    """Rank channels by a weighted blend of views, engagement and cadence."""
    if not analyses:
        return []

    max_views = max(max(a.avg_views for a in analyses), 1)
    max_freq = max(max(a.upload_frequency for a in analyses), 1)

    scored = []
    for a in analyses:
        score = (
            (a.avg_views / max_views) * VIEWS_WEIGHT
            + a.engagement_rate * 100 * ENGAGEMENT_WEIGHT
            + (a.upload_frequency / max_freq) * FREQUENCY_WEIGHT
        )
        scored.append(RankedChannel(
            channel_id=a.channel_id,
            name=a.name,
            primary_category=a.primary_category,
            upload_frequency=a.upload_frequency,
            avg_views=a.avg_views,
            avg_likes=a.avg_likes,
            engagement_rate=a.engagement_rate,
            top_video_ids=list(a.top_video_ids),
            score=score,
        ))

    scored.sort(key=lambda c: c.score, reverse=True)
    for i, channel in enumerate(scored, start=1):
        channel.rank = i
    return scored


def find_viral_outliers(
    videos: Sequence[VideoRecord],
    categories: Mapping[str, CategoryResult],
) -> List[ViralOutlier]:
    """Videos with more than VIRAL_MULTIPLIER times the mean views."""
    if not videos:
        return []

    avg_views = sum(v.view_count for v in videos) / len(videos)
    threshold = avg_views * VIRAL_MULTIPLIER

    outliers = []
    for v in videos:
        if v.view_count <= threshold:
            continue
        result = categories.get(v.video_id)
        outliers.append(ViralOutlier(
            video=v,
            category=result.category if result is not None else ContentCategory.OTHER,
            viral_multiplier=round_half_up(v.view_count / avg_views, 1),
        ))

    outliers.sort(key=lambda o: o.viral_multiplier, reverse=True)
    logger.debug("Found %d viral outliers above %.0f views", len(outliers), threshold)
    return outliers
