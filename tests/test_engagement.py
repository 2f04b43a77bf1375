"""Tests for engagement statistics, channel ranking and viral outliers."""

from datetime import datetime, timezone

import pytest

from kidsvid.analysis.engagement import (
    build_channel_analysis,
    compute_engagement_stats,
    find_viral_outliers,
    rank_channels,
)
from kidsvid.models.analysis import ChannelAnalysis, EngagementStats
from kidsvid.models.video import CategoryResult, ContentCategory, VideoRecord

NOW = datetime(2024, 2, 1, tzinfo=timezone.utc)


def _make_video(video_id: str = "v1", **overrides) -> VideoRecord:
    fields = dict(
        video_id=video_id,
        channel_id="UC_test",
        title="Test Video",
        published_at="2024-01-22T00:00:00Z",
        duration=180,
        view_count=1000,
        like_count=40,
        comment_count=10,
    )
    fields.update(overrides)
    return VideoRecord(**fields)


def _make_analysis(channel_id: str, **overrides) -> ChannelAnalysis:
    fields = dict(
        channel_id=channel_id,
        name=channel_id.title(),
        primary_category=ContentCategory.EDUCATIONAL,
        upload_frequency=1.0,
        avg_views=1000,
        avg_likes=50,
        engagement_rate=0.01,
    )
    fields.update(overrides)
    return ChannelAnalysis(**fields)


class TestComputeEngagementStats:
    def test_empty(self):
        assert compute_engagement_stats([]) == EngagementStats()

    def test_totals_and_averages(self):
        videos = [_make_video(f"v{i}", view_count=(i + 1) * 100) for i in range(10)]
        stats = compute_engagement_stats(videos, now=NOW)
        assert stats.total_videos == 10
        assert stats.total_views == 5500
        assert stats.total_likes == 400
        assert stats.total_comments == 100
        assert stats.avg_views == 550
        assert stats.avg_likes == 40
        assert stats.median_views == 550

    def test_top_and_bottom_slices(self):
        videos = [_make_video(f"v{i}", view_count=(i + 1) * 100) for i in range(10)]
        stats = compute_engagement_stats(videos, now=NOW)
        assert stats.top_10pct_avg_views == 1000
        assert stats.bottom_10pct_avg_views == 100

    def test_slices_hold_at_least_one_video(self):
        stats = compute_engagement_stats([_make_video(view_count=42)], now=NOW)
        assert stats.top_10pct_avg_views == 42
        assert stats.bottom_10pct_avg_views == 42

    def test_engagement_rate_skips_zero_views(self):
        videos = [
            _make_video("a", view_count=1000, like_count=40, comment_count=10),
            _make_video("b", view_count=0, like_count=5, comment_count=5),
        ]
        stats = compute_engagement_stats(videos, now=NOW)
        assert stats.avg_engagement_rate == pytest.approx(0.05)

    def test_views_per_day(self):
        videos = [
            _make_video("a", view_count=1000, published_at="2024-01-22T00:00:00Z"),
            _make_video("b", view_count=5000, published_at=None),
        ]
        stats = compute_engagement_stats(videos, now=NOW)
        # 10 days old
        assert stats.views_per_day == pytest.approx(100)

    def test_naive_now_is_treated_as_utc(self):
        videos = [_make_video(view_count=1000, published_at="2024-01-22T00:00:00Z")]
        stats = compute_engagement_stats(videos, now=datetime(2024, 2, 1))
        assert stats.views_per_day == pytest.approx(100)

    def test_future_publish_date_counts_as_zero(self):
        videos = [_make_video(published_at="2024-03-01T00:00:00Z")]
        assert compute_engagement_stats(videos, now=NOW).views_per_day == 0


class TestBuildChannelAnalysis:
    def setup_method(self):
        self.category = CategoryResult(ContentCategory.SONG, 0.8, {"song": 3})

    def test_summary(self):
        videos = [
            _make_video("a", view_count=3000, like_count=100, comment_count=20,
                        published_at="2024-01-01T00:00:00Z"),
            _make_video("b", view_count=1000, like_count=30, comment_count=10,
                        published_at="2024-01-08T00:00:00Z"),
            _make_video("c", view_count=2001, like_count=50, comment_count=0,
                        published_at="2024-01-15T00:00:00Z"),
        ]
        analysis = build_channel_analysis("UC1", "Sing Along", videos, self.category, now=NOW)
        assert analysis.channel_id == "UC1"
        assert analysis.name == "Sing Along"
        assert analysis.primary_category == ContentCategory.SONG
        assert analysis.avg_views == 2000
        assert analysis.avg_likes == 60
        # three uploads across two weeks
        assert analysis.upload_frequency == 1.5
        assert analysis.top_video_ids == ["a", "c", "b"]

    def test_engagement_rate_is_rounded(self):
        videos = [_make_video(view_count=3, like_count=1, comment_count=0)]
        analysis = build_channel_analysis("UC1", "One", videos, self.category, now=NOW)
        assert analysis.engagement_rate == 0.3333

    def test_upload_frequency_rounds_half_up(self):
        videos = [
            _make_video("a", published_at="2024-01-01T00:00:00Z"),
            _make_video("b", published_at="2024-02-26T00:00:00Z"),
        ]
        analysis = build_channel_analysis("UC1", "Slow", videos, self.category, now=NOW)
        # two uploads across eight weeks
        assert analysis.upload_frequency == 0.3

    def test_single_dated_video_has_no_frequency(self):
        analysis = build_channel_analysis("UC1", "One", [_make_video()], self.category, now=NOW)
        assert analysis.upload_frequency == 0

    def test_top_videos_are_capped_at_five(self):
        videos = [_make_video(f"v{i}", view_count=i) for i in range(8)]
        analysis = build_channel_analysis("UC1", "Many", videos, self.category, now=NOW)
        assert analysis.top_video_ids == ["v7", "v6", "v5", "v4", "v3"]

    def test_empty_channel(self):
        analysis = build_channel_analysis("UC1", "Empty", [], self.category, now=NOW)
        assert analysis.avg_views == 0
        assert analysis.upload_frequency == 0
        assert analysis.top_video_ids == []


class TestRankChannels:
    def test_empty(self):
        assert rank_channels([]) == []

    def test_weighted_score_and_rank(self):
        ranked = rank_channels([
            _make_analysis("small", avg_views=500, engagement_rate=0.01, upload_frequency=1.0),
            _make_analysis("big", avg_views=1000, engagement_rate=0.05, upload_frequency=2.0),
        ])
        assert [c.channel_id for c in ranked] == ["big", "small"]
        assert [c.rank for c in ranked] == [1, 2]
        assert ranked[0].score == pytest.approx(0.5 + 1.5 + 0.2)
        assert ranked[1].score == pytest.approx(0.25 + 0.3 + 0.1)

    def test_engagement_can_outrank_views(self):
        ranked = rank_channels([
            _make_analysis("popular", avg_views=1_000_000, engagement_rate=0.001),
            _make_analysis("loved", avg_views=10_000, engagement_rate=0.05),
        ])
        assert ranked[0].channel_id == "loved"

    def test_zero_maxima_do_not_divide_by_zero(self):
        ranked = rank_channels([
            _make_analysis("quiet", avg_views=0, engagement_rate=0.0, upload_frequency=0.0),
        ])
        assert ranked[0].score == 0
        assert ranked[0].rank == 1

    def test_keeps_channel_fields(self):
        ranked = rank_channels([_make_analysis("only", top_video_ids=["x"])])
        assert ranked[0].name == "Only"
        assert ranked[0].top_video_ids == ["x"]
        assert ranked[0].primary_category == ContentCategory.EDUCATIONAL


class TestFindViralOutliers:
    def test_empty(self):
        assert find_viral_outliers([], {}) == []

    def test_finds_video_far_above_mean(self):
        videos = [_make_video(f"v{i}", view_count=100) for i in range(9)]
        videos.append(_make_video("hit", view_count=10000))
        categories = {"hit": CategoryResult(ContentCategory.SONG, 1.0, {})}
        outliers = find_viral_outliers(videos, categories)
        assert len(outliers) == 1
        assert outliers[0].video.video_id == "hit"
        assert outliers[0].category == ContentCategory.SONG
        # mean is 1090 views
        assert outliers[0].viral_multiplier == 9.2

    def test_uncategorized_outlier_is_other(self):
        videos = [_make_video(f"v{i}", view_count=100) for i in range(9)]
        videos.append(_make_video("hit", view_count=10000))
        assert find_viral_outliers(videos, {})[0].category == ContentCategory.OTHER

    def test_uniform_corpus_has_no_outliers(self):
        videos = [_make_video(f"v{i}", view_count=500) for i in range(5)]
        assert find_viral_outliers(videos, {}) == []

    def test_zero_views(self):
        videos = [_make_video(f"v{i}", view_count=0) for i in range(5)]
        assert find_viral_outliers(videos, {}) == []

    def test_sorted_by_multiplier(self):
        videos = [_make_video(f"v{i}", view_count=10) for i in range(30)]
        videos.append(_make_video("big", view_count=2000))
        videos.append(_make_video("bigger", view_count=4000))
        outliers = find_viral_outliers(videos, {})
        assert [o.video.video_id for o in outliers] == ["bigger", "big"]

    def test_multiplier_rounds_half_up(self):
        videos = [_make_video(f"v{i}", view_count=0) for i in range(6)]
        videos.append(_make_video("hit", view_count=1700))
        videos.append(_make_video("near", view_count=1500))
        # mean is 400 views, so the hit sits at exactly 4.25x
        outliers = find_viral_outliers(videos, {})
        assert [o.viral_multiplier for o in outliers] == [4.3, 3.8]
