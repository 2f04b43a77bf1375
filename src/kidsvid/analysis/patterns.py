"""Detect metadata/performance patterns across a corpus of kids videos.

Six independent detectors each scan the corpus and emit zero or more
``Finding`` objects. Every detector tolerates empty or zeroed input and
returns an empty list when its minimum sample gate is not met.

Confidence values are fixed per finding type. They express how much each
detector trusts its own correlation and are not derived from the data.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from ..config import (
    MIN_BUCKET_SAMPLE,
    MIN_CAPS_SAMPLE,
    MIN_CATEGORY_SAMPLE,
    MIN_DATED_VIDEOS,
    MIN_HIGH_PERFORMING_TAG_COUNT,
    MIN_HOUR_SAMPLE,
    MIN_KEYWORD_RECURRENCE,
    MIN_POPULAR_TAG_COUNT,
    MIN_TAGGED_VIDEOS,
    MIN_TITLE_FEATURE_SAMPLE,
    RECENT_UPLOAD_WINDOW,
    SHORT_TITLE_MAX_LENGTH,
)
from ..models.video import CategoryResult, ContentCategory, Finding, VideoRecord

logger = logging.getLogger(__name__)

Categories = Mapping[str, CategoryResult]

# ── Confidence constants ──────────────────────────────────────────────────
CONF_TITLE_LENGTH = 0.8
CONF_TITLE_LENGTH_CATEGORY = 0.7
CONF_TITLE_EMOJI_COMMON = 0.7
CONF_TITLE_EMOJI_RARE = 0.5
CONF_TITLE_NUMBERS = 0.6
CONF_TITLE_KEYWORDS = 0.7
CONF_DURATION = 0.85
CONF_DURATION_CATEGORY = 0.75
CONF_DURATION_OPTIMAL = 0.8
CONF_UPLOAD_DAY = 0.65
CONF_UPLOAD_HOUR = 0.6
CONF_UPLOAD_FREQUENCY = 0.7
CONF_TAGS_POPULAR = 0.75
CONF_TAGS_POPULAR_CATEGORY = 0.7
CONF_TAGS_HIGH_PERFORMING = 0.7
CONF_TAGS_COUNT = 0.8
CONF_THUMBNAIL_CAPS = 0.5
CONF_ENGAGEMENT = 0.85
CONF_ENGAGEMENT_CATEGORY = 0.75

# Emoji share above which emoji findings are trusted more
EMOJI_COMMON_SHARE = 0.1
# Fraction of the corpus (by views) mined for title keywords
TOP_VIDEO_SHARE = 0.2
MAX_TITLE_KEYWORDS = 20
SHOWN_TITLE_KEYWORDS = 10
TOP_UPLOAD_DAYS = 3
TOP_UPLOAD_HOURS = 5
MAX_POPULAR_TAGS = 30
SHOWN_POPULAR_TAGS = 15
MAX_HIGH_PERFORMING_TAGS = 15
SHOWN_HIGH_PERFORMING_TAGS = 10
MAX_CATEGORY_TAGS = 10

WEEK_SECONDS = 7 * 24 * 3600

DURATION_BUCKETS: Tuple[Tuple[str, float, float], ...] = (
    ("short (<2min)", 0, 120),
    ("medium (2-5min)", 120, 300),
    ("long (5-10min)", 300, 600),
    ("very_long (>10min)", 600, math.inf),
)

DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

_EMOJI_RE = re.compile(
    "[\U0001F600-\U0001F64F"  # emoticons
    "\U0001F300-\U0001F5FF"  # symbols & pictographs
    "\U0001F680-\U0001F6FF"  # transport & map
    "\U0001F1E0-\U0001F1FF"  # flags
    "\u2600-\u26FF"  # misc symbols
    "\u2700-\u27BF]"  # dingbats
)
_DIGIT_RE = re.compile(r"[0-9]")
_CAPS_RE = re.compile(r"[A-Z]{3,}")


def detect_patterns(
    videos: Sequence[VideoRecord],
    categories: Optional[Categories] = None,
) -> List[Finding]:
    """Run every detector over the corpus and concatenate their findings."""
    if not videos:
        return []
    categories = categories or {}

    detectors: List[Tuple[str, Callable[[], List[Finding]]]] = [
        ("title", lambda: detect_title_patterns(videos, categories)),
        ("duration", lambda: detect_duration_patterns(videos, categories)),
        ("upload_time", lambda: detect_upload_time_patterns(videos)),
        ("tags", lambda: detect_tag_patterns(videos, categories)),
        ("thumbnail", lambda: detect_thumbnail_patterns(videos)),
        ("engagement", lambda: detect_engagement_correlations(videos, categories)),
    ]

    findings: List[Finding] = []
    for name, detector in detectors:
        found = detector()
        logger.debug("Detector %s produced %d findings", name, len(found))
        findings.extend(found)
    return findings


# ── Title ─────────────────────────────────────────────────────────────────

def has_emoji(text: str) -> bool:
    return bool(_EMOJI_RE.search(text))


def detect_title_patterns(videos: Sequence[VideoRecord], categories: Categories) -> List[Finding]:
    findings: List[Finding] = []

    avg_length = _mean([len(v.title) for v in videos])
    short_titles = [v for v in videos if len(v.title) <= SHORT_TITLE_MAX_LENGTH]
    long_titles = [v for v in videos if len(v.title) > SHORT_TITLE_MAX_LENGTH]
    short_avg_views = _avg_views(short_titles)
    long_avg_views = _avg_views(long_titles)

    findings.append(Finding(
        pattern_type="title_length",
        category=None,
        finding=(
            f"Average title length: {round_half_up(avg_length)} chars. "
            f"Short titles (<={SHORT_TITLE_MAX_LENGTH}) avg {format_number(short_avg_views)} views "
            f"vs long titles (>{SHORT_TITLE_MAX_LENGTH}) avg {format_number(long_avg_views)} views."
        ),
        confidence=CONF_TITLE_LENGTH,
        sample_size=len(videos),
        metadata={
            "avg_length": round_half_up(avg_length),
            "short_avg_views": short_avg_views,
            "long_avg_views": long_avg_views,
        },
    ))

    with_emoji = [v for v in videos if has_emoji(v.title)]
    if len(with_emoji) >= MIN_TITLE_FEATURE_SAMPLE:
        without_emoji = [v for v in videos if not has_emoji(v.title)]
        emoji_avg_views = _avg_views(with_emoji)
        no_emoji_avg_views = _avg_views(without_emoji)
        share = len(with_emoji) / len(videos)
        findings.append(Finding(
            pattern_type="title_emoji",
            category=None,
            finding=(
                f"{len(with_emoji)}/{len(videos)} videos use emoji in title. "
                f"Emoji avg {format_number(emoji_avg_views)} views vs "
                f"no-emoji avg {format_number(no_emoji_avg_views)} views."
            ),
            confidence=CONF_TITLE_EMOJI_COMMON if share > EMOJI_COMMON_SHARE else CONF_TITLE_EMOJI_RARE,
            sample_size=len(videos),
            metadata={
                "emoji_count": len(with_emoji),
                "emoji_pct": round_half_up(share * 100),
                "emoji_avg_views": emoji_avg_views,
                "no_emoji_avg_views": no_emoji_avg_views,
            },
        ))

    with_numbers = [v for v in videos if _DIGIT_RE.search(v.title)]
    if len(with_numbers) >= MIN_TITLE_FEATURE_SAMPLE:
        num_avg_views = _avg_views(with_numbers)
        findings.append(Finding(
            pattern_type="title_numbers",
            category=None,
            finding=(
                f"{len(with_numbers)}/{len(videos)} videos have numbers in title. "
                f"Avg views: {format_number(num_avg_views)}."
            ),
            confidence=CONF_TITLE_NUMBERS,
            sample_size=len(with_numbers),
            metadata={"count": len(with_numbers), "avg_views": num_avg_views},
        ))

    top_count = math.ceil(len(videos) * TOP_VIDEO_SHARE)
    top_videos = sorted(videos, key=lambda v: v.view_count, reverse=True)[:top_count]
    word_freq: Dict[str, int] = {}
    for v in top_videos:
        words = [w for w in v.title.lower().split() if len(w) > 3]
        for word in dict.fromkeys(words):
            word_freq[word] = word_freq.get(word, 0) + 1
    top_words = [
        {"word": word, "count": count}
        for word, count in sorted(word_freq.items(), key=lambda kv: kv[1], reverse=True)
        if count >= MIN_KEYWORD_RECURRENCE
    ][:MAX_TITLE_KEYWORDS]

    if top_words:
        shown = ", ".join(f'"{w["word"]}" ({w["count"]}x)' for w in top_words[:SHOWN_TITLE_KEYWORDS])
        findings.append(Finding(
            pattern_type="title_keywords",
            category=None,
            finding=f"Top performing title words: {shown}.",
            confidence=CONF_TITLE_KEYWORDS,
            sample_size=len(top_videos),
            metadata={"top_words": top_words},
        ))

    for category, cat_videos in group_by_category(videos, categories).items():
        if len(cat_videos) < MIN_CATEGORY_SAMPLE:
            continue
        cat_avg_len = round_half_up(_mean([len(v.title) for v in cat_videos]))
        findings.append(Finding(
            pattern_type="title_length",
            category=category,
            finding=(
                f"[{category}] Average title length: {cat_avg_len} chars "
                f"across {len(cat_videos)} videos."
            ),
            confidence=CONF_TITLE_LENGTH_CATEGORY,
            sample_size=len(cat_videos),
            metadata={"avg_length": cat_avg_len},
        ))

    return findings


# ── Duration ──────────────────────────────────────────────────────────────

def detect_duration_patterns(videos: Sequence[VideoRecord], categories: Categories) -> List[Finding]:
    findings: List[Finding] = []

    timed = [v for v in videos if v.duration > 0]
    if not timed:
        return findings

    durations = [v.duration for v in timed]
    avg_duration = _mean(durations)
    median_duration = median(durations)

    bucket_stats: List[Dict[str, Any]] = []
    for label, low, high in DURATION_BUCKETS:
        in_bucket = [v for v in timed if low <= v.duration < high]
        bucket_stats.append({
            "label": label,
            "count": len(in_bucket),
            "avg_views": _avg_views(in_bucket),
        })

    distribution = "; ".join(
        f"{b['label']}: {b['count']} videos, avg {format_number(b['avg_views'])} views"
        for b in bucket_stats
    )
    findings.append(Finding(
        pattern_type="duration",
        category=None,
        finding=(
            f"Average duration: {format_duration(avg_duration)}, "
            f"Median: {format_duration(median_duration)}. Distribution: {distribution}."
        ),
        confidence=CONF_DURATION,
        sample_size=len(durations),
        metadata={
            "avg_duration": avg_duration,
            "median_duration": median_duration,
            "buckets": bucket_stats,
        },
    ))

    # Fold over every bucket starting from the first; only the winner is gated.
    best = bucket_stats[0]
    for bucket in bucket_stats:
        if bucket["avg_views"] > best["avg_views"] and bucket["count"] >= MIN_BUCKET_SAMPLE:
            best = bucket

    if best["count"] >= MIN_BUCKET_SAMPLE:
        findings.append(Finding(
            pattern_type="duration_optimal",
            category=None,
            finding=(
                f"Best performing duration range: {best['label']} with avg "
                f"{format_number(best['avg_views'])} views ({best['count']} videos)."
            ),
            confidence=CONF_DURATION_OPTIMAL,
            sample_size=best["count"],
            metadata={"best_bucket": dict(best)},
        ))

    for category, cat_videos in group_by_category(videos, categories).items():
        cat_durations = [v.duration for v in cat_videos if v.duration > 0]
        if len(cat_durations) < MIN_CATEGORY_SAMPLE:
            continue
        cat_avg = _mean(cat_durations)
        findings.append(Finding(
            pattern_type="duration",
            category=category,
            finding=(
                f"[{category}] Average duration: {format_duration(cat_avg)} "
                f"across {len(cat_durations)} videos."
            ),
            confidence=CONF_DURATION_CATEGORY,
            sample_size=len(cat_durations),
            metadata={"avg_duration": cat_avg},
        ))

    return findings


# ── Upload time ───────────────────────────────────────────────────────────

def detect_upload_time_patterns(videos: Sequence[VideoRecord]) -> List[Finding]:
    findings: List[Finding] = []

    dated: List[Tuple[VideoRecord, datetime]] = []
    for v in videos:
        published = v.published
        if published is not None:
            dated.append((v, published))

    if len(dated) < MIN_DATED_VIDEOS:
        return findings

    # Day of week, 0 = Sunday
    day_totals = {day: [0, 0] for day in range(7)}  # day -> [count, total views]
    for v, published in dated:
        day = (published.weekday() + 1) % 7
        day_totals[day][0] += 1
        day_totals[day][1] += v.view_count

    day_entries = sorted(
        (
            {
                "day": DAY_NAMES[day],
                "count": count,
                "avg_views": total / count if count > 0 else 0,
            }
            for day, (count, total) in day_totals.items()
        ),
        key=lambda d: d["avg_views"],
        reverse=True,
    )
    best_days = ", ".join(
        f"{d['day']} ({format_number(d['avg_views'])} avg, {d['count']} uploads)"
        for d in day_entries[:TOP_UPLOAD_DAYS]
    )
    findings.append(Finding(
        pattern_type="upload_day",
        category=None,
        finding=f"Best upload days by avg views: {best_days}.",
        confidence=CONF_UPLOAD_DAY,
        sample_size=len(dated),
        metadata={"day_stats": day_entries},
    ))

    hour_totals: Dict[int, List[int]] = {}
    for v, published in dated:
        stats = hour_totals.setdefault(published.hour, [0, 0])
        stats[0] += 1
        stats[1] += v.view_count

    top_hours = sorted(
        (
            {"hour": hour, "count": count, "avg_views": total / count}
            for hour, (count, total) in hour_totals.items()
            if count >= MIN_HOUR_SAMPLE
        ),
        key=lambda h: h["avg_views"],
        reverse=True,
    )[:TOP_UPLOAD_HOURS]

    if top_hours:
        hours = ", ".join(
            f"{h['hour']}:00 ({format_number(h['avg_views'])} avg, {h['count']} uploads)"
            for h in top_hours
        )
        findings.append(Finding(
            pattern_type="upload_hour",
            category=None,
            finding=f"Best upload hours (UTC): {hours}.",
            confidence=CONF_UPLOAD_HOUR,
            sample_size=len(dated),
            metadata={"top_hours": top_hours},
        ))

    newest_first = sorted(dated, key=lambda pair: pair[1], reverse=True)
    recent = newest_first[:RECENT_UPLOAD_WINDOW]
    weeks = (recent[0][1] - recent[-1][1]).total_seconds() / WEEK_SECONDS
    if weeks > 0:
        videos_per_week = round_half_up(len(recent) / weeks, 1)
        findings.append(Finding(
            pattern_type="upload_frequency",
            category=None,
            finding=(
                f"Estimated upload frequency: {videos_per_week:.1f} videos/week "
                f"(from {len(recent)} most recent videos)."
            ),
            confidence=CONF_UPLOAD_FREQUENCY,
            sample_size=len(recent),
            metadata={"videos_per_week": videos_per_week},
        ))

    return findings


# ── Tags ──────────────────────────────────────────────────────────────────

def detect_tag_patterns(videos: Sequence[VideoRecord], categories: Categories) -> List[Finding]:
    findings: List[Finding] = []

    tagged = [v for v in videos if v.tags]
    if len(tagged) < MIN_TAGGED_VIDEOS:
        return findings

    tag_freq: Dict[str, List[int]] = {}  # tag -> [count, total views]
    for v in tagged:
        for tag in v.tags:
            entry = tag_freq.setdefault(tag.lower(), [0, 0])
            entry[0] += 1
            entry[1] += v.view_count

    def _tag_rows(min_count: int) -> List[Dict[str, Any]]:
        return [
            {"tag": tag, "count": count, "avg_views": total / count}
            for tag, (count, total) in tag_freq.items()
            if count >= min_count
        ]

    top_tags = sorted(
        _tag_rows(MIN_POPULAR_TAG_COUNT), key=lambda t: t["count"], reverse=True,
    )[:MAX_POPULAR_TAGS]
    if top_tags:
        shown = ", ".join(
            f'"{t["tag"]}" ({t["count"]}x, avg {format_number(t["avg_views"])} views)'
            for t in top_tags[:SHOWN_POPULAR_TAGS]
        )
        findings.append(Finding(
            pattern_type="tags_popular",
            category=None,
            finding=f"Most used tags: {shown}.",
            confidence=CONF_TAGS_POPULAR,
            sample_size=len(tagged),
            metadata={"top_tags": top_tags},
        ))

    high_performing = sorted(
        _tag_rows(MIN_HIGH_PERFORMING_TAG_COUNT), key=lambda t: t["avg_views"], reverse=True,
    )[:MAX_HIGH_PERFORMING_TAGS]
    if high_performing:
        shown = ", ".join(
            f'"{t["tag"]}" ({format_number(t["avg_views"])} avg, {t["count"]}x)'
            for t in high_performing[:SHOWN_HIGH_PERFORMING_TAGS]
        )
        findings.append(Finding(
            pattern_type="tags_high_performing",
            category=None,
            finding=f"Highest performing tags (by avg views): {shown}.",
            confidence=CONF_TAGS_HIGH_PERFORMING,
            sample_size=sum(t["count"] for t in high_performing),
            metadata={"high_performing_tags": high_performing},
        ))

    avg_tag_count = round_half_up(_mean([len(v.tags) for v in tagged]))
    findings.append(Finding(
        pattern_type="tags_count",
        category=None,
        finding=f"Average {avg_tag_count} tags per video. {len(tagged)}/{len(videos)} videos have tags.",
        confidence=CONF_TAGS_COUNT,
        sample_size=len(tagged),
        metadata={"avg_tag_count": avg_tag_count, "videos_with_tags": len(tagged)},
    ))

    for category, cat_videos in group_by_category(tagged, categories).items():
        if len(cat_videos) < MIN_CATEGORY_SAMPLE:
            continue
        cat_freq: Dict[str, int] = {}
        for v in cat_videos:
            for tag in v.tags:
                lower = tag.lower()
                cat_freq[lower] = cat_freq.get(lower, 0) + 1
        cat_top = [
            {"tag": tag, "count": count}
            for tag, count in sorted(cat_freq.items(), key=lambda kv: kv[1], reverse=True)
        ][:MAX_CATEGORY_TAGS]
        shown = ", ".join(f'"{t["tag"]}" ({t["count"]}x)' for t in cat_top)
        findings.append(Finding(
            pattern_type="tags_popular",
            category=category,
            finding=f"[{category}] Top tags: {shown}.",
            confidence=CONF_TAGS_POPULAR_CATEGORY,
            sample_size=len(cat_videos),
            metadata={"top_tags": cat_top},
        ))

    return findings


# ── Thumbnail text proxy ──────────────────────────────────────────────────

def detect_thumbnail_patterns(videos: Sequence[VideoRecord]) -> List[Finding]:
    """ALL CAPS title words stand in for bold thumbnail text; no pixels are read."""
    findings: List[Finding] = []

    with_caps = [v for v in videos if _CAPS_RE.search(v.title)]
    if len(with_caps) >= MIN_CAPS_SAMPLE:
        caps_avg_views = _avg_views(with_caps)
        no_caps_views = sum(v.view_count for v in videos if not _CAPS_RE.search(v.title))
        no_caps_avg_views = no_caps_views / max(len(videos) - len(with_caps), 1)
        findings.append(Finding(
            pattern_type="thumbnail_caps",
            category=None,
            finding=(
                f"{len(with_caps)} videos use ALL CAPS in title (thumbnail text proxy). "
                f"Caps avg {format_number(caps_avg_views)} views vs "
                f"no-caps avg {format_number(no_caps_avg_views)} views."
            ),
            confidence=CONF_THUMBNAIL_CAPS,
            sample_size=len(videos),
            metadata={
                "caps_count": len(with_caps),
                "caps_avg_views": caps_avg_views,
                "no_caps_avg_views": no_caps_avg_views,
            },
        ))

    return findings


# ── Engagement ────────────────────────────────────────────────────────────

def engagement_rate(video: VideoRecord) -> float:
    """(likes + comments) / views, with views floored at 1."""
    return (video.like_count + video.comment_count) / max(video.view_count, 1)


def detect_engagement_correlations(
    videos: Sequence[VideoRecord], categories: Categories,
) -> List[Finding]:
    findings: List[Finding] = []

    with_views = [v for v in videos if v.view_count > 0]
    if not with_views:
        return findings

    avg_engagement = _mean([engagement_rate(v) for v in with_views])
    findings.append(Finding(
        pattern_type="engagement_rate",
        category=None,
        finding=(
            f"Average engagement rate (likes+comments/views): {round_half_up(avg_engagement * 100, 2):.2f}% "
            f"across {len(with_views)} videos."
        ),
        confidence=CONF_ENGAGEMENT,
        sample_size=len(with_views),
        metadata={"avg_engagement_rate": avg_engagement},
    ))

    # Zero-view videos stay in their category and count as rate 0.
    for category, cat_videos in group_by_category(videos, categories).items():
        if len(cat_videos) < MIN_CATEGORY_SAMPLE:
            continue
        cat_rate = _mean([engagement_rate(v) for v in cat_videos])
        cat_avg_views = _avg_views(cat_videos)
        findings.append(Finding(
            pattern_type="engagement_rate",
            category=category,
            finding=(
                f"[{category}] Engagement rate: {round_half_up(cat_rate * 100, 2):.2f}%, "
                f"avg views: {format_number(cat_avg_views)} ({len(cat_videos)} videos)."
            ),
            confidence=CONF_ENGAGEMENT_CATEGORY,
            sample_size=len(cat_videos),
            metadata={"engagement_rate": cat_rate, "avg_views": cat_avg_views},
        ))

    return findings


# ── Helpers ───────────────────────────────────────────────────────────────

def group_by_category(
    videos: Sequence[VideoRecord], categories: Categories,
) -> Dict[ContentCategory, List[VideoRecord]]:
    """Group videos by their categorized label; uncategorized videos go to OTHER."""
    groups: Dict[ContentCategory, List[VideoRecord]] = {}
    for v in videos:
        result = categories.get(v.video_id)
        category = result.category if result is not None else ContentCategory.OTHER
        groups.setdefault(category, []).append(v)
    return groups


def median(values: Sequence[float]) -> float:
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2:
        return ordered[mid]
    return (ordered[mid - 1] + ordered[mid]) / 2


def format_number(n: float) -> str:
    if n >= 1_000_000:
        return f"{round_half_up(n / 1_000_000, 1):.1f}M"
    if n >= 1_000:
        return f"{round_half_up(n / 1_000, 1):.1f}K"
    return str(round_half_up(n))


def format_duration(seconds: float) -> str:
    minutes = int(seconds // 60)
    secs = round_half_up(seconds % 60)
    return f"{minutes}m{secs}s"


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _avg_views(videos: Sequence[VideoRecord]) -> float:
    return _mean([v.view_count for v in videos])


def round_half_up(value: float, digits: int = 0):
    """Round halves upward at ``digits`` decimals; ``digits=0`` returns an int."""
    factor = 10 ** digits
    rounded = math.floor(value * factor + 0.5) / factor
    return int(rounded) if digits == 0 else rounded
