"""Keyword and tag weighted content categorizer for kids videos."""

from __future__ import annotations

import logging
import math
from typing import Dict, Iterable, List, Mapping, Tuple

from ..models.video import CategoryResult, ContentCategory, VideoRecord
from .patterns import round_half_up

logger = logging.getLogger(__name__)

TITLE_KEYWORD_WEIGHT = 3
TEXT_KEYWORD_WEIGHT = 1
TAG_WEIGHT = 2

CATEGORY_KEYWORDS: Mapping[ContentCategory, Tuple[str, ...]] = {
    ContentCategory.NURSERY_RHYME: (
        "nursery rhyme",
        "nursery rhymes",
        "twinkle twinkle",
        "humpty dumpty",
        "jack and jill",
        "mary had a little lamb",
        "baa baa black sheep",
        "itsy bitsy spider",
        "old macdonald",
        "wheels on the bus",
        "row row row",
        "ring around the rosie",
        "hickory dickory",
        "london bridge",
        "rain rain go away",
    ),
    ContentCategory.SONG: (
        "song",
        "songs",
        "sing along",
        "sing-along",
        "music",
        "dance",
        "lullaby",
        "lullabies",
        "baby shark",
        "finger family",
        "phonics song",
        "abc song",
        "alphabet song",
        "kids song",
        "children song",
    ),
    ContentCategory.EDUCATIONAL: (
        "learn",
        "learning",
        "educational",
        "colors",
        "numbers",
        "shapes",
        "counting",
        "alphabet",
        "abc",
        "phonics",
        "animals",
        "fruits",
        "vegetables",
        "science",
        "math",
        "reading",
        "letters",
        "words",
        "vocabulary",
        "teach",
    ),
    ContentCategory.STORY: (
        "story",
        "stories",
        "storytime",
        "fairy tale",
        "fairytale",
        "bedtime",
        "adventure",
        "once upon a time",
        "tale",
        "moral",
        "fable",
    ),
    ContentCategory.ANIMATION: (
        "cartoon",
        "animated",
        "animation",
        "episode",
        "full episode",
        "compilation",
    ),
    ContentCategory.ROLEPLAY: (
        "pretend play",
        "roleplay",
        "role play",
        "dress up",
        "costume",
        "pretend",
        "playing",
        "toys",
        "play with",
    ),
    ContentCategory.CHALLENGE: (
        "challenge",
        "try not to",
        "vs",
        "competition",
        "race",
        "game",
        "quiz",
        "guess",
    ),
    ContentCategory.UNBOXING: (
        "unboxing",
        "surprise",
        "surprise egg",
        "opening",
        "toy review",
        "new toy",
        "play-doh",
        "playdoh",
        "slime",
    ),
    ContentCategory.OTHER: (),
}

CATEGORY_TAG_WEIGHTS: Mapping[ContentCategory, Tuple[str, ...]] = {
    ContentCategory.NURSERY_RHYME: ("nursery rhymes", "rhymes for kids", "nursery rhyme"),
    ContentCategory.SONG: ("kids songs", "children songs", "sing along", "baby songs"),
    ContentCategory.EDUCATIONAL: (
        "learning", "educational", "learn colors", "learn numbers", "learn shapes",
    ),
    ContentCategory.STORY: ("kids stories", "bedtime stories", "fairy tales", "story time"),
    ContentCategory.ANIMATION: ("cartoon", "animation", "animated series", "kids cartoon"),
    ContentCategory.ROLEPLAY: ("pretend play", "role play", "kids play"),
    ContentCategory.CHALLENGE: ("challenge", "kids challenge", "fun challenge"),
    ContentCategory.UNBOXING: ("unboxing", "surprise eggs", "toy unboxing"),
    ContentCategory.OTHER: (),
}


def _score_categories(video: VideoRecord) -> Dict[str, float]:
    """Raw score per category, in declaration order."""
    title = video.title.lower()
    text = f"{video.title} {video.description or ''}".lower()
    tags = [t.lower() for t in video.tags]

    scores: Dict[str, float] = {}
    for category in ContentCategory:
        score = 0
        for keyword in CATEGORY_KEYWORDS[category]:
            if keyword in title:
                score += TITLE_KEYWORD_WEIGHT
            elif keyword in text:
                score += TEXT_KEYWORD_WEIGHT
        for tag_keyword in CATEGORY_TAG_WEIGHTS[category]:
            if any(tag_keyword in t for t in tags):
                score += TAG_WEIGHT
        scores[category.value] = score
    return scores


def _pick_winner(scores: Dict[str, float]) -> CategoryResult:
    """Highest score wins; ties go to the earliest category (stable sort)."""
    if not scores:
        return CategoryResult(category=ContentCategory.OTHER, confidence=0.0, scores={})

    ranked = sorted(scores.items(), key=lambda kv: kv[1], reverse=True)
    top_name, top_score = ranked[0]
    total = sum(scores.values())
    confidence = top_score / total if total > 0 else 0.0
    confidence = min(max(confidence, 0.0), 1.0)

    return CategoryResult(
        category=ContentCategory.OTHER if top_score == 0 else ContentCategory(top_name),
        confidence=round_half_up(confidence, 2),
        scores=scores,
    )


def categorize_video(video: VideoRecord) -> CategoryResult:
    """Classify one video into a weighted category distribution."""
    return _pick_winner(_score_categories(video))


def categorize_videos(videos: Iterable[VideoRecord]) -> Dict[str, CategoryResult]:
    """Categorize each video, keyed by video id."""
    return {video.video_id: categorize_video(video) for video in videos}


def categorize_channel(videos: List[VideoRecord]) -> CategoryResult:
    """Aggregate per-video scores into one channel category.

    Each video is weighted by log10 of its views so a single viral upload
    cannot drown out many moderate videos with a clearer signal. The
    aggregate is a weighted mean, not a sum.
    """
    if not videos:
        return CategoryResult(category=ContentCategory.OTHER, confidence=0.0, scores={})

    agg_scores: Dict[str, float] = {}
    total_weight = 0.0
    for video in videos:
        weight = math.log10(max(video.view_count, 1))
        total_weight += weight
        for name, score in _score_categories(video).items():
            agg_scores[name] = agg_scores.get(name, 0.0) + score * weight

    if total_weight > 0:
        for name in agg_scores:
            agg_scores[name] /= total_weight

    result = _pick_winner(agg_scores)
    logger.debug(
        "Channel categorized as %s (%.2f) from %d videos",
        result.category, result.confidence, len(videos),
    )
    return result
