"""Data models for video records and analysis results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union


class ContentCategory(str, Enum):
    """Closed set of content labels, in tie-break order."""

    NURSERY_RHYME = "nursery_rhyme"
    SONG = "song"
    EDUCATIONAL = "educational"
    STORY = "story"
    ANIMATION = "animation"
    ROLEPLAY = "roleplay"
    CHALLENGE = "challenge"
    UNBOXING = "unboxing"
    OTHER = "other"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class VideoRecord:
    """One video's metadata as fetched from the platform."""

    video_id: str
    channel_id: str
    title: str
    description: str = ""
    published_at: Optional[Union[str, date, datetime]] = None
    duration: float = 0  # seconds
    view_count: int = 0
    like_count: int = 0
    comment_count: int = 0
    tags: Tuple[str, ...] = ()
    thumbnail_url: str = ""

    @property
    def published(self) -> Optional[datetime]:
        """Publish time as an aware UTC datetime, or None if missing/unparseable."""
        return parse_timestamp(self.published_at)


@dataclass
class CategoryResult:
    """Winning category plus the raw per-category scores."""

    category: ContentCategory
    confidence: float  # 0.0-1.0, 2 decimals
    scores: Dict[str, float] = field(default_factory=dict)  # category value -> score


@dataclass
class Finding:
    """One statistical observation from the pattern detector."""

    pattern_type: str
    category: Optional[ContentCategory]  # None = corpus-wide
    finding: str
    confidence: float
    sample_size: int
    metadata: Dict[str, Any] = field(default_factory=dict)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC.

    A bare ``date`` (as YAML loads ``2024-01-05``) means midnight UTC. Any
    other non-string value is treated as missing.
    """
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif not isinstance(value, str):
        return None
    else:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
