"""Load video and script records from JSON or YAML files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping

import yaml

from .models.content import (
    AgeBracket,
    EngagementHook,
    EpisodeStructure,
    ScoreableContent,
    Segment,
)
from .models.video import VideoRecord

logger = logging.getLogger(__name__)

# camelCase keys as returned by the YouTube Data API wrappers
_VIDEO_KEY_ALIASES = {
    "videoId": "video_id",
    "id": "video_id",
    "channelId": "channel_id",
    "publishedAt": "published_at",
    "viewCount": "view_count",
    "likeCount": "like_count",
    "commentCount": "comment_count",
    "thumbnailUrl": "thumbnail_url",
}

_CONTENT_KEY_ALIASES = {
    "educationalObjective": "educational_objective",
    "learningTakeaways": "learning_takeaways",
    "engagementHooks": "engagement_hooks",
    "episodeStructure": "episode_structure",
    "ageBracket": "age_bracket",
    "estimatedDuration": "estimated_duration",
}

_SEGMENT_NAMES = ("hook", "problem", "exploration", "resolution", "next_preview")


def read_data(path: str | Path) -> Any:
    """Read a JSON or YAML document; the extension picks the parser."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"No such file: {path}")
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        return json.loads(text)
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValueError(f"{path}: invalid YAML: {e}") from e


def _normalize_keys(raw: Any, aliases: Mapping[str, str], kind: str) -> Dict[str, Any]:
    if not isinstance(raw, Mapping):
        raise ValueError(f"{kind} must be a mapping, got {type(raw).__name__}")
    return {aliases.get(key, key): value for key, value in raw.items()}


def video_from_dict(raw: Any) -> VideoRecord:
    """Build a VideoRecord from a snake_case or camelCase mapping."""
    data = _normalize_keys(raw, _VIDEO_KEY_ALIASES, "Video record")
    missing = [k for k in ("video_id", "channel_id", "title") if data.get(k) is None]
    if missing:
        raise ValueError(f"Video record missing required keys: {', '.join(missing)}")

    published = data.get("published_at")
    return VideoRecord(
        video_id=str(data["video_id"]),
        channel_id=str(data["channel_id"]),
        title=str(data["title"]),
        description=data.get("description") or "",
        published_at=published if published else None,
        duration=float(data.get("duration") or 0),
        view_count=int(data.get("view_count") or 0),
        like_count=int(data.get("like_count") or 0),
        comment_count=int(data.get("comment_count") or 0),
        tags=tuple(str(t) for t in data.get("tags") or ()),
        thumbnail_url=data.get("thumbnail_url") or "",
    )


def load_videos(path: str | Path) -> List[VideoRecord]:
    """Load a list of videos (or a mapping with a ``videos`` key)."""
    data = read_data(path)
    if isinstance(data, Mapping):
        data = data.get("videos")
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of video records")
    videos = [video_from_dict(item) for item in data]
    logger.info("Loaded %d videos from %s", len(videos), path)
    return videos


def load_channels(path: str | Path) -> Dict[str, str]:
    """Load a channel id -> name mapping (a mapping, or a list of records)."""
    data = read_data(path)
    if isinstance(data, Mapping):
        return {str(k): str(v) for k, v in data.items()}
    if isinstance(data, list):
        channels = {}
        for item in data:
            if not isinstance(item, Mapping):
                raise ValueError(f"{path}: channel record must be a mapping")
            item = _normalize_keys(item, {"channelId": "channel_id"}, "Channel record")
            if "channel_id" not in item:
                raise ValueError(f"{path}: channel record missing 'channel_id'")
            channels[str(item["channel_id"])] = str(item.get("name") or item["channel_id"])
        return channels
    raise ValueError(f"{path}: expected a mapping or list of channels")


def _segment_from_dict(raw: Any) -> Segment:
    if not isinstance(raw, Mapping):
        return Segment(duration=0, description="")
    return Segment(
        duration=float(raw.get("duration") or 0),
        description=str(raw.get("description") or ""),
    )


def content_from_dict(raw: Any) -> ScoreableContent:
    """Build a ScoreableContent from a snake_case or camelCase mapping."""
    data = _normalize_keys(raw, _CONTENT_KEY_ALIASES, "Script record")
    for key in ("title", "script", "episode_structure", "age_bracket"):
        if key not in data:
            raise ValueError(f"Script record missing required key: {key}")

    structure = _normalize_keys(
        data["episode_structure"] or {}, {"nextPreview": "next_preview"}, "episode_structure",
    )
    return ScoreableContent(
        title=str(data["title"]),
        script=str(data["script"] or ""),
        educational_objective=str(data.get("educational_objective") or ""),
        learning_takeaways=[str(t) for t in data.get("learning_takeaways") or []],
        engagement_hooks=[EngagementHook(h) for h in data.get("engagement_hooks") or []],
        episode_structure=EpisodeStructure(
            **{name: _segment_from_dict(structure.get(name)) for name in _SEGMENT_NAMES}
        ),
        age_bracket=AgeBracket(str(data["age_bracket"])),
        estimated_duration=float(data.get("estimated_duration") or 0),
    )


def load_content(path: str | Path) -> ScoreableContent:
    """Load one script object."""
    data = read_data(path)
    if not isinstance(data, Mapping):
        raise ValueError(f"{path}: expected a single script object")
    return content_from_dict(data)
