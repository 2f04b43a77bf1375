"""Configuration management for kidsvid."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

# ── Quality gate ──────────────────────────────────────────────────────────
PASSING_THRESHOLD = 7
EXCLAMATION_DENSITY_LIMIT = 0.05
MIN_OBJECTIVE_LENGTH = 10
INTERACTIVE_CHECK_MIN_SCRIPT_LENGTH = 100
TEACHING_CHECK_MIN_DURATION = 60

# ── Pattern detector sample gates ─────────────────────────────────────────
MIN_CATEGORY_SAMPLE = 5
MIN_TITLE_FEATURE_SAMPLE = 5
MIN_KEYWORD_RECURRENCE = 3
MIN_DATED_VIDEOS = 10
MIN_HOUR_SAMPLE = 3
RECENT_UPLOAD_WINDOW = 20
MIN_TAGGED_VIDEOS = 5
MIN_POPULAR_TAG_COUNT = 3
MIN_HIGH_PERFORMING_TAG_COUNT = 5
MIN_BUCKET_SAMPLE = 5
MIN_CAPS_SAMPLE = 5
SHORT_TITLE_MAX_LENGTH = 40

# ── Engagement analysis ───────────────────────────────────────────────────
VIRAL_MULTIPLIER = 3

SETTINGS_FILE = "settings.yaml"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ReportConfig(BaseModel):
    """How much of an analysis run the CLI prints."""

    top_channels: int = 5
    max_findings: int = 50
    show_metadata: bool = False


class Config(BaseModel):
    """Top-level application configuration."""

    log_level: str = "WARNING"
    report: ReportConfig = Field(default_factory=ReportConfig)

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {value!r}")
        return level

    @classmethod
    def load_from_file(cls, path: str | Path) -> Config:
        """Load settings from a YAML file.

        Raises FileNotFoundError for a missing path and ValueError for YAML
        that does not parse or does not validate.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"No such settings file: {path}")
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"{path}: invalid YAML: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"{path}: settings must be a mapping")
        return cls(**data)

    @classmethod
    def load_default(cls) -> Config:
        """Load settings.yaml from the working directory, or fall back to defaults."""
        path = Path(SETTINGS_FILE)
        if path.exists():
            return cls.load_from_file(path)
        return cls()

    def save_to_file(self, path: str | Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            yaml.safe_dump(self.model_dump(), default_flow_style=False, sort_keys=False),
            encoding="utf-8",
        )
