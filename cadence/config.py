"""
cadence.config - YAML config loading and validation.

Handles loading cadence.yaml, validating session settings, and resolving
the scoring profile those settings describe.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from cadence.exceptions import ConfigError
from cadence.models import DEFAULT_METERING_INTERVAL
from cadence.profile import BaselineMetrics, ScoringProfile, apply_overrides, build_profile

CONFIG_FILENAME = "cadence.yaml"


class CadenceConfig(BaseModel):
    """Resolved settings for one rehearsal session."""

    scenario_category: str = "boundaries"
    coach_tone: str = "gentle"

    transcription_enabled: bool = False
    transcription_timeout_seconds: float | None = Field(default=120.0, gt=0.0)
    whisper_model: str = "base"
    whisper_language: str | None = None

    metering_interval: float = Field(default=DEFAULT_METERING_INTERVAL, gt=0.0)

    scoring: dict[str, dict[str, Any]] = Field(default_factory=dict)

    @field_validator("scenario_category")
    @classmethod
    def validate_category(cls, v: str) -> str:
        valid = {"boundaries", "career", "relationships", "difficult"}
        if v not in valid:
            raise ValueError(f"scenario_category must be one of: {valid}")
        return v

    @field_validator("coach_tone")
    @classmethod
    def validate_coach_tone(cls, v: str) -> str:
        valid = {"gentle", "direct", "executive"}
        if v not in valid:
            raise ValueError(f"coach_tone must be one of: {valid}")
        return v

    @field_validator("whisper_model")
    @classmethod
    def validate_whisper_model(cls, v: str) -> str:
        valid = {"tiny", "base", "small", "medium", "large-v3"}
        if v not in valid:
            raise ValueError(f"whisper_model must be one of: {valid}")
        return v

    @field_validator("scoring")
    @classmethod
    def validate_scoring(cls, v: dict[str, dict[str, Any]]) -> dict[str, dict[str, Any]]:
        apply_overrides(ScoringProfile(), v)
        return v

    def profile(self, baseline: BaselineMetrics | None = None) -> ScoringProfile:
        """Build the scoring profile these settings describe."""
        return build_profile(
            self.scenario_category,
            baseline=baseline,
            tone=self.coach_tone,
            overrides=self.scoring or None,
        )


def merge_config(file_config: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Merge override values onto file config. Overrides take precedence."""
    merged = file_config.copy()
    for key, value in overrides.items():
        if key == "scoring" and isinstance(value, dict):
            scoring = {group: dict(values) for group, values in merged.get("scoring", {}).items()}
            for group, values in value.items():
                scoring.setdefault(group, {}).update(values)
            merged["scoring"] = scoring
        elif value is not None:
            merged[key] = value
    return merged


def load_config(path: Path, overrides: dict[str, Any] | None = None) -> CadenceConfig:
    """Load and validate configuration from a file or directory.

    Args:
        path: Path to a YAML file, or a directory containing cadence.yaml
        overrides: Optional values (e.g. from CLI flags) that win over the file

    Returns:
        Validated CadenceConfig

    Raises:
        ConfigError: If the file is missing, unreadable, or invalid
    """
    config_file = path / CONFIG_FILENAME if path.is_dir() else path
    if not config_file.exists():
        raise ConfigError(f"No {CONFIG_FILENAME} found at {path}")

    try:
        with open(config_file) as f:
            raw_config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_file}: {e}") from e

    if not isinstance(raw_config, dict):
        raise ConfigError(f"{config_file} must contain a mapping")

    merged = merge_config(raw_config, overrides or {})
    try:
        return CadenceConfig(**merged)
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid configuration in {config_file}: {e}") from e


def create_default_config(category: str = "boundaries", tone: str = "gentle") -> dict[str, Any]:
    """Create a default config dict for a new practice setup."""
    return {
        "scenario_category": category,
        "coach_tone": tone,
        "transcription_enabled": False,
        "transcription_timeout_seconds": 120.0,
        "whisper_model": "base",
        "metering_interval": DEFAULT_METERING_INTERVAL,
    }


def write_config(config: dict[str, Any], path: Path) -> None:
    """Write configuration to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)
