"""
cadence.profile - Scoring profile: every threshold, weight and tuning constant.

A ScoringProfile is built deterministically from a scenario category, an
optional baseline of recent sessions, and the selected coach tone.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from cadence.models import DEFAULT_COACH_TONE, CoachTone, Dimension, ScenarioCategory


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class AudioThresholds(_Frozen):
    """Thresholds applied to raw amplitude statistics."""

    noise_floor: float = Field(default=0.01, ge=0.0)
    pause_min_consecutive_windows: int = Field(default=3, ge=1)
    spike_std_dev_multiplier: float = Field(default=2.0, ge=0.0)
    pacing_too_slow_segments_per_minute: float = 10.0
    pacing_too_fast_segments_per_minute: float = 40.0
    pacing_optimal_range: tuple[float, float] = (15.0, 30.0)
    spikes_per_minute_max: float = 5.0
    volume_stability_minimum: float = 0.5
    average_level_minimum: float = 0.1
    average_level_strong: float = 0.3
    silence_ratio_max: float = 0.5
    ideal_pause_interval_seconds: float = Field(default=20.0, gt=0.0)
    pause_tolerance_factor: float = Field(default=0.5, ge=0.0)

    @model_validator(mode="after")
    def validate_bounds(self) -> AudioThresholds:
        low, high = self.pacing_optimal_range
        if low > high:
            raise ValueError("pacing_optimal_range lower bound exceeds upper bound")
        if self.pacing_too_slow_segments_per_minute > self.pacing_too_fast_segments_per_minute:
            raise ValueError("pacing too-slow bound exceeds too-fast bound")
        return self


class NlpThresholds(_Frozen):
    """Thresholds and penalties for transcript-derived sub-scores."""

    clarity_base_score: int = 85
    filler_penalty_per_word: int = 3
    filler_penalty_max: int = 30
    repeated_penalty_per_word: int = 5
    repeated_penalty_max: int = 15
    incomplete_penalty_per_sentence: int = 5
    incomplete_penalty_max: int = 15
    low_confidence_penalty_per_segment: int = 2
    low_confidence_penalty_max: int = 10
    low_confidence_segment_threshold: float = 0.5
    average_word_length_bonus_threshold: float = 5.0
    average_word_length_bonus: int = 5

    pacing_base_score: int = 80
    pacing_slow_words_per_minute: float = 100.0
    pacing_fast_words_per_minute: float = 180.0
    pacing_optimal_range: tuple[float, float] = (120.0, 160.0)
    pacing_optimal_bonus: int = 10
    pacing_penalty_divisor: float = Field(default=5.0, gt=0.0)
    no_pause_penalty_duration: float = 30.0
    no_pause_penalty: int = 10
    long_pause_penalty_threshold: int = 3
    long_pause_penalty_per_pause: int = 3
    medium_pause_bonus: int = 5

    confidence_base_score: int = 80
    hedging_penalty_per_phrase: int = 4
    hedging_penalty_max: int = 24
    weak_opener_penalty_per_phrase: int = 5
    weak_opener_penalty_max: int = 15
    apologetic_penalty_per_phrase: int = 5
    apologetic_penalty_max: int = 15
    assertive_bonus_per_phrase: int = 3
    assertive_bonus_max: int = 15
    question_ratio_threshold: float = 0.1
    question_ratio_penalty: int = 5
    insight_filler_word_count_threshold: int = 3
    insight_hedging_phrase_count_threshold: int = 2

    tone_base_score: int = 75
    sentiment_multiplier: float = 15.0
    sentiment_negative_threshold: float = -0.1
    sentiment_positive_threshold: float = 0.1
    emotion_balance_threshold: int = 2
    emotion_balance_bonus: int = 5
    formality_bonus_range: tuple[int, int] = (1, 3)
    formality_bonus: int = 5
    formality_penalty_threshold: int = 5
    formality_penalty: int = 5
    contraction_bonus_range: tuple[int, int] = (1, 5)
    contraction_bonus: int = 5

    pause_threshold_seconds: float = 0.3
    short_pause_upper_bound: float = 1.0
    medium_pause_upper_bound: float = 2.0


class ScoreTuning(_Frozen):
    """Base score plus per-signal bonuses and penalties for audio scoring."""

    base_score: int = 75

    clarity_pause_penalty: int = 5
    clarity_silence_ratio_threshold: float = 0.4
    clarity_silence_penalty_multiplier: float = 50.0
    clarity_duration_bonus_short: float = 30.0
    clarity_duration_bonus_long: float = 60.0
    clarity_duration_bonus_value: int = 5
    clarity_good_pause_bonus: int = 5

    pacing_slow_penalty_multiplier: float = 3.0
    pacing_fast_penalty_multiplier: float = 2.0
    pacing_optimal_bonus: int = 10
    pacing_short_recording_threshold: float = 15.0
    pacing_short_recording_penalty: int = 15
    pacing_sustained_delivery_threshold: float = 30.0
    pacing_sustained_delivery_bonus: int = 5

    tone_stability_multiplier: float = 20.0
    tone_spike_penalty_multiplier: float = 3.0
    tone_inconsistent_penalty: int = 10
    tone_stability_bonus_threshold: float = 0.7

    confidence_low_volume_penalty: int = 15
    confidence_high_volume_bonus: int = 10
    confidence_stability_multiplier: float = 15.0
    confidence_silence_ratio_penalty: int = 10
    confidence_short_recording_threshold: float = 10.0
    confidence_short_recording_penalty: int = 10
    confidence_effective_duration_ratio: float = 0.7
    confidence_effective_duration_bonus: int = 5

    # Flat bonus per corroborating audio signal on the blended path.
    blend_corroboration_bonus: int = 5

    low_score_threshold: int = 60
    baseline_silence_margin: float = 0.05
    baseline_pacing_margin: float = 2.0
    baseline_stability_margin: float = 0.05
    baseline_level_margin: float = 0.02


class ScoreWeights(_Frozen):
    """Per-dimension weights for overall averaging and strongest/weakest selection."""

    clarity: float = Field(default=1.0, ge=0.0)
    pacing: float = Field(default=1.0, ge=0.0)
    tone: float = Field(default=1.0, ge=0.0)
    confidence: float = Field(default=1.0, ge=0.0)

    def for_dimension(self, dimension: Dimension) -> float:
        return getattr(self, dimension.value)

    def scaled_by(self, bias: ScoreWeights) -> ScoreWeights:
        return ScoreWeights(
            clarity=self.clarity * bias.clarity,
            pacing=self.pacing * bias.pacing,
            tone=self.tone * bias.tone,
            confidence=self.confidence * bias.confidence,
        )


class BaselineMetrics(_Frozen):
    """Rolling averages over a user's recent sessions for one scenario."""

    segments_per_minute: float | None = None
    average_level: float | None = None
    silence_ratio: float | None = None
    volume_stability: float | None = None
    words_per_minute: float | None = None


class ScoringProfile(_Frozen):
    """Single source of truth for every threshold, weight and tuning constant."""

    audio: AudioThresholds = Field(default_factory=AudioThresholds)
    nlp: NlpThresholds = Field(default_factory=NlpThresholds)
    tuning: ScoreTuning = Field(default_factory=ScoreTuning)
    weights: ScoreWeights = Field(default_factory=ScoreWeights)


CATEGORY_WEIGHTS: dict[ScenarioCategory, ScoreWeights] = {
    ScenarioCategory.BOUNDARIES: ScoreWeights(clarity=1.1, pacing=0.95, tone=0.95, confidence=1.1),
    ScenarioCategory.CAREER: ScoreWeights(clarity=1.1, pacing=1.05, tone=0.9, confidence=1.05),
    ScenarioCategory.RELATIONSHIPS: ScoreWeights(
        clarity=1.0, pacing=0.95, tone=1.1, confidence=0.95
    ),
    ScenarioCategory.DIFFICULT: ScoreWeights(clarity=1.05, pacing=0.95, tone=1.05, confidence=1.0),
}

TONE_WEIGHT_BIAS: dict[CoachTone, ScoreWeights] = {
    CoachTone.GENTLE: ScoreWeights(clarity=1.05, pacing=0.95, tone=1.1, confidence=0.95),
    CoachTone.DIRECT: ScoreWeights(clarity=1.0, pacing=1.1, tone=0.9, confidence=1.1),
    CoachTone.EXECUTIVE: ScoreWeights(clarity=1.15, pacing=1.0, tone=0.95, confidence=1.15),
}


def default_profile() -> ScoringProfile:
    """Return the default profile with unit weights."""
    return ScoringProfile()


def apply_overrides(profile: ScoringProfile, overrides: dict[str, Any]) -> ScoringProfile:
    """Merge nested override dicts (e.g. from YAML) into a profile.

    Overrides are validated through the group models, so an inverted range
    or unknown key raises a pydantic ValidationError.

    Args:
        profile: Profile to start from
        overrides: Mapping of group name ("audio", "nlp", "tuning", "weights")
            to a dict of field overrides

    Returns:
        New validated profile
    """
    data = profile.model_dump()
    for group, values in overrides.items():
        if group not in data:
            raise ValueError(f"Unknown profile group: {group}")
        if values:
            data[group].update(values)
    return ScoringProfile.model_validate(data)


def apply_baseline(profile: ScoringProfile, baseline: BaselineMetrics) -> ScoringProfile:
    """Nudge audio thresholds toward a user's recent sessions."""
    audio = profile.audio
    updates: dict[str, Any] = {}

    if baseline.segments_per_minute is not None:
        low, high = audio.pacing_optimal_range
        midpoint = (low + high) / 2
        adjustment = (baseline.segments_per_minute - midpoint) * 0.25
        updates["pacing_optimal_range"] = (low + adjustment, high + adjustment)
        updates["pacing_too_slow_segments_per_minute"] = max(
            6.0, audio.pacing_too_slow_segments_per_minute + adjustment
        )
        updates["pacing_too_fast_segments_per_minute"] = min(
            60.0, audio.pacing_too_fast_segments_per_minute + adjustment
        )

    if baseline.average_level is not None:
        target = min(audio.average_level_minimum, baseline.average_level * 0.6)
        updates["average_level_minimum"] = max(0.05, target)

    if baseline.silence_ratio is not None:
        updates["silence_ratio_max"] = min(
            0.7, max(audio.silence_ratio_max, baseline.silence_ratio + 0.1)
        )

    if not updates:
        return profile
    return profile.model_copy(update={"audio": audio.model_copy(update=updates)})


def build_profile(
    category: ScenarioCategory | str,
    baseline: BaselineMetrics | None = None,
    tone: CoachTone | str = DEFAULT_COACH_TONE,
    overrides: dict[str, Any] | None = None,
) -> ScoringProfile:
    """Build the scoring profile for one analysis.

    Identical inputs always yield an identical profile.

    Args:
        category: Scenario category driving the dimension weights
        baseline: Optional rolling averages of recent same-scenario sessions
        tone: Coach tone; biases the weights
        overrides: Optional nested field overrides applied first

    Returns:
        Resolved ScoringProfile
    """
    category = ScenarioCategory(category)
    tone = CoachTone(tone)

    profile = default_profile()
    if overrides:
        profile = apply_overrides(profile, overrides)

    weights = CATEGORY_WEIGHTS[category].scaled_by(TONE_WEIGHT_BIAS[tone])
    if overrides and overrides.get("weights"):
        weights = profile.weights.scaled_by(weights)
    profile = profile.model_copy(update={"weights": weights})

    if baseline is not None:
        profile = apply_baseline(profile, baseline)

    return profile
