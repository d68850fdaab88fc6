"""Tests for cadence.profile module."""

from __future__ import annotations

import pytest

from cadence.models import CoachTone, Dimension, ScenarioCategory
from cadence.profile import (
    CATEGORY_WEIGHTS,
    TONE_WEIGHT_BIAS,
    AudioThresholds,
    BaselineMetrics,
    ScoreWeights,
    ScoringProfile,
    apply_baseline,
    apply_overrides,
    build_profile,
    default_profile,
)


class TestDefaults:
    def test_default_constants(self) -> None:
        """Test the default thresholds and tuning values."""
        profile = default_profile()
        assert profile.audio.noise_floor == 0.01
        assert profile.audio.pause_min_consecutive_windows == 3
        assert profile.audio.spike_std_dev_multiplier == 2.0
        assert profile.audio.pacing_optimal_range == (15.0, 30.0)
        assert profile.nlp.pacing_optimal_range == (120.0, 160.0)
        assert profile.nlp.insight_filler_word_count_threshold == 3
        assert profile.nlp.insight_hedging_phrase_count_threshold == 2
        assert profile.tuning.base_score == 75
        assert profile.tuning.blend_corroboration_bonus == 5

    def test_profile_is_immutable(self) -> None:
        """Test profiles cannot be modified."""
        profile = default_profile()
        with pytest.raises(ValueError):
            profile.tuning.base_score = 50

    def test_inverted_pacing_range_raises(self) -> None:
        """Test an inverted optimal range is rejected."""
        with pytest.raises(ValueError):
            AudioThresholds(pacing_optimal_range=(30.0, 15.0))

    def test_inverted_pacing_bounds_raise(self) -> None:
        """Test inverted pacing bounds are rejected."""
        with pytest.raises(ValueError):
            AudioThresholds(
                pacing_too_slow_segments_per_minute=50.0,
                pacing_too_fast_segments_per_minute=40.0,
            )

    def test_negative_weight_raises(self) -> None:
        """Test negative weights are rejected."""
        with pytest.raises(ValueError):
            ScoreWeights(tone=-1.0)


class TestBuildProfile:
    def test_deterministic(self) -> None:
        """Test identical inputs build identical profiles."""
        baseline = BaselineMetrics(segments_per_minute=28.0, average_level=0.2)
        first = build_profile("career", baseline, CoachTone.EXECUTIVE)
        second = build_profile("career", baseline, CoachTone.EXECUTIVE)
        assert first == second

    def test_weights_combine_category_and_tone(self) -> None:
        """Test weights multiply category and tone bias."""
        profile = build_profile(ScenarioCategory.CAREER, tone=CoachTone.GENTLE)
        category = CATEGORY_WEIGHTS[ScenarioCategory.CAREER]
        bias = TONE_WEIGHT_BIAS[CoachTone.GENTLE]
        for dimension in Dimension:
            assert profile.weights.for_dimension(dimension) == pytest.approx(
                category.for_dimension(dimension) * bias.for_dimension(dimension)
            )

    def test_accepts_string_values(self) -> None:
        """Test category and tone accept strings."""
        assert build_profile("difficult", tone="direct") == build_profile(
            ScenarioCategory.DIFFICULT, tone=CoachTone.DIRECT
        )

    def test_unknown_category_raises(self) -> None:
        """Test an unknown category is rejected."""
        with pytest.raises(ValueError):
            build_profile("negotiation")

    def test_thresholds_unchanged_without_baseline(self) -> None:
        """Test thresholds stay at defaults without a baseline."""
        profile = build_profile("relationships")
        assert profile.audio == default_profile().audio
        assert profile.tuning == default_profile().tuning

    def test_overrides_apply_before_baseline(self) -> None:
        """Test overrides apply before the baseline."""
        profile = build_profile(
            "boundaries",
            baseline=BaselineMetrics(segments_per_minute=30.5),
            overrides={"audio": {"pacing_optimal_range": [16.0, 28.0]}},
        )
        # midpoint 22, shift (30.5 - 22) * 0.25
        assert profile.audio.pacing_optimal_range == pytest.approx((18.125, 30.125))

    def test_weight_overrides_scale_category_weights(self) -> None:
        """Test weight overrides scale the category weights."""
        profile = build_profile("career", tone="gentle", overrides={"weights": {"tone": 2.0}})
        assert profile.weights.tone == pytest.approx(2.0 * 0.9 * 1.1)
        assert profile.weights.clarity == pytest.approx(1.1 * 1.05)


class TestApplyBaseline:
    def test_shifts_pacing_band_toward_usual_rate(self) -> None:
        """Test the pacing band moves toward the usual rate."""
        profile = apply_baseline(default_profile(), BaselineMetrics(segments_per_minute=30.5))
        assert profile.audio.pacing_optimal_range == pytest.approx((17.0, 32.0))
        assert profile.audio.pacing_too_slow_segments_per_minute == pytest.approx(12.0)
        assert profile.audio.pacing_too_fast_segments_per_minute == pytest.approx(42.0)

    def test_pacing_bounds_are_limited(self) -> None:
        """Test pacing bounds stay within limits."""
        slow = apply_baseline(default_profile(), BaselineMetrics(segments_per_minute=0.0))
        assert slow.audio.pacing_too_slow_segments_per_minute == 6.0

        fast = apply_baseline(default_profile(), BaselineMetrics(segments_per_minute=200.0))
        assert fast.audio.pacing_too_fast_segments_per_minute == 60.0

    def test_lowers_quiet_floor_for_soft_speakers(self) -> None:
        """Test soft speakers get a lower quiet floor."""
        profile = apply_baseline(default_profile(), BaselineMetrics(average_level=0.1))
        assert profile.audio.average_level_minimum == pytest.approx(0.06)

    def test_quiet_floor_has_minimum(self) -> None:
        """Test the quiet floor never drops below its minimum."""
        profile = apply_baseline(default_profile(), BaselineMetrics(average_level=0.01))
        assert profile.audio.average_level_minimum == 0.05

    def test_quiet_floor_never_rises(self) -> None:
        """Test loud speakers keep the default quiet floor."""
        profile = apply_baseline(default_profile(), BaselineMetrics(average_level=0.9))
        assert profile.audio.average_level_minimum == 0.1

    def test_relaxes_silence_cap(self) -> None:
        """Test the silence cap relaxes for pausing speakers."""
        profile = apply_baseline(default_profile(), BaselineMetrics(silence_ratio=0.5))
        assert profile.audio.silence_ratio_max == pytest.approx(0.6)

        capped = apply_baseline(default_profile(), BaselineMetrics(silence_ratio=0.9))
        assert capped.audio.silence_ratio_max == 0.7

    def test_empty_baseline_is_identity(self) -> None:
        """Test an empty baseline changes nothing."""
        profile = default_profile()
        assert apply_baseline(profile, BaselineMetrics()) is profile


class TestApplyOverrides:
    def test_override_tuning_value(self) -> None:
        """Test overriding a tuning value."""
        profile = apply_overrides(default_profile(), {"tuning": {"base_score": 70}})
        assert profile.tuning.base_score == 70
        assert profile.tuning.pacing_optimal_bonus == 10

    def test_unknown_group_raises(self) -> None:
        """Test an unknown group is rejected."""
        with pytest.raises(ValueError, match="Unknown profile group"):
            apply_overrides(default_profile(), {"acoustics": {"noise_floor": 0.02}})

    def test_unknown_field_raises(self) -> None:
        """Test an unknown field is rejected."""
        with pytest.raises(ValueError):
            apply_overrides(default_profile(), {"audio": {"loudness": 0.5}})

    def test_invalid_range_raises(self) -> None:
        """Test an inverted range override is rejected."""
        with pytest.raises(ValueError):
            apply_overrides(default_profile(), {"audio": {"pacing_optimal_range": [40, 10]}})

    def test_returns_scoring_profile(self) -> None:
        """Test overrides return a new profile."""
        assert isinstance(apply_overrides(default_profile(), {}), ScoringProfile)
