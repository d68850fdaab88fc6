"""
cadence.analyze.metrics - Delivery statistics from raw amplitude windows.

Pause detection, spike detection, rhythm, volume stability and effective
speaking time, all computed from RMS windows with numpy. Degenerate input
(empty or single-window recordings) resolves to neutral values.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from cadence.logging import logger
from cadence.models import AudioMetrics
from cadence.profile import ScoringProfile, default_profile


@dataclass(frozen=True)
class AnalyzedMetrics:
    """Delivery statistics for one recording, bound to the profile that judged them."""

    pause_count: int
    spike_count: int
    segments_per_minute: float
    volume_stability: float
    average_level: float
    peak_level: float
    silence_ratio: float
    duration: float
    effective_duration: float
    profile: ScoringProfile

    @property
    def spikes_per_minute(self) -> float:
        return self.spike_count / max(0.1, self.duration / 60)

    @property
    def effective_ratio(self) -> float:
        if self.duration <= 0:
            return 0.0
        return self.effective_duration / self.duration

    @property
    def is_pacing_too_fast(self) -> bool:
        return self.segments_per_minute > self.profile.audio.pacing_too_fast_segments_per_minute

    @property
    def is_pacing_too_slow(self) -> bool:
        return self.segments_per_minute < self.profile.audio.pacing_too_slow_segments_per_minute

    @property
    def is_pacing_optimal(self) -> bool:
        low, high = self.profile.audio.pacing_optimal_range
        return low <= self.segments_per_minute <= high

    @property
    def has_too_many_spikes(self) -> bool:
        if self.duration <= 0:
            return False
        return self.spike_count / (self.duration / 60) > self.profile.audio.spikes_per_minute_max

    @property
    def has_inconsistent_volume(self) -> bool:
        return self.volume_stability < self.profile.audio.volume_stability_minimum

    @property
    def is_too_quiet(self) -> bool:
        return self.average_level < self.profile.audio.average_level_minimum

    @property
    def has_too_much_silence(self) -> bool:
        return self.silence_ratio > self.profile.audio.silence_ratio_max

    @property
    def ideal_pause_count(self) -> int:
        return max(1, int(self.duration / self.profile.audio.ideal_pause_interval_seconds))

    @property
    def has_good_pause_pattern(self) -> bool:
        ideal = self.ideal_pause_count
        tolerance = max(1, int(ideal * self.profile.audio.pause_tolerance_factor))
        return abs(self.pause_count - ideal) <= tolerance

    def to_dict(self) -> dict[str, Any]:
        return {
            "pause_count": self.pause_count,
            "spike_count": self.spike_count,
            "segments_per_minute": round(self.segments_per_minute, 2),
            "volume_stability": round(self.volume_stability, 3),
            "average_level": round(self.average_level, 4),
            "peak_level": round(self.peak_level, 4),
            "silence_ratio": round(self.silence_ratio, 3),
            "duration": round(self.duration, 2),
            "effective_duration": round(self.effective_duration, 2),
        }


def count_pauses(windows: np.ndarray, threshold: float, min_consecutive_windows: int) -> int:
    """Count runs of below-threshold windows at least min_consecutive_windows long.

    A silent run that reaches the end of the recording counts too.
    """
    count = 0
    run = 0
    for rms in windows:
        if rms < threshold:
            run += 1
        else:
            if run >= min_consecutive_windows:
                count += 1
            run = 0
    if run >= min_consecutive_windows:
        count += 1
    return count


def count_spikes(windows: np.ndarray, std_dev_multiplier: float) -> int:
    """Count windows louder than mean + multiplier * population stddev."""
    if windows.size <= 1:
        return 0
    threshold = windows.mean() + windows.std() * std_dev_multiplier
    return int(np.count_nonzero(windows > threshold))


def segments_per_minute(windows: np.ndarray, threshold: float, duration: float) -> float:
    """Silence-to-speech transitions normalized to a per-minute rate."""
    if duration <= 0:
        return 0.0
    voiced = windows >= threshold
    if voiced.size == 0:
        return 0.0
    onsets = int(voiced[0]) + int(np.count_nonzero(voiced[1:] & ~voiced[:-1]))
    minutes = max(0.1, duration / 60.0)
    return onsets / minutes


def volume_stability(windows: np.ndarray) -> float:
    """Inverted coefficient of variation, clamped to [0, 1].

    Fewer than two windows, or a zero mean, is perfectly stable.
    """
    if windows.size <= 1:
        return 1.0
    mean = windows.mean()
    if mean <= 0:
        return 1.0
    cv = windows.std() / mean
    return float(max(0.0, min(1.0, 1.0 - cv)))


def effective_duration(windows: np.ndarray, threshold: float, interval: float) -> float:
    """Seconds spent at or above the noise floor."""
    return int(np.count_nonzero(windows >= threshold)) * interval


def analyze_metrics(
    metrics: AudioMetrics,
    profile: ScoringProfile | None = None,
) -> AnalyzedMetrics:
    """Analyze raw amplitude windows into delivery statistics.

    Args:
        metrics: Raw RMS/peak windows for a finished recording
        profile: Scoring profile supplying the audio thresholds

    Returns:
        AnalyzedMetrics bound to the profile
    """
    profile = profile or default_profile()
    audio = profile.audio

    windows = np.asarray(metrics.rms_windows, dtype=np.float64)
    effective = windows[windows > audio.noise_floor]

    silence_ratio = (windows.size - effective.size) / windows.size if windows.size else 0.0
    average_level = float(effective.mean()) if effective.size else 0.0

    analyzed = AnalyzedMetrics(
        pause_count=count_pauses(windows, audio.noise_floor, audio.pause_min_consecutive_windows),
        spike_count=count_spikes(windows, audio.spike_std_dev_multiplier),
        segments_per_minute=segments_per_minute(windows, audio.noise_floor, metrics.duration),
        volume_stability=volume_stability(effective),
        average_level=average_level,
        peak_level=float(max(metrics.peak_windows, default=0.0)),
        silence_ratio=silence_ratio,
        duration=metrics.duration,
        effective_duration=effective_duration(windows, audio.noise_floor, metrics.interval),
        profile=profile,
    )

    logger.debug(
        "Analyzed %d windows: pauses=%d spikes=%d rate=%.1f/min stability=%.2f",
        windows.size,
        analyzed.pause_count,
        analyzed.spike_count,
        analyzed.segments_per_minute,
        analyzed.volume_stability,
    )
    return analyzed
