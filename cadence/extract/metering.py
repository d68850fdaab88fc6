"""
cadence.extract.metering - RMS and peak windows from a waveform.

Mirrors what a live recorder meters: one RMS and one peak reading per
fixed interval, both on a linear 0-1 amplitude scale.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np

from cadence.exceptions import AnalysisError, DependencyError
from cadence.logging import logger
from cadence.models import DEFAULT_METERING_INTERVAL, AudioMetrics


def metrics_from_signal(
    samples: np.ndarray,
    sr: int,
    interval: float = DEFAULT_METERING_INTERVAL,
) -> AudioMetrics:
    """Meter a mono waveform into fixed-interval windows.

    A trailing partial window is kept so short recordings still meter.

    Args:
        samples: Mono float samples in [-1, 1]
        sr: Sample rate in Hz
        interval: Window length in seconds

    Returns:
        AudioMetrics with one RMS and one peak value per window
    """
    if sr <= 0:
        raise AnalysisError(f"Invalid sample rate: {sr}")
    if interval <= 0:
        raise AnalysisError(f"Invalid metering interval: {interval}")

    audio = np.asarray(samples, dtype=np.float64)
    if audio.ndim > 1:
        audio = np.mean(audio, axis=0)

    duration = len(audio) / sr
    hop = max(1, int(round(sr * interval)))

    rms_windows = []
    peak_windows = []
    for start in range(0, len(audio), hop):
        frame = audio[start : start + hop]
        rms_windows.append(float(np.sqrt(np.mean(frame**2))))
        peak_windows.append(float(np.max(np.abs(frame))))

    return AudioMetrics(
        rms_windows=tuple(rms_windows),
        peak_windows=tuple(peak_windows),
        duration=duration,
        interval=interval,
    )


def metrics_from_audio(path: Path, interval: float = DEFAULT_METERING_INTERVAL) -> AudioMetrics:
    """Load an audio file with librosa and meter it.

    Raises:
        DependencyError: If librosa is not installed
        AnalysisError: If the file cannot be decoded
    """
    try:
        import librosa
    except ImportError as e:
        raise DependencyError(
            "librosa",
            "needed to read audio files",
            install_hint="pip install 'cadence-coach[audio]'",
        ) from e

    try:
        samples, sr = librosa.load(str(path), sr=None, mono=True)
    except Exception as e:
        raise AnalysisError(f"Could not load audio from {path}: {e}") from e

    metrics = metrics_from_signal(samples, int(sr), interval)
    logger.debug(
        "Metered %s: %.1fs, %d windows", path.name, metrics.duration, len(metrics.rms_windows)
    )
    return metrics
