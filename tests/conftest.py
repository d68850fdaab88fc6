"""
Test configuration and shared fixtures.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Callable
from typing import Any

import pytest

from cadence.analyze.metrics import AnalyzedMetrics
from cadence.models import AudioMetrics, TranscriptionResult, TranscriptionSegment
from cadence.profile import ScoringProfile, default_profile
from cadence.transcribe.provider import Available, TranscriptionOutcome, Unavailable

# Keep Rich from wrapping CLI output at the runner's terminal width.
os.environ["COLUMNS"] = "200"


class RaisingTranscriber:
    """Authorizes, then blows up mid-transcription."""

    async def authorize(self) -> bool:
        return True

    async def transcribe(self) -> TranscriptionOutcome:
        raise RuntimeError("recognizer crashed")


class DeniedTranscriber:
    def __init__(self) -> None:
        self.transcribe_called = False

    async def authorize(self) -> bool:
        return False

    async def transcribe(self) -> TranscriptionOutcome:
        self.transcribe_called = True
        return Unavailable()


class SlowTranscriber:
    """Never finishes within any reasonable timeout."""

    def __init__(self, result: TranscriptionResult | None = None, delay: float = 10.0) -> None:
        self.result = result or TranscriptionResult(text="too late")
        self.delay = delay

    async def authorize(self) -> bool:
        return True

    async def transcribe(self) -> TranscriptionOutcome:
        await asyncio.sleep(self.delay)
        return Available(self.result)


class HangingAuthorizeTranscriber:
    """Authorization never comes back, like an unanswered permission prompt."""

    def __init__(self, delay: float = 3600.0) -> None:
        self.delay = delay
        self.transcribe_called = False

    async def authorize(self) -> bool:
        await asyncio.sleep(self.delay)
        return True

    async def transcribe(self) -> TranscriptionOutcome:
        self.transcribe_called = True
        return Unavailable()


ANALYZED_DEFAULTS: dict[str, Any] = {
    "pause_count": 2,
    "spike_count": 1,
    "segments_per_minute": 22.0,
    "volume_stability": 0.8,
    "average_level": 0.35,
    "peak_level": 0.9,
    "silence_ratio": 0.2,
    "duration": 45.0,
    "effective_duration": 36.0,
}


@pytest.fixture
def make_analyzed() -> Callable[..., AnalyzedMetrics]:
    """Factory for AnalyzedMetrics with sensible strong defaults."""

    def _make(profile: ScoringProfile | None = None, **overrides: Any) -> AnalyzedMetrics:
        values = {**ANALYZED_DEFAULTS, **overrides}
        return AnalyzedMetrics(profile=profile or default_profile(), **values)

    return _make


@pytest.fixture
def strong_analyzed(make_analyzed) -> AnalyzedMetrics:
    """Audio-only scores: clarity 85, pacing 90, tone 91, confidence 100."""
    return make_analyzed()


@pytest.fixture
def struggling_analyzed(make_analyzed) -> AnalyzedMetrics:
    """Audio-only scores: clarity 50, pacing 65, tone 49, confidence 53."""
    return make_analyzed(
        pause_count=0,
        spike_count=6,
        segments_per_minute=45.0,
        volume_stability=0.25,
        average_level=0.05,
        peak_level=0.4,
        silence_ratio=0.9,
        duration=30.0,
        effective_duration=3.0,
    )


@pytest.fixture
def speech_metrics() -> AudioMetrics:
    """45 seconds of phrases (3s speech, 0.5s silence) metered every 0.1s."""
    rms = []
    while len(rms) < 450:
        rms.extend([0.3, 0.35, 0.25] * 10)
        rms.extend([0.002] * 5)
    rms = rms[:450]
    return AudioMetrics(
        rms_windows=tuple(rms),
        peak_windows=tuple(v * 1.5 for v in rms),
        duration=45.0,
    )


@pytest.fixture
def clean_transcript() -> TranscriptionResult:
    """Direct, assertive, well-paced over six seconds."""
    return TranscriptionResult(
        text="I need us to agree on the plan today and I will lead it."
    )


@pytest.fixture
def filler_transcript() -> TranscriptionResult:
    """Five fillers and four hedges."""
    return TranscriptionResult(
        text="Um, uh, like, um, basically I think maybe I guess we should probably go."
    )


@pytest.fixture
def timed_transcript() -> TranscriptionResult:
    """Word segments with one medium and one long gap."""
    return TranscriptionResult(
        text="a b c d",
        segments=(
            TranscriptionSegment(text="a", timestamp=0.0, duration=0.25, confidence=0.9),
            TranscriptionSegment(text="b", timestamp=0.25, duration=0.25, confidence=0.3),
            TranscriptionSegment(text="c", timestamp=1.5, duration=0.25, confidence=0.95),
            TranscriptionSegment(text="d", timestamp=4.0, duration=0.25, confidence=0.8),
        ),
    )


@pytest.fixture
def raising_provider() -> RaisingTranscriber:
    return RaisingTranscriber()


@pytest.fixture
def denied_provider() -> DeniedTranscriber:
    return DeniedTranscriber()


@pytest.fixture
def slow_provider() -> SlowTranscriber:
    return SlowTranscriber()


@pytest.fixture
def hanging_authorize_provider() -> HangingAuthorizeTranscriber:
    return HangingAuthorizeTranscriber()
