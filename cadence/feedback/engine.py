"""
cadence.feedback.engine - Score generation with graceful degradation.

Every score starts at the profile's base score and moves with measured
behavior:

- Clarity: pause count against the ideal, silence, sustained engagement
- Pacing: speaking segments per minute, effective speaking time
- Tone: volume stability and spike control
- Confidence: projection, consistency, silence, filling the space

When a transcript is available, transcript scores are primary and each
independent audio signal that agrees adds a flat corroboration bonus.
Any problem on the transcript path falls back to audio-only scoring.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

from cadence.analyze.metrics import AnalyzedMetrics, analyze_metrics
from cadence.analyze.speech import SentimentScorer, SpeechAnalysisResult, analyze_speech
from cadence.logging import logger
from cadence.models import AudioMetrics, CoachTone, FeedbackScores
from cadence.profile import ScoringProfile
from cadence.transcribe.provider import Available, TranscriptionProvider
from cadence.utils import clamp_score

AUDIO_ONLY_NOTICE = "Audio analysis only - enable on-device transcription for richer feedback"
GENERIC_ENCOURAGEMENT = "Great job! Keep practicing to maintain consistency"


@dataclass(frozen=True)
class FeedbackResult:
    """Scores plus everything needed to explain them."""

    scores: FeedbackScores
    analyzed: AnalyzedMetrics
    profile: ScoringProfile
    coach_tone: CoachTone
    transcription: str | None
    speech_analysis: SpeechAnalysisResult | None
    used_speech_analysis: bool
    insights: tuple[str, ...]

    @property
    def overall(self) -> int:
        return self.scores.weighted_overall(self.profile.weights)

    def to_dict(self) -> dict[str, Any]:
        return {
            "scores": self.scores.to_dict(),
            "overall": self.overall,
            "interpretation": interpretation(self.overall),
            "used_speech_analysis": self.used_speech_analysis,
            "transcription": self.transcription,
            "insights": list(self.insights),
            "metrics": self.analyzed.to_dict(),
            "speech_analysis": self.speech_analysis.to_dict() if self.speech_analysis else None,
        }


def calculate_clarity(metrics: AnalyzedMetrics) -> int:
    """Clear speakers pause intentionally and don't trail off."""
    tuning = metrics.profile.tuning
    score = tuning.base_score

    score -= abs(metrics.pause_count - metrics.ideal_pause_count) * tuning.clarity_pause_penalty

    if metrics.silence_ratio > tuning.clarity_silence_ratio_threshold:
        score -= int(
            (metrics.silence_ratio - tuning.clarity_silence_ratio_threshold)
            * tuning.clarity_silence_penalty_multiplier
        )

    if metrics.duration > tuning.clarity_duration_bonus_short:
        score += tuning.clarity_duration_bonus_value
    if metrics.duration > tuning.clarity_duration_bonus_long:
        score += tuning.clarity_duration_bonus_value

    if metrics.has_good_pause_pattern:
        score += tuning.clarity_good_pause_bonus

    return score


def calculate_pacing(metrics: AnalyzedMetrics) -> int:
    """Too fast feels rushed, too slow loses the listener."""
    audio = metrics.profile.audio
    tuning = metrics.profile.tuning
    score = tuning.base_score
    rate = metrics.segments_per_minute

    if rate < audio.pacing_too_slow_segments_per_minute:
        score -= int(
            (audio.pacing_too_slow_segments_per_minute - rate)
            * tuning.pacing_slow_penalty_multiplier
        )
    elif rate > audio.pacing_too_fast_segments_per_minute:
        score -= int(
            (rate - audio.pacing_too_fast_segments_per_minute)
            * tuning.pacing_fast_penalty_multiplier
        )
    elif metrics.is_pacing_optimal:
        score += tuning.pacing_optimal_bonus

    if metrics.duration < tuning.pacing_short_recording_threshold:
        score -= tuning.pacing_short_recording_penalty

    if metrics.effective_duration > tuning.pacing_sustained_delivery_threshold:
        score += tuning.pacing_sustained_delivery_bonus

    return score


def calculate_tone(metrics: AnalyzedMetrics) -> int:
    """Consistent volume sounds calm and controlled."""
    audio = metrics.profile.audio
    tuning = metrics.profile.tuning
    score = tuning.base_score

    score += int(metrics.volume_stability * tuning.tone_stability_multiplier)

    spikes_per_minute = metrics.spikes_per_minute
    if spikes_per_minute > audio.spikes_per_minute_max:
        score -= int(
            (spikes_per_minute - audio.spikes_per_minute_max) * tuning.tone_spike_penalty_multiplier
        )

    if metrics.has_inconsistent_volume:
        score -= tuning.tone_inconsistent_penalty

    return score


def calculate_confidence(metrics: AnalyzedMetrics) -> int:
    """Speaking up and holding steady sounds assured."""
    audio = metrics.profile.audio
    tuning = metrics.profile.tuning
    score = tuning.base_score

    if metrics.is_too_quiet:
        score -= tuning.confidence_low_volume_penalty
    elif metrics.average_level > audio.average_level_strong:
        score += tuning.confidence_high_volume_bonus

    score += int(metrics.volume_stability * tuning.confidence_stability_multiplier)

    if metrics.has_too_much_silence:
        score -= tuning.confidence_silence_ratio_penalty

    if metrics.duration < tuning.confidence_short_recording_threshold:
        score -= tuning.confidence_short_recording_penalty

    if metrics.effective_ratio > tuning.confidence_effective_duration_ratio:
        score += tuning.confidence_effective_duration_bonus

    return score


def score_audio_only(metrics: AnalyzedMetrics) -> FeedbackScores:
    """Score a recording from amplitude statistics alone."""
    return FeedbackScores(
        clarity=clamp_score(calculate_clarity(metrics)),
        pacing=clamp_score(calculate_pacing(metrics)),
        tone=clamp_score(calculate_tone(metrics)),
        confidence=clamp_score(calculate_confidence(metrics)),
    )


def blend_scores(
    metrics: AnalyzedMetrics,
    speech: SpeechAnalysisResult,
    profile: ScoringProfile,
) -> FeedbackScores:
    """Transcript scores, each nudged up when an audio signal agrees."""
    bonus = profile.tuning.blend_corroboration_bonus
    base = speech.scores(profile)

    clarity = base.clarity
    pacing = base.pacing
    tone = base.tone
    confidence = base.confidence

    if metrics.has_good_pause_pattern:
        clarity += bonus
    if metrics.volume_stability > profile.tuning.tone_stability_bonus_threshold:
        tone += bonus
    if metrics.average_level > profile.audio.average_level_strong:
        confidence += bonus
    if metrics.is_pacing_optimal and speech.pacing.is_optimal_pace(profile):
        pacing += bonus

    return FeedbackScores(
        clarity=clamp_score(clarity),
        pacing=clamp_score(pacing),
        tone=clamp_score(tone),
        confidence=clamp_score(confidence),
    )


def build_insights(speech: SpeechAnalysisResult | None, profile: ScoringProfile) -> list[str]:
    """Plain-language call-outs, each gated by a profile threshold.

    Without a transcript the only entry is the audio-only notice; with one
    and nothing to call out, a single encouragement.
    """
    if speech is None:
        return [AUDIO_ONLY_NOTICE]

    nlp = profile.nlp
    insights = []

    if speech.clarity.filler_word_count > nlp.insight_filler_word_count_threshold:
        top_fillers = ", ".join(speech.clarity.filler_words[:3])
        insights.append(f"Reduce filler words like: {top_fillers}")

    if not speech.pacing.is_optimal_pace(profile):
        low, high = nlp.pacing_optimal_range
        if speech.pacing.words_per_minute < low:
            insights.append("Try speaking slightly faster for better engagement")
        elif speech.pacing.words_per_minute > high:
            insights.append("Slow down a bit to improve clarity")

    if speech.confidence.hedging_phrase_count > nlp.insight_hedging_phrase_count_threshold:
        insights.append("Replace hedging phrases with more direct statements")

    if speech.tone.is_negative(profile):
        insights.append("Try using more positive language")

    if not insights:
        insights.append(GENERIC_ENCOURAGEMENT)

    return insights


def _audio_only_result(
    analyzed: AnalyzedMetrics, profile: ScoringProfile, tone: CoachTone
) -> FeedbackResult:
    return FeedbackResult(
        scores=score_audio_only(analyzed),
        analyzed=analyzed,
        profile=profile,
        coach_tone=tone,
        transcription=None,
        speech_analysis=None,
        used_speech_analysis=False,
        insights=tuple(build_insights(None, profile)),
    )


def score_recording(
    metrics: AudioMetrics,
    profile: ScoringProfile,
    tone: CoachTone = CoachTone.GENTLE,
) -> FeedbackResult:
    """Audio-only scoring; always available and never suspends."""
    return _audio_only_result(analyze_metrics(metrics, profile), profile, CoachTone(tone))


async def _run_speech_analysis(
    provider: TranscriptionProvider,
    duration: float,
    profile: ScoringProfile,
    sentiment: SentimentScorer | None,
) -> SpeechAnalysisResult | None:
    if not await provider.authorize():
        logger.info("Speech recognition not authorized, using audio-only scoring")
        return None

    outcome = await provider.transcribe()
    if not isinstance(outcome, Available):
        logger.warning("Transcription unavailable (%s), using audio-only scoring", outcome)
        return None
    if outcome.result.is_empty:
        logger.info("Transcript was empty, using audio-only scoring")
        return None

    speech = analyze_speech(outcome.result, duration, profile, sentiment=sentiment)
    logger.info(
        "Speech analysis complete: %d words, %d fillers",
        speech.clarity.total_word_count,
        speech.clarity.filler_word_count,
    )
    return speech


async def generate_feedback(
    metrics: AudioMetrics,
    profile: ScoringProfile,
    *,
    tone: CoachTone = CoachTone.GENTLE,
    transcription_enabled: bool = False,
    provider: TranscriptionProvider | None = None,
    timeout: float | None = None,
    sentiment: SentimentScorer | None = None,
) -> FeedbackResult:
    """Score a recording, blending in transcript analysis when possible.

    The transcript path runs only when transcription is enabled and a
    provider is supplied. Unauthorized, unavailable, failed, timed-out or
    erroring transcription all resolve to audio-only scoring; cancelling
    the calling task still cancels the transcription.

    Args:
        metrics: Raw amplitude windows for the finished recording
        profile: Scoring profile for this session
        tone: Coach tone carried on the result
        transcription_enabled: User opt-in for on-device transcription
        provider: Transcription capability bound to this recording
        timeout: Seconds to wait for authorization plus transcription
            (None waits indefinitely)
        sentiment: Optional sentence sentiment scorer

    Returns:
        FeedbackResult with used_speech_analysis telling which path ran
    """
    tone = CoachTone(tone)
    analyzed = analyze_metrics(metrics, profile)

    if not transcription_enabled or provider is None:
        return _audio_only_result(analyzed, profile, tone)

    try:
        speech = await asyncio.wait_for(
            _run_speech_analysis(provider, metrics.duration, profile, sentiment),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        logger.warning("Transcription timed out after %ss, using audio-only scoring", timeout)
        speech = None
    except Exception as e:
        logger.warning("Speech analysis failed, using audio-only scoring: %s", e)
        speech = None

    if speech is None:
        return _audio_only_result(analyzed, profile, tone)

    return FeedbackResult(
        scores=blend_scores(analyzed, speech, profile),
        analyzed=analyzed,
        profile=profile,
        coach_tone=tone,
        transcription=speech.transcription.text,
        speech_analysis=speech,
        used_speech_analysis=True,
        insights=tuple(build_insights(speech, profile)),
    )


def interpretation(score: int) -> str:
    """One-line reading of an overall score."""
    if score >= 90:
        return "Excellent delivery. You sound ready."
    elif score >= 80:
        return "Strong performance. Minor refinements possible."
    elif score >= 70:
        return "Good foundation. Focus on consistency."
    elif score >= 60:
        return "Developing well. Keep practicing."
    elif score >= 50:
        return "Room to grow. Try again with the focus below."
    return "Let's work on the basics. One thing at a time."
