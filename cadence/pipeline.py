"""
cadence.pipeline - One finished recording in, one coaching report out.

Resolves the scoring profile from settings, scores the recording (with
optional transcription), and reduces the result to notes and a focus.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from cadence.analyze.speech import SentimentScorer
from cadence.config import CadenceConfig
from cadence.feedback.engine import FeedbackResult, generate_feedback, interpretation
from cadence.feedback.notes import category_tips, generate_coaching
from cadence.logging import logger
from cadence.models import (
    AudioMetrics,
    CoachingPlan,
    CoachTone,
    FeedbackScores,
    ScenarioCategory,
    ScoreDelta,
)
from cadence.profile import BaselineMetrics
from cadence.transcribe.provider import TranscriptionProvider


@dataclass(frozen=True)
class SessionReport:
    """Everything the rehearsal screen shows after a take."""

    feedback: FeedbackResult
    plan: CoachingPlan
    category: ScenarioCategory
    metrics: AudioMetrics
    previous: FeedbackScores | None = None

    @property
    def tips(self) -> list[str]:
        return category_tips(self.category)

    @property
    def delta(self) -> ScoreDelta | None:
        """Score change against the previous session, if one was given."""
        return self.feedback.scores.delta(self.previous)

    @property
    def transcript_confidence(self) -> float | None:
        speech = self.feedback.speech_analysis
        if speech is None or not speech.transcription.segments:
            return None
        return speech.transcription.average_confidence

    def recording_dict(self) -> dict[str, Any]:
        return {
            "average_rms": round(self.metrics.average_rms, 4),
            "peak_level": round(self.metrics.peak_level, 4),
            "waveform": [round(v, 3) for v in self.metrics.normalized_waveform()],
        }

    def to_dict(self) -> dict[str, Any]:
        feedback = self.feedback
        delta = self.delta
        confidence = self.transcript_confidence
        return {
            "scenario_category": self.category.value,
            "coach_tone": feedback.coach_tone.value,
            "scores": feedback.scores.to_dict(),
            "overall": feedback.overall,
            "tier": feedback.scores.tier,
            "interpretation": interpretation(feedback.overall),
            "used_speech_analysis": feedback.used_speech_analysis,
            "insights": list(feedback.insights),
            "notes": [note.to_dict() for note in self.plan.notes],
            "focus": self.plan.focus.to_dict(),
            "tips": self.tips,
            "metrics": feedback.analyzed.to_dict(),
            "recording": self.recording_dict(),
            "transcription": feedback.transcription,
            "transcript_confidence": None if confidence is None else round(confidence, 3),
            "change": None if delta is None else delta.to_dict(),
        }


async def coach_recording(
    metrics: AudioMetrics,
    *,
    category: ScenarioCategory | str | None = None,
    tone: CoachTone | str | None = None,
    baseline: BaselineMetrics | None = None,
    transcription_enabled: bool | None = None,
    provider: TranscriptionProvider | None = None,
    config: CadenceConfig | None = None,
    sentiment: SentimentScorer | None = None,
    previous: FeedbackScores | None = None,
) -> SessionReport:
    """Score one recording and build its coaching notes.

    Explicit arguments win over the matching config settings.

    Args:
        metrics: Raw amplitude windows for the finished recording
        category: Scenario category (config default if None)
        tone: Coach tone (config default if None)
        baseline: Rolling averages of recent same-scenario sessions
        transcription_enabled: Opt-in for the transcript path (config default if None)
        provider: Transcription capability for this recording
        config: Session settings; defaults are used when omitted
        sentiment: Optional sentence sentiment scorer
        previous: Scores of an earlier session to compare against

    Returns:
        SessionReport with feedback, notes and focus
    """
    config = config or CadenceConfig()
    overrides: dict[str, Any] = {}
    if category is not None:
        overrides["scenario_category"] = ScenarioCategory(category).value
    if tone is not None:
        overrides["coach_tone"] = CoachTone(tone).value
    if overrides:
        config = config.model_copy(update=overrides)
    if transcription_enabled is None:
        transcription_enabled = config.transcription_enabled

    profile = config.profile(baseline)
    logger.debug(
        "Coaching %s session with %s tone (transcription %s)",
        config.scenario_category,
        config.coach_tone,
        "on" if transcription_enabled else "off",
    )

    feedback = await generate_feedback(
        metrics,
        profile,
        tone=CoachTone(config.coach_tone),
        transcription_enabled=transcription_enabled,
        provider=provider,
        timeout=config.transcription_timeout_seconds,
        sentiment=sentiment,
    )
    plan = generate_coaching(feedback, baseline)
    return SessionReport(
        feedback=feedback,
        plan=plan,
        category=ScenarioCategory(config.scenario_category),
        metrics=metrics,
        previous=previous,
    )
