"""
cadence.feedback.notes - Two coaching notes and one focus for the next take.

Deliberately minimal: one note on what worked (the weighted strongest
dimension), one on what to change (a concrete transcript finding when
there is one, otherwise the weighted weakest dimension), and a single
goal. Coach tone is applied last and only rewords.
"""

from __future__ import annotations

from cadence.analyze.metrics import AnalyzedMetrics
from cadence.feedback.engine import AUDIO_ONLY_NOTICE, GENERIC_ENCOURAGEMENT, FeedbackResult
from cadence.models import (
    CoachingPlan,
    CoachNote,
    CoachTone,
    Dimension,
    NotePriority,
    NoteType,
    ScenarioCategory,
    TryAgainFocus,
)
from cadence.profile import BaselineMetrics

NOTE_TYPES: dict[Dimension, NoteType] = {
    Dimension.CLARITY: NoteType.CLARITY,
    Dimension.PACING: NoteType.PACING,
    Dimension.TONE: NoteType.INTENSITY,
    Dimension.CONFIDENCE: NoteType.GENERAL,
}

WHAT_WORKED: dict[Dimension, tuple[str, str]] = {
    Dimension.CLARITY: ("Clear separation", "Your pauses gave each idea its own space."),
    Dimension.PACING: ("Steady rhythm", "Your pace gave the listener time to follow along."),
    Dimension.TONE: ("Even tone", "Your volume stayed steady and controlled."),
    Dimension.CONFIDENCE: ("Strong presence", "You projected with steady conviction."),
}

FOCUS: dict[Dimension, TryAgainFocus] = {
    Dimension.CLARITY: TryAgainFocus(
        goal="State your main point in the first sentence.",
        reason="Opening with clarity sets up everything that follows.",
    ),
    Dimension.TONE: TryAgainFocus(
        goal="Keep your volume steady throughout.",
        reason="Consistent tone signals calm control.",
    ),
    Dimension.CONFIDENCE: TryAgainFocus(
        goal="Start louder than feels natural.",
        reason="We often underestimate how quiet we sound to others.",
    ),
}

PACING_FOCUS_LOW = TryAgainFocus(
    goal="Add a deliberate pause after your key ask.",
    reason="Pauses give weight to what you just said.",
)
PACING_FOCUS = TryAgainFocus(
    goal="Try speaking at 80% of your natural speed.",
    reason="Slightly slower sounds more confident and controlled.",
)
INSIGHT_FOCUS_REASON = "It came from your own words, so it's the quickest win."

TONE_MARKERS = ("Try:", "Recommendation:", "Nice work.", "Outcome:")

CATEGORY_TIPS: dict[ScenarioCategory, list[str]] = {
    ScenarioCategory.BOUNDARIES: [
        "State your boundary clearly, without apologizing.",
        "Use 'I need' instead of 'I think' or 'Maybe'.",
        "Silence after your boundary is okay. Let it land.",
    ],
    ScenarioCategory.CAREER: [
        "Lead with your contributions, not your needs.",
        "Use specific numbers and examples when possible.",
        "End with a clear ask and wait for a response.",
    ],
    ScenarioCategory.RELATIONSHIPS: [
        "Share how you feel, not what they did wrong.",
        "Use 'I' statements throughout.",
        "Leave space for their response.",
    ],
    ScenarioCategory.DIFFICULT: [
        "Say the hard part first. Don't bury the lede.",
        "Be direct but not harsh.",
        "Acknowledge that this is difficult.",
    ],
}


def category_tips(category: ScenarioCategory | str) -> list[str]:
    """Three scenario-specific reminders."""
    return list(CATEGORY_TIPS[ScenarioCategory(category)])


def _quoted(items: tuple[str, ...] | list[str], limit: int = 3) -> str:
    return ", ".join(f'"{item}"' for item in items[:limit])


def improvement_over_baseline(
    dimension: Dimension,
    metrics: AnalyzedMetrics,
    baseline: BaselineMetrics,
) -> str | None:
    """Comparative phrasing when this take beats the user's usual by a margin."""
    tuning = metrics.profile.tuning

    if dimension is Dimension.CLARITY and baseline.silence_ratio is not None:
        if baseline.silence_ratio - metrics.silence_ratio >= tuning.baseline_silence_margin:
            return "Less empty space than your recent sessions."

    elif dimension is Dimension.PACING and baseline.segments_per_minute is not None:
        low, high = metrics.profile.audio.pacing_optimal_range
        midpoint = (low + high) / 2
        current_gap = abs(metrics.segments_per_minute - midpoint)
        usual_gap = abs(baseline.segments_per_minute - midpoint)
        if usual_gap - current_gap >= tuning.baseline_pacing_margin:
            return "Your rhythm sat closer to your sweet spot than in your recent sessions."

    elif dimension is Dimension.TONE and baseline.volume_stability is not None:
        if metrics.volume_stability - baseline.volume_stability >= tuning.baseline_stability_margin:
            return "Steadier volume than your recent sessions."

    elif dimension is Dimension.CONFIDENCE and baseline.average_level is not None:
        if metrics.average_level - baseline.average_level >= tuning.baseline_level_margin:
            return "You projected more than in your recent sessions."

    return None


def what_worked_note(
    dimension: Dimension,
    metrics: AnalyzedMetrics,
    baseline: BaselineMetrics | None = None,
) -> CoachNote:
    title, body = WHAT_WORKED[dimension]
    if baseline is not None:
        body = improvement_over_baseline(dimension, metrics, baseline) or body
    return CoachNote(
        title=title,
        body=body,
        type=NOTE_TYPES[dimension],
        priority=NotePriority.MEDIUM,
    )


def _insight_note(result: FeedbackResult, priority: NotePriority) -> CoachNote | None:
    speech = result.speech_analysis
    if not result.used_speech_analysis or speech is None:
        return None
    nlp = result.profile.nlp

    if speech.clarity.filler_word_count > nlp.insight_filler_word_count_threshold:
        return CoachNote(
            title="Cut the filler words",
            body=(
                f"You leaned on {_quoted(speech.clarity.filler_words)}. "
                "A short silence works better than a filler."
            ),
            type=NoteType.CLARITY,
            priority=priority,
        )

    if speech.confidence.hedging_phrase_count > nlp.insight_hedging_phrase_count_threshold:
        return CoachNote(
            title="Say it directly",
            body=(
                f"Phrases like {_quoted(speech.confidence.hedging_phrases)} soften your point. "
                "State it plainly."
            ),
            type=NoteType.GENERAL,
            priority=priority,
        )

    return None


def _metric_change(dimension: Dimension, metrics: AnalyzedMetrics) -> tuple[str, str]:
    if dimension is Dimension.PACING:
        if metrics.is_pacing_too_fast:
            return (
                "Slow down slightly",
                "Add a breath between thoughts. Let your words land before moving on.",
            )
        if metrics.is_pacing_too_slow:
            return (
                "Pick up the pace",
                "Keep the momentum going while staying deliberate. "
                "Silence is okay, but don't lose your listener.",
            )
        if metrics.pause_count < 2 and metrics.duration > 30:
            return (
                "Add strategic pauses",
                "Pauses after key points give them impact. Pause right after your main ask.",
            )
        return (
            "Find a steady rhythm",
            "Keep your phrases a similar length so the listener can settle into your pace.",
        )

    if dimension is Dimension.TONE:
        if metrics.has_too_many_spikes:
            return (
                "Smooth out intensity spikes",
                "Stay even, especially on key points. Calm is powerful.",
            )
        if metrics.has_inconsistent_volume:
            return (
                "Aim for consistency",
                "Steady volume throughout sounds more assured. Pick a level and hold it.",
            )
        return ("Keep it even", "Hold the same calm energy from your first sentence to your last.")

    if dimension is Dimension.CONFIDENCE:
        if metrics.is_too_quiet:
            return (
                "Project more",
                "Imagine you're speaking to someone across a table. "
                "A bit louder sounds more confident.",
            )
        if metrics.has_too_much_silence:
            return (
                "Fill the space",
                "It's okay to pause and think, but keep moving forward. Own the conversation.",
            )
        return (
            "Commit to your words",
            "End your sentences on a firm, level note instead of letting them drift.",
        )

    if not metrics.has_good_pause_pattern:
        if metrics.pause_count < metrics.ideal_pause_count:
            return (
                "Separate your ideas",
                "Give each point its own pause so it doesn't blur into the next.",
            )
        return ("Trim the gaps", "Fewer, more deliberate pauses keep your message connected.")
    if metrics.silence_ratio > metrics.profile.tuning.clarity_silence_ratio_threshold:
        return (
            "Tighten the silences",
            "Long stretches of silence make your point harder to follow.",
        )
    return (
        "Lead with your point",
        "State your main message in the first sentence. Don't bury the lede.",
    )


def what_to_change_note(dimension: Dimension, result: FeedbackResult) -> CoachNote:
    priority = (
        NotePriority.HIGH
        if result.scores.get(dimension) < result.profile.tuning.low_score_threshold
        else NotePriority.MEDIUM
    )
    insight = _insight_note(result, priority)
    if insight is not None:
        return insight

    title, body = _metric_change(dimension, result.analyzed)
    return CoachNote(title=title, body=body, type=NOTE_TYPES[dimension], priority=priority)


def try_again_focus(dimension: Dimension, result: FeedbackResult) -> TryAgainFocus:
    """One goal: the first transcript insight if there is a real one, else the weakest dimension."""
    if result.used_speech_analysis and result.insights:
        first = result.insights[0]
        if first not in (GENERIC_ENCOURAGEMENT, AUDIO_ONLY_NOTICE):
            return TryAgainFocus(goal=first, reason=INSIGHT_FOCUS_REASON)

    if dimension is Dimension.PACING:
        if result.scores.pacing < result.profile.tuning.low_score_threshold:
            return PACING_FOCUS_LOW
        return PACING_FOCUS
    return FOCUS[dimension]


def apply_tone(note: CoachNote, tone: CoachTone, worked: bool) -> CoachNote:
    """Reword a note for the coach tone. Never changes what the note is about."""
    body = note.body
    if tone is CoachTone.GENTLE:
        body = f"{body} Nice work." if worked else f"Try: {body}"
    elif tone is CoachTone.EXECUTIVE:
        body = f"Outcome: {body}" if worked else f"Recommendation: {body}"
    if body == note.body:
        return note
    return CoachNote(title=note.title, body=body, type=note.type, priority=note.priority)


def generate_coaching(
    result: FeedbackResult,
    baseline: BaselineMetrics | None = None,
) -> CoachingPlan:
    """Reduce a feedback result to two notes and one focus.

    Args:
        result: Scored recording
        baseline: Optional rolling averages, used only for comparative phrasing

    Returns:
        CoachingPlan with notes (what worked, what to change) and focus
    """
    weights = result.profile.weights
    strongest = result.scores.weighted_strength(weights)
    weakest = result.scores.weighted_weakness(weights)

    worked = what_worked_note(strongest, result.analyzed, baseline)
    change = what_to_change_note(weakest, result)
    focus = try_again_focus(weakest, result)

    tone = result.coach_tone
    return CoachingPlan(
        notes=(apply_tone(worked, tone, worked=True), apply_tone(change, tone, worked=False)),
        focus=focus,
    )
