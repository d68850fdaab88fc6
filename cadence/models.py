"""
cadence.models - Core value types shared across the pipeline.

Raw recording inputs (AudioMetrics, TranscriptionResult), the four score
dimensions, and the coaching outputs (FeedbackScores, CoachNote,
TryAgainFocus). Every type here is immutable once constructed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from cadence.profile import ScoreWeights

DEFAULT_METERING_INTERVAL = 0.1


class Dimension(str, Enum):
    """The four delivery dimensions, in tie-break order."""

    CLARITY = "clarity"
    PACING = "pacing"
    TONE = "tone"
    CONFIDENCE = "confidence"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class CoachTone(str, Enum):
    """Phrasing style applied to generated coaching text."""

    GENTLE = "gentle"
    DIRECT = "direct"
    EXECUTIVE = "executive"

    @property
    def description(self) -> str:
        return {
            CoachTone.GENTLE: "Supportive, calm phrasing with softer prompts.",
            CoachTone.DIRECT: "Concise coaching with clear, actionable direction.",
            CoachTone.EXECUTIVE: "Crisp, professional language focused on authority.",
        }[self]


DEFAULT_COACH_TONE = CoachTone.GENTLE


class ScenarioCategory(str, Enum):
    """Rehearsal scenario families; each carries its own score weighting."""

    BOUNDARIES = "boundaries"
    CAREER = "career"
    RELATIONSHIPS = "relationships"
    DIFFICULT = "difficult"


@dataclass(frozen=True)
class AudioMetrics:
    """Raw amplitude measurements for one finished recording.

    rms_windows and peak_windows are sampled every `interval` seconds.
    """

    rms_windows: tuple[float, ...]
    peak_windows: tuple[float, ...]
    duration: float
    interval: float = DEFAULT_METERING_INTERVAL

    def __post_init__(self) -> None:
        object.__setattr__(self, "rms_windows", tuple(float(v) for v in self.rms_windows))
        object.__setattr__(self, "peak_windows", tuple(float(v) for v in self.peak_windows))

    @property
    def average_rms(self) -> float:
        if not self.rms_windows:
            return 0.0
        return sum(self.rms_windows) / len(self.rms_windows)

    @property
    def peak_level(self) -> float:
        return max(self.peak_windows, default=0.0)

    def normalized_waveform(self) -> list[float]:
        """RMS windows scaled to 0-1 for display."""
        max_rms = max(self.rms_windows, default=0.0)
        if max_rms <= 0:
            return list(self.rms_windows)
        return [v / max_rms for v in self.rms_windows]

    @classmethod
    def empty(cls) -> AudioMetrics:
        return cls(rms_windows=(), peak_windows=(), duration=0.0)


@dataclass(frozen=True)
class TranscriptionSegment:
    """One time-aligned unit of recognized speech."""

    text: str
    timestamp: float
    duration: float
    confidence: float

    @property
    def end(self) -> float:
        return self.timestamp + self.duration


@dataclass(frozen=True)
class TranscriptionResult:
    """Full transcript text plus ordered segments."""

    text: str
    segments: tuple[TranscriptionSegment, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "segments", tuple(self.segments))

    @property
    def word_count(self) -> int:
        return len(self.text.split())

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()

    @property
    def average_confidence(self) -> float:
        if not self.segments:
            return 0.0
        return sum(s.confidence for s in self.segments) / len(self.segments)


@dataclass(frozen=True)
class ScoreDelta:
    """Per-dimension change between two sessions."""

    clarity: int
    pacing: int
    tone: int
    confidence: int

    @property
    def overall(self) -> int:
        return (self.clarity + self.pacing + self.tone + self.confidence) // 4

    @property
    def has_improvement(self) -> bool:
        return any(v > 0 for v in (self.clarity, self.pacing, self.tone, self.confidence))

    @property
    def has_decline(self) -> bool:
        return any(v < 0 for v in (self.clarity, self.pacing, self.tone, self.confidence))

    @staticmethod
    def formatted(value: int) -> str:
        return f"+{value}" if value > 0 else str(value)

    def to_dict(self) -> dict[str, int]:
        return {
            "clarity": self.clarity,
            "pacing": self.pacing,
            "tone": self.tone,
            "confidence": self.confidence,
            "overall": self.overall,
        }


@dataclass(frozen=True)
class FeedbackScores:
    """Four 0-100 delivery scores."""

    clarity: int
    pacing: int
    tone: int
    confidence: int

    def get(self, dimension: Dimension) -> int:
        return getattr(self, dimension.value)

    def items(self) -> list[tuple[Dimension, int]]:
        return [(d, self.get(d)) for d in Dimension]

    @property
    def overall(self) -> int:
        return (self.clarity + self.pacing + self.tone + self.confidence) // 4

    def weighted_overall(self, weights: ScoreWeights) -> int:
        """Weighted mean of the four scores, rounded to the nearest int."""
        total_weight = sum(weights.for_dimension(d) for d in Dimension)
        if total_weight <= 0:
            return self.overall
        weighted = sum(score * weights.for_dimension(d) for d, score in self.items())
        return int(round(weighted / total_weight))

    def weighted_strength(self, weights: ScoreWeights) -> Dimension:
        return max(self.items(), key=lambda item: item[1] * weights.for_dimension(item[0]))[0]

    def weighted_weakness(self, weights: ScoreWeights) -> Dimension:
        return min(self.items(), key=lambda item: item[1] * weights.for_dimension(item[0]))[0]

    @property
    def tier(self) -> str:
        overall = self.overall
        if overall >= 85:
            return "Excellent"
        elif overall >= 70:
            return "Good"
        elif overall >= 55:
            return "Developing"
        return "Needs Work"

    def delta(self, previous: FeedbackScores | None) -> ScoreDelta | None:
        if previous is None:
            return None
        return ScoreDelta(
            clarity=self.clarity - previous.clarity,
            pacing=self.pacing - previous.pacing,
            tone=self.tone - previous.tone,
            confidence=self.confidence - previous.confidence,
        )

    def to_dict(self) -> dict[str, int]:
        return {d.value: score for d, score in self.items()}


class NoteType(str, Enum):
    CLARITY = "clarity"
    PACING = "pacing"
    INTENSITY = "intensity"
    GENERAL = "general"


class NotePriority(IntEnum):
    LOW = 0
    MEDIUM = 1
    HIGH = 2


@dataclass(frozen=True)
class CoachNote:
    """A single piece of coaching feedback."""

    title: str
    body: str
    type: NoteType
    priority: NotePriority = NotePriority.MEDIUM

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "body": self.body,
            "type": self.type.value,
            "priority": self.priority.name.lower(),
        }


@dataclass(frozen=True)
class TryAgainFocus:
    """The one goal to carry into the next attempt."""

    goal: str
    reason: str

    def to_dict(self) -> dict[str, str]:
        return {"goal": self.goal, "reason": self.reason}


@dataclass(frozen=True)
class CoachingPlan:
    """Exactly two notes (what worked, what to change) and one focus."""

    notes: tuple[CoachNote, CoachNote]
    focus: TryAgainFocus

    @property
    def what_worked(self) -> CoachNote:
        return self.notes[0]

    @property
    def what_to_change(self) -> CoachNote:
        return self.notes[1]
