"""
cadence.analyze.speech - Transcript-derived clarity, pacing, confidence and tone.

Only runs when the user has opted in to on-device transcription and a
transcript came back. Each sub-analysis is a small immutable record of
counts with a score(profile) method; every threshold comes from the
profile's NLP group.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import asdict, dataclass
from typing import Any

from cadence.analyze import patterns
from cadence.models import FeedbackScores, TranscriptionResult
from cadence.profile import ScoringProfile
from cadence.utils import clamp_score

SentimentScorer = Callable[[str], float]

WORD_RE = re.compile(r"[a-z0-9]+(?:'[a-z0-9]+)*")
SENTENCE_BREAK_RE = re.compile(r"(?<=[.!?…])\s+")
NEGATORS = frozenset({"not", "no", "never", "don't", "isn't", "wasn't", "can't", "won't"})


def tokenize(text: str) -> list[str]:
    """Lower-cased word tokens, keeping inner apostrophes."""
    return WORD_RE.findall(text.lower().replace("’", "'"))


def split_sentences(text: str) -> list[str]:
    """Split on terminal punctuation followed by whitespace."""
    return [s.strip() for s in SENTENCE_BREAK_RE.split(text.strip()) if s.strip()]


def count_phrase(tokens: Sequence[str], phrase: str) -> int:
    """Count occurrences of a phrase as a consecutive token sequence."""
    target = phrase.split()
    n = len(target)
    if n == 0 or len(tokens) < n:
        return 0
    return sum(1 for i in range(len(tokens) - n + 1) if list(tokens[i : i + n]) == target)


def starts_with_phrase(tokens: Sequence[str], phrase: str) -> bool:
    target = phrase.split()
    return list(tokens[: len(target)]) == target


def found_phrases(tokens: Sequence[str], phrases: Iterable[str]) -> list[str]:
    """Phrases that occur at least once, in list order."""
    return [p for p in phrases if count_phrase(tokens, p) > 0]


def lexicon_sentiment(sentence: str) -> float:
    """Score a sentence in [-1, 1] from the positive/negative word lists.

    A negator directly before an emotion word flips its polarity.
    """
    tokens = tokenize(sentence)
    positive = negative = 0
    for i, token in enumerate(tokens):
        negated = i > 0 and tokens[i - 1] in NEGATORS
        if token in patterns.POSITIVE_WORDS:
            if negated:
                negative += 1
            else:
                positive += 1
        elif token in patterns.NEGATIVE_WORDS:
            if negated:
                positive += 1
            else:
                negative += 1
    total = positive + negative
    if total == 0:
        return 0.0
    return (positive - negative) / total


def _capped(count: int, per_item: int, cap: int) -> int:
    return min(cap, count * per_item)


@dataclass(frozen=True)
class PauseEvent:
    timestamp: float
    duration: float
    word_before: str
    word_after: str


@dataclass(frozen=True)
class ClarityAnalysis:
    filler_word_count: int
    filler_words: tuple[str, ...]
    repeated_word_count: int
    incomplete_sentence_count: int
    average_word_length: float
    low_confidence_segment_count: int
    total_word_count: int

    @property
    def filler_ratio(self) -> float:
        if self.total_word_count == 0:
            return 0.0
        return self.filler_word_count / self.total_word_count

    def score(self, profile: ScoringProfile) -> int:
        nlp = profile.nlp
        score = nlp.clarity_base_score
        score -= _capped(
            self.filler_word_count, nlp.filler_penalty_per_word, nlp.filler_penalty_max
        )
        score -= _capped(
            self.repeated_word_count, nlp.repeated_penalty_per_word, nlp.repeated_penalty_max
        )
        score -= _capped(
            self.incomplete_sentence_count,
            nlp.incomplete_penalty_per_sentence,
            nlp.incomplete_penalty_max,
        )
        score -= _capped(
            self.low_confidence_segment_count,
            nlp.low_confidence_penalty_per_segment,
            nlp.low_confidence_penalty_max,
        )
        if self.average_word_length > nlp.average_word_length_bonus_threshold:
            score += nlp.average_word_length_bonus
        return clamp_score(score)


@dataclass(frozen=True)
class PacingAnalysis:
    words_per_minute: float
    total_word_count: int
    total_pause_count: int
    short_pauses: int
    medium_pauses: int
    long_pauses: int
    average_pause_duration: float
    average_sentence_length: float
    duration: float

    def is_optimal_pace(self, profile: ScoringProfile) -> bool:
        low, high = profile.nlp.pacing_optimal_range
        return low <= self.words_per_minute <= high

    def score(self, profile: ScoringProfile) -> int:
        nlp = profile.nlp
        score = nlp.pacing_base_score

        if self.words_per_minute < nlp.pacing_slow_words_per_minute:
            score -= int(
                (nlp.pacing_slow_words_per_minute - self.words_per_minute)
                / nlp.pacing_penalty_divisor
            )
        elif self.words_per_minute > nlp.pacing_fast_words_per_minute:
            score -= int(
                (self.words_per_minute - nlp.pacing_fast_words_per_minute)
                / nlp.pacing_penalty_divisor
            )
        elif self.is_optimal_pace(profile):
            score += nlp.pacing_optimal_bonus

        # No pauses at all in a longer take reads as rushing.
        if self.total_pause_count == 0 and self.duration > nlp.no_pause_penalty_duration:
            score -= nlp.no_pause_penalty
        if self.long_pauses > nlp.long_pause_penalty_threshold:
            score -= (
                self.long_pauses - nlp.long_pause_penalty_threshold
            ) * nlp.long_pause_penalty_per_pause
        if self.medium_pauses > self.short_pauses and self.medium_pauses > self.long_pauses:
            score += nlp.medium_pause_bonus

        return clamp_score(score)


@dataclass(frozen=True)
class ConfidenceAnalysis:
    hedging_phrase_count: int
    hedging_phrases: tuple[str, ...]
    question_word_count: int
    weak_opener_count: int
    apologetic_phrase_count: int
    assertive_phrase_count: int
    total_word_count: int

    def score(self, profile: ScoringProfile) -> int:
        nlp = profile.nlp
        score = nlp.confidence_base_score
        score -= _capped(
            self.hedging_phrase_count, nlp.hedging_penalty_per_phrase, nlp.hedging_penalty_max
        )
        score -= _capped(
            self.weak_opener_count, nlp.weak_opener_penalty_per_phrase, nlp.weak_opener_penalty_max
        )
        score -= _capped(
            self.apologetic_phrase_count,
            nlp.apologetic_penalty_per_phrase,
            nlp.apologetic_penalty_max,
        )
        score += _capped(
            self.assertive_phrase_count, nlp.assertive_bonus_per_phrase, nlp.assertive_bonus_max
        )
        if self.total_word_count > 0:
            question_ratio = self.question_word_count / self.total_word_count
            if question_ratio > nlp.question_ratio_threshold:
                score -= nlp.question_ratio_penalty
        return clamp_score(score)


@dataclass(frozen=True)
class ToneAnalysis:
    sentiment_score: float
    positive_word_count: int
    negative_word_count: int
    contraction_count: int
    formal_phrase_count: int
    sentence_count: int

    def is_positive(self, profile: ScoringProfile) -> bool:
        return self.sentiment_score > profile.nlp.sentiment_positive_threshold

    def is_negative(self, profile: ScoringProfile) -> bool:
        return self.sentiment_score < profile.nlp.sentiment_negative_threshold

    def score(self, profile: ScoringProfile) -> int:
        nlp = profile.nlp
        score = nlp.tone_base_score
        score += int(self.sentiment_score * nlp.sentiment_multiplier)

        balance = self.positive_word_count - self.negative_word_count
        if balance > nlp.emotion_balance_threshold:
            score += nlp.emotion_balance_bonus
        elif balance < -nlp.emotion_balance_threshold:
            score -= nlp.emotion_balance_bonus

        # Some formality reads as composed; a lot reads as stiff.
        formal_low, formal_high = nlp.formality_bonus_range
        if formal_low <= self.formal_phrase_count <= formal_high:
            score += nlp.formality_bonus
        elif self.formal_phrase_count > nlp.formality_penalty_threshold:
            score -= nlp.formality_penalty

        contraction_low, contraction_high = nlp.contraction_bonus_range
        if contraction_low <= self.contraction_count <= contraction_high:
            score += nlp.contraction_bonus

        return clamp_score(score)


@dataclass(frozen=True)
class SpeechAnalysisResult:
    transcription: TranscriptionResult
    clarity: ClarityAnalysis
    pacing: PacingAnalysis
    confidence: ConfidenceAnalysis
    tone: ToneAnalysis

    def scores(self, profile: ScoringProfile) -> FeedbackScores:
        """Un-blended transcript scores."""
        return FeedbackScores(
            clarity=self.clarity.score(profile),
            pacing=self.pacing.score(profile),
            tone=self.tone.score(profile),
            confidence=self.confidence.score(profile),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "clarity": asdict(self.clarity),
            "pacing": asdict(self.pacing),
            "confidence": asdict(self.confidence),
            "tone": asdict(self.tone),
        }


def analyze_clarity(
    transcription: TranscriptionResult, profile: ScoringProfile
) -> ClarityAnalysis:
    """Fillers, stammered repeats, trailing-off sentences, mumbled segments."""
    words = tokenize(transcription.text)

    filler_count = sum(count_phrase(words, p) for p in patterns.FILLER_PATTERNS)
    filler_words = tuple(sorted(found_phrases(words, patterns.FILLER_PATTERNS)))

    repeated = sum(
        1 for prev, word in zip(words, words[1:]) if word == prev and len(word) > 2
    )

    incomplete = 0
    for sentence in split_sentences(transcription.text):
        if sentence.endswith(patterns.ELLIPSES):
            incomplete += 1
            continue
        sentence_words = tokenize(sentence)
        if sentence_words and sentence_words[-1] in patterns.TRAILING_OFF_WORDS:
            incomplete += 1

    average_length = sum(len(w) for w in words) / len(words) if words else 0.0
    low_confidence = sum(
        1
        for seg in transcription.segments
        if seg.confidence < profile.nlp.low_confidence_segment_threshold
    )

    return ClarityAnalysis(
        filler_word_count=filler_count,
        filler_words=filler_words,
        repeated_word_count=repeated,
        incomplete_sentence_count=incomplete,
        average_word_length=average_length,
        low_confidence_segment_count=low_confidence,
        total_word_count=len(words),
    )


def detect_pauses(
    transcription: TranscriptionResult, profile: ScoringProfile
) -> list[PauseEvent]:
    """Gaps between consecutive segments longer than the pause threshold."""
    pauses = []
    segments = transcription.segments
    for prev, seg in zip(segments, segments[1:]):
        gap = seg.timestamp - prev.end
        if gap > profile.nlp.pause_threshold_seconds:
            pauses.append(
                PauseEvent(
                    timestamp=prev.end,
                    duration=gap,
                    word_before=prev.text,
                    word_after=seg.text,
                )
            )
    return pauses


def analyze_pacing(
    transcription: TranscriptionResult, duration: float, profile: ScoringProfile
) -> PacingAnalysis:
    """Words per minute, pause buckets and sentence length."""
    nlp = profile.nlp
    words = tokenize(transcription.text)
    minutes = max(0.1, duration / 60.0)

    pauses = detect_pauses(transcription, profile)
    short = sum(1 for p in pauses if p.duration < nlp.short_pause_upper_bound)
    medium = sum(
        1
        for p in pauses
        if nlp.short_pause_upper_bound <= p.duration < nlp.medium_pause_upper_bound
    )
    long = sum(1 for p in pauses if p.duration >= nlp.medium_pause_upper_bound)

    sentences = split_sentences(transcription.text)

    return PacingAnalysis(
        words_per_minute=len(words) / minutes,
        total_word_count=len(words),
        total_pause_count=len(pauses),
        short_pauses=short,
        medium_pauses=medium,
        long_pauses=long,
        average_pause_duration=(
            sum(p.duration for p in pauses) / len(pauses) if pauses else 0.0
        ),
        average_sentence_length=len(words) / len(sentences) if sentences else 0.0,
        duration=duration,
    )


def analyze_confidence(transcription: TranscriptionResult) -> ConfidenceAnalysis:
    """Hedging, weak openers, apologies and assertive phrasing."""
    words = tokenize(transcription.text)

    hedges = found_phrases(words, patterns.HEDGING_PATTERNS)
    hedge_count = sum(count_phrase(words, p) for p in patterns.HEDGING_PATTERNS)

    weak_openers = 0
    for sentence in split_sentences(transcription.text):
        sentence_words = tokenize(sentence)
        if any(starts_with_phrase(sentence_words, p) for p in patterns.WEAK_OPENERS):
            weak_openers += 1

    return ConfidenceAnalysis(
        hedging_phrase_count=hedge_count,
        hedging_phrases=tuple(hedges),
        question_word_count=sum(1 for w in words if w in patterns.QUESTION_WORDS),
        weak_opener_count=weak_openers,
        apologetic_phrase_count=sum(
            count_phrase(words, p) for p in patterns.APOLOGETIC_PATTERNS
        ),
        assertive_phrase_count=sum(count_phrase(words, p) for p in patterns.ASSERTIVE_PATTERNS),
        total_word_count=len(words),
    )


def analyze_tone(
    transcription: TranscriptionResult, sentiment: SentimentScorer | None = None
) -> ToneAnalysis:
    """Mean sentence sentiment, emotion words and formality markers."""
    sentiment = sentiment or lexicon_sentiment
    sentences = split_sentences(transcription.text)
    scores = [sentiment(s) for s in sentences]
    words = tokenize(transcription.text)

    return ToneAnalysis(
        sentiment_score=sum(scores) / len(scores) if scores else 0.0,
        positive_word_count=sum(1 for w in words if w in patterns.POSITIVE_WORDS),
        negative_word_count=sum(1 for w in words if w in patterns.NEGATIVE_WORDS),
        contraction_count=sum(count_phrase(words, p) for p in patterns.CONTRACTION_PATTERNS),
        formal_phrase_count=sum(count_phrase(words, p) for p in patterns.FORMAL_PATTERNS),
        sentence_count=len(sentences),
    )


def analyze_speech(
    transcription: TranscriptionResult,
    duration: float,
    profile: ScoringProfile,
    sentiment: SentimentScorer | None = None,
) -> SpeechAnalysisResult:
    """Run all four transcript analyses.

    Args:
        transcription: Recognized text with time-aligned segments
        duration: Recording duration in seconds
        profile: Scoring profile supplying NLP thresholds
        sentiment: Optional sentence sentiment scorer; defaults to the lexicon scorer

    Returns:
        SpeechAnalysisResult
    """
    return SpeechAnalysisResult(
        transcription=transcription,
        clarity=analyze_clarity(transcription, profile),
        pacing=analyze_pacing(transcription, duration, profile),
        confidence=analyze_confidence(transcription),
        tone=analyze_tone(transcription, sentiment),
    )
