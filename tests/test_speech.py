"""Tests for cadence.analyze.speech module."""

from __future__ import annotations

import pytest

from cadence.analyze.speech import (
    analyze_clarity,
    analyze_confidence,
    analyze_pacing,
    analyze_speech,
    analyze_tone,
    count_phrase,
    detect_pauses,
    lexicon_sentiment,
    split_sentences,
    tokenize,
)
from cadence.models import FeedbackScores, TranscriptionResult
from cadence.profile import default_profile


def _transcript(text: str) -> TranscriptionResult:
    return TranscriptionResult(text=text)


class TestTokenize:
    def test_lowercases_and_keeps_contractions(self) -> None:
        """Test tokens are lowercase and keep contractions."""
        assert tokenize("I'm, um, READY.") == ["i'm", "um", "ready"]

    def test_normalizes_curly_apostrophes(self) -> None:
        """Test curly apostrophes are normalized."""
        assert tokenize("Don’t stop") == ["don't", "stop"]

    def test_split_sentences(self) -> None:
        """Test sentence splitting."""
        assert split_sentences("One. Two? Three... Four!") == ["One.", "Two?", "Three...", "Four!"]

    def test_count_phrase_matches_token_sequences(self) -> None:
        """Test multi-word phrases match token sequences."""
        tokens = tokenize("You know, I mean, you know what I mean")
        assert count_phrase(tokens, "you know") == 2
        assert count_phrase(tokens, "i mean") == 2
        assert count_phrase(tokens, "know what i") == 1

    def test_count_phrase_ignores_substrings(self) -> None:
        """Test phrases do not match inside words."""
        assert count_phrase(tokenize("The umbrella is here"), "um") == 0


class TestClarity:
    def test_counts_fillers(self) -> None:
        """Test filler word counting."""
        clarity = analyze_clarity(
            _transcript("Um, I think, um, we should like go."), default_profile()
        )
        assert clarity.filler_word_count == 3
        assert clarity.filler_words == ("like", "um")
        assert clarity.total_word_count == 8

    def test_multi_word_fillers(self) -> None:
        """Test multi-word fillers are found."""
        clarity = analyze_clarity(
            _transcript("It was, you know, kind of late."), default_profile()
        )
        assert clarity.filler_word_count == 2
        assert clarity.filler_words == ("kind of", "you know")

    def test_repeated_words(self) -> None:
        """Test immediate word repeats are counted."""
        clarity = analyze_clarity(
            _transcript("I need the the report. I I agree."), default_profile()
        )
        assert clarity.repeated_word_count == 1

    def test_trailing_off_sentences(self) -> None:
        """Test sentences that trail off are counted."""
        text = "I was going to say... We could go and. That is all."
        clarity = analyze_clarity(_transcript(text), default_profile())
        assert clarity.incomplete_sentence_count == 2

    def test_low_confidence_segments(self, timed_transcript) -> None:
        """Test low-confidence segments are counted."""
        clarity = analyze_clarity(timed_transcript, default_profile())
        assert clarity.low_confidence_segment_count == 1

    def test_score(self) -> None:
        """Test the clarity sub-score."""
        clarity = analyze_clarity(
            _transcript("Um, I think, um, we should like go."), default_profile()
        )
        # 85 - 3 fillers * 3
        assert clarity.score(default_profile()) == 76

    def test_empty_transcript(self) -> None:
        """Test clarity of an empty transcript."""
        clarity = analyze_clarity(
            _transcript(""), default_profile()
        )
        assert clarity.total_word_count == 0
        assert clarity.average_word_length == 0.0
        assert clarity.filler_ratio == 0.0


class TestPacing:
    def test_words_per_minute(self) -> None:
        """Test words per minute."""
        pacing = analyze_pacing(_transcript(" ".join(["word"] * 130)), 60.0, default_profile())
        assert pacing.words_per_minute == pytest.approx(130.0)
        assert pacing.is_optimal_pace(default_profile())

    def test_score_penalizes_no_pauses_in_long_take(self) -> None:
        """Test a long take without pauses is penalized."""
        pacing = analyze_pacing(_transcript(" ".join(["word"] * 130)), 60.0, default_profile())
        # 80 + 10 optimal - 10 for no pauses over 30s
        assert pacing.score(default_profile()) == 80

    def test_slow_speech_penalty(self) -> None:
        """Test slow speech is penalized."""
        pacing = analyze_pacing(_transcript(" ".join(["word"] * 50)), 60.0, default_profile())
        # 80 - (100 - 50) / 5 - 10 for no pauses
        assert pacing.score(default_profile()) == 60

    def test_detect_pauses(self, timed_transcript) -> None:
        """Test pauses come from gaps between segments."""
        pauses = detect_pauses(timed_transcript, default_profile())
        assert len(pauses) == 2
        assert pauses[0].duration == pytest.approx(1.0)
        assert pauses[0].word_before == "b"
        assert pauses[0].word_after == "c"
        assert pauses[1].duration == pytest.approx(2.25)

    def test_pause_buckets(self, timed_transcript) -> None:
        """Test pauses split into short, medium and long."""
        pacing = analyze_pacing(timed_transcript, 5.0, default_profile())
        assert pacing.short_pauses == 0
        assert pacing.medium_pauses == 1
        assert pacing.long_pauses == 1
        assert pacing.average_pause_duration == pytest.approx(1.625)

    def test_minimum_duration(self) -> None:
        """Test very short takes use a minimum duration."""
        pacing = analyze_pacing(_transcript("one two"), 0.0, default_profile())
        assert pacing.words_per_minute == pytest.approx(20.0)


class TestConfidence:
    TEXT = "I think maybe we could try. I need a decision by Friday. Sorry, what do you think?"

    def test_counts(self) -> None:
        """Test hedge, opener, apology and assertive counts."""
        confidence = analyze_confidence(_transcript(self.TEXT))
        assert confidence.hedging_phrase_count == 2
        assert confidence.hedging_phrases == ("i think", "maybe")
        assert confidence.question_word_count == 1
        assert confidence.weak_opener_count == 1
        assert confidence.apologetic_phrase_count == 1
        assert confidence.assertive_phrase_count == 1
        assert confidence.total_word_count == 17

    def test_score(self) -> None:
        """Test the confidence sub-score."""
        confidence = analyze_confidence(_transcript(self.TEXT))
        # 80 - 2 hedges * 4 - 1 weak opener * 5 - 1 apology * 5 + 1 assertive * 3
        assert confidence.score(default_profile()) == 65

    def test_question_heavy_speech_penalized(self) -> None:
        """Test question-heavy speech is penalized."""
        confidence = analyze_confidence(_transcript("What now? Why? How?"))
        # 80 - 5 for question ratio above 0.1
        assert confidence.score(default_profile()) == 75

    def test_hedging_penalty_is_capped(self) -> None:
        """Test the hedging penalty has a cap."""
        confidence = analyze_confidence(_transcript("maybe " * 20))
        assert confidence.hedging_phrase_count == 20
        assert confidence.score(default_profile()) == 80 - 24


class TestTone:
    def test_lexicon_sentiment(self) -> None:
        """Test the default lexicon sentiment."""
        assert lexicon_sentiment("I feel good and confident") == 1.0
        assert lexicon_sentiment("That was not good") == -1.0
        assert lexicon_sentiment("Great but worried") == 0.0
        assert lexicon_sentiment("Nothing to see") == 0.0

    def test_counts_and_score(self) -> None:
        """Test tone counts and sub-score."""
        tone = analyze_tone(_transcript("I'm happy, it's great. However, we can't fail."))
        assert tone.contraction_count == 3
        assert tone.formal_phrase_count == 1
        assert tone.positive_word_count == 2
        assert tone.negative_word_count == 1
        assert tone.sentiment_score == pytest.approx(1.0)
        assert tone.sentence_count == 2
        # 75 + 15 sentiment + 5 formality + 5 contractions
        assert tone.score(default_profile()) == 100

    def test_custom_sentiment_scorer(self) -> None:
        """Test a custom sentiment scorer replaces the lexicon."""
        tone = analyze_tone(_transcript("This is fine. That works."), sentiment=lambda s: 0.5)
        assert tone.sentiment_score == 0.5
        assert tone.score(default_profile()) == 82

    def test_negative_flag(self) -> None:
        """Test the negative tone flag."""
        tone = analyze_tone(_transcript("This is a terrible problem."))
        assert tone.is_negative(default_profile())
        assert not tone.is_positive(default_profile())


class TestAnalyzeSpeech:
    def test_returns_all_analyses(self, filler_transcript) -> None:
        """Test all four analyses are returned."""
        result = analyze_speech(filler_transcript, 6.0, default_profile())
        assert result.transcription is filler_transcript
        assert result.clarity.filler_word_count == 5
        assert result.confidence.hedging_phrase_count == 4
        assert result.pacing.words_per_minute == pytest.approx(140.0)

    def test_scores_are_unblended_subscores(self, clean_transcript) -> None:
        """Test scores are the raw sub-scores."""
        profile = default_profile()
        result = analyze_speech(clean_transcript, 6.0, profile)
        scores = result.scores(profile)
        assert isinstance(scores, FeedbackScores)
        assert scores.clarity == result.clarity.score(profile)
        assert scores.confidence == result.confidence.score(profile)

    def test_to_dict(self, clean_transcript) -> None:
        """Test speech analysis serialization."""
        data = analyze_speech(clean_transcript, 6.0, default_profile()).to_dict()
        assert set(data) == {"clarity", "pacing", "confidence", "tone"}
        assert data["confidence"]["assertive_phrase_count"] == 2
