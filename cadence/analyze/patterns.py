"""
cadence.analyze.patterns - Word and phrase lists for transcript analysis.

Plain data, kept apart from the matching code so it can be swapped per
language. Phrases are lower-case and matched as whole-token sequences.
"""

from __future__ import annotations

FILLER_PATTERNS: tuple[str, ...] = (
    "um", "uh", "uhh", "umm", "er", "ah", "ahh",
    "like", "you know", "basically", "actually",
    "literally", "honestly", "right", "so yeah",
    "i mean", "kind of", "sort of",
)

HEDGING_PATTERNS: tuple[str, ...] = (
    "i think", "i guess", "i feel like", "maybe",
    "probably", "might", "could be", "sort of",
    "kind of", "in a way", "it seems", "perhaps",
    "i'm not sure", "i don't know",
)

QUESTION_WORDS: frozenset[str] = frozenset(
    {"what", "why", "how", "when", "where", "who", "which"}
)

WEAK_OPENERS: tuple[str, ...] = (
    "i just", "i'm just", "sorry", "i was just",
    "i don't know if", "this might be", "i'm not sure",
)

APOLOGETIC_PATTERNS: tuple[str, ...] = (
    "sorry", "apologize", "my fault", "excuse me",
    "forgive me", "i'm sorry",
)

ASSERTIVE_PATTERNS: tuple[str, ...] = (
    "i need", "i want", "i will", "i expect",
    "i require", "i believe", "i'm confident",
    "it's important", "this matters",
)

# Final words that mark a sentence as trailing off; an ellipsis counts too.
TRAILING_OFF_WORDS: frozenset[str] = frozenset({"um", "uh", "so", "and", "but", "or"})
ELLIPSES: tuple[str, ...] = ("...", "…")

POSITIVE_WORDS: frozenset[str] = frozenset({
    "good", "great", "excellent", "happy", "pleased",
    "confident", "strong", "clear", "effective", "success",
})

NEGATIVE_WORDS: frozenset[str] = frozenset({
    "bad", "terrible", "worried", "anxious", "nervous",
    "weak", "unclear", "difficult", "problem", "fail",
})

CONTRACTION_PATTERNS: tuple[str, ...] = (
    "don't", "can't", "won't", "wouldn't", "couldn't",
    "shouldn't", "isn't", "aren't", "wasn't", "weren't",
    "i'm", "you're", "we're", "they're", "it's",
)

FORMAL_PATTERNS: tuple[str, ...] = (
    "therefore", "however", "furthermore", "consequently",
    "nevertheless", "regarding", "pertaining to",
)
