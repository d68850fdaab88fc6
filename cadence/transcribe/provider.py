"""
cadence.transcribe.provider - Transcription capability interface.

Providers report one of four outcomes instead of raising: a transcript is
available, the user has not authorized recognition, the recognizer is
unavailable, or recognition failed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Union, runtime_checkable

from cadence.models import TranscriptionResult


@dataclass(frozen=True)
class Available:
    result: TranscriptionResult


@dataclass(frozen=True)
class Unauthorized:
    reason: str = "Speech recognition not authorized"


@dataclass(frozen=True)
class Unavailable:
    reason: str = "Speech recognition is not available"


@dataclass(frozen=True)
class Failed:
    reason: str


TranscriptionOutcome = Union[Available, Unauthorized, Unavailable, Failed]


@runtime_checkable
class TranscriptionProvider(Protocol):
    """Something that can turn one finished recording into a transcript."""

    async def authorize(self) -> bool:
        """Return True once the provider may transcribe."""
        ...

    async def transcribe(self) -> TranscriptionOutcome:
        """Transcribe the bound recording."""
        ...


@dataclass(frozen=True)
class StaticTranscriber:
    """Provider that replays a transcript supplied up front (e.g. from a JSON file)."""

    result: TranscriptionResult

    async def authorize(self) -> bool:
        return True

    async def transcribe(self) -> TranscriptionOutcome:
        if self.result.is_empty:
            return Failed("Transcript is empty")
        return Available(self.result)
