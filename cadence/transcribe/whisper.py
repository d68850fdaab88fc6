"""
cadence.transcribe.whisper - On-device transcription with faster-whisper.

Runs the model in a worker thread so the surrounding analysis stays
cancellable. Word-level timestamps become transcript segments and word
probabilities become segment confidences.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from cadence.exceptions import TranscriptionError
from cadence.logging import logger
from cadence.models import TranscriptionResult, TranscriptionSegment
from cadence.transcribe.provider import (
    Available,
    Failed,
    TranscriptionOutcome,
    Unauthorized,
    Unavailable,
)


class WhisperTranscriber:
    """Transcribe one recording with a local Whisper model.

    A transcription timeout abandons the worker thread but cannot stop it;
    the model keeps running until it finishes on its own.

    Args:
        audio_path: Recording to transcribe
        model: Whisper model size (tiny, base, small, medium, large-v3)
        language: Language code (auto-detect if None)
        device: faster-whisper device ("auto", "cpu", "cuda")
    """

    def __init__(
        self,
        audio_path: Path,
        model: str = "base",
        language: str | None = None,
        device: str = "auto",
    ):
        self.audio_path = audio_path
        self.model = model
        self.language = language
        self.device = device

    async def authorize(self) -> bool:
        # Local models need no grant; the recording just has to be readable.
        return self.audio_path.exists()

    async def transcribe(self) -> TranscriptionOutcome:
        if not self.audio_path.exists():
            return Unauthorized(f"Recording not found: {self.audio_path.name}")

        try:
            from faster_whisper import WhisperModel  # noqa: F401
        except ImportError:
            return Unavailable(
                "faster-whisper not installed. Install with: pip install faster-whisper"
            )

        try:
            result = await asyncio.to_thread(self._run)
        except TranscriptionError as e:
            logger.warning("Whisper transcription failed: %s", e)
            return Failed(str(e))

        logger.debug("Transcribed %s: %d segments", self.audio_path.name, len(result.segments))
        return Available(result)

    def _run(self) -> TranscriptionResult:
        from faster_whisper import WhisperModel

        kwargs: dict[str, Any] = {"word_timestamps": True}
        if self.language:
            kwargs["language"] = self.language

        try:
            model_instance = WhisperModel(self.model, device=self.device, compute_type="auto")
            segments, _info = model_instance.transcribe(str(self.audio_path), **kwargs)

            # Segments are generated lazily; decoding errors surface here.
            parsed = []
            for segment in segments:
                parsed.append(
                    {
                        "text": segment.text,
                        "words": [
                            {
                                "word": word.word,
                                "start": word.start,
                                "end": word.end,
                                "probability": word.probability,
                            }
                            for word in (segment.words or [])
                        ],
                    }
                )
        except Exception as e:
            raise TranscriptionError(f"Whisper failed on {self.audio_path.name}: {e}") from e
        return parse_whisper_segments(parsed)


def parse_whisper_segments(segments: list[dict[str, Any]]) -> TranscriptionResult:
    """Flatten Whisper segment dicts into word-level transcript segments."""
    text_parts = []
    words = []

    for seg in segments:
        text = seg.get("text", "").strip()
        if text:
            text_parts.append(text)
        for w in seg.get("words", []):
            word_text = w.get("word", w.get("text", "")).strip()
            if not word_text:
                continue
            start = float(w.get("start", 0.0))
            end = float(w.get("end", start))
            words.append(
                TranscriptionSegment(
                    text=word_text,
                    timestamp=start,
                    duration=max(0.0, end - start),
                    confidence=float(w.get("probability", 1.0)),
                )
            )

    return TranscriptionResult(text=" ".join(text_parts), segments=tuple(words))
