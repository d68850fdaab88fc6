"""
cadence.transcribe - Optional on-device transcription.

A small capability interface with typed outcomes, plus a faster-whisper
backed provider. Transcription is opt-in and never required for scoring.
"""

from __future__ import annotations
