"""
cadence.io - JSON and text helpers plus loaders for session inputs.

Atomic writes for reports; validated loading of metering JSON,
transcripts, baselines and previous-session scores.
"""

from __future__ import annotations

import json
import tempfile
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from cadence.exceptions import ValidationError
from cadence.models import (
    DEFAULT_METERING_INTERVAL,
    AudioMetrics,
    Dimension,
    FeedbackScores,
    TranscriptionResult,
    TranscriptionSegment,
)
from cadence.profile import BaselineMetrics
from cadence.transcribe.whisper import parse_whisper_segments


def read_json(path: Path) -> Any:
    """Read a UTF-8 JSON file.

    Raises:
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If file contains invalid JSON
    """
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def _atomic_write(path: Path, write) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=path.parent,
        delete=False,
        suffix=".tmp",
    ) as tmp:
        tmp_path = Path(tmp.name)
        try:
            write(tmp)
        except Exception:
            tmp_path.unlink(missing_ok=True)
            raise
    tmp_path.replace(path)


def write_json(path: Path, data: dict[str, Any], indent: int = 2) -> None:
    """Write a JSON file atomically (temp file, then rename)."""
    _atomic_write(path, lambda f: json.dump(data, f, indent=indent, ensure_ascii=False))


def read_text(path: Path) -> str:
    with open(path, encoding="utf-8") as f:
        return f.read()


def write_text(path: Path, content: str) -> None:
    """Write a text file atomically."""
    _atomic_write(path, lambda f: f.write(content))


def _load_mapping(path: Path, what: str) -> dict[str, Any]:
    try:
        data = read_json(path)
    except FileNotFoundError as e:
        raise ValidationError(f"{what} file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON in {what} file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValidationError(f"{what} file {path} must contain a JSON object")
    return data


def _float_list(data: dict[str, Any], key: str, path: Path) -> list[float]:
    values = data.get(key)
    if not isinstance(values, list):
        raise ValidationError(f"'{key}' in {path} must be a list of numbers")
    try:
        return [float(v) for v in values]
    except (TypeError, ValueError) as e:
        raise ValidationError(f"'{key}' in {path} must be a list of numbers") from e


def audio_metrics_from_dict(data: dict[str, Any], source: Path) -> AudioMetrics:
    rms = _float_list(data, "rms_windows", source)
    peak = _float_list(data, "peak_windows", source) if "peak_windows" in data else list(rms)
    if len(peak) != len(rms):
        raise ValidationError(
            f"rms_windows and peak_windows differ in length in {source} "
            f"({len(rms)} vs {len(peak)})"
        )

    try:
        interval = float(data.get("interval", DEFAULT_METERING_INTERVAL))
        duration = float(data.get("duration", len(rms) * interval))
    except (TypeError, ValueError) as e:
        raise ValidationError(f"duration and interval in {source} must be numbers") from e
    if interval <= 0 or duration < 0:
        raise ValidationError(f"duration must be >= 0 and interval > 0 in {source}")

    return AudioMetrics(
        rms_windows=tuple(rms),
        peak_windows=tuple(peak),
        duration=duration,
        interval=interval,
    )


def load_audio_metrics(path: Path) -> AudioMetrics:
    """Load metering output saved as JSON.

    Expected keys: rms_windows, peak_windows (defaults to rms_windows),
    duration (defaults to windows x interval), interval (default 0.1).

    Raises:
        ValidationError: If the file is missing or malformed
    """
    return audio_metrics_from_dict(_load_mapping(path, "Metrics"), path)


def _segment_from_dict(item: Any, source: Path) -> TranscriptionSegment:
    if not isinstance(item, dict) or "text" not in item:
        raise ValidationError(f"Each transcript segment in {source} needs a 'text' field")
    try:
        timestamp = float(item.get("timestamp", item.get("start", 0.0)))
        if "duration" in item:
            duration = float(item["duration"])
        else:
            duration = float(item.get("end", timestamp)) - timestamp
        confidence = float(item.get("confidence", item.get("probability", 1.0)))
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Non-numeric timing in transcript segment in {source}") from e
    return TranscriptionSegment(
        text=str(item["text"]).strip(),
        timestamp=timestamp,
        duration=max(0.0, duration),
        confidence=confidence,
    )


def load_transcript(path: Path) -> TranscriptionResult:
    """Load a transcript from plain text or JSON.

    JSON may be {"text", "segments": [...]} with word-level segments, or
    Whisper-style output whose segments carry a "words" list.

    Raises:
        ValidationError: If the file is missing or malformed
    """
    if path.suffix.lower() != ".json":
        try:
            text = read_text(path)
        except FileNotFoundError as e:
            raise ValidationError(f"Transcript file not found: {path}") from e
        return TranscriptionResult(text=" ".join(text.split()))

    data = _load_mapping(path, "Transcript")
    segments = data.get("segments", [])
    if not isinstance(segments, list):
        raise ValidationError(f"'segments' in {path} must be a list")

    if any(isinstance(seg, dict) and "words" in seg for seg in segments):
        result = parse_whisper_segments(segments)
        if data.get("text"):
            result = TranscriptionResult(text=str(data["text"]).strip(), segments=result.segments)
        return result

    parsed = tuple(_segment_from_dict(seg, path) for seg in segments)
    text = data.get("text")
    if text is None:
        text = " ".join(seg.text for seg in parsed)
    return TranscriptionResult(text=str(text).strip(), segments=parsed)


def load_baseline(path: Path) -> BaselineMetrics:
    """Load rolling session averages from JSON.

    Raises:
        ValidationError: If the file is missing or malformed
    """
    data = _load_mapping(path, "Baseline")
    try:
        return BaselineMetrics.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid baseline in {path}: {e}") from e


def load_previous_scores(path: Path) -> FeedbackScores:
    """Load the scores of an earlier session for comparison.

    Accepts a report written by `cadence analyze --json` (scores under
    "scores") or a bare mapping of the four dimension scores.

    Raises:
        ValidationError: If the file is missing or a score is absent or out of range
    """
    data = _load_mapping(path, "Previous session")
    scores = data.get("scores", data)
    if not isinstance(scores, dict):
        raise ValidationError(f"'scores' in {path} must be an object")

    values: dict[str, int] = {}
    for dimension in Dimension:
        value = scores.get(dimension.value)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError(f"'{dimension.value}' score missing or not a number in {path}")
        if not 0 <= value <= 100:
            raise ValidationError(f"'{dimension.value}' score must be 0-100 in {path}")
        values[dimension.value] = int(value)

    return FeedbackScores(**values)
