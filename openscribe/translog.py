"""Transcription history kept as JSON lines in the logs directory."""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from openscribe import paths

LOG_FILE_MODE = 0o644
_ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)
_FRACTION = re.compile(r"\.(\d+)")


@dataclass
class TranscriptionEntry:
    """One transcription written to the history log."""

    timestamp: datetime
    duration: float
    model: str
    language: str
    text: str

    def to_json(self) -> str:
        """Return the entry as one JSON object on a single line."""
        return json.dumps(
            {
                "timestamp": self.timestamp.isoformat(),
                "duration_seconds": self.duration,
                "model": self.model,
                "language": self.language,
                "text": self.text,
            },
            ensure_ascii=False,
        )

    @classmethod
    def from_json(cls, line: str) -> "TranscriptionEntry":
        """Parse one JSON line; raise ValueError if it is malformed."""
        data = json.loads(line)
        if not isinstance(data, dict):
            raise ValueError("log entry must be a JSON object")
        raw_time = data.get("timestamp")
        timestamp = _ZERO_TIME if raw_time is None else _parse_timestamp(raw_time)
        return cls(
            timestamp=timestamp,
            duration=_number(data.get("duration_seconds")),
            model=_string(data.get("model")),
            language=_string(data.get("language")),
            text=_string(data.get("text")),
        )


def log_transcription(duration: float, model: str, language: str, text: str) -> None:
    """Append a transcription entry stamped with the current time."""
    try:
        paths.ensure_directories()
    except OSError as exc:
        raise OSError(f"failed to ensure directories: {exc}") from exc

    log_path = paths.get_transcription_log_path()
    entry = TranscriptionEntry(
        timestamp=datetime.now().astimezone(),
        duration=duration,
        model=model,
        language=language,
        text=text,
    )
    try:
        fd = os.open(log_path, os.O_WRONLY | os.O_APPEND | os.O_CREAT, LOG_FILE_MODE)
        with os.fdopen(fd, "a", encoding="utf-8") as handle:
            handle.write(entry.to_json() + "\n")
    except OSError as exc:
        raise OSError(f"failed to write to log file: {exc}") from exc


def get_transcriptions(tail: int) -> list[TranscriptionEntry]:
    """Return logged entries, only the last ``tail`` of them when ``tail`` > 0.

    Malformed lines are skipped; a missing log file gives an empty list.
    """
    log_path = paths.get_transcription_log_path()
    if not log_path.exists():
        return []

    entries: list[TranscriptionEntry] = []
    try:
        with open(log_path, encoding="utf-8") as handle:
            for line in handle:
                try:
                    entries.append(TranscriptionEntry.from_json(line))
                except ValueError:
                    continue
    except OSError as exc:
        raise OSError(f"error reading log file: {exc}") from exc

    if tail > 0 and len(entries) > tail:
        return entries[-tail:]
    return entries


def clear_transcriptions() -> None:
    """Delete the transcription log if it exists."""
    log_path = paths.get_transcription_log_path()
    try:
        log_path.unlink()
    except FileNotFoundError:
        return
    except OSError as exc:
        raise OSError(f"failed to remove log file: {exc}") from exc


def count_transcriptions() -> int:
    """Return the number of entries in the transcription log."""
    return len(get_transcriptions(0))


def _parse_timestamp(value: Any) -> datetime:
    if not isinstance(value, str):
        raise ValueError("timestamp must be a string")
    text = value
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        raise ValueError("timestamp must carry a time zone")
    return parsed


def _number(value: Any) -> float:
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("duration_seconds must be a number")
    return float(value)


def _string(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError("expected a string")
    return value