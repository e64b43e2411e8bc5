from datetime import datetime, timedelta, timezone

import pytest

from openscribe import paths
from openscribe.translog import (
    TranscriptionEntry,
    clear_transcriptions,
    count_transcriptions,
    get_transcriptions,
    log_transcription,
)


@pytest.fixture(autouse=True)
def temp_home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("USERPROFILE", str(tmp_path))
    return tmp_path


def test_log_transcription():
    log_transcription(5.5, "whisper-small", "en", "This is a test transcription")
    entries = get_transcriptions(0)
    assert len(entries) >= 1
    last = entries[-1]
    assert last.duration == 5.5
    assert last.model == "whisper-small"
    assert last.language == "en"
    assert last.text == "This is a test transcription"
    assert datetime.now(timezone.utc) - last.timestamp < timedelta(minutes=1)


def test_get_transcriptions_with_tail():
    clear_transcriptions()
    for i in range(1, 6):
        log_transcription(float(i), "whisper-small", "en", f"Test {i}")

    entries = get_transcriptions(3)
    assert len(entries) == 3
    assert [e.text for e in entries] == ["Test 3", "Test 4", "Test 5"]

    all_entries = get_transcriptions(0)
    assert len(all_entries) == 5


def test_tail_larger_than_count_returns_all():
    log_transcription(1.0, "small", "en", "only")
    assert [e.text for e in get_transcriptions(10)] == ["only"]


def test_get_transcriptions_no_file():
    clear_transcriptions()
    assert get_transcriptions(0) == []


def test_clear_transcriptions():
    log_transcription(1.0, "whisper-small", "en", "Test")
    clear_transcriptions()
    assert not paths.get_transcription_log_path().exists()
    assert get_transcriptions(0) == []
    assert clear_transcriptions() is None


def test_count_transcriptions():
    clear_transcriptions()
    assert count_transcriptions() == 0
    for _ in range(3):
        log_transcription(1.0, "whisper-small", "en", "Test")
    assert count_transcriptions() == 3


def test_malformed_lines_are_skipped():
    log_transcription(2.0, "small", "fr", "bonjour")
    log_path = paths.get_transcription_log_path()
    with open(log_path, "a", encoding="utf-8") as handle:
        handle.write("not json\n\n[1, 2]\n")
    log_transcription(3.0, "base", "de", "hallo")
    assert [e.text for e in get_transcriptions(0)] == ["bonjour", "hallo"]


def test_log_file_is_json_lines():
    log_transcription(1.25, "tiny", "", "hi")
    lines = paths.get_transcription_log_path().read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    entry = TranscriptionEntry.from_json(lines[0])
    assert entry.duration == 1.25
    assert entry.language == ""


def test_entry_json_round_trip():
    stamp = datetime(2024, 3, 1, 12, 30, 45, 123456, tzinfo=timezone.utc)
    entry = TranscriptionEntry(stamp, 4.0, "small", "en", "Hello 世界")
    assert TranscriptionEntry.from_json(entry.to_json()) == entry


def test_entry_json_keys():
    stamp = datetime(2024, 3, 1, tzinfo=timezone.utc)
    text = TranscriptionEntry(stamp, 1.0, "small", "en", "x").to_json()
    assert '"duration_seconds": 1.0' in text
    assert '"timestamp": "2024-03-01T00:00:00+00:00"' in text


def test_entry_parses_zulu_and_nanoseconds():
    line = (
        '{"timestamp":"2024-01-02T03:04:05.123456789Z","duration_seconds":2,'
        '"model":"small","language":"en","text":"hi"}'
    )
    entry = TranscriptionEntry.from_json(line)
    assert entry.timestamp == datetime(2024, 1, 2, 3, 4, 5, 123456, tzinfo=timezone.utc)
    assert entry.duration == 2.0


def test_entry_rejects_bad_duration():
    with pytest.raises(ValueError):
        TranscriptionEntry.from_json('{"duration_seconds": "long"}')