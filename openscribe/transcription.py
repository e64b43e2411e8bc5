"""Speech-to-text transcription by running the whisper-cli executable.

The transcription process takes a WAV audio file (16 kHz, mono), checks that
the chosen Whisper model has been downloaded, runs whisper-cli on it and
returns the cleaned-up text together with the specified or detected language.
"""

from __future__ import annotations

import re
import shutil
import subprocess
from dataclasses import dataclass
from os import PathLike
from typing import Optional, Union

from openscribe.models import ModelError, ModelSize, get_model_path, is_model_downloaded

WHISPER_BINARY = "whisper-cli"
DEFAULT_THREADS = 4

_ANSI_PATTERN = re.compile(r"(\x1b)?\[[0-9;]*[a-zA-Z]")


class TranscriptionError(Exception):
    """Raised when whisper-cli is missing or a transcription fails."""


@dataclass
class Options:
    """Settings for one transcription.

    An empty ``language`` means the language is detected automatically.
    """

    model: Union[ModelSize, str] = ModelSize.SMALL
    language: str = ""
    verbose: bool = False


@dataclass
class Result:
    """Transcribed text with its language and audio duration in seconds."""

    text: str
    language: str = ""
    duration: float = 0.0


class Transcriber:
    """Runs whisper-cli to turn audio files into text."""

    def __init__(self, whisper_path: Optional[str] = None) -> None:
        if whisper_path is None:
            whisper_path = shutil.which(WHISPER_BINARY)
            if whisper_path is None:
                raise TranscriptionError(
                    "whisper-cli not found in PATH. Please install whisper-cpp "
                    "via Homebrew: brew install whisper-cpp"
                )
        self.whisper_path = whisper_path

    def _build_command(
        self, model_path: str, audio_path: str, opts: Options
    ) -> list[str]:
        command = [
            self.whisper_path,
            "-m",
            model_path,
            "-f",
            audio_path,
            "--no-timestamps",
            "--output-txt",
        ]
        if opts.language:
            command += ["-l", opts.language]
        command += ["-t", str(DEFAULT_THREADS)]
        if not opts.verbose:
            command.append("--no-prints")
        return command

    def transcribe_file(
        self, audio_path: Union[str, "PathLike[str]"], opts: Optional[Options] = None
    ) -> Result:
        """Transcribe ``audio_path`` and return the result."""
        if opts is None:
            opts = default_options()

        try:
            downloaded = is_model_downloaded(opts.model)
        except ModelError as exc:
            raise TranscriptionError(
                f"failed to check if model is downloaded: {exc}"
            ) from exc
        if not downloaded:
            raise TranscriptionError(
                f"model {opts.model} is not downloaded. "
                f"Run 'openscribe models download {opts.model}' first"
            )

        try:
            model_path = get_model_path(opts.model)
        except ModelError as exc:
            raise TranscriptionError(f"failed to get model path: {exc}") from exc

        command = self._build_command(str(model_path), str(audio_path), opts)
        try:
            completed = subprocess.run(
                command,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except OSError as exc:
            raise TranscriptionError(f"whisper-cli failed: {exc}\nStderr: ") from exc

        if completed.returncode != 0:
            raise TranscriptionError(
                f"whisper-cli failed: exit status {completed.returncode}\n"
                f"Stderr: {completed.stderr or ''}"
            )

        output = completed.stdout or ""
        text = parse_output(output)
        if not text:
            raise TranscriptionError("transcription produced empty result")

        result = Result(text=text, language=opts.language)
        if not opts.language:
            detected = extract_language(output)
            if detected:
                result.language = detected
        return result


def parse_output(output: str) -> str:
    """Extract the transcribed text from whisper-cli output."""
    text_lines: list[str] = []
    for raw_line in output.split("\n"):
        line = raw_line.strip()
        if not line:
            continue

        lower = line.lower()
        if (
            "detected language" in lower
            or "processing" in lower
            or lower.startswith("whisper")
        ):
            continue

        if line.startswith("["):
            closing = line.find("]")
            if closing != -1 and closing < len(line) - 1:
                segment = line[closing + 1 :].strip()
                if segment:
                    text_lines.append(segment)
            continue

        text_lines.append(line)

    return strip_ansi_codes(" ".join(text_lines).strip())


def strip_ansi_codes(s: str) -> str:
    """Remove ANSI colour sequences, with or without the leading escape byte."""
    return _ANSI_PATTERN.sub("", s)


def extract_language(output: str) -> str:
    """Return the language code from a 'Detected language: xx' line, or ''."""
    for line in output.split("\n"):
        if "detected language" not in line.lower():
            continue
        parts = line.split(":")
        if len(parts) >= 2:
            fields = parts[1].strip().split()
            if fields:
                return fields[0]
    return ""


def default_options() -> Options:
    """Return the default options: small model, auto-detected language, quiet."""
    return Options(model=ModelSize.SMALL, language="", verbose=False)