"""Whisper model catalogue and management of locally downloaded model files.

Models are stored in the ``models`` directory under the application support
directory. Each model is a single ggml ``.bin`` file that whisper-cli loads.
"""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from openscribe import paths

_CHECKSUM_CHUNK = 1024 * 1024


class ModelSize(str, Enum):
    """Size of a Whisper model."""

    TINY = "tiny"
    BASE = "base"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ModelInfo:
    """Metadata about a downloadable Whisper model."""

    name: ModelSize
    description: str
    size_mb: int
    url: str
    file_name: str
    sha256: str = ""


class ModelError(Exception):
    """Raised for unknown models and missing or invalid model files."""


_DOWNLOAD_BASE = "https://huggingface.co/ggerganov/whisper.cpp/resolve/main/"

AVAILABLE_MODELS: dict[ModelSize, ModelInfo] = {
    ModelSize.TINY: ModelInfo(
        name=ModelSize.TINY,
        description="Fastest, least accurate (75 MB)",
        size_mb=75,
        url=_DOWNLOAD_BASE + "ggml-tiny.bin",
        file_name="ggml-tiny.bin",
    ),
    ModelSize.BASE: ModelInfo(
        name=ModelSize.BASE,
        description="Fast, decent accuracy (142 MB)",
        size_mb=142,
        url=_DOWNLOAD_BASE + "ggml-base.bin",
        file_name="ggml-base.bin",
    ),
    ModelSize.SMALL: ModelInfo(
        name=ModelSize.SMALL,
        description="Balanced speed/accuracy (466 MB)",
        size_mb=466,
        url=_DOWNLOAD_BASE + "ggml-small.bin",
        file_name="ggml-small.bin",
    ),
    ModelSize.MEDIUM: ModelInfo(
        name=ModelSize.MEDIUM,
        description="Slower, better accuracy (1.5 GB)",
        size_mb=1500,
        url=_DOWNLOAD_BASE + "ggml-medium.bin",
        file_name="ggml-medium.bin",
    ),
    ModelSize.LARGE: ModelInfo(
        name=ModelSize.LARGE,
        description="Slowest, best accuracy (2.9 GB)",
        size_mb=2900,
        url=_DOWNLOAD_BASE + "ggml-large-v3.bin",
        file_name="ggml-large-v3.bin",
    ),
}


def _lookup(model_name: ModelSize | str) -> ModelInfo:
    try:
        return AVAILABLE_MODELS[ModelSize(model_name)]
    except ValueError:
        raise ModelError(f"unknown model: {model_name}") from None


def get_model_path(model_name: ModelSize | str) -> Path:
    """Return the full path of a model's file."""
    try:
        models_dir = paths.get_models_dir()
    except RuntimeError as exc:
        raise ModelError(f"failed to get models directory: {exc}") from exc
    return models_dir / _lookup(model_name).file_name


def is_model_downloaded(model_name: ModelSize | str) -> bool:
    """Return whether the model's file exists locally."""
    model_path = get_model_path(model_name)
    try:
        os.stat(model_path)
    except FileNotFoundError:
        return False
    except OSError as exc:
        raise ModelError(f"failed to check model file: {exc}") from exc
    return True


def list_downloaded_models() -> list[ModelSize]:
    """Return the models whose files exist locally."""
    return [size for size in AVAILABLE_MODELS if is_model_downloaded(size)]


def validate_model(model_name: ModelSize | str) -> None:
    """Raise ModelError if the downloaded model file is missing or looks broken."""
    model_path = get_model_path(model_name)
    info = _lookup(model_name)

    try:
        size = model_path.stat().st_size
    except OSError as exc:
        raise ModelError(f"model file not found: {exc}") from exc

    if size == 0:
        raise ModelError("model file is empty")

    expected = info.size_mb * 1024 * 1024
    tolerance = expected // 10
    if size < expected - tolerance:
        raise ModelError(
            f"model file appears incomplete (size: {size}, expected: ~{expected})"
        )

    if info.sha256:
        try:
            _verify_checksum(model_path, info.sha256)
        except (OSError, ModelError) as exc:
            raise ModelError(f"checksum verification failed: {exc}") from exc


def _verify_checksum(file_path: Path, expected_checksum: str) -> None:
    digest = hashlib.sha256()
    with open(file_path, "rb") as handle:
        for chunk in iter(lambda: handle.read(_CHECKSUM_CHUNK), b""):
            digest.update(chunk)
    calculated = digest.hexdigest()
    if calculated != expected_checksum:
        raise ModelError(
            f"checksum mismatch: got {calculated}, expected {expected_checksum}"
        )


def parse_model_size(s: str) -> ModelSize:
    """Convert a string to a ModelSize, raising ModelError if it is not one."""
    try:
        return ModelSize(s)
    except ValueError:
        raise ModelError(
            f"invalid model size: {s} (must be one of: tiny, base, small, medium, large)"
        ) from None