"""Downloading Whisper models with retries and progress reporting."""

from __future__ import annotations

import os
import shutil
import time
from pathlib import Path
from typing import Callable, Optional

import requests

from openscribe import paths
from openscribe.models import AVAILABLE_MODELS, ModelError, ModelSize, validate_model

ProgressCallback = Callable[[int, int, float], None]

MAX_RETRIES = 3
RETRY_BASE_DELAY = 2
REQUEST_TIMEOUT = 300
PROGRESS_INTERVAL = 0.1
CHUNK_SIZE = 64 * 1024
DIRECTORY_MODE = 0o755


class DownloadError(ModelError):
    """Raised when a model cannot be downloaded."""


def _check_disk_space(directory: Path, required_bytes: int) -> None:
    try:
        available = shutil.disk_usage(directory).free
    except OSError as exc:
        raise DownloadError(f"failed to check disk space: {exc}") from exc

    required_with_buffer = required_bytes + required_bytes // 10
    if available < required_with_buffer:
        raise DownloadError(
            f"insufficient disk space: need {format_bytes(required_with_buffer)}, "
            f"available {format_bytes(available)}"
        )


def _fetch(url: str) -> requests.Response:
    last_error: Optional[requests.RequestException] = None
    last_response: Optional[requests.Response] = None

    for attempt in range(1, MAX_RETRIES + 1):
        if attempt > 1:
            time.sleep((attempt - 1) * RETRY_BASE_DELAY)
        last_error = None
        last_response = None
        try:
            last_response = requests.get(url, timeout=REQUEST_TIMEOUT, stream=True)
        except requests.RequestException as exc:
            last_error = exc
        if last_response is not None:
            if last_response.status_code == 200:
                return last_response
            last_response.close()

    if last_error is not None:
        raise DownloadError(
            f"failed to download model after {MAX_RETRIES} attempts: {last_error}\n"
            "Please check your internet connection"
        ) from last_error
    assert last_response is not None
    status = last_response.status_code
    raise DownloadError(
        f"failed to download model after {MAX_RETRIES} attempts: HTTP {status}\n"
        f"Server returned error: {status} {last_response.reason}"
    )


def _content_length(response: requests.Response) -> int:
    try:
        return int(response.headers.get("Content-Length", "-1"))
    except ValueError:
        return -1


def _write_with_progress(
    response: requests.Response, target: Path, progress: Optional[ProgressCallback]
) -> None:
    total = _content_length(response)
    downloaded = 0
    last_update: Optional[float] = None
    try:
        with open(target, "wb") as out:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if not chunk:
                    continue
                out.write(chunk)
                downloaded += len(chunk)
                now = time.monotonic()
                if progress is not None and (
                    last_update is None or now - last_update > PROGRESS_INTERVAL
                ):
                    percent = downloaded / total * 100.0 if total > 0 else 0.0
                    progress(downloaded, total, percent)
                    last_update = now
    except (OSError, requests.RequestException) as exc:
        target.unlink(missing_ok=True)
        raise DownloadError(f"failed to write model file: {exc}") from exc


def download_model(
    model_name: ModelSize | str, progress: Optional[ProgressCallback] = None
) -> None:
    """Download a model into the models directory and validate it.

    ``progress`` is called with (downloaded bytes, total bytes, percent) at
    most every 100 ms; total is -1 when the server does not report a length.
    """
    try:
        size = ModelSize(model_name)
    except ValueError:
        raise DownloadError(f"unknown model: {model_name}") from None
    info = AVAILABLE_MODELS[size]

    try:
        models_dir = paths.get_models_dir()
    except RuntimeError as exc:
        raise DownloadError(f"failed to get models directory: {exc}") from exc
    try:
        models_dir.mkdir(mode=DIRECTORY_MODE, parents=True, exist_ok=True)
    except OSError as exc:
        raise DownloadError(f"failed to create models directory: {exc}") from exc

    try:
        _check_disk_space(models_dir, info.size_mb * 1024 * 1024)
    except DownloadError as exc:
        raise DownloadError(f"cannot download model: {exc}") from exc

    temp_path = models_dir / (info.file_name + ".tmp")
    final_path = models_dir / info.file_name
    if final_path.exists():
        raise DownloadError(f"model already exists: {size}")

    with _fetch(info.url) as response:
        _write_with_progress(response, temp_path, progress)

    try:
        os.replace(temp_path, final_path)
    except OSError as exc:
        temp_path.unlink(missing_ok=True)
        raise DownloadError(f"failed to finalize model file: {exc}") from exc

    try:
        validate_model(size)
    except ModelError as exc:
        final_path.unlink(missing_ok=True)
        raise DownloadError(f"model validation failed: {exc}") from exc


def format_bytes(n: int) -> str:
    """Format a byte count in binary units, e.g. ``1.5 MB``."""
    unit = 1024
    if n < unit:
        return f"{n} B"
    div, exp = unit, 0
    rest = n // unit
    while rest >= unit:
        div *= unit
        exp += 1
        rest //= unit
    return f"{n / div:.1f} {'KMGTPE'[exp]}B"


def format_speed(bytes_per_second: float) -> str:
    """Format a transfer rate, e.g. ``1.5 KB/s``."""
    return f"{format_bytes(int(bytes_per_second))}/s"


def estimate_time_remaining(downloaded: int, total: int, bytes_per_second: float) -> str:
    """Estimate the remaining download time as seconds, minutes or hours."""
    if bytes_per_second == 0 or total == 0:
        return "calculating..."
    seconds = (total - downloaded) / bytes_per_second
    if seconds < 60:
        return f"{seconds:.0f}s"
    if seconds < 3600:
        return f"{seconds / 60:.0f}m"
    return f"{seconds / 3600:.1f}h"