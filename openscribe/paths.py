"""Standard locations for configuration, models, cache and logs."""

from __future__ import annotations

from pathlib import Path

APP_NAME = "openscribe"
CONFIG_FILE_NAME = "config.yaml"
TRANSCRIPTION_LOG_NAME = "transcriptions.log"
DIRECTORY_MODE = 0o755


def _home() -> Path:
    return Path.home()


def get_app_support_dir() -> Path:
    """Return ~/Library/Application Support/openscribe."""
    return _home() / "Library" / "Application Support" / APP_NAME


def get_config_path() -> Path:
    """Return the path of the configuration file."""
    return get_app_support_dir() / CONFIG_FILE_NAME


def get_models_dir() -> Path:
    """Return the directory that holds downloaded models."""
    return get_app_support_dir() / "models"


def get_cache_dir() -> Path:
    """Return ~/Library/Caches/openscribe."""
    return _home() / "Library" / "Caches" / APP_NAME


def get_logs_dir() -> Path:
    """Return ~/Library/Logs/openscribe."""
    return _home() / "Library" / "Logs" / APP_NAME


def get_transcription_log_path() -> Path:
    """Return the path of the transcription history log."""
    return get_logs_dir() / TRANSCRIPTION_LOG_NAME


def ensure_directories() -> None:
    """Create every application directory that does not exist yet."""
    for directory in (
        get_app_support_dir(),
        get_models_dir(),
        get_cache_dir(),
        get_logs_dir(),
    ):
        directory.mkdir(mode=DIRECTORY_MODE, parents=True, exist_ok=True)