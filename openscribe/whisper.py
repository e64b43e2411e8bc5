"""Detection of the whisper-cli executable and Homebrew."""

from __future__ import annotations

import shutil

WHISPER_BINARY = "whisper-cli"
HOMEBREW_BINARY = "brew"


class WhisperNotFoundError(Exception):
    """Raised when whisper-cli or Homebrew cannot be found."""


def get_whisper_cpp_binary_path() -> str:
    """Return the path of whisper-cli found on PATH."""
    path = shutil.which(WHISPER_BINARY)
    if path is None:
        raise WhisperNotFoundError("whisper-cli not found in PATH")
    return path


def is_whisper_cpp_installed() -> bool:
    """Return whether whisper-cli is on PATH."""
    return shutil.which(WHISPER_BINARY) is not None


def check_homebrew() -> None:
    """Raise WhisperNotFoundError if Homebrew is not installed."""
    if shutil.which(HOMEBREW_BINARY) is None:
        raise WhisperNotFoundError(
            "homebrew is not installed. Install it before installing whisper-cpp"
        )


def setup_whisper_cpp() -> None:
    """Raise WhisperNotFoundError unless whisper-cli is installed."""
    if not is_whisper_cpp_installed():
        raise WhisperNotFoundError("whisper-cpp is not installed")