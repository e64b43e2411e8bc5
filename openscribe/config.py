"""Application configuration stored as YAML in the application support directory."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

import yaml

from openscribe import paths

logger = logging.getLogger(__name__)

VALID_MODELS = ("tiny", "base", "small", "medium", "large")
VALID_HOTKEYS = (
    "Left Option",
    "Right Option",
    "Left Shift",
    "Right Shift",
    "Left Command",
    "Right Command",
    "Left Control",
    "Right Control",
)
CONFIG_FILE_MODE = 0o644


class ConfigError(Exception):
    """Raised when the configuration cannot be read, written or validated."""


@dataclass
class Config:
    """User preferences.

    ``microphone`` is the legacy single-device setting; ``preferred_microphones``
    is an ordered list whose first available device is used.
    """

    microphone: str = ""
    preferred_microphones: list[str] = field(default_factory=list)
    model: str = "small"
    language: str = ""
    hotkey: str = "Right Option"
    auto_paste: bool = True
    audio_feedback: bool = True
    verbose: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Return the YAML mapping, leaving out empty legacy and list fields."""
        data: dict[str, Any] = {}
        if self.microphone:
            data["microphone"] = self.microphone
        if self.preferred_microphones:
            data["preferred_microphones"] = list(self.preferred_microphones)
        data["model"] = self.model
        data["language"] = self.language
        data["hotkey"] = self.hotkey
        data["auto_paste"] = self.auto_paste
        data["audio_feedback"] = self.audio_feedback
        data["verbose"] = self.verbose
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Build a config from a parsed YAML mapping; absent keys take zero values."""
        return cls(
            microphone=_as_str(data, "microphone"),
            preferred_microphones=_as_str_list(data, "preferred_microphones"),
            model=_as_str(data, "model"),
            language=_as_str(data, "language"),
            hotkey=_as_str(data, "hotkey"),
            auto_paste=_as_bool(data, "auto_paste"),
            audio_feedback=_as_bool(data, "audio_feedback"),
            verbose=_as_bool(data, "verbose"),
        )

    def save(self) -> None:
        """Write the configuration to disk, creating directories as needed."""
        try:
            config_path = paths.get_config_path()
        except RuntimeError as exc:
            raise ConfigError(f"failed to get config path: {exc}") from exc
        try:
            paths.ensure_directories()
        except (OSError, RuntimeError) as exc:
            raise ConfigError(f"failed to create directories: {exc}") from exc

        text = yaml.safe_dump(self.to_dict(), sort_keys=False, allow_unicode=True)
        try:
            fd = os.open(config_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, CONFIG_FILE_MODE)
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(text)
        except OSError as exc:
            raise ConfigError(f"failed to write config file: {exc}") from exc

    def validate(self) -> None:
        """Raise ConfigError if any value is not acceptable."""
        seen: set[str] = set()
        for index, mic in enumerate(self.preferred_microphones):
            trimmed = mic.strip()
            if not trimmed:
                raise ConfigError(f"preferred_microphones[{index}] cannot be empty")
            key = trimmed.lower()
            if key in seen:
                raise ConfigError(f"duplicate preferred microphone: {trimmed}")
            seen.add(key)

        if self.model and self.model not in VALID_MODELS:
            raise ConfigError(
                f"invalid model: {self.model} (must be one of: {', '.join(VALID_MODELS)})"
            )

        if not self.hotkey:
            raise ConfigError("hotkey cannot be empty")

        if self.hotkey not in VALID_HOTKEYS:
            raise ConfigError(
                f"invalid hotkey: {self.hotkey} (must be one of: {', '.join(VALID_HOTKEYS)})"
            )
        # Language codes are deliberately not restricted.

    def migrate(self) -> None:
        """Move a legacy ``microphone`` value into ``preferred_microphones``."""
        if self.preferred_microphones or not self.microphone:
            return
        self.preferred_microphones = [self.microphone]
        logger.info(
            "[CONFIG] Migrated legacy 'microphone' field to 'preferred_microphones': %s",
            self.microphone,
        )
        try:
            self.save()
        except ConfigError as exc:
            logger.warning("[CONFIG] Warning: Failed to save migrated config: %s", exc)

    def __str__(self) -> str:
        microphone = self.microphone or "(system default)"
        if self.preferred_microphones:
            preferred = "\n" + "".join(
                f"    {number}. {mic}\n"
                for number, mic in enumerate(self.preferred_microphones, start=1)
            )
        else:
            preferred = "(none - using system default)"
        language = self.language or "auto-detect"

        return (
            "Current Configuration:\n"
            "\n"
            "Settings:\n"
            f"  Microphone:      {microphone} (legacy)\n"
            f"  Preferred Mics:  {preferred}\n"
            f"  Model:           {self.model}\n"
            f"  Language:        {language}\n"
            f"  Hotkey:          {self.hotkey}\n"
            f"  Auto-paste:      {str(self.auto_paste).lower()}\n"
            f"  Audio Feedback:  {str(self.audio_feedback).lower()}\n"
            f"  Verbose:         {str(self.verbose).lower()}\n"
            "\n"
            "Paths:\n"
            f"  Config:          {_path_or_empty(paths.get_config_path)}\n"
            f"  Models:          {_path_or_empty(paths.get_models_dir)}\n"
            f"  Cache:           {_path_or_empty(paths.get_cache_dir)}\n"
            f"  Logs:            {_path_or_empty(paths.get_logs_dir)}\n"
        )


def default_config() -> Config:
    """Return a configuration holding the default values."""
    return Config()


def load() -> Config:
    """Read the configuration, creating it with defaults when it does not exist."""
    try:
        paths.ensure_directories()
    except (OSError, RuntimeError) as exc:
        raise ConfigError(f"failed to create directories: {exc}") from exc

    try:
        config_path = paths.get_config_path()
    except RuntimeError as exc:
        raise ConfigError(f"failed to get config path: {exc}") from exc

    if not config_path.exists():
        cfg = default_config()
        try:
            cfg.save()
        except ConfigError as exc:
            raise ConfigError(f"failed to save default config: {exc}") from exc
        return cfg

    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"failed to read config file: {exc}") from exc

    try:
        data = yaml.safe_load(text)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError("top-level value must be a mapping")
        cfg = Config.from_dict(data)
    except (yaml.YAMLError, ValueError) as exc:
        raise ConfigError(f"failed to parse config file: {exc}") from exc

    cfg.migrate()

    try:
        cfg.validate()
    except ConfigError as exc:
        raise ConfigError(
            f"invalid configuration in {config_path}: {exc}\n\n"
            "You can reset to defaults by running:\n"
            f"  rm {config_path}\n"
            "  openscribe config --show"
        ) from exc

    return cfg


def _path_or_empty(getter: Callable[[], Path]) -> str:
    try:
        return str(getter())
    except RuntimeError:
        return ""


def _scalar_to_str(value: Any, key: str) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise ValueError(f"field {key!r} must be a string")


def _as_str(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    return _scalar_to_str(value, key)


def _as_str_list(data: dict[str, Any], key: str) -> list[str]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"field {key!r} must be a list")
    return ["" if item is None else _scalar_to_str(item, key) for item in value]


def _as_bool(data: dict[str, Any], key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"field {key!r} must be a boolean")
    return value