"""Global hotkey listening with double-press detection.

The listener counts presses of one modifier key and calls a callback when
the key is pressed twice within the double-press window. Capturing key
events from the operating system is not supported on this platform, so
``Listener.start`` raises ``HotkeyError`` after starting the timeout loop;
presses can still be fed in through ``Listener.handle_key_press``.
"""

from __future__ import annotations

import threading
import time
from enum import IntEnum
from typing import Callable, Optional

DOUBLE_PRESS_DELAY = 0.5
TIMEOUT_CHECK_INTERVAL = 0.05


class KeyCode(IntEnum):
    """Virtual key codes of the supported modifier keys."""

    RIGHT_OPTION = 0x3D
    LEFT_OPTION = 0x3A
    RIGHT_SHIFT = 0x3C
    LEFT_SHIFT = 0x38
    RIGHT_CMD = 0x36
    LEFT_CMD = 0x37
    RIGHT_CTRL = 0x3E
    LEFT_CTRL = 0x3B


KEY_NAME_MAP: dict[str, KeyCode] = {
    "Right Option": KeyCode.RIGHT_OPTION,
    "Left Option": KeyCode.LEFT_OPTION,
    "Right Shift": KeyCode.RIGHT_SHIFT,
    "Left Shift": KeyCode.LEFT_SHIFT,
    "Right Cmd": KeyCode.RIGHT_CMD,
    "Left Cmd": KeyCode.LEFT_CMD,
    "Right Ctrl": KeyCode.RIGHT_CTRL,
    "Left Ctrl": KeyCode.LEFT_CTRL,
}

KEY_CODE_TO_NAME: dict[KeyCode, str] = {code: name for name, code in KEY_NAME_MAP.items()}


class HotkeyError(Exception):
    """Raised for unknown keys or when hotkey monitoring cannot start."""


class Listener:
    """Detects double presses of one key and calls ``callback`` for each."""

    def __init__(self, key_name: str, callback: Callable[[], None]) -> None:
        try:
            self.key_code = KEY_NAME_MAP[key_name]
        except KeyError:
            raise HotkeyError(f"unknown key name: {key_name}") from None
        self.double_press_delay = DOUBLE_PRESS_DELAY
        self.callback = callback
        self.press_count = 0
        self._last_press_time: Optional[float] = None
        self._lock = threading.Lock()
        self._stopped = threading.Event()
        self._loop_thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Start the timeout loop and the platform key monitor."""
        self._loop_thread = threading.Thread(target=self._event_loop, daemon=True)
        self._loop_thread.start()
        self._start_event_monitor()

    def stop(self) -> None:
        """Stop listening and wait for the timeout loop to finish."""
        self._stopped.set()
        self._stop_event_monitor()
        if self._loop_thread is not None:
            self._loop_thread.join()
            self._loop_thread = None

    def __enter__(self) -> "Listener":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def handle_key_press(self) -> None:
        """Register one press; fire the callback on the second press in the window."""
        with self._lock:
            now = time.monotonic()
            within_window = (
                self._last_press_time is not None
                and now - self._last_press_time <= self.double_press_delay
            )
            if within_window:
                self.press_count += 1
                if self.press_count >= 2:
                    self.press_count = 0
                    self._last_press_time = None
                    threading.Thread(target=self.callback, daemon=True).start()
            else:
                self.press_count = 1
                self._last_press_time = now

    def check_press_timeout(self) -> None:
        """Forget a pending press once the double-press window has passed."""
        with self._lock:
            if (
                self._last_press_time is not None
                and time.monotonic() - self._last_press_time > self.double_press_delay
            ):
                self.press_count = 0
                self._last_press_time = None

    def _event_loop(self) -> None:
        while not self._stopped.wait(TIMEOUT_CHECK_INTERVAL):
            self.check_press_timeout()

    def _start_event_monitor(self) -> None:
        raise HotkeyError("hotkey monitoring is not supported on this platform")

    def _stop_event_monitor(self) -> None:
        pass


def get_available_keys() -> list[str]:
    """Return the names of all supported keys."""
    return list(KEY_NAME_MAP)


def validate_key_name(key_name: str) -> None:
    """Raise HotkeyError if ``key_name`` is not a supported key."""
    if key_name not in KEY_NAME_MAP:
        raise HotkeyError(f"invalid key name: {key_name}")