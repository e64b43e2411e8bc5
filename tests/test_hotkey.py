import threading
import time

import pytest

from openscribe.hotkey import (
    KEY_CODE_TO_NAME,
    KEY_NAME_MAP,
    HotkeyError,
    KeyCode,
    Listener,
    get_available_keys,
    validate_key_name,
)


class Counter:
    def __init__(self):
        self._lock = threading.Lock()
        self.count = 0

    def __call__(self):
        with self._lock:
            self.count += 1

    def value(self):
        with self._lock:
            return self.count


@pytest.mark.parametrize(
    "key_name, expected",
    [
        ("Right Option", KeyCode.RIGHT_OPTION),
        ("Left Option", KeyCode.LEFT_OPTION),
        ("Right Shift", KeyCode.RIGHT_SHIFT),
        ("Left Shift", KeyCode.LEFT_SHIFT),
        ("Right Cmd", KeyCode.RIGHT_CMD),
        ("Left Cmd", KeyCode.LEFT_CMD),
        ("Right Ctrl", KeyCode.RIGHT_CTRL),
        ("Left Ctrl", KeyCode.LEFT_CTRL),
    ],
)
def test_key_name_map(key_name, expected):
    assert KEY_NAME_MAP[key_name] == expected


def test_key_name_map_invalid():
    assert "Invalid Key" not in get_available_keys()


def test_key_code_values():
    assert Listener("Right Option", Counter()).key_code == 0x3D
    assert Listener("Left Ctrl", Counter()).key_code == 0x3B


@pytest.mark.parametrize(
    "code, expected",
    [
        (KeyCode.RIGHT_OPTION, "Right Option"),
        (KeyCode.LEFT_OPTION, "Left Option"),
        (KeyCode.RIGHT_SHIFT, "Right Shift"),
        (KeyCode.LEFT_SHIFT, "Left Shift"),
    ],
)
def test_key_code_to_name(code, expected):
    assert KEY_CODE_TO_NAME[code] == expected


def test_key_code_to_name_round_trips_through_listener():
    for code, name in KEY_CODE_TO_NAME.items():
        assert Listener(name, Counter()).key_code == code


@pytest.mark.parametrize("key_name", ["Right Option", "Left Cmd"])
def test_new_listener_valid(key_name):
    callback = Counter()
    listener = Listener(key_name, callback)
    assert listener.key_code == KEY_NAME_MAP[key_name]
    assert listener.double_press_delay == 0.5
    assert listener.callback is callback
    assert listener.press_count == 0


@pytest.mark.parametrize("key_name", ["Invalid Key", ""])
def test_new_listener_invalid(key_name):
    with pytest.raises(HotkeyError, match="unknown key name"):
        Listener(key_name, Counter())


def test_single_press_does_not_trigger():
    counter = Counter()
    listener = Listener("Right Option", counter)
    listener.handle_key_press()
    time.sleep(0.05)
    assert counter.value() == 0
    assert listener.press_count == 1


def test_double_press_triggers_once():
    counter = Counter()
    listener = Listener("Right Option", counter)
    listener.handle_key_press()
    time.sleep(0.1)
    listener.handle_key_press()
    time.sleep(0.1)
    assert counter.value() == 1
    assert listener.press_count == 0


def test_two_double_presses():
    counter = Counter()
    listener = Listener("Right Option", counter)
    listener.handle_key_press()
    time.sleep(0.1)
    listener.handle_key_press()
    time.sleep(0.05)
    listener.handle_key_press()
    time.sleep(0.1)
    listener.handle_key_press()
    time.sleep(0.1)
    assert counter.value() == 2


def test_presses_outside_window():
    counter = Counter()
    listener = Listener("Right Option", counter)
    listener.handle_key_press()
    time.sleep(0.6)
    listener.handle_key_press()
    time.sleep(0.05)
    assert counter.value() == 0
    assert listener.press_count == 1


def test_triple_press_triggers_once():
    counter = Counter()
    listener = Listener("Right Option", counter)
    listener.handle_key_press()
    time.sleep(0.1)
    listener.handle_key_press()
    time.sleep(0.1)
    listener.handle_key_press()
    time.sleep(0.1)
    assert counter.value() == 1
    assert listener.press_count == 1


def test_check_press_timeout():
    counter = Counter()
    listener = Listener("Right Option", counter)
    listener.handle_key_press()
    assert listener.press_count == 1
    time.sleep(0.6)
    listener.check_press_timeout()
    assert listener.press_count == 0
    assert counter.value() == 0


def test_check_press_timeout_keeps_recent_press():
    listener = Listener("Right Option", Counter())
    listener.handle_key_press()
    listener.check_press_timeout()
    assert listener.press_count == 1


def test_get_available_keys():
    keys = get_available_keys()
    assert len(keys) == 8
    assert set(keys) == set(KEY_NAME_MAP)


@pytest.mark.parametrize("key_name", ["Right Option", "Left Ctrl"])
def test_validate_key_name_valid(key_name):
    assert validate_key_name(key_name) is None


@pytest.mark.parametrize("key_name", ["Invalid Key", "", "foobar"])
def test_validate_key_name_invalid(key_name):
    with pytest.raises(HotkeyError, match="invalid key name"):
        validate_key_name(key_name)


def test_listener_concurrency():
    counter = Counter()
    listener = Listener("Right Option", counter)

    def press_twice():
        listener.handle_key_press()
        time.sleep(0.05)
        listener.handle_key_press()

    threads = [threading.Thread(target=press_twice) for _ in range(10)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    time.sleep(0.1)
    assert counter.value() > 0


def test_start_unsupported_then_stop():
    listener = Listener("Right Option", Counter())
    with pytest.raises(HotkeyError, match="not supported"):
        listener.start()
    listener.stop()
    assert listener._loop_thread is None


def test_event_loop_resets_stale_press():
    listener = Listener("Right Option", Counter())
    with pytest.raises(HotkeyError):
        listener.start()
    try:
        listener.handle_key_press()
        assert listener.press_count == 1
        time.sleep(0.7)
        assert listener.press_count == 0
    finally:
        listener.stop()