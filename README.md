# openscribe

Building blocks for a local, offline dictation tool that uses Whisper models
through the `whisper-cli` executable. The package provides:

- a YAML configuration file with defaults, validation and migration of the
  legacy `microphone` setting (`openscribe.config`);
- the per-user directories for configuration, models, cache and logs
  (`openscribe.paths`);
- the Whisper model catalogue and checks on downloaded model files
  (`openscribe.models`);
- model downloads with retries and progress reporting (`openscribe.downloader`);
- detection of `whisper-cli` and Homebrew on `PATH` (`openscribe.whisper`);
- running `whisper-cli` on an audio file and cleaning up its output
  (`openscribe.transcription`);
- a JSON Lines history of past transcriptions (`openscribe.translog`);
- double-press detection for a modifier key (`openscribe.hotkey`).

Transcription needs `whisper-cli` somewhere on your `PATH` and at least one
downloaded model.

## Installation

```
pip install .
pip install ".[test]"   # with pytest and responses, to run the tests
```

## Files and directories

All data lives under your home directory:

| What             | Where                                                   |
|------------------|---------------------------------------------------------|
| Configuration    | `~/Library/Application Support/openscribe/config.yaml` |
| Models           | `~/Library/Application Support/openscribe/models/`     |
| Cache            | `~/Library/Caches/openscribe/`                          |
| History log      | `~/Library/Logs/openscribe/transcriptions.log`          |

`openscribe.paths` returns these as `pathlib.Path` objects:
`get_app_support_dir()`, `get_config_path()`, `get_models_dir()`,
`get_cache_dir()`, `get_logs_dir()` and `get_transcription_log_path()`.
`ensure_directories()` creates the four directories (mode `0755`) when they
are missing.

## Configuration

```python
from openscribe.config import ConfigError, load

try:
    cfg = load()   # creates config.yaml with defaults on first use
except ConfigError as exc:
    print(exc)
else:
    print(cfg)     # a readable summary of settings and paths
```

`default_config()` returns the defaults: model `small`, empty language
(auto-detect), hotkey `Right Option`, `auto_paste` and `audio_feedback` on,
`verbose` off, no preferred microphones. To change settings, edit the `Config`
fields, call `cfg.validate()` and then `cfg.save()`, which writes the file
with mode `0644`. `cfg.to_dict()` gives the mapping that is written.

The file is plain YAML:

```yaml
preferred_microphones:
- Blue Yeti USB Microphone
- MacBook Pro Microphone
model: small
language: ''
hotkey: Right Option
auto_paste: true
audio_feedback: true
verbose: false
```

`validate()` raises `ConfigError` for empty or duplicate (case-insensitive)
microphone names, a model other than `tiny`, `base`, `small`, `medium` or
`large` (an empty model is accepted), and an empty hotkey or one other than
`Left Option`, `Right Option`, `Left Shift`, `Right Shift`, `Left Command`,
`Right Command`, `Left Control` and `Right Control`. The language is not
restricted.

When `load()` reads a file that sets only the older single `microphone` key,
`migrate()` copies it into `preferred_microphones` and saves the file again.
A file that is not valid YAML, or whose values fail validation, makes `load()`
raise `ConfigError`.

## Models

```python
from openscribe.downloader import download_model, format_bytes
from openscribe.models import is_model_downloaded, parse_model_size

model = parse_model_size("small")
if not is_model_downloaded(model):
    def report(downloaded, total, percent):
        print(f"\r{format_bytes(downloaded)} ({percent:.1f}%)", end="")

    download_model(model, report)
```

`AVAILABLE_MODELS` maps each `ModelSize` to a `ModelInfo` with description,
size in MB, download URL and file name. `get_model_path()` returns where a
model's file lives, `list_downloaded_models()` lists the models present on
disk, and `validate_model()` raises `ModelError` when the file is missing,
empty or more than 10 % smaller than expected.

`download_model()` checks that there is 10 % more free disk space than the
model needs, refuses a model that is already present, tries the download up to
three times with a growing pause between attempts, writes to a `.tmp` file
first, renames it into place and validates it. Failures raise
`DownloadError`, a kind of `ModelError`. The progress callback is called at
most every 100 ms with bytes downloaded, total bytes (`-1` when the server
sends no length) and a percentage (`0.0` when the total is unknown).

`format_bytes()`, `format_speed()` and `estimate_time_remaining()` format
sizes, rates and remaining times for display (for example `1.5 MB`,
`1.0 KB/s`, `30s`, `2m`, `1.5h`).

## Finding whisper-cli

`openscribe.whisper` offers `is_whisper_cpp_installed()`,
`get_whisper_cpp_binary_path()`, `check_homebrew()` and `setup_whisper_cpp()`;
the last three raise `WhisperNotFoundError` when the program is not on `PATH`.

## Transcribing

```python
from openscribe.transcription import Options, Transcriber

transcriber = Transcriber()   # looks up whisper-cli on PATH
result = transcriber.transcribe_file("recording.wav", Options(model="tiny", language="en"))
print(result.text, result.language)
```

The audio should be 16 kHz mono WAV. `Transcriber` also accepts an explicit
path to the executable. `transcribe_file()` raises `TranscriptionError` when
the model is not downloaded, when `whisper-cli` fails, or when it produces no
text. With an empty language, the language reported in the output is used.
`default_options()` gives the small model, auto-detected language and quiet
output. `parse_output()`, `extract_language()` and `strip_ansi_codes()` can be
used on their own to clean up raw `whisper-cli` output.

## History

```python
from openscribe.translog import count_transcriptions, get_transcriptions, log_transcription

log_transcription(5.5, "small", "en", "Hello, world!")
for entry in get_transcriptions(10):   # the last ten; 0 means all
    print(entry.timestamp, entry.text)
print(count_transcriptions())
```

Each entry is one JSON object per line; malformed lines are skipped when
reading. `clear_transcriptions()` deletes the history file.

## Hotkeys

`openscribe.hotkey.Listener(key_name, callback)` calls `callback` (on its own
thread) when the chosen key is pressed twice within 500 ms. Presses are fed
in with `handle_key_press()`; `check_press_timeout()` forgets a pending press
once the window has passed. `get_available_keys()` lists the accepted names
(`Right Option`, `Left Option`, `Right Shift`, `Left Shift`, `Right Cmd`,
`Left Cmd`, `Right Ctrl`, `Left Ctrl`) and `validate_key_name()` raises
`HotkeyError` for any other. Note that these names differ from the hotkey
names the configuration accepts for Command and Control.

## What this package does not do

- It has no command-line program; everything is used from Python.
- It does not record audio or choose a microphone; it only stores the
  preferred microphone names.
- It does not paste or type the transcribed text.
- It does not capture key presses from the system: `Listener.start()` starts
  the timeout loop and then raises `HotkeyError`, so call `stop()` afterwards.