"""Local speech-to-text helpers: configuration, Whisper models, whisper-cli transcription, history and hotkeys."""

__version__ = "0.1.0"