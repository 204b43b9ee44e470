"""Exception hierarchy for sqlpolish.

Malformed SQL is never an error: the tokenizer and the annotation passes
degrade gracefully. The exceptions below cover the fail-fast conditions,
which are bad configuration and misuse of the task lifecycle.
"""

import difflib
from typing import Any, Iterable, List, Optional


class SQLPolishError(Exception):
    """Base exception carrying a message and optional suggestions."""

    def __init__(self, message: str, suggestions: Optional[List[str]] = None):
        self.message = message
        self.suggestions = suggestions or []
        super().__init__(message)


class FormatterConfigError(SQLPolishError, ValueError):
    """Raised when a formatter option is unknown or outside its domain."""

    def __init__(
        self,
        option: str,
        value: Any = None,
        allowed: Optional[str] = None,
        known_options: Optional[Iterable[str]] = None,
    ):
        self.option = option
        self.value = value
        self.allowed = allowed

        if known_options is not None:
            message = f"Unknown formatter option '{option}'"
            close = difflib.get_close_matches(option, list(known_options), n=3)
            suggestions = [f"Did you mean: {name}" for name in close]
        else:
            message = f"Invalid value {value!r} for option '{option}'"
            suggestions = [f"Allowed values: {allowed}"] if allowed else []

        super().__init__(message, suggestions)


class PresetNotFoundError(SQLPolishError):
    """Raised when a named preset does not exist."""

    def __init__(self, preset_name: str, available_presets: Optional[List[str]] = None):
        self.preset_name = preset_name
        self.available_presets = available_presets or []

        message = f"Preset '{preset_name}' not found"
        suggestions = []
        if self.available_presets:
            close = difflib.get_close_matches(preset_name, self.available_presets, n=1)
            if close:
                suggestions.append(f"Did you mean: {close[0]}")
            suggestions.append(f"Available presets: {', '.join(self.available_presets)}")

        super().__init__(message, suggestions)


class TaskStateError(SQLPolishError, RuntimeError):
    """Raised when a format task is driven out of order."""
