"""CLI-specific exceptions with Rich display support."""

from typing import List, Optional

from sqlpolish.exceptions import SQLPolishError


class SQLPolishCLIError(SQLPolishError):
    """Base exception for CLI operations with Rich display support."""

    def __init__(self, message: str, suggestions: Optional[List[str]] = None):
        super().__init__(message, suggestions)


class InvalidOptionAssignmentError(SQLPolishCLIError):
    """Raised when a --set value is not of the form key=value."""

    def __init__(self, assignment: str):
        self.assignment = assignment
        message = f"Invalid option assignment: '{assignment}'"
        suggestions = [
            "Use key=value, e.g. --set indent_size=2",
            "Run 'sqlpolish presets show default' to list option names",
        ]
        super().__init__(message, suggestions)


class LineRangeError(SQLPolishCLIError):
    """Raised when --lines is not a valid START:END range."""

    def __init__(self, line_range: str, reason: Optional[str] = None):
        self.line_range = line_range
        self.reason = reason
        message = f"Invalid line range: '{line_range}'"
        if reason:
            message = f"{message} ({reason})"
        suggestions = ["Use START:END with 1-based inclusive line numbers, e.g. --lines 3:10"]
        super().__init__(message, suggestions)
