"""Tests for the sqlpolish exception hierarchy."""

from sqlpolish.exceptions import (
    FormatterConfigError,
    PresetNotFoundError,
    SQLPolishError,
    TaskStateError,
)


class TestSQLPolishError:
    """Test the base error."""

    def test_basic_error_creation(self):
        """Test basic error creation."""
        error = SQLPolishError("test message")
        assert str(error) == "test message"
        assert error.message == "test message"
        assert error.suggestions == []

    def test_error_with_suggestions(self):
        """Test error creation with suggestions."""
        error = SQLPolishError("test message", ["try this"])
        assert error.suggestions == ["try this"]


class TestFormatterConfigError:
    """Test option validation errors."""

    def test_invalid_value(self):
        """Test an out-of-domain value."""
        error = FormatterConfigError("indent_size", 0, "integer 1..16")
        assert error.option == "indent_size"
        assert error.value == 0
        assert "Invalid value 0 for option 'indent_size'" == error.message
        assert error.suggestions == ["Allowed values: integer 1..16"]

    def test_unknown_option(self):
        """Test an unknown option with close matches."""
        error = FormatterConfigError("keywordcase", known_options=["keyword_case", "alias_case"])
        assert error.message == "Unknown formatter option 'keywordcase'"
        assert error.suggestions[0] == "Did you mean: keyword_case"

    def test_is_value_error(self):
        """Test the ValueError base."""
        assert isinstance(FormatterConfigError("x", 1), ValueError)
        assert isinstance(FormatterConfigError("x", 1), SQLPolishError)


class TestPresetNotFoundError:
    """Test missing preset errors."""

    def test_without_available_presets(self):
        """Test an error with nothing to suggest."""
        error = PresetNotFoundError("x")
        assert error.message == "Preset 'x' not found"
        assert error.suggestions == []

    def test_with_available_presets(self):
        """Test the listed alternatives."""
        error = PresetNotFoundError("compcat", ["compact", "default"])
        assert error.suggestions == [
            "Did you mean: compact",
            "Available presets: compact, default",
        ]


class TestTaskStateError:
    """Test lifecycle errors."""

    def test_is_runtime_error(self):
        """Test the RuntimeError base."""
        error = TaskStateError("already started")
        assert isinstance(error, RuntimeError)
        assert error.message == "already started"
