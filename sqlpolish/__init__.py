"""sqlpolish - SQL tokenizer and configurable multi-pass formatter."""

__version__ = "0.1.0"
__package_name__ = "sqlpolish"

# Initialize logging with default configuration
from sqlpolish.logging import configure_logging

# Set up default logging configuration
configure_logging()

from .exceptions import (  # noqa: E402
    FormatterConfigError,
    PresetNotFoundError,
    SQLPolishError,
    TaskStateError,
)
from .formatter import (  # noqa: E402
    FormatterConfig,
    FormatterEngine,
    format_range,
    format_sql,
)
from .tokenizer import tokenize  # noqa: E402

__all__ = [
    "FormatterConfig",
    "FormatterConfigError",
    "FormatterEngine",
    "PresetNotFoundError",
    "SQLPolishError",
    "TaskStateError",
    "format_range",
    "format_sql",
    "tokenize",
]
