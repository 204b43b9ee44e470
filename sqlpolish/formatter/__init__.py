"""SQL formatter: configuration, annotation passes, renderer and engine."""

from sqlpolish.formatter.cache import FormatCache
from sqlpolish.formatter.config import DEFAULT_CONFIG, FormatterConfig
from sqlpolish.formatter.engine import FormatterEngine, format_range, format_sql
from sqlpolish.formatter.presets import list_presets, load_config_file, load_preset
from sqlpolish.formatter.scheduler import FormatTask, TaskState, format_sql_async
from sqlpolish.formatter.stats import FormatStats

__all__ = [
    "DEFAULT_CONFIG",
    "FormatCache",
    "FormatStats",
    "FormatTask",
    "FormatterConfig",
    "FormatterEngine",
    "TaskState",
    "format_range",
    "format_sql",
    "format_sql_async",
    "list_presets",
    "load_config_file",
    "load_preset",
]
