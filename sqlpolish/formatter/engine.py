"""Formatting engine.

Wires the lexer, the annotation passes and the renderer into the
``format`` entry points. Malformed SQL never raises: the only fail-fast
point is ``FormatterConfig`` construction, which happens before any
formatting starts.
"""

import time
from typing import List, Optional

from sqlpolish.formatter.annotated import AnnotatedToken, annotate_tokens
from sqlpolish.formatter.cache import FormatCache
from sqlpolish.formatter.config import DEFAULT_CONFIG, FormatterConfig
from sqlpolish.formatter.passes import build_passes
from sqlpolish.formatter.renderer import render
from sqlpolish.formatter.stats import FormatStats
from sqlpolish.logging import get_logger
from sqlpolish.tokenizer import tokenize

logger = get_logger(__name__)


class FormatterEngine:
    """Format SQL text with one configuration.

    Args:
        config: Validated formatter configuration, defaults to DEFAULT_CONFIG
        cache: Optional result cache owned by the caller
        stats: Optional timing recorder
    """

    def __init__(
        self,
        config: Optional[FormatterConfig] = None,
        cache: Optional[FormatCache] = None,
        stats: Optional[FormatStats] = None,
    ):
        self.config = config or DEFAULT_CONFIG
        self.cache = cache
        self.stats = stats

    def annotate(self, source: str) -> List[AnnotatedToken]:
        """Tokenize ``source`` and run every annotation pass over it."""
        tokens = annotate_tokens(tokenize(source))
        for annotation_pass in build_passes(self.config):
            started = time.perf_counter()
            annotation_pass.run(tokens)
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.debug(f"{annotation_pass.name} pass: {elapsed_ms:.2f}ms")
        return tokens

    def format(self, source: str) -> str:
        """Format ``source``.

        Whitespace-only input is returned unchanged and a trailing newline
        in the source is kept. Internal failures are logged and the source
        is returned as is.

        Args:
            source: SQL text

        Returns:
            Formatted SQL text
        """
        if not source.strip():
            return source

        if self.cache is not None:
            cached = self.cache.get(source, self.config)
            if self.stats is not None:
                self.stats.record_cache(cached is not None)
            if cached is not None:
                return cached

        started = time.perf_counter()
        try:
            output = render(self.annotate(source), self.config)
        except Exception:
            logger.exception("Formatting failed, returning the source unchanged")
            return source

        if source.endswith(("\n", "\r")):
            output += "\n"

        if self.stats is not None:
            self.stats.record(time.perf_counter() - started)
        if self.cache is not None:
            self.cache.put(source, self.config, output)
        return output

    def format_range(self, source: str, start_line: int, end_line: int) -> str:
        """Format lines ``start_line`` to ``end_line`` as standalone text.

        Args:
            source: Full SQL text
            start_line: First line of the range, 1-based
            end_line: Last line of the range, inclusive

        Returns:
            The formatted span only

        Raises:
            ValueError: If the range is empty or outside the source
        """
        lines = source.splitlines()
        if start_line < 1 or end_line < start_line or end_line > len(lines):
            raise ValueError(
                f"Invalid line range {start_line}:{end_line} for {len(lines)} line(s)"
            )
        span = "\n".join(lines[start_line - 1 : end_line])
        logger.debug(f"Formatting lines {start_line}-{end_line}")
        return self.format(span)


def format_sql(source: str, config: Optional[FormatterConfig] = None) -> str:
    """Format ``source`` with ``config`` (or the defaults)."""
    return FormatterEngine(config).format(source)


def format_range(
    source: str,
    start_line: int,
    end_line: int,
    config: Optional[FormatterConfig] = None,
) -> str:
    """Format a 1-based inclusive line range of ``source``."""
    return FormatterEngine(config).format_range(source, start_line, end_line)
