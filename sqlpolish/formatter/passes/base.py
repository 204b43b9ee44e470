"""Base class and helpers for annotation passes."""

from abc import ABC, abstractmethod
from typing import Iterator, List, Optional

from sqlpolish.formatter.annotated import AnnotatedToken
from sqlpolish.formatter.config import FormatterConfig


class AnnotationPass(ABC):
    """One stage of the annotation pipeline.

    A pass walks the token list left to right. ``iter_run`` exposes the
    walk in batches so a cooperative scheduler can pause between batches,
    never in the middle of a token.
    """

    name = "pass"

    def __init__(self, config: FormatterConfig):
        self.config = config

    def begin(self, tokens: List[AnnotatedToken]) -> None:
        """Prepare per-run state before the first token."""

    @abstractmethod
    def annotate(self, index: int, tokens: List[AnnotatedToken]) -> None:
        """Annotate the token at ``index``."""

    def finish(self, tokens: List[AnnotatedToken]) -> None:
        """Post-process after the last token."""

    def run(self, tokens: List[AnnotatedToken]) -> List[AnnotatedToken]:
        """Annotate the whole stream in one go.

        Args:
            tokens: Annotated tokens, updated in place

        Returns:
            The same list, for chaining
        """
        for _ in self.iter_run(tokens):
            pass
        return tokens

    def iter_run(
        self, tokens: List[AnnotatedToken], batch_size: Optional[int] = None
    ) -> Iterator[int]:
        """Annotate in batches, yielding the processed count after each one.

        ``finish`` runs once the generator is exhausted; abandoning the
        generator leaves the pass unfinished.
        """
        self.begin(tokens)
        total = len(tokens)
        size = batch_size or max(total, 1)
        for start in range(0, total, size):
            stop = min(start + size, total)
            for index in range(start, stop):
                self.annotate(index, tokens)
            yield stop
        self.finish(tokens)


def next_significant(tokens: List[AnnotatedToken], index: int) -> Optional[int]:
    """Index of the next non-comment token after ``index``."""
    for i in range(index + 1, len(tokens)):
        if not tokens[i].is_comment:
            return i
    return None


def prev_significant(tokens: List[AnnotatedToken], index: int) -> Optional[int]:
    """Index of the previous non-comment token before ``index``."""
    for i in range(index - 1, -1, -1):
        if not tokens[i].is_comment:
            return i
    return None


def token_at(tokens: List[AnnotatedToken], index: Optional[int]) -> Optional[AnnotatedToken]:
    if index is None:
        return None
    return tokens[index]
