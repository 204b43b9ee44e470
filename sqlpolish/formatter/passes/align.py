"""Align pass: pad tokens so related pieces line up in columns.

Padding goes to ``align_padding`` and is rendered as extra spaces before
the token. Alias and SET alignment groups end at a statement boundary.
Trailing line comments are aligned by the renderer, which is the only
place that knows the final line widths.
"""

from typing import Dict, List, Optional, Tuple

from sqlpolish.formatter.annotated import AnnotatedToken, TokenRole
from sqlpolish.formatter.passes.base import (
    AnnotationPass,
    next_significant,
    prev_significant,
    token_at,
)
from sqlpolish.formatter.passes.structure import is_name
from sqlpolish.logging import get_logger
from sqlpolish.tokenizer.tokens import TokenKind

logger = get_logger(__name__)

# Stacked select columns start where the first column does
SELECT_KEYWORD_WIDTH = len("SELECT ")
STATEMENT_ENDS = frozenset({TokenKind.SEMICOLON, TokenKind.BATCH_SEPARATOR})
TABLE_CLAUSES = frozenset({"from", "join"})

# (token to pad, width of the name before it)
Candidate = Tuple[AnnotatedToken, int]


def pad_group(group: List[Candidate]) -> int:
    """Pad every candidate up to the widest name; returns the padded count."""
    if len(group) < 2:
        return 0
    widest = max(width for _, width in group)
    padded = 0
    for tok, width in group:
        tok.align_padding = widest - width
        if tok.align_padding:
            padded += 1
    return padded


class AlignPass(AnnotationPass):
    """Apply select_column_align, from_alias_align and update_set_align."""

    name = "align"

    def begin(self, tokens: List[AnnotatedToken]) -> None:
        self.aligned = 0
        self._aliases: List[Candidate] = []
        self._assignments: List[Candidate] = []
        # paren depth -> indent level of a SELECT that starts its line
        self._select_indent: Dict[int, int] = {}

    def annotate(self, index: int, tokens: List[AnnotatedToken]) -> None:
        config = self.config
        tok = tokens[index]
        if tok.is_comment:
            return
        if tok.kind in STATEMENT_ENDS:
            self._flush()
            self._select_indent.clear()
            return

        # A stripped schema still starts the table name
        if (
            config.from_alias_align
            and tok.role == TokenRole.TABLE_NAME
            and tok.current_clause in TABLE_CLAUSES
        ):
            candidate = self._alias_candidate(index, tokens)
            if candidate is not None:
                self._aliases.append(candidate)
        if tok.removed:
            return

        if config.select_column_align == "keyword":
            self._align_select_column(index, tokens)

        if config.update_set_align and tok.current_clause == "set":
            if tok.is_keyword("SET"):
                self.aligned += pad_group(self._assignments)
                self._assignments = []
            elif tok.kind == TokenKind.OPERATOR and tok.text == "=":
                candidate = self._assignment_candidate(index, tokens)
                if candidate is not None:
                    self._assignments.append(candidate)

    def finish(self, tokens: List[AnnotatedToken]) -> None:
        self._flush()
        if self.aligned:
            logger.debug(f"Align pass padded {self.aligned} tokens")

    def _flush(self) -> None:
        self.aligned += pad_group(self._aliases) + pad_group(self._assignments)
        self._aliases = []
        self._assignments = []

    # select_column_align

    def _align_select_column(self, index: int, tokens: List[AnnotatedToken]) -> None:
        tok = tokens[index]
        depth = tok.paren_depth
        if tok.is_keyword("SELECT"):
            if tok.newline_before or prev_significant(tokens, index) is None:
                self._select_indent[depth] = tok.indent_level
            else:
                self._select_indent.pop(depth, None)
            return

        if not tok.newline_before or tok.current_clause != "select":
            return
        if depth not in self._select_indent or not self._starts_column(index, tokens):
            return
        width = SELECT_KEYWORD_WIDTH
        if tok.kind == TokenKind.COMMA:
            # Leading commas sit left of the column text
            width -= 2 if self.config.comma_spacing in ("after", "both") else 1
        tok.indent_level = self._select_indent[depth]
        tok.align_padding = width
        self.aligned += 1

    @staticmethod
    def _starts_column(index: int, tokens: List[AnnotatedToken]) -> bool:
        tok = tokens[index]
        if tok.kind == TokenKind.COMMA:
            return True
        prev = token_at(tokens, prev_significant(tokens, index))
        return (
            prev is not None
            and prev.kind == TokenKind.COMMA
            and prev.paren_depth == tok.paren_depth
        )

    # from_alias_align

    def _alias_candidate(
        self, index: int, tokens: List[AnnotatedToken]
    ) -> Optional[Candidate]:
        end = self._chain_end(tokens, index)
        after = token_at(tokens, next_significant(tokens, end))
        if after is None or not (after.is_keyword("AS") or after.role == TokenRole.ALIAS):
            return None
        return after, self._width(tokens, index, end)

    @staticmethod
    def _chain_end(tokens: List[AnnotatedToken], index: int) -> int:
        """Last token of a dotted name starting at ``index``."""
        cursor = index
        while True:
            nxt_index = next_significant(tokens, cursor)
            nxt = token_at(tokens, nxt_index)
            if nxt is None:
                return cursor
            if nxt.kind == TokenKind.DOT or (
                tokens[cursor].kind == TokenKind.DOT and is_name(nxt)
            ):
                cursor = nxt_index
            else:
                return cursor

    # update_set_align

    def _assignment_candidate(
        self, index: int, tokens: List[AnnotatedToken]
    ) -> Optional[Candidate]:
        end = prev_significant(tokens, index)
        if end is None or not is_name(tokens[end]):
            return None
        start = end
        while True:
            prev_index = prev_significant(tokens, start)
            prev = token_at(tokens, prev_index)
            if prev is None:
                return None
            if prev.kind == TokenKind.DOT or (
                tokens[start].kind == TokenKind.DOT and is_name(prev)
            ):
                start = prev_index
                continue
            if prev.is_keyword("SET") or prev.kind == TokenKind.COMMA:
                break
            return None
        if tokens[start].paren_depth != tokens[index].paren_depth:
            return None
        return tokens[index], self._width(tokens, start, end)

    @staticmethod
    def _width(tokens: List[AnnotatedToken], start: int, end: int) -> int:
        return sum(
            len(tok.text)
            for tok in tokens[start : end + 1]
            if not tok.removed and not tok.is_comment
        )
