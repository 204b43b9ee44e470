"""Renderer: turn an annotated token stream into formatted text.

The renderer is the only place where text is assembled. It honours the
annotations written by the passes and adds the few layout rules that
depend on neighbouring output rather than on syntax: statement and batch
separation, comment line ends, blank line capping and comma wrapping.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from sqlpolish.formatter.annotated import AnnotatedToken
from sqlpolish.formatter.config import FormatterConfig
from sqlpolish.logging import get_logger
from sqlpolish.tokenizer.tokens import TokenKind

logger = get_logger(__name__)


@dataclass
class _Unit:
    """One piece of output with its effective layout."""

    token: AnnotatedToken
    newline: bool
    empty_line: bool
    indent: int
    space: bool
    padding: int = 0


class Renderer:
    """Assemble output lines from annotated tokens."""

    def __init__(self, config: FormatterConfig):
        self.config = config

    def render(self, tokens: List[AnnotatedToken]) -> str:
        """Render annotated tokens to a string without a trailing newline.

        Args:
            tokens: Token stream annotated by every pass

        Returns:
            Formatted SQL text
        """
        config = self.config
        lines: List[str] = []
        line = ""
        line_level = 0
        # Break owed to the next token and the blank lines that come with it
        force_break = False
        pending_blank = 0
        previous: Optional[_Unit] = None
        # (line number, code width) of trailing line comments in the statement
        trailing_comments: List[Tuple[int, int]] = []

        for unit in self._units(tokens):
            tok = unit.token
            newline = unit.newline
            indent = unit.indent
            blank = 1 if unit.empty_line else 0

            if tok.kind == TokenKind.BATCH_SEPARATOR:
                newline, indent, blank, pending_blank = True, 0, 0, 0
            elif force_break and not newline:
                newline = not self._stays_on_line(tok, previous)

            if previous is None:
                line = tok.text
            elif newline:
                blank = min(max(blank, pending_blank), config.max_consecutive_blank_lines)
                lines.append(line.rstrip())
                lines.extend([""] * blank)
                line = config.indent_unit * indent + " " * unit.padding + tok.text
                line_level = indent
                force_break, pending_blank = False, 0
            else:
                piece = (" " if unit.space else "") + " " * unit.padding + tok.text
                if self._should_wrap(line, piece, previous):
                    lines.append(line.rstrip())
                    line = config.indent_unit * (line_level + 1) + tok.text
                else:
                    if tok.kind == TokenKind.LINE_COMMENT:
                        trailing_comments.append((len(lines), len(line.rstrip())))
                    line += piece

            force_break, pending_blank = self._break_after(
                tok, newline, force_break, pending_blank
            )
            if tok.kind in (TokenKind.SEMICOLON, TokenKind.BATCH_SEPARATOR):
                self._align_comments(lines, trailing_comments)
                trailing_comments = []
            previous = unit

        if previous is not None:
            lines.append(line.rstrip())
        self._align_comments(lines, trailing_comments)
        return "\n".join(lines)

    def _align_comments(self, lines: List[str], trailing: List[Tuple[int, int]]) -> None:
        """Start the trailing line comments of one statement in one column."""
        if not self.config.inline_comment_align or len(trailing) < 2:
            return
        column = max(width for _, width in trailing)
        for number, width in trailing:
            text = lines[number]
            lines[number] = text[:width] + " " * (column - width) + text[width:]

    def _stays_on_line(self, tok: AnnotatedToken, previous: Optional[_Unit]) -> bool:
        """Tokens allowed to stay on the line that owes a break."""
        if previous is None:
            return True
        prev_kind = previous.token.kind
        if tok.is_comment and prev_kind == TokenKind.SEMICOLON:
            return True
        # GO 5: the repeat count belongs to the separator
        return (
            tok.kind == TokenKind.NUMBER
            and prev_kind == TokenKind.BATCH_SEPARATOR
            and previous.token.token.line == tok.token.line
        )

    def _break_after(
        self, tok: AnnotatedToken, newline: bool, force_break: bool, pending_blank: int
    ) -> Tuple[bool, int]:
        config = self.config
        if tok.kind == TokenKind.SEMICOLON:
            return True, config.blank_line_between_statements
        if tok.kind == TokenKind.BATCH_SEPARATOR:
            return True, config.blank_line_after_go
        if tok.kind == TokenKind.LINE_COMMENT or (tok.is_comment and newline):
            return True, pending_blank
        return force_break, pending_blank

    def _should_wrap(self, line: str, piece: str, previous: _Unit) -> bool:
        limit = self.config.max_line_length
        if not limit or previous.token.kind != TokenKind.COMMA:
            return False
        return len(line) + len(piece) > limit

    def _units(self, tokens: List[AnnotatedToken]) -> Iterator[_Unit]:
        """Expand inserted tokens and fold removed ones into their successor."""
        carry: Optional[_Unit] = None
        for tok in tokens:
            if tok.removed:
                if not tok.is_comment:
                    carry = self._merge(carry, tok)
                continue

            newline = tok.newline_before
            empty = tok.empty_line_before
            indent = tok.indent_level
            space = tok.space_before
            if carry is not None:
                if carry.newline and not newline:
                    indent = carry.indent
                newline = newline or carry.newline
                empty = empty or carry.empty_line
                space = space or carry.space
                carry = None

            if tok.insert_before:
                first, *rest = tok.insert_before
                yield _Unit(first, newline, empty, indent, space, tok.align_padding)
                for inserted in rest:
                    yield _Unit(inserted, False, False, indent, True)
                newline, empty, space = False, False, True
                padding = 0
            else:
                padding = tok.align_padding

            yield _Unit(tok, newline, empty, indent, space, padding)
            for inserted in tok.insert_after:
                yield _Unit(inserted, False, False, indent, True)

    @staticmethod
    def _merge(carry: Optional[_Unit], tok: AnnotatedToken) -> _Unit:
        if carry is None:
            return _Unit(
                tok, tok.newline_before, tok.empty_line_before, tok.indent_level, tok.space_before
            )
        if tok.newline_before and not carry.newline:
            carry.indent = tok.indent_level
        carry.newline = carry.newline or tok.newline_before
        carry.empty_line = carry.empty_line or tok.empty_line_before
        carry.space = carry.space or tok.space_before
        return carry


def render(tokens: List[AnnotatedToken], config: FormatterConfig) -> str:
    """Render ``tokens`` with ``config``."""
    output = Renderer(config).render(tokens)
    logger.debug(f"Rendered {len(tokens)} tokens into {output.count(chr(10)) + 1} lines")
    return output
