"""Comments pass: comment placement, blank lines and block comment text."""

from typing import List, Optional

from sqlpolish.formatter.annotated import AnnotatedToken
from sqlpolish.formatter.passes.base import AnnotationPass, next_significant, token_at
from sqlpolish.logging import get_logger
from sqlpolish.tokenizer.tokens import TokenKind

logger = get_logger(__name__)

# Banners such as /***** or /*---- keep their exact text
DECORATIVE_MARKS = ("*", "-", "=")
STATEMENT_ENDS = frozenset({TokenKind.SEMICOLON, TokenKind.BATCH_SEPARATOR})


def reformat_block_comment(text: str) -> str:
    """Tidy the whitespace of a block comment.

    A single-line comment becomes ``/* content */``. A multi-line comment
    loses trailing whitespace on every line and runs of blank lines inside
    it collapse to one. Decorative banners, optimizer hints (``/*+``),
    empty comments and unterminated comments are returned unchanged.

    Args:
        text: Block comment text including its delimiters

    Returns:
        The reformatted comment
    """
    if len(text) < 4 or not text.endswith("*/"):
        return text
    body = text[2:-2]
    if not body or body.startswith("+"):
        return text
    if body.startswith(DECORATIVE_MARKS) or body.endswith(DECORATIVE_MARKS):
        return text

    lines = body.replace("\r\n", "\n").split("\n")
    if len(lines) == 1:
        content = body.strip()
        return f"/* {content} */" if content else "/**/"

    last = len(lines) - 1
    kept: List[str] = []
    for index, line in enumerate(lines):
        if index < last:
            line = line.rstrip()
            if index > 1 and not line and not kept[-1]:
                continue
        kept.append(line)
    return "/*" + "\n".join(kept) + "*/"


class CommentsPass(AnnotationPass):
    """Move comments between lines and rewrite block comments.

    ``comment_position=above`` puts a comment that trails code on a line of
    its own, ``inline`` moves an own-line comment up to the end of the code
    line before it. Dropped comments are left alone.
    """

    name = "comments"

    def begin(self, tokens: List[AnnotatedToken]) -> None:
        self.moved = 0

    def annotate(self, index: int, tokens: List[AnnotatedToken]) -> None:
        config = self.config
        tok = tokens[index]
        if not tok.is_comment or tok.removed:
            return

        if config.block_comment_style == "reformat" and tok.kind == TokenKind.BLOCK_COMMENT:
            text = reformat_block_comment(tok.token.text)
            if text != tok.token.text:
                tok.case_applied_text = text

        if config.comment_position == "above" and self._trails_code(index, tokens):
            self._to_own_line(index, tokens)
        elif config.comment_position == "inline" and self._joins_code_line(index, tokens):
            tok.newline_before = False
            tok.empty_line_before = False
            self.moved += 1

        if config.blank_line_before_comment and self._opens_section(index, tokens):
            tok.empty_line_before = True

    def finish(self, tokens: List[AnnotatedToken]) -> None:
        if self.moved:
            logger.debug(f"Comments pass moved {self.moved} comments")

    def _trails_code(self, index: int, tokens: List[AnnotatedToken]) -> bool:
        return index > 0 and not tokens[index].newline_before

    def _to_own_line(self, index: int, tokens: List[AnnotatedToken]) -> None:
        tok = tokens[index]
        following = self._following(index, tokens)
        tok.newline_before = True
        if following is not None:
            # Code after a block comment cannot share its line any more
            if tok.kind == TokenKind.BLOCK_COMMENT:
                following.newline_before = True
            if following.newline_before:
                tok.indent_level = following.indent_level
        self.moved += 1

    def _joins_code_line(self, index: int, tokens: List[AnnotatedToken]) -> bool:
        tok = tokens[index]
        if index == 0 or not tok.newline_before:
            return False
        prev = tokens[index - 1]
        return not (prev.is_comment or prev.removed or prev.kind in STATEMENT_ENDS)

    def _opens_section(self, index: int, tokens: List[AnnotatedToken]) -> bool:
        """An own-line comment that opens a comment block above code."""
        tok = tokens[index]
        if index == 0 or not tok.newline_before:
            return False
        prev = tokens[index - 1]
        if prev.is_comment or prev.kind in STATEMENT_ENDS:
            return False
        following = self._following(index, tokens)
        return following is not None and following.newline_before

    @staticmethod
    def _following(index: int, tokens: List[AnnotatedToken]) -> Optional[AnnotatedToken]:
        return token_at(tokens, next_significant(tokens, index))
