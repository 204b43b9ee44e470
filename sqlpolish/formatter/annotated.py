"""Annotated token stream shared by the annotation passes and the renderer."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from sqlpolish.formatter.context import FrameKind
from sqlpolish.tokenizer.keywords import KeywordCategory
from sqlpolish.tokenizer.tokens import Token, TokenKind


class TokenRole(Enum):
    """Syntactic role assigned by the structure pass."""

    ALIAS = "alias"
    FUNCTION_NAME = "function_name"
    TABLE_NAME = "table_name"


@dataclass
class AnnotatedToken:
    """A token plus the layout hints written by the passes.

    The structure pass owns indent_level, paren_depth, current_clause,
    newline_before and empty_line_before. The spacing pass owns
    space_before, the casing pass owns case_applied_text and only the
    transform pass adds tokens (insert_before, insert_after) or drops them
    (removed). The comments pass may move comments and rewrite block
    comment text; the align pass owns align_padding, extra spaces the
    renderer puts before the token.
    """

    token: Token
    indent_level: int = 0
    paren_depth: int = 0
    current_clause: Optional[str] = None
    newline_before: bool = False
    empty_line_before: bool = False
    space_before: bool = False
    removed: bool = False
    insert_before: List["AnnotatedToken"] = field(default_factory=list)
    insert_after: List["AnnotatedToken"] = field(default_factory=list)
    case_applied_text: Optional[str] = None
    role: Optional[TokenRole] = None
    frame_kind: Optional[FrameKind] = None
    as_identifier: bool = False
    partner: Optional[int] = None
    is_inserted: bool = False
    align_padding: int = 0

    @property
    def text(self) -> str:
        """Text to render, with casing applied when a pass set it."""
        if self.case_applied_text is not None:
            return self.case_applied_text
        return self.token.text

    @property
    def kind(self) -> TokenKind:
        return self.token.kind

    @property
    def upper(self) -> str:
        return self.token.upper

    @property
    def is_comment(self) -> bool:
        return self.token.is_comment

    @property
    def is_word_keyword(self) -> bool:
        """True for keywords that are not used as plain names."""
        return self.token.kind == TokenKind.KEYWORD and not self.as_identifier

    def is_keyword(self, *words: str) -> bool:
        return self.is_word_keyword and (not words or self.token.upper in words)

    @classmethod
    def synthesize(
        cls,
        text: str,
        anchor: "AnnotatedToken",
        category: Optional[KeywordCategory] = KeywordCategory.CLAUSE,
    ) -> "AnnotatedToken":
        """Build an inserted keyword positioned at ``anchor``."""
        token = Token(
            TokenKind.KEYWORD, text.upper(), anchor.token.line, anchor.token.col, category
        )
        return cls(
            token=token,
            indent_level=anchor.indent_level,
            paren_depth=anchor.paren_depth,
            current_clause=anchor.current_clause,
            space_before=True,
            case_applied_text=text,
            is_inserted=True,
        )


def annotate_tokens(tokens: List[Token]) -> List[AnnotatedToken]:
    """Wrap lexer tokens for the annotation passes."""
    return [AnnotatedToken(token) for token in tokens]
