"""Token model produced by the SQL lexer."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sqlpolish.tokenizer.keywords import KeywordCategory


class TokenKind(Enum):
    """Closed set of token kinds emitted by the lexer."""

    KEYWORD = "keyword"
    IDENTIFIER = "identifier"
    BRACKET_IDENTIFIER = "bracket_identifier"
    STRING = "string"
    NUMBER = "number"
    OPERATOR = "operator"
    PAREN_OPEN = "paren_open"
    PAREN_CLOSE = "paren_close"
    COMMA = "comma"
    DOT = "dot"
    SEMICOLON = "semicolon"
    STAR = "star"
    BATCH_SEPARATOR = "batch_separator"
    AT_SIGN = "at_sign"
    GLOBAL_VARIABLE = "global_variable"
    HASH = "hash"
    VARIABLE = "variable"
    BLOCK_COMMENT = "block_comment"
    LINE_COMMENT = "line_comment"


COMMENT_KINDS = frozenset({TokenKind.BLOCK_COMMENT, TokenKind.LINE_COMMENT})

# Kinds that can stand for a value or a name in an expression
OPERAND_KINDS = frozenset(
    {
        TokenKind.IDENTIFIER,
        TokenKind.BRACKET_IDENTIFIER,
        TokenKind.STRING,
        TokenKind.NUMBER,
        TokenKind.VARIABLE,
        TokenKind.GLOBAL_VARIABLE,
        TokenKind.PAREN_CLOSE,
        TokenKind.STAR,
    }
)


@dataclass(frozen=True)
class Token:
    """A lexical token with its 1-based source position.

    Attributes:
        kind: Token kind
        text: Exact source text of the token
        line: Line of the first character (1-based)
        col: Column of the first character (1-based)
        category: Keyword category, only set for keywords
        is_temp_table: True for ``#name`` and ``##name`` identifiers
    """

    kind: TokenKind
    text: str
    line: int
    col: int
    category: Optional[KeywordCategory] = None
    is_temp_table: bool = False

    @property
    def upper(self) -> str:
        """Upper-cased token text, used for keyword comparisons."""
        return self.text.upper()

    @property
    def is_comment(self) -> bool:
        return self.kind in COMMENT_KINDS

    @property
    def end_line(self) -> int:
        """Line of the last character of the token."""
        return self.line + self.text.count("\n")

    def is_keyword(self, *words: str) -> bool:
        """Check whether this token is a keyword, optionally one of ``words``."""
        if self.kind != TokenKind.KEYWORD:
            return False
        return not words or self.upper in words

    def __str__(self) -> str:
        return f"{self.kind.value}({self.text!r}) @ {self.line}:{self.col}"
