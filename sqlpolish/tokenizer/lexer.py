"""Lexer for T-SQL flavoured SQL.

The lexer never raises. Malformed input such as an unterminated string,
bracket or block comment degrades to a best-effort token and scanning
continues, so every non-whitespace character of the input ends up in
exactly one token.
"""

import re
from typing import List, Optional, Pattern

from sqlpolish.logging import get_logger
from sqlpolish.tokenizer.keywords import KeywordCategory, keyword_category
from sqlpolish.tokenizer.tokens import Token, TokenKind

logger = get_logger(__name__)

WHITESPACE: Pattern = re.compile(r"\s+")
WORD: Pattern = re.compile(r"(?:[^\W\d]|\$)[\w$#@]*")
NUMBER: Pattern = re.compile(
    r"0[xX][0-9A-Fa-f]*|[0-9]+(?:\.[0-9]*)?(?:[eE][+-]?[0-9]+)?"
)
VARIABLE_NAME: Pattern = re.compile(r"[\w$#@]+")
# What may follow a batch separator on its line: a repeat count, a comment
GO_TAIL: Pattern = re.compile(r"[ \t]*(?:[0-9]+[ \t]*)?(?:--|/\*|\r|\n|\Z)")

DIGITS = frozenset("0123456789")

# A '-' right before a digit is a sign only after one of these, or at the
# start of input. After an operand it is subtraction.
SIGN_CONTEXT_KINDS = frozenset(
    {
        TokenKind.OPERATOR,
        TokenKind.COMMA,
        TokenKind.PAREN_OPEN,
        TokenKind.KEYWORD,
        TokenKind.BATCH_SEPARATOR,
        TokenKind.SEMICOLON,
    }
)

# Longest match first
MULTI_CHAR_OPERATORS = (
    "<=",
    ">=",
    "<>",
    "!=",
    "!<",
    "!>",
    "::",
    "||",
    "+=",
    "-=",
    "/=",
    "%=",
    "&=",
    "^=",
    "|=",
)
SINGLE_CHAR_OPERATORS = frozenset("+-/%=<>&|^~!:")

PUNCTUATION = {
    "(": TokenKind.PAREN_OPEN,
    ")": TokenKind.PAREN_CLOSE,
    ",": TokenKind.COMMA,
    ".": TokenKind.DOT,
    ";": TokenKind.SEMICOLON,
    "*": TokenKind.STAR,
}


class Lexer:
    """Lexer for SQL source text.

    The lexer tokenizes the input text into a sequence of tokens.
    Whitespace is discarded; comments are kept as tokens.
    """

    def __init__(self, text: str):
        """Initialize the lexer with input text.

        Args:
            text: The input text to tokenize
        """
        self.text = text
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Token] = []

    def tokenize(self) -> List[Token]:
        """Tokenize the input text.

        Returns:
            List of tokens ordered by position
        """
        while self.pos < len(self.text):
            self._tokenize_next()

        logger.debug(f"Tokenized {len(self.text)} chars into {len(self.tokens)} tokens")
        return self.tokens

    def _tokenize_next(self) -> None:
        """Tokenize the next token in the input text."""
        text = self.text
        char = text[self.pos]
        ahead = text[self.pos + 1] if self.pos + 1 < len(text) else ""

        match = WHITESPACE.match(text, self.pos)
        if match:
            self._advance(match.end() - self.pos)
            return

        if char == "-" and ahead == "-":
            end = self._line_end(self.pos)
            self._emit(TokenKind.LINE_COMMENT, end - self.pos)
        elif char == "/" and ahead == "*":
            self._emit(TokenKind.BLOCK_COMMENT, self._block_comment_length())
        elif char == "'":
            self._quoted(self.pos, "'", TokenKind.STRING)
        elif char in "Nn" and ahead == "'":
            self._quoted(self.pos + 1, "'", TokenKind.STRING)
        elif char == "[":
            self._quoted(self.pos, "]", TokenKind.BRACKET_IDENTIFIER)
        elif char == '"':
            self._quoted(self.pos, '"', TokenKind.BRACKET_IDENTIFIER)
        elif char in DIGITS or (
            char == "-" and ahead in DIGITS and self._sign_allowed()
        ):
            start = self.pos + 1 if char == "-" else self.pos
            match = NUMBER.match(text, start)
            self._emit(TokenKind.NUMBER, match.end() - self.pos)
        elif char == "@":
            self._variable()
        elif char == "#":
            self._temp_table()
        elif char in PUNCTUATION:
            self._emit(PUNCTUATION[char], 1)
        elif self._operator_length():
            self._emit(TokenKind.OPERATOR, self._operator_length())
        else:
            match = WORD.match(text, self.pos)
            if match:
                self._word(match.group(0))
            else:
                # Unknown character, keep it so the text stays lossless
                self._emit(TokenKind.IDENTIFIER, 1)

    def _word(self, word: str) -> None:
        upper = word.upper()
        if upper == "GO" and self._standalone(len(word)):
            self._emit(TokenKind.BATCH_SEPARATOR, len(word))
            return

        category = keyword_category(upper)
        if category is not None:
            self._emit(TokenKind.KEYWORD, len(word), category=category)
        else:
            self._emit(TokenKind.IDENTIFIER, len(word))

    def _standalone(self, length: int) -> bool:
        """True when the word at pos is alone on its line, bar a count or comment."""
        text = self.text
        line_start = max(text.rfind("\n", 0, self.pos), text.rfind("\r", 0, self.pos)) + 1
        if text[line_start : self.pos].strip():
            return False
        return GO_TAIL.match(text, self.pos + length) is not None

    def _sign_allowed(self) -> bool:
        for tok in reversed(self.tokens):
            if not tok.is_comment:
                return tok.kind in SIGN_CONTEXT_KINDS
        return True

    def _variable(self) -> None:
        if self.text.startswith("@@", self.pos):
            match = VARIABLE_NAME.match(self.text, self.pos + 2)
            if match:
                self._emit(TokenKind.GLOBAL_VARIABLE, match.end() - self.pos)
                return

        match = VARIABLE_NAME.match(self.text, self.pos + 1)
        if match:
            self._emit(TokenKind.VARIABLE, match.end() - self.pos)
        else:
            self._emit(TokenKind.AT_SIGN, 1)

    def _temp_table(self) -> None:
        prefix = 2 if self.text.startswith("##", self.pos) else 1
        match = VARIABLE_NAME.match(self.text, self.pos + prefix)
        if match:
            self._emit(
                TokenKind.IDENTIFIER, match.end() - self.pos, is_temp_table=True
            )
        else:
            self._emit(TokenKind.HASH, 1)

    def _quoted(self, quote_pos: int, closer: str, kind: TokenKind) -> None:
        """Scan a delimited literal whose opening delimiter is at quote_pos.

        A doubled closing delimiter inside the literal is an escape. When
        the literal is never closed, the rest of the input becomes a single
        identifier token.
        """
        text = self.text
        i = quote_pos + 1
        while True:
            end = text.find(closer, i)
            if end < 0:
                self._emit(TokenKind.IDENTIFIER, len(text) - self.pos)
                return
            if text.startswith(closer * 2, end):
                i = end + 2
                continue
            self._emit(kind, end + 1 - self.pos)
            return

    def _block_comment_length(self) -> int:
        """Length of a possibly nested block comment starting at pos."""
        text = self.text
        depth = 0
        i = self.pos
        while i < len(text):
            if text.startswith("/*", i):
                depth += 1
                i += 2
            elif text.startswith("*/", i):
                depth -= 1
                i += 2
                if depth == 0:
                    return i - self.pos
            else:
                i += 1
        return len(text) - self.pos

    def _operator_length(self) -> int:
        for operator in MULTI_CHAR_OPERATORS:
            if self.text.startswith(operator, self.pos):
                return len(operator)
        if self.text[self.pos] in SINGLE_CHAR_OPERATORS:
            return 1
        return 0

    def _line_end(self, start: int) -> int:
        end = self.text.find("\n", start)
        if end < 0:
            return len(self.text)
        if end > start and self.text[end - 1] == "\r":
            return end - 1
        return end

    def _emit(
        self,
        kind: TokenKind,
        length: int,
        category: Optional[KeywordCategory] = None,
        is_temp_table: bool = False,
    ) -> None:
        value = self.text[self.pos : self.pos + length]
        self.tokens.append(
            Token(kind, value, self.line, self.column, category, is_temp_table)
        )
        self._advance(length)

    def _advance(self, length: int) -> None:
        """Move past length characters, tracking line and column."""
        text = self.text
        end = self.pos + length
        for i in range(self.pos, end):
            char = text[i]
            if char == "\n":
                self.line += 1
                self.column = 1
            elif char == "\r":
                # A lone carriage return is a line break, CRLF counts once
                if i + 1 < len(text) and text[i + 1] == "\n":
                    continue
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        self.pos = end


def tokenize(source: str) -> List[Token]:
    """Tokenize SQL source text.

    Never raises for any string input; malformed literals degrade to
    best-effort tokens.

    Args:
        source: SQL text

    Returns:
        Tokens ordered by (line, col)
    """
    if not source:
        return []
    return Lexer(source).tokenize()
