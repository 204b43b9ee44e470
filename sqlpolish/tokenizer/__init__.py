"""SQL tokenizer: keyword dictionary, token model and lexer."""

from sqlpolish.tokenizer.keywords import KEYWORDS, KeywordCategory, keyword_category
from sqlpolish.tokenizer.lexer import Lexer, tokenize
from sqlpolish.tokenizer.tokens import Token, TokenKind

__all__ = [
    "KEYWORDS",
    "KeywordCategory",
    "Lexer",
    "Token",
    "TokenKind",
    "keyword_category",
    "tokenize",
]
