"""Casing pass: apply keyword, function, datatype and identifier casing."""

from typing import List, Optional

from sqlpolish.formatter.annotated import AnnotatedToken, TokenRole
from sqlpolish.formatter.passes.base import AnnotationPass
from sqlpolish.tokenizer.keywords import KeywordCategory
from sqlpolish.tokenizer.tokens import TokenKind

# Unterminated literals fall back to identifiers and keep their text
QUOTE_PREFIXES = ("'", '"', "[")


def apply_case(text: str, mode: str) -> str:
    """Return ``text`` upper- or lower-cased, or unchanged for ``preserve``."""
    if mode == "upper":
        return text.upper()
    if mode == "lower":
        return text.lower()
    return text


class CasingPass(AnnotationPass):
    """Write ``case_applied_text`` for keywords and names.

    Strings, numbers, comments and variables are never touched.
    """

    name = "casing"

    def annotate(self, index: int, tokens: List[AnnotatedToken]) -> None:
        tok = tokens[index]
        mode = self._mode_for(tok)
        if mode is None or mode == "preserve":
            return
        tok.case_applied_text = apply_case(tok.token.text, mode)

    def _mode_for(self, tok: AnnotatedToken) -> Optional[str]:
        config = self.config
        kind = tok.kind
        if kind == TokenKind.BATCH_SEPARATOR:
            return config.keyword_case
        if tok.is_word_keyword:
            category = tok.token.category
            if category == KeywordCategory.FUNCTION:
                return config.function_case
            if category == KeywordCategory.DATATYPE:
                return config.datatype_case
            return config.keyword_case

        if kind == TokenKind.IDENTIFIER and tok.token.text.startswith(QUOTE_PREFIXES):
            return None
        if kind == TokenKind.BRACKET_IDENTIFIER and not tok.token.text.startswith("["):
            return None
        if kind in (TokenKind.IDENTIFIER, TokenKind.BRACKET_IDENTIFIER, TokenKind.KEYWORD):
            if tok.role == TokenRole.ALIAS:
                return config.alias_case
            return config.identifier_case
        return None
