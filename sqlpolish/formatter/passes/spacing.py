"""Spacing pass: decide whether a space precedes each token."""

from typing import List, Optional

from sqlpolish.formatter.annotated import AnnotatedToken, TokenRole
from sqlpolish.formatter.passes.base import AnnotationPass, prev_significant, token_at
from sqlpolish.tokenizer.keywords import KeywordCategory
from sqlpolish.tokenizer.tokens import OPERAND_KINDS, TokenKind

TIGHT_OPERATORS = frozenset({"::", ":"})
UNARY_OPERATORS = frozenset({"+", "-", "~"})
ASSIGNMENT_OPERATORS = frozenset({"=", "+=", "-=", "/=", "%=", "&=", "^=", "|="})
COMPARISON_OPERATORS = frozenset({"<", ">", "<=", ">=", "<>", "!=", "!<", "!>"})


class SpacingPass(AnnotationPass):
    """Set ``space_before`` from the previous significant token."""

    name = "spacing"

    def annotate(self, index: int, tokens: List[AnnotatedToken]) -> None:
        tok = tokens[index]
        prev_index = prev_significant(tokens, index)
        tok.space_before = self._space_before(tokens, index, prev_index)

    def _space_before(
        self, tokens: List[AnnotatedToken], index: int, prev_index: Optional[int]
    ) -> bool:
        config = self.config
        tok = tokens[index]
        if index == 0:
            return False
        if tok.is_comment:
            return True
        if tokens[index - 1].is_comment and config.preserve_comments:
            return True
        prev = token_at(tokens, prev_index)
        if prev is None:
            return False

        kind, prev_kind = tok.kind, prev.kind
        if prev_kind == TokenKind.PAREN_OPEN and kind == TokenKind.PAREN_CLOSE:
            return False
        if prev_kind == TokenKind.PAREN_OPEN or kind == TokenKind.PAREN_CLOSE:
            return config.parenthesis_spacing
        if prev_kind == TokenKind.DOT or kind == TokenKind.DOT:
            return False

        if kind == TokenKind.COMMA:
            return config.comma_spacing in ("before", "both")
        if prev_kind == TokenKind.COMMA:
            return config.comma_spacing in ("after", "both")
        if kind == TokenKind.SEMICOLON:
            return config.semicolon_spacing

        if kind == TokenKind.OPERATOR:
            if tok.text in TIGHT_OPERATORS:
                return False
            if self._is_unary(tokens, index):
                if prev_kind == TokenKind.OPERATOR:
                    return self._space_after_operator(tokens, prev_index)
                return True
            return self._operator_spacing(tok.text)
        if prev_kind == TokenKind.OPERATOR:
            return self._space_after_operator(tokens, prev_index)

        if kind == TokenKind.STAR and self._is_multiplication(tokens, index):
            return config.operator_spacing
        if prev_kind == TokenKind.STAR and self._is_multiplication(tokens, prev_index):
            return config.operator_spacing

        if kind == TokenKind.PAREN_OPEN:
            if prev.role == TokenRole.FUNCTION_NAME:
                return prev_kind == TokenKind.BRACKET_IDENTIFIER and config.bracket_spacing
            if prev.is_word_keyword and prev.token.category == KeywordCategory.DATATYPE:
                return False
            return True
        return True

    def _space_after_operator(self, tokens: List[AnnotatedToken], index: int) -> bool:
        operator = tokens[index].text
        if operator in TIGHT_OPERATORS or self._is_unary(tokens, index):
            return False
        return self._operator_spacing(operator)

    def _is_unary(self, tokens: List[AnnotatedToken], index: int) -> bool:
        tok = tokens[index]
        if tok.text not in UNARY_OPERATORS:
            return False
        prev = token_at(tokens, prev_significant(tokens, index))
        return (
            prev is None
            or prev.kind in (TokenKind.OPERATOR, TokenKind.PAREN_OPEN, TokenKind.COMMA)
            or prev.is_word_keyword
        )

    def _is_multiplication(self, tokens: List[AnnotatedToken], index: int) -> bool:
        prev = token_at(tokens, prev_significant(tokens, index))
        if prev is None or prev.kind == TokenKind.STAR:
            return False
        return prev.kind in OPERAND_KINDS or (
            prev.kind == TokenKind.KEYWORD and prev.as_identifier
        )

    def _operator_spacing(self, operator: str) -> bool:
        config = self.config
        if operator in ASSIGNMENT_OPERATORS:
            return config.equals_spacing
        if operator in COMPARISON_OPERATORS:
            return config.comparison_spacing
        if operator == "||":
            return config.concatenation_spacing
        return config.operator_spacing
