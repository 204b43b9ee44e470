"""Transform pass: keyword insertion and removal.

Transforms never edit the token list. Added keywords hang off an anchor
token in ``insert_before``/``insert_after`` and dropped tokens are only
flagged ``removed``, so token indexes stay stable for the renderer.
"""

from typing import List, Optional

from sqlpolish.formatter.annotated import AnnotatedToken, TokenRole
from sqlpolish.formatter.passes.base import (
    AnnotationPass,
    next_significant,
    prev_significant,
    token_at,
)
from sqlpolish.formatter.passes.casing import apply_case
from sqlpolish.formatter.passes.structure import JOIN_MODIFIERS, is_name
from sqlpolish.logging import get_logger
from sqlpolish.tokenizer.tokens import TokenKind

logger = get_logger(__name__)

# A DELETE target list ends at any of these
DELETE_TARGET_TERMINATORS = frozenset(
    {
        "WHERE",
        "JOIN",
        "ORDER",
        "GROUP",
        "HAVING",
        "OUTPUT",
        "SELECT",
        "INSERT",
        "UPDATE",
        "DELETE",
        "MERGE",
    }
)
OUTER_JOIN_SIDES = frozenset({"LEFT", "RIGHT", "FULL"})
TABLE_CLAUSES = frozenset({"from", "join"})


class TransformPass(AnnotationPass):
    """Apply the optional keyword transforms enabled in the config."""

    name = "transform"

    def begin(self, tokens: List[AnnotatedToken]) -> None:
        self.inserted = 0
        self.removed = 0

    def annotate(self, index: int, tokens: List[AnnotatedToken]) -> None:
        config = self.config
        tok = tokens[index]

        if tok.is_comment:
            if not config.preserve_comments:
                self._remove(tok)
            return

        if config.use_as_keyword and tok.role == TokenRole.ALIAS:
            prev = token_at(tokens, prev_significant(tokens, index))
            if prev is not None and not prev.is_keyword("AS"):
                self._insert(tok, "AS", before=True)

        if tok.is_keyword("INSERT") and config.insert_into_keyword:
            if self._next_is_name(tokens, index):
                self._insert(tok, "INTO")
        elif tok.is_keyword("DELETE") and config.delete_from_keyword:
            if self._next_is_name(tokens, index) and not self._has_delete_from(tokens, index):
                self._insert(tok, "FROM")

        if config.join_keyword_style == "full":
            self._expand_join(index, tokens)
        elif config.join_keyword_style == "short":
            self._shorten_join(index, tokens)

        if config.from_schema_qualify == "never":
            self._strip_schema(index, tokens)

    def finish(self, tokens: List[AnnotatedToken]) -> None:
        if self.inserted or self.removed:
            logger.debug(
                f"Transform pass inserted {self.inserted} and removed {self.removed} tokens"
            )

    def _insert(self, anchor: AnnotatedToken, word: str, before: bool = False) -> None:
        text = apply_case(word, self.config.keyword_case)
        new = AnnotatedToken.synthesize(text, anchor)
        if before:
            anchor.insert_before.append(new)
        else:
            anchor.insert_after.append(new)
        self.inserted += 1

    def _remove(self, tok: AnnotatedToken) -> None:
        tok.removed = True
        self.removed += 1

    def _next_is_name(self, tokens: List[AnnotatedToken], index: int) -> bool:
        nxt = token_at(tokens, next_significant(tokens, index))
        return is_name(nxt)

    def _has_delete_from(self, tokens: List[AnnotatedToken], index: int) -> bool:
        """True when a FROM follows the DELETE target at the same depth."""
        depth = tokens[index].paren_depth
        cursor: Optional[int] = next_significant(tokens, index)
        while cursor is not None:
            tok = tokens[cursor]
            if tok.kind in (TokenKind.SEMICOLON, TokenKind.BATCH_SEPARATOR):
                return False
            if tok.paren_depth == depth and tok.is_word_keyword:
                if tok.upper == "FROM":
                    return True
                if tok.upper in DELETE_TARGET_TERMINATORS:
                    return False
            cursor = next_significant(tokens, cursor)
        return False

    def _expand_join(self, index: int, tokens: List[AnnotatedToken]) -> None:
        tok = tokens[index]
        nxt = token_at(tokens, next_significant(tokens, index))
        if tok.is_keyword("JOIN"):
            prev = token_at(tokens, prev_significant(tokens, index))
            if prev is None or not prev.is_keyword(*JOIN_MODIFIERS):
                self._insert(tok, "INNER", before=True)
        elif tok.is_keyword(*OUTER_JOIN_SIDES) and nxt is not None and nxt.is_keyword("JOIN"):
            self._insert(tok, "OUTER")

    def _shorten_join(self, index: int, tokens: List[AnnotatedToken]) -> None:
        tok = tokens[index]
        if not tok.is_keyword("INNER", "OUTER"):
            return
        nxt = token_at(tokens, next_significant(tokens, index))
        if nxt is not None and nxt.is_keyword("JOIN"):
            self._remove(tok)

    def _strip_schema(self, index: int, tokens: List[AnnotatedToken]) -> None:
        tok = tokens[index]
        if tok.role != TokenRole.TABLE_NAME or tok.current_clause not in TABLE_CLAUSES:
            return
        dot_index = next_significant(tokens, index)
        dot = token_at(tokens, dot_index)
        if dot is None or dot.kind != TokenKind.DOT:
            return
        name_index = next_significant(tokens, dot_index)
        name = token_at(tokens, name_index)
        if not is_name(name):
            return
        after = token_at(tokens, next_significant(tokens, name_index))
        if after is not None and after.kind in (TokenKind.DOT, TokenKind.PAREN_OPEN):
            return
        self._remove(tok)
        self._remove(dot)
