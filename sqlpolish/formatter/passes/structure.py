"""Structure pass.

Walks the token stream once, maintaining a ``FormatterContext``, and
decides for every token whether it starts a new line, at which indent
level, which clause it belongs to and which syntactic role it plays
(alias, function name, table name). Later passes read these annotations
but never change them.
"""

from typing import List, Optional

from sqlpolish.formatter.annotated import AnnotatedToken, TokenRole
from sqlpolish.formatter.context import SCOPE_FRAMES, FormatterContext, FrameKind
from sqlpolish.formatter.passes.base import (
    AnnotationPass,
    next_significant,
    prev_significant,
    token_at,
)
from sqlpolish.logging import get_logger
from sqlpolish.tokenizer.keywords import KeywordCategory
from sqlpolish.tokenizer.tokens import TokenKind

logger = get_logger(__name__)

# Keywords that introduce a clause at their query level
CLAUSE_NAMES = {
    "SELECT": "select",
    "FROM": "from",
    "WHERE": "where",
    "GROUP": "group_by",
    "ORDER": "order_by",
    "HAVING": "having",
    "INSERT": "insert",
    "UPDATE": "update",
    "DELETE": "delete",
    "VALUES": "values",
    "UNION": "set_operation",
    "INTERSECT": "set_operation",
    "EXCEPT": "set_operation",
    "MERGE": "merge",
    "OPTION": "option",
    "LIMIT": "limit",
    "WITH": "with",
    "SET": "set",
    "INTO": "into",
    "USING": "using",
    "OUTPUT": "output",
}

# Clauses that may get a blank line before them
MAIN_CLAUSES = frozenset(
    {"select", "from", "where", "group_by", "order_by", "having", "set_operation"}
)

DML_STATEMENTS = frozenset({"SELECT", "INSERT", "UPDATE", "DELETE", "MERGE"})

JOIN_MODIFIERS = frozenset({"INNER", "LEFT", "RIGHT", "FULL", "CROSS", "OUTER", "NATURAL"})
JOIN_TERMINALS = frozenset({"JOIN", "APPLY"})

# A clause keyword right after one of these continues the previous phrase
BREAK_SUPPRESSORS = frozenset(
    {"ON", "FOR", "AFTER", "OF", "INSTEAD", "WITHIN", "GRANT", "REVOKE", "DENY", "DEFAULT", "NEXT"}
)
PERMISSION_STATEMENTS = frozenset({"GRANT", "REVOKE", "DENY"})

STATEMENT_STARTERS = frozenset(
    {
        "CREATE",
        "ALTER",
        "DROP",
        "TRUNCATE",
        "DECLARE",
        "EXEC",
        "EXECUTE",
        "PRINT",
        "IF",
        "WHILE",
        "BEGIN",
        "COMMIT",
        "ROLLBACK",
        "USE",
        "RETURN",
        "SET",
        "ELSE",
        "END",
        "GRANT",
        "REVOKE",
        "DENY",
        "RAISERROR",
        "THROW",
        "WAITFOR",
        "OPEN",
        "CLOSE",
        "FETCH",
        "DEALLOCATE",
        "BREAK",
        "CONTINUE",
        "GOTO",
    }
)
# A statement keyword after another keyword stays on its line unless that
# keyword closes a block header
BLOCK_KEYWORDS = frozenset(
    {"AS", "BEGIN", "ELSE", "END", "THEN", "TRY", "CATCH", "TRAN", "TRANSACTION"}
)

SUBQUERY_INTRODUCERS = frozenset({"EXISTS", "IN", "ANY", "ALL", "SOME"})
FUNCTION_LIKE_KEYWORDS = frozenset({"LEFT", "RIGHT", "IDENTITY"})

# An identifier after these names a table, so a following paren is not a call
NON_FUNCTION_POSITIONS = frozenset({"INTO", "TABLE", "REFERENCES", "VIEW", "INSERT"})
TABLE_REF_INTRODUCERS = frozenset(
    {"FROM", "JOIN", "INTO", "UPDATE", "USING", "MERGE", "DELETE", "TABLE"}
)

ALIAS_CLAUSES = frozenset({"select", "from", "join", "into", "merge", "using"})

NAME_KINDS = frozenset({TokenKind.IDENTIFIER, TokenKind.BRACKET_IDENTIFIER})
ALIASABLE_KINDS = frozenset(
    {
        TokenKind.IDENTIFIER,
        TokenKind.BRACKET_IDENTIFIER,
        TokenKind.STRING,
        TokenKind.NUMBER,
        TokenKind.VARIABLE,
        TokenKind.GLOBAL_VARIABLE,
    }
)
# Keyword categories that can still be used as an alias after AS
NAME_LIKE_CATEGORIES = frozenset(
    {
        KeywordCategory.FUNCTION,
        KeywordCategory.DATATYPE,
        KeywordCategory.MODIFIER,
        KeywordCategory.MISC,
        KeywordCategory.CONSTRAINT,
    }
)


def is_name(token: Optional[AnnotatedToken]) -> bool:
    """True for identifiers and keywords used as identifiers."""
    if token is None:
        return False
    return token.kind in NAME_KINDS or (
        token.kind == TokenKind.KEYWORD and token.as_identifier
    )


class StructurePass(AnnotationPass):
    """Assign line breaks, indentation, clauses and roles."""

    name = "structure"

    def __init__(self, config):
        super().__init__(config)
        self.context = FormatterContext()
        self._open_parens: List[int] = []

    def begin(self, tokens: List[AnnotatedToken]) -> None:
        self.context = FormatterContext()
        self._open_parens = []

    def annotate(self, index: int, tokens: List[AnnotatedToken]) -> None:
        tok = tokens[index]
        ctx = self.context
        scope = ctx.scope
        tok.paren_depth = ctx.paren_depth
        tok.indent_level = ctx.line_indent

        if tok.is_comment:
            self._comment(index, tokens)
            return

        self._mark_keyword_as_name(index, tokens)
        self._apply_pending_break(tok)
        if index > 0 and tokens[index - 1].is_comment and self.config.preserve_comments:
            if tokens[index - 1].token.end_line < tok.token.line:
                # Code after a comment that ended its line starts a new one
                self._break(tok, self._indent_after_comment())

        kind = tok.kind
        if kind == TokenKind.PAREN_OPEN:
            self._open_paren(index, tokens)
        elif kind == TokenKind.PAREN_CLOSE:
            self._close_paren(index, tokens)
        elif kind == TokenKind.COMMA:
            self._comma(tok)
        elif kind == TokenKind.SEMICOLON:
            self._end_statement()
        elif kind == TokenKind.BATCH_SEPARATOR:
            self._end_statement()
            if index > 0:
                self._break(tok, 0)
        elif tok.is_word_keyword:
            self._keyword(index, tokens)
        elif is_name(tok):
            self._name(index, tokens)

        if tok.current_clause is None:
            tok.current_clause = ctx.scope.clause
        scope.started = True

    def finish(self, tokens: List[AnnotatedToken]) -> None:
        # Own-line comments line up with the code that follows them
        for index, tok in enumerate(tokens):
            if tok.is_comment and tok.newline_before:
                following = token_at(tokens, next_significant(tokens, index))
                if following is not None and following.newline_before:
                    tok.indent_level = following.indent_level

        logger.debug(
            f"Structure pass done: {len(tokens)} tokens, "
            f"max paren depth {self.context.max_depth}"
        )

    # Line break helpers

    def _break(self, tok: AnnotatedToken, indent: int, empty: bool = False) -> bool:
        """Start a new line at tok unless the current scope is inline."""
        ctx = self.context
        if ctx.scope.inline:
            return False
        tok.newline_before = True
        tok.indent_level = indent
        if empty:
            tok.empty_line_before = True
        ctx.line_indent = indent
        return True

    def _defer_break(self, indent: int, empty: bool = False) -> None:
        """Break before the next code token instead of this one."""
        ctx = self.context
        if ctx.scope.inline:
            return
        ctx.pending_break = indent
        ctx.pending_empty = empty

    def _apply_pending_break(self, tok: AnnotatedToken) -> None:
        ctx = self.context
        if ctx.pending_break is None:
            return
        indent, empty = ctx.pending_break, ctx.pending_empty
        ctx.pending_break = None
        ctx.pending_empty = False
        if tok.kind != TokenKind.SEMICOLON:
            self._break(tok, indent, empty)

    def _list_boundary(self, tok: AnnotatedToken, indent: int, empty: bool = False) -> None:
        """Split a list at a comma according to comma_position."""
        if self.config.comma_position == "leading":
            self._break(tok, indent, empty)
        else:
            self._defer_break(indent, empty)

    def _end_statement(self) -> None:
        self.context.reset_statement()
        self._open_parens = []

    # Token kinds

    def _comment(self, index: int, tokens: List[AnnotatedToken]) -> None:
        tok = tokens[index]
        tok.current_clause = self.context.scope.clause
        # Dropped comments leave no trace in the layout
        if not self.config.preserve_comments:
            return
        if index > 0 and tokens[index - 1].token.end_line < tok.token.line:
            tok.newline_before = True

    def _indent_after_comment(self) -> int:
        ctx = self.context
        frame = ctx.enclosing_list()
        if frame is not None and frame.kind not in SCOPE_FRAMES:
            return max(ctx.line_indent, frame.indent_level_at_push + 1)
        return ctx.line_indent

    def _mark_keyword_as_name(self, index: int, tokens: List[AnnotatedToken]) -> None:
        tok = tokens[index]
        if tok.kind != TokenKind.KEYWORD:
            return
        prev = token_at(tokens, prev_significant(tokens, index))
        nxt = token_at(tokens, next_significant(tokens, index))
        if (prev is not None and prev.kind == TokenKind.DOT) or (
            nxt is not None and nxt.kind == TokenKind.DOT
        ):
            tok.as_identifier = True
            return

        ctx = self.context
        if (
            prev is not None
            and prev.is_keyword("AS")
            and ctx.at_scope_depth
            and ctx.scope.clause in ALIAS_CLAUSES
            and tok.token.category in NAME_LIKE_CATEGORIES
        ):
            tok.as_identifier = True

    def _open_paren(self, index: int, tokens: List[AnnotatedToken]) -> None:
        ctx = self.context
        tok = tokens[index]
        prev = token_at(tokens, prev_significant(tokens, index))
        nxt = token_at(tokens, next_significant(tokens, index))
        kind = self._paren_frame_kind(prev, nxt)

        outer = ctx.open_paren()
        tok.paren_depth = outer
        self._open_parens.append(index)
        if kind is None:
            return

        tok.frame_kind = kind
        config = self.config
        if kind in (FrameKind.SUBQUERY, FrameKind.CTE):
            introducer = None
            if prev is not None and prev.is_keyword(*SUBQUERY_INTRODUCERS):
                introducer = prev.upper
            ctx.push_frame(kind, outer, introducer=introducer)
            inline = kind == FrameKind.CTE and config.cte_style == "compact"
            scope = ctx.enter_scope(ctx.line_indent + config.subquery_indent, inline)
            self._defer_break(scope.indent)
        elif kind == FrameKind.IN_LIST:
            ctx.push_frame(kind, outer)
            if config.in_list_style == "stacked":
                self._defer_break(ctx.line_indent + 1)
        elif kind == FrameKind.COLUMN_LIST:
            ctx.scope.create_table_pending = False
            ctx.push_frame(kind, outer)
            if config.create_table_column_newline:
                self._defer_break(ctx.line_indent + 1)
        else:
            ctx.push_frame(kind, outer)

    def _paren_frame_kind(
        self, prev: Optional[AnnotatedToken], nxt: Optional[AnnotatedToken]
    ) -> Optional[FrameKind]:
        scope = self.context.scope
        if (
            prev is not None
            and prev.is_keyword("AS")
            and scope.clause == "with"
            and scope.cte_state == "as"
        ):
            return FrameKind.CTE
        if nxt is not None and nxt.is_keyword("SELECT", "WITH"):
            return FrameKind.SUBQUERY
        if prev is None:
            return None
        if prev.role == TokenRole.FUNCTION_NAME:
            return FrameKind.FUNCTION_CALL
        if prev.is_keyword("IN"):
            return FrameKind.IN_LIST
        if scope.create_table_pending and (is_name(prev) or prev.is_keyword("TABLE")):
            return FrameKind.COLUMN_LIST
        return None

    def _close_paren(self, index: int, tokens: List[AnnotatedToken]) -> None:
        ctx = self.context
        tok = tokens[index]
        if self._open_parens:
            opener = self._open_parens.pop()
            tok.partner = opener
            tokens[opener].partner = index

        tok.paren_depth = ctx.close_paren()
        frame = ctx.pop_frame()
        if frame is None:
            tok.indent_level = ctx.line_indent
            return

        tok.frame_kind = frame.kind
        indent = frame.indent_level_at_push
        config = self.config
        if frame.kind == FrameKind.SUBQUERY:
            self._break(tok, indent)
        elif frame.kind == FrameKind.CTE:
            if config.cte_style == "expanded":
                self._break(tok, indent)
            ctx.scope.cte_state = "after"
        elif frame.kind == FrameKind.IN_LIST and config.in_list_style == "stacked":
            self._break(tok, indent)
        elif frame.kind == FrameKind.COLUMN_LIST and config.create_table_column_newline:
            self._break(tok, indent)

        tok.indent_level = indent
        ctx.line_indent = indent

    def _comma(self, tok: AnnotatedToken) -> None:
        ctx = self.context
        scope = ctx.scope
        config = self.config

        if ctx.at_scope_depth:
            if scope.clause == "with":
                if scope.cte_state == "after":
                    scope.cte_state = "name"
                    self._list_boundary(
                        tok, scope.clause_indent, config.cte_separator_newline
                    )
                return
            if self._list_style(scope.clause) == "stacked":
                self._list_boundary(tok, scope.clause_indent + 1)
            return

        frame = ctx.enclosing_list()
        if frame is None:
            return
        if (frame.kind == FrameKind.IN_LIST and config.in_list_style == "stacked") or (
            frame.kind == FrameKind.COLUMN_LIST and config.create_table_column_newline
        ):
            self._list_boundary(tok, frame.indent_level_at_push + 1)

    def _list_style(self, clause: Optional[str]) -> Optional[str]:
        config = self.config
        return {
            "select": config.select_list_style,
            "from": config.from_table_style,
            "group_by": config.group_by_style,
            "order_by": config.order_by_style,
            "set": config.update_set_style,
            "values": config.insert_values_style,
        }.get(clause)

    # Keywords

    def _keyword(self, index: int, tokens: List[AnnotatedToken]) -> None:
        ctx = self.context
        tok = tokens[index]
        word = tok.upper
        prev = token_at(tokens, prev_significant(tokens, index))
        nxt = token_at(tokens, next_significant(tokens, index))

        if nxt is not None and nxt.kind == TokenKind.PAREN_OPEN and (
            tok.token.category == KeywordCategory.FUNCTION
            or word in FUNCTION_LIKE_KEYWORDS
        ):
            tok.role = TokenRole.FUNCTION_NAME
            return

        if word == "CASE":
            ctx.push_case()
            tok.frame_kind = FrameKind.CASE
            return
        if word in ("WHEN", "THEN", "ELSE", "END") and ctx.case_at_depth():
            self._case_keyword(tok)
            return
        if word == "BETWEEN":
            ctx.push_between()
            return
        if word in ("AND", "OR"):
            self._logical(tok)
            return

        if not ctx.at_scope_depth:
            return

        scope = ctx.scope
        if word in JOIN_MODIFIERS or word in JOIN_TERMINALS:
            self._join(index, tokens, prev)
        elif word == "ON":
            self._on(tok)
        elif word == "AS":
            if scope.clause == "with" and scope.cte_state == "name":
                scope.cte_state = "as"
        elif scope.in_merge and word in ("WHEN", "THEN"):
            self._merge_keyword(tok)
        elif self._clause_for(word) is not None:
            self._clause(tok, self._clause_for(word), prev)
        elif word in STATEMENT_STARTERS:
            self._statement(tok, prev)
        elif word == "TABLE":
            if (prev is not None and prev.is_keyword("CREATE")) or (
                prev is not None
                and prev.kind == TokenKind.VARIABLE
                and scope.statement == "DECLARE"
            ):
                scope.create_table_pending = True

    def _case_keyword(self, tok: AnnotatedToken) -> None:
        ctx = self.context
        frame = ctx.case_at_depth()
        stacked = self.config.case_style == "stacked"
        word = tok.upper
        if word == "END":
            ctx.pop_case()
            tok.frame_kind = FrameKind.CASE
            if stacked:
                self._break(tok, frame.indent_level_at_push)
            tok.indent_level = frame.indent_level_at_push
            ctx.line_indent = frame.indent_level_at_push
        elif word in ("WHEN", "ELSE") and stacked:
            self._break(tok, frame.indent_level_at_push + self.config.case_indent)

    def _logical(self, tok: AnnotatedToken) -> None:
        ctx = self.context
        if tok.upper == "AND" and ctx.pop_between() is not None:
            return
        if not ctx.at_scope_depth or ctx.case_at_depth() is not None:
            return

        config = self.config
        scope = ctx.scope
        if scope.clause in ("where", "having") and config.where_condition_style == "stacked":
            indent = scope.clause_indent + 1
        elif scope.clause == "on" and config.on_condition_style == "stacked":
            indent = scope.clause_indent + (1 if config.join_on_same_line else 2)
        else:
            return

        if config.and_or_position == "leading":
            self._break(tok, indent)
        else:
            self._defer_break(indent)

    def _join(
        self, index: int, tokens: List[AnnotatedToken], prev: Optional[AnnotatedToken]
    ) -> None:
        scope = self.context.scope
        tok = tokens[index]
        if prev is not None and prev.is_keyword(*JOIN_MODIFIERS):
            # Later word of a join unit such as LEFT OUTER JOIN
            if tok.upper in JOIN_TERMINALS:
                scope.clause = "join"
            return

        cursor: Optional[int] = index
        while cursor is not None and tokens[cursor].is_keyword(*JOIN_MODIFIERS):
            cursor = next_significant(tokens, cursor)
        if cursor is None or not tokens[cursor].is_keyword(*JOIN_TERMINALS):
            return

        scope.clause = "join"
        scope.cte_state = None
        if self._clause_break_allowed(prev):
            self._break(tok, scope.clause_indent)

    def _on(self, tok: AnnotatedToken) -> None:
        scope = self.context.scope
        if scope.clause not in ("join", "using"):
            return
        scope.clause = "on"
        if not self.config.join_on_same_line:
            self._break(tok, scope.clause_indent + 1)

    def _merge_keyword(self, tok: AnnotatedToken) -> None:
        scope = self.context.scope
        if tok.upper == "WHEN":
            scope.clause = "merge_when"
            scope.clause_indent = scope.indent
            if self.config.newline_before_clause:
                self._break(tok, scope.indent)
        elif scope.clause == "merge_when":
            # Actions after THEN sit one level in
            scope.clause_indent = scope.indent + 1

    def _clause_for(self, word: str) -> Optional[str]:
        scope = self.context.scope
        clause = CLAUSE_NAMES.get(word)
        if clause == "with" and scope.started:
            return None
        if clause == "set" and not (scope.statement == "UPDATE" or scope.in_merge):
            return None
        if clause == "using" and not scope.in_merge:
            return None
        if clause == "output" and scope.statement not in DML_STATEMENTS:
            return None
        return clause

    def _clause_break_allowed(self, prev: Optional[AnnotatedToken]) -> bool:
        scope = self.context.scope
        if not self.config.newline_before_clause or not scope.started:
            return False
        if scope.statement in PERMISSION_STATEMENTS:
            return False
        return not (prev is not None and prev.is_keyword(*BREAK_SUPPRESSORS))

    def _clause(
        self, tok: AnnotatedToken, clause: str, prev: Optional[AnnotatedToken]
    ) -> None:
        scope = self.context.scope
        word = tok.upper
        # Phrases like WITHIN GROUP, GRANT SELECT or AFTER INSERT, UPDATE
        # leave the clause state alone
        if scope.statement in PERMISSION_STATEMENTS:
            return
        if prev is not None and (
            prev.is_keyword(*BREAK_SUPPRESSORS)
            or (word in DML_STATEMENTS and prev.kind == TokenKind.COMMA)
        ):
            return

        allowed = self._clause_break_allowed(prev)
        if word == "FROM" and prev is not None and prev.is_keyword("DELETE"):
            allowed = False
        elif word == "INTO":
            allowed = (
                allowed and scope.clause == "select" and self.config.select_into_newline
            )

        if word in DML_STATEMENTS and scope.statement not in DML_STATEMENTS:
            scope.statement = word
        elif not scope.started:
            scope.statement = word

        if word == "MERGE":
            scope.in_merge = True
        if word == "OUTPUT":
            scope.clause_indent = scope.indent

        scope.clause = clause
        scope.cte_state = "name" if clause == "with" else None
        scope.create_table_pending = False

        if allowed:
            empty = self.config.blank_line_before_clause and clause in MAIN_CLAUSES
            self._break(tok, scope.clause_indent, empty)

    def _statement(self, tok: AnnotatedToken, prev: Optional[AnnotatedToken]) -> None:
        ctx = self.context
        if not ctx.at_top_level:
            return
        scope = ctx.scope
        continues_phrase = (
            prev is not None and prev.is_word_keyword and prev.upper not in BLOCK_KEYWORDS
        )
        if scope.started and not continues_phrase:
            self._break(tok, scope.indent)
        if not continues_phrase:
            scope.statement = tok.upper
            scope.clause = None
            scope.in_merge = False

    # Names

    def _name(self, index: int, tokens: List[AnnotatedToken]) -> None:
        ctx = self.context
        scope = ctx.scope
        tok = tokens[index]
        prev_index = prev_significant(tokens, index)
        nxt = token_at(tokens, next_significant(tokens, index))

        if scope.clause == "with" and scope.cte_state == "name" and ctx.at_scope_depth:
            return

        start = self._chain_start(tokens, index)
        before_chain = token_at(tokens, prev_significant(tokens, start))

        if nxt is not None and nxt.kind == TokenKind.PAREN_OPEN:
            if not (
                before_chain is not None
                and before_chain.is_keyword(*NON_FUNCTION_POSITIONS)
            ):
                tok.role = TokenRole.FUNCTION_NAME
                return

        if start == index and self._starts_table_ref(before_chain):
            tok.role = TokenRole.TABLE_NAME
        elif self._is_alias(prev_index, nxt, tokens):
            tok.role = TokenRole.ALIAS

    def _chain_start(self, tokens: List[AnnotatedToken], index: int) -> int:
        """First token of a dotted name such as db.schema.table."""
        cursor = index
        while True:
            prev_index = prev_significant(tokens, cursor)
            if prev_index is None:
                return cursor
            prev = tokens[prev_index]
            if prev.kind == TokenKind.DOT:
                cursor = prev_index
            elif tokens[cursor].kind == TokenKind.DOT and is_name(prev):
                cursor = prev_index
            else:
                return cursor

    def _starts_table_ref(self, before: Optional[AnnotatedToken]) -> bool:
        if before is None:
            return False
        if before.is_keyword(*TABLE_REF_INTRODUCERS):
            return True
        ctx = self.context
        return (
            before.kind == TokenKind.COMMA
            and ctx.at_scope_depth
            and ctx.scope.clause == "from"
        )

    def _is_alias(
        self,
        prev_index: Optional[int],
        nxt: Optional[AnnotatedToken],
        tokens: List[AnnotatedToken],
    ) -> bool:
        ctx = self.context
        prev = token_at(tokens, prev_index)
        if not ctx.at_scope_depth or ctx.scope.clause not in ALIAS_CLAUSES:
            return False
        if prev is None:
            return False
        if nxt is not None and nxt.kind in (TokenKind.DOT, TokenKind.PAREN_OPEN):
            return False
        if prev.is_keyword("AS"):
            return True
        if prev.is_keyword("END"):
            return prev.frame_kind == FrameKind.CASE
        if prev.kind in ALIASABLE_KINDS or is_name(prev):
            # The row count of TOP n is not aliased
            return not self._follows_top(tokens, prev_index)
        if prev.kind == TokenKind.PAREN_CLOSE:
            if prev.partner is None:
                return True
            return not self._follows_top(tokens, prev.partner)
        return False

    def _follows_top(self, tokens: List[AnnotatedToken], index: int) -> bool:
        before = token_at(tokens, prev_significant(tokens, index))
        return before is not None and before.is_keyword("TOP")
