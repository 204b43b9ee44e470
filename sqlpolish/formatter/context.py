"""Formatter context threaded through the structure pass.

The context is a scoped mutable builder owned by a single format call. It
keeps one stack of parenthesis frames (subquery, CTE body, function call,
IN list, column list) plus dedicated CASE and BETWEEN stacks, and the
scalar state needed to decide line breaks.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class FrameKind(Enum):
    """Kinds of nested constructs tracked on the context stacks."""

    CASE = "case"
    SUBQUERY = "subquery"
    CTE = "cte"
    FUNCTION_CALL = "function_call"
    IN_LIST = "in_list"
    BETWEEN = "between"
    COLUMN_LIST = "column_list"


# Frames that open a new query scope
SCOPE_FRAMES = frozenset({FrameKind.SUBQUERY, FrameKind.CTE})


@dataclass(frozen=True)
class Frame:
    """One entry on a nesting stack.

    Attributes:
        kind: Construct kind
        paren_depth_at_push: Running paren depth outside the construct
        indent_level_at_push: Line indent when the construct opened
        extra: Optional metadata, e.g. the subquery introducer keyword
    """

    kind: FrameKind
    paren_depth_at_push: int
    indent_level_at_push: int
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass
class Scope:
    """Layout state of one query level (top level, subquery or CTE body)."""

    indent: int = 0
    depth: int = 0
    clause: Optional[str] = None
    clause_indent: int = 0
    statement: Optional[str] = None
    started: bool = False
    in_merge: bool = False
    cte_state: Optional[str] = None
    inline: bool = False
    create_table_pending: bool = False


class FormatterContext:
    """Nesting stacks and running layout state for one format call.

    Invariants: depth never goes negative, stacks are strictly LIFO and a
    frame is popped only when the running paren depth is back at the value
    it had when the frame was pushed.
    """

    def __init__(self) -> None:
        self.paren_depth = 0
        self.frames: List[Frame] = []
        self.case_stack: List[Frame] = []
        self.between_stack: List[Frame] = []
        self.scope = Scope()
        self.line_indent = 0
        self.pending_break: Optional[int] = None
        self.pending_empty = False
        self.max_depth = 0

    # Parentheses

    def open_paren(self) -> int:
        """Enter a parenthesis and return the depth outside it."""
        outer = self.paren_depth
        self.paren_depth += 1
        self.max_depth = max(self.max_depth, self.paren_depth)
        return outer

    def close_paren(self) -> int:
        """Leave a parenthesis and return the new depth, never below zero."""
        if self.paren_depth > 0:
            self.paren_depth -= 1
        self._discard_deeper(self.case_stack)
        self._discard_deeper(self.between_stack)
        return self.paren_depth

    def _discard_deeper(self, stack: List[Frame]) -> None:
        # Frames left open inside a closed parenthesis belong to broken input
        while stack and stack[-1].paren_depth_at_push > self.paren_depth:
            stack.pop()

    # Parenthesis frames

    def push_frame(self, kind: FrameKind, outer_depth: int, **extra: Any) -> Frame:
        if kind in SCOPE_FRAMES:
            extra["scope"] = self.scope
        frame = Frame(kind, outer_depth, self.line_indent, extra)
        self.frames.append(frame)
        return frame

    def pop_frame(self) -> Optional[Frame]:
        """Pop the innermost frame if it was opened at the current depth."""
        while self.frames and self.frames[-1].paren_depth_at_push > self.paren_depth:
            self.frames.pop()
        if self.frames and self.frames[-1].paren_depth_at_push == self.paren_depth:
            frame = self.frames.pop()
            self.line_indent = frame.indent_level_at_push
            if frame.kind in SCOPE_FRAMES:
                self.scope = frame.extra["scope"]
            return frame
        return None

    def top_frame(self) -> Optional[Frame]:
        return self.frames[-1] if self.frames else None

    def enclosing_list(self) -> Optional[Frame]:
        """Frame whose direct contents are at the current depth, if any."""
        frame = self.top_frame()
        if frame is not None and frame.paren_depth_at_push + 1 == self.paren_depth:
            return frame
        return None

    # CASE and BETWEEN

    def push_case(self) -> Frame:
        frame = Frame(FrameKind.CASE, self.paren_depth, self.line_indent)
        self.case_stack.append(frame)
        return frame

    def case_at_depth(self) -> Optional[Frame]:
        """The innermost CASE frame opened at the current depth, if any."""
        if self.case_stack and self.case_stack[-1].paren_depth_at_push == self.paren_depth:
            return self.case_stack[-1]
        return None

    def pop_case(self) -> Optional[Frame]:
        if self.case_at_depth() is None:
            return None
        frame = self.case_stack.pop()
        self.line_indent = frame.indent_level_at_push
        return frame

    def push_between(self) -> Frame:
        frame = Frame(FrameKind.BETWEEN, self.paren_depth, self.line_indent)
        self.between_stack.append(frame)
        return frame

    def pop_between(self) -> Optional[Frame]:
        if (
            self.between_stack
            and self.between_stack[-1].paren_depth_at_push == self.paren_depth
        ):
            return self.between_stack.pop()
        return None

    # Scopes

    def enter_scope(self, indent: int, inline: bool = False) -> Scope:
        """Start a nested query scope at the current depth."""
        self.scope = Scope(
            indent=indent,
            depth=self.paren_depth,
            clause_indent=indent,
            inline=inline or self.scope.inline,
        )
        return self.scope

    @property
    def at_scope_depth(self) -> bool:
        return self.paren_depth == self.scope.depth

    @property
    def at_top_level(self) -> bool:
        return self.paren_depth == 0 and not self.frames

    def reset_statement(self) -> None:
        """Return every piece of state to start-of-statement values."""
        self.paren_depth = 0
        self.frames.clear()
        self.case_stack.clear()
        self.between_stack.clear()
        self.scope = Scope()
        self.line_indent = 0
        self.pending_break = None
        self.pending_empty = False

    def snapshot(self) -> Dict[str, Any]:
        """Plain view of the current state, for debugging output."""
        return {
            "paren_depth": self.paren_depth,
            "frames": [frame.kind.value for frame in self.frames],
            "case_depth": len(self.case_stack),
            "between_depth": len(self.between_stack),
            "clause": self.scope.clause,
            "line_indent": self.line_indent,
        }
