"""Cooperative, cancellable formatting task.

Large inputs can be annotated in fixed-size batches so a host event loop
stays responsive. Batches only split the walk over the token list: token
order and context state stay strictly sequential. Cancellation is checked
at batch boundaries and drops every piece of partial state, so a cancelled
task never produces output.
"""

import asyncio
from enum import Enum
from typing import Callable, Iterator, List, Optional

from sqlpolish.exceptions import TaskStateError
from sqlpolish.formatter.annotated import AnnotatedToken, annotate_tokens
from sqlpolish.formatter.config import DEFAULT_CONFIG, FormatterConfig
from sqlpolish.formatter.passes import AnnotationPass, build_passes
from sqlpolish.formatter.renderer import render
from sqlpolish.logging import get_logger
from sqlpolish.tokenizer import tokenize

logger = get_logger(__name__)

ProgressCallback = Callable[[str, int, int], None]
CompleteCallback = Callable[[str], None]

DEFAULT_BATCH_SIZE = 500


class TaskState(Enum):
    """Lifecycle of a FormatTask."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class FormatTask:
    """Format one source text in batches.

    Args:
        source: SQL text
        config: Formatter configuration, defaults to DEFAULT_CONFIG
        batch_size: Tokens annotated per step
        on_progress: Called as ``on_progress(stage, processed, total)`` at
            every batch boundary
        on_complete: Called once with the formatted text; never called for
            a cancelled task
    """

    def __init__(
        self,
        source: str,
        config: Optional[FormatterConfig] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        on_progress: Optional[ProgressCallback] = None,
        on_complete: Optional[CompleteCallback] = None,
    ):
        if batch_size < 1:
            raise ValueError(f"Batch size must be at least 1, got {batch_size}")
        self.source = source
        self.config = config or DEFAULT_CONFIG
        self.batch_size = batch_size
        self.on_progress = on_progress
        self.on_complete = on_complete
        self.result: Optional[str] = None
        self._state = TaskState.PENDING
        self._tokens: List[AnnotatedToken] = []
        self._passes: List[AnnotationPass] = []
        self._current: Optional[AnnotationPass] = None
        self._batches: Optional[Iterator[int]] = None

    @property
    def state(self) -> TaskState:
        return self._state

    def start(self) -> None:
        """Tokenize the source and queue the annotation passes.

        Raises:
            TaskStateError: If the task was already started
        """
        if self._state != TaskState.PENDING:
            raise TaskStateError(
                f"Cannot start a task in state '{self._state.value}'",
                ["Create a new FormatTask for each format run"],
            )
        self._state = TaskState.RUNNING
        if not self.source.strip():
            return
        self._tokens = annotate_tokens(tokenize(self.source))
        self._passes = build_passes(self.config)
        self._report("tokenize", len(self._tokens))

    def step(self) -> bool:
        """Process one batch.

        Returns:
            True while work remains, False once the task completed or was
            cancelled

        Raises:
            TaskStateError: If called before start()
        """
        if self._state == TaskState.PENDING:
            raise TaskStateError(
                "Cannot step a task that has not been started",
                ["Call start() first, or use run()"],
            )
        if self._state != TaskState.RUNNING:
            return False

        try:
            while self._advance_pass():
                processed = next(self._batches, None)
                if processed is not None:
                    self._report(self._current.name, processed)
                    return True
                self._batches = None
            output = self._render()
        except Exception:
            logger.exception("Formatting task failed, returning the source unchanged")
            output = self.source
        self._complete(output)
        return False

    def cancel(self) -> None:
        """Stop the task and drop all partial state."""
        if self._state in (TaskState.COMPLETED, TaskState.CANCELLED):
            return
        logger.debug("Formatting task cancelled")
        self._state = TaskState.CANCELLED
        self._discard()
        self.result = None

    def run(self) -> Optional[str]:
        """Drive the task to completion and return the formatted text."""
        if self._state == TaskState.PENDING:
            self.start()
        while self.step():
            pass
        return self.result

    def _advance_pass(self) -> bool:
        """Make sure a pass is in progress; False once every pass is done."""
        if self._batches is not None:
            return True
        if not self._passes:
            return False
        self._current = self._passes.pop(0)
        self._batches = self._current.iter_run(self._tokens, self.batch_size)
        return True

    def _render(self) -> str:
        if not self._tokens:
            return self.source
        output = render(self._tokens, self.config)
        self._report("render", len(self._tokens))
        if self.source.endswith(("\n", "\r")):
            output += "\n"
        return output

    def _complete(self, output: str) -> None:
        self.result = output
        self._state = TaskState.COMPLETED
        self._discard()
        if self.on_complete is not None:
            self.on_complete(output)

    def _discard(self) -> None:
        self._tokens = []
        self._passes = []
        self._current = None
        self._batches = None

    def _report(self, stage: str, processed: int) -> None:
        if self.on_progress is not None:
            self.on_progress(stage, processed, len(self._tokens))


async def format_sql_async(
    source: str,
    config: Optional[FormatterConfig] = None,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> Optional[str]:
    """Format ``source`` on the running event loop, yielding between batches.

    Cancelling the awaiting asyncio task cancels the format run.
    """
    task = FormatTask(source, config, batch_size)
    task.start()
    try:
        while task.step():
            await asyncio.sleep(0)
    except asyncio.CancelledError:
        task.cancel()
        raise
    return task.result
