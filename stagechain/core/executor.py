"""Dispatch loop driving one run of a frozen stage sequence."""
from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional, Sequence, Tuple

from stagechain.errors import ChainRunError

from .stage import Stage

logger = logging.getLogger(__name__)


class OnceCallback:
    """Wrap *callback* so that only the first call reaches it."""

    def __init__(self, callback: Callable[..., Any]) -> None:
        self._callback = callback
        self._lock = threading.Lock()
        self._fired = False
        self.failure: Optional[BaseException] = None

    @property
    def fired(self) -> bool:
        return self._fired

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        with self._lock:
            if self._fired:
                return None
            self._fired = True
        try:
            return self._callback(*args, **kwargs)
        except Exception as exc:
            self.failure = exc
            raise


class ChainRun:
    """State of a single execution: position, guarded ``done`` and inputs.

    A run is created per invocation, so concurrent runs of the same chain
    only share the immutable stage tuple.
    """

    def __init__(self, stages: Sequence[Stage], context: Any, message: Any, extra: Tuple[Any, ...] = ()) -> None:
        done = getattr(context, "done", None)
        if not callable(done):
            raise ChainRunError("Execution context must provide a callable 'done' before the run starts")
        self.stages: Tuple[Stage, ...] = tuple(stages)
        self.context = context
        self.message = message
        self.extra = extra
        self.index = 0
        self.done = OnceCallback(done)
        context.done = self.done
        context.advance = self.advance

    @property
    def completed(self) -> bool:
        return self.done.fired

    def start(self) -> None:
        logger.debug("Starting chain run with %d stage(s)", len(self.stages))
        self.advance()

    def _next_stage(self) -> Optional[Stage]:
        if self.index >= len(self.stages):
            return None
        stage = self.stages[self.index]
        self.index += 1
        return stage

    def advance(self, error: Any = None) -> Any:
        """Dispatch to the next eligible stage, carrying *error* if given.

        Skipped stages are walked in this loop, but a stage that calls
        ``advance`` synchronously nests one more dispatch inside its own
        frame, so purely synchronous chains are bounded by the interpreter
        recursion limit. Stages resumed from a callback start on a fresh stack.
        """

        while True:
            stage = self._next_stage()
            if stage is None:
                logger.debug("Chain exhausted (error=%r)", error)
                return self.done(error)
            position = self.index - 1
            try:
                if error is not None and stage.is_error_handler:
                    logger.debug("Stage %d (%s) handling error %r", position, stage.name, error)
                    return stage.handler(error, self.context, self.message, *self.extra)
                if error is not None or stage.is_error_handler:
                    continue
                if stage.is_optional and not stage.predicate(self.context, self.message):
                    logger.debug("Stage %d (%s) skipped by predicate", position, stage.name)
                    continue
                logger.debug("Stage %d (%s) dispatched", position, stage.name)
                return stage.handler(self.context, self.message, *self.extra)
            except Exception as exc:
                if exc is self.done.failure:
                    raise
                logger.warning("Stage %d (%s) raised %r", position, stage.name, exc)
                error = exc


def run_stages(stages: Sequence[Stage], context: Any, message: Any, *extra: Any) -> ChainRun:
    """Run *stages* against *message* and return the run state.

    The call returns once the synchronous part of the chain yields; stages
    that defer ``context.advance`` complete the run later.
    """

    run = ChainRun(stages, context, message, extra)
    run.start()
    return run


__all__ = ["ChainRun", "OnceCallback", "run_stages"]
