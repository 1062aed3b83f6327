"""Fluent builder assembling stages into a runnable chain."""
from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, List, Tuple, TypeVar

from stagechain.errors import ChainBuildError

from .executor import ChainRun, run_stages
from .stage import ErrorHandler, Handler, Predicate, Stage

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ChainHandler:
    """Reusable entry point over a frozen stage sequence."""

    def __init__(self, stages: Iterable[Stage]) -> None:
        self.stages: Tuple[Stage, ...] = tuple(stages)

    def __call__(self, context: Any, message: Any, *extra: Any) -> ChainRun:
        return run_stages(self.stages, context, message, *extra)

    def __len__(self) -> int:
        return len(self.stages)

    def __repr__(self) -> str:
        return f"ChainHandler(stages={len(self.stages)})"


class Chain:
    """Accumulate stages and hand back an invocable chain.

    Validation stages are always placed ahead of every other stage, whatever
    the order of the builder calls.
    """

    def __init__(self) -> None:
        self._stages: List[Stage] = []

    @property
    def stages(self) -> Tuple[Stage, ...]:
        return tuple(self._stages)

    def __len__(self) -> int:
        return len(self._stages)

    def add(self, stage: Stage) -> "Chain":
        self._stages.append(stage)
        return self

    def use(self, handler: Handler) -> "Chain":
        return self.add(Stage.normal(handler))

    def use_if(self, predicate: Predicate, handler: Handler) -> "Chain":
        return self.add(Stage.optional(predicate, handler))

    def catch(self, handler: ErrorHandler) -> "Chain":
        return self.add(Stage.error_handler(handler))

    def iterate(self, items: Iterable[T], factory: Callable[[T], Handler]) -> "Chain":
        for item in items:
            self.use(factory(item))
        return self

    def validate(self, schema: Any = None) -> "Chain":
        """Prepend a stage validating every message against *schema*.

        *schema* may be a validator object, a JSON Schema mapping, a path to a
        YAML/JSON schema file or a callable; see
        :func:`stagechain.validation.as_validator`.
        """

        if schema is None or (isinstance(schema, str) and not schema.strip()):
            raise ChainBuildError("schema should not be empty!")

        from stagechain.validation import validation_stage

        self._stages.insert(0, validation_stage(schema))
        logger.debug("Validation stage prepended (%d stage(s) total)", len(self._stages))
        return self

    def listen(self) -> ChainHandler:
        """Freeze the current stages into a reusable entry point."""

        return ChainHandler(self._stages)

    def run(self, context: Any, message: Any, *extra: Any) -> ChainRun:
        """Run the stages as they are at call time against *message*."""

        return run_stages(tuple(self._stages), context, message, *extra)


__all__ = ["Chain", "ChainHandler"]
