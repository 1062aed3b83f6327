"""Stage primitives for the stagechain runtime."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Protocol


class Handler(Protocol):
    """Callable protocol for a normal stage."""

    def __call__(self, context: Any, message: Any, *extra: Any) -> Any:
        """Process *message* and call ``context.advance`` or ``context.done``."""


class ErrorHandler(Protocol):
    """Callable protocol for an error-handling stage."""

    def __call__(self, error: Any, context: Any, message: Any, *extra: Any) -> Any:
        """Consume *error*, re-raise it via ``context.advance`` or finish the run."""


class Predicate(Protocol):
    """Callable protocol deciding whether an optional stage runs."""

    def __call__(self, context: Any, message: Any) -> bool:
        """Return ``True`` when the guarded handler should run."""


class StageKind(str, Enum):
    """Discriminant for the two stage variants."""

    NORMAL = "normal"
    ERROR_HANDLER = "error_handler"


@dataclass(slots=True, frozen=True)
class Stage:
    """One element of a chain: a handler plus its routing metadata."""

    handler: Any
    kind: StageKind = StageKind.NORMAL
    predicate: Optional[Predicate] = None

    def __post_init__(self) -> None:
        if not callable(self.handler):
            raise TypeError(f"Stage handler must be callable, got {self.handler!r}")
        if self.predicate is not None and not callable(self.predicate):
            raise TypeError(f"Stage predicate must be callable, got {self.predicate!r}")
        if self.predicate is not None and self.kind is StageKind.ERROR_HANDLER:
            raise ValueError("Error-handling stages cannot be optional")

    @classmethod
    def normal(cls, handler: Handler) -> "Stage":
        return cls(handler=handler)

    @classmethod
    def optional(cls, predicate: Predicate, handler: Handler) -> "Stage":
        return cls(handler=handler, predicate=predicate)

    @classmethod
    def error_handler(cls, handler: ErrorHandler) -> "Stage":
        return cls(handler=handler, kind=StageKind.ERROR_HANDLER)

    @property
    def is_error_handler(self) -> bool:
        return self.kind is StageKind.ERROR_HANDLER

    @property
    def is_optional(self) -> bool:
        return self.predicate is not None

    @property
    def name(self) -> str:
        """Best-effort label used in log messages."""

        return getattr(self.handler, "__qualname__", None) or repr(self.handler)
