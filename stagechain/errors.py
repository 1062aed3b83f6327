"""Exception types raised by the stagechain runtime."""
from __future__ import annotations

import json
from typing import Any, Dict


class ChainError(RuntimeError):
    """Base class for stagechain failures."""


class ChainBuildError(ChainError):
    """Raised when a chain is assembled with invalid arguments."""


class ChainRunError(ChainError):
    """Raised when a run cannot start, e.g. the context has no ``done`` callback."""


class SchemaError(ChainError):
    """Raised when a schema cannot be loaded or is not a valid JSON Schema."""


class ChainDefinitionError(ChainError):
    """Raised when a YAML chain definition cannot be loaded or built."""


class InvalidInputError(ChainError):
    """Error value produced by a validation stage for a rejected message.

    ``details`` and ``input`` hold JSON strings so the error can be logged or
    returned to a caller without further serialization.
    """

    def __init__(self, message: str, details: str, input: str) -> None:
        super().__init__(message)
        self.message = message
        self.details = details
        self.input = input

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "details": self.details, "input": self.input}

    def detail_list(self) -> Any:
        """Return ``details`` decoded back into Python objects."""

        return json.loads(self.details)

    def __repr__(self) -> str:
        return f"InvalidInputError(message={self.message!r}, input={self.input!r})"


__all__ = [
    "ChainBuildError",
    "ChainDefinitionError",
    "ChainError",
    "ChainRunError",
    "InvalidInputError",
    "SchemaError",
]
