"""Execution context shared by the stages of one run."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from stagechain.errors import ChainRunError


class ChainContext:
    """Mutable bag of state handed to every stage of a run.

    The caller supplies ``done`` before the run starts. The executor installs
    ``advance`` and replaces ``done`` with a guarded wrapper. Any other keyword
    becomes an attribute, and stages are free to attach more fields for the
    stages that follow them.
    """

    def __init__(
        self,
        done: Callable[..., Any],
        *,
        log: Optional[logging.Logger] = None,
        run_id: str = "",
        timestamp: Optional[datetime] = None,
        **fields: Any,
    ) -> None:
        self.done = done
        self.log = log or logging.getLogger("stagechain.run")
        self.run_id = run_id
        self.timestamp = timestamp or datetime.now(timezone.utc)
        self.advance: Callable[..., Any] = _not_running
        for key, value in fields.items():
            setattr(self, key, value)

    def __repr__(self) -> str:
        fields = ", ".join(
            f"{key}={value!r}"
            for key, value in vars(self).items()
            if key not in {"done", "advance", "log"}
        )
        return f"ChainContext({fields})"


def _not_running(error: Any = None) -> None:
    raise ChainRunError("advance() called on a context that is not part of a run")


__all__ = ["ChainContext"]
