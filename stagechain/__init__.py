"""stagechain - sequential handler chains with error routing and a one-shot completion callback."""
from __future__ import annotations

from datetime import datetime, timezone
from importlib import metadata
from typing import Any, Callable

from stagechain.core import Chain, ChainContext, ChainHandler, Stage, StageKind, registry
from stagechain.errors import ChainBuildError, ChainError, ChainRunError, InvalidInputError

__all__ = [
    "__version__",
    "Chain",
    "ChainBuildError",
    "ChainContext",
    "ChainError",
    "ChainHandler",
    "ChainRunError",
    "InvalidInputError",
    "Stage",
    "StageKind",
    "bootstrap",
    "create_context",
    "registry",
]


try:
    __version__ = metadata.version(__name__)
except metadata.PackageNotFoundError:  # pragma: no cover - running from a source checkout
    __version__ = "0.0.0"


def bootstrap() -> None:
    """Import handler modules to ensure registration has occurred."""

    from stagechain import handlers  # noqa: F401


def create_context(done: Callable[..., Any], **fields: Any) -> ChainContext:
    """Construct a :class:`ChainContext` with a timestamp-based run id."""

    now = datetime.now(timezone.utc)
    fields.setdefault("run_id", now.strftime("%Y%m%d%H%M%S%f"))
    fields.setdefault("timestamp", now)
    return ChainContext(done, **fields)
