"""Core chain building and execution for the stagechain runtime."""
from __future__ import annotations

from .chain import Chain, ChainHandler
from .context import ChainContext
from .executor import ChainRun, OnceCallback, run_stages
from .registry import HandlerDefinition, HandlerRegistry, register_handler, registry
from .stage import Stage, StageKind

__all__ = [
    "Chain",
    "ChainContext",
    "ChainHandler",
    "ChainRun",
    "HandlerDefinition",
    "HandlerRegistry",
    "OnceCallback",
    "Stage",
    "StageKind",
    "register_handler",
    "registry",
    "run_stages",
]
