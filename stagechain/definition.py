"""YAML chain definitions built from registered handlers."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence

import yaml

from stagechain.core.chain import Chain
from stagechain.core.registry import HandlerRegistry, registry as default_registry
from stagechain.errors import ChainDefinitionError, SchemaError

logger = logging.getLogger(__name__)

STAGE_KEYS = ("use", "use_if", "catch")


@dataclass(slots=True, frozen=True)
class StageEntry:
    """One entry of the ``stages`` list."""

    kind: str
    handler: str
    predicate: Optional[str] = None


@dataclass(slots=True, frozen=True)
class ChainDefinition:
    """Parsed chain definition."""

    stages: Sequence[StageEntry]
    schema: Optional[Path] = None
    source: Optional[Path] = None


def _parse_stage(entry: Any, position: int) -> StageEntry:
    if not isinstance(entry, Mapping) or len(entry) != 1:
        raise ChainDefinitionError(
            f"Stage #{position} must be a mapping with exactly one of {', '.join(STAGE_KEYS)}"
        )
    key, value = next(iter(entry.items()))
    if key not in STAGE_KEYS:
        raise ChainDefinitionError(f"Stage #{position} uses unknown key '{key}'")
    if key == "use_if":
        if not isinstance(value, Mapping) or not {"predicate", "handler"} <= set(value):
            raise ChainDefinitionError(
                f"Stage #{position}: 'use_if' requires 'predicate' and 'handler'"
            )
        return StageEntry(kind=key, handler=str(value["handler"]), predicate=str(value["predicate"]))
    if not value:
        raise ChainDefinitionError(f"Stage #{position}: '{key}' requires a handler name")
    return StageEntry(kind=key, handler=str(value))


def parse_definition(payload: Any, base_dir: Path | None = None) -> ChainDefinition:
    """Turn a decoded YAML document into a :class:`ChainDefinition`."""

    if not isinstance(payload, Mapping):
        raise ChainDefinitionError("Chain definition must be a mapping")
    entries = payload.get("stages") or []
    if not isinstance(entries, list):
        raise ChainDefinitionError("'stages' must be a list")
    stages: List[StageEntry] = [_parse_stage(entry, index) for index, entry in enumerate(entries, 1)]
    schema = None
    if payload.get("validate"):
        schema = Path(str(payload["validate"]))
        if base_dir is not None and not schema.is_absolute():
            schema = base_dir / schema
    if not stages and schema is None:
        raise ChainDefinitionError("Chain definition does not define any stages")
    return ChainDefinition(stages=tuple(stages), schema=schema)


def load_definition(path: Path) -> ChainDefinition:
    """Load the YAML chain definition located at *path*."""

    path = Path(path)
    if not path.exists():
        raise ChainDefinitionError(f"Chain definition not found at {path}")
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle) or {}
    except yaml.YAMLError as exc:
        raise ChainDefinitionError(f"Failed to parse chain definition: {exc}") from exc
    definition = parse_definition(payload, base_dir=path.parent)
    return ChainDefinition(stages=definition.stages, schema=definition.schema, source=path)


def build_chain(definition: ChainDefinition, handlers: HandlerRegistry | None = None) -> Chain:
    """Assemble a :class:`Chain` from *definition* using *handlers*."""

    if handlers is None:
        handlers = default_registry
    chain = Chain()
    try:
        for item in definition.stages:
            if item.kind == "use":
                chain.use(handlers.get(item.handler, "handler").callable)
            elif item.kind == "use_if":
                chain.use_if(
                    handlers.get(item.predicate, "predicate").callable,
                    handlers.get(item.handler, "handler").callable,
                )
            else:
                chain.catch(handlers.get(item.handler, "error_handler").callable)
        if definition.schema is not None:
            chain.validate(definition.schema)
    except KeyError as exc:
        raise ChainDefinitionError(str(exc.args[0])) from exc
    except SchemaError as exc:
        raise ChainDefinitionError(f"Chain schema unusable: {exc}") from exc
    logger.debug("Built chain with %d stage(s) from %s", len(chain), definition.source or "<memory>")
    return chain


__all__ = [
    "ChainDefinition",
    "StageEntry",
    "build_chain",
    "load_definition",
    "parse_definition",
]
