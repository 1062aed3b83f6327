"""Validator capability and its JSON Schema implementation."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, runtime_checkable

import yaml
from jsonschema.exceptions import SchemaError as JsonSchemaSchemaError
from jsonschema.exceptions import best_match
from jsonschema.validators import Draft202012Validator

from stagechain.errors import ChainBuildError, SchemaError


@dataclass(slots=True, frozen=True)
class ErrorDetail:
    """Why a message was rejected: a readable message plus structured details."""

    message: str
    details: List[Dict[str, Any]] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class ValidationOutcome:
    """Result of validating one message; ``error`` is ``None`` when valid."""

    error: Optional[ErrorDetail] = None

    @property
    def valid(self) -> bool:
        return self.error is None


@runtime_checkable
class Validator(Protocol):
    """Anything able to check a message and report an :class:`ErrorDetail`."""

    def validate(self, message: Any) -> ValidationOutcome:
        """Validate *message*."""


def load_schema(path: Path) -> Dict[str, Any]:
    """Load a YAML or JSON schema file and check it against Draft 2020-12."""

    path = Path(path)
    if not path.exists():
        raise SchemaError(f"Schema file not found at {path}")
    try:
        with path.open("r", encoding="utf-8") as handle:
            schema = yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        raise SchemaError(f"Failed to parse schema {path}: {exc}") from exc
    if not isinstance(schema, Mapping):
        raise SchemaError(f"Schema {path} must contain a mapping at the top level")
    return check_schema(schema)


def check_schema(schema: Mapping[str, Any]) -> Dict[str, Any]:
    try:
        Draft202012Validator.check_schema(schema)
    except JsonSchemaSchemaError as exc:
        raise SchemaError(f"Invalid JSON Schema: {exc.message}") from exc
    return dict(schema)


class JsonSchemaValidator:
    """Validate messages with a Draft 2020-12 JSON Schema."""

    def __init__(self, schema: Mapping[str, Any]) -> None:
        self.schema = check_schema(schema)
        self._validator = Draft202012Validator(self.schema)

    @classmethod
    def from_file(cls, path: Path) -> "JsonSchemaValidator":
        return cls(load_schema(path))

    def validate(self, message: Any) -> ValidationOutcome:
        errors = list(self._validator.iter_errors(message))
        if not errors:
            return ValidationOutcome()
        primary = best_match(errors)
        details = [
            {
                "message": error.message,
                "path": list(error.absolute_path),
                "validator": str(error.validator),
            }
            for error in sorted(errors, key=lambda item: list(item.absolute_path))
        ]
        return ValidationOutcome(ErrorDetail(message=primary.message, details=details))

    def __repr__(self) -> str:
        return f"JsonSchemaValidator(title={self.schema.get('title')!r})"


class FunctionValidator:
    """Adapt a callable returning an outcome (or ``None``) to :class:`Validator`."""

    def __init__(self, func: Callable[[Any], Optional[ValidationOutcome]]) -> None:
        self.func = func

    def validate(self, message: Any) -> ValidationOutcome:
        return self.func(message) or ValidationOutcome()


def as_validator(schema_like: Any) -> Validator:
    """Coerce *schema_like* into an object honouring :class:`Validator`.

    Accepted forms, in order: an object with a ``validate`` method, a JSON
    Schema mapping, a path to a schema file, a plain callable.
    """

    if schema_like is None:
        raise ChainBuildError("schema should not be empty!")
    if isinstance(schema_like, Mapping):
        return JsonSchemaValidator(schema_like)
    if isinstance(schema_like, (str, Path)):
        return JsonSchemaValidator.from_file(Path(schema_like))
    if isinstance(schema_like, Validator):
        return schema_like
    if callable(schema_like):
        return FunctionValidator(schema_like)
    raise ChainBuildError(f"Unsupported schema type {type(schema_like).__name__}")


def serialize(value: Any) -> str:
    """JSON-encode *value*, falling back to ``str`` for unknown objects."""

    return json.dumps(value, default=str)


__all__ = [
    "ErrorDetail",
    "FunctionValidator",
    "JsonSchemaValidator",
    "ValidationOutcome",
    "Validator",
    "as_validator",
    "check_schema",
    "load_schema",
    "serialize",
]
