"""Schema validation adapters for chains."""
from __future__ import annotations

from .schema import (
    ErrorDetail,
    FunctionValidator,
    JsonSchemaValidator,
    ValidationOutcome,
    Validator,
    as_validator,
    load_schema,
)
from .stage import validation_stage

__all__ = [
    "ErrorDetail",
    "FunctionValidator",
    "JsonSchemaValidator",
    "ValidationOutcome",
    "Validator",
    "as_validator",
    "load_schema",
    "validation_stage",
]
