"""Stage factory running a validator ahead of the rest of a chain."""
from __future__ import annotations

import logging
from typing import Any

from stagechain.core.stage import Stage
from stagechain.errors import InvalidInputError

from .schema import as_validator, serialize

logger = logging.getLogger(__name__)


def validation_stage(schema_like: Any) -> Stage:
    """Build a normal stage that advances with :class:`InvalidInputError` on failure."""

    validator = as_validator(schema_like)

    def validate_message(context: Any, message: Any, *_: Any) -> Any:
        outcome = validator.validate(message)
        if outcome.error is None:
            return context.advance()
        logger.info("Rejected input: %s", outcome.error.message)
        return context.advance(
            InvalidInputError(
                message=f"Invalid input, {outcome.error.message}",
                details=serialize(outcome.error.details),
                input=serialize(message),
            )
        )

    validate_message.__qualname__ = f"validate[{validator!r}]"
    return Stage.normal(validate_message)


__all__ = ["validation_stage"]
