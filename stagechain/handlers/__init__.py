"""Built-in handlers available to chain definitions."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from stagechain.core import register_handler


@register_handler("log_message", description="Log the incoming message and continue.")
def log_message(context: Any, message: Any, *_: Any) -> None:
    context.log.info("Received message: %r", message)
    context.advance()


@register_handler("respond", description="Finish the run with the message as the result.")
def respond(context: Any, message: Any, *_: Any) -> None:
    context.done(None, getattr(context, "result", message))


@register_handler("has_payload", kind="predicate", description="True when the message carries a 'payload' key.")
def has_payload(context: Any, message: Any) -> bool:
    del context
    return isinstance(message, Mapping) and message.get("payload") is not None


@register_handler("log_error", kind="error_handler", description="Log the error and finish the run with it.")
def log_error(error: Any, context: Any, message: Any, *_: Any) -> None:
    context.log.error("Chain failed: %s", error)
    context.done(error)


@register_handler("suppress_error", kind="error_handler", description="Log the error and continue without it.")
def suppress_error(error: Any, context: Any, message: Any, *_: Any) -> None:
    context.log.warning("Suppressed error: %s", error)
    context.advance()


__all__ = ["has_payload", "log_error", "log_message", "respond", "suppress_error"]
