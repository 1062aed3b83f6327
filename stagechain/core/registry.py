"""Named handler registry used to assemble chains from definitions."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Iterator, List, Literal

HandlerKind = Literal["handler", "predicate", "error_handler"]
HANDLER_KINDS = ("handler", "predicate", "error_handler")


@dataclass(slots=True, frozen=True)
class HandlerDefinition:
    """Metadata about a registered handler."""

    name: str
    callable: Callable[..., Any]
    kind: str
    description: str
    module: str


class HandlerRegistry:
    """Keeps track of the handlers, predicates and error handlers by name."""

    def __init__(self) -> None:
        self._handlers: Dict[str, HandlerDefinition] = {}

    def register(
        self,
        name: str,
        func: Callable[..., Any],
        kind: HandlerKind = "handler",
        description: str = "",
    ) -> Callable[..., Any]:
        """Register *func* under *name* and return it for decorator usage."""

        if kind not in HANDLER_KINDS:
            raise ValueError(f"Unknown handler kind '{kind}'")
        if name in self._handlers:
            raise ValueError(f"Handler '{name}' is already registered")
        self._handlers[name] = HandlerDefinition(
            name=name,
            callable=func,
            kind=kind,
            description=description,
            module=func.__module__,
        )
        return func

    def get(self, name: str, kind: HandlerKind | None = None) -> HandlerDefinition:
        """Return the definition for *name*, optionally checking its kind."""

        try:
            definition = self._handlers[name]
        except KeyError as exc:
            raise KeyError(f"Handler '{name}' is not registered") from exc
        if kind is not None and definition.kind != kind:
            raise KeyError(f"Handler '{name}' is a {definition.kind}, not a {kind}")
        return definition

    def __contains__(self, name: str) -> bool:
        return name in self._handlers

    def __iter__(self) -> Iterator[HandlerDefinition]:
        return iter(self._handlers.values())

    def names(self) -> List[str]:
        """Return registered names preserving insertion order."""

        return list(self._handlers.keys())

    def items(self) -> Iterable[HandlerDefinition]:
        return list(self._handlers.values())

    def clear(self) -> None:
        self._handlers.clear()


registry = HandlerRegistry()


def register_handler(
    name: str, kind: HandlerKind = "handler", description: str = ""
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorator registering a handler in the default registry."""

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        return registry.register(name, func, kind=kind, description=description)

    return decorator
