from __future__ import annotations

import threading
from typing import Any, List, Tuple

import pytest

from stagechain.core.context import ChainContext


class DoneRecorder:
    """Terminal callback capturing every call it receives."""

    def __init__(self) -> None:
        self.calls: List[Tuple[Any, ...]] = []
        self.event = threading.Event()

    def __call__(self, *args: Any) -> None:
        self.calls.append(args)
        self.event.set()

    @property
    def error(self) -> Any:
        return self.calls[0][0] if self.calls and self.calls[0] else None

    def wait(self, timeout: float = 2.0) -> bool:
        return self.event.wait(timeout)


EVENT_SCHEMA = {
    "title": "event",
    "type": "object",
    "properties": {
        "event": {"type": "string", "enum": ["example"]},
        "payload": {
            "type": "object",
            "properties": {"text": {"type": "string"}},
        },
    },
    "required": ["event", "payload"],
}


@pytest.fixture
def done() -> DoneRecorder:
    return DoneRecorder()


@pytest.fixture
def context(done: DoneRecorder) -> ChainContext:
    """Create a fresh execution context recording the terminal callback."""

    return ChainContext(done, run_id="test-run", calls=[])


@pytest.fixture
def message() -> dict:
    return {"event": "example", "payload": {"text": "holamundo"}}


@pytest.fixture
def event_schema() -> dict:
    return dict(EVENT_SCHEMA)
