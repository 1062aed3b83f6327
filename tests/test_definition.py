from __future__ import annotations

from pathlib import Path

import pytest

from stagechain.core.context import ChainContext
from stagechain.core.registry import HandlerRegistry
from stagechain.definition import build_chain, load_definition, parse_definition
from stagechain.errors import ChainDefinitionError, InvalidInputError


@pytest.fixture
def handlers() -> HandlerRegistry:
    registry = HandlerRegistry()

    def mark(ctx, msg):
        ctx.calls.append("mark")
        ctx.advance()

    def reply(ctx, msg):
        ctx.done(None, msg["payload"])

    def has_payload(ctx, msg):
        return "payload" in msg

    def fail(err, ctx, msg):
        ctx.done(err)

    registry.register("mark", mark)
    registry.register("reply", reply)
    registry.register("has_payload", has_payload, kind="predicate")
    registry.register("fail", fail, kind="error_handler")
    return registry


def _write_definition(tmp_path: Path) -> Path:
    (tmp_path / "schemas").mkdir()
    (tmp_path / "schemas" / "event.yaml").write_text(
        "type: object\nrequired: [event]\n", encoding="utf-8"
    )
    path = tmp_path / "chain.yaml"
    path.write_text(
        "validate: schemas/event.yaml\n"
        "stages:\n"
        "  - use: mark\n"
        "  - use_if: {predicate: has_payload, handler: reply}\n"
        "  - catch: fail\n",
        encoding="utf-8",
    )
    return path


def test_load_definition_resolves_schema_next_to_file(tmp_path: Path) -> None:
    definition = load_definition(_write_definition(tmp_path))

    assert definition.schema == tmp_path / "schemas" / "event.yaml"
    assert [item.kind for item in definition.stages] == ["use", "use_if", "catch"]
    assert definition.stages[1].predicate == "has_payload"
    assert definition.source == tmp_path / "chain.yaml"


def test_built_chain_runs_with_validation_first(tmp_path: Path, handlers: HandlerRegistry) -> None:
    handler = build_chain(load_definition(_write_definition(tmp_path)), handlers).listen()
    assert len(handler) == 4

    outcomes = []
    ok = ChainContext(lambda *args: outcomes.append(args), calls=[])
    handler(ok, {"event": "x", "payload": 7})
    assert ok.calls == ["mark"]

    rejected = ChainContext(lambda *args: outcomes.append(args), calls=[])
    handler(rejected, {"payload": 7})
    assert rejected.calls == []

    assert outcomes[0] == (None, 7)
    assert isinstance(outcomes[1][0], InvalidInputError)


@pytest.mark.parametrize(
    "payload, match",
    [
        ([], "must be a mapping"),
        ({"stages": "use"}, "must be a list"),
        ({"stages": [{"use": "a", "catch": "b"}]}, "exactly one"),
        ({"stages": [{"run": "a"}]}, "unknown key"),
        ({"stages": [{"use_if": {"handler": "a"}}]}, "requires 'predicate'"),
        ({"stages": [{"use": ""}]}, "requires a handler"),
        ({}, "does not define any stages"),
    ],
)
def test_parse_definition_rejects_malformed_payloads(payload, match) -> None:
    with pytest.raises(ChainDefinitionError, match=match):
        parse_definition(payload)


def test_build_chain_reports_unknown_handlers(handlers: HandlerRegistry) -> None:
    definition = parse_definition({"stages": [{"use": "missing"}]})
    with pytest.raises(ChainDefinitionError, match="missing"):
        build_chain(definition, handlers)

    wrong_kind = parse_definition({"stages": [{"catch": "mark"}]})
    with pytest.raises(ChainDefinitionError, match="not a error_handler"):
        build_chain(wrong_kind, handlers)


def test_build_chain_reports_bad_schema(tmp_path: Path, handlers: HandlerRegistry) -> None:
    definition = parse_definition({"validate": "missing.yaml", "stages": [{"use": "mark"}]}, tmp_path)
    with pytest.raises(ChainDefinitionError, match="schema unusable"):
        build_chain(definition, handlers)


def test_load_definition_errors(tmp_path: Path) -> None:
    with pytest.raises(ChainDefinitionError, match="not found"):
        load_definition(tmp_path / "nope.yaml")

    broken = tmp_path / "broken.yaml"
    broken.write_text("stages: [use: {\n", encoding="utf-8")
    with pytest.raises(ChainDefinitionError, match="Failed to parse"):
        load_definition(broken)
