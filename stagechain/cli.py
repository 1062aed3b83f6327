"""Command line interface for running messages through stagechain chains."""
from __future__ import annotations

import argparse
import json
import logging
import logging.config
import os
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from stagechain import __version__, bootstrap, create_context, registry
from stagechain.definition import build_chain, load_definition
from stagechain.errors import ChainError, InvalidInputError
from stagechain.settings import Settings
from stagechain.validation import as_validator

logger = logging.getLogger(__name__)


def parse_env_file(path: Path) -> Dict[str, str]:
    """Read ``KEY=value`` pairs, ignoring blanks, comments and malformed lines."""

    pairs: Dict[str, str] = {}
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        key, sep, value = line.partition("=")
        if line.startswith("#") or not sep or not key.strip():
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        pairs[key.strip()] = value
    return pairs


def load_environment() -> List[str]:
    """Apply ``ENV_FILE`` and ``./.env`` without overriding variables already set.

    Returns the names that were added to the environment.
    """

    paths = [Path(env_file)] if (env_file := os.getenv("ENV_FILE")) else []
    paths.append(Path(".env"))
    added: List[str] = []
    for path in filter(Path.exists, paths):
        for key, value in parse_env_file(path).items():
            if key not in os.environ:
                os.environ[key] = value
                added.append(key)
    return added


def configure_logging(level: str) -> None:
    """Configure logging from an INI file when present, basic configuration otherwise."""

    config_candidates = []
    if config_env := os.getenv("LOGGING_CONFIG"):
        config_candidates.append(Path(config_env))
    config_candidates.append(Path("logging.ini"))

    for config_path in config_candidates:
        if not config_path.exists():
            continue
        if config_path.suffix.lower() not in {".ini", ".cfg"}:
            logger.warning("Skipping unsupported logging config %s", config_path)
            continue
        try:
            logging.config.fileConfig(config_path, disable_existing_loggers=False)
            return
        except Exception as exc:  # pragma: no cover - safety net for config errors
            print(f"Failed to load logging config {config_path}: {exc}. Falling back to basic logging.")
            break

    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


bootstrap()


def _load_message(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        return json.loads(text)
    return yaml.safe_load(text)


def _describe_error(error: Any) -> Any:
    if error is None:
        return None
    if isinstance(error, InvalidInputError):
        return error.to_dict()
    return str(error)


def command_handlers(_: argparse.Namespace, __: Settings) -> int:
    print("Registered handlers:")
    for definition in registry.items():
        print(f"- {definition.name} [{definition.kind}]: {definition.description} ({definition.module})")
    return 0


def command_run(args: argparse.Namespace, settings: Settings) -> int:
    chain_path = Path(args.chain) if args.chain else settings.chain_file
    try:
        handler = build_chain(load_definition(chain_path)).listen()
        message = _load_message(Path(args.message))
    except (ChainError, OSError, ValueError, yaml.YAMLError) as exc:
        print(f"Error: {exc}")
        return 2

    finished = threading.Event()
    outcome: Dict[str, Any] = {}

    def done(error: Any = None, result: Any = None) -> None:
        outcome.update(error=error, result=result)
        finished.set()

    context = create_context(done)
    logger.info("Running %s through %d stage(s) (run_id=%s)", args.message, len(handler), context.run_id)
    handler(context, message)
    if not finished.wait(args.timeout):
        print(f"Error: chain did not complete within {args.timeout}s")
        return 1

    print(
        json.dumps(
            {
                "run_id": context.run_id,
                "error": _describe_error(outcome["error"]),
                "result": outcome["result"],
            },
            default=str,
            indent=2,
        )
    )
    return 1 if outcome["error"] is not None else 0


def command_check(args: argparse.Namespace, settings: Settings) -> int:
    try:
        validator = as_validator(settings.resolve_schema(args.schema))
        message = _load_message(Path(args.message))
    except (ChainError, OSError, ValueError, yaml.YAMLError) as exc:
        print(f"Error: {exc}")
        return 2
    outcome = validator.validate(message)
    if outcome.valid:
        print("valid")
        return 0
    print(f"invalid: {outcome.error.message}")
    for detail in outcome.error.details:
        print(f"  - {detail}")
    return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run messages through stagechain handler chains.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command")
    subparsers.required = True

    parser_handlers = subparsers.add_parser("handlers", help="List registered handlers")
    parser_handlers.set_defaults(func=command_handlers)

    parser_run = subparsers.add_parser("run", help="Run a message through a chain definition")
    parser_run.add_argument("message", help="JSON or YAML file holding the message")
    parser_run.add_argument("--chain", help="Chain definition file (defaults to STAGECHAIN_CHAIN_FILE)")
    parser_run.add_argument("--timeout", type=float, default=30.0, help="Seconds to wait for completion")
    parser_run.set_defaults(func=command_run)

    parser_check = subparsers.add_parser("check", help="Validate a message against a schema")
    parser_check.add_argument("message", help="JSON or YAML file holding the message")
    parser_check.add_argument("--schema", required=True, help="Schema file, relative to STAGECHAIN_SCHEMA_DIR if needed")
    parser_check.set_defaults(func=command_check)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    load_environment()
    settings = Settings.load()
    configure_logging(settings.log_level)
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args, settings)


if __name__ == "__main__":  # pragma: no cover - entry point for CLI usage
    raise SystemExit(main())
