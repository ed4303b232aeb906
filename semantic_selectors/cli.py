"""Command line interface for resolving element descriptions."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple

import requests
from pydantic import ValidationError

from .catalog import list_keys, selector_map, suggest_keys
from .config import load_config
from .engine import ResolutionEngine
from .errors import ErrorCode, MappingError, ResolutionError
from .events import ResolutionEventLog
from .mapping import load_mapping_dir
from .naming import enrich_record

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_AMBIGUOUS = 3
EXIT_CONFIG = 4

_EXIT_BY_CODE = {
    ErrorCode.NOT_FOUND: EXIT_NOT_FOUND,
    ErrorCode.AMBIGUOUS: EXIT_AMBIGUOUS,
    ErrorCode.STORE_EMPTY: EXIT_CONFIG,
    ErrorCode.INVALID_MAPPING: EXIT_CONFIG,
}
_EXIT_BY_STATUS = {404: EXIT_NOT_FOUND, 409: EXIT_AMBIGUOUS, 503: EXIT_CONFIG}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="semantic-selectors",
        description="Resolve human-readable element descriptions to stable locators",
    )
    parser.add_argument("--mappings", type=Path, help="Directory of JSON mapping files")
    parser.add_argument("--config", type=Path, help="Path to a selectors.toml file")
    parser.add_argument("--server", help="Use a running selector service instead of local mappings")
    parser.add_argument("--events", type=Path, help="Append resolution events to this JSONL file")
    parser.add_argument(
        "--enrich",
        action="store_true",
        help="Add rule-based alternative names before resolving",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    commands = parser.add_subparsers(dest="command", required=True)

    resolve = commands.add_parser("resolve", help="Resolve a query to a locator")
    resolve.add_argument("query")
    resolve.add_argument("--context", help="Feature context to scope the search")

    keys = commands.add_parser("keys", help="List known element keys")
    keys.add_argument("--context", help="Only list keys of this feature")

    suggest = commands.add_parser("suggest", help="Suggest keys for a description")
    suggest.add_argument("description")
    suggest.add_argument("--limit", type=int, default=10)

    selectors = commands.add_parser("selectors", help="Print the key to selector map")
    selectors.add_argument("--context", help="Only include this feature")
    return parser


def _print(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def build_engine(
    mappings: Optional[Path] = None,
    config_path: Optional[Path] = None,
    events: Optional[Path] = None,
    enrich: bool = False,
) -> ResolutionEngine:
    config = load_config(config_path)
    event_path = events or config.event_log
    engine = ResolutionEngine(
        config=config,
        event_log=ResolutionEventLog(event_path) if event_path else None,
    )
    load_mapping_dir(engine.store, mappings or config.mappings_dir)
    if enrich:
        for context in engine.store.contexts():
            engine.load(context, [enrich_record(r) for r in engine.store.query(context)])
    return engine


def run_local(args: argparse.Namespace) -> int:
    try:
        engine = build_engine(args.mappings, args.config, args.events, args.enrich)
    except MappingError as exc:
        _print({"error": exc.to_dict()})
        return EXIT_CONFIG
    except ValidationError as exc:
        _print({"error": {"code": ErrorCode.INVALID_MAPPING.value, "message": str(exc)}})
        return EXIT_CONFIG

    try:
        if args.command == "resolve":
            _print(engine.resolve(args.query, args.context).to_dict())
        elif args.command == "keys":
            _print([info.to_dict() for info in list_keys(engine.store, args.context)])
        elif args.command == "suggest":
            _print([info.to_dict() for info in suggest_keys(engine.store, args.description, args.limit)])
        else:
            _print(selector_map(engine.store, args.context, engine.synthesizer))
    except ResolutionError as exc:
        _print({"error": exc.to_dict()})
        return _EXIT_BY_CODE.get(exc.code, EXIT_NOT_FOUND)
    finally:
        if engine.event_log is not None:
            engine.event_log.close()
    return EXIT_OK


def _remote_request(args: argparse.Namespace) -> Tuple[str, str, Dict[str, Any]]:
    if args.command == "resolve":
        body: Dict[str, Any] = {"query": args.query}
        if args.context:
            body["context"] = args.context
        return "POST", "/resolve", {"json": body}
    if args.command == "suggest":
        return "GET", "/suggest", {"params": {"q": args.description, "limit": args.limit}}
    params = {"context": args.context} if args.context else {}
    return "GET", f"/{args.command}", {"params": params}


def run_remote(args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    method, path, kwargs = _remote_request(args)
    try:
        response = requests.request(method, f"{args.server.rstrip('/')}{path}", timeout=30, **kwargs)
    except requests.RequestException as exc:
        parser.error(f"Failed to reach selector service: {exc}")

    try:
        payload = response.json()
    except ValueError:
        parser.error(f"Selector service returned a non-JSON response ({response.status_code})")
    _print(payload)
    if response.ok:
        return EXIT_OK
    return _EXIT_BY_STATUS.get(response.status_code, EXIT_CONFIG)


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    if args.server:
        return run_remote(args, parser)
    return run_local(args)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
