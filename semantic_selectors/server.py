"""HTTP front-end exposing the resolution engine."""

from __future__ import annotations

import logging
import os
import uuid
from pathlib import Path
from typing import Any, Dict

from flask import Flask, jsonify, request
from pydantic import ValidationError

from .catalog import list_keys, selector_map, suggest_keys
from .config import load_config
from .engine import ResolutionEngine
from .errors import ErrorCode, MappingError, ResolutionError
from .events import ResolutionEventLog
from .mapping import load_mapping_dir
from .models import normalize_key

app = Flask(__name__)
log = logging.getLogger(__name__)

_STATUS_BY_CODE = {
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.AMBIGUOUS: 409,
    ErrorCode.STORE_EMPTY: 503,
    ErrorCode.INVALID_MAPPING: 400,
}

_engine: ResolutionEngine | None = None


def _build_engine() -> ResolutionEngine:
    config = load_config(Path(os.getenv("SELECTORS_CONFIG", "selectors.toml")))
    event_log = ResolutionEventLog(config.event_log) if config.event_log else None
    engine = ResolutionEngine(config=config, event_log=event_log)
    if config.mappings_dir.is_dir():
        counts = load_mapping_dir(engine.store, config.mappings_dir)
        log.info("Loaded mappings for %d features from %s", len(counts), config.mappings_dir)
    else:
        log.warning("Mapping directory %s not found; starting with an empty store", config.mappings_dir)
    return engine


def _get_engine() -> ResolutionEngine:
    global _engine
    if _engine is None:
        _engine = _build_engine()
    return _engine


def _error_response(exc: ResolutionError):
    return jsonify({"error": exc.to_dict()}), _STATUS_BY_CODE.get(exc.code, 400)


@app.errorhandler(ResolutionError)
def handle_resolution_error(error: ResolutionError):
    return _error_response(error)


@app.errorhandler(ValidationError)
def handle_validation_error(error: ValidationError):
    correlation_id = str(uuid.uuid4())[:8]
    log.info("[%s] Rejected invalid payload: %s", correlation_id, error)
    details = [{"loc": list(e["loc"]), "msg": e["msg"]} for e in error.errors()]
    return jsonify({"error": {"code": "INVALID_REQUEST", "details": details}, "correlation_id": correlation_id}), 400


@app.get("/health")
def health():
    engine = _get_engine()
    return jsonify({"status": "ok", "features": list(engine.store.contexts()), "records": len(engine.store)})


@app.post("/mappings/<context>")
def load_mapping(context: str):
    data = request.get_json(silent=True)
    if not isinstance(data, list):
        raise MappingError("request body must be a JSON list of element records", details={"context": context})
    records = _get_engine().load(context, data)
    return jsonify({"context": normalize_key(context), "count": len(records)})


@app.post("/resolve")
def resolve():
    data: Dict[str, Any] = request.get_json(silent=True) or {}
    query = str(data.get("query", "")).strip()
    if not query:
        return jsonify({"error": {"code": "INVALID_REQUEST", "message": "query empty"}}), 400
    context = data.get("context")
    resolution = _get_engine().resolve(query, str(context) if context else None)
    return jsonify(resolution.to_dict())


@app.get("/keys")
def keys():
    context = request.args.get("context") or None
    return jsonify([info.to_dict() for info in list_keys(_get_engine().store, context)])


@app.get("/suggest")
def suggest():
    description = (request.args.get("q") or "").strip()
    if not description:
        return jsonify({"error": {"code": "INVALID_REQUEST", "message": "q empty"}}), 400
    try:
        limit = int(request.args.get("limit", "10"))
    except ValueError:
        return jsonify({"error": {"code": "INVALID_REQUEST", "message": "limit must be an integer"}}), 400
    return jsonify([info.to_dict() for info in suggest_keys(_get_engine().store, description, limit)])


@app.get("/selectors")
def selectors():
    context = request.args.get("context") or None
    engine = _get_engine()
    return jsonify(selector_map(engine.store, context, engine.synthesizer))


def main() -> None:  # pragma: no cover - server entry point
    logging.basicConfig(level=logging.INFO)
    port = int(os.getenv("SELECTORS_PORT", "7100"))
    app.run(host=os.getenv("SELECTORS_HOST", "127.0.0.1"), port=port)


if __name__ == "__main__":  # pragma: no cover
    main()
