"""Reading and writing persisted element mapping files.

Two JSON layouts are accepted:

* grouped: ``{"login": [record, ...], "checkout": [...]}``
* flat: ``[record, ...]`` as written by the extraction tool; the feature
  context comes from each record's ``featureContext``/``featureName`` and
  otherwise from the file name.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import MappingError
from .models import normalize_key
from .store import ElementRecordStore

log = logging.getLogger(__name__)

MappingGroups = Dict[str, List[Dict[str, Any]]]


def _require_objects(records: List[Any], source: Path) -> None:
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise MappingError(
                f"Record {index} in {source} is not an object",
                details={"file": str(source), "index": index},
            )


def _group_flat(records: List[Any], default_context: str, source: Path) -> MappingGroups:
    _require_objects(records, source)
    groups: MappingGroups = {}
    for record in records:
        context = record.get("featureContext") or record.get("featureName") or default_context
        groups.setdefault(normalize_key(str(context)), []).append(record)
    return groups


def parse_mapping(data: Any, *, source: Path, default_context: Optional[str] = None) -> MappingGroups:
    default = default_context or normalize_key(source.stem) or "default"
    if isinstance(data, list):
        return _group_flat(data, default, source)
    if isinstance(data, dict):
        groups: MappingGroups = {}
        for context, records in data.items():
            if not isinstance(records, list):
                raise MappingError(
                    f"Feature '{context}' in {source} must map to a list of records",
                    details={"file": str(source), "context": context},
                )
            scope = normalize_key(str(context))
            if not scope:
                raise MappingError(
                    f"Feature name '{context}' in {source} is empty after normalization",
                    details={"file": str(source), "context": context},
                )
            _require_objects(records, source)
            # the grouping key owns its records
            groups.setdefault(scope, []).extend(records)
        return groups
    raise MappingError(f"Unsupported mapping layout in {source}", details={"file": str(source)})


def load_mapping_file(path: Path, default_context: Optional[str] = None) -> MappingGroups:
    try:
        with path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except json.JSONDecodeError as exc:
        raise MappingError(f"Invalid JSON in {path}: {exc}", details={"file": str(path)}) from exc
    return parse_mapping(data, source=path, default_context=default_context)


def load_mapping_dir(store: ElementRecordStore, directory: Path) -> Dict[str, int]:
    """Load every ``*.json`` mapping under ``directory`` into ``store``.

    Records for the same feature spread over several files are merged before
    loading, since ``load`` replaces a scope.
    """

    if not directory.is_dir():
        raise MappingError(f"Mapping directory {directory} does not exist", details={"dir": str(directory)})

    merged: MappingGroups = {}
    files = sorted(directory.glob("*.json"))
    for path in files:
        for context, records in load_mapping_file(path).items():
            merged.setdefault(context, []).extend(records)
    log.info("Read %d mapping files from %s", len(files), directory)

    counts: Dict[str, int] = {}
    for context, records in merged.items():
        counts[context] = len(store.load(context, records))
    return counts


def dump_mapping(store: ElementRecordStore) -> MappingGroups:
    return {
        context: [record.to_dict() for record in store.query(context)]
        for context in store.contexts()
    }


def write_mapping(store: ElementRecordStore, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        json.dump(dump_mapping(store), fh, indent=2, ensure_ascii=False)
    return path
