"""In-memory element record store grouped by feature context."""

from __future__ import annotations

import logging
import threading
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from .errors import MappingError
from .models import ElementRecord, normalize_key

log = logging.getLogger(__name__)

RecordLike = Union[ElementRecord, Mapping[str, Any]]


def normalize_record(raw: RecordLike, feature_context: str) -> ElementRecord:
    """Validate ``raw`` into an :class:`ElementRecord` owned by ``feature_context``."""

    if isinstance(raw, ElementRecord):
        return raw.with_context(feature_context)
    data = dict(raw)
    data["featureContext"] = feature_context
    data.pop("featureName", None)
    data.pop("feature_context", None)
    return ElementRecord.model_validate(data)


class ElementRecordStore:
    """Keeps immutable record snapshots per feature context.

    ``load`` builds a complete replacement scope and swaps it in under a lock,
    so readers holding the previous snapshot never observe a half-loaded
    scope.
    """

    def __init__(self) -> None:
        self._scopes: Mapping[str, Tuple[ElementRecord, ...]] = MappingProxyType({})
        self._lock = threading.Lock()
        self._loaded = False

    def load(self, feature_context: str, records: Iterable[RecordLike]) -> Tuple[ElementRecord, ...]:
        context = normalize_key(feature_context)
        if not context:
            raise MappingError(
                f"Feature context '{feature_context}' is empty after normalization",
                details={"context": feature_context},
            )

        scope: Dict[str, ElementRecord] = {}
        for raw in records:
            record = normalize_record(raw, context)
            identifier = record.identifier
            if identifier in scope:
                suffix = 2
                while f"{identifier}_{suffix}" in scope:
                    suffix += 1
                log.warning(
                    "Duplicate identifier %s in scope %s; storing as %s_%d",
                    identifier,
                    context,
                    identifier,
                    suffix,
                )
                record = record.with_identifier(f"{identifier}_{suffix}")
            scope[record.identifier] = record

        snapshot = tuple(scope.values())
        with self._lock:
            scopes = dict(self._scopes)
            scopes[context] = snapshot
            self._scopes = MappingProxyType(scopes)
            self._loaded = True
        log.debug("Loaded %d records into scope %s", len(snapshot), context)
        return snapshot

    def unload(self, feature_context: str) -> None:
        context = normalize_key(feature_context)
        with self._lock:
            scopes = dict(self._scopes)
            scopes.pop(context, None)
            self._scopes = MappingProxyType(scopes)

    def clear(self) -> None:
        with self._lock:
            self._scopes = MappingProxyType({})
            self._loaded = False

    def query(self, context: Optional[str] = None) -> Tuple[ElementRecord, ...]:
        scopes = self._scopes
        if context is not None:
            return scopes.get(normalize_key(context), ())
        records: Tuple[ElementRecord, ...] = ()
        for snapshot in scopes.values():
            records += snapshot
        return records

    def get(self, identifier: str, context: Optional[str] = None) -> Optional[ElementRecord]:
        key = normalize_key(identifier)
        return next((r for r in self.query(context) if r.identifier == key), None)

    def contexts(self) -> Tuple[str, ...]:
        return tuple(self._scopes)

    @property
    def is_loaded(self) -> bool:
        """True once any ``load`` call completed, even for an empty scope."""
        return self._loaded

    def __len__(self) -> int:
        return sum(len(records) for records in self._scopes.values())

    def __contains__(self, context: str) -> bool:  # pragma: no cover - trivial
        return normalize_key(context) in self._scopes
