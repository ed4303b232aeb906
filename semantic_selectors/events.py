"""Structured JSONL log of resolution outcomes."""

from __future__ import annotations

import json
import threading
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

TOP_CANDIDATES_LOGGED = 3


class ResolutionEventLog:
    """Writes one JSON line per ``resolve`` call."""

    def __init__(self, path: Path) -> None:
        self.path = path
        path.parent.mkdir(parents=True, exist_ok=True)
        self._events_file = path.open("a", encoding="utf-8")
        self._lock = threading.Lock()
        self._seq = 0

    def log_event(
        self,
        *,
        query: str,
        context: Optional[str],
        outcome: str,
        locator: Optional[Dict[str, Any]] = None,
        candidates: Optional[List[Dict[str, Any]]] = None,
        error: Optional[Dict[str, Any]] = None,
        fallback_to_global: bool = False,
    ) -> int:
        with self._lock:
            self._seq += 1
            payload = {
                "ts": time.time(),
                "seq": self._seq,
                "query": query,
                "context": context,
                "outcome": outcome,
                "locator": locator,
                "candidates": (candidates or [])[:TOP_CANDIDATES_LOGGED],
                "error": error,
                "fallback_to_global": fallback_to_global,
            }
            self._events_file.write(json.dumps(payload, ensure_ascii=False) + "\n")
            self._events_file.flush()
            return self._seq

    def close(self) -> None:
        self._events_file.close()


def read_events(path: Path) -> List[Dict[str, Any]]:
    with path.open("r", encoding="utf-8") as fh:
        return [json.loads(line) for line in fh if line.strip()]
