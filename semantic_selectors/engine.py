"""Resolution engine: store lookup, scoring, ambiguity check, locator synthesis."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .ambiguity import AmbiguityDetector, Ambiguous
from .config import EngineConfig
from .errors import AmbiguousSelectorError, ResolutionError, SelectorNotFoundError, StoreEmptyError
from .events import ResolutionEventLog
from .models import ElementRecord, Locator, Query, ScoredCandidate
from .scorer import CandidateScorer
from .store import ElementRecordStore, RecordLike
from .synthesizer import LocatorSynthesizer

log = logging.getLogger(__name__)


@dataclass(slots=True)
class Resolution:
    """Result of resolving a query to a single element."""

    query: Query
    locator: Locator
    candidate: ScoredCandidate
    candidates: List[ScoredCandidate] = field(default_factory=list)
    fallback_to_global: bool = False

    @property
    def record(self) -> ElementRecord:
        return self.candidate.record

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query": self.query.text,
            "context": self.query.context,
            "identifier": self.record.identifier,
            "featureContext": self.record.feature_context,
            "locator": self.locator.to_dict(),
            "score": round(self.candidate.score, 3),
            "matchedVia": self.candidate.matched_via.value,
            "fallbackToGlobal": self.fallback_to_global,
            "candidates": [c.to_dict() for c in self.candidates],
        }


class ResolutionEngine:
    """Resolve natural-language or partial-key queries to executable locators."""

    def __init__(
        self,
        store: Optional[ElementRecordStore] = None,
        config: Optional[EngineConfig] = None,
        *,
        scorer: Optional[CandidateScorer] = None,
        detector: Optional[AmbiguityDetector] = None,
        synthesizer: Optional[LocatorSynthesizer] = None,
        event_log: Optional[ResolutionEventLog] = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.store = store if store is not None else ElementRecordStore()
        self.scorer = scorer or CandidateScorer(self.config)
        self.detector = detector or AmbiguityDetector(self.config)
        self.synthesizer = synthesizer or LocatorSynthesizer(self.config)
        self.event_log = event_log

    def load(self, feature_context: str, records: Iterable[RecordLike]) -> Tuple[ElementRecord, ...]:
        return self.store.load(feature_context, records)

    def rank(self, text: str, context: Optional[str] = None) -> Tuple[List[ScoredCandidate], bool]:
        """Return ranked candidates and whether the global fallback was used."""

        query = Query(text=text, context=context)
        return self._rank(query)

    def resolve(self, text: str, context: Optional[str] = None) -> Resolution:
        query = Query(text=text, context=context)
        try:
            resolution = self._resolve(query)
        except ResolutionError as exc:
            self._record(query, exc.code.value, error=exc.to_dict())
            raise
        self._record(
            query,
            "RESOLVED",
            locator=resolution.locator.to_dict(),
            candidates=[c.to_dict() for c in resolution.candidates],
            fallback_to_global=resolution.fallback_to_global,
        )
        return resolution

    def locator_for(self, identifier: str, context: Optional[str] = None) -> Optional[Locator]:
        record = self.store.get(identifier, context)
        return self.synthesizer.synthesize(record) if record else None

    def _resolve(self, query: Query) -> Resolution:
        if not self.store.is_loaded:
            raise StoreEmptyError(
                "No element records loaded; load a mapping before resolving",
                details={"query": query.text, "context": query.context},
            )

        candidates, fallback = self._rank(query)
        if not candidates:
            raise SelectorNotFoundError(
                f"No element matches '{query.text}'",
                details={"query": query.text, "context": query.context},
            )

        log.debug(
            "Top matches for %r: %s",
            query.text,
            ", ".join(f"{c.record.identifier} ({c.score:.1f})" for c in candidates[:3]),
        )

        decision = self.detector.evaluate(query, candidates)
        if isinstance(decision, Ambiguous):
            raise AmbiguousSelectorError(decision.report)

        winner = decision.winner
        locator = self.synthesizer.synthesize(winner.record)
        log.info(
            "Resolved %r to %s via %s (%s)",
            query.text,
            winner.record.identifier,
            winner.matched_via.value,
            locator.strategy.value,
        )
        return Resolution(
            query=query,
            locator=locator,
            candidate=winner,
            candidates=candidates,
            fallback_to_global=fallback,
        )

    def _rank(self, query: Query) -> Tuple[List[ScoredCandidate], bool]:
        if query.context:
            scoped = self.scorer.rank(query, self.store.query(query.context))
            if scoped:
                return scoped, False
            log.debug("No candidates in scope %s; falling back to global set", query.context)
            return self.scorer.rank(query, self.store.query()), True
        return self.scorer.rank(query, self.store.query()), False

    def _record(self, query: Query, outcome: str, **kwargs: Any) -> None:
        if self.event_log is None:
            return
        self.event_log.log_event(query=query.text, context=query.context, outcome=outcome, **kwargs)
