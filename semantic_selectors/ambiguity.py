"""Ambiguity detection over a ranked candidate list."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

from .config import EngineConfig
from .models import MatchTier, Query, ScoredCandidate
from .scorer import tokenize


@dataclass(slots=True)
class Suggestion:
    """A refined query that would single out one tied candidate."""

    text: str
    identifier: str
    context: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"text": self.text, "identifier": self.identifier}
        if self.context:
            payload["context"] = self.context
        return payload


@dataclass(slots=True)
class AmbiguityReport:
    query: str
    context: Optional[str]
    tied: List[ScoredCandidate]
    suggestions: List[Suggestion] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query": self.query,
            "context": self.context,
            "tied": [candidate.to_dict() for candidate in self.tied],
            "suggestions": [suggestion.to_dict() for suggestion in self.suggestions],
        }


@dataclass(slots=True)
class Resolved:
    winner: ScoredCandidate


@dataclass(slots=True)
class Ambiguous:
    report: AmbiguityReport


Decision = Union[Resolved, Ambiguous]


class AmbiguityDetector:
    """Decides whether the top candidate clearly dominates the ranking."""

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self.config = config or EngineConfig()

    def evaluate(self, query: Query, candidates: Sequence[ScoredCandidate]) -> Decision:
        if not candidates:
            raise ValueError("evaluate requires at least one candidate")
        top = candidates[0]
        if len(candidates) == 1:
            return Resolved(top)

        runner_up = candidates[1]
        # a full-key match outranks every partial tier
        if top.matched_via is MatchTier.EXACT and runner_up.matched_via is not MatchTier.EXACT:
            return Resolved(top)

        # the context bonus is shared by every scoped candidate
        margin = self.config.ambiguity_margin * (top.score - top.context_bonus)
        if top.score - runner_up.score >= margin:
            return Resolved(top)

        tied = [c for c in candidates if top.score - c.score < margin]
        report = AmbiguityReport(
            query=query.text,
            context=query.context,
            tied=tied,
            suggestions=self.suggest(query, tied),
        )
        return Ambiguous(report)

    def suggest(self, query: Query, tied: Sequence[ScoredCandidate]) -> List[Suggestion]:
        contexts = {c.record.feature_context for c in tied}
        suggestions: List[Suggestion] = []
        seen = set()
        for candidate in tied:
            record = candidate.record
            if len(contexts) > 1 and record.feature_context:
                suggestion = Suggestion(
                    text=f"{record.feature_context} {query.text}",
                    identifier=record.identifier,
                    context=record.feature_context,
                )
            else:
                suggestion = self._by_alternative_name(query, candidate, tied) or Suggestion(
                    text=record.identifier,
                    identifier=record.identifier,
                    context=record.feature_context or None,
                )
            key = (suggestion.text, suggestion.context)
            if key in seen:
                continue
            seen.add(key)
            suggestions.append(suggestion)
        return suggestions

    def _by_alternative_name(
        self, query: Query, candidate: ScoredCandidate, tied: Sequence[ScoredCandidate]
    ) -> Optional[Suggestion]:
        shared = {
            name.lower()
            for other in tied
            if other is not candidate
            for name in other.record.alternative_names
        }
        distinct = [n for n in candidate.record.alternative_names if n.lower() not in shared]
        if not distinct:
            return None
        name = max(distinct, key=len)
        query_tokens = set(tokenize(query.text))
        if query_tokens <= set(tokenize(name)):
            text = name
        else:
            text = f"{query.text} {name}"
        return Suggestion(
            text=text,
            identifier=candidate.record.identifier,
            context=candidate.record.feature_context or None,
        )
