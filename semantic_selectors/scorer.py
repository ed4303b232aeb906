"""Candidate scoring for natural-language and partial-key queries."""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Tuple

from .config import EngineConfig
from .models import ElementRecord, MatchTier, Query, ScoredCandidate, normalize_key

EXACT_SCORE = 100.0
CONTEXT_PREFIXED_EXACT_SCORE = 95.0
PREFIX_SCORE = 85.0
CONTAINS_SCORE = 75.0
PATTERN_SCORE = 65.0
WORD_OVERLAP_MIN = 30.0
WORD_OVERLAP_MAX = 55.0
ALTERNATIVE_EXACT_MAX = 24.0
ALTERNATIVE_PARTIAL_MAX = 16.0
ALTERNATIVE_POSITION_DECAY = 2.0
ALTERNATIVE_MIN = 8.0
TEXT_BONUS = 3.0

_WORD = re.compile(r"[a-z0-9]+")
_IDENTIFIER_TIERS = (MatchTier.EXACT, MatchTier.PREFIX, MatchTier.CONTAINS, MatchTier.PATTERN)


def tokenize(text: str, min_length: int = 1) -> List[str]:
    """Lower-case word tokens with punctuation and separators stripped.

    Tokens shorter than ``min_length`` are dropped unless that would leave
    nothing, so short queries like ``"ok"`` still produce a token.
    """

    words = _WORD.findall(text.lower())
    long_words = [w for w in words if len(w) >= min_length]
    return list(dict.fromkeys(long_words or words))


def wildcard_regex(pattern: str) -> re.Pattern[str]:
    parts = [re.escape(part) for part in normalize_key(pattern).split("*")]
    return re.compile(".*".join(parts))


class CandidateScorer:
    """Assigns each record a tier and a comparable score for one query."""

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self.config = config or EngineConfig()

    def score(self, query: Query, record: ElementRecord) -> Optional[ScoredCandidate]:
        tokens = tokenize(query.text, self.config.min_token_length)
        match = self._match_identifier(query, record)
        if match is None:
            match = self._match_words(tokens, record)
        if match is None:
            match = self._match_alternatives(query, tokens, record)
        if match is None:
            return None

        tier, score = match
        if tier in _IDENTIFIER_TIERS and self._text_mentions(tokens, record):
            score += TEXT_BONUS
        bonus = 0.0
        if query.context and query.context == record.feature_context:
            bonus = self.config.context_bonus
        return ScoredCandidate(record=record, score=score + bonus, matched_via=tier, context_bonus=bonus)

    def rank(self, query: Query, records: Iterable[ElementRecord]) -> List[ScoredCandidate]:
        """Score ``records``, drop non-matches and sort best first.

        Ties are broken by feature context and identifier so repeated calls
        over the same records return the same order.
        """

        scored = [c for c in (self.score(query, r) for r in records) if c is not None]
        scored.sort(key=lambda c: (-c.score, c.record.feature_context, c.record.identifier))
        return scored

    def _match_identifier(self, query: Query, record: ElementRecord) -> Optional[Tuple[MatchTier, float]]:
        key = query.key
        identifier = record.identifier
        if not key:
            return None
        if "*" in key:
            if wildcard_regex(key).fullmatch(identifier):
                return MatchTier.PATTERN, PATTERN_SCORE
            return None
        if identifier == key:
            return MatchTier.EXACT, EXACT_SCORE
        if query.context and identifier == f"{query.context}_{key}":
            return MatchTier.EXACT, CONTEXT_PREFIXED_EXACT_SCORE
        if identifier.startswith(key):
            return MatchTier.PREFIX, PREFIX_SCORE
        if key in identifier:
            return MatchTier.CONTAINS, CONTAINS_SCORE
        return None

    def _match_words(self, tokens: List[str], record: ElementRecord) -> Optional[Tuple[MatchTier, float]]:
        if not tokens:
            return None
        haystack = f"{record.identifier} {record.text.lower()}"
        found = sum(1 for token in tokens if token in haystack)
        if not found:
            return None
        fraction = found / len(tokens)
        return MatchTier.WORD_OVERLAP, WORD_OVERLAP_MIN + (WORD_OVERLAP_MAX - WORD_OVERLAP_MIN) * fraction

    def _match_alternatives(
        self, query: Query, tokens: List[str], record: ElementRecord
    ) -> Optional[Tuple[MatchTier, float]]:
        wanted = " ".join(query.text.lower().split())
        best = 0.0
        for position, name in enumerate(record.alternative_names):
            candidate = name.lower()
            decay = position * ALTERNATIVE_POSITION_DECAY
            if candidate == wanted:
                score = max(ALTERNATIVE_EXACT_MAX - decay, ALTERNATIVE_MIN)
            elif tokens:
                name_tokens = set(tokenize(candidate))
                found = sum(1 for token in tokens if token in name_tokens)
                if not found:
                    continue
                score = max(ALTERNATIVE_PARTIAL_MAX - decay, ALTERNATIVE_MIN / 2) * found / len(tokens)
            else:
                continue
            best = max(best, score)
        if best <= 0.0:
            return None
        return MatchTier.ALTERNATIVE_NAME, best

    def _text_mentions(self, tokens: List[str], record: ElementRecord) -> bool:
        text = record.text.lower()
        return bool(text) and any(token in text for token in tokens)
