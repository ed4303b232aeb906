"""Key listings, keyword suggestions and selector maps over a store."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .models import ElementRecord
from .store import ElementRecordStore
from .synthesizer import LocatorSynthesizer

DESCRIPTION_TEXT_LIMIT = 50
SUGGESTION_LIMIT = 10
KEY_WORD_WEIGHT = 5
DESCRIPTION_WORD_WEIGHT = 3
MIN_SUGGESTION_WORD = 3


@dataclass(slots=True)
class KeyInfo:
    key: str
    description: str
    feature_context: str
    score: int = 0

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "key": self.key,
            "description": self.description,
            "featureContext": self.feature_context,
        }
        if self.score:
            payload["score"] = self.score
        return payload


def describe(record: ElementRecord) -> str:
    if record.text:
        text = record.text
        if len(text) > DESCRIPTION_TEXT_LIMIT:
            text = text[:DESCRIPTION_TEXT_LIMIT] + "..."
        description = f'{record.tag_name} with text "{text}"'
    else:
        description = f"{record.tag_name} element"
    if record.feature_context:
        description += f" (feature: {record.feature_context})"
    return description


def list_keys(store: ElementRecordStore, context: Optional[str] = None) -> List[KeyInfo]:
    """All identifiers with a short description, optionally for one feature."""

    return [
        KeyInfo(key=r.identifier, description=describe(r), feature_context=r.feature_context)
        for r in store.query(context)
    ]


def suggest_keys(store: ElementRecordStore, description: str, limit: int = SUGGESTION_LIMIT) -> List[KeyInfo]:
    """Rank keys by how many words of ``description`` they mention."""

    words = [w for w in description.lower().split() if len(w) >= MIN_SUGGESTION_WORD]
    suggestions: List[KeyInfo] = []
    for info in list_keys(store):
        key = info.key.lower()
        text = info.description.lower()
        score = 0
        for word in words:
            if word in key:
                score += KEY_WORD_WEIGHT
            if word in text:
                score += DESCRIPTION_WORD_WEIGHT
        if score > 0:
            info.score = score
            suggestions.append(info)
    suggestions.sort(key=lambda info: (-info.score, info.feature_context, info.key))
    return suggestions[: max(limit, 0)]


def selector_map(
    store: ElementRecordStore,
    context: Optional[str] = None,
    synthesizer: Optional[LocatorSynthesizer] = None,
) -> Dict[str, str]:
    """Map identifiers to locator expressions.

    Without a context, keys are prefixed with their feature so identical
    identifiers from different scopes do not overwrite each other.
    """

    synthesizer = synthesizer or LocatorSynthesizer()
    mapping: Dict[str, str] = {}
    for record in store.query(context):
        key = record.identifier if context else f"{record.feature_context}:{record.identifier}"
        mapping[key] = synthesizer.synthesize(record).expression
    return mapping


def format_keys(keys: List[KeyInfo]) -> str:
    if not keys:
        return "(No element keys loaded)"
    lines = []
    for info in keys:
        suffix = f" [score {info.score}]" if info.score else ""
        lines.append(f"{info.key}: {info.description}{suffix}")
    return "\n".join(lines)
