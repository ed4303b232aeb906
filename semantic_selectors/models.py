"""Typed models for element records, queries and locators."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from .naming import derive_identifier

_SEPARATORS = re.compile(r"[\s\-]+")
_UNDERSCORES = re.compile(r"_+")


def normalize_key(value: str) -> str:
    """Lower-case ``value`` and treat whitespace, hyphens and underscores alike."""

    key = _SEPARATORS.sub("_", value.strip().lower())
    return _UNDERSCORES.sub("_", key).strip("_")


class MatchTier(str, Enum):
    EXACT = "EXACT"
    PREFIX = "PREFIX"
    CONTAINS = "CONTAINS"
    PATTERN = "PATTERN"
    WORD_OVERLAP = "WORD_OVERLAP"
    ALTERNATIVE_NAME = "ALTERNATIVE_NAME"


class LocatorStrategy(str, Enum):
    DATA_TESTID = "DATA_TESTID"
    ID = "ID"
    STABLE_ATTRIBUTE = "STABLE_ATTRIBUTE"
    TEXT = "TEXT"
    DOM_PATH = "DOM_PATH"


class ElementRecord(BaseModel):
    """One captured UI element, normalized once when it enters the store.

    Accepts both the persisted mapping shape (``tagName``, ``domPath``,
    ``alternativeNames``, ``featureContext``) and the raw extraction shape
    (``xpath``, ``innerText``, ``semanticKey``, ``featureName``, top-level
    ``id``/``classes``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    identifier: str = Field(validation_alias=AliasChoices("identifier", "semanticKey", "semantic_key"))
    tag_name: str = Field(
        alias="tagName",
        validation_alias=AliasChoices("tagName", "tag_name", "tag"),
    )
    attributes: Dict[str, str] = Field(default_factory=dict)
    text: str = Field(default="", validation_alias=AliasChoices("text", "innerText", "inner_text"))
    dom_path: str = Field(
        alias="domPath",
        validation_alias=AliasChoices("domPath", "dom_path", "xpath"),
    )
    alternative_names: Tuple[str, ...] = Field(
        default=(),
        alias="alternativeNames",
        validation_alias=AliasChoices("alternativeNames", "alternative_names"),
    )
    feature_context: str = Field(
        default="",
        alias="featureContext",
        validation_alias=AliasChoices("featureContext", "feature_context", "featureName"),
    )

    @model_validator(mode="before")
    @classmethod
    def _coerce_raw(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        data = dict(value)
        attributes = dict(data.get("attributes") or {})
        if data.get("id") and "id" not in attributes:
            attributes["id"] = data["id"]
        classes = data.get("classes")
        if classes and "class" not in attributes:
            attributes["class"] = " ".join(classes) if isinstance(classes, (list, tuple)) else str(classes)
        data["attributes"] = attributes
        if not any(data.get(key) for key in ("identifier", "semanticKey", "semantic_key")):
            data["identifier"] = derive_identifier(data)
        return data

    @field_validator("identifier")
    @classmethod
    def _normalize_identifier(cls, value: str) -> str:
        key = normalize_key(value)
        if not key:
            raise ValueError("identifier must not be empty")
        return key

    @field_validator("tag_name")
    @classmethod
    def _normalize_tag(cls, value: str) -> str:
        tag = value.strip().lower()
        if not tag:
            raise ValueError("tagName must not be empty")
        return tag

    @field_validator("attributes", mode="before")
    @classmethod
    def _normalize_attributes(cls, value: Any) -> Dict[str, str]:
        if not value:
            return {}
        return {str(k).strip().lower(): str(v) for k, v in dict(value).items() if v is not None}

    @field_validator("text", mode="before")
    @classmethod
    def _normalize_text(cls, value: Any) -> str:
        if value is None:
            return ""
        return " ".join(str(value).split())

    @field_validator("dom_path")
    @classmethod
    def _require_dom_path(cls, value: str) -> str:
        path = value.strip()
        if not path:
            raise ValueError("domPath must not be empty")
        return path

    @field_validator("alternative_names", mode="before")
    @classmethod
    def _normalize_alternatives(cls, value: Any) -> Tuple[str, ...]:
        if value is None:
            return ()
        if isinstance(value, str):
            value = [value]
        ordered = []
        seen = set()
        for item in value:
            name = " ".join(str(item).split())
            if not name or name.lower() in seen:
                continue
            ordered.append(name)
            seen.add(name.lower())
        return tuple(ordered)

    @field_validator("feature_context", mode="before")
    @classmethod
    def _normalize_context(cls, value: Any) -> str:
        return normalize_key(str(value)) if value else ""

    def attribute(self, name: str) -> str:
        return (self.attributes.get(name) or "").strip()

    def with_context(self, feature_context: str) -> "ElementRecord":
        return self.model_copy(update={"feature_context": normalize_key(feature_context)}, deep=True)

    def with_identifier(self, identifier: str) -> "ElementRecord":
        return self.model_copy(update={"identifier": normalize_key(identifier)}, deep=True)

    def to_dict(self) -> Dict[str, Any]:
        data = self.model_dump(by_alias=True)
        data["alternativeNames"] = list(self.alternative_names)
        return data


class Query(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    text: str
    context: Optional[str] = None

    @field_validator("text")
    @classmethod
    def _strip_text(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("query text must not be empty")
        return text

    @field_validator("context")
    @classmethod
    def _normalize_context(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return normalize_key(value) or None

    @property
    def key(self) -> str:
        return normalize_key(self.text)


class Locator(BaseModel):
    """Executable Playwright selector plus the strategy that produced it."""

    model_config = ConfigDict(frozen=True)

    expression: str
    strategy: LocatorStrategy

    def to_dict(self) -> Dict[str, Any]:
        return {"expression": self.expression, "strategy": self.strategy.value}


@dataclass(slots=True)
class ScoredCandidate:
    record: ElementRecord
    score: float
    matched_via: MatchTier
    context_bonus: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "identifier": self.record.identifier,
            "featureContext": self.record.feature_context,
            "score": round(self.score, 3),
            "matchedVia": self.matched_via.value,
        }
