"""Rule-based naming for element records.

Used when the enrichment step did not assign an identifier, and by the
``--enrich`` CLI flag to add alternative names derived from attributes.
Identifiers follow the ``context_type_description`` pattern.
"""

from __future__ import annotations

import hashlib
import json
import re
from typing import TYPE_CHECKING, Any, Dict, List, Mapping
from urllib.parse import urlsplit

if TYPE_CHECKING:  # pragma: no cover
    from .models import ElementRecord

CONTAINER_HINTS = ("nav", "header", "footer", "sidebar", "main", "menu", "modal", "dialog", "form")
MAX_DESCRIPTION_WORDS = 3
DESCRIPTION_SOURCE_LIMIT = 30

_ACTION_WORDS = (
    (re.compile(r"submit|save|confirm|apply|\bok\b|\byes\b"), "submit"),
    (re.compile(r"cancel|close|dismiss|back|return"), "cancel"),
    (re.compile(r"delete|remove|clear"), "delete"),
    (re.compile(r"add|create|new|plus|\+"), "create"),
    (re.compile(r"edit|update|modify|change"), "edit"),
    (re.compile(r"search|find|filter|query"), "search"),
    (re.compile(r"download|export"), "download"),
    (re.compile(r"upload|import"), "upload"),
    (re.compile(r"view|show|display|open"), "view"),
    (re.compile(r"toggle|switch|enable|disable"), "toggle"),
)

_TYPE_WORDS = {
    "button": "button",
    "a": "link",
    "select": "dropdown",
    "textarea": "text area",
    "input": "field",
}


def _slug(value: str) -> str:
    cleaned = re.sub(r"[^a-z0-9\s]", "", value.lower()).strip()
    return re.sub(r"\s+", "_", cleaned)


def _attributes(data: Mapping[str, Any]) -> Dict[str, str]:
    attrs = {str(k).lower(): str(v) for k, v in (data.get("attributes") or {}).items() if v is not None}
    if data.get("id") and "id" not in attrs:
        attrs["id"] = str(data["id"])
    return attrs


def _dom_path(data: Mapping[str, Any]) -> str:
    return str(data.get("domPath") or data.get("dom_path") or data.get("xpath") or "")


def _text(data: Mapping[str, Any]) -> str:
    return " ".join(str(data.get("text") or data.get("innerText") or "").split())


def determine_context(data: Mapping[str, Any]) -> str:
    feature = data.get("featureContext") or data.get("featureName") or data.get("feature_context")
    if feature and str(feature).strip():
        return _slug(str(feature)) or "ui"

    url = data.get("url")
    if url:
        segments = [s for s in urlsplit(str(url)).path.split("/") if s]
        last = _slug(segments[-1].rsplit(".", 1)[0]) if segments else ""
        return "homepage" if last in ("", "index") else last

    parts = _dom_path(data).lower().split("/")
    # the element itself and its direct parent are not containers
    for part in reversed(parts[:-2]):
        for hint in CONTAINER_HINTS:
            if hint in part:
                return hint
    return "ui"


def determine_type(data: Mapping[str, Any]) -> str:
    tag = str(data.get("tagName") or data.get("tag_name") or data.get("tag") or "").lower()
    attrs = _attributes(data)
    input_type = attrs.get("type", "").lower()

    if tag == "button" or (tag == "input" and input_type in ("button", "submit")):
        text = _text(data).lower() or attrs.get("value", "").lower()
        for pattern, action in _ACTION_WORDS:
            if text and pattern.search(text):
                return action
        return "button"
    if tag == "a":
        path = _dom_path(data).lower()
        return "nav_link" if "nav" in path or "menu" in path else "link"
    if tag == "input":
        return f"{input_type or 'text'}_input"
    if re.fullmatch(r"h[1-6]", tag):
        return "heading"
    if tag == "select":
        return "dropdown"
    return tag or "element"


def determine_description(data: Mapping[str, Any]) -> str:
    text = _text(data)
    if text:
        words = _slug(text[:DESCRIPTION_SOURCE_LIMIT]).split("_")
        description = "_".join(w for w in words[:MAX_DESCRIPTION_WORDS] if w)
        if description:
            return description

    attrs = _attributes(data)
    for name in ("placeholder", "title", "aria-label", "name", "id"):
        description = _slug(attrs.get(name, ""))
        if description:
            return description

    digest = hashlib.sha256(json.dumps(attrs, sort_keys=True).encode("utf-8")).hexdigest()[:6]
    return f"element_{digest}"


def derive_identifier(data: Mapping[str, Any]) -> str:
    """Build a ``context_type_description`` identifier from a raw record."""

    return "_".join((determine_context(data), determine_type(data), determine_description(data)))


def alternative_names(record: "ElementRecord") -> List[str]:
    """Human-phrased names derived from a record's text and attributes."""

    names: List[str] = []
    type_word = _TYPE_WORDS.get(record.tag_name, "")
    if record.text:
        names.append(record.text.lower())
        if type_word:
            names.append(f"{record.text.lower()} {type_word}")
    for attr in ("aria-label", "placeholder", "title", "alt"):
        value = " ".join(record.attribute(attr).split()).lower()
        if value:
            names.append(value)
            if type_word and attr == "placeholder":
                names.append(f"{value} {type_word}")
    name_attr = record.attribute("name").replace("_", " ").replace("-", " ").lower()
    if name_attr and type_word:
        names.append(f"{name_attr} {type_word}")
    return names


def enrich_record(record: "ElementRecord") -> "ElementRecord":
    """Append rule-based alternative names after any enrichment-provided ones."""

    from .models import ElementRecord

    data = record.to_dict()
    data["alternativeNames"] = list(record.alternative_names) + alternative_names(record)
    return ElementRecord.model_validate(data)
