"""Locator synthesis with a fixed durability priority chain.

Priority:
 1) data-testid
 2) id (unless it looks auto-generated)
 3) stable attributes: name / aria-label / role (+ type)
 4) short visible text
 5) the structural DOM path captured at extraction time
"""

from __future__ import annotations

import re
from typing import Optional, Pattern, Sequence, Tuple

from .config import EngineConfig
from .models import ElementRecord, Locator, LocatorStrategy

_CSS_IDENTIFIER = re.compile(r"^-?[A-Za-z_][A-Za-z0-9_-]*$")


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _attr_selector(name: str, value: str) -> str:
    return f"[{name}={_quote(value)}]"


class LocatorSynthesizer:

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self.config = config or EngineConfig()
        self._dynamic_id_patterns: Tuple[Pattern[str], ...] = tuple(
            re.compile(pattern, re.IGNORECASE) for pattern in self.config.dynamic_id_patterns
        )

    def synthesize(self, record: ElementRecord) -> Locator:
        for build in (self._by_test_id, self._by_id, self._by_stable_attribute, self._by_text):
            locator = build(record)
            if locator is not None:
                return locator
        return self._by_dom_path(record)

    def looks_generated(self, id_value: str) -> bool:
        value = id_value.strip()
        return not value or any(pattern.search(value) for pattern in self._dynamic_id_patterns)

    def _by_test_id(self, record: ElementRecord) -> Optional[Locator]:
        test_id = record.attribute("data-testid")
        if not test_id:
            return None
        return Locator(expression=_attr_selector("data-testid", test_id), strategy=LocatorStrategy.DATA_TESTID)

    def _by_id(self, record: ElementRecord) -> Optional[Locator]:
        id_value = record.attribute("id")
        if not id_value or self.looks_generated(id_value):
            return None
        expression = f"#{id_value}" if _CSS_IDENTIFIER.match(id_value) else _attr_selector("id", id_value)
        return Locator(expression=expression, strategy=LocatorStrategy.ID)

    def _by_stable_attribute(self, record: ElementRecord) -> Optional[Locator]:
        attributes: Sequence[str] = self.config.stable_attributes
        for name in attributes:
            value = record.attribute(name)
            if not value:
                continue
            expression = record.tag_name + _attr_selector(name, value)
            input_type = record.attribute("type")
            if name == "role" and input_type:
                expression += _attr_selector("type", input_type)
            return Locator(expression=expression, strategy=LocatorStrategy.STABLE_ATTRIBUTE)
        return None

    def _by_text(self, record: ElementRecord) -> Optional[Locator]:
        text = record.text
        if not text or len(text) >= self.config.text_length_limit:
            return None
        return Locator(expression=f"{record.tag_name}:text-is({_quote(text)})", strategy=LocatorStrategy.TEXT)

    def _by_dom_path(self, record: ElementRecord) -> Locator:
        path = record.dom_path
        if path.startswith(("/", "(")) and not path.startswith("xpath="):
            path = f"xpath={path}"
        return Locator(expression=path, strategy=LocatorStrategy.DOM_PATH)
