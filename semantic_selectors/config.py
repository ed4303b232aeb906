"""Configuration loader for the selector resolution engine."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple


DEFAULT_DYNAMIC_ID_PATTERNS: Tuple[str, ...] = (
    r"^\d+$",
    r"^(?=.*\d)[0-9a-f]{8,}$",
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    r"^:r[0-9a-z]+:$",
    r"^j_?idt\d+",
    r"^(ember|react|vue|mui|radix|headlessui)[-_:]?[0-9a-z-]*\d",
    r"^[a-z]+[-_]\d{4,}$",
    r":\d+:",
)

DEFAULTS: Dict[str, Any] = {
    "ambiguity_margin": 0.2,
    "text_length_limit": 60,
    "context_bonus": 50.0,
    "min_token_length": 3,
    "stable_attributes": ("name", "aria-label", "role"),
    "dynamic_id_patterns": DEFAULT_DYNAMIC_ID_PATTERNS,
    "mappings_dir": "mappings",
    "event_log": None,
}

ENV_PREFIX = "SELECTORS_"


def _as_tuple(value: Any) -> Tuple[str, ...]:
    if isinstance(value, str):
        return tuple(item.strip() for item in value.split(",") if item.strip())
    return tuple(str(item) for item in value)


@dataclass(slots=True)
class EngineConfig:
    ambiguity_margin: float = DEFAULTS["ambiguity_margin"]
    text_length_limit: int = DEFAULTS["text_length_limit"]
    context_bonus: float = DEFAULTS["context_bonus"]
    min_token_length: int = DEFAULTS["min_token_length"]
    stable_attributes: Tuple[str, ...] = DEFAULTS["stable_attributes"]
    dynamic_id_patterns: Tuple[str, ...] = DEFAULTS["dynamic_id_patterns"]
    mappings_dir: Path = field(default_factory=lambda: Path(DEFAULTS["mappings_dir"]))
    event_log: Optional[Path] = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.ambiguity_margin < 1.0:
            raise ValueError("ambiguity_margin must be within [0, 1)")
        if self.text_length_limit < 1:
            raise ValueError("text_length_limit must be positive")
        if self.context_bonus < 0:
            raise ValueError("context_bonus must be >= 0")

    @classmethod
    def from_mapping(cls, mapping: Dict[str, Any]) -> "EngineConfig":
        data = dict(DEFAULTS)
        data.update({k: v for k, v in mapping.items() if k in DEFAULTS})
        event_log = data.get("event_log")
        return cls(
            ambiguity_margin=float(data["ambiguity_margin"]),
            text_length_limit=int(data["text_length_limit"]),
            context_bonus=float(data["context_bonus"]),
            min_token_length=int(data["min_token_length"]),
            stable_attributes=_as_tuple(data["stable_attributes"]),
            dynamic_id_patterns=_as_tuple(data["dynamic_id_patterns"]),
            mappings_dir=Path(data["mappings_dir"]),
            event_log=Path(event_log) if event_log else None,
        )


def _load_toml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("rb") as fh:
        return tomllib.load(fh)


def load_config(config_path: Path | None = None) -> EngineConfig:
    """Load configuration from environment, optional TOML file, and defaults.

    Environment variables win over the ``[selectors]`` table of the TOML
    file, which wins over :data:`DEFAULTS`.
    """

    env_map: Dict[str, Any] = {}
    for key, value in os.environ.items():
        if key.startswith(ENV_PREFIX):
            env_map[key[len(ENV_PREFIX):].lower()] = value

    file_map: Dict[str, Any] = {}
    path = config_path or Path("selectors.toml")
    if path.exists():
        file_map = _load_toml(path).get("selectors", {})

    merged = {**file_map, **env_map}
    return EngineConfig.from_mapping(merged)
