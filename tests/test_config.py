import os
from pathlib import Path

import pytest

from semantic_selectors.config import DEFAULTS, EngineConfig, load_config


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith("SELECTORS_"):
            monkeypatch.delenv(key)


def test_defaults_when_no_file(tmp_path):
    config = load_config(tmp_path / "missing.toml")
    assert config.ambiguity_margin == DEFAULTS["ambiguity_margin"]
    assert config.text_length_limit == 60
    assert config.stable_attributes == ("name", "aria-label", "role")
    assert config.mappings_dir == Path("mappings")
    assert config.event_log is None


def test_toml_table_and_env_override(tmp_path, monkeypatch):
    path = tmp_path / "selectors.toml"
    path.write_text(
        '[selectors]\nambiguity_margin = 0.3\ncontext_bonus = 40\nevent_log = "runs/events.jsonl"\n',
        encoding="utf-8",
    )
    monkeypatch.setenv("SELECTORS_CONTEXT_BONUS", "20")
    monkeypatch.setenv("SELECTORS_STABLE_ATTRIBUTES", "name, placeholder")

    config = load_config(path)
    assert config.ambiguity_margin == pytest.approx(0.3)
    assert config.context_bonus == pytest.approx(20.0)
    assert config.stable_attributes == ("name", "placeholder")
    assert config.event_log == Path("runs/events.jsonl")


def test_unknown_keys_are_ignored():
    config = EngineConfig.from_mapping({"ambiguity_margin": "0.25", "unrelated": 1})
    assert config.ambiguity_margin == pytest.approx(0.25)


@pytest.mark.parametrize(
    "overrides",
    [{"ambiguity_margin": 1.5}, {"text_length_limit": 0}, {"context_bonus": -1}],
)
def test_invalid_values_are_rejected(overrides):
    with pytest.raises(ValueError):
        EngineConfig.from_mapping(overrides)
