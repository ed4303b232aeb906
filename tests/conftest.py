"""Pytest configuration ensuring local packages are importable."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from semantic_selectors import ResolutionEngine  # noqa: E402


LOGIN_SUBMIT = {
    "identifier": "login_button_submit",
    "tagName": "button",
    "text": "Sign In",
    "domPath": "/html/body/form/button[1]",
    "featureContext": "login",
}

CHECKOUT_SUBMIT = {
    "identifier": "checkout_button_submit",
    "tagName": "button",
    "text": "Place Order",
    "domPath": "/html/body/main/button[2]",
    "featureContext": "checkout",
}


@pytest.fixture
def engine() -> ResolutionEngine:
    engine = ResolutionEngine()
    engine.load("login", [LOGIN_SUBMIT])
    engine.load("checkout", [CHECKOUT_SUBMIT])
    return engine
