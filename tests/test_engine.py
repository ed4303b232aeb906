import pytest

from semantic_selectors import (
    AmbiguousSelectorError,
    LocatorStrategy,
    MatchTier,
    ResolutionEngine,
    SelectorNotFoundError,
    StoreEmptyError,
)
from semantic_selectors.events import ResolutionEventLog, read_events


def test_partial_key_without_context_is_ambiguous(engine):
    with pytest.raises(AmbiguousSelectorError) as excinfo:
        engine.resolve("submit")

    report = excinfo.value.report
    assert {c.record.identifier for c in report.tied} == {"login_button_submit", "checkout_button_submit"}
    assert all(c.matched_via is MatchTier.CONTAINS for c in report.tied)
    assert excinfo.value.to_dict()["code"] == "AMBIGUOUS"


def test_context_resolves_the_tie(engine):
    resolution = engine.resolve("submit", "login")
    assert resolution.record.identifier == "login_button_submit"
    assert resolution.locator.strategy is LocatorStrategy.TEXT
    assert resolution.locator.expression == 'button:text-is("Sign In")'
    assert not resolution.fallback_to_global


def test_suggestions_are_actionable(engine):
    with pytest.raises(AmbiguousSelectorError) as excinfo:
        engine.resolve("submit")

    for suggestion in excinfo.value.report.suggestions:
        resolution = engine.resolve(suggestion.text, suggestion.context)
        assert resolution.record.identifier == suggestion.identifier


def test_data_testid_locator_for_scoped_query():
    engine = ResolutionEngine()
    engine.load(
        "profile",
        [
            {
                "identifier": "profile_button_save",
                "tagName": "button",
                "attributes": {"data-testid": "profile_save_btn"},
                "domPath": "/html/body/div/button",
            }
        ],
    )
    resolution = engine.resolve("save", "profile")
    assert resolution.locator.strategy is LocatorStrategy.DATA_TESTID
    assert "profile_save_btn" in resolution.locator.expression


def test_empty_scope_is_not_found():
    engine = ResolutionEngine()
    engine.load("billing", [])
    with pytest.raises(SelectorNotFoundError):
        engine.resolve("anything", "billing")


def test_resolve_before_any_load_is_store_empty():
    with pytest.raises(StoreEmptyError) as excinfo:
        ResolutionEngine().resolve("submit")
    assert excinfo.value.to_dict()["code"] == "STORE_EMPTY"


def test_no_match_is_not_found(engine):
    with pytest.raises(SelectorNotFoundError) as excinfo:
        engine.resolve("newsletter checkbox")
    assert isinstance(excinfo.value, LookupError)


def test_resolution_is_deterministic(engine):
    first = engine.resolve("place order").to_dict()
    second = engine.resolve("place order").to_dict()
    assert first == second


def test_identical_identifiers_are_narrowed_by_context():
    engine = ResolutionEngine()
    record = {"identifier": "button_submit", "tagName": "button", "domPath": "/html/body/button"}
    engine.load("login", [dict(record, attributes={"id": "login-submit"})])
    engine.load("checkout", [dict(record, attributes={"id": "checkout-submit"})])

    resolution = engine.resolve("button_submit", "login")
    assert resolution.locator.expression == "#login-submit"
    assert [c.record.feature_context for c in resolution.candidates] == ["login"]

    with pytest.raises(AmbiguousSelectorError):
        engine.resolve("button_submit")


def test_falls_back_to_global_set_when_scope_has_no_match(engine):
    resolution = engine.resolve("place order", "login")
    assert resolution.record.identifier == "checkout_button_submit"
    assert resolution.fallback_to_global
    assert resolution.to_dict()["fallbackToGlobal"] is True


def test_rank_exposes_ordered_candidates(engine):
    candidates, fallback = engine.rank("submit")
    assert [c.record.identifier for c in candidates] == ["checkout_button_submit", "login_button_submit"]
    assert not fallback


def test_locator_for_known_identifier(engine):
    locator = engine.locator_for("checkout_button_submit", "checkout")
    assert locator.expression == 'button:text-is("Place Order")'
    assert engine.locator_for("missing") is None


def test_event_log_records_outcomes(engine, tmp_path):
    path = tmp_path / "logs" / "events.jsonl"
    engine.event_log = ResolutionEventLog(path)
    engine.resolve("submit", "login")
    with pytest.raises(AmbiguousSelectorError):
        engine.resolve("submit")
    engine.event_log.close()

    events = read_events(path)
    assert [e["outcome"] for e in events] == ["RESOLVED", "AMBIGUOUS"]
    assert events[0]["locator"]["strategy"] == "TEXT"
    assert events[1]["error"]["code"] == "AMBIGUOUS"
    assert [e["seq"] for e in events] == [1, 2]


def _input(identifier):
    return {"identifier": identifier, "tagName": "input", "domPath": f"/html/body/form/{identifier}"}


@pytest.mark.parametrize("context", [None, "login"])
def test_full_key_wins_over_longer_keys_sharing_its_prefix(context):
    engine = ResolutionEngine()
    engine.load("login", [_input("login_email"), _input("login_email_confirm")])

    resolution = engine.resolve("login_email", context)

    assert resolution.record.identifier == "login_email"
    assert resolution.candidate.matched_via is MatchTier.EXACT
    assert [c.record.identifier for c in resolution.candidates] == ["login_email", "login_email_confirm"]


@pytest.mark.parametrize("context", [None, "login"])
def test_full_key_wins_over_keys_containing_it(context):
    engine = ResolutionEngine()
    engine.load("login", [_input("email"), _input("login_email_x")])

    resolution = engine.resolve("email", context)

    assert resolution.record.identifier == "email"
    assert resolution.candidate.matched_via is MatchTier.EXACT
