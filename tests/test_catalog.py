from semantic_selectors.catalog import describe, format_keys, list_keys, selector_map, suggest_keys
from semantic_selectors.models import ElementRecord


def test_list_keys_all_and_per_feature(engine):
    keys = list_keys(engine.store)
    assert [k.key for k in keys] == ["login_button_submit", "checkout_button_submit"]
    assert keys[0].description == 'button with text "Sign In" (feature: login)'

    login_only = list_keys(engine.store, "login")
    assert [k.key for k in login_only] == ["login_button_submit"]


def test_describe_truncates_long_text():
    record = ElementRecord.model_validate(
        {"identifier": "a_p_b", "tagName": "p", "text": "x" * 80, "domPath": "/html/body/p"}
    )
    assert describe(record) == f'p with text "{"x" * 50}..."'


def test_describe_without_text():
    record = ElementRecord.model_validate({"identifier": "a_img_b", "tagName": "img", "domPath": "/html/body/img"})
    assert describe(record) == "img element"


def test_suggest_keys_weights_key_matches_over_description(engine):
    suggestions = suggest_keys(engine.store, "login button")
    assert [(s.key, s.score) for s in suggestions] == [
        ("login_button_submit", 16),
        ("checkout_button_submit", 8),
    ]
    assert suggest_keys(engine.store, "login button", limit=1)[0].key == "login_button_submit"
    assert suggest_keys(engine.store, "xy") == []


def test_selector_map(engine):
    assert selector_map(engine.store, "login") == {"login_button_submit": 'button:text-is("Sign In")'}
    assert selector_map(engine.store) == {
        "login:login_button_submit": 'button:text-is("Sign In")',
        "checkout:checkout_button_submit": 'button:text-is("Place Order")',
    }


def test_format_keys(engine):
    assert format_keys([]) == "(No element keys loaded)"
    text = format_keys(suggest_keys(engine.store, "login"))
    assert text.startswith("login_button_submit: button with text")
    assert "[score 8]" in text
