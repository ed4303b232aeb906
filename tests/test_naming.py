import pytest

from semantic_selectors.models import ElementRecord
from semantic_selectors.naming import derive_identifier, determine_type, enrich_record


@pytest.mark.parametrize(
    "raw, expected",
    [
        (
            {
                "tagName": "input",
                "attributes": {"type": "email", "placeholder": "Email address"},
                "domPath": "/html/body/form/input[1]",
                "featureContext": "login",
            },
            "login_email_input_email_address",
        ),
        (
            {"tagName": "a", "text": "Pricing", "domPath": "/html/body/nav/ul/li[2]/a"},
            "nav_nav_link_pricing",
        ),
        (
            {
                "tagName": "h1",
                "text": "Welcome back to the app",
                "url": "https://example.com/account/settings.html",
                "domPath": "/html/body/h1",
            },
            "settings_heading_welcome_back_to",
        ),
        (
            {"tagName": "select", "attributes": {"name": "country"}, "url": "https://example.com/", "domPath": "/x"},
            "homepage_dropdown_country",
        ),
    ],
)
def test_derive_identifier(raw, expected):
    assert derive_identifier(raw) == expected


@pytest.mark.parametrize(
    "text, expected",
    [("Cancel", "cancel"), ("Remove item", "delete"), ("Add to cart", "create"), ("Continue", "button")],
)
def test_button_actions(text, expected):
    assert determine_type({"tagName": "button", "text": text}) == expected


def test_hash_description_is_stable():
    raw = {"tagName": "div", "domPath": "/html/body/div"}
    first = derive_identifier(raw)
    assert first.startswith("ui_div_element_")
    assert len(first) == len("ui_div_element_") + 6
    assert derive_identifier(dict(raw)) == first


def test_enrich_record_appends_rule_based_names():
    record = ElementRecord.model_validate(
        {
            "identifier": "login_button_submit",
            "tagName": "button",
            "text": "Sign In",
            "attributes": {"aria-label": "Log in to your account"},
            "domPath": "/html/body/button",
            "alternativeNames": ["primary login"],
        }
    )
    enriched = enrich_record(record)
    assert enriched.alternative_names == (
        "primary login",
        "sign in",
        "sign in button",
        "log in to your account",
    )
    assert enriched.identifier == record.identifier
