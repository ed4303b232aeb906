import pytest

from semantic_selectors.errors import MappingError
from semantic_selectors.models import ElementRecord
from semantic_selectors.store import ElementRecordStore


def _raw(identifier: str, **extra):
    data = {"identifier": identifier, "tagName": "button", "domPath": f"/html/body/{identifier}"}
    data.update(extra)
    return data


def test_reload_replaces_scope_instead_of_appending():
    store = ElementRecordStore()
    store.load("login", [_raw("login_button_submit"), _raw("login_link_forgot")])
    store.load("login", [_raw("login_button_submit"), _raw("login_link_forgot")])
    assert len(store) == 2

    store.load("login", [_raw("login_button_submit")])
    assert [r.identifier for r in store.query("login")] == ["login_button_submit"]


def test_query_is_scoped_by_context():
    store = ElementRecordStore()
    store.load("login", [_raw("login_button_submit")])
    store.load("checkout", [_raw("checkout_button_submit")])

    assert [r.identifier for r in store.query("login")] == ["login_button_submit"]
    assert [r.identifier for r in store.query("Login")] == ["login_button_submit"]
    assert {r.identifier for r in store.query()} == {"login_button_submit", "checkout_button_submit"}
    assert store.query("billing") == ()
    assert store.contexts() == ("login", "checkout")


def test_duplicate_identifiers_get_suffixes():
    store = ElementRecordStore()
    store.load("todo", [_raw("todo_button_delete"), _raw("todo_button_delete"), _raw("todo_button_delete")])
    identifiers = [r.identifier for r in store.query("todo")]
    assert identifiers == ["todo_button_delete", "todo_button_delete_2", "todo_button_delete_3"]


def test_load_assigns_scope_context_to_records():
    store = ElementRecordStore()
    record = ElementRecord.model_validate(_raw("x_button_y", featureContext="other"))
    store.load("login", [record, _raw("x_button_z", featureName="elsewhere")])
    assert {r.feature_context for r in store.query("login")} == {"login"}


def test_is_loaded_tracks_any_load_even_empty():
    store = ElementRecordStore()
    assert not store.is_loaded
    store.load("billing", [])
    assert store.is_loaded
    assert len(store) == 0
    store.clear()
    assert not store.is_loaded


def test_previous_snapshot_survives_reload():
    store = ElementRecordStore()
    store.load("login", [_raw("login_button_submit")])
    before = store.query("login")
    store.load("login", [_raw("login_button_cancel")])
    assert [r.identifier for r in before] == ["login_button_submit"]
    assert [r.identifier for r in store.query("login")] == ["login_button_cancel"]


def test_get_and_unload():
    store = ElementRecordStore()
    store.load("login", [_raw("login_button_submit")])
    assert store.get("Login Button Submit", "login").identifier == "login_button_submit"
    assert store.get("missing") is None
    store.unload("login")
    assert store.query("login") == ()


def test_empty_context_is_rejected():
    with pytest.raises(MappingError) as excinfo:
        ElementRecordStore().load("---", [])
    assert isinstance(excinfo.value, ValueError)
    assert excinfo.value.to_dict()["code"] == "INVALID_MAPPING"


def test_stored_records_do_not_share_state_with_loaded_objects():
    record = ElementRecord.model_validate(_raw("login_button_submit", attributes={"id": "ok"}))
    store = ElementRecordStore()
    store.load("login", [record, record])

    record.attributes["data-testid"] = "mutated"

    assert [r.attributes for r in store.query("login")] == [{"id": "ok"}, {"id": "ok"}]
