from __future__ import annotations

import pytest

from forms import (KEY, Field, FormError, ModuleSchema, add_item, condition_met, defaults, ensure_item_keys,
                   find_item, format_date, format_for_form, get_path, humanize, parse_for_submit, remove_item,
                   set_path, update_item, validate)

SCHEMA = ModuleSchema(
    key="sample",
    title="Samples",
    resource="employees",
    fields=(
        Field("name", required=True),
        Field("kind", "Kind", "select", options=("a", "b")),
        Field("code", "Code", required_when=("kind", "b"), visible_when=("kind", "b")),
        Field("count", "Count", "number", integer=True),
        Field("amount", "Amount", "number"),
        Field("due", "Due", "date"),
        Field("flag", "Flag", "bool"),
        Field("tags", "Tags", "tags"),
        Field("period", "Period", "select", options=(3, 6, 12)),
        Field("contact", "Contact", "group", fields=(Field("email", "Email", "email"), Field("phone"))),
        Field("items", "Items", "list", fields=(Field("label", "Label", required=True), Field("qty", kind="number"))),
    ),
)


def test_humanize():
    assert humanize("residencyExpiry") == "Residency Expiry"
    assert humanize("under_renewal") == "Under renewal"


def test_paths():
    obj = {}
    set_path(obj, "a.b.c", 1)
    assert obj == {"a": {"b": {"c": 1}}}
    assert get_path(obj, "a.b.c") == 1
    assert get_path(obj, "a.x", "dflt") == "dflt"


def test_defaults_are_blank_buffer():
    d = defaults(SCHEMA)
    assert d["name"] == ""
    assert d["flag"] is False
    assert d["tags"] == []
    assert d["contact"] == {"email": "", "phone": ""}
    assert d["items"] == []


def test_format_for_form_converts_wire_values():
    form = format_for_form(SCHEMA, {
        "name": "X", "count": 3.0, "due": "2024-05-01T00:00:00.000Z",
        "kind": {"_id": "a", "name": "A"}, "tags": ["x", ""], "items": [{"label": "one", "qty": 2}],
    })
    assert form["count"] == "3"
    assert form["due"] == "2024-05-01"
    assert form["kind"] == "a"
    assert form["tags"] == ["x"]
    assert form["items"][0]["label"] == "one"
    assert form["items"][0][KEY]
    assert form["contact"] == {"email": "", "phone": ""}


def test_format_for_form_maps_booleans_onto_select_options():
    flags = ModuleSchema(key="flags", title="Flags", resource="employees", fields=(
        Field("hasPasses", "Has Passes", "select", default="false", options=(("false", "No"), ("true", "Yes"))),
        Field("fleet", "Fleet", "select", default="no", options=(("no", "No"), ("yes", "Yes"))),
        Field("tier", "Tier", "select", options=("gold", "silver")),
    ))
    form = format_for_form(flags, {"hasPasses": True, "fleet": False, "tier": True})
    assert form == {"hasPasses": "true", "fleet": "no", "tier": "true"}
    assert condition_met(("hasPasses", "true"), form)


def test_format_date_rejects_garbage():
    assert format_date("not a date") == ""
    assert format_date(None) == ""


def test_parse_coerces_and_blanks_to_none():
    draft = defaults(SCHEMA)
    draft.update(name="N", count="4", amount="", due="", tags="a, b,,", period="6")
    payload = parse_for_submit(SCHEMA, draft)
    assert payload["count"] == 4
    assert payload["amount"] is None
    assert payload["due"] is None
    assert payload["tags"] == ["a", "b"]
    assert payload["period"] == 6
    assert "code" not in payload


def test_parse_rejects_unparseable_values():
    draft = defaults(SCHEMA)
    draft.update(name="N", count="2.5", amount="lots", due="31/12/2024")
    with pytest.raises(FormError) as info:
        parse_for_submit(SCHEMA, draft)
    assert set(info.value.errors) == {"count", "amount", "due"}
    assert info.value.summary().startswith("Please fix:")


def test_blank_list_rows_are_dropped():
    draft = defaults(SCHEMA)
    draft["name"] = "N"
    add_item(SCHEMA, draft, "items")
    add_item(SCHEMA, draft, "items", {"label": "kept", "qty": "1"})
    payload = parse_for_submit(SCHEMA, draft)
    assert payload["items"] == [{"label": "kept", "qty": 1}]


def test_validate_required_and_conditional():
    draft = defaults(SCHEMA)
    assert validate(SCHEMA, draft) == {"name": "Name is required"}
    draft.update(name="N", kind="b")
    assert "code" in validate(SCHEMA, draft)
    draft["code"] = "C1"
    assert validate(SCHEMA, draft) == {}


def test_validate_list_rows_by_key():
    draft = defaults(SCHEMA)
    draft["name"] = "N"
    key = add_item(SCHEMA, draft, "items", {"qty": "2"})
    assert validate(SCHEMA, draft) == {f"items[{key}].label": "Label is required"}


def test_email_check():
    draft = defaults(SCHEMA)
    draft.update(name="N", contact={"email": "nope", "phone": ""})
    with pytest.raises(FormError) as info:
        parse_for_submit(SCHEMA, draft)
    assert "contact.email" in info.value.errors


def test_condition_met():
    assert condition_met(None, {})
    assert condition_met(("kind", "b"), {"kind": "b"})
    assert condition_met(("kind", ("a", "b")), {"kind": "a"})
    assert not condition_met(("kind", "b"), {})


def test_keyed_items_survive_reordering():
    draft = defaults(SCHEMA)
    k1 = add_item(SCHEMA, draft, "items", {"label": "first"})
    k2 = add_item(SCHEMA, draft, "items", {"label": "second"})
    assert remove_item(draft, "items", k1)
    assert not remove_item(draft, "items", k1)
    assert update_item(draft, "items", k2, "qty", "9")
    assert find_item(draft, "items", k2)["qty"] == "9"
    assert [it["label"] for it in draft["items"]] == ["second"]


def test_add_item_on_non_list_field():
    with pytest.raises(KeyError):
        add_item(SCHEMA, defaults(SCHEMA), "name")


def test_ensure_item_keys():
    draft = {"items": [{"label": "x"}]}
    ensure_item_keys(draft, SCHEMA)
    assert draft["items"][0][KEY]


def test_unknown_kind_rejected():
    with pytest.raises(ValueError):
        Field("x", kind="colour")
