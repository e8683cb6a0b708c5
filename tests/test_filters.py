from __future__ import annotations

import pytest

from filters import distinct_values, filter_records, make_memo_filter

RECORDS = [
    {"_id": "1", "name": "Jane Doe", "department": "Logistics", "status": "active",
     "employee": {"_id": "e1", "name": "Jane Doe"}, "tags": ["Safety", "Visa Required"]},
    {"_id": "2", "name": "Omar Ali", "department": "HR", "status": "on-leave",
     "employee": {"_id": "e2", "name": "Omar Ali"}, "tags": []},
    {"_id": "3", "name": "Sara Khan", "department": "Logistics", "status": "resigned", "employee": "e3"},
]


def test_empty_criteria_returns_everything():
    assert filter_records(RECORDS) == RECORDS
    assert filter_records(RECORDS, "  ", ("name",), {"status": "all"}) == RECORDS


def test_term_is_case_insensitive_substring():
    out = filter_records(RECORDS, "DOE", ("name",))
    assert [r["_id"] for r in out] == ["1"]


def test_term_matches_populated_reference_names_and_lists():
    assert [r["_id"] for r in filter_records(RECORDS, "omar", ("employee.name",))] == ["2"]
    assert [r["_id"] for r in filter_records(RECORDS, "visa", ("tags",))] == ["1"]


def test_exact_filters_are_anded_with_term():
    out = filter_records(RECORDS, "a", ("name",), {"department": "Logistics", "status": "resigned"})
    assert [r["_id"] for r in out] == ["3"]
    assert filter_records(RECORDS, "", (), {"department": "Finance"}) == []


def test_exact_filter_on_reference_id():
    out = filter_records(RECORDS, "", (), {"employee": "e2"})
    assert [r["_id"] for r in out] == ["2"]


def test_distinct_values_sorted_without_blanks():
    assert distinct_values(RECORDS, "department") == ["HR", "Logistics"]
    assert distinct_values(RECORDS + [{"department": ""}], "department") == ["HR", "Logistics"]


def test_memo_filter_reuses_result_until_inputs_change():
    memo = make_memo_filter()
    first = memo(RECORDS, "jane", ("name",))
    assert memo(RECORDS, "JANE ", ("name",)) is first
    other = memo(RECORDS, "omar", ("name",))
    assert other is not first and [r["_id"] for r in other] == ["2"]
    assert memo([dict(r) for r in RECORDS], "omar", ("name",)) is other
    changed = [dict(r) for r in RECORDS]
    changed[1]["name"] = "Omar Saleh"
    fresh = memo(changed, "omar", ("name",))
    assert fresh is not other and fresh[0]["name"] == "Omar Saleh"


def _satisfies(rec, term, fields, exact):
    texts = [str(rec.get(f) or "").lower() for f in fields]
    if term and not any(term in t for t in texts):
        return False
    return all(str(rec.get(k)) == v for k, v in exact.items() if v not in (None, "", "all"))


@pytest.mark.parametrize("term,fields,exact", [
    ("", (), {}),
    ("a", ("name",), {}),
    ("o", ("name", "department"), {"status": "active"}),
    ("", (), {"department": "Logistics"}),
    ("zzz", ("name",), {"department": "all"}),
    ("log", ("department",), {"status": "resigned"}),
])
def test_filter_result_is_subset_satisfying_every_predicate(term, fields, exact):
    out = filter_records(RECORDS, term, fields, exact)
    assert all(any(r is src for src in RECORDS) for r in out)
    assert all(_satisfies(r, term, fields, exact) for r in out)
    assert len(out) == sum(_satisfies(r, term, fields, exact) for r in RECORDS)
