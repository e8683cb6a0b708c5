from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from forms import get_path

IGNORED = (None, "", "all")


def _texts(value) -> List[str]:
    if value is None:
        return []
    if isinstance(value, dict):
        # populated references match on their display name
        for k in ("name", "title", "description"):
            if value.get(k):
                return [str(value[k])]
        return []
    if isinstance(value, (list, tuple, set)):
        out: List[str] = []
        for v in value:
            out.extend(_texts(v))
        return out
    return [str(value)]


def _matches_term(record: dict, term: str, fields: Sequence[str]) -> bool:
    for path in fields:
        for text in _texts(get_path(record, path)):
            if term in text.lower():
                return True
    return False


def _matches_exact(record: dict, path: str, wanted) -> bool:
    value = get_path(record, path)
    if isinstance(value, dict):
        value = value.get("_id") or value.get("name")
    if isinstance(value, (list, tuple)):
        return any(str(v) == str(wanted) for v in value)
    return value is not None and str(value) == str(wanted)


def filter_records(records: Iterable[dict], term: str = "", fields: Sequence[str] = (),
                   exact: Optional[Dict[str, Any]] = None) -> List[dict]:
    """Case-insensitive search over ``fields`` AND exact dropdown filters."""
    records = list(records or [])
    term = (term or "").strip().lower()
    active = {k: v for k, v in (exact or {}).items() if v not in IGNORED}
    if not term and not active:
        return records
    out = []
    for rec in records:
        if not isinstance(rec, dict):
            continue
        if term and not _matches_term(rec, term, fields):
            continue
        if any(not _matches_exact(rec, path, wanted) for path, wanted in active.items()):
            continue
        out.append(rec)
    return out


def distinct_values(records: Iterable[dict], path: str) -> List[str]:
    seen = set()
    for rec in records or []:
        for text in _texts(get_path(rec, path)):
            if text.strip():
                seen.add(text)
    return sorted(seen, key=str.lower)


def make_memo_filter() -> Callable[..., List[dict]]:
    """filter_records that hands back the previous result when records and criteria are unchanged.

    Records are compared by value since the table store is deserialized afresh on every call.
    """
    cache: Dict[str, Any] = {"key": None, "records": None, "result": None}

    def _filter(records, term="", fields=(), exact=None):
        records = list(records or [])
        key = ((term or "").strip().lower(), tuple(fields), tuple(sorted((exact or {}).items(), key=lambda kv: kv[0])))
        if cache["key"] == key and cache["records"] == records:
            return cache["result"]
        result = filter_records(records, term, fields, exact)
        cache.update(key=key, records=records, result=result)
        return result

    return _filter
