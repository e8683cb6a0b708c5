# forms.py: declarative field schemas + the form/API boundary
"""
Each admin module describes its record shape once as a tuple of ``Field``
objects. The same schema drives:

* ``defaults``          – the empty form buffer for "create"
* ``format_for_form``   – record -> form buffer (format-on-load)
* ``validate``          – required / conditionally-required checks
* ``parse_for_submit``  – form buffer -> wire payload (parse-on-submit)
* the generic form renderer in ``pages/crud_page.py``

Repeatable sub-records (passes, parties, approvals, contacts...) carry a
generated ``_key`` while they sit in a form buffer; add/remove/update address
them by that key, never by list position. The key is stripped on submit.
"""
from __future__ import annotations

import copy
import datetime as dt
import math
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

KINDS = ("text", "textarea", "email", "number", "date", "select", "bool", "tags", "file", "group", "list")
KEY = "_key"


class FormError(Exception):
    """Client-side validation/coercion failure; ``errors`` maps path -> message."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        super().__init__(self.summary())

    def summary(self) -> str:
        if not self.errors:
            return "Invalid form"
        return "Please fix: " + "; ".join(self.errors.values())


@dataclass(frozen=True)
class Field:
    name: str
    label: str = ""
    kind: str = "text"
    required: bool = False
    default: Any = None
    options: tuple = ()
    required_when: Optional[tuple] = None
    visible_when: Optional[tuple] = None
    fields: tuple = ()
    integer: bool = False
    source: str = ""
    help: str = ""

    def __post_init__(self):
        if self.kind not in KINDS:
            raise ValueError(f"Unknown field kind '{self.kind}' for {self.name}")

    @property
    def title(self) -> str:
        return self.label or humanize(self.name)


@dataclass
class ModuleSchema:
    key: str
    title: str
    resource: str
    fields: tuple
    noun: str = "Record"
    table_columns: tuple = ()
    search_fields: tuple = ()
    filter_fields: tuple = ()
    list_key: Optional[str] = None
    prepare: Optional[Callable[[dict, dict], dict]] = None
    export_columns: tuple = ()

    def field_at(self, path: str) -> Field:
        fields: Iterable[Field] = self.fields
        found = None
        for part in path.split("."):
            found = next((f for f in fields if f.name == part), None)
            if found is None:
                raise KeyError(f"{self.key}: no field '{path}'")
            fields = found.fields
        return found

    def columns_for_export(self) -> tuple:
        return self.export_columns or self.table_columns


# ---------------------- small helpers ----------------------

def humanize(name: str) -> str:
    out = []
    for i, ch in enumerate(str(name).replace("_", " ")):
        if ch.isupper() and i and out and out[-1] != " ":
            out.append(" ")
        out.append(ch)
    text = "".join(out).strip()
    return text[:1].upper() + text[1:]


def option_pairs(f: Field) -> List[Tuple[Any, str]]:
    pairs = []
    for opt in f.options:
        if isinstance(opt, (tuple, list)) and len(opt) == 2:
            pairs.append((opt[0], str(opt[1])))
        else:
            pairs.append((opt, humanize(opt) if isinstance(opt, str) else str(opt)))
    return pairs


def new_key() -> str:
    return uuid.uuid4().hex[:10]


def is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


def get_path(obj, path: str, default=None):
    cur = obj
    for part in path.split("."):
        if isinstance(cur, dict) and part in cur:
            cur = cur[part]
        else:
            return default
    return cur


def set_path(obj: dict, path: str, value) -> dict:
    parts = path.split(".")
    cur = obj
    for part in parts[:-1]:
        nxt = cur.get(part)
        if not isinstance(nxt, dict):
            nxt = {}
            cur[part] = nxt
        cur = nxt
    cur[parts[-1]] = value
    return obj


def ref_id(value):
    """Referenced documents arrive populated ({_id, name}) or as bare ids."""
    if isinstance(value, dict):
        return value.get("_id") or value.get("id") or ""
    return value


def condition_met(cond: Optional[tuple], root: dict) -> bool:
    if cond is None:
        return True
    path, expected = cond
    val = get_path(root, path)
    if isinstance(expected, (tuple, list, set, frozenset)):
        return val in expected
    return val == expected


def iter_scalar_fields(fields: Iterable[Field], prefix: str = "") -> Iterator[Tuple[str, Field]]:
    """Yield (dot-path, field) for every non-group, non-list field."""
    for f in fields:
        path = prefix + f.name
        if f.kind == "group":
            yield from iter_scalar_fields(f.fields, path + ".")
        elif f.kind != "list":
            yield path, f


# ---------------------- defaults ----------------------

def field_default(f: Field):
    if f.kind == "group":
        return {c.name: field_default(c) for c in f.fields}
    if f.kind == "list":
        return [dict(blank_item(f), **copy.deepcopy(item)) for item in (f.default or [])]
    if f.default is not None:
        return copy.deepcopy(f.default)
    if f.kind == "bool":
        return False
    if f.kind == "tags":
        return []
    if f.kind == "file":
        return None
    return ""


def blank_item(list_field: Field) -> dict:
    item = {c.name: field_default(c) for c in list_field.fields}
    item[KEY] = new_key()
    return item


def defaults(schema: ModuleSchema) -> dict:
    return {f.name: field_default(f) for f in schema.fields}


# ---------------------- format-on-load ----------------------

def format_date(value) -> str:
    if value in (None, ""):
        return ""
    if isinstance(value, dt.datetime):
        return value.date().isoformat()
    if isinstance(value, dt.date):
        return value.isoformat()
    text = str(value).strip()
    try:
        return dt.date.fromisoformat(text[:10]).isoformat()
    except ValueError:
        return ""


def _number_text(value) -> str:
    if isinstance(value, bool) or value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _bool_option(f: Field, value: bool):
    """Map a stored boolean onto a yes/no style select option."""
    values = {str(v).lower(): v for v, _ in option_pairs(f)}
    for yes, no in (("true", "false"), ("yes", "no")):
        if yes in values and no in values:
            return values[yes] if value else values[no]
    return str(value).lower()


def _format_value(f: Field, value):
    if f.kind == "group":
        src = value if isinstance(value, dict) else {}
        return {c.name: _format_value(c, src.get(c.name)) for c in f.fields}
    if f.kind == "list":
        if not isinstance(value, list):
            return field_default(f)
        rows = []
        for item in value:
            if not isinstance(item, dict):
                continue
            row = {c.name: _format_value(c, item.get(c.name)) for c in f.fields}
            row[KEY] = new_key()
            rows.append(row)
        return rows
    if f.kind == "file":
        # prior uploads are not re-fetchable as file handles
        return None
    if value is None:
        return field_default(f)
    if f.kind == "date":
        return format_date(value)
    if f.kind == "number":
        return _number_text(value)
    if f.kind == "bool":
        return bool(value)
    if f.kind == "tags":
        if isinstance(value, (list, tuple)):
            return [str(v) for v in value if not is_blank(v)]
        return [t.strip() for t in str(value).split(",") if t.strip()]
    if f.kind == "select":
        if isinstance(value, bool):
            return _bool_option(f, value)
        return ref_id(value)
    if isinstance(value, dict):
        return ref_id(value)
    return str(value)


def format_for_form(schema: ModuleSchema, record: dict) -> dict:
    record = record or {}
    return {f.name: _format_value(f, record.get(f.name)) for f in schema.fields}


# ---------------------- parse-on-submit ----------------------

def _parse_number(f: Field, raw):
    if raw is None or (isinstance(raw, str) and raw.strip() == ""):
        return None
    if isinstance(raw, bool):
        raise ValueError(f"{f.title} must be a number")
    if isinstance(raw, (int, float)):
        val = float(raw)
    else:
        try:
            val = float(str(raw).strip())
        except ValueError:
            raise ValueError(f"{f.title} must be a number") from None
    if not math.isfinite(val):
        raise ValueError(f"{f.title} must be a number")
    if f.integer:
        if not val.is_integer():
            raise ValueError(f"{f.title} must be a whole number")
        return int(val)
    return int(val) if isinstance(raw, int) else val


def _parse_date(f: Field, raw):
    if raw is None or (isinstance(raw, str) and raw.strip() == ""):
        return None
    if isinstance(raw, (dt.date, dt.datetime)):
        return format_date(raw)
    out = format_date(raw)
    if not out:
        raise ValueError(f"{f.title} must be a date (YYYY-MM-DD)")
    return out


def _file_name(raw) -> str:
    if raw is None:
        return ""
    if isinstance(raw, str):
        return raw
    if isinstance(raw, dict):
        return str(raw.get("filename") or raw.get("name") or "")
    return str(getattr(raw, "name", "") or "")


def parse_value(f: Field, raw):
    if f.kind == "number":
        return _parse_number(f, raw)
    if f.kind == "date":
        return _parse_date(f, raw)
    if f.kind == "bool":
        if isinstance(raw, str):
            return raw.strip().lower() in ("true", "1", "yes", "on")
        if isinstance(raw, list):
            return bool(raw)
        return bool(raw)
    if f.kind == "tags":
        if raw is None:
            return []
        if isinstance(raw, (list, tuple)):
            return [str(t).strip() for t in raw if str(t).strip()]
        return [t.strip() for t in str(raw).split(",") if t.strip()]
    if f.kind == "file":
        return _file_name(raw)
    if f.kind == "select":
        raw = ref_id(raw)
        if raw is None:
            return ""
        if f.options and all(isinstance(v, int) for v, _ in option_pairs(f)) and not isinstance(raw, int):
            if str(raw).strip() == "":
                return None
            try:
                return int(str(raw).strip())
            except ValueError:
                raise ValueError(f"{f.title} must be one of the listed values") from None
        return raw
    if f.kind == "email":
        text = "" if raw is None else str(raw).strip()
        if text and "@" not in text:
            raise ValueError(f"{f.title} must be an email address")
        return text
    return "" if raw is None else str(raw)


def _is_blank_item(list_field: Field, item: dict) -> bool:
    for c in list_field.fields:
        val = item.get(c.name)
        if not (is_blank(val) or val == field_default(c) or (c.kind == "bool" and val is False)):
            return False
    return True


def _parse_fields(fields, src, root, prefix, errors) -> dict:
    out = {}
    src = src if isinstance(src, dict) else {}
    for f in fields:
        if not condition_met(f.visible_when, root):
            continue
        path = prefix + f.name
        raw = src.get(f.name)
        if f.kind == "group":
            out[f.name] = _parse_fields(f.fields, raw, root, path + ".", errors)
        elif f.kind == "list":
            items = []
            for idx, item in enumerate(raw or []):
                if not isinstance(item, dict) or _is_blank_item(f, item):
                    continue
                key = item.get(KEY) or str(idx)
                items.append(_parse_fields(f.fields, item, root, f"{path}[{key}].", errors))
            out[f.name] = items
        else:
            try:
                out[f.name] = parse_value(f, raw)
            except ValueError as exc:
                errors[path] = str(exc)
    return out


def parse_for_submit(schema: ModuleSchema, draft: dict) -> dict:
    errors: Dict[str, str] = {}
    payload = _parse_fields(schema.fields, draft, draft or {}, "", errors)
    if errors:
        raise FormError(errors)
    if schema.prepare is not None:
        payload = schema.prepare(payload, draft or {})
    return payload


# ---------------------- validation ----------------------

def _validate_fields(fields, src, root, prefix, errors) -> None:
    src = src if isinstance(src, dict) else {}
    for f in fields:
        if not condition_met(f.visible_when, root):
            continue
        path = prefix + f.name
        val = src.get(f.name)
        if f.kind == "group":
            _validate_fields(f.fields, val, root, path + ".", errors)
            continue
        if f.kind == "list":
            for idx, item in enumerate(val or []):
                if isinstance(item, dict) and not _is_blank_item(f, item):
                    key = item.get(KEY) or str(idx)
                    _validate_fields(f.fields, item, root, f"{path}[{key}].", errors)
            continue
        needed = f.required or (f.required_when is not None and condition_met(f.required_when, root))
        if needed and is_blank(val):
            errors[path] = f"{f.title} is required"


def validate(schema: ModuleSchema, draft: dict) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    _validate_fields(schema.fields, draft, draft or {}, "", errors)
    return errors


# ---------------------- keyed sub-records ----------------------

def _items(draft: dict, list_path: str) -> list:
    items = get_path(draft, list_path)
    if not isinstance(items, list):
        items = []
        set_path(draft, list_path, items)
    return items


def add_item(schema: ModuleSchema, draft: dict, list_path: str, item: dict | None = None) -> str:
    f = schema.field_at(list_path)
    if f.kind != "list":
        raise KeyError(f"{schema.key}: '{list_path}' is not a list field")
    row = blank_item(f)
    if item:
        row.update({k: v for k, v in item.items() if k != KEY})
    _items(draft, list_path).append(row)
    return row[KEY]


def find_item(draft: dict, list_path: str, key: str) -> Optional[dict]:
    return next((it for it in _items(draft, list_path) if it.get(KEY) == key), None)


def remove_item(draft: dict, list_path: str, key: str) -> bool:
    items = _items(draft, list_path)
    keep = [it for it in items if it.get(KEY) != key]
    removed = len(keep) != len(items)
    items[:] = keep
    return removed


def update_item(draft: dict, list_path: str, key: str, field: str, value) -> bool:
    item = find_item(draft, list_path, key)
    if item is None:
        return False
    item[field] = value
    return True


def ensure_item_keys(draft: dict, schema: ModuleSchema) -> dict:
    """Give keys to sub-records that arrived without one (e.g. from a store)."""
    def _walk(fields, obj):
        for f in fields:
            val = obj.get(f.name) if isinstance(obj, dict) else None
            if f.kind == "group" and isinstance(val, dict):
                _walk(f.fields, val)
            elif f.kind == "list" and isinstance(val, list):
                for it in val:
                    if isinstance(it, dict) and not it.get(KEY):
                        it[KEY] = new_key()
    _walk(schema.fields, draft)
    return draft
