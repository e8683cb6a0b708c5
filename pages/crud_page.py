from __future__ import annotations
import copy
from typing import Dict, List, Optional, Sequence
from dash import html, dcc
import dash_bootstrap_components as dbc

from common import header_bar, data_table, field_options, lookup_options, MODAL_HEADER_STYLE
from forms import (Field, ModuleSchema, KEY, condition_met, get_path, set_path, humanize, option_pairs,
                   update_item, ensure_item_keys)
from filters import distinct_values

# Label keys used when a reference list becomes dropdown options
SOURCE_LABELS = {
    "employees": ("name", "employeeId", "email"),
    "assets": ("description", "plateNumber", "assetNumber", "name"),
    "travel_requests": ("requestNumber", "purpose"),
}

WIDE_KINDS = ("textarea", "group", "list", "tags")


def build_lookups(employees: Optional[list], others: Optional[dict]) -> Dict[str, List[dict]]:
    out = {"employees": lookup_options(employees or [], SOURCE_LABELS["employees"])}
    for source, records in (others or {}).items():
        out[source] = lookup_options(records or [], SOURCE_LABELS.get(source, ("name",)))
    return out


def path_label(schema: ModuleSchema, path: str) -> str:
    for header, col in schema.table_columns:
        if col == path:
            return header
    try:
        return schema.field_at(path).title
    except KeyError:
        return humanize(path.split(".")[0])


# ---------------------- form inputs ----------------------

def _select_options(f: Field, lookups) -> list[dict]:
    opts = [{"label": o["label"], "value": str(o["value"])} for o in field_options(f, lookups)]
    return [{"label": "Select...", "value": ""}] + opts


def _control(f: Field, cid: dict, value, lookups, invalid: bool):
    if f.kind == "select":
        return dbc.Select(id=cid, options=_select_options(f, lookups),
                          value="" if value is None else str(value), invalid=invalid)
    if f.kind == "bool":
        return dbc.Checkbox(id=cid, label=f.title, value=bool(value))
    if f.kind == "textarea":
        return dbc.Textarea(id=cid, value=value or "", rows=3, invalid=invalid)
    if f.kind == "tags":
        text = ", ".join(str(v) for v in value) if isinstance(value, (list, tuple)) else (value or "")
        return dbc.Input(id=cid, type="text", value=text, placeholder="Comma separated", invalid=invalid)
    if f.kind == "file":
        upl_id = dict(cid, type="upl")
        return dcc.Upload(id=upl_id, children=html.Div([f"⬆️ {value}" if value else "⬆️ Drag & drop or click"]),
                          multiple=False, className="upload-box")
    kind = {"number": "number", "date": "date", "email": "email"}.get(f.kind, "text")
    return dbc.Input(id=cid, type=kind, value="" if value is None else value, invalid=invalid)


def _labelled(f: Field, control, error: str | None, required: bool):
    label = [] if f.kind == "bool" else [dbc.Label(f.title + (" *" if required else ""), className="small mb-1")]
    out = label + [control]
    if f.help:
        out.append(html.Div(f.help, className="text-muted small"))
    if error:
        out.append(html.Div(error, className="text-danger small"))
    return out


def _field_block(schema: ModuleSchema, f: Field, path: str, form: dict, lookups, errors: Dict[str, str]):
    key = schema.key
    value = get_path(form, path)
    if f.kind == "group":
        kids = [_field_block(schema, c, f"{path}.{c.name}", form, lookups, errors) for c in f.fields]
        body = html.Div([html.H6(f.title, className="mt-2"), dbc.Row(kids, className="g-2")],
                        className="border rounded p-2")
    elif f.kind == "list":
        body = _list_block(schema, f, path, value if isinstance(value, list) else [], lookups, errors)
    else:
        required = f.required or f.required_when is not None
        cid = {"type": "fld", "module": key, "name": path}
        body = html.Div(_labelled(f, _control(f, cid, value, lookups, path in errors), errors.get(path),
                                  required))
    width = 12 if f.kind in WIDE_KINDS else 6
    col_kwargs = {}
    if f.visible_when is not None:
        col_kwargs["id"] = {"type": "fld-wrap", "module": key, "name": path}
        col_kwargs["style"] = {} if condition_met(f.visible_when, form) else {"display": "none"}
    return dbc.Col(body, md=width, **col_kwargs)


def _list_block(schema: ModuleSchema, f: Field, path: str, items: list, lookups, errors: Dict[str, str]):
    key = schema.key
    rows = []
    for item in items:
        if not isinstance(item, dict):
            continue
        ikey = item.get(KEY)
        cols = []
        for c in f.fields:
            ipath = f"{path}[{ikey}].{c.name}"
            cid = {"type": "sub", "module": key, "list": path, "key": ikey, "name": c.name}
            cols.append(dbc.Col(_labelled(c, _control(c, cid, item.get(c.name), lookups, ipath in errors),
                                          errors.get(ipath), c.required), md=True))
        cols.append(dbc.Col(dbc.Button("Remove", id={"type": "sub-rm", "module": key, "list": path, "key": ikey},
                                       color="danger", outline=True, size="sm", n_clicks=0),
                            width="auto", className="d-flex align-items-end"))
        rows.append(dbc.Row(cols, className="g-2 mb-2 border-bottom pb-2"))
    if not rows:
        rows = [html.Div(f"No {f.title.lower()} added", className="text-muted small mb-2")]
    return html.Div([
        html.Div([
            html.H6(f.title, className="mb-0"),
            dbc.Button("+ Add", id={"type": "sub-add", "module": key, "list": path}, color="secondary",
                       outline=True, size="sm", n_clicks=0, className="ms-auto"),
        ], className="d-flex align-items-center mb-2"),
        *rows,
    ], className="border rounded p-2")


def render_form(schema: ModuleSchema, form: dict | None, lookups: Dict[str, List[dict]] | None = None,
                errors: Dict[str, str] | None = None):
    """Input controls for every field; hidden conditionals are rendered with display:none."""
    form = form or {}
    errors = errors or {}
    return dbc.Row([_field_block(schema, f, f.name, form, lookups or {}, errors) for f in schema.fields],
                   className="g-3")


def collect_draft(base: dict | None, fld_ids: Sequence[dict], fld_values: Sequence,
                  sub_ids: Sequence[dict] = (), sub_values: Sequence = (),
                  upl_ids: Sequence[dict] = (), upl_names: Sequence = (),
                  schema: ModuleSchema | None = None) -> dict:
    """Fold the values of the rendered inputs back into a form buffer."""
    draft = copy.deepcopy(base or {})
    if schema is not None:
        ensure_item_keys(draft, schema)
    for cid, val in zip(fld_ids or [], fld_values or []):
        set_path(draft, cid["name"], val)
    for cid, val in zip(sub_ids or [], sub_values or []):
        update_item(draft, cid["list"], cid["key"], cid["name"], val)
    for cid, name in zip(upl_ids or [], upl_names or []):
        if name:
            set_path(draft, cid["name"], name)
    return draft


# ---------------------- filters ----------------------

def filter_options(schema: ModuleSchema, records: list, path: str) -> list[dict]:
    try:
        f = schema.field_at(path)
    except KeyError:
        f = None
    if f is not None and f.kind == "select" and f.options:
        return [{"label": label, "value": value} for value, label in option_pairs(f)]
    return [{"label": v, "value": v} for v in distinct_values(records, path)]


def _toolbar(schema: ModuleSchema, extra):
    k = schema.key
    search_by = [{"label": "All fields", "value": "all"}] + [
        {"label": path_label(schema, p), "value": p} for p in schema.search_fields
    ]
    filters = [
        dbc.Col(dcc.Dropdown(id={"type": "flt", "module": k, "name": path}, options=[],
                             placeholder=path_label(schema, path), clearable=True), md=2)
        for path in schema.filter_fields
    ]
    return html.Div([
        dbc.Row([
            dbc.Col(dbc.InputGroup([
                dbc.Select(id=f"{k}-search-by", options=search_by, value="all", style={"maxWidth": "160px"}),
                dbc.Input(id=f"{k}-search", placeholder=f"Search {schema.title.lower()}...", debounce=True),
            ]), md=4),
            *filters,
        ], className="g-2 mb-2"),
        html.Div([
            dbc.Button("Refresh", id=f"{k}-refresh", color="secondary", outline=True, className="me-2"),
            dbc.Button(f"+ Add {schema.noun}", id=f"{k}-add", color="primary", className="me-2"),
            dbc.Button("Edit", id=f"{k}-edit", color="secondary", className="me-2"),
            dbc.Button("Delete", id=f"{k}-delete", color="danger", outline=True, className="me-2"),
            dbc.Button("Export CSV", id=f"{k}-export", color="success", outline=True, className="me-2"),
            *(extra or []),
            html.Span(id=f"{k}-count", className="text-muted small ms-auto"),
        ], className="d-flex flex-wrap align-items-center gap-1 mb-2"),
    ])


def crud_section(schema: ModuleSchema, extra_toolbar=None, row_selectable: str = "single", before_table=None):
    k = schema.key
    return html.Div([
        dcc.Store(id=f"{k}-state"),
        dcc.Interval(id=f"{k}-mount", interval=200, max_intervals=1),
        dcc.Download(id=f"{k}-dl"),
        dbc.Alert(id=f"{k}-error", color="danger", is_open=False, dismissable=True),
        dbc.Alert(id=f"{k}-success", color="success", is_open=False, duration=4000),
        *(before_table or []),
        dbc.Card(dbc.CardBody([
            html.H5(schema.title),
            _toolbar(schema, extra_toolbar),
            html.Div(data_table(f"{k}-table", schema.table_columns, row_selectable=row_selectable,
                                selected_row_ids=[]), className="loading-block"),
        ]), className="mb-3"),

        dbc.Modal([
            dbc.ModalHeader(dbc.ModalTitle(id=f"{k}-modal-title"), close_button=False, style=MODAL_HEADER_STYLE),
            dbc.ModalBody([
                dbc.Alert(id=f"{k}-form-error", color="danger", is_open=False),
                html.Div(id=f"{k}-form"),
            ]),
            dbc.ModalFooter([
                dbc.Button("Cancel", id=f"{k}-cancel", color="secondary"),
                dbc.Button("Save", id=f"{k}-save", color="primary"),
            ]),
        ], id=f"{k}-modal", is_open=False, size="xl", scrollable=True, backdrop="static"),

        dbc.Modal([
            dbc.ModalHeader(dbc.ModalTitle("Confirm delete"), close_button=False, style=MODAL_HEADER_STYLE),
            dbc.ModalBody(f"Are you sure you want to delete this {schema.noun.lower()}? This cannot be undone."),
            dbc.ModalFooter([
                dbc.Button("Cancel", id=f"{k}-del-cancel", color="secondary"),
                dbc.Button("Delete", id=f"{k}-del-confirm", color="danger"),
            ]),
        ], id=f"{k}-del-modal", is_open=False, backdrop="static"),
    ], id=f"{k}-section")


def page_crud(schema: ModuleSchema, crumbs=None):
    return html.Div(dbc.Container([
        header_bar(crumbs or [(schema.title, None)]),
        crud_section(schema),
    ], fluid=True), className="loading-page")
