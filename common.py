# file: common.py
from __future__ import annotations
import os, platform, getpass, logging
from typing import Dict, Iterable, List, Sequence, Tuple
import pandas as pd
from dash import html, dcc, dash_table
import dash_bootstrap_components as dbc
import dash_svg as svg
from flask import has_request_context, request, session

from forms import get_path, humanize, option_pairs, Field
from dashboard_core import expiry_status, name_of
from csv_export import cell_text

logger = logging.getLogger(__name__)
if not logging.getLogger().handlers:
    logging.basicConfig(level=(os.environ.get("ADMIN_LOG_LEVEL") or "INFO").upper())

SYSTEM_NAME = (os.environ.get("HOSTNAME") or getpass.getuser() or platform.node())
APP_TITLE = "ADMIN CONSOLE"

# ---------------------- UI helpers ----------------------

GLOBAL_LOADING_STYLE = {
    "position": "fixed",
    "inset": "0",
    "background": "rgba(0,0,0,0.6)",
    "display": "none",
    "alignItems": "center",
    "justifyContent": "center",
    "flexDirection": "column",
    "zIndex": 9999,
}

CARD_STYLE = {"padding": "12px", "borderRadius": "12px", "background": "#fff",
              "boxShadow": "0 2px 8px rgba(0,0,0,.06)"}

MODAL_HEADER_STYLE = {"background": "#2f3747", "color": "white"}

STATUS_COLORS = {
    "active": "success", "expired": "danger", "under_renewal": "warning", "pending_renewal": "warning",
    "suspended": "warning", "cancelled": "secondary", "deported": "danger", "inactive": "secondary",
    "open": "info", "pending": "warning", "in_progress": "primary", "resolved": "success",
    "closed": "secondary", "appealed": "warning", "submitted": "info", "under_review": "warning",
    "approved": "success", "rejected": "danger", "pending_documents": "warning", "completed": "success",
    "scheduled": "info", "draft": "secondary", "on-leave": "warning", "resigned": "secondary",
}
EXPIRY_COLORS = {"expired": "danger", "expiring": "warning", "valid": "success", "none": "secondary"}
SEVERITY_COLORS = {"urgent": "danger", "warning": "warning", "normal": "info"}

NAV_ITEMS = [
    ("👥", "Employees", "/employees", "sb-employees"),
    ("🪪", "Residencies", "/admin/residencies", "sb-residencies"),
    ("📜", "Government Documents", "/admin/government-documents", "sb-govdocs"),
    ("🚚", "Vehicle Registrations", "/admin/vehicles", "sb-vehicles"),
    ("✉️", "Correspondence", "/admin/correspondence", "sb-correspondence"),
    ("⚖️", "Legal Cases", "/admin/legal-cases", "sb-legal"),
    ("🏢", "Facilities", "/admin/facilities", "sb-facilities"),
    ("✈️", "Travel", "/travel", "sb-travel"),
    ("📁", "Documents", "/documents", "sb-documents"),
    ("📊", "Dashboard & Reports", "/dashboard", "sb-dashboard"),
]


def global_loading_overlay():
    """Shared global loading overlay (spinner + label)."""
    return html.Div(
        id="global-loading-overlay",
        children=[
            dbc.Spinner(color="light", spinner_style={"width": "4rem", "height": "4rem"}),
            html.Div("Working...", style={"color": "white", "marginLeft": "10px"}),
        ],
        style=GLOBAL_LOADING_STYLE.copy(),
    )


def col_id(path: str) -> str:
    # DataTable ids must not carry dots
    return path.replace(".", "__")


def pretty_columns(columns: Sequence[Tuple[str, str]] | Sequence[str]) -> list[dict]:
    out = []
    for c in columns:
        if isinstance(c, (tuple, list)):
            out.append({"name": c[0], "id": col_id(c[1])})
        else:
            out.append({"name": humanize(c), "id": col_id(c)})
    return out


def _display(path: str, value, lookups: Dict[str, str] | None = None):
    if isinstance(value, str) and lookups and value in lookups:
        return lookups[value]
    if isinstance(value, str) and len(value) >= 10 and value[4:5] == "-" and value[7:8] == "-" and (
            len(value) == 10 or value[10:11] == "T"):
        return value[:10]
    if isinstance(value, dict):
        return name_of(value, "")
    return cell_text(value)


def table_rows(records: Iterable[dict], columns: Sequence[Tuple[str, str]],
               lookups: Dict[str, str] | None = None) -> List[dict]:
    """Flatten records to DataTable rows; ``id`` carries the record id for row_ids."""
    rows = []
    for rec in records or []:
        row = {col_id(path): _display(path, get_path(rec, path), lookups) for _, path in columns}
        row["id"] = str(rec.get("_id") or rec.get("id") or "")
        rows.append(row)
    return rows


def status_style_rules(columns: Sequence[Tuple[str, str]]) -> list[dict]:
    """Conditional cell colours for status-like columns."""
    colors = {"success": "#198754", "danger": "#dc3545", "warning": "#b8860b", "info": "#0d6efd"}
    rules = []
    for _, path in columns:
        if not path.split(".")[-1].lower().endswith("status"):
            continue
        for value, tone in STATUS_COLORS.items():
            if tone in colors:
                rules.append({
                    "if": {"filter_query": f'{{{col_id(path)}}} = "{value}"', "column_id": col_id(path)},
                    "color": colors[tone], "fontWeight": 600,
                })
    return rules


def data_table(table_id, columns: Sequence[Tuple[str, str]], **kwargs):
    opts = dict(
        data=[],
        columns=pretty_columns(columns),
        style_as_list_view=True,
        page_size=10,
        sort_action="native",
        style_table={"overflowX": "auto", "maxWidth": "100%"},
        style_header={"textTransform": "none", "fontWeight": 600},
        style_cell={"textAlign": "left", "whiteSpace": "normal", "height": "auto", "fontSize": "0.9rem"},
        style_data_conditional=status_style_rules(columns),
    )
    opts.update(kwargs)
    return dash_table.DataTable(id=table_id, **opts)


def field_options(f: Field, lookups: Dict[str, List[dict]] | None = None) -> list[dict]:
    if f.source:
        return list((lookups or {}).get(f.source, []))
    return [{"label": label, "value": value} for value, label in option_pairs(f)]


def lookup_options(records: Iterable[dict], label_keys: Sequence[str] = ("name",)) -> list[dict]:
    opts = []
    for r in records or []:
        rid = r.get("_id") or r.get("id")
        if not rid:
            continue
        label = next((str(r[k]) for k in label_keys if r.get(k)), str(rid))
        opts.append({"label": label, "value": str(rid)})
    return sorted(opts, key=lambda o: o["label"].lower())


def lookup_names(options: Iterable[dict]) -> Dict[str, str]:
    return {o["value"]: o["label"] for o in options or []}


def status_badge(value, kind: str = "status"):
    if kind == "expiry":
        state = expiry_status(value)
        text = {"none": "—", "expired": "Expired", "expiring": "Expiring", "valid": "Valid"}[state]
        return dbc.Badge(text, color=EXPIRY_COLORS[state], className="me-1")
    return dbc.Badge(humanize(str(value or "unknown")), color=STATUS_COLORS.get(str(value), "secondary"),
                     className="me-1")


# ---------------------- current user ----------------------

def current_user_fallback() -> str:
    if has_request_context():
        who = (session.get("user_email") or session.get("user")
               or request.headers.get("X-Auth-Email") or request.headers.get("X-Forwarded-User")
               or request.headers.get("X-User"))
        if who:
            return str(who)
    return (os.getenv("USERNAME") or os.getenv("USER") or getpass.getuser() or "unknown")


# ---------------------- UI Fragments ----------------------

def header_bar(crumbs: List[Tuple[str, str | None]] | None = None):
    items = [{"label": "Home", "href": "/", "active": not crumbs}]
    for label, href in (crumbs or []):
        items.append({"label": label, "href": href} if href else {"label": label, "active": True})
    return dbc.Navbar(
        dbc.Container([
            dbc.Button("☰", id="btn-burger-top", color="link", className="me-3", n_clicks=0,
                       style={"fontSize": "24px", "textDecoration": "none"}),
            dbc.Breadcrumb(id="ws-breadcrumb", items=items, className="mb-0 ms-3 flex-grow-1"),
            dbc.Nav([dcc.Link(SYSTEM_NAME, href="/", className="nav-link")], className="ms-auto"),
        ], fluid=True),
        className="mb-3", sticky="top", style={"backgroundColor": "white"}
    )


def tile(label: str, emoji: str, href: str):
    return dcc.Link(
        html.Div([html.Span(emoji, className="circle"), html.Div(label, className="label")], className="cap-tile"),
        href=href, style={"textDecoration": "none", "color": "inherit"}
    )


def home_tiles():
    cols = [dbc.Col(tile(lbl, ico, href), width=6, md=4, lg=3, className="mb-3") for ico, lbl, href, _ in NAV_ITEMS]
    return html.Div([html.H5(APP_TITLE), dbc.Row(cols)], style={**CARD_STYLE, "minHeight": "100%"})


def kpi_card(label: str, value, edge: str = "edge-teal", sub: str | None = None, card_id: str | None = None):
    body = [html.Div(label, className="kpi-head"), html.Div(className="kpi-topdash"),
            html.Div(str(value), className="num", id=card_id) if card_id else html.Div(str(value), className="num")]
    if sub:
        body.append(html.Div(sub, className="lbl text-muted small"))
    return html.Div(body, className=f"kpi-card mb-3 {edge}")


def chevron(open_: bool):
    d = "m19 9-7 7-7-7" if open_ else "m5 15 7-7 7 7"
    return svg.Svg([
        svg.Path(d=d, stroke="currentColor", strokeLinecap="round", strokeLinejoin="round", strokeWidth="2")
    ], xmlns="http://www.w3.org/2000/svg", width=24, height=24, fill="none", viewBox="0 0 24 24")


def collapsible_card(title: str, body, toggle_id: str, collapse_id: str, is_open: bool = False):
    return dbc.Card(
        dbc.CardBody([
            html.Div([
                html.Span(title, className="fw-bold"),
                html.Button(chevron(is_open), id=toggle_id, title="Collapse/Expand",
                            style={"marginLeft": "auto", "border": "none", "background": "transparent",
                                   "cursor": "pointer"}),
            ], className="d-flex align-items-center mb-2"),
            dbc.Collapse(body, id=collapse_id, is_open=is_open),
        ]),
        className="mb-3"
    )


def sidebar_component(collapsed: bool) -> html.Div:
    nav, tooltips = [], []
    for ico, lbl, href, anchor in NAV_ITEMS:
        nav.append(dcc.Link(
            html.Div([html.Div(ico, className="nav-ico"), html.Div(lbl, className="nav-label")],
                     className="nav-item", id=f"{anchor}-item"),
            href=href, id=anchor, refresh=False
        ))
        tooltips.append(dbc.Tooltip(lbl, target=f"{anchor}-item", placement="right", style={"fontSize": "0.85rem"}))
    return html.Div([
        html.Div([html.Div(APP_TITLE, className="logo-full fw-bold")], className="brand"),
        html.Div(nav, className="nav"),
        *tooltips
    ], id="sidebar")
