from __future__ import annotations
import logging
from dash import html, dcc, Output, Input
import dash_bootstrap_components as dbc
from app_instance import app
from api import describe_current_client
from common import header_bar, home_tiles, CARD_STYLE
from module_schemas import (RESIDENCY, GOVERNMENT_DOCUMENT, VEHICLE, CORRESPONDENCE, LEGAL_CASE, FACILITY)
from pages import page_crud, page_employees, page_dashboard, page_travel, page_documents

logger = logging.getLogger(__name__)


# ---------------------- Router + Home ----------------------

def _connection_card():
    info = describe_current_client()
    return html.Div([
        html.H6("Backend"),
        html.Div(info.get("api_root") or "not configured", className="small"),
        html.Div(f"Timeout: {info.get('timeout') or 'none'}", className="text-muted small"),
        html.Div("Token: set" if info.get("has_token") else "Token: not set", className="text-muted small"),
    ], style=CARD_STYLE)


def home_layout():
    return dbc.Container([
        header_bar(),
        dbc.Row([
            dbc.Col(home_tiles(), width=9),
            dbc.Col(_connection_card(), width=3),
        ], className="g-3"),
    ], fluid=True)


def not_found_layout():
    return dbc.Container([header_bar(), dbc.Alert("Page not found.", color="warning"), dcc.Link("← Home", href="/")], fluid=True)


ADMIN_PAGES = {
    "/admin/residencies": RESIDENCY,
    "/admin/government-documents": GOVERNMENT_DOCUMENT,
    "/admin/vehicles": VEHICLE,
    "/admin/correspondence": CORRESPONDENCE,
    "/admin/legal-cases": LEGAL_CASE,
    "/admin/facilities": FACILITY,
}


def layout_for(pathname: str | None):
    path = (pathname or "").rstrip("/")
    if path in ("", "/"):
        return home_layout()

    schema = ADMIN_PAGES.get(path)
    if schema is not None:
        return page_crud(schema, [("Admin", None), (schema.title, None)])

    pages = {
        "/employees": page_employees,
        "/dashboard": page_dashboard,
        "/travel":    page_travel,
        "/documents": page_documents,
    }
    fn = pages.get(path)
    return fn() if fn else not_found_layout()


@app.callback(Output("root", "children"), Input("url-router", "pathname"))
def route(pathname: str):
    logger.debug("route %s", pathname)
    return layout_for(pathname)
