from __future__ import annotations
import logging
from dash import Output, Input, State
from dash.exceptions import PreventUpdate

from app_instance import app
from common import sidebar_component
from crud import load_shared, load_shared_employees

logger = logging.getLogger(__name__)

# Reference lists a route needs for its dropdowns, besides employees
ROUTE_LOOKUPS = {
    "/admin/vehicles": ("assets",),
    "/travel": ("travel_requests",),
}
LIST_KEYS = {"assets": "assets", "travel_requests": "travelRequests"}
EMPLOYEE_KEYS = ("_id", "id", "name", "employeeId", "email", "department", "position", "site")


def slim_employee(rec: dict) -> dict:
    return {k: rec.get(k) for k in EMPLOYEE_KEYS if rec.get(k) not in (None, "")}


def lookups_for(pathname: str | None) -> tuple:
    path = (pathname or "").rstrip("/")
    return ROUTE_LOOKUPS.get(path, ())


@app.callback(
    Output("employees-shared", "data"),
    Input("url-router", "pathname"),
    State("employees-shared", "data"),
)
def _load_shared_employees(_path, current):
    # once per browser tab; the store lives in session storage
    if isinstance(current, list):
        raise PreventUpdate
    rows = [slim_employee(e) for e in load_shared_employees()]
    logger.info("Loaded %d employees for lookups", len(rows))
    return rows


@app.callback(
    Output("lookups-shared", "data"),
    Input("url-router", "pathname"),
    State("lookups-shared", "data"),
)
def _load_route_lookups(pathname, current):
    needed = lookups_for(pathname)
    if not needed:
        raise PreventUpdate
    out = dict(current or {})
    for source in needed:
        out[source] = load_shared(source, list_key=LIST_KEYS.get(source))
    return out


# ---------------------- sidebar ----------------------

@app.callback(
    Output("sidebar_collapsed", "data"),
    Input("btn-burger-top", "n_clicks"),
    State("sidebar_collapsed", "data"),
    prevent_initial_call=True
)
def toggle_sidebar(n, collapsed):
    if not n: raise PreventUpdate
    return not bool(collapsed)


@app.callback(Output("app-wrapper", "className"), Input("sidebar_collapsed", "data"))
def set_wrapper_class(collapsed):
    return "sidebar-collapsed" if collapsed else "sidebar-expanded"


@app.callback(Output("sidebar", "children"), Input("sidebar_collapsed", "data"))
def render_sidebar(collapsed):
    return sidebar_component(bool(collapsed)).children
