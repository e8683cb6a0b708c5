from __future__ import annotations
import dash
from dash import html, dcc, Output, Input
from app_instance import app, server
from router import ADMIN_PAGES  # registers the router callback
from common import header_bar, sidebar_component, global_loading_overlay, GLOBAL_LOADING_STYLE
from crud import EmployeeController
from module_schemas import ALL_SCHEMAS, EMPLOYEE
from pages import crud_section, employees_body, dashboard_body, travel_body, documents_body
from callbacks_pkg import register_crud_callbacks  # registers callbacks


# ---- Main Layout ----
app.layout = html.Div([
    dcc.Location(id="url-router"),
    dcc.Store(id="sidebar_collapsed", data=True, storage_type="session"),
    dcc.Store(id="global-loading", data=False),
    dcc.Store(id="employees-shared", storage_type="session"),
    dcc.Store(id="lookups-shared", storage_type="memory"),
    html.Div(id="app-wrapper", className="sidebar-collapsed", children=[
        html.Div(id="sidebar", children=sidebar_component(False).children),
        html.Div(id="root")
    ]),
    # Global loading overlay
    global_loading_overlay(),
])


# ---- Validation Layout ----
app.validation_layout = html.Div([
    dcc.Location(id="url-router"),
    dcc.Store(id="sidebar_collapsed"),
    dcc.Store(id="global-loading"),
    dcc.Store(id="employees-shared"),
    dcc.Store(id="lookups-shared"),
    html.Div(id="app-wrapper", children=[html.Div(id="sidebar"), html.Div(id="root")]),
    header_bar(),
    employees_body(),
    dashboard_body(),
    travel_body(),
    documents_body(),
    *[crud_section(schema) for schema in ADMIN_PAGES.values()],
    global_loading_overlay(),
])

# Global loading overlay visibility toggler
@app.callback(Output("global-loading-overlay", "style"), Input("global-loading", "data"))
def _toggle_global_loading(is_on):
    base = GLOBAL_LOADING_STYLE.copy()
    base["display"] = "flex" if bool(is_on) else "none"
    return base

# Show/hide global overlay during navigation (avoid race conditions).
@app.callback(
    Output("global-loading", "data", allow_duplicate=True),
    Input("url-router", "pathname"),
    Input("root", "children"),
    prevent_initial_call=True,
)
def _toggle_nav_loading(_path, _children):
    triggered = [t["prop_id"].split(".")[0] for t in (dash.callback_context.triggered or [])]
    if "root" in triggered:
        return False
    if "url-router" in triggered:
        return True
    return False

# Register per-module CRUD callbacks
for _schema in ALL_SCHEMAS.values():
    if _schema is EMPLOYEE:
        register_crud_callbacks(app, _schema, EmployeeController, export_selected=True)
    else:
        register_crud_callbacks(app, _schema)

# ---------------------- Main ----------------------
if __name__ == "__main__":
    app.run(debug=True)
