from __future__ import annotations
import logging
from dash import dcc, Output, Input, State
try:
    from dash import ctx
except ImportError:
    from dash import callback_context as ctx
from dash.exceptions import PreventUpdate

from app_instance import app
from common import current_user_fallback
from crud import ResourceController
from csv_export import rows_to_csv, add_export_header, export_filename
from dashboard_core import (status_histogram, capitalize_label, admin_expiry_alerts, document_expiry_by_month,
                            recent_activities, summary_metrics, SUMMARY_HEADERS)
from module_schemas import EMPLOYEE, GOVERNMENT_DOCUMENT, VEHICLE, LEGAL_CASE, FACILITY, RESIDENCY
from pages.dashboard_page import (histogram_figure, expiry_month_figure, summary_cards, alert_list,
                                  activity_list)

logger = logging.getLogger(__name__)

SOURCES = {
    "employees": EMPLOYEE,
    "govdocs": GOVERNMENT_DOCUMENT,
    "vehicles": VEHICLE,
    "legal": LEGAL_CASE,
    "facilities": FACILITY,
    "residencies": RESIDENCY,
}


def load_dashboard_data(client=None) -> dict:
    """Fetch every list the dashboard aggregates; failures leave that list empty."""
    out = {"errors": []}
    for key, schema in SOURCES.items():
        ctrl = ResourceController(schema, client=client)
        state = ctrl.load(ctrl.new_state())
        out[key] = state.records
        if state.error:
            out["errors"].append(f"{schema.title}: {state.error}")
    return out


def _summary(data: dict):
    d = data or {}
    return summary_metrics(d.get("employees"), d.get("govdocs"), d.get("vehicles"), d.get("legal"),
                           d.get("facilities"), d.get("residencies"))


@app.callback(
    Output("global-loading", "data", allow_duplicate=True),
    Input("dashboard-refresh", "n_clicks"),
    prevent_initial_call=True,
)
def _dashboard_show_loader(n):
    if not n:
        raise PreventUpdate
    return True


@app.callback(
    Output("global-loading", "data", allow_duplicate=True),
    Input("dashboard-data", "data"),
    prevent_initial_call=True,
)
def _dashboard_hide_loader(_data):
    return False


@app.callback(
    Output("dashboard-data", "data"),
    Input("dashboard-mount", "n_intervals"),
    Input("dashboard-refresh", "n_clicks"),
    prevent_initial_call=True,
)
def _load_dashboard(_mount, _refresh):
    if not getattr(ctx, "triggered_id", None):
        raise PreventUpdate
    return load_dashboard_data()


@app.callback(
    Output("dashboard-kpis", "children"),
    Output("dashboard-residency-status", "figure"),
    Output("dashboard-govdoc-status", "figure"),
    Output("dashboard-legal-status", "figure"),
    Output("dashboard-expiry-months", "figure"),
    Output("dashboard-alerts", "children"),
    Output("dashboard-activities", "children"),
    Output("dashboard-error", "children"),
    Output("dashboard-error", "is_open"),
    Input("dashboard-data", "data"),
)
def _render_dashboard(data):
    d = data or {}
    errors = d.get("errors") or []
    return (
        summary_cards(_summary(d)),
        histogram_figure(status_histogram(d.get("residencies")), "Residencies by status"),
        histogram_figure(status_histogram(d.get("govdocs"), "documentType"), "Documents by type"),
        histogram_figure(status_histogram(d.get("legal"), "caseType", label=capitalize_label),
                         "Legal cases by type"),
        expiry_month_figure(document_expiry_by_month(d.get("govdocs"))),
        alert_list(admin_expiry_alerts(d.get("residencies"), d.get("govdocs"), d.get("vehicles"))),
        activity_list(recent_activities(d.get("residencies"), d.get("govdocs"), d.get("legal"))),
        "; ".join(errors),
        bool(errors),
    )


@app.callback(
    Output("dashboard-dl", "data"),
    Input("dashboard-export", "n_clicks"),
    State("dashboard-data", "data"),
    prevent_initial_call=True,
)
def _export_dashboard(n, data):
    if not n:
        raise PreventUpdate
    user = current_user_fallback()
    text = add_export_header(rows_to_csv(SUMMARY_HEADERS, _summary(data)), "Dashboard & Reports", user)
    logger.info("[dashboard] summary exported for %s", user)
    return dcc.send_string(text, export_filename("dashboard", user))
