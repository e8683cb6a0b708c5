from __future__ import annotations
from typing import List
from dash import html, dcc, dash_table
import dash_bootstrap_components as dbc
import pandas as pd
import plotly.express as px

from common import header_bar, kpi_card, status_badge, pretty_columns, collapsible_card
from dashboard_core import name_of, rollup_rows
from documents import TRAVEL_DOCUMENT_TYPES, document_key, file_icon
from forms import format_date, humanize
from module_schemas import (TRAVEL_REQUEST, TRAVEL_AUTHORIZATION, ITINERARY, COUNTRY_GUIDELINE,
                            GUIDELINE_TAG_SUGGESTIONS)
from pages.crud_page import crud_section


def overview_cards(ov: dict):
    ov = ov or {}
    return dbc.Row([
        dbc.Col(kpi_card("Active trips", len(ov.get("activeTrips") or []), "edge-green"), md=2),
        dbc.Col(kpi_card("Upcoming (30 days)", len(ov.get("upcomingTrips") or []), "edge-blue"), md=2),
        dbc.Col(kpi_card("Completed", len(ov.get("completedTrips") or []), "edge-grey"), md=2),
        dbc.Col(kpi_card("Total trips", ov.get("totalTrips", 0), "edge-teal"), md=2),
        dbc.Col(kpi_card("Total cost", f"{float(ov.get('totalCost') or 0):,.2f}", "edge-purple"), md=2),
        dbc.Col(kpi_card("Avg duration", f"{ov.get('avgTripDuration', 0)} days", "edge-amber"), md=2),
    ], className="g-2")


def trip_list(trips: List[dict], empty: str = "No trips"):
    if not trips:
        return html.Div(empty, className="text-muted small")
    return dbc.ListGroup([
        dbc.ListGroupItem([
            html.Span(name_of(t.get("employee")), className="fw-semibold me-2"),
            html.Span(f"{t.get('destinationCountry') or '—'}"
                      f"{', ' + t['destinationCity'] if t.get('destinationCity') else ''}", className="me-2"),
            html.Span(f"{format_date(t.get('startDate')) or '?'} → {format_date(t.get('endDate')) or '?'}",
                      className="text-muted small me-2"),
            status_badge(t.get("travelStatus")),
        ]) for t in trips
    ], flush=True)


ROLLUP_COLUMNS = {
    "country": [("Country", "country"), ("Trips", "count"), ("Employees", "employees"),
                ("Total cost", "totalCost"), ("Average cost", "averageCost")],
    "employee": [("Employee", "employee"), ("Trips", "count"), ("Countries", "countries"),
                 ("Total cost", "totalCost"), ("Average cost", "averageCost")],
}


def rollup_table(table_id: str, groups: dict, kind: str):
    key_name, distinct_name = ("country", "employees") if kind == "country" else ("employee", "countries")
    rows = rollup_rows(groups or {}, key_name, distinct_name)
    return dash_table.DataTable(
        id=table_id, data=rows, columns=pretty_columns(ROLLUP_COLUMNS[kind]),
        page_size=10, sort_action="native", style_as_list_view=True,
        style_table={"overflowX": "auto"}, style_header={"textTransform": "none", "fontWeight": 600},
    )


def cost_by_country_figure(groups: dict):
    rows = rollup_rows(groups or {}, "country", "employees")
    df = pd.DataFrame(rows, columns=["country", "count", "employees", "totalCost", "averageCost"])
    fig = px.bar(df, x="country", y="totalCost", title="Travel cost by country",
                 labels={"country": "", "totalCost": "Total cost"})
    fig.update_layout(margin=dict(l=10, r=10, t=40, b=10), height=300)
    return fig


def travel_doc_list(docs: List[dict]):
    if not docs:
        return html.Div("No documents attached", className="text-muted small")
    return dbc.ListGroup([
        dbc.ListGroupItem([
            html.Span(file_icon(d.get("mimetype") or d.get("mimeType")), className="me-2"),
            html.Span(d.get("name") or d.get("fileName") or d.get("originalName") or "document", className="me-2"),
            dbc.Badge(humanize(d.get("type") or "other"), color="secondary", className="me-2"),
            dbc.Button("Remove", id={"type": "travel-doc-rm", "key": document_key(d)}, color="danger",
                       outline=True, size="sm", n_clicks=0, className="float-end"),
        ]) for d in docs
    ], flush=True)


def _attachments_card():
    return dbc.Card(dbc.CardBody([
        html.H5("Travel documents"),
        html.Div("Select a travel record above to manage its documents.", className="text-muted small mb-2"),
        dcc.Store(id="travel-docs-store"),
        dbc.Row([
            dbc.Col(dbc.Select(id="travel-doc-type", value="",
                               options=[{"label": "Document type...", "value": ""}] +
                                       [{"label": humanize(t), "value": t} for t in TRAVEL_DOCUMENT_TYPES]), md=3),
            dbc.Col(dcc.Upload(id="travel-doc-upload", children=html.Div(["⬆️ Drag & drop or click"]),
                               multiple=False, className="upload-box"), md=5),
            dbc.Col(dbc.Button("Upload", id="travel-doc-add", color="primary"), md=2),
        ], className="g-2 mb-2"),
        html.Div(id="travel-docs-msg", className="small mb-2"),
        html.Div(id="travel-docs-list", className="loading-block"),
    ]), className="mb-3")


def _overview_tab():
    return html.Div([
        dcc.Store(id="travel-data"),
        dcc.Interval(id="travel-mount", interval=200, max_intervals=1),
        html.Div(dbc.Button("Refresh", id="travel-refresh", color="secondary", outline=True), className="mb-2"),
        html.Div(id="travel-overview-cards", children=overview_cards({}), className="mb-3"),
        dbc.Row([
            dbc.Col(dbc.Card(dbc.CardBody([html.H6("Active trips"), html.Div(id="travel-active")])), md=6),
            dbc.Col(dbc.Card(dbc.CardBody([html.H6("Upcoming trips"), html.Div(id="travel-upcoming")])), md=6),
        ], className="g-3"),
    ], className="pt-3")


def _notifications_tab():
    return html.Div([
        dbc.Alert(id="travel-notifications-error", color="warning", is_open=False),
        html.Div(id="travel-notifications"),
    ], className="pt-3")


def _analytics_tab():
    tables = dbc.Row([
        dbc.Col([html.H6("By country"), html.Div(id="travel-country-table")], md=6),
        dbc.Col([html.H6("By employee"), html.Div(id="travel-employee-table")], md=6),
    ], className="g-3")
    return html.Div([
        dcc.Graph(id="travel-cost-country", config={"displayModeBar": False}),
        collapsible_card("Cost rollups", tables, "travel-rollups-toggle", "travel-rollups-collapse", is_open=True),
    ], className="pt-3")


def _guidelines_tab():
    hint = html.Div(["Suggested tags: ", ", ".join(GUIDELINE_TAG_SUGGESTIONS)], className="text-muted small mb-2")
    return html.Div([hint, crud_section(COUNTRY_GUIDELINE)], className="pt-3")


def travel_body():
    return html.Div([
        dbc.Tabs(id="travel-tabs", active_tab="overview", children=[
            dbc.Tab(_overview_tab(), label="Overview", tab_id="overview"),
            dbc.Tab(html.Div(crud_section(TRAVEL_REQUEST), className="pt-3"), label="Requests", tab_id="requests"),
            dbc.Tab(html.Div(crud_section(TRAVEL_AUTHORIZATION), className="pt-3"), label="Authorizations",
                    tab_id="authorizations"),
            dbc.Tab(html.Div([crud_section(ITINERARY), _attachments_card()], className="pt-3"), label="Itinerary",
                    tab_id="itinerary"),
            dbc.Tab(_notifications_tab(), label="Notifications", tab_id="notifications"),
            dbc.Tab(_analytics_tab(), label="Analytics", tab_id="analytics"),
            dbc.Tab(_guidelines_tab(), label="Country Guidelines", tab_id="guidelines"),
        ]),
    ])


def page_travel():
    return html.Div(dbc.Container([header_bar([("Travel", None)]), travel_body()], fluid=True), className="loading-page")
