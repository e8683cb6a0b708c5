from __future__ import annotations
from typing import List
from dash import html, dcc
import dash_bootstrap_components as dbc
import pandas as pd
import plotly.express as px

from common import header_bar, kpi_card, SEVERITY_COLORS, STATUS_COLORS


def histogram_figure(rows: List[dict], title: str):
    df = pd.DataFrame(rows or [], columns=["label", "count"])
    fig = px.bar(df, x="label", y="count", title=title, labels={"label": "", "count": "Count"})
    fig.update_layout(margin=dict(l=10, r=10, t=40, b=10), height=280)
    return fig


def expiry_month_figure(rows: List[dict]):
    df = pd.DataFrame(rows or [], columns=["month", "expiring", "expired"])
    long = df.melt(id_vars="month", value_vars=["expiring", "expired"], var_name="kind", value_name="count")
    fig = px.bar(long, x="month", y="count", color="kind", barmode="group",
                 title="Document expiries by month",
                 color_discrete_map={"expiring": "#f0ad4e", "expired": "#d9534f"},
                 labels={"month": "", "count": "Documents", "kind": ""})
    fig.update_layout(margin=dict(l=10, r=10, t=40, b=10), height=300)
    return fig


def summary_cards(summary) -> dbc.Row:
    edges = ("edge-teal", "edge-blue", "edge-green", "edge-amber", "edge-purple", "edge-red")
    cols = [dbc.Col(kpi_card(label, value, edge, sub=status), md=2)
            for (label, value, status), edge in zip(summary or [], edges)]
    return dbc.Row(cols, className="g-2")


def alert_list(alerts: List[dict]):
    if not alerts:
        return html.Div("No expiries in the next 30 days", className="text-muted small")
    items = []
    for a in alerts:
        items.append(dbc.ListGroupItem([
            dbc.Badge(a["severity"].title(), color=SEVERITY_COLORS.get(a["severity"], "secondary"), className="me-2"),
            html.Span(f"{a['type']}: {a['item']}", className="fw-semibold me-2"),
            html.Span(f"expires {a['expiryDate']} ({a['daysRemaining']} days)", className="text-muted small"),
        ]))
    return dbc.ListGroup(items, flush=True)


def activity_list(activities: List[dict]):
    if not activities:
        return html.Div("No recent activity", className="text-muted small")
    return dbc.ListGroup([
        dbc.ListGroupItem([
            html.Span(a.get("date") or "—", className="text-muted small me-2"),
            html.Span(a["description"], className="me-2"),
            dbc.Badge(a["status"], color=STATUS_COLORS.get(a["status"], "secondary")),
        ]) for a in activities
    ], flush=True)


def dashboard_body():
    return html.Div([
        dcc.Store(id="dashboard-data"),
        dcc.Interval(id="dashboard-mount", interval=200, max_intervals=1),
        dcc.Download(id="dashboard-dl"),
        dbc.Alert(id="dashboard-error", color="warning", is_open=False, dismissable=True),

        html.Div([
            dbc.Button("Refresh", id="dashboard-refresh", color="secondary", outline=True, className="me-2"),
            dbc.Button("Export summary CSV", id="dashboard-export", color="success", outline=True),
        ], className="mb-3"),

        dbc.Card(dbc.CardBody(html.Div(id="dashboard-kpis", children=summary_cards([])), className="loading-block"),
                 className="mb-3"),

        dbc.Row([
            dbc.Col(dbc.Card(dbc.CardBody(dcc.Graph(id="dashboard-residency-status", config={"displayModeBar": False}))), md=4),
            dbc.Col(dbc.Card(dbc.CardBody(dcc.Graph(id="dashboard-govdoc-status", config={"displayModeBar": False}))), md=4),
            dbc.Col(dbc.Card(dbc.CardBody(dcc.Graph(id="dashboard-legal-status", config={"displayModeBar": False}))), md=4),
        ], className="g-3 mb-3"),

        dbc.Row([
            dbc.Col(dbc.Card(dbc.CardBody(dcc.Graph(id="dashboard-expiry-months", config={"displayModeBar": False}))), md=7),
            dbc.Col(dbc.Card(dbc.CardBody([
                html.H5("Expiry alerts"),
                html.Div(id="dashboard-alerts", style={"maxHeight": "300px", "overflowY": "auto"}),
            ])), md=5),
        ], className="g-3 mb-3"),

        dbc.Card(dbc.CardBody([
            html.H5("Recent activities"),
            html.Div(id="dashboard-activities"),
        ]), className="mb-3"),
    ])


def page_dashboard():
    return html.Div(dbc.Container([header_bar([("Dashboard & Reports", None)]), dashboard_body()], fluid=True), className="loading-page")
