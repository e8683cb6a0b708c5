from __future__ import annotations
from dash import html
import dash_bootstrap_components as dbc

from common import header_bar, kpi_card
from module_schemas import EMPLOYEE
from pages.crud_page import crud_section


def _fmt_money(v) -> str:
    return f"{float(v or 0):,.2f}"


def _breakdown(title: str, counts: dict):
    items = sorted((counts or {}).items(), key=lambda kv: (-kv[1], kv[0]))
    if not items:
        return html.Div([html.Div(title, className="fw-bold small"), html.Div("—", className="text-muted small")])
    return html.Div([
        html.Div(title, className="fw-bold small"),
        html.Ul([html.Li(f"{k}: {v}", className="small") for k, v in items[:6]], className="mb-0 ps-3"),
    ])


def employee_stat_cards(stats: dict):
    s = stats or {}
    return html.Div([
        dbc.Row([
            dbc.Col(kpi_card("Total", s.get("total", 0), "edge-teal"), md=2),
            dbc.Col(kpi_card("Active", s.get("active", 0), "edge-green"), md=2),
            dbc.Col(kpi_card("On Leave", s.get("onLeave", 0), "edge-amber"), md=2),
            dbc.Col(kpi_card("Resigned / Suspended", f"{s.get('resigned', 0)} / {s.get('suspended', 0)}",
                             "edge-grey"), md=2),
            dbc.Col(kpi_card("Ready for Field", s.get("readyForField", 0), "edge-blue",
                             sub=f"{s.get('needsAttention', 0)} need attention"), md=2),
            dbc.Col(kpi_card("Avg Salary", _fmt_money(s.get("avgSalary")), "edge-purple",
                             sub=f"Total {_fmt_money(s.get('totalSalary'))}"), md=2),
        ], className="g-2"),
        dbc.Row([
            dbc.Col(_breakdown("By department", s.get("departmentStats")), md=4),
            dbc.Col(_breakdown("By site", s.get("siteStats")), md=4),
            dbc.Col(_breakdown("By employment type", s.get("employmentTypeStats")), md=4),
        ], className="g-2"),
    ])


def employees_body():
    actions = [
        dbc.ButtonGroup([
            dbc.Button("Check in", id="employees-check-in", color="info", outline=True),
            dbc.Button("Check out", id="employees-check-out", color="info", outline=True),
            dbc.Button("Mark leave", id="employees-mark-leave", color="warning", outline=True),
        ], size="sm", className="me-2"),
        dbc.Button("Deactivate", id="employees-deactivate", color="danger", outline=True, size="sm",
                   className="me-2"),
        dbc.ButtonGroup([
            dbc.Button("Bulk activate", id="employees-bulk-activate", color="success", outline=True),
            dbc.Button("Bulk deactivate", id="employees-bulk-deactivate", color="secondary", outline=True),
        ], size="sm", className="me-2"),
    ]
    stats = dbc.Card(dbc.CardBody(html.Div(id="employees-stats", children=employee_stat_cards({}))),
                     className="mb-3")
    return html.Div([
        crud_section(EMPLOYEE, extra_toolbar=actions, row_selectable="multi", before_table=[stats]),
    ])


def page_employees():
    return html.Div(dbc.Container([header_bar([("Employees", None)]), employees_body()], fluid=True), className="loading-page")
