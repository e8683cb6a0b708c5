from __future__ import annotations
from typing import List
from dash import html, dcc
import dash_bootstrap_components as dbc

from common import header_bar, data_table
from documents import (CATEGORIES, MODULES, ALLOWED_EXTENSIONS, file_icon, format_file_size, visibility_icon)
from forms import format_date

DOC_COLUMNS = (
    ("", "icon"), ("Title", "title"), ("File", "originalName"), ("Category", "category"),
    ("Size", "size"), ("Access", "access"), ("Uploaded", "createdAt"), ("Expires", "expiryDate"),
)


def document_rows(docs: List[dict]) -> List[dict]:
    rows = []
    for d in docs or []:
        tags = d.get("tags") or []
        rows.append({
            "id": str(d.get("_id") or ""),
            "icon": file_icon(d.get("mimeType") or d.get("mimetype")),
            "title": d.get("title") or "",
            "originalName": d.get("originalName") or d.get("fileName") or "",
            "category": d.get("category") or "",
            "size": format_file_size(d.get("size") or d.get("fileSize")),
            "access": visibility_icon(d),
            "createdAt": format_date(d.get("createdAt")),
            "expiryDate": format_date(d.get("expiryDate")),
            "tags": ", ".join(str(t) for t in tags) if isinstance(tags, list) else str(tags),
        })
    return rows


def _opts(pairs):
    return [{"label": label, "value": value} for value, label in pairs]


def documents_body():
    return html.Div([
        dcc.Store(id="docs-store"),
        dcc.Interval(id="docs-mount", interval=200, max_intervals=1),
        dcc.Download(id="docs-dl"),
        dbc.Alert(id="docs-error", color="danger", is_open=False, dismissable=True),
        dbc.Alert(id="docs-success", color="success", is_open=False, duration=4000),

        dbc.Card(dbc.CardBody([
            html.H5("Document library"),
            dbc.Row([
                dbc.Col(dbc.Select(id="docs-module", options=_opts(MODULES), value="all"), md=2),
                dbc.Col(dbc.Input(id="docs-entity-type", placeholder="Entity type", debounce=True), md=2),
                dbc.Col(dbc.Input(id="docs-entity-id", placeholder="Entity id", debounce=True), md=2),
                dbc.Col(dcc.Dropdown(id="docs-category", options=_opts(CATEGORIES), placeholder="Category",
                                     clearable=True), md=2),
                dbc.Col(dbc.Input(id="docs-search", placeholder="Search title, file or tag...", debounce=True), md=4),
            ], className="g-2 mb-2"),
            html.Div([
                dbc.Button("Refresh", id="docs-refresh", color="secondary", outline=True, className="me-2"),
                dbc.Button("Download", id="docs-download", color="primary", outline=True, className="me-2"),
                html.Span(id="docs-count", className="text-muted small ms-auto"),
            ], className="d-flex align-items-center mb-2"),
            html.Div(data_table("docs-table", DOC_COLUMNS, row_selectable="single", selected_row_ids=[]),
                     className="loading-block"),
        ]), className="mb-3"),

        dbc.Card(dbc.CardBody([
            html.H5("Upload documents"),
            dcc.Upload(id="docs-upload", children=html.Div(["⬆️ Drag & drop or click to select files"]),
                       multiple=True, className="upload-box mb-2"),
            html.Div(id="docs-upload-files", className="text-muted small mb-2"),
            html.Div(f"Accepted: {' '.join(ALLOWED_EXTENSIONS)} (max 50 MB each)", className="text-muted small mb-2"),
            dbc.Row([
                dbc.Col(dbc.Input(id="docs-title", placeholder="Title"), md=4),
                dbc.Col(dbc.Select(id="docs-upload-category", options=_opts(CATEGORIES), value="general"), md=2),
                dbc.Col(dbc.Input(id="docs-tags", placeholder="Tags, comma separated"), md=3),
                dbc.Col(dbc.Input(id="docs-expiry", type="date"), md=2),
                dbc.Col(dbc.Checkbox(id="docs-public", label="Public", value=False), md=1),
            ], className="g-2 mb-2"),
            dbc.Textarea(id="docs-description", placeholder="Description", rows=2, className="mb-2"),
            dbc.Row([
                dbc.Col(dbc.Input(id="docs-retention", placeholder="Retention period (e.g. 7 years)"), md=4),
                dbc.Col(dbc.Input(id="docs-compliance", placeholder="Compliance tags"), md=4),
                dbc.Col(dbc.Button("Upload", id="docs-upload-btn", color="primary", className="w-100"), md=2),
            ], className="g-2 mb-2"),
            dbc.Progress(id="docs-progress", value=0, striped=True, className="mb-1"),
        ]), className="mb-3"),
    ])


def page_documents():
    return html.Div(dbc.Container([header_bar([("Documents", None)]), documents_body()], fluid=True), className="loading-page")
