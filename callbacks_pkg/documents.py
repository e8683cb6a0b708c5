from __future__ import annotations
import logging
from dash import dcc, html, Output, Input, State, no_update
try:
    from dash import ctx
except ImportError:
    from dash import callback_context as ctx
from dash.exceptions import PreventUpdate

from app_instance import app
from common import current_user_fallback
from documents import AttachmentScope, DocumentManager, UploadFile, default_permissions, filter_documents
from pages.documents_page import document_rows

logger = logging.getLogger(__name__)

_manager = DocumentManager()


def _scope(module, entity_type, entity_id) -> AttachmentScope:
    return AttachmentScope.for_selection(module, entity_type or "", entity_id or "")


def upload_metadata(title, description, tags, category, expiry, retention, compliance, public, module) -> dict:
    perms = default_permissions(module if module not in (None, "", "all") else "general")
    perms["isPublic"] = bool(public)
    return {
        "title": (title or "").strip(),
        "description": description or "",
        "tags": tags or "",
        "category": category or "general",
        "expiryDate": expiry or "",
        "retentionPeriod": retention or "",
        "complianceTags": compliance or "",
        "permissions": perms,
    }


@app.callback(
    Output("global-loading", "data", allow_duplicate=True),
    Input("docs-refresh", "n_clicks"),
    Input("docs-upload-btn", "n_clicks"),
    Input("docs-download", "n_clicks"),
    prevent_initial_call=True,
)
def _docs_show_loader(*_):
    if not getattr(ctx, "triggered_id", None):
        raise PreventUpdate
    return True


@app.callback(
    Output("global-loading", "data", allow_duplicate=True),
    Input("docs-store", "data"),
    Input("docs-dl", "data"),
    Input("docs-error", "children"),
    prevent_initial_call=True,
)
def _docs_hide_loader(*_):
    return False


@app.callback(
    Output("docs-store", "data"),
    Output("docs-progress", "value"),
    Output("docs-progress", "label"),
    Input("docs-mount", "n_intervals"),
    Input("docs-refresh", "n_clicks"),
    Input("docs-module", "value"),
    Input("docs-entity-type", "value"),
    Input("docs-entity-id", "value"),
    Input("docs-category", "value"),
    Input("docs-upload-btn", "n_clicks"),
    State("docs-upload", "contents"),
    State("docs-upload", "filename"),
    State("docs-title", "value"),
    State("docs-description", "value"),
    State("docs-tags", "value"),
    State("docs-upload-category", "value"),
    State("docs-expiry", "value"),
    State("docs-retention", "value"),
    State("docs-compliance", "value"),
    State("docs-public", "value"),
    prevent_initial_call=True,
)
def _docs_load_or_upload(_mount, _refresh, module, entity_type, entity_id, category, _upload,
                         contents, filenames, title, description, tags, up_category, expiry,
                         retention, compliance, public):
    trig = ctx.triggered_id
    if not trig:
        raise PreventUpdate
    scope = _scope(module, entity_type, entity_id)
    progress = [0]
    message, error = "", ""

    if trig == "docs-upload-btn":
        files = [UploadFile.from_data_url(name, data) for name, data in zip(filenames or [], contents or [])]
        meta = upload_metadata(title, description, tags, up_category, expiry, retention, compliance, public, module)
        ok, text = _manager.upload(files, meta, scope, on_progress=progress.append)
        if ok:
            message = text
            logger.info("[documents] %s by %s", text, current_user_fallback())
        else:
            error = text

    docs, list_error = _manager.list(scope, category)
    pct = progress[-1]
    return ({"documents": docs, "error": error or list_error, "success": message},
            pct, f"{pct}%" if pct else "")


@app.callback(
    Output("docs-table", "data"),
    Output("docs-count", "children"),
    Output("docs-error", "children"),
    Output("docs-error", "is_open"),
    Output("docs-success", "children"),
    Output("docs-success", "is_open"),
    Input("docs-store", "data"),
    Input("docs-search", "value"),
)
def _docs_table(data, term):
    data = data or {}
    docs = data.get("documents") or []
    shown = filter_documents(docs, term)
    err, ok = data.get("error") or "", data.get("success") or ""
    return document_rows(shown), f"{len(shown)} of {len(docs)}", err, bool(err), ok, bool(ok)


@app.callback(
    Output("docs-upload-files", "children"),
    Input("docs-upload", "filename"),
)
def _docs_selected_files(filenames):
    if not filenames:
        return ""
    return html.Span(f"{len(filenames)} selected: " + ", ".join(filenames))


@app.callback(
    Output("docs-dl", "data"),
    Output("docs-error", "children", allow_duplicate=True),
    Output("docs-error", "is_open", allow_duplicate=True),
    Input("docs-download", "n_clicks"),
    State("docs-table", "selected_row_ids"),
    State("docs-store", "data"),
    prevent_initial_call=True,
)
def _docs_download(n, selected, data):
    if not n:
        raise PreventUpdate
    rid = (selected or [None])[0]
    doc = next((d for d in (data or {}).get("documents") or [] if str(d.get("_id")) == str(rid)), None)
    if doc is None:
        return no_update, "Select a document to download", True
    content, name = _manager.download(doc)
    if content is None:
        return no_update, name, True
    return dcc.send_bytes(content, name), "", False
