from __future__ import annotations
import logging
from typing import Callable
from dash import dcc, Output, Input, State, ALL, no_update
try:
    from dash import ctx
except ImportError:
    from dash import callback_context as ctx
from dash.exceptions import PreventUpdate

from common import table_rows, lookup_names, current_user_fallback
from crud import ModuleState, ResourceController
from csv_export import records_to_csv, add_export_header, export_filename
from filters import make_memo_filter
from forms import ModuleSchema, add_item, remove_item, condition_met, set_path
from pages.crud_page import render_form, collect_draft, build_lookups, filter_options

logger = logging.getLogger(__name__)


def _criteria(schema: ModuleSchema, search_by, flt_values, flt_ids):
    fields = schema.search_fields if search_by in (None, "", "all") else (search_by,)
    exact = {cid["name"]: val for cid, val in zip(flt_ids or [], flt_values or [])}
    return fields, exact


def _title_lookups(lookups) -> dict:
    names = {}
    for opts in (lookups or {}).values():
        names.update(lookup_names(opts))
    return names


def register_crud_callbacks(app, schema: ModuleSchema,
                            controller_factory: Callable[[ModuleSchema], ResourceController] = ResourceController,
                            export_selected: bool = False):
    """Wire one ModuleSchema's crud_section: dispatcher, table, filters, export, loader."""
    k = schema.key
    controller = controller_factory(schema)
    memo_filter = make_memo_filter()

    # ---------------------- dispatcher ----------------------
    @app.callback(
        Output(f"{k}-state", "data"),
        Output(f"{k}-modal", "is_open"),
        Output(f"{k}-modal-title", "children"),
        Output(f"{k}-form", "children"),
        Output(f"{k}-form-error", "children"),
        Output(f"{k}-form-error", "is_open"),
        Output(f"{k}-del-modal", "is_open"),
        Input(f"{k}-mount", "n_intervals"),
        Input(f"{k}-refresh", "n_clicks"),
        Input(f"{k}-add", "n_clicks"),
        Input(f"{k}-edit", "n_clicks"),
        Input(f"{k}-delete", "n_clicks"),
        Input(f"{k}-save", "n_clicks"),
        Input(f"{k}-cancel", "n_clicks"),
        Input(f"{k}-del-confirm", "n_clicks"),
        Input(f"{k}-del-cancel", "n_clicks"),
        Input({"type": "sub-add", "module": k, "list": ALL}, "n_clicks"),
        Input({"type": "sub-rm", "module": k, "list": ALL, "key": ALL}, "n_clicks"),
        State(f"{k}-state", "data"),
        State(f"{k}-table", "selected_row_ids"),
        State({"type": "fld", "module": k, "name": ALL}, "value"),
        State({"type": "fld", "module": k, "name": ALL}, "id"),
        State({"type": "sub", "module": k, "list": ALL, "key": ALL, "name": ALL}, "value"),
        State({"type": "sub", "module": k, "list": ALL, "key": ALL, "name": ALL}, "id"),
        State({"type": "upl", "module": k, "name": ALL}, "filename"),
        State({"type": "upl", "module": k, "name": ALL}, "id"),
        State("employees-shared", "data"),
        State("lookups-shared", "data"),
        prevent_initial_call=True,
    )
    def _dispatch(_mount, _refresh, _add, _edit, _delete, _save, _cancel, _dconf, _dcancel, _sub_add, _sub_rm,
                  data, selected, fld_values, fld_ids, sub_values, sub_ids, upl_names, upl_ids,
                  employees, others):
        trig = ctx.triggered_id
        if trig is None:
            raise PreventUpdate
        if isinstance(trig, dict) and not (ctx.triggered and ctx.triggered[0].get("value")):
            # pattern buttons re-rendered with the form, not clicked
            raise PreventUpdate

        state = ModuleState.from_store(data, k)
        state.success = ""
        if trig not in (f"{k}-del-confirm", f"{k}-del-cancel"):
            state.error = ""
        rid = (selected or [None])[0]
        render = False

        def draft():
            return collect_draft(state.form, fld_ids, fld_values, sub_ids, sub_values, upl_ids, upl_names,
                                 schema=schema)

        if trig in (f"{k}-mount", f"{k}-refresh"):
            controller.load(state)
        elif trig == f"{k}-add":
            controller.open_create(state)
            render = True
        elif trig == f"{k}-edit":
            controller.open_edit(state, controller.find(state, rid))
            render = state.dialog_open
        elif trig == f"{k}-delete":
            controller.request_delete(state, rid)
        elif trig == f"{k}-save":
            controller.submit(state, draft())
            render = True
        elif trig == f"{k}-cancel":
            controller.close(state)
            render = True
        elif trig == f"{k}-del-confirm":
            controller.confirm_delete(state)
        elif trig == f"{k}-del-cancel":
            controller.cancel_delete(state)
        elif isinstance(trig, dict) and trig.get("type") == "sub-add":
            state.form = draft()
            add_item(schema, state.form, trig["list"])
            render = True
        elif isinstance(trig, dict) and trig.get("type") == "sub-rm":
            state.form = draft()
            remove_item(state.form, trig["list"], trig["key"])
            render = True
        else:
            raise PreventUpdate

        if render:
            body = render_form(schema, state.form, build_lookups(employees, others), state.field_errors)
        else:
            body = no_update
        title = f"{'Edit' if state.editing_id else 'Add'} {schema.noun}"
        return (state.to_store(), state.dialog_open, title, body, state.form_error, bool(state.form_error),
                bool(state.pending_delete))

    # ---------------------- banners ----------------------
    @app.callback(
        Output(f"{k}-error", "children"),
        Output(f"{k}-error", "is_open"),
        Output(f"{k}-success", "children"),
        Output(f"{k}-success", "is_open"),
        Input(f"{k}-state", "data"),
    )
    def _banners(data):
        state = ModuleState.from_store(data, k)
        return state.error, bool(state.error), state.success, bool(state.success)

    # ---------------------- conditional fields ----------------------
    @app.callback(
        Output({"type": "fld-wrap", "module": k, "name": ALL}, "style"),
        Input({"type": "fld", "module": k, "name": ALL}, "value"),
        State({"type": "fld", "module": k, "name": ALL}, "id"),
        prevent_initial_call=True,
    )
    def _visibility(values, ids):
        current = {}
        for cid, val in zip(ids or [], values or []):
            set_path(current, cid["name"], val)
        styles = []
        for out in ctx.outputs_list or []:
            f = schema.field_at(out["id"]["name"])
            styles.append({} if condition_met(f.visible_when, current) else {"display": "none"})
        return styles

    # ---------------------- table ----------------------
    @app.callback(
        Output(f"{k}-table", "data"),
        Output(f"{k}-count", "children"),
        Input(f"{k}-state", "data"),
        Input(f"{k}-search", "value"),
        Input(f"{k}-search-by", "value"),
        Input({"type": "flt", "module": k, "name": ALL}, "value"),
        Input("employees-shared", "data"),
        Input("lookups-shared", "data"),
        State({"type": "flt", "module": k, "name": ALL}, "id"),
    )
    def _table(data, term, search_by, flt_values, employees, others, flt_ids):
        state = ModuleState.from_store(data, k)
        fields, exact = _criteria(schema, search_by, flt_values, flt_ids)
        shown = memo_filter(state.records, term, fields, exact)
        names = _title_lookups(build_lookups(employees, others))
        total = len(state.records)
        count = f"{len(shown)} of {total}" if len(shown) != total else f"{total} total"
        return table_rows(shown, schema.table_columns, names), count

    @app.callback(
        Output({"type": "flt", "module": k, "name": ALL}, "options"),
        Input(f"{k}-state", "data"),
    )
    def _filter_options(data):
        state = ModuleState.from_store(data, k)
        return [filter_options(schema, state.records, out["id"]["name"]) for out in ctx.outputs_list or []]

    # ---------------------- export ----------------------
    @app.callback(
        Output(f"{k}-dl", "data"),
        Input(f"{k}-export", "n_clicks"),
        State(f"{k}-state", "data"),
        State(f"{k}-search", "value"),
        State(f"{k}-search-by", "value"),
        State({"type": "flt", "module": k, "name": ALL}, "value"),
        State({"type": "flt", "module": k, "name": ALL}, "id"),
        State(f"{k}-table", "selected_row_ids"),
        prevent_initial_call=True,
    )
    def _export(n, data, term, search_by, flt_values, flt_ids, selected):
        if not n:
            raise PreventUpdate
        state = ModuleState.from_store(data, k)
        fields, exact = _criteria(schema, search_by, flt_values, flt_ids)
        rows = memo_filter(state.records, term, fields, exact)
        if export_selected and selected:
            wanted = {str(s) for s in selected}
            rows = [r for r in rows if str(r.get("_id") or r.get("id")) in wanted]
        user = current_user_fallback()
        text = add_export_header(records_to_csv(rows, schema.columns_for_export()), schema.title, user)
        logger.info("[%s] exported %d rows for %s", k, len(rows), user)
        return dcc.send_string(text, export_filename(k, user))

    # ---------------------- loader ----------------------
    @app.callback(
        Output("global-loading", "data", allow_duplicate=True),
        Input(f"{k}-refresh", "n_clicks"),
        Input(f"{k}-save", "n_clicks"),
        Input(f"{k}-del-confirm", "n_clicks"),
        prevent_initial_call=True,
    )
    def _show_loader(*_):
        if not getattr(ctx, "triggered_id", None):
            raise PreventUpdate
        return True

    @app.callback(
        Output("global-loading", "data", allow_duplicate=True),
        Input(f"{k}-state", "data"),
        prevent_initial_call=True,
    )
    def _hide_loader(_data):
        return False

    return controller
