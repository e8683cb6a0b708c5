from __future__ import annotations
from dash import Output, Input, State
try:
    from dash import ctx
except ImportError:
    from dash import callback_context as ctx
from dash.exceptions import PreventUpdate

from app_instance import app
from crud import EmployeeController, ModuleState
from dashboard_core import employee_stats
from module_schemas import EMPLOYEE
from pages.employees_page import employee_stat_cards

_controller = EmployeeController(EMPLOYEE)

ACTION_BUTTONS = (
    "employees-check-in", "employees-check-out", "employees-mark-leave",
    "employees-deactivate", "employees-bulk-activate", "employees-bulk-deactivate",
)


@app.callback(
    Output("global-loading", "data", allow_duplicate=True),
    *[Input(b, "n_clicks") for b in ACTION_BUTTONS],
    prevent_initial_call=True,
)
def _employees_show_loader(*_):
    if not getattr(ctx, "triggered_id", None):
        raise PreventUpdate
    return True


@app.callback(
    Output("employees-state", "data", allow_duplicate=True),
    *[Input(b, "n_clicks") for b in ACTION_BUTTONS],
    State("employees-state", "data"),
    State("employees-table", "selected_row_ids"),
    prevent_initial_call=True,
)
def _employee_actions(*args):
    data, selected = args[-2], args[-1]
    trig = ctx.triggered_id
    if not trig:
        raise PreventUpdate
    state = ModuleState.from_store(data, EMPLOYEE.key)
    state.error = ""
    state.success = ""
    ids = list(selected or [])
    rid = ids[0] if ids else None

    if trig == "employees-check-in":
        _controller.check_in(state, rid)
    elif trig == "employees-check-out":
        _controller.check_out(state, rid)
    elif trig == "employees-mark-leave":
        _controller.mark_leave(state, rid)
    elif trig == "employees-deactivate":
        _controller.deactivate(state, rid)
    elif trig == "employees-bulk-activate":
        _controller.bulk_set_active(state, ids, True)
    elif trig == "employees-bulk-deactivate":
        _controller.bulk_set_active(state, ids, False)
    else:
        raise PreventUpdate
    return state.to_store()


@app.callback(Output("employees-stats", "children"), Input("employees-state", "data"))
def _employee_stats(data):
    state = ModuleState.from_store(data, EMPLOYEE.key)
    return employee_stat_cards(employee_stats(state.records))
