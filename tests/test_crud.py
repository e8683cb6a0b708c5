from __future__ import annotations

from api import ApiError
from crud import (UNEXPECTED_SHAPE, EmployeeController, ModuleState, ResourceController, load_shared,
                  load_shared_employees, load_travel_notifications, record_id)
from forms import add_item
from module_schemas import EMPLOYEE, LEGAL_CASE, RESIDENCY, VEHICLE


def _jane(**extra):
    return {"name": "Jane Doe", "department": "Logistics", **extra}


def test_record_id():
    assert record_id({"_id": "x"}) == "x"
    assert record_id({"id": 7}) == "7"
    assert record_id({}) is None
    assert record_id(None) is None


def test_load_accepts_list_and_wrapped_shapes(backend):
    ctrl = ResourceController(EMPLOYEE)
    backend.seed("/employees", [{"_id": "1", "name": "A"}])
    state = ctrl.load(ctrl.new_state())
    assert [r["name"] for r in state.records] == ["A"]
    assert state.error == "" and state.loading is False

    backend.shapes["/employees"] = {"data": [{"_id": "2"}]}
    assert [r["_id"] for r in ctrl.load(state).records] == ["2"]

    backend.shapes["/employees"] = {"employees": [{"_id": "3"}], "total": 1}
    assert [r["_id"] for r in ctrl.load(state).records] == ["3"]


def test_load_unexpected_shape_clears_list(backend):
    ctrl = ResourceController(RESIDENCY)
    state = ctrl.new_state()
    state.records = [{"_id": "old"}]
    backend.shapes["/admin/employee-residencies"] = {"message": "ok"}
    ctrl.load(state)
    assert state.records == []
    assert state.error == UNEXPECTED_SHAPE


def test_load_null_payload_leaves_empty_list_with_error(backend):
    ctrl = ResourceController(LEGAL_CASE)
    state = ctrl.new_state()
    state.records = [{"_id": "old"}]
    backend.shapes["/admin/legal-cases"] = None
    ctrl.load(state)
    assert state.records == []
    assert state.error == UNEXPECTED_SHAPE
    assert state.loading is False


def test_load_failure_reports_server_message(backend):
    ctrl = ResourceController(LEGAL_CASE)
    backend.fail["GET /admin/legal-cases"] = ApiError("Database unavailable", 503)
    state = ctrl.load(ctrl.new_state())
    assert state.error == "Database unavailable"
    assert state.records == []

    backend.fail["GET /admin/legal-cases"] = ApiError(None, None)
    assert ctrl.load(state).error == "Failed to fetch legal cases"


def test_create_then_delete_end_to_end(backend):
    ctrl = ResourceController(EMPLOYEE)
    state = ctrl.load(ctrl.new_state())
    assert state.records == []

    ctrl.open_create(state)
    assert state.dialog_open and state.editing_id is None
    ctrl.submit(state, _jane())
    assert state.success == "Employee created!"
    assert state.dialog_open is False
    assert len(state.records) == 1
    created = state.records[0]
    assert created["name"] == "Jane Doe"
    assert created["status"] == "active"
    assert created["_id"] and created["createdAt"]

    ctrl.request_delete(state, created["_id"])
    assert state.pending_delete == created["_id"]
    ctrl.confirm_delete(state)
    assert state.records == []
    assert state.pending_delete is None
    assert state.success == "Employee deleted!"


def test_submit_validation_keeps_dialog_and_skips_request(backend):
    ctrl = ResourceController(EMPLOYEE)
    state = ctrl.open_create(ctrl.new_state())
    ctrl.submit(state, {"name": "Nameless dept"})
    assert state.dialog_open
    assert "department" in state.field_errors
    assert state.form_error.startswith("Please fix:")
    assert not [c for c in backend.calls if c[0] == "POST"]


def test_edit_puts_to_record_and_reloads(backend):
    backend.seed("/employees", [dict(_jane(), _id="e1", status="active", hireDate="2023-02-01T00:00:00Z")])
    ctrl = ResourceController(EMPLOYEE)
    state = ctrl.load(ctrl.new_state())
    ctrl.open_edit(state, ctrl.find(state, "e1"))
    assert state.editing_id == "e1"
    assert state.form["hireDate"] == "2023-02-01"
    ctrl.submit(state, {"position": "Driver"})
    assert ("PUT", "/employees/e1") in backend.calls
    assert state.success == "Employee updated!"
    assert state.records[0]["position"] == "Driver"


def test_untouched_residency_edit_keeps_passes(backend):
    koc = {"passType": "KOC", "issuanceDate": "2024-01-01T00:00:00Z", "expiryDate": "2025-01-01T00:00:00Z",
           "sponsor": "Masar"}
    backend.seed("/admin/employee-residencies", [{"_id": "r1", "employee": {"_id": "e1", "name": "Jane"},
                                                  "hasPasses": True, "passes": [koc]}])
    ctrl = ResourceController(RESIDENCY)
    state = ctrl.load(ctrl.new_state())
    ctrl.open_edit(state, ctrl.find(state, "r1"))
    assert state.form["hasPasses"] == "true"
    assert len(state.form["passes"]) == 1
    ctrl.submit(state)
    assert ("PUT", "/admin/employee-residencies/r1") in backend.calls
    stored = backend.collections["/admin/employee-residencies"][0]
    assert stored["hasPasses"] is True
    assert [p["passType"] for p in stored["passes"]] == ["KOC"]


def test_vehicle_boolean_pass_flag_maps_to_select_option(backend):
    backend.seed("/admin/vehicle-registrations", [{"_id": "v1", "hasPasses": False}])
    ctrl = ResourceController(VEHICLE)
    state = ctrl.load(ctrl.new_state())
    ctrl.open_edit(state, ctrl.find(state, "v1"))
    assert state.form["hasPasses"] == "no"


def test_save_failure_shows_server_message_in_dialog(backend):
    ctrl = ResourceController(EMPLOYEE)
    state = ctrl.open_create(ctrl.new_state())
    backend.fail["POST /employees"] = ApiError("Employee ID already exists", 409)
    ctrl.submit(state, _jane())
    assert state.dialog_open
    assert state.form_error == "Employee ID already exists"
    assert state.success == ""


def test_edit_and_delete_without_selection(backend):
    ctrl = ResourceController(LEGAL_CASE)
    state = ctrl.new_state()
    ctrl.open_edit(state, None)
    assert state.error == "Select a legal case to edit"
    assert not state.dialog_open
    ctrl.request_delete(state, None)
    assert state.pending_delete is None
    assert state.error == "Select a legal case to delete"


def test_failed_delete_keeps_list_and_clears_pending(backend):
    backend.seed("/admin/legal-cases", [{"_id": "c1", "caseNumber": "1"}])
    ctrl = ResourceController(LEGAL_CASE)
    state = ctrl.load(ctrl.new_state())
    ctrl.request_delete(state, "c1")
    backend.fail["DELETE /admin/legal-cases/c1"] = ApiError("Case is locked", 423)
    gets_before = backend.calls.count(("GET", "/admin/legal-cases"))
    ctrl.confirm_delete(state)
    assert state.error == "Case is locked"
    assert state.pending_delete is None
    assert len(state.records) == 1
    assert backend.calls.count(("GET", "/admin/legal-cases")) == gets_before


def test_request_delete_alone_sends_nothing(backend):
    backend.seed("/admin/legal-cases", [{"_id": "c1", "caseNumber": "1"}])
    ctrl = ResourceController(LEGAL_CASE)
    state = ctrl.load(ctrl.new_state())
    ctrl.request_delete(state, "c1")
    assert state.pending_delete == "c1"
    assert not [c for c in backend.calls if c[0] == "DELETE"]
    ctrl.cancel_delete(state)
    assert state.pending_delete is None
    assert len(backend.collections["/admin/legal-cases"]) == 1


def test_cancel_resets_every_dialog_value(backend):
    ctrl = ResourceController(LEGAL_CASE)
    state = ctrl.open_create(ctrl.new_state())
    add_item(LEGAL_CASE, state.form, "parties", {"name": "X"})
    state.form_error = "bad"
    state.field_errors = {"title": "Title is required"}
    ctrl.close(state)
    assert not state.dialog_open
    assert state.form_error == "" and state.field_errors == {}
    assert len(state.form["parties"]) == 1
    assert state.form["parties"][0]["name"] == ""


def test_state_store_round_trip_ignores_unknown_keys():
    state = ModuleState(key="legal", records=[{"_id": "1"}], error="x")
    data = state.to_store()
    data["junk"] = True
    back = ModuleState.from_store(data, "legal")
    assert back.records == [{"_id": "1"}]
    assert back.error == "x"
    assert ModuleState.from_store(None, "legal").key == "legal"


def test_attendance_actions(backend):
    backend.seed("/employees", [dict(_jane(), _id="e1")])
    ctrl = EmployeeController(EMPLOYEE)
    state = ctrl.load(ctrl.new_state())
    ctrl.check_in(state, "e1")
    assert state.success == "Checked in successfully"
    assert ("POST", "/employees/e1/attendance/check-in") in backend.calls
    ctrl.mark_leave(state, None)
    assert state.error == "Select an employee first"
    backend.fail["POST /employees/e1/attendance/check-out"] = ApiError("Not checked in", 400)
    ctrl.check_out(state, "e1")
    assert state.error == "Not checked in"


def test_deactivate_and_bulk(backend):
    backend.seed("/employees", [dict(_jane(), _id="e1"), {"_id": "e2", "name": "B"}, {"_id": "e3", "name": "C"}])
    ctrl = EmployeeController(EMPLOYEE)
    state = ctrl.load(ctrl.new_state())
    ctrl.deactivate(state, "e1")
    assert state.success == "Employee deactivated!"
    assert ctrl.find(state, "e1")["active"] is False

    backend.fail["PUT /employees/e3"] = ApiError("nope", 500)
    ctrl.bulk_set_active(state, ["e2", "e3"], True)
    assert state.success == "1 employee activated"
    assert state.error == "Failed to update 1 of 2 employees"

    ctrl.bulk_set_active(state, [], False)
    assert state.error == "No employees selected"


def test_shared_lists_never_raise(backend):
    backend.collections["/employees"] = [{"_id": "e1", "name": "A"}, "junk"]
    assert load_shared_employees() == [{"_id": "e1", "name": "A"}]
    backend.fail["GET /admin/assets"] = ApiError("down", 500)
    assert load_shared("assets", "assets") == []
    backend.shapes["/admin/assets"] = {"assets": [{"_id": "a1"}]}
    assert load_shared("assets", "assets") == [{"_id": "a1"}]


def test_travel_notifications(backend):
    backend.shapes["/travel/notifications"] = {"upcomingTrips": [{"_id": "t1"}]}
    assert load_travel_notifications() == ([{"_id": "t1"}], "")
    backend.shapes["/travel/notifications"] = "oops"
    assert load_travel_notifications() == ([], UNEXPECTED_SHAPE)
    backend.fail["GET /travel/notifications"] = ApiError(None, 500)
    assert load_travel_notifications() == ([], "Failed to load notifications")
