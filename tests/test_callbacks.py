from __future__ import annotations

import pytest
from dash.exceptions import PreventUpdate

from api import ApiError
from callbacks_pkg.dashboard import load_dashboard_data, _render_dashboard
from callbacks_pkg.documents import upload_metadata
from callbacks_pkg.shared import lookups_for, slim_employee, toggle_sidebar, set_wrapper_class
from callbacks_pkg.crud import _criteria
from callbacks_pkg.travel import toggle_rollups
from module_schemas import EMPLOYEE


def test_dashboard_data_collects_lists_and_errors(backend):
    backend.seed("/employees", [{"_id": "e1", "name": "Jane"}])
    backend.seed("/admin/legal-cases", [{"_id": "c1", "status": "open", "caseType": "traffic_fine"}])
    backend.fail["GET /admin/company-facilities"] = ApiError("Forbidden", 403)
    data = load_dashboard_data()
    assert data["employees"] == [{"_id": "e1", "name": "Jane"}]
    assert data["legal"][0]["_id"] == "c1"
    assert data["facilities"] == []
    assert data["errors"] == ["Company Facilities: Forbidden"]


def test_render_dashboard_reports_errors():
    out = _render_dashboard({"errors": ["Legal Cases: down"], "legal": [{"caseType": "traffic_fine"}]})
    assert out[-2:] == ("Legal Cases: down", True)
    legal_fig = out[3]
    assert list(legal_fig.data[0].x) == ["Traffic_fine"]


def test_render_dashboard_without_data():
    out = _render_dashboard(None)
    assert out[-1] is False


def test_upload_metadata_defaults():
    meta = upload_metadata(" Lease ", None, "a,b", None, "", None, None, True, "all")
    assert meta["title"] == "Lease"
    assert meta["category"] == "general"
    assert meta["permissions"] == {"roles": ["general"], "users": [], "departments": [], "isPublic": True}


def test_slim_employee_drops_heavy_fields():
    rec = {"_id": "e1", "name": "Jane", "salary": 900, "privateNotes": "x", "site": ""}
    assert slim_employee(rec) == {"_id": "e1", "name": "Jane"}


def test_route_lookups():
    assert lookups_for("/admin/vehicles/") == ("assets",)
    assert lookups_for("/travel") == ("travel_requests",)
    assert lookups_for("/employees") == ()


def test_sidebar_toggle():
    assert toggle_sidebar(1, True) is False
    assert set_wrapper_class(True) == "sidebar-collapsed"
    with pytest.raises(PreventUpdate):
        toggle_sidebar(0, True)


def test_search_criteria():
    fields, exact = _criteria(EMPLOYEE, "all", ["Ops", None], [{"name": "department"}, {"name": "status"}])
    assert fields == EMPLOYEE.search_fields
    assert exact == {"department": "Ops", "status": None}
    fields, _ = _criteria(EMPLOYEE, "email", [], [])
    assert fields == ("email",)


def test_rollup_panel_toggle_flips_chevron():
    is_open, icon = toggle_rollups(1, True)
    assert is_open is False
    assert icon.children[0].d == "m5 15 7-7 7 7"
    assert toggle_rollups(2, False)[0] is True
    with pytest.raises(PreventUpdate):
        toggle_rollups(None, True)
