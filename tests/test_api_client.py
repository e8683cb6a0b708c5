from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest
import requests

from api import ApiClient, ApiError, configure_client, describe_current_client, get_client, resource_path
from api import client as client_mod


def _response(status=200, body=None, content=None):
    resp = MagicMock()
    resp.status_code = status
    if content is None:
        content = b"" if body is None else json.dumps(body).encode()
    resp.content = content
    resp.text = content.decode("utf-8", "replace")
    if body is None:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = body
    return resp


def _client(*responses, token=None):
    session = MagicMock()
    session.headers = {}
    session.request.side_effect = list(responses)
    return ApiClient("http://api.test/", token=token, timeout=5, session=session), session


def test_resource_paths():
    assert resource_path("employees") == "/employees"
    assert resource_path("residencies", "abc") == "/admin/employee-residencies/abc"
    assert resource_path("employees", "e1", "attendance/check-in") == "/employees/e1/attendance/check-in"
    assert resource_path("documents", action="upload") == "/documents/upload"
    with pytest.raises(KeyError):
        resource_path("nope")


def test_get_builds_url_and_drops_blank_params():
    api, session = _client(_response(body=[{"_id": "1"}]), token="tok")
    out = api.get("/documents", params={"module": "hr", "category": "", "entityId": None})
    assert out == [{"_id": "1"}]
    args, kwargs = session.request.call_args
    assert args == ("GET", "http://api.test/api/documents")
    assert kwargs["params"] == {"module": "hr"}
    assert kwargs["timeout"] == 5
    assert session.headers["Authorization"] == "Bearer tok"


def test_error_carries_server_message_and_status():
    api, _ = _client(_response(400, {"message": "Plate number already exists"}))
    with pytest.raises(ApiError) as info:
        api.post("/admin/vehicle-registrations", {"plateNumber": "1"})
    assert info.value.message == "Plate number already exists"
    assert info.value.status == 400
    assert not info.value.is_auth_error


def test_error_without_message_field():
    api, _ = _client(_response(500, content=b"<html>boom</html>"))
    with pytest.raises(ApiError) as info:
        api.delete("/employees/1")
    assert info.value.message is None
    assert str(info.value) == "Request failed"


def test_unauthorized_is_flagged():
    api, _ = _client(_response(401, {"error": "jwt expired"}))
    with pytest.raises(ApiError) as info:
        api.get("/employees")
    assert info.value.is_auth_error
    assert info.value.message == "jwt expired"


def test_transport_failure_becomes_api_error():
    session = MagicMock()
    session.headers = {}
    session.request.side_effect = requests.ConnectionError("refused")
    api = ApiClient("http://api.test", session=session)
    with pytest.raises(ApiError) as info:
        api.get("/employees")
    assert info.value.status is None


def test_empty_body_decodes_to_none():
    api, _ = _client(_response(204, content=b""))
    assert api.delete("/employees/1") is None


def test_upload_sends_multipart_fields():
    api, session = _client(_response(body={"ok": True}))
    api.upload("/documents/upload", [("a.pdf", b"%PDF", "application/pdf")],
               {"title": "A", "permissions": {"isPublic": False}, "expiryDate": None})
    _, kwargs = session.request.call_args
    assert kwargs["files"] == [("files", ("a.pdf", b"%PDF", "application/pdf"))]
    assert kwargs["data"]["permissions"] == json.dumps({"isPublic": False})
    assert kwargs["data"]["expiryDate"] == ""


def test_configure_client_from_env(monkeypatch):
    monkeypatch.setenv("ADMIN_API_BASE", "http://backend:9000/")
    monkeypatch.setenv("ADMIN_API_TIMEOUT", "12")
    monkeypatch.delenv("ADMIN_API_TOKEN", raising=False)
    configured = configure_client()
    assert get_client() is configured
    info = describe_current_client()
    assert info["api_root"] == "http://backend:9000/api"
    assert info["timeout"] == 12.0
    assert info["has_token"] is False


def test_invalid_timeout_falls_back_to_default(monkeypatch):
    monkeypatch.setenv("ADMIN_API_TIMEOUT", "soon")
    assert client_mod._timeout_from_env() == client_mod.DEFAULT_TIMEOUT
    monkeypatch.setenv("ADMIN_API_TIMEOUT", "0")
    assert client_mod._timeout_from_env() is None
