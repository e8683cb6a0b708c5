# crud.py: generic list/create/update/delete controller for one REST collection
"""
One ``ResourceController`` per admin module. The controller never raises to its
caller: every ``ApiError`` / ``FormError`` is turned into strings on the
module's ``ModuleState`` (``error`` for the page banner, ``form_error`` for the
dialog). The list is always replaced wholesale, never patched in place.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, fields as dc_fields
from typing import Any, Dict, Iterable, List, Optional

from api import ApiError, get_client, resource_path
from forms import FormError, ModuleSchema, defaults, format_for_form, parse_for_submit, validate

logger = logging.getLogger(__name__)

UNEXPECTED_SHAPE = "Unexpected response from server"


def record_id(record: Optional[dict]) -> Optional[str]:
    if not isinstance(record, dict):
        return None
    rid = record.get("_id") or record.get("id")
    return str(rid) if rid not in (None, "") else None


@dataclass
class ModuleState:
    key: str = ""
    records: List[dict] = field(default_factory=list)
    loading: bool = False
    error: str = ""
    success: str = ""
    dialog_open: bool = False
    editing_id: Optional[str] = None
    form: Dict[str, Any] = field(default_factory=dict)
    form_error: str = ""
    field_errors: Dict[str, str] = field(default_factory=dict)
    pending_delete: Optional[str] = None

    def reset_dialog(self, schema: ModuleSchema | None = None) -> "ModuleState":
        """Put every dialog-scoped value back to its default in one go."""
        self.dialog_open = False
        self.editing_id = None
        self.form = defaults(schema) if schema is not None else {}
        self.form_error = ""
        self.field_errors = {}
        return self

    def to_store(self) -> dict:
        return asdict(self)

    @classmethod
    def from_store(cls, data: Optional[dict], key: str = "") -> "ModuleState":
        if not isinstance(data, dict):
            return cls(key=key)
        known = {f.name for f in dc_fields(cls)}
        state = cls(**{k: v for k, v in data.items() if k in known})
        if key and not state.key:
            state.key = key
        if not isinstance(state.records, list):
            state.records = []
        return state


class ResourceController:
    def __init__(self, schema: ModuleSchema, client=None):
        self.schema = schema
        self._client = client

    @property
    def client(self):
        return self._client if self._client is not None else get_client()

    @property
    def noun(self) -> str:
        return self.schema.noun

    def path(self, rid: str | None = None, action: str | None = None) -> str:
        return resource_path(self.schema.resource, rid, action)

    def new_state(self) -> ModuleState:
        return ModuleState(key=self.schema.key, form=defaults(self.schema))

    # ---------------------- list ----------------------
    def extract_records(self, payload) -> Optional[list]:
        if isinstance(payload, list):
            return payload
        if isinstance(payload, dict):
            for k in ("data", self.schema.list_key):
                if k and isinstance(payload.get(k), list):
                    return payload[k]
        return None

    def load(self, state: ModuleState) -> ModuleState:
        state.loading = True
        state.error = ""
        try:
            payload = self.client.get(self.path())
        except ApiError as exc:
            logger.warning("[%s] load failed: %s (status=%s)", self.schema.key, exc, exc.status)
            state.records = []
            state.error = exc.message or f"Failed to fetch {self.schema.title.lower()}"
            return state
        finally:
            state.loading = False
        records = self.extract_records(payload)
        if records is None:
            logger.warning("[%s] unexpected list payload: %s", self.schema.key, type(payload).__name__)
            state.records = []
            state.error = UNEXPECTED_SHAPE
        else:
            state.records = [r for r in records if isinstance(r, dict)]
        return state

    def find(self, state: ModuleState, rid: str | None) -> Optional[dict]:
        if not rid:
            return None
        return next((r for r in state.records if record_id(r) == str(rid)), None)

    # ---------------------- dialog ----------------------
    def open_create(self, state: ModuleState) -> ModuleState:
        state.reset_dialog(self.schema)
        state.dialog_open = True
        return state

    def open_edit(self, state: ModuleState, record: Optional[dict]) -> ModuleState:
        rid = record_id(record)
        if rid is None:
            state.error = f"Select a {self.noun.lower()} to edit"
            return state
        state.reset_dialog(self.schema)
        state.editing_id = rid
        state.form = format_for_form(self.schema, record)
        state.dialog_open = True
        return state

    def close(self, state: ModuleState) -> ModuleState:
        return state.reset_dialog(self.schema)

    def submit(self, state: ModuleState, draft: dict | None = None) -> ModuleState:
        if draft:
            state.form = {**(state.form or {}), **draft}
        state.form_error = ""
        state.field_errors = {}

        try:
            errors = validate(self.schema, state.form)
            if errors:
                raise FormError(errors)
            payload = parse_for_submit(self.schema, state.form)
        except FormError as exc:
            state.field_errors = exc.errors
            state.form_error = exc.summary()
            return state

        editing = state.editing_id
        try:
            if editing:
                self.client.put(self.path(editing), payload)
            else:
                self.client.post(self.path(), payload)
        except ApiError as exc:
            logger.warning("[%s] save failed: %s (status=%s)", self.schema.key, exc, exc.status)
            state.form_error = exc.message or f"Failed to save {self.noun.lower()}"
            return state

        message = f"{self.noun} {'updated' if editing else 'created'}!"
        state.reset_dialog(self.schema)
        self.load(state)
        state.success = message
        return state

    # ---------------------- delete ----------------------
    def request_delete(self, state: ModuleState, rid: str | None) -> ModuleState:
        state.pending_delete = str(rid) if rid else None
        if not rid:
            state.error = f"Select a {self.noun.lower()} to delete"
        return state

    def cancel_delete(self, state: ModuleState) -> ModuleState:
        state.pending_delete = None
        return state

    def confirm_delete(self, state: ModuleState) -> ModuleState:
        rid = state.pending_delete
        if not rid:
            return state
        try:
            self.client.delete(self.path(rid))
        except ApiError as exc:
            logger.warning("[%s] delete %s failed: %s", self.schema.key, rid, exc)
            state.error = exc.message or f"Failed to delete {self.noun.lower()}"
            return state
        finally:
            state.pending_delete = None
        self.load(state)
        state.success = f"{self.noun} deleted!"
        return state


class EmployeeController(ResourceController):
    """Employees add attendance, deactivate and bulk status actions."""

    ATTENDANCE = {
        "check-in": "Checked in successfully",
        "check-out": "Checked out successfully",
        "mark-leave": "Leave marked successfully",
    }

    def _attendance(self, state: ModuleState, rid: str | None, action: str) -> ModuleState:
        if not rid:
            state.error = "Select an employee first"
            return state
        try:
            self.client.post(self.path(rid, f"attendance/{action}"), {})
        except ApiError as exc:
            logger.warning("[employees] %s for %s failed: %s", action, rid, exc)
            state.error = exc.message or f"Failed to {action.replace('-', ' ')}"
            return state
        state.error = ""
        state.success = self.ATTENDANCE[action]
        return state

    def check_in(self, state: ModuleState, rid: str | None) -> ModuleState:
        return self._attendance(state, rid, "check-in")

    def check_out(self, state: ModuleState, rid: str | None) -> ModuleState:
        return self._attendance(state, rid, "check-out")

    def mark_leave(self, state: ModuleState, rid: str | None) -> ModuleState:
        return self._attendance(state, rid, "mark-leave")

    def deactivate(self, state: ModuleState, rid: str | None) -> ModuleState:
        if not rid:
            state.error = "Select an employee first"
            return state
        try:
            self.client.put(self.path(rid, "deactivate"), {})
        except ApiError as exc:
            logger.warning("[employees] deactivate %s failed: %s", rid, exc)
            state.error = exc.message or "Failed to deactivate employee"
            return state
        self.load(state)
        state.success = "Employee deactivated!"
        return state

    def bulk_set_active(self, state: ModuleState, ids: Iterable[str], active: bool) -> ModuleState:
        ids = [str(i) for i in ids if i]
        if not ids:
            state.error = "No employees selected"
            return state
        failed = []
        for rid in ids:
            try:
                self.client.put(self.path(rid), {"active": bool(active)})
            except ApiError as exc:
                logger.warning("[employees] bulk update %s failed: %s", rid, exc)
                failed.append(rid)
        self.load(state)
        done = len(ids) - len(failed)
        verb = "activated" if active else "deactivated"
        if failed:
            state.error = f"Failed to update {len(failed)} of {len(ids)} employees"
        if done:
            state.success = f"{done} employee{'s' if done != 1 else ''} {verb}"
        return state


def load_shared(resource: str, list_key: str | None = None, client=None) -> List[dict]:
    """Read-only lookup lists (employees, assets...) for dropdowns; [] on failure."""
    client = client if client is not None else get_client()
    try:
        payload = client.get(resource_path(resource))
    except ApiError as exc:
        logger.warning("Shared list %s not loaded: %s", resource, exc)
        return []
    if isinstance(payload, dict):
        payload = payload.get("data", payload.get(list_key) if list_key else None)
    if not isinstance(payload, list):
        return []
    return [r for r in payload if isinstance(r, dict)]


def load_shared_employees(client=None) -> List[dict]:
    return load_shared("employees", "employees", client=client)


def load_travel_notifications(client=None) -> tuple[List[dict], str]:
    """Upcoming trips the travel service wants surfaced; ([], message) on failure."""
    client = client if client is not None else get_client()
    try:
        payload = client.get(resource_path("travel_notifications"))
    except ApiError as exc:
        logger.warning("Travel notifications not loaded: %s", exc)
        return [], exc.message or "Failed to load notifications"
    if isinstance(payload, dict):
        payload = payload.get("upcomingTrips", payload.get("data"))
    if not isinstance(payload, list):
        return [], UNEXPECTED_SHAPE
    return [t for t in payload if isinstance(t, dict)], ""
