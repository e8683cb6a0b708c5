from __future__ import annotations

import copy
import itertools
import os

import pytest

os.environ.setdefault("FLASK_SECRET_KEY", "test-secret")

from api import ApiError, set_client


class FakeBackend:
    """In-memory stand-in for the admin REST service.

    Collections are keyed by path ("/employees", "/admin/legal-cases"...). The
    server assigns ``_id`` and ``createdAt``. ``fail`` maps "METHOD path" (or
    "METHOD *") to an ApiError raised on the next matching call; ``shapes``
    overrides the GET payload for a collection path.
    """

    def __init__(self):
        self.collections: dict[str, list] = {}
        self.calls: list[tuple] = []
        self.fail: dict[str, ApiError] = {}
        self.shapes: dict[str, object] = {}
        self.downloads: dict[str, bytes] = {}
        self._ids = itertools.count(1)

    # ---- helpers ----
    def seed(self, path: str, records):
        self.collections[path] = [dict(r) for r in records]
        return self.collections[path]

    def _check(self, method: str, path: str):
        self.calls.append((method, path))
        for key in (f"{method} {path}", f"{method} *"):
            if key in self.fail:
                raise self.fail.pop(key)

    def _split(self, path: str):
        for coll in sorted(self.collections, key=len, reverse=True):
            if path == coll:
                return coll, None
            if path.startswith(coll + "/"):
                rest = path[len(coll) + 1:]
                return coll, rest.split("/", 1)[0]
        return path, None

    # ---- client surface ----
    def get(self, path, params=None):
        self._check("GET", path)
        if path in self.shapes:
            return copy.deepcopy(self.shapes[path])
        coll, rid = self._split(path)
        records = self.collections.get(coll, [])
        if rid is None:
            return copy.deepcopy(records)
        rec = next((r for r in records if r.get("_id") == rid), None)
        if rec is None:
            raise ApiError("Not found", 404)
        return copy.deepcopy(rec)

    def post(self, path, payload=None):
        self._check("POST", path)
        coll, rid = self._split(path)
        if rid is not None:
            return {"ok": True}
        rec = dict(copy.deepcopy(payload or {}))
        rec["_id"] = f"id{next(self._ids)}"
        rec["createdAt"] = "2024-01-01T00:00:00Z"
        self.collections.setdefault(coll, []).append(rec)
        return rec

    def put(self, path, payload=None):
        self._check("PUT", path)
        coll, rid = self._split(path)
        for rec in self.collections.get(coll, []):
            if rec.get("_id") == rid:
                if path.endswith("/deactivate"):
                    rec["active"] = False
                    rec["status"] = "resigned"
                else:
                    rec.update(copy.deepcopy(payload or {}))
                return copy.deepcopy(rec)
        raise ApiError("Not found", 404)

    def delete(self, path):
        self._check("DELETE", path)
        coll, rid = self._split(path)
        records = self.collections.get(coll, [])
        keep = [r for r in records if r.get("_id") != rid]
        if len(keep) == len(records):
            raise ApiError("Not found", 404)
        self.collections[coll] = keep
        return {"message": "deleted"}

    def upload(self, path, files, data=None, field="files"):
        self._check("POST", path)
        self.calls[-1] = ("UPLOAD", path, [f[0] for f in files], dict(data or {}), field)
        return {"ok": True}

    def download(self, path):
        self._check("GET", path)
        return self.downloads.get(path, b"")


@pytest.fixture
def backend():
    fake = FakeBackend()
    set_client(fake)
    return fake
