# documents.py: attachment list/upload/download scoped to an owning record
"""
Attachments live behind ``/documents``; each one belongs to a scope
``(module, category, entityType, entityId)``. Permissions are displayed (lock or
globe) but never checked here, the server enforces them.
"""
from __future__ import annotations

import base64
import logging
import math
import os
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple

from api import ApiError, get_client, resource_path

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 50 * 1024 * 1024
ALLOWED_EXTENSIONS = (
    ".pdf", ".doc", ".docx", ".xls", ".xlsx",
    ".jpeg", ".jpg", ".png", ".gif",
    ".txt", ".zip", ".rar",
)
CATEGORIES = (
    ("contracts", "Contracts"),
    ("invoices", "Invoices"),
    ("employee-docs", "Employee Docs"),
    ("safety-reports", "Safety Reports"),
    ("general", "General"),
)
MODULES = (
    ("all", "All Documents"),
    ("hr", "HR Documents"),
    ("finance", "Finance"),
    ("procurement", "Procurement"),
    ("assets", "Assets"),
    ("hse", "HSE"),
    ("general", "General"),
)
TRAVEL_DOCUMENT_TYPES = ("passport", "visa", "ticket", "hotel_booking", "insurance", "other")
# upload progress: started, request sent, server answered, finished
PROGRESS_START, PROGRESS_SENDING, PROGRESS_ANSWERED, PROGRESS_DONE = 0, 10, 90, 100


@dataclass(frozen=True)
class AttachmentScope:
    module: str
    category: str = ""
    entity_type: str = ""
    entity_id: str = ""

    @classmethod
    def for_selection(cls, module: str | None, entity_type: str = "", entity_id: str = "") -> "AttachmentScope":
        # "all" lists every module; uploads made from it land in "general"
        return cls(module="" if module in (None, "", "all") else module,
                   entity_type=(entity_type or "").strip(), entity_id=(entity_id or "").strip())

    def params(self, category_filter: str | None = None) -> dict:
        # blanks are dropped by the client before the query string is built
        return {
            "module": self.module,
            "category": category_filter or self.category,
            "entityType": self.entity_type,
            "entityId": self.entity_id,
        }


@dataclass
class UploadFile:
    name: str
    content: bytes
    mimetype: str = ""

    @property
    def size(self) -> int:
        return len(self.content or b"")

    @property
    def extension(self) -> str:
        return os.path.splitext(self.name or "")[1].lower()

    @classmethod
    def from_data_url(cls, filename: str, contents: str) -> "UploadFile":
        """Decode what ``dcc.Upload`` hands over: ``data:<mime>;base64,<payload>``."""
        header, _, payload = (contents or "").partition(",")
        mime = header[5:].split(";", 1)[0] if header.startswith("data:") else ""
        return cls(name=filename, content=base64.b64decode(payload or b""), mimetype=mime)


def check_file(f: UploadFile) -> Optional[str]:
    if f.extension not in ALLOWED_EXTENSIONS:
        return f"{f.name}: file type not supported"
    if f.size > MAX_UPLOAD_BYTES:
        return f"{f.name}: larger than 50 MB"
    return None


def default_permissions(module: str) -> dict:
    return {"roles": [module], "users": [], "departments": [], "isPublic": False}


def format_file_size(n) -> str:
    try:
        n = int(n)
    except (TypeError, ValueError):
        return "0 Bytes"
    if n <= 0:
        return "0 Bytes"
    units = ("Bytes", "KB", "MB", "GB", "TB")
    i = min(int(math.floor(math.log(n, 1024))), len(units) - 1)
    val = round(n / (1024 ** i), 2)
    text = f"{val:.2f}".rstrip("0").rstrip(".")
    return f"{text} {units[i]}"


def visibility_icon(document: dict) -> str:
    perms = (document or {}).get("permissions") or {}
    return "🌐" if perms.get("isPublic") else "🔒"


def file_icon(mime: str | None) -> str:
    mime = (mime or "").lower()
    if "pdf" in mime:
        return "📄"
    if "word" in mime:
        return "📝"
    if "excel" in mime or "spreadsheet" in mime:
        return "📊"
    if "image" in mime:
        return "🖼️"
    if "zip" in mime or "rar" in mime:
        return "📦"
    return "📄"


def filter_documents(docs: Iterable[dict], term: str = "", category: str = "") -> List[dict]:
    term = (term or "").strip().lower()
    out = []
    for doc in docs or []:
        if category and doc.get("category") != category:
            continue
        if term:
            hay = [str(doc.get("title") or ""), str(doc.get("originalName") or "")]
            hay += [str(t) for t in (doc.get("tags") or [])]
            if not any(term in h.lower() for h in hay):
                continue
        out.append(doc)
    return out


def document_key(doc: dict) -> str:
    """Stable key for attachment entries embedded in a record."""
    return str(doc.get("_id") or doc.get("fileUrl") or doc.get("fileName") or doc.get("name") or "")


class DocumentManager:
    def __init__(self, client=None):
        self._client = client

    @property
    def client(self):
        return self._client if self._client is not None else get_client()

    def list(self, scope: AttachmentScope, category_filter: str | None = None) -> Tuple[List[dict], str]:
        try:
            payload = self.client.get(resource_path("documents"), params=scope.params(category_filter))
        except ApiError as exc:
            logger.warning("Documents for %s not loaded: %s", scope, exc)
            return [], exc.message or "Failed to load documents"
        if isinstance(payload, dict):
            payload = payload.get("documents", payload.get("data"))
        if not isinstance(payload, list):
            return [], "Unexpected response from server"
        return [d for d in payload if isinstance(d, dict)], ""

    def upload(self, files: List[UploadFile], metadata: dict | None, scope: AttachmentScope,
               on_progress: Callable[[int], None] | None = None) -> Tuple[bool, str]:
        report = on_progress or (lambda pct: None)
        report(PROGRESS_START)
        files = list(files or [])
        if not files:
            return False, "Select at least one file"
        problems = [p for p in (check_file(f) for f in files) if p]
        if problems:
            return False, "; ".join(problems)

        meta = dict(metadata or {})
        data = {
            "title": meta.get("title") or os.path.splitext(files[0].name)[0],
            "description": meta.get("description", ""),
            "module": scope.module or "general",
            "category": meta.get("category") or scope.category or "general",
            "entityType": scope.entity_type or "",
            "entityId": scope.entity_id or "",
            "tags": meta.get("tags", ""),
            "permissions": meta.get("permissions") or default_permissions(scope.module or "general"),
            "expiryDate": meta.get("expiryDate", ""),
            "retentionPeriod": meta.get("retentionPeriod", ""),
            "complianceTags": meta.get("complianceTags", ""),
        }
        report(PROGRESS_SENDING)
        try:
            self.client.upload(
                resource_path("documents", action="upload"),
                [(f.name, f.content, f.mimetype) for f in files],
                data,
            )
        except ApiError as exc:
            logger.warning("Upload to %s failed: %s", scope, exc)
            report(PROGRESS_START)
            return False, exc.message or "Upload failed"
        report(PROGRESS_ANSWERED)
        logger.info("Uploaded %d file(s) to %s", len(files), scope)
        report(PROGRESS_DONE)
        n = len(files)
        return True, f"{n} document{'s' if n != 1 else ''} uploaded"

    def download(self, document: dict) -> Tuple[Optional[bytes], str]:
        """(content, filename) on success, (None, error message) on failure."""
        doc_id = (document or {}).get("_id")
        if not doc_id:
            return None, "Document has no id"
        try:
            content = self.client.download(resource_path("documents", doc_id, "download"))
        except ApiError as exc:
            logger.warning("Download of %s failed: %s", doc_id, exc)
            return None, exc.message or "Download failed"
        return content, document.get("originalName") or document.get("fileName") or f"{doc_id}"

    # ---------------------- travel record attachments ----------------------
    def travel_documents(self, travel_id: str) -> Tuple[List[dict], str]:
        try:
            rec = self.client.get(resource_path("travel", travel_id))
        except ApiError as exc:
            return [], exc.message or "Failed to load travel documents"
        docs = rec.get("documents") if isinstance(rec, dict) else None
        return [d for d in (docs or []) if isinstance(d, dict)], ""

    def upload_travel_document(self, travel_id: str, doc_type: str,
                               file: UploadFile | None) -> Tuple[List[dict], str]:
        if not doc_type or file is None:
            return [], "Please select type and file"
        problem = check_file(file)
        if problem:
            return [], problem
        try:
            self.client.upload(resource_path("travel", travel_id, "documents"),
                               [(file.name, file.content, file.mimetype)], {"type": doc_type}, field="file")
        except ApiError as exc:
            logger.warning("Travel document upload for %s failed: %s", travel_id, exc)
            return [], exc.message or "Upload failed"
        return self.travel_documents(travel_id)

    def remove_travel_document(self, record: dict, key: str) -> Tuple[List[dict], str]:
        travel_id = (record or {}).get("_id")
        docs = [d for d in (record or {}).get("documents") or [] if isinstance(d, dict)]
        remaining = [d for d in docs if document_key(d) != key]
        if not travel_id:
            return docs, "Travel record has no id"
        try:
            self.client.put(resource_path("travel", travel_id), {"documents": remaining})
        except ApiError as exc:
            logger.warning("Travel document removal for %s failed: %s", travel_id, exc)
            return docs, "Delete failed"
        return remaining, ""
