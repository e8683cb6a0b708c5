from __future__ import annotations

import base64

import pytest

from api import ApiError
from documents import (MAX_UPLOAD_BYTES, AttachmentScope, DocumentManager, UploadFile, check_file,
                       document_key, file_icon, filter_documents, format_file_size, visibility_icon)


def test_upload_file_from_data_url():
    url = "data:application/pdf;base64," + base64.b64encode(b"%PDF-1.4").decode()
    f = UploadFile.from_data_url("Contract.PDF", url)
    assert f.content == b"%PDF-1.4"
    assert f.mimetype == "application/pdf"
    assert f.extension == ".pdf"
    assert check_file(f) is None


def test_check_file_rejects_type_and_size():
    assert "not supported" in check_file(UploadFile("run.exe", b"x"))
    big = UploadFile("big.zip", b"0" * (MAX_UPLOAD_BYTES + 1))
    assert "50 MB" in check_file(big)


@pytest.mark.parametrize("n,text", [(0, "0 Bytes"), (None, "0 Bytes"), (500, "500 Bytes"), (1024, "1 KB"),
                                    (1536, "1.5 KB"), (5 * 1024 * 1024, "5 MB")])
def test_format_file_size(n, text):
    assert format_file_size(n) == text


def test_icons():
    assert visibility_icon({"permissions": {"isPublic": True}}) == "🌐"
    assert visibility_icon({}) == "🔒"
    assert file_icon("application/vnd.ms-excel") == "📊"
    assert file_icon(None) == "📄"


def test_filter_documents_by_term_and_category():
    docs = [{"title": "Lease", "category": "contracts", "tags": ["office"]},
            {"title": "Invoice 7", "category": "invoices", "originalName": "inv7.pdf", "tags": []}]
    assert filter_documents(docs, "OFFICE") == docs[:1]
    assert filter_documents(docs, "inv7") == docs[1:]
    assert filter_documents(docs, "", "contracts") == docs[:1]


def test_scope_for_all_module():
    scope = AttachmentScope.for_selection("all", " employee ", "")
    assert scope.module == ""
    assert scope.params("invoices") == {"module": "", "category": "invoices", "entityType": "employee",
                                        "entityId": ""}


def test_list_documents_shapes(backend):
    backend.shapes["/documents"] = {"documents": [{"_id": "d1"}]}
    docs, err = DocumentManager().list(AttachmentScope("hr"))
    assert docs == [{"_id": "d1"}] and err == ""
    backend.shapes["/documents"] = 42
    assert DocumentManager().list(AttachmentScope("hr")) == ([], "Unexpected response from server")


def test_upload_validates_then_posts_with_progress(backend):
    mgr = DocumentManager()
    progress = []
    ok, msg = mgr.upload([], {}, AttachmentScope("hr"))
    assert (ok, msg) == (False, "Select at least one file")

    ok, msg = mgr.upload([UploadFile("a.pdf", b"1", "application/pdf"), UploadFile("b.png", b"2", "image/png")],
                         {"title": "", "tags": "x"}, AttachmentScope.for_selection("all"), on_progress=progress.append)
    assert ok and msg == "2 documents uploaded"
    assert progress == [0, 10, 90, 100]
    kind, path, names, data, field = backend.calls[-1]
    assert (kind, path, names, field) == ("UPLOAD", "/documents/upload", ["a.pdf", "b.png"], "files")
    assert data["title"] == "a"
    assert data["module"] == "general"
    assert data["permissions"]["roles"] == ["general"]


def test_upload_failure_resets_progress(backend):
    backend.fail["POST /documents/upload"] = ApiError("Storage full", 507)
    progress = []
    ok, msg = DocumentManager().upload([UploadFile("a.txt", b"1")], {}, AttachmentScope("hse"),
                                       on_progress=progress.append)
    assert (ok, msg) == (False, "Storage full")
    assert progress == [0, 10, 0]


def test_download(backend):
    backend.downloads["/documents/d1/download"] = b"bytes"
    assert DocumentManager().download({"_id": "d1", "originalName": "x.pdf"}) == (b"bytes", "x.pdf")
    assert DocumentManager().download({}) == (None, "Document has no id")


def test_travel_documents_add_and_remove(backend):
    backend.seed("/travel", [{"_id": "t1", "documents": [{"name": "p.pdf", "type": "passport", "fileUrl": "/u/p"},
                                                         {"name": "v.pdf", "type": "visa", "fileUrl": "/u/v"}]}])
    mgr = DocumentManager()
    docs, err = mgr.travel_documents("t1")
    assert err == "" and len(docs) == 2

    assert mgr.upload_travel_document("t1", "", None) == ([], "Please select type and file")
    docs, err = mgr.upload_travel_document("t1", "ticket", UploadFile("t.pdf", b"1", "application/pdf"))
    assert err == "" and len(docs) == 2
    assert backend.calls[-2][0] == "UPLOAD" and backend.calls[-2][4] == "file"

    record = backend.collections["/travel"][0]
    remaining, err = mgr.remove_travel_document(record, document_key(record["documents"][0]))
    assert err == ""
    assert [d["type"] for d in remaining] == ["visa"]
    assert backend.collections["/travel"][0]["documents"] == remaining


def test_remove_travel_document_failure_keeps_list(backend):
    backend.seed("/travel", [{"_id": "t1", "documents": [{"fileUrl": "/u/p"}]}])
    backend.fail["PUT /travel/t1"] = ApiError("x", 500)
    record = backend.collections["/travel"][0]
    docs, err = DocumentManager().remove_travel_document(record, "/u/p")
    assert err == "Delete failed"
    assert docs == record["documents"]
