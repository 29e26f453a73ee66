import io

import pytest
from fastapi import UploadFile

from services.errors import RemoteError, TransportError, ValidationError
from services.file_upload_service import upload_document
from conftest import FakeResponse

ACK = FakeResponse(json_body={"message": "ok"})


def make_file(name="A.docx", content=b"contract body"):
    return UploadFile(file=io.BytesIO(content), filename=name)


def test_reference_upload_is_forwarded_and_recorded(http, remote, store):
    http.add("POST", "/api/contracts/upload-reference", ACK)

    result = upload_document(remote, store, "reference", make_file("A.docx"), "s1")

    assert result.filename == "A.docx"
    assert result.session_id == "s1"
    assert result.message == "Reference document uploaded successfully"
    call = http.calls[0]
    assert call["data"] == {"session_id": "s1"}
    assert call["files"]["file"][0] == "A.docx"
    assert call["files"]["file"][1] == b"contract body"
    assert store.get("s1").reference_file == "A.docx"


def test_review_upload_sends_template_type(http, remote, store):
    http.add("POST", "/api/contracts/upload-for-review", ACK)

    result = upload_document(remote, store, "review", make_file("B.docx"), "s1", "msa")

    assert result.message == "File uploaded successfully"
    assert http.calls[0]["data"] == {"session_id": "s1", "template_type": "msa"}
    assert store.get("s1").review_file == "B.docx"


def test_uploads_under_both_roles_merge_into_one_record(http, remote, store):
    http.add("POST", "/api/contracts/upload-reference", ACK)
    http.add("POST", "/api/contracts/upload-for-review", ACK)

    upload_document(remote, store, "reference", make_file("A.docx"), "s1")
    upload_document(remote, store, "review", make_file("B.docx"), "s1", "msa")

    record = store.get("s1")
    assert (record.reference_file, record.review_file) == ("A.docx", "B.docx")


@pytest.mark.parametrize(
    "role, file, session_id, template_type, message",
    [
        ("reference", None, "s1", None, "File is required"),
        ("reference", "empty", "s1", None, "File is required"),
        ("reference", "ok", None, None, "Session ID is required"),
        ("review", None, "s1", "msa", "File is required"),
        ("review", "ok", "s1", None, "Template type is required"),
        ("review", "ok", None, "msa", "Session ID is required"),
    ],
)
def test_missing_fields_fail_before_any_network_call(http, remote, store, role, file, session_id, template_type, message):
    upload = {None: None, "empty": make_file(content=b""), "ok": make_file()}[file]

    with pytest.raises(ValidationError) as exc:
        upload_document(remote, store, role, upload, session_id, template_type)

    assert exc.value.message == message
    assert exc.value.status_code == 400
    assert http.calls == []
    assert store.get("s1") is None


def test_remote_rejection_leaves_record_untouched(http, remote, store):
    http.add("POST", "/api/contracts/upload-reference", FakeResponse(400, json_body={"error": "Unsupported file"}))

    with pytest.raises(RemoteError) as exc:
        upload_document(remote, store, "reference", make_file(), "s1")

    assert exc.value.message == "Unsupported file"
    assert store.get("s1") is None


def test_upload_is_not_retried_on_transport_failure(http, remote, store, connection_error):
    http.add("POST", "/api/contracts/upload-reference", connection_error)

    with pytest.raises(TransportError):
        upload_document(remote, store, "reference", make_file(), "s1")

    assert len(http.calls) == 1
