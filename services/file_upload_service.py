import logging
from typing import Optional

from fastapi import UploadFile

from models.common_models import DocumentRole, UploadResponse
from services.errors import ValidationError
from services.remote_client import RemoteClient
from services.session_service import UploadStore

logger = logging.getLogger(__name__)

UPLOAD_PATHS = {
    "reference": "/api/contracts/upload-reference",
    "review": "/api/contracts/upload-for-review",
}

UPLOAD_MESSAGES = {
    "reference": "Reference document uploaded successfully",
    "review": "File uploaded successfully",
}


def upload_document(
    client: RemoteClient,
    store: UploadStore,
    role: DocumentRole,
    file: Optional[UploadFile],
    session_id: Optional[str],
    template_type: Optional[str] = None,
) -> UploadResponse:
    """
    Forward a reference or review document to the remote backend.

    Required fields are checked before anything goes over the wire. On
    acknowledgment the filename is recorded under the session for display.
    """
    if role not in UPLOAD_PATHS:
        raise ValidationError(f"Unknown document role: {role}")

    if file is None or not file.filename:
        raise ValidationError("File is required")
    content = file.file.read()
    if not content:
        raise ValidationError("File is required")
    if role == "review" and not template_type:
        raise ValidationError("Template type is required")
    if not session_id:
        raise ValidationError("Session ID is required")

    logger.info("Uploading %s document %s for session %s", role, file.filename, session_id)

    form = {"session_id": session_id}
    if role == "review":
        form["template_type"] = template_type

    client.forward(
        "POST",
        UPLOAD_PATHS[role],
        data=form,
        files={"file": (file.filename, content, file.content_type or "application/octet-stream")},
        error_message=f"Failed to upload {role} document to external endpoint",
    )

    if role == "reference":
        store.set(session_id, reference_file=file.filename)
    else:
        store.set(session_id, review_file=file.filename)

    return UploadResponse(
        message=UPLOAD_MESSAGES[role],
        session_id=session_id,
        filename=file.filename,
    )
