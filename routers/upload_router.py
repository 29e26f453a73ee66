from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from models.common_models import UploadResponse
from services.file_upload_service import upload_document
from services.remote_client import RemoteClient, get_remote_client
from services.session_service import UploadStore, get_upload_store

router = APIRouter(prefix="/api/contracts", tags=["upload"])

@router.post("/upload-reference", response_model=UploadResponse)
def upload_reference(
    file: Optional[UploadFile] = File(None),
    session_id: Optional[str] = Form(None),
    client: RemoteClient = Depends(get_remote_client),
    store: UploadStore = Depends(get_upload_store),
):
    return upload_document(client, store, "reference", file, session_id)

@router.post("/upload-for-review", response_model=UploadResponse)
def upload_for_review(
    file: Optional[UploadFile] = File(None),
    template_type: Optional[str] = Form(None),
    session_id: Optional[str] = Form(None),
    client: RemoteClient = Depends(get_remote_client),
    store: UploadStore = Depends(get_upload_store),
):
    return upload_document(client, store, "review", file, session_id, template_type)
