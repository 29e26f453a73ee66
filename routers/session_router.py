from fastapi import APIRouter, Depends, HTTPException

from models.common_models import SessionCreateResponse, TemplatesResponse
from models.session_models import UploadRecord
from services.contract_service import list_templates
from services.remote_client import RemoteClient, get_remote_client
from services.session_service import (
    UploadStore,
    create_remote_session,
    get_remote_session_status,
    get_upload_store,
)

router = APIRouter(prefix="/api", tags=["session"])

@router.post("/session/create", response_model=SessionCreateResponse)
def create_session(client: RemoteClient = Depends(get_remote_client)):
    return create_remote_session(client)

@router.get("/session/{session_id}/status")
def session_status(session_id: str, client: RemoteClient = Depends(get_remote_client)):
    return get_remote_session_status(client, session_id)

@router.get("/session/{session_id}/uploads", response_model=UploadRecord)
def session_uploads(session_id: str, store: UploadStore = Depends(get_upload_store)):
    record = store.get(session_id)
    if not record:
        raise HTTPException(status_code=404, detail="No uploads recorded for this session.")
    return record

@router.delete("/session/{session_id}/uploads")
def clear_session_uploads(session_id: str, store: UploadStore = Depends(get_upload_store)):
    store.delete(session_id)
    return {"message": "Session uploads cleared", "session_id": session_id}

@router.get("/templates", response_model=TemplatesResponse)
def templates(client: RemoteClient = Depends(get_remote_client)):
    return list_templates(client)
