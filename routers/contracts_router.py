from typing import Optional

from fastapi import APIRouter, Depends, Form, Response

from services.contract_service import compare_contracts, evaluate_contract, generate_contract
from services.remote_client import RemoteClient, get_remote_client

router = APIRouter(prefix="/api/contracts", tags=["contracts"])

@router.post("/generate")
def generate(
    template_type: Optional[str] = Form(None),
    enterprise_name: Optional[str] = Form(None),
    client_name: Optional[str] = Form(None),
    effective_date: Optional[str] = Form(None),
    valid_duration: Optional[str] = Form(None),
    notice_period: Optional[str] = Form(None),
    session_id: Optional[str] = Form(None),
    client: RemoteClient = Depends(get_remote_client),
):
    document = generate_contract(
        client,
        {
            "template_type": template_type,
            "enterprise_name": enterprise_name,
            "client_name": client_name,
            "effective_date": effective_date,
            "valid_duration": valid_duration,
            "notice_period": notice_period,
            "session_id": session_id,
        },
    )
    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={"Content-Disposition": f'attachment; filename="{document.filename}"'},
    )

@router.post("/evaluate")
def evaluate(
    session_id: Optional[str] = Form(None),
    client: RemoteClient = Depends(get_remote_client),
):
    return evaluate_contract(client, session_id)

@router.post("/compare")
def compare(
    session_id: Optional[str] = Form(None),
    client: RemoteClient = Depends(get_remote_client),
):
    return compare_contracts(client, session_id)
