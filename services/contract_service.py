import logging
import time
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError as ModelValidationError

from config import EVALUATE_MAX_ATTEMPTS, EVALUATE_RETRY_DELAY
from models.common_models import (
    ContractFields,
    GeneratedDocument,
    TemplatesResponse,
)
from services.errors import (
    PreconditionError,
    RecoverableSessionError,
    RemoteError,
    TransportError,
    ValidationError,
)
from services.remote_client import DOCX_MEDIA_TYPE, RemoteClient
from services.session_service import get_remote_session_status, session_has_both_documents

logger = logging.getLogger(__name__)

FILES_NOT_FOUND_MESSAGE = "Files not found for this session"

GENERATE_FIELDS = (
    "enterprise_name",
    "client_name",
    "effective_date",
    "valid_duration",
    "notice_period",
    "template_type",
    "session_id",
)


def _invalid_response(path: str, data: Any) -> TransportError:
    logger.error("Unexpected response shape from %s: %r", path, data)
    return TransportError("Invalid response from external API", details={"path": path})


def _expect_lists(path: str, data: Any, *keys: str) -> Dict[str, Any]:
    """Check the body is an object whose `keys` hold lists; the body itself is passed on untouched."""
    if not isinstance(data, dict) or any(not isinstance(data.get(key), list) for key in keys):
        raise _invalid_response(path, data)
    return data


def list_templates(client: RemoteClient) -> TemplatesResponse:
    data = client.forward_json("GET", "/api/templates", error_message="Failed to fetch templates")
    try:
        return TemplatesResponse(**data)
    except (TypeError, ModelValidationError) as exc:
        raise _invalid_response("/api/templates", data) from exc


def _positive_number(value: str) -> bool:
    try:
        return float(value) > 0
    except (TypeError, ValueError):
        return False


def validate_contract_fields(fields: Dict[str, Optional[str]]) -> ContractFields:
    missing = [name for name in GENERATE_FIELDS if not fields.get(name)]
    if missing:
        raise ValidationError("Missing required fields", details={"missing": missing})
    if not _positive_number(fields["valid_duration"]):
        raise ValidationError("Valid Duration must be a positive number (in years)")
    if not _positive_number(fields["notice_period"]):
        raise ValidationError("Notice Period must be a positive number (in months)")
    return ContractFields(**{name: str(fields[name]) for name in GENERATE_FIELDS})


def generate_contract(client: RemoteClient, fields: Dict[str, Optional[str]]) -> GeneratedDocument:
    """
    Render a contract from a template on the remote backend.
    The binary payload and its declared content type are passed back untouched.
    """
    contract = validate_contract_fields(fields)

    response = client.forward(
        "POST",
        "/api/contracts/generate",
        data={name: getattr(contract, name) for name in GENERATE_FIELDS},
        accept=DOCX_MEDIA_TYPE,
        error_message="Failed to generate contract",
    )
    logger.info("Contract generated for session %s", contract.session_id)

    return GeneratedDocument(
        content=response.content,
        media_type=response.headers.get("Content-Type") or DOCX_MEDIA_TYPE,
    )


def evaluate_contract(
    client: RemoteClient,
    session_id: Optional[str],
    max_attempts: int = EVALUATE_MAX_ATTEMPTS,
    base_delay: float = EVALUATE_RETRY_DELAY,
    sleep: Callable[[float], None] = time.sleep,
) -> Dict[str, Any]:
    """
    Ask the backend to evaluate the documents uploaded under `session_id`.

    Remote and transport failures are retried with linear backoff: after
    failed attempt n the call waits n * base_delay. The last error is
    raised once `max_attempts` attempts have failed. The backend's JSON is
    returned as is.
    """
    if not session_id:
        raise ValidationError("Session ID is required")

    attempt = 0
    while True:
        attempt += 1
        try:
            data = client.forward_json(
                "POST",
                "/api/contracts/evaluate",
                data={"session_id": session_id},
                error_message="Failed to evaluate contract via external endpoint",
            )
            return _expect_lists("/api/contracts/evaluate", data, "questions", "answers")
        except (RemoteError, TransportError) as exc:
            if attempt >= max_attempts:
                logger.error("Max retries reached. Evaluation failed: %s", exc.message)
                raise
            delay = base_delay * attempt
            logger.warning("Evaluation attempt %d failed (%s), retrying in %.1fs", attempt, exc.message, delay)
            sleep(delay)


def compare_contracts(client: RemoteClient, session_id: Optional[str]) -> Dict[str, Any]:
    """
    Compare the reference and review documents of a session.
    The remote session status is checked first; the comparison is only
    requested when both documents are present.
    """
    if not session_id:
        raise ValidationError("Session ID is required")

    status = get_remote_session_status(client, session_id)
    logger.info("Session status for %s: %s", session_id, status)
    if not session_has_both_documents(status):
        raise PreconditionError(
            "Session is not ready for comparison - missing reference or review document",
            details={"status": status},
        )

    try:
        data = client.forward_json(
            "POST",
            "/api/contracts/compare",
            data={"session_id": session_id},
            error_message="Failed to compare documents via external endpoint",
        )
    except RemoteError as exc:
        if exc.message == FILES_NOT_FOUND_MESSAGE:
            raise RecoverableSessionError(exc.message, exc.status_code, exc.details) from exc
        raise

    return _expect_lists("/api/contracts/compare", data, "differences")
