import logging
from contextlib import contextmanager
from typing import Dict, List, MutableMapping, Optional, Tuple

from frontend.relay_client import RelayClient, RelayClientError
from frontend.session_manager import SessionIdentifierManager
from models.common_models import Change, EvaluationItem
from services.errors import SESSION_FILES_MISSING
from services.review_service import map_differences, map_evaluation

logger = logging.getLogger(__name__)

# (filename, content)
Document = Tuple[str, bytes]


class WorkflowError(Exception):
    pass


class EvaluationError(WorkflowError):
    """Evaluation still failing after the relay's retries."""

    def __init__(self, cause: RelayClientError):
        super().__init__(cause.message)
        self.cause = cause


def mark_in_flight(state: MutableMapping, flag: str) -> None:
    """Button callback: raise the flag before the rerun that does the work, so the button renders disabled."""
    state[flag] = True


@contextmanager
def in_flight(state: MutableMapping, flag: str):
    try:
        yield
    finally:
        state[flag] = False


def generate_contract(relay: RelayClient, session_id: Optional[str], form: Dict[str, str]) -> bytes:
    if not session_id:
        raise WorkflowError("No session ID available")
    return relay.generate({**form, "session_id": session_id})[0]


def review_contract(
    relay: RelayClient,
    session_id: Optional[str],
    document: Optional[Document],
    template_type: Optional[str],
) -> List[EvaluationItem]:
    """Upload a document for review, then evaluate it."""
    if not session_id:
        raise WorkflowError("No session ID available")
    if not document:
        raise WorkflowError("Please upload a document to review")
    if not template_type:
        raise WorkflowError("Please select a contract type")

    filename, content = document
    relay.upload_for_review(session_id, filename, content, template_type)
    try:
        evaluation = relay.evaluate(session_id)
    except RelayClientError as e:
        raise EvaluationError(e) from e
    return map_evaluation(evaluation)


def compare_documents(
    relay: RelayClient,
    sessions: SessionIdentifierManager,
    reference: Optional[Document],
    review: Optional[Document],
    template_type: Optional[str],
) -> Tuple[str, List[Change]]:
    """
    Upload both documents and compare them.

    When the backend reports that the session's files are gone, a new
    session is minted and the whole upload+compare sequence runs once more.
    Returns the session id that produced the result and the mapped changes.
    """
    if not reference or not review:
        raise WorkflowError("Please upload both documents to compare")
    if not template_type:
        raise WorkflowError("Please select a template for the compare document")

    session_id = sessions.session_id or sessions.acquire()
    retried = False
    while True:
        try:
            relay.upload_reference(session_id, *reference)
            relay.upload_for_review(session_id, review[0], review[1], template_type)
            comparison = relay.compare(session_id)
            return session_id, map_differences(comparison)
        except RelayClientError as e:
            if e.code != SESSION_FILES_MISSING or retried:
                raise
            logger.info("Session files not found, retrying with a new session")
            retried = True
            session_id = sessions.renew()
