import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional
from urllib.parse import quote

from config import UPLOAD_STORE
from database import SessionLocal
from models.common_models import SessionCreateResponse
from models.session_db_model import UploadRecordDB
from models.session_models import UploadRecord
from services.errors import RemoteError
from services.remote_client import RemoteClient

logger = logging.getLogger(__name__)


class UploadStore(ABC):
    """Advisory record of the filenames uploaded per session. Never a source of truth."""

    @abstractmethod
    def get(self, session_id: str) -> Optional[UploadRecord]:
        ...

    @abstractmethod
    def set(self, session_id: str, reference_file: Optional[str] = None, review_file: Optional[str] = None) -> UploadRecord:
        """Merge the given filenames into the session's record (last write wins)."""

    @abstractmethod
    def delete(self, session_id: str) -> None:
        ...


class InMemoryUploadStore(UploadStore):
    def __init__(self):
        self._records: Dict[str, UploadRecord] = {}

    def get(self, session_id: str) -> Optional[UploadRecord]:
        return self._records.get(session_id)

    def set(self, session_id, reference_file=None, review_file=None):
        record = self._records.get(session_id) or UploadRecord(session_id=session_id)
        if reference_file is not None:
            record.reference_file = reference_file
        if review_file is not None:
            record.review_file = review_file
        self._records[session_id] = record
        logger.info("Upload record updated: %s", record)
        return record

    def delete(self, session_id: str) -> None:
        self._records.pop(session_id, None)
        logger.info("Upload record cleared for session %s", session_id)


class SqlUploadStore(UploadStore):
    """Upload records in the SQL database, survives process restarts."""

    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    @staticmethod
    def _to_record(row: UploadRecordDB) -> UploadRecord:
        return UploadRecord(
            session_id=row.session_id,
            reference_file=row.reference_file,
            review_file=row.review_file,
        )

    def get(self, session_id):
        db = self.session_factory()
        try:
            row = db.query(UploadRecordDB).filter(UploadRecordDB.session_id == session_id).first()
            return self._to_record(row) if row else None
        finally:
            db.close()

    def set(self, session_id, reference_file=None, review_file=None):
        db = self.session_factory()
        try:
            row = db.query(UploadRecordDB).filter(UploadRecordDB.session_id == session_id).first()
            if not row:
                row = UploadRecordDB(session_id=session_id)
                db.add(row)
            if reference_file is not None:
                row.reference_file = reference_file
            if review_file is not None:
                row.review_file = review_file
            db.commit()
            db.refresh(row)
            record = self._to_record(row)
        finally:
            db.close()
        logger.info("Upload record updated: %s", record)
        return record

    def delete(self, session_id):
        db = self.session_factory()
        try:
            db.query(UploadRecordDB).filter(UploadRecordDB.session_id == session_id).delete()
            db.commit()
        finally:
            db.close()
        logger.info("Upload record cleared for session %s", session_id)


_STORE: Optional[UploadStore] = None

def get_upload_store() -> UploadStore:
    global _STORE
    if _STORE is None:
        _STORE = SqlUploadStore() if UPLOAD_STORE == "sql" else InMemoryUploadStore()
        logger.info("Using %s", type(_STORE).__name__)
    return _STORE


# Remote session operations
def create_remote_session(client: RemoteClient) -> SessionCreateResponse:
    data = client.forward_json("POST", "/api/session/create", error_message="Failed to create session")
    session_id = data.get("session_id") if isinstance(data, dict) else None
    if not session_id:
        raise RemoteError("Invalid session response: No session_id", 502, details={"response": data})
    logger.info("Session created: %s", session_id)
    return SessionCreateResponse(session_id=session_id)


def get_remote_session_status(client: RemoteClient, session_id: str) -> dict:
    return client.forward_json(
        "GET",
        f"/api/session/{quote(session_id, safe='')}/status",
        error_message="Failed to check session status",
    )


def session_has_both_documents(status: dict) -> bool:
    if not isinstance(status, dict):
        return False
    return bool(status.get("has_reference_doc")) and bool(status.get("has_review_doc"))
