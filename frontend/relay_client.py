import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

from config import RELAY_BASE_URL
from models.common_models import ComparisonResponse, EvaluationResponse, TemplateInfo, UploadResponse

logger = logging.getLogger(__name__)


class RelayClientError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None, details=None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details
        self.code = code


class RelayClient:
    """HTTP client the Streamlit app uses to talk to the local relay."""

    def __init__(self, base_url: str = RELAY_BASE_URL, http: Optional[requests.Session] = None, timeout=None):
        self.base_url = base_url.rstrip("/")
        self.http = http or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, default_error: str, **kwargs) -> requests.Response:
        try:
            resp = self.http.request(method, f"{self.base_url}{path}", timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error("Relay unreachable on %s %s: %s", method, path, e)
            raise RelayClientError(f"{default_error}: relay unreachable") from e

        if resp.status_code != 200:
            content_type = resp.headers.get("Content-Type", "")
            if "application/json" in content_type:
                try:
                    body = resp.json()
                except ValueError:
                    body = {}
                raise RelayClientError(
                    body.get("error") or default_error,
                    resp.status_code,
                    body.get("details"),
                    body.get("code"),
                )
            raise RelayClientError(f"{default_error} (Status: {resp.status_code} {resp.reason})", resp.status_code)
        return resp

    def create_session(self) -> Optional[str]:
        resp = self._request("POST", "/api/session/create", "Failed to create session")
        return resp.json().get("session_id")

    def session_status(self, session_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/api/session/{session_id}/status", "Failed to check session status").json()

    def session_uploads(self, session_id: str) -> Optional[Dict[str, Any]]:
        try:
            return self._request("GET", f"/api/session/{session_id}/uploads", "Failed to fetch uploads").json()
        except RelayClientError as e:
            if e.status_code == 404:
                return None
            raise

    def list_templates(self) -> List[TemplateInfo]:
        data = self._request("GET", "/api/templates", "Failed to fetch templates").json()
        return [TemplateInfo(**t) for t in data.get("templates", [])]

    def upload_reference(self, session_id: str, filename: str, content: bytes) -> UploadResponse:
        resp = self._request(
            "POST",
            "/api/contracts/upload-reference",
            "Failed to upload original document",
            data={"session_id": session_id},
            files={"file": (filename, content)},
        )
        return UploadResponse(**resp.json())

    def upload_for_review(self, session_id: str, filename: str, content: bytes, template_type: str) -> UploadResponse:
        resp = self._request(
            "POST",
            "/api/contracts/upload-for-review",
            "Failed to upload document",
            data={"session_id": session_id, "template_type": template_type},
            files={"file": (filename, content)},
        )
        return UploadResponse(**resp.json())

    def generate(self, fields: Dict[str, str]) -> Tuple[bytes, str]:
        resp = self._request("POST", "/api/contracts/generate", "Failed to generate contract", data=fields)
        return resp.content, resp.headers.get("Content-Type", "")

    def evaluate(self, session_id: str) -> EvaluationResponse:
        resp = self._request(
            "POST", "/api/contracts/evaluate", "Failed to evaluate contract", data={"session_id": session_id}
        )
        return EvaluationResponse(**resp.json())

    def compare(self, session_id: str) -> ComparisonResponse:
        resp = self._request(
            "POST", "/api/contracts/compare", "Failed to compare documents", data={"session_id": session_id}
        )
        return ComparisonResponse(**resp.json())
