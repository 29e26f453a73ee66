import logging
from typing import Any, Dict, Optional

import requests
from requests.auth import HTTPBasicAuth

from config import REMOTE_TIMEOUT, get_remote_settings
from services.errors import ConfigError, RemoteError, TransportError

logger = logging.getLogger(__name__)

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def extract_remote_error(response: requests.Response, default_message: str) -> RemoteError:
    """
    Build a RemoteError out of a non-2xx backend response.
    JSON bodies contribute their `error` / `detail` field, anything else
    gets the HTTP status line appended to the default message.
    """
    content_type = response.headers.get("Content-Type", "")
    details: Dict[str, Any] = {}

    if "application/json" in content_type:
        try:
            payload = response.json()
        except ValueError:
            logger.error("Failed to parse error response as JSON")
            return RemoteError("Invalid error response from external API", response.status_code)

        if isinstance(payload, dict):
            details = payload
            message = payload.get("error") or payload.get("detail") or default_message
        else:
            details = {"detail": payload}
            message = default_message
        if not isinstance(message, str):
            message = default_message
    else:
        message = f"{default_message} (Status: {response.status_code} {response.reason})"

    return RemoteError(message, response.status_code, details or None)


class RemoteClient:
    """
    Forwards relay requests to the remote contract backend with Basic auth.

    Every relay (session, templates, uploads, generate, evaluate, compare)
    goes through `forward`, so errors come back in one normalized shape.
    """

    def __init__(self, http: Optional[requests.Session] = None, timeout: float = REMOTE_TIMEOUT, settings=None):
        self.http = http or requests.Session()
        self.timeout = timeout
        # (username, password, base_url); None means read from the environment per call
        self._settings = settings

    def _resolve(self):
        username, password, base_url = self._settings or get_remote_settings()
        if not username or not password or not base_url:
            logger.error("Missing remote backend credentials or base URL")
            raise ConfigError("Server configuration error")
        return HTTPBasicAuth(username, password), base_url.rstrip("/")

    def forward(
        self,
        method: str,
        path: str,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
        accept: str = "application/json",
        error_message: str = "Request to external endpoint failed",
    ) -> requests.Response:
        auth, base_url = self._resolve()
        url = f"{base_url}{path}"
        logger.info("Forwarding %s %s", method, path)

        try:
            response = self.http.request(
                method,
                url,
                data=data,
                files=files,
                headers={"Accept": accept},
                auth=auth,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("Transport failure on %s %s: %s", method, path, exc)
            raise TransportError("Failed to reach external endpoint", details={"reason": str(exc)}) from exc

        logger.info("External endpoint %s responded %s", path, response.status_code)
        if not response.ok:
            error = extract_remote_error(response, error_message)
            logger.warning("External endpoint error on %s: %s", path, error.message)
            raise error
        return response

    def forward_json(self, method: str, path: str, **kwargs) -> Any:
        response = self.forward(method, path, **kwargs)
        try:
            return response.json()
        except ValueError as exc:
            logger.error("Failed to parse response from %s as JSON", path)
            raise TransportError("Invalid response from external API") from exc


def get_remote_client() -> RemoteClient:
    return RemoteClient()
