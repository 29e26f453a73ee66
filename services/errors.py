from typing import Any, Dict, Optional

SESSION_FILES_MISSING = "session_files_missing"


class RelayError(Exception):
    """Base class for every failure the relay reports to its caller."""

    status_code = 500

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details
        self.code = code

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.details:
            body["details"] = self.details
        if self.code:
            body["code"] = self.code
        return body


class ConfigError(RelayError):
    status_code = 500


class ValidationError(RelayError):
    status_code = 400


class RemoteError(RelayError):
    """Non-2xx answer from the remote backend; status mirrors the backend's."""

    status_code = 502


class RecoverableSessionError(RemoteError):
    """The remote backend lost the files of this session; a fresh session can recover."""

    def __init__(self, message: str, status_code: Optional[int] = None, details=None):
        super().__init__(message, status_code, details, code=SESSION_FILES_MISSING)


class TransportError(RelayError):
    status_code = 500


class PreconditionError(RelayError):
    status_code = 400
