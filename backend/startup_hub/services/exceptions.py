"""
Errors raised by the workflow services. Each maps to one HTTP status; the
handler registered in main.py renders them as {"detail": message, **payload}.
"""
from typing import Any, Dict, List, Optional


class DirectoryError(Exception):
    status_code = 500

    def __init__(self, message: str, payload: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.payload = payload or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, **self.payload}


class AuthenticationError(DirectoryError):
    status_code = 401

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class AuthorizationError(DirectoryError):
    status_code = 403


class NotFoundError(DirectoryError):
    status_code = 404


class ValidationFailed(DirectoryError):
    status_code = 400

    def __init__(self, message: str, errors: Optional[Dict[str, List[str]]] = None):
        super().__init__(message, {"errors": errors} if errors else None)
        self.errors = errors or {}


class ConflictError(DirectoryError):
    status_code = 409


class AlreadyProcessedError(ConflictError):
    def __init__(self, message: str = "This submission has already been processed"):
        super().__init__(message)


class UpstreamError(DirectoryError):
    """Storage or database failure. The message is safe to show; details go to the log."""
    status_code = 500
