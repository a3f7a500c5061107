"""
Recipe Share Error Taxonomy
Exceptions raised by services and mapped to HTTP responses in main.py
"""

from typing import Optional


class PolicyError(Exception):
    """Base class for errors surfaced verbatim to the caller"""

    status_code = 400
    code = "error"

    def __init__(self, message: str = "", reason: Optional[str] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.reason = reason

    default_message = "Request failed"

    def to_dict(self) -> dict:
        body = {"error": self.code, "message": self.message}
        if self.reason:
            body["reason"] = self.reason
        return body


class Unauthorized(PolicyError):
    """Authentication is required and was not provided or is invalid"""

    status_code = 401
    code = "unauthorized"
    default_message = "Authentication required"


class Forbidden(PolicyError):
    """Authenticated but lacking the specific grant"""

    status_code = 403
    code = "forbidden"
    default_message = "You do not have permission to perform this action"


class NotFound(PolicyError):
    """Target absent, or present but not readable by the caller"""

    status_code = 404
    code = "not_found"
    default_message = "Resource not found"

    def to_dict(self) -> dict:
        # Absence and read denial must look the same on the wire
        return {"error": self.code, "message": self.message}


class Conflict(PolicyError):
    """Uniqueness violation"""

    status_code = 409
    code = "conflict"
    default_message = "Resource already exists"


class ValidationFailed(PolicyError):
    """Malformed input"""

    status_code = 422
    code = "validation_failed"
    default_message = "Invalid input"
