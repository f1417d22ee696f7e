# domain/errors.py
from typing import Any, Dict, Optional


class TextStylerError(Exception):
    """
    Base error for everything the API reports to a caller.
    - code: stable machine-readable key (JSON "error")
    - http_status: status the error handler responds with
    """
    code = "internal_error"
    http_status = 500
    default_message = "Unexpected error."

    def __init__(self, message: Optional[str] = None, **extra: Any):
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message, **self.extra}


class InvalidInput(TextStylerError):
    code = "invalid_input"
    http_status = 400
    default_message = "Invalid input data"


class Unauthenticated(TextStylerError):
    code = "auth_required"
    http_status = 401
    default_message = "User must be authenticated or have a guest session"


class QuotaExceeded(TextStylerError):
    code = "guest_limit_reached"
    http_status = 403
    default_message = "Guest usage limit reached. Please sign up for unlimited transformations."

    def __init__(self, message: Optional[str] = None, **extra: Any):
        extra.setdefault("remainingUses", 0)
        super().__init__(message, **extra)


class DuplicateUsername(TextStylerError):
    code = "username_taken"
    http_status = 400
    default_message = "Username already exists"


class DuplicateGuestId(TextStylerError):
    code = "guest_exists"
    http_status = 409
    default_message = "Guest session already exists"


class NotFound(TextStylerError):
    code = "not_found"
    http_status = 404
    default_message = "Not found"


class RewriteFailed(TextStylerError):
    code = "rewrite_failed"
    http_status = 500
    default_message = "Error transforming text. Please try again later."

    def __init__(self, detail: str, reason: str = "unknown", message: Optional[str] = None):
        self.detail = detail
        self.reason = reason
        super().__init__(message, reason=reason, detail=detail)
