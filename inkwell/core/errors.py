"""Application errors raised by the service layer.

The store itself never raises these: a missing row is returned as None and
database failures propagate as SQLAlchemy exceptions. The request layer maps
``status_code`` onto its response and uses ``error_payload`` for the body.
"""

import builtins
import logging
from typing import Optional
from uuid import uuid4

from inkwell.core.logging import get_request_id


class AppError(Exception):
    code = "app_error"
    status_code = 500

    def __init__(self, message: str, *, code: Optional[str] = None, status_code: Optional[int] = None, request_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code
        self.request_id = request_id


class ValidationError(AppError, ValueError):
    code = "validation_error"
    status_code = 400


class NotFoundError(AppError, ValueError):
    code = "not_found"
    status_code = 404


class PermissionError(AppError, builtins.PermissionError):
    code = "forbidden"
    status_code = 403


class ConflictError(AppError):
    """Not raised by the store or services; kept so a request layer can map 409s."""

    code = "conflict"
    status_code = 409


def error_payload(exc: AppError, request_id: Optional[str] = None) -> dict:
    """Normalized error body; logs at ERROR for 5xx and WARNING otherwise."""
    rid = exc.request_id or request_id or get_request_id() or str(uuid4())
    logger = logging.getLogger("inkwell")
    log_level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(
        log_level,
        "app.error",
        extra={"request_id": rid, "error_code": exc.code, "error_message": exc.message, "status": exc.status_code},
    )
    return {
        "error": {"code": exc.code, "message": exc.message, "request_id": rid},
        "detail": exc.message,
    }
