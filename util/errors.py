from typing import Dict, Optional
from fastapi import HTTPException, status


class AppError(HTTPException):
    # Flow: raise AppError to short-circuit with a typed status & message.
    def __init__(
        self, message: str, http_status: int = status.HTTP_400_BAD_REQUEST
    ) -> None:
        super().__init__(status_code=http_status, detail=message)


class InputValidationError(AppError):
    """
    Local input failed a format rule. Carries one message per offending field;
    never forwarded to a backend.
    """

    def __init__(self, fields: Dict[str, str]) -> None:
        super().__init__("validation_error", status.HTTP_422_UNPROCESSABLE_ENTITY)
        self.fields = dict(fields)
        self.detail = {"ok": False, "error": "validation_error", "fields": self.fields}


class BackendError(Exception):
    """Base for failures talking to an LLM backend."""


class BackendTransportError(BackendError):
    """Network failure, timeout, or non-2xx upstream status."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        timeout: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.timeout = timeout


class BackendProtocolError(BackendError):
    """Success status, but the body is empty, not JSON, or the wrong shape."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class StoreError(Exception):
    """Persistence failure. Callers log it and keep in-memory state."""
