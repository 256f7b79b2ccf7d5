"""Error types surfaced by the document service."""

from typing import Optional

from fastapi import status


class ApplicationError(Exception):
    """Base error with HTTP semantics."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "application_error"

    def __init__(self, message: str, *, status_code: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        self.message = message


class DocumentNotFound(ApplicationError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class InvalidDocument(ApplicationError):
    status_code = 422
    code = "validation_error"


class StorageUnavailable(ApplicationError):
    """Raised when the datastore or blob store cannot serve a request."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "storage_unavailable"
