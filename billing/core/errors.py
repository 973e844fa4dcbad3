"""
Error kinds surfaced to callers

Each kind is an HTTPException so FastAPI renders it directly; services raise
them the same way regardless of whether an HTTP request is involved.
"""

from typing import Dict, Optional

from fastapi import HTTPException, status


class BillingError(HTTPException):
    """Base class for failures returned to the caller"""

    code: str = "INTERNAL_SERVER_ERROR"
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: Optional[str] = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(status_code=self.http_status, detail=message, headers=headers)

    @property
    def message(self) -> str:
        return self.detail


class Unauthorized(BillingError):
    """Identity could not be verified or the caller lacks the required role"""

    code = "UNAUTHORIZED"
    http_status = status.HTTP_401_UNAUTHORIZED


class NotFound(BillingError):
    """An entity looked up by its identifier does not exist"""

    code = "NOT_FOUND"
    http_status = status.HTTP_404_NOT_FOUND


class BadRequest(BillingError):
    """Caller-supplied values violate a precondition"""

    code = "BAD_REQUEST"
    http_status = status.HTTP_400_BAD_REQUEST
