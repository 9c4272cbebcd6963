from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel

from gymbooking.core.errors import BookingError, ErrorKind
from gymbooking.models.db_models import BookingStatus, User

class ServiceResult(BaseModel):
    """Uniform outcome of every facade operation."""
    success: bool
    data: Any = None
    message: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def ok(cls, data: Any = None, message: Optional[str] = None) -> "ServiceResult":
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, error: BookingError) -> "ServiceResult":
        return cls(success=False, error=error.message, error_kind=error.kind)

class SessionTokens(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None

class AuthPayload(BaseModel):
    user: Optional[User] = None
    session: Optional[SessionTokens] = None

class SessionState(BaseModel):
    session: Optional[AuthPayload] = None
    # Location to replace the current URL with once credentials were consumed
    clean_url: Optional[str] = None

class BookingFilters(BaseModel):
    status: Optional[BookingStatus] = None
    from_date: Optional[datetime] = None
    to_date: Optional[datetime] = None

class BookingStats(BaseModel):
    total: int = 0
    confirmed: int = 0
    cancelled: int = 0
    completed: int = 0
    this_week: int = 0
    upcoming: int = 0

class DefaultService(BaseModel):
    service_id: Any
    service_name: str
