from typing import Optional, Union
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field

# Row ids are bigint or uuid depending on how the project was provisioned
RowId = Union[int, str]

class BookingStatus(str, Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

class Service(BaseModel):
    id: RowId
    name: str
    duration: Optional[int] = None
    description: Optional[str] = None

    def is_trial(self, keywords) -> bool:
        """Trial/gift classes are recognised by name ('Clase de Prueba', 'Clase de Regalo')."""
        name = self.name.lower()
        return any(k in name for k in keywords)

class Slot(BaseModel):
    id: RowId
    service_id: RowId
    date_time: datetime
    available: bool = True

class Booking(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: RowId
    user_id: str
    slot_id: RowId
    service_id: RowId
    status: BookingStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class SlotRef(BaseModel):
    id: Optional[RowId] = None
    date_time: Optional[datetime] = None
    service_id: Optional[RowId] = None

class ServiceRef(BaseModel):
    id: Optional[RowId] = None
    name: Optional[str] = None
    duration: Optional[int] = None

class BookingDetails(Booking):
    """Booking joined with its slot and service (PostgREST embeds them as `slots` / `services`)."""
    slot: Optional[SlotRef] = Field(default=None, alias="slots")
    service: Optional[ServiceRef] = Field(default=None, alias="services")
    user_email: Optional[str] = None

class User(BaseModel):
    id: str
    email: Optional[str] = None
