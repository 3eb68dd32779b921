"""
Event-related Pydantic schemas
"""

from datetime import datetime
from typing import Any
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from app.utils.datetime_utils import format_event_datetime, parse_event_datetime, to_event_local

class EventCreate(BaseModel):
    """Schema for creating or fully replacing an event"""
    model_config = ConfigDict(populate_by_name=True)

    type: str
    date_time: datetime = Field(alias="datetime")
    location: str
    host: Any

    @field_validator("date_time", mode="before")
    @classmethod
    def parse_date_time(cls, value):
        if isinstance(value, str):
            return parse_event_datetime(value)
        return value

    @field_validator("date_time", mode="after")
    @classmethod
    def localize_date_time(cls, value: datetime) -> datetime:
        # Epoch numbers and aware datetimes arrive with tzinfo attached
        return to_event_local(value)

class EventResponse(BaseModel):
    """Event as returned to clients"""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    event_id: str
    type: str
    date_time: datetime = Field(alias="datetime")
    location: str
    host: str

    @field_validator("date_time", mode="before")
    @classmethod
    def parse_date_time(cls, value):
        # Firestore documents keep the timestamp as formatted text
        if isinstance(value, str):
            return parse_event_datetime(value)
        return value

    @field_validator("date_time", mode="after")
    @classmethod
    def localize_date_time(cls, value: datetime) -> datetime:
        # Epoch numbers and aware datetimes arrive with tzinfo attached
        return to_event_local(value)

    @field_serializer("date_time")
    def serialize_date_time(self, value: datetime) -> str:
        return format_event_datetime(value)

class AuthorityGrant(BaseModel):
    """Member to receive authority over an event"""
    uid: str
