"""
Engagement Models

Meetings, chat rooms and messages: the records that connect students with
companies outside of the application lifecycle.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from internship_portal.models.user import utc_now


class Meeting(BaseModel):
    """A scheduled meeting between a company and a group of students."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    company_id: str
    student_ids: list[str] = Field(default_factory=list)
    start_time: datetime
    end_time: datetime
    location: str
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("end_time")
    @classmethod
    def validate_time_window(cls, v: datetime, info: ValidationInfo) -> datetime:
        start = info.data.get("start_time")
        if start is not None and v < start:
            raise ValueError("end_time must not be before start_time")
        return v


class ChatRoom(BaseModel):
    """A conversation between a company and one or more students."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    company_id: str
    student_ids: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class Message(BaseModel):
    """A chat message. Messages are append-only and ordered by insertion."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    chat_room_id: str
    sender_id: str
    content: str = Field(..., min_length=1)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
