"""Review, final report and invitation models."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from internship_portal.models.user import utc_now


class Review(BaseModel):
    """A student's rating of the company they interned at."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    student_id: str
    company_id: str
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=10)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class FinalReport(BaseModel):
    """A student's end-of-internship report, optionally annotated by an admin."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    student_id: str
    company_id: str
    report_url: str = Field(..., min_length=1)
    feedback: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class Invitation(BaseModel):
    """An admin's invitation for a company to join the program."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    email: EmailStr
    company_name: str = Field(..., min_length=2)
    invited_by: str
    created_at: datetime = Field(default_factory=utc_now)
