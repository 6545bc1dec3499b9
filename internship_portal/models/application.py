"""Application model: a student's ranked submission to one company."""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from internship_portal.models.user import utc_now


class ApplicationStatus(str, Enum):
    """Lifecycle states. ``accepted`` and ``rejected`` are terminal."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not ApplicationStatus.PENDING

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]


STATUS_LABELS = {
    ApplicationStatus.PENDING: "Pending",
    ApplicationStatus.ACCEPTED: "Accepted",
    ApplicationStatus.REJECTED: "Rejected",
}


def status_label(status: ApplicationStatus | str) -> str:
    """Display label for a status value such as ``"pending"``."""
    return ApplicationStatus(status).label


class Application(BaseModel):
    """Links a student, a company and the phase in which the choice was made.

    Only ``status``, ``feedback`` and ``updated_at`` change after creation.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    student_id: str
    company_id: str
    phase_id: str
    priority: int = Field(..., ge=1, description="1 = first choice")
    status: ApplicationStatus = ApplicationStatus.PENDING
    cv_url: Optional[str] = None
    motivation_letter_url: Optional[str] = None
    feedback: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

