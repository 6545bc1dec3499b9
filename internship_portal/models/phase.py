"""
Phase Models

A program phase is a named, time-boxed stage of the internship program.
The order of phases in the registry is the program order; it is never
re-sorted by date.
"""

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from internship_portal.models.user import utc_now


class PhaseType(str, Enum):
    """Closed set of phase kinds."""

    CHOOSE5 = "choose5"
    LIVE_MEETINGS = "liveMeetings"
    TOP3_CHOICE = "top3Choice"
    ROUND1 = "round1"
    ROUND2 = "round2"
    ROUND3 = "round3"

    @property
    def is_application_round(self) -> bool:
        """True for the company-side review rounds (round1..round3)."""
        return self in (PhaseType.ROUND1, PhaseType.ROUND2, PhaseType.ROUND3)

    @property
    def label(self) -> str:
        return PHASE_TYPE_LABELS[self]


PHASE_TYPE_LABELS = {
    PhaseType.CHOOSE5: "Choose 5 companies",
    PhaseType.LIVE_MEETINGS: "Live meetings",
    PhaseType.TOP3_CHOICE: "Top 3 choice",
    PhaseType.ROUND1: "Application round 1",
    PhaseType.ROUND2: "Application round 2",
    PhaseType.ROUND3: "Application round 3",
}


class PhaseState(str, Enum):
    """Position of a phase relative to the active one. Derived, never stored."""

    PAST = "past"
    ACTIVE = "active"
    FUTURE = "future"


class Phase(BaseModel):
    """A program phase.

    ``is_active`` is the only thing that decides whether a phase is running;
    ``start_date``/``end_date`` are shown to users but never gate actions.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    type: PhaseType
    name: str = Field(..., min_length=2)
    description: str = Field(..., min_length=10)
    start_date: datetime
    end_date: datetime
    is_active: bool = False
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("end_date")
    @classmethod
    def validate_date_ordering(cls, v: datetime, info: ValidationInfo) -> datetime:
        """Validate that the phase does not end before it starts."""
        start = info.data.get("start_date")
        if start is not None and v < start:
            raise ValueError("end_date must not be before start_date")
        return v


class PhaseView(BaseModel):
    """One row of the phase wizard: the phase, its derived state and position."""

    phase: Phase
    index: int
    state: PhaseState
