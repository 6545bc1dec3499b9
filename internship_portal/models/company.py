"""Company data model with internship terms and employee accounts."""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from internship_portal.models.user import User, utc_now


class InternshipType(str, Enum):
    ONLINE = "online"
    ONSITE = "onsite"
    HYBRID = "hybrid"


class Company(BaseModel):
    """A host company taking part in the internship program.

    Attributes:
        id: Unique identifier
        name: Company name
        description: Public description shown in the catalogue
        logo: Reference URL of the uploaded logo
        technologies: Technologies used at the company
        specialties: School specialties the company accepts
        positions: Number of open positions overall
        users: Employee accounts owned by this company
        internship_description: What interns will work on
        internship_positions: Number of internship places
        internship_requirements: Free-text requirements
        presentation_url: Reference URL of the company presentation
        plan_url: Reference URL of the internship plan
        requires_motivation_letter: First-choice applicants must attach a letter
        internship_type: online, onsite or hybrid
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = Field(..., min_length=1)
    description: str = ""
    logo: Optional[str] = None
    website: Optional[str] = None
    address: Optional[str] = None
    technologies: list[str] = Field(default_factory=list)
    specialties: list[str] = Field(default_factory=list)
    positions: int = Field(default=0, ge=0)
    users: list[User] = Field(default_factory=list)

    internship_description: str = ""
    internship_positions: int = Field(default=0, ge=0)
    internship_requirements: str = ""
    presentation_url: Optional[str] = None
    plan_url: Optional[str] = None
    requires_motivation_letter: bool = False
    internship_type: Optional[InternshipType] = None

    contact_person: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def has_employee(self, user_id: str) -> bool:
        """Check whether ``user_id`` is one of this company's accounts."""
        return any(user.id == user_id for user in self.users)
