"""User data model shared by students, company employees and administrators."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


def utc_now() -> datetime:
    """Timestamp factory used by every record's created_at/updated_at."""
    return datetime.now(timezone.utc)


class UserRole(str, Enum):
    """Closed set of roles a portal user can hold."""

    STUDENT = "student"
    COMPANY = "company"
    ADMIN = "admin"


class User(BaseModel):
    """A signed-in identity with its role-specific profile attributes.

    Attributes:
        id: Unique identifier
        email: Login e-mail address
        name: Display name
        role: One of UserRole
        profile_completed: Whether the role's onboarding form was submitted
        phone: Contact phone (students and company employees)
        class_section: School class of a student (e.g. "11B")
        profile_picture: Reference URL of an uploaded picture
        technologies: Technologies a student is interested in
        github: Student GitHub profile URL
        linkedin: Student LinkedIn profile URL
        position: Job title of a company employee
        company_id: Company a company employee belongs to
    """

    model_config = ConfigDict(extra="forbid")

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    email: EmailStr
    name: str
    role: UserRole
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    profile_completed: bool = False

    phone: Optional[str] = None
    class_section: Optional[str] = None
    profile_picture: Optional[str] = None
    technologies: list[str] = Field(default_factory=list)
    github: Optional[str] = None
    linkedin: Optional[str] = None

    position: Optional[str] = None
    company_id: Optional[str] = None

    @property
    def is_student(self) -> bool:
        return self.role is UserRole.STUDENT

    @property
    def is_company(self) -> bool:
        return self.role is UserRole.COMPANY

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMIN
