"""
Onboarding

Demo sign-in and the role-specific profile setup forms that unlock the rest
of the portal. Students complete one form; company users first fill in their
employee details and then the company profile, which completes onboarding.
"""

from typing import Any, Optional, Sequence

from internship_portal.models.company import Company
from internship_portal.models.user import User, UserRole
from internship_portal.services.identity import IdentityStore
from internship_portal.services.registry import DomainRegistry
from internship_portal.utils.errors import FormValidationError, PermissionDenied
from internship_portal.utils.forms import build_model, require_text
from internship_portal.utils.logger import get_logger

DEMO_NAMES = {
    UserRole.STUDENT: "Ivan Ivanov",
    UserRole.COMPANY: "Acme Inc",
    UserRole.ADMIN: "Admin User",
}


def role_from_email(email: str) -> UserRole:
    """Demo rule: e-mails containing "admin" or "company" get those roles."""
    lowered = email.lower()
    if "admin" in lowered:
        return UserRole.ADMIN
    if "company" in lowered:
        return UserRole.COMPANY
    return UserRole.STUDENT


class OnboardingService:
    """Sign-in and profile completion for the current session."""

    def __init__(
        self,
        identity: IdentityStore,
        registry: DomainRegistry,
        correlation_id: Optional[str] = None,
    ):
        self.identity = identity
        self.registry = registry
        self.logger = get_logger(correlation_id=correlation_id, component="onboarding")

    # ------------------------------------------------------------------ sign-in

    def login(self, email: str, password: str) -> User:
        """
        Demo login. Credentials are not checked; the role comes from the e-mail.

        A known e-mail signs in the registered user; an unknown one registers a
        new account whose profile still has to be completed (admins excepted).

        Raises:
            FormValidationError: If e-mail or password is empty or the e-mail is malformed
        """
        email = require_text(email, "email", "Please enter your e-mail address")
        require_text(password, "password", "Please enter your password")

        existing = next(
            (user for user in self.registry.users if user.email.lower() == email.lower()), None
        )
        if existing is not None:
            self.identity.sign_in(existing)
            return existing

        role = role_from_email(email)
        user = build_model(
            User,
            {
                "email": email,
                "name": email.split("@")[0],
                "role": role,
                "profile_completed": role is UserRole.ADMIN,
            },
        )
        self.registry.add_user(user)
        self.identity.sign_in(user)
        self.logger.info("New account registered on login", user_id=user.id, role=role.value)
        return user

    def bypass_login(self, role: UserRole) -> User:
        """Demo mode: sign in a fixed, freshly reset account for ``role``."""
        user = User(
            id=f"demo-{role.value}",
            email=f"{role.value}@demo.internships.bg",
            name=DEMO_NAMES[role],
            role=role,
            profile_completed=role is UserRole.ADMIN,
        )
        self._store_user(user)
        self.identity.sign_in(user)
        self.logger.info("Demo login", role=role.value)
        return user

    # ------------------------------------------------------------------ profile setup

    def complete_student_profile(
        self,
        name: str,
        phone: str,
        technologies: Sequence[str],
        github: Optional[str] = None,
        linkedin: Optional[str] = None,
        profile_picture: Optional[str] = None,
        class_section: Optional[str] = None,
    ) -> User:
        """
        Submit the student setup form and unlock the portal.

        Raises:
            NoActiveSession: If nobody is signed in
            PermissionDenied: If the signed-in user is not a student
            FormValidationError: If name, phone or technologies are missing
        """
        user = self._require_role(UserRole.STUDENT)
        name = require_text(name, "name", "Name is required")
        phone = require_text(phone, "phone", "Phone number is required")
        techs = [tech.strip() for tech in technologies if tech and tech.strip()]
        if not techs:
            raise FormValidationError(
                "Select at least one technology you are interested in", field="technologies"
            )

        updated = self.identity.update_profile(
            name=name,
            phone=phone,
            technologies=techs,
            github=github or None,
            linkedin=linkedin or None,
            profile_picture=profile_picture or user.profile_picture,
            class_section=class_section or user.class_section,
            profile_completed=True,
        )
        self._store_user(updated)
        return updated

    def complete_employee_profile(
        self,
        name: str,
        phone: str,
        position: str,
        profile_picture: Optional[str] = None,
    ) -> User:
        """
        Submit the company employee form. Onboarding continues with the company profile.

        Raises:
            NoActiveSession: If nobody is signed in
            PermissionDenied: If the signed-in user is not a company user
            FormValidationError: If name, phone or position are missing
        """
        user = self._require_role(UserRole.COMPANY)
        fields = self._employee_fields(name, phone, position)
        updated = self.identity.update_profile(
            **fields, profile_picture=profile_picture or user.profile_picture
        )
        self._store_user(updated)
        return updated

    def complete_company_profile(
        self,
        company_fields: dict[str, Any],
        name: Optional[str] = None,
        phone: Optional[str] = None,
        position: Optional[str] = None,
    ) -> tuple[User, Company]:
        """
        Submit the company profile and complete company onboarding.

        Employee details default to what the employee form already stored.
        Creates the company (or updates the one the user already belongs to)
        and links the user to it.

        Raises:
            NoActiveSession: If nobody is signed in
            PermissionDenied: If the signed-in user is not a company user
            FormValidationError: If a required employee or company field is missing
        """
        user = self._require_role(UserRole.COMPANY)
        employee = self._employee_fields(
            name if name is not None else user.name,
            phone if phone is not None else (user.phone or ""),
            position if position is not None else (user.position or ""),
        )

        require_text(company_fields.get("name"), "company_name", "Company name is required")
        require_text(
            company_fields.get("description"), "description", "Company description is required"
        )
        if not company_fields.get("logo"):
            raise FormValidationError("Company logo is required", field="logo")
        if not company_fields.get("technologies"):
            raise FormValidationError("Select at least one technology", field="technologies")
        if not company_fields.get("specialties"):
            raise FormValidationError("Select at least one specialty", field="specialties")

        existing = self.registry.company_of(user)
        data = existing.model_dump() if existing is not None else {}
        data.update(company_fields)
        data["users"] = [
            other for other in data.get("users", []) if _user_id(other) != user.id
        ]
        company = build_model(Company, data)
        if existing is not None and company.id != existing.id:
            raise FormValidationError("Company id cannot be changed", field="id")
        if existing is None and self.registry.find_company(company.id) is not None:
            raise FormValidationError("A company with this id already exists", field="id")

        employee_record = build_model(
            User,
            {**user.model_dump(), **employee, "company_id": company.id, "profile_completed": True},
        )
        company.users.append(employee_record)

        # Registry first: the session only changes once the company is stored.
        if existing is None:
            self.registry.add_company(company)
        else:
            self.registry.replace(company)
        updated = self.identity.update_profile(
            **employee, company_id=company.id, profile_completed=True
        )
        self._store_user(updated)
        self.logger.info(
            "Company profile completed",
            user_id=updated.id,
            company_id=company.id,
            created=existing is None,
        )
        return updated, company

    # ------------------------------------------------------------------ helpers

    def _require_role(self, role: UserRole) -> User:
        user = self.identity.require_user()
        if user.role is not role:
            raise PermissionDenied(f"This form is only for {role.value} accounts")
        return user

    @staticmethod
    def _employee_fields(name: str, phone: str, position: str) -> dict[str, str]:
        return {
            "name": require_text(name, "name", "Name is required"),
            "phone": require_text(phone, "phone", "Phone number is required"),
            "position": require_text(position, "position", "Position is required"),
        }

    def _store_user(self, user: User) -> None:
        """Keep the registry copy (and any company's embedded copy) in step with the session."""
        if self.registry.find_user(user.id) is None:
            self.registry.add_user(user)
        else:
            self.registry.replace(user)
        for company in self.registry.companies:
            company.users = [user if member.id == user.id else member for member in company.users]


def _user_id(user: Any) -> Optional[str]:
    if isinstance(user, User):
        return user.id
    if isinstance(user, dict):
        return user.get("id")
    return None
