"""
Unit tests for login and profile setup.
"""

import pytest

from internship_portal.models.user import UserRole
from internship_portal.services.identity import IdentityStore
from internship_portal.services.onboarding import OnboardingService, role_from_email
from internship_portal.services.registry import DomainRegistry
from internship_portal.utils.errors import FormValidationError, NoActiveSession, PermissionDenied
from internship_portal.utils.storage import MemoryStorage

COMPANY_FIELDS = {
    "name": "Firm Ltd",
    "description": "Embedded systems for smart buildings.",
    "logo": "uploads/logo/firm.png",
    "technologies": ["C", "Rust"],
    "specialties": ["Embedded"],
    "internship_type": "onsite",
}


@pytest.fixture
def registry() -> DomainRegistry:
    return DomainRegistry.from_seed()


@pytest.fixture
def onboarding(registry) -> OnboardingService:
    return OnboardingService(IdentityStore(MemoryStorage()), registry)


class TestRoleFromEmail:
    """Test cases for the demo role rule."""

    @pytest.mark.parametrize(
        "email, role",
        [
            ("admin2@school.bg", UserRole.ADMIN),
            ("Company.Rep@firm.bg", UserRole.COMPANY),
            ("pupil@school.bg", UserRole.STUDENT),
        ],
    )
    def test_role(self, email, role):
        assert role_from_email(email) is role


class TestLogin:
    """Test cases for login and bypass_login."""

    def test_known_email_signs_in_registered_user(self, onboarding):
        user = onboarding.login("HR@TechSoft.bg", "secret")

        assert user.id == "6"
        assert onboarding.identity.current.id == "6"

    def test_unknown_email_registers_new_user(self, onboarding, registry):
        """Test that an unknown e-mail creates an account that still needs setup."""
        # Act
        user = onboarding.login("new.pupil@school.bg", "secret")

        # Assert
        assert user.role is UserRole.STUDENT
        assert user.profile_completed is False
        assert user.name == "new.pupil"
        assert registry.find_user(user.id) is not None
        assert len(registry.users) == 9

    def test_new_admin_needs_no_setup(self, onboarding):
        assert onboarding.login("admin2@school.bg", "x").profile_completed is True

    @pytest.mark.parametrize(
        "email, password, field",
        [("", "x", "email"), ("pupil@school.bg", "  ", "password"), ("not-an-email", "x", "email")],
    )
    def test_invalid_credentials_form(self, onboarding, email, password, field):
        with pytest.raises(FormValidationError) as exc_info:
            onboarding.login(email, password)

        assert exc_info.value.field == field
        assert onboarding.identity.current is None

    def test_bypass_login_resets_demo_account(self, onboarding, registry):
        first = onboarding.bypass_login(UserRole.STUDENT)
        second = onboarding.bypass_login(UserRole.STUDENT)

        assert first.id == second.id == "demo-student"
        assert second.profile_completed is False
        assert sum(1 for u in registry.users if u.id == "demo-student") == 1


class TestStudentProfile:
    """Test cases for the student setup form."""

    def test_completes_profile(self, onboarding, registry):
        """Test that the form unlocks the portal and updates the registry copy."""
        # Arrange
        onboarding.identity.sign_in(registry.get_user("5"))

        # Act
        user = onboarding.complete_student_profile(
            name="Elena Ivanova", phone="+359888100500", technologies=["Python", " ", "SQL"]
        )

        # Assert
        assert user.profile_completed is True
        assert user.technologies == ["Python", "SQL"]
        assert registry.get_user("5").profile_completed is True

    @pytest.mark.parametrize(
        "fields, field",
        [
            ({"name": "Elena", "phone": "", "technologies": ["Python"]}, "phone"),
            ({"name": "Elena", "phone": "+359", "technologies": []}, "technologies"),
            ({"name": " ", "phone": "+359", "technologies": ["Python"]}, "name"),
        ],
    )
    def test_required_fields(self, onboarding, registry, fields, field):
        onboarding.identity.sign_in(registry.get_user("5"))

        with pytest.raises(FormValidationError) as exc_info:
            onboarding.complete_student_profile(**fields)

        assert exc_info.value.field == field
        assert onboarding.identity.current.profile_completed is False

    def test_requires_session(self, onboarding):
        with pytest.raises(NoActiveSession):
            onboarding.complete_student_profile(name="A", phone="1", technologies=["Go"])

    def test_company_user_denied(self, onboarding, registry):
        onboarding.identity.sign_in(registry.get_user("6"))

        with pytest.raises(PermissionDenied):
            onboarding.complete_student_profile(name="A", phone="1", technologies=["Go"])


class TestCompanyProfile:
    """Test cases for the employee and company setup forms."""

    def test_new_company_onboarding(self, onboarding, registry):
        """Test that employee then company form create the company and link the user."""
        # Arrange
        onboarding.login("company.rep@firm.bg", "secret")

        # Act
        employee = onboarding.complete_employee_profile(
            name="Vera Nikolova", phone="+359877300100", position="CTO"
        )
        user, company = onboarding.complete_company_profile(dict(COMPANY_FIELDS))

        # Assert
        assert employee.profile_completed is False
        assert user.profile_completed is True
        assert user.company_id == company.id
        assert registry.find_company(company.id).name == "Firm Ltd"
        assert [member.id for member in company.users] == [user.id]
        assert registry.company_of(user).id == company.id
        assert len(registry.companies) == 7

    @pytest.mark.parametrize("missing", ["logo", "technologies", "specialties", "description"])
    def test_required_company_fields(self, onboarding, registry, missing):
        onboarding.login("company.rep@firm.bg", "secret")
        onboarding.complete_employee_profile(name="Vera", phone="+359", position="CTO")
        fields = {key: value for key, value in COMPANY_FIELDS.items() if key != missing}

        with pytest.raises(FormValidationError) as exc_info:
            onboarding.complete_company_profile(fields)

        assert exc_info.value.field == missing
        assert len(registry.companies) == 6

    def test_company_fields_without_employee_details(self, onboarding):
        onboarding.login("company.rep@firm.bg", "secret")

        with pytest.raises(FormValidationError) as exc_info:
            onboarding.complete_company_profile(dict(COMPANY_FIELDS))

        assert exc_info.value.field == "phone"

    def test_existing_company_is_updated_in_place(self, onboarding, registry):
        onboarding.identity.sign_in(registry.get_user("6"))

        _, company = onboarding.complete_company_profile(
            {**COMPANY_FIELDS, "name": "TechSoft"}, position="People Lead"
        )

        assert company.id == "c1"
        assert len(registry.companies) == 6
        assert registry.get_company("c1").description == COMPANY_FIELDS["description"]
        assert registry.get_user("6").position == "People Lead"

    def test_taken_company_id_leaves_session_and_registry_untouched(self, onboarding, registry):
        """Test that claiming another company's id is rejected before anything changes."""
        # Arrange
        onboarding.login("company.rep@firm.bg", "secret")
        before = onboarding.complete_employee_profile(
            name="Vera Nikolova", phone="+359877300100", position="CTO"
        )
        techsoft_members = [member.id for member in registry.get_company("c1").users]

        # Act
        with pytest.raises(FormValidationError) as exc_info:
            onboarding.complete_company_profile({**COMPANY_FIELDS, "id": "c1"})

        # Assert
        assert exc_info.value.field == "id"
        current = onboarding.identity.current
        assert current.profile_completed is False
        assert current.company_id is None
        assert current == before
        restored = onboarding.identity.restore()
        assert (restored.profile_completed, restored.company_id) == (False, None)
        assert registry.company_of(current) is None
        assert registry.get_company("c1").name == "TechSoft"
        assert [member.id for member in registry.get_company("c1").users] == techsoft_members
        assert len(registry.companies) == 6
