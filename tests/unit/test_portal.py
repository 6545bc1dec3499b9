"""
Unit tests for the Portal session facade and its action boundary.
"""

from unittest.mock import MagicMock

import pytest

from internship_portal.models.application import ApplicationStatus
from internship_portal.models.user import UserRole
from internship_portal.services.portal import Portal
from internship_portal.services.registry import DomainRegistry
from internship_portal.services.router import RedirectTo
from internship_portal.utils.errors import NoActiveSession, PermissionDenied
from internship_portal.utils.notifications import RecordingNotifier
from internship_portal.utils.storage import MemoryStorage


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def portal(notifier) -> Portal:
    return Portal.in_memory(notifier=notifier)


def sign_in(portal: Portal, email: str) -> None:
    outcome = portal.login(email, "secret")
    assert outcome.ok, outcome.message


class TestPerform:
    """Test cases for the action boundary."""

    def test_success_toast_and_redirect(self, portal, notifier):
        outcome = portal.perform("Demo", lambda: 41 + 1, describe=lambda v: f"got {v}", redirect=lambda v: "/x")

        assert outcome.ok and outcome.value == 42
        assert outcome.redirect == "/x"
        assert notifier.last.title == "Demo"
        assert notifier.last.description == "got 42"

    def test_no_toast_without_describe(self, portal, notifier):
        assert portal.perform("Quiet", lambda: None).ok
        assert notifier.toasts == []

    def test_portal_error_becomes_outcome(self, portal, notifier):
        """Test that a PortalError is reported as an error toast and a failed outcome."""

        def fail():
            raise PermissionDenied("nope")

        outcome = portal.perform("Guarded", fail)

        assert outcome.ok is False
        assert outcome.error_kind == "permission_denied"
        assert outcome.message == "nope"
        assert notifier.last.variant == "destructive"

    def test_unexpected_errors_propagate(self, portal):
        action = MagicMock(side_effect=RuntimeError("boom"))

        with pytest.raises(RuntimeError):
            portal.perform("Broken", action)


class TestSession:
    """Test cases for login, logout and restore."""

    def test_login_existing_user(self, portal, notifier):
        outcome = portal.login("maria.georgieva@school.bg", "secret")

        assert outcome.ok
        assert outcome.redirect == "/dashboard"
        assert notifier.last.description == "Welcome, Maria Georgieva"
        assert portal.current_user.id == "3"

    def test_login_new_student_lands_on_setup(self, portal):
        assert portal.login("newcomer@school.bg", "secret").redirect == "/student/profile-setup"

    def test_login_new_company_lands_on_company_setup(self, portal):
        assert portal.login("company.rep@firm.bg", "secret").redirect == "/company/profile-setup"

    def test_login_validation_error(self, portal):
        outcome = portal.login("", "secret")

        assert outcome.error_kind == "validation_error"
        assert outcome.field == "email"

    def test_logout(self, portal):
        sign_in(portal, "admin@school.bg")

        outcome = portal.logout()

        assert outcome.redirect == "/login"
        assert portal.current_user is None
        assert portal.authorize("/dashboard") == RedirectTo(path="/login")
        assert portal.navigation() == []

    def test_identity_restored_by_new_portal(self):
        """Test that a second portal over the same storage resumes the session."""
        # Arrange
        registry = DomainRegistry.from_seed()
        storage = MemoryStorage()
        Portal(registry, storage).login("hr@techsoft.bg", "secret")

        # Act
        resumed = Portal(registry, storage)

        # Assert
        assert resumed.current_user.id == "6"

    def test_bypass_login(self, portal):
        outcome = portal.bypass_login(UserRole.COMPANY)

        assert outcome.ok
        assert outcome.redirect == "/company/profile-setup"
        assert portal.authorize("/dashboard") == RedirectTo(path="/company/employee-profile-setup")

    def test_reads_require_session(self, portal):
        with pytest.raises(NoActiveSession):
            portal.applications()
        with pytest.raises(NoActiveSession):
            portal.workflow_action()

    def test_signed_out_action_redirects_to_login(self, portal):
        outcome = portal.submit_choose5(["c1"])

        assert outcome.error_kind == "no_active_session"
        assert outcome.redirect == "/login"


class TestOnboardingActions:
    """Test cases for the profile forms through the portal."""

    def test_student_profile(self, portal):
        sign_in(portal, "elena.ivanova@school.bg")

        outcome = portal.complete_student_profile(name="Elena Ivanova", phone="+359", technologies=["Go"])

        assert outcome.ok
        assert outcome.redirect == "/dashboard"
        assert portal.authorize("/companies").allowed

    def test_company_onboarding(self, portal, notifier):
        sign_in(portal, "company.rep@firm.bg")

        employee = portal.complete_employee_profile(name="Vera", phone="+359", position="CTO")
        company = portal.complete_company_profile(
            {
                "name": "Firm Ltd",
                "description": "Embedded systems.",
                "logo": "uploads/logo/firm.png",
                "technologies": ["C"],
                "specialties": ["Embedded"],
            }
        )

        assert employee.redirect == "/company/profile-setup"
        assert company.redirect == "/dashboard"
        assert notifier.last.description == "Firm Ltd is ready to receive applications"

    def test_company_setup_with_taken_id_is_a_form_error(self, portal):
        sign_in(portal, "company.rep@firm.bg")
        portal.complete_employee_profile(name="Vera", phone="+359", position="CTO")

        outcome = portal.complete_company_profile(
            {
                "id": "c1",
                "name": "Firm Ltd",
                "description": "Embedded systems.",
                "logo": "uploads/logo/firm.png",
                "technologies": ["C"],
                "specialties": ["Embedded"],
            }
        )

        assert outcome.ok is False
        assert (outcome.error_kind, outcome.field) == ("validation_error", "id")
        assert portal.identity.current.company_id is None
        assert portal.registry.get_company("c1").name == "TechSoft"

    def test_upload(self, portal):
        sign_in(portal, "ivan.petrov@school.bg")

        accepted = portal.upload("cv", "cv.pdf", "application/pdf", b"%PDF-1.7")
        rejected = portal.upload("cv", "cv.png", "image/png", b"\x89PNG")

        assert accepted.ok and accepted.value.url.startswith("uploads/cv/")
        assert rejected.ok is False and rejected.field == "cv"


class TestPhaseActions:
    """Test cases for admin phase management."""

    def test_admin_toggles_phase(self, portal, notifier):
        sign_in(portal, "admin@school.bg")

        outcome = portal.toggle_phase("p3")

        assert outcome.ok
        assert notifier.last.description == 'Phase "Top 3 choice" is now active.'
        assert [v.phase.id for v in portal.timeline() if v.state.value == "active"] == ["p3"]

    def test_toggle_off_message(self, portal, notifier):
        sign_in(portal, "admin@school.bg")

        portal.toggle_phase("p1")

        assert notifier.last.description == 'Phase "Choose 5 companies" was deactivated.'

    def test_student_cannot_activate(self, portal):
        sign_in(portal, "maria.georgieva@school.bg")

        outcome = portal.activate_phase("p4")

        assert outcome.error_kind == "permission_denied"
        assert portal.registry.get_phase("p1").is_active

    def test_create_and_update(self, portal, notifier):
        sign_in(portal, "admin@school.bg")

        created = portal.create_phase(
            {
                "type": "round3",
                "name": "Extra round",
                "description": "Late applications are reviewed.",
                "start_date": "2026-03-23T00:00:00Z",
                "end_date": "2026-03-29T00:00:00Z",
            }
        )
        updated = portal.update_phase(created.value.id, {"name": "Final round"})

        assert created.message == 'Phase "Extra round" was created'
        assert updated.message == 'Phase "Final round" was updated'

    def test_workflow_action_for_student(self, portal):
        sign_in(portal, "ivan.petrov@school.bg")
        assert portal.workflow_action().path == "/student/choose-5"


class TestApplicationActions:
    """Test cases for submissions and decisions through the portal."""

    def test_choose5(self, portal, notifier):
        sign_in(portal, "ivan.petrov@school.bg")

        outcome = portal.submit_choose5(["c1", "c3"])

        assert outcome.ok
        assert outcome.redirect == "/dashboard"
        assert notifier.last.description == "You selected 2 companies for live meetings."
        assert len(portal.applications()) == 2

    def test_top3_toast(self, portal, notifier):
        portal.sequencer.set_active("p3")
        sign_in(portal, "ivan.petrov@school.bg")

        outcome = portal.submit_top3(["c1", "c3", "c6"], "uploads/cv/ivan.pdf")

        assert outcome.ok
        assert notifier.last.description == "Your top 3 choice was saved successfully."

    def test_decision(self, portal, notifier):
        sign_in(portal, "hr@techsoft.bg")

        first = portal.decide("a1", ApplicationStatus.ACCEPTED)
        second = portal.decide("a1", ApplicationStatus.REJECTED)

        assert first.ok
        assert notifier.toasts[-2].description == "Application of Maria Georgieva to TechSoft is now accepted."
        assert second.error_kind == "invalid_transition"
        assert portal.application_counts()[ApplicationStatus.ACCEPTED] == 2


class TestOtherActions:
    """Test cases for chat, reports, invitations, statistics and export."""

    def test_chat(self, portal):
        sign_in(portal, "maria.georgieva@school.bg")

        sent = portal.send_message("r1", "Thanks!")
        blank = portal.send_message("r1", " ")

        assert sent.ok
        assert portal.messages("r1")[-1].content == "Thanks!"
        assert blank.field == "content"
        assert [r.id for r in portal.chat_rooms()] == ["r1", "r2"]
        assert [m.id for m in portal.meetings()] == ["m2", "m1"]

    def test_report_and_review(self, portal):
        sign_in(portal, "georgi.dimitrov@school.bg")

        assert portal.submit_report("c1", "uploads/report/g2.pdf").message == "Your report was submitted"
        assert portal.submit_review("c1", 4, "Solid mentoring programme.").message == "Thank you for your review"

    def test_invitation_sends_email_toast(self, portal, notifier):
        sign_in(portal, "admin@school.bg")

        outcome = portal.invite_company("hr@brightlabs.bg", "Bright Labs")

        assert outcome.ok
        assert notifier.toasts[-2].title == "Invitation to hr@brightlabs.bg"
        assert "Bright Labs" in notifier.toasts[-2].description
        assert notifier.last.description == "Bright Labs was invited"

    def test_statistics_admin_only(self, portal):
        sign_in(portal, "maria.georgieva@school.bg")

        with pytest.raises(PermissionDenied):
            portal.statistics()

    def test_statistics(self, portal):
        sign_in(portal, "admin@school.bg")
        assert portal.statistics().total_applications == 4

    def test_export(self, portal, tmp_path):
        sign_in(portal, "admin@school.bg")

        outcome = portal.export(str(tmp_path / "snapshot"))

        assert outcome.message == "Exported 10 collections"
        assert (tmp_path / "snapshot" / "applications.jsonl").exists()

    def test_companies_search(self, portal):
        sign_in(portal, "ivan.petrov@school.bg")
        assert [c.id for c in portal.companies(technologies=["IoT"])] == ["c6"]
