"""
Portal Facade

One session of the portal: the signed-in identity plus the services acting
on the shared registry. Every user action runs through ``perform()``, the
single place where a ``PortalError`` becomes an ``ActionOutcome`` and a toast.
Unexpected exceptions are not caught there and propagate to the caller.

Example Usage:
    from internship_portal.services.portal import Portal

    portal = Portal.in_memory()
    outcome = portal.login("maria@school.bg", "secret")
    if outcome.ok:
        print(outcome.redirect)        # /student/profile-setup
"""

import uuid
from typing import Any, Callable, Optional, Sequence, TypeVar

from pydantic import BaseModel

from internship_portal.models.application import Application, ApplicationStatus
from internship_portal.models.company import Company
from internship_portal.models.config import PortalSettings
from internship_portal.models.engagement import ChatRoom, Meeting, Message
from internship_portal.models.phase import Phase, PhaseView
from internship_portal.models.user import User, UserRole
from internship_portal.services.applications import ApplicationTracker
from internship_portal.services.catalogue import CompanyCatalogue
from internship_portal.services.engagement import ChatService, MeetingBoard
from internship_portal.services.feedback import FeedbackService
from internship_portal.services.identity import IdentityStore
from internship_portal.services.invitations import InvitationService
from internship_portal.services.onboarding import OnboardingService
from internship_portal.services.phases import PhaseSequencer, WorkflowAction
from internship_portal.services.registry import DomainRegistry
from internship_portal.services.router import (
    AccessDecision,
    NavLink,
    authorize,
    landing_path,
    navigation_links,
)
from internship_portal.services.statistics import ProgramStatistics, compute_statistics
from internship_portal.utils.errors import PermissionDenied, PortalError
from internship_portal.utils.logger import get_logger
from internship_portal.utils.notifications import Notifier, RecordingNotifier
from internship_portal.utils.storage import FileStorage, MemoryStorage, StorageProvider
from internship_portal.utils.template_loader import TemplateLoader
from internship_portal.utils.uploads import ReferenceOnlyUploader, UploadProvider, accept_upload

T = TypeVar("T")


class ActionOutcome(BaseModel):
    """Result of one user action as shown to the user."""

    ok: bool
    value: Any = None
    error_kind: Optional[str] = None
    message: Optional[str] = None
    field: Optional[str] = None
    redirect: Optional[str] = None


class Portal:
    """
    Session context for one user of the portal.

    Owns the identity store and wires the domain services to the shared
    registry. Mutating actions return an ActionOutcome; reads return data
    directly and raise NoActiveSession when signed out.
    """

    def __init__(
        self,
        registry: DomainRegistry,
        storage: StorageProvider,
        settings: Optional[PortalSettings] = None,
        notifier: Optional[Notifier] = None,
        uploader: Optional[UploadProvider] = None,
        templates: Optional[TemplateLoader] = None,
        correlation_id: Optional[str] = None,
    ):
        """
        Initialize a portal session and restore any persisted identity.

        Args:
            registry: Shared domain registry
            storage: Storage provider for the identity snapshot
            settings: Portal settings (defaults apply if None)
            notifier: Toast sink (records toasts in memory if None)
            uploader: Upload provider (mints reference URLs if None)
            templates: Template loader for e-mails and toasts
            correlation_id: Correlation ID for logging (auto-generated if None)
        """
        if correlation_id is None:
            correlation_id = str(uuid.uuid4())

        self.correlation_id = correlation_id
        self.settings = settings or PortalSettings()
        self.registry = registry
        self.notifier = notifier or RecordingNotifier()
        self.uploader = uploader or ReferenceOnlyUploader()
        self.templates = templates or TemplateLoader()

        self.identity = IdentityStore(
            storage, storage_key=self.settings.identity_storage_key, correlation_id=correlation_id
        )
        self.sequencer = PhaseSequencer(registry, correlation_id=correlation_id)
        self.tracker = ApplicationTracker(
            registry, self.sequencer, limits=self.settings.limits, correlation_id=correlation_id
        )
        self.onboarding = OnboardingService(self.identity, registry, correlation_id=correlation_id)
        self.catalogue = CompanyCatalogue(registry)
        self.meeting_board = MeetingBoard(registry)
        self.chat = ChatService(registry, correlation_id=correlation_id)
        self.feedback = FeedbackService(registry, correlation_id=correlation_id)
        self.invitations = InvitationService(
            registry, templates=self.templates, correlation_id=correlation_id
        )

        self.logger = get_logger(correlation_id=correlation_id, phase="session", component="portal")
        self.identity.restore()

    @classmethod
    def from_settings(
        cls,
        settings: PortalSettings,
        notifier: Optional[Notifier] = None,
        registry: Optional[DomainRegistry] = None,
        correlation_id: Optional[str] = None,
    ) -> "Portal":
        """Build a portal with file-backed identity storage and the configured seed data."""
        registry = registry or DomainRegistry.from_seed(settings.seed_dir, correlation_id=correlation_id)
        return cls(
            registry,
            FileStorage(settings.storage_dir),
            settings=settings,
            notifier=notifier,
            correlation_id=correlation_id,
        )

    @classmethod
    def in_memory(
        cls,
        registry: Optional[DomainRegistry] = None,
        notifier: Optional[Notifier] = None,
        settings: Optional[PortalSettings] = None,
    ) -> "Portal":
        """Build a portal over the bundled seed data with in-process storage."""
        return cls(
            registry or DomainRegistry.from_seed(),
            MemoryStorage(),
            settings=settings,
            notifier=notifier,
        )

    # ------------------------------------------------------------------ action boundary

    def perform(
        self,
        title: str,
        action: Callable[[], T],
        describe: Optional[Callable[[T], Optional[str]]] = None,
        redirect: Optional[Callable[[T], Optional[str]]] = None,
    ) -> ActionOutcome:
        """
        Run one user action and report its outcome.

        Args:
            title: Toast title, also used as the action name in logs
            action: The mutation to run
            describe: Builds the success toast text from the result (no toast if None)
            redirect: Builds the path to navigate to after success

        Returns:
            ActionOutcome with the action's value on success, or the error
            kind, message, offending field and redirect on failure
        """
        try:
            value = action()
        except PortalError as e:
            self.logger.warning("Action rejected", action=title, error_kind=e.kind, error=e.message)
            self.notifier.error(title, e.message)
            return ActionOutcome(
                ok=False,
                error_kind=e.kind,
                message=e.message,
                field=getattr(e, "field", None),
                redirect=getattr(e, "redirect_to", None),
            )

        message = describe(value) if describe else None
        if message:
            self.notifier.success(title, message)
        return ActionOutcome(
            ok=True,
            value=value,
            message=message,
            redirect=redirect(value) if redirect else None,
        )

    def _require_admin(self) -> User:
        user = self.identity.require_user()
        if user.role is not UserRole.ADMIN:
            raise PermissionDenied("Only admins can manage the program")
        return user

    # ------------------------------------------------------------------ session

    @property
    def current_user(self) -> Optional[User]:
        return self.identity.current

    def login(self, email: str, password: str) -> ActionOutcome:
        return self.perform(
            "Login",
            lambda: self.onboarding.login(email, password),
            describe=lambda user: f"Welcome, {user.name}",
            redirect=landing_path,
        )

    def bypass_login(self, role: UserRole) -> ActionOutcome:
        return self.perform(
            "Demo login",
            lambda: self.onboarding.bypass_login(role),
            redirect=landing_path,
        )

    def logout(self) -> ActionOutcome:
        self.identity.sign_out()
        return ActionOutcome(ok=True, redirect="/login")

    def authorize(self, path: str) -> AccessDecision:
        return authorize(self.identity.current, path)

    def navigation(self) -> list[NavLink]:
        return navigation_links(self.identity.current)

    # ------------------------------------------------------------------ onboarding

    def complete_student_profile(self, **fields: Any) -> ActionOutcome:
        return self.perform(
            "Profile",
            lambda: self.onboarding.complete_student_profile(**fields),
            describe=lambda _user: "Your profile is complete",
            redirect=landing_path,
        )

    def complete_employee_profile(self, **fields: Any) -> ActionOutcome:
        return self.perform(
            "Profile",
            lambda: self.onboarding.complete_employee_profile(**fields),
            redirect=lambda _user: "/company/profile-setup",
        )

    def complete_company_profile(self, company_fields: dict[str, Any], **employee: Any) -> ActionOutcome:
        return self.perform(
            "Company profile",
            lambda: self.onboarding.complete_company_profile(company_fields, **employee),
            describe=lambda result: f"{result[1].name} is ready to receive applications",
            redirect=lambda result: landing_path(result[0]),
        )

    def upload(self, kind: str, filename: str, mime_type: str, content: bytes) -> ActionOutcome:
        """Check a file against the upload policy and store it. ``value`` is the DocumentRef."""
        return self.perform(
            "Upload",
            lambda: accept_upload(self.settings.uploads, self.uploader, kind, filename, mime_type, content),
        )

    # ------------------------------------------------------------------ phases

    def timeline(self) -> list[PhaseView]:
        return self.sequencer.timeline()

    def workflow_action(self) -> Optional[WorkflowAction]:
        return self.sequencer.action_for(self.identity.require_user().role)

    def _phase_toast(self, phase: Phase) -> str:
        return self.templates.render(
            "toasts/phase_activated.j2",
            correlation_id=self.correlation_id,
            is_active=phase.is_active,
            phase_name=phase.name,
        )

    def activate_phase(self, phase_id: str) -> ActionOutcome:
        def run() -> Phase:
            self._require_admin()
            return self.sequencer.set_active(phase_id)

        return self.perform("Phases", run, describe=self._phase_toast)

    def toggle_phase(self, phase_id: str) -> ActionOutcome:
        def run() -> Phase:
            self._require_admin()
            return self.sequencer.toggle_active(phase_id)

        return self.perform("Phases", run, describe=self._phase_toast)

    def create_phase(self, fields: dict[str, Any]) -> ActionOutcome:
        def run() -> Phase:
            self._require_admin()
            return self.sequencer.create(fields)

        return self.perform("Phases", run, describe=lambda phase: f'Phase "{phase.name}" was created')

    def update_phase(self, phase_id: str, fields: dict[str, Any]) -> ActionOutcome:
        def run() -> Phase:
            self._require_admin()
            return self.sequencer.update(phase_id, fields)

        return self.perform("Phases", run, describe=lambda phase: f'Phase "{phase.name}" was updated')

    # ------------------------------------------------------------------ applications

    def _choices_toast(self, created: list[Application]) -> str:
        phase = self.registry.get_phase(created[0].phase_id)
        return self.templates.render(
            "toasts/choices_saved.j2",
            correlation_id=self.correlation_id,
            phase_type=phase.type.value,
            count=len(created),
        )

    def submit_choose5(self, company_ids: Sequence[str]) -> ActionOutcome:
        return self.perform(
            "Choose companies",
            lambda: self.tracker.submit_choose5(self.identity.require_user(), company_ids),
            describe=self._choices_toast,
            redirect=lambda _created: "/dashboard",
        )

    def submit_top3(
        self,
        company_ids: Sequence[str],
        cv_url: Optional[str],
        motivation_letter_url: Optional[str] = None,
    ) -> ActionOutcome:
        return self.perform(
            "Top 3",
            lambda: self.tracker.submit_top3(
                self.identity.require_user(), company_ids, cv_url, motivation_letter_url
            ),
            describe=self._choices_toast,
            redirect=lambda _created: "/dashboard",
        )

    def _decision_toast(self, application: Application) -> str:
        student = self.registry.find_user(application.student_id)
        company = self.registry.find_company(application.company_id)
        return self.templates.render(
            "toasts/application_decided.j2",
            correlation_id=self.correlation_id,
            student_name=student.name if student else application.student_id,
            company_name=company.name if company else application.company_id,
            status_label=application.status.label,
        )

    def decide(
        self, application_id: str, status: ApplicationStatus, feedback: Optional[str] = None
    ) -> ActionOutcome:
        return self.perform(
            "Application",
            lambda: self.tracker.decide(self.identity.require_user(), application_id, status, feedback),
            describe=self._decision_toast,
        )

    def applications(self, status: Optional[ApplicationStatus] = None) -> list[Application]:
        return self.tracker.filter_by_status(self.identity.require_user(), status)

    def application_counts(self) -> dict[ApplicationStatus, int]:
        return self.tracker.status_counts(self.identity.require_user())

    # ------------------------------------------------------------------ catalogue, meetings, chat

    def companies(
        self, search: Optional[str] = None, technologies: Optional[Sequence[str]] = None
    ) -> list[Company]:
        self.identity.require_user()
        return self.catalogue.search(search, technologies)

    def meetings(self) -> list[Meeting]:
        return self.meeting_board.visible_to(self.identity.require_user())

    def chat_rooms(self) -> list[ChatRoom]:
        return self.chat.rooms_for(self.identity.require_user())

    def messages(self, room_id: str) -> list[Message]:
        return self.chat.messages(self.identity.require_user(), room_id)

    def send_message(self, room_id: str, content: str) -> ActionOutcome:
        return self.perform(
            "Chat",
            lambda: self.chat.send_message(self.identity.require_user(), room_id, content),
        )

    # ------------------------------------------------------------------ reports, reviews, invitations

    def submit_report(self, company_id: str, report_url: Optional[str]) -> ActionOutcome:
        return self.perform(
            "Final report",
            lambda: self.feedback.submit_report(self.identity.require_user(), company_id, report_url),
            describe=lambda _report: "Your report was submitted",
        )

    def submit_review(self, company_id: str, rating: int, comment: str) -> ActionOutcome:
        return self.perform(
            "Review",
            lambda: self.feedback.submit_review(self.identity.require_user(), company_id, rating, comment),
            describe=lambda _review: "Thank you for your review",
        )

    def set_report_feedback(self, report_id: str, feedback: str) -> ActionOutcome:
        return self.perform(
            "Final report",
            lambda: self.feedback.set_report_feedback(self.identity.require_user(), report_id, feedback),
            describe=lambda _report: "Feedback saved",
        )

    def invite_company(self, email: str, company_name: str) -> ActionOutcome:
        def run():
            sent = self.invitations.invite_company(self.identity.require_user(), email, company_name)
            self.notifier.success(f"Invitation to {sent.invitation.email}", sent.body)
            return sent

        return self.perform(
            "Invitation",
            run,
            describe=lambda sent: f"{sent.invitation.company_name} was invited",
        )

    def statistics(self) -> ProgramStatistics:
        self._require_admin()
        return compute_statistics(self.registry)

    def export(self, snapshot_dir: str) -> ActionOutcome:
        def run():
            self._require_admin()
            return self.registry.export(snapshot_dir)

        return self.perform(
            "Export", run, describe=lambda files: f"Exported {len(files)} collections"
        )
