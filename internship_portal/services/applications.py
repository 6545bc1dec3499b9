"""
Application Lifecycle Tracker

Creates applications from a student's ranked company choices and moves them
through ``pending -> accepted | rejected``. Both terminal states are final.

Submissions are validated completely before any application is created, so a
rejected submission leaves the registry untouched.
"""

from typing import Optional, Sequence

from internship_portal.models.application import Application, ApplicationStatus
from internship_portal.models.company import Company
from internship_portal.models.config import WorkflowLimits
from internship_portal.models.phase import Phase, PhaseType
from internship_portal.models.user import User, UserRole
from internship_portal.services.phases import PhaseSequencer
from internship_portal.services.registry import DomainRegistry
from internship_portal.utils.errors import (
    FormValidationError,
    InvalidTransition,
    PermissionDenied,
)
from internship_portal.utils.logger import get_logger


def validate_choose5(company_ids: Sequence[str], limits: Optional[WorkflowLimits] = None) -> list[str]:
    """
    Check a choose-5 shortlist.

    Args:
        company_ids: Selected company ids in the order the student picked them
        limits: Size limits (defaults to 1..5)

    Returns:
        The ids as a list

    Raises:
        FormValidationError: If the count is outside the limits or an id repeats
    """
    limits = limits or WorkflowLimits()
    ids = list(company_ids)
    if len(ids) < limits.choose5_min_companies:
        raise FormValidationError(
            f"Select at least {limits.choose5_min_companies} company", field="companies"
        )
    if len(ids) > limits.choose5_max_companies:
        raise FormValidationError(
            f"You can select at most {limits.choose5_max_companies} companies",
            field="companies",
        )
    if len(set(ids)) != len(ids):
        raise FormValidationError("Each company can be selected only once", field="companies")
    return ids


def validate_top3(
    company_ids: Sequence[str],
    cv_url: Optional[str],
    motivation_letter_url: Optional[str],
    first_choice: Optional[Company],
    limits: Optional[WorkflowLimits] = None,
) -> list[str]:
    """
    Check a top-3 ranking and its documents.

    Args:
        company_ids: Company ids ranked first, second, third
        cv_url: Reference of the uploaded CV
        motivation_letter_url: Reference of the uploaded motivation letter
        first_choice: The first-ranked company (decides whether a letter is needed)
        limits: Size limits (defaults to exactly 3 choices)

    Raises:
        FormValidationError: On a wrong count, repeated company, missing CV or
            missing motivation letter
    """
    limits = limits or WorkflowLimits()
    required = limits.top3_required_choices
    ids = list(company_ids)
    if len(ids) != required or any(not company_id for company_id in ids):
        raise FormValidationError(f"Choose exactly {required} companies", field="choices")
    if len(set(ids)) != required:
        raise FormValidationError(f"You must choose {required} different companies", field="choices")
    if not cv_url:
        raise FormValidationError("Please upload your CV", field="cv_url")
    if first_choice is not None and first_choice.requires_motivation_letter and not motivation_letter_url:
        raise FormValidationError(
            f"{first_choice.name} requires a motivation letter", field="motivation_letter_url"
        )
    return ids


class ApplicationTracker:
    """Submission, decision and role-scoped reads of applications."""

    def __init__(
        self,
        registry: DomainRegistry,
        sequencer: PhaseSequencer,
        limits: Optional[WorkflowLimits] = None,
        correlation_id: Optional[str] = None,
    ):
        self.registry = registry
        self.sequencer = sequencer
        self.limits = limits or WorkflowLimits()
        self.logger = get_logger(correlation_id=correlation_id, component="application_tracker")

    # ------------------------------------------------------------------ submission

    def submit_choose5(self, student: User, company_ids: Sequence[str]) -> list[Application]:
        """
        Record a student's choose-5 shortlist as pending applications.

        Raises:
            PermissionDenied: If ``student`` is not a student
            PhaseNotActive: If the choose5 phase is not active
            FormValidationError: If the shortlist is invalid
            ReferenceNotFound: If a company does not exist
            InvalidTransition: If the student already submitted in this phase
        """
        self._require_student(student)
        phase = self.sequencer.require_active(PhaseType.CHOOSE5)
        ids = validate_choose5(company_ids, self.limits)
        for company_id in ids:
            self.registry.get_company(company_id)
        self._require_first_submission(student, phase)

        created = [
            self.registry.add_application(
                Application(
                    student_id=student.id,
                    company_id=company_id,
                    phase_id=phase.id,
                    priority=rank,
                )
            )
            for rank, company_id in enumerate(ids, start=1)
        ]
        self.logger.info(
            "Choose-5 shortlist submitted",
            phase=phase.type.value,
            student_id=student.id,
            company_ids=ids,
        )
        return created

    def submit_top3(
        self,
        student: User,
        company_ids: Sequence[str],
        cv_url: Optional[str],
        motivation_letter_url: Optional[str] = None,
    ) -> list[Application]:
        """
        Record a student's ranked top-3 choice as pending applications.

        The CV is attached to all three applications; the motivation letter,
        written for the first-choice company, to the first one only.

        Raises:
            PermissionDenied: If ``student`` is not a student
            PhaseNotActive: If the top3Choice phase is not active
            FormValidationError: If the ranking or documents are invalid
            ReferenceNotFound: If a company does not exist
            InvalidTransition: If the student already submitted in this phase
        """
        self._require_student(student)
        phase = self.sequencer.require_active(PhaseType.TOP3_CHOICE)

        ids = list(company_ids)
        first_choice = self.registry.find_company(ids[0]) if ids and ids[0] else None
        ids = validate_top3(ids, cv_url, motivation_letter_url, first_choice, self.limits)
        for company_id in ids:
            self.registry.get_company(company_id)
        self._require_first_submission(student, phase)

        created = []
        for rank, company_id in enumerate(ids, start=1):
            created.append(
                self.registry.add_application(
                    Application(
                        student_id=student.id,
                        company_id=company_id,
                        phase_id=phase.id,
                        priority=rank,
                        cv_url=cv_url,
                        motivation_letter_url=motivation_letter_url if rank == 1 else None,
                    )
                )
            )
        self.logger.info(
            "Top-3 choice submitted",
            phase=phase.type.value,
            student_id=student.id,
            company_ids=ids,
            has_motivation_letter=bool(motivation_letter_url),
        )
        return created

    def _require_student(self, user: User) -> None:
        if user.role is not UserRole.STUDENT:
            raise PermissionDenied("Only students can submit company choices")

    def _require_first_submission(self, student: User, phase: Phase) -> None:
        if any(
            app.student_id == student.id and app.phase_id == phase.id
            for app in self.registry.applications
        ):
            raise InvalidTransition(f"Choices for '{phase.name}' were already submitted")

    # ------------------------------------------------------------------ decisions

    def decide(
        self,
        actor: User,
        application_id: str,
        status: ApplicationStatus,
        feedback: Optional[str] = None,
    ) -> Application:
        """
        Accept or reject a pending application.

        Raises:
            ReferenceNotFound: If the application does not exist
            InvalidTransition: If the target is ``pending`` or the application
                was already decided (status is left unchanged)
            PermissionDenied: If ``actor`` is neither an admin nor an employee
                of the application's company
        """
        application = self.registry.get_application(application_id)
        self._require_reviewer(actor, application)

        if status is ApplicationStatus.PENDING:
            raise InvalidTransition("An application cannot be moved back to pending")
        if application.status.is_terminal:
            self.logger.warning(
                "Decision rejected",
                application_id=application_id,
                current_status=application.status.value,
                requested_status=status.value,
            )
            raise InvalidTransition(
                f"Application is already {application.status.value}"
            )

        updated = application.model_copy(
            update={"status": status, "feedback": feedback if feedback is not None else application.feedback}
        )
        self.registry.replace(updated)
        self.logger.info(
            "Application decided",
            application_id=application_id,
            status=status.value,
            decided_by=actor.id,
            role=actor.role.value,
        )
        return updated

    def accept(self, actor: User, application_id: str, feedback: Optional[str] = None) -> Application:
        return self.decide(actor, application_id, ApplicationStatus.ACCEPTED, feedback)

    def reject(self, actor: User, application_id: str, feedback: Optional[str] = None) -> Application:
        return self.decide(actor, application_id, ApplicationStatus.REJECTED, feedback)

    def _require_reviewer(self, actor: User, application: Application) -> None:
        if actor.role is UserRole.ADMIN:
            return
        if actor.role is UserRole.COMPANY:
            company = self.registry.company_of(actor)
            if company is not None and company.id == application.company_id:
                return
            raise PermissionDenied("Companies can only review their own applications")
        raise PermissionDenied("Only companies and admins can review applications")

    # ------------------------------------------------------------------ reads

    def visible_to(self, actor: User) -> list[Application]:
        """Applications ``actor`` may see: own (student), own company's (company), all (admin)."""
        if actor.role is UserRole.ADMIN:
            return list(self.registry.applications)
        if actor.role is UserRole.STUDENT:
            return [app for app in self.registry.applications if app.student_id == actor.id]
        if actor.role is UserRole.COMPANY:
            company = self.registry.company_of(actor)
            if company is None:
                return []
            return [app for app in self.registry.applications if app.company_id == company.id]
        raise ValueError(f"Unhandled role: {actor.role}")

    def filter_by_status(
        self, actor: User, status: Optional[ApplicationStatus] = None
    ) -> list[Application]:
        """Visible applications, optionally narrowed to one status (None = all)."""
        visible = self.visible_to(actor)
        if status is None:
            return visible
        return [app for app in visible if app.status is status]

    def group_by_status(self, actor: User) -> dict[ApplicationStatus, list[Application]]:
        groups: dict[ApplicationStatus, list[Application]] = {status: [] for status in ApplicationStatus}
        for app in self.visible_to(actor):
            groups[app.status].append(app)
        return groups

    def status_counts(self, actor: User) -> dict[ApplicationStatus, int]:
        return {status: len(apps) for status, apps in self.group_by_status(actor).items()}
