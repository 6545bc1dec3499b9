"""
Phase Sequencer

Owns the ordered list of program phases and the at-most-one-active rule.
The rule is enforced where phases are mutated (set_active, create, update),
so readers can trust ``active_index()`` without re-checking.

Phase order is insertion order. Dates are informational only: a phase is
running exactly when its ``is_active`` flag is set.
"""

from typing import Any, Optional

from pydantic import BaseModel

from internship_portal.models.phase import Phase, PhaseState, PhaseType, PhaseView
from internship_portal.models.user import UserRole, utc_now
from internship_portal.services.registry import DomainRegistry
from internship_portal.utils.errors import FormValidationError, PhaseNotActive
from internship_portal.utils.forms import build_model
from internship_portal.utils.logger import get_logger


class WorkflowAction(BaseModel):
    """The single call-to-action shown next to the active phase."""

    label: str
    path: str


CHOOSE5_ACTION = WorkflowAction(label="Choose companies", path="/student/choose-5")
TOP3_ACTION = WorkflowAction(label="Choose top 3", path="/student/top3")
REVIEW_ACTION = WorkflowAction(label="Review applications", path="/company/applications")
MANAGE_ACTION = WorkflowAction(label="Manage phases", path="/admin/phases")


def permitted_action(role: UserRole, phase_type: Optional[PhaseType]) -> Optional[WorkflowAction]:
    """
    Workflow action available to ``role`` while a phase of ``phase_type`` is active.

    Args:
        role: Role of the signed-in user
        phase_type: Type of the active phase, or None if no phase is active

    Returns:
        The action, or None if the role has nothing to do in this phase
    """
    if phase_type is None:
        return None

    if role is UserRole.STUDENT:
        if phase_type is PhaseType.CHOOSE5:
            return CHOOSE5_ACTION
        if phase_type is PhaseType.TOP3_CHOICE:
            return TOP3_ACTION
        return None
    if role is UserRole.COMPANY:
        return REVIEW_ACTION if phase_type.is_application_round else None
    if role is UserRole.ADMIN:
        return MANAGE_ACTION
    raise ValueError(f"Unhandled role: {role}")


class PhaseSequencer:
    """Derives phase states and applies admin phase changes."""

    def __init__(self, registry: DomainRegistry, correlation_id: Optional[str] = None):
        self.registry = registry
        self.logger = get_logger(correlation_id=correlation_id, component="phase_sequencer")

    @property
    def phases(self) -> list[Phase]:
        return self.registry.phases

    def active_index(self) -> Optional[int]:
        """Position of the active phase, or None when no phase is active."""
        for index, phase in enumerate(self.phases):
            if phase.is_active:
                return index
        return None

    def active_phase(self) -> Optional[Phase]:
        index = self.active_index()
        return None if index is None else self.phases[index]

    def timeline(self) -> list[PhaseView]:
        """
        All phases in program order with their derived state.

        With no active phase every phase is reported as ``future``.
        """
        active = self.active_index()
        views = []
        for index, phase in enumerate(self.phases):
            if active is None or index > active:
                state = PhaseState.FUTURE
            elif index == active:
                state = PhaseState.ACTIVE
            else:
                state = PhaseState.PAST
            views.append(PhaseView(phase=phase, index=index, state=state))
        return views

    def is_phase_active(self, phase_type: PhaseType) -> bool:
        active = self.active_phase()
        return active is not None and active.type is phase_type

    def require_active(self, phase_type: PhaseType) -> Phase:
        """Return the active phase if it has ``phase_type``, else raise PhaseNotActive."""
        active = self.active_phase()
        if active is None or active.type is not phase_type:
            raise PhaseNotActive(phase_type.value)
        return active

    def action_for(self, role: UserRole) -> Optional[WorkflowAction]:
        active = self.active_phase()
        return permitted_action(role, active.type if active else None)

    # ------------------------------------------------------------------ mutations

    def set_active(self, phase_id: str) -> Phase:
        """
        Make ``phase_id`` the only active phase.

        Raises:
            ReferenceNotFound: If the phase does not exist (nothing changes)
        """
        target = self.registry.get_phase(phase_id)
        now = utc_now()
        for phase in self.phases:
            should_be_active = phase.id == target.id
            if phase.is_active != should_be_active:
                phase.is_active = should_be_active
                phase.updated_at = now

        self.logger.info(
            "Phase activated",
            phase_id=target.id,
            phase_type=target.type.value,
            active_index=self.active_index(),
        )
        return target

    def deactivate(self, phase_id: str) -> Phase:
        phase = self.registry.get_phase(phase_id)
        if phase.is_active:
            phase.is_active = False
            phase.updated_at = utc_now()
        self.logger.info("Phase deactivated", phase_id=phase.id, phase_type=phase.type.value)
        return phase

    def toggle_active(self, phase_id: str) -> Phase:
        """Activate an inactive phase (deactivating the others) or deactivate an active one."""
        phase = self.registry.get_phase(phase_id)
        if phase.is_active:
            return self.deactivate(phase_id)
        return self.set_active(phase_id)

    def create(self, fields: dict[str, Any]) -> Phase:
        """
        Append a new phase at the end of the program.

        Raises:
            FormValidationError: If name, description or dates are invalid
        """
        phase = build_model(Phase, fields)
        if self.registry.find_phase(phase.id) is not None:
            raise FormValidationError(f"Phase id already exists: {phase.id}", field="id")

        wants_active = phase.is_active
        phase.is_active = False
        self.registry.add_phase(phase)
        self.logger.info(
            "Phase created", phase_id=phase.id, phase_type=phase.type.value, position=len(self.phases) - 1
        )
        if wants_active:
            self.set_active(phase.id)
        return phase

    def update(self, phase_id: str, fields: dict[str, Any]) -> Phase:
        """
        Edit a phase in place, keeping its position.

        Setting ``is_active`` to True deactivates every other phase.

        Raises:
            ReferenceNotFound: If the phase does not exist
            FormValidationError: If the merged phase is invalid
        """
        current = self.registry.get_phase(phase_id)
        if "id" in fields and fields["id"] != phase_id:
            raise FormValidationError("Phase id cannot be changed", field="id")

        merged = current.model_dump()
        merged.update(fields)
        updated = build_model(Phase, merged)

        wants_active = updated.is_active
        updated.is_active = current.is_active
        self.registry.replace(updated)
        self.logger.info("Phase updated", phase_id=phase_id, fields=sorted(fields))

        if wants_active and not current.is_active:
            self.set_active(phase_id)
        elif not wants_active and current.is_active:
            self.deactivate(phase_id)
        return updated
