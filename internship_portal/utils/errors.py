"""
Portal Error Taxonomy

Every failure a user action can produce is one of these kinds. Services raise
them; the action boundary in ``internship_portal.services.portal`` turns them
into an ``ActionOutcome`` for display. None of them leave partial state behind.
"""

from typing import Optional


class PortalError(Exception):
    """Base class for recoverable, user-facing portal errors."""

    kind: str = "portal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class FormValidationError(PortalError):
    """A required field is missing or invalid. Shown inline next to ``field``."""

    kind = "validation_error"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class InvalidTransition(PortalError):
    """A state change was requested from a state that does not allow it."""

    kind = "invalid_transition"


class NoActiveSession(PortalError):
    """A session-bound action was attempted while signed out."""

    kind = "no_active_session"

    def __init__(self, message: str = "No user is signed in", redirect_to: str = "/login"):
        super().__init__(message)
        self.redirect_to = redirect_to


class ReferenceNotFound(PortalError):
    """An id lookup in the registry failed."""

    kind = "reference_not_found"

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class PhaseNotActive(PortalError):
    """A phase-gated workflow was used while its phase is not active."""

    kind = "phase_not_active"

    def __init__(self, phase_type: str):
        super().__init__(
            f"The {phase_type} phase is not active yet or has already ended"
        )
        self.phase_type = phase_type


class PermissionDenied(PortalError):
    """The signed-in user's role may not act on the requested record."""

    kind = "permission_denied"


class ConfigurationError(Exception):
    """Raised when configuration or seed data validation fails."""

    pass
