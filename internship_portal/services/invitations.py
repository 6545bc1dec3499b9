"""Admin invitations for companies joining the program."""

from typing import Optional

from pydantic import BaseModel

from internship_portal.models.feedback import Invitation
from internship_portal.models.user import User, UserRole
from internship_portal.services.registry import DomainRegistry
from internship_portal.utils.errors import PermissionDenied
from internship_portal.utils.forms import build_model
from internship_portal.utils.logger import get_logger
from internship_portal.utils.template_loader import TemplateLoader


class SentInvitation(BaseModel):
    invitation: Invitation
    body: str


class InvitationService:
    """Creates invitations and renders the invitation e-mail."""

    def __init__(
        self,
        registry: DomainRegistry,
        templates: Optional[TemplateLoader] = None,
        correlation_id: Optional[str] = None,
    ):
        self.registry = registry
        self.templates = templates or TemplateLoader()
        self.correlation_id = correlation_id
        self.logger = get_logger(correlation_id=correlation_id, component="invitations")

    def invite_company(self, admin: User, email: str, company_name: str) -> SentInvitation:
        """
        Invite a company by e-mail.

        Raises:
            PermissionDenied: If the actor is not an admin
            FormValidationError: If the e-mail is invalid or the name is shorter than 2 characters
        """
        if admin.role is not UserRole.ADMIN:
            raise PermissionDenied("Only admins can invite companies")

        invitation = build_model(
            Invitation,
            {
                "email": (email or "").strip(),
                "company_name": (company_name or "").strip(),
                "invited_by": admin.id,
            },
        )
        body = self.templates.render(
            "invitation_email.j2",
            correlation_id=self.correlation_id,
            invited_by=admin.name,
            company_name=invitation.company_name,
            email=invitation.email,
            program_phases=self.registry.phases,
        )
        self.registry.add_invitation(invitation)
        self.logger.info("Company invited", invitation_id=invitation.id, company_name=invitation.company_name)
        return SentInvitation(invitation=invitation, body=body)
