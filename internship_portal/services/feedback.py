"""
Final Reports and Reviews

Students hand in a final report and may rate their host company; admins
review the reports and attach feedback.
"""

from typing import Optional

from internship_portal.models.feedback import FinalReport, Review
from internship_portal.models.user import User, UserRole
from internship_portal.services.registry import DomainRegistry
from internship_portal.utils.errors import FormValidationError, PermissionDenied
from internship_portal.utils.forms import build_model
from internship_portal.utils.logger import get_logger


class FeedbackService:
    """Final report submission, admin feedback and company reviews."""

    def __init__(self, registry: DomainRegistry, correlation_id: Optional[str] = None):
        self.registry = registry
        self.logger = get_logger(correlation_id=correlation_id, component="feedback")

    def submit_report(self, student: User, company_id: str, report_url: Optional[str]) -> FinalReport:
        """
        Hand in the final internship report.

        Raises:
            PermissionDenied: If the actor is not a student
            FormValidationError: If no company is chosen or no file was uploaded
            ReferenceNotFound: If the company does not exist
        """
        if student.role is not UserRole.STUDENT:
            raise PermissionDenied("Only students submit final reports")
        if not company_id:
            raise FormValidationError("Please choose a company", field="company_id")
        if not report_url:
            raise FormValidationError("Please upload your final report", field="report")
        self.registry.get_company(company_id)

        report = self.registry.add_final_report(
            FinalReport(student_id=student.id, company_id=company_id, report_url=report_url)
        )
        self.logger.info("Final report submitted", report_id=report.id, student_id=student.id, company_id=company_id)
        return report

    def submit_review(self, student: User, company_id: str, rating: int, comment: str) -> Review:
        """
        Rate a company from 1 to 5 with a comment of at least 10 characters.

        Raises:
            PermissionDenied: If the actor is not a student
            FormValidationError: If rating or comment are invalid
            ReferenceNotFound: If the company does not exist
        """
        if student.role is not UserRole.STUDENT:
            raise PermissionDenied("Only students review companies")
        if not company_id:
            raise FormValidationError("Please choose a company", field="company_id")
        review = build_model(
            Review,
            {
                "student_id": student.id,
                "company_id": company_id,
                "rating": rating,
                "comment": (comment or "").strip(),
            },
        )
        self.registry.add_review(review)
        self.logger.info("Review submitted", review_id=review.id, company_id=company_id, rating=rating)
        return review

    def set_report_feedback(self, admin: User, report_id: str, feedback: str) -> FinalReport:
        """Attach or replace the admin feedback on a report."""
        if admin.role is not UserRole.ADMIN:
            raise PermissionDenied("Only admins can give report feedback")
        report = self.registry.get_final_report(report_id)
        updated = report.model_copy(update={"feedback": feedback})
        self.registry.replace(updated)
        self.logger.info("Report feedback saved", report_id=report_id, has_feedback=bool(feedback))
        return updated

    def reports_for(self, actor: User, search: Optional[str] = None) -> list[FinalReport]:
        """
        Reports visible to the actor, optionally filtered by student or company name.
        """
        if actor.role is UserRole.ADMIN:
            reports = list(self.registry.final_reports)
        elif actor.role is UserRole.STUDENT:
            reports = [r for r in self.registry.final_reports if r.student_id == actor.id]
        elif actor.role is UserRole.COMPANY:
            company = self.registry.company_of(actor)
            reports = (
                [r for r in self.registry.final_reports if r.company_id == company.id]
                if company is not None
                else []
            )
        else:
            raise ValueError(f"Unhandled role: {actor.role}")

        term = (search or "").strip().lower()
        if not term:
            return reports

        def matches(report: FinalReport) -> bool:
            student = self.registry.find_user(report.student_id)
            company = self.registry.find_company(report.company_id)
            return (student is not None and term in student.name.lower()) or (
                company is not None and term in company.name.lower()
            )

        return [report for report in reports if matches(report)]

    def reviews_of(self, company_id: str) -> list[Review]:
        self.registry.get_company(company_id)
        return [review for review in self.registry.reviews if review.company_id == company_id]
