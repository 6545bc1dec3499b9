"""Program statistics for the admin dashboard."""

from pydantic import BaseModel, Field

from internship_portal.models.application import ApplicationStatus
from internship_portal.services.registry import DomainRegistry


class CompanyCount(BaseModel):
    company_id: str
    company_name: str
    count: int


class ProgramStatistics(BaseModel):
    total_students: int
    total_companies: int
    total_applications: int
    status_distribution: dict[ApplicationStatus, int] = Field(default_factory=dict)
    applications_per_company: list[CompanyCount] = Field(default_factory=list)
    placements_per_company: list[CompanyCount] = Field(default_factory=list)

    def status_share(self, status: ApplicationStatus) -> float:
        """Fraction of all applications in ``status`` (0.0 when there are none)."""
        if self.total_applications == 0:
            return 0.0
        return self.status_distribution.get(status, 0) / self.total_applications


def compute_statistics(registry: DomainRegistry) -> ProgramStatistics:
    """Totals, status distribution and per-company counts over the whole registry."""
    applications = registry.applications

    distribution = {status: 0 for status in ApplicationStatus}
    for app in applications:
        distribution[app.status] += 1

    per_company = []
    placements = []
    for company in registry.companies:
        company_apps = [app for app in applications if app.company_id == company.id]
        per_company.append(
            CompanyCount(company_id=company.id, company_name=company.name, count=len(company_apps))
        )
        placements.append(
            CompanyCount(
                company_id=company.id,
                company_name=company.name,
                count=sum(1 for app in company_apps if app.status is ApplicationStatus.ACCEPTED),
            )
        )

    return ProgramStatistics(
        total_students=len(registry.students()),
        total_companies=len(registry.companies),
        total_applications=len(applications),
        status_distribution=distribution,
        applications_per_company=per_company,
        placements_per_company=placements,
    )
