"""Company catalogue search, as used by the companies page filter."""

from typing import Optional, Sequence

from internship_portal.models.company import Company
from internship_portal.services.registry import DomainRegistry


def search_companies(
    companies: Sequence[Company],
    search: Optional[str] = None,
    technologies: Optional[Sequence[str]] = None,
) -> list[Company]:
    """
    Filter companies by free text and technologies.

    Args:
        companies: Companies in catalogue order
        search: Case-insensitive substring of the name or description (blank = any)
        technologies: Keep companies using at least one of these (empty = any)

    Returns:
        Matching companies in their original order
    """
    results = list(companies)

    term = (search or "").strip().lower()
    if term:
        results = [
            company
            for company in results
            if term in company.name.lower() or term in company.description.lower()
        ]

    if technologies:
        wanted = set(technologies)
        results = [
            company for company in results if wanted.intersection(company.technologies)
        ]

    return results


def all_technologies(companies: Sequence[Company]) -> list[str]:
    """Sorted, de-duplicated technologies of every company."""
    return sorted({tech for company in companies for tech in company.technologies})


class CompanyCatalogue:
    """Read-only view of the companies in the registry."""

    def __init__(self, registry: DomainRegistry):
        self.registry = registry

    def search(
        self, search: Optional[str] = None, technologies: Optional[Sequence[str]] = None
    ) -> list[Company]:
        return search_companies(self.registry.companies, search, technologies)

    def technologies(self) -> list[str]:
        return all_technologies(self.registry.companies)

    def detail(self, company_id: str) -> Company:
        """Company detail page. Raises ReferenceNotFound for unknown ids."""
        return self.registry.get_company(company_id)
