"""
Console Presentation

Renders portal state with rich: the phase wizard, the applications table and
the statistics summary. Everything shown here is computed by the services;
this module only formats it.

Example Usage:
    from internship_portal.presentation.console import PortalConsole

    view = PortalConsole()
    view.render_timeline(portal.timeline(), portal.workflow_action())
"""

from typing import Optional, Sequence

from rich.console import Console
from rich.table import Table

from internship_portal.models.application import Application, ApplicationStatus
from internship_portal.models.phase import PhaseState, PhaseView
from internship_portal.services.phases import WorkflowAction
from internship_portal.services.registry import DomainRegistry
from internship_portal.services.router import NavLink
from internship_portal.services.statistics import ProgramStatistics

STATE_MARKERS = {
    PhaseState.PAST: "[green]✓[/green]",
    PhaseState.ACTIVE: "[bold blue]●[/bold blue]",
    PhaseState.FUTURE: "[dim]○[/dim]",
}

STATUS_STYLES = {
    ApplicationStatus.PENDING: "yellow",
    ApplicationStatus.ACCEPTED: "green",
    ApplicationStatus.REJECTED: "red",
}


class PortalConsole:
    """Prints portal views to a rich Console."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def render_timeline(
        self, views: Sequence[PhaseView], action: Optional[WorkflowAction] = None
    ) -> None:
        """
        Print the phase wizard.

        Args:
            views: Phases with their derived state, in program order
            action: Call-to-action for the signed-in role, if any
        """
        table = Table(title="Program phases")
        table.add_column("", justify="center")
        table.add_column("#", justify="right")
        table.add_column("Phase")
        table.add_column("Type")
        table.add_column("Dates")

        for view in views:
            phase = view.phase
            name = f"[bold]{phase.name}[/bold]" if view.state is PhaseState.ACTIVE else phase.name
            table.add_row(
                STATE_MARKERS[view.state],
                str(view.index + 1),
                name,
                phase.type.label,
                f"{phase.start_date:%d.%m.%Y} - {phase.end_date:%d.%m.%Y}",
            )

        self.console.print(table)
        if not any(view.state is PhaseState.ACTIVE for view in views):
            self.console.print("[dim]No phase is active right now.[/dim]")
        elif action is not None:
            self.console.print(f"[bold blue]→ {action.label}[/bold blue] ({action.path})")

    def render_applications(
        self,
        applications: Sequence[Application],
        registry: DomainRegistry,
        counts: Optional[dict[ApplicationStatus, int]] = None,
    ) -> None:
        """Print applications with student and company names, then the per-status counts."""
        table = Table(title="Applications")
        table.add_column("Student")
        table.add_column("Company")
        table.add_column("Priority", justify="right")
        table.add_column("Status")
        table.add_column("Submitted")

        for app in applications:
            student = registry.find_user(app.student_id)
            company = registry.find_company(app.company_id)
            style = STATUS_STYLES[app.status]
            table.add_row(
                student.name if student else app.student_id,
                company.name if company else app.company_id,
                str(app.priority),
                f"[{style}]{app.status.label}[/{style}]",
                f"{app.created_at:%d.%m.%Y}",
            )

        self.console.print(table)
        if counts is not None:
            summary = "  ".join(
                f"[{STATUS_STYLES[status]}]{status.label}: {count}[/{STATUS_STYLES[status]}]"
                for status, count in counts.items()
            )
            self.console.print(summary)

    def render_statistics(self, stats: ProgramStatistics) -> None:
        """Print program totals, the status distribution and the per-company table."""
        self.console.print(
            f"[bold]Students:[/bold] {stats.total_students}  "
            f"[bold]Companies:[/bold] {stats.total_companies}  "
            f"[bold]Applications:[/bold] {stats.total_applications}"
        )

        distribution = Table(title="Application status")
        distribution.add_column("Status")
        distribution.add_column("Count", justify="right")
        distribution.add_column("Share", justify="right")
        for status, count in stats.status_distribution.items():
            distribution.add_row(status.label, str(count), f"{stats.status_share(status):.0%}")
        self.console.print(distribution)

        placements = {entry.company_id: entry.count for entry in stats.placements_per_company}
        per_company = Table(title="Companies")
        per_company.add_column("Company")
        per_company.add_column("Applications", justify="right")
        per_company.add_column("Accepted", justify="right")
        for entry in stats.applications_per_company:
            per_company.add_row(
                entry.company_name, str(entry.count), str(placements.get(entry.company_id, 0))
            )
        self.console.print(per_company)

    def render_navigation(self, links: Sequence[NavLink]) -> None:
        for link in links:
            self.console.print(f"  {link.label} [dim]{link.path}[/dim]")
