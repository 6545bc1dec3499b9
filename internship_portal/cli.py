"""Command line interface for browsing and administering the internship portal."""

import argparse
from pathlib import Path

from internship_portal.models.application import ApplicationStatus
from internship_portal.models.config import PortalSettings
from internship_portal.models.user import UserRole
from internship_portal.presentation.console import PortalConsole
from internship_portal.services.portal import ActionOutcome, Portal
from internship_portal.utils.errors import PortalError
from internship_portal.utils.logger import configure_logging
from internship_portal.utils.notifications import ConsoleNotifier


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Internship program portal.")
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("config/portal.json"),
        help="Path to portal.json (built-in defaults are used if it does not exist). "
        "The signed-in identity is kept under its storage_dir",
    )
    who = parser.add_mutually_exclusive_group()
    who.add_argument("--as", dest="email", help="Sign in with this e-mail address")
    who.add_argument(
        "--role",
        choices=[role.value for role in UserRole],
        default=UserRole.ADMIN.value,
        help="Sign in as the demo account of this role",
    )

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("phases", help="Show the phase wizard")

    applications = commands.add_parser("applications", help="List visible applications")
    applications.add_argument(
        "--status", choices=[status.value for status in ApplicationStatus], default=None
    )

    companies = commands.add_parser("companies", help="Search the company catalogue")
    companies.add_argument("--search", default=None)
    companies.add_argument("--tech", nargs="*", default=None, help="Any of these technologies")

    activate = commands.add_parser("activate", help="Toggle a phase on or off (admin)")
    activate.add_argument("phase_id")

    commands.add_parser("stats", help="Show program statistics (admin)")

    export = commands.add_parser("export", help="Write every collection as JSONL (admin)")
    export.add_argument("snapshot_dir", type=Path)
    return parser.parse_args(argv)


def load_settings(config_path: Path) -> PortalSettings:
    if config_path.exists():
        return PortalSettings.load(config_path)
    return PortalSettings()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = load_settings(args.config)
    configure_logging(log_file=settings.log_file, log_level=settings.log_level)

    view = PortalConsole()
    portal = Portal.from_settings(settings, notifier=ConsoleNotifier(view.console))

    if args.email:
        outcome = portal.login(args.email, "demo")
    else:
        outcome = portal.bypass_login(UserRole(args.role))
    if not outcome.ok:
        return 1

    try:
        if args.command == "phases":
            view.render_timeline(portal.timeline(), portal.workflow_action())
        elif args.command == "applications":
            status = ApplicationStatus(args.status) if args.status else None
            view.render_applications(
                portal.applications(status), portal.registry, portal.application_counts()
            )
        elif args.command == "companies":
            for company in portal.companies(args.search, args.tech):
                view.console.print(f"[bold]{company.name}[/bold]  {', '.join(company.technologies)}")
        elif args.command == "activate":
            return _exit_code(portal.toggle_phase(args.phase_id))
        elif args.command == "stats":
            view.render_statistics(portal.statistics())
        elif args.command == "export":
            return _exit_code(portal.export(str(args.snapshot_dir)))
    except PortalError as e:
        view.console.print(f"[red][X] {e.message}[/red]")
        return 1
    return 0


def _exit_code(outcome: ActionOutcome) -> int:
    return 0 if outcome.ok else 1


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
