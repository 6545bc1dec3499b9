"""
Role-Gated View Router

``authorize`` decides whether a user may open a path or must be sent
elsewhere. It is a pure function: the same user and path always produce the
same decision, and nothing is mutated. Rules are checked in a fixed order and
the first match wins.

Prefix checks are segment-aware: ``/admin`` matches ``/admin`` and
``/admin/phases`` but not ``/administrator``.
"""

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict

from internship_portal.models.user import User, UserRole

LOGIN_PATH = "/login"
DASHBOARD_PATH = "/dashboard"
STUDENT_SETUP_PATH = "/student/profile-setup"
EMPLOYEE_SETUP_PATH = "/company/employee-profile-setup"
COMPANY_SETUP_PATH = "/company/profile-setup"

ADMIN_PREFIX = "/admin"
COMPANY_PREFIX = "/company"
STUDENT_PREFIX = "/student"


class Allow(BaseModel):
    model_config = ConfigDict(frozen=True)

    @property
    def allowed(self) -> bool:
        return True


class RedirectTo(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str

    @property
    def allowed(self) -> bool:
        return False


AccessDecision = Union[Allow, RedirectTo]


class NavLink(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    path: str


COMMON_LINKS = (
    NavLink(label="Home", path="/dashboard"),
    NavLink(label="Companies", path="/companies"),
    NavLink(label="Chat", path="/chat"),
    NavLink(label="Schedule", path="/meetings"),
    NavLink(label="Forms", path="/forms"),
)

ROLE_LINKS: dict[UserRole, tuple[NavLink, ...]] = {
    UserRole.ADMIN: (
        NavLink(label="Users", path="/admin/users"),
        NavLink(label="Phases", path="/admin/phases"),
        NavLink(label="Invitations", path="/admin/invites"),
        NavLink(label="Meeting schedule", path="/admin/meetings"),
        NavLink(label="Companies", path="/admin/companies"),
        NavLink(label="Reports", path="/admin/reports"),
        NavLink(label="Statistics", path="/admin/statistics"),
    ),
    UserRole.STUDENT: (
        NavLink(label="Choose 5 companies", path="/student/choose-5"),
        NavLink(label="Top 3 choice", path="/student/top3"),
        NavLink(label="My applications", path="/student/applications"),
        NavLink(label="My meetings", path="/student/meetings"),
        NavLink(label="Final report", path="/student/report"),
    ),
    UserRole.COMPANY: (
        NavLink(label="Applications", path="/company/applications"),
        NavLink(label="Meeting schedule", path="/company/meetings"),
    ),
}


def normalize_path(path: str) -> str:
    """Drop query string, fragment and trailing slashes; ensure a leading slash."""
    path = path.split("#", 1)[0].split("?", 1)[0].strip()
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return path


def under_prefix(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix + "/")


def authorize(user: Optional[User], requested_path: str) -> AccessDecision:
    """
    Decide whether ``user`` may open ``requested_path``.

    Rules, first match wins:
        1. Nobody signed in -> login
        2. Student without completed profile -> student setup
        3. Company user without completed profile -> employee setup
           (both company setup pages stay reachable)
        4. Admin area, not an admin -> dashboard
        5. Company area, not a company user -> dashboard (company setup exempt)
        6. Student area, not a student -> dashboard (student setup exempt)
        7. Allow
    """
    path = normalize_path(requested_path)

    if user is None:
        return RedirectTo(path=LOGIN_PATH)

    if user.role is UserRole.STUDENT and not user.profile_completed and path != STUDENT_SETUP_PATH:
        return RedirectTo(path=STUDENT_SETUP_PATH)

    if (
        user.role is UserRole.COMPANY
        and not user.profile_completed
        and path not in (EMPLOYEE_SETUP_PATH, COMPANY_SETUP_PATH)
    ):
        return RedirectTo(path=EMPLOYEE_SETUP_PATH)

    if under_prefix(path, ADMIN_PREFIX) and user.role is not UserRole.ADMIN:
        return RedirectTo(path=DASHBOARD_PATH)

    if (
        under_prefix(path, COMPANY_PREFIX)
        and user.role is not UserRole.COMPANY
        and not under_prefix(path, COMPANY_SETUP_PATH)
    ):
        return RedirectTo(path=DASHBOARD_PATH)

    if (
        under_prefix(path, STUDENT_PREFIX)
        and user.role is not UserRole.STUDENT
        and not under_prefix(path, STUDENT_SETUP_PATH)
    ):
        return RedirectTo(path=DASHBOARD_PATH)

    return Allow()


def landing_path(user: User) -> str:
    """Where a user lands right after signing in."""
    if user.role is UserRole.STUDENT:
        return DASHBOARD_PATH if user.profile_completed else STUDENT_SETUP_PATH
    if user.role is UserRole.COMPANY:
        return DASHBOARD_PATH if user.profile_completed else COMPANY_SETUP_PATH
    if user.role is UserRole.ADMIN:
        return DASHBOARD_PATH
    raise ValueError(f"Unhandled role: {user.role}")


def navigation_links(user: Optional[User]) -> list[NavLink]:
    """Sidebar links: the common ones followed by the role's own section."""
    if user is None:
        return []
    return [*COMMON_LINKS, *ROLE_LINKS[user.role]]
