"""
Admin operations: phase editing, invitations, reports and export.
"""

import pytest

from internship_portal.models.application import ApplicationStatus
from internship_portal.services.registry import DomainRegistry


@pytest.fixture
def admin(open_session):
    session = open_session("admin")
    assert session.login("admin@school.bg", "x").ok
    return session


def test_phase_editing_keeps_single_active(admin):
    created = admin.create_phase(
        {
            "type": "round3",
            "name": "Late round",
            "description": "Remaining places are filled.",
            "start_date": "2026-03-30T00:00:00Z",
            "end_date": "2026-04-05T00:00:00Z",
            "is_active": True,
        }
    )
    assert created.ok
    assert admin.update_phase("p2", {"is_active": True}).ok

    active = [view.phase.id for view in admin.timeline() if view.phase.is_active]
    assert active == ["p2"]
    assert admin.timeline()[-1].phase.name == "Late round"

    invalid = admin.update_phase("p2", {"end_date": "2020-01-01T00:00:00Z"})
    assert invalid.error_kind == "validation_error"
    assert invalid.field == "end_date"


def test_invitation_and_report_feedback(admin, registry):
    invite = admin.invite_company("office@greenfield.bg", "Greenfield")
    feedback = admin.set_report_feedback("fr1", "Clear and well documented")

    assert invite.ok
    assert "Greenfield" in invite.value.body
    assert registry.invitations[-1].email == "office@greenfield.bg"
    assert registry.get_final_report("fr1").feedback == "Clear and well documented"


@pytest.mark.slow
def test_export_round_trip(admin, registry, tmp_path):
    """Test that an exported snapshot seeds a registry with the same state."""
    admin.decide("a1", ApplicationStatus.ACCEPTED)
    outcome = admin.export(str(tmp_path / "snapshot"))

    reloaded = DomainRegistry.from_seed(tmp_path / "snapshot")

    assert outcome.ok
    assert reloaded.get_application("a1").status.value == "accepted"
    assert len(reloaded.users) == len(registry.users)
    assert [p.id for p in reloaded.phases] == [p.id for p in registry.phases]
