"""
Integration Test Configuration

Provides a seeded registry and file-backed portal sessions that share it.
When running in CI environment (CI=true), slow tests are automatically skipped.
"""

import os
from typing import Callable

import pytest

from internship_portal.models.config import PortalSettings
from internship_portal.services.portal import Portal
from internship_portal.services.registry import DomainRegistry
from internship_portal.utils.notifications import RecordingNotifier


@pytest.fixture
def is_ci_environment() -> bool:
    """
    Detect if tests are running in CI environment.

    Returns:
        True if CI environment variable is set to 'true'
    """
    return os.getenv("CI", "").lower() == "true"


@pytest.fixture(autouse=True)
def skip_slow_tests_in_ci(request, is_ci_environment):
    """
    Automatically skip slow integration tests when running in CI.

    Args:
        request: pytest request fixture
        is_ci_environment: Fixture indicating CI environment
    """
    if is_ci_environment and request.node.get_closest_marker("slow"):
        pytest.skip("Skipping slow test in CI environment")


@pytest.fixture
def registry() -> DomainRegistry:
    """Registry shared by every session of one test."""
    return DomainRegistry.from_seed(correlation_id="integration")


@pytest.fixture
def settings(tmp_path) -> PortalSettings:
    return PortalSettings(storage_dir=str(tmp_path / "storage"))


@pytest.fixture
def open_session(registry, settings, tmp_path) -> Callable[[str], Portal]:
    """
    Open a portal session for one browser profile.

    Each profile gets its own storage directory so several users can be
    signed in at once against the same registry.
    """

    def _open(profile: str) -> Portal:
        profile_settings = settings.model_copy(
            update={"storage_dir": str(tmp_path / "storage" / profile)}
        )
        return Portal.from_settings(
            profile_settings, notifier=RecordingNotifier(), registry=registry
        )

    return _open
