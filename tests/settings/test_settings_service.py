from __future__ import annotations

import pytest

from src.staff_attendance.staff_attendance.core.enums import Role
from src.staff_attendance.staff_attendance.core.exceptions import AuthorizationError, ValidationError
from src.staff_attendance.staff_attendance.settings.model import OrganizationSettings
from src.staff_attendance.staff_attendance.settings.service import SettingsService
from tests.fakes import InMemorySettings

ORG = 10


def test_defaults_when_nothing_stored():
    settings = SettingsService(InMemorySettings()).get(ORG)

    assert settings.organization_id == ORG
    assert settings.lunch.enabled is True
    assert settings.lunch.is_paid is False
    assert settings.breaks.enabled is True
    assert settings.breaks.max_breaks_per_day == 2
    assert settings.attendance.allow_clock_in_without_shift is True


def test_from_dicts_ignores_unknown_keys_and_fills_defaults():
    settings = OrganizationSettings.from_dicts(ORG, breaks={"max_breaks_per_day": 4, "colour": "red"}, lunch=None)

    assert settings.breaks.max_breaks_per_day == 4
    assert settings.breaks.is_paid is True
    assert settings.lunch.enabled is True


def test_admin_update_merges_sections():
    repo = InMemorySettings()
    svc = SettingsService(repo)

    updated = svc.update(
        current_role=Role.ADMIN,
        organization_id=ORG,
        updated_by=3,
        breaks={"max_breaks_per_day": "3"},
        lunch={"is_paid": True},
    )

    assert updated.breaks.max_breaks_per_day == 3
    assert updated.breaks.enabled is True
    assert updated.lunch.is_paid is True
    assert repo.saved_by == 3
    assert svc.get(ORG).breaks.max_breaks_per_day == 3


@pytest.mark.parametrize("value", [-1, 11, "many"])
def test_max_breaks_must_be_within_range(value):
    svc = SettingsService(InMemorySettings())
    with pytest.raises(ValidationError):
        svc.update(current_role=Role.ADMIN, organization_id=ORG, updated_by=3, breaks={"max_breaks_per_day": value})


def test_flags_must_be_booleans():
    svc = SettingsService(InMemorySettings())
    with pytest.raises(ValidationError):
        svc.update(current_role=Role.ADMIN, organization_id=ORG, updated_by=3, lunch={"enabled": "yes"})


def test_only_admin_updates_settings():
    svc = SettingsService(InMemorySettings())
    with pytest.raises(AuthorizationError):
        svc.update(current_role=Role.MANAGER, organization_id=ORG, updated_by=3, lunch={"enabled": False})


def test_update_rejects_sections_that_are_not_objects():
    repo = InMemorySettings()
    svc = SettingsService(repo)

    with pytest.raises(ValidationError):
        svc.update(current_role=Role.ADMIN, organization_id=ORG, updated_by=3, lunch="yes")
    with pytest.raises(ValidationError):
        svc.update(current_role=Role.ADMIN, organization_id=ORG, updated_by=3, breaks=[2])
    assert repo.saved_by is None
