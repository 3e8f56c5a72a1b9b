from __future__ import annotations

from typing import Optional, Protocol

from .model import OrganizationSettings


class SettingsRepository(Protocol):
    def get_for_organization(self, organization_id: int) -> Optional[OrganizationSettings]:
        """Stored settings, or None when the organization never saved any."""

        raise NotImplementedError

    def save(self, settings: OrganizationSettings, *, updated_by: int) -> bool:
        raise NotImplementedError
