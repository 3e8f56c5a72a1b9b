from __future__ import annotations

import logging
from dataclasses import asdict, replace
from typing import Optional

from ..common.validators import require_int_range, require_role
from ..core.constants import MAX_BREAKS_PER_DAY_LIMIT
from ..core.enums import Role
from ..core.exceptions import ValidationError
from .model import OrganizationSettings
from .repository import SettingsRepository

logger = logging.getLogger(__name__)


class SettingsService:
    """Use case: read and update an organization's attendance rules."""

    def __init__(self, settings: SettingsRepository):
        self._settings = settings

    def get(self, organization_id: int) -> OrganizationSettings:
        stored = self._settings.get_for_organization(int(organization_id))
        return stored or OrganizationSettings.defaults(int(organization_id))

    def update(
        self,
        *,
        current_role: Role,
        organization_id: int,
        updated_by: int,
        attendance: Optional[dict] = None,
        lunch: Optional[dict] = None,
        breaks: Optional[dict] = None,
    ) -> OrganizationSettings:
        require_role(current_role, Role.ADMIN)
        for name, section in (("attendance", attendance), ("lunch", lunch), ("breaks", breaks)):
            if section is not None and not isinstance(section, dict):
                raise ValidationError(f"{name} must be an object")

        current = self.get(organization_id).to_dict()
        merged = OrganizationSettings.from_dicts(
            organization_id,
            attendance={**current["attendance"], **(attendance or {})},
            lunch={**current["lunch"], **(lunch or {})},
            breaks={**current["breaks"], **(breaks or {})},
        )

        for section in (merged.attendance, merged.lunch, merged.breaks):
            for key, value in asdict(section).items():
                if key != "max_breaks_per_day" and not isinstance(value, bool):
                    raise ValidationError(f"{key} must be true or false")

        max_breaks = require_int_range(
            merged.breaks.max_breaks_per_day,
            "Max breaks per day",
            minimum=0,
            maximum=MAX_BREAKS_PER_DAY_LIMIT,
        )
        merged = replace(merged, breaks=replace(merged.breaks, max_breaks_per_day=max_breaks))

        if not self._settings.save(merged, updated_by=int(updated_by)):
            raise ValidationError("Saving settings failed")

        logger.info("Attendance settings updated org=%s by=%s", organization_id, updated_by)
        return replace(merged, updated_by=int(updated_by))
