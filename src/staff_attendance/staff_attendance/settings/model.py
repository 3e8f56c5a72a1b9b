from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Optional

from ..core.constants import DEFAULT_MAX_BREAKS_PER_DAY


@dataclass(frozen=True)
class AttendanceRules:
    allow_clock_in_without_shift: bool = True
    require_location_at_clock_in: bool = False


@dataclass(frozen=True)
class LunchRules:
    enabled: bool = True
    is_paid: bool = False


@dataclass(frozen=True)
class BreakRules:
    enabled: bool = True
    max_breaks_per_day: int = DEFAULT_MAX_BREAKS_PER_DAY
    is_paid: bool = True


@dataclass(frozen=True)
class OrganizationSettings:
    """Per-organization attendance configuration (read-only to the engine)."""

    organization_id: int
    attendance: AttendanceRules = field(default_factory=AttendanceRules)
    lunch: LunchRules = field(default_factory=LunchRules)
    breaks: BreakRules = field(default_factory=BreakRules)
    updated_at: Optional[datetime] = None
    updated_by: Optional[int] = None

    @classmethod
    def defaults(cls, organization_id: int) -> "OrganizationSettings":
        return cls(organization_id=int(organization_id))

    @classmethod
    def from_dicts(
        cls,
        organization_id: int,
        *,
        attendance: Optional[dict] = None,
        lunch: Optional[dict] = None,
        breaks: Optional[dict] = None,
        updated_at: Optional[datetime] = None,
        updated_by: Optional[int] = None,
    ) -> "OrganizationSettings":
        """Build settings from stored JSON blobs; unknown keys are ignored, missing keys default."""

        return cls(
            organization_id=int(organization_id),
            attendance=_merge(AttendanceRules, attendance),
            lunch=_merge(LunchRules, lunch),
            breaks=_merge(BreakRules, breaks),
            updated_at=updated_at,
            updated_by=updated_by,
        )

    def to_dict(self) -> dict:
        return {
            "organization_id": self.organization_id,
            "attendance": asdict(self.attendance),
            "lunch": asdict(self.lunch),
            "breaks": asdict(self.breaks),
        }


def _merge(rules_cls, values: Optional[dict]):
    defaults = asdict(rules_cls())
    for key, value in (values or {}).items():
        if key in defaults and value is not None:
            defaults[key] = value
    return rules_cls(**defaults)
