from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import StaffProfile


class StaffRepository(Protocol):
    """Read-only access to staff profiles.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, staff_id: int) -> Optional[StaffProfile]:
        raise NotImplementedError

    def list_for_organization(self, organization_id: int, *, location_id: Optional[int] = None) -> Sequence[StaffProfile]:
        raise NotImplementedError
