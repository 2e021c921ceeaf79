"""
Authorization policy for trip-scoped actions.

Capabilities are derived from two facts only: whether the actor owns the
trip, and the role of the actor's participant row (if any). They are
recomputed on every request and never cached.
"""
from dataclasses import dataclass
from typing import Optional

from tripledger.models.trip import ParticipantRole


def can_view(is_owner: bool, role: Optional[ParticipantRole]) -> bool:
    return is_owner or role is not None


def can_invite(is_owner: bool, role: Optional[ParticipantRole]) -> bool:
    return is_owner or role == ParticipantRole.ORGANIZER


def can_edit_content(is_owner: bool, role: Optional[ParticipantRole]) -> bool:
    return is_owner or role in (ParticipantRole.ORGANIZER, ParticipantRole.PARTICIPANT)


def can_manage_participants(is_owner: bool, role: Optional[ParticipantRole]) -> bool:
    return is_owner or role == ParticipantRole.ORGANIZER


def can_manage_expenses(is_owner: bool, role: Optional[ParticipantRole]) -> bool:
    """Editing or deleting a recorded expense, as opposed to adding one."""
    return is_owner or role == ParticipantRole.ORGANIZER


def can_manage_trip(is_owner: bool, role: Optional[ParticipantRole]) -> bool:
    """Editing trip details or deleting the trip."""
    return is_owner


def can_change_roles(is_owner: bool, role: Optional[ParticipantRole]) -> bool:
    return is_owner


def can_manage_cover_photo(is_owner: bool, role: Optional[ParticipantRole]) -> bool:
    return is_owner


def can_change_trip_status(is_owner: bool, role: Optional[ParticipantRole]) -> bool:
    return is_owner


@dataclass(frozen=True)
class TripAccess:
    """What one user may do on one trip, resolved for a single request."""
    trip_id: int
    user_id: int
    is_owner: bool
    role: Optional[ParticipantRole]

    @property
    def can_view(self) -> bool:
        return can_view(self.is_owner, self.role)

    @property
    def can_invite(self) -> bool:
        return can_invite(self.is_owner, self.role)

    @property
    def can_edit_content(self) -> bool:
        return can_edit_content(self.is_owner, self.role)

    @property
    def can_manage_participants(self) -> bool:
        return can_manage_participants(self.is_owner, self.role)

    @property
    def can_manage_expenses(self) -> bool:
        return can_manage_expenses(self.is_owner, self.role)

    @property
    def can_manage_trip(self) -> bool:
        return can_manage_trip(self.is_owner, self.role)

    @property
    def can_change_roles(self) -> bool:
        return can_change_roles(self.is_owner, self.role)

    @property
    def can_manage_cover_photo(self) -> bool:
        return can_manage_cover_photo(self.is_owner, self.role)

    @property
    def can_change_trip_status(self) -> bool:
        return can_change_trip_status(self.is_owner, self.role)
