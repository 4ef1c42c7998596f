"""Reservation business logic."""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from apartment_booker.domain.reservations import Reservation, format_timestamp
from apartment_booker.errors import ValidationError
from apartment_booker.services.people import PeopleDirectory


class ReservationRepository(Protocol):
    """Persistence interface for reservations."""

    def list_reservations(self) -> list[Reservation]:
        """Return all reservations ordered by start."""

    def create_reservation(
        self, person: str, start: datetime, end: datetime, comment: str = ""
    ) -> int:
        """Persist a reservation and return its id."""

    def delete_reservation(self, reservation_id: int) -> None:
        """Remove a reservation if present."""

    def update_comment(self, reservation_id: int, comment: str) -> None:
        """Overwrite a reservation comment if present."""


def reservation_to_dict(reservation: Reservation) -> dict[str, object]:
    """Serialise a reservation for the JSON API."""
    return {
        "id": reservation.id,
        "person": reservation.person,
        "start": format_timestamp(reservation.start),
        "end": format_timestamp(reservation.end),
        "comment": reservation.comment,
    }


@dataclass
class ReservationService:
    """Application service for booking the apartment."""

    repository: ReservationRepository
    people: PeopleDirectory

    def list_reservations(self) -> list[Reservation]:
        """Return all reservations in chronological order."""
        return self.repository.list_reservations()

    def create_reservation(
        self, person: str, start: datetime, end: datetime, comment: str = ""
    ) -> Reservation:
        """Book a range for a known resident and return the stored record.

        Overlapping ranges are accepted.
        """
        if not self.people.is_known(person):
            raise ValidationError("unknown person")
        cleaned = comment.strip()
        reservation_id = self.repository.create_reservation(
            person, start, end, cleaned
        )
        return Reservation(
            id=reservation_id,
            person=person,
            start=start.replace(microsecond=0),
            end=end.replace(microsecond=0),
            comment=cleaned,
        )

    def delete_reservation(self, reservation_id: int) -> None:
        """Delete a reservation; unknown ids are a no-op."""
        self.repository.delete_reservation(reservation_id)

    def update_comment(self, reservation_id: int, comment: str) -> str:
        """Replace a reservation comment and return the stored text."""
        cleaned = comment.strip()
        self.repository.update_comment(reservation_id, cleaned)
        return cleaned
