"""Pydantic models for the reservation API payloads."""

from pydantic import BaseModel


class ReservationCreate(BaseModel):
    """Body of a reservation creation request."""

    person: str = ""
    start: str = ""
    end: str = ""
    comment: str = ""


class CommentUpdate(BaseModel):
    """Body of a comment update request."""

    comment: str = ""
