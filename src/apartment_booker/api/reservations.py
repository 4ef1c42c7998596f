"""Reservation and people JSON endpoints."""

from __future__ import annotations

import asyncio
import json
import logging
import re
from datetime import datetime
from typing import TYPE_CHECKING, TypeVar

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from starlette.concurrency import run_in_threadpool

from apartment_booker.api.auth import require_api_session
from apartment_booker.api.models import CommentUpdate, ReservationCreate
from apartment_booker.domain.reservations import parse_timestamp
from apartment_booker.errors import ValidationError
from apartment_booker.services.reservations import reservation_to_dict

if TYPE_CHECKING:
    from apartment_booker.containers import AppContainer

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_ID_PATTERN = re.compile(r"[+-]?[0-9]{1,19}")
_MIN_ID = -(2**63)
_MAX_ID = 2**63 - 1

router = APIRouter(prefix="/api", tags=["reservations"])


@router.get("/reservations", dependencies=[Depends(require_api_session)])
async def list_reservations(request: Request) -> list[dict[str, object]]:
    """Return every reservation ordered by start."""
    container: AppContainer = request.app.state.container
    reservations = await run_in_threadpool(
        container.reservation_service.list_reservations
    )
    return [reservation_to_dict(reservation) for reservation in reservations]


@router.post("/reservations", dependencies=[Depends(require_api_session)])
async def create_reservation(request: Request) -> JSONResponse:
    """Book a time range for a known resident."""
    container: AppContainer = request.app.state.container
    payload = await _parse_body(request, ReservationCreate)
    start = _parse_field(payload.start, "start")
    end = _parse_field(payload.end, "end")
    try:
        reservation = await run_in_threadpool(
            container.reservation_service.create_reservation,
            payload.person,
            start,
            end,
            payload.comment,
        )
    except asyncio.CancelledError:
        # The insert runs in its own transaction and finishes or rolls back
        # on the worker thread; the client is gone so nothing is returned.
        logger.debug("Reservation creation cancelled by client")
        raise
    return JSONResponse(
        reservation_to_dict(reservation), status_code=status.HTTP_201_CREATED
    )


@router.delete(
    "/reservations/{reservation_id}", dependencies=[Depends(require_api_session)]
)
async def delete_reservation(reservation_id: str, request: Request) -> Response:
    """Delete a reservation; unknown ids succeed."""
    container: AppContainer = request.app.state.container
    parsed_id = _parse_id(reservation_id)
    await run_in_threadpool(
        container.reservation_service.delete_reservation, parsed_id
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch(
    "/reservations/{reservation_id}", dependencies=[Depends(require_api_session)]
)
async def update_comment(reservation_id: str, request: Request) -> dict[str, object]:
    """Replace the comment of a reservation."""
    container: AppContainer = request.app.state.container
    parsed_id = _parse_id(reservation_id)
    payload = await _parse_body(request, CommentUpdate)
    comment = await run_in_threadpool(
        container.reservation_service.update_comment, parsed_id, payload.comment
    )
    return {"id": parsed_id, "comment": comment}


@router.get("/people", dependencies=[Depends(require_api_session)])
async def list_people(request: Request) -> list[dict[str, str]]:
    """Return the residents and their colours."""
    container: AppContainer = request.app.state.container
    return container.people.as_dicts()


async def _parse_body(request: Request, model: type[ModelT]) -> ModelT:
    raw = await request.body()
    try:
        return model.model_validate(json.loads(raw or b"null"))
    except (ValueError, PydanticValidationError) as exc:
        raise ValidationError("invalid body") from exc


def _parse_field(raw: str, name: str) -> datetime:
    try:
        return parse_timestamp(raw)
    except (ValueError, OverflowError) as exc:
        raise ValidationError(f"invalid {name}") from exc


def _parse_id(raw: str) -> int:
    # ASCII digits only and within SQLite's signed 64-bit INTEGER range.
    if _ID_PATTERN.fullmatch(raw) is None:
        raise ValidationError("invalid id")
    value = int(raw, 10)
    if not _MIN_ID <= value <= _MAX_ID:
        raise ValidationError("invalid id")
    return value
