"""Event catalogue for organizers."""
from __future__ import annotations

import logging
import re
from datetime import date, datetime
from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from teamhub.errors import InvalidArgument, NotFound
from teamhub.models import Event, Registration
from teamhub.models.base import as_naive_utc
from teamhub.models.event import EVENT_STATUSES
from teamhub.models.registration import REG_CANCELLED
from teamhub.schemas import EventResponse, EventSummary
from teamhub.services import users
from teamhub.services.storage import storage_errors

logger = logging.getLogger("teamhub.events")

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
_EDITABLE = (
    "title",
    "description",
    "sport_type",
    "location",
    "event_date",
    "event_time",
    "registration_deadline",
    "max_teams",
    "entry_fee",
    "status",
)


def _validate(fields: dict) -> None:
    for key in ("title", "sport_type", "location"):
        if key in fields and not (fields[key] or "").strip():
            raise InvalidArgument(f"{key} is required")
    if "event_time" in fields and not _TIME_RE.match(fields["event_time"] or ""):
        raise InvalidArgument("event_time must be HH:MM")
    if "status" in fields and fields["status"] not in EVENT_STATUSES:
        raise InvalidArgument(f"status must be one of: {', '.join(EVENT_STATUSES)}")
    if fields.get("max_teams") is not None and fields["max_teams"] < 0:
        raise InvalidArgument("max_teams cannot be negative")
    if fields.get("entry_fee") is not None and fields["entry_fee"] < 0:
        raise InvalidArgument("entry_fee cannot be negative")


@storage_errors
async def get_event(session: AsyncSession, event_id: int) -> Event:
    """Get event by ID or raise NotFound."""
    event = await session.get(Event, event_id)
    if not event:
        raise NotFound("Event not found")
    return event


async def summarize(session: AsyncSession, events: list[Event]) -> list[EventSummary]:
    """Attach non-cancelled registration count and organizer name."""
    counts = {}
    if events:
        result = await session.execute(
            select(Registration.event_id, func.count(Registration.id))
            .where(
                Registration.event_id.in_([e.id for e in events]),
                Registration.status != REG_CANCELLED,
            )
            .group_by(Registration.event_id)
        )
        counts = dict(result.all())
    organizers = await users.get_by_ids(session, {e.organizer_id for e in events})
    return [
        EventSummary(
            **EventResponse.model_validate(e).model_dump(),
            registered_teams=counts.get(e.id, 0),
            organizer_name=users.display_name(organizers.get(e.organizer_id)),
        )
        for e in events
    ]


@storage_errors
async def create_event(
    session: AsyncSession,
    organizer_id: int,
    title: str,
    sport_type: str,
    location: str,
    event_date: date,
    event_time: str = "12:00",
    description: str = "",
    registration_deadline: Optional[datetime] = None,
    max_teams: Optional[int] = None,
    entry_fee: float = 0.0,
    status: str = "upcoming",
) -> Event:
    fields = {
        "title": title,
        "sport_type": sport_type,
        "location": location,
        "event_time": event_time,
        "max_teams": max_teams,
        "entry_fee": entry_fee,
        "status": status,
    }
    _validate(fields)
    event = Event(
        organizer_id=organizer_id,
        title=title.strip(),
        description=description or "",
        sport_type=sport_type.strip(),
        location=location.strip(),
        event_date=event_date,
        event_time=event_time,
        registration_deadline=as_naive_utc(registration_deadline),
        max_teams=max_teams or None,
        entry_fee=entry_fee or 0.0,
        status=status,
    )
    session.add(event)
    await session.commit()
    await session.refresh(event)
    logger.info("Event %s (%s) created by organizer %s", event.id, event.title, organizer_id)
    return event


@storage_errors
async def list_events(session: AsyncSession) -> list[EventSummary]:
    result = await session.execute(select(Event).order_by(Event.event_date, Event.id))
    return await summarize(session, list(result.scalars().all()))


@storage_errors
async def list_events_for_organizer(session: AsyncSession, organizer_id: int) -> list[EventSummary]:
    result = await session.execute(
        select(Event).where(Event.organizer_id == organizer_id).order_by(Event.event_date, Event.id)
    )
    return await summarize(session, list(result.scalars().all()))


@storage_errors
async def update_event(session: AsyncSession, event_id: int, **changes) -> Event:
    """Update editable fields; None values are skipped."""
    event = await get_event(session, event_id)
    unknown = set(changes) - set(_EDITABLE)
    if unknown:
        raise InvalidArgument(f"Cannot update field(s): {', '.join(sorted(unknown))}")
    changes = {k: v for k, v in changes.items() if v is not None}
    _validate(changes)
    for key, value in changes.items():
        if key == "max_teams":
            value = value or None
        elif key == "registration_deadline":
            value = as_naive_utc(value)
        elif isinstance(value, str) and key != "description":
            value = value.strip()
        setattr(event, key, value)
    await session.commit()
    await session.refresh(event)
    return event


@storage_errors
async def cancel_event(session: AsyncSession, event_id: int) -> Event:
    """Mark the event cancelled. Registrations are kept for the record."""
    event = await get_event(session, event_id)
    event.status = "cancelled"
    await session.commit()
    logger.info("Event %s cancelled", event_id)
    return event


@storage_errors
async def delete_event(session: AsyncSession, event_id: int) -> None:
    event = await get_event(session, event_id)
    await session.execute(delete(Registration).where(Registration.event_id == event_id))
    await session.delete(event)
    await session.commit()
    logger.info("Event %s deleted", event_id)
