"""Event registrations: store read paths and the register/confirm/cancel/withdraw workflow.

States per (event, team): none -> pending|confirmed -> confirmed|cancelled.
Withdrawal deletes the row and returns the pair to none from any state.
Cancelled registrations do not count against max_teams.

Deadline and capacity checks are check-then-act; under truly concurrent
registrations the last slot can be overrun by one. The (event, team) unique
constraint still prevents duplicate rows.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from teamhub.errors import (
    AlreadyRegistered,
    CapacityExceeded,
    DeadlinePassed,
    EventClosed,
    InvalidArgument,
    NotFound,
)
from teamhub.models import Event, Registration, Team
from teamhub.models.base import as_naive_utc, utcnow
from teamhub.models.registration import REG_CANCELLED, REG_CONFIRMED, REG_PENDING
from teamhub.schemas import (
    EventRegistrationView,
    ManagerRegistrationView,
    RegistrationResponse,
    TeamRegistrationView,
)
from teamhub.services.events import get_event
from teamhub.services.storage import storage_errors
from teamhub.services.teams import get_team

logger = logging.getLogger("teamhub.registrations")

REGISTER_STATUSES = (REG_PENDING, REG_CONFIRMED)
OPEN_EVENT_STATUSES = ("draft", "upcoming")
ORGANIZER_STATUSES = (REG_CONFIRMED, REG_CANCELLED)


async def get_registration(session: AsyncSession, event_id: int, team_id: int) -> Optional[Registration]:
    """The registration row for the pair in any status, or None."""
    result = await session.execute(
        select(Registration).where(
            Registration.event_id == event_id,
            Registration.team_id == team_id,
        )
    )
    return result.scalar_one_or_none()


@storage_errors
async def find_active(session: AsyncSession, event_id: int, team_id: int) -> Optional[Registration]:
    """The non-cancelled registration for the pair, or None."""
    reg = await get_registration(session, event_id, team_id)
    if reg and reg.status != REG_CANCELLED:
        return reg
    return None


@storage_errors
async def count_active(session: AsyncSession, event_id: int) -> int:
    """Registrations occupying capacity (everything but cancelled)."""
    result = await session.execute(
        select(func.count(Registration.id)).where(
            Registration.event_id == event_id,
            Registration.status != REG_CANCELLED,
        )
    )
    return result.scalar_one()


async def _check_capacity(session: AsyncSession, event: Event) -> None:
    if event.max_teams and await count_active(session, event.id) >= event.max_teams:
        raise CapacityExceeded("Event has reached maximum number of teams")


@storage_errors
async def register(
    session: AsyncSession,
    event_id: int,
    team_id: int,
    status: str = REG_PENDING,
    notes: str = "",
    now: Optional[datetime] = None,
) -> Registration:
    """Register a team for an event.

    Checks run in order: event (and team) exist, event still open, deadline,
    capacity, then uniqueness. A cancelled registration for the pair is reset
    to pending instead of creating a second row.
    """
    if status not in REGISTER_STATUSES:
        raise InvalidArgument(f"status must be one of: {', '.join(REGISTER_STATUSES)}")
    event = await get_event(session, event_id)
    await get_team(session, team_id)
    if event.status not in OPEN_EVENT_STATUSES:
        raise EventClosed(f"Event is {event.status}, registration is closed")
    now = as_naive_utc(now) or utcnow()
    if event.registration_deadline and now > event.registration_deadline:
        raise DeadlinePassed("Registration deadline has passed")
    await _check_capacity(session, event)

    existing = await get_registration(session, event_id, team_id)
    if existing:
        if existing.status != REG_CANCELLED:
            raise AlreadyRegistered("Team is already registered for this event")
        existing.status = REG_PENDING
        existing.registered_at = now
        existing.notes = notes or existing.notes
        await session.commit()
        logger.info("Team %s re-registered for event %s", team_id, event_id)
        return existing

    reg = Registration(
        event_id=event_id,
        team_id=team_id,
        registered_at=now,
        status=status,
        notes=notes or "",
    )
    session.add(reg)
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise AlreadyRegistered("Team is already registered for this event") from e
    await session.refresh(reg)
    logger.info("Team %s registered for event %s (%s)", team_id, event_id, status)
    return reg


@storage_errors
async def set_status(session: AsyncSession, event_id: int, team_id: int, status: str) -> Registration:
    """Organizer confirms or cancels a registration.

    Moving a cancelled registration back to confirmed needs a free slot.
    """
    if status not in ORGANIZER_STATUSES:
        raise InvalidArgument("Status must be confirmed or cancelled")
    event = await get_event(session, event_id)
    reg = await get_registration(session, event_id, team_id)
    if not reg:
        raise NotFound("Team is not registered for this event")
    if reg.status == status:
        return reg
    if reg.status == REG_CANCELLED:
        await _check_capacity(session, event)
    reg.status = status
    await session.commit()
    logger.info("Registration of team %s for event %s set %s", team_id, event_id, status)
    return reg


@storage_errors
async def withdraw(session: AsyncSession, event_id: int, team_id: int) -> None:
    """Delete exactly the (event, team) registration, freeing its slot."""
    await get_event(session, event_id)
    result = await session.execute(
        delete(Registration).where(
            Registration.event_id == event_id,
            Registration.team_id == team_id,
        )
    )
    if result.rowcount == 0:
        raise NotFound("Team is not registered for this event")
    await session.commit()
    logger.info("Team %s withdrawn from event %s", team_id, event_id)


@storage_errors
async def list_for_event(session: AsyncSession, event_id: int) -> list[EventRegistrationView]:
    await get_event(session, event_id)
    result = await session.execute(
        select(Registration, Team)
        .join(Team, Team.id == Registration.team_id)
        .where(Registration.event_id == event_id)
        .order_by(Registration.registered_at, Registration.id)
    )
    return [
        EventRegistrationView(
            **RegistrationResponse.model_validate(reg).model_dump(),
            team_name=team.name,
            team_sport=team.sport_type,
        )
        for reg, team in result.tuples().all()
    ]


@storage_errors
async def list_for_team(session: AsyncSession, team_id: int) -> list[TeamRegistrationView]:
    await get_team(session, team_id)
    result = await session.execute(
        select(Registration, Event)
        .join(Event, Event.id == Registration.event_id)
        .where(Registration.team_id == team_id)
        .order_by(Event.event_date, Registration.id)
    )
    return [
        TeamRegistrationView(
            **RegistrationResponse.model_validate(reg).model_dump(),
            event_title=event.title,
            event_date=event.event_date,
            event_location=event.location,
            event_status=event.status,
        )
        for reg, event in result.tuples().all()
    ]


@storage_errors
async def list_for_manager(session: AsyncSession, manager_id: int) -> list[ManagerRegistrationView]:
    """Every registration, any status, of every team the manager owns."""
    result = await session.execute(
        select(Registration, Event, Team)
        .join(Event, Event.id == Registration.event_id)
        .join(Team, Team.id == Registration.team_id)
        .where(Team.manager_id == manager_id)
        .order_by(Event.event_date, Team.name, Registration.id)
    )
    return [
        ManagerRegistrationView(
            **RegistrationResponse.model_validate(reg).model_dump(),
            event_title=event.title,
            event_date=event.event_date,
            event_location=event.location,
            event_status=event.status,
            team_name=team.name,
        )
        for reg, event, team in result.tuples().all()
    ]
