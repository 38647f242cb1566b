"""API routes for events and team registrations."""
from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from teamhub.models import User
from teamhub.models.base import async_session_factory
from teamhub.schemas import EventRegistrationView, EventResponse, EventSummary, RegistrationResponse
from teamhub.services import events, notifications, registrations, teams
from web.auth import ensure_owner, require_manager_user, require_organizer_user, require_user

router = APIRouter(prefix="/api", tags=["events"])


# --- Pydantic schemas ---


class EventCreate(BaseModel):
    title: str
    sport_type: str
    location: str
    event_date: date
    event_time: str = "12:00"
    description: str = ""
    registration_deadline: Optional[datetime] = None
    max_teams: Optional[int] = None
    entry_fee: float = 0.0
    status: str = "upcoming"


class EventUpdate(BaseModel):
    title: Optional[str] = None
    sport_type: Optional[str] = None
    location: Optional[str] = None
    event_date: Optional[date] = None
    event_time: Optional[str] = None
    description: Optional[str] = None
    registration_deadline: Optional[datetime] = None
    max_teams: Optional[int] = None
    entry_fee: Optional[float] = None
    status: Optional[str] = None


class RegistrationCreate(BaseModel):
    team_id: int
    notes: str = ""


class RegistrationStatusUpdate(BaseModel):
    status: str


async def _owned_event(session, event_id: int, user: User):
    event = await events.get_event(session, event_id)
    ensure_owner(user, event.organizer_id, "event")
    return event


# --- Catalogue ---


@router.post("/events", response_model=EventResponse, status_code=201)
async def create_event(body: EventCreate, user: User = Depends(require_organizer_user)):
    async with async_session_factory() as session:
        event = await events.create_event(session, organizer_id=user.id, **body.model_dump())
        return EventResponse.model_validate(event)


@router.get("/events", response_model=list[EventSummary])
async def list_events(organizer_id: Optional[int] = None):
    async with async_session_factory() as session:
        if organizer_id is not None:
            return await events.list_events_for_organizer(session, organizer_id)
        return await events.list_events(session)


@router.get("/events/{event_id}", response_model=EventSummary)
async def get_event(event_id: int):
    async with async_session_factory() as session:
        event = await events.get_event(session, event_id)
        return (await events.summarize(session, [event]))[0]


@router.patch("/events/{event_id}", response_model=EventResponse)
async def update_event(event_id: int, body: EventUpdate, user: User = Depends(require_organizer_user)):
    async with async_session_factory() as session:
        await _owned_event(session, event_id, user)
        event = await events.update_event(session, event_id, **body.model_dump(exclude_unset=True))
        return EventResponse.model_validate(event)


@router.post("/events/{event_id}/cancel", response_model=EventResponse)
async def cancel_event(event_id: int, user: User = Depends(require_organizer_user)):
    async with async_session_factory() as session:
        await _owned_event(session, event_id, user)
        event = await events.cancel_event(session, event_id)
        return EventResponse.model_validate(event)


@router.delete("/events/{event_id}")
async def delete_event(event_id: int, user: User = Depends(require_organizer_user)):
    async with async_session_factory() as session:
        await _owned_event(session, event_id, user)
        await events.delete_event(session, event_id)
    return {"ok": True}


# --- Registrations ---


@router.get("/events/{event_id}/registrations", response_model=list[EventRegistrationView])
async def list_event_registrations(event_id: int):
    async with async_session_factory() as session:
        return await registrations.list_for_event(session, event_id)


@router.post("/events/{event_id}/registrations", response_model=RegistrationResponse, status_code=201)
async def register_team(event_id: int, body: RegistrationCreate, user: User = Depends(require_manager_user)):
    """Manager registers one of their teams. Starts pending until the organizer confirms."""
    async with async_session_factory() as session:
        await events.get_event(session, event_id)
        team = await teams.get_team(session, body.team_id)
        ensure_owner(user, team.manager_id, "team")
        reg = await registrations.register(session, event_id, body.team_id, notes=body.notes)
        return RegistrationResponse.model_validate(reg)


@router.patch("/events/{event_id}/registrations/{team_id}", response_model=RegistrationResponse)
async def set_registration_status(
    event_id: int, team_id: int, body: RegistrationStatusUpdate, user: User = Depends(require_organizer_user)
):
    """Organizer confirms or cancels a registration."""
    async with async_session_factory() as session:
        await _owned_event(session, event_id, user)
        reg = await registrations.set_status(session, event_id, team_id, body.status)
        result = RegistrationResponse.model_validate(reg)
    await notifications.publish(
        notifications.REGISTRATION_STATUS_CHANGED,
        {"event_id": event_id, "team_id": team_id, "status": result.status},
    )
    return result


@router.delete("/events/{event_id}/registrations/{team_id}")
async def withdraw_registration(event_id: int, team_id: int, user: User = Depends(require_user)):
    """Withdraw a team. Allowed for the team's manager and the event's organizer."""
    async with async_session_factory() as session:
        event = await events.get_event(session, event_id)
        team = await teams.get_team(session, team_id)
        if user.role != "admin" and user.id not in (team.manager_id, event.organizer_id):
            raise HTTPException(403, "Not authorized to withdraw this registration")
        await registrations.withdraw(session, event_id, team_id)
    await notifications.publish(
        notifications.REGISTRATION_WITHDRAWN,
        {"event_id": event_id, "team_id": team_id},
    )
    return {"ok": True}
