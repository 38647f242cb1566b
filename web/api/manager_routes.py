"""Dashboard routes: a manager's teams, requests and registrations; a player's teams and events."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from teamhub.models import User
from teamhub.models.base import async_session_factory
from teamhub.schemas import JoinRequestView, ManagerRegistrationView, PlayerEventView, TeamSummary
from teamhub.services import join_requests, membership, registrations, teams
from web.auth import require_manager_user, require_user

router = APIRouter(prefix="/api", tags=["dashboard"])


class MembershipQuery(BaseModel):
    team_ids: list[int]


@router.get("/manager/teams", response_model=list[TeamSummary])
async def manager_teams(user: User = Depends(require_manager_user)):
    async with async_session_factory() as session:
        return await teams.list_teams_for_manager(session, user.id)


@router.get("/manager/join-requests", response_model=list[JoinRequestView])
async def manager_join_requests(user: User = Depends(require_manager_user)):
    """Pending requests across all of the manager's teams, oldest first."""
    async with async_session_factory() as session:
        return await join_requests.list_pending_for_manager(session, user.id)


@router.get("/manager/registrations", response_model=list[ManagerRegistrationView])
async def manager_registrations(user: User = Depends(require_manager_user)):
    async with async_session_factory() as session:
        return await registrations.list_for_manager(session, user.id)


@router.get("/players/{player_id}/teams", response_model=list[TeamSummary])
async def player_teams(player_id: int, user: User = Depends(require_user)):
    async with async_session_factory() as session:
        return await membership.teams_for_player(session, player_id)


@router.get("/players/{player_id}/events", response_model=list[PlayerEventView])
async def player_events(player_id: int, user: User = Depends(require_user)):
    async with async_session_factory() as session:
        return await membership.events_for_player(session, player_id)


@router.post("/players/{player_id}/membership", response_model=dict[int, bool])
async def player_membership(player_id: int, body: MembershipQuery, user: User = Depends(require_user)):
    """Batch check: team id -> whether the player is an active member."""
    async with async_session_factory() as session:
        return await membership.is_member(session, player_id, body.team_ids)
