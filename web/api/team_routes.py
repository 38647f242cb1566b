"""API routes for teams: catalogue, roster, join requests."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from teamhub.errors import InvalidArgument, NotFound
from teamhub.models import User
from teamhub.models.base import async_session_factory
from teamhub.schemas import (
    JoinRequestResponse,
    JoinRequestView,
    MembershipResponse,
    MemberView,
    TeamRegistrationView,
    TeamResponse,
    TeamSummary,
    UserInfo,
)
from teamhub.services import join_requests, membership, notifications, registrations, roster, teams, users
from web.auth import ensure_owner, require_manager_user, require_player_user, require_user

router = APIRouter(prefix="/api", tags=["teams"])


# --- Pydantic schemas ---


class TeamCreate(BaseModel):
    name: str
    sport_type: str
    description: str = ""
    max_members: Optional[int] = None


class TeamUpdate(BaseModel):
    name: Optional[str] = None
    sport_type: Optional[str] = None
    description: Optional[str] = None
    max_members: Optional[int] = None


class MemberAdd(BaseModel):
    player_id: int


class MemberStatusUpdate(BaseModel):
    status: str


class JoinRequestCreate(BaseModel):
    message: Optional[str] = None


class JoinDecision(BaseModel):
    approve: bool


async def _owned_team(session, team_id: int, user: User):
    team = await teams.get_team(session, team_id)
    ensure_owner(user, team.manager_id, "team")
    return team


# --- Catalogue ---


@router.post("/teams", response_model=TeamResponse, status_code=201)
async def create_team(body: TeamCreate, user: User = Depends(require_manager_user)):
    async with async_session_factory() as session:
        team = await teams.create_team(
            session,
            manager_id=user.id,
            name=body.name,
            sport_type=body.sport_type,
            description=body.description,
            max_members=body.max_members,
        )
        return TeamResponse.model_validate(team)


@router.get("/teams", response_model=list[TeamSummary])
async def list_teams():
    async with async_session_factory() as session:
        return await teams.list_teams(session)


@router.get("/teams/{team_id}", response_model=TeamSummary)
async def get_team(team_id: int):
    async with async_session_factory() as session:
        team = await teams.get_team(session, team_id)
        return (await teams.summarize(session, [team]))[0]


@router.patch("/teams/{team_id}", response_model=TeamResponse)
async def update_team(team_id: int, body: TeamUpdate, user: User = Depends(require_manager_user)):
    async with async_session_factory() as session:
        await _owned_team(session, team_id, user)
        team = await teams.update_team(session, team_id, **body.model_dump(exclude_unset=True))
        return TeamResponse.model_validate(team)


@router.delete("/teams/{team_id}")
async def delete_team(team_id: int, user: User = Depends(require_manager_user)):
    async with async_session_factory() as session:
        await _owned_team(session, team_id, user)
        await teams.delete_team(session, team_id)
    return {"ok": True}


@router.get("/teams/{team_id}/manager", response_model=UserInfo)
async def get_team_manager(team_id: int):
    async with async_session_factory() as session:
        return await membership.manager_of(session, team_id)


# --- Roster ---


@router.get("/teams/{team_id}/members", response_model=list[MemberView])
async def list_members(team_id: int):
    """Active members in join order."""
    async with async_session_factory() as session:
        return await roster.list_members(session, team_id)


@router.post("/teams/{team_id}/members", response_model=MembershipResponse)
async def add_member(team_id: int, body: MemberAdd, user: User = Depends(require_manager_user)):
    """Add a player directly (no join request needed)."""
    async with async_session_factory() as session:
        await _owned_team(session, team_id, user)
        player = await users.get_by_id(session, body.player_id)
        if not player:
            raise NotFound("User not found")
        if player.role != "player":
            raise InvalidArgument("The user is not registered as a player")
        m = await roster.add_member(session, team_id, body.player_id)
        return MembershipResponse.model_validate(m)


@router.patch("/teams/{team_id}/members/{player_id}", response_model=MembershipResponse)
async def set_member_status(
    team_id: int, player_id: int, body: MemberStatusUpdate, user: User = Depends(require_manager_user)
):
    async with async_session_factory() as session:
        await _owned_team(session, team_id, user)
        m = await roster.set_member_status(session, team_id, player_id, body.status)
        return MembershipResponse.model_validate(m)


@router.delete("/teams/{team_id}/members/{player_id}")
async def remove_member(team_id: int, player_id: int, user: User = Depends(require_manager_user)):
    async with async_session_factory() as session:
        team = await _owned_team(session, team_id, user)
        team_name = team.name
        removed = await roster.remove_member(session, team_id, player_id)
    if not removed:
        raise HTTPException(404, "Player is not a member of this team")
    await notifications.publish(
        notifications.MEMBER_REMOVED,
        {"team_id": team_id, "team_name": team_name, "player_id": player_id},
    )
    return {"ok": True}


# --- Join requests ---


@router.post("/teams/{team_id}/join", response_model=JoinRequestResponse, status_code=201)
async def request_join(
    team_id: int, body: Optional[JoinRequestCreate] = None, user: User = Depends(require_player_user)
):
    """Player asks to join a team."""
    async with async_session_factory() as session:
        req = await join_requests.request_join(session, team_id, user.id, body.message if body else None)
        return JoinRequestResponse.model_validate(req)


@router.post("/teams/{team_id}/leave")
async def leave_team(team_id: int, user: User = Depends(require_user)):
    async with async_session_factory() as session:
        await join_requests.leave_team(session, team_id, user.id)
    return {"ok": True}


@router.get("/teams/{team_id}/requests", response_model=list[JoinRequestView])
async def list_team_requests(team_id: int, user: User = Depends(require_manager_user)):
    async with async_session_factory() as session:
        await _owned_team(session, team_id, user)
        return await join_requests.list_for_team(session, team_id)


@router.post("/teams/{team_id}/requests/{player_id}", response_model=JoinRequestResponse)
async def decide_request(
    team_id: int, player_id: int, body: JoinDecision, user: User = Depends(require_manager_user)
):
    """Approve or reject a pending join request."""
    async with async_session_factory() as session:
        team = await _owned_team(session, team_id, user)
        team_name = team.name
        req = await join_requests.decide(session, team_id, player_id, body.approve)
        result = JoinRequestResponse.model_validate(req)
    await notifications.publish(
        notifications.JOIN_REQUEST_DECIDED,
        {"team_id": team_id, "team_name": team_name, "player_id": player_id, "status": result.status},
    )
    return result


# --- Registrations seen from the team ---


@router.get("/teams/{team_id}/registrations", response_model=list[TeamRegistrationView])
async def list_team_registrations(team_id: int, user: User = Depends(require_user)):
    """Event registrations of a team. Visible to its manager and active members."""
    async with async_session_factory() as session:
        team = await teams.get_team(session, team_id)
        if user.role != "admin" and user.id != team.manager_id:
            if not await membership.is_player_in_team(session, user.id, team_id):
                raise HTTPException(403, "Not authorized to view this team's registrations")
        return await registrations.list_for_team(session, team_id)
