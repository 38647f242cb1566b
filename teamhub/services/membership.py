"""Membership queries for other parts of the platform: a player's teams, team managers, events via teams."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from teamhub.errors import NotFound
from teamhub.models import Event, Membership, Registration, Team
from teamhub.models.membership import MEMBER_ACTIVE
from teamhub.models.registration import REG_CANCELLED
from teamhub.schemas import PlayerEventView, TeamSummary, UserInfo
from teamhub.services import teams, users
from teamhub.services.roster import is_member
from teamhub.services.storage import storage_errors

__all__ = [
    "events_for_player",
    "is_member",
    "is_player_in_team",
    "manager_of",
    "teams_for_player",
]


@storage_errors
async def teams_for_player(session: AsyncSession, player_id: int) -> list[TeamSummary]:
    """Teams where the player is an active member, sorted by name."""
    result = await session.execute(
        select(Team)
        .join(Membership, Membership.team_id == Team.id)
        .where(Membership.player_id == player_id, Membership.status == MEMBER_ACTIVE)
        .order_by(Team.name, Team.id)
    )
    return await teams.summarize(session, list(result.scalars().all()))


@storage_errors
async def is_player_in_team(session: AsyncSession, player_id: int, team_id: int) -> bool:
    membership_map = await is_member(session, player_id, [team_id])
    return membership_map[team_id]


@storage_errors
async def manager_of(session: AsyncSession, team_id: int) -> UserInfo:
    """Display attributes of the team's manager."""
    team = await teams.get_team(session, team_id)
    manager = await users.get_by_id(session, team.manager_id)
    if not manager:
        raise NotFound("Team manager not found")
    return manager


@storage_errors
async def events_for_player(session: AsyncSession, player_id: int) -> list[PlayerEventView]:
    """Events where one of the player's teams holds a non-cancelled registration."""
    result = await session.execute(
        select(Event, Team, Registration)
        .join(Registration, Registration.event_id == Event.id)
        .join(Team, Team.id == Registration.team_id)
        .join(Membership, Membership.team_id == Team.id)
        .where(
            Membership.player_id == player_id,
            Membership.status == MEMBER_ACTIVE,
            Registration.status != REG_CANCELLED,
        )
        .order_by(Event.event_date, Event.id, Team.name)
    )
    return [
        PlayerEventView(
            event_id=event.id,
            title=event.title,
            sport_type=event.sport_type,
            event_date=event.event_date,
            location=event.location,
            status=event.status,
            team_id=team.id,
            team_name=team.name,
            registration_status=reg.status,
        )
        for event, team, reg in result.tuples().all()
    ]
