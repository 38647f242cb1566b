"""Team catalogue: create, read, update and delete teams owned by managers."""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from teamhub.errors import InvalidArgument, NotFound
from teamhub.models import JoinRequest, Membership, Registration, Team
from teamhub.models.membership import MEMBER_ACTIVE
from teamhub.schemas import TeamResponse, TeamSummary
from teamhub.services import users
from teamhub.services.storage import storage_errors

logger = logging.getLogger("teamhub.teams")

_EDITABLE = ("name", "sport_type", "description", "max_members")


def _validate_max_members(value: Optional[int]) -> None:
    if value is not None and value < 0:
        raise InvalidArgument("max_members cannot be negative")


@storage_errors
async def get_team(session: AsyncSession, team_id: int) -> Team:
    """Get team by ID or raise NotFound."""
    team = await session.get(Team, team_id)
    if not team:
        raise NotFound("Team not found")
    return team


async def _member_counts(session: AsyncSession, team_ids: list[int]) -> dict[int, int]:
    if not team_ids:
        return {}
    result = await session.execute(
        select(Membership.team_id, func.count(Membership.id))
        .where(Membership.team_id.in_(team_ids), Membership.status == MEMBER_ACTIVE)
        .group_by(Membership.team_id)
    )
    return dict(result.all())


async def summarize(session: AsyncSession, teams: list[Team]) -> list[TeamSummary]:
    """Attach active member count and manager name to each team."""
    counts = await _member_counts(session, [t.id for t in teams])
    managers = await users.get_by_ids(session, {t.manager_id for t in teams})
    return [
        TeamSummary(
            **TeamResponse.model_validate(t).model_dump(),
            member_count=counts.get(t.id, 0),
            manager_name=users.display_name(managers.get(t.manager_id)),
        )
        for t in teams
    ]


@storage_errors
async def create_team(
    session: AsyncSession,
    manager_id: int,
    name: str,
    sport_type: str,
    description: str = "",
    max_members: Optional[int] = None,
) -> Team:
    name = (name or "").strip()
    sport_type = (sport_type or "").strip()
    if not name or not sport_type:
        raise InvalidArgument("Team name and sport type are required")
    _validate_max_members(max_members)
    team = Team(
        name=name,
        sport_type=sport_type,
        manager_id=manager_id,
        description=description or "",
        max_members=max_members or None,
    )
    session.add(team)
    await session.commit()
    await session.refresh(team)
    logger.info("Team %s (%s) created by manager %s", team.id, team.name, manager_id)
    return team


@storage_errors
async def list_teams(session: AsyncSession) -> list[TeamSummary]:
    result = await session.execute(select(Team).order_by(Team.name, Team.id))
    return await summarize(session, list(result.scalars().all()))


@storage_errors
async def list_teams_for_manager(session: AsyncSession, manager_id: int) -> list[TeamSummary]:
    result = await session.execute(
        select(Team).where(Team.manager_id == manager_id).order_by(Team.name, Team.id)
    )
    return await summarize(session, list(result.scalars().all()))


@storage_errors
async def update_team(session: AsyncSession, team_id: int, **changes) -> Team:
    """Update editable fields. Unknown fields raise InvalidArgument; None values are skipped."""
    team = await get_team(session, team_id)
    unknown = set(changes) - set(_EDITABLE)
    if unknown:
        raise InvalidArgument(f"Cannot update field(s): {', '.join(sorted(unknown))}")
    for key, value in changes.items():
        if value is None:
            continue
        if key in ("name", "sport_type"):
            value = value.strip()
            if not value:
                raise InvalidArgument(f"{key} cannot be empty")
        if key == "max_members":
            _validate_max_members(value)
            value = value or None
        setattr(team, key, value)
    await session.commit()
    await session.refresh(team)
    return team


@storage_errors
async def delete_team(session: AsyncSession, team_id: int) -> None:
    """Delete a team together with its memberships, join requests and registrations."""
    team = await get_team(session, team_id)
    await session.execute(delete(Membership).where(Membership.team_id == team_id))
    await session.execute(delete(JoinRequest).where(JoinRequest.team_id == team_id))
    await session.execute(delete(Registration).where(Registration.team_id == team_id))
    await session.delete(team)
    await session.commit()
    logger.info("Team %s deleted", team_id)
