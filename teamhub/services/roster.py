"""Roster store: confirmed team members, one row per (team, player)."""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from teamhub.errors import InvalidArgument, NotFound, RosterFull
from teamhub.models import JoinRequest, Membership, Team
from teamhub.models.base import utcnow
from teamhub.models.membership import MEMBER_ACTIVE, MEMBER_STATUSES
from teamhub.schemas import MembershipResponse, MemberView
from teamhub.services import users
from teamhub.services.storage import storage_errors
from teamhub.services.teams import get_team

logger = logging.getLogger("teamhub.roster")


async def get_membership(session: AsyncSession, team_id: int, player_id: int) -> Optional[Membership]:
    result = await session.execute(
        select(Membership).where(
            Membership.team_id == team_id,
            Membership.player_id == player_id,
        )
    )
    return result.scalar_one_or_none()


async def count_active(session: AsyncSession, team_id: int) -> int:
    result = await session.execute(
        select(func.count(Membership.id)).where(
            Membership.team_id == team_id,
            Membership.status == MEMBER_ACTIVE,
        )
    )
    return result.scalar_one()


async def _check_capacity(session: AsyncSession, team: Team) -> None:
    if team.max_members and await count_active(session, team.id) >= team.max_members:
        raise RosterFull(f"{team.name} already has {team.max_members} active members")


@storage_errors
async def add_member(session: AsyncSession, team_id: int, player_id: int) -> Membership:
    """Make the player an active member. Idempotent.

    Existing active membership: no-op. Inactive: reactivated. Otherwise a new
    active membership is created. Raises RosterFull if the team is at capacity.
    """
    team = await get_team(session, team_id)
    membership = await get_membership(session, team_id, player_id)
    if membership and membership.status == MEMBER_ACTIVE:
        return membership
    await _check_capacity(session, team)
    if membership:
        membership.status = MEMBER_ACTIVE
        await session.commit()
        logger.info("Player %s reactivated on team %s", player_id, team_id)
        return membership
    membership = Membership(
        team_id=team_id,
        player_id=player_id,
        joined_at=utcnow(),
        status=MEMBER_ACTIVE,
    )
    session.add(membership)
    try:
        await session.commit()
    except IntegrityError:
        # Concurrent add of the same pair won the race; converge on its row.
        await session.rollback()
        membership = await get_membership(session, team_id, player_id)
        if not membership:
            raise
        if membership.status != MEMBER_ACTIVE:
            membership.status = MEMBER_ACTIVE
            await session.commit()
        return membership
    await session.refresh(membership)
    logger.info("Player %s added to team %s", player_id, team_id)
    return membership


@storage_errors
async def remove_member(session: AsyncSession, team_id: int, player_id: int) -> bool:
    """Delete the membership and purge any join request for the pair.

    Returns True if a membership row was removed.
    """
    await get_team(session, team_id)
    result = await session.execute(
        delete(Membership).where(
            Membership.team_id == team_id,
            Membership.player_id == player_id,
        )
    )
    await session.execute(
        delete(JoinRequest).where(
            JoinRequest.team_id == team_id,
            JoinRequest.player_id == player_id,
        )
    )
    await session.commit()
    removed = result.rowcount > 0
    if removed:
        logger.info("Player %s removed from team %s", player_id, team_id)
    return removed


@storage_errors
async def set_member_status(session: AsyncSession, team_id: int, player_id: int, status: str) -> Membership:
    """Toggle a member between active and inactive."""
    if status not in MEMBER_STATUSES:
        raise InvalidArgument(f"status must be one of: {', '.join(MEMBER_STATUSES)}")
    team = await get_team(session, team_id)
    membership = await get_membership(session, team_id, player_id)
    if not membership:
        raise NotFound("Player is not a member of this team")
    if membership.status == status:
        return membership
    if status == MEMBER_ACTIVE:
        await _check_capacity(session, team)
    membership.status = status
    await session.commit()
    logger.info("Player %s on team %s set %s", player_id, team_id, status)
    return membership


@storage_errors
async def list_members(session: AsyncSession, team_id: int) -> list[MemberView]:
    """Active members in join order, with player display attributes."""
    await get_team(session, team_id)
    result = await session.execute(
        select(Membership)
        .where(Membership.team_id == team_id, Membership.status == MEMBER_ACTIVE)
        .order_by(Membership.joined_at, Membership.id)
    )
    memberships = result.scalars().all()
    players = await users.get_by_ids(session, {m.player_id for m in memberships})
    return [
        MemberView(
            **MembershipResponse.model_validate(m).model_dump(),
            player_name=users.display_name(players.get(m.player_id)),
            player_email=users.email_of(players.get(m.player_id)),
        )
        for m in memberships
    ]


@storage_errors
async def is_member(session: AsyncSession, player_id: int, team_ids: Iterable[int]) -> dict[int, bool]:
    """Batch membership check. Every requested team id maps to a bool."""
    membership_map = {team_id: False for team_id in team_ids}
    if not membership_map:
        return membership_map
    result = await session.execute(
        select(Membership.team_id).where(
            Membership.player_id == player_id,
            Membership.team_id.in_(list(membership_map)),
            Membership.status == MEMBER_ACTIVE,
        )
    )
    for team_id in result.scalars().all():
        membership_map[team_id] = True
    return membership_map
