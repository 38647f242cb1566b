"""Join-request workflow: none -> pending -> approved | rejected, rejected -> pending.

Approval touches two tables and is run as a two-step saga: the membership is
written (and committed) first, then the request is marked approved. A crash in
between leaves a pending request whose player is already a member; retrying
`decide` or running `recover_interrupted_approvals` finishes step two.
"""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import and_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from teamhub.errors import AlreadyMember, DuplicateRequest, NotFound
from teamhub.models import JoinRequest, Membership, Team
from teamhub.models.base import utcnow
from teamhub.models.join_request import REQUEST_APPROVED, REQUEST_PENDING, REQUEST_REJECTED
from teamhub.models.membership import MEMBER_ACTIVE
from teamhub.schemas import JoinRequestResponse, JoinRequestView
from teamhub.services import roster, users
from teamhub.services.storage import storage_errors
from teamhub.services.teams import get_team

logger = logging.getLogger("teamhub.join_requests")


async def get_request(session: AsyncSession, team_id: int, player_id: int) -> Optional[JoinRequest]:
    result = await session.execute(
        select(JoinRequest).where(
            JoinRequest.team_id == team_id,
            JoinRequest.player_id == player_id,
        )
    )
    return result.scalar_one_or_none()


async def _enrich(session: AsyncSession, rows: list[tuple[JoinRequest, Team]]) -> list[JoinRequestView]:
    players = await users.get_by_ids(session, {req.player_id for req, _ in rows})
    return [
        JoinRequestView(
            **JoinRequestResponse.model_validate(req).model_dump(),
            team_name=team.name,
            sport_type=team.sport_type,
            player_name=users.display_name(players.get(req.player_id)),
            player_email=users.email_of(players.get(req.player_id)),
        )
        for req, team in rows
    ]


@storage_errors
async def request_join(
    session: AsyncSession, team_id: int, player_id: int, message: Optional[str] = None
) -> JoinRequest:
    """Submit (or resubmit) a request to join a team.

    Raises:
        NotFound: team does not exist
        AlreadyMember: player already holds an active membership
        DuplicateRequest: a pending request already exists
    """
    await get_team(session, team_id)
    membership = await roster.get_membership(session, team_id, player_id)
    if membership and membership.status == MEMBER_ACTIVE:
        raise AlreadyMember("Player is already a member of this team")

    existing = await get_request(session, team_id, player_id)
    if existing:
        if existing.status == REQUEST_PENDING:
            raise DuplicateRequest("Player has already submitted a request to join this team")
        # Rejected, or approved but the membership has since gone: start a new cycle.
        existing.status = REQUEST_PENDING
        existing.requested_at = utcnow()
        existing.message = message
        await session.commit()
        logger.info("Join request %s resubmitted by player %s for team %s", existing.id, player_id, team_id)
        return existing

    req = JoinRequest(
        team_id=team_id,
        player_id=player_id,
        requested_at=utcnow(),
        status=REQUEST_PENDING,
        message=message,
    )
    session.add(req)
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise DuplicateRequest("Player has already submitted a request to join this team") from e
    await session.refresh(req)
    logger.info("Join request %s created by player %s for team %s", req.id, player_id, team_id)
    return req


@storage_errors
async def decide(session: AsyncSession, team_id: int, player_id: int, approve: bool) -> JoinRequest:
    """Approve or reject the pending request for (team, player).

    Raises NotFound if there is no pending request. Approval may raise
    RosterFull, in which case the request stays pending.
    """
    await get_team(session, team_id)
    req = await get_request(session, team_id, player_id)
    if not req or req.status != REQUEST_PENDING:
        raise NotFound("No pending join request found for this player")

    if not approve:
        req.status = REQUEST_REJECTED
        await session.commit()
        logger.info("Join request %s rejected", req.id)
        return req

    # Step one: ensure the member exists (idempotent).
    await roster.add_member(session, team_id, player_id)
    # Step two: mark approved. Re-read, the request may have been purged meanwhile.
    req = await get_request(session, team_id, player_id)
    if not req:
        raise NotFound("Join request was withdrawn during approval")
    if req.status == REQUEST_PENDING:
        req.status = REQUEST_APPROVED
        await session.commit()
    logger.info("Join request %s approved, player %s joined team %s", req.id, player_id, team_id)
    return req


@storage_errors
async def list_pending_for_manager(session: AsyncSession, manager_id: int) -> list[JoinRequestView]:
    """Pending requests across all teams the manager owns, oldest first."""
    result = await session.execute(
        select(JoinRequest, Team)
        .join(Team, Team.id == JoinRequest.team_id)
        .where(Team.manager_id == manager_id, JoinRequest.status == REQUEST_PENDING)
        .order_by(JoinRequest.requested_at, JoinRequest.id)
    )
    return await _enrich(session, list(result.tuples().all()))


@storage_errors
async def list_for_team(session: AsyncSession, team_id: int) -> list[JoinRequestView]:
    """Every request for one team, any status, oldest first."""
    team = await get_team(session, team_id)
    result = await session.execute(
        select(JoinRequest)
        .where(JoinRequest.team_id == team_id)
        .order_by(JoinRequest.requested_at, JoinRequest.id)
    )
    return await _enrich(session, [(req, team) for req in result.scalars().all()])


@storage_errors
async def leave_team(session: AsyncSession, team_id: int, player_id: int) -> None:
    """Player leaves a team. Membership and request records are purged so a new cycle can start."""
    if not await roster.remove_member(session, team_id, player_id):
        raise NotFound("Player is not a member of this team")


@storage_errors
async def recover_interrupted_approvals(session: AsyncSession) -> int:
    """Finish approvals whose membership was written but whose request is still pending."""
    result = await session.execute(
        select(JoinRequest)
        .join(
            Membership,
            and_(
                Membership.team_id == JoinRequest.team_id,
                Membership.player_id == JoinRequest.player_id,
            ),
        )
        .where(JoinRequest.status == REQUEST_PENDING, Membership.status == MEMBER_ACTIVE)
    )
    stuck = result.scalars().all()
    for req in stuck:
        req.status = REQUEST_APPROVED
    if stuck:
        await session.commit()
        logger.warning("Recovered %d interrupted join approval(s)", len(stuck))
    return len(stuck)
