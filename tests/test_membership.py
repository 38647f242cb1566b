"""Tests for the membership query facade."""
from datetime import date

import pytest

from teamhub.errors import NotFound
from teamhub.models.membership import MEMBER_INACTIVE
from teamhub.models.registration import REG_CANCELLED
from teamhub.services import events, membership, registrations, roster, teams


@pytest.mark.asyncio
async def test_teams_for_player_sorted_by_name(session, manager, player):
    zebras = await teams.create_team(session, manager.id, "Zebras", "soccer")
    ants = await teams.create_team(session, manager.id, "Ants", "soccer")
    other = await teams.create_team(session, manager.id, "Moles", "soccer")
    await roster.add_member(session, zebras.id, player.id)
    await roster.add_member(session, ants.id, player.id)
    await roster.add_member(session, other.id, player.id)
    await roster.set_member_status(session, other.id, player.id, MEMBER_INACTIVE)

    result = await membership.teams_for_player(session, player.id)
    assert [t.name for t in result] == ["Ants", "Zebras"]
    assert result[0].member_count == 1


@pytest.mark.asyncio
async def test_is_player_in_team(session, manager, player):
    team = await teams.create_team(session, manager.id, "Hawks", "basketball")
    assert await membership.is_player_in_team(session, player.id, team.id) is False
    await roster.add_member(session, team.id, player.id)
    assert await membership.is_player_in_team(session, player.id, team.id) is True


@pytest.mark.asyncio
async def test_manager_of(session, manager):
    team = await teams.create_team(session, manager.id, "Hawks", "basketball")
    info = await membership.manager_of(session, team.id)
    assert info.id == manager.id
    assert info.display_name == "Casey Coach"
    with pytest.raises(NotFound):
        await membership.manager_of(session, 999)


@pytest.mark.asyncio
async def test_manager_of_missing_user(session):
    team = await teams.create_team(session, 777, "Orphans", "hockey")
    with pytest.raises(NotFound):
        await membership.manager_of(session, team.id)


@pytest.mark.asyncio
async def test_events_for_player_excludes_cancelled(session, manager, organizer, player):
    hawks = await teams.create_team(session, manager.id, "Hawks", "basketball")
    await roster.add_member(session, hawks.id, player.id)
    cup = await events.create_event(session, organizer.id, "Cup", "basketball", "Gym", date(2030, 6, 1))
    league = await events.create_event(session, organizer.id, "League", "basketball", "Hall", date(2030, 2, 1))
    await registrations.register(session, cup.id, hawks.id)
    await registrations.register(session, league.id, hawks.id)
    await registrations.set_status(session, league.id, hawks.id, REG_CANCELLED)

    result = await membership.events_for_player(session, player.id)
    assert [(e.title, e.team_name, e.registration_status) for e in result] == [("Cup", "Hawks", "pending")]
