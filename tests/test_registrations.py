"""Tests for event registrations: capacity, deadline, status changes, withdrawal."""
from datetime import date, datetime, timedelta, timezone

import pytest

from teamhub.errors import (
    AlreadyRegistered,
    CapacityExceeded,
    DeadlinePassed,
    EventClosed,
    InvalidArgument,
    NotFound,
)
from teamhub.models.registration import REG_CANCELLED, REG_CONFIRMED, REG_PENDING
from teamhub.services import events, registrations, teams


@pytest.fixture
async def hawks(session, manager):
    return await teams.create_team(session, manager.id, "Hawks", "basketball")


@pytest.fixture
async def eagles(session, manager):
    return await teams.create_team(session, manager.id, "Eagles", "basketball")


@pytest.fixture
async def spring_cup(session, organizer):
    return await events.create_event(
        session,
        organizer.id,
        "SpringCup",
        "basketball",
        "City Gym",
        date(2030, 4, 12),
        event_time="09:30",
        max_teams=1,
    )


@pytest.mark.asyncio
async def test_spring_cup_scenario(session, spring_cup, hawks, eagles):
    reg = await registrations.register(session, spring_cup.id, hawks.id)
    assert reg.status == REG_PENDING

    with pytest.raises(CapacityExceeded):
        await registrations.register(session, spring_cup.id, eagles.id)

    await registrations.withdraw(session, spring_cup.id, hawks.id)
    reg = await registrations.register(session, spring_cup.id, eagles.id)
    assert reg.team_id == eagles.id
    assert [r.team_name for r in await registrations.list_for_event(session, spring_cup.id)] == ["Eagles"]


@pytest.mark.asyncio
async def test_duplicate_registration(session, organizer, hawks):
    event = await events.create_event(session, organizer.id, "Open", "basketball", "Park", date(2030, 5, 1))
    await registrations.register(session, event.id, hawks.id)
    with pytest.raises(AlreadyRegistered):
        await registrations.register(session, event.id, hawks.id)


@pytest.mark.asyncio
async def test_capacity_checked_before_uniqueness(session, spring_cup, hawks):
    await registrations.register(session, spring_cup.id, hawks.id)
    with pytest.raises(CapacityExceeded):
        await registrations.register(session, spring_cup.id, hawks.id)


@pytest.mark.asyncio
async def test_deadline_passed(session, organizer, hawks):
    deadline = datetime(2030, 3, 1, 12, 0)
    event = await events.create_event(
        session,
        organizer.id,
        "Late Cup",
        "basketball",
        "Arena",
        date(2030, 3, 10),
        registration_deadline=deadline,
    )
    with pytest.raises(DeadlinePassed):
        await registrations.register(session, event.id, hawks.id, now=deadline + timedelta(seconds=1))
    reg = await registrations.register(session, event.id, hawks.id, now=deadline)
    assert reg.status == REG_PENDING


@pytest.mark.asyncio
async def test_deadline_with_aware_datetimes(session, organizer, hawks):
    event = await events.create_event(
        session,
        organizer.id,
        "Zoned Cup",
        "basketball",
        "Arena",
        date(2030, 3, 10),
        registration_deadline=datetime(2030, 3, 1, 14, 0, tzinfo=timezone(timedelta(hours=2))),
    )
    assert event.registration_deadline == datetime(2030, 3, 1, 12, 0)
    with pytest.raises(DeadlinePassed):
        await registrations.register(
            session, event.id, hawks.id, now=datetime(2030, 3, 1, 12, 30, tzinfo=timezone.utc)
        )


@pytest.mark.asyncio
async def test_register_unknown_event_or_team(session, spring_cup, hawks):
    with pytest.raises(NotFound):
        await registrations.register(session, 999, hawks.id)
    with pytest.raises(NotFound):
        await registrations.register(session, spring_cup.id, 999)


@pytest.mark.asyncio
async def test_register_rejects_cancelled_status(session, spring_cup, hawks):
    with pytest.raises(InvalidArgument):
        await registrations.register(session, spring_cup.id, hawks.id, status=REG_CANCELLED)


@pytest.mark.asyncio
async def test_cancelled_registration_frees_slot(session, spring_cup, hawks, eagles):
    await registrations.register(session, spring_cup.id, hawks.id)
    reg = await registrations.set_status(session, spring_cup.id, hawks.id, REG_CANCELLED)
    assert reg.status == REG_CANCELLED
    assert await registrations.count_active(session, spring_cup.id) == 0
    assert await registrations.find_active(session, spring_cup.id, hawks.id) is None

    await registrations.register(session, spring_cup.id, eagles.id)
    with pytest.raises(CapacityExceeded):
        await registrations.set_status(session, spring_cup.id, hawks.id, REG_CONFIRMED)


@pytest.mark.asyncio
async def test_reregister_after_cancel_resets_pending(session, organizer, hawks):
    event = await events.create_event(session, organizer.id, "Open", "basketball", "Park", date(2030, 5, 1))
    first = await registrations.register(session, event.id, hawks.id)
    await registrations.set_status(session, event.id, hawks.id, REG_CANCELLED)
    again = await registrations.register(session, event.id, hawks.id)
    assert again.id == first.id
    assert again.status == REG_PENDING


@pytest.mark.asyncio
async def test_set_status_validation(session, spring_cup, hawks):
    with pytest.raises(NotFound):
        await registrations.set_status(session, spring_cup.id, hawks.id, REG_CONFIRMED)
    await registrations.register(session, spring_cup.id, hawks.id)
    with pytest.raises(InvalidArgument):
        await registrations.set_status(session, spring_cup.id, hawks.id, REG_PENDING)
    reg = await registrations.set_status(session, spring_cup.id, hawks.id, REG_CONFIRMED)
    assert reg.status == REG_CONFIRMED


@pytest.mark.asyncio
async def test_withdraw_only_touches_pair(session, organizer, hawks, eagles):
    event = await events.create_event(session, organizer.id, "Open", "basketball", "Park", date(2030, 5, 1))
    await registrations.register(session, event.id, hawks.id)
    await registrations.register(session, event.id, eagles.id)
    await registrations.withdraw(session, event.id, hawks.id)
    assert [r.team_id for r in await registrations.list_for_event(session, event.id)] == [eagles.id]
    with pytest.raises(NotFound):
        await registrations.withdraw(session, event.id, hawks.id)


@pytest.mark.asyncio
async def test_team_and_manager_views(session, organizer, manager, hawks, eagles):
    e1 = await events.create_event(session, organizer.id, "Winter", "basketball", "Gym", date(2030, 1, 5))
    e2 = await events.create_event(session, organizer.id, "Summer", "basketball", "Beach", date(2030, 7, 5))
    await registrations.register(session, e2.id, hawks.id)
    await registrations.register(session, e1.id, hawks.id, status=REG_CONFIRMED)
    await registrations.register(session, e1.id, eagles.id)

    by_team = await registrations.list_for_team(session, hawks.id)
    assert [(r.event_title, r.status) for r in by_team] == [("Winter", REG_CONFIRMED), ("Summer", REG_PENDING)]

    by_manager = await registrations.list_for_manager(session, manager.id)
    assert [(r.event_title, r.team_name) for r in by_manager] == [
        ("Winter", "Eagles"),
        ("Winter", "Hawks"),
        ("Summer", "Hawks"),
    ]


@pytest.mark.asyncio
async def test_event_summary_counts_non_cancelled(session, spring_cup, hawks):
    await registrations.register(session, spring_cup.id, hawks.id)
    [summary] = await events.list_events(session)
    assert summary.registered_teams == 1
    assert summary.organizer_name == "Olive Organizer"
    await registrations.set_status(session, spring_cup.id, hawks.id, REG_CANCELLED)
    [summary] = await events.list_events(session)
    assert summary.registered_teams == 0


@pytest.mark.asyncio
async def test_event_validation(session, organizer):
    with pytest.raises(InvalidArgument):
        await events.create_event(session, organizer.id, "Bad", "soccer", "Field", date(2030, 1, 1), event_time="25:00")
    with pytest.raises(InvalidArgument):
        await events.create_event(session, organizer.id, "Bad", "soccer", "Field", date(2030, 1, 1), max_teams=-1)


@pytest.mark.asyncio
async def test_withdrawn_team_registers_again(session, spring_cup, hawks):
    await registrations.register(session, spring_cup.id, hawks.id)
    await registrations.set_status(session, spring_cup.id, hawks.id, REG_CONFIRMED)
    await registrations.withdraw(session, spring_cup.id, hawks.id)

    reg = await registrations.register(session, spring_cup.id, hawks.id)
    assert reg.status == REG_PENDING
    rows = await registrations.list_for_event(session, spring_cup.id)
    assert [(r.team_id, r.status) for r in rows] == [(hawks.id, REG_PENDING)]


@pytest.mark.asyncio
@pytest.mark.parametrize("closed_status", ["cancelled", "completed", "in_progress"])
async def test_register_for_closed_event(session, organizer, hawks, closed_status):
    event = await events.create_event(
        session, organizer.id, "Done Cup", "basketball", "Gym", date(2030, 5, 1), status=closed_status
    )
    with pytest.raises(EventClosed):
        await registrations.register(session, event.id, hawks.id)


@pytest.mark.asyncio
async def test_register_for_draft_event(session, organizer, hawks):
    event = await events.create_event(
        session, organizer.id, "Draft Cup", "basketball", "Gym", date(2030, 5, 1), status="draft"
    )
    reg = await registrations.register(session, event.id, hawks.id)
    assert reg.status == REG_PENDING
