"""Plain data records returned by the services and the API."""
from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class UserInfo(BaseModel):
    """Display attributes of a user, as served by the user directory."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    role: str
    first_name: str
    last_name: str

    @property
    def display_name(self) -> str:
        name = f"{self.first_name} {self.last_name}".strip()
        return name or self.email


class TeamResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    sport_type: str
    manager_id: int
    description: str
    max_members: Optional[int]
    created_at: datetime


class TeamSummary(TeamResponse):
    """Team with roster size and manager name (listings)."""

    member_count: int = 0
    manager_name: str = ""


class MembershipResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    team_id: int
    player_id: int
    joined_at: datetime
    status: str


class MemberView(MembershipResponse):
    player_name: str
    player_email: str


class JoinRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    team_id: int
    player_id: int
    requested_at: datetime
    status: str
    message: Optional[str] = None


class JoinRequestView(JoinRequestResponse):
    team_name: str
    sport_type: str
    player_name: str
    player_email: str


class EventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    organizer_id: int
    title: str
    description: str
    sport_type: str
    location: str
    event_date: date
    event_time: str
    registration_deadline: Optional[datetime]
    max_teams: Optional[int]
    entry_fee: float
    status: str
    created_at: datetime


class EventSummary(EventResponse):
    registered_teams: int = 0
    organizer_name: str = ""


class RegistrationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event_id: int
    team_id: int
    registered_at: datetime
    status: str
    notes: str


class EventRegistrationView(RegistrationResponse):
    """Registration seen from the event side."""

    team_name: str
    team_sport: str


class TeamRegistrationView(RegistrationResponse):
    """Registration seen from the team side."""

    event_title: str
    event_date: date
    event_location: str
    event_status: str


class ManagerRegistrationView(TeamRegistrationView):
    team_name: str


class PlayerEventView(BaseModel):
    """Event a player takes part in through one of their teams."""

    event_id: int
    title: str
    sport_type: str
    event_date: date
    location: str
    status: str
    team_id: int
    team_name: str
    registration_status: str
