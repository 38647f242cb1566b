"""Database models."""
from teamhub.models.base import Base, init_db
from teamhub.models.user import User
from teamhub.models.team import Team
from teamhub.models.membership import Membership
from teamhub.models.join_request import JoinRequest
from teamhub.models.event import Event
from teamhub.models.registration import Registration

__all__ = [
    "Base",
    "User",
    "Team",
    "Membership",
    "JoinRequest",
    "Event",
    "Registration",
    "init_db",
]
