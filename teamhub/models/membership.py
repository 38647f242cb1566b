"""Membership model - a player on a team's roster."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from teamhub.models.base import Base, utcnow

MEMBER_ACTIVE = "active"
MEMBER_INACTIVE = "inactive"
MEMBER_STATUSES = (MEMBER_ACTIVE, MEMBER_INACTIVE)


class Membership(Base):
    """One row per (team, player). Leaving or removal deletes the row."""

    __tablename__ = "team_memberships"
    __table_args__ = (UniqueConstraint("team_id", "player_id", name="uq_membership_team_player"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"), nullable=False, index=True)
    player_id: Mapped[int] = mapped_column(ForeignKey("web_users.id"), nullable=False, index=True)
    joined_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=MEMBER_ACTIVE)  # active, inactive
