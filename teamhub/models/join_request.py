"""Join request model - a player's ask to join a team."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from teamhub.models.base import Base, utcnow

REQUEST_PENDING = "pending"
REQUEST_APPROVED = "approved"
REQUEST_REJECTED = "rejected"


class JoinRequest(Base):
    """One request record per (team, player); resubmission resets it to pending."""

    __tablename__ = "team_join_requests"
    __table_args__ = (UniqueConstraint("team_id", "player_id", name="uq_join_request_team_player"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"), nullable=False, index=True)
    player_id: Mapped[int] = mapped_column(ForeignKey("web_users.id"), nullable=False, index=True)
    requested_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=REQUEST_PENDING)
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
