"""Team model. Memberships and join requests live in their own tables keyed by (team_id, player_id)."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from teamhub.models.base import Base, utcnow


class Team(Base):
    """Team owned by a manager."""

    __tablename__ = "teams"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    sport_type: Mapped[str] = mapped_column(String(64), nullable=False)
    manager_id: Mapped[int] = mapped_column(ForeignKey("web_users.id"), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    max_members: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # None or 0 = unlimited
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
