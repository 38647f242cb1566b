"""Registration model - team registered for an event."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from teamhub.models.base import Base, utcnow

REG_PENDING = "pending"
REG_CONFIRMED = "confirmed"
REG_CANCELLED = "cancelled"


class Registration(Base):
    """Team registration for an event. Withdrawal deletes the row; cancellation keeps it."""

    __tablename__ = "event_registrations"
    __table_args__ = (UniqueConstraint("event_id", "team_id", name="uq_registration_event_team"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_id: Mapped[int] = mapped_column(ForeignKey("events.id"), nullable=False, index=True)
    team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"), nullable=False, index=True)
    registered_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=REG_PENDING)
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
