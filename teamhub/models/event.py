"""Event model."""
from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from sqlalchemy import Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from teamhub.models.base import Base, utcnow

EVENT_STATUSES = ("draft", "upcoming", "in_progress", "completed", "cancelled")


class Event(Base):
    """Competitive event run by an organizer."""

    __tablename__ = "events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    organizer_id: Mapped[int] = mapped_column(ForeignKey("web_users.id"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    sport_type: Mapped[str] = mapped_column(String(64), nullable=False)
    location: Mapped[str] = mapped_column(String(256), nullable=False)
    event_date: Mapped[date] = mapped_column(Date, nullable=False)
    event_time: Mapped[str] = mapped_column(String(8), nullable=False, default="12:00")  # HH:MM
    registration_deadline: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    max_teams: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # None or 0 = unlimited
    entry_fee: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="upcoming")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
