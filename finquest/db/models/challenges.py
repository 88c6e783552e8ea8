from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, Boolean, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from finquest.core.helpers.date_helpers import DateHelper
from finquest.db.base import Base


class Challenge(Base):
    """Catalog entry users can enroll in"""
    __tablename__ = "challenges"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    challenge_type: Mapped[str] = mapped_column(String, nullable=False, index=True)  # spending, logging, exploration
    category: Mapped[Optional[str]] = mapped_column(String, nullable=True)  # ledger category/all, streak/count, locations/cities

    target_amount: Mapped[float] = mapped_column(Float, nullable=False)
    duration_days: Mapped[int] = mapped_column(Integer, nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=DateHelper.utcnow)

    enrollments: Mapped[list["Enrollment"]] = relationship("Enrollment", back_populates="challenge")


class Enrollment(Base):
    """A user's time-boxed attempt at a challenge"""
    __tablename__ = "user_challenges"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    challenge_id: Mapped[str] = mapped_column(String, ForeignKey("challenges.id"), nullable=False, index=True)

    challenge: Mapped["Challenge"] = relationship("Challenge", back_populates="enrollments")

    # Derived on every tracking pass
    current_amount: Mapped[float] = mapped_column(Float, default=0.0)
    progress_data: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)

    status: Mapped[str] = mapped_column(String, default="active", index=True)  # active, completed, failed
    started_at: Mapped[datetime] = mapped_column(DateTime, default=DateHelper.utcnow, nullable=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
