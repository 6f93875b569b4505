"""Measurement model: one row per scale reading."""
from datetime import datetime
from typing import Optional

from sqlmodel import Column, Field, SQLModel

from scalelog.models.profile import ActivityLevel
from scalelog.models.types import UtcDateTime


class Measurement(SQLModel, table=True):
    """
    One body-scale reading. Created by the CSV import, never modified afterwards.
    Only weight is guaranteed; the scale may skip any of the body composition values.
    """

    id: Optional[int] = Field(default=None, primary_key=True)
    profile_id: int = Field(foreign_key="profile.id", index=True)

    timestamp: datetime = Field(
        sa_column=Column(UtcDateTime(), index=True, nullable=False)
    )  # aware, UTC
    weight: float  # kg

    body_fat_percent: Optional[float] = None
    body_water_percent: Optional[float] = None
    muscle_mass_percent: Optional[float] = None
    body_mass_index: Optional[float] = None

    # Derived at import: set only when muscle mass and activity level are both known
    metabolic_rate: Optional[float] = None  # kcal/day
    activity_level: Optional[ActivityLevel] = None

    notes: Optional[str] = None

