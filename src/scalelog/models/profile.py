"""Profile model and the activity level enum shared with measurements."""
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlmodel import Column, Field, SQLModel

from scalelog.models.types import UtcDateTime


class ActivityLevel(str, Enum):
    sedentary = "sedentary"
    lightly_active = "lightly_active"
    moderately_active = "moderately_active"
    very_active = "very_active"
    extra_active = "extra_active"


class Profile(SQLModel, table=True):
    """A person whose scale measurements are tracked. Outlives its measurements."""

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(unique=True, index=True)
    activity_level: Optional[ActivityLevel] = None
    target_weight: Optional[float] = None  # kg

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(UtcDateTime(), nullable=False),
    )
