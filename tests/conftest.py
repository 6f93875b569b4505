"""Shared test fixtures."""
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Generator, List

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

# Import all models so SQLModel.metadata knows about them
from scalelog.models.measurement import Measurement  # noqa: F401
from scalelog.models.profile import ActivityLevel, Profile

from scalelog.analysis.series import MeasurementPoint

FIXTURES_DIR = Path(__file__).parent / "fixtures"

HEADER = "Datum;Uhrzeit;Gewicht;Körperfett;Wasser;Muskelmasse;BMI;Notizen"


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine. Tables recreated fresh for each test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="test_session")
def test_session_fixture(engine) -> Generator[Session, None, None]:
    """Provides a DB session connected to in-memory SQLite."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="profile")
def profile_fixture(engine) -> Profile:
    """A persisted Profile with no activity level and a 75 kg target."""
    with Session(engine) as s:
        profile = Profile(name="anna", target_weight=75.0)
        s.add(profile)
        s.commit()
        s.refresh(profile)
    return profile


@pytest.fixture(name="active_profile")
def active_profile_fixture(engine) -> Profile:
    """A persisted Profile whose activity level enables metabolic rate derivation."""
    with Session(engine) as s:
        profile = Profile(name="bernd", activity_level=ActivityLevel.moderately_active)
        s.add(profile)
        s.commit()
        s.refresh(profile)
    return profile


def make_csv(*rows: str, header: str = HEADER) -> bytes:
    """Build a scale export in the app's encoding from text lines."""
    return "\n".join((header,) + rows).encode("iso8859_15")


def make_points(weights: List[float],
                start: datetime = datetime(2024, 1, 1, 7, 0, tzinfo=timezone.utc),
                step: timedelta = timedelta(days=1)) -> List[MeasurementPoint]:
    """Evenly spaced points with only weight set."""
    return [
        MeasurementPoint(timestamp=start + i * step, weight=w)
        for i, w in enumerate(weights)
    ]
