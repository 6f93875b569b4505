"""
Measurement store: the queries the import pipeline and chart layer rely on.

Transactions are plain SQLModel Session scopes owned by the caller.
insert_measurement() only stages rows; the caller decides when the unit of
work ends.
"""
from typing import List, Optional

from sqlmodel import Session, select

from scalelog.models.measurement import Measurement
from scalelog.models.profile import ActivityLevel, Profile


def insert_measurement(session: Session, measurement: Measurement, profile_id: int) -> None:
    """Stage a measurement for the given profile in the current session."""
    measurement.profile_id = profile_id
    session.add(measurement)


def list_measurements(session: Session, profile_id: int) -> List[Measurement]:
    """All measurements of a profile, oldest first."""
    return list(
        session.exec(
            select(Measurement)
            .where(Measurement.profile_id == profile_id)
            .order_by(Measurement.timestamp, Measurement.id)
        ).all()
    )


def get_profile_by_name(session: Session, name: str) -> Optional[Profile]:
    return session.exec(select(Profile).where(Profile.name == name)).first()


def get_or_create_profile(
    session: Session,
    name: str,
    *,
    activity_level: Optional[ActivityLevel] = None,
    target_weight: Optional[float] = None,
) -> Profile:
    """Look a profile up by name, creating and committing it if absent.

    Existing profiles are returned untouched; the keyword arguments only
    apply to a newly created row.
    """
    profile = get_profile_by_name(session, name)
    if profile is not None:
        return profile

    profile = Profile(
        name=name,
        activity_level=activity_level,
        target_weight=target_weight,
    )
    session.add(profile)
    session.commit()
    session.refresh(profile)
    return profile
