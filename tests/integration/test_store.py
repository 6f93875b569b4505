"""Integration tests for store queries."""
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import StatementError
from sqlmodel import Session, select

from scalelog.db.store import (
    get_or_create_profile,
    get_profile_by_name,
    insert_measurement,
    list_measurements,
)
from scalelog.models.measurement import Measurement
from scalelog.models.profile import ActivityLevel, Profile


def _at(day: int) -> datetime:
    return datetime(2024, 1, day, tzinfo=timezone.utc)


class TestListMeasurements:
    def test_oldest_first(self, test_session: Session, profile):
        for day in (3, 1, 2):
            insert_measurement(
                test_session, Measurement(timestamp=_at(day), weight=80.0 + day), profile.id
            )
        test_session.commit()

        rows = list_measurements(test_session, profile.id)
        assert [m.timestamp.day for m in rows] == [1, 2, 3]

    def test_only_own_profile(self, test_session: Session, profile, active_profile):
        insert_measurement(test_session, Measurement(timestamp=_at(1), weight=80.0), profile.id)
        insert_measurement(
            test_session, Measurement(timestamp=_at(2), weight=90.0), active_profile.id
        )
        test_session.commit()

        rows = list_measurements(test_session, active_profile.id)
        assert [m.weight for m in rows] == [90.0]

    def test_insert_is_not_committed(self, engine, profile):
        with Session(engine) as s:
            insert_measurement(s, Measurement(timestamp=_at(1), weight=80.0), profile.id)
            s.rollback()
        with Session(engine) as s:
            assert s.exec(select(Measurement)).all() == []


class TestTimestampStorage:
    def test_round_trip_is_aware_utc(self, engine, profile):
        with Session(engine) as s:
            insert_measurement(
                s, Measurement(timestamp=datetime(2024, 3, 31, 6, 15, tzinfo=timezone.utc),
                               weight=80.0), profile.id
            )
            s.commit()
        with Session(engine) as s:
            [m] = list_measurements(s, profile.id)
        assert m.timestamp == datetime(2024, 3, 31, 6, 15, tzinfo=timezone.utc)
        assert m.timestamp.tzinfo is timezone.utc

    def test_other_offsets_are_stored_as_utc(self, engine, profile):
        cest = timezone(timedelta(hours=2))
        with Session(engine) as s:
            insert_measurement(
                s, Measurement(timestamp=datetime(2024, 7, 1, 8, 0, tzinfo=cest), weight=80.0),
                profile.id,
            )
            s.commit()
        with Session(engine) as s:
            [m] = list_measurements(s, profile.id)
        assert m.timestamp == datetime(2024, 7, 1, 6, 0, tzinfo=timezone.utc)
        assert m.timestamp.tzinfo is timezone.utc

    def test_naive_timestamp_rejected(self, engine, profile):
        with Session(engine) as s:
            insert_measurement(
                s, Measurement(timestamp=datetime(2024, 1, 1), weight=80.0), profile.id
            )
            with pytest.raises(StatementError):
                s.commit()

    def test_profile_created_at_is_aware(self, test_session: Session):
        profile = get_or_create_profile(test_session, "emil")
        assert profile.created_at.tzinfo is timezone.utc


class TestProfiles:
    def test_get_by_name_missing(self, test_session: Session):
        assert get_profile_by_name(test_session, "nobody") is None

    def test_creates_missing_profile(self, test_session: Session):
        profile = get_or_create_profile(
            test_session, "clara", activity_level=ActivityLevel.sedentary, target_weight=60.0
        )
        assert profile.id is not None
        assert profile.activity_level == ActivityLevel.sedentary
        assert profile.target_weight == 60.0

    def test_returns_existing_profile_untouched(self, test_session: Session, profile):
        found = get_or_create_profile(
            test_session, "anna", activity_level=ActivityLevel.very_active
        )
        assert found.id == profile.id
        assert found.activity_level is None
        assert len(test_session.exec(select(Profile)).all()) == 1
