"""Tests for DB models."""
from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from scalelog.models.measurement import Measurement
from scalelog.models.profile import ActivityLevel, Profile


class TestProfile:
    def test_optional_fields_default_to_none(self):
        profile = Profile(name="anna")
        assert profile.activity_level is None
        assert profile.target_weight is None

    def test_persists_activity_level(self, test_session: Session):
        test_session.add(Profile(name="anna", activity_level=ActivityLevel.very_active))
        test_session.commit()

        result = test_session.exec(select(Profile).where(Profile.name == "anna")).first()
        assert result.activity_level == ActivityLevel.very_active

    def test_name_is_unique(self, test_session: Session):
        test_session.add(Profile(name="anna"))
        test_session.commit()
        test_session.add(Profile(name="anna"))
        with pytest.raises(IntegrityError):
            test_session.commit()


class TestMeasurement:
    def test_optional_fields_default_to_none(self):
        ts = datetime(2024, 1, 1, tzinfo=timezone.utc)
        m = Measurement(profile_id=1, timestamp=ts, weight=80.0)
        assert m.body_fat_percent is None
        assert m.body_water_percent is None
        assert m.muscle_mass_percent is None
        assert m.body_mass_index is None
        assert m.metabolic_rate is None
        assert m.activity_level is None
        assert m.notes is None

    def test_persists_and_retrieves(self, test_session: Session, profile):
        test_session.add(Measurement(
            profile_id=profile.id,
            timestamp=datetime(2024, 1, 1, 7, 0, tzinfo=timezone.utc),
            weight=80.5,
            body_fat_percent=20.1,
            metabolic_rate=1656.9,
            activity_level=ActivityLevel.moderately_active,
            notes='Test "note"',
        ))
        test_session.commit()

        result = test_session.exec(select(Measurement)).first()
        assert result.profile_id == profile.id
        assert result.weight == pytest.approx(80.5)
        assert result.body_fat_percent == pytest.approx(20.1)
        assert result.body_water_percent is None
        assert result.activity_level == ActivityLevel.moderately_active
        assert result.notes == 'Test "note"'
