from __future__ import annotations

import pytest

from fitsync.errors import UnexpectedResponseError
from fitsync.models import DailyStats, Event, MealLogResult, UserProfile, parse_model

from conftest import USER


def test_profile_reads_camel_case_and_field_names():
    from_api = UserProfile.model_validate(USER)
    by_name = UserProfile(id="user-1", name="Ada", email="ada@example.com", height_cm=170)

    assert from_api.height_cm == 170
    assert from_api.health_goal == "WEIGHT_LOSS"
    assert by_name.height_cm == from_api.height_cm


def test_profile_payload_is_camel_case_without_nulls():
    profile = UserProfile(id="user-1", name="Ada", email="ada@example.com", current_weight_kg=62)

    assert profile.to_payload() == {
        "id": "user-1",
        "name": "Ada",
        "email": "ada@example.com",
        "currentWeightKg": 62.0,
    }


@pytest.mark.parametrize("raw", ["", None, "tall", "inf", "nan", True])
def test_profile_bad_numbers_become_none(raw):
    profile = UserProfile.model_validate({"id": 7, "heightCm": raw, "age": raw})

    assert profile.id == "7"
    assert profile.height_cm is None
    assert profile.age is None


def test_daily_stats_defaults_and_bmi_category():
    stats = DailyStats.model_validate({"steps": "abc", "sleepHours": None, "bmiCategory": "Normal"})

    assert stats.steps == 0
    assert stats.sleep_hours == 0
    assert stats.bmi_category == "Normal"
    assert stats.bmi_is_healthy is False


def test_event_from_registrations():
    payload = {
        "id": "e1",
        "title": "Yoga",
        "creator": {"name": "Coach"},
        "registrations": [{"userId": "user-1"}, {"userId": "user-2"}, "junk"],
    }

    event = parse_model(Event, payload, user_id="user-2")

    assert event.name == "Yoga"
    assert event.creator_name == "Coach"
    assert event.registrant_ids == ("user-1", "user-2")
    assert event.participant_count == 2
    assert event.is_attending


def test_event_without_user_is_not_attending():
    event = parse_model(Event, {"id": "e1", "registrations": None, "participantCount": "5"})

    assert event.participant_count == 5
    assert not event.is_attending


def test_meal_log_result_ignores_malformed_plan():
    result = MealLogResult.model_validate({"mealPlan": "oats", "suggestions": None})

    assert result.meal_plan is None
    assert result.suggestions == ""


def test_parse_model_rejects_non_object():
    with pytest.raises(UnexpectedResponseError):
        parse_model(UserProfile, ["not", "a", "profile"])
