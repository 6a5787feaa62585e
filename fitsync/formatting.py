"""Petits utilitaires de présentation partagés par les vues."""

from __future__ import annotations

from datetime import date, datetime

DAILY_STEPS_GOAL = 10_000
DAILY_SLEEP_GOAL_HOURS = 8
DAILY_CALORIES_GOAL = 2_000


def format_elapsed(seconds: int) -> str:
    """``MM:SS``, ou ``HH:MM:SS`` au-delà d'une heure."""
    seconds = max(int(seconds), 0)
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def progress(value: float, goal: float) -> float:
    """Pourcentage d'avancement borné à [0, 100]."""
    if goal <= 0:
        return 0.0
    return min(max(value / goal * 100, 0.0), 100.0)


def steps_progress(steps: float) -> float:
    return progress(steps, DAILY_STEPS_GOAL)


def sleep_progress(hours: float) -> float:
    return progress(hours, DAILY_SLEEP_GOAL_HOURS)


def calories_progress(calories: float) -> float:
    return progress(calories, DAILY_CALORIES_GOAL)


def _parse_timestamp(value: str | datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def format_event_date(value: str | datetime) -> str:
    """Ex. ``Mar 5, 2025``."""
    moment = _parse_timestamp(value)
    return f"{moment:%b} {moment.day}, {moment.year}"


def format_event_time(value: str | datetime) -> str:
    """Ex. ``3:30 PM``."""
    moment = _parse_timestamp(value)
    hour = moment.hour % 12 or 12
    return f"{hour}:{moment:%M} {'AM' if moment.hour < 12 else 'PM'}"


def relative_day_label(day: str | date, today: date | None = None) -> str:
    """``Today``, ``Yesterday`` ou ``Mar 5``."""
    if isinstance(day, str):
        day = _parse_timestamp(day).date() if "T" in day else date.fromisoformat(day)
    elif isinstance(day, datetime):
        day = day.date()
    today = today or date.today()
    delta = (today - day).days
    if delta == 0:
        return "Today"
    if delta == 1:
        return "Yesterday"
    return f"{day:%b} {day.day}"


def first_name(name: str | None) -> str:
    parts = (name or "").split()
    return parts[0] if parts else "User"
