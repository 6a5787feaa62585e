"""Structures de données échangées avec l'API.

Le backend renvoie du JSON en camelCase dont les champs optionnels sont
souvent absents, ``null`` ou mal typés : les modèles pydantic ci-dessous
retombent sur une valeur neutre plutôt que de rejeter la réponse.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Annotated, Any, Mapping, Optional, TypeVar

from pydantic import (
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from fitsync.errors import UnexpectedResponseError


def _optional_float(value: Any) -> float | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _float_or_zero(value: Any) -> float:
    number = _optional_float(value)
    return 0.0 if number is None else number


def _optional_int(value: Any) -> int | None:
    number = _optional_float(value)
    return None if number is None else int(number)


def _int_or_zero(value: Any) -> int:
    number = _optional_int(value)
    return 0 if number is None else number


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _optional_text(value: Any) -> str | None:
    return None if value is None else str(value)


Float = Annotated[float, BeforeValidator(_float_or_zero)]
OptionalFloat = Annotated[Optional[float], BeforeValidator(_optional_float)]
Int = Annotated[int, BeforeValidator(_int_or_zero)]
OptionalInt = Annotated[Optional[int], BeforeValidator(_optional_int)]
Text = Annotated[str, BeforeValidator(_text)]
OptionalText = Annotated[Optional[str], BeforeValidator(_optional_text)]


class WireModel(BaseModel):
    """Modèle sérialisé en camelCase, accepté aussi par nom de champ."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


ModelT = TypeVar("ModelT", bound=WireModel)


def parse_model(model: type[ModelT], data: Any, **context: Any) -> ModelT:
    """Valide ``data`` avec ``model`` ; tout échec devient une réponse inattendue."""
    try:
        return model.model_validate(data, context=context or None)
    except ValidationError as exc:
        raise UnexpectedResponseError(
            f"Réponse inattendue du serveur ({model.__name__})."
        ) from exc


class UserProfile(WireModel):
    """Profil utilisateur mis en cache (jamais autoritatif)."""

    id: Text = ""
    name: Text = ""
    email: Text = ""
    age: OptionalInt = None
    gender: OptionalText = None
    height_cm: OptionalFloat = None
    current_weight_kg: OptionalFloat = None
    target_weight_kg: OptionalFloat = None
    health_goal: OptionalText = None
    activity_level: OptionalText = None
    target_deadline: OptionalText = None

    def to_payload(self) -> dict[str, Any]:
        """Sérialise le profil au format de l'API (camelCase, sans valeurs nulles)."""
        return self.model_dump(by_alias=True, exclude_none=True)


class DailyStats(WireModel):
    """Statistiques quotidiennes du tableau de bord."""

    date: Text = ""
    steps: Int = 0
    active_calories: Float = 0.0
    heart_rate_avg: Float = 0.0
    sleep_hours: Float = 0.0
    weight_kg: Float = 0.0
    activities_count: Int = 0
    total_activity_duration: Float = 0.0
    total_calories_from_activities: Float = 0.0
    bmi: Float = 0.0
    bmi_category: Text = ""
    bmi_is_healthy: bool = False

    @model_validator(mode="before")
    @classmethod
    def _flatten_bmi_category(cls, data: Any) -> Any:
        # bmiCategory arrive sous la forme {"category": ..., "good": ...}
        if not isinstance(data, Mapping):
            return data
        data = dict(data)
        category = data.get("bmiCategory")
        if isinstance(category, Mapping):
            data["bmiCategory"] = category.get("category")
            data["bmiIsHealthy"] = bool(category.get("good", False))
        return data

    @field_validator("bmi_is_healthy", mode="before")
    @classmethod
    def _coerce_flag(cls, value: Any) -> bool:
        return value is True


class Activity(WireModel):
    """Séance d'activité physique enregistrée côté serveur."""

    id: Text = ""
    activity_name: Text = ""
    duration: Int = 0
    calories_burnt: Float = 0.0
    suggestions: Text = ""
    date: Text = ""


class WorkoutResult(WireModel):
    """Résultat d'une séance chronométrée, calculé par le serveur."""

    activity_name: Text = ""
    minutes: Int = 0
    calories_burnt: Float = Field(
        0.0, validation_alias=AliasChoices("calorieBurnt", "caloriesBurnt", "calories_burnt")
    )
    suggestions: Text = ""


class MealPlan(WireModel):
    """Plan de repas d'une journée."""

    id: Text = ""
    date: Text = ""
    breakfast: Text = ""
    lunch: Text = ""
    dinner: Text = ""
    snacks: Text = ""
    total_calories: Float = 0.0
    protein_grams: Float = 0.0
    carbs_grams: Float = 0.0
    fats_grams: Float = 0.0

    @property
    def day(self) -> str:
        """Date du plan au format ``YYYY-MM-DD``."""
        return self.date.split("T", 1)[0]


class MealLogResult(WireModel):
    """Réponse du serveur après l'enregistrement d'un repas."""

    meal_plan: Optional[MealPlan] = None
    suggestions: Text = ""
    next_meal_recommendation: Text = ""

    @field_validator("meal_plan", mode="before")
    @classmethod
    def _drop_malformed_plan(cls, value: Any) -> Any:
        if isinstance(value, (Mapping, MealPlan)):
            return value
        return None


class Event(WireModel):
    """Événement communautaire auquel l'utilisateur peut s'inscrire.

    ``is_attending`` se déduit des inscriptions et de l'identifiant passé
    dans le contexte de validation (``user_id``).
    """

    id: Text = ""
    name: Text = ""
    description: Text = ""
    location: Text = ""
    duration: Text = ""
    type: Text = ""
    trainer: Text = ""
    event_date: Text = ""
    creator_name: Text = ""
    registrant_ids: tuple[str, ...] = ()
    participant_count: Int = 0
    is_attending: bool = False

    @model_validator(mode="before")
    @classmethod
    def _read_registrations(cls, data: Any, info: ValidationInfo) -> Any:
        if not isinstance(data, Mapping):
            return data
        data = dict(data)
        registrations = data.get("registrations")
        if not isinstance(registrations, list):
            registrations = []
        registrant_ids = tuple(
            str(reg["userId"])
            for reg in registrations
            if isinstance(reg, Mapping) and reg.get("userId")
        )
        creator = data.get("creator")
        user_id = (info.context or {}).get("user_id")

        data["name"] = data.get("name") or data.get("title")
        if isinstance(creator, Mapping):
            data["creatorName"] = creator.get("name")
        data["registrantIds"] = registrant_ids
        if _optional_int(data.get("participantCount")) is None:
            data["participantCount"] = len(registrant_ids)
        data["isAttending"] = bool(user_id) and user_id in registrant_ids
        return data


@dataclass(slots=True)
class Comment:
    id: str
    user: str
    text: str
    timestamp: str = "now"


@dataclass(slots=True)
class HealthTip:
    """Conseil santé affiché dans le fil (état purement local)."""

    id: str
    title: str
    description: str
    category: str
    likes: int = 0
    is_liked: bool = False
    is_bookmarked: bool = False
    duration: str | None = None
    comments: list[Comment] = field(default_factory=list)


@dataclass(slots=True)
class ChatMessage:
    id: str
    text: str
    is_user: bool
    timestamp: datetime = field(default_factory=datetime.now)
