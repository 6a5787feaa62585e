"""Opérations métier exposées par le backend, une méthode par route."""

from __future__ import annotations

import logging
import math
import re
from datetime import date, datetime, timezone
from typing import Any, Callable, Mapping

from fitsync.errors import ApiRejectedError, UnexpectedResponseError, ValidationError
from fitsync.models import (
    Activity,
    DailyStats,
    Event,
    MealLogResult,
    MealPlan,
    UserProfile,
    WorkoutResult,
    parse_model,
)
from fitsync.services.api_client import ApiClient, unwrap
from fitsync.services.credential_store import CredentialStore
from fitsync.state import AppState

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6
MAINTENANCE_GOAL = "MAINTENANCE"
REGISTRATION_FIELDS = (
    "name",
    "email",
    "password",
    "age",
    "height_cm",
    "current_weight_kg",
    "gender",
    "health_goal",
    "activity_level",
)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _to_float(value: Any, label: str) -> float:
    """Convertit une saisie en nombre fini (``inf`` et ``nan`` sont refusés)."""
    try:
        number = float(str(value).strip())
    except ValueError as exc:
        raise ValidationError(f"Valeur numérique invalide pour {label}.") from exc
    if not math.isfinite(number):
        raise ValidationError(f"Valeur numérique invalide pour {label}.")
    return number


def _to_int(value: Any, label: str) -> int:
    return int(_to_float(value, label))


def _default_deadline() -> str:
    year = datetime.now(timezone.utc).year
    return f"{year}-12-31T00:00:00.000Z"


def _expect_list(value: Any, what: str) -> list[Any]:
    if not isinstance(value, list):
        raise UnexpectedResponseError(f"Liste de {what} attendue dans la réponse.")
    return value


def _expect_mapping(value: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise UnexpectedResponseError(f"Objet {what} attendu dans la réponse.")
    return value


class FitnessService:
    """Service responsable de l'authentification et des appels au backend."""

    def __init__(
        self,
        client: ApiClient,
        store: CredentialStore,
        state: AppState | None = None,
        *,
        on_session_expired: Callable[[], None] | None = None,
    ) -> None:
        self._client = client
        self._store = store
        self._state = state or AppState()
        self._on_session_expired = on_session_expired
        client.set_session_expired_handler(self._handle_session_expired)

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    # ------------------------------------------------------------ session -
    def restore_session(self) -> bool:
        """Reprend une session persistée au démarrage, sans appel réseau.

        La présence d'un jeton ne garantit pas sa validité : le serveur
        tranchera au premier appel authentifié.
        """
        if self._store.load() is None:
            return False
        profile = self._store.load_profile()
        self._state.sign_in(profile or UserProfile(id="", name="", email=""))
        return True

    def login(self, email: str, password: str) -> UserProfile:
        """Connecte l'utilisateur et persiste son jeton."""
        email = (email or "").strip()
        if not email or not password:
            raise ValidationError("Veuillez remplir tous les champs pour continuer.")
        if not EMAIL_PATTERN.match(email):
            raise ValidationError("Veuillez saisir une adresse e-mail valide.")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Le mot de passe doit contenir au moins {MIN_PASSWORD_LENGTH} caractères."
            )

        payload = self._client.post(
            "/users/login", {"email": email, "password": password}, authenticated=False
        )
        return self._open_session(payload)

    def register(
        self,
        *,
        name: str,
        email: str,
        password: str,
        age: Any,
        height_cm: Any,
        current_weight_kg: Any,
        gender: str,
        health_goal: str,
        activity_level: str,
        target_weight_kg: Any = None,
        target_deadline: str | None = None,
    ) -> UserProfile:
        """Crée un compte puis ouvre la session correspondante."""
        form = {
            "name": name,
            "email": email,
            "password": password,
            "age": age,
            "height_cm": height_cm,
            "current_weight_kg": current_weight_kg,
            "gender": gender,
            "health_goal": health_goal,
            "activity_level": activity_level,
        }
        for key in REGISTRATION_FIELDS:
            if _is_blank(form[key]):
                raise ValidationError(f"Veuillez renseigner le champ {key.replace('_', ' ')}.")

        goal = health_goal.strip().upper()
        if goal != MAINTENANCE_GOAL and _is_blank(target_weight_kg):
            raise ValidationError("Veuillez indiquer votre poids cible.")

        current_weight = _to_int(current_weight_kg, "le poids actuel")
        body = {
            "name": name.strip(),
            "email": email.strip(),
            "password": password,
            "age": _to_int(age, "l'âge"),
            "heightCm": _to_int(height_cm, "la taille"),
            "currentWeightKg": current_weight,
            "gender": gender.strip().upper(),
            "healthGoal": goal,
            "targetWeightKg": (
                current_weight
                if _is_blank(target_weight_kg)
                else _to_int(target_weight_kg, "le poids cible")
            ),
            "targetDeadline": target_deadline or _default_deadline(),
            "activityLevel": activity_level.strip().upper(),
        }
        payload = self._client.post("/users/register", body, authenticated=False)
        return self._open_session(payload)

    def logout(self) -> None:
        """Déconnecte l'utilisateur et supprime les identifiants persistés."""
        self._store.clear()
        self._state.reset()

    def _open_session(self, payload: Any) -> UserProfile:
        token = unwrap(payload, "token")
        user = unwrap(payload, "user")
        if not isinstance(token, str) or not token:
            raise UnexpectedResponseError("Jeton absent de la réponse d'authentification.")
        profile = parse_model(UserProfile, _expect_mapping(user, "utilisateur"))

        self._store.save(token, profile)
        self._state.reset()
        self._state.sign_in(profile)
        logger.info("Session ouverte pour l'utilisateur %s.", profile.id)
        return profile

    def _handle_session_expired(self) -> None:
        self._state.reset()
        if self._on_session_expired is not None:
            self._on_session_expired()

    # ------------------------------------------------------------ profile -
    def get_profile(self) -> UserProfile:
        """Récupère le profil serveur et rafraîchit le cache local."""
        generation = self._state.snapshot()
        payload = self._client.get("/users/profile")
        profile = parse_model(UserProfile, _expect_mapping(unwrap(payload, "user"), "utilisateur"))
        if self._state.is_current(generation):
            self._store.update_profile(profile)
            self._state.sign_in(profile)
        return profile

    def update_profile(
        self,
        *,
        name: str,
        email: str,
        phone: str | None = None,
        weight_kg: Any = None,
        height_cm: Any = None,
        age: Any = None,
    ) -> UserProfile:
        """Met à jour le profil ; seule la réponse du serveur fait foi."""
        if _is_blank(name) or _is_blank(email):
            raise ValidationError("Le nom et l'e-mail sont obligatoires.")

        body: dict[str, Any] = {"name": name.strip(), "email": email.strip()}
        if not _is_blank(phone):
            body["phone"] = str(phone).strip()
        if not _is_blank(weight_kg):
            body["currentWeightKg"] = _to_float(weight_kg, "le poids")
        if not _is_blank(height_cm):
            body["heightCm"] = _to_float(height_cm, "la taille")
        if not _is_blank(age):
            body["age"] = _to_int(age, "l'âge")

        generation = self._state.snapshot()
        payload = self._client.put("/users/update", body)
        profile = parse_model(UserProfile, _expect_mapping(unwrap(payload, "user"), "utilisateur"))
        if self._state.is_current(generation):
            self._store.update_profile(profile)
            self._state.sign_in(profile)
        return profile

    # ---------------------------------------------------------- dashboard -
    def daily_stats(self) -> DailyStats:
        payload = self._client.get("/dashboard/getdailystats")
        return parse_model(DailyStats, _expect_mapping(unwrap(payload), "statistiques"))

    def activities(self) -> list[Activity]:
        payload = self._client.get("/stats/activities")
        items = _expect_list(unwrap(payload, "activities"), "activités")
        return [parse_model(Activity, item) for item in items if isinstance(item, Mapping)]

    def log_activity(self, activity: str, minutes: int) -> WorkoutResult:
        """Enregistre une activité ; calories et conseils viennent du serveur."""
        if _is_blank(activity):
            raise ValidationError("Veuillez saisir un nom d'activité.")
        if minutes < 0:
            raise ValidationError("La durée ne peut pas être négative.")

        name = activity.strip().lower()
        payload = self._client.post("/stats/activity", {"activity": name, "minutes": int(minutes)})
        data = unwrap(payload)
        data = data if isinstance(data, Mapping) else {}
        return parse_model(
            WorkoutResult, {**data, "activityName": name, "minutes": int(minutes)}
        )

    # --------------------------------------------------------------- diet -
    def meal_plans(self) -> list[MealPlan]:
        payload = self._client.get("/stats/meals")
        items = _expect_list(unwrap(payload, "mealPlans"), "plans de repas")
        return [parse_model(MealPlan, item) for item in items if isinstance(item, Mapping)]

    def meal_for_date(self, day: date | str) -> MealPlan | None:
        """Retourne le plan du jour demandé, ou None si le serveur n'en a pas."""
        if isinstance(day, date):
            day = day.isoformat()
        try:
            date.fromisoformat(day)
        except (TypeError, ValueError) as exc:
            raise ValidationError("Date invalide, format attendu : AAAA-MM-JJ.") from exc

        try:
            payload = self._client.get(f"/stats/meals/{day}")
        except ApiRejectedError as exc:
            if exc.status_code == 404:
                return None
            raise
        return parse_model(MealPlan, _expect_mapping(unwrap(payload, "mealPlan"), "plan de repas"))

    def log_meal(
        self,
        breakfast: str = "",
        lunch: str = "",
        dinner: str = "",
        snacks: str | None = None,
    ) -> MealLogResult:
        """Enregistre les repas du jour ; un seul repas renseigné suffit."""
        meals = {
            "breakfast": (breakfast or "").strip(),
            "lunch": (lunch or "").strip(),
            "dinner": (dinner or "").strip(),
        }
        if not any(meals.values()):
            raise ValidationError("Veuillez ajouter au moins un repas.")
        body: dict[str, Any] = dict(meals)
        if snacks and snacks.strip():
            body["snacks"] = snacks.strip()

        payload = self._client.post("/stats/meal", body)
        data = unwrap(payload)
        return parse_model(MealLogResult, data if isinstance(data, Mapping) else {})

    def set_weight_goal(self, target_weight: Any) -> dict[str, Any]:
        """Soumet un poids cible et retourne les suggestions du serveur."""
        if _is_blank(target_weight):
            raise ValidationError("Veuillez saisir un poids cible valide.")
        try:
            target = _to_float(target_weight, "le poids cible")
        except ValidationError as exc:
            raise ValidationError("Veuillez saisir un poids cible valide.") from exc
        if target <= 0:
            raise ValidationError("Veuillez saisir un poids cible valide.")

        payload = self._client.post("/stats/weight-goal", {"targetWeight": target})
        data = unwrap(payload)
        return dict(data) if isinstance(data, Mapping) else {"suggestions": data}

    # --------------------------------------------------------------- chat -
    def chat(self, message: str) -> Any:
        """Envoie un message à l'assistant et retourne la réponse brute."""
        if _is_blank(message):
            raise ValidationError("Le message est vide.")
        return self._client.post("/stats/chat", {"message": message.strip()})

    # ------------------------------------------------------------- events -
    def events(self) -> list[Event]:
        payload = self._client.get("/events/")
        items = _expect_list(unwrap(payload, "events"), "événements")
        user_id = self._state.user_id
        return [parse_model(Event, item, user_id=user_id) for item in items if isinstance(item, Mapping)]

    def register_event(self, event_id: str) -> Any:
        return self._client.post(f"/events/{event_id}/register")

    def unregister_event(self, event_id: str) -> Any:
        return self._client.delete(f"/events/{event_id}/unregister")
