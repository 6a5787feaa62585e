"""
Outil en ligne de commande autour de la passerelle FitSync.

Usage:
    fitsync login <email> [--password PASSWORD]
    fitsync logout
    fitsync whoami
    fitsync stats
    fitsync activities
    fitsync meals [--date AAAA-MM-JJ]
    fitsync log-meal --breakfast ... [--lunch ...] [--dinner ...] [--snacks ...]
    fitsync weight-goal <kg>
    fitsync chat <message>
    fitsync events
    fitsync attend <event_id>
    fitsync workout <name>
"""

from __future__ import annotations

import argparse
import getpass
import logging
import sys
import time
from typing import Callable

import httpx

from fitsync.config import ConfigError, load_config
from fitsync.errors import ApiError, AuthExpiredError, ValidationError
from fitsync.formatting import (
    calories_progress,
    first_name,
    format_elapsed,
    format_event_date,
    format_event_time,
    sleep_progress,
    steps_progress,
)
from fitsync.services import ApiClient, CredentialStore, FitnessService
from fitsync.state import AppState
from fitsync.sync import ChatConversation, EventBoard, ThreadScheduler, WorkoutSession

logger = logging.getLogger(__name__)


def cmd_login(service: FitnessService, args: argparse.Namespace) -> int:
    password = args.password if args.password is not None else getpass.getpass("Mot de passe : ")
    profile = service.login(args.email, password)
    print(f"Bon retour, {first_name(profile.name)} !")
    return 0


def cmd_logout(service: FitnessService, args: argparse.Namespace) -> int:
    service.logout()
    print("Déconnecté.")
    return 0


def cmd_whoami(service: FitnessService, args: argparse.Namespace) -> int:
    profile = service.get_profile()
    print(f"{profile.name} <{profile.email}>")
    if profile.current_weight_kg is not None:
        print(f"Poids actuel : {profile.current_weight_kg:g} kg")
    if profile.target_weight_kg is not None:
        print(f"Poids cible  : {profile.target_weight_kg:g} kg")
    if profile.health_goal:
        print(f"Objectif     : {profile.health_goal}")
    return 0


def cmd_stats(service: FitnessService, args: argparse.Namespace) -> int:
    stats = service.daily_stats()
    print(f"Pas        : {stats.steps} ({steps_progress(stats.steps):.0f}%)")
    print(f"Sommeil    : {stats.sleep_hours:g} h ({sleep_progress(stats.sleep_hours):.0f}%)")
    print(f"Calories   : {stats.active_calories:g} ({calories_progress(stats.active_calories):.0f}%)")
    print(f"Activités  : {stats.activities_count} / {round(stats.total_activity_duration)} min")
    if stats.bmi:
        print(f"IMC        : {stats.bmi:.1f} ({stats.bmi_category})")
    return 0


def cmd_activities(service: FitnessService, args: argparse.Namespace) -> int:
    activities = service.activities()
    if not activities:
        print("Aucune activité enregistrée.")
    for activity in activities:
        print(f"- {activity.activity_name}: {activity.duration} min, {activity.calories_burnt:g} kcal")
    return 0


def cmd_meals(service: FitnessService, args: argparse.Namespace) -> int:
    plans = [service.meal_for_date(args.date)] if args.date else service.meal_plans()
    plans = [plan for plan in plans if plan is not None]
    if not plans:
        print("Aucun plan de repas.")
    for plan in plans:
        print(f"{plan.day} - {plan.total_calories:g} kcal")
        for label, meal in (
            ("Petit-déjeuner", plan.breakfast),
            ("Déjeuner", plan.lunch),
            ("Dîner", plan.dinner),
            ("Collations", plan.snacks),
        ):
            if meal:
                print(f"  {label} : {meal}")
    return 0


def cmd_log_meal(service: FitnessService, args: argparse.Namespace) -> int:
    result = service.log_meal(args.breakfast, args.lunch, args.dinner, args.snacks)
    if result.meal_plan is not None:
        print(f"Repas enregistrés : {result.meal_plan.total_calories:g} kcal")
    if result.suggestions:
        print(result.suggestions)
    if result.next_meal_recommendation:
        print(f"Prochain repas : {result.next_meal_recommendation}")
    return 0


def cmd_weight_goal(service: FitnessService, args: argparse.Namespace) -> int:
    suggestions = service.set_weight_goal(args.target)
    for key, value in suggestions.items():
        print(f"{key}: {value}")
    return 0


def cmd_chat(service: FitnessService, args: argparse.Namespace) -> int:
    conversation = ChatConversation(service)
    reply = conversation.send(" ".join(args.message))
    if reply is None:
        raise ValidationError("Le message est vide.")
    print(reply.text)
    return 0


def cmd_events(service: FitnessService, args: argparse.Namespace) -> int:
    board = EventBoard(service)
    board.refresh()
    if not board.events:
        print("Aucun événement à venir.")
    for event in board.events:
        when = ""
        if event.event_date:
            when = f"{format_event_date(event.event_date)} {format_event_time(event.event_date)}"
        print(
            f"[{event.id}] {event.name} - {when} @ {event.location} "
            f"({event.participant_count} inscrits) [{board.button_label(event)}]"
        )
    return 0


def cmd_attend(service: FitnessService, args: argparse.Namespace) -> int:
    board = EventBoard(service)
    board.refresh()
    try:
        event = board.toggle_attendance(args.event_id)
    except KeyError:
        raise ValidationError(f"Événement introuvable : {args.event_id}") from None
    status = "Inscrit à" if event.is_attending else "Désinscrit de"
    print(f"{status} {event.name} ({event.participant_count} inscrits).")
    return 0


def cmd_workout(service: FitnessService, args: argparse.Namespace) -> int:
    scheduler = ThreadScheduler()
    session = WorkoutSession(
        service,
        scheduler,
        on_tick=lambda seconds: print(f"\r{format_elapsed(seconds)}", end="", flush=True),
    )
    session.start(args.name)
    print(f"Séance « {session.name} » démarrée. Ctrl-C pour terminer.")
    try:
        while session.is_running:
            time.sleep(0.2)
    except KeyboardInterrupt:
        print()

    while True:
        try:
            result = session.stop()
            break
        except AuthExpiredError:
            raise
        except ApiError as exc:
            print(exc.user_message)
            if input("Réessayer ? [o/N] ").strip().lower() != "o":
                session.dispose()
                scheduler.cancel_all()
                return 1
    scheduler.cancel_all()

    print(f"{result.activity_name} : {result.minutes} min, {result.calories_burnt:g} kcal brûlées")
    if result.suggestions:
        print(result.suggestions)
    return 0


COMMANDS: dict[str, Callable[[FitnessService, argparse.Namespace], int]] = {
    "login": cmd_login,
    "logout": cmd_logout,
    "whoami": cmd_whoami,
    "stats": cmd_stats,
    "activities": cmd_activities,
    "meals": cmd_meals,
    "log-meal": cmd_log_meal,
    "weight-goal": cmd_weight_goal,
    "chat": cmd_chat,
    "events": cmd_events,
    "attend": cmd_attend,
    "workout": cmd_workout,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fitsync", description="Client FitSync")
    subparsers = parser.add_subparsers(dest="command", help="Commandes disponibles")

    login_parser = subparsers.add_parser("login", help="Se connecter")
    login_parser.add_argument("email")
    login_parser.add_argument("--password", help="Mot de passe (demandé si absent)")

    subparsers.add_parser("logout", help="Se déconnecter")
    subparsers.add_parser("whoami", help="Afficher le profil")
    subparsers.add_parser("stats", help="Statistiques du jour")
    subparsers.add_parser("activities", help="Activités enregistrées")

    meals_parser = subparsers.add_parser("meals", help="Plans de repas")
    meals_parser.add_argument("--date", help="Jour précis (AAAA-MM-JJ)")

    log_meal_parser = subparsers.add_parser("log-meal", help="Enregistrer les repas du jour")
    for meal in ("breakfast", "lunch", "dinner", "snacks"):
        log_meal_parser.add_argument(f"--{meal}", default="")

    weight_parser = subparsers.add_parser("weight-goal", help="Définir un poids cible")
    weight_parser.add_argument("target")

    chat_parser = subparsers.add_parser("chat", help="Poser une question à l'assistant")
    chat_parser.add_argument("message", nargs="+")

    subparsers.add_parser("events", help="Lister les événements")

    attend_parser = subparsers.add_parser("attend", help="S'inscrire ou se désinscrire")
    attend_parser.add_argument("event_id")

    workout_parser = subparsers.add_parser("workout", help="Chronométrer une séance")
    workout_parser.add_argument("name")

    return parser


def main(argv: list[str] | None = None, *, transport: httpx.BaseTransport | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = load_config()
    except ConfigError as exc:
        print(f"Erreur de configuration : {exc}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    store = CredentialStore(config.credentials_path)
    with ApiClient(config, store, transport=transport) as client:
        service = FitnessService(client, store, AppState())
        service.restore_session()
        try:
            return COMMANDS[args.command](service, args)
        except ValidationError as exc:
            print(exc.user_message, file=sys.stderr)
        except AuthExpiredError as exc:
            print(f"{exc.user_message} (fitsync login <email>)", file=sys.stderr)
        except ApiError as exc:
            logger.debug("Commande %s en échec : %r", args.command, exc)
            print(exc.user_message, file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())
