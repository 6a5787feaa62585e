"""Tableau des événements avec inscription optimiste."""

from __future__ import annotations

import logging

from fitsync.models import Event
from fitsync.services.fitness import FitnessService
from fitsync.sync.optimistic import OptimisticUpdate

logger = logging.getLogger(__name__)

LABEL_REGISTERED = "Registered"
LABEL_REGISTER = "Register"


class EventBoard:
    """Copie locale, non autoritative, de la liste des événements."""

    def __init__(self, service: FitnessService) -> None:
        self._service = service
        self._events: list[Event] = []

    @property
    def events(self) -> list[Event]:
        return list(self._events)

    def get(self, event_id: str) -> Event:
        for event in self._events:
            if event.id == event_id:
                return event
        raise KeyError(f"Événement inconnu : {event_id}")

    def refresh(self) -> bool:
        """Remplace toute la collection par la version du serveur.

        Retourne False si la session a changé pendant l'appel : la réponse
        tardive est alors ignorée.
        """
        state = self._service.state
        generation = state.snapshot()
        events = self._service.events()
        if not state.is_current(generation):
            logger.debug("Liste d'événements obsolète ignorée.")
            return False
        self._events = events
        return True

    def clear(self) -> None:
        self._events = []

    def toggle_attendance(self, event_id: str) -> Event:
        """Inverse l'inscription localement puis la confirme auprès du serveur.

        En cas d'échec, l'inscription et le compteur sont restaurés et
        l'erreur est propagée.
        """
        event = self.get(event_id)
        was_attending = event.is_attending

        def apply() -> None:
            event.is_attending = not was_attending
            event.participant_count += -1 if was_attending else 1

        def rollback() -> None:
            event.is_attending = was_attending
            event.participant_count += 1 if was_attending else -1

        def remote() -> object:
            if was_attending:
                return self._service.unregister_event(event_id)
            return self._service.register_event(event_id)

        OptimisticUpdate(apply, rollback, remote).run()
        return event

    @staticmethod
    def button_label(event: Event) -> str:
        return LABEL_REGISTERED if event.is_attending else LABEL_REGISTER
