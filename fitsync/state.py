"""Structures de données partagées entre les vues et les services."""

from __future__ import annotations

from dataclasses import dataclass

from fitsync.models import UserProfile


@dataclass(slots=True)
class AppState:
    """État interne de l'application.

    ``generation`` est incrémenté à chaque fin de session : une réponse
    obtenue sous une génération antérieure ne doit plus modifier l'état.
    """

    user: UserProfile | None = None
    generation: int = 0

    @property
    def is_authenticated(self) -> bool:
        """Retourne True si un utilisateur est connecté."""
        return self.user is not None

    @property
    def user_id(self) -> str | None:
        return self.user.id if self.user else None

    def sign_in(self, user: UserProfile) -> None:
        self.user = user

    def snapshot(self) -> int:
        """Capture la génération courante avant un appel réseau."""
        return self.generation

    def is_current(self, generation: int) -> bool:
        """Indique si une réponse capturée à ``generation`` est encore pertinente."""
        return generation == self.generation

    def reset(self) -> None:
        """Réinitialise l'état de l'application."""
        self.user = None
        self.generation += 1
