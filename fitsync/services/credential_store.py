"""Persistance locale du jeton d'authentification et du profil en cache."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from typing import Any

from pydantic import ValidationError

from fitsync.models import UserProfile

logger = logging.getLogger(__name__)

TOKEN_KEY = "authToken"
PROFILE_KEY = "userData"


class CredentialStore:
    """Stocke au plus un jeton bearer et une copie du profil utilisateur.

    Les deux entrées sont écrites dans un seul fichier JSON remplacé
    atomiquement : un arrêt brutal ne peut laisser un profil sans jeton.
    Le jeton fait seul autorité, le profil n'est qu'un cache indicatif.

    Toute erreur de stockage est journalisée puis traitée comme une absence
    de session, ce qui force une nouvelle connexion.
    """

    def __init__(self, path: str) -> None:
        self._path = path

    @property
    def path(self) -> str:
        return self._path

    def save(self, token: str, profile: UserProfile | dict[str, Any] | None = None) -> None:
        """Enregistre le jeton (et le profil) en remplaçant toute session précédente."""
        if not token:
            raise ValueError("Le jeton ne peut pas être vide.")
        if isinstance(profile, UserProfile):
            profile = profile.to_payload()
        self._write({TOKEN_KEY: token, PROFILE_KEY: profile})

    def load(self) -> str | None:
        """Retourne le jeton persistant, ou None si aucune session valide."""
        token = self._read().get(TOKEN_KEY)
        if isinstance(token, str) and token:
            return token
        return None

    def load_profile(self) -> UserProfile | None:
        """Retourne le profil en cache, uniquement si un jeton l'accompagne."""
        entries = self._read()
        profile = entries.get(PROFILE_KEY)
        if not entries.get(TOKEN_KEY) or not isinstance(profile, dict):
            return None
        try:
            return UserProfile.model_validate(profile)
        except ValidationError:
            logger.warning("Profil en cache illisible (%s), ignoré.", self._path)
            return None

    def update_profile(self, profile: UserProfile) -> None:
        """Rafraîchit le profil en cache sans toucher au jeton."""
        token = self.load()
        if token is None:
            return
        self.save(token, profile)

    def clear(self) -> None:
        """Supprime le jeton et le profil. Idempotent."""
        try:
            os.remove(self._path)
        except FileNotFoundError:
            pass
        except OSError:
            logger.exception("Impossible de supprimer %s", self._path)

    # ----------------------------------------------------------------- I/O -
    def _read(self) -> dict[str, Any]:
        try:
            with open(self._path, encoding="utf-8") as handle:
                entries = json.load(handle)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError):
            logger.warning("Stockage des identifiants illisible (%s), session ignorée.", self._path)
            return {}

        if not isinstance(entries, dict):
            logger.warning("Stockage des identifiants corrompu (%s), session ignorée.", self._path)
            return {}
        return entries

    def _write(self, entries: dict[str, Any]) -> None:
        directory = os.path.dirname(os.path.abspath(self._path))
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".fitsync-", dir=directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(entries, handle)
                os.replace(tmp_path, self._path)
            except BaseException:
                try:
                    os.remove(tmp_path)
                except FileNotFoundError:
                    pass
                raise
        except OSError:
            logger.exception("Échec de l'écriture des identifiants dans %s", self._path)
            # Un état partiellement écrit ne doit pas survivre : on ferme la session.
            self.clear()
