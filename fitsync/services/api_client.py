"""Client HTTP authentifié vers le backend FitSync."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

import httpx

from fitsync.config import ApiConfig
from fitsync.errors import (
    ApiRejectedError,
    AuthExpiredError,
    ConnectivityError,
    UnexpectedResponseError,
)
from fitsync.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)

JSON_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


def unwrap(payload: Any, field: str | None = None) -> Any:
    """Extrait ``field`` d'une enveloppe ``{success, message, data}``.

    Le backend n'est pas constant sur l'emplacement des données ; on essaie,
    dans l'ordre : ``data.<field>``, ``<field>`` au premier niveau, ``data``
    lui-même, puis la réponse complète. Sans ``field``, seuls les deux
    derniers niveaux sont essayés.
    """
    candidates: list[Callable[[Any], Any]] = []
    if field is not None:
        candidates.append(lambda body: body["data"][field])
        candidates.append(lambda body: body[field])
    candidates.append(lambda body: body["data"])
    for candidate in candidates:
        try:
            value = candidate(payload)
        except (KeyError, TypeError, IndexError):
            continue
        if value is not None:
            return value
    return payload


def _error_message(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, Mapping):
        message = body.get("message") or body.get("error")
        if isinstance(message, str) and message.strip():
            return message.strip()
    return None


class ApiClient:
    """Enveloppe chaque requête avec le jeton bearer et normalise les erreurs.

    Sur un 401, le stockage des identifiants est vidé et ``on_session_expired``
    est appelé avant de lever :class:`AuthExpiredError`. Aucune requête n'est
    rejouée automatiquement.
    """

    def __init__(
        self,
        config: ApiConfig,
        store: CredentialStore,
        *,
        on_session_expired: Callable[[], None] | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._config = config
        self._store = store
        self._on_session_expired = on_session_expired
        self._http = httpx.Client(
            base_url=config.base_url,
            timeout=config.timeout,
            headers=JSON_HEADERS,
            transport=transport,
        )

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    def set_session_expired_handler(self, handler: Callable[[], None] | None) -> None:
        self._on_session_expired = handler

    def request(
        self,
        method: str,
        path: str,
        body: Mapping[str, Any] | None = None,
        *,
        authenticated: bool = True,
    ) -> Any:
        """Exécute une requête et retourne le corps JSON décodé, en général l'enveloppe."""
        headers: dict[str, str] = {}
        if authenticated:
            token = self._store.load()
            if token is None:
                logger.info("Aucun jeton pour %s %s, session requise.", method, path)
                self._expire_session()
                raise AuthExpiredError()
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = self._http.request(
                method,
                path,
                json=dict(body) if body is not None else None,
                headers=headers,
            )
        except httpx.TransportError as exc:
            logger.warning("Échec réseau sur %s %s : %s", method, path, exc)
            raise ConnectivityError(str(exc) or None) from exc

        logger.debug("%s %s -> %s", method, path, response.status_code)

        # Sans jeton (connexion, inscription), un 401 est un simple refus.
        if response.status_code == 401 and authenticated:
            logger.info("Session expirée (401) sur %s %s.", method, path)
            self._expire_session()
            raise AuthExpiredError(_error_message(response))

        if not response.is_success:
            message = _error_message(response)
            if message is None:
                raise UnexpectedResponseError(
                    f"Erreur serveur inattendue (HTTP {response.status_code})."
                )
            raise ApiRejectedError(message, status_code=response.status_code)

        try:
            payload = response.json()
        except ValueError as exc:
            raise UnexpectedResponseError("Réponse JSON invalide.") from exc

        if isinstance(payload, Mapping) and payload.get("success") is False:
            raise ApiRejectedError(
                _error_message(response) or ApiRejectedError.default_message,
                status_code=response.status_code,
            )
        return payload

    def get(self, path: str) -> Any:
        return self.request("GET", path)

    def post(self, path: str, body: Mapping[str, Any] | None = None, *, authenticated: bool = True) -> Any:
        return self.request("POST", path, body, authenticated=authenticated)

    def put(self, path: str, body: Mapping[str, Any] | None = None) -> Any:
        return self.request("PUT", path, body)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def _expire_session(self) -> None:
        self._store.clear()
        if self._on_session_expired is not None:
            self._on_session_expired()
