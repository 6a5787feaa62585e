"""Gestion centralisée de la configuration de l'API FitSync."""

from __future__ import annotations

import os
from dataclasses import dataclass
from urllib.parse import urlparse

from dotenv import load_dotenv

DEFAULT_BASE_URL = "https://bitnbuild-brown.vercel.app/api"
DEFAULT_TIMEOUT = 15.0
DEFAULT_CREDENTIALS_PATH = ".fitsync_credentials.json"
DEFAULT_LOG_LEVEL = "WARNING"


class ConfigError(RuntimeError):
    """Erreur levée lorsque la configuration est invalide."""


@dataclass(frozen=True, slots=True)
class ApiConfig:
    """Paramètres nécessaires pour dialoguer avec le backend."""

    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    credentials_path: str = DEFAULT_CREDENTIALS_PATH
    log_level: str = DEFAULT_LOG_LEVEL


def _parse_timeout(raw: str) -> float:
    try:
        timeout = float(raw)
    except ValueError as exc:
        raise ConfigError(f"FITSYNC_TIMEOUT invalide : {raw!r}") from exc
    if timeout <= 0:
        raise ConfigError("FITSYNC_TIMEOUT doit être strictement positif.")
    return timeout


def _check_base_url(url: str) -> str:
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigError(f"FITSYNC_API_URL invalide : {url!r}")
    return url.rstrip("/")


def load_config() -> ApiConfig:
    """Charge la configuration depuis le fichier .env et l'environnement."""
    load_dotenv()

    base_url = os.getenv("FITSYNC_API_URL", DEFAULT_BASE_URL)
    timeout = os.getenv("FITSYNC_TIMEOUT", str(DEFAULT_TIMEOUT))
    credentials_path = os.getenv("FITSYNC_CREDENTIALS_PATH", DEFAULT_CREDENTIALS_PATH)
    log_level = os.getenv("FITSYNC_LOG_LEVEL", DEFAULT_LOG_LEVEL)

    return ApiConfig(
        base_url=_check_base_url(base_url),
        timeout=_parse_timeout(timeout),
        credentials_path=credentials_path,
        log_level=log_level.upper(),
    )
