"""Services d'accès au backend."""

from fitsync.services.api_client import ApiClient, unwrap
from fitsync.services.credential_store import CredentialStore
from fitsync.services.fitness import FitnessService

__all__ = ["ApiClient", "CredentialStore", "FitnessService", "unwrap"]
