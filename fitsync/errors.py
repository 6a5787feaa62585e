"""Hiérarchie des erreurs remontées par la passerelle."""

from __future__ import annotations


class GatewayError(RuntimeError):
    """Erreur de base de la passerelle FitSync."""

    default_message = "Une erreur est survenue. Réessayez."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def user_message(self) -> str:
        """Message à afficher tel quel à l'utilisateur."""
        return self.message


class ValidationError(GatewayError):
    """Saisie incomplète ou invalide, détectée avant tout appel réseau."""

    default_message = "Saisie invalide."


class ApiError(GatewayError):
    """Erreur survenue pendant un échange avec l'API distante."""

    kind = "unexpected"

    @property
    def user_message(self) -> str:
        return self.default_message


class AuthExpiredError(ApiError):
    """La session a expiré (401) : l'utilisateur doit se reconnecter."""

    kind = "auth_expired"
    default_message = "Votre session a expiré. Reconnectez-vous."


class ApiRejectedError(ApiError):
    """Le serveur a refusé la requête avec un message exploitable."""

    kind = "api_rejected"
    default_message = "La requête a été refusée. Réessayez."

    def __init__(self, message: str | None = None, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def user_message(self) -> str:
        return self.message


class ConnectivityError(ApiError):
    """La requête n'a jamais abouti (réseau indisponible, délai dépassé)."""

    kind = "connectivity"
    default_message = "Connexion impossible. Vérifiez votre connexion internet et réessayez."


class UnexpectedResponseError(ApiError):
    """Réponse inexploitable (JSON invalide, structure inattendue)."""

    kind = "unexpected"
    default_message = "Réponse inattendue du serveur. Réessayez plus tard."
